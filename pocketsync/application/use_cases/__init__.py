"""Application use cases - Business logic orchestration."""
