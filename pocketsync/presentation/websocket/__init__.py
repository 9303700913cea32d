"""WebSocket broadcast."""
