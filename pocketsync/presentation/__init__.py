"""Presentation layer - API REST y WebSocket."""
