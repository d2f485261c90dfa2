"""API package - HTTP and WebSocket surface."""
