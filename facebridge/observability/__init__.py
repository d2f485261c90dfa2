"""Observability module - structured logging."""
