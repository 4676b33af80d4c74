"""Request IDs bound into structlog contextvars, JSON logs, and an in-memory
metrics snapshot served at /metrics.
"""
