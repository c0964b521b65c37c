"""
Infrastructure layer - external service integrations.

- storage: Object storage (Google Cloud Storage, in-memory mock)

These wrappers translate between external client libraries and the
narrow interfaces the core upload logic depends on.
"""
