"""
Core upload logic.

This module is framework-agnostic - it doesn't import FastAPI or the
Google Cloud SDK. The storage backend is reached through a Protocol,
so the upload flow can be tested with an in-memory store.
"""
