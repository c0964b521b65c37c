"""
Upload Proxy - streams browser file uploads into Google Cloud Storage.

This package contains the complete application:
- core: Framework-agnostic upload logic (policy, naming, copy/commit)
- infrastructure: Object storage integration
- api: FastAPI routes, middleware and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
