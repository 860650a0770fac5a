"""Business logic layer for files app.

This package contains all business logic for file operations:
- Upload, read, list and delete of file content and metadata
- Reconciliation of metadata rows with missing content
- Expiry of old files for the retention cleanup

All business logic should be implemented here, separate from
models (data layer) and infrastructure (external systems).
"""
