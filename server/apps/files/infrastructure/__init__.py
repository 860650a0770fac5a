"""Infrastructure layer for files app.

This package contains integrations with external systems:
- Blob store on S3-compatible storage
- Content digest calculation
- Local staging of upload streams

Keep infrastructure concerns separate from business logic.
"""
