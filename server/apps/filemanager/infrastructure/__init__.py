"""Infrastructure layer for file manager app.

This package contains the concrete collaborators of the move logic:
- Document store backed by Django models
- Unique identifier generation
- S3 storage backend for attachments

Keep infrastructure concerns separate from business logic.
"""
