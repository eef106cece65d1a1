"""Business logic layer for file manager app.

This package holds the move, rename and merge rules:
- Folder, File and Path values handled by the rules
- Ports the rules talk to (storage, identifiers, job)
- Overwrite decisions and job progress

Nothing here imports Django models; infrastructure implements the ports.
"""
