"""
Admission Applications Module

Handles the admission application workflow:
1. Public submission with rate limiting and duplicate detection
2. Staff review through a guarded status state machine

API Endpoints:
- POST /applications - Submit new application
- GET /admin/applications - List applications
- GET /admin/applications/{id} - Application details
- PATCH /admin/applications/{id}/status - Change status
"""

from .router import router

__all__ = ["router"]
