"""
Admin API endpoints for election administration.
All endpoints require an admin account.
"""
from fastapi import APIRouter

from app.api.v1.endpoints.admin import positions, candidates, voting_sessions, results, users

admin_router = APIRouter(prefix="/admin", tags=["Admin"])

admin_router.include_router(positions.router, prefix="/positions", tags=["Admin Positions"])
admin_router.include_router(candidates.router, prefix="/candidates", tags=["Admin Candidates"])
admin_router.include_router(voting_sessions.router, prefix="/voting-sessions", tags=["Admin Voting Sessions"])
admin_router.include_router(results.router, prefix="/results", tags=["Admin Results"])
admin_router.include_router(users.router, prefix="/users", tags=["Admin Users"])
