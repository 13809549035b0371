from fastapi import APIRouter
from app.api.v1.endpoints import auth, student, voting, health
from app.api.v1.endpoints.admin import admin_router

api_router = APIRouter()

# Liveness and readiness probes
api_router.include_router(health.router)


@api_router.get("/health", tags=["Health"])
async def health_check():
    """Simple health check endpoint for load balancer"""
    return {"status": "healthy", "service": "evoting-backend"}


api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(student.router, prefix="/student", tags=["Student Verification"])
api_router.include_router(voting.router, prefix="/voting", tags=["Voting"])
api_router.include_router(admin_router)
