"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from jobboard.api.routes.auth_routes import router as auth_router
from jobboard.api.routes.profile_routes import router as profile_router
from jobboard.api.routes.job_routes import router as job_router
from jobboard.api.routes.application_routes import router as application_router
from jobboard.api.routes.message_routes import router as message_router
from jobboard.api.routes.post_routes import router as post_router
from jobboard.api.routes.analytics_routes import router as analytics_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(profile_router)
api_router.include_router(job_router)
api_router.include_router(application_router)
api_router.include_router(message_router)
api_router.include_router(post_router)
api_router.include_router(analytics_router)
