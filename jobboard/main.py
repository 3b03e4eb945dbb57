"""
Job Board - Main Application

FastAPI backend with:
- SQL accounts table (PostgreSQL) for login credentials
- MongoDB for profiles, jobs, applications, chat and posts
- JWT authentication with email verification
- WebSocket streams for live conversations, messages and the feed

Run: uvicorn jobboard.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jobboard import __version__
from jobboard.api.routes import api_router
from jobboard.core.config import get_settings
from jobboard.core.exceptions import AppError
from jobboard.core.logging_config import setup_logging
from jobboard.db.mongodb import init_mongo_indexes, test_mongo_connection
from jobboard.db.postgres import init_postgres_schema, test_postgres_connection

settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Job Board API",
    description="""
    Backend for a mobile job board connecting job seekers and employers.

    ## Features
    - **Authentication**: Email/password accounts with verification and password reset
    - **Profiles**: Job seeker and employer profiles, skills, resume and image upload
    - **Jobs**: Posting, filtering, keyword search and applications
    - **Messaging**: One conversation per employer/job seeker pair, live over WebSockets
    - **Posts**: Community feed with likes, comments and shares
    - **Analytics**: Employer hiring analytics and dashboards
    """,
    version=__version__,
    debug=settings.debug,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


# Include API routes
app.include_router(api_router, prefix="/api")


@app.on_event("startup")
async def startup_event():
    """Create the accounts table and MongoDB indexes."""
    try:
        init_postgres_schema()
        logger.info("Accounts table ready")
    except Exception as e:
        logger.error("Accounts table initialization failed: %s", e)

    try:
        init_mongo_indexes()
        logger.info("MongoDB indexes initialized")
    except Exception as e:
        logger.error("MongoDB index initialization failed: %s", e)


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "Job Board API", "version": __version__}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "postgres": "connected" if test_postgres_connection() else "disconnected",
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }
