"""
Application Routes

GET    /applications/mine                      - Current job seeker's applications
GET    /applications/{application_id}          - Application details (applicant or job owner)
DELETE /applications/{application_id}          - Withdraw (applicant only)
PUT    /applications/{application_id}/status   - Set status (job owner only)
"""

from fastapi import APIRouter, HTTPException, Depends
from typing import List

from jobboard.core.auth import get_current_user, get_current_job_seeker, get_current_employer
from jobboard.services.job_service import get_job_service
from jobboard.schemas.schemas import ApplicationResponse, ApplicationStatusUpdate, MessageResponse

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.get("/mine", response_model=List[ApplicationResponse])
async def my_applications(job_seeker: dict = Depends(get_current_job_seeker)):
    applications = get_job_service().get_user_applications(job_seeker["user_id"])
    return [ApplicationResponse(**app) for app in applications]


@router.get("/{application_id}", response_model=ApplicationResponse)
async def get_application(application_id: str, user: dict = Depends(get_current_user)):
    service = get_job_service()
    application = service.get_application_by_id(application_id, viewer=user)
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")
    return ApplicationResponse(**application)


@router.delete("/{application_id}", response_model=MessageResponse)
async def withdraw_application(application_id: str, job_seeker: dict = Depends(get_current_job_seeker)):
    get_job_service().withdraw_application(application_id, job_seeker["user_id"])
    return MessageResponse(message="Application withdrawn successfully")


@router.put("/{application_id}/status", response_model=MessageResponse)
async def update_status(application_id: str, update: ApplicationStatusUpdate,
                        employer: dict = Depends(get_current_employer)):
    get_job_service().update_application_status(application_id, employer["user_id"], update.status)
    return MessageResponse(message=f"Application marked as {update.status.value}")
