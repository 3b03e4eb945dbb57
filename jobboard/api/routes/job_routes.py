"""
Job Routes

POST   /jobs                          - Create job posting (employer only)
GET    /jobs                          - List jobs with filters and keyword search
GET    /jobs/mine                     - Jobs posted by the current employer
GET    /jobs/{job_id}                 - Job details (counts a view for job seekers)
PUT    /jobs/{job_id}                 - Update job (owning employer only)
DELETE /jobs/{job_id}                 - Delete job (owning employer only)
POST   /jobs/{job_id}/apply           - Apply to job (job seeker only)
GET    /jobs/{job_id}/applications    - Applications for a job (owning employer only)
"""

from fastapi import APIRouter, HTTPException, Depends, Query
from typing import List, Optional

from jobboard.core.auth import get_current_job_seeker, get_current_employer, get_optional_user
from jobboard.services.job_service import get_job_service
from jobboard.schemas.schemas import (
    JobCreate, JobUpdate, JobFilters, JobResponse, JobListResponse, DatePosted,
    ApplicationCreate, ApplicationResponse, CreatedResponse, MessageResponse
)

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.post("", response_model=CreatedResponse, status_code=201)
async def create_job(job: JobCreate, employer: dict = Depends(get_current_employer)):
    """Create a new job posting. Only employers can create jobs."""
    job_id = get_job_service().post_job(employer["user_id"], job.model_dump(mode="json"))
    return CreatedResponse(id=job_id, message="Job posted successfully")


@router.get("", response_model=JobListResponse)
async def list_jobs(
    keyword: str = Query("", description="Search title, company, description and requirements"),
    location: List[str] = Query([]),
    job_type: List[str] = Query([]),
    experience_level: List[str] = Query([]),
    industry: List[str] = Query([]),
    remote: bool = Query(False),
    hybrid: bool = Query(False),
    salary_min: Optional[float] = Query(None, ge=0),
    salary_max: Optional[float] = Query(None, ge=0),
    date_posted: Optional[DatePosted] = Query(None, description="Posted within the last N days")
):
    """List jobs, newest first. All filters combine with AND."""
    filters = JobFilters(
        location=location, job_type=job_type, experience_level=experience_level,
        industry=industry, remote=remote, hybrid=hybrid,
        salary_min=salary_min, salary_max=salary_max, date_posted=date_posted
    )
    jobs = get_job_service().get_jobs(filters, keyword)
    return JobListResponse(jobs=[JobResponse(**job) for job in jobs], total=len(jobs))


@router.get("/mine", response_model=JobListResponse)
async def my_jobs(employer: dict = Depends(get_current_employer)):
    jobs = get_job_service().get_employer_jobs(employer["user_id"])
    return JobListResponse(jobs=[JobResponse(**job) for job in jobs], total=len(jobs))


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(job_id: str, user: Optional[dict] = Depends(get_optional_user)):
    """Get details of a specific job."""
    service = get_job_service()
    if user and user["role"] == "jobseeker":
        job = service.record_view(job_id)
    else:
        job = service.get_job_by_id(job_id)

    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return JobResponse(**job)


@router.put("/{job_id}", response_model=MessageResponse)
async def update_job(job_id: str, update: JobUpdate, employer: dict = Depends(get_current_employer)):
    """Update a job posting. Only the owning employer can update."""
    get_job_service().update_job(job_id, employer["user_id"], update.model_dump(mode="json", exclude_none=True))
    return MessageResponse(message="Job updated successfully")


@router.delete("/{job_id}", response_model=MessageResponse)
async def delete_job(job_id: str, employer: dict = Depends(get_current_employer)):
    get_job_service().delete_job(job_id, employer["user_id"])
    return MessageResponse(message="Job deleted successfully")


@router.post("/{job_id}/apply", response_model=CreatedResponse, status_code=201)
async def apply_to_job(job_id: str, application: ApplicationCreate,
                       job_seeker: dict = Depends(get_current_job_seeker)):
    """Apply to a job. Job seekers only. Cannot apply twice to same job."""
    application_id = get_job_service().apply_for_job(
        job_seeker["user_id"], job_id, application.model_dump(exclude_none=True)
    )
    return CreatedResponse(id=application_id, message="Application submitted successfully")


@router.get("/{job_id}/applications", response_model=List[ApplicationResponse])
async def job_applications(job_id: str, employer: dict = Depends(get_current_employer)):
    applications = get_job_service().get_job_applications(job_id, employer["user_id"])
    return [ApplicationResponse(**app) for app in applications]
