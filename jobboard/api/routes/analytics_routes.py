"""
Analytics Routes

GET /analytics/employer             - Hiring analytics for the current employer
GET /analytics/dashboard/employer   - Employer dashboard counters
GET /analytics/dashboard/jobseeker  - Job seeker dashboard counters
"""

from fastapi import APIRouter, Depends, Query

from jobboard.core.auth import get_current_employer, get_current_job_seeker
from jobboard.services.analytics_service import get_analytics_service
from jobboard.schemas.schemas import (
    AnalyticsResponse, EmployerDashboardResponse, JobSeekerDashboardResponse, TimeRange
)

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/employer", response_model=AnalyticsResponse)
async def employer_analytics(
    time_range: TimeRange = Query(TimeRange.month, description="7d, 30d, 90d or 1y"),
    employer: dict = Depends(get_current_employer)
):
    """
    Overview, per-job performance, daily application trends, top applicant
    skills and applicant demographics, computed from stored data.
    """
    return get_analytics_service().employer_analytics(employer["user_id"], time_range)


@router.get("/dashboard/employer", response_model=EmployerDashboardResponse)
async def employer_dashboard(employer: dict = Depends(get_current_employer)):
    return get_analytics_service().employer_dashboard(employer["user_id"])


@router.get("/dashboard/jobseeker", response_model=JobSeekerDashboardResponse)
async def job_seeker_dashboard(job_seeker: dict = Depends(get_current_job_seeker)):
    return get_analytics_service().job_seeker_dashboard(job_seeker["user_id"])
