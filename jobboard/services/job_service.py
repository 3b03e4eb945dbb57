"""
Job Service - job postings and applications.

Collections in this database:
1. jobs         - postings created by employers
2. applications - a job seeker's submission to a job, carrying a
                  snapshot of the applicant profile at apply time

Applications keep job title/company and applicant details denormalized so
employer screens never need to join back to profiles.
"""

import logging
from typing import List, Optional

from pymongo import DESCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from jobboard.core.exceptions import (
    ConflictError, InvalidRequestError, NotFoundError, PermissionDeniedError
)
from jobboard.db.mongodb import get_collection, COLLECTIONS
from jobboard.schemas.schemas import ApplicationStatus, JobFilters
from jobboard.services.documents import serialize_doc, serialize_docs, to_object_id, now
from jobboard.services.job_filters import filter_jobs
from jobboard.services.profile_service import ProfileService

logger = logging.getLogger(__name__)


def applicant_display_name(profile: dict) -> str:
    """Most complete name available on a profile, else "N/A"."""
    for field in ("full_name", "name", "display_name", "first_name"):
        if profile.get(field):
            return profile[field]
    joined = f"{profile.get('first_name') or ''} {profile.get('last_name') or ''}".strip()
    return joined or "N/A"


class JobService:

    def __init__(self):
        self.jobs: Collection = get_collection(COLLECTIONS["jobs"])
        self.applications: Collection = get_collection(COLLECTIONS["applications"])
        self.profiles = ProfileService()

    # ============================================================
    # JOBS
    # ============================================================

    def get_jobs(self, filters: Optional[JobFilters] = None, keyword: str = "") -> List[dict]:
        """All jobs passing `filters` and `keyword`, newest first."""
        jobs = serialize_docs(self.jobs.find({}))
        return filter_jobs(jobs, filters, keyword)

    def search_jobs(self, keyword: str, filters: Optional[JobFilters] = None) -> List[dict]:
        return self.get_jobs(filters, keyword)

    def get_job_by_id(self, job_id: str) -> Optional[dict]:
        oid = to_object_id(job_id)
        if oid is None:
            return None
        return serialize_doc(self.jobs.find_one({"_id": oid}))

    def get_job_or_404(self, job_id: str) -> dict:
        job = self.get_job_by_id(job_id)
        if not job:
            raise NotFoundError("Job not found")
        return job

    def record_view(self, job_id: str) -> Optional[dict]:
        """Count a job seeker's view and return the updated job."""
        oid = to_object_id(job_id)
        if oid is None:
            return None
        doc = self.jobs.find_one_and_update(
            {"_id": oid}, {"$inc": {"views": 1}}, return_document=ReturnDocument.AFTER
        )
        return serialize_doc(doc)

    def post_job(self, employer_id: str, job_data: dict) -> str:
        """Create a job posting; returns its id."""
        doc = {
            **job_data,
            "employer_id": employer_id,
            "posted_at": now(),
            "status": "active",
            "applications_count": 0,
            "views": 0,
        }
        result = self.jobs.insert_one(doc)
        logger.info("Employer %s posted job %s", employer_id, result.inserted_id)
        return str(result.inserted_id)

    def _owned_job(self, job_id: str, employer_id: str) -> dict:
        job = self.get_job_or_404(job_id)
        if job["employer_id"] != employer_id:
            raise PermissionDeniedError("Only the employer who posted this job can change it")
        return job

    def update_job(self, job_id: str, employer_id: str, job_data: dict) -> None:
        self._owned_job(job_id, employer_id)
        update = {k: v for k, v in job_data.items() if v is not None}
        update["updated_at"] = now()
        self.jobs.update_one({"_id": to_object_id(job_id)}, {"$set": update})

    def delete_job(self, job_id: str, employer_id: str) -> None:
        """Remove the posting. Existing applications stay for both sides' records."""
        self._owned_job(job_id, employer_id)
        self.jobs.delete_one({"_id": to_object_id(job_id)})
        logger.info("Employer %s deleted job %s", employer_id, job_id)

    def get_employer_jobs(self, employer_id: str) -> List[dict]:
        cursor = self.jobs.find({"employer_id": employer_id}, sort=[("posted_at", DESCENDING), ("_id", DESCENDING)])
        return serialize_docs(cursor)

    # ============================================================
    # APPLICATIONS
    # ============================================================

    def apply_for_job(self, user_id: str, job_id: str, application_data: dict = None) -> str:
        """
        Submit an application with a snapshot of the applicant's profile.

        The resume comes from the request if given, otherwise from the
        profile. One application per job seeker and job.
        """
        application_data = {k: v for k, v in (application_data or {}).items() if v is not None}
        job = self.get_job_or_404(job_id)
        if job.get("status", "active") != "active":
            raise InvalidRequestError("Job is not accepting applications")

        if self.applications.find_one({"user_id": user_id, "job_id": job_id}):
            raise ConflictError("Already applied to this job")

        profile = self.profiles.get_profile(user_id)
        resume_url = application_data.pop("resume_url", None) or profile.get("resume_url")
        timestamp = now()

        application = {
            "user_id": user_id,
            "job_id": job_id,
            "job_title": job.get("title"),
            "company_name": job.get("company"),
            "applicant_name": applicant_display_name(profile),
            "applicant_email": profile.get("email") or "N/A",
            "applicant_phone": profile.get("phone") or "N/A",
            "applicant_skills": profile.get("skills") or [],
            "applicant_experience": profile.get("experience") or [],
            "applicant_education": profile.get("education") or [],
            "applicant_location": profile.get("location") or "",
            **application_data,
            "resume_url": resume_url or None,
            "resume_file_name": profile.get("resume_file_name"),
            "applied_at": timestamp,
            "updated_at": timestamp,
            "status": ApplicationStatus.pending.value,
        }

        try:
            result = self.applications.insert_one(application)
        except DuplicateKeyError:
            raise ConflictError("Already applied to this job")

        self.jobs.update_one({"_id": to_object_id(job_id)}, {"$inc": {"applications_count": 1}})
        logger.info("User %s applied to job %s", user_id, job_id)
        return str(result.inserted_id)

    def get_job_applications(self, job_id: str, employer_id: str) -> List[dict]:
        """Applications for a job, newest first. Owning employer only."""
        self._owned_job(job_id, employer_id)
        cursor = self.applications.find({"job_id": job_id}, sort=[("applied_at", DESCENDING), ("_id", DESCENDING)])
        return serialize_docs(cursor)

    def get_user_applications(self, user_id: str) -> List[dict]:
        cursor = self.applications.find({"user_id": user_id}, sort=[("applied_at", DESCENDING), ("_id", DESCENDING)])
        return serialize_docs(cursor)

    def get_applications_for_jobs(self, job_ids: List[str]) -> List[dict]:
        cursor = self.applications.find(
            {"job_id": {"$in": job_ids}}, sort=[("applied_at", DESCENDING), ("_id", DESCENDING)]
        )
        return serialize_docs(cursor)

    def withdraw_application(self, application_id: str, user_id: str) -> None:
        """Delete an application and decrement the job's counter (never below zero)."""
        oid = to_object_id(application_id)
        doc = self.applications.find_one({"_id": oid}) if oid else None
        if not doc:
            raise NotFoundError("Application not found")
        if doc["user_id"] != user_id:
            raise PermissionDeniedError("Not your application")

        self.applications.delete_one({"_id": oid})
        self.jobs.update_one(
            {"_id": to_object_id(doc["job_id"]), "applications_count": {"$gt": 0}},
            {"$inc": {"applications_count": -1}}
        )
        logger.info("User %s withdrew application %s", user_id, application_id)

    def _find_application(self, application_id: str) -> Optional[dict]:
        oid = to_object_id(application_id)
        if oid is None:
            return None
        return serialize_doc(self.applications.find_one({"_id": oid}))

    def get_application_by_id(self, application_id: str, viewer: dict = None) -> Optional[dict]:
        """
        Fetch an application. A missing applicant name is refreshed from the
        applicant's current profile and written back.

        With a `viewer`, access is checked before anything is written and
        PermissionDeniedError is raised for outsiders.
        """
        application = self._find_application(application_id)
        if not application:
            return None
        if viewer and not self.can_view_application(application, viewer):
            raise PermissionDeniedError("Access denied")

        if not application.get("applicant_name") or application["applicant_name"] == "N/A":
            try:
                current = applicant_display_name(self.profiles.get_profile(application["user_id"]))
            except Exception as e:
                logger.warning("Could not fetch current profile name: %s", e)
                current = "N/A"
            if current != "N/A":
                self.applications.update_one(
                    {"_id": to_object_id(application_id)},
                    {"$set": {"applicant_name": current, "updated_at": now()}}
                )
                application["applicant_name"] = current

        return application

    def can_view_application(self, application: dict, user: dict) -> bool:
        """Applicant or the employer who owns the job."""
        if application["user_id"] == user["user_id"]:
            return True
        job = self.get_job_by_id(application["job_id"])
        return bool(job and job["employer_id"] == user["user_id"])

    def update_application_status(self, application_id: str, employer_id: str,
                                  status: ApplicationStatus) -> None:
        application = self._find_application(application_id)
        if not application:
            raise NotFoundError("Application not found")
        job = self.get_job_by_id(application["job_id"])
        if not job or job["employer_id"] != employer_id:
            raise PermissionDeniedError("Only the employer who posted this job can update it")

        self.applications.update_one(
            {"_id": to_object_id(application_id)},
            {"$set": {"status": status.value, "updated_at": now()}}
        )
        logger.info("Application %s marked %s", application_id, status.value)


def get_job_service() -> JobService:
    return JobService()
