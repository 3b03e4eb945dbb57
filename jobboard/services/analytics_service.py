"""
Analytics & Dashboard Service

Employer analytics are aggregated in Python from the employer's jobs and
the applications to them:

- overview: job/application/view totals, response rate
- job performance: applications and views per job
- application trends: applications per day inside the time range
- top skills: most common skills among applicants
- demographics: applications by experience level, applicant locations

Response rate = applications that left "pending" / all applications.
"""

from collections import Counter
from datetime import datetime, timedelta
from typing import List

from jobboard.schemas.schemas import ApplicationStatus, TimeRange
from jobboard.services.job_service import JobService

TIME_RANGE_DAYS = {
    TimeRange.week: 7,
    TimeRange.month: 30,
    TimeRange.quarter: 90,
    TimeRange.year: 365,
}

TOP_SKILLS_LIMIT = 5
TOP_LOCATIONS_LIMIT = 5
RECENT_APPLICATIONS_LIMIT = 3


def _percentage(part: int, whole: int) -> float:
    if not whole:
        return 0.0
    return round(part * 100.0 / whole, 1)


class AnalyticsService:

    def __init__(self):
        self.job_service = JobService()

    def employer_analytics(self, employer_id: str, time_range: TimeRange = TimeRange.month,
                           now: datetime = None) -> dict:
        now = now or datetime.utcnow()
        since = now - timedelta(days=TIME_RANGE_DAYS[time_range])

        jobs = self.job_service.get_employer_jobs(employer_id)
        all_applications = self.job_service.get_applications_for_jobs([job["id"] for job in jobs])
        applications = [
            app for app in all_applications
            if app.get("applied_at") and since <= app["applied_at"] <= now
        ]

        total_applications = len(applications)
        responded = sum(1 for app in applications if app.get("status") != ApplicationStatus.pending.value)
        per_job = Counter(app["job_id"] for app in applications)

        overview = {
            "total_jobs": len(jobs),
            "active_jobs": sum(1 for job in jobs if job.get("status") == "active"),
            "total_applications": total_applications,
            "total_views": sum(job.get("views") or 0 for job in jobs),
            "average_applications_per_job": round(total_applications / len(jobs), 1) if jobs else 0.0,
            "response_rate": _percentage(responded, total_applications),
        }

        job_performance = [
            {
                "job_id": job["id"],
                "title": job.get("title", ""),
                "applications": per_job.get(job["id"], 0),
                "views": job.get("views") or 0,
                "status": job.get("status", "active"),
                "posted_date": job.get("posted_at"),
            }
            for job in jobs
        ]

        return {
            "time_range": time_range.value,
            "overview": overview,
            "job_performance": job_performance,
            "application_trends": self._trends(applications, since, now),
            "top_skills": self._top_skills(applications),
            "demographics": self._demographics(applications, jobs),
        }

    @staticmethod
    def _trends(applications: List[dict], since: datetime, now: datetime) -> List[dict]:
        """One point per day from `since` to `now`, zero-filled."""
        per_day = Counter(app["applied_at"].date() for app in applications)
        points = []
        day = since.date()
        while day <= now.date():
            points.append({"date": day.isoformat(), "applications": per_day.get(day, 0)})
            day += timedelta(days=1)
        return points

    @staticmethod
    def _top_skills(applications: List[dict]) -> List[dict]:
        counts = Counter()
        for app in applications:
            # A skill counts once per applicant
            counts.update({skill.strip() for skill in app.get("applicant_skills") or [] if skill and skill.strip()})
        return [{"skill": skill, "count": count}
                for skill, count in counts.most_common(TOP_SKILLS_LIMIT)]

    @staticmethod
    def _demographics(applications: List[dict], jobs: List[dict]) -> dict:
        level_by_job = {job["id"]: job.get("experience_level") or "Unspecified" for job in jobs}
        levels = Counter(level_by_job.get(app["job_id"], "Unspecified") for app in applications)
        locations = Counter(app.get("applicant_location") or "Unknown" for app in applications)
        total = len(applications)
        return {
            "experience_levels": [
                {"level": level, "count": count, "percentage": _percentage(count, total)}
                for level, count in levels.most_common()
            ],
            "locations": [
                {"location": location, "count": count}
                for location, count in locations.most_common(TOP_LOCATIONS_LIMIT)
            ],
        }

    # ============================================================
    # DASHBOARDS
    # ============================================================

    def employer_dashboard(self, employer_id: str) -> dict:
        jobs = self.job_service.get_employer_jobs(employer_id)
        applications = self.job_service.get_applications_for_jobs([job["id"] for job in jobs])
        active = {ApplicationStatus.pending.value, ApplicationStatus.reviewed.value}
        return {
            "job_postings": len(jobs),
            "applications": len(applications),
            "active_candidates": sum(1 for app in applications if app.get("status") in active),
            "interview_scheduled": sum(
                1 for app in applications if app.get("status") == ApplicationStatus.interview.value
            ),
            "recent_applications": applications[:RECENT_APPLICATIONS_LIMIT],
        }

    def job_seeker_dashboard(self, user_id: str) -> dict:
        applications = self.job_service.get_user_applications(user_id)
        return {
            "applications": len(applications),
            "interviews": sum(
                1 for app in applications if app.get("status") == ApplicationStatus.interview.value
            ),
            "recent_applications": applications[:RECENT_APPLICATIONS_LIMIT],
        }


def get_analytics_service() -> AnalyticsService:
    return AnalyticsService()
