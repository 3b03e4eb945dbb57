"""
Job list filtering.

Filtering happens after the fetch, in Python: the combinations of
multi-select filters, free-text salaries and keyword search are not
expressible as a single indexed MongoDB query.
"""

import re
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from jobboard.schemas.schemas import JobFilters

_NON_NUMERIC = re.compile(r"[^0-9.]")


def parse_salary(salary) -> float:
    """
    "$80,000" -> 80000.0. Everything but digits and dots is dropped;
    anything unparseable counts as 0.
    """
    if salary is None:
        return 0.0
    if isinstance(salary, (int, float)):
        return float(salary)
    cleaned = _NON_NUMERIC.sub("", str(salary))
    match = re.match(r"\d*\.?\d+|\d+", cleaned)
    if not match:
        return 0.0
    return float(match.group(0))


def matches_filters(job: dict, filters: JobFilters, now: Optional[datetime] = None) -> bool:
    """True when `job` passes every filter that is set."""
    if filters.location:
        location = (job.get("location") or "").lower()
        if not location or not any(loc.lower() in location for loc in filters.location):
            return False

    if filters.job_type and job.get("job_type") not in filters.job_type:
        return False

    if filters.experience_level and job.get("experience_level") not in filters.experience_level:
        return False

    if filters.industry and job.get("industry") not in filters.industry:
        return False

    if filters.remote and not job.get("remote"):
        return False
    if filters.hybrid and not job.get("hybrid"):
        return False

    if filters.salary_min or filters.salary_max:
        salary = parse_salary(job.get("salary"))
        if filters.salary_min and salary < filters.salary_min:
            return False
        if filters.salary_max and salary > filters.salary_max:
            return False

    if filters.date_posted:
        now = now or datetime.utcnow()
        # Jobs without a posting date count as just posted
        posted_at = job.get("posted_at") or now
        if now - posted_at > timedelta(days=int(filters.date_posted.value)):
            return False

    return True


def matches_keyword(job: dict, keyword: str) -> bool:
    """Case-insensitive substring match on title, company, description and requirements."""
    needle = (keyword or "").strip().lower()
    if not needle:
        return True
    for field in ("title", "company", "description"):
        if needle in (job.get(field) or "").lower():
            return True
    return any(needle in (req or "").lower() for req in job.get("requirements") or [])


def filter_jobs(jobs: Iterable[dict], filters: Optional[JobFilters] = None,
                keyword: str = "", now: Optional[datetime] = None) -> List[dict]:
    """Apply filters and keyword, then order newest first."""
    filters = filters or JobFilters()
    now = now or datetime.utcnow()
    selected = [
        job for job in jobs
        if matches_filters(job, filters, now) and matches_keyword(job, keyword)
    ]
    selected.sort(key=lambda job: (job.get("posted_at") or datetime.min, job.get("id") or ""), reverse=True)
    return selected
