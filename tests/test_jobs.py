"""
Tests for job postings: create, list/filter/search, view counting,
ownership of update and delete.
"""

from datetime import datetime, timedelta

from jobboard.db.mongodb import get_collection, COLLECTIONS
from jobboard.schemas.schemas import JobFilters
from jobboard.services.documents import to_object_id
from jobboard.services.job_service import JobService


def _post(client, employer, payload, **overrides):
    response = client.post("/api/jobs", json={**payload, **overrides}, headers=employer["headers"])
    assert response.status_code == 201, response.text
    return response.json()["id"]


class TestCreateJob:

    def test_employer_posts_job(self, client, employer, job_payload):
        job_id = _post(client, employer, job_payload)

        job = client.get(f"/api/jobs/{job_id}").json()
        assert job["title"] == "Backend Engineer"
        assert job["employer_id"] == employer["user_id"]
        assert job["status"] == "active"
        assert job["applications_count"] == 0
        assert job["views"] == 0
        assert job["posted_at"] is not None

    def test_job_seeker_cannot_post(self, client, job_seeker, job_payload):
        response = client.post("/api/jobs", json=job_payload, headers=job_seeker["headers"])
        assert response.status_code == 403

    def test_invalid_job_type(self, client, employer, job_payload):
        response = client.post("/api/jobs", json={**job_payload, "job_type": "Sometimes"},
                               headers=employer["headers"])
        assert response.status_code == 422


class TestListJobs:

    def test_newest_first(self, client, employer, job_payload):
        first = _post(client, employer, job_payload, title="First")
        second = _post(client, employer, job_payload, title="Second")
        jobs = get_collection(COLLECTIONS["jobs"])
        jobs.update_one({"_id": to_object_id(first)}, {"$set": {"posted_at": datetime.utcnow() - timedelta(hours=1)}})

        body = client.get("/api/jobs").json()
        assert body["total"] == 2
        assert [job["id"] for job in body["jobs"]] == [second, first]

    def test_filters_combine(self, client, employer, job_payload):
        _post(client, employer, job_payload, title="Remote Berlin")
        _post(client, employer, job_payload, title="Office Paris", location="Paris", remote=False)
        _post(client, employer, job_payload, title="Contract Berlin", job_type="Contract", remote=False)

        body = client.get("/api/jobs", params={"location": "berlin", "remote": "true"}).json()
        assert [job["title"] for job in body["jobs"]] == ["Remote Berlin"]

        body = client.get("/api/jobs", params=[("job_type", "Contract"), ("job_type", "Part-time")]).json()
        assert [job["title"] for job in body["jobs"]] == ["Contract Berlin"]

    def test_salary_range(self, client, employer, job_payload):
        _post(client, employer, job_payload, title="Cheap", salary="$30,000")
        _post(client, employer, job_payload, title="Mid", salary="$80,000")
        _post(client, employer, job_payload, title="Unknown", salary="Competitive")

        body = client.get("/api/jobs", params={"salary_min": 50000, "salary_max": 100000}).json()
        assert [job["title"] for job in body["jobs"]] == ["Mid"]

    def test_date_posted(self, client, employer, job_payload):
        old = _post(client, employer, job_payload, title="Old")
        _post(client, employer, job_payload, title="Fresh")
        get_collection(COLLECTIONS["jobs"]).update_one(
            {"_id": to_object_id(old)}, {"$set": {"posted_at": datetime.utcnow() - timedelta(days=10)}}
        )

        body = client.get("/api/jobs", params={"date_posted": "7"}).json()
        assert [job["title"] for job in body["jobs"]] == ["Fresh"]

    def test_keyword_search(self, client, employer, job_payload):
        _post(client, employer, job_payload, title="Data Scientist", requirements=["Pandas"])
        _post(client, employer, job_payload, title="Designer", description="Figma work", requirements=[])

        body = client.get("/api/jobs", params={"keyword": "pandas"}).json()
        assert [job["title"] for job in body["jobs"]] == ["Data Scientist"]

        body = client.get("/api/jobs", params={"keyword": "ACME"}).json()
        assert body["total"] == 2

    def test_employer_sees_own_jobs(self, client, make_user, employer, job_payload):
        other = make_user("employer", company_name="Other Inc")
        mine = _post(client, employer, job_payload)
        _post(client, other, job_payload)

        body = client.get("/api/jobs/mine", headers=employer["headers"]).json()
        assert [job["id"] for job in body["jobs"]] == [mine]


class TestJobDetail:

    def test_unknown_and_malformed_ids(self, client):
        assert client.get("/api/jobs/0123456789abcdef01234567").status_code == 404
        assert client.get("/api/jobs/not-an-id").status_code == 404

    def test_job_seeker_views_are_counted(self, client, job_seeker, employer, posted_job):
        client.get(f"/api/jobs/{posted_job}", headers=job_seeker["headers"])
        response = client.get(f"/api/jobs/{posted_job}", headers=job_seeker["headers"])
        assert response.json()["views"] == 2

        # Anonymous and employer reads do not count
        client.get(f"/api/jobs/{posted_job}")
        client.get(f"/api/jobs/{posted_job}", headers=employer["headers"])
        assert client.get(f"/api/jobs/{posted_job}").json()["views"] == 2


class TestUpdateDelete:

    def test_owner_updates_job(self, client, employer, posted_job):
        response = client.put(f"/api/jobs/{posted_job}", headers=employer["headers"],
                              json={"title": "Senior Backend Engineer", "status": "closed"})
        assert response.status_code == 200

        job = client.get(f"/api/jobs/{posted_job}").json()
        assert job["title"] == "Senior Backend Engineer"
        assert job["status"] == "closed"
        assert job["company"] == "Acme Corp"
        assert job["updated_at"] is not None

    def test_other_employer_cannot_update_or_delete(self, client, make_user, posted_job):
        other = make_user("employer")
        assert client.put(f"/api/jobs/{posted_job}", headers=other["headers"],
                          json={"title": "Hijacked"}).status_code == 403
        assert client.delete(f"/api/jobs/{posted_job}", headers=other["headers"]).status_code == 403

    def test_owner_deletes_job(self, client, employer, posted_job):
        assert client.delete(f"/api/jobs/{posted_job}", headers=employer["headers"]).status_code == 200
        assert client.get(f"/api/jobs/{posted_job}").status_code == 404

    def test_update_missing_job(self, client, employer):
        response = client.put("/api/jobs/0123456789abcdef01234567", headers=employer["headers"],
                              json={"title": "Nothing"})
        assert response.status_code == 404


def test_search_jobs_combines_keyword_and_filters(client, employer, job_payload):
    _post(client, employer, job_payload, title="Python Remote")
    _post(client, employer, job_payload, title="Python Office", remote=False)
    _post(client, employer, job_payload, title="Go Remote", requirements=["Go"],
          description="Services in Go.")

    results = JobService().search_jobs("python", JobFilters(remote=True))
    assert [job["title"] for job in results] == ["Python Remote"]
