"""
Tests for profile reads, updates, skills and uploads.
"""

from jobboard.db.mongodb import get_collection, COLLECTIONS
from jobboard.services.profile_service import ProfileService, SKILLS, INDUSTRIES


class TestProfileRead:

    def test_own_profile_is_merged_over_defaults(self, client, job_seeker):
        response = client.get("/api/profile/me", headers=job_seeker["headers"])
        assert response.status_code == 200

        profile = response.json()
        assert profile["id"] == job_seeker["user_id"]
        assert profile["full_name"] == "Sam Seeker"
        assert profile["email"] == job_seeker["email"]
        assert profile["skills"] == []
        assert profile["job_preferences"]["full_time"] is True
        assert profile["resume_url"] is None

    def test_unknown_user_gets_default_profile(self):
        profile = ProfileService().get_profile("nobody")
        assert profile["id"] == "nobody"
        assert profile["full_name"] == ""
        assert profile["job_preferences"]["on_site"] is True

    def test_name_backfills_full_name(self):
        get_collection(COLLECTIONS["profiles"]).insert_one({"_id": "legacy", "name": "Old Name"})
        assert ProfileService().get_profile("legacy")["full_name"] == "Old Name"

    def test_other_users_profile(self, client, job_seeker, employer):
        response = client.get(f"/api/profile/{job_seeker['user_id']}", headers=employer["headers"])
        assert response.status_code == 200
        assert response.json()["full_name"] == "Sam Seeker"

    def test_catalogues(self, client):
        assert client.get("/api/profile/skills").json() == SKILLS
        assert client.get("/api/profile/industries").json() == INDUSTRIES


class TestProfileUpdate:

    def test_job_seeker_update_merges(self, client, job_seeker):
        response = client.put("/api/profile/jobseeker", headers=job_seeker["headers"], json={
            "title": "Python Developer",
            "location": "Lisbon",
            "job_preferences": {"remote": True, "full_time": False},
        })
        assert response.status_code == 200

        profile = client.get("/api/profile/me", headers=job_seeker["headers"]).json()
        assert profile["title"] == "Python Developer"
        assert profile["location"] == "Lisbon"
        assert profile["full_name"] == "Sam Seeker"
        assert profile["job_preferences"]["remote"] is True
        assert profile["job_preferences"]["full_time"] is False
        assert profile["role"] == "jobseeker"

    def test_employer_update(self, client, employer):
        response = client.put("/api/profile/employer", headers=employer["headers"], json={
            "company_description": "We make everything.",
            "company_size": "51-200",
            "founded_year": 1999,
        })
        assert response.status_code == 200

        profile = client.get("/api/profile/me", headers=employer["headers"]).json()
        assert profile["company_name"] == "Acme Corp"
        assert profile["company_size"] == "51-200"
        assert profile["founded_year"] == 1999

    def test_roles_are_enforced(self, client, job_seeker, employer):
        assert client.put("/api/profile/employer", headers=job_seeker["headers"],
                          json={"company_name": "X"}).status_code == 403
        assert client.put("/api/profile/jobseeker", headers=employer["headers"],
                          json={"title": "X"}).status_code == 403


class TestSkills:

    def test_add_skill_is_idempotent(self, client, job_seeker):
        for _ in range(2):
            response = client.post("/api/profile/skills", headers=job_seeker["headers"], json={"skill": " Python "})
            assert response.status_code == 200

        profile = client.get("/api/profile/me", headers=job_seeker["headers"]).json()
        assert profile["skills"] == ["Python"]

    def test_remove_skill(self, client, job_seeker):
        client.post("/api/profile/skills", headers=job_seeker["headers"], json={"skill": "Python"})
        client.post("/api/profile/skills", headers=job_seeker["headers"], json={"skill": "Docker"})

        response = client.delete("/api/profile/skills/Python", headers=job_seeker["headers"])
        assert response.status_code == 200
        profile = client.get("/api/profile/me", headers=job_seeker["headers"]).json()
        assert profile["skills"] == ["Docker"]

    def test_add_skill_without_profile(self, client, job_seeker):
        get_collection(COLLECTIONS["profiles"]).delete_one({"_id": job_seeker["user_id"]})
        response = client.post("/api/profile/skills", headers=job_seeker["headers"], json={"skill": "Go"})
        assert response.status_code == 404


class TestUploads:

    def test_resume_upload_links_profile(self, client, job_seeker):
        response = client.post(
            "/api/profile/resume", headers=job_seeker["headers"],
            files={"file": ("cv.pdf", b"%PDF-1.4 resume", "application/pdf")}
        )
        assert response.status_code == 200
        body = response.json()
        assert body["url"].startswith("data:application/pdf;base64,")
        assert body["doc_id"].startswith(f"resume_{job_seeker['user_id']}_")
        assert body["file_name"] == "cv.pdf"
        assert body["storage"] == "mongodb"

        profile = client.get("/api/profile/me", headers=job_seeker["headers"]).json()
        assert profile["resume_url"] == body["url"]
        assert profile["resume_file_name"] == "cv.pdf"

        stored = ProfileService().get_upload(body["doc_id"])
        assert stored["folder"] == "resumes"
        assert stored["file_size"] == len(b"%PDF-1.4 resume")

    def test_resume_rejects_unsupported_type(self, client, job_seeker):
        response = client.post(
            "/api/profile/resume", headers=job_seeker["headers"],
            files={"file": ("cv.exe", b"MZ", "application/octet-stream")}
        )
        assert response.status_code == 400

    def test_resume_rejects_empty_file(self, client, job_seeker):
        response = client.post(
            "/api/profile/resume", headers=job_seeker["headers"],
            files={"file": ("cv.txt", b"", "text/plain")}
        )
        assert response.status_code == 400

    def test_profile_image_upload(self, client, employer):
        response = client.post(
            "/api/profile/image", headers=employer["headers"],
            files={"file": ("logo.png", b"\x89PNG fake", "image/png")}
        )
        assert response.status_code == 200
        body = response.json()
        assert body["url"].startswith("data:image/png;base64,")
        assert body["doc_id"].startswith(f"profile_image_{employer['user_id']}_")

        profile = client.get("/api/profile/me", headers=employer["headers"]).json()
        assert profile["profile_image_doc_id"] == body["doc_id"]

    def test_upload_ids_are_unique(self):
        service = ProfileService()
        first = service.upload_profile_image("u1", b"a", "image/jpeg")
        second = service.upload_profile_image("u1", b"b", "image/jpeg")
        assert first["doc_id"] != second["doc_id"]


def test_upload_formats(client):
    body = client.get("/api/profile/upload-formats").json()
    assert body["resume_formats"] == [".doc", ".docx", ".pdf", ".txt"]
    assert ".png" in body["image_formats"]
    assert body["max_size_mb"] == 5
