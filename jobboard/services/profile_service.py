"""
Profile Service - the MongoDB `users` collection.

A profile document is keyed by the account uid and holds everything
about a user except credentials: personal details, skills, resume and
image references, job preferences and (for employers) company info.

Binary uploads (resumes, profile images) are stored base64-encoded in
the `uploads` collection and referenced from the profile.
"""

import base64
import logging
import time
import uuid
from typing import List, Optional

from pymongo.collection import Collection

from jobboard.core.exceptions import NotFoundError
from jobboard.db.mongodb import get_collection, COLLECTIONS
from jobboard.services.documents import now

logger = logging.getLogger(__name__)

LARGE_FILE_BYTES = 1024 * 1024

SKILLS = [
    'JavaScript', 'Python', 'Java', 'C++', 'C#', 'PHP', 'Ruby', 'Swift',
    'Kotlin', 'React', 'Angular', 'Vue.js', 'Node.js', 'Express.js',
    'Django', 'Flask', 'Spring Boot', 'Laravel', 'MySQL', 'PostgreSQL',
    'MongoDB', 'Redis', 'AWS', 'Docker', 'Kubernetes', 'Git', 'HTML',
    'CSS', 'SASS', 'TypeScript', 'React Native', 'Flutter', 'Machine Learning',
    'Data Analysis', 'UI/UX Design', 'Project Management', 'Agile', 'Scrum'
]

INDUSTRIES = [
    'Technology', 'Healthcare', 'Finance', 'Education', 'Retail',
    'Manufacturing', 'Construction', 'Transportation', 'Hospitality',
    'Real Estate', 'Media & Entertainment', 'Telecommunications',
    'Energy', 'Agriculture', 'Automotive', 'Aerospace', 'Pharmaceuticals',
    'Food & Beverage', 'Consulting', 'Legal Services', 'Non-Profit',
    'Government', 'Other'
]


def default_profile() -> dict:
    """Every field a client can expect on a profile."""
    return {
        "full_name": "",
        "name": "",
        "email": "",
        "phone": "",
        "skills": [],
        "experience": "",
        "education": "",
        "resume_url": None,
        "title": "",
        "bio": "",
        "location": "",
        "linked_in": "",
        "github": "",
        "industry": "",
        "job_preferences": {
            "part_time": False,
            "full_time": True,
            "remote": False,
            "on_site": True,
            "hybrid": False,
        },
    }


def data_url(mime_type: str, content: bytes) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(content).decode('ascii')}"


class ProfileService:

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["profiles"])
        self.uploads: Collection = get_collection(COLLECTIONS["uploads"])

    def create_profile(self, user_id: str, email: str, role: str, extra: dict = None) -> None:
        """Initial profile document written at registration."""
        doc = {
            **(extra or {}),
            "email": email,
            "role": role,
            "email_verified": False,
            "created_at": now(),
        }
        self.collection.update_one({"_id": user_id}, {"$set": doc}, upsert=True)

    def get_raw(self, user_id: str) -> Optional[dict]:
        return self.collection.find_one({"_id": user_id})

    def get_profile(self, user_id: str) -> dict:
        """
        Profile merged over the defaults. Unknown users get the default
        profile so new accounts render without special cases.
        """
        profile = default_profile()
        doc = self.get_raw(user_id)
        if doc:
            doc = dict(doc)
            doc.pop("_id", None)
            if not doc.get("full_name") and doc.get("name"):
                doc["full_name"] = doc["name"]
            profile.update({k: v for k, v in doc.items() if v is not None or k not in profile})
        profile["id"] = user_id
        return profile

    def _merge(self, user_id: str, data: dict, role: str) -> None:
        update = {k: v for k, v in data.items() if v is not None}
        update["role"] = role
        update["updated_at"] = now()
        self.collection.update_one({"_id": user_id}, {"$set": update}, upsert=True)

    def update_job_seeker_profile(self, user_id: str, data: dict) -> None:
        self._merge(user_id, data, "jobseeker")

    def update_employer_profile(self, user_id: str, data: dict) -> None:
        self._merge(user_id, data, "employer")

    def set_email_verified(self, user_id: str) -> None:
        self.collection.update_one(
            {"_id": user_id}, {"$set": {"email_verified": True}}, upsert=True
        )

    def add_skill(self, user_id: str, skill: str) -> None:
        result = self.collection.update_one(
            {"_id": user_id},
            {"$addToSet": {"skills": skill}, "$set": {"updated_at": now()}}
        )
        if result.matched_count == 0:
            raise NotFoundError("Profile not found")

    def remove_skill(self, user_id: str, skill: str) -> None:
        result = self.collection.update_one(
            {"_id": user_id},
            {"$pull": {"skills": skill}, "$set": {"updated_at": now()}}
        )
        if result.matched_count == 0:
            raise NotFoundError("Profile not found")

    # ------------------------------------------------------------------
    # Uploads
    # ------------------------------------------------------------------

    def _store_upload(self, doc_id: str, user_id: str, file_name: str, folder: str,
                      content: bytes, mime_type: str) -> None:
        self.uploads.insert_one({
            "_id": doc_id,
            "user_id": user_id,
            "file_name": file_name,
            "folder": folder,
            "base64_data": base64.b64encode(content).decode("ascii"),
            "storage_type": "mongodb",
            "uploaded_at": now(),
            "file_size": len(content),
            "mime_type": mime_type,
        })

    def upload_profile_image(self, user_id: str, content: bytes, mime_type: str = None) -> dict:
        mime_type = mime_type or "image/jpeg"
        doc_id = f"profile_image_{user_id}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:6]}"
        self._store_upload(
            doc_id, user_id, f"profile_image_{user_id}.jpg", "profile-images", content, mime_type
        )
        self.collection.update_one(
            {"_id": user_id},
            {"$set": {
                "profile_image_doc_id": doc_id,
                "profile_image_type": "mongodb",
                "updated_at": now(),
            }},
            upsert=True
        )
        logger.info("Profile image uploaded for %s (%d bytes)", user_id, len(content))
        return {"url": data_url(mime_type, content), "doc_id": doc_id}

    def upload_resume(self, user_id: str, file_name: str, content: bytes, mime_type: str = None) -> dict:
        mime_type = mime_type or "application/pdf"
        if len(content) > LARGE_FILE_BYTES:
            logger.warning("Large resume from %s (%d bytes), base64 inflates it further",
                           user_id, len(content))

        doc_id = f"resume_{user_id}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:6]}"
        self._store_upload(doc_id, user_id, file_name, "resumes", content, mime_type)

        url = data_url(mime_type, content)
        self.collection.update_one(
            {"_id": user_id},
            {"$set": {
                "resume_doc_id": doc_id,
                "resume_url": url,
                "resume_file_name": file_name,
                "updated_at": now(),
            }},
            upsert=True
        )
        logger.info("Resume uploaded for %s: %s", user_id, file_name)
        return {"url": url, "doc_id": doc_id, "file_name": file_name}

    def get_upload(self, doc_id: str) -> Optional[dict]:
        return self.uploads.find_one({"_id": doc_id})

    # ------------------------------------------------------------------
    # Catalogues
    # ------------------------------------------------------------------

    @staticmethod
    def get_skills() -> List[str]:
        return list(SKILLS)

    @staticmethod
    def get_industries() -> List[str]:
        return list(INDUSTRIES)


def get_profile_service() -> ProfileService:
    return ProfileService()
