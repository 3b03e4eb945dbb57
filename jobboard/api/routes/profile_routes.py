"""
Profile Routes

GET    /profile/me                  - Own profile (defaults filled in)
GET    /profile/skills              - Predefined skills catalogue
GET    /profile/industries          - Predefined industries catalogue
GET    /profile/upload-formats      - Accepted upload extensions and size limit
GET    /profile/{user_id}           - Someone else's profile (authenticated)
PUT    /profile/jobseeker           - Update job seeker profile
PUT    /profile/employer            - Update employer profile
POST   /profile/skills              - Add a skill
DELETE /profile/skills/{skill}      - Remove a skill
POST   /profile/resume              - Upload resume (PDF, DOC, DOCX, TXT)
POST   /profile/image               - Upload profile image
"""

from typing import List

from fastapi import APIRouter, Depends, File, UploadFile

from jobboard.core.auth import get_current_user, get_current_job_seeker, get_current_employer
from jobboard.services.profile_service import get_profile_service
from jobboard.utils.file_upload import get_supported_formats, read_image, read_resume
from jobboard.schemas.schemas import (
    JobSeekerProfileUpdate, EmployerProfileUpdate, SkillRequest, UploadResponse, MessageResponse
)

router = APIRouter(prefix="/profile", tags=["Profiles"])


@router.get("/me")
async def get_my_profile(user: dict = Depends(get_current_user)):
    return get_profile_service().get_profile(user["user_id"])


@router.get("/skills", response_model=List[str])
async def list_skills():
    return get_profile_service().get_skills()


@router.get("/industries", response_model=List[str])
async def list_industries():
    return get_profile_service().get_industries()


@router.get("/upload-formats")
async def upload_formats():
    return get_supported_formats()


@router.get("/{user_id}")
async def get_profile(user_id: str, user: dict = Depends(get_current_user)):
    return get_profile_service().get_profile(user_id)


@router.put("/jobseeker", response_model=MessageResponse)
async def update_job_seeker_profile(update: JobSeekerProfileUpdate,
                                    user: dict = Depends(get_current_job_seeker)):
    get_profile_service().update_job_seeker_profile(user["user_id"], update.model_dump(exclude_none=True))
    return MessageResponse(message="Profile updated successfully")


@router.put("/employer", response_model=MessageResponse)
async def update_employer_profile(update: EmployerProfileUpdate,
                                  user: dict = Depends(get_current_employer)):
    get_profile_service().update_employer_profile(user["user_id"], update.model_dump(exclude_none=True))
    return MessageResponse(message="Profile updated successfully")


@router.post("/skills", response_model=MessageResponse)
async def add_skill(request: SkillRequest, user: dict = Depends(get_current_job_seeker)):
    get_profile_service().add_skill(user["user_id"], request.skill.strip())
    return MessageResponse(message="Skill added successfully")


@router.delete("/skills/{skill}", response_model=MessageResponse)
async def remove_skill(skill: str, user: dict = Depends(get_current_job_seeker)):
    get_profile_service().remove_skill(user["user_id"], skill)
    return MessageResponse(message="Skill removed successfully")


@router.post("/resume", response_model=UploadResponse)
async def upload_resume(file: UploadFile = File(...), user: dict = Depends(get_current_job_seeker)):
    """Store the resume and make it the default for future applications."""
    content, filename, mime_type = await read_resume(file)
    result = get_profile_service().upload_resume(user["user_id"], filename, content, mime_type)
    return UploadResponse(**result)


@router.post("/image", response_model=UploadResponse)
async def upload_image(file: UploadFile = File(...), user: dict = Depends(get_current_user)):
    content, _, mime_type = await read_image(file)
    result = get_profile_service().upload_profile_image(user["user_id"], content, mime_type)
    return UploadResponse(**result)
