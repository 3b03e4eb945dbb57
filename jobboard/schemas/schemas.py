"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List, Dict, Any
from datetime import datetime
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class UserRole(str, Enum):
    jobseeker = "jobseeker"
    employer = "employer"


class JobType(str, Enum):
    full_time = "Full-time"
    part_time = "Part-time"
    contract = "Contract"
    freelance = "Freelance"
    internship = "Internship"
    temporary = "Temporary"


class ExperienceLevel(str, Enum):
    entry = "Entry Level"
    mid = "Mid Level"
    senior = "Senior Level"
    executive = "Executive"
    director = "Director"


class JobStatus(str, Enum):
    active = "active"
    closed = "closed"


class ApplicationStatus(str, Enum):
    pending = "pending"
    reviewed = "reviewed"
    interview = "interview"
    accepted = "accepted"
    rejected = "rejected"


class DatePosted(str, Enum):
    last_day = "1"
    last_3_days = "3"
    last_week = "7"
    last_month = "30"


class TimeRange(str, Enum):
    week = "7d"
    month = "30d"
    quarter = "90d"
    year = "1y"


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: UserRole
    full_name: Optional[str] = None
    company_name: Optional[str] = None

class LoginRequest(BaseModel):
    email: EmailStr
    password: str
    expected_role: Optional[UserRole] = None

class ResendVerificationRequest(BaseModel):
    email: EmailStr
    password: str

class VerifyEmailRequest(BaseModel):
    token: str

class PasswordResetRequest(BaseModel):
    email: EmailStr

class PasswordResetConfirm(BaseModel):
    token: str
    new_password: str = Field(..., min_length=6)

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    role: str
    user_data: Dict[str, Any] = {}

class UserResponse(BaseModel):
    user_id: str
    email: str
    role: str
    email_verified: bool
    is_active: bool
    created_at: datetime


# ============================================================
# PROFILE SCHEMAS
# ============================================================

class JobPreferences(BaseModel):
    part_time: bool = False
    full_time: bool = True
    remote: bool = False
    on_site: bool = True
    hybrid: bool = False

class JobSeekerProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    title: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    linked_in: Optional[str] = None
    github: Optional[str] = None
    industry: Optional[str] = None
    experience: Optional[Any] = None
    education: Optional[Any] = None
    skills: Optional[List[str]] = None
    job_preferences: Optional[JobPreferences] = None

class EmployerProfileUpdate(BaseModel):
    company_name: Optional[str] = None
    company_description: Optional[str] = None
    industry: Optional[str] = None
    company_size: Optional[str] = None
    founded_year: Optional[int] = Field(None, ge=1800, le=2100)
    website: Optional[str] = None
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    linked_in: Optional[str] = None
    twitter: Optional[str] = None
    facebook: Optional[str] = None
    company_culture: Optional[List[str]] = None

class SkillRequest(BaseModel):
    skill: str = Field(..., min_length=1, max_length=100)

class UploadResponse(BaseModel):
    success: bool = True
    url: str
    doc_id: str
    file_name: Optional[str] = None
    storage: str = "mongodb"


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    company: str = Field(..., min_length=1, max_length=200)
    location: str = Field(..., min_length=1)
    job_type: JobType
    experience_level: ExperienceLevel
    description: str = Field(..., min_length=1)
    industry: Optional[str] = None
    salary: Optional[str] = None
    requirements: List[str] = []
    remote: bool = False
    hybrid: bool = False

class JobUpdate(BaseModel):
    title: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    job_type: Optional[JobType] = None
    experience_level: Optional[ExperienceLevel] = None
    description: Optional[str] = None
    industry: Optional[str] = None
    salary: Optional[str] = None
    requirements: Optional[List[str]] = None
    remote: Optional[bool] = None
    hybrid: Optional[bool] = None
    status: Optional[JobStatus] = None

class JobFilters(BaseModel):
    location: List[str] = []
    job_type: List[str] = []
    experience_level: List[str] = []
    industry: List[str] = []
    remote: bool = False
    hybrid: bool = False
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    date_posted: Optional[DatePosted] = None

class JobResponse(BaseModel):
    id: str
    title: str
    company: str
    location: Optional[str] = None
    job_type: Optional[str] = None
    experience_level: Optional[str] = None
    industry: Optional[str] = None
    salary: Optional[str] = None
    description: Optional[str] = None
    requirements: List[str] = []
    remote: bool = False
    hybrid: bool = False
    employer_id: str
    status: str
    applications_count: int = 0
    views: int = 0
    posted_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class JobListResponse(BaseModel):
    jobs: List[JobResponse]
    total: int

class CreatedResponse(BaseModel):
    id: str
    message: str
    success: bool = True


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationCreate(BaseModel):
    cover_letter: Optional[str] = None
    resume_url: Optional[str] = None

class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus

class ApplicationResponse(BaseModel):
    id: str
    user_id: str
    job_id: str
    job_title: Optional[str] = None
    company_name: Optional[str] = None
    applicant_name: str = "N/A"
    applicant_email: str = "N/A"
    applicant_phone: str = "N/A"
    applicant_skills: List[str] = []
    applicant_experience: Any = None
    applicant_education: Any = None
    cover_letter: Optional[str] = None
    resume_url: Optional[str] = None
    resume_file_name: Optional[str] = None
    status: str
    applied_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================
# MESSAGING SCHEMAS
# ============================================================

class ConversationCreate(BaseModel):
    other_user_id: str = Field(..., min_length=1)
    job_id: Optional[str] = None

class ConversationResponse(BaseModel):
    id: str
    participants: List[str]
    employer_id: str
    job_seeker_id: str
    job_id: Optional[str] = None
    last_message: Optional[str] = None
    last_message_time: Optional[datetime] = None
    employer_name: str = ""
    job_seeker_name: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class MessageCreate(BaseModel):
    text: str = Field(..., min_length=1, max_length=5000)

class ChatMessageResponse(BaseModel):
    id: str
    conversation_id: str
    sender_id: str
    text: str
    type: str = "text"
    read: bool = False
    timestamp: Optional[datetime] = None


# ============================================================
# POST SCHEMAS
# ============================================================

class PostCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)
    image_url: Optional[str] = None

class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)

class CommentResponse(BaseModel):
    id: str
    author_id: str
    content: str
    timestamp: Optional[datetime] = None
    likes: Dict[str, bool] = {}
    likes_count: int = 0

class PostResponse(BaseModel):
    id: str
    author_id: str
    content: str
    image_url: Optional[str] = None
    timestamp: Optional[datetime] = None
    likes: Dict[str, bool] = {}
    likes_count: int = 0
    comments: Dict[str, CommentResponse] = {}
    comments_count: int = 0
    shares: int = 0

class LikeResponse(BaseModel):
    success: bool = True
    is_liked: bool
    likes_count: int


# ============================================================
# ANALYTICS SCHEMAS
# ============================================================

class AnalyticsOverview(BaseModel):
    total_jobs: int
    active_jobs: int
    total_applications: int
    total_views: int
    average_applications_per_job: float
    response_rate: float

class JobPerformance(BaseModel):
    job_id: str
    title: str
    applications: int
    views: int
    status: str
    posted_date: Optional[datetime] = None

class TrendPoint(BaseModel):
    date: str
    applications: int

class SkillCount(BaseModel):
    skill: str
    count: int

class LevelCount(BaseModel):
    level: str
    count: int
    percentage: float

class LocationCount(BaseModel):
    location: str
    count: int

class Demographics(BaseModel):
    experience_levels: List[LevelCount] = []
    locations: List[LocationCount] = []

class AnalyticsResponse(BaseModel):
    time_range: str
    overview: AnalyticsOverview
    job_performance: List[JobPerformance]
    application_trends: List[TrendPoint]
    top_skills: List[SkillCount]
    demographics: Demographics

class EmployerDashboardResponse(BaseModel):
    job_postings: int
    applications: int
    active_candidates: int
    interview_scheduled: int
    recent_applications: List[ApplicationResponse] = []

class JobSeekerDashboardResponse(BaseModel):
    applications: int
    interviews: int
    recent_applications: List[ApplicationResponse] = []


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True
