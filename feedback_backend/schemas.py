"""
Pydantic schemas for the feedback FastAPI backend.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field


class OpenSessionRequest(BaseModel):
    public_link: str = Field(..., max_length=256)


class WorkshopInfo(BaseModel):
    id: str
    workshop_name: str
    college_name: str
    date: str
    time: str
    instructions: str


class ChannelStatus(BaseModel):
    kind: str
    target: str
    state: str
    cooldown_until: float
    attempts: int


class SubmissionResponse(BaseModel):
    id: str
    workshop_id: str
    name: str
    course: str
    phone: str
    email: str
    feedback: str
    phone_verified: bool
    email_verified: bool
    submitted_at: float
    certificate_url: Optional[str] = None


class SessionResponse(BaseModel):
    session_id: str
    stage: str
    name: str
    course: str
    phone: str
    email: str
    feedback: str
    channels: list[ChannelStatus]
    workshop: Optional[WorkshopInfo] = None
    submission: Optional[SubmissionResponse] = None


class UpdateFieldsRequest(BaseModel):
    name: Optional[str] = Field(default=None, max_length=200)
    course: Optional[str] = Field(default=None, max_length=200)
    phone: Optional[str] = Field(default=None, max_length=32)
    email: Optional[str] = Field(default=None, max_length=254)
    feedback: Optional[str] = Field(default=None, max_length=8000)


class CodeRequestPayload(BaseModel):
    target: Optional[str] = Field(default=None, max_length=254)


class VerifyCodePayload(BaseModel):
    code: str = Field(..., max_length=16)


class WorkshopCreateRequest(BaseModel):
    college_name: str = ""
    workshop_name: str = ""
    date: str = ""
    time: str = ""
    instructions: str = ""
    is_active: bool = False


class WorkshopDraftRequest(BaseModel):
    college_name: Optional[str] = None
    workshop_name: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    instructions: Optional[str] = None
    is_active: bool = False


class WorkshopDraftResponse(BaseModel):
    id: str
    status: Literal["draft"]


class WorkshopResponse(BaseModel):
    id: str
    college_name: str
    workshop_name: str
    date: str
    time: str
    instructions: str
    unique_link: str
    is_active: bool
    admin_id: Optional[str] = None
    created_at: Optional[float] = None
    updated_at: Optional[float] = None
    feedback_url: str


class WorkshopListResponse(BaseModel):
    workshops: list[WorkshopResponse]


class SubmissionListResponse(BaseModel):
    submissions: list[SubmissionResponse]


class WorkshopStatsResponse(BaseModel):
    workshop_id: str
    workshop_name: str
    count: int
    completion_rate: int


class AnalyticsResponse(BaseModel):
    total_workshops: int
    active_workshops: int
    total_submissions: int
    completion_rate: int
    submissions_by_workshop: list[WorkshopStatsResponse]


class CertificateTemplateResponse(BaseModel):
    name: str
    url: str
    is_active: bool


class CertificateTemplateListResponse(BaseModel):
    templates: list[CertificateTemplateResponse]
    active_template: Optional[str] = None


class StatusResponse(BaseModel):
    status: Literal["ok"]
