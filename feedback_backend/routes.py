"""
HTTP routes for the attendee feedback flow.
"""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException

from feedback_backend.dependencies import get_feedback_service
from feedback_backend.feedback_service import FeedbackService
from feedback_backend.schemas import (
    ChannelStatus,
    CodeRequestPayload,
    OpenSessionRequest,
    SessionResponse,
    SubmissionResponse,
    UpdateFieldsRequest,
    VerifyCodePayload,
    WorkshopInfo,
)
from feedback_shared.api import FeedbackSession, Result
from feedback_shared.types import ChannelKind, ErrorCode

router = APIRouter(prefix="/feedback")

ERROR_STATUS = {
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.INACTIVE: 410,
    ErrorCode.LOOKUP_FAILURE: 503,
    ErrorCode.GUARD_NOT_SATISFIED: 409,
    ErrorCode.ALREADY_SUBMITTED: 409,
    ErrorCode.INVALID_TARGET: 422,
    ErrorCode.COOLDOWN_ACTIVE: 429,
    ErrorCode.CODE_NOT_REQUESTED: 409,
    ErrorCode.CODE_MISMATCH: 422,
    ErrorCode.ALREADY_VERIFIED: 409,
    ErrorCode.DELIVERY_FAILURE: 502,
    ErrorCode.VERIFICATION_INCOMPLETE: 409,
    ErrorCode.INVALID_PAYLOAD: 422,
    ErrorCode.WORKSHOP_NO_LONGER_ACTIVE: 410,
    ErrorCode.PERSISTENCE_FAILURE: 503,
}


def _raise_for(result: Result) -> None:
    if result.ok:
        return
    raise HTTPException(
        status_code=ERROR_STATUS.get(result.error, 400),
        detail={
            "error": result.error.value,
            "message": result.message,
            "fields": result.fields,
        },
    )


def _session_response(
    session: FeedbackSession, service: FeedbackService
) -> SessionResponse:
    draft = session.draft
    workshop = service.workshop(session)
    return SessionResponse(
        session_id=session.session_id,
        stage=draft.stage.value,
        name=draft.name,
        course=draft.course,
        phone=draft.phone,
        email=draft.email,
        feedback=draft.feedback,
        channels=[
            ChannelStatus(
                kind=channel.kind.value,
                target=channel.target,
                state=channel.state.value,
                cooldown_until=channel.cooldown_until,
                attempts=channel.attempts,
            )
            for channel in draft.channels.values()
        ],
        workshop=(
            WorkshopInfo(
                id=workshop.id,
                workshop_name=workshop.workshop_name,
                college_name=workshop.college_name,
                date=workshop.date,
                time=workshop.time,
                instructions=workshop.instructions,
            )
            if workshop
            else None
        ),
        submission=(
            SubmissionResponse(**asdict(session.submission))
            if session.submission
            else None
        ),
    )


@router.post("/sessions", response_model=SessionResponse, status_code=201)
def open_session(
    payload: OpenSessionRequest,
    service: FeedbackService = Depends(get_feedback_service),
):
    """
    Resolve a public workshop link and start a feedback session for it.
    """
    result = service.open_session(payload.public_link)
    _raise_for(result)
    return _session_response(result.value, service)


@router.get("/sessions/{session_id}", response_model=SessionResponse)
def get_session(
    session_id: str, service: FeedbackService = Depends(get_feedback_service)
):
    return _session_response(service.load(session_id), service)


@router.patch("/sessions/{session_id}", response_model=SessionResponse)
def update_fields(
    session_id: str,
    payload: UpdateFieldsRequest,
    service: FeedbackService = Depends(get_feedback_service),
):
    result, session = service.update_fields(
        session_id, **payload.model_dump(exclude_none=True)
    )
    _raise_for(result)
    return _session_response(session, service)


@router.post("/sessions/{session_id}/advance", response_model=SessionResponse)
def advance(session_id: str, service: FeedbackService = Depends(get_feedback_service)):
    result, session = service.advance(session_id)
    _raise_for(result)
    return _session_response(session, service)


@router.post("/sessions/{session_id}/retreat", response_model=SessionResponse)
def retreat(session_id: str, service: FeedbackService = Depends(get_feedback_service)):
    result, session = service.retreat(session_id)
    _raise_for(result)
    return _session_response(session, service)


@router.post(
    "/sessions/{session_id}/verification/{kind}/request",
    response_model=SessionResponse,
)
def request_code(
    session_id: str,
    kind: ChannelKind,
    payload: CodeRequestPayload,
    service: FeedbackService = Depends(get_feedback_service),
):
    result, session = service.request_code(session_id, kind, payload.target)
    _raise_for(result)
    return _session_response(session, service)


@router.post(
    "/sessions/{session_id}/verification/{kind}/verify",
    response_model=SessionResponse,
)
def verify_code(
    session_id: str,
    kind: ChannelKind,
    payload: VerifyCodePayload,
    service: FeedbackService = Depends(get_feedback_service),
):
    result, session = service.submit_code(session_id, kind, payload.code)
    _raise_for(result)
    return _session_response(session, service)
