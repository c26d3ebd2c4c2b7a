"""
HTTP routes for administrators: workshops, submissions, analytics, export and
certificate templates.
"""

from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile

from feedback_backend.auth import require_admin_key
from feedback_backend.certificates import CertificateTemplateService
from feedback_backend.dependencies import (
    get_certificate_service,
    get_document_store,
    get_workshop_service,
)
from feedback_backend.reports import ExportKind, export_csv, export_filename, load_analytics
from feedback_backend.schemas import (
    AnalyticsResponse,
    CertificateTemplateListResponse,
    CertificateTemplateResponse,
    StatusResponse,
    SubmissionListResponse,
    SubmissionResponse,
    WorkshopCreateRequest,
    WorkshopDraftRequest,
    WorkshopDraftResponse,
    WorkshopListResponse,
    WorkshopResponse,
)
from feedback_backend.workshops import WorkshopFilter, WorkshopService
from feedback_shared.api import Workshop
from feedback_shared.interfaces import DocumentStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", dependencies=[Depends(require_admin_key)])


def _workshop_response(workshop: Workshop, service: WorkshopService) -> WorkshopResponse:
    return WorkshopResponse(
        **asdict(workshop), feedback_url=service.feedback_url(workshop)
    )


@router.post("/workshops", response_model=WorkshopResponse, status_code=201)
def create_workshop(
    payload: WorkshopCreateRequest,
    service: WorkshopService = Depends(get_workshop_service),
):
    workshop = service.create(payload.model_dump())
    return _workshop_response(workshop, service)


@router.post(
    "/workshop-drafts", response_model=WorkshopDraftResponse, status_code=201
)
def save_workshop_draft(
    payload: WorkshopDraftRequest,
    service: WorkshopService = Depends(get_workshop_service),
):
    draft_id = service.save_draft(payload.model_dump())
    return WorkshopDraftResponse(id=draft_id, status="draft")


@router.get("/workshops", response_model=WorkshopListResponse)
def list_workshops(
    status: WorkshopFilter = Query("all"),
    service: WorkshopService = Depends(get_workshop_service),
):
    return WorkshopListResponse(
        workshops=[
            _workshop_response(w, service) for w in service.list_workshops(status)
        ]
    )


@router.get("/workshops/{workshop_id}", response_model=WorkshopResponse)
def get_workshop(
    workshop_id: str, service: WorkshopService = Depends(get_workshop_service)
):
    return _workshop_response(service.get(workshop_id), service)


@router.post("/workshops/{workshop_id}/toggle", response_model=WorkshopResponse)
def toggle_workshop(
    workshop_id: str, service: WorkshopService = Depends(get_workshop_service)
):
    return _workshop_response(service.toggle(workshop_id), service)


@router.delete("/workshops/{workshop_id}", response_model=StatusResponse)
def delete_workshop(
    workshop_id: str, service: WorkshopService = Depends(get_workshop_service)
):
    service.delete(workshop_id)
    return StatusResponse(status="ok")


@router.get(
    "/workshops/{workshop_id}/submissions", response_model=SubmissionListResponse
)
def list_submissions(
    workshop_id: str, service: WorkshopService = Depends(get_workshop_service)
):
    return SubmissionListResponse(
        submissions=[
            SubmissionResponse(**asdict(s)) for s in service.submissions(workshop_id)
        ]
    )


@router.get("/analytics", response_model=AnalyticsResponse)
def analytics(store: DocumentStore = Depends(get_document_store)):
    return AnalyticsResponse.model_validate(asdict(load_analytics(store)))


@router.get("/export/{kind}")
def export_data(kind: ExportKind, store: DocumentStore = Depends(get_document_store)):
    body = export_csv(store, kind)
    logger.info("Exported %s (%d bytes)", kind, len(body))
    return Response(
        content=body,
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="{export_filename(kind)}"'
        },
    )


@router.get("/certificate-templates", response_model=CertificateTemplateListResponse)
def list_certificate_templates(
    service: CertificateTemplateService = Depends(get_certificate_service),
):
    return CertificateTemplateListResponse(
        templates=[
            CertificateTemplateResponse(**asdict(t)) for t in service.list_templates()
        ],
        active_template=service.active_template_name(),
    )


@router.post(
    "/certificate-templates",
    response_model=CertificateTemplateResponse,
    status_code=201,
)
async def upload_certificate_template(
    file: UploadFile = File(...),
    service: CertificateTemplateService = Depends(get_certificate_service),
):
    data = await file.read()
    template = service.upload(file.filename, file.content_type, data)
    return CertificateTemplateResponse(**asdict(template))


@router.post(
    "/certificate-templates/{name}/activate", response_model=StatusResponse
)
def activate_certificate_template(
    name: str, service: CertificateTemplateService = Depends(get_certificate_service)
):
    service.set_active(name)
    return StatusResponse(status="ok")


@router.delete("/certificate-templates/{name}", response_model=StatusResponse)
def delete_certificate_template(
    name: str, service: CertificateTemplateService = Depends(get_certificate_service)
):
    service.delete(name)
    return StatusResponse(status="ok")
