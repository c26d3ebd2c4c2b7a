"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging

from fastapi import Depends

from feedback_backend.certificates import CertificateTemplateService
from feedback_backend.config import get_settings
from feedback_backend.db import InMemoryDocumentStore, SqlDocumentStore
from feedback_backend.delivery import (
    FixedCodeProvider,
    InMemoryCodeProvider,
    RedisCodeRegistry,
    WebhookCodeProvider,
)
from feedback_backend.feedback_service import FeedbackService
from feedback_backend.sessions import (
    InMemorySessionStore,
    RedisSessionStore,
    SessionStore,
)
from feedback_backend.storage import InMemoryStorageClient, S3StorageClient, StorageClient
from feedback_backend.workshops import WorkshopService
from feedback_shared.interfaces import CodeDeliveryProvider, DocumentStore

logger = logging.getLogger(__name__)

_document_store: DocumentStore | None = None
_storage_client: StorageClient | None = None
_session_store: SessionStore | None = None
_code_provider: CodeDeliveryProvider | None = None


def get_document_store() -> DocumentStore:
    """
    Return a singleton document store so records persist across requests.
    """
    global _document_store
    if _document_store:
        return _document_store

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        _document_store = InMemoryDocumentStore()
    else:
        _document_store = SqlDocumentStore(settings.database_url)
    return _document_store


def get_storage_client() -> StorageClient:
    global _storage_client
    if _storage_client:
        return _storage_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.s3_bucket:
        _storage_client = InMemoryStorageClient()
    else:
        _storage_client = S3StorageClient(
            bucket=settings.s3_bucket,
            region=settings.s3_region or "",
            endpoint=settings.s3_endpoint or "",
            access_key_id=settings.aws_access_key_id or "",
            secret_access_key=settings.aws_secret_access_key or "",
        )
    return _storage_client


def get_session_store() -> SessionStore:
    """
    Return a singleton session store for in-progress feedback forms.
    """
    global _session_store
    if _session_store:
        return _session_store

    settings = get_settings()
    if settings.redis_url and not settings.use_in_memory_backends:
        _session_store = RedisSessionStore(
            url=settings.redis_url, ttl_seconds=settings.session_ttl_seconds
        )
    else:
        _session_store = InMemorySessionStore()
    return _session_store


def get_code_provider() -> CodeDeliveryProvider:
    """
    Return a singleton code provider. Issued codes go to Redis when it is
    configured so every worker can check them.
    """
    global _code_provider
    if _code_provider:
        return _code_provider

    settings = get_settings()
    registry = None
    if settings.redis_url and not settings.use_in_memory_backends:
        registry = RedisCodeRegistry(url=settings.redis_url)
    common = dict(
        code_ttl_seconds=settings.verification_code_ttl_seconds, registry=registry
    )
    if settings.code_delivery_mode == "webhook":
        _code_provider = WebhookCodeProvider(
            url=settings.delivery_webhook_url or "",
            timeout_seconds=settings.delivery_timeout_seconds,
            **common,
        )
    elif settings.code_delivery_mode == "memory":
        _code_provider = InMemoryCodeProvider(**common)
    else:
        logger.warning(
            "Using the fixed verification code provider; no codes are delivered."
        )
        _code_provider = FixedCodeProvider(
            code=settings.fixed_verification_code, **common
        )
    return _code_provider


def reset_backends() -> None:
    """Forget all singletons so the next request rebuilds them (tests)."""
    global _document_store, _storage_client, _session_store, _code_provider
    _document_store = None
    _storage_client = None
    _session_store = None
    _code_provider = None


def get_feedback_service(
    store: DocumentStore = Depends(get_document_store),
    sessions: SessionStore = Depends(get_session_store),
    provider: CodeDeliveryProvider = Depends(get_code_provider),
) -> FeedbackService:
    return FeedbackService(
        store=store,
        sessions=sessions,
        provider=provider,
        cooldown_seconds=get_settings().verification_cooldown_seconds,
    )


def get_workshop_service(
    store: DocumentStore = Depends(get_document_store),
) -> WorkshopService:
    return WorkshopService(store=store, public_base_url=get_settings().public_base_url)


def get_certificate_service(
    store: DocumentStore = Depends(get_document_store),
    storage: StorageClient = Depends(get_storage_client),
) -> CertificateTemplateService:
    return CertificateTemplateService(store=store, storage=storage)
