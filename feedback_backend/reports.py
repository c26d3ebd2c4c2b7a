"""
Aggregate numbers for the admin dashboard and flat exports of the workshops
and submissions collections.
"""

from __future__ import annotations

import csv
import io
from datetime import datetime, timezone
from typing import Literal

from feedback_shared.api import AnalyticsData, WorkshopStats
from feedback_shared.constants import SUBMISSIONS_COLLECTION, WORKSHOPS_COLLECTION
from feedback_shared.interfaces import Document, DocumentStore

ExportKind = Literal["workshops", "submissions"]

TIMESTAMP_FIELDS = ("created_at", "updated_at", "submitted_at")


def _percent(part: int, whole: int) -> int:
    return round(part / whole * 100) if whole else 0


def compute_analytics(
    workshops: list[Document], submissions: list[Document]
) -> AnalyticsData:
    with_feedback = [s for s in submissions if s.data.get("feedback")]
    by_workshop = []
    for workshop in workshops:
        own = [s for s in submissions if s.data.get("workshop_id") == workshop.id]
        own_with_feedback = [s for s in own if s.data.get("feedback")]
        by_workshop.append(
            WorkshopStats(
                workshop_id=workshop.id,
                workshop_name=workshop.data.get("workshop_name", ""),
                count=len(own),
                completion_rate=_percent(len(own_with_feedback), len(own)),
            )
        )
    return AnalyticsData(
        total_workshops=len(workshops),
        active_workshops=sum(1 for w in workshops if w.data.get("is_active")),
        total_submissions=len(submissions),
        completion_rate=_percent(len(with_feedback), len(submissions)),
        submissions_by_workshop=by_workshop,
    )


def load_analytics(store: DocumentStore) -> AnalyticsData:
    return compute_analytics(
        store.list_all(WORKSHOPS_COLLECTION), store.list_all(SUBMISSIONS_COLLECTION)
    )


def _export_row(doc: Document) -> dict:
    row = doc.as_dict()
    for name in TIMESTAMP_FIELDS:
        value = row.get(name)
        if isinstance(value, (int, float)):
            row[name] = datetime.fromtimestamp(value, tz=timezone.utc).isoformat()
    return row


def export_csv(store: DocumentStore, kind: ExportKind) -> str:
    collection = WORKSHOPS_COLLECTION if kind == "workshops" else SUBMISSIONS_COLLECTION
    rows = [_export_row(doc) for doc in store.list_all(collection)]

    fieldnames = ["id"]
    for row in rows:
        fieldnames.extend(key for key in row if key not in fieldnames)

    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=fieldnames, extrasaction="ignore")
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue()


def export_filename(kind: ExportKind, today: datetime | None = None) -> str:
    today = today or datetime.now(timezone.utc)
    return f"{kind}-export-{today.strftime('%Y-%m-%d')}.csv"
