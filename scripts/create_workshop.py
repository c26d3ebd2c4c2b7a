"""
CLI helper to create a workshop and print its public feedback link.

Uses the same document store configuration as the API (DATABASE_URL).
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from feedback_backend.config import get_settings
from feedback_backend.dependencies import get_document_store
from feedback_backend.workshops import WorkshopService, WorkshopValidationError

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a feedback workshop")
    parser.add_argument("--workshop-name", required=True)
    parser.add_argument("--college-name", required=True)
    parser.add_argument("--date", required=True, help="YYYY-MM-DD")
    parser.add_argument("--time", required=True, help="HH:MM")
    parser.add_argument(
        "--instructions",
        default="",
        help="Instructions shown to attendees (HTML allowed)",
    )
    parser.add_argument(
        "--instructions-file",
        type=Path,
        help="Read instructions from a file instead",
    )
    parser.add_argument(
        "--active",
        action="store_true",
        help="Open the workshop for feedback immediately",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)

    instructions = args.instructions
    if args.instructions_file:
        instructions = args.instructions_file.read_text(encoding="utf-8")

    service = WorkshopService(
        store=get_document_store(), public_base_url=get_settings().public_base_url
    )
    try:
        workshop = service.create(
            {
                "workshop_name": args.workshop_name,
                "college_name": args.college_name,
                "date": args.date,
                "time": args.time,
                "instructions": instructions,
                "is_active": args.active,
            }
        )
    except WorkshopValidationError as e:
        for field_name, message in e.errors.items():
            print(f"{field_name}: {message}", file=sys.stderr)
        return 1

    if not get_settings().database_url:
        logger.warning("DATABASE_URL is not set; the workshop was kept in memory only.")

    print(f"Workshop id:   {workshop.id}")
    print(f"Public link:   {workshop.unique_link}")
    print(f"Feedback URL:  {service.feedback_url(workshop)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
