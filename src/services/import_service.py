"""
Bulk import of linkding JSON exports.

Records are upserted one at a time, each inside its own savepoint and
committed right away. A bad record is skipped and reported; it never aborts
the import, and rerunning an interrupted import picks up where it stopped
because upserts are idempotent per URL.
"""
import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from schemas.transfer import ImportFailure, LinkdingRecord
from services.exceptions import InvalidInputError
from services.post_service import upsert_by_url

logger = logging.getLogger(__name__)

# linkding field name -> Post column
_FIELD_MAP = {
    "date_added": "created_at",
    "date_modified": "updated_at",
}


@dataclass
class ImportSummary:
    """Outcome of an import run."""

    imported: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    failures: list[ImportFailure] = field(default_factory=list)

    def skip(self, index: int, url: str | None, reason: str) -> None:
        """Record a skipped record."""
        self.skipped += 1
        self.failures.append(ImportFailure(index=index, url=url, reason=reason))


def load_import_document(text: str | bytes) -> list[Any]:
    """
    Parse an import document into its list of records.

    Accepts either a JSON array of bookmarks or linkding's paginated list
    response (an object with a ``results`` array).

    Raises:
        InvalidInputError: If the text isn't JSON or has neither shape.
    """
    try:
        document = json.loads(text)
    except ValueError as e:
        raise InvalidInputError(f"Import document is not valid JSON: {e}") from e
    return extract_records(document)


def extract_records(document: Any) -> list[Any]:
    """
    Get the record list out of an already decoded import document.

    Raises:
        InvalidInputError: If the document is neither a list nor has ``results``.
    """
    if isinstance(document, list):
        return document
    if isinstance(document, dict) and isinstance(document.get("results"), list):
        return document["results"]
    raise InvalidInputError(
        "Import document must be a JSON array or an object with a 'results' array",
    )


def _raw_url(record: object) -> str | None:
    """Best-effort URL of a raw record, for failure reports."""
    if isinstance(record, dict) and isinstance(record.get("url"), str):
        return record["url"]
    return None


def _describe(error: ValidationError) -> str:
    """Short human readable reason from a validation error."""
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    return f"{location}: {first['msg']}" if location else first["msg"]


def _upsert_fields(record: LinkdingRecord) -> dict[str, Any]:
    """Translate a parsed record into upsert_by_url fields."""
    data = record.model_dump(exclude_unset=True, exclude={"url"})
    return {_FIELD_MAP.get(key, key): value for key, value in data.items()}


async def import_posts(
    db: AsyncSession,
    records: Sequence[object],
) -> ImportSummary:
    """
    Upsert every valid record, in input order.

    Fields a record doesn't carry are left untouched on existing posts. When the
    input repeats a URL, the last record for it wins.

    Args:
        db: Database session. Committed after every record.
        records: Decoded JSON records (dicts); anything else is skipped.

    Returns:
        Counts of imported (created + updated) and skipped records, with the
        reason for each skip.
    """
    summary = ImportSummary()

    for index, raw in enumerate(records):
        try:
            record = LinkdingRecord.model_validate(raw)
        except ValidationError as e:
            reason = _describe(e)
            logger.warning("Skipping import record %d (%s): %s", index, _raw_url(raw), reason)
            summary.skip(index, _raw_url(raw), reason)
            continue

        try:
            async with db.begin_nested():
                _, created = await upsert_by_url(db, record.url, _upsert_fields(record))
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.warning("Skipping import record %d (%s): %s", index, record.url, e)
            summary.skip(index, record.url, f"database error: {e.__class__.__name__}")
            continue

        summary.imported += 1
        if created:
            summary.created += 1
        else:
            summary.updated += 1

    logger.info(
        "Import finished: %d imported (%d created, %d updated), %d skipped",
        summary.imported,
        summary.created,
        summary.updated,
        summary.skipped,
    )
    return summary
