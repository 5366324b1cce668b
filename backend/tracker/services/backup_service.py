"""
Export and import of the whole ledger as a JSON document.

Handles:
- Export of all three tables with app metadata
- Import that parses and validates the full document before touching the store
- Atomic replacement of every table present in the document
"""

import json
from datetime import datetime, timezone

import pydantic
import structlog

from ..config import APP_NAME, APP_VERSION
from ..errors import ImportFormatError
from ..schemas.backup import BackupBudget, BackupCategory, BackupDocument, BackupTransaction, ImportSummary
from ..store import RecordStore

logger = structlog.get_logger(__name__)


def backup_filename(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"{APP_NAME.lower()}-backup-{now.strftime('%Y-%m-%d')}.json"


class BackupService:
    """Service for exporting and importing the ledger."""

    def __init__(self, store: RecordStore):
        self.store = store

    def export_document(self) -> BackupDocument:
        transactions = [
            BackupTransaction(
                id=tx.id,
                amount=tx.amount,
                type=tx.type,
                category=tx.category,
                description=tx.description,
                date=tx.date,
                created_at=tx.created_at,
            )
            for tx in self.store.list("transactions")
        ]
        categories = [
            BackupCategory(id=c.id, name=c.name, icon=c.icon, color=c.color, type=c.type)
            for c in self.store.list("categories")
        ]
        budgets = [
            BackupBudget(
                id=b.id,
                category=b.category,
                amount=b.amount,
                period=b.period,
                created_at=b.created_at,
            )
            for b in self.store.list("budgets")
        ]
        return BackupDocument(
            transactions=transactions,
            categories=categories,
            budgets=budgets,
            exported_at=datetime.now(timezone.utc),
            app_version=APP_VERSION,
            app_name=APP_NAME,
        )

    def export_data(self) -> dict:
        """The export document as JSON-ready data with camelCase keys."""
        document = self.export_document().model_dump(mode="json", by_alias=True)
        logger.info(
            "ledger_exported",
            transactions=len(document["transactions"]),
            categories=len(document["categories"]),
            budgets=len(document["budgets"]),
        )
        return document

    @staticmethod
    def parse(raw: bytes | str | dict) -> BackupDocument:
        """
        Parse and validate an import document.

        Raises ImportFormatError for malformed JSON, a non-object top level,
        or any record of the wrong shape. Nothing has been written when it
        is raised.
        """
        if isinstance(raw, (bytes, str)):
            try:
                raw = json.loads(raw)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise ImportFormatError(f"File is not valid JSON: {e}") from e

        if not isinstance(raw, dict):
            raise ImportFormatError("Import file must contain a JSON object")

        try:
            return BackupDocument.model_validate(raw)
        except pydantic.ValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(p) for p in first["loc"])
            raise ImportFormatError(
                f"Invalid import file at {location}: {first['msg']} "
                f"({e.error_count()} problem(s))"
            ) from e

    def import_data(self, raw: bytes | str | dict) -> ImportSummary:
        """Replace each table present in the document, all in one transaction."""
        document = self.parse(raw)

        tables: dict[str, list[dict]] = {}
        if document.transactions is not None:
            tables["transactions"] = [
                t.model_dump(exclude_none=True) for t in document.transactions
            ]
        if document.categories is not None:
            tables["categories"] = [
                c.model_dump(exclude_none=True) for c in document.categories
            ]
        if document.budgets is not None:
            tables["budgets"] = [
                b.model_dump(exclude_none=True) for b in document.budgets
            ]

        if tables:
            self.store.replace_tables(tables)

        summary = ImportSummary(**{table: len(records) for table, records in tables.items()})
        logger.info("ledger_imported", **summary.model_dump(exclude_none=True))
        return summary
