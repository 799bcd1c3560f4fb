"""Bulk product creation from spreadsheet exports.

Headers are matched case-insensitively; several spellings map to the
same field because exports come from different tools. Rows that fail
validation or collide with an existing SKU are skipped.
"""

import csv
import io
import logging
import uuid
from datetime import datetime, timezone

from pydantic import ValidationError
from sqlalchemy.orm import Session

from stockdesk.exceptions import ServiceError
from stockdesk.models.product import Product
from stockdesk.schemas.product import ProductCreate
from stockdesk.services import product_service, warehouse_service

logger = logging.getLogger(__name__)

# field -> accepted header spellings, first match wins
COLUMN_ALIASES = {
    "name": ["name", "list of items"],
    "sku": ["sku", "crystal part code", "mfg part code"],
    "description": ["description"],
    "type": ["type", "group name"],
    "price": ["price"],
    "stock_total": ["stock", "stock_total", "current stock available"],
    "min_stock_level": ["min_stock_level", "minimum inventory per day"],
    "image_url": ["image url", "image_url"],
}


def _fallback_sku() -> str:
    ts = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    return f"SKU-{ts}-{uuid.uuid4().hex[:5].upper()}"


def _to_int(value: str | None) -> int:
    """Leading-integer parse; blanks and junk count as 0."""
    if not value:
        return 0
    try:
        return int(float(value))
    except ValueError:
        return 0


def _parse_rows(text: str) -> tuple[list[str], list[list[str]]]:
    reader = csv.reader(io.StringIO(text.lstrip("\ufeff")))
    rows = [[cell.strip() for cell in row] for row in reader]
    rows = [row for row in rows if any(row)]
    if not rows:
        return [], []
    header = [h.lower() for h in rows[0]]
    return header, rows[1:]


def _row_to_product(header: list[str], row: list[str], warehouse_id: str | None) -> ProductCreate:
    def get(field: str) -> str | None:
        for alias in COLUMN_ALIASES[field]:
            if alias in header:
                idx = header.index(alias)
                value = row[idx] if idx < len(row) else ""
                if value:
                    return value
        return None

    sku = get("sku")
    min_level = get("min_stock_level")
    return ProductCreate(
        sku=sku or _fallback_sku(),
        name=get("name") or sku or "Unnamed Product",
        description=get("description") or "",
        type=get("type") or "General",
        price=get("price"),
        image_url=get("image_url") or "",
        stock_total=_to_int(get("stock_total")),
        min_stock_level=_to_int(min_level) if min_level else None,
        warehouse_id=warehouse_id,
    )


def import_products_csv(db: Session, text: str, warehouse_id: str | None = None) -> list[Product]:
    if warehouse_id:
        warehouse_service.require_warehouse(db, warehouse_id)

    header, rows = _parse_rows(text)
    created: list[Product] = []
    for row_num, row in enumerate(rows, start=2):
        try:
            data = _row_to_product(header, row, warehouse_id)
            created.append(product_service.create_product(db, data))
        except (ValidationError, ServiceError) as exc:
            db.rollback()
            logger.info("CSV import: skipped row %d: %s", row_num, exc)

    logger.info("CSV import: %d of %d row(s) imported", len(created), len(rows))
    return created
