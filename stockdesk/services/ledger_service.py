"""Product ledger: the only writer of a product's stock counters.

Every change recomputes ``stock_total``, ``stock_used`` and
``stock_available`` together so that ``stock_available ==
stock_total - stock_used`` holds after each write. There is no floor at
zero: a ``use`` larger than the available stock drives availability
negative, which the order engine treats as an oversell.

Functions here only mutate the session; the calling service commits
through :func:`commit_stock` so a whole multi-step sequence lands in one
transaction.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from stockdesk.exceptions import ConflictError, InvalidRequestError
from stockdesk.models.product import Product
from stockdesk.models.stock_movement import StockAction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockChange:
    previous: int
    new: int

    @property
    def delta(self) -> int:
        return self.new - self.previous


def lock_product(db: Session, product_id: str) -> Product | None:
    """Load a product with a row lock (ignored by SQLite, honoured by PostgreSQL)."""
    return db.query(Product).filter(Product.id == product_id).with_for_update().first()


def compute_counters(product: Product, action: StockAction, quantity: int) -> tuple[int, int, int]:
    """Return the (total, used, available) triple ``action`` would produce."""
    total = product.stock_total
    used = product.stock_used
    if action == StockAction.ADD:
        total += quantity
    elif action == StockAction.USE:
        used += quantity
    elif action == StockAction.ADJUST:
        total = quantity
    else:
        raise InvalidRequestError(f"Action '{action}' does not change stock counters")
    return total, used, total - used


def apply_stock_change(db: Session, product_id: str, action: StockAction, quantity: int) -> StockChange | None:
    """Apply ``action`` to a product's counters.

    Returns ``None`` when the product does not exist; callers check
    existence before recording a movement.
    """
    product = lock_product(db, product_id)
    if not product:
        return None

    previous = product.stock_available
    total, used, available = compute_counters(product, StockAction(action), quantity)
    product.stock_total = total
    product.stock_used = used
    product.stock_available = available

    logger.debug(
        "Stock %s %s x%d: available %d -> %d (total=%d used=%d)",
        action, product.sku, quantity, previous, available, total, used,
    )
    return StockChange(previous=previous, new=available)


def commit_stock(db: Session) -> None:
    """Commit pending stock writes, turning a lost version race into ConflictError."""
    try:
        db.commit()
    except StaleDataError as exc:
        db.rollback()
        logger.warning("Concurrent stock update rejected: %s", exc)
        raise ConflictError("Stock was modified by another request; retry") from exc
