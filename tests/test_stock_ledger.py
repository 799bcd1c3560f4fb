import pytest

from stockdesk.exceptions import ConflictError, InvalidRequestError, NotFoundError
from stockdesk.models.product import Product
from stockdesk.models.stock_movement import StockAction, StockMovement
from stockdesk.schemas.stock import StockUpdate
from stockdesk.services import ledger_service, movement_service, product_service


def _movements(db, product_id):
    return db.query(StockMovement).filter(StockMovement.product_id == product_id).all()


def _assert_invariant(product):
    assert product.stock_available == product.stock_total - product.stock_used


def test_new_product_starts_with_consistent_counters(product):
    assert product.stock_total == 100
    assert product.stock_used == 0
    assert product.stock_available == 100
    _assert_invariant(product)


def test_initial_stock_is_logged_as_add(db, product):
    movements = _movements(db, product.id)
    assert len(movements) == 1
    assert movements[0].action == "add"
    assert movements[0].quantity == 100
    assert movements[0].previous_stock == 0
    assert movements[0].new_stock == 100


def test_product_without_stock_has_no_movement(db, make_product):
    p = make_product(sku="EMPTY", stock_total=0)
    assert _movements(db, p.id) == []


def test_add_then_use_keeps_invariant_and_movements_balance(db, product):
    add = product_service.set_stock(db, product.id, StockUpdate(action="add", quantity=5))
    use = product_service.set_stock(db, product.id, StockUpdate(action="use", quantity=5))

    assert add.previous == 100 and add.new == 105
    assert use.previous == 105 and use.new == 100

    db.refresh(product)
    assert product.stock_total == 105
    assert product.stock_used == 5
    assert product.stock_available == 100
    _assert_invariant(product)

    manual = [m for m in _movements(db, product.id) if m.reason != "Initial stock on product creation"]
    assert sorted(m.quantity for m in manual) == [-5, 5]
    assert sum(m.quantity for m in manual) == 0


def test_use_beyond_available_goes_negative(db, make_product):
    p = make_product(sku="LOW", stock_total=3)
    change = product_service.set_stock(db, p.id, StockUpdate(action="use", quantity=5))
    assert change.new == -2
    db.refresh(p)
    assert p.stock_available == -2
    _assert_invariant(p)


def test_adjust_sets_total_and_logs_signed_delta(db, product):
    product_service.set_stock(db, product.id, StockUpdate(action="use", quantity=30))
    change = product_service.set_stock(db, product.id, StockUpdate(action="adjust", quantity=50, reason="stock take"))

    db.refresh(product)
    assert product.stock_total == 50
    assert product.stock_used == 30
    assert product.stock_available == 20
    assert change.previous == 70
    assert change.new == 20

    adjust = [m for m in _movements(db, product.id) if m.action == "adjust"]
    assert len(adjust) == 1
    assert adjust[0].quantity == -50
    assert adjust[0].reason == "stock take"


def test_adjust_can_leave_availability_negative(db, product):
    product_service.set_stock(db, product.id, StockUpdate(action="use", quantity=80))
    change = product_service.set_stock(db, product.id, StockUpdate(action="adjust", quantity=50))
    assert change.new == -30


def test_apply_stock_change_returns_none_for_missing_product(db):
    assert ledger_service.apply_stock_change(db, "missing", StockAction.ADD, 1) is None


def test_set_stock_missing_product(db):
    with pytest.raises(NotFoundError):
        product_service.set_stock(db, "missing", StockUpdate(action="add", quantity=1))


def test_set_stock_unknown_user_writes_nothing(db, product):
    with pytest.raises(NotFoundError):
        product_service.set_stock(db, product.id, StockUpdate(action="add", quantity=1, user_id="ghost"))
    db.refresh(product)
    assert product.stock_total == 100
    assert len(_movements(db, product.id)) == 1


def test_set_stock_records_actor(db, product, admin_user):
    product_service.set_stock(db, product.id, StockUpdate(action="add", quantity=1), user_id=admin_user.id)
    latest = movement_service.list_movements(db, product_id=product.id, limit=1)[0]
    assert latest.user_id == admin_user.id


def test_transfer_is_not_a_counter_action(product):
    with pytest.raises(InvalidRequestError):
        ledger_service.compute_counters(product, StockAction.TRANSFER, 1)


@pytest.mark.parametrize("action,quantity", [("add", 0), ("use", -1), ("adjust", -1), ("transfer", 1)])
def test_stock_update_rejects_bad_quantities(action, quantity):
    with pytest.raises(ValueError):
        StockUpdate(action=action, quantity=quantity)


def test_stale_product_version_raises_conflict(db, session_factory, product):
    other = session_factory()
    try:
        stale = other.get(Product, product.id)
        product_service.set_stock(db, product.id, StockUpdate(action="add", quantity=1))

        stale.stock_total += 1
        with pytest.raises(ConflictError):
            ledger_service.commit_stock(other)
    finally:
        other.close()
