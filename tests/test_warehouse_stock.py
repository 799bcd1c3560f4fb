import pytest

from stockdesk.exceptions import InvalidRequestError, NotFoundError
from stockdesk.models.stock_movement import StockMovement
from stockdesk.schemas.product import ProductCreate
from stockdesk.schemas.stock import StockTransfer
from stockdesk.schemas.warehouse import BinLocation
from stockdesk.services import product_service, warehouse_service


@pytest.fixture
def warehouses(make_warehouse):
    return make_warehouse("North", "Dock 1"), make_warehouse("South", "Dock 2")


def test_set_quantity_creates_then_updates_one_row(db, product, warehouses):
    north, _ = warehouses
    row = warehouse_service.set_quantity(db, product.id, north.id, 40, BinLocation(aisle="A", rack="3", box_number="12"))
    assert row.quantity == 40
    assert (row.aisle, row.rack, row.box_number) == ("A", "3", "12")

    again = warehouse_service.set_quantity(db, product.id, north.id, 25)
    assert again.id == row.id
    assert again.quantity == 25
    assert again.aisle == "A"
    assert len(warehouse_service.list_stock_for_product(db, product.id)) == 1


def test_set_quantity_leaves_ledger_alone(db, product, warehouses):
    north, _ = warehouses
    warehouse_service.set_quantity(db, product.id, north.id, 999)
    db.refresh(product)
    assert product.stock_total == 100
    assert product.stock_available == 100


def test_set_quantity_unknown_refs(db, product, warehouses):
    north, _ = warehouses
    with pytest.raises(NotFoundError):
        warehouse_service.set_quantity(db, "missing", north.id, 1)
    with pytest.raises(NotFoundError):
        warehouse_service.set_quantity(db, product.id, "missing", 1)


def test_initial_stock_placed_in_warehouse(db, warehouses):
    north, _ = warehouses
    p = product_service.create_product(db, ProductCreate(sku="PLACED", name="Placed", stock_total=12, warehouse_id=north.id))
    rows = warehouse_service.list_stock_for_product(db, p.id)
    assert [(r.warehouse_id, r.quantity) for r in rows] == [(north.id, 12)]


def test_transfer_moves_quantity_and_logs(db, product, warehouses):
    north, south = warehouses
    warehouse_service.set_quantity(db, product.id, north.id, 30)

    dest = warehouse_service.transfer_stock(
        db, product.id, StockTransfer(from_warehouse_id=north.id, to_warehouse_id=south.id, quantity=12)
    )
    assert dest.warehouse_id == south.id
    assert dest.quantity == 12
    assert warehouse_service.get_stock_row(db, product.id, north.id).quantity == 18

    db.refresh(product)
    assert product.stock_available == 100

    movement = db.query(StockMovement).filter(StockMovement.action == "transfer").one()
    assert movement.quantity == 12
    assert movement.previous_stock == movement.new_stock == 100
    assert movement.warehouse_id == north.id


def test_transfer_more_than_held_is_rejected(db, product, warehouses):
    north, south = warehouses
    warehouse_service.set_quantity(db, product.id, north.id, 5)
    with pytest.raises(InvalidRequestError):
        warehouse_service.transfer_stock(
            db, product.id, StockTransfer(from_warehouse_id=north.id, to_warehouse_id=south.id, quantity=6)
        )
    db.rollback()
    assert warehouse_service.get_stock_row(db, product.id, north.id).quantity == 5
    assert warehouse_service.get_stock_row(db, product.id, south.id) is None


def test_transfer_from_empty_warehouse(db, product, warehouses):
    north, south = warehouses
    with pytest.raises(InvalidRequestError):
        warehouse_service.transfer_stock(
            db, product.id, StockTransfer(from_warehouse_id=north.id, to_warehouse_id=south.id, quantity=1)
        )


def test_transfer_to_same_warehouse_is_invalid():
    with pytest.raises(ValueError):
        StockTransfer(from_warehouse_id="w1", to_warehouse_id="w1", quantity=1)


def test_list_warehouses_sorted_by_name(db, make_warehouse):
    make_warehouse("Zeta")
    make_warehouse("Alpha")
    assert [w.name for w in warehouse_service.list_warehouses(db)] == ["Alpha", "Zeta"]
