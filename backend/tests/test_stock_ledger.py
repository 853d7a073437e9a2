"""Stock ledger: withdrawals, edits, returns and the stock they move."""
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import func

from models.movement import MovementState, ProductMovement
from models.product import Product
from models.types import QUANTITY_MAX
from utils import stock_ledger
from utils.errors import ErrorKind, StockError


@pytest.fixture
def employee(make_unit, make_employee):
    return make_employee(make_unit())


def _stock(db, product_id) -> Decimal:
    db.expire_all()
    return db.get(Product, product_id).quantity


def _assert_conserved(db, product_id, received):
    # On-hand plus outstanding is everything ever received
    assert _stock(db, product_id) + stock_ledger.outstanding_quantity(db, product_id) == Decimal(received)


class TestWithdrawAndReturn:

    def test_withdraw_then_return_round(self, db, make_product, employee):
        product = make_product(quantity="10")

        movement = stock_ledger.withdraw(db, product_id=product.id, employee_id=employee.id, quantity=4)
        assert _stock(db, product.id) == Decimal("6")
        assert movement.state == MovementState.OUTSTANDING

        with pytest.raises(StockError) as exc:
            stock_ledger.withdraw(db, product_id=product.id, employee_id=employee.id, quantity=7)
        assert exc.value.kind == ErrorKind.INSUFFICIENT_STOCK
        assert _stock(db, product.id) == Decimal("6")

        returned = stock_ledger.return_movement(db, movement.id)
        assert returned.state == MovementState.RETURNED
        assert _stock(db, product.id) == Decimal("10")

        with pytest.raises(StockError) as exc:
            stock_ledger.return_movement(db, movement.id)
        assert exc.value.kind == ErrorKind.ALREADY_RETURNED
        assert _stock(db, product.id) == Decimal("10")

    def test_exact_stock_can_be_withdrawn(self, db, make_product, employee):
        product = make_product(quantity="3")
        stock_ledger.withdraw(db, product_id=product.id, employee_id=employee.id, quantity="3")
        assert _stock(db, product.id) == Decimal("0")

    def test_fractional_quantities_do_not_drift(self, db, make_product, employee):
        product = make_product(quantity="1")
        movements = [
            stock_ledger.withdraw(db, product_id=product.id, employee_id=employee.id, quantity="0.1")
            for _ in range(10)
        ]
        assert _stock(db, product.id) == Decimal("0")

        for m in movements[:3]:
            stock_ledger.return_movement(db, m.id)
        assert _stock(db, product.id) == Decimal("0.3")
        _assert_conserved(db, product.id, "1")

    def test_failed_withdrawal_creates_no_movement(self, db, make_product, employee):
        product = make_product(quantity="1")
        with pytest.raises(StockError):
            stock_ledger.withdraw(db, product_id=product.id, employee_id=employee.id, quantity=2)
        assert db.query(func.count(ProductMovement.id)).scalar() == 0

    @pytest.mark.parametrize("quantity", [0, -1, "abc", "0.0001", "1E+30", "10000000000000000", "NaN"])
    def test_invalid_quantities(self, db, make_product, employee, quantity):
        product = make_product(quantity="10")
        with pytest.raises(StockError) as exc:
            stock_ledger.withdraw(db, product_id=product.id, employee_id=employee.id, quantity=quantity)
        assert exc.value.kind == ErrorKind.INVALID_QUANTITY
        assert _stock(db, product.id) == Decimal("10")

    def test_receiving_stops_at_the_storable_ceiling(self, db, make_product):
        product = make_product(quantity=str(QUANTITY_MAX - 1))

        with pytest.raises(StockError) as exc:
            stock_ledger.receive(db, product.id, 2)
        assert exc.value.kind == ErrorKind.INVALID_QUANTITY

        stock_ledger.receive(db, product.id, 1)
        assert _stock(db, product.id) == QUANTITY_MAX

    def test_unknown_product_and_employee(self, db, make_product, employee):
        with pytest.raises(StockError) as exc:
            stock_ledger.withdraw(db, product_id=999, employee_id=employee.id, quantity=1)
        assert exc.value.kind == ErrorKind.NOT_FOUND

        product = make_product()
        with pytest.raises(StockError) as exc:
            stock_ledger.withdraw(db, product_id=product.id, employee_id=999, quantity=1)
        assert exc.value.kind == ErrorKind.NOT_FOUND

    def test_inactive_product_cannot_be_withdrawn(self, db, make_product, employee):
        product = make_product(is_active=False)
        with pytest.raises(StockError) as exc:
            stock_ledger.withdraw(db, product_id=product.id, employee_id=employee.id, quantity=1)
        assert exc.value.kind == ErrorKind.NOT_FOUND

    def test_return_of_unknown_movement(self, db):
        with pytest.raises(StockError) as exc:
            stock_ledger.return_movement(db, 12345)
        assert exc.value.kind == ErrorKind.NOT_FOUND

    def test_return_date_is_recorded(self, db, make_product, employee):
        product = make_product()
        movement = stock_ledger.withdraw(db, product_id=product.id, employee_id=employee.id, quantity=1)
        when = datetime(2026, 3, 1, 8, 30, tzinfo=timezone.utc)

        returned = stock_ledger.return_movement(db, movement.id, when)

        assert returned.return_date.replace(tzinfo=None) == when.replace(tzinfo=None)

    def test_observation_is_uppercased(self, db, make_product, employee):
        product = make_product()
        movement = stock_ledger.withdraw(db, product_id=product.id, employee_id=employee.id,
                                         quantity=1, observation="lost gloves")
        assert movement.observation == "LOST GLOVES"


class TestUpdateMovement:

    def test_increase_takes_only_the_difference(self, db, make_product, employee):
        product = make_product(quantity="10")
        movement = stock_ledger.withdraw(db, product_id=product.id, employee_id=employee.id, quantity=4)

        stock_ledger.update_movement(db, movement.id, quantity=7)

        assert _stock(db, product.id) == Decimal("3")
        _assert_conserved(db, product.id, "10")

    def test_decrease_gives_back_the_difference(self, db, make_product, employee):
        product = make_product(quantity="10")
        movement = stock_ledger.withdraw(db, product_id=product.id, employee_id=employee.id, quantity=4)

        stock_ledger.update_movement(db, movement.id, quantity="1.5")

        assert _stock(db, product.id) == Decimal("8.5")

    def test_update_beyond_stock_leaves_everything_unchanged(self, db, make_product, employee):
        product = make_product(quantity="10")
        movement = stock_ledger.withdraw(db, product_id=product.id, employee_id=employee.id, quantity=4)

        # 6 on hand + 4 restored = 10 available, 11 is too many
        with pytest.raises(StockError) as exc:
            stock_ledger.update_movement(db, movement.id, quantity=11)
        assert exc.value.kind == ErrorKind.INSUFFICIENT_STOCK

        assert _stock(db, product.id) == Decimal("6")
        assert db.get(ProductMovement, movement.id).quantity == Decimal("4")

    def test_changing_product_moves_stock_between_products(self, db, make_product, employee):
        helmet = make_product(code="HELMET", quantity="5")
        boots = make_product(code="BOOTS", quantity="5")
        movement = stock_ledger.withdraw(db, product_id=helmet.id, employee_id=employee.id, quantity=2)

        stock_ledger.update_movement(db, movement.id, product_id=boots.id, quantity=3)

        assert _stock(db, helmet.id) == Decimal("5")
        assert _stock(db, boots.id) == Decimal("2")

    def test_returned_movement_cannot_be_edited(self, db, make_product, employee):
        product = make_product(quantity="10")
        movement = stock_ledger.withdraw(db, product_id=product.id, employee_id=employee.id, quantity=4)
        stock_ledger.return_movement(db, movement.id)

        with pytest.raises(StockError) as exc:
            stock_ledger.update_movement(db, movement.id, quantity=1)
        assert exc.value.kind == ErrorKind.ALREADY_RETURNED
        assert _stock(db, product.id) == Decimal("10")

    def test_metadata_only_edit_keeps_stock(self, db, make_product, employee):
        product = make_product(quantity="10")
        movement = stock_ledger.withdraw(db, product_id=product.id, employee_id=employee.id, quantity=4)

        updated = stock_ledger.update_movement(db, movement.id, observation="size xl", photo_url="/p/1.jpg")

        assert updated.observation == "SIZE XL"
        assert updated.photo_url == "/p/1.jpg"
        assert _stock(db, product.id) == Decimal("6")


class TestDeleteMovement:

    def test_deleting_outstanding_movement_restores_stock(self, db, make_product, employee):
        product = make_product(quantity="10")
        movement = stock_ledger.withdraw(db, product_id=product.id, employee_id=employee.id, quantity=4)

        stock_ledger.delete_movement(db, movement.id)

        assert _stock(db, product.id) == Decimal("10")
        assert stock_ledger.outstanding_quantity(db, product.id) == Decimal("0")

    def test_deleting_returned_movement_keeps_stock(self, db, make_product, employee):
        product = make_product(quantity="10")
        movement = stock_ledger.withdraw(db, product_id=product.id, employee_id=employee.id, quantity=4)
        stock_ledger.return_movement(db, movement.id)

        stock_ledger.delete_movement(db, movement.id)

        assert _stock(db, product.id) == Decimal("10")

    def test_deleted_movement_cannot_be_returned(self, db, make_product, employee):
        product = make_product(quantity="10")
        movement = stock_ledger.withdraw(db, product_id=product.id, employee_id=employee.id, quantity=4)
        stock_ledger.delete_movement(db, movement.id)

        with pytest.raises(StockError) as exc:
            stock_ledger.return_movement(db, movement.id)
        assert exc.value.kind == ErrorKind.NOT_FOUND
        assert _stock(db, product.id) == Decimal("10")
