import re
import uuid
from decimal import Decimal

import pytest

from teashop.core.exceptions import InsufficientPoints, MissingInput, UserNotFound
from teashop.models import LoyaltyTransaction, LoyaltyTransactionType, Order, OrderStatus, PaymentStatus
from teashop.schemas.order import OrderCreate
from teashop.services.order_service import (
    OrderService,
    calculate_points_earned,
    generate_order_number,
)


def _order_data(pickup_time, **overrides):
    data = {
        "items": [
            {
                "product_id": "taro-milk-tea",
                "product_name": "Taro Milk Tea",
                "quantity": 2,
                "unit_price": "4.50",
                "customizations": {"sugarLevel": 75, "toppings": [{"name": "Boba"}]},
            },
            {
                "product_id": "mango-fruit-tea",
                "product_name": "Mango Fruit Tea",
                "quantity": 1,
                "unit_price": "5.25",
            },
        ],
        "customer_name": "An Peeters",
        "customer_email": "an@example.com",
        "pickup_time": pickup_time,
    }
    data.update(overrides)
    return OrderCreate(**data)


def test_order_number_format():
    number = generate_order_number()
    assert re.fullmatch(r"YBT-[0-9A-Z]+-[0-9A-Z]{4}", number)
    assert generate_order_number() != number


@pytest.mark.parametrize("total, points", [
    ("0.00", 0),
    ("4.59", 45),
    ("14.25", 142),
    ("20.00", 200),
])
def test_points_earned_rounds_down(total, points):
    assert calculate_points_earned(Decimal(total)) == points


def test_create_guest_order(db, pickup_time):
    order = OrderService.create_order(db, _order_data(pickup_time))

    assert order.status == OrderStatus.PENDING
    assert order.payment_status == PaymentStatus.PENDING
    assert order.user_id is None
    assert order.subtotal == Decimal("14.25")
    assert order.total == Decimal("14.25")
    assert order.points_earned == 142
    assert order.points_redeemed == 0
    assert [i.product_name for i in order.items] == ["Taro Milk Tea", "Mango Fruit Tea"]
    assert order.items[0].total_price == Decimal("9.00")
    assert order.items[0].customizations["toppings"] == [{"name": "Boba"}]
    assert OrderService.get_order_by_number(db, order.order_number).id == order.id


def test_create_order_redeeming_points(db, make_user, pickup_time):
    user = make_user(points=600)

    order = OrderService.create_order(db, _order_data(pickup_time, user_id=user.id, points_to_redeem=250))

    db.expire_all()
    assert order.points_redeemed == 250
    assert order.discount_amount == Decimal("2.50")
    assert order.total == Decimal("11.75")
    assert order.points_earned == 117
    assert user.loyalty_points == 350

    redeem = db.query(LoyaltyTransaction).filter_by(type=LoyaltyTransactionType.REDEEM).one()
    assert redeem.points == -250
    assert redeem.order_id == order.id


def test_redemption_is_capped_at_subtotal(db, make_user, pickup_time):
    user = make_user(points=5000)

    order = OrderService.create_order(db, _order_data(pickup_time, user_id=user.id, points_to_redeem=5000))

    db.expire_all()
    assert order.points_redeemed == 1425
    assert order.total == Decimal("0.00")
    assert user.loyalty_points == 3575


def test_redeeming_more_than_balance_creates_nothing(db, make_user, pickup_time):
    user = make_user(points=100)

    with pytest.raises(InsufficientPoints):
        OrderService.create_order(db, _order_data(pickup_time, user_id=user.id, points_to_redeem=300))

    db.expire_all()
    assert db.query(Order).count() == 0
    assert user.loyalty_points == 100


def test_guest_cannot_redeem_points(db, pickup_time):
    with pytest.raises(MissingInput):
        OrderService.create_order(db, _order_data(pickup_time, points_to_redeem=10))


def test_unknown_user_is_rejected(db, pickup_time):
    with pytest.raises(UserNotFound):
        OrderService.create_order(db, _order_data(pickup_time, user_id=uuid.uuid4()))


def test_transition_payment_only_wins_once(db, make_order):
    order = make_order()

    first = OrderService.transition_payment(
        db, order, (PaymentStatus.PENDING,), PaymentStatus.PAID, OrderStatus.PAID, "tr_1"
    )
    db.commit()
    second = OrderService.transition_payment(
        db, order, (PaymentStatus.PENDING,), PaymentStatus.PAID, OrderStatus.PAID, "tr_1"
    )
    db.rollback()

    assert first == PaymentStatus.PENDING
    assert second is None
    assert order.payment_status == PaymentStatus.PAID
    assert order.payment_reference == "tr_1"
