"""
Pytest configuration and fixtures.
"""
import os

# Settings are read at import time; point them at SQLite before teashop loads
os.environ["DATABASE_URL_OVERRIDE"] = "sqlite://"
os.environ["MOLLIE_API_KEY"] = "test_dummy_key"
os.environ["BREVO_API_KEY"] = ""
os.environ["APP_URL"] = "https://shop.test"
os.environ["DEBUG"] = "false"

import asyncio
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from teashop.core.database import Base, build_engine, get_db
from teashop.core.exceptions import DeliveryError, PaymentNotFound
from teashop.integrations.base import PaymentGateway, PaymentHandle
from teashop.models import (
    LoyaltyTransactionType,
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    Reward,
    RewardType,
    User,
)
from teashop.services.loyalty_service import LoyaltyService


class FakeGateway(PaymentGateway):
    """In-memory payment provider"""
    PROVIDER_NAME = "fake"

    def __init__(self):
        self.payments: Dict[str, PaymentHandle] = {}
        self.created: List[dict] = []
        self.get_calls: List[str] = []
        self.fail_with: Optional[Exception] = None
        self._counter = 0

    def add_payment(self, payment_id: str, status: str, order_id=None) -> PaymentHandle:
        metadata = {"orderId": str(order_id)} if order_id else {}
        payment = PaymentHandle(id=payment_id, status=status, metadata=metadata)
        self.payments[payment_id] = payment
        return payment

    async def create_payment(self, amount, description, order_id, redirect_url, method=None):
        if self.fail_with:
            raise self.fail_with
        self._counter += 1
        payment_id = f"tr_fake{self._counter}"
        self.created.append({
            "amount": amount,
            "description": description,
            "order_id": order_id,
            "redirect_url": redirect_url,
            "method": method,
        })
        payment = PaymentHandle(
            id=payment_id,
            status="open",
            amount=Decimal(amount),
            checkout_url=f"https://pay.test/{payment_id}",
            metadata={"orderId": str(order_id)},
        )
        self.payments[payment_id] = payment
        return payment

    async def get_payment(self, payment_id):
        self.get_calls.append(payment_id)
        await asyncio.sleep(0)
        if self.fail_with:
            raise self.fail_with
        if payment_id not in self.payments:
            raise PaymentNotFound(f"Payment {payment_id} not found")
        return self.payments[payment_id]


class RecordingNotifier:
    """Stands in for NotificationService"""
    enabled = True

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    async def send_order_confirmation(self, data):
        if self.fail:
            raise DeliveryError("SMTP down")
        self.sent.append(data)
        return True


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool, echo=False)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client(db, gateway, notifier):
    from main import app
    from teashop.api.deps import get_payment_gateway, get_notification_service

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_notification_service] = lambda: notifier

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(points: int = 0) -> User:
        counter["n"] += 1
        user = User(email=f"klant{counter['n']}@example.com", name=f"Klant {counter['n']}")
        db.add(user)
        db.flush()
        if points:
            LoyaltyService.apply(db, user, points, LoyaltyTransactionType.ADJUSTMENT, "Startsaldo")
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_order(db):
    counter = {"n": 0}

    def _make(
        user: Optional[User] = None,
        total: str = "5.00",
        points_earned: int = 50,
        points_redeemed: int = 0,
        payment_status: PaymentStatus = PaymentStatus.PENDING,
        status: OrderStatus = OrderStatus.PENDING,
        customer_email: str = "klant@example.com",
        payment_reference: Optional[str] = None,
    ) -> Order:
        counter["n"] += 1
        order = Order(
            order_number=f"YBT-TEST-{counter['n']:04d}",
            user_id=user.id if user else None,
            customer_name="Test Klant",
            customer_email=customer_email,
            pickup_time=datetime(2026, 10, 17, 14, 30),
            status=status,
            payment_status=payment_status,
            payment_reference=payment_reference,
            subtotal=Decimal(total),
            discount_amount=Decimal("0"),
            total=Decimal(total),
            points_earned=points_earned,
            points_redeemed=points_redeemed,
        )
        order.items.append(OrderItem(
            position=0,
            product_id="brown-sugar-milk-tea",
            product_name="Brown Sugar Milk Tea",
            quantity=1,
            unit_price=Decimal(total),
            total_price=Decimal(total),
            customizations={"sugarLevel": 50, "iceLevel": "less"},
        ))
        db.add(order)
        db.commit()
        db.refresh(order)
        return order

    return _make


@pytest.fixture
def make_reward(db):
    def _make(
        name: str = "Gratis topping",
        points_cost: int = 100,
        reward_type: RewardType = RewardType.FREE_TOPPING,
        reward_value: str = "0.80",
        is_available: bool = True,
    ) -> Reward:
        reward = Reward(
            slug=name.lower().replace(" ", "-"),
            name=name,
            points_cost=points_cost,
            reward_type=reward_type,
            reward_value=Decimal(reward_value),
            is_available=is_available,
        )
        db.add(reward)
        db.commit()
        db.refresh(reward)
        return reward

    return _make


@pytest.fixture
def pickup_time():
    return datetime.now() + timedelta(hours=2)
