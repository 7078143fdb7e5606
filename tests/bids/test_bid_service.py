"""
Tests unitaires du BidService (cycle de vie) avec repositories simulés.
"""
from datetime import date, datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from deals.auth.exceptions import ForbiddenException, UnauthenticatedException
from deals.auth.guard import Actor
from deals.bids.events import BidCancelled, BidEventBus, BidStatusChanged
from deals.bids.exceptions import (
    BidNotFoundException,
    BiddingClosedException,
    DiscountExceedsMaximumException,
    InvalidBidTransitionException,
)
from deals.bids.models import BidCreate, BidRead, BidStatus, BidTerms
from deals.bids.service import BidService
from deals.products.exceptions import LotNotFoundException
from deals.products.models import ProductLotRead

pytestmark = pytest.mark.asyncio

BUYER = Actor(user_id=7, email="buyer@example.com", is_admin=False)
OTHER_BUYER = Actor(user_id=8, email="other@example.com", is_admin=False)
ADMIN = Actor(user_id=1, email="admin@example.com", is_admin=True)


def make_bid(status: BidStatus = BidStatus.PENDING, **overrides) -> BidRead:
    data = {
        "id": 42,
        "user_id": BUYER.user_id,
        "user_email": BUYER.email,
        "product_id": 3,
        "product_name": "Crunchy Granola Bars 12ct",
        "quantity": 50,
        "bid_price": Decimal("8.00"),
        "regular_price": Decimal("10.00"),
        "discount_percent": Decimal("20.0000"),
        "total_value": Decimal("400.00"),
        "status": status,
        "created_at": datetime(2024, 5, 1, tzinfo=timezone.utc),
    }
    data.update(overrides)
    return BidRead(**data)


def make_lot(**overrides) -> ProductLotRead:
    data = {
        "id": 3,
        "category": "Snacks",
        "description": "Crunchy Granola Bars 12ct",
        "case_quantity": 12,
        "quantity_available": 100,
        "close_bid_date": date(2030, 6, 30),
        "regular_price": Decimal("10.00"),
        "max_discount_percent": Decimal("30"),
    }
    data.update(overrides)
    return ProductLotRead(**data)


@pytest.fixture
def bid_repo():
    return AsyncMock()

@pytest.fixture
def lot_repo():
    repo = AsyncMock()
    repo.get_by_id.return_value = make_lot()
    return repo

@pytest.fixture
def event_bus():
    bus = BidEventBus()
    bus.published = []

    async def record(event):
        bus.published.append(event)

    bus.subscribe(BidStatusChanged, record)
    bus.subscribe(BidCancelled, record)
    return bus

@pytest.fixture
def bid_service(bid_repo, lot_repo, event_bus):
    return BidService(
        bid_repo=bid_repo,
        lot_repo=lot_repo,
        event_bus=event_bus,
        today=lambda: date(2030, 1, 1),
    )

# --- Soumission ---

async def test_submit_bid_creates_pending_bid_with_snapshot(bid_service, bid_repo):
    bid_repo.add.side_effect = lambda bid_data: make_bid(**{k: v for k, v in bid_data.items() if k in ("quantity", "bid_price")})

    created = await bid_service.submit_bid(BidCreate(product_id=3, quantity=50, bid_price=Decimal("8.00")), BUYER)

    assert created.status == BidStatus.PENDING
    bid_data = bid_repo.add.call_args.kwargs["bid_data"]
    assert bid_data["user_id"] == BUYER.user_id
    assert bid_data["user_email"] == BUYER.email
    assert bid_data["product_name"] == "Crunchy Granola Bars 12ct"
    assert bid_data["regular_price"] == Decimal("10.00")
    assert bid_data["discount_percent"] == Decimal("20.0000")
    assert bid_data["total_value"] == Decimal("400.00")
    assert bid_data["status"] == "pending"

async def test_submit_bid_rejected_by_validator_creates_nothing(bid_service, bid_repo):
    with pytest.raises(DiscountExceedsMaximumException):
        await bid_service.submit_bid(BidCreate(product_id=3, quantity=10, bid_price=Decimal("6.00")), BUYER)
    bid_repo.add.assert_not_called()

async def test_submit_bid_unknown_lot(bid_service, lot_repo, bid_repo):
    lot_repo.get_by_id.return_value = None
    with pytest.raises(LotNotFoundException):
        await bid_service.submit_bid(BidCreate(product_id=99, quantity=1, bid_price=Decimal("9")), BUYER)
    bid_repo.add.assert_not_called()

async def test_submit_bid_after_close_date(bid_service, lot_repo):
    lot_repo.get_by_id.return_value = make_lot(close_bid_date=date(2029, 12, 31))
    with pytest.raises(BiddingClosedException):
        await bid_service.submit_bid(BidCreate(product_id=3, quantity=1, bid_price=Decimal("9")), BUYER)

async def test_close_date_not_enforced_when_disabled(bid_repo, lot_repo, event_bus):
    service = BidService(bid_repo, lot_repo, event_bus, enforce_close_bid_date=False, today=lambda: date(2099, 1, 1))
    bid_repo.add.return_value = make_bid()
    await service.submit_bid(BidCreate(product_id=3, quantity=1, bid_price=Decimal("9")), BUYER)
    bid_repo.add.assert_awaited_once()

async def test_submit_bid_requires_identity(bid_service):
    with pytest.raises(UnauthenticatedException):
        await bid_service.submit_bid(BidCreate(product_id=3, quantity=1, bid_price=Decimal("9")), None)

async def test_create_bid_without_owner(bid_service):
    terms = BidTerms(quantity=1, unit_price=Decimal("9"), discount_percent=Decimal("10"), total_value=Decimal("9.00"))
    with pytest.raises(UnauthenticatedException):
        await bid_service.create_bid(terms, None, make_lot())

# --- Décision ---

async def test_admin_approves_pending_bid(bid_service, bid_repo, event_bus):
    bid_repo.get_by_id.return_value = make_bid(BidStatus.PENDING)
    bid_repo.update_status_if.return_value = make_bid(BidStatus.APPROVED)

    updated = await bid_service.decide_bid(42, BidStatus.APPROVED, ADMIN)

    assert updated.status == BidStatus.APPROVED
    bid_repo.update_status_if.assert_awaited_once_with(
        bid_id=42, expected_status=BidStatus.PENDING, new_status=BidStatus.APPROVED
    )
    assert len(event_bus.published) == 1
    event = event_bus.published[0]
    assert isinstance(event, BidStatusChanged)
    assert event.previous_status == BidStatus.PENDING
    assert event.new_status == BidStatus.APPROVED

async def test_non_admin_cannot_decide(bid_service, bid_repo, event_bus):
    with pytest.raises(ForbiddenException):
        await bid_service.decide_bid(42, BidStatus.APPROVED, BUYER)
    bid_repo.update_status_if.assert_not_called()
    assert event_bus.published == []

async def test_decision_on_already_decided_bid(bid_service, bid_repo, event_bus):
    bid_repo.get_by_id.return_value = make_bid(BidStatus.REJECTED)

    with pytest.raises(InvalidBidTransitionException) as exc_info:
        await bid_service.decide_bid(42, BidStatus.APPROVED, ADMIN)

    assert exc_info.value.reason == "InvalidTransition"
    assert exc_info.value.current_status == "rejected"
    bid_repo.update_status_if.assert_not_called()
    assert event_bus.published == []

async def test_second_identical_decision_is_rejected(bid_service, bid_repo, event_bus):
    bid_repo.get_by_id.return_value = make_bid(BidStatus.APPROVED)
    with pytest.raises(InvalidBidTransitionException):
        await bid_service.decide_bid(42, BidStatus.APPROVED, ADMIN)
    assert event_bus.published == []

async def test_decision_to_pending_is_not_a_transition(bid_service, bid_repo):
    bid_repo.get_by_id.return_value = make_bid(BidStatus.PENDING)
    with pytest.raises(InvalidBidTransitionException):
        await bid_service.decide_bid(42, BidStatus.PENDING, ADMIN)
    bid_repo.update_status_if.assert_not_called()

async def test_concurrent_decision_loses_compare_and_swap(bid_service, bid_repo, event_bus):
    """La lecture voit 'pending' mais une autre décision a été écrite entre-temps."""
    bid_repo.get_by_id.side_effect = [make_bid(BidStatus.PENDING), make_bid(BidStatus.REJECTED)]
    bid_repo.update_status_if.return_value = None

    with pytest.raises(InvalidBidTransitionException) as exc_info:
        await bid_service.decide_bid(42, BidStatus.APPROVED, ADMIN)

    assert exc_info.value.current_status == "rejected"
    assert event_bus.published == []

async def test_decide_unknown_bid(bid_service, bid_repo):
    bid_repo.get_by_id.return_value = None
    with pytest.raises(BidNotFoundException):
        await bid_service.decide_bid(404, BidStatus.REJECTED, ADMIN)

async def test_decision_to_unknown_status_is_invalid_transition(bid_service, bid_repo, event_bus):
    bid_repo.get_by_id.return_value = make_bid(BidStatus.PENDING)
    with pytest.raises(InvalidBidTransitionException) as exc_info:
        await bid_service.decide_bid(42, "archived", ADMIN)
    assert exc_info.value.current_status == "pending"
    bid_repo.update_status_if.assert_not_called()
    assert event_bus.published == []

# --- Annulation / suppression ---

async def test_owner_cancels_pending_bid(bid_service, bid_repo, event_bus):
    snapshot = make_bid(BidStatus.PENDING)
    bid_repo.get_by_id.return_value = snapshot
    bid_repo.delete_if.return_value = True

    await bid_service.cancel_bid(42, BUYER)

    bid_repo.delete_if.assert_awaited_once_with(bid_id=42, expected_status=BidStatus.PENDING)
    assert len(event_bus.published) == 1
    event = event_bus.published[0]
    assert isinstance(event, BidCancelled)
    assert event.bid == snapshot
    assert event.cancelled_by_user_id == BUYER.user_id

async def test_other_user_cannot_cancel(bid_service, bid_repo, event_bus):
    bid_repo.get_by_id.return_value = make_bid(BidStatus.PENDING)
    with pytest.raises(ForbiddenException):
        await bid_service.cancel_bid(42, OTHER_BUYER)
    bid_repo.delete_if.assert_not_called()
    assert event_bus.published == []

async def test_owner_cannot_cancel_decided_bid(bid_service, bid_repo):
    bid_repo.get_by_id.return_value = make_bid(BidStatus.APPROVED)
    with pytest.raises(InvalidBidTransitionException):
        await bid_service.cancel_bid(42, BUYER)
    bid_repo.delete_if.assert_not_called()

async def test_cancel_twice_reports_not_found(bid_service, bid_repo, event_bus):
    bid_repo.get_by_id.return_value = None
    with pytest.raises(BidNotFoundException):
        await bid_service.cancel_bid(42, BUYER)
    assert event_bus.published == []

async def test_admin_deletes_decided_bid(bid_service, bid_repo, event_bus):
    bid_repo.get_by_id.return_value = make_bid(BidStatus.APPROVED)
    bid_repo.delete_if.return_value = True

    await bid_service.delete_bid(42, ADMIN)

    bid_repo.delete_if.assert_awaited_once_with(bid_id=42)
    assert isinstance(event_bus.published[0], BidCancelled)
    assert event_bus.published[0].cancelled_by_user_id == ADMIN.user_id

async def test_withdraw_routes_admin_to_delete(bid_service, bid_repo):
    bid_repo.get_by_id.return_value = make_bid(BidStatus.REJECTED)
    bid_repo.delete_if.return_value = True
    await bid_service.withdraw_bid(42, ADMIN)
    bid_repo.delete_if.assert_awaited_once_with(bid_id=42)

async def test_withdraw_routes_owner_to_cancel(bid_service, bid_repo):
    bid_repo.get_by_id.return_value = make_bid(BidStatus.PENDING)
    bid_repo.delete_if.return_value = True
    await bid_service.withdraw_bid(42, BUYER)
    bid_repo.delete_if.assert_awaited_once_with(bid_id=42, expected_status=BidStatus.PENDING)

async def test_withdraw_admin_own_decided_bid_is_deleted(bid_service, bid_repo, event_bus):
    bid_repo.get_by_id.return_value = make_bid(
        BidStatus.APPROVED, user_id=ADMIN.user_id, user_email=ADMIN.email
    )
    bid_repo.delete_if.return_value = True

    await bid_service.withdraw_bid(42, ADMIN)

    bid_repo.delete_if.assert_awaited_once_with(bid_id=42)
    assert event_bus.published[0].cancelled_by_user_id == ADMIN.user_id

async def test_withdraw_admin_own_pending_bid_is_cancelled(bid_service, bid_repo):
    bid_repo.get_by_id.return_value = make_bid(
        BidStatus.PENDING, user_id=ADMIN.user_id, user_email=ADMIN.email
    )
    bid_repo.delete_if.return_value = True
    await bid_service.withdraw_bid(42, ADMIN)
    bid_repo.delete_if.assert_awaited_once_with(bid_id=42, expected_status=BidStatus.PENDING)

# --- Lecture ---

async def test_get_bid_visible_to_owner_and_admin(bid_service, bid_repo):
    bid_repo.get_by_id.return_value = make_bid()
    assert (await bid_service.get_bid(42, BUYER)).id == 42
    assert (await bid_service.get_bid(42, ADMIN)).id == 42
    with pytest.raises(ForbiddenException):
        await bid_service.get_bid(42, OTHER_BUYER)

async def test_list_all_bids_requires_admin(bid_service, bid_repo):
    bid_repo.list_all.return_value = ([make_bid()], 1)
    page = await bid_service.list_all_bids(ADMIN, limit=10, offset=0, status=BidStatus.PENDING)
    assert page.total == 1
    bid_repo.list_all.assert_awaited_once_with(limit=10, offset=0, status=BidStatus.PENDING)
    with pytest.raises(ForbiddenException):
        await bid_service.list_all_bids(BUYER, limit=10, offset=0)

# --- Bus d'événements ---

async def test_failing_subscriber_does_not_break_transition(bid_repo, lot_repo):
    bus = BidEventBus()
    failing = AsyncMock(side_effect=RuntimeError("smtp down"))
    healthy = AsyncMock()
    bus.subscribe(BidStatusChanged, failing)
    bus.subscribe(BidStatusChanged, healthy)
    service = BidService(bid_repo, lot_repo, bus)
    bid_repo.get_by_id.return_value = make_bid(BidStatus.PENDING)
    bid_repo.update_status_if.return_value = make_bid(BidStatus.REJECTED)

    updated = await service.decide_bid(42, BidStatus.REJECTED, ADMIN)

    assert updated.status == BidStatus.REJECTED
    failing.assert_awaited_once()
    healthy.assert_awaited_once()
