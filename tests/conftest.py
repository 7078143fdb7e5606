# Standard Library
from datetime import date
from decimal import Decimal
from typing import AsyncGenerator, List, Dict, Any, Optional

# Third-Party Libraries
import pytest
import pytest_asyncio

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, AsyncEngine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

# First-Party Libraries
from deals.main import app
from deals.database import get_db_session
from deals.users.models import User
from deals.products.models import ProductLot
from deals.bids.models import Bid, BidStatus
from deals.auth.security import get_password_hash, create_access_token
from deals.notifications.dependencies import get_email_sender
from deals.notifications.sender import AbstractEmailSender

# URL de base pour la DB en mémoire
TEST_DATABASE_BASE_URL = "sqlite+aiosqlite:///:memory:"

# --- Fixtures de Base ---

@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Crée un engine, des tables, et fournit une session DB en mémoire pour chaque test."""
    engine: AsyncEngine = create_async_engine(TEST_DATABASE_BASE_URL, echo=False, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with TestingSessionLocal() as session:
        yield session

    await engine.dispose()

# --- Email ---

class RecordingEmailSender(AbstractEmailSender):
    """Sender simulé : mémorise les emails au lieu de les envoyer."""

    def __init__(self, fail_with: Optional[Exception] = None):
        self.sent: List[Dict[str, Any]] = []
        self.fail_with = fail_with

    async def send_email(self, recipient_email, subject, html_content, sender_email=None) -> bool:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append({"to": recipient_email, "subject": subject, "html": html_content})
        return True

@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()

@pytest_asyncio.fixture(scope="function")
async def test_client(db_session: AsyncSession, email_sender: RecordingEmailSender) -> AsyncGenerator[AsyncClient, None]:
    """Fournit un AsyncClient httpx qui utilise la session DB de test isolée et le sender simulé."""
    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    del app.dependency_overrides[get_db_session]
    del app.dependency_overrides[get_email_sender]

# --- Fixtures Utilisateur et Authentification ---

async def _create_user(db_session: AsyncSession, email: str, password: str, name: str, is_admin: bool) -> User:
    user = User(
        email=email,
        password_hash=get_password_hash(password),
        name=name,
        is_admin=is_admin,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user

def _auth_headers(user: User) -> dict[str, str]:
    if user.id is None:
        pytest.fail(f"L'ID de {user.email} est None après commit/refresh.")
    access_token = create_access_token(user.id)
    return {"Authorization": f"Bearer {access_token}"}

@pytest_asyncio.fixture(scope="function")
async def test_user(db_session: AsyncSession) -> User:
    """Crée un acheteur standard."""
    return await _create_user(db_session, "buyer@example.com", "testpassword", "Test Buyer", is_admin=False)

@pytest_asyncio.fixture(scope="function")
async def test_user_2(db_session: AsyncSession) -> User:
    """Crée un deuxième acheteur standard."""
    return await _create_user(db_session, "buyer2@example.com", "testpassword2", "Second Buyer", is_admin=False)

@pytest_asyncio.fixture(scope="function")
async def admin_user(db_session: AsyncSession) -> User:
    """Crée un administrateur."""
    return await _create_user(db_session, "admin@example.com", "adminpassword", "Admin User", is_admin=True)

@pytest_asyncio.fixture(scope="function")
async def auth_headers_user(test_user: User) -> dict[str, str]:
    return _auth_headers(test_user)

@pytest_asyncio.fixture(scope="function")
async def auth_headers_user_2(test_user_2: User) -> dict[str, str]:
    return _auth_headers(test_user_2)

@pytest_asyncio.fixture(scope="function")
async def auth_headers_admin(admin_user: User) -> dict[str, str]:
    return _auth_headers(admin_user)

# --- Fixtures Catalogue et Enchères ---

@pytest_asyncio.fixture(scope="function")
async def test_lot(db_session: AsyncSession) -> ProductLot:
    """Lot de 100 unités à 10.00, remise maximale 30%, enchères ouvertes."""
    lot = ProductLot(
        category="Snacks",
        brand="Crunchy Co",
        upc="012345678905",
        description="Crunchy Granola Bars 12ct",
        lot_number="L-2024-001",
        case_quantity=12,
        quantity_available=100,
        close_bid_date=date(2099, 12, 31),
        regular_price=Decimal("10.00"),
        max_discount_percent=Decimal("30"),
    )
    db_session.add(lot)
    await db_session.commit()
    await db_session.refresh(lot)
    return lot

@pytest_asyncio.fixture(scope="function")
async def pending_bid(db_session: AsyncSession, test_user: User, test_lot: ProductLot) -> Bid:
    """Enchère en attente de test_user sur test_lot (50 x 8.00)."""
    bid = Bid(
        user_id=test_user.id,
        user_email=test_user.email,
        product_id=test_lot.id,
        product_name=test_lot.description,
        quantity=50,
        bid_price=Decimal("8.00"),
        regular_price=test_lot.regular_price,
        discount_percent=Decimal("20.0000"),
        total_value=Decimal("400.00"),
        status=BidStatus.PENDING.value,
    )
    db_session.add(bid)
    await db_session.commit()
    await db_session.refresh(bid)
    return bid
