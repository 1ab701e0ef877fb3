from __future__ import annotations

import os

# Settings are read once at import time, so the environment goes first.
os.environ["SMTP_HOST"] = "smtp.example.com"
os.environ["SMTP_USER"] = "store@example.com"
os.environ["SMTP_PASSWORD"] = "smtp-secret"
os.environ["ADMIN_EMAIL"] = "admin@example.com"
os.environ["ADMIN_PASSWORD"] = "admin-secret"
os.environ.pop("RCON_HOST", None)
os.environ.pop("RCON_PASSWORD", None)

from collections.abc import Generator  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine, delete  # noqa: E402

from coinstore import crud  # noqa: E402
from coinstore.api.deps import get_db, get_fulfillment_client, get_mail_transport  # noqa: E402
from coinstore.core.db import init_db  # noqa: E402
from coinstore.integrations.mailer import MailError  # noqa: E402
from coinstore.integrations.rcon import FulfillmentOutcome, build_command  # noqa: E402
from coinstore.main import app  # noqa: E402
from coinstore.models import CoinTransaction, Order, Product, Setting, User  # noqa: E402


class FakeMailTransport:
    """Records outgoing mail instead of talking to SMTP."""

    def __init__(self) -> None:
        self.sent: list[dict[str, str]] = []
        self.fail = False

    def send(self, *, to: str, subject: str, html: str) -> None:
        if self.fail:
            raise MailError("535 authentication failed")
        self.sent.append({"to": to, "subject": subject, "html": html})


class FakeFulfillment:
    """Records PlayerPoints grants; behaves like a reachable RCON server."""

    def __init__(self) -> None:
        self.calls: list[tuple[str | None, int]] = []
        self.outcome: FulfillmentOutcome | None = None

    def grant(self, player: str | None, amount: int) -> FulfillmentOutcome:
        self.calls.append((player, amount))
        if self.outcome is not None:
            return self.outcome
        command = build_command("playerpoints give {player} {amount}", player, amount)
        return FulfillmentOutcome(ok=True, command=command, response="Gave points")


@pytest.fixture(scope="session")
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture(scope="function")
def db(engine) -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session
        # Clean tables after each test (children first).
        session.rollback()
        session.exec(delete(CoinTransaction))
        session.exec(delete(Order))
        session.exec(delete(Product))
        session.exec(delete(Setting))
        session.exec(delete(User))
        session.commit()


@pytest.fixture
def mail() -> FakeMailTransport:
    return FakeMailTransport()


@pytest.fixture
def fulfillment() -> FakeFulfillment:
    return FakeFulfillment()


@pytest.fixture(scope="function")
def client(engine, mail, fulfillment) -> Generator[TestClient, None, None]:
    def _override_get_db() -> Generator[Session, None, None]:
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_mail_transport] = lambda: mail
    app.dependency_overrides[get_fulfillment_client] = lambda: fulfillment
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def products(db) -> list[Product]:
    """The eight seeded NAMO packs, cheapest first."""
    init_db(db)
    return crud.list_products(session=db)


@pytest.fixture
def steve(db) -> User:
    return crud.create_user(
        session=db,
        email="Steve@Example.com",
        name="Steve Player",
        password="diamond-pickaxe",
        minecraft_username="Steve",
        phone="9876543210",
    )


@pytest.fixture
def admin_headers(client) -> dict[str, str]:
    r = client.post(
        "/api/v1/auth/admin/login",
        json={"email": "admin@example.com", "password": "admin-secret"},
    )
    assert r.status_code == 200
    return {"Authorization": f"Bearer {r.json()['data']['access_token']}"}
