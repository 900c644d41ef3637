"""
Shared fixtures: an in-memory SQLite database, a pinned clock, a temporary
blob store, account factories and an API client with dependency overrides.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import datravel.models  # noqa: F401
from datravel.core.clock import FixedClock
from datravel.core.deps import get_clock, get_image_codec, get_storage
from datravel.core.storage import LocalBlobStorage
from datravel.db.database import Base, get_db
from datravel.main import app
from datravel.models.account import Director, IctAdmin, Personnel, Role
from datravel.models.travel_order import TravelOrder, TravelOrderStatus
from datravel.services.approval_workflow import ApprovalWorkflow
from datravel.services.image_codec import PillowImageCodec
from tests.helpers import FIXED_NOW, as_user

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FixedClock(FIXED_NOW)


@pytest.fixture
def storage(tmp_path):
    return LocalBlobStorage(str(tmp_path / "storage"))


@pytest.fixture
def image_codec():
    return PillowImageCodec()


@pytest.fixture
def workflow(db, clock):
    return ApprovalWorkflow(db, clock, require_recommending_director=True)


# =============================================================================
# Account factories
# =============================================================================


@pytest.fixture
def make_personnel(db):
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        fields = {
            "username": f"user{counter['n']:04d}",
            "first_name": "Juan",
            "middle_name": "P",
            "last_name": f"Cruz{counter['n']}",
            "position": "Agricultural Technologist",
            "department": "Field Operations",
            "is_active": True,
        }
        fields.update(overrides)
        person = Personnel(**fields)
        db.add(person)
        db.commit()
        db.refresh(person)
        return person

    return _make


@pytest.fixture
def make_director(db):
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        fields = {
            "username": f"director{counter['n']}",
            "first_name": "Maria",
            "last_name": f"Santos{counter['n']}",
            "position": "Director III",
            "director_level": "Regional Director",
            "is_active": True,
        }
        fields.update(overrides)
        director = Director(**fields)
        db.add(director)
        db.commit()
        db.refresh(director)
        return director

    return _make


@pytest.fixture
def admin(db):
    account = IctAdmin(username="admin@admin.com", first_name="ICT", last_name="Admin", is_active=True)
    db.add(account)
    db.commit()
    db.refresh(account)
    return account


@pytest.fixture
def personnel(make_personnel):
    return make_personnel()


@pytest.fixture
def recommender(make_director):
    return make_director(first_name="Maria", last_name="Santos")


@pytest.fixture
def approver(make_director):
    return make_director(first_name="Jose", last_name="Reyes")


@pytest.fixture
def make_order(db):
    def _make(owner, **overrides):
        fields = {
            "personnel_id": owner.id,
            "travel_purpose": "Field visit",
            "destination": "Baguio City",
            "start_date": date(2026, 3, 10),
            "end_date": date(2026, 3, 12),
            "status": TravelOrderStatus.DRAFT,
        }
        fields.update(overrides)
        order = TravelOrder(**fields)
        db.add(order)
        db.commit()
        db.refresh(order)
        return order

    return _make


@pytest.fixture
def submitted_order(workflow, make_order, personnel, recommender, approver):
    """A pending two-step order: recommender at step 1, approver at step 2."""
    order = make_order(personnel)
    return workflow.submit(as_user(personnel, Role.PERSONNEL), order.id, recommender.id, approver.id)


# =============================================================================
# API client
# =============================================================================


@pytest.fixture
def client(session_factory, clock, storage, image_codec):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_image_codec] = lambda: image_codec
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()