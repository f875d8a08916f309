import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import date, datetime, time, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from eventbooking.database import Base, get_db
from eventbooking.main import app
from eventbooking.models import (
    User, Role, UserHasRole, EventCategory, Venue, Event, Promotion, LoyaltyPoint
)
from eventbooking.auth.schemas import CurrentUser
from eventbooking.auth.utils import create_access_token

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_user(db, name, email, role_name, password="not-a-real-hash"):
    role = db.query(Role).filter(Role.name == role_name).first()
    if role is None:
        role = Role(name=role_name)
        db.add(role)
        db.flush()
    user = User(name=name, email=email, password=password)
    db.add(user)
    db.flush()
    db.add(UserHasRole(user_id=user.id, role_id=role.id))
    db.commit()
    db.refresh(user)
    return user


def as_current_user(user, *roles):
    return CurrentUser(id=user.id, name=user.name, email=user.email, roles=list(roles))


def auth_headers(user):
    token = create_access_token({"sub": str(user.id)}, timedelta(minutes=5))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def customer(db):
    return make_user(db, "Chris Customer", "customer@example.com", "customer")


@pytest.fixture
def other_customer(db):
    return make_user(db, "Dana Customer", "dana@example.com", "customer")


@pytest.fixture
def organizer(db):
    return make_user(db, "Olivia Organizer", "organizer@example.com", "organizer")


@pytest.fixture
def admin(db):
    return make_user(db, "Admin", "admin@example.com", "admin")


@pytest.fixture
def customer_user(customer):
    return as_current_user(customer, "customer")


@pytest.fixture
def event(db, organizer):
    category = EventCategory(name="Music")
    venue = Venue(name="City Hall", location="Colombo", capacity=500)
    db.add_all([category, venue])
    db.flush()

    event = Event(
        title="Summer Jazz Night",
        description="An evening of live jazz",
        event_date=date.today() + timedelta(days=30),
        start_time=time(19, 0),
        end_time=time(23, 0),
        ticket_price=Decimal("1000.00"),
        total_capacity=100,
        category_id=category.id,
        venue_id=venue.id,
        organizer_id=organizer.id
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


def make_promotion(db, code, discount_type="percentage", value="10", status="active", starts_in_days=-1, ends_in_days=30):
    now = datetime.utcnow()
    promotion = Promotion(
        code=code,
        discount_type=discount_type,
        discount_value=Decimal(value),
        start_date=now + timedelta(days=starts_in_days),
        end_date=now + timedelta(days=ends_in_days),
        status=status
    )
    db.add(promotion)
    db.commit()
    db.refresh(promotion)
    return promotion


def give_points(db, user, points):
    db.add(LoyaltyPoint(customer_id=user.id, points=points, updated_at=datetime.utcnow()))
    db.commit()
