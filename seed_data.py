#!/usr/bin/env python3

from datetime import date, datetime, time, timedelta
from decimal import Decimal

from eventbooking.database import SessionLocal, init_db
from eventbooking.models import (
    User, Role, UserHasRole, EventCategory, Venue, Event, Promotion
)
from eventbooking.auth.utils import get_password_hash

def create_seed_data():
    init_db()
    db = SessionLocal()

    try:
        print("🚀 Creating seed data for the Event Booking Platform...")

        if db.query(Role).count():
            print("Seed data already present, nothing to do")
            return

        # 1. Create Roles
        print("Creating roles...")
        roles = {name: Role(name=name) for name in ("customer", "organizer", "admin")}
        db.add_all(roles.values())
        db.flush()

        # 2. Create Users
        print("Creating users...")
        users = {
            "admin": User(name="Admin", email="admin@example.com", password=get_password_hash("admin123")),
            "organizer": User(name="Olivia Organizer", email="organizer@example.com", password=get_password_hash("organizer123")),
            "customer": User(name="Chris Customer", email="customer@example.com", password=get_password_hash("customer123")),
        }
        db.add_all(users.values())
        db.flush()
        db.add_all([UserHasRole(user_id=user.id, role_id=roles[name].id) for name, user in users.items()])

        # 3. Create Categories & Venues
        print("Creating categories and venues...")
        categories = [EventCategory(name="Music"), EventCategory(name="Conference"), EventCategory(name="Sports")]
        venues = [
            Venue(name="City Hall", location="Colombo", description="Main hall", capacity=500),
            Venue(name="Open Air Theatre", location="Kandy", capacity=2000),
        ]
        db.add_all(categories + venues)
        db.flush()

        # 4. Create Events
        print("Creating events...")
        today = date.today()
        db.add_all([
            Event(
                title="Summer Jazz Night",
                description="An evening of live jazz",
                event_date=today + timedelta(days=30),
                start_time=time(19, 0),
                end_time=time(23, 0),
                ticket_price=Decimal("1000.00"),
                total_capacity=100,
                category_id=categories[0].id,
                venue_id=venues[0].id,
                organizer_id=users["organizer"].id
            ),
            Event(
                title="Tech Summit",
                description="Talks and workshops",
                event_date=today + timedelta(days=60),
                start_time=time(9, 0),
                end_time=time(17, 0),
                ticket_price=Decimal("2500.00"),
                total_capacity=300,
                category_id=categories[1].id,
                venue_id=venues[1].id,
                organizer_id=users["organizer"].id
            ),
        ])

        # 5. Create Promotions
        print("Creating promotions...")
        now = datetime.utcnow()
        db.add_all([
            Promotion(code="SAVE10", discount_type="percentage", discount_value=Decimal("10"),
                      start_date=now - timedelta(days=1), end_date=now + timedelta(days=90), status="active"),
            Promotion(code="FLAT500", discount_type="fixed", discount_value=Decimal("500"),
                      start_date=now - timedelta(days=1), end_date=now + timedelta(days=90), status="active"),
        ])

        db.commit()
        print("✅ Seed data created")

    except Exception as e:
        print(f"❌ Error creating seed data: {e}")
        db.rollback()
        raise
    finally:
        db.close()

if __name__ == "__main__":
    create_seed_data()
