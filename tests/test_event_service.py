from datetime import date, time, timedelta
from decimal import Decimal

import pytest

from eventbooking.models import Event, EventImage, Venue, Booking
from eventbooking.events.schemas import EventUpdate, EventStatus, EventSort
from eventbooking.events.service import EventService
from eventbooking.errors import NotFoundError, ValidationFailedError, ConflictError
from tests.conftest import as_current_user, make_user


def add_event(db, template, title, days_ahead, price, venue_id=None, status="upcoming"):
    event = Event(
        title=title,
        description="",
        event_date=date.today() + timedelta(days=days_ahead),
        start_time=time(18, 0),
        end_time=time(21, 0),
        ticket_price=Decimal(price),
        total_capacity=50,
        status=status,
        category_id=template.category_id,
        venue_id=venue_id or template.venue_id,
        organizer_id=template.organizer_id
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    return event


@pytest.fixture
def kandy_venue(db):
    venue = Venue(name="Open Air Theatre", location="Kandy", capacity=2000)
    db.add(venue)
    db.commit()
    db.refresh(venue)
    return venue


def titles(events):
    return [e.title for e in events]


class TestListEvents:
    def test_past_events_are_hidden(self, db, event):
        add_event(db, event, "Last Year Gala", -30, "500")
        add_event(db, event, "Tonight", 0, "500")

        assert titles(EventService(db).list_events()) == ["Tonight", event.title]

    def test_from_date_cannot_reach_into_the_past(self, db, event):
        add_event(db, event, "Last Year Gala", -30, "500")

        listed = EventService(db).list_events(from_date=date.today() - timedelta(days=60))
        assert titles(listed) == [event.title]

    def test_cancelled_and_completed_events_are_hidden(self, db, event):
        add_event(db, event, "Called Off", 5, "500", status="cancelled")
        add_event(db, event, "Done", 5, "500", status="completed")

        assert titles(EventService(db).list_events()) == [event.title]

    def test_location_filter(self, db, event, kandy_venue):
        add_event(db, event, "Hill Concert", 10, "800", venue_id=kandy_venue.id)
        service = EventService(db)

        assert titles(service.list_events(location="kan")) == ["Hill Concert"]
        assert titles(service.list_events(location="COLOMBO")) == [event.title]
        assert len(service.list_events(location="all")) == 2

    def test_search_matches_venue_location(self, db, event, kandy_venue):
        add_event(db, event, "Hill Concert", 10, "800", venue_id=kandy_venue.id)

        assert titles(EventService(db).list_events(search="kandy")) == ["Hill Concert"]

    def test_price_range(self, db, event):
        add_event(db, event, "Cheap", 10, "200")
        add_event(db, event, "Pricey", 10, "5000")
        service = EventService(db)

        assert titles(service.list_events(min_price=Decimal("1000"))) == ["Pricey", event.title]
        assert titles(service.list_events(max_price=Decimal("1000"))) == ["Cheap", event.title]
        assert titles(service.list_events(min_price=Decimal("300"), max_price=Decimal("4000"))) == [event.title]

    @pytest.mark.parametrize("sort, expected", [
        (EventSort.DATE_ASC, ["Soon", "Summer Jazz Night", "Later"]),
        (EventSort.DATE_DESC, ["Later", "Summer Jazz Night", "Soon"]),
        (EventSort.PRICE_ASC, ["Later", "Summer Jazz Night", "Soon"]),
        (EventSort.PRICE_DESC, ["Soon", "Summer Jazz Night", "Later"]),
    ])
    def test_sorting(self, db, event, sort, expected):
        add_event(db, event, "Soon", 2, "3000")
        add_event(db, event, "Later", 90, "100")

        assert titles(EventService(db).list_events(sort=sort)) == expected


class TestManageEvents:
    def test_update_fields_and_images(self, db, event, organizer):
        db.add(EventImage(event_id=event.id, image_url="/img/old.jpg"))
        db.commit()
        actor = as_current_user(organizer, "organizer")

        updated = EventService(db).update_event(event.id, EventUpdate(
            title="Winter Jazz Night",
            ticket_price=Decimal("1200"),
            image_urls=["/img/new.jpg"]
        ), actor)

        assert updated.title == "Winter Jazz Night"
        assert updated.ticket_price == Decimal("1200.00")
        assert updated.total_capacity == 100
        assert [image.image_url for image in updated.images] == ["/img/new.jpg"]
        assert db.query(EventImage).count() == 1

    def test_update_keeps_times_ordered(self, db, event, organizer):
        with pytest.raises(ValidationFailedError):
            EventService(db).update_event(
                event.id, EventUpdate(end_time=time(18, 0)), as_current_user(organizer, "organizer")
            )

    def test_capacity_not_below_sold_tickets(self, db, event, organizer, customer):
        db.add(Booking(
            customer_id=customer.id, event_id=event.id, number_of_tickets=10,
            ticket_price=Decimal("1000"), total_amount=Decimal("10000"), final_amount=Decimal("10000"),
            booking_status="confirmed", payment_status="paid"
        ))
        db.commit()

        with pytest.raises(ValidationFailedError):
            EventService(db).update_event(
                event.id, EventUpdate(total_capacity=5), as_current_user(organizer, "organizer")
            )

    def test_unknown_category(self, db, event, organizer):
        with pytest.raises(ValidationFailedError):
            EventService(db).update_event(
                event.id, EventUpdate(category_id=999), as_current_user(organizer, "organizer")
            )

    def test_other_organizer_cannot_manage(self, db, event):
        stranger = as_current_user(make_user(db, "Other Organizer", "other@example.com", "organizer"), "organizer")
        service = EventService(db)

        with pytest.raises(NotFoundError):
            service.update_event(event.id, EventUpdate(title="Mine now"), stranger)
        with pytest.raises(NotFoundError):
            service.set_status(event.id, EventStatus.CANCELLED, stranger)
        with pytest.raises(NotFoundError):
            service.delete_event(event.id, stranger)

    def test_admin_may_manage_any_event(self, db, event, admin):
        updated = EventService(db).update_event(
            event.id, EventUpdate(description="Moved indoors"), as_current_user(admin, "admin")
        )
        assert updated.description == "Moved indoors"

    def test_cancelled_event_leaves_listing(self, db, event, organizer):
        service = EventService(db)
        actor = as_current_user(organizer, "organizer")

        assert service.set_status(event.id, EventStatus.CANCELLED, actor).status == "cancelled"
        assert service.list_events() == []

        assert service.set_status(event.id, EventStatus.UPCOMING, actor).status == "upcoming"
        assert titles(service.list_events()) == [event.title]

        assert service.set_status(event.id, EventStatus.COMPLETED, actor).status == "completed"
        assert service.list_events() == []

    def test_delete_removes_images(self, db, event, organizer):
        db.add(EventImage(event_id=event.id, image_url="/img/poster.jpg"))
        db.commit()
        event_id = event.id

        EventService(db).delete_event(event_id, as_current_user(organizer, "organizer"))

        assert db.query(Event).filter(Event.id == event_id).first() is None
        assert db.query(EventImage).count() == 0

    def test_event_with_bookings_cannot_be_deleted(self, db, event, organizer, customer):
        db.add(Booking(
            customer_id=customer.id, event_id=event.id, number_of_tickets=1,
            ticket_price=Decimal("1000"), total_amount=Decimal("1000"), final_amount=Decimal("1000")
        ))
        db.commit()

        with pytest.raises(ConflictError):
            EventService(db).delete_event(event.id, as_current_user(organizer, "organizer"))
        assert db.query(Event).count() == 1
