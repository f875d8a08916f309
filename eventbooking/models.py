from enum import Enum
from sqlalchemy import Column, Integer, BigInteger, String, Boolean, DateTime, Date, Time, Text, ForeignKey, Numeric, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from eventbooking.database import Base

# SQLite only autoincrements INTEGER PRIMARY KEY
ID_TYPE = BigInteger().with_variant(Integer, "sqlite")

# ================================
# Users & Roles
# ================================
class User(Base):
    __tablename__ = "users"

    id = Column(ID_TYPE, primary_key=True, index=True)
    name = Column(String(150), nullable=False)
    email = Column(String(150), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)
    phone = Column(String(50))
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    user_roles = relationship("UserHasRole", back_populates="user")
    bookings = relationship("Booking", back_populates="customer")
    organized_events = relationship("Event", back_populates="organizer")
    loyalty_account = relationship("LoyaltyPoint", back_populates="customer", uselist=False)

class Role(Base):
    __tablename__ = "roles"

    id = Column(ID_TYPE, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user_roles = relationship("UserHasRole", back_populates="role")

class UserHasRole(Base):
    __tablename__ = "user_has_roles"

    id = Column(ID_TYPE, primary_key=True, index=True)
    user_id = Column(BigInteger, ForeignKey("users.id"), nullable=False)
    role_id = Column(BigInteger, ForeignKey("roles.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="user_roles")
    role = relationship("Role", back_populates="user_roles")

# ================================
# Catalog: Categories / Venues / Events
# ================================
class EventCategory(Base):
    __tablename__ = "event_categories"

    id = Column(ID_TYPE, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)

    # Relationships
    events = relationship("Event", back_populates="category")

class Venue(Base):
    __tablename__ = "venues"

    id = Column(ID_TYPE, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    location = Column(String(255), nullable=False)
    description = Column(Text)
    capacity = Column(Integer, default=0)

    # Relationships
    events = relationship("Event", back_populates="venue")

class Event(Base):
    __tablename__ = "events"

    id = Column(ID_TYPE, primary_key=True, index=True)
    title = Column(String(255), nullable=False, index=True)
    description = Column(Text, default="")
    event_date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    ticket_price = Column(Numeric(10, 2), nullable=False)
    total_capacity = Column(Integer, nullable=False)
    status = Column(String(20), default='upcoming', index=True)
    category_id = Column(BigInteger, ForeignKey("event_categories.id"), nullable=False)
    venue_id = Column(BigInteger, ForeignKey("venues.id"), nullable=False)
    organizer_id = Column(BigInteger, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    category = relationship("EventCategory", back_populates="events")
    venue = relationship("Venue", back_populates="events")
    organizer = relationship("User", back_populates="organized_events")
    images = relationship("EventImage", back_populates="event", cascade="all, delete-orphan")
    bookings = relationship("Booking", back_populates="event")

class EventImage(Base):
    __tablename__ = "event_images"

    id = Column(ID_TYPE, primary_key=True, index=True)
    event_id = Column(BigInteger, ForeignKey("events.id"), nullable=False, index=True)
    image_url = Column(String(500), nullable=False)

    # Relationships
    event = relationship("Event", back_populates="images")

# ================================
# Promotions
# ================================
class Promotion(Base):
    __tablename__ = "promotions"

    id = Column(ID_TYPE, primary_key=True, index=True)
    code = Column(String(50), unique=True, nullable=False, index=True)
    discount_type = Column(String(20), nullable=False, default='percentage')
    discount_value = Column(Numeric(10, 2), nullable=False)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    status = Column(String(20), default='active', index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

# ================================
# Bookings, Tickets & Payments
# ================================
class BookingStatus(str, Enum):
    """Booking status enumeration"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"

class PaymentStatus(str, Enum):
    """Payment status enumeration"""
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"

class TicketStatus(str, Enum):
    """Ticket status enumeration"""
    VALID = "valid"
    CANCELLED = "cancelled"

class Booking(Base):
    __tablename__ = "bookings"

    id = Column(ID_TYPE, primary_key=True, index=True)
    customer_id = Column(BigInteger, ForeignKey("users.id"), nullable=False, index=True)
    event_id = Column(BigInteger, ForeignKey("events.id"), nullable=False, index=True)
    number_of_tickets = Column(Integer, nullable=False)
    ticket_price = Column(Numeric(10, 2), nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)
    discount_amount = Column(Numeric(10, 2), nullable=False, default=0)
    final_amount = Column(Numeric(10, 2), nullable=False)
    promotion_code = Column(String(50))
    loyalty_used = Column(Integer, nullable=False, default=0)
    loyalty_earned = Column(Integer, nullable=False, default=0)
    payment_status = Column(String(20), nullable=False, default='pending', index=True)
    booking_status = Column(String(20), nullable=False, default='pending', index=True)
    created_at = Column(DateTime, nullable=False, default=func.now(), index=True)

    # Relationships
    customer = relationship("User", back_populates="bookings")
    event = relationship("Event", back_populates="bookings")
    tickets = relationship("Ticket", back_populates="booking", cascade="all, delete-orphan", order_by="Ticket.id")
    payment = relationship("Payment", back_populates="booking", uselist=False, cascade="all, delete-orphan")

class Ticket(Base):
    __tablename__ = "tickets"

    id = Column(ID_TYPE, primary_key=True, index=True)
    booking_id = Column(BigInteger, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    ticket_number = Column(String(50), unique=True, nullable=False)
    qr_code = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default='valid', index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True))

    # Relationships
    booking = relationship("Booking", back_populates="tickets")

class Payment(Base):
    __tablename__ = "payments"

    id = Column(ID_TYPE, primary_key=True, index=True)
    booking_id = Column(BigInteger, ForeignKey("bookings.id", ondelete="CASCADE"), unique=True, nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    payment_method = Column(String(50), nullable=False, default='card')
    transaction_id = Column(String(100))
    status = Column(String(20), nullable=False, default='pending')
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    booking = relationship("Booking", back_populates="payment")

# ================================
# Loyalty
# ================================
class LoyaltyPoint(Base):
    __tablename__ = "loyalty_points"

    id = Column(ID_TYPE, primary_key=True, index=True)
    customer_id = Column(BigInteger, ForeignKey("users.id"), unique=True, nullable=False)
    points = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, nullable=False, default=func.now())

    # Relationships
    customer = relationship("User", back_populates="loyalty_account")

class LoyaltyHistory(Base):
    __tablename__ = "loyalty_history"

    id = Column(ID_TYPE, primary_key=True, index=True)
    customer_id = Column(BigInteger, ForeignKey("users.id"), nullable=False, index=True)
    booking_id = Column(BigInteger, ForeignKey("bookings.id"), index=True)
    change_type = Column(String(10), nullable=False)
    points = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False, default=func.now())
