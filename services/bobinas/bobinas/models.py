"""
SQLAlchemy ORM models for the Bobinas service.

Defines the database schema for bobina and user tables.
"""
import uuid
from datetime import datetime, timezone
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Integer,
    Numeric,
    String,
    Text,
)
from .database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Bobina(Base):
    """
    Bobina model representing one roll of plastic film in stock.

    Attributes:
        id (str): Primary key, uuid4 assigned on insert
        code (str): Bobina code (unique across the collection)
        plastic_type (str): Plastic category (PE, PP, PVC, PET, PS, OUTRO)
        color (str): Film color
        thickness (Decimal): Thickness in millimeters
        width (Decimal): Width in millimeters
        weight (Decimal): Weight in kilograms
        stock_quantity (int): Units in stock, never negative
        location (str): Optional storage location
        entry_date (date): Date the bobina entered stock
        expiry_date (date): Optional expiry date
        supplier (str): Optional supplier name
        notes (str): Optional free-form notes
        photo_url (str): Optional public URL of the bobina photo
        owner_id (str): Id of the user who created the record
        created_at (datetime): Timestamp when the record was created
        updated_at (datetime): Timestamp of the last update
    """
    __tablename__ = "bobinas"
    __table_args__ = (
        CheckConstraint("stock_quantity >= 0", name="ck_bobinas_stock_quantity_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=_new_id)
    code = Column(String, unique=True, index=True, nullable=False)
    plastic_type = Column(String, index=True, nullable=False)
    color = Column(String, index=True, nullable=False)
    thickness = Column(Numeric(10, 3), nullable=False)
    width = Column(Numeric(10, 2), nullable=False)
    weight = Column(Numeric(10, 3), nullable=False)
    stock_quantity = Column(Integer, nullable=False, default=0)
    location = Column(String, nullable=True)
    entry_date = Column(Date, nullable=False)
    expiry_date = Column(Date, nullable=True)
    supplier = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    photo_url = Column(String, nullable=True)
    owner_id = Column(String, index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=_utcnow, nullable=True)


class User(Base):
    """
    User model backing the sign-up / sign-in endpoints.

    Attributes:
        id (str): Primary key, uuid4
        name (str): Display name
        email (str): Email address (unique)
        password_hash (str): Hashed password
        is_active (bool): Whether the account is active
        created_at (datetime): Timestamp when the user was created
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
