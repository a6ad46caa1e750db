from sqlalchemy import Column, Integer, String, Float, Date, DateTime, Boolean, Text, JSON, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from marketplace.core.database import Base
import uuid


def utcnow():
    return datetime.now(timezone.utc)


class User(Base):
    """Account that owns listings; roles are managed by the identity layer"""
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    email = Column(String(255), unique=True, nullable=False)
    name = Column(String(200))

    # Non-empty subset of buyer/agent/estate/admin
    roles = Column(JSON, nullable=False, default=lambda: ["buyer"])
    active_role = Column(String(20), nullable=False, default="buyer")
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)

    properties = relationship("Property", back_populates="owner", foreign_keys="Property.owner_id")

    __table_args__ = (
        Index('idx_users_email', 'email'),
    )


class Property(Base):
    """Property listing; nested sub-documents are stored as JSON"""
    __tablename__ = "properties"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Public identifiers, assigned once at creation
    property_id = Column(String(64), unique=True, nullable=False)
    slug = Column(String(400), unique=True, nullable=False)

    # Basic info
    title = Column(String(250), nullable=False)
    description = Column(Text, nullable=False)

    # Address
    address_street = Column(String(250))
    address_area = Column(String(200), nullable=False)
    address_city = Column(String(100), nullable=False)
    address_state = Column(String(100), nullable=False)
    address_lga = Column(String(100))
    address_postal_code = Column(String(20))
    address_country = Column(String(100), nullable=False, default="Nigeria")
    address_landmark = Column(String(250))

    # GeoJSON point {"type": "Point", "coordinates": [lng, lat]}
    location = Column(JSON)

    # Classification
    property_type = Column(String(50), nullable=False)
    flat_type = Column(String(20))
    listing_type = Column(String(20), nullable=False)
    transaction_type = Column(String(20))

    # Condition
    furnishing_status = Column(String(20), nullable=False)
    property_condition = Column(String(20), nullable=False)
    possession_status = Column(String(30), nullable=False)
    available_from = Column(Date, nullable=False)
    year_built = Column(Integer)
    facing = Column(String(20))

    # Rooms & layout
    bedrooms = Column(Integer, nullable=False, default=0)
    bathrooms = Column(Integer, nullable=False, default=0)
    kitchens = Column(Integer, nullable=False, default=1)
    balconies = Column(Integer, nullable=False, default=0)
    floor = Column(Integer)
    total_floors = Column(Integer)
    parking = Column(JSON)
    floor_size = Column(JSON)
    carpet_area = Column(JSON)

    # Pricing
    price_amount = Column(Float, nullable=False)
    price_currency = Column(String(8), nullable=False, default="NGN")
    price_negotiable = Column(Boolean, nullable=False, default=False)
    payment_plans = Column(JSON)
    rental_details = Column(JSON)

    # Features
    utilities = Column(JSON)
    amenities = Column(JSON)
    additional_rooms = Column(JSON)
    highlights = Column(JSON)
    nearby_places = Column(JSON)
    legal_documents = Column(JSON)
    floor_plan = Column(JSON)
    registry_reference = Column(String(200))

    # Media & contacts
    media = Column(JSON)
    contact_person = Column(JSON, nullable=False)

    # Ownership
    owner_id = Column(Uuid, ForeignKey('users.id'), nullable=False)

    # Verification
    is_verified = Column(Boolean, nullable=False, default=False)
    verified_at = Column(DateTime(timezone=True))
    approval_status = Column(String(20), nullable=False, default="Pending")
    rejection_reason = Column(Text)

    # Soft delete
    is_deleted = Column(Boolean, nullable=False, default=False)
    deleted_at = Column(DateTime(timezone=True))

    # Engagement counters
    views = Column(Integer, nullable=False, default=0)
    saves = Column(Integer, nullable=False, default=0)
    shares = Column(Integer, nullable=False, default=0)
    inquiries = Column(Integer, nullable=False, default=0)

    # Audit
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
    last_modified_by = Column(Uuid, ForeignKey('users.id'))
    last_modified_at = Column(DateTime(timezone=True))

    # Relationships
    owner = relationship("User", back_populates="properties", foreign_keys=[owner_id])
    tag_rows = relationship(
        "PropertyTag",
        back_populates="property",
        cascade="all, delete-orphan",
        order_by="PropertyTag.id",
        lazy="selectin",
    )

    @property
    def tags(self):
        return [row.tag for row in self.tag_rows]

    __table_args__ = (
        Index('idx_properties_city_area', 'address_city', 'address_area'),
        Index('idx_properties_type_listing', 'property_type', 'listing_type'),
        Index('idx_properties_price', 'price_amount'),
        Index('idx_properties_approval_status', 'approval_status'),
        Index('idx_properties_created_at', 'created_at'),
        Index('idx_properties_state', 'address_state'),
    )


class PropertyTag(Base):
    """One tag on one property; backs tag-overlap recommendations"""
    __tablename__ = "property_tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    property_pk = Column(Uuid, ForeignKey('properties.id', ondelete="CASCADE"), nullable=False)
    tag = Column(String(100), nullable=False)

    property = relationship("Property", back_populates="tag_rows")

    __table_args__ = (
        Index('idx_property_tags_unique', 'property_pk', 'tag', unique=True),
        Index('idx_property_tags_tag', 'tag'),
    )


class Interaction(Base):
    """Append-only engagement log"""
    __tablename__ = "interactions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id = Column(String(64), nullable=False)
    property_id = Column(String(64))  # public propertyId
    action = Column(String(20), nullable=False)  # view, save, share, search
    search_query = Column(Text)
    timestamp = Column(DateTime(timezone=True), default=utcnow)

    __table_args__ = (
        Index('idx_interactions_user_action_time', 'user_id', 'action', 'timestamp'),
        Index('idx_interactions_property_id', 'property_id'),
    )
