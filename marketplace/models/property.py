from pydantic import BaseModel, EmailStr, Field, HttpUrl, computed_field
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict, Any, Literal
from datetime import date, datetime
from enum import Enum

DEFAULT_COUNTRY = "Nigeria"
DEFAULT_CURRENCY = "NGN"


class PropertyType(str, Enum):
    SELF_CONTAINED = "Self Contained"
    MINI_FLAT = "Mini Flat"
    FLAT_APARTMENT = "Flat/Apartment"
    BUNGALOW = "Bungalow"
    DETACHED_DUPLEX = "Detached Duplex"
    SEMI_DETACHED_DUPLEX = "Semi-Detached Duplex"
    TERRACED_DUPLEX = "Terraced Duplex"
    MANSION = "Mansion"
    BLOCK_OF_FLATS = "Block of Flats"
    COMMERCIAL = "Commercial"
    PLOT = "Plot"
    OFFICE = "Office"
    WAREHOUSE = "Warehouse"
    SERVICED_APARTMENT = "Serviced Apartment"


# Property types that must state a flat type
APARTMENT_TYPES = frozenset({
    PropertyType.FLAT_APARTMENT.value,
    PropertyType.SERVICED_APARTMENT.value,
    PropertyType.BLOCK_OF_FLATS.value,
})


class FlatType(str, Enum):
    STUDIO = "Studio"
    ONE_BEDROOM = "1 Bedroom"
    TWO_BEDROOM = "2 Bedroom"
    THREE_BEDROOM = "3 Bedroom"
    FOUR_BEDROOM = "4 Bedroom"
    FIVE_PLUS_BEDROOM = "5+ Bedroom"


class ListingType(str, Enum):
    FOR_SALE = "For Sale"
    FOR_RENT = "For Rent"
    SHORT_LET = "Short Let"


class TransactionType(str, Enum):
    OFF_PLAN = "Off Plan"
    OUTRIGHT = "Outright"
    INSTALLMENTS = "Installments"
    MORTGAGE = "Mortgage"
    RENT_TO_OWN = "Rent to Own"


class FurnishingStatus(str, Enum):
    UNFURNISHED = "Unfurnished"
    SEMI_FURNISHED = "Semi-Furnished"
    FULLY_FURNISHED = "Fully Furnished"


class PropertyCondition(str, Enum):
    NEW = "New"
    EXCELLENT = "Excellent"
    GOOD = "Good"
    NEEDS_RENOVATION = "Needs Renovation"


class PossessionStatus(str, Enum):
    READY_TO_MOVE = "Ready to Move"
    UNDER_CONSTRUCTION = "Under Construction"


class AreaUnit(str, Enum):
    SQFT = "sqft"
    SQM = "sqm"
    SQYD = "sqyd"


class PaymentPlanType(str, Enum):
    DEPOSIT = "Deposit"
    MILESTONE = "Milestone"
    MONTHLY = "Monthly"
    BALLOON = "Balloon"


class RentFrequency(str, Enum):
    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    YEARLY = "Yearly"


class PreferredTenants(str, Enum):
    ANYONE = "Anyone"
    FAMILY = "Family"
    BACHELOR = "Bachelor"
    COMPANY = "Company"


class WaterSupply(str, Enum):
    BOREHOLE = "Borehole"
    WATER_CORPORATION = "Water Corporation"
    BOTTLED_DELIVERED = "Bottled/Delivered"
    MUNICIPAL = "Municipal"
    BOTH = "Both"


class PowerBackup(str, Enum):
    GENERATOR = "Generator"
    INVERTER = "Inverter"
    FULL = "Full"
    PARTIAL = "Partial"
    NONE = "None"


class GasSupply(str, Enum):
    CYLINDER = "Cylinder"
    PIPED_GAS = "Piped Gas"
    NONE = "None"


class Facing(str, Enum):
    NORTH = "North"
    SOUTH = "South"
    EAST = "East"
    WEST = "West"
    NORTH_EAST = "North-East"
    NORTH_WEST = "North-West"
    SOUTH_EAST = "South-East"
    SOUTH_WEST = "South-West"


class Amenity(str, Enum):
    SWIMMING_POOL = "Swimming Pool"
    GYM = "Gym"
    GARDEN = "Garden"
    KIDS_PLAY_AREA = "Kids Play Area"
    CLUBHOUSE = "Clubhouse"
    SECURITY = "Security"
    CCTV = "CCTV"
    GATED_COMMUNITY = "Gated Community"
    LIFT = "Lift"
    GENERATOR = "Generator"
    INVERTER = "Inverter"
    BOREHOLE = "Borehole"
    PIPED_WATER = "Piped Water"
    WATER_TREATMENT = "Water Treatment"
    FIRE_SAFETY = "Fire Safety"
    INTERCOM = "Intercom"
    VISITOR_PARKING = "Visitor Parking"
    STREET_LIGHTS = "Street Lights"
    FENCE = "Fence"
    GATEHOUSE = "Gatehouse"
    COMMERCIAL_MALL_NEARBY = "Commercial Mall Nearby"
    SCHOOL_NEARBY = "School Nearby"


class AdditionalRoom(str, Enum):
    SERVANT_ROOM = "Servant Room"
    STUDY_ROOM = "Study Room"
    POOJA_ROOM = "Pooja Room"
    STORE_ROOM = "Store Room"
    HOME_THEATER = "Home Theater"
    TERRACE = "Terrace"


class MediaType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    DOCUMENT = "document"


class MediaSubCategory(str, Enum):
    COVER = "cover"
    GALLERY = "gallery"
    FLOOR_PLAN = "floorPlan"
    VIRTUAL_TOUR = "virtualTour"
    VIDEO = "video"
    LEGAL = "legal"
    OTHER = "other"


class ContactRole(str, Enum):
    OWNER = "Owner"
    AGENT = "Agent"
    BUILDER = "Builder"
    REALTOR = "Realtor"


class ApprovalStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class Counter(str, Enum):
    VIEWS = "views"
    SAVES = "saves"
    SHARES = "shares"
    INQUIRIES = "inquiries"


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys, also accepts field names"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        str_strip_whitespace = True


class Address(CamelModel):
    street: Optional[str] = None
    area: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    lga: Optional[str] = None
    postal_code: Optional[str] = None
    country: str = DEFAULT_COUNTRY
    landmark: Optional[str] = None


class GeoPoint(CamelModel):
    type: Literal["Point"] = "Point"
    coordinates: List[float] = Field(..., min_length=2, max_length=2)  # [longitude, latitude]


class Price(CamelModel):
    amount: float = Field(..., ge=0)
    currency: str = DEFAULT_CURRENCY
    negotiable: bool = False


class Size(CamelModel):
    value: Optional[float] = Field(None, ge=0)
    unit: AreaUnit = AreaUnit.SQFT


class Parking(CamelModel):
    covered: int = Field(0, ge=0)
    open: int = Field(0, ge=0)


class PaymentPlan(CamelModel):
    name: Optional[str] = None
    type: PaymentPlanType = PaymentPlanType.MILESTONE
    amount: Optional[float] = Field(None, ge=0)
    currency: str = DEFAULT_CURRENCY
    due_in_months: Optional[int] = None


class ServiceCharge(CamelModel):
    amount: Optional[float] = Field(None, ge=0)
    frequency: Optional[RentFrequency] = None


class RentalDetails(CamelModel):
    deposit_amount: Optional[float] = Field(None, ge=0)
    rent_frequency: RentFrequency = RentFrequency.MONTHLY
    lease_duration_months: Optional[int] = None
    lock_in_period_months: Optional[int] = None
    pets_allowed: bool = False
    preferred_tenants: Optional[PreferredTenants] = None
    service_charge: Optional[ServiceCharge] = None
    agency_fee_percent: Optional[float] = Field(None, ge=0, le=100)
    caution_fee: Optional[float] = Field(None, ge=0)


class Utilities(CamelModel):
    water_supply: WaterSupply = WaterSupply.MUNICIPAL
    power_backup: PowerBackup = PowerBackup.NONE
    gas: Optional[GasSupply] = None


class MediaItem(CamelModel):
    url: HttpUrl
    type: MediaType
    category: str = Field(..., min_length=1)
    sub_category: MediaSubCategory
    caption: Optional[str] = None
    is_primary: bool = False
    uploaded_at: Optional[datetime] = None


class ContactPerson(CamelModel):
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    email: EmailStr
    role: ContactRole


class FloorPlan(CamelModel):
    url: Optional[HttpUrl] = None


class PropertyPayload(CamelModel):
    """Validated property document as submitted by a lister"""
    property_id: Optional[str] = Field(None, min_length=1, max_length=64)

    # Basic info
    title: str = Field(..., min_length=1, max_length=250)
    description: str = Field(..., min_length=1, max_length=5000)

    # Classification
    property_type: PropertyType
    flat_type: Optional[FlatType] = None
    listing_type: ListingType
    transaction_type: Optional[TransactionType] = None

    # Condition
    furnishing_status: FurnishingStatus
    property_condition: PropertyCondition
    possession_status: PossessionStatus
    available_from: date = Field(default_factory=date.today)
    year_built: Optional[int] = Field(None, ge=1900)
    facing: Optional[Facing] = None

    # Address & location
    address: Address
    location: Optional[GeoPoint] = None

    # Rooms & layout
    bedrooms: int = Field(0, ge=0)
    bathrooms: int = Field(0, ge=0)
    kitchens: int = Field(1, ge=0)
    balconies: int = Field(0, ge=0)
    floor: Optional[int] = None
    total_floors: Optional[int] = None
    parking: Optional[Parking] = None
    floor_size: Optional[Size] = None
    carpet_area: Optional[Size] = None

    # Pricing
    price: Price
    payment_plans: List[PaymentPlan] = []
    rental_details: Optional[RentalDetails] = None

    # Features
    utilities: Optional[Utilities] = None
    amenities: List[Amenity] = []
    additional_rooms: List[AdditionalRoom] = []
    highlights: List[str] = []
    tags: List[str] = []
    nearby_places: Optional[Dict[str, Any]] = None
    legal_documents: Optional[Dict[str, Any]] = None
    floor_plan: Optional[FloorPlan] = None
    registry_reference: Optional[str] = None

    # Media & contacts
    media: List[MediaItem] = []
    contact_person: List[ContactPerson] = Field(..., min_length=1)


# Payload keys a caller may never change after creation
IMMUTABLE_FIELDS = frozenset({"propertyId", "property_id", "slug", "owner"})


class PropertyRead(CamelModel):
    """Full projection of a stored property"""
    id: str
    property_id: str
    slug: str
    title: str
    description: str
    property_type: PropertyType
    flat_type: Optional[FlatType] = None
    listing_type: ListingType
    transaction_type: Optional[TransactionType] = None
    furnishing_status: FurnishingStatus
    property_condition: PropertyCondition
    possession_status: PossessionStatus
    available_from: date
    year_built: Optional[int] = None
    facing: Optional[Facing] = None
    address: Address
    location: Optional[GeoPoint] = None
    bedrooms: int
    bathrooms: int
    kitchens: int
    balconies: int
    floor: Optional[int] = None
    total_floors: Optional[int] = None
    parking: Optional[Parking] = None
    floor_size: Optional[Size] = None
    carpet_area: Optional[Size] = None
    price: Price
    payment_plans: List[PaymentPlan] = []
    rental_details: Optional[RentalDetails] = None
    utilities: Optional[Utilities] = None
    amenities: List[Amenity] = []
    additional_rooms: List[AdditionalRoom] = []
    highlights: List[str] = []
    tags: List[str] = []
    nearby_places: Optional[Dict[str, Any]] = None
    legal_documents: Optional[Dict[str, Any]] = None
    floor_plan: Optional[FloorPlan] = None
    registry_reference: Optional[str] = None
    media: List[MediaItem] = []
    contact_person: List[ContactPerson]
    owner: str
    is_verified: bool
    verified_at: Optional[datetime] = None
    approval_status: ApprovalStatus
    rejection_reason: Optional[str] = None
    is_deleted: bool
    deleted_at: Optional[datetime] = None
    views: int
    saves: int
    shares: int
    inquiries: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_modified_by: Optional[str] = None
    last_modified_at: Optional[datetime] = None

    @computed_field(alias="fullAddress")
    @property
    def full_address(self) -> str:
        """Street, area, city, state and postal code, skipping blanks"""
        parts = [
            self.address.street, self.address.area, self.address.city,
            self.address.state, self.address.postal_code,
        ]
        return ", ".join(part for part in parts if part)

    @classmethod
    def from_db(cls, prop) -> "PropertyRead":
        return cls(
            id=str(prop.id),
            property_id=prop.property_id,
            slug=prop.slug,
            title=prop.title,
            description=prop.description,
            property_type=prop.property_type,
            flat_type=prop.flat_type,
            listing_type=prop.listing_type,
            transaction_type=prop.transaction_type,
            furnishing_status=prop.furnishing_status,
            property_condition=prop.property_condition,
            possession_status=prop.possession_status,
            available_from=prop.available_from,
            year_built=prop.year_built,
            facing=prop.facing,
            address=Address(
                street=prop.address_street,
                area=prop.address_area,
                city=prop.address_city,
                state=prop.address_state,
                lga=prop.address_lga,
                postal_code=prop.address_postal_code,
                country=prop.address_country,
                landmark=prop.address_landmark,
            ),
            location=prop.location,
            bedrooms=prop.bedrooms,
            bathrooms=prop.bathrooms,
            kitchens=prop.kitchens,
            balconies=prop.balconies,
            floor=prop.floor,
            total_floors=prop.total_floors,
            parking=prop.parking,
            floor_size=prop.floor_size,
            carpet_area=prop.carpet_area,
            price=Price(
                amount=prop.price_amount,
                currency=prop.price_currency,
                negotiable=prop.price_negotiable,
            ),
            payment_plans=prop.payment_plans or [],
            rental_details=prop.rental_details,
            utilities=prop.utilities,
            amenities=prop.amenities or [],
            additional_rooms=prop.additional_rooms or [],
            highlights=prop.highlights or [],
            tags=prop.tags,
            nearby_places=prop.nearby_places,
            legal_documents=prop.legal_documents,
            floor_plan=prop.floor_plan,
            registry_reference=prop.registry_reference,
            media=prop.media or [],
            contact_person=prop.contact_person,
            owner=str(prop.owner_id),
            is_verified=prop.is_verified,
            verified_at=prop.verified_at,
            approval_status=prop.approval_status,
            rejection_reason=prop.rejection_reason,
            is_deleted=prop.is_deleted,
            deleted_at=prop.deleted_at,
            views=prop.views,
            saves=prop.saves,
            shares=prop.shares,
            inquiries=prop.inquiries,
            created_at=prop.created_at,
            updated_at=prop.updated_at,
            last_modified_by=str(prop.last_modified_by) if prop.last_modified_by else None,
            last_modified_at=prop.last_modified_at,
        )
