# Pydantic models for API contracts

from .property import (
    # Enums
    PropertyType, FlatType, ListingType, TransactionType, FurnishingStatus,
    PropertyCondition, PossessionStatus, ApprovalStatus, Counter, MediaType,
    MediaSubCategory, ContactRole,

    # Sub-documents
    Address, GeoPoint, Price, MediaItem, ContactPerson, RentalDetails, PaymentPlan,

    # Documents
    PropertyPayload, PropertyRead
)
from .search import (
    ListingFilters, Pagination, SearchResult,
    ListingTypeCount, PropertyTypePrice, StateCount, TrendingProperty
)
from .interaction import InteractionAction

__all__ = [
    # Property enums
    "PropertyType", "FlatType", "ListingType", "TransactionType", "FurnishingStatus",
    "PropertyCondition", "PossessionStatus", "ApprovalStatus", "Counter", "MediaType",
    "MediaSubCategory", "ContactRole",

    # Property documents
    "Address", "GeoPoint", "Price", "MediaItem", "ContactPerson", "RentalDetails",
    "PaymentPlan", "PropertyPayload", "PropertyRead",

    # Search models
    "ListingFilters", "Pagination", "SearchResult",
    "ListingTypeCount", "PropertyTypePrice", "StateCount", "TrendingProperty",

    # Interactions
    "InteractionAction"
]
