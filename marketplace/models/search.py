from pydantic import Field, model_validator
from typing import Optional, List
from marketplace.models.property import CamelModel, ListingType, PropertyType, PropertyRead


class ListingFilters(CamelModel):
    """Search filters; every supplied filter narrows the result (AND)"""
    q: Optional[str] = None  # substring of title, description, area or city
    city: Optional[str] = None
    state: Optional[str] = None
    listing_type: Optional[ListingType] = None
    property_type: Optional[PropertyType] = None
    min_price: Optional[float] = Field(None, ge=0)
    max_price: Optional[float] = Field(None, ge=0)
    min_bedrooms: Optional[int] = Field(None, ge=0)
    is_verified: Optional[bool] = None

    @model_validator(mode='after')
    def validate_price_range(self):
        if (self.max_price is not None and self.min_price is not None and
                self.max_price < self.min_price):
            raise ValueError('max_price must be greater than or equal to min_price')
        return self


class Pagination(CamelModel):
    page: int = Field(1, ge=1)
    page_size: int = Field(20, ge=1)  # upper bound comes from Settings.MAX_PAGE_SIZE

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class SearchResult(CamelModel):
    items: List[PropertyRead]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return (self.total + self.page_size - 1) // self.page_size


class ListingTypeCount(CamelModel):
    listing_type: str
    count: int


class PropertyTypePrice(CamelModel):
    property_type: str
    average_price: int
    count: int


class StateCount(CamelModel):
    state: str
    count: int


class TrendingProperty(CamelModel):
    property: PropertyRead
    score: float
