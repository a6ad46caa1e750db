from typing import List
from sqlalchemy import func, or_
from marketplace.db.models import Property as DBProperty
from marketplace.models.search import ListingFilters
import logging

logger = logging.getLogger(__name__)


def live_listing():
    """Condition shared by every default read: soft-deleted rows are hidden"""
    return DBProperty.is_deleted.is_(False)


class ListingQueryBuilder:
    """Builds SQLAlchemy filter conditions from listing filters"""

    def build_conditions(self, filters: ListingFilters) -> List:
        conditions = [live_listing()]

        self._add_text_filter(conditions, filters)
        self._add_exact_filters(conditions, filters)
        self._add_range_filters(conditions, filters)

        if filters.is_verified is not None:
            conditions.append(DBProperty.is_verified.is_(filters.is_verified))

        logger.debug(f"Built {len(conditions)} listing conditions")
        return conditions

    def _add_text_filter(self, conditions: List, filters: ListingFilters):
        """Case-insensitive substring match over title, description, area and city"""
        if not filters.q:
            return
        conditions.append(or_(
            DBProperty.title.icontains(filters.q, autoescape=True),
            DBProperty.description.icontains(filters.q, autoescape=True),
            DBProperty.address_area.icontains(filters.q, autoescape=True),
            DBProperty.address_city.icontains(filters.q, autoescape=True),
        ))

    def _add_exact_filters(self, conditions: List, filters: ListingFilters):
        if filters.city:
            conditions.append(func.lower(DBProperty.address_city) == filters.city.lower())
        if filters.state:
            conditions.append(func.lower(DBProperty.address_state) == filters.state.lower())
        if filters.listing_type:
            conditions.append(DBProperty.listing_type == filters.listing_type.value)
        if filters.property_type:
            conditions.append(DBProperty.property_type == filters.property_type.value)

    def _add_range_filters(self, conditions: List, filters: ListingFilters):
        if filters.min_price is not None:
            conditions.append(DBProperty.price_amount >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(DBProperty.price_amount <= filters.max_price)
        if filters.min_bedrooms is not None:
            conditions.append(DBProperty.bedrooms >= filters.min_bedrooms)
