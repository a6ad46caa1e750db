from typing import List, Optional
from decimal import Decimal, ROUND_HALF_UP
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from marketplace.core.exceptions import NotFound, StorageError
from marketplace.db.models import Property as DBProperty, PropertyTag
from marketplace.models.interaction import InteractionAction
from marketplace.models.property import PropertyRead
from marketplace.models.search import (
    ListingFilters, Pagination, SearchResult, ListingTypeCount,
    PropertyTypePrice, StateCount, TrendingProperty
)
from marketplace.modules.interactions.service import InteractionLog
from marketplace.modules.search.query_builder import ListingQueryBuilder, live_listing
import logging

logger = logging.getLogger(__name__)

MAX_ANALYTICS_LIMIT = 50
TRENDING_LIMIT = 10
RECOMMENDATION_HISTORY = 10
RECOMMENDATION_LIMIT = 10
RELATED_LIMIT = 6
RELATED_PRICE_TOLERANCE = 0.10

# Engagement weights for the trending score
TRENDING_WEIGHTS = {"views": 0.5, "saves": 1.0, "shares": 1.5}


def round_half_up(value) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _clamp_limit(limit: int) -> int:
    return max(1, min(limit, MAX_ANALYTICS_LIMIT))


class ListingQueryService:
    """Read side of the listings: search, analytics and suggestions.

    Nothing here mutates a property; every query excludes soft-deleted rows.
    """

    def __init__(self, db: Session, interactions: Optional[InteractionLog] = None):
        self.db = db
        self.query_builder = ListingQueryBuilder()
        self.interactions = interactions or InteractionLog(db)

    async def search(self, filters: ListingFilters, pagination: Pagination) -> SearchResult:
        """Filtered, newest-first page of listings with the unpaged total"""
        conditions = self.query_builder.build_conditions(filters)

        try:
            query = self.db.query(DBProperty).filter(*conditions)
            total = query.count()
            rows = query.order_by(
                DBProperty.created_at.desc(), DBProperty.id
            ).offset(pagination.offset).limit(pagination.page_size).all()
        except SQLAlchemyError as e:
            logger.error(f"Listing search failed: {e}")
            raise StorageError("Search failed") from e

        return SearchResult(
            items=[PropertyRead.from_db(row) for row in rows],
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
        )

    async def top_viewed(self, limit: int = 10) -> List[PropertyRead]:
        rows = self._run(
            "top viewed",
            lambda: self.db.query(DBProperty).filter(live_listing()).order_by(
                DBProperty.views.desc(), DBProperty.created_at.desc()
            ).limit(_clamp_limit(limit)).all()
        )
        return [PropertyRead.from_db(row) for row in rows]

    async def most_recent(self, limit: int = 10) -> List[PropertyRead]:
        rows = self._run(
            "most recent",
            lambda: self.db.query(DBProperty).filter(live_listing()).order_by(
                DBProperty.created_at.desc()
            ).limit(_clamp_limit(limit)).all()
        )
        return [PropertyRead.from_db(row) for row in rows]

    async def count_by_listing_type(self) -> List[ListingTypeCount]:
        count = func.count(DBProperty.id)
        rows = self._run(
            "listing type counts",
            lambda: self.db.query(DBProperty.listing_type, count).filter(
                live_listing()
            ).group_by(DBProperty.listing_type).order_by(count.desc()).all()
        )
        return [ListingTypeCount(listing_type=kind, count=n) for kind, n in rows]

    async def average_price_by_property_type(self) -> List[PropertyTypePrice]:
        """Mean asking price per property type, rounded to the nearest integer"""
        rows = self._run(
            "average price",
            lambda: self.db.query(
                DBProperty.property_type,
                func.avg(DBProperty.price_amount),
                func.count(DBProperty.id)
            ).filter(live_listing()).group_by(
                DBProperty.property_type
            ).order_by(DBProperty.property_type).all()
        )
        return [
            PropertyTypePrice(property_type=kind, average_price=round_half_up(avg), count=n)
            for kind, avg, n in rows
        ]

    async def count_by_state(self) -> List[StateCount]:
        count = func.count(DBProperty.id)
        rows = self._run(
            "state counts",
            lambda: self.db.query(DBProperty.address_state, count).filter(
                live_listing()
            ).group_by(DBProperty.address_state).order_by(count.desc()).all()
        )
        return [StateCount(state=state, count=n) for state, n in rows]

    async def trending(self) -> List[TrendingProperty]:
        """Top listings by 0.5*views + saves + 1.5*shares"""
        score = (
            TRENDING_WEIGHTS["views"] * DBProperty.views
            + TRENDING_WEIGHTS["saves"] * DBProperty.saves
            + TRENDING_WEIGHTS["shares"] * DBProperty.shares
        ).label("score")
        rows = self._run(
            "trending",
            lambda: self.db.query(DBProperty, score).filter(live_listing()).order_by(
                score.desc(), DBProperty.created_at.desc()
            ).limit(TRENDING_LIMIT).all()
        )
        return [
            TrendingProperty(property=PropertyRead.from_db(row), score=float(value))
            for row, value in rows
        ]

    async def recommendations(self, user_id: str) -> List[PropertyRead]:
        """Unseen listings sharing tags with the user's recently viewed ones"""
        seen = await self.interactions.recent_property_ids(
            user_id, InteractionAction.VIEW, RECOMMENDATION_HISTORY
        )
        if not seen:
            return []

        tag_rows = self._run(
            "seen tags",
            lambda: self.db.query(PropertyTag.tag).join(
                DBProperty, PropertyTag.property_pk == DBProperty.id
            ).filter(DBProperty.property_id.in_(seen)).distinct().all()
        )
        tags = [tag for (tag,) in tag_rows]
        if not tags:
            return []

        overlap = func.count(PropertyTag.id)
        rows = self._run(
            "recommendations",
            lambda: self.db.query(DBProperty).join(
                PropertyTag, PropertyTag.property_pk == DBProperty.id
            ).filter(
                live_listing(),
                PropertyTag.tag.in_(tags),
                DBProperty.property_id.notin_(seen)
            ).group_by(DBProperty.id).order_by(
                overlap.desc(), DBProperty.created_at.desc()
            ).limit(RECOMMENDATION_LIMIT).all()
        )
        return [PropertyRead.from_db(row) for row in rows]

    async def related(self, property_id: str) -> List[PropertyRead]:
        """Same city and type, priced within 10% of the reference listing"""
        reference = self._run(
            "reference property",
            lambda: self.db.query(DBProperty).filter(
                DBProperty.property_id == property_id, live_listing()
            ).first()
        )
        if not reference:
            raise NotFound(f"Property {property_id} not found")

        low = reference.price_amount * (1 - RELATED_PRICE_TOLERANCE)
        high = reference.price_amount * (1 + RELATED_PRICE_TOLERANCE)
        rows = self._run(
            "related",
            lambda: self.db.query(DBProperty).filter(
                live_listing(),
                DBProperty.id != reference.id,
                func.lower(DBProperty.address_city) == reference.address_city.lower(),
                DBProperty.property_type == reference.property_type,
                DBProperty.price_amount.between(low, high)
            ).order_by(DBProperty.created_at.desc()).limit(RELATED_LIMIT).all()
        )
        return [PropertyRead.from_db(row) for row in rows]

    def _run(self, description: str, query):
        try:
            return query()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load {description}: {e}")
            raise StorageError(f"Failed to load {description}") from e
