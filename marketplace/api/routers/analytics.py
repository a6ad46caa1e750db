from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List
from marketplace.core.auth import get_current_user_id
from marketplace.core.database import get_db
from marketplace.models.property import PropertyRead
from marketplace.models.search import ListingTypeCount, PropertyTypePrice, StateCount, TrendingProperty
from marketplace.modules.search.service import ListingQueryService, MAX_ANALYTICS_LIMIT

router = APIRouter()


def get_query_service(db: Session = Depends(get_db)) -> ListingQueryService:
    return ListingQueryService(db)


@router.get("/top-viewed", response_model=List[PropertyRead])
async def top_viewed(
    limit: int = Query(10, ge=1, le=MAX_ANALYTICS_LIMIT),
    query_service: ListingQueryService = Depends(get_query_service)
):
    return await query_service.top_viewed(limit)


@router.get("/listing-types", response_model=List[ListingTypeCount])
async def listing_type_counts(query_service: ListingQueryService = Depends(get_query_service)):
    return await query_service.count_by_listing_type()


@router.get("/average-price", response_model=List[PropertyTypePrice])
async def average_price(query_service: ListingQueryService = Depends(get_query_service)):
    """Average asking price per property type."""
    return await query_service.average_price_by_property_type()


@router.get("/states", response_model=List[StateCount])
async def state_counts(query_service: ListingQueryService = Depends(get_query_service)):
    return await query_service.count_by_state()


@router.get("/recent", response_model=List[PropertyRead])
async def most_recent(
    limit: int = Query(10, ge=1, le=MAX_ANALYTICS_LIMIT),
    query_service: ListingQueryService = Depends(get_query_service)
):
    return await query_service.most_recent(limit)


@router.get("/trending", response_model=List[TrendingProperty])
async def trending(query_service: ListingQueryService = Depends(get_query_service)):
    return await query_service.trending()


@router.get("/recommendations", response_model=List[PropertyRead])
async def recommendations(
    current_user_id: str = Depends(get_current_user_id),
    query_service: ListingQueryService = Depends(get_query_service)
):
    """Listings sharing tags with what the current user viewed recently."""
    return await query_service.recommendations(current_user_id)
