from fastapi import APIRouter, Body, Depends, Query, Request, Response, status
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session
from typing import List, Optional, Dict, Any
from marketplace.core.auth import get_current_user_id, get_optional_user_id
from marketplace.core.database import get_db
from marketplace.core.exceptions import FieldError, ValidationFailed
from marketplace.models.interaction import InteractionAction
from marketplace.models.property import Counter, ListingType, PropertyRead, PropertyType
from marketplace.models.search import ListingFilters, Pagination, SearchResult
from marketplace.modules.interactions.service import InteractionLog
from marketplace.modules.properties.service import PropertyService
from marketplace.modules.search.service import ListingQueryService
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


class VerificationRequest(BaseModel):
    approved: bool
    reason: Optional[str] = None


def get_property_service(request: Request, db: Session = Depends(get_db)) -> PropertyService:
    return PropertyService(db, settings=request.app.state.settings)


def get_query_service(db: Session = Depends(get_db)) -> ListingQueryService:
    return ListingQueryService(db)


def get_interaction_log(db: Session = Depends(get_db)) -> InteractionLog:
    return InteractionLog(db)


def _as_validation_failed(error: ValidationError) -> ValidationFailed:
    return ValidationFailed([
        FieldError(".".join(str(part) for part in err["loc"]), err["msg"])
        for err in error.errors()
    ])


@router.post("/", response_model=PropertyRead, status_code=status.HTTP_201_CREATED)
async def create_property(
    payload: Dict[str, Any] = Body(...),
    current_user_id: str = Depends(get_current_user_id),
    property_service: PropertyService = Depends(get_property_service)
):
    """
    Create a listing owned by the authenticated user.

    Every validation problem is reported at once with its field path.
    """
    return await property_service.create(payload, current_user_id)


@router.get("/", response_model=SearchResult)
async def search_properties(
    request: Request,
    q: Optional[str] = Query(None, description="Text in title, description, area or city"),
    city: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    listing_type: Optional[ListingType] = Query(None),
    property_type: Optional[PropertyType] = Query(None),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    min_bedrooms: Optional[int] = Query(None, ge=0),
    is_verified: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1),
    current_user_id: Optional[str] = Depends(get_optional_user_id),
    query_service: ListingQueryService = Depends(get_query_service),
    interactions: InteractionLog = Depends(get_interaction_log)
):
    """Search live listings with AND-combined filters and 1-indexed pages."""
    settings = request.app.state.settings
    try:
        filters = ListingFilters(
            q=q, city=city, state=state, listing_type=listing_type,
            property_type=property_type, min_price=min_price, max_price=max_price,
            min_bedrooms=min_bedrooms, is_verified=is_verified
        )
        pagination = Pagination(
            page=page,
            page_size=min(page_size or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)
        )
    except ValidationError as e:
        raise _as_validation_failed(e)

    result = await query_service.search(filters, pagination)

    if current_user_id and q:
        await interactions.record(current_user_id, InteractionAction.SEARCH, search_query=q)

    return result


@router.get("/slug/{slug}", response_model=PropertyRead)
async def get_property_by_slug(
    slug: str,
    property_service: PropertyService = Depends(get_property_service)
):
    return await property_service.get_by_slug(slug)


@router.get("/{property_id}", response_model=PropertyRead)
async def get_property(
    property_id: str,
    current_user_id: Optional[str] = Depends(get_optional_user_id),
    property_service: PropertyService = Depends(get_property_service),
    interactions: InteractionLog = Depends(get_interaction_log)
):
    """Get a listing and count the view."""
    await property_service.increment_counter(property_id, Counter.VIEWS.value)
    if current_user_id:
        await interactions.record(current_user_id, InteractionAction.VIEW, property_id=property_id)
    return await property_service.get(property_id)


@router.patch("/{property_id}", response_model=PropertyRead)
async def update_property(
    property_id: str,
    fields: Dict[str, Any] = Body(...),
    current_user_id: str = Depends(get_current_user_id),
    property_service: PropertyService = Depends(get_property_service)
):
    """Merge fields into a listing; the merged document is validated again."""
    return await property_service.update(property_id, fields, current_user_id)


@router.delete("/{property_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_property(
    property_id: str,
    current_user_id: str = Depends(get_current_user_id),
    property_service: PropertyService = Depends(get_property_service)
):
    await property_service.soft_delete(property_id, current_user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{property_id}/restore", response_model=PropertyRead)
async def restore_property(
    property_id: str,
    current_user_id: str = Depends(get_current_user_id),
    property_service: PropertyService = Depends(get_property_service)
):
    return await property_service.restore(property_id, current_user_id)


@router.post("/{property_id}/verification", response_model=PropertyRead)
async def set_property_verification(
    property_id: str,
    verification: VerificationRequest,
    current_user_id: str = Depends(get_current_user_id),
    property_service: PropertyService = Depends(get_property_service)
):
    """Approve or reject a listing."""
    return await property_service.set_verification(
        property_id, verification.approved, verification.reason, current_user_id
    )


async def _engage(property_id: str,
                  counter: Counter,
                  action: Optional[InteractionAction],
                  user_id: Optional[str],
                  property_service: PropertyService,
                  interactions: InteractionLog) -> Dict[str, Any]:
    await property_service.increment_counter(property_id, counter.value)
    if user_id and action:
        await interactions.record(user_id, action, property_id=property_id)
    return {"propertyId": property_id, "counter": counter.value}


@router.post("/{property_id}/save")
async def save_property(
    property_id: str,
    current_user_id: Optional[str] = Depends(get_optional_user_id),
    property_service: PropertyService = Depends(get_property_service),
    interactions: InteractionLog = Depends(get_interaction_log)
):
    return await _engage(property_id, Counter.SAVES, InteractionAction.SAVE,
                         current_user_id, property_service, interactions)


@router.post("/{property_id}/share")
async def share_property(
    property_id: str,
    current_user_id: Optional[str] = Depends(get_optional_user_id),
    property_service: PropertyService = Depends(get_property_service),
    interactions: InteractionLog = Depends(get_interaction_log)
):
    return await _engage(property_id, Counter.SHARES, InteractionAction.SHARE,
                         current_user_id, property_service, interactions)


@router.post("/{property_id}/inquire")
async def inquire_property(
    property_id: str,
    current_user_id: Optional[str] = Depends(get_optional_user_id),
    property_service: PropertyService = Depends(get_property_service),
    interactions: InteractionLog = Depends(get_interaction_log)
):
    return await _engage(property_id, Counter.INQUIRIES, None,
                         current_user_id, property_service, interactions)


@router.get("/{property_id}/related", response_model=List[PropertyRead])
async def get_related_properties(
    property_id: str,
    query_service: ListingQueryService = Depends(get_query_service)
):
    """Listings in the same city and type, priced within 10% of this one."""
    return await query_service.related(property_id)
