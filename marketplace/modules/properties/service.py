from typing import List, Optional, Dict, Any, Callable
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from pydantic.alias_generators import to_camel
from datetime import datetime, timezone
from tenacity import Retrying, stop_after_attempt, retry_if_exception_type
from marketplace.core.config import Settings, settings as default_settings
from marketplace.core.exceptions import (
    Conflict, FieldError, NotFound, StorageError, ValidationFailed
)
from marketplace.db.models import Property as DBProperty, PropertyTag, User as DBUser
from marketplace.models.property import (
    ApprovalStatus, Counter, DEFAULT_COUNTRY, IMMUTABLE_FIELDS, PropertyPayload, PropertyRead
)
from marketplace.modules.properties.identifiers import IdentifierGenerator
from marketplace.modules.properties.validator import PropertyValidator
import uuid
import logging

logger = logging.getLogger(__name__)

DEFAULT_REJECTION_REASON = "No reason provided"

# Payload keys that are re-validated on update
EDITABLE_KEYS = frozenset(
    field.alias or to_camel(name)
    for name, field in PropertyPayload.model_fields.items()
) - IMMUTABLE_FIELDS


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_primary_media(media: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Mark the first item primary when media exist and none is marked"""
    if media and not any(item.get("isPrimary") for item in media):
        media[0]["isPrimary"] = True
    return media


def merge_document(base: Dict[str, Any], patch: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``patch`` into a copy of ``base``; lists are replaced"""
    merged = dict(base)
    for key, value in patch.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_document(merged[key], value)
        else:
            merged[key] = value
    return merged


def _dump(model):
    if model is None:
        return None
    return model.model_dump(by_alias=True, mode="json")


def _value(enum_member):
    return enum_member.value if enum_member is not None else None


def _normalize_tags(tags: List[str]) -> List[str]:
    seen = []
    for tag in tags:
        cleaned = tag.strip().lower()
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return seen


class PropertyService:
    """Owns every state change of a property after validation"""

    def __init__(self,
                 db: Session,
                 settings: Optional[Settings] = None,
                 validator: Optional[PropertyValidator] = None,
                 identifiers: Optional[IdentifierGenerator] = None,
                 clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.settings = settings or default_settings
        self.validator = validator or PropertyValidator()
        self.identifiers = identifiers or IdentifierGenerator(
            exists=self._property_id_exists,
            prefix=self.settings.PROPERTY_ID_PREFIX,
            length=self.settings.PROPERTY_ID_LENGTH,
            max_attempts=self.settings.ID_GENERATION_MAX_ATTEMPTS,
        )
        self.clock = clock

    async def create(self, payload: Dict[str, Any], owner_id: str) -> PropertyRead:
        """Validate and store a new listing owned by ``owner_id``"""
        normalized = self.validator.validate(payload)

        try:
            owner_uuid = self._require_user(owner_id)

            requested_id = normalized.property_id
            if requested_id and self._property_id_exists(requested_id):
                raise Conflict(f"Property id {requested_id} is already in use")

            retrying = Retrying(
                stop=stop_after_attempt(self.settings.INSERT_MAX_ATTEMPTS),
                retry=retry_if_exception_type(IntegrityError),
                reraise=True,
            )
            db_property = retrying(self._insert, normalized, owner_uuid, requested_id)

        except IntegrityError as e:
            logger.error(f"Property insert kept violating unique constraints: {e}")
            raise Conflict("Could not store property with unique identifiers") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to create property: {e}")
            raise StorageError("Failed to create property") from e

        logger.info(f"Property {db_property.property_id} created by {owner_id}")
        return PropertyRead.from_db(db_property)

    async def get(self, property_id: str) -> PropertyRead:
        return PropertyRead.from_db(self._get_live(property_id))

    async def get_by_slug(self, slug: str) -> PropertyRead:
        try:
            db_property = self.db.query(DBProperty).filter(
                DBProperty.slug == slug,
                DBProperty.is_deleted.is_(False)
            ).first()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load property by slug {slug}: {e}")
            raise StorageError("Failed to load property") from e

        if not db_property:
            raise NotFound(f"Property with slug {slug} not found")
        return PropertyRead.from_db(db_property)

    async def update(self, property_id: str, fields: Dict[str, Any], actor_id: str) -> PropertyRead:
        """Merge ``fields`` into the listing and re-validate the result"""
        db_property = self._get_live(property_id)
        actor_uuid = self._require_user(actor_id)

        patch = {}
        for key, value in fields.items():
            if key in PropertyPayload.model_fields:
                key = PropertyPayload.model_fields[key].alias or to_camel(key)
            if key in EDITABLE_KEYS:
                patch[key] = value

        current = PropertyRead.from_db(db_property).model_dump(by_alias=True, mode="json")
        document = {key: value for key, value in current.items() if key in EDITABLE_KEYS}
        normalized = self.validator.validate(merge_document(document, patch))

        try:
            self._apply_payload(db_property, normalized)
            self._stamp(db_property, actor_uuid)
            self.db.commit()
            self.db.refresh(db_property)
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Property {property_id} update violated a constraint: {e}")
            raise Conflict("Property update conflicts with existing data") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to update property {property_id}: {e}")
            raise StorageError("Failed to update property") from e

        logger.info(f"Property {property_id} updated by {actor_id}")
        return PropertyRead.from_db(db_property)

    async def soft_delete(self, property_id: str, actor_id: Optional[str] = None) -> None:
        """Hide a listing; deleting an already deleted listing changes nothing"""
        db_property = self._find(property_id)
        if db_property.is_deleted:
            logger.info(f"Property {property_id} already deleted, nothing to do")
            return
        actor_uuid = self._optional_user(actor_id)

        try:
            db_property.is_deleted = True
            db_property.deleted_at = self.clock()
            self._stamp(db_property, actor_uuid)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to delete property {property_id}: {e}")
            raise StorageError("Failed to delete property") from e

        logger.info(f"Property {property_id} soft-deleted by {actor_id}")

    async def restore(self, property_id: str, actor_id: Optional[str] = None) -> PropertyRead:
        db_property = self._find(property_id)
        if not db_property.is_deleted:
            return PropertyRead.from_db(db_property)
        actor_uuid = self._optional_user(actor_id)

        try:
            db_property.is_deleted = False
            db_property.deleted_at = None
            self._stamp(db_property, actor_uuid)
            self.db.commit()
            self.db.refresh(db_property)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to restore property {property_id}: {e}")
            raise StorageError("Failed to restore property") from e

        logger.info(f"Property {property_id} restored by {actor_id}")
        return PropertyRead.from_db(db_property)

    async def set_verification(self,
                               property_id: str,
                               approved: bool,
                               reason: Optional[str] = None,
                               actor_id: Optional[str] = None) -> PropertyRead:
        """Approve or reject a listing; any status may move to any other"""
        db_property = self._get_live(property_id)
        actor_uuid = self._optional_user(actor_id)

        try:
            if approved:
                db_property.is_verified = True
                db_property.approval_status = ApprovalStatus.APPROVED.value
                db_property.verified_at = self.clock()
                db_property.rejection_reason = None
            else:
                db_property.is_verified = False
                db_property.approval_status = ApprovalStatus.REJECTED.value
                db_property.verified_at = None
                db_property.rejection_reason = reason or DEFAULT_REJECTION_REASON
            self._stamp(db_property, actor_uuid)
            self.db.commit()
            self.db.refresh(db_property)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to set verification for property {property_id}: {e}")
            raise StorageError("Failed to update verification") from e

        logger.info(
            f"Property {property_id} {db_property.approval_status.lower()} by {actor_id}"
        )
        return PropertyRead.from_db(db_property)

    async def increment_counter(self, property_id: str, counter: str) -> None:
        """Atomically add one to an engagement counter"""
        try:
            counter = Counter(counter)
        except ValueError:
            raise ValidationFailed([FieldError("counter", f"Unknown counter '{counter}'")])

        column = getattr(DBProperty, counter.value)
        stmt = (
            update(DBProperty)
            .where(DBProperty.property_id == property_id, DBProperty.is_deleted.is_(False))
            .values({column: column + 1})
            .execution_options(synchronize_session=False)
        )

        try:
            result = self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to increment {counter.value} for property {property_id}: {e}")
            raise StorageError("Failed to update counter") from e

        if result.rowcount == 0:
            raise NotFound(f"Property {property_id} not found")

    def _insert(self, normalized: PropertyPayload, owner_uuid: uuid.UUID, requested_id: Optional[str]) -> DBProperty:
        property_id = requested_id or self.identifiers.new_property_id()
        slug = self.identifiers.new_slug(
            normalized.title, normalized.address.area, normalized.address.city
        )

        db_property = DBProperty(
            id=uuid.uuid4(),
            property_id=property_id,
            slug=slug,
            owner_id=owner_uuid,
            approval_status=ApprovalStatus.PENDING.value,
            is_verified=False,
            is_deleted=False,
            views=0,
            saves=0,
            shares=0,
            inquiries=0,
        )
        self._apply_payload(db_property, normalized)
        self._stamp(db_property, owner_uuid)

        self.db.add(db_property)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"Unique constraint hit while inserting property {property_id}, retrying")
            raise
        self.db.refresh(db_property)
        return db_property

    def _apply_payload(self, db_property: DBProperty, payload: PropertyPayload):
        address = payload.address
        db_property.title = payload.title
        db_property.description = payload.description

        db_property.address_street = address.street
        db_property.address_area = address.area
        db_property.address_city = address.city
        db_property.address_state = address.state
        db_property.address_lga = address.lga
        db_property.address_postal_code = address.postal_code
        db_property.address_country = address.country or DEFAULT_COUNTRY
        db_property.address_landmark = address.landmark
        db_property.location = _dump(payload.location)

        db_property.property_type = _value(payload.property_type)
        db_property.flat_type = _value(payload.flat_type)
        db_property.listing_type = _value(payload.listing_type)
        db_property.transaction_type = _value(payload.transaction_type)

        db_property.furnishing_status = _value(payload.furnishing_status)
        db_property.property_condition = _value(payload.property_condition)
        db_property.possession_status = _value(payload.possession_status)
        db_property.available_from = payload.available_from
        db_property.year_built = payload.year_built
        db_property.facing = _value(payload.facing)

        db_property.bedrooms = payload.bedrooms
        db_property.bathrooms = payload.bathrooms
        db_property.kitchens = payload.kitchens
        db_property.balconies = payload.balconies
        db_property.floor = payload.floor
        db_property.total_floors = payload.total_floors
        db_property.parking = _dump(payload.parking)
        db_property.floor_size = _dump(payload.floor_size)
        db_property.carpet_area = _dump(payload.carpet_area)

        db_property.price_amount = payload.price.amount
        db_property.price_currency = payload.price.currency
        db_property.price_negotiable = payload.price.negotiable
        db_property.payment_plans = [_dump(plan) for plan in payload.payment_plans]
        db_property.rental_details = _dump(payload.rental_details)

        db_property.utilities = _dump(payload.utilities)
        db_property.amenities = [_value(a) for a in payload.amenities]
        db_property.additional_rooms = [_value(r) for r in payload.additional_rooms]
        db_property.highlights = list(payload.highlights)
        db_property.nearby_places = payload.nearby_places
        db_property.legal_documents = payload.legal_documents
        db_property.floor_plan = _dump(payload.floor_plan)
        db_property.registry_reference = payload.registry_reference

        db_property.media = ensure_primary_media([_dump(item) for item in payload.media])
        db_property.contact_person = [_dump(contact) for contact in payload.contact_person]

        # Keep rows for tags that survive so the unique index never sees a duplicate
        existing = {row.tag: row for row in db_property.tag_rows}
        db_property.tag_rows = [
            existing.get(tag) or PropertyTag(tag=tag)
            for tag in _normalize_tags(payload.tags)
        ]

    def _stamp(self, db_property: DBProperty, actor_uuid: Optional[uuid.UUID]):
        db_property.last_modified_at = self.clock()
        if actor_uuid is not None:
            db_property.last_modified_by = actor_uuid

    def _property_id_exists(self, property_id: str) -> bool:
        return self.db.query(DBProperty.id).filter(
            DBProperty.property_id == property_id
        ).first() is not None

    def _find(self, property_id: str) -> DBProperty:
        """Load a property whether or not it is soft-deleted"""
        try:
            db_property = self.db.query(DBProperty).filter(
                DBProperty.property_id == property_id
            ).first()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load property {property_id}: {e}")
            raise StorageError("Failed to load property") from e

        if not db_property:
            raise NotFound(f"Property {property_id} not found")
        return db_property

    def _get_live(self, property_id: str) -> DBProperty:
        db_property = self._find(property_id)
        if db_property.is_deleted:
            raise NotFound(f"Property {property_id} not found")
        return db_property

    def _require_user(self, user_id: Optional[str]) -> uuid.UUID:
        if not user_id:
            raise NotFound("Acting user is required")
        try:
            user_uuid = uuid.UUID(str(user_id))
        except ValueError:
            raise NotFound(f"User {user_id} not found")

        try:
            user = self.db.query(DBUser.id).filter(
                DBUser.id == user_uuid,
                DBUser.is_active.is_(True)
            ).first()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load user {user_id}: {e}")
            raise StorageError("Failed to load user") from e

        if not user:
            raise NotFound(f"User {user_id} not found")
        return user_uuid

    def _optional_user(self, user_id: Optional[str]) -> Optional[uuid.UUID]:
        return self._require_user(user_id) if user_id else None
