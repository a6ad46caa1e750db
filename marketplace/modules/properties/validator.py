"""
Property payload validation.

Structural rules (presence, enums, ranges, nested shapes, defaults) live in the
pydantic schema. Rules that depend on sibling fields or on the clock are
checked afterwards against the raw payload, so a single call reports every
violation.
"""
import logging
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Tuple
from pydantic import ValidationError
from pydantic.alias_generators import to_snake
from marketplace.core.exceptions import FieldError, ValidationFailed
from marketplace.models.property import APARTMENT_TYPES, ListingType, PropertyPayload

logger = logging.getLogger(__name__)

YEAR_BUILT_MAX_OFFSET = 5

Rule = Tuple[Callable[[Mapping[str, Any]], bool], str, str]


def _lookup(payload: Mapping[str, Any], key: str) -> Any:
    """Read a camelCase key, falling back to its snake_case field name"""
    if key in payload:
        return payload[key]
    return payload.get(to_snake(key))


def _is_one_of(value: Any, choices) -> bool:
    return isinstance(value, str) and value.strip() in choices


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


# (condition on the payload, field that becomes required, message)
CONDITIONAL_RULES: List[Rule] = [
    (
        lambda p: _is_one_of(_lookup(p, "propertyType"), APARTMENT_TYPES),
        "flatType",
        "flatType is required for apartment property types",
    ),
    (
        lambda p: _is_one_of(_lookup(p, "listingType"), {ListingType.FOR_SALE.value}),
        "transactionType",
        "transactionType is required when listingType is For Sale",
    ),
]


def _raw_year(value: Any):
    """Year from an unvalidated payload; numeric strings count, like pydantic's lax mode"""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _format_loc(loc) -> str:
    return ".".join(str(part) for part in loc)


class PropertyValidator:
    """Validates incoming property payloads without touching storage"""

    def __init__(self, today: Callable[[], date] = date.today, rules: List[Rule] = None):
        self.today = today
        self.rules = CONDITIONAL_RULES if rules is None else rules

    def validate(self, payload: Dict[str, Any]) -> PropertyPayload:
        """Return the normalized payload or raise ValidationFailed with every error"""
        if not isinstance(payload, Mapping):
            raise ValidationFailed([FieldError("", "payload must be an object")])

        errors: List[FieldError] = []
        normalized = None

        try:
            normalized = PropertyPayload.model_validate(dict(payload))
        except ValidationError as e:
            errors.extend(
                FieldError(_format_loc(err["loc"]), err["msg"]) for err in e.errors()
            )

        errors.extend(self._conditional_errors(payload))
        errors.extend(self._year_built_errors(payload, normalized))
        errors.extend(self._media_errors(payload))

        if errors:
            logger.debug(f"Property payload rejected with {len(errors)} error(s)")
            raise ValidationFailed(errors)

        return normalized

    def _conditional_errors(self, payload: Mapping[str, Any]) -> List[FieldError]:
        errors = []
        for condition, field, message in self.rules:
            if condition(payload) and _is_blank(_lookup(payload, field)):
                errors.append(FieldError(field, message))
        return errors

    def _year_built_errors(self, payload: Mapping[str, Any], normalized=None) -> List[FieldError]:
        if normalized is not None:
            year = normalized.year_built
        else:
            year = _raw_year(_lookup(payload, "yearBuilt"))
        if year is None:
            return []
        max_year = self.today().year + YEAR_BUILT_MAX_OFFSET
        if year > max_year:
            return [FieldError("yearBuilt", f"yearBuilt must be less than or equal to {max_year}")]
        return []

    def _media_errors(self, payload: Mapping[str, Any]) -> List[FieldError]:
        media = _lookup(payload, "media")
        if not isinstance(media, list):
            return []
        primary_count = sum(
            1 for item in media
            if isinstance(item, Mapping) and _lookup(item, "isPrimary") is True
        )
        if primary_count > 1:
            return [FieldError("media", "only one media item can be marked primary")]
        return []
