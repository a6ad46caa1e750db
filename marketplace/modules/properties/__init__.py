from .identifiers import IdentifierGenerator, slugify
from .validator import PropertyValidator, CONDITIONAL_RULES
from .service import PropertyService, ensure_primary_media, merge_document

__all__ = [
    "IdentifierGenerator", "slugify",
    "PropertyValidator", "CONDITIONAL_RULES",
    "PropertyService", "ensure_primary_media", "merge_document",
]
