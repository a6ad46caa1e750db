"""
Property identifier and slug generation
"""
import logging
import random
import re
import string
import unicodedata
from typing import Callable, Optional
from tenacity import Retrying, RetryError, stop_after_attempt, retry_if_result
from marketplace.core.exceptions import GenerationExhausted

logger = logging.getLogger(__name__)

ID_ALPHABET = string.ascii_uppercase + string.digits
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """Lowercase, accent-free, hyphen-separated form of ``text``"""
    normalized = unicodedata.normalize("NFKD", str(text))
    without_marks = "".join(ch for ch in normalized if not unicodedata.combining(ch))
    return _NON_ALNUM.sub("-", without_marks.lower().strip()).strip("-")


class IdentifierGenerator:
    """Generates public property ids and slugs.

    ``exists`` reports whether a candidate property id is already stored.
    Property ids are checked before use; slugs carry a random 4-digit suffix
    and rely on the unique index instead.
    """

    def __init__(self,
                 exists: Callable[[str], bool],
                 prefix: str = "TVICL",
                 length: int = 10,
                 max_attempts: int = 5,
                 rng: Optional[random.Random] = None):
        if length < 1:
            raise ValueError("length must be positive")
        if max_attempts < 1:
            raise ValueError("max_attempts must be positive")
        self.exists = exists
        self.prefix = prefix
        self.length = length
        self.max_attempts = max_attempts
        self.rng = rng or random.SystemRandom()

    def random_property_id(self) -> str:
        return self.prefix + "".join(self.rng.choice(ID_ALPHABET) for _ in range(self.length))

    def new_property_id(self) -> str:
        """Return an unused property id or raise GenerationExhausted"""
        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            retry=retry_if_result(self._is_taken),
        )
        try:
            return retrying(self.random_property_id)
        except RetryError:
            logger.error(f"No free property id after {self.max_attempts} attempts")
            raise GenerationExhausted(
                f"could not generate a unique property id in {self.max_attempts} attempts"
            )

    def new_slug(self, title: str, area: Optional[str] = None, city: Optional[str] = None) -> str:
        base = slugify(" ".join(part for part in (title, area, city) if part))
        suffix = self.rng.randint(1000, 9999)
        return f"{base}-{suffix}" if base else str(suffix)

    def _is_taken(self, candidate: str) -> bool:
        taken = self.exists(candidate)
        if taken:
            logger.warning(f"Generated property id {candidate} already exists, retrying")
        return taken
