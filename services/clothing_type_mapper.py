# tailor_bill/services/clothing_type_mapper.py

import logging
from typing import List

from domain.garments import canonical_key, list_types, normalize_garment_name

logger = logging.getLogger(__name__)

# Values of the `clothing_type` enum in the database. Nothing else may be written.
STORAGE_CLOTHING_TYPES = ("shirt", "pant", "kurta_pajama", "suit", "blouse", "saree_blouse")

STORAGE_FALLBACK = "shirt"

# The measurement vocabulary is richer than the DB enum, so several garment
# types share one storage value. Every registry type needs an entry here.
_STORAGE_BY_GARMENT = {
    "shirt": "shirt",
    "pant": "pant",
    "kurta": "kurta_pajama",
    "short_kurta": "kurta_pajama",
    "pajama": "kurta_pajama",
    "coat": "suit",
    "bandi": "suit",
    "westcot": "suit",
    "blouse": "blouse",
    "saree_blouse": "saree_blouse",
}


def to_storage_enum(garment_type) -> str:
    """
    Collapse any garment label onto the DB clothing_type enum.
    Never raises; unmapped input is stored as "shirt".
    """
    if isinstance(garment_type, str) and canonical_key(garment_type) in STORAGE_CLOTHING_TYPES:
        return canonical_key(garment_type)

    key = normalize_garment_name(garment_type) if isinstance(garment_type, str) else None
    storage = _STORAGE_BY_GARMENT.get(key) if key else None
    if storage is None:
        logger.warning("No storage clothing_type for %r, storing as %s", garment_type, STORAGE_FALLBACK)
        return STORAGE_FALLBACK
    return storage


def unmapped_garment_types() -> List[str]:
    """Registry garment types that would silently degrade to the fallback."""
    return [t for t in list_types() if t not in _STORAGE_BY_GARMENT]
