# dogsync/services/mapping.py
from datetime import datetime
from typing import List, Optional

from slugify import slugify

from ..models import SourceRecord, ImageRef, MetafieldEntry
from ..utils.logger import warn

METAFIELD_NS = "mbpr"

TAG_MANAGED = "mbpr-managed"
TAG_AVAILABLE = "mbpr-available"
TAG_ADOPTED = "mbpr-adopted"

AVAILABLE_CODES = frozenset({
    "Available: Now",
    "Available Now: Mama's",
    "Available: VIP Litter",
})
ADOPTED_CODE = "Adopted"

_DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%m/%d/%y", "%m-%d-%Y", "%B %d, %Y", "%b %d, %Y", "%d %B %Y")

# =========================================================
# Handles
# =========================================================

# apostrophes are dropped, not turned into separators: "Mama's" -> "mamas"
_QUOTES = [["'", ""], ["\u2019", ""]]

def name_slug(name: Optional[str]) -> str:
    return slugify(name or "", lowercase=True, replacements=_QUOTES)

def to_handle(name: str, suffix: str = "mbpr") -> str:
    """rex -> rex-rex-mbpr; the handle is the only key used to find a dog's product."""
    slug = name_slug(name)
    if not slug:
        raise ValueError(f"name {name!r} has no characters usable in a handle")
    return f"{slug}-{slug}-{name_slug(suffix) or 'mbpr'}"

# =========================================================
# Tags / metafields / images
# =========================================================

def tags_for_code(code: Optional[str]) -> List[str]:
    tags = [TAG_MANAGED]
    val = (code or "").strip()
    if val in AVAILABLE_CODES:
        tags.append(TAG_AVAILABLE)
    elif val == ADOPTED_CODE:
        tags.append(TAG_ADOPTED)
    return tags

def parse_birthday(raw: str) -> Optional[str]:
    """Return YYYY-MM-DD or None when the string is not a date we recognise."""
    s = raw.strip()
    try:
        # ISO dates and datetimes, including a trailing Z
        return datetime.fromisoformat(s.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date().isoformat()
        except ValueError:
            continue
    return None

def _text_field(key: str, value: str) -> MetafieldEntry:
    return MetafieldEntry(METAFIELD_NS, key, "single_line_text_field", value)

def map_metafields(record: SourceRecord) -> List[MetafieldEntry]:
    metas: List[MetafieldEntry] = []
    if record.litter_name:
        metas.append(_text_field("litter", record.litter_name))
    if record.birthday:
        day = parse_birthday(record.birthday)
        if day:
            metas.append(MetafieldEntry(METAFIELD_NS, "birthday", "date", day))
        else:
            warn(f"[mapping] entry {record.id}: unparseable PupBirthday {record.birthday!r}, birthday skipped")
    if record.breed:
        metas.append(_text_field("breed", record.breed))
    if record.gender:
        metas.append(_text_field("gender", record.gender))
    if record.adult_size:
        metas.append(_text_field("adult_size", record.adult_size))
    if record.availability:
        metas.append(_text_field("availability", record.availability))
    return metas

def collect_image_refs(record: SourceRecord) -> List[ImageRef]:
    slots = (record.main_photo,) + tuple(record.additional_photos)
    return [ref for ref in slots if ref is not None]
