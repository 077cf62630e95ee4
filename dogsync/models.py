# dogsync/models.py
"""Canonical record shapes.

Cognito payloads are normalized here and nowhere else: the rest of the
package only ever sees ``SourceRecord`` / ``ImageRef``.
"""
from dataclasses import dataclass, field, asdict
from typing import Optional, List, Tuple, Any

PHOTO_FIELDS = ("MainPhoto", "AdditionalPhoto1", "AdditionalPhoto2", "AdditionalPhoto3", "AdditionalPhoto4")


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


@dataclass(frozen=True)
class ImageRef:
    id: Optional[str] = None
    filename: Optional[str] = None
    url: Optional[str] = None

    @classmethod
    def from_payload(cls, payload) -> Optional["ImageRef"]:
        """Return None for empty slots and for refs with neither Id nor Url."""
        # Cognito sends file fields as a one-element list on some forms
        if isinstance(payload, list):
            payload = payload[0] if payload else None
        if not isinstance(payload, dict):
            return None
        ref = cls(
            id=_text(payload.get("Id")),
            filename=_text(payload.get("FileName") or payload.get("Name")),
            url=_text(payload.get("Url") or payload.get("File")),
        )
        if not (ref.id or ref.url):
            return None
        return ref


@dataclass(frozen=True)
class SourceRecord:
    id: Optional[int]
    name: Optional[str]
    story: Optional[str] = None
    code: Optional[str] = None
    main_photo: Optional[ImageRef] = None
    additional_photos: Tuple[Optional[ImageRef], ...] = (None, None, None, None)
    litter_name: Optional[str] = None
    birthday: Optional[str] = None
    breed: Optional[str] = None
    gender: Optional[str] = None
    adult_size: Optional[str] = None
    availability: Optional[str] = None
    raw: dict = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_payload(cls, payload: dict) -> "SourceRecord":
        payload = payload or {}
        entry_id = payload.get("Id")
        if entry_id is None:
            entry_id = payload.get("Number")
        try:
            entry_id = int(entry_id) if entry_id is not None else None
        except (TypeError, ValueError):
            entry_id = None

        photos = [ImageRef.from_payload(payload.get(f)) for f in PHOTO_FIELDS]
        return cls(
            id=entry_id,
            name=_text(payload.get("DogName")) or _text(payload.get("Name")),
            story=_text(payload.get("MyStory")),
            code=_text(payload.get("Code")),
            main_photo=photos[0],
            additional_photos=tuple(photos[1:]),
            litter_name=_text(payload.get("LitterName")),
            birthday=_text(payload.get("PupBirthday")),
            breed=_text(payload.get("Breed")),
            gender=_text(payload.get("Gender")),
            adult_size=_text(payload.get("EstimatedSizeWhenGrown")),
            availability=_text(payload.get("Availability")),
            raw=payload,
        )


@dataclass(frozen=True)
class MetafieldEntry:
    namespace: str
    key: str
    type: str
    value: str

    def as_input(self, owner_id: str) -> dict:
        return {"ownerId": owner_id, **asdict(self)}


@dataclass
class SyncResult:
    entry_id: Optional[int]
    name: Optional[str]
    action: str                      # created | updated | skipped
    handle: Optional[str] = None
    product_id: Optional[str] = None
    reason: Optional[str] = None
    metafields: int = 0
    images: str = "none"             # urls | relay | cleared | none

    def to_dict(self) -> dict:
        return {
            "entryId": self.entry_id,
            "name": self.name,
            "action": self.action,
            "handle": self.handle,
            "productId": self.product_id,
            "reason": self.reason,
            "metafields": self.metafields,
            "images": self.images,
        }


@dataclass
class BatchReport:
    results: List[SyncResult] = field(default_factory=list)
    failures: List[dict] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return sum(1 for r in self.results if r.action != "skipped")

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.results if r.action == "skipped")

    def to_dict(self) -> dict:
        return {
            "processed": self.processed,
            "skipped": self.skipped,
            "failed": len(self.failures),
            "results": [r.to_dict() for r in self.results],
            "failures": self.failures,
        }


@dataclass
class ScanResult:
    start: int
    last_checked: int
    found_numbers: List[int] = field(default_factory=list)
    records: List[SourceRecord] = field(default_factory=list)
    misses: int = 0

    @property
    def checked_range(self) -> Tuple[int, int]:
        return (self.start, self.last_checked)
