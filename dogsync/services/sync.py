# dogsync/services/sync.py
from typing import Iterable

from ..config import Settings
from ..models import SourceRecord, SyncResult, BatchReport
from ..utils.logger import debug, info, warn, exception
from . import catalog, media
from .mapping import to_handle, name_slug, tags_for_code, map_metafields, collect_image_refs

# =========================================================
# Single entry
# ---------------------------------------------------------
# The handle derived from the dog's name is the only lookup key. Two
# entries with the same name land on the same product; the entry id is
# not part of the key.
# =========================================================

def _label(record: SourceRecord) -> str:
    return f"entry {record.id if record.id is not None else '?'}"

def sync_entry(settings: Settings, record: SourceRecord) -> SyncResult:
    """Create or update the product for one entry, then its metafields and images."""
    if not record.name or not name_slug(record.name):
        warn(f"[sync] {_label(record)} has no usable DogName, skipped")
        return SyncResult(record.id, record.name, "skipped", reason="missing-name")

    shop = settings.require_shopify()
    handle = to_handle(record.name, settings.handle_suffix)

    existing = catalog.find_product_by_handle(shop, handle)
    product_id = catalog.upsert_product(
        shop,
        title=record.name,
        description_html=record.story or "",
        tags=tags_for_code(record.code),
        handle=handle,
        product_id=existing["id"] if existing else None,
    )
    result = SyncResult(record.id, record.name, "updated" if existing else "created",
                        handle=handle, product_id=product_id)
    info(f"[sync] {_label(record)} '{record.name}' -> {handle} ({result.action} {product_id})")

    result.metafields = catalog.set_metafields(shop, product_id, map_metafields(record))

    refs = collect_image_refs(record)
    if refs and all(ref.url for ref in refs):
        media.replace_images_with_urls(shop, product_id, [ref.url for ref in refs])
        result.images = "urls"
    elif refs:
        media.replace_images_from_files(shop, settings.require_cognito(), product_id, refs)
        result.images = "relay"
    elif settings.clear_images_when_empty:
        media.replace_images_with_urls(shop, product_id, [])
        result.images = "cleared"
    else:
        debug(f"[sync] {_label(record)} has no photos, images left as they are")

    return result

# =========================================================
# Batches (run / scan)
# =========================================================

def sync_entries(settings: Settings, records: Iterable[SourceRecord]) -> BatchReport:
    """Sync records one by one in the given order; a failing record is
    reported and the loop moves on to the next one."""
    report = BatchReport()
    for record in records:
        try:
            report.results.append(sync_entry(settings, record))
        except Exception as e:
            exception(f"[sync] {_label(record)} '{record.name}' failed: {e}")
            report.failures.append({"entryId": record.id, "name": record.name, "error": str(e)})
    info(f"[sync] batch done: processed={report.processed} skipped={report.skipped} failed={len(report.failures)}")
    return report
