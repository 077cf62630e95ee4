# dogsync/services/media.py
"""Whole-set image replacement for a product.

Both paths run list -> delete -> create. They are not transactional: if the
process dies after the delete the product has no images until the next sync
of that entry, which starts again from a fresh listing.
"""
import mimetypes
from typing import List

import requests

from ..config import ShopifyConfig, CognitoConfig
from ..clients import cognito
from ..errors import CognitoError, MediaError
from ..models import ImageRef
from ..utils.logger import info, debug
from . import catalog

DEFAULT_MIME = "image/jpeg"


def clear_media(shop: ShopifyConfig, product_id: str) -> int:
    existing = catalog.list_media_ids(shop, product_id)
    if existing:
        catalog.delete_media(shop, product_id, existing)
        debug(f"[media] deleted {len(existing)} media from {product_id}")
    return len(existing)


def replace_images_with_urls(shop: ShopifyConfig, product_id: str, urls: List[str]) -> List[dict]:
    """Shopify fetches each URL itself, so they must be publicly reachable."""
    removed = clear_media(shop, product_id)
    created = catalog.create_media(shop, product_id, urls)
    info(f"[media] {product_id}: replaced {removed} media with {len(urls)} url image(s)")
    return created


def _filename_for(ref: ImageRef, position: int) -> str:
    return ref.filename or f"photo-{position}.jpg"


def _upload_to_target(target: dict, filename: str, mime_type: str, content: bytes) -> None:
    fields = {p["name"]: p["value"] for p in (target.get("parameters") or [])}
    try:
        r = requests.post(target["url"], data=fields,
                          files={"file": (filename, content, mime_type)}, timeout=120)
    except requests.RequestException as e:
        raise MediaError(f"staged upload of {filename} failed: {e}") from e
    if r.status_code not in (200, 201, 204):
        raise MediaError(f"staged upload of {filename} failed: {r.status_code} {r.text[:300]}")


def relay_file(shop: ShopifyConfig, source: CognitoConfig, ref: ImageRef, position: int) -> str:
    """Stage one Cognito file on Shopify and return the staged resourceUrl."""
    filename = _filename_for(ref, position)
    try:
        content, content_type = cognito.download_file(source, ref)
    except CognitoError as e:
        raise MediaError(f"download of {filename} failed: {e}") from e
    if content_type and content_type.startswith("image/"):
        mime_type = content_type.split(";")[0]
    else:
        mime_type = mimetypes.guess_type(filename)[0] or DEFAULT_MIME
    target = catalog.staged_upload_target(shop, filename, mime_type, size=len(content))
    _upload_to_target(target, filename, mime_type, content)
    return target["resourceUrl"]


def replace_images_from_files(shop: ShopifyConfig, source: CognitoConfig, product_id: str,
                              refs: List[ImageRef]) -> List[dict]:
    """Byte relay for refs without a usable URL: every file is staged before
    any media is created, so one failed file leaves no partial set behind."""
    removed = clear_media(shop, product_id)
    resource_urls = [relay_file(shop, source, ref, i) for i, ref in enumerate(refs, start=1)]
    created = catalog.create_media(shop, product_id, resource_urls)
    info(f"[media] {product_id}: replaced {removed} media with {len(resource_urls)} relayed file(s)")
    return created
