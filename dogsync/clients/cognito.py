# dogsync/clients/cognito.py
from typing import Optional, Tuple

import requests

from ..config import CognitoConfig
from ..errors import CognitoError
from ..models import ImageRef

def auth_headers(api_key: str) -> dict:
    return {"Authorization": f"Bearer {api_key}", "Accept": "application/json"}

def entries_url(cfg: CognitoConfig) -> str:
    return f"{cfg.base}/forms/{cfg.form_id}/entries"

def get_raw(cfg: CognitoConfig, path: str, params: Optional[dict] = None) -> requests.Response:
    """Unchecked GET against the Cognito API; used by the pass-through routes."""
    return requests.get(f"{cfg.base}{path}", headers=auth_headers(cfg.api_key), params=params, timeout=30)

def get_json(url: str, headers: dict, params: Optional[dict] = None):
    try:
        r = requests.get(url, headers=headers, params=params, timeout=30)
    except requests.RequestException as e:
        raise CognitoError(url, None, reason=str(e)) from e
    if not r.ok:
        raise CognitoError(r.url or url, r.status_code, r.text)
    try:
        return r.json()
    except ValueError as e:
        raise CognitoError(r.url or url, r.status_code, r.text[:500], reason="bad JSON") from e

def as_entry_list(url: str, body) -> list:
    """Entries come back as a bare array; OData-style wrappers are accepted too."""
    if isinstance(body, list):
        return body
    if isinstance(body, dict):
        for key in ("value", "Entries", "entries"):
            if isinstance(body.get(key), list):
                return body[key]
    raise CognitoError(url, 200, str(body)[:500], reason="response is not a list of entries")

def list_entries(cfg: CognitoConfig, page: Optional[int] = None, page_size: Optional[int] = None) -> list:
    url = entries_url(cfg)
    params = None
    if page is not None:
        params = {"page": page, "pageSize": page_size or cfg.page_size}
    return as_entry_list(url, get_json(url, auth_headers(cfg.api_key), params))

def get_entry(cfg: CognitoConfig, number: int) -> Optional[dict]:
    """One entry by number; None on 404, CognitoError on anything else that is not 2xx."""
    url = f"{entries_url(cfg)}/{number}"
    try:
        r = requests.get(url, headers=auth_headers(cfg.api_key), timeout=30)
    except requests.RequestException as e:
        raise CognitoError(url, None, reason=str(e)) from e
    if r.status_code == 404:
        return None
    if not r.ok:
        raise CognitoError(url, r.status_code, r.text)
    try:
        return r.json()
    except ValueError as e:
        raise CognitoError(url, r.status_code, r.text[:500], reason="bad JSON") from e

def download_file(cfg: CognitoConfig, ref: ImageRef) -> Tuple[bytes, Optional[str]]:
    """Bytes and content type for a file ref, from its Url or from /files/{id}."""
    url = ref.url or f"{cfg.base}/files/{ref.id}"
    try:
        r = requests.get(url, headers={"Authorization": f"Bearer {cfg.api_key}"}, timeout=60)
    except requests.RequestException as e:
        raise CognitoError(url, None, reason=str(e)) from e
    if not r.ok:
        raise CognitoError(url, r.status_code, r.text[:300])
    return r.content, r.headers.get("Content-Type")
