# dogsync/routes/sync_trigger.py
import requests
from flask import Blueprint, request, jsonify

from ..config import current_settings
from ..clients import cognito
from ..services.entries import EntrySource
from ..services.sync import sync_entries
from ..utils.logger import info

bp = Blueprint("sync_trigger", __name__)

def _int_arg(name: str, default: int) -> int:
    raw = request.args.get(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError:
        return default

@bp.post("/run")
def run():
    settings = current_settings()
    settings.require_shopify()
    source = EntrySource(settings)
    records = source.fetch_all()
    info(f"[run] syncing {len(records)} entries from {source.source}")
    report = sync_entries(settings, records)
    return jsonify(source=source.source, **report.to_dict()), 200

@bp.post("/scan")
def scan():
    settings = current_settings()
    settings.require_shopify()
    start = _int_arg("start", 1)
    stop_after = _int_arg("stopAfter", 50)
    max_to_check = _int_arg("max", 2000)

    result = EntrySource(settings).scan(start_from=start, max_to_check=max_to_check,
                                        stop_after_misses=stop_after)
    report = sync_entries(settings, result.records)
    return jsonify(
        checkedRange=list(result.checked_range),
        consecutiveMissesStop=stop_after,
        foundNumbers=result.found_numbers,
        **report.to_dict(),
    ), 200

@bp.get("/debug")
def debug_probe():
    """Hit the entries endpoint once and echo exactly what was used."""
    cfg = current_settings().require_cognito()
    url = cognito.entries_url(cfg)
    try:
        r = requests.get(url, headers=cognito.auth_headers(cfg.api_key), timeout=30)
    except requests.RequestException as e:
        return jsonify(base=cfg.base, formId=cfg.form_id, testUrl=url, ok=False, error=str(e)), 200
    return jsonify(
        base=cfg.base,
        formId=cfg.form_id,
        tokenLen=len(cfg.api_key),
        testUrl=url,
        status=r.status_code,
        ok=r.ok,
        bodyPreview=r.text[:300],
    ), 200
