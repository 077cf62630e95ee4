# dogsync/routes/cognito_proxy.py
# Thin pass-throughs to the Cognito API. /cognito/entries doubles as the
# last-resort listing path used by ProxyFetch.
import json

from flask import Blueprint, request, jsonify

from ..config import current_settings
from ..clients import cognito

bp = Blueprint("cognito_proxy", __name__)

def _safe_json(text: str):
    try:
        return json.loads(text)
    except ValueError:
        return {"raw": text}

def _relay(path: str, params=None):
    cfg = current_settings().require_cognito()
    r = cognito.get_raw(cfg, path, params)
    return jsonify(_safe_json(r.text)), r.status_code

@bp.get("/entries")
def entries():
    cfg = current_settings().require_cognito()
    params = {k: request.args[k] for k in ("page", "pageSize") if request.args.get(k)}
    return _relay(f"/forms/{cfg.form_id}/entries", params or None)

@bp.get("/entry/<int:number>")
def entry(number: int):
    cfg = current_settings().require_cognito()
    return _relay(f"/forms/{cfg.form_id}/entries/{number}")

@bp.get("/forms")
def forms():
    return _relay("/forms")

@bp.get("/schema")
def schema():
    cfg = current_settings().require_cognito()
    return _relay(f"/forms/{cfg.form_id}/schema")

@bp.get("/env-check")
def env_check():
    cfg = current_settings().cognito
    return jsonify(
        base=cfg.base,
        formId=cfg.form_id,
        formId_len=len(cfg.form_id),
        key_present=bool(cfg.api_key),
        key_len=len(cfg.api_key),
        webhook_secret_present=bool(cfg.webhook_secret),
    ), 200
