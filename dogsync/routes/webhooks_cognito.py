# dogsync/routes/webhooks_cognito.py
from flask import Blueprint, request, jsonify

from ..config import current_settings
from ..models import SourceRecord
from ..utils.security import verify_shared_secret
from ..utils.logger import info
from ..services.sync import sync_entry

bp = Blueprint("webhooks_cognito", __name__)

@bp.post("/webhook")
def webhook():
    settings = current_settings()
    verify_shared_secret(settings.cognito.webhook_secret)

    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify(error="Body must be a JSON object"), 400

    record = SourceRecord.from_payload(payload)
    info(f"[webhook] Cognito entry received. Id={record.id} DogName={record.name!r}")
    if not record.name:
        return jsonify(error="Missing DogName"), 400

    # processed inline; a failure reaches Cognito as a 500
    result = sync_entry(settings, record)
    if result.action == "skipped":
        return jsonify(error=f"Entry skipped: {result.reason}"), 400

    return jsonify(
        ok=True,
        productId=result.product_id,
        handle=result.handle,
        action=result.action,
        dogName=record.name,
        status=record.code,
    ), 200
