# dogsync/routes/shopify.py
from flask import Blueprint, jsonify

from ..config import current_settings
from ..services.catalog import ping as shop_ping

bp = Blueprint("shopify", __name__)

@bp.get("/ping")
def ping():
    shop = current_settings().require_shopify()
    return jsonify(shop_ping(shop)), 200
