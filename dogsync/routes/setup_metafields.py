# dogsync/routes/setup_metafields.py
from flask import Blueprint, jsonify

from ..config import current_settings, ShopifyConfig
from ..clients.shopify import graphql, mutation_block
from ..errors import ShopifyError, ShopifyUserError
from ..services.mapping import METAFIELD_NS
from ..utils.logger import info

bp = Blueprint("setup_metafields", __name__)

# (name, key, type, description)
DEFS = [
    ("Litter",           "litter",       "single_line_text_field", "Litter the dog came from"),
    ("Birthday",         "birthday",     "date",                   "Pup birthday"),
    ("Breed",            "breed",        "single_line_text_field", "Breed or mix"),
    ("Gender",           "gender",       "single_line_text_field", "Gender"),
    ("Adult size",       "adult_size",   "single_line_text_field", "Estimated size when grown"),
    ("Availability",     "availability", "single_line_text_field", "Availability as entered in Cognito"),
]

MUTATION = """
mutation metafieldDefinitionCreate($definition: MetafieldDefinitionInput!) {
  metafieldDefinitionCreate(definition: $definition) {
    createdDefinition {
      id
      name
      namespace
      key
      type { name category }
      ownerType
    }
    userErrors { field message }
  }
}
"""

DUPLICATE_MARKERS = ("already been taken", "already exists")

def _is_duplicate(errors: list) -> bool:
    text = " ".join((e.get("message") or "") for e in errors).lower()
    return any(marker in text for marker in DUPLICATE_MARKERS)

def create_definition(shop: ShopifyConfig, name: str, key: str, type_: str, description: str) -> str:
    """One product metafield definition; an existing one counts as done."""
    definition = {"name": name, "namespace": METAFIELD_NS, "key": key, "type": type_,
                  "description": description, "ownerType": "PRODUCT"}
    label = f"{METAFIELD_NS}.{key}"
    try:
        block = mutation_block(graphql(shop, MUTATION, {"definition": definition}), "metafieldDefinitionCreate")
    except ShopifyUserError as e:
        if _is_duplicate(e.errors):
            return f"{label}: EXISTS"
        return f"{label}: ERR " + "; ".join(err.get("message", "") for err in e.errors)
    except ShopifyError as e:
        return f"{label}: ERR {e}"
    created = block.get("createdDefinition") or {}
    return f"{label}: OK {created.get('id')}"

def create_definitions(shop: ShopifyConfig) -> list[str]:
    results = [create_definition(shop, *d) for d in DEFS]
    info(f"[setup] metafield definitions: {results}")
    return results

@bp.get("/create")
def create_defs():
    shop = current_settings().require_shopify()
    return jsonify(results=create_definitions(shop)), 200
