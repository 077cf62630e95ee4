# dogsync/clients/shopify.py
import requests
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from ..config import ShopifyConfig
from ..errors import ShopifyError, TransientShopifyError, ShopifyUserError

TRANSIENT_STATUSES = (429, 502, 503, 504)

def rest_headers(token: str) -> dict:
    return {"Content-Type": "application/json", "X-Shopify-Access-Token": token}

@retry(
    reraise=True,
    stop=stop_after_attempt(5),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=6),
    retry=retry_if_exception_type(TransientShopifyError),
)
def graphql(shop: ShopifyConfig, query: str, variables=None) -> dict:
    """POST one Admin GraphQL document and return its ``data`` block.

    Throttling and gateway errors are retried; anything else non-2xx, and any
    top-level ``errors`` list, raises ShopifyError with the body attached.
    """
    r = requests.post(shop.graphql_url, headers=rest_headers(shop.token),
                      json={"query": query, "variables": variables or {}}, timeout=30)
    if r.status_code in TRANSIENT_STATUSES:
        raise TransientShopifyError(f"Shopify GraphQL HTTP {r.status_code}: {r.text}", status=r.status_code)
    try:
        body = r.json()
    except ValueError:
        raise ShopifyError(f"Shopify GraphQL bad JSON (HTTP {r.status_code}): {r.text}", status=r.status_code)
    if not r.ok:
        raise ShopifyError(f"Shopify GraphQL HTTP {r.status_code}: {body}", status=r.status_code, payload=body)
    errors = body.get("errors")
    if errors:
        raise ShopifyError(f"Shopify GraphQL errors: {errors}", status=r.status_code, payload=errors)
    return body.get("data") or {}

def mutation_block(data: dict, operation: str, errors_key: str = "userErrors") -> dict:
    """Pull ``data[operation]`` and raise if it reports user errors."""
    block = data.get(operation) or {}
    errs = block.get(errors_key) or []
    if errs:
        raise ShopifyUserError(operation, errs)
    return block
