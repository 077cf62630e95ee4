# dogsync/services/catalog.py
from typing import Optional, List, Iterable

from ..config import ShopifyConfig
from ..clients.shopify import graphql, mutation_block
from ..errors import ShopifyError
from ..models import MetafieldEntry

# =========================================================
# GraphQL documents
# =========================================================

PRODUCT_BY_HANDLE = """
query ProductByHandle($handle: String!) {
  productByHandle(handle: $handle) {
    id
    handle
  }
}
"""

PRODUCT_CREATE = """
mutation CreateProduct($input: ProductInput!) {
  productCreate(input: $input) {
    product { id handle status title }
    userErrors { field message }
  }
}
"""

PRODUCT_UPDATE = """
mutation UpdateProduct($input: ProductInput!) {
  productUpdate(input: $input) {
    product { id handle status title }
    userErrors { field message }
  }
}
"""

METAFIELDS_SET = """
mutation MetafieldsSet($metafields: [MetafieldsSetInput!]!) {
  metafieldsSet(metafields: $metafields) {
    metafields { id namespace key type value }
    userErrors { field message }
  }
}
"""

PRODUCT_MEDIA = """
query GetMedia($id: ID!) {
  product(id: $id) {
    id
    media(first: 100) {
      nodes { id }
    }
  }
}
"""

PRODUCT_DELETE_MEDIA = """
mutation ProductDeleteMedia($productId: ID!, $mediaIds: [ID!]!) {
  productDeleteMedia(productId: $productId, mediaIds: $mediaIds) {
    deletedMediaIds
    mediaUserErrors { field message }
  }
}
"""

PRODUCT_CREATE_MEDIA = """
mutation ProductCreateMedia($productId: ID!, $media: [CreateMediaInput!]!) {
  productCreateMedia(productId: $productId, media: $media) {
    media { id alt mediaContentType status }
    mediaUserErrors { code field message }
  }
}
"""

STAGED_UPLOADS_CREATE = """
mutation StagedUploadsCreate($input: [StagedUploadInput!]!) {
  stagedUploadsCreate(input: $input) {
    stagedTargets {
      url
      resourceUrl
      parameters { name value }
    }
    userErrors { field message }
  }
}
"""

SHOP_PING = "{ shop { name primaryDomain { url } } }"

# =========================================================
# Products
# =========================================================

def find_product_by_handle(shop: ShopifyConfig, handle: str) -> Optional[dict]:
    if not handle:
        return None
    data = graphql(shop, PRODUCT_BY_HANDLE, {"handle": handle})
    node = data.get("productByHandle")
    if node and node.get("id"):
        return {"id": node["id"], "handle": node.get("handle")}
    return None

def upsert_product(shop: ShopifyConfig, title: str, description_html: str, tags: List[str],
                   handle: str, product_id: Optional[str] = None, status: str = "ACTIVE") -> str:
    """productUpdate when product_id is given, productCreate otherwise. Returns the product GID."""
    product_input = {
        "title": title,
        "descriptionHtml": description_html or "",
        "tags": tags,
        "handle": handle,
        "status": status,
    }
    if product_id:
        product_input["id"] = product_id
        op, doc = "productUpdate", PRODUCT_UPDATE
    else:
        op, doc = "productCreate", PRODUCT_CREATE
    block = mutation_block(graphql(shop, doc, {"input": product_input}), op)
    new_id = (block.get("product") or {}).get("id")
    if not new_id:
        raise ShopifyError(f"{op} returned no product id", payload=block)
    return new_id

def set_metafields(shop: ShopifyConfig, owner_id: str, metafields: Iterable[MetafieldEntry]) -> int:
    inputs = [m.as_input(owner_id) for m in metafields]
    if not inputs:
        return 0
    mutation_block(graphql(shop, METAFIELDS_SET, {"metafields": inputs}), "metafieldsSet")
    return len(inputs)

# =========================================================
# Media
# =========================================================

def list_media_ids(shop: ShopifyConfig, product_id: str) -> List[str]:
    data = graphql(shop, PRODUCT_MEDIA, {"id": product_id})
    nodes = (((data.get("product") or {}).get("media") or {}).get("nodes")) or []
    return [n["id"] for n in nodes if n.get("id")]

def delete_media(shop: ShopifyConfig, product_id: str, media_ids: List[str]) -> List[str]:
    if not media_ids:
        return []
    data = graphql(shop, PRODUCT_DELETE_MEDIA, {"productId": product_id, "mediaIds": media_ids})
    block = mutation_block(data, "productDeleteMedia", "mediaUserErrors")
    return block.get("deletedMediaIds") or []

def create_media(shop: ShopifyConfig, product_id: str, sources: List[str], alt: str = "") -> List[dict]:
    if not sources:
        return []
    media = [{"originalSource": s, "mediaContentType": "IMAGE", "alt": alt} for s in sources]
    data = graphql(shop, PRODUCT_CREATE_MEDIA, {"productId": product_id, "media": media})
    block = mutation_block(data, "productCreateMedia", "mediaUserErrors")
    return block.get("media") or []

def staged_upload_target(shop: ShopifyConfig, filename: str, mime_type: str, size: Optional[int] = None) -> dict:
    stage = {"resource": "IMAGE", "filename": filename, "mimeType": mime_type, "httpMethod": "POST"}
    if size is not None:
        stage["fileSize"] = str(size)
    block = mutation_block(graphql(shop, STAGED_UPLOADS_CREATE, {"input": [stage]}), "stagedUploadsCreate")
    targets = block.get("stagedTargets") or []
    if not targets:
        raise ShopifyError("stagedUploadsCreate returned no targets", payload=block)
    return targets[0]

def ping(shop: ShopifyConfig) -> dict:
    return graphql(shop, SHOP_PING)
