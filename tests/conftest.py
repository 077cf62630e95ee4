"""In-memory stand-ins for Shopify, its staged-upload bucket and Cognito.

``requests.get`` / ``requests.post`` are patched with a router that sends
each URL to the matching fake, so the package code runs unmodified.
"""

from __future__ import annotations

import json
from urllib.parse import urlencode

import pytest

from dogsync import create_app
from dogsync.config import Settings, ShopifyConfig, CognitoConfig

SHOP_DOMAIN = "dogs.myshopify.com"
COGNITO_BASE = "https://cognito.test/api"
FORM_ID = "7"
SELF_BASE = "https://dogsync.test"
UPLOAD_HOST = "https://uploads.test"


class FakeResponse:
    def __init__(self, status_code: int = 200, body=None, *, text: str | None = None,
                 content: bytes = b"", headers: dict | None = None, url: str = ""):
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else (json.dumps(body) if body is not None else "")
        self.content = content
        self.headers = headers or {}
        self.url = url

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def json(self):
        if self._body is not None:
            return self._body
        return json.loads(self.text)


class FakeShop:
    def __init__(self) -> None:
        self.products: dict[str, dict] = {}
        self.ops: list[str] = []
        self.user_errors: dict[str, list] = {}
        self.staged: list[dict] = []
        self._seq = 0

    def _next(self) -> int:
        self._seq += 1
        return self._seq

    # helpers for tests
    def add_product(self, handle: str, media_count: int = 0, **fields) -> str:
        pid = f"gid://shopify/Product/{self._next()}"
        self.products[pid] = {
            "id": pid, "handle": handle, "title": fields.get("title", handle),
            "descriptionHtml": "", "tags": fields.get("tags", []), "status": "ACTIVE",
            "metafields": {}, "media": [],
        }
        for i in range(media_count):
            self.products[pid]["media"].append(
                {"id": f"gid://shopify/MediaImage/{self._next()}", "originalSource": f"https://old.test/{i}.jpg"})
        return pid

    def by_handle(self, handle: str) -> dict | None:
        return next((p for p in self.products.values() if p["handle"] == handle), None)

    def _errors(self, op: str) -> list:
        return self.user_errors.pop(op, [])

    def handle(self, query: str, variables: dict) -> dict:
        if "productByHandle(" in query:
            self.ops.append("productByHandle")
            p = self.by_handle(variables["handle"])
            return {"productByHandle": {"id": p["id"], "handle": p["handle"]} if p else None}

        if "productCreate(input" in query or "productUpdate(input" in query:
            op = "productCreate" if "productCreate(input" in query else "productUpdate"
            self.ops.append(op)
            errs = self._errors(op)
            if errs:
                return {op: {"product": None, "userErrors": errs}}
            data = dict(variables["input"])
            if op == "productCreate":
                pid = f"gid://shopify/Product/{self._next()}"
                self.products[pid] = {"id": pid, "metafields": {}, "media": []}
            else:
                pid = data.pop("id")
            self.products[pid].update(data)
            p = self.products[pid]
            return {op: {"product": {"id": pid, "handle": p["handle"], "status": p["status"],
                                     "title": p["title"]}, "userErrors": []}}

        if "metafieldsSet(" in query:
            self.ops.append("metafieldsSet")
            errs = self._errors("metafieldsSet")
            if errs:
                return {"metafieldsSet": {"metafields": [], "userErrors": errs}}
            out = []
            for m in variables["metafields"]:
                owner = self.products[m["ownerId"]]
                owner["metafields"][(m["namespace"], m["key"])] = {"type": m["type"], "value": m["value"]}
                out.append(m)
            return {"metafieldsSet": {"metafields": out, "userErrors": []}}

        if "productDeleteMedia(" in query:
            self.ops.append("productDeleteMedia")
            p = self.products[variables["productId"]]
            ids = set(variables["mediaIds"])
            p["media"] = [m for m in p["media"] if m["id"] not in ids]
            return {"productDeleteMedia": {"deletedMediaIds": sorted(ids), "mediaUserErrors": []}}

        if "productCreateMedia(" in query:
            self.ops.append("productCreateMedia")
            errs = self._errors("productCreateMedia")
            if errs:
                return {"productCreateMedia": {"media": [], "mediaUserErrors": errs}}
            p = self.products[variables["productId"]]
            created = []
            for m in variables["media"]:
                item = {"id": f"gid://shopify/MediaImage/{self._next()}", "originalSource": m["originalSource"]}
                p["media"].append(item)
                created.append({"id": item["id"], "alt": m.get("alt"), "mediaContentType": "IMAGE",
                                "status": "UPLOADED"})
            return {"productCreateMedia": {"media": created, "mediaUserErrors": []}}

        if "product(id:" in query:
            self.ops.append("productMedia")
            p = self.products.get(variables["id"])
            if p is None:
                return {"product": None}
            return {"product": {"id": p["id"], "media": {"nodes": [{"id": m["id"]} for m in p["media"]]}}}

        if "stagedUploadsCreate(" in query:
            self.ops.append("stagedUploadsCreate")
            targets = []
            for stage in variables["input"]:
                n = self._next()
                self.staged.append(stage)
                targets.append({
                    "url": f"{UPLOAD_HOST}/bucket",
                    "resourceUrl": f"{UPLOAD_HOST}/tmp/{n}/{stage['filename']}",
                    "parameters": [{"name": "key", "value": f"tmp/{n}/{stage['filename']}"},
                                   {"name": "Content-Type", "value": stage["mimeType"]}],
                })
            return {"stagedUploadsCreate": {"stagedTargets": targets, "userErrors": []}}

        if "metafieldDefinitionCreate(" in query:
            self.ops.append("metafieldDefinitionCreate")
            d = variables["definition"]
            errs = self._errors("metafieldDefinitionCreate")
            if errs:
                return {"metafieldDefinitionCreate": {"createdDefinition": None, "userErrors": errs}}
            if d["key"] == "breed":
                return {"metafieldDefinitionCreate": {"createdDefinition": None, "userErrors": [
                    {"field": ["definition", "key"], "message": "Key has already been taken"}]}}
            return {"metafieldDefinitionCreate": {"createdDefinition": {"id": f"gid://shopify/MetafieldDefinition/{self._next()}"},
                                                  "userErrors": []}}

        if "shop {" in query:
            self.ops.append("shop")
            return {"shop": {"name": "Dogs", "primaryDomain": {"url": "https://dogs.test"}}}

        raise AssertionError(f"unexpected GraphQL document: {query}")

    def media_sources(self, pid: str) -> list[str]:
        return [m["originalSource"] for m in self.products[pid]["media"]]


class FakeCognito:
    def __init__(self) -> None:
        self.entries: dict[int, dict] = {}
        self.files: dict[str, bytes] = {}
        self.paged_status: int | None = None      # force an error status when page params are sent
        self.unpaged_status: int | None = None
        self.proxy_status: int | None = None
        self.ignore_paging = False
        self.entry_status: dict[int, int] = {}    # per-number error status for single-entry GETs
        self.fail_downloads: set[str] = set()
        self.probed: list[int] = []

    def add(self, number: int, **fields) -> dict:
        payload = {"Id": number, **fields}
        self.entries[number] = payload
        return payload

    def listing(self, params: dict | None) -> FakeResponse:
        items = [self.entries[k] for k in sorted(self.entries)]
        if params and "page" in params:
            if self.paged_status:
                return FakeResponse(self.paged_status, {"Message": "paging not supported"})
            if not self.ignore_paging:
                size = int(params["pageSize"])
                start = (int(params["page"]) - 1) * size
                items = items[start:start + size]
        elif self.unpaged_status:
            return FakeResponse(self.unpaged_status, {"Message": "blocked"})
        return FakeResponse(200, items)

    def get(self, path: str, params: dict | None) -> FakeResponse:
        entries_prefix = f"/forms/{FORM_ID}/entries"
        if path == entries_prefix:
            return self.listing(params)
        if path.startswith(entries_prefix + "/"):
            number = int(path.rsplit("/", 1)[1])
            self.probed.append(number)
            if number in self.entry_status:
                return FakeResponse(self.entry_status[number], {"Message": "nope"})
            if number in self.entries:
                return FakeResponse(200, self.entries[number])
            return FakeResponse(404, {"Message": "Entry not found"})
        if path.startswith("/files/"):
            file_id = path.rsplit("/", 1)[1]
            if file_id in self.files and file_id not in self.fail_downloads:
                return FakeResponse(200, text="", content=self.files[file_id], headers={"Content-Type": "image/png"})
            return FakeResponse(404, text="missing file")
        if path == "/forms":
            return FakeResponse(200, [{"Id": FORM_ID, "Name": "Dogs"}])
        if path == f"/forms/{FORM_ID}/schema":
            return FakeResponse(200, {"Name": "Dogs"})
        return FakeResponse(404, text="unknown path")


class FakeHttp:
    """Routes requests.get/post to the fakes and keeps a call log."""

    def __init__(self, shop: FakeShop, cognito: FakeCognito) -> None:
        self.shop = shop
        self.cognito = cognito
        self.calls: list[tuple[str, str]] = []
        self.uploads: list[dict] = []
        self.upload_status = 204
        self.remote_files: dict[str, bytes] = {}

    def get(self, url, headers=None, params=None, timeout=None, **_):
        full = f"{url}?{urlencode(params)}" if params else url
        self.calls.append(("GET", full))
        if url.startswith(COGNITO_BASE):
            if (headers or {}).get("Authorization") != "Bearer key":
                return FakeResponse(401, {"Message": "bad token"}, url=full)
            resp = self.cognito.get(url[len(COGNITO_BASE):], params)
        elif url == f"{SELF_BASE}/cognito/entries":
            if self.cognito.proxy_status:
                resp = FakeResponse(self.cognito.proxy_status, {"error": "proxy down"})
            else:
                resp = FakeResponse(200, [self.cognito.entries[k] for k in sorted(self.cognito.entries)])
        elif url in self.remote_files:
            resp = FakeResponse(200, text="", content=self.remote_files[url], headers={"Content-Type": "image/jpeg"})
        else:
            resp = FakeResponse(404, text="not found")
        resp.url = full
        return resp

    def post(self, url, headers=None, json=None, data=None, files=None, timeout=None, **_):
        self.calls.append(("POST", url))
        if url == f"https://{SHOP_DOMAIN}/admin/api/2024-07/graphql.json":
            assert headers["X-Shopify-Access-Token"] == "shpat_test"
            return FakeResponse(200, {"data": self.shop.handle(json["query"], json.get("variables") or {})}, url=url)
        if url.startswith(UPLOAD_HOST):
            self.uploads.append({"data": data, "files": files})
            return FakeResponse(self.upload_status, text="" if self.upload_status < 300 else "denied", url=url)
        raise AssertionError(f"unexpected POST {url}")


@pytest.fixture
def settings() -> Settings:
    return Settings(
        shopify=ShopifyConfig(store=SHOP_DOMAIN, token="shpat_test", api_version="2024-07"),
        cognito=CognitoConfig(base=COGNITO_BASE, api_key="key", form_id=FORM_ID,
                              webhook_secret="", page_size=2, max_pages=10),
        base_url=SELF_BASE,
        handle_suffix="mbpr",
    )


@pytest.fixture
def shop() -> FakeShop:
    return FakeShop()


@pytest.fixture
def cognito_api() -> FakeCognito:
    return FakeCognito()


@pytest.fixture
def http(monkeypatch: pytest.MonkeyPatch, shop: FakeShop, cognito_api: FakeCognito) -> FakeHttp:
    fake = FakeHttp(shop, cognito_api)
    monkeypatch.setattr("requests.get", fake.get)
    monkeypatch.setattr("requests.post", fake.post)
    return fake


@pytest.fixture
def app(settings: Settings, http: FakeHttp):
    flask_app = create_app(settings)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()
