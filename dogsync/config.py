# dogsync/config.py
import os
from dataclasses import dataclass, field
from typing import Optional

from slugify import slugify

from .errors import ConfigError

DEFAULT_API_VERSION = "2024-07"
DEFAULT_COGNITO_BASE = "https://www.cognitoforms.com/api"


def _env(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer (got {raw!r})")


def _env_flag(name: str) -> bool:
    return _env(name).lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ShopifyConfig:
    store: str = ""
    token: str = ""
    api_version: str = DEFAULT_API_VERSION

    @property
    def graphql_url(self) -> str:
        return f"https://{self.store}/admin/api/{self.api_version}/graphql.json"


@dataclass(frozen=True)
class CognitoConfig:
    base: str = DEFAULT_COGNITO_BASE
    api_key: str = ""
    form_id: str = ""
    webhook_secret: str = ""
    page_size: int = 100
    max_pages: int = 50


@dataclass(frozen=True)
class Settings:
    shopify: ShopifyConfig = field(default_factory=ShopifyConfig)
    cognito: CognitoConfig = field(default_factory=CognitoConfig)
    base_url: Optional[str] = None
    handle_suffix: str = "mbpr"
    clear_images_when_empty: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            shopify=ShopifyConfig(
                store=_env("SHOPIFY_STORE"),
                token=_env("SHOPIFY_ADMIN_TOKEN"),
                api_version=_env("API_VERSION", DEFAULT_API_VERSION),
            ),
            cognito=CognitoConfig(
                base=_env("COGNITO_API_BASE", DEFAULT_COGNITO_BASE).rstrip("/"),
                api_key=_env("COGNITO_API_KEY"),
                form_id=_env("COGNITO_FORM_ID"),
                webhook_secret=_env("COGNITO_WEBHOOK_SECRET"),
                page_size=_env_int("COGNITO_PAGE_SIZE", 100),
                max_pages=_env_int("COGNITO_MAX_PAGES", 50),
            ),
            base_url=_env("BASE_URL").rstrip("/") or None,
            # handles are lowercase alphanumerics and hyphens; "-MBPR Pups" -> "mbpr-pups"
            handle_suffix=slugify(_env("HANDLE_SUFFIX", "mbpr"), lowercase=True) or "mbpr",
            clear_images_when_empty=_env_flag("CLEAR_IMAGES_WHEN_EMPTY"),
        )

    def require_shopify(self) -> ShopifyConfig:
        if not (self.shopify.store and self.shopify.token):
            raise ConfigError("Missing SHOPIFY_STORE or SHOPIFY_ADMIN_TOKEN")
        return self.shopify

    def require_cognito(self) -> CognitoConfig:
        if not (self.cognito.api_key and self.cognito.form_id):
            raise ConfigError("Missing COGNITO_API_KEY or COGNITO_FORM_ID")
        return self.cognito


def current_settings() -> Settings:
    """Settings the running Flask app was created with."""
    from flask import current_app
    return current_app.config["SETTINGS"]
