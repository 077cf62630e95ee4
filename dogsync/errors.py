# dogsync/errors.py
import json
from typing import Optional


class SyncError(Exception):
    """Base class for everything the sync raises on purpose."""


class ConfigError(SyncError):
    pass


class CognitoError(SyncError):
    """Non-2xx (or unparseable) response from the Cognito API."""

    def __init__(self, url: str, status: Optional[int], body: str = "", reason: str = ""):
        self.url = url
        self.status = status
        self.body = body or ""
        msg = f"GET {url} failed: {status if status is not None else reason or 'no response'}"
        if self.body:
            msg += f" - {self.body[:500]}"
        super().__init__(msg)


class DiscoveryError(SyncError):
    """Every entry-listing strategy failed."""

    def __init__(self, attempts: list):
        self.attempts = attempts
        self.last_error = attempts[-1].error if attempts else None
        tried = "; ".join(f"{a.strategy}: {a.error}" for a in attempts)
        super().__init__(f"Could not list Cognito entries ({tried})")


class ShopifyError(SyncError):
    """Transport-level or top-level GraphQL failure."""

    def __init__(self, message: str, status: Optional[int] = None, payload=None):
        self.status = status
        self.payload = payload
        super().__init__(message)


class TransientShopifyError(ShopifyError):
    pass


class ShopifyUserError(ShopifyError):
    """A mutation answered with a non-empty userErrors list."""

    def __init__(self, operation: str, errors: list):
        self.operation = operation
        self.errors = errors
        super().__init__(f"{operation}: {json.dumps(errors)}", payload=errors)


class MediaError(SyncError):
    pass
