# dogsync/services/entries.py
from dataclasses import dataclass
from typing import List, Optional

from ..config import Settings
from ..clients import cognito
from ..errors import CognitoError, ConfigError, DiscoveryError
from ..models import SourceRecord, ScanResult
from ..utils.logger import debug, info, warn

# =========================================================
# Listing strategies
# ---------------------------------------------------------
# Tried in order by EntrySource.fetch_all(); the first one that returns a
# list wins. Every strategy reports through the same Attempt shape.
# =========================================================

@dataclass
class Attempt:
    strategy: str
    url: str
    records: Optional[List[SourceRecord]] = None
    error: Optional[Exception] = None
    status: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.records is not None and self.error is None

    def to_dict(self) -> dict:
        return {"strategy": self.strategy, "url": self.url, "status": self.status,
                "ok": self.ok, "error": str(self.error) if self.error else None}


class Strategy:
    name = "strategy"

    def __init__(self, settings: Settings):
        self.settings = settings

    def url(self) -> str:
        raise NotImplementedError

    def fetch(self) -> list:
        raise NotImplementedError

    def attempt(self) -> Attempt:
        url = self.url()
        try:
            payloads = self.fetch()
        except (CognitoError, ConfigError) as e:
            return Attempt(self.name, url, error=e, status=getattr(e, "status", None))
        records = [SourceRecord.from_payload(p) for p in payloads if isinstance(p, dict)]
        return Attempt(self.name, url, records=records, status=200)


def _entry_key(payload):
    """Id or Number as SourceRecord reads it; the whole payload when neither is set."""
    if not isinstance(payload, dict):
        return payload
    record_id = SourceRecord.from_payload(payload).id
    return record_id if record_id is not None else payload


class PagedFetch(Strategy):
    name = "paged"

    def url(self) -> str:
        return cognito.entries_url(self.settings.cognito)

    def fetch(self) -> list:
        cfg = self.settings.cognito
        out: list = []
        prev_first = object()
        for page in range(1, cfg.max_pages + 1):
            batch = cognito.list_entries(cfg, page=page, page_size=cfg.page_size)
            if not batch:
                break
            first = _entry_key(batch[0])
            # a provider that ignores paging keeps returning page 1
            if first is not None and first == prev_first:
                debug(f"[entries] page {page} repeats page {page - 1}; provider ignores paging")
                break
            prev_first = first
            out.extend(batch)
            if len(batch) < cfg.page_size:
                break
        else:
            warn(f"[entries] stopped after COGNITO_MAX_PAGES={cfg.max_pages} pages")
        return out


class UnpagedFetch(Strategy):
    name = "unpaged"

    def url(self) -> str:
        return cognito.entries_url(self.settings.cognito)

    def fetch(self) -> list:
        return cognito.list_entries(self.settings.cognito)


class ProxyFetch(Strategy):
    """Goes through this service's own /cognito/entries pass-through route."""
    name = "proxy"

    def url(self) -> str:
        return f"{self.settings.base_url or ''}/cognito/entries"

    def fetch(self) -> list:
        if not self.settings.base_url:
            raise ConfigError("BASE_URL is not set; proxy route unavailable")
        url = self.url()
        return cognito.as_entry_list(url, cognito.get_json(url, {"Accept": "application/json"}))


DEFAULT_STRATEGIES = (PagedFetch, UnpagedFetch, ProxyFetch)


class EntrySource:
    def __init__(self, settings: Settings, strategies=None):
        settings.require_cognito()
        self.settings = settings
        self.strategies: List[Strategy] = [s(settings) for s in (strategies or DEFAULT_STRATEGIES)]
        self.attempts: List[Attempt] = []
        self.source: Optional[str] = None

    def fetch_all(self) -> List[SourceRecord]:
        self.attempts = []
        for strategy in self.strategies:
            attempt = strategy.attempt()
            self.attempts.append(attempt)
            if attempt.ok:
                self.source = attempt.url
                info(f"[entries] {strategy.name} fetch returned {len(attempt.records)} entries from {attempt.url}")
                return attempt.records
            warn(f"[entries] {strategy.name} fetch failed: {attempt.error}")
        raise DiscoveryError(self.attempts)

    # =========================================================
    # Sequential scan
    # =========================================================

    def scan(self, start_from: int = 1, max_to_check: int = 2000, stop_after_misses: int = 50) -> ScanResult:
        """Probe entries start_from, start_from+1, ... one at a time.

        404 counts as a miss. Stops after stop_after_misses consecutive misses
        or once max_to_check numbers were probed. Any other failure is raised:
        a bad key must not look like an empty form.
        """
        cfg = self.settings.cognito
        result = ScanResult(start=start_from, last_checked=start_from - 1)
        n = start_from
        misses = 0
        while misses < stop_after_misses and (n - start_from) < max_to_check:
            payload = cognito.get_entry(cfg, n)
            result.last_checked = n
            if payload is None:
                misses += 1
            else:
                misses = 0
                result.found_numbers.append(n)
                record = SourceRecord.from_payload(payload)
                if record.id is None:
                    record = SourceRecord.from_payload({**payload, "Id": n})
                result.records.append(record)
            n += 1
        result.misses = misses
        info(f"[scan] checked {start_from}..{result.last_checked}, found {len(result.found_numbers)}")
        return result
