"""Fallback congress-legislators dataset with an ordered provider chain.

The dataset (``legislators-current.json`` from the unitedstates project) is
used whenever Congress.gov is unavailable or returns too few members. It is
fetched from the first provider that yields a plausible payload and kept for
the lifetime of the process.
"""

import asyncio
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, Sequence

import httpx
from loguru import logger

from represent.config import DatasetConfig


@dataclass(frozen=True)
class ProviderOutcome:
    """Result of asking one provider for the dataset."""

    provider: str
    records: Optional[tuple[dict[str, Any], ...]] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.records is not None


DatasetProvider = Callable[[httpx.AsyncClient], Awaitable[ProviderOutcome]]


def _default_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(follow_redirects=True)


def _validate_records(provider: str, payload: Any, min_records: int) -> ProviderOutcome:
    if not isinstance(payload, list):
        return ProviderOutcome(provider, error=f"expected JSON array, got {type(payload).__name__}")
    if len(payload) < min_records:
        return ProviderOutcome(
            provider, error=f"only {len(payload)} records (need {min_records})"
        )
    records = tuple(p for p in payload if isinstance(p, dict))
    return ProviderOutcome(provider, records=records)


class MirrorProvider:
    """Download the dataset from one network mirror."""

    def __init__(self, url: str, config: DatasetConfig):
        self.url = url
        self.config = config

    @property
    def name(self) -> str:
        return self.url

    async def __call__(self, client: httpx.AsyncClient) -> ProviderOutcome:
        try:
            response = await client.get(
                self.url,
                headers={"User-Agent": self.config.user_agent},
                timeout=self.config.timeout,
            )
        except httpx.TimeoutException:
            return ProviderOutcome(self.name, error=f"timed out after {self.config.timeout}s")
        except httpx.HTTPError as e:
            return ProviderOutcome(self.name, error=f"network error: {e}")

        if response.status_code != 200:
            return ProviderOutcome(
                self.name, error=f"HTTP {response.status_code} {response.reason_phrase}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            return ProviderOutcome(self.name, error=f"invalid JSON: {e}")

        return _validate_records(self.name, payload, self.config.min_records)


class BundledProvider:
    """Read the locally bundled copy shipped with the package."""

    def __init__(self, path: Path):
        self.path = Path(path)

    @property
    def name(self) -> str:
        return f"bundled:{self.path}"

    async def __call__(self, client: httpx.AsyncClient) -> ProviderOutcome:
        try:
            raw = await asyncio.to_thread(self.path.read_text, encoding="utf-8")
            payload = json.loads(raw)
        except OSError as e:
            return ProviderOutcome(self.name, error=f"unreadable: {e}")
        except ValueError as e:
            return ProviderOutcome(self.name, error=f"invalid JSON: {e}")

        # Last resort: any non-empty array beats nothing
        return _validate_records(self.name, payload, 1)


def default_providers(config: DatasetConfig) -> list[DatasetProvider]:
    """Network mirrors in preference order, then the bundled copy."""
    providers: list[DatasetProvider] = [MirrorProvider(url, config) for url in config.mirrors]
    providers.append(BundledProvider(config.bundled_path))
    return providers


async def first_successful(
    providers: Sequence[DatasetProvider], client: httpx.AsyncClient
) -> Optional[ProviderOutcome]:
    """
    Try providers in order and return the first successful outcome.

    Every failure is logged with the provider identity and reason. A provider
    that raises is treated as a failed outcome so later providers still run.
    """
    for provider in providers:
        try:
            outcome = await provider(client)
        except Exception as e:
            name = getattr(provider, "name", None) or getattr(provider, "__name__", repr(provider))
            outcome = ProviderOutcome(name, error=f"{type(e).__name__}: {e}")
        if outcome.ok:
            logger.info(
                "Fallback dataset loaded from {} ({} records)",
                outcome.provider,
                len(outcome.records or ()),
            )
            return outcome
        logger.warning("Fallback dataset provider failed: {} ({})", outcome.provider, outcome.error)
    return None


class LegislatorDataset:
    """
    Load-once holder for the fallback dataset.

    The first caller starts the load; concurrent callers await the same
    in-flight task. A successful load is kept and never refreshed. A load
    where every provider failed is not kept, so a later request retries.

    Each load opens its own HTTP client from ``client_factory`` and closes it
    when the load ends. Callers' request-scoped clients are never used, so a
    caller that times out and closes its client cannot break a load other
    callers are waiting on.
    """

    def __init__(
        self,
        providers: Sequence[DatasetProvider],
        client_factory: Optional[Callable[[], httpx.AsyncClient]] = None,
    ):
        self._providers = list(providers)
        self._client_factory = client_factory or _default_client
        self._records: Optional[tuple[dict[str, Any], ...]] = None
        self._loading: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()
        self.load_count = 0

    @property
    def loaded(self) -> bool:
        return self._records is not None

    async def get(self) -> tuple[dict[str, Any], ...]:
        """Return the dataset, loading it on first use."""
        if self._records is not None:
            return self._records

        async with self._lock:
            if self._records is not None:
                return self._records
            if self._loading is None:
                self._loading = asyncio.ensure_future(self._load())
            task = self._loading

        # Shield so one caller's timeout does not cancel the shared load
        try:
            return await asyncio.shield(task)
        finally:
            if task.done() and self._loading is task:
                self._loading = None
                if not task.cancelled() and task.exception() is None and task.result():
                    self._records = task.result()

    async def _load(self) -> tuple[dict[str, Any], ...]:
        self.load_count += 1
        async with self._client_factory() as client:
            outcome = await first_successful(self._providers, client)
        if outcome is None:
            logger.error("All fallback dataset providers failed")
            return ()
        return outcome.records or ()


async def download_dataset(config: DatasetConfig, client: httpx.AsyncClient) -> list[dict[str, Any]]:
    """
    Fetch a fresh dataset from the network mirrors only.

    Raises:
        RuntimeError: If no mirror returns a plausible dataset
    """
    mirrors = [MirrorProvider(url, config) for url in config.mirrors]
    outcome = await first_successful(mirrors, client)
    if outcome is None:
        raise RuntimeError("No mirror returned a usable legislators dataset")
    return list(outcome.records or ())


def write_dataset(records: list[dict[str, Any]], path: Path) -> Path:
    """Write the dataset to ``path`` as indented JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(records, indent=2), encoding="utf-8")
    logger.info("Wrote {} legislators to {}", len(records), path)
    return path
