"""
Narvesen store directory.

Scrapes the public store locator page and keeps the result for a day.
The page is large and changes rarely, so every request in the TTL window
is served from memory.
"""

import structlog

from norgesglass.core.constants import NARVESEN_MAX_BODY_BYTES
from norgesglass.core.exceptions import ExtractionFailedError
from norgesglass.core.logging import enrich_event
from norgesglass.services.cache import SingleSlotTTLCache
from norgesglass.services.extraction import StoreExtractor
from norgesglass.services.fetcher import BoundedFetcher
from norgesglass.services.models import StoreRecord

logger = structlog.get_logger()

SOURCE = "narvesen"


class NarvesenStoreDirectory:
    """All Narvesen stores, fetched lazily and cached in a single slot."""

    def __init__(
        self,
        fetcher: BoundedFetcher,
        extractor: StoreExtractor,
        cache: SingleSlotTTLCache[StoreRecord],
        url: str,
        user_agent: str,
        max_body_bytes: int = NARVESEN_MAX_BODY_BYTES,
    ):
        self.fetcher = fetcher
        self.extractor = extractor
        self.cache = cache
        self.url = url
        self.user_agent = user_agent
        self.max_body_bytes = max_body_bytes
        self.log = logger.bind(component="NarvesenStoreDirectory")

    async def _fetch_and_extract(self) -> list[StoreRecord]:
        body = await self.fetcher.fetch(
            self.url,
            source=SOURCE,
            max_bytes=self.max_body_bytes,
            headers={"User-Agent": self.user_agent},
        )

        stores = self.extractor.extract(body)
        if not stores:
            # Zero matches means the page shape changed, not that Narvesen closed
            self.log.warning(
                "narvesen_zero_stores",
                body_bytes=len(body),
                extractor=type(self.extractor).__name__,
            )
            raise ExtractionFailedError(
                "parsed 0 stores from upstream response",
                {"source": SOURCE, "body_bytes": len(body)},
            )

        self.log.info("narvesen_stores_refreshed", count=len(stores), body_bytes=len(body))
        return stores

    async def list_stores(self) -> list[StoreRecord]:
        """
        Return every store, from cache while fresh.

        Raises:
            UpstreamUnavailableError: fetch failed (stale entries are not served)
            ExtractionFailedError: page fetched but no stores recognised
        """
        fetched = False

        async def load() -> list[StoreRecord]:
            nonlocal fetched
            fetched = True
            return await self._fetch_and_extract()

        stores = await self.cache.get_or_fetch(load)
        enrich_event(**{"stores.cache": "miss" if fetched else "hit", "stores.count": len(stores)})
        return stores
