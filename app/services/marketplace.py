import asyncio
import logging
from typing import Any, Awaitable, Callable, Hashable, List, Literal, Optional, Sequence

import httpx
from pydantic import BaseModel, Field, field_validator

from app.services.solana import LAMPORTS_PER_SOL

logger = logging.getLogger(__name__)

ALL_GROUPS = "all_groups"
ALL_SELLERS = "all_sellers"

SortKey = Literal["default", "price-asc", "price-desc", "name"]


class NFTDetail(BaseModel):
    """An NFT currently offered for sale, as shown on the marketplace"""
    name: str
    symbol: str = ""
    image: Optional[str] = None
    group: Optional[str] = None
    mint: str
    seller: str
    price: str = Field(..., description="Price in lamports")
    listing: str

    @field_validator('price')
    @classmethod
    def validate_price(cls, v: str) -> str:
        float(v)
        return v

    @property
    def price_sol(self) -> float:
        return float(self.price) / LAMPORTS_PER_SOL


class MarketplaceFilters(BaseModel):
    search: Optional[str] = None
    min_price: Optional[float] = Field(None, ge=0, description="Lower bound in SOL")
    max_price: Optional[float] = Field(None, ge=0, description="Upper bound in SOL")
    group: str = ALL_GROUPS
    seller: str = ALL_SELLERS
    sort_by: SortKey = "default"

    @classmethod
    def cleared(cls) -> "MarketplaceFilters":
        return cls()


def apply_filters(assets: Sequence[NFTDetail], filters: MarketplaceFilters) -> List[NFTDetail]:
    """
    Return the assets matching every active filter, ordered by filters.sort_by.

    The input sequence is never modified. Sorting is stable, so "default"
    keeps arrival order and ties keep their relative order.
    """
    filtered = list(assets)

    if filters.search:
        term = filters.search.lower()
        filtered = [asset for asset in filtered if term in asset.name.lower()]

    if filters.min_price is not None:
        filtered = [asset for asset in filtered if asset.price_sol >= filters.min_price]

    if filters.max_price is not None:
        filtered = [asset for asset in filtered if asset.price_sol <= filters.max_price]

    if filters.group and filters.group != ALL_GROUPS:
        filtered = [asset for asset in filtered if asset.group == filters.group]

    if filters.seller and filters.seller != ALL_SELLERS:
        filtered = [asset for asset in filtered if asset.seller == filters.seller]

    if filters.sort_by == "price-asc":
        filtered.sort(key=lambda asset: float(asset.price))
    elif filters.sort_by == "price-desc":
        filtered.sort(key=lambda asset: float(asset.price), reverse=True)
    elif filters.sort_by == "name":
        filtered.sort(key=lambda asset: (asset.name.casefold(), asset.name))

    return filtered


def _unique(values) -> List[str]:
    return list(dict.fromkeys(value for value in values if value))


def unique_groups(assets: Sequence[NFTDetail]) -> List[str]:
    return _unique(asset.group for asset in assets)


def unique_sellers(assets: Sequence[NFTDetail]) -> List[str]:
    return _unique(asset.seller for asset in assets)


class ListingSnapshot(BaseModel):
    """An active listing joined with whatever NFT metadata is mirrored locally"""
    mint: str
    seller: str
    price: int
    listing: str
    is_active: bool = True
    name: Optional[str] = None
    symbol: Optional[str] = None
    image: Optional[str] = None
    group: Optional[str] = None
    uri: Optional[str] = None


class DetailResult(BaseModel):
    mint: str
    ok: bool
    detail: Optional[NFTDetail] = None
    error: Optional[str] = None


class MetadataError(Exception):
    pass


class MetadataFetcher:
    """Resolves listing snapshots into NFTDetail, reading off-chain JSON when needed"""

    def __init__(self, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout
        self._transport = transport

    async def fetch_json(self, uri: str) -> dict:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(uri)
            response.raise_for_status()
            body = response.json()
        if not isinstance(body, dict):
            raise MetadataError(f"Metadata at {uri} is not a JSON object")
        return body

    async def get_nft_detail(self, listing: ListingSnapshot) -> NFTDetail:
        name, symbol, image = listing.name, listing.symbol, listing.image

        if (not name or not image) and listing.uri:
            metadata = await self.fetch_json(listing.uri)
            name = name or metadata.get("name")
            symbol = symbol or metadata.get("symbol")
            image = image or metadata.get("image")

        if not name:
            raise MetadataError(f"No metadata available for mint {listing.mint}")

        return NFTDetail(
            name=name,
            symbol=symbol or "",
            image=image,
            group=listing.group,
            mint=listing.mint,
            seller=listing.seller,
            price=str(listing.price),
            listing=listing.listing,
        )


async def gather_nft_details(listings: Sequence[ListingSnapshot], fetcher: MetadataFetcher) -> List[DetailResult]:
    """
    Fetch details for every active listing concurrently.

    Each mint gets its own result so a single failing fetch does not discard
    the others.
    """
    active = [listing for listing in listings if listing.is_active]
    outcomes = await asyncio.gather(
        *(fetcher.get_nft_detail(listing) for listing in active),
        return_exceptions=True,
    )

    results = []
    for listing, outcome in zip(active, outcomes):
        if isinstance(outcome, asyncio.CancelledError):
            raise outcome
        if isinstance(outcome, BaseException):
            logger.warning(f"Failed to fetch details for mint {listing.mint}: {outcome!r}")
            results.append(DetailResult(mint=listing.mint, ok=False, error=str(outcome) or type(outcome).__name__))
        else:
            results.append(DetailResult(mint=listing.mint, ok=True, detail=outcome))
    return results


class LatestQuery:
    """
    Runs one asynchronous query at a time, keyed by its inputs.

    A run with the same key as the in-flight query joins it. A run with a new
    key cancels the in-flight query; callers still waiting on the cancelled
    one receive the newer result instead.
    """

    def __init__(self):
        self._key: Optional[Hashable] = None
        self._task: Optional[asyncio.Future] = None

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run(self, key: Hashable, factory: Callable[[], Awaitable[Any]]):
        if not self.in_flight or key != self._key:
            if self.in_flight:
                logger.info("Cancelling superseded query")
                self._task.cancel()
            self._key = key
            self._task = asyncio.ensure_future(factory())

        while True:
            task = self._task
            try:
                return await asyncio.shield(task)
            except asyncio.CancelledError:
                # Only follow a newer query; our own cancellation propagates
                if task.cancelled() and self._task is not task:
                    continue
                raise


class MarketplaceFeed:
    """Holds the last gathered marketplace snapshot and refreshes it on demand"""

    def __init__(self, fetcher: MetadataFetcher):
        self.fetcher = fetcher
        self.results: List[DetailResult] = []
        self.loaded = False
        self._query = LatestQuery()

    @property
    def assets(self) -> List[NFTDetail]:
        return [result.detail for result in self.results if result.ok]

    @property
    def failures(self) -> List[DetailResult]:
        return [result for result in self.results if not result.ok]

    async def refresh(self, listings: Sequence[ListingSnapshot]) -> List[DetailResult]:
        key = tuple(sorted((listing.listing, listing.price) for listing in listings if listing.is_active))

        async def gather():
            return await gather_nft_details(listings, self.fetcher)

        self.results = await self._query.run(key, gather)
        self.loaded = True
        logger.info(f"Marketplace refreshed: {len(self.assets)} assets, {len(self.failures)} failures")
        return self.results
