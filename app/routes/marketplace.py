import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.listings import Listing
from app.models.nfts import NFT
from app.services.marketplace import (
    ALL_GROUPS, ALL_SELLERS, DetailResult, ListingSnapshot, MarketplaceFeed, MarketplaceFilters, NFTDetail, SortKey,
    apply_filters, unique_groups, unique_sellers,
)

router = APIRouter(tags=["marketplace"])
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class MarketplaceResponse(BaseModel):
    assets: List[NFTDetail]
    failures: List[DetailResult]
    groups: List[str]
    sellers: List[str]


def get_feed(request: Request) -> MarketplaceFeed:
    return request.app.state.marketplace_feed


def load_active_listings(db: Session) -> List[ListingSnapshot]:
    rows = (
        db.query(Listing, NFT)
        .outerjoin(NFT, NFT.mint == Listing.mint)
        .filter(Listing.is_active.is_(True), Listing.mint.isnot(None))
        .order_by(Listing.id)
        .all()
    )
    return [
        ListingSnapshot(
            mint=listing.mint,
            seller=listing.seller or "",
            price=listing.price,
            listing=listing.listing_address or str(listing.id),
            is_active=listing.is_active,
            name=nft.name if nft else None,
            symbol=nft.symbol if nft else None,
            image=nft.image if nft else None,
            group=nft.group if nft else None,
            uri=nft.uri if nft else None,
        )
        for listing, nft in rows
    ]


@router.get("/marketplace", response_model=MarketplaceResponse)
async def get_marketplace(
    search: Optional[str] = None,
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    group: str = ALL_GROUPS,
    seller: str = ALL_SELLERS,
    sort_by: SortKey = "default",
    refresh: bool = False,
    db: Session = Depends(get_db),
    feed: MarketplaceFeed = Depends(get_feed),
):
    """
    NFTs on sale, filtered and sorted.

    The listing snapshot is gathered on first use and whenever refresh=true;
    mints whose metadata could not be fetched are reported in failures.
    """
    if refresh or not feed.loaded:
        # Sync ORM query, kept off the event loop
        listings = await run_in_threadpool(load_active_listings, db)
        await feed.refresh(listings)

    filters = MarketplaceFilters(
        search=search,
        min_price=min_price,
        max_price=max_price,
        group=group,
        seller=seller,
        sort_by=sort_by,
    )
    assets = feed.assets
    return MarketplaceResponse(
        assets=apply_filters(assets, filters),
        failures=feed.failures,
        groups=unique_groups(assets),
        sellers=unique_sellers(assets),
    )
