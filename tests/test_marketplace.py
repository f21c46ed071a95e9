import asyncio

import httpx
import pytest

from app.services.marketplace import (
    LatestQuery, ListingSnapshot, MarketplaceFeed, MarketplaceFilters, MetadataFetcher, NFTDetail,
    apply_filters, gather_nft_details, unique_groups, unique_sellers,
)
from conftest import MINT_A, MINT_B, MINT_C

SOL = 1_000_000_000


def asset(name, sol, group="g1", seller="s1", mint=None):
    return NFTDetail(
        name=name,
        symbol="SYM",
        group=group,
        mint=mint or f"mint-{name}",
        seller=seller,
        price=str(int(sol * SOL)),
        listing=f"listing-{name}",
    )


@pytest.fixture
def assets():
    return [
        asset("Cheap Hat", 0.5, group="hats", seller="alice"),
        asset("Gold Jacket", 2.0, group="jackets", seller="bob"),
        asset("Blue Jacket", 1.0, group="jackets", seller="alice"),
    ]


def prices(items):
    return [item.price_sol for item in items]


def test_min_price_then_sort_ascending(assets):
    filtered = apply_filters(assets, MarketplaceFilters(min_price=1.0))
    assert prices(filtered) == [2.0, 1.0]

    ordered = apply_filters(assets, MarketplaceFilters(min_price=1.0, sort_by="price-asc"))
    assert prices(ordered) == [1.0, 2.0]


def test_price_bounds_inclusive(assets):
    filtered = apply_filters(assets, MarketplaceFilters(min_price=0.5, max_price=1.0))
    assert prices(filtered) == [0.5, 1.0]


def test_search_is_case_insensitive_substring(assets):
    filtered = apply_filters(assets, MarketplaceFilters(search="JACK"))
    assert [a.name for a in filtered] == ["Gold Jacket", "Blue Jacket"]


def test_group_and_seller_filters(assets):
    assert [a.name for a in apply_filters(assets, MarketplaceFilters(group="jackets", seller="alice"))] == [
        "Blue Jacket"
    ]
    assert len(apply_filters(assets, MarketplaceFilters(group="all_groups", seller="all_sellers"))) == 3


def test_sort_orders(assets):
    assert prices(apply_filters(assets, MarketplaceFilters(sort_by="price-desc"))) == [2.0, 1.0, 0.5]
    assert [a.name for a in apply_filters(assets, MarketplaceFilters(sort_by="name"))] == [
        "Blue Jacket", "Cheap Hat", "Gold Jacket"
    ]
    assert apply_filters(assets, MarketplaceFilters()) == assets


def test_price_sort_is_stable(assets):
    twin = asset("Twin Hat", 0.5)
    items = [assets[0], twin, assets[1]]
    ordered = apply_filters(items, MarketplaceFilters(sort_by="price-asc"))
    assert [a.name for a in ordered] == ["Cheap Hat", "Twin Hat", "Gold Jacket"]


def test_filters_never_mutate_input_and_return_subset(assets):
    original = list(assets)
    filters = MarketplaceFilters(search="a", max_price=1.5, sort_by="price-desc")

    result = apply_filters(assets, filters)

    assert assets == original
    assert all(item in assets for item in result)
    assert all(item.price_sol <= 1.5 and "a" in item.name.lower() for item in result)
    assert prices(result) == sorted(prices(result), reverse=True)


def test_cleared_filters_restore_full_list(assets):
    narrowed = MarketplaceFilters(search="gold", sort_by="price-asc")
    assert len(apply_filters(assets, narrowed)) == 1
    assert apply_filters(assets, MarketplaceFilters.cleared()) == assets


def test_unique_groups_and_sellers(assets):
    assert unique_groups(assets) == ["hats", "jackets"]
    assert unique_sellers(assets) == ["alice", "bob"]


def snapshot(mint, price, **kwargs):
    return ListingSnapshot(mint=mint, seller="seller", price=price, listing=f"listing-{mint}", **kwargs)


@pytest.mark.anyio
async def test_gather_reports_per_item_failures():
    def handler(request):
        if request.url.path == "/ok.json":
            return httpx.Response(200, json={"name": "Remote Tee", "image": "https://example.com/t.png"})
        return httpx.Response(500)

    fetcher = MetadataFetcher(transport=httpx.MockTransport(handler))
    listings = [
        snapshot(MINT_A, SOL, name="Stored Tee", image="https://example.com/s.png"),
        snapshot(MINT_B, 2 * SOL, uri="https://meta.example.com/ok.json"),
        snapshot(MINT_C, 3 * SOL, uri="https://meta.example.com/broken.json"),
        snapshot("inactive", SOL, name="Old", image="x", is_active=False),
    ]

    results = await gather_nft_details(listings, fetcher)

    assert [r.mint for r in results] == [MINT_A, MINT_B, MINT_C]
    assert [r.ok for r in results] == [True, True, False]
    assert results[0].detail.name == "Stored Tee"
    assert results[1].detail.name == "Remote Tee"
    assert results[1].detail.price == str(2 * SOL)
    assert results[2].error


@pytest.mark.anyio
async def test_latest_query_joins_same_key():
    calls = []

    async def work():
        calls.append(1)
        await asyncio.sleep(0.01)
        return "done"

    query = LatestQuery()
    first, second = await asyncio.gather(query.run("k", work), query.run("k", work))

    assert first == second == "done"
    assert len(calls) == 1


@pytest.mark.anyio
async def test_latest_query_cancels_superseded_run():
    started = asyncio.Event()
    cancelled = []

    async def slow():
        started.set()
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.append(True)
            raise
        return "stale"

    async def fast():
        return "fresh"

    query = LatestQuery()
    stale_caller = asyncio.ensure_future(query.run("old", slow))
    await started.wait()

    assert await query.run("new", fast) == "fresh"
    assert await stale_caller == "fresh"
    assert cancelled == [True]


@pytest.mark.anyio
async def test_feed_keeps_assets_and_failures():
    feed = MarketplaceFeed(MetadataFetcher())
    await feed.refresh([snapshot(MINT_A, SOL, name="Tee", image="i"), snapshot(MINT_B, SOL)])

    assert feed.loaded
    assert [a.mint for a in feed.assets] == [MINT_A]
    assert [f.mint for f in feed.failures] == [MINT_B]


def test_marketplace_endpoint(client, designer, product):
    headers = designer["headers"]
    for mint, name, group in ((MINT_A, "Linen Shirt #1", "summer"), (MINT_B, "Linen Shirt #2", "winter")):
        client.post(
            "/api/saveNFT",
            json={"mint": mint, "name": name, "image": f"https://example.com/{name}.png", "group": group},
            headers=headers,
        )
    for mint, price in ((MINT_A, int(0.5 * SOL)), (MINT_B, 2 * SOL), (MINT_C, SOL)):
        client.post(
            "/api/listings",
            json={"product_id": product["id"], "price": price, "mint": mint, "seller": "seller-1",
                  "listing_address": f"L-{mint}"},
            headers=headers,
        )

    response = client.get("/api/marketplace", params={"min_price": 0.4, "sort_by": "price-desc"})

    assert response.status_code == 200
    body = response.json()
    assert [a["mint"] for a in body["assets"]] == [MINT_B, MINT_A]
    assert [f["mint"] for f in body["failures"]] == [MINT_C]
    assert body["groups"] == ["summer", "winter"]
    assert body["sellers"] == ["seller-1"]

    narrowed = client.get("/api/marketplace", params={"group": "summer"}).json()
    assert [a["mint"] for a in narrowed["assets"]] == [MINT_A]


def test_marketplace_rejects_unknown_sort(client):
    response = client.get("/api/marketplace", params={"sort_by": "random"})
    assert response.status_code == 400


def test_marketplace_loads_listings_off_event_loop(client, app, monkeypatch):
    import threading

    from app.routes import marketplace as marketplace_routes

    threads = {}
    load = marketplace_routes.load_active_listings
    feed = app.state.marketplace_feed
    refresh = feed.refresh

    def recording_load(db):
        threads["load"] = threading.get_ident()
        return load(db)

    async def recording_refresh(listings):
        threads["loop"] = threading.get_ident()
        return await refresh(listings)

    monkeypatch.setattr(marketplace_routes, "load_active_listings", recording_load)
    monkeypatch.setattr(feed, "refresh", recording_refresh)

    assert client.get("/api/marketplace").status_code == 200
    assert threads["load"] != threads["loop"]
