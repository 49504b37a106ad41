import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from catalog_engine import (
    FilterCriteria,
    PreFilter,
    active_tags,
    build_index,
    compute_stats,
    facet_values,
    initial_state,
    render_groups,
    render_page,
    total_pages,
)
from catalog_engine.pagination import GROUP_VIEWS, page_window
from catalog_engine.state import go_to_page
from .catalog import CatalogCache, CatalogUnavailable, Snapshot
from .schemas import FacetsOut, GroupsOut, ListingOut, ReloadOut

logger = logging.getLogger("listing-service")

SortKey = Literal["title", "level", "duration", "durationDesc", "status", "popular", "rating", "priceAsc", "priceDesc", "newest"]
View = Literal["grid", "list", "tracks", "domains", "categories"]
SearchMode = Literal["all", "relevance"]
Dimension = Literal["track", "domain", "category"]
PreFilterMode = Literal["track", "domain"]


def cache_dependency(cache: CatalogCache):
    def get_cache():
        yield cache
    return get_cache


def _pre_filter(
    mode: Optional[str],
    value: Optional[str],
    track: Optional[str] = None,
    domain: Optional[str] = None,
) -> Optional[PreFilter]:
    """Navigation scope: mode+value first, then a bare track, then a bare domain."""
    if mode is not None:
        if not value:
            raise HTTPException(400, "A pre-filter mode needs a value")
        return PreFilter(mode, value)
    if track:
        return PreFilter("track", track)
    if domain:
        return PreFilter("domain", domain)
    return None


async def _snapshot(cache: CatalogCache, pre_filter: Optional[PreFilter] = None) -> Snapshot:
    try:
        return await cache.get(pre_filter)
    except CatalogUnavailable as e:
        raise HTTPException(503, detail={"message": str(e), "attempts": e.attempts})


def build_router(cache: CatalogCache) -> APIRouter:
    router = APIRouter(prefix="/listing")
    get_cache = cache_dependency(cache)

    @router.get("/", response_model=ListingOut)
    async def listing(
        mode: Optional[PreFilterMode] = None,
        value: Optional[str] = None,
        track: Optional[str] = None,
        domain: Optional[str] = None,
        search: str = "",
        search_mode: SearchMode = "all",
        filter_track: list[str] = Query(default=[]),
        filter_domain: list[str] = Query(default=[]),
        level: list[str] = Query(default=[]),
        status: list[str] = Query(default=[]),
        tool: list[str] = Query(default=[]),
        duration: list[str] = Query(default=[]),
        price_min: Optional[float] = Query(default=None, ge=0),
        price_max: Optional[float] = Query(default=None, ge=0),
        min_rating: Optional[float] = Query(default=None, ge=0, le=5),
        sort: Optional[SortKey] = None,
        page: int = 1,
        view: View = "grid",
        expand: list[str] = Query(default=[]),
        c: CatalogCache = Depends(get_cache),
    ):
        pre_filter = _pre_filter(mode, value, track, domain)
        snap = await _snapshot(c, pre_filter)

        price_range = None
        if price_min is not None or price_max is not None:
            price_range = (price_min or 0.0, price_max if price_max is not None else float("inf"))
            if price_range[0] > price_range[1]:
                raise HTTPException(400, "price_min is above price_max")

        try:
            criteria = FilterCriteria(
                search=search,
                search_mode=search_mode,
                tracks=tuple(filter_track),
                domains=tuple(filter_domain),
                levels=tuple(level),
                statuses=tuple(status),
                tools=tuple(tool),
                durations=tuple(duration),
                price_range=price_range,
                min_rating=min_rating,
            )
        except ValueError as e:
            raise HTTPException(400, str(e))

        state = initial_state(snap.courses, pre_filter, criteria, sort, view)
        state = go_to_page(state, page)

        if view in GROUP_VIEWS:
            partition = build_index(state.filtered).partition(GROUP_VIEWS[view])
            items = render_groups(partition, expand)
            pages = 1 if state.filtered else 0
        else:
            items = render_page(state.current_items, view)
            pages = total_pages(len(state.filtered), state.page_size)

        return {
            "items": items,
            "view": state.view,
            "page": state.page,
            "total_pages": pages,
            "page_window": page_window(state.page, pages),
            "total": len(state.filtered),
            "stats": compute_stats(state.filtered),
            "active_filters": [{"facet": f, "value": v} for f, v in active_tags(state)],
            "pre_filter": {"key": pre_filter.key, "value": pre_filter.value} if pre_filter else None,
            "source": snap.source,
        }

    @router.get("/facets", response_model=FacetsOut)
    async def facets(
        mode: Optional[PreFilterMode] = None,
        value: Optional[str] = None,
        track: Optional[str] = None,
        domain: Optional[str] = None,
        c: CatalogCache = Depends(get_cache),
    ):
        pre_filter = _pre_filter(mode, value, track, domain)
        snap = await _snapshot(c, pre_filter)
        courses = snap.courses
        index = snap.index
        if pre_filter is not None:
            courses = tuple(x for x in courses if pre_filter.matches(x))
            index = build_index(courses)
        return {
            "tracks": facet_values(courses, "track"),
            "domains": facet_values(courses, "domain"),
            "categories": facet_values(courses, "category"),
            "levels": index.counts.levels,
            "statuses": facet_values(courses, "status"),
            "tools": index.counts.tools,
            "durations": index.counts.durations,
            "total": len(courses),
        }

    @router.get("/groups", response_model=GroupsOut)
    async def groups(
        dimension: Dimension = "track",
        expand: list[str] = Query(default=[]),
        c: CatalogCache = Depends(get_cache),
    ):
        snap = await _snapshot(c)
        return {"dimension": dimension, "groups": render_groups(snap.index.partition(dimension), expand)}

    @router.post("/reload", response_model=ReloadOut)
    async def reload(c: CatalogCache = Depends(get_cache)):
        try:
            snap = await c.reload()
        except CatalogUnavailable as e:
            raise HTTPException(503, detail={"message": str(e), "attempts": e.attempts})
        return {"success": True, "source": snap.source, "total": len(snap.courses), "attempts": list(snap.attempts)}

    return router
