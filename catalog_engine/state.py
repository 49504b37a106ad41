"""
Listing state.

One immutable ListingState per screen; every interaction goes through a pure
function that returns the next state. Any change to the criteria re-runs the
filter and sort passes and puts the user back on page 1.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .filters import FilterCriteria, PreFilter, filter_courses
from .models import Course
from .pagination import PAGE_SIZE, VIEWS, is_valid_page, paginate
from .sorting import SORT_KEYS, sort_courses

# tag facet -> FilterCriteria attribute
FACETS = {
    "track": "tracks",
    "domain": "domains",
    "level": "levels",
    "status": "statuses",
    "tool": "tools",
    "duration": "durations",
}


@dataclass(frozen=True)
class ListingState:
    courses: Tuple[Course, ...]
    pre_filter: Optional[PreFilter] = None
    criteria: FilterCriteria = field(default_factory=FilterCriteria)
    sort_key: Optional[str] = None
    page: int = 1
    view: str = "grid"
    page_size: int = PAGE_SIZE
    filtered: Tuple[Course, ...] = ()

    @property
    def current_items(self) -> List[Course]:
        return paginate(self.filtered, self.page, self.page_size)


def _refresh(state: ListingState, **changes) -> ListingState:
    state = replace(state, **changes)
    subset = filter_courses(state.courses, state.criteria, state.pre_filter)
    return replace(state, filtered=tuple(sort_courses(subset, state.sort_key)), page=1)


def initial_state(
    courses: Sequence[Course],
    pre_filter: Optional[PreFilter] = None,
    criteria: Optional[FilterCriteria] = None,
    sort_key: Optional[str] = None,
    view: str = "grid",
    page_size: int = PAGE_SIZE,
) -> ListingState:
    if sort_key is not None and sort_key not in SORT_KEYS:
        raise ValueError(f"Unknown sort key: {sort_key}")
    if view not in VIEWS:
        raise ValueError(f"Unknown view: {view}")
    state = ListingState(
        courses=tuple(courses),
        pre_filter=pre_filter,
        criteria=criteria or FilterCriteria(),
        sort_key=sort_key,
        view=view,
        page_size=page_size,
    )
    return _refresh(state)


# ----------------------------
# Filter updates
# ----------------------------

def _facet_attr(facet: str) -> str:
    attr = FACETS.get(facet)
    if attr is None:
        raise ValueError(f"Unknown facet: {facet}")
    return attr


def add_filter(state: ListingState, facet: str, value: str) -> ListingState:
    attr = _facet_attr(facet)
    current = getattr(state.criteria, attr)
    if not value or value in current:
        return state
    return _refresh(state, criteria=replace(state.criteria, **{attr: current + (value,)}))


def remove_filter(state: ListingState, facet: str, value: str) -> ListingState:
    if facet == "price":
        return set_price_range(state, None)
    if facet == "rating":
        return set_min_rating(state, None)
    if facet == "search":
        return set_search(state, "")
    attr = _facet_attr(facet)
    current = getattr(state.criteria, attr)
    if value not in current:
        return state
    kept = tuple(v for v in current if v != value)
    return _refresh(state, criteria=replace(state.criteria, **{attr: kept}))


def set_search(state: ListingState, search: str, mode: Optional[str] = None) -> ListingState:
    criteria = replace(state.criteria, search=search or "", search_mode=mode or state.criteria.search_mode)
    if criteria == state.criteria:
        return state
    return _refresh(state, criteria=criteria)


def set_price_range(state: ListingState, price_range: Optional[Tuple[float, float]]) -> ListingState:
    if price_range is not None:
        lo, hi = price_range
        if lo > hi:
            raise ValueError("Price range minimum is above its maximum")
    return _refresh(state, criteria=replace(state.criteria, price_range=price_range))


def set_min_rating(state: ListingState, min_rating: Optional[float]) -> ListingState:
    return _refresh(state, criteria=replace(state.criteria, min_rating=min_rating))


def set_sort(state: ListingState, sort_key: Optional[str]) -> ListingState:
    if sort_key is not None and sort_key not in SORT_KEYS:
        raise ValueError(f"Unknown sort key: {sort_key}")
    return _refresh(state, sort_key=sort_key)


def clear_filters(state: ListingState) -> ListingState:
    """Drop every user filter. The pre-filter from navigation stays in force."""
    return _refresh(state, criteria=FilterCriteria(search_mode=state.criteria.search_mode))


# ----------------------------
# Navigation
# ----------------------------

def go_to_page(state: ListingState, page: int) -> ListingState:
    if not is_valid_page(page, len(state.filtered), state.page_size):
        return state
    return replace(state, page=page)


def set_view(state: ListingState, view: str) -> ListingState:
    if view not in VIEWS:
        raise ValueError(f"Unknown view: {view}")
    return replace(state, view=view)


# ----------------------------
# Derived data
# ----------------------------

def active_tags(state: ListingState) -> List[Tuple[str, str]]:
    c = state.criteria
    tags = [(facet, v) for facet, attr in FACETS.items() for v in getattr(c, attr)]
    if c.price_range is not None:
        lo, hi = c.price_range
        tags.append(("price", f"{lo:g}-{hi:g}"))
    if c.min_rating is not None:
        tags.append(("rating", f"{c.min_rating:g}+"))
    return tags


def compute_stats(courses: Sequence[Course]) -> Dict[str, Any]:
    rated = [c.rating for c in courses if c.rating is not None]
    return {
        "total": len(courses),
        "active": sum(1 for c in courses if c.normalized_status == "Active"),
        "advanced": sum(1 for c in courses if c.level in ("Advanced", "Expert")),
        "upcoming": sum(1 for c in courses if c.normalized_status == "Upcoming"),
        "total_students": sum(c.students for c in courses),
        "average_rating": round(sum(rated) / len(rated), 2) if rated else None,
    }
