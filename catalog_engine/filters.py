import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from .indexer import DURATION_BUCKETS, UNCATEGORIZED, UNDOMAIN, UNTRACKED, duration_bucket
from .models import Course
from .normalizer import normalize_value

SEARCH_MODES = ("all", "relevance")
PRE_FILTER_KEYS = ("track", "domain")

# bucket names that stand for an empty track or domain
_PLACEHOLDERS = {
    "track": frozenset(normalize_value(p) for p in (UNTRACKED, UNCATEGORIZED)),
    "domain": frozenset(normalize_value(p) for p in (UNDOMAIN, UNCATEGORIZED)),
}

# relevance weights
TITLE_PHRASE = 100
TITLE_WORD = 50
DESCRIPTION_PHRASE = 30
DESCRIPTION_WORD = 15
TOOL_WORD = 25
DOMAIN_PHRASE = 40
TRACK_PHRASE = 40


@dataclass(frozen=True)
class PreFilter:
    key: str
    value: str

    def __post_init__(self):
        if self.key not in PRE_FILTER_KEYS:
            raise ValueError(f"Pre-filter key must be one of {PRE_FILTER_KEYS}, got {self.key!r}")

    def matches(self, course: Course) -> bool:
        actual = normalize_value(course.field_value(self.key))
        wanted = normalize_value(self.value)
        if not actual:
            return wanted in _PLACEHOLDERS[self.key]
        return actual == wanted


@dataclass(frozen=True)
class FilterCriteria:
    """
    Composite filter. Every facet tuple is any-of; an empty tuple (or None)
    means no constraint on that facet.
    """
    search: str = ""
    search_mode: str = "all"
    tracks: Tuple[str, ...] = ()
    domains: Tuple[str, ...] = ()
    levels: Tuple[str, ...] = ()
    statuses: Tuple[str, ...] = ()
    tools: Tuple[str, ...] = ()
    durations: Tuple[str, ...] = ()
    price_range: Optional[Tuple[float, float]] = None
    min_rating: Optional[float] = None

    def __post_init__(self):
        if self.search_mode not in SEARCH_MODES:
            raise ValueError(f"Unknown search mode: {self.search_mode}")
        bad = [d for d in self.durations if d not in DURATION_BUCKETS]
        if bad:
            raise ValueError(f"Unknown duration bucket(s): {', '.join(bad)}")

    @property
    def is_empty(self) -> bool:
        return self == FilterCriteria(search_mode=self.search_mode)


def min_price(course: Course) -> float:
    """Lowest INR price across the pricing tiers; inf when the course is unpriced."""
    if course.pricing is None:
        return math.inf
    prices = [t.inr for t in course.pricing.tiers() if t.inr]
    return min(prices) if prices else math.inf


# ----------------------------
# Search
# ----------------------------

def _words(text: str) -> List[str]:
    return text.lower().split()


def matches_all_words(course: Course, search: str) -> bool:
    fields = [course.title.lower(), course.description.lower(), course.tool.lower()]
    return all(any(w in f for f in fields) for w in _words(search))


def relevance_score(course: Course, search: str) -> int:
    phrase = search.lower().strip()
    if not phrase:
        return 0
    words = phrase.split()
    title = course.title.lower()
    description = course.description.lower()
    tools = course.tool.lower()

    score = 0
    if phrase in title:
        score += TITLE_PHRASE
    score += TITLE_WORD * sum(1 for w in words if w in title)

    if phrase in description:
        score += DESCRIPTION_PHRASE
    score += DESCRIPTION_WORD * sum(1 for w in words if w in description)

    if tools:
        score += TOOL_WORD * sum(1 for w in words if w in tools)

    if phrase in course.domain.lower():
        score += DOMAIN_PHRASE
    if phrase in course.track.lower():
        score += TRACK_PHRASE
    return score


def search_with_relevance(courses: Iterable[Course], search: str) -> List[Course]:
    if not search or not search.strip():
        return list(courses)
    scored = [(relevance_score(c, search), c) for c in courses]
    scored = [(s, c) for s, c in scored if s > 0]
    # sorted() is stable, ties keep collection order
    scored.sort(key=lambda x: x[0], reverse=True)
    return [c for _, c in scored]


# ----------------------------
# Facet predicates
# ----------------------------

def _in(values: Sequence[str], value: str) -> bool:
    return not values or value in values


def matches_facets(course: Course, criteria: FilterCriteria) -> bool:
    if not _in(criteria.tracks, course.track):
        return False
    if not _in(criteria.domains, course.domain):
        return False
    if not _in(criteria.levels, course.level):
        return False
    if not _in(criteria.statuses, course.normalized_status):
        return False

    if criteria.tools and not any(t in course.tools for t in criteria.tools):
        return False

    if criteria.durations and duration_bucket(course.weeks) not in criteria.durations:
        return False

    if criteria.price_range is not None:
        lo, hi = criteria.price_range
        price = min_price(course)
        if math.isinf(price) or price < lo or price > hi:
            return False

    if criteria.min_rating is not None:
        if course.rating is None or course.rating < criteria.min_rating:
            return False

    return True


def apply_pre_filter(courses: Iterable[Course], pre_filter: Optional[PreFilter]) -> List[Course]:
    if pre_filter is None:
        return list(courses)
    return [c for c in courses if pre_filter.matches(c)]


def filter_courses(
    courses: Iterable[Course],
    criteria: FilterCriteria,
    pre_filter: Optional[PreFilter] = None,
) -> List[Course]:
    base = apply_pre_filter(courses, pre_filter)
    subset = [c for c in base if matches_facets(c, criteria)]

    search = (criteria.search or "").strip()
    if not search:
        return subset
    if criteria.search_mode == "relevance":
        return search_with_relevance(subset, search)
    return [c for c in subset if matches_all_words(c, search)]
