from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from .models import Course, LEVEL_ORDER

UNTRACKED = "Untracked"
UNDOMAIN = "Undomain"
# what the grouped courses file calls a missing track or domain
UNCATEGORIZED = "Uncategorized"

DURATION_BUCKETS = ("0-2", "2-5", "5-10", "10+")


def duration_bucket(weeks: int) -> str:
    if weeks <= 2:
        return "0-2"
    if weeks <= 5:
        return "2-5"
    if weeks <= 10:
        return "5-10"
    return "10+"


@dataclass(frozen=True)
class FacetCounts:
    tools: Dict[str, int] = field(default_factory=dict)
    levels: Dict[str, int] = field(default_factory=dict)
    durations: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class CatalogIndex:
    tracks: Dict[str, List[Course]]
    domains: Dict[str, List[Course]]
    categories: Dict[str, List[Course]]
    counts: FacetCounts

    def partition(self, dimension: str) -> Dict[str, List[Course]]:
        if dimension == "track":
            return self.tracks
        if dimension == "domain":
            return self.domains
        if dimension == "category":
            return self.categories
        raise ValueError(f"Unknown grouping dimension: {dimension}")


def _group(courses: Iterable[Course], key) -> Dict[str, List[Course]]:
    out: Dict[str, List[Course]] = {}
    for c in courses:
        out.setdefault(key(c), []).append(c)
    return out


def facet_counts(courses: Iterable[Course]) -> FacetCounts:
    courses = list(courses)

    tools = Counter(t for c in courses for t in c.tools)
    levels = {lvl: 0 for lvl in LEVEL_ORDER}
    durations = {b: 0 for b in DURATION_BUCKETS}
    for c in courses:
        if c.level in levels:
            levels[c.level] += 1
        durations[duration_bucket(c.weeks)] += 1

    return FacetCounts(
        tools=dict(sorted(tools.items(), key=lambda kv: (-kv[1], kv[0]))),
        levels=levels,
        durations=durations,
    )


def facet_values(courses: Iterable[Course], name: str) -> List[str]:
    if name == "tool":
        values = {t for c in courses for t in c.tools}
    else:
        values = {c.field_value(name) for c in courses}
    return sorted(v for v in values if v)


def build_index(courses: Iterable[Course]) -> CatalogIndex:
    """Partitions by track/domain/category plus count badges. Built once per load."""
    courses = list(courses)
    return CatalogIndex(
        tracks=_group(courses, lambda c: c.track or UNTRACKED),
        domains=_group(courses, lambda c: c.domain or UNDOMAIN),
        categories=_group(courses, lambda c: c.category),
        counts=facet_counts(courses),
    )
