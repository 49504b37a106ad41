from .models import Course, Pricing, PriceTier, LEVEL_ORDER
from .normalizer import (
    normalize_status,
    normalize_value,
    assign_internal_ids,
    normalize_courses,
    is_industry_track,
    parse_weeks,
)
from .indexer import CatalogIndex, build_index, facet_counts, facet_values, duration_bucket, DURATION_BUCKETS
from .filters import FilterCriteria, PreFilter, filter_courses, search_with_relevance, relevance_score, min_price
from .sorting import SORT_KEYS, sort_courses
from .pagination import PAGE_SIZE, VIEWS, paginate, total_pages, render_page, render_groups
from .state import ListingState, initial_state, compute_stats, active_tags
from .loader import CatalogLoader, LoadResult
from .debounce import Debouncer

__all__ = [
    "Course", "Pricing", "PriceTier", "LEVEL_ORDER",
    "normalize_status", "normalize_value", "assign_internal_ids", "normalize_courses",
    "is_industry_track", "parse_weeks",
    "CatalogIndex", "build_index", "facet_counts", "facet_values", "duration_bucket", "DURATION_BUCKETS",
    "FilterCriteria", "PreFilter", "filter_courses", "search_with_relevance", "relevance_score", "min_price",
    "SORT_KEYS", "sort_courses",
    "PAGE_SIZE", "VIEWS", "paginate", "total_pages", "render_page", "render_groups",
    "ListingState", "initial_state", "compute_stats", "active_tags",
    "CatalogLoader", "LoadResult",
    "Debouncer",
]
