"""
Tests for the composite filter and both search modes.
"""

import math

import pytest

from catalog_engine.filters import (
    TITLE_PHRASE,
    FilterCriteria,
    PreFilter,
    filter_courses,
    matches_all_words,
    min_price,
    relevance_score,
    search_with_relevance,
)
from catalog_engine.normalizer import normalize_courses
from conftest import make_record, priced


# ============================================================================
# Price
# ============================================================================

def test_min_price_ignores_zero_tiers():
    [c] = normalize_courses([make_record("a", "A", pricing=priced(1499))])
    assert min_price(c) == 1499
    [free] = normalize_courses([make_record("b", "B", pricing=priced(0, 6000, 9000))])
    assert min_price(free) == 6000


def test_unpriced_course_is_infinitely_expensive():
    [c] = normalize_courses([make_record("a", "A")])
    assert math.isinf(min_price(c))


def test_price_range_is_inclusive():
    courses = normalize_courses([make_record("a", "A", pricing=priced(1499))])
    assert filter_courses(courses, FilterCriteria(price_range=(0, 10000))) == courses
    assert filter_courses(courses, FilterCriteria(price_range=(1499, 1499))) == courses
    assert filter_courses(courses, FilterCriteria(price_range=(10000, 25000))) == []


def test_price_range_excludes_unpriced(courses):
    result = filter_courses(courses, FilterCriteria(price_range=(0, 10 ** 9)))
    assert "AI-3" not in [c.id for c in result]


# ============================================================================
# Facets
# ============================================================================

def test_empty_criteria_keeps_everything(courses):
    assert FilterCriteria().is_empty
    assert filter_courses(courses, FilterCriteria()) == courses


def test_facets_are_any_of_within_and_all_of_across(courses):
    both = filter_courses(courses, FilterCriteria(levels=("Beginner", "Advanced")))
    assert [c.id for c in both] == ["AI-1", "AI-2"]
    narrowed = filter_courses(courses, FilterCriteria(levels=("Beginner", "Advanced"), tools=("PyTorch",)))
    assert [c.id for c in narrowed] == ["AI-2"]


def test_finer_criteria_give_a_subset(courses):
    coarse = filter_courses(courses, FilterCriteria(tracks=("Data Science",)))
    fine = filter_courses(courses, FilterCriteria(tracks=("Data Science",), durations=("5-10",)))
    assert set(c.internal_id for c in fine) <= set(c.internal_id for c in coarse)
    assert len(fine) == 1


def test_status_filter_uses_normalized_status(courses):
    result = filter_courses(courses, FilterCriteria(statuses=("Upcoming",)))
    assert [c.id for c in result] == ["AI-3"]


def test_min_rating_excludes_unrated(courses):
    result = filter_courses(courses, FilterCriteria(min_rating=0))
    assert {c.id for c in result} == {"AI-1", "AI-2"}


def test_duplicate_ids_both_match_track_filter():
    courses = normalize_courses([
        make_record("AI-5", "One", track="Robotics"),
        make_record("AI-5", "Two", track="Robotics"),
    ])
    result = filter_courses(courses, FilterCriteria(tracks=("Robotics",)))
    assert [c.internal_id for c in result] == ["AI-5", "AI-5-2"]


def test_duration_bucket_filter_scenario():
    recs = [make_record(f"AI-{n}", f"Course {n}", duration="1 week") for n in range(1, 13)]
    recs.append(make_record("AI-13", "Longer", duration="3 weeks"))
    result = filter_courses(normalize_courses(recs), FilterCriteria(durations=("0-2",)))
    assert len(result) == 12


def test_invalid_criteria_raise():
    with pytest.raises(ValueError):
        FilterCriteria(search_mode="fuzzy")
    with pytest.raises(ValueError):
        FilterCriteria(durations=("3-4",))
    with pytest.raises(ValueError):
        PreFilter("level", "Beginner")


# ============================================================================
# Search
# ============================================================================

def test_all_words_mode_needs_every_word(courses):
    assert matches_all_words(courses[0], "learning python")
    assert not matches_all_words(courses[0], "learning robots")


def test_all_words_mode_is_the_default(courses):
    result = filter_courses(courses, FilterCriteria(search="machine learning"))
    assert [c.id for c in result] == ["AI-1", "AI-2"]


def test_relevance_title_match_outranks_description_only(courses):
    title_hit, description_hit = courses[0], courses[1]
    assert relevance_score(title_hit, "machine learning") >= TITLE_PHRASE
    assert relevance_score(title_hit, "machine learning") > relevance_score(description_hit, "machine learning")
    ranked = search_with_relevance(courses, "machine learning")
    assert ranked[0].id == "AI-1"
    assert "AI-3" not in [c.id for c in ranked]


def test_relevance_mode_drops_zero_scores(courses):
    result = filter_courses(courses, FilterCriteria(search="qiskit", search_mode="relevance"))
    assert [c.id for c in result] == ["AI-4"]


# ============================================================================
# Pre-filter
# ============================================================================

def test_pre_filter_matches_normalized_values(courses):
    pf = PreFilter("track", "  data science ")
    result = filter_courses(courses, FilterCriteria(), pf)
    assert [c.id for c in result] == ["AI-1", "AI-2"]


def test_pre_filter_matches_placeholder_for_empty_track():
    courses = normalize_courses([make_record("a", "A", track=""), make_record("b", "B", track="Robotics")])
    for name in ("Uncategorized", "untracked"):
        result = filter_courses(courses, FilterCriteria(), PreFilter("track", name))
        assert [c.id for c in result] == ["a"]
    assert filter_courses(courses, FilterCriteria(), PreFilter("domain", "Undomain")) == []
