"""
Tests for listing state transitions, active-filter tags and statistics.
"""

import pytest

from catalog_engine.filters import PreFilter
from catalog_engine.normalizer import normalize_courses
from catalog_engine.state import (
    active_tags,
    add_filter,
    clear_filters,
    compute_stats,
    go_to_page,
    initial_state,
    remove_filter,
    set_min_rating,
    set_price_range,
    set_search,
    set_sort,
    set_view,
)
from conftest import make_record


@pytest.fixture
def many():
    recs = [make_record(f"AI-{n}", f"Course {n}", students=n) for n in range(1, 31)]
    return normalize_courses(recs)


def test_initial_state_filters_and_sorts(courses):
    state = initial_state(courses, sort_key="popular")
    assert [c.id for c in state.filtered] == ["AI-1", "AI-2", "AI-3", "AI-4"]
    assert state.page == 1


def test_initial_state_rejects_unknown_sort_and_view(courses):
    with pytest.raises(ValueError):
        initial_state(courses, sort_key="cheapest")
    with pytest.raises(ValueError):
        initial_state(courses, view="carousel")


def test_filter_changes_reset_page(many):
    state = go_to_page(initial_state(many), 3)
    assert state.page == 3
    state = add_filter(state, "level", "Beginner")
    assert state.page == 1


def test_out_of_range_page_is_ignored(many):
    state = initial_state(many)
    assert go_to_page(state, 4) is state
    assert go_to_page(state, 0) is state
    assert len(go_to_page(state, 3).current_items) == 6


def test_add_filter_is_idempotent(courses):
    state = add_filter(initial_state(courses), "track", "Robotics")
    assert add_filter(state, "track", "Robotics") is state
    assert [c.id for c in state.filtered] == ["AI-3"]


def test_add_unknown_facet_raises(courses):
    with pytest.raises(ValueError):
        add_filter(initial_state(courses), "colour", "red")


def test_remove_filter_restores_subset(courses):
    state = add_filter(initial_state(courses), "level", "Advanced")
    state = remove_filter(state, "level", "Advanced")
    assert len(state.filtered) == len(courses)


def test_tags_follow_criteria(courses):
    state = initial_state(courses)
    state = add_filter(state, "tool", "Python")
    state = set_price_range(state, (0, 10000))
    state = set_min_rating(state, 4)
    assert active_tags(state) == [("tool", "Python"), ("price", "0-10000"), ("rating", "4+")]

    state = remove_filter(state, "price", "0-10000")
    state = remove_filter(state, "rating", "4+")
    assert active_tags(state) == [("tool", "Python")]


def test_bad_price_range_raises(courses):
    with pytest.raises(ValueError):
        set_price_range(initial_state(courses), (5000, 100))


def test_clear_filters_keeps_pre_filter():
    courses = normalize_courses([
        make_record("AI-1", "Arm", track="Robotics", level="Advanced"),
        make_record("AI-2", "Drone", track="Robotics"),
        make_record("AI-3", "Vision", track="Data Science"),
    ])
    state = initial_state(courses, pre_filter=PreFilter("track", "Robotics"))
    state = add_filter(state, "level", "Advanced")
    assert [c.id for c in state.filtered] == ["AI-1"]
    state = clear_filters(state)
    assert [c.id for c in state.filtered] == ["AI-1", "AI-2"]
    assert active_tags(state) == []


def test_search_and_mode(courses):
    state = set_search(initial_state(courses), "machine learning", "relevance")
    assert state.criteria.search_mode == "relevance"
    assert [c.id for c in state.filtered] == ["AI-1", "AI-2"]
    assert [c.id for c in set_search(state, "").filtered] == ["AI-1", "AI-2", "AI-3", "AI-4"]


def test_set_sort_and_view(courses):
    state = set_sort(initial_state(courses), "durationDesc")
    assert state.filtered[0].id == "AI-4"
    assert set_view(state, "list").view == "list"
    with pytest.raises(ValueError):
        set_view(state, "table")


def test_stats_use_rated_courses_only(courses):
    stats = compute_stats(courses)
    assert stats == {
        "total": 4,
        "active": 3,
        "advanced": 2,
        "upcoming": 1,
        "total_students": 235,
        "average_rating": 4.4,
    }


def test_stats_without_ratings():
    courses = normalize_courses([make_record("a", "A")])
    assert compute_stats(courses)["average_rating"] is None
