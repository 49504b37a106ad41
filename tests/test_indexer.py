from catalog_engine.indexer import (
    DURATION_BUCKETS,
    UNDOMAIN,
    UNTRACKED,
    build_index,
    duration_bucket,
    facet_counts,
    facet_values,
)
from catalog_engine.normalizer import normalize_courses


def test_duration_buckets():
    assert [duration_bucket(w) for w in (0, 1, 2, 3, 5, 6, 10, 11)] == [
        "0-2", "0-2", "0-2", "2-5", "2-5", "5-10", "5-10", "10+",
    ]


def test_partitions_cover_every_course(courses):
    index = build_index(courses)
    assert set(index.tracks) == {"Data Science", "Robotics", "Quantum AI & Software Engineering"}
    assert sum(len(v) for v in index.tracks.values()) == len(courses)
    assert sum(len(v) for v in index.domains.values()) == len(courses)
    assert set(index.categories) == {"Academic", "Industrial"}
    assert index.partition("domain") is index.domains


def test_missing_track_and_domain_use_placeholders():
    courses = normalize_courses([{"id": "a", "title": "A"}])
    index = build_index(courses)
    assert list(index.tracks) == [UNTRACKED]
    assert list(index.domains) == [UNDOMAIN]


def test_facet_counts(courses):
    counts = facet_counts(courses)
    assert counts.tools["Python"] == 1
    assert list(counts.durations) == list(DURATION_BUCKETS)
    assert counts.durations == {"0-2": 1, "2-5": 1, "5-10": 1, "10+": 1}
    assert counts.levels == {"Beginner": 1, "Intermediate": 1, "Advanced": 1, "Expert": 1}


def test_facet_values_are_sorted_and_distinct(courses):
    assert facet_values(courses, "track") == ["Data Science", "Quantum AI & Software Engineering", "Robotics"]
    assert "scikit-learn" in facet_values(courses, "tool")
    assert facet_values(courses, "status") == ["Active", "Upcoming"]
