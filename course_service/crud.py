import json
import logging
from pathlib import Path
from typing import Any

from catalog_engine.indexer import UNCATEGORIZED
from catalog_engine.normalizer import is_industry_track
from shared.datastore import JsonFileStore

logger = logging.getLogger("course-service")

SUMMARY_FIELDS = (
    "id", "title", "level", "duration", "domain", "track", "status",
    "enrollmentUrl", "mainPageUrl", "description", "students",
)


class CourseNotFound(LookupError):
    pass


def list_courses(store: JsonFileStore) -> list[dict[str, Any]]:
    return store.load()


def get_course(store: JsonFileStore, course_id: str) -> dict[str, Any]:
    c = next((c for c in store.load() if str(c.get("id")) == course_id), None)
    if c is None:
        raise CourseNotFound(f"Course not found: {course_id}")
    return c


def merge_course(records: list[dict[str, Any]], payload: dict[str, Any]) -> tuple[list[dict[str, Any]], dict[str, Any]]:
    """Upsert by id: fields in payload win over the stored record. Returns a new list."""
    records = list(records)
    cid = str(payload.get("id"))
    for i, existing in enumerate(records):
        if str(existing.get("id")) == cid:
            merged = {**existing, **payload}
            records[i] = merged
            return records, merged
    merged = dict(payload)
    records.append(merged)
    return records, merged


def save_courses(store: JsonFileStore, records: list[dict[str, Any]]) -> None:
    store.save(records)


# -------------------------
# Grouping
# -------------------------

def _instructor(course: dict[str, Any]) -> str:
    instructors = course.get("instructors")
    if isinstance(instructors, list) and instructors:
        first = instructors[0]
        return str(first.get("name", "")) if isinstance(first, dict) else str(first)
    return str(course.get("instructor") or "")


def course_summary(course: dict[str, Any], track: str, domain: str) -> dict[str, Any]:
    out = {k: course.get(k) for k in SUMMARY_FIELDS}
    out["track"] = track
    out["domain"] = domain
    out["description"] = course.get("description") or ""
    out["students"] = course.get("students") or 0
    out["tool"] = course.get("tool") or course.get("tools")
    out["instructor"] = _instructor(course)
    rating = course.get("rating")
    if not rating and isinstance(course.get("aggregateRating"), dict):
        rating = course["aggregateRating"].get("ratingValue")
    out["rating"] = rating or None
    return out


def build_grouped(records: list[dict[str, Any]]) -> dict[str, Any]:
    tracks: dict[str, dict[str, Any]] = {}
    by_track: dict[str, list[dict[str, Any]]] = {}
    by_domain: dict[str, list[dict[str, Any]]] = {}

    for course in records:
        track = course.get("track") or UNCATEGORIZED
        domain = course.get("domain") or UNCATEGORIZED

        t = tracks.setdefault(track, {
            "track": track,
            "isIndustryTrack": is_industry_track(track),
            "domains": {},
        })
        t["domains"].setdefault(domain, []).append(course_summary(course, track, domain))

        by_track.setdefault(track, []).append(course)
        by_domain.setdefault(domain, []).append(course)

    grouped: dict[str, Any] = {"industryTracks": [], "regularTracks": [], "totalCourses": len(records)}
    for name in sorted(tracks, key=str.casefold):
        t = tracks[name]
        domains = [{"name": d, "courses": cs, "courseCount": len(cs)} for d, cs in t["domains"].items()]
        entry = {
            "track": name,
            "isIndustryTrack": t["isIndustryTrack"],
            "domains": domains,
            "courseCount": sum(d["courseCount"] for d in domains),
        }
        grouped["industryTracks" if t["isIndustryTrack"] else "regularTracks"].append(entry)

    grouped["tracks"] = by_track
    grouped["domains"] = by_domain
    return grouped


def rebuild_groups(store: JsonFileStore, grouped_file: Path, records: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    grouped = build_grouped(store.load() if records is None else records)
    grouped_file.parent.mkdir(parents=True, exist_ok=True)
    grouped_file.write_text(json.dumps(grouped, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Rebuilt %s (%d courses)", grouped_file, grouped["totalCourses"])
    return grouped


# -------------------------
# Backups
# -------------------------

def restore_backup(store: JsonFileStore, name: str) -> list[dict[str, Any]]:
    parsed = json.loads(store.read_backup(name))
    if not isinstance(parsed, list):
        raise ValueError("Backup does not contain a course array")
    store.save(parsed)
    return parsed
