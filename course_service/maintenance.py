"""
Batch rewrites of the course data file.

    python -m course_service.maintenance pricing
    python -m course_service.maintenance ids --base-url https://example.org/register/
    python -m course_service.maintenance urls
    python -m course_service.maintenance groups

Every command writes through JsonFileStore, so the previous file is backed up first.
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from catalog_engine.normalizer import parse_weeks
from shared.config import get_env
from shared.datastore import BackupError, JsonFileStore
from .crud import rebuild_groups
from .pages import title_to_slug
from .settings import load_settings

logger = logging.getLogger("course-service")

USD_LMS_PER_WEEK = 19
INR_LMS_PER_WEEK = 1499
USD_VIDEO_ADDON = 60
INR_VIDEO_ADDON = 6000
USD_LIVE_PER_LECTURE = 60
INR_LIVE_PER_LECTURE = 5000

ENROLLMENT_BASE = "https://nanoschool.in/ai-course/registration/"
MAIN_PAGE_BASE = "https://nanoschool.in/ai/courses"


# -------------------------
# Record transforms
# -------------------------

def compute_pricing(weeks: int) -> dict[str, Any]:
    # one live lecture per week
    weeks = weeks if weeks > 0 else 1
    lms_usd = weeks * USD_LMS_PER_WEEK
    lms_inr = weeks * INR_LMS_PER_WEEK
    video_usd = lms_usd + USD_VIDEO_ADDON
    video_inr = lms_inr + INR_VIDEO_ADDON
    return {
        "weeks": weeks,
        "lms": {"usd": lms_usd, "inr": lms_inr},
        "lms_video": {"usd": video_usd, "inr": video_inr},
        "lms_video_live": {
            "usd": video_usd + weeks * USD_LIVE_PER_LECTURE,
            "inr": video_inr + weeks * INR_LIVE_PER_LECTURE,
        },
    }


def apply_pricing(records: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [{**r, "pricing": compute_pricing(parse_weeks(r.get("duration")))} for r in records]


def assign_sequential_ids(records: list[dict[str, Any]], enrollment_base: str = ENROLLMENT_BASE) -> list[dict[str, Any]]:
    out = []
    for n, r in enumerate(records, start=1):
        cid = f"AI-{n}"
        out.append({**r, "id": cid, "enrollmentUrl": f"{enrollment_base}?pid={cid}", "status": "Active"})
    return out


def apply_main_page_urls(records: list[dict[str, Any]], base: str = MAIN_PAGE_BASE) -> list[dict[str, Any]]:
    base = base.rstrip("/")
    out = []
    for r in records:
        slug = title_to_slug(str(r.get("title") or ""))
        if not slug:
            logger.warning("Skipping course %s: no title to build a URL from", r.get("id"))
            out.append(r)
            continue
        out.append({**r, "mainPageUrl": f"{base}/{slug}/"})
    return out


# -------------------------
# CLI
# -------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m course_service.maintenance",
        description="Batch maintenance for the course data file",
    )
    parser.add_argument("--file", help="Course data file (default: COURSES_DATA_FILE)")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only log warnings")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("pricing", help="Recompute pricing tiers from each course duration")
    ids = sub.add_parser("ids", help="Renumber ids as AI-<n> and reset enrollment URLs")
    ids.add_argument("--base-url", default=get_env("ENROLLMENT_BASE_URL", ENROLLMENT_BASE))
    urls = sub.add_parser("urls", help="Rebuild mainPageUrl from course titles")
    urls.add_argument("--base-url", default=get_env("MAIN_PAGE_BASE_URL", MAIN_PAGE_BASE))
    sub.add_parser("groups", help="Rewrite the grouped courses file")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=logging.WARNING if args.quiet else logging.INFO)

    settings = load_settings()
    data_file = Path(args.file) if args.file else settings.data_file
    if not data_file.exists():
        logger.error("Data file not found: %s", data_file)
        return 1

    store = JsonFileStore(data_file, settings.backups_dir, keep=settings.backup_keep)
    records = store.load()

    if args.command == "groups":
        rebuild_groups(store, settings.grouped_file, records)
        return 0

    if args.command == "pricing":
        records = apply_pricing(records)
    elif args.command == "ids":
        records = assign_sequential_ids(records, args.base_url)
    elif args.command == "urls":
        records = apply_main_page_urls(records, args.base_url)

    try:
        store.save(records)
    except BackupError as e:
        logger.error("%s; data file left unchanged", e)
        return 1

    if args.command == "ids":
        rebuild_groups(store, settings.grouped_file, records)
    logger.info("%s: updated %d courses", args.command, len(records))
    return 0


if __name__ == "__main__":
    sys.exit(main())
