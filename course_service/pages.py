import logging
import re
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

logger = logging.getLogger("course-service")

TEMPLATES_DIR = Path(__file__).parent / "templates"
DETAIL_TEMPLATE = "course_detail.html"

_NON_WORD = re.compile(r"[^\w\s-]")
_SPACES = re.compile(r"\s+")
_DASHES = re.compile(r"-+")

LIST_SECTIONS = ("syllabus", "projects", "testimonials", "faqs", "plans")
TIERS = ("lms", "lms_video", "lms_video_live")


def title_to_slug(title: str) -> str:
    slug = _NON_WORD.sub("", (title or "").lower().strip())
    slug = _SPACES.sub("-", slug)
    return _DASHES.sub("-", slug).strip("-")


def safe_course(payload: dict[str, Any]) -> dict[str, Any]:
    """Fill every field the detail template reads, so partial drafts still render."""
    course = dict(payload)
    course["title"] = course.get("title") or course.get("id") or "Untitled Course"
    course["description"] = course.get("description") or course.get("shortDescription") or ""
    course["mainPageUrl"] = course.get("mainPageUrl") or f"/ai/courses/{title_to_slug(course['title']) or 'course'}/"

    pricing = dict(course.get("pricing") or {})
    for tier in TIERS:
        pricing[tier] = pricing.get(tier) or {"usd": 0, "inr": 0}
    course["pricing"] = pricing

    for section in LIST_SECTIONS:
        if not isinstance(course.get(section), list):
            course[section] = []
    course["students"] = course.get("students") or 0
    course["level"] = course.get("level") or ""
    course["enrollmentUrl"] = course.get("enrollmentUrl") or ""
    return course


class DetailPageRenderer:
    def __init__(self, pages_dir: str | Path, base_path: str = "/ai", templates_dir: str | Path = TEMPLATES_DIR):
        self.pages_dir = Path(pages_dir)
        self.base_path = "/" + base_path.strip("/") if base_path.strip("/") else ""
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            autoescape=select_autoescape(["html"]),
            undefined=StrictUndefined,
        )

    def slug_for(self, course: dict[str, Any]) -> str:
        return title_to_slug(str(course.get("title") or course.get("id") or "")) or "course"

    def url_for(self, course: dict[str, Any]) -> str:
        return f"{self.base_path}/{self.slug_for(course)}/"

    def render(self, course: dict[str, Any]) -> str:
        return self.env.get_template(DETAIL_TEMPLATE).render(course=safe_course(course))

    def write(self, course: dict[str, Any], html: str) -> str:
        out_dir = self.pages_dir / self.slug_for(course)
        out_dir.mkdir(parents=True, exist_ok=True)
        (out_dir / "index.html").write_text(html, encoding="utf-8")
        logger.info("Wrote detail page %s", out_dir / "index.html")
        return self.url_for(course)
