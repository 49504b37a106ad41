import logging
import re
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .models import Course, PriceTier, Pricing, PRICE_TIERS

logger = logging.getLogger(__name__)


# ----------------------------
# Status facet
# ----------------------------

DEFAULT_STATUS = "Upcoming"

_ACTIVE_WORDS = ("active", "existing", "high")
_UPCOMING_WORDS = ("upcoming", "new", "coming")


def normalize_status(raw: Any) -> str:
    if raw is None:
        return DEFAULT_STATUS
    s = str(raw).strip()
    if not s:
        return DEFAULT_STATUS

    lower = s.lower()
    if s.startswith("🟢") or any(w in lower for w in _ACTIVE_WORDS):
        return "Active"
    if s.startswith(("🆕", "🟡")) or any(w in lower for w in _UPCOMING_WORDS):
        return "Upcoming"
    if "medium" in lower:
        return "Medium"
    if "low" in lower:
        return "Low"

    # keep unknown statuses as their own bucket
    return s[0].upper() + s[1:]


# ----------------------------
# Internal ids
# ----------------------------

def raw_id(record: Mapping[str, Any]) -> Optional[str]:
    val = record.get("id")
    if val is None:
        val = record.get("courseId")
    if val is None:
        return None
    return str(val)


def assign_internal_ids(records: Iterable[Mapping[str, Any]]) -> List[str]:
    """
    First occurrence of an id keeps it verbatim, later ones get `<id>-<n>`
    where n is the occurrence count. Records without any id get `auto-<n>`.
    """
    records = list(records)
    taken = {rid for rid in (raw_id(r) for r in records) if rid is not None}
    seen: Dict[str, int] = {}
    used: set = set()
    next_auto = 1
    out: List[str] = []

    for r in records:
        rid = raw_id(r)
        if rid is None:
            candidate = f"auto-{next_auto}"
            next_auto += 1
            while candidate in taken or candidate in used:
                candidate = f"auto-{next_auto}"
                next_auto += 1
        elif rid not in seen:
            seen[rid] = 1
            candidate = rid
        else:
            count = seen[rid] + 1
            candidate = f"{rid}-{count}"
            while candidate in taken or candidate in used:
                count += 1
                candidate = f"{rid}-{count}"
            seen[rid] = count
            logger.warning("Duplicate course id detected: %s (assigned internal id %s)", rid, candidate)

        used.add(candidate)
        out.append(candidate)

    return out


# ----------------------------
# Navigation values
# ----------------------------

_SINGLE_QUOTES = re.compile("[‘’]")
_DOUBLE_QUOTES = re.compile("[“”]")


def normalize_value(value: Any) -> str:
    if not value:
        return ""
    s = _SINGLE_QUOTES.sub("'", str(value))
    s = _DOUBLE_QUOTES.sub('"', s)
    return s.casefold().strip()


INDUSTRY_TRACKS = (
    "Industry AI Leadership & Strategy",
    "Government & Public AI",
    "No-Code AI & Citizen Innovation",
    "AI Research & Scientific Discovery",
    "Industry AI & Intelligent Manufacturing",
    "AI for Sustainability & Climate Resilience",
    "AI for Global Health, Biomedicine & Life Sciences",
    "AI for Advanced Materials & Nanotech",
    "AI for Energy, Environment & Sustainability",
    "AI for Space, Geospatial & Planetary Science",
    "AI for Quantum & Cybersecurity",
    "AI for Robotics & Intelligent Systems",
    "AI for Biomedical Engineering",
    "AI for Climate & Sustainability",
    "AI for Policy & Global Security",
    "AI for Quantum Computing & Emerging Tech",
    "Quantum AI & Software Engineering",
    "Quantum AI Deployment & Integration",
    "Quantum AI & Industry Applications",
)

_INDUSTRY_KEYS = frozenset(normalize_value(t) for t in INDUSTRY_TRACKS)


def is_industry_track(track: Any) -> bool:
    return normalize_value(track) in _INDUSTRY_KEYS


# ----------------------------
# Load-time schema boundary
# ----------------------------

_WEEKS_RE = re.compile(r"\d+")


def parse_weeks(duration: Any) -> int:
    if duration is None:
        return 0
    m = _WEEKS_RE.search(str(duration))
    return int(m.group(0)) if m else 0


def split_tools(tool: Any) -> tuple:
    if not tool:
        return ()
    if isinstance(tool, (list, tuple)):
        parts = [str(t) for t in tool]
    else:
        parts = str(tool).split(",")
    return tuple(p.strip() for p in parts if p and p.strip())


def _text(val: Any) -> str:
    if val is None:
        return ""
    return str(val).strip()


def _number(val: Any, default: float = 0.0) -> float:
    try:
        return float(val)
    except (TypeError, ValueError):
        return default


def _rating(record: Mapping[str, Any]) -> Optional[float]:
    val = record.get("rating")
    if not val:
        agg = record.get("aggregateRating")
        if isinstance(agg, Mapping):
            val = agg.get("ratingValue")
    rating = _number(val, 0.0)
    # zero or unparseable means "not rated yet"
    if rating <= 0:
        return None
    return min(rating, 5.0)


def _pricing(val: Any) -> Optional[Pricing]:
    if not isinstance(val, Mapping):
        return None
    tiers = {}
    for name in PRICE_TIERS:
        tier = val.get(name)
        if isinstance(tier, Mapping):
            tiers[name] = PriceTier(usd=_number(tier.get("usd")), inr=_number(tier.get("inr")))
        else:
            tiers[name] = PriceTier()
    return Pricing(weeks=int(_number(val.get("weeks"))), **tiers)


def build_course(record: Mapping[str, Any], internal_id: str) -> Course:
    rid = raw_id(record)
    track = _text(record.get("track"))
    tool_raw = record.get("tool") or record.get("tools") or ""
    tools = split_tools(tool_raw)
    category = _text(record.get("category")) or ("Industrial" if is_industry_track(track) else "Academic")
    status = record.get("status")
    if status is None:
        status = record.get("state")

    return Course(
        internal_id=internal_id,
        id=rid,
        title=_text(record.get("title")) or (rid or internal_id),
        description=_text(record.get("description")),
        level=_text(record.get("level")),
        duration=_text(record.get("duration")),
        weeks=parse_weeks(record.get("duration")),
        track=track,
        domain=_text(record.get("domain")),
        category=category,
        tool=", ".join(tools) if isinstance(tool_raw, (list, tuple)) else _text(tool_raw),
        tools=tools,
        status=_text(status),
        normalized_status=normalize_status(status),
        rating=_rating(record),
        students=max(0, int(_number(record.get("students")))),
        pricing=_pricing(record.get("pricing")),
        enrollment_url=_text(record.get("enrollmentUrl")),
        main_page_url=_text(record.get("mainPageUrl")),
        raw=MappingProxyType(dict(record)),
    )


def normalize_courses(records: Iterable[Mapping[str, Any]]) -> List[Course]:
    records = [r for r in records if isinstance(r, Mapping)]
    ids = assign_internal_ids(records)
    return [build_course(r, iid) for r, iid in zip(records, ids)]
