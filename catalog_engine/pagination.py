import math
from typing import Any, Dict, Iterable, List, Mapping, Sequence, TypeVar

from .filters import min_price
from .models import Course

T = TypeVar("T")

PAGE_SIZE = 12
FLAT_VIEWS = ("grid", "list")
GROUP_VIEWS = {"tracks": "track", "domains": "domain", "categories": "category"}
VIEWS = FLAT_VIEWS + tuple(GROUP_VIEWS)


# ----------------------------
# Paging
# ----------------------------

def total_pages(count: int, size: int = PAGE_SIZE) -> int:
    if size <= 0:
        raise ValueError("Page size must be positive")
    return math.ceil(count / size)


def paginate(items: Sequence[T], page: int, size: int = PAGE_SIZE) -> List[T]:
    if page < 1:
        return []
    start = (page - 1) * size
    return list(items[start:start + size])


def is_valid_page(page: int, count: int, size: int = PAGE_SIZE) -> bool:
    return 1 <= page <= total_pages(count, size)


def page_window(current: int, pages: int, width: int = 5) -> List[int]:
    """Page numbers to show as buttons, centred on the current page where possible."""
    if pages <= 0:
        return []
    start = max(1, current - width // 2)
    end = min(pages, start + width - 1)
    if end - start + 1 < width:
        start = max(1, end - width + 1)
    return list(range(start, end + 1))


# ----------------------------
# Card / row view-models
# ----------------------------

def format_inr(amount: float) -> str:
    if math.isinf(amount) or not amount:
        return "N/A"
    # Indian digit grouping: last three digits, then pairs
    whole = str(int(round(amount)))
    head, tail = whole[:-3], whole[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return "₹" + ",".join(groups + [tail])


def star_breakdown(rating) -> Dict[str, int]:
    if not rating:
        return {"full": 0, "half": 0, "empty": 0}
    full = int(math.floor(rating))
    half = 1 if (rating % 1) >= 0.5 else 0
    return {"full": full, "half": half, "empty": 5 - full - half}


def _card(c: Course) -> Dict[str, Any]:
    return {
        "internal_id": c.internal_id,
        "id": c.id,
        "title": c.title,
        "level": c.level,
        "duration": c.duration,
        "weeks": c.weeks,
        "status": c.normalized_status,
        "tools": list(c.tools),
        "domain": c.domain,
        "track": c.track,
        "rating": c.rating,
        "rating_label": f"{c.rating:.1f}" if c.rating is not None else "New",
        "stars": star_breakdown(c.rating),
        "students": c.students,
        "price_label": format_inr(min_price(c)),
        "enrollment_url": c.enrollment_url,
        "main_page_url": c.main_page_url,
    }


def render_page(items: Iterable[Course], view: str) -> List[Dict[str, Any]]:
    """
    Render one page slice. Grid cards and list rows carry the same courses in
    the same order; list rows additionally carry the description.
    """
    if view not in FLAT_VIEWS:
        raise ValueError(f"Unknown flat view: {view}")
    out = []
    for c in items:
        card = _card(c)
        card["layout"] = view
        if view == "list":
            card["description"] = c.description
        out.append(card)
    return out


def render_groups(partition: Mapping[str, Sequence[Course]], expanded: Iterable[str] = ()) -> List[Dict[str, Any]]:
    """Collapsible summaries; member rows are only built for expanded groups."""
    expanded = set(expanded)
    groups = []
    for name, members in partition.items():
        is_open = name in expanded
        groups.append({
            "name": name,
            "count": len(members),
            "expanded": is_open,
            "courses": [
                {
                    "internal_id": c.internal_id,
                    "title": c.title,
                    "track": c.track,
                    "domain": c.domain,
                    "tool": c.tool,
                    "status": c.normalized_status,
                }
                for c in members
            ] if is_open else [],
        })
    return groups
