import math
import re
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .filters import min_price
from .models import Course

_ID_NUMBER_RE = re.compile(r"(\d+)\D*$")


def _id_number(course: Course) -> Optional[int]:
    m = _ID_NUMBER_RE.search(course.id or "")
    return int(m.group(1)) if m else None


# key function, reverse flag
_SORTS: Dict[str, Tuple[Callable[[Course], object], bool]] = {
    "title": (lambda c: (c.title.casefold(), c.title), False),
    "level": (lambda c: c.level_rank, False),
    "duration": (lambda c: c.weeks, False),
    "durationDesc": (lambda c: c.weeks, True),
    "status": (lambda c: c.normalized_status, False),
    "popular": (lambda c: c.students, True),
    # unrated sorts below any rated course
    "rating": (lambda c: c.rating if c.rating is not None else -math.inf, True),
    "priceAsc": (min_price, False),
    "priceDesc": (min_price, True),
    "newest": (lambda c: _id_number(c) if _id_number(c) is not None else -1, True),
}

SORT_KEYS = tuple(_SORTS)


def sort_courses(courses: Iterable[Course], key: Optional[str]) -> List[Course]:
    courses = list(courses)
    if not key:
        return courses
    if key not in _SORTS:
        raise ValueError(f"Unknown sort key: {key}")
    fn, reverse = _SORTS[key]
    return sorted(courses, key=fn, reverse=reverse)
