from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple


LEVEL_ORDER = {
    "Beginner": 1,
    "Intermediate": 2,
    "Advanced": 3,
    "Expert": 4,
}

PRICE_TIERS = ("lms", "lms_video", "lms_video_live")


@dataclass(frozen=True)
class PriceTier:
    usd: float = 0.0
    inr: float = 0.0


@dataclass(frozen=True)
class Pricing:
    lms: PriceTier = field(default_factory=PriceTier)
    lms_video: PriceTier = field(default_factory=PriceTier)
    lms_video_live: PriceTier = field(default_factory=PriceTier)
    weeks: int = 0

    def tiers(self) -> Tuple[PriceTier, ...]:
        return (self.lms, self.lms_video, self.lms_video_live)


@dataclass(frozen=True)
class Course:
    """
    A course record with every optional field resolved to a default.

    Built once at load time (see normalizer.build_course). `raw` keeps the
    untouched source record; nothing here is ever written back to it.
    """
    internal_id: str
    id: Optional[str]
    title: str
    description: str = ""
    level: str = ""
    duration: str = ""
    weeks: int = 0
    track: str = ""
    domain: str = ""
    category: str = "Academic"
    tool: str = ""
    tools: Tuple[str, ...] = ()
    status: str = ""
    normalized_status: str = "Upcoming"
    rating: Optional[float] = None
    students: int = 0
    pricing: Optional[Pricing] = None
    enrollment_url: str = ""
    main_page_url: str = ""
    raw: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}), compare=False, repr=False)

    @property
    def level_rank(self) -> int:
        return LEVEL_ORDER.get(self.level, 0)

    @property
    def is_rated(self) -> bool:
        return self.rating is not None

    def field_value(self, name: str) -> str:
        # facet lookup by the names used in query params and tags
        if name == "status":
            return self.normalized_status
        if name in ("track", "domain", "level", "category", "tool", "title", "description"):
            return getattr(self, name)
        raise ValueError(f"Unknown course field: {name}")
