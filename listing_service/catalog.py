import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from catalog_engine import (
    CatalogIndex,
    CatalogLoader,
    Course,
    PreFilter,
    build_index,
    normalize_courses,
    normalize_value,
)

logger = logging.getLogger("listing-service")


class CatalogUnavailable(RuntimeError):
    def __init__(self, attempts: List[str]):
        super().__init__("Course data could not be loaded from any source")
        self.attempts = attempts


@dataclass(frozen=True)
class Snapshot:
    courses: Tuple[Course, ...]
    index: CatalogIndex
    source: Optional[str] = None
    attempts: Tuple[str, ...] = ()
    scoped: bool = False


@dataclass
class CatalogCache:
    """
    Holds the normalized collection between requests. The full collection is
    loaded once; scoped pages get their own snapshot only while the full one
    is not available.
    """
    loader: CatalogLoader
    _full: Optional[Snapshot] = None
    _scoped: Dict[Tuple[str, str], Snapshot] = field(default_factory=dict)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    @staticmethod
    def _snapshot(result) -> Snapshot:
        if not result.ok:
            raise CatalogUnavailable(result.attempts)
        courses = tuple(normalize_courses(result.records))
        return Snapshot(
            courses=courses,
            index=build_index(courses),
            source=result.source,
            attempts=tuple(result.attempts),
            scoped=result.scoped,
        )

    async def get(self, pre_filter: Optional[PreFilter] = None) -> Snapshot:
        async with self._lock:
            if self._full is not None:
                return self._full
            if pre_filter is None:
                self._full = self._snapshot(await self.loader.load())
                return self._full

            key = (pre_filter.key, normalize_value(pre_filter.value))
            if key not in self._scoped:
                snap = self._snapshot(await self.loader.load_scoped(pre_filter))
                if not snap.scoped:
                    # the fallback already fetched everything
                    self._full = snap
                    return snap
                self._scoped[key] = snap
            return self._scoped[key]

    async def reload(self) -> Snapshot:
        async with self._lock:
            snap = self._snapshot(await self.loader.load())
            self._full = snap
            self._scoped.clear()
        logger.info("Reloaded %d courses from %s", len(snap.courses), snap.source)
        return snap
