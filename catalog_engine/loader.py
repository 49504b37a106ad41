import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import httpx

from .filters import PreFilter
from .normalizer import normalize_value

logger = logging.getLogger(__name__)


@dataclass
class LoadResult:
    records: List[Dict[str, Any]] = field(default_factory=list)
    source: Optional[str] = None
    attempts: List[str] = field(default_factory=list)
    scoped: bool = False

    @property
    def ok(self) -> bool:
        return bool(self.records)


def flatten_grouped(grouped: Any) -> List[Dict[str, Any]]:
    """
    Accepts either grouped shape served by the course service:
    {tracks: {...}, domains: {...}} or {industryTracks: [...], regularTracks: [...]}.
    """
    if not isinstance(grouped, dict):
        return []

    # tracks alone already partition the collection
    tracks = grouped.get("tracks")
    if isinstance(tracks, dict) and tracks:
        return _records([c for bucket in tracks.values() if isinstance(bucket, list) for c in bucket])
    domains = grouped.get("domains")
    if isinstance(domains, dict) and domains:
        return _records([c for bucket in domains.values() if isinstance(bucket, list) for c in bucket])

    out: List[Any] = []
    for section in ("industryTracks", "regularTracks"):
        tracks = grouped.get(section)
        if not isinstance(tracks, list):
            continue
        for track in tracks:
            domains = track.get("domains") if isinstance(track, dict) else None
            if not isinstance(domains, list):
                continue
            for domain in domains:
                courses = domain.get("courses") if isinstance(domain, dict) else None
                if isinstance(courses, list):
                    out.extend(courses)
    return _records(out)


def _records(data: Any) -> List[Dict[str, Any]]:
    if isinstance(data, list):
        return [r for r in data if isinstance(r, dict)]
    return []


class CatalogLoader:
    """
    Tries every configured source in order until one yields a non-empty
    array: inline file, then collection URLs, then grouped URLs.
    Never raises; callers check LoadResult.ok.
    """
    def __init__(
        self,
        source_urls: Sequence[str] = (),
        grouped_urls: Sequence[str] = (),
        inline_file: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.source_urls = [u for u in source_urls if u]
        self.grouped_urls = [u for u in grouped_urls if u]
        self.inline_file = inline_file
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport, follow_redirects=True)

    def _read_inline(self, result: LoadResult) -> List[Dict[str, Any]]:
        if not self.inline_file:
            return []
        result.attempts.append(f"Trying: {self.inline_file}")
        try:
            data = json.loads(Path(self.inline_file).read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Failed to read inline course data %s: %s", self.inline_file, e)
            result.attempts.append(f"Failed: {self.inline_file} ({type(e).__name__})")
            return []
        records = _records(data)
        if not records:
            result.attempts.append(f"No data at {self.inline_file}")
        return records

    async def _fetch_json(self, client: httpx.AsyncClient, url: str, result: LoadResult) -> Any:
        result.attempts.append(f"Trying: {url}")
        try:
            r = await client.get(url, headers={"Cache-Control": "no-cache"})
            r.raise_for_status()
            return r.json()
        except httpx.HTTPError as e:
            logger.warning("Failed to load from %s: %s", url, e)
            result.attempts.append(f"Failed: {url} ({type(e).__name__})")
        except ValueError:
            logger.warning("Malformed JSON from %s", url)
            result.attempts.append(f"Failed: {url} (malformed JSON)")
        return None

    async def load(self) -> LoadResult:
        result = LoadResult()

        records = self._read_inline(result)
        if records:
            result.records, result.source = records, self.inline_file
            logger.info("Loaded %d courses from inline file %s", len(records), self.inline_file)
            return result

        async with self._client() as client:
            for url in self.source_urls:
                records = _records(await self._fetch_json(client, url, result))
                if records:
                    result.records, result.source = records, url
                    logger.info("Loaded %d courses from %s", len(records), url)
                    return result
                result.attempts.append(f"No data at {url}")

            for url in self.grouped_urls:
                records = flatten_grouped(await self._fetch_json(client, url, result))
                if records:
                    result.records, result.source = records, url
                    logger.info("Loaded %d courses from grouped source %s", len(records), url)
                    return result
                result.attempts.append(f"No data at {url}")

        logger.error("No course data found in any candidate location")
        result.attempts.append("No data found in any candidate location")
        return result

    async def load_scoped(self, pre_filter: PreFilter) -> LoadResult:
        """
        Scoped listing pages only need one bucket. Look it up in the grouped
        maps first; fall back to the full collection otherwise. The caller
        still applies the pre-filter, so either path yields the same subset.
        """
        result = LoadResult()
        section = "tracks" if pre_filter.key == "track" else "domains"
        target = normalize_value(pre_filter.value)

        async with self._client() as client:
            for url in self.grouped_urls:
                grouped = await self._fetch_json(client, url, result)
                buckets = grouped.get(section) if isinstance(grouped, dict) else None
                if not isinstance(buckets, dict):
                    result.attempts.append(f"No {section} map at {url}")
                    continue
                match = next((k for k in buckets if normalize_value(k) == target), None)
                records = _records(buckets.get(match)) if match is not None else []
                if records:
                    result.records, result.source, result.scoped = records, url, True
                    logger.info("Loaded %d courses for %s=%s from %s", len(records), pre_filter.key, match, url)
                    return result
                result.attempts.append(f"No {pre_filter.key} {pre_filter.value!r} at {url}")

        full = await self.load()
        full.attempts = result.attempts + full.attempts
        return full
