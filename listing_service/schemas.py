from typing import Any

from pydantic import BaseModel


class PreFilterOut(BaseModel):
    key: str
    value: str


class ActiveFilterOut(BaseModel):
    facet: str
    value: str


class StatsOut(BaseModel):
    total: int
    active: int
    advanced: int
    upcoming: int
    total_students: int
    average_rating: float | None = None


class ListingOut(BaseModel):
    items: list[dict[str, Any]]
    view: str
    page: int
    total_pages: int
    page_window: list[int]
    total: int
    stats: StatsOut
    active_filters: list[ActiveFilterOut]
    pre_filter: PreFilterOut | None = None
    source: str | None = None


class FacetsOut(BaseModel):
    tracks: list[str]
    domains: list[str]
    categories: list[str]
    levels: dict[str, int]
    statuses: list[str]
    tools: dict[str, int]
    durations: dict[str, int]
    total: int


class GroupsOut(BaseModel):
    dimension: str
    groups: list[dict[str, Any]]


class ReloadOut(BaseModel):
    success: bool
    source: str | None
    total: int
    attempts: list[str]
