from sortr.schemas.base import CamelModel
from sortr.schemas.activity import ActivityResponse


class Overview(CamelModel):
    total_items: int
    total_boxes: int
    total_locations: int
    total_categories: int
    items_without_box: int
    items_without_location: int
    empty_boxes_count: int
    average_items_per_box: float
    box_utilization: float


class CategoryCount(CamelModel):
    category: str
    count: int


class LocationCount(CamelModel):
    id: int
    name: str
    count: int


class BoxCount(CamelModel):
    id: int
    name: str
    location: str
    count: int = 0


class RecentItem(CamelModel):
    id: int
    name: str
    category: str | None
    location: str


class InventoryStats(CamelModel):
    overview: Overview
    items_by_category: list[CategoryCount]
    items_by_location: list[LocationCount]
    top_boxes: list[BoxCount]
    empty_boxes: list[BoxCount]
    recent_items: list[RecentItem]
    recent_activity: list[ActivityResponse]
