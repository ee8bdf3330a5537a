from sortr.schemas.base import CamelModel


class CategorySuggestion(CamelModel):
    category: str
    confidence: float
    reason: str


class CategorySuggestions(CamelModel):
    suggestions: list[CategorySuggestion]


class ItemMatch(CamelModel):
    id: int
    name: str
    category: str | None
    location: str
    box: str
    # 0-100
    similarity: int


class SimilarItems(CamelModel):
    similar: list[ItemMatch]


class Duplicates(CamelModel):
    duplicates: list[ItemMatch]


class EmptyBox(CamelModel):
    id: int
    name: str
    location: str
    location_id: int


class EmptyBoxes(CamelModel):
    empty_boxes: list[EmptyBox]


class NameSuggestion(CamelModel):
    name: str
    category: str | None


class NameSuggestions(CamelModel):
    suggestions: list[NameSuggestion]


class BoxSuggestion(CamelModel):
    box_id: int
    box_name: str
    location: str
    item_count: int
    reason: str


class BoxSuggestions(CamelModel):
    suggestions: list[BoxSuggestion]
