"""Pydantic v2 models for blueprint room analysis.

Field names are snake_case in Python and camelCase on the wire, so a
stored ``ai_analysis_json`` keeps the ``squareFootage`` /
``totalSquareFootage`` shape the frontend reads.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

RoomType = Literal[
    "kitchen", "bathroom", "bedroom", "living_room", "dining_room", "office", "other"
]
Priority = Literal["high", "medium", "low"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RoomDimensions(_CamelModel):
    """Room measurements in feet / square feet."""

    length: float = 0.0
    width: float = 0.0
    height: float | None = None
    square_footage: float = 0.0


class RoomRequirements(_CamelModel):
    """MEP requirements noted for a room."""

    electrical: list[str] | None = None
    plumbing: list[str] | None = None
    hvac: list[str] | None = None


class RoomData(_CamelModel):
    """A single room extracted from a blueprint."""

    id: str
    name: str
    type: RoomType = "other"
    dimensions: RoomDimensions = Field(default_factory=RoomDimensions)
    confidence: float = 0.5
    features: list[str] = []
    requirements: RoomRequirements = Field(default_factory=RoomRequirements)


class ProductRecommendation(_CamelModel):
    """A product the vision model suggests for the whole plan."""

    category: str = ""
    quantity: int = 1
    specifications: dict[str, Any] = {}
    priority: Priority = "medium"
    reason: str = ""


class AnalysisMetadata(_CamelModel):
    file_type: str
    processing_time: int
    confidence: float


class BlueprintAnalysis(_CamelModel):
    """Complete, sanitized analysis result for one uploaded file."""

    rooms: list[RoomData] = []
    total_square_footage: float = 0.0
    floor_count: int = 1
    recommendations: list[ProductRecommendation] = []
    extracted_text: str | None = None
    metadata: AnalysisMetadata | None = None

    def to_record(self) -> dict[str, Any]:
        """JSON-ready dict in the stored camelCase shape."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ProjectAnalysisSummary(_CamelModel):
    """Aggregate view across every completed analysis of a project."""

    total_rooms: int = 0
    total_square_footage: float = 0.0
    rooms_by_type: dict[str, int] = {}
    all_recommendations: list[ProductRecommendation] = []
