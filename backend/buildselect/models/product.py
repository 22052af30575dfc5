"""Pydantic v2 models for catalog products and questionnaires."""

from pydantic import BaseModel, field_validator


class CatalogProduct(BaseModel):
    """A product row from a supplier catalog."""

    model_config = {"from_attributes": True, "extra": "ignore"}

    id: str
    catalog_id: str | None = None
    sku: str | None = None
    name: str = ""
    brand: str | None = None

    # Classification
    category: str
    subcategory: str | None = None

    # Pricing & appearance
    price: float | None = None
    finish_options: list[str] | None = None
    specifications: dict | None = None

    # Links
    image_url: str | None = None
    purchase_url: str | None = None
    spec_sheet_url: str | None = None

    is_available: bool = True

    @field_validator("id", "catalog_id", mode="before")
    @classmethod
    def _stringify_ids(cls, v):
        return str(v) if v is not None else v


class QuestionnaireRoom(BaseModel):
    """One entry of the questionnaire's room list."""

    name: str
    type: str = "general"

    @field_validator("type", mode="before")
    @classmethod
    def _null_type_to_general(cls, v):
        return "general" if v is None else v


class Questionnaire(BaseModel):
    """User answers that drive selection generation."""

    model_config = {"extra": "ignore"}

    id: str | None = None
    project_id: str | None = None
    categories_selected: list[str] = []
    room_list: list[QuestionnaireRoom] = []
    finish_colors: list[str] = []
    preferred_brands: list[str] = []
    style: str | None = None
    energy_type: str | None = None
    completed_at: str | None = None

    @field_validator("categories_selected", "finish_colors", "preferred_brands", "room_list", mode="before")
    @classmethod
    def _null_to_empty(cls, v):
        # JSONB columns may be NULL
        return [] if v is None else v

    @field_validator("id", "project_id", mode="before")
    @classmethod
    def _stringify_ids(cls, v):
        return str(v) if v is not None else v
