"""Pydantic v2 models for generated selections and quotes."""

from pydantic import BaseModel


class Selection(BaseModel):
    """One product assigned to one room, with quantity and price."""

    room_name: str
    product_id: str
    category: str
    subcategory: str
    quantity: int = 1
    finish: str | None = None
    unit_price: float = 0.0
    extended_price: float = 0.0
    sort_order: int = 0
    is_locked: bool = False

    def to_row(self, project_id: str) -> dict:
        """Row for the ``selections`` table."""
        return {
            "project_id": project_id,
            "product_id": self.product_id,
            "room_name": self.room_name,
            "quantity": self.quantity,
            "finish": self.finish,
            "unit_price": self.unit_price,
            "extended_price": self.extended_price,
            "sort_order": self.sort_order,
            "is_locked": self.is_locked,
        }


class QuoteSummary(BaseModel):
    """Totals over a project's selections."""

    item_count: int = 0
    total_quantity: int = 0
    grand_total: float = 0.0
    room_totals: dict[str, float] = {}


class GenerationResult(BaseModel):
    """Outcome of a successful regeneration."""

    project_id: str
    catalog_id: str
    status: str
    selections: list[Selection]
    summary: QuoteSummary


class GenerateSelectionsRequest(BaseModel):
    catalog_id: str | None = None
