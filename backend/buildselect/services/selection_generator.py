"""
Selection generator.

Expands a completed questionnaire and a catalog's products into a flat,
priced list of selections: one product per room x category x subcategory
bucket. The function is pure; persisting the result and moving the project
status belongs to :mod:`buildselect.services.workflow`.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable, Sequence

from buildselect.config import DEFAULT_SUBCATEGORY, QUANTITY_TABLE
from buildselect.errors import NoEligibleProductsError, QuestionnaireNotFoundError
from buildselect.models.product import CatalogProduct, Questionnaire
from buildselect.models.selection import Selection

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lookup helpers
# ---------------------------------------------------------------------------

def get_quantity_for_room(room_type: str, subcategory: str) -> int:
    """Fixture count for a room type, falling back to ``general`` then 1."""
    return (
        QUANTITY_TABLE.get(room_type, {}).get(subcategory)
        or QUANTITY_TABLE["general"].get(subcategory)
        or 1
    )


def resolve_finish(
    finish_options: Sequence[str] | None,
    preferred_finishes: Iterable[str],
) -> str | None:
    """Pick the first finish containing any preferred finish (case-insensitive).

    Falls back to the first listed option, or None when the product has no
    finish options.
    """
    if not finish_options:
        return None
    wanted = [p.lower() for p in preferred_finishes if p]
    for option in finish_options:
        if any(p in option.lower() for p in wanted):
            return option
    return finish_options[0]


def group_products(
    products: Iterable[CatalogProduct],
) -> dict[str, dict[str, list[CatalogProduct]]]:
    """Group products by category, then by subcategory (``general`` default).

    Buckets keep the order in which their first product appears.
    """
    groups: dict[str, dict[str, list[CatalogProduct]]] = {}
    for product in products:
        subcategory = product.subcategory or DEFAULT_SUBCATEGORY
        groups.setdefault(product.category, {}).setdefault(subcategory, []).append(product)
    return groups


def _coerce_products(products: Iterable[CatalogProduct | dict]) -> list[CatalogProduct]:
    return [
        p if isinstance(p, CatalogProduct) else CatalogProduct.model_validate(p)
        for p in products
    ]


# ---------------------------------------------------------------------------
# Main entry-point
# ---------------------------------------------------------------------------

def generate_selections(
    questionnaire: Questionnaire | dict | None,
    products: Iterable[CatalogProduct | dict],
    rng: random.Random | None = None,
) -> list[Selection]:
    """Build priced selections for every room/category/subcategory.

    Parameters
    ----------
    questionnaire:
        The project's latest questionnaire (model or raw row).
    products:
        Catalog products. Unavailable products and categories that were not
        selected are ignored.
    rng:
        Source of randomness for picking a product within a bucket. Pass a
        seeded ``random.Random`` for reproducible picks.

    Raises
    ------
    QuestionnaireNotFoundError
        If ``questionnaire`` is None.
    NoEligibleProductsError
        If no available product belongs to a selected category.
    """
    if questionnaire is None:
        raise QuestionnaireNotFoundError("Questionnaire not found")
    if not isinstance(questionnaire, Questionnaire):
        questionnaire = Questionnaire.model_validate(questionnaire)

    categories = list(dict.fromkeys(questionnaire.categories_selected))
    selected = set(categories)
    eligible = [
        p for p in _coerce_products(products)
        if p.is_available and p.category in selected
    ]
    if not eligible:
        raise NoEligibleProductsError(
            "No products found for selected categories",
            details={"categories": categories},
        )

    choose = (rng or random).choice
    groups = group_products(eligible)
    selections: list[Selection] = []
    sort_order = 0

    for room in questionnaire.room_list:
        for category in categories:
            for subcategory, bucket in groups.get(category, {}).items():
                product = choose(bucket)
                quantity = get_quantity_for_room(room.type, subcategory)
                unit_price = float(product.price or 0.0)

                selections.append(
                    Selection(
                        room_name=room.name,
                        product_id=product.id,
                        category=category,
                        subcategory=subcategory,
                        quantity=quantity,
                        finish=resolve_finish(
                            product.finish_options, questionnaire.finish_colors
                        ),
                        unit_price=unit_price,
                        extended_price=unit_price * quantity,
                        sort_order=sort_order,
                    )
                )
                sort_order += 1

    logger.info(
        "Generated %d selections for %d rooms across %d categories",
        len(selections), len(questionnaire.room_list), len(categories),
    )
    return selections
