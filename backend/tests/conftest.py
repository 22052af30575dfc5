"""Pytest configuration and shared fixtures for BuildSelect tests."""

import os
import sys

import pytest


# ============================================================================
# Ensure `buildselect` is importable without an editable install
# ============================================================================
BACKEND_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)


# ============================================================================
# Blueprint analysis payloads
# ============================================================================

@pytest.fixture
def clean_analysis():
    """A well-formed vision-model payload that needs no repair."""
    return {
        "rooms": [
            {
                "id": "room-1",
                "name": "Kitchen",
                "type": "kitchen",
                "dimensions": {"length": 15, "width": 12, "squareFootage": 180},
                "confidence": 0.9,
                "features": ["island", "pantry"],
                "requirements": {"plumbing": ["sink supply"], "electrical": ["220V range"]},
            },
            {
                "id": "room-2",
                "name": "Master Bedroom",
                "type": "bedroom",
                "dimensions": {"length": 14, "width": 13, "height": 9, "squareFootage": 182},
                "confidence": 0.8,
                "features": ["walk-in closet"],
                "requirements": {},
            },
        ],
        "totalSquareFootage": 1450,
        "floorCount": 1,
        "recommendations": [
            {
                "category": "plumbing",
                "quantity": 2,
                "specifications": {"type": "faucet"},
                "priority": "high",
                "reason": "Kitchen and bath sinks",
            }
        ],
    }


@pytest.fixture
def messy_analysis():
    """A payload exercising most repair rules at once."""
    return {
        "rooms": [
            {"name": "Kitchen", "type": "kitchen",
             "dimensions": {"length": 12, "width": 10, "squareFootage": 15},
             "confidence": 1.4},
            {"type": "garage", "dimensions": {"length": "20", "width": "11", "squareFootage": "220"}},
            {"name": "Closet", "type": "other", "dimensions": {"length": 2, "width": 3}},
            "not-a-room",
            {"name": "Hall", "type": "Living Room", "confidence": "0.7"},
        ],
        "totalSquareFootage": 40,
        "floorCount": "two",
        "recommendations": "lots",
        "unexpected": {"extra": True},
    }


# ============================================================================
# Selection generation
# ============================================================================

@pytest.fixture
def questionnaire_row():
    return {
        "id": "q-1",
        "project_id": "proj-1",
        "categories_selected": ["plumbing", "lighting"],
        "room_list": [
            {"name": "Kitchen", "type": "kitchen"},
            {"name": "Guest Bath", "type": "bathroom"},
        ],
        "finish_colors": ["Brushed Nickel"],
        "preferred_brands": ["Moen"],
        "completed_at": "2025-01-20T10:00:00Z",
    }


@pytest.fixture
def catalog_products():
    return [
        {
            "id": "p-faucet", "catalog_id": "cat-1", "sku": "F-1", "name": "Faucet",
            "brand": "Moen", "category": "plumbing", "subcategory": "kitchen_faucet",
            "price": 250.0, "finish_options": ["Chrome", "Brushed Nickel Satin"],
            "is_available": True,
        },
        {
            "id": "p-pendant", "catalog_id": "cat-1", "sku": "L-1", "name": "Pendant",
            "brand": "Kichler", "category": "lighting", "subcategory": "pendant",
            "price": 120.0, "finish_options": ["Matte Black"], "is_available": True,
        },
        {
            "id": "p-fixture", "catalog_id": "cat-1", "sku": "L-2", "name": "Fixture",
            "brand": "Kichler", "category": "lighting", "subcategory": None,
            "price": None, "finish_options": None, "is_available": True,
        },
    ]


@pytest.fixture
def project_row():
    return {
        "id": "proj-1",
        "name": "Maple Street Remodel",
        "status": "questionnaire",
        "catalog_id": "cat-1",
    }
