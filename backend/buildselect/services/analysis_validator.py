"""Validation and repair of AI-extracted blueprint analyses.

The vision model returns loosely-typed JSON. ``validate`` reports every
data-quality problem it finds without touching the input; ``sanitize``
turns any JSON-shaped value into a structurally valid
:class:`BlueprintAnalysis`. Both are pure and never raise.

Repair rules applied per room by ``sanitize``:
    - missing ``id`` / ``name``      -> ``room-<n>`` / ``Room <n>``
    - length x width disagrees with squareFootage by more than the
      tolerance                      -> squareFootage recomputed (rounded)
    - squareFootage below minimum    -> default area for the room type
    - confidence missing / outside [0, 1] -> 0.5
    - unknown room type              -> ``other``
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import Any

from buildselect.config import (
    DEFAULT_CONFIDENCE,
    DEFAULT_SQUARE_FOOTAGE,
    MAX_ROOM_SQFT,
    MIN_ROOM_SQFT,
    MIN_TOTAL_SQFT,
    RECOMMENDATION_PRIORITIES,
    ROOM_TYPES,
    SQFT_TOLERANCE,
)
from buildselect.models.room import (
    AnalysisMetadata,
    BlueprintAnalysis,
    ProductRecommendation,
    RoomData,
    RoomDimensions,
    RoomRequirements,
)

logger = logging.getLogger(__name__)

_SEQUENCE_TYPES = (list, tuple)


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------

def _safe_float(value: Any, default: float | None = None) -> float | None:
    """Convert numbers and numeric strings to float; anything else -> default."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        result = float(value)
    elif isinstance(value, str):
        try:
            result = float(value.strip())
        except ValueError:
            return default
    else:
        return default
    if math.isnan(result) or math.isinf(result):
        return default
    return result


def _clean_str(value: Any) -> str | None:
    """Return a stripped, non-empty string, or None."""
    if isinstance(value, str):
        value = value.strip()
        return value or None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, _SEQUENCE_TYPES):
        return []
    return [item for item in (_clean_str(v) for v in value) if item is not None]


def _room_type(value: Any) -> str | None:
    """Exact match against the known room types, else None."""
    return value if isinstance(value, str) and value in ROOM_TYPES else None


def _room_label(room: Mapping, idx: int) -> str:
    return f"Room {idx} ({_clean_str(room.get('name')) or 'unnamed'})"


# ---------------------------------------------------------------------------
# Validation (read-only)
# ---------------------------------------------------------------------------

def validate(raw: Any) -> list[str]:
    """Return human-readable data-quality warnings for a raw analysis."""
    rooms = raw.get("rooms") if isinstance(raw, Mapping) else None
    if not isinstance(rooms, _SEQUENCE_TYPES):
        return ["rooms is not an array"]

    warnings: list[str] = []

    for idx, room in enumerate(rooms):
        if not isinstance(room, Mapping):
            warnings.append(f"Room {idx} is not an object")
            continue

        label = _room_label(room, idx)

        if not _clean_str(room.get("name")):
            warnings.append(f"Room {idx} is missing a name")

        dimensions = room.get("dimensions")
        if not isinstance(dimensions, Mapping):
            warnings.append(f"{label} is missing dimensions")
        else:
            raw_sqft = dimensions.get("squareFootage")
            sqft = _safe_float(raw_sqft)
            if sqft is None or sqft < MIN_ROOM_SQFT:
                warnings.append(f"{label} has invalid square footage: {raw_sqft}")
            elif sqft > MAX_ROOM_SQFT:
                warnings.append(
                    f"{label} seems too large: {sqft:g} sq ft - verify this is correct"
                )

            length = _safe_float(dimensions.get("length"))
            width = _safe_float(dimensions.get("width"))
            if length and width and sqft is not None:
                if abs(length * width - sqft) > SQFT_TOLERANCE:
                    warnings.append(
                        f"{label} has mismatched dimensions: "
                        f"{length:g} x {width:g} != {sqft:g}"
                    )

        if room.get("confidence") is not None:
            confidence = _safe_float(room.get("confidence"))
            if confidence is None or not 0.0 <= confidence <= 1.0:
                warnings.append(
                    f"{label} has invalid confidence score: {room.get('confidence')}"
                )

        if _room_type(room.get("type")) is None:
            warnings.append(f"{label} has invalid type: {room.get('type')}")

    total = _safe_float(raw.get("totalSquareFootage"), 0.0)
    if rooms and total < MIN_TOTAL_SQFT:
        warnings.append(f"Total square footage seems too low: {total:g} sq ft")

    return warnings


# ---------------------------------------------------------------------------
# Sanitisation (repair)
# ---------------------------------------------------------------------------

def get_default_square_footage(room_type: str) -> int:
    return DEFAULT_SQUARE_FOOTAGE.get(room_type, DEFAULT_SQUARE_FOOTAGE["other"])


def _sanitize_dimensions(raw_dims: Any, room_type: str) -> RoomDimensions:
    if not isinstance(raw_dims, Mapping):
        length = width = sqft = 0.0
        height = None
    else:
        length = max(0.0, _safe_float(raw_dims.get("length"), 0.0))
        width = max(0.0, _safe_float(raw_dims.get("width"), 0.0))
        height = _safe_float(raw_dims.get("height"))
        if height is not None and height <= 0:
            height = None
        sqft = _safe_float(raw_dims.get("squareFootage"), 0.0)

        calculated = length * width
        if length > 0 and width > 0 and math.isfinite(calculated):
            if abs(calculated - sqft) > SQFT_TOLERANCE:
                logger.debug(
                    "Recomputing square footage %s -> %s from %s x %s",
                    sqft, calculated, length, width,
                )
                sqft = float(round(calculated))

    if sqft < MIN_ROOM_SQFT:
        sqft = float(get_default_square_footage(room_type))

    return RoomDimensions(length=length, width=width, height=height, square_footage=sqft)


def _sanitize_requirements(raw_reqs: Any) -> RoomRequirements:
    if not isinstance(raw_reqs, Mapping):
        return RoomRequirements()
    cleaned = {}
    for key in ("electrical", "plumbing", "hvac"):
        if isinstance(raw_reqs.get(key), _SEQUENCE_TYPES):
            cleaned[key] = _string_list(raw_reqs[key])
    return RoomRequirements(**cleaned)


def _sanitize_room(raw_room: Mapping, idx: int) -> RoomData:
    room_type = _room_type(raw_room.get("type")) or "other"

    confidence = _safe_float(raw_room.get("confidence"))
    if confidence is None or not 0.0 <= confidence <= 1.0:
        confidence = DEFAULT_CONFIDENCE

    return RoomData(
        id=_clean_str(raw_room.get("id")) or f"room-{idx + 1}",
        name=_clean_str(raw_room.get("name")) or f"Room {idx + 1}",
        type=room_type,
        dimensions=_sanitize_dimensions(raw_room.get("dimensions"), room_type),
        confidence=confidence,
        features=_string_list(raw_room.get("features")),
        requirements=_sanitize_requirements(raw_room.get("requirements")),
    )


def _sanitize_recommendation(raw_rec: Mapping) -> ProductRecommendation:
    quantity = _safe_float(raw_rec.get("quantity"))
    priority = raw_rec.get("priority")
    priority = priority.strip().lower() if isinstance(priority, str) else None
    specifications = raw_rec.get("specifications")

    return ProductRecommendation(
        category=_clean_str(raw_rec.get("category")) or "",
        quantity=int(quantity) if quantity is not None and quantity >= 1 else 1,
        specifications=dict(specifications) if isinstance(specifications, Mapping) else {},
        priority=priority if priority in RECOMMENDATION_PRIORITIES else "medium",
        reason=_clean_str(raw_rec.get("reason")) or "",
    )


def _sanitize_metadata(raw_meta: Any) -> AnalysisMetadata | None:
    if not isinstance(raw_meta, Mapping):
        return None
    file_type = _clean_str(raw_meta.get("fileType"))
    if file_type is None:
        return None
    processing_time = _safe_float(raw_meta.get("processingTime"), 0.0)
    confidence = _safe_float(raw_meta.get("confidence"), 0.0)
    return AnalysisMetadata(
        file_type=file_type,
        processing_time=max(0, int(processing_time)),
        confidence=min(1.0, max(0.0, confidence)),
    )


def sanitize(raw: Any) -> BlueprintAnalysis:
    """Repair a raw analysis into a valid :class:`BlueprintAnalysis`.

    Deterministic, total, and idempotent: ``sanitize(sanitize(x))`` equals
    ``sanitize(x)``. The input is never mutated.
    """
    if isinstance(raw, BlueprintAnalysis):
        raw = raw.model_dump(by_alias=True)
    if not isinstance(raw, Mapping):
        raw = {}

    raw_rooms = raw.get("rooms")
    if not isinstance(raw_rooms, _SEQUENCE_TYPES):
        raw_rooms = []

    rooms = [
        _sanitize_room(raw_room, idx)
        for idx, raw_room in enumerate(raw_rooms)
        if isinstance(raw_room, Mapping)
    ]
    if len(rooms) != len(raw_rooms):
        logger.debug("Dropped %d non-object room entries", len(raw_rooms) - len(rooms))

    raw_recs = raw.get("recommendations")
    if not isinstance(raw_recs, _SEQUENCE_TYPES):
        raw_recs = []
    recommendations = [
        _sanitize_recommendation(rec) for rec in raw_recs if isinstance(rec, Mapping)
    ]

    floor_count = _safe_float(raw.get("floorCount"))
    extracted_text = raw.get("extractedText")

    return BlueprintAnalysis(
        rooms=rooms,
        total_square_footage=max(0.0, _safe_float(raw.get("totalSquareFootage"), 0.0)),
        floor_count=int(floor_count) if floor_count is not None and floor_count >= 1 else 1,
        recommendations=recommendations,
        extracted_text=extracted_text if isinstance(extracted_text, str) else None,
        metadata=_sanitize_metadata(raw.get("metadata")),
    )


def average_confidence(analysis: BlueprintAnalysis) -> float:
    """Mean room confidence, or 0 when no rooms were found."""
    if not analysis.rooms:
        return 0.0
    return round(sum(r.confidence for r in analysis.rooms) / len(analysis.rooms), 3)
