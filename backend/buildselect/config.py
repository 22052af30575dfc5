"""
Central configuration module for the BuildSelect backend.

Loads environment variables, defines the static lookup tables used by
blueprint sanitisation and selection generation, the analysis thresholds,
and the vision-model prompt template.
"""

import os
from dotenv import load_dotenv

load_dotenv()

# ---------------------------------------------------------------------------
# Environment variables
# ---------------------------------------------------------------------------
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_SERVICE_KEY = os.getenv("SUPABASE_SERVICE_KEY", "")

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

FILE_FETCH_TIMEOUT_SECONDS = float(os.getenv("FILE_FETCH_TIMEOUT_SECONDS", "60"))
MAX_BLUEPRINT_BYTES = int(os.getenv("MAX_BLUEPRINT_BYTES", str(20 * 1024 * 1024)))

# ---------------------------------------------------------------------------
# Rooms
# ---------------------------------------------------------------------------
ROOM_TYPES: tuple[str, ...] = (
    "kitchen",
    "bathroom",
    "bedroom",
    "living_room",
    "dining_room",
    "office",
    "other",
)

# Fallback square footage when the extracted area is implausibly small
DEFAULT_SQUARE_FOOTAGE: dict[str, int] = {
    "kitchen": 200,
    "bathroom": 60,
    "bedroom": 150,
    "living_room": 300,
    "dining_room": 200,
    "office": 150,
    "other": 100,
}

# ---------------------------------------------------------------------------
# Analysis thresholds (feet / square feet)
# ---------------------------------------------------------------------------
MIN_ROOM_SQFT = 10
MAX_ROOM_SQFT = 2000
SQFT_TOLERANCE = 5
MIN_TOTAL_SQFT = 100
DEFAULT_CONFIDENCE = 0.5

RECOMMENDATION_PRIORITIES: tuple[str, ...] = ("high", "medium", "low")

# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------
# file_type -> MIME type sent to the vision model
ANALYSABLE_FILE_TYPES: dict[str, str] = {
    "pdf": "application/pdf",
    "image": "image/jpeg",
}
CAD_FILE_TYPES: tuple[str, ...] = ("dwg", "dxf", "dwf")
BIM_FILE_TYPES: tuple[str, ...] = ("rvt", "ifc")

# ---------------------------------------------------------------------------
# Catalog & selections
# ---------------------------------------------------------------------------
DEFAULT_SUBCATEGORY = "general"

# Fixture count per (room type, subcategory). Rooms without an entry fall
# back to the "general" row, then to a quantity of 1.
QUANTITY_TABLE: dict[str, dict[str, int]] = {
    "kitchen": {
        "kitchen_faucet": 1,
        "kitchen_sink": 1,
        "dishwasher": 1,
        "refrigerator": 1,
        "pendant": 3,
        "ceiling": 2,
        "outlet": 6,
        "cabinet_hardware": 24,
    },
    "bathroom": {
        "bathroom_sink": 1,
        "bathroom_faucet": 1,
        "shower": 1,
        "toilet": 1,
        "pendant": 1,
        "ceiling": 1,
        "outlet": 4,
        "cabinet_hardware": 6,
    },
    "general": {
        "ceiling": 1,
        "outlet": 4,
        "thermostat": 1,
    },
}

# ---------------------------------------------------------------------------
# LLM prompt templates
# ---------------------------------------------------------------------------
BLUEPRINT_ANALYSIS_PROMPT = """\
You are an expert architectural blueprint analyst. Analyze this floor plan and extract detailed information.

{page_context}{project_context}

Return ONLY valid JSON (no markdown, no commentary) matching this schema:

{{
  "rooms": [
    {{
      "id": "unique-id",
      "name": "Room name from blueprint labels (e.g. 'Master Bedroom', 'Kitchen', 'Bath 2')",
      "type": "kitchen|bathroom|bedroom|living_room|dining_room|office|other",
      "dimensions": {{
        "length": number (feet),
        "width": number (feet),
        "height": number (feet, if visible),
        "squareFootage": number (length x width)
      }},
      "confidence": number (0-1, certainty about this room's measurements),
      "features": ["notable", "features"],
      "requirements": {{
        "electrical": ["electrical needs"],
        "plumbing": ["plumbing needs"],
        "hvac": ["HVAC needs"]
      }}
    }}
  ],
  "totalSquareFootage": number,
  "floorCount": number,
  "recommendations": [
    {{
      "category": "Product category",
      "quantity": number,
      "specifications": {{"type": "Product type", "size": "Size specification"}},
      "priority": "high|medium|low",
      "reason": "Why this is recommended"
    }}
  ]
}}

Instructions:
1. Use the scale legend or scale bar to measure rooms when dimension annotations are missing.
2. Use the blueprint's own room labels as names; otherwise name rooms by type ("Bedroom 1").
3. Convert every measurement to decimal feet.
4. Extract ALL rooms, including closets, hallways, pantries and laundry rooms.
5. Typical sizes: bedroom 100-200 sq ft, master bedroom 200-400, kitchen 150-400,
   bathroom 40-100, living room 200-500. Re-check the scale when a value falls far outside.
6. Confidence: 1.0 clearly labeled, 0.8 computed from scale, 0.6 estimated from
   proportions, 0.4 rough estimate, 0.2 very uncertain.
"""

PROJECT_CONTEXT_TEMPLATE = """

PROJECT CONTEXT:
- Project name: {project_name}
- Project type: {project_type}
- Building type: {building_type}
- Expected floors: {floor_count}

Use this context to sanity-check your analysis."""
