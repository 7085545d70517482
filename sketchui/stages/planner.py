"""Plan stage: turns the request into a design system plus the collage items to paint.

The planning capability answers with JSON of this shape:
{
  "designSystem": {
    "themeName": str, "visualDescription": str, "colorPalette": [str],
    "backgroundHex": str, "fontPairing": {"heading": str, "body": str}
  },
  "assets": [{"id": str, "name": str, "description": str, "type": kind}]
}
which is validated and normalized into a ``Plan`` (``assets`` -> ``items``,
``type`` -> ``kind``).
"""

import json
import logging

from sketchui.capabilities import PlanCapability
from sketchui.errors import PlanningFailed
from sketchui.state import ITEM_KINDS, Plan

logger = logging.getLogger(__name__)

REQUIRED_DESIGN_FIELDS = ("themeName", "visualDescription", "colorPalette", "backgroundHex", "fontPairing")
REQUIRED_ITEM_FIELDS = ("id", "name", "description", "type")

# Map common LLM kind deviations to valid kinds
_KIND_ALIASES = {
    "background": "background_texture",
    "texture": "background_texture",
    "backgroundtexture": "background_texture",
    "hero": "hero_cutout",
    "herocutout": "hero_cutout",
    "centerpiece": "hero_cutout",
    "sticker": "ui_sticker",
    "uisticker": "ui_sticker",
    "button": "ui_sticker",
    "ui": "ui_sticker",
    "decoration": "decoration_cutout",
    "decorationcutout": "decoration_cutout",
    "doodle": "decoration_cutout",
}

PLAN_PROMPT = """\
You are an Avant-Garde Web Designer.
User Request: "{request_text}"

GOAL: Plan a "One-Page Poster" style website.
DO NOT plan a standard scrollable website with blocks.
Plan a chaotic, artistic, organic COLLAGE that fits on a single screen, \
with elements overlapping each other instead of sitting in a grid.

1. Design System:
   - Theme Name.
   - Visual Description: Emphasize "organic", "overlapping", "hand-made".
   - Color Palette: 3-5 vivid colors.
   - Background: Must be a very light paper-like color (e.g. #fdfbf7, #fffdf0) \
so we can use blending modes effectively.
   - Font Pairing: a heading font and a body font.

2. Visual Assets (Generate 5-7 items, using every type at least once):
   - **background_texture**: A full-screen subtle texture (paper, wall, noise).
   - **hero_cutout**: The main visual centerpiece (e.g. a giant character, a machine, a building).
   - **ui_sticker**: Functional elements treated as "stickers" (e.g., a "Start" button drawn \
on a piece of tape, a nav menu on a torn receipt).
   - **decoration_cutout**: Floating elements to add depth (e.g., stars, doodles, arrows, coffee stains).

Ensure variety in shapes (tall, wide, circular, irregular).
Every asset id must be unique, short, and made of letters, digits or underscores.

Respond ONLY with a JSON object matching this schema. No markdown fences, no commentary.
{{
  "designSystem": {{
    "themeName": "string",
    "visualDescription": "string",
    "colorPalette": ["#rrggbb"],
    "backgroundHex": "#rrggbb",
    "fontPairing": {{"heading": "string", "body": "string"}}
  }},
  "assets": [
    {{
      "id": "string",
      "name": "string",
      "description": "string",
      "type": "background_texture | hero_cutout | ui_sticker | decoration_cutout"
    }}
  ]
}}
"""


def _build_plan_prompt(request_text: str) -> str:
    """Construct the planning prompt from the validated request."""
    return PLAN_PROMPT.format(request_text=request_text)


def _normalize_kind(raw, index: int) -> str:
    kind = str(raw).strip()
    if kind in ITEM_KINDS:
        return kind
    normalized = _KIND_ALIASES.get(kind.lower().replace("_", "").replace("-", "").replace(" ", ""))
    if normalized:
        return normalized
    raise ValueError(f"Asset {index} has invalid type '{raw}'. Must be one of: {ITEM_KINDS}")


def _require_text(container: dict, key: str, where: str) -> str:
    value = container.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{where} missing required field '{key}'.")
    return value.strip()


def _validate_plan(data: dict) -> Plan:
    """Validate the planning payload and normalize it into a Plan.

    Raises ValueError on any missing or empty required field, unknown item
    kind, or duplicate item id.
    """
    if not isinstance(data, dict):
        raise ValueError("Plan payload must be a JSON object.")

    design = data.get("designSystem")
    if not isinstance(design, dict):
        raise ValueError("Plan missing 'designSystem' field.")
    missing = [f for f in REQUIRED_DESIGN_FIELDS if f not in design]
    if missing:
        raise ValueError(f"designSystem missing required fields: {missing}")

    palette = design["colorPalette"]
    if not isinstance(palette, list) or not palette:
        raise ValueError("designSystem.colorPalette must be a non-empty list.")
    if not all(isinstance(c, str) and c.strip() for c in palette):
        raise ValueError("designSystem.colorPalette entries must be non-empty strings.")

    fonts = design["fontPairing"]
    if not isinstance(fonts, dict):
        raise ValueError("designSystem.fontPairing must be an object.")

    design_system = {
        "themeName": _require_text(design, "themeName", "designSystem"),
        "visualDescription": _require_text(design, "visualDescription", "designSystem"),
        "colorPalette": [c.strip() for c in palette],
        "backgroundHex": _require_text(design, "backgroundHex", "designSystem"),
        "fontPairing": {
            "heading": _require_text(fonts, "heading", "designSystem.fontPairing"),
            "body": _require_text(fonts, "body", "designSystem.fontPairing"),
        },
    }

    raw_items = data.get("assets", data.get("items"))
    if not isinstance(raw_items, list) or not raw_items:
        raise ValueError("Plan must contain a non-empty 'assets' list.")

    items = []
    seen_ids = set()
    for i, raw in enumerate(raw_items):
        if not isinstance(raw, dict):
            raise ValueError(f"Asset {i} must be an object.")
        if "type" not in raw and "kind" in raw:
            raw = {**raw, "type": raw["kind"]}
        missing = [f for f in REQUIRED_ITEM_FIELDS if f not in raw]
        if missing:
            raise ValueError(f"Asset {i} missing required fields: {missing}")

        item_id = str(raw["id"]).strip()
        if not item_id:
            raise ValueError(f"Asset {i} has an empty id.")
        if item_id in seen_ids:
            raise ValueError(f"Duplicate asset id '{item_id}'.")
        seen_ids.add(item_id)

        items.append({
            "id": item_id,
            "name": _require_text(raw, "name", f"Asset {i}"),
            "description": _require_text(raw, "description", f"Asset {i}"),
            "kind": _normalize_kind(raw["type"], i),
        })

    return {"designSystem": design_system, "items": items}


async def plan_request(request_text: str, capabilities: PlanCapability) -> Plan:
    """Plan the collage for a validated request.

    Any capability error or schema violation becomes PlanningFailed; a partial
    plan is never returned.
    """
    prompt = _build_plan_prompt(request_text)
    try:
        data = await capabilities.plan(prompt)
    except (json.JSONDecodeError, ValueError) as exc:
        logger.error("Planning capability returned a malformed payload: %s", exc)
        raise PlanningFailed(f"Failed to plan the collage: {exc}") from exc
    except Exception as exc:
        logger.error("Planning capability failed: %r", exc)
        raise PlanningFailed("Failed to plan the collage.") from exc

    try:
        plan = _validate_plan(data)
    except ValueError as exc:
        logger.error("Plan failed validation: %s", exc)
        raise PlanningFailed(f"Failed to plan the collage: {exc}") from exc

    logger.info(
        "Planned '%s' with %d items", plan["designSystem"]["themeName"], len(plan["items"])
    )
    return plan
