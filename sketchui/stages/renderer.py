"""Render stage: paints one image per planned item, all items concurrently.

Every item is dispatched at once (optionally capped by a semaphore) and the
stage returns only after every item has settled as ``completed`` or
``failed``. A failing item never cancels its siblings, and results come back
in plan order whatever order the renders finish in.
"""

import asyncio
import logging
from collections import Counter
from typing import Callable

from sketchui.capabilities import RenderCapability
from sketchui.errors import ItemRenderFailed
from sketchui.state import Plan, PlannedItem, RenderedItem, StyleProfile

logger = logging.getLogger(__name__)

ItemObserver = Callable[[RenderedItem], None]

TEXTURE_INSTRUCTION = (
    "A seamless full-page paper/wall texture. Light and subtle pattern. No text."
)
CUTOUT_INSTRUCTION = """\
ISOLATED OBJECT on PURE WHITE (#FFFFFF) background.
High contrast.
Die-cut sticker style.
Definite edges.
NO cropped edges (keep the whole object in frame)."""

RENDER_PROMPT = """\
Create a design asset: "{name}"
Type: {kind}
Style: {style}
Palette: {palette}

Instructions:
{description}
{kind_instruction}
"""


def build_render_instruction(item: PlannedItem, style: StyleProfile, plan: Plan) -> str:
    """Build the image prompt for one item from its kind, the style and the palette."""
    if item["kind"] == "background_texture":
        kind_instruction = TEXTURE_INSTRUCTION
    else:
        kind_instruction = CUTOUT_INSTRUCTION

    return RENDER_PROMPT.format(
        name=item["name"],
        kind=item["kind"],
        style=style.fragment,
        palette=", ".join(plan["designSystem"]["colorPalette"]),
        description=item["description"],
        kind_instruction=kind_instruction,
    )


def pending_items(plan: Plan) -> list[RenderedItem]:
    """Return the initial rendered-item records, all pending, in plan order."""
    return [{**item, "status": "pending"} for item in plan["items"]]


def summarize_items(items: list[RenderedItem]) -> dict[str, int]:
    """Count items by status, e.g. {"completed": 4, "failed": 2}."""
    return dict(Counter(item["status"] for item in items))


def _notify(on_item: ItemObserver | None, item: RenderedItem) -> None:
    if on_item is None:
        return
    try:
        on_item(item)
    except Exception:
        logger.exception("Item observer raised for '%s'; ignoring", item["id"])


async def render_item(
    item: PlannedItem,
    style: StyleProfile,
    plan: Plan,
    capabilities: RenderCapability,
) -> RenderedItem:
    """Render one item and return its terminal record.

    Never raises: a capability error or a response without media yields a
    ``failed`` record carrying the error message.
    """
    instruction = build_render_instruction(item, style, plan)
    try:
        media = await capabilities.render(instruction)
        if not media:
            raise ItemRenderFailed(item["id"], "No image generated.")
    except Exception as exc:
        logger.warning("Failed asset '%s' (%s): %r", item["name"], item["id"], exc)
        return {**item, "status": "failed", "error": str(exc) or type(exc).__name__}

    return {**item, "status": "completed", "media": media}


async def render_items(
    plan: Plan,
    style: StyleProfile,
    capabilities: RenderCapability,
    on_item: ItemObserver | None = None,
    max_concurrency: int | None = None,
) -> list[RenderedItem]:
    """Render every planned item concurrently and join on all of them.

    ``on_item`` is called with each item's record when it goes in progress and
    again when it settles. Returns one terminal record per planned item, in
    plan order.
    """
    slots: list[RenderedItem] = pending_items(plan)
    semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    async def _run_slot(index: int) -> None:
        planned = plan["items"][index]
        if semaphore is not None:
            await semaphore.acquire()
        try:
            slots[index] = {**slots[index], "status": "in_progress"}
            _notify(on_item, slots[index])
            slots[index] = await render_item(planned, style, plan, capabilities)
            _notify(on_item, slots[index])
        finally:
            if semaphore is not None:
                semaphore.release()

    await asyncio.gather(*(_run_slot(i) for i in range(len(slots))))

    counts = summarize_items(slots)
    logger.info(
        "Rendered %d/%d items (%d failed)",
        counts.get("completed", 0),
        len(slots),
        counts.get("failed", 0),
    )
    return slots
