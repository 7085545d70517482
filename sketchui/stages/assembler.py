"""Assembly stage: the "collage artist" that lays the rendered assets out as one page.

The assembler never sees the images. It gets a catalog of asset tokens
(``__ASSET_<id>__``) and must use them as image sources; the tokens are then
swapped for the real data URLs once the markup comes back.
"""

import logging

from sketchui.capabilities import AssembleCapability
from sketchui.errors import AssemblyFailed, NoAssetsRendered
from sketchui.state import DesignSystem, FinalArtifact, Plan, RenderedItem
from sketchui.utils.parsing import extract_markup
from sketchui.utils.tokens import asset_token, remaining_tokens, substitute_tokens

logger = logging.getLogger(__name__)

FALLBACK_DOCUMENT = "<div class='text-red-500'>Failed to assemble collage.</div>"

CATALOG_ENTRY = """\
- ID: {id}
  Type: {kind}
  Desc: {name}
  Token: {token}"""

ASSEMBLY_PROMPT = """\
You are an Award-Winning Digital Collage Artist and Frontend Developer.
User Request: "{request_text}"

GOAL: Create a single-screen, immersive, poster-style landing page.
AESTHETIC: "Ordered Chaos". Organic, overlapping, tactile.
THEME: {theme_name} ({visual_description})

ASSETS AVAILABLE (use each Token verbatim as the image src):
{catalog}

DESIGN SYSTEM:
- Background Hex: {background_hex}
- Colors: {palette}
- Fonts: {heading_font}, {body_font}

CRITICAL IMPLEMENTATION RULES (READ CAREFULLY):

1. **NO WHITE BOXES**:
   - All images provided have white backgrounds.
   - You MUST apply `mix-blend-multiply` (class="mix-blend-multiply") to ALL foreground \
images (hero, stickers, decorations).
   - This will make the white background transparent and blend the ink/paint into the \
page background.

2. **Composition & Layout**:
   - **Do NOT use a standard grid.**
   - Use `absolute` positioning for almost everything to create a collage.
   - Use `transform: rotate(...)` liberally (e.g., -2deg, 5deg) to make elements look \
like they were pasted on.
   - Use `z-index` to layer decorations behind or in front of the hero.
   - The 'background_texture' should be `absolute inset-0 object-cover -z-50 opacity-50`.

3. **UI Elements as Stickers**:
   - Buttons should look like they are drawn on the 'ui_sticker' asset.
   - If you have a 'ui_sticker' for a button, wrap the text in a div, put the image \
absolutely behind the text, and rotate the whole container slightly.

4. **Typography**:
   - Big, bold, artistic typography.
   - Text should also feel placed organically.

5. **Interaction**:
   - Add `hover:scale-105 hover:rotate-0 transition-transform duration-300` to \
interactive elements.

OUTPUT:
- Return ONLY the valid HTML string.
"""


def usable_items(items: list[RenderedItem]) -> list[RenderedItem]:
    """Return the items that finished rendering with a media reference."""
    return [item for item in items if item.get("status") == "completed" and item.get("media")]


def _build_catalog(items: list[RenderedItem]) -> str:
    return "\n".join(
        CATALOG_ENTRY.format(
            id=item["id"], kind=item["kind"], name=item["name"], token=asset_token(item["id"])
        )
        for item in items
    )


def _build_assembly_prompt(
    items: list[RenderedItem], design_system: DesignSystem, request_text: str
) -> str:
    """Construct the assembly prompt. Only ids, kinds, names and tokens are sent."""
    return ASSEMBLY_PROMPT.format(
        request_text=request_text,
        theme_name=design_system["themeName"],
        visual_description=design_system["visualDescription"],
        catalog=_build_catalog(items),
        background_hex=design_system["backgroundHex"],
        palette=", ".join(design_system["colorPalette"]),
        heading_font=design_system["fontPairing"]["heading"],
        body_font=design_system["fontPairing"]["body"],
    )


async def assemble_page(
    items: list[RenderedItem],
    plan: Plan,
    request_text: str,
    capabilities: AssembleCapability,
) -> FinalArtifact:
    """Assemble the final page from the successfully rendered items.

    Raises NoAssetsRendered, without calling the capability, when no item
    completed. A capability failure does not raise: it yields a degraded
    artifact holding the fallback document.
    """
    usable = usable_items(items)
    if not usable:
        raise NoAssetsRendered("Failed to generate any visual assets.")

    prompt = _build_assembly_prompt(usable, plan["designSystem"], request_text)
    try:
        raw = await capabilities.assemble(prompt)
    except Exception as exc:
        error = AssemblyFailed(f"Failed to assemble collage: {exc}")
        logger.error("Error assembling page: %r", exc)
        return FinalArtifact(
            document=FALLBACK_DOCUMENT,
            plan=plan,
            items=tuple(items),
            degraded=True,
            error=str(error),
        )

    document = substitute_tokens(extract_markup(raw or ""), usable)

    leftover = remaining_tokens(document, plan["items"])
    if leftover:
        logger.warning("Unsubstituted asset tokens left in page: %s", leftover)
    unused = [item["id"] for item in usable if item["media"] not in document]
    if unused:
        logger.info("Assembler did not place assets: %s", unused)

    return FinalArtifact(document=document, plan=plan, items=tuple(items))
