"""Collage state: plan, rendered items and the final artifact passed through the graph."""

import copy
from dataclasses import dataclass
from enum import Enum
from typing import Literal, TypedDict

from sketchui.errors import InvalidRequest

ItemKind = Literal["background_texture", "hero_cutout", "ui_sticker", "decoration_cutout"]
ItemStatus = Literal["pending", "in_progress", "completed", "failed"]
RunStatus = Literal["idle", "planning", "rendering", "assembling", "completed", "failed"]

ITEM_KINDS = ("background_texture", "hero_cutout", "ui_sticker", "decoration_cutout")
TERMINAL_ITEM_STATUSES = {"completed", "failed"}


class StyleProfile(Enum):
    """Artistic style chosen once per run. Value is (label, render fragment)."""

    DOODLE = (
        "Hand-drawn Doodle (Black & White)",
        "black ink doodle on white paper, thick varied line weight",
    )
    GRAFFITI = (
        "Colorful Graffiti",
        "street art sticker, distinct outline, vibrant marker colors on white",
    )
    WATERCOLOR = (
        "Watercolor Sketch",
        "watercolor painting, distinct edges, white background",
    )
    MARKER = (
        "Permanent Marker",
        "permanent marker sketch, bold strokes, white background",
    )
    BLUEPRINT = (
        "Rough Blueprint",
        "blue ink technical drawing on white paper",
    )

    @property
    def label(self) -> str:
        return self.value[0]

    @property
    def fragment(self) -> str:
        return self.value[1]

    @classmethod
    def parse(cls, raw: "str | StyleProfile") -> "StyleProfile":
        """Resolve a member from its name (any case) or its display label."""
        if isinstance(raw, cls):
            return raw
        text = str(raw).strip()
        for member in cls:
            if text.upper() == member.name or text == member.label:
                return member
        names = ", ".join(m.name for m in cls)
        raise InvalidRequest(f"Unknown style '{raw}'. Must be one of: {names}")


class FontPairing(TypedDict):
    heading: str
    body: str


class DesignSystem(TypedDict):
    themeName: str
    visualDescription: str
    colorPalette: list[str]  # Ordered, non-empty.
    backgroundHex: str  # Near-white so multiply blending hides image backings.
    fontPairing: FontPairing


class PlannedItem(TypedDict):
    id: str  # Unique within the plan. Used to build the asset token.
    name: str
    description: str
    kind: ItemKind


class Plan(TypedDict):
    designSystem: DesignSystem
    items: list[PlannedItem]


class RenderedItem(PlannedItem, total=False):
    status: ItemStatus
    media: str  # Data URL. Present only when completed.
    error: str  # Present only when failed.


@dataclass(frozen=True)
class FinalArtifact:
    """Substituted document plus the plan and rendered items it was built from.

    ``degraded`` is True when the assembly capability failed and ``document``
    holds the fallback fragment instead of generated markup.
    """

    document: str
    plan: Plan
    items: tuple
    degraded: bool = False
    error: str | None = None

    def __post_init__(self):
        # Own copies: the plan and item dicts are shared with the Run and graph state.
        object.__setattr__(self, "plan", copy.deepcopy(self.plan))
        object.__setattr__(self, "items", tuple(dict(item) for item in self.items))


class CollageState(TypedDict, total=False):
    request_text: str  # Validated user request. Immutable after init.
    style: StyleProfile
    plan: Plan
    items: list[RenderedItem]  # Plan order, one per planned item.
    artifact: FinalArtifact
    error: str  # Human-readable cause of a fatal failure.
    error_kind: str
