"""Pipeline error kinds.

Fatal kinds (``PlanningFailed``, ``NoAssetsRendered``) end the run in the
``failed`` status. ``ItemRenderFailed`` stays on the rendered item and
``AssemblyFailed`` degrades the artifact; neither reaches the caller as an
exception.
"""


class PipelineError(Exception):
    """Base class for every error kind surfaced by the collage pipeline."""

    kind = "PipelineError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequest(PipelineError, ValueError):
    """Request rejected before any capability call (empty text, unknown style)."""

    kind = "InvalidRequest"


class PlanningFailed(PipelineError):
    kind = "PlanningFailed"


class ItemRenderFailed(PipelineError):
    """One item failed to render. Recorded on that item only."""

    kind = "ItemRenderFailed"

    def __init__(self, item_id: str, message: str):
        super().__init__(message)
        self.item_id = item_id


class NoAssetsRendered(PipelineError):
    kind = "NoAssetsRendered"


class AssemblyFailed(PipelineError):
    kind = "AssemblyFailed"


class MissingMediaError(RuntimeError):
    """The render capability answered without any image payload."""
