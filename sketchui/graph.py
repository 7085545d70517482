"""LangGraph StateGraph definition for the plan -> render -> assemble pipeline.

The graph's nodes are the pipeline driver: they are the only code that moves
the ``Run`` status. The stage modules they call never touch it. The ``Run``
and the capabilities travel in ``config["configurable"]`` so one compiled
graph serves any number of independent runs.
"""

import logging

from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, StateGraph

from sketchui.capabilities import GeminiCapabilities
from sketchui.config import get_config
from sketchui.errors import NoAssetsRendered, PipelineError, PlanningFailed
from sketchui.run import Run
from sketchui.stages.assembler import assemble_page, usable_items
from sketchui.stages.planner import plan_request
from sketchui.stages.renderer import pending_items, render_items
from sketchui.state import CollageState, FinalArtifact, StyleProfile
from sketchui.utils.validator import validate_input

logger = logging.getLogger(__name__)

_FATAL_ERRORS = {
    PlanningFailed.kind: PlanningFailed,
    NoAssetsRendered.kind: NoAssetsRendered,
}


def _run_of(config: RunnableConfig) -> Run:
    return config["configurable"]["run"]


def _capabilities_of(config: RunnableConfig):
    return config["configurable"]["capabilities"]


async def _plan_node(state: CollageState, config: RunnableConfig) -> dict:
    """Plan the collage. A PlanningFailed is recorded in state for routing."""
    run = _run_of(config)
    run.advance("planning")
    try:
        plan = await plan_request(state["request_text"], _capabilities_of(config))
    except PlanningFailed as exc:
        return {"error": exc.message, "error_kind": exc.kind}

    run.plan = plan
    return {"plan": plan}


async def _render_node(state: CollageState, config: RunnableConfig) -> dict:
    """Fan out one render per planned item and wait for all of them."""
    run = _run_of(config)
    run.advance("rendering")
    for item in pending_items(state["plan"]):
        run.track_item(item)

    max_concurrency = get_config().get("render_max_concurrency") or None
    items = await render_items(
        state["plan"],
        state["style"],
        _capabilities_of(config),
        on_item=run.track_item,
        max_concurrency=max_concurrency,
    )

    if not usable_items(items):
        error = NoAssetsRendered("Failed to generate any visual assets.")
        return {"items": items, "error": error.message, "error_kind": error.kind}
    return {"items": items}


async def _assemble_node(state: CollageState, config: RunnableConfig) -> dict:
    """Assemble the page from the rendered items."""
    run = _run_of(config)
    run.advance("assembling")
    try:
        artifact = await assemble_page(
            state["items"], state["plan"], state["request_text"], _capabilities_of(config)
        )
    except NoAssetsRendered as exc:
        return {"error": exc.message, "error_kind": exc.kind}
    return {"artifact": artifact}


def _complete_node(state: CollageState, config: RunnableConfig) -> dict:
    """Publish the artifact and end the run as completed."""
    run = _run_of(config)
    run.artifact = state["artifact"]
    run.advance("completed")
    return {}


def _fail_node(state: CollageState, config: RunnableConfig) -> dict:
    """End the run as failed with the recorded cause."""
    _run_of(config).fail(state["error"], state["error_kind"])
    return {}


def _route_after_plan(state: CollageState) -> str:
    """Conditional edge: render the plan unless planning failed."""
    return "failed" if state.get("error") else "render"


def _route_after_render(state: CollageState) -> str:
    """Conditional edge: assemble only when at least one item rendered."""
    return "failed" if state.get("error") else "assemble"


def _route_after_assemble(state: CollageState) -> str:
    """Conditional edge: a degraded artifact still completes the run."""
    return "failed" if state.get("error") else "complete"


# --- Build the graph ---

workflow = StateGraph(CollageState)

# Node names must not collide with state keys ("plan", "items", ...).
workflow.add_node("planner", _plan_node)
workflow.add_node("renderer", _render_node)
workflow.add_node("assembler", _assemble_node)
workflow.add_node("complete", _complete_node)
workflow.add_node("fail", _fail_node)

workflow.set_entry_point("planner")

workflow.add_conditional_edges(
    "planner", _route_after_plan, {"render": "renderer", "failed": "fail"}
)
workflow.add_conditional_edges(
    "renderer", _route_after_render, {"assemble": "assembler", "failed": "fail"}
)
workflow.add_conditional_edges(
    "assembler", _route_after_assemble, {"complete": "complete", "failed": "fail"}
)

workflow.add_edge("complete", END)
workflow.add_edge("fail", END)

graph = workflow.compile()


async def run_pipeline(
    request_text: str,
    style: StyleProfile | str,
    capabilities=None,
    run: Run | None = None,
) -> FinalArtifact:
    """Run the full pipeline on one request and return the final artifact.

    Args:
        request_text: The user's natural-language request.
        style: A StyleProfile, or its name / display label.
        capabilities: Object with async ``plan``, ``render`` and ``assemble``
            methods. Defaults to GeminiCapabilities.
        run: Run context to report progress on. Must be idle.

    Raises InvalidRequest before any state change for empty text or an
    unknown style, and PlanningFailed / NoAssetsRendered after the run has
    ended in ``failed``.
    """
    validated = validate_input(request_text)
    style = StyleProfile.parse(style)

    run = run if run is not None else Run()
    if run.status != "idle":
        raise RuntimeError(f"Run is {run.status}; call reset() before starting another.")
    capabilities = capabilities if capabilities is not None else GeminiCapabilities()

    config = {"configurable": {"run": run, "capabilities": capabilities}}
    try:
        final_state = await graph.ainvoke(
            {"request_text": validated, "style": style}, config=config
        )
    except Exception as exc:
        if run.in_flight:
            kind = exc.kind if isinstance(exc, PipelineError) else type(exc).__name__
            run.fail(str(exc), kind)
        raise

    if run.status == "failed":
        raise _FATAL_ERRORS.get(run.error_kind, PipelineError)(run.error)
    return final_state["artifact"]
