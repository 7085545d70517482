"""Entry point: validates input, runs the graph, writes the collage page."""

import argparse
import asyncio
import logging
import sys

from sketchui.config import get_config
from sketchui.errors import PipelineError
from sketchui.graph import run_pipeline
from sketchui.run import Run
from sketchui.stages.renderer import summarize_items
from sketchui.state import FinalArtifact, RenderedItem, StyleProfile
from sketchui.utils.formatter import write_artifact

_STATUS_LINES = {
    "planning": "Planning the collage...",
    "rendering": "Painting the assets...",
    "assembling": "Assembling the page...",
}


def _print_status(status: str) -> None:
    line = _STATUS_LINES.get(status)
    if line:
        print(f"[SketchUI] {line}")


def _print_item(item: RenderedItem) -> None:
    if item["status"] == "failed":
        print(f"[SketchUI]   x {item['name']} ({item['kind']}): {item.get('error', '')}")
    elif item["status"] == "completed":
        print(f"[SketchUI]   + {item['name']} ({item['kind']})")


def run(request_text: str, style: StyleProfile | str | None = None, export: bool = True) -> FinalArtifact:
    """Run the full pipeline on a request string and report progress in the terminal.

    Args:
        request_text: The user's request, e.g. "a lemonade stand run by robots".
        style: Style name or label. None uses the config default.
        export: Write the document to the output directory on success.
    """
    config = get_config()
    style = style if style is not None else config.get("default_style", "DOODLE")

    tracker = Run(on_status=_print_status, on_item=_print_item)
    artifact = asyncio.run(run_pipeline(request_text, style, run=tracker))

    counts = summarize_items(list(artifact.items))
    print(
        f"[SketchUI] Assets: {counts.get('completed', 0)} rendered, "
        f"{counts.get('failed', 0)} failed"
    )
    if artifact.degraded:
        print(f"[SketchUI] Warning: {artifact.error}", file=sys.stderr)

    print(f"[SketchUI] Status: {tracker.status}")
    if export:
        output_path = write_artifact(artifact)
        print(f"[SketchUI] Output written to: {output_path}")
    return artifact


def main() -> None:
    """CLI entry point: accepts the request as arguments or from stdin."""
    parser = argparse.ArgumentParser(
        prog="sketchui", description="Turn a request into a hand-made collage web page."
    )
    parser.add_argument("request", nargs="*", help="What the page should be about.")
    parser.add_argument(
        "--style",
        default=None,
        help=f"Art style: {', '.join(s.name for s in StyleProfile)}.",
    )
    parser.add_argument("--no-export", action="store_true", help="Do not write the HTML file.")
    args = parser.parse_args()

    logging.basicConfig(
        level=get_config().get("log_level", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.request:
        request_text = " ".join(args.request)
    else:
        print("Describe your page (Ctrl+D / Ctrl+Z to submit):")
        request_text = sys.stdin.read()

    try:
        run(request_text, style=args.style, export=not args.no_export)
    except PipelineError as exc:
        print(f"[SketchUI] {exc.kind}: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
