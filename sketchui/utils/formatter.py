"""Output Formatter: writes the final collage document to an HTML file."""

import re
from pathlib import Path

from sketchui.config import get_config, project_root
from sketchui.state import FinalArtifact

# Anything but word characters and hyphens, including path separators and dots.
_UNSAFE_RE = re.compile(r"[^\w\-]+")


def artifact_filename(artifact: FinalArtifact) -> str:
    """Derive ``<Theme_Name>_Site.html`` from the plan's theme name.

    Runs of whitespace and filesystem-unsafe characters collapse to a single
    underscore, so a generated theme can never name a subdirectory.
    """
    theme = artifact.plan["designSystem"].get("themeName", "")
    stem = _UNSAFE_RE.sub("_", theme).strip("_") or "Collage"
    return f"{stem}_Site.html"


def write_artifact(artifact: FinalArtifact, output_dir: Path | None = None) -> Path:
    """Write the artifact's document to the configured output directory.

    Never overwrites: a ``(2)``, ``(3)``... suffix is added when the file
    already exists. Returns the Path to the written file.
    """
    if output_dir is None:
        output_dir = project_root() / get_config().get("output_dir", "./output")
    output_dir.mkdir(parents=True, exist_ok=True)

    filename = artifact_filename(artifact)
    stem = filename[: -len(".html")]

    # Find a non-conflicting filename
    output_path = output_dir / filename
    counter = 1
    while output_path.exists():
        counter += 1
        output_path = output_dir / f"{stem} ({counter}).html"

    output_path.write_text(artifact.document, encoding="utf-8")
    return output_path
