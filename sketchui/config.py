"""Model, concurrency and output settings for SketchUI, loaded from config.yaml.

Provider keys (GOOGLE_API_KEY, ANTHROPIC_API_KEY) come from the environment,
optionally seeded from a ``.env`` file at the repo root.
"""

from pathlib import Path

import yaml
from dotenv import load_dotenv

_PACKAGE_DIR = Path(__file__).resolve().parent
_REPO_ROOT = _PACKAGE_DIR.parent

load_dotenv(_REPO_ROOT / ".env")

CONFIG_PATH = _PACKAGE_DIR / "config.yaml"

# Tests swap this dict out with patch("sketchui.config._config", ...).
_config = yaml.safe_load(CONFIG_PATH.read_text(encoding="utf-8"))


def get_config() -> dict:
    """Return the settings dict (plan/render/assemble models, retries, output_dir)."""
    return _config


def project_root() -> Path:
    """Directory that a relative ``output_dir`` is resolved against."""
    return _REPO_ROOT
