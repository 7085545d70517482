"""Shared fixtures for the SketchUI test suite."""

import asyncio
import base64
import copy
import re

import pytest
from unittest.mock import patch

_NAME_RE = re.compile(r'Create a design asset: "(.*?)"')
_TOKEN_RE = re.compile(r"__ASSET_(\w+)__")


def media_for(name: str) -> str:
    """Deterministic fake data URL for an item name."""
    return "data:image/png;base64," + base64.b64encode(name.encode()).decode()


class FakeCapabilities:
    """In-memory stand-in for the three generative capabilities.

    Renders fail for names in ``fail_names``; ``delays`` maps a name to the
    seconds its render sleeps, to scramble completion order.
    """

    def __init__(self, plan_payload, fail_names=(), delays=None,
                 assemble_error=None, extra_markup=""):
        self.plan_payload = plan_payload
        self.fail_names = set(fail_names)
        self.delays = delays or {}
        self.assemble_error = assemble_error
        self.extra_markup = extra_markup
        self.plan_calls = []
        self.render_calls = []
        self.assemble_calls = []

    async def plan(self, prompt):
        self.plan_calls.append(prompt)
        if isinstance(self.plan_payload, BaseException):
            raise self.plan_payload
        return copy.deepcopy(self.plan_payload)

    async def render(self, instruction):
        self.render_calls.append(instruction)
        name = _NAME_RE.search(instruction).group(1)
        await asyncio.sleep(self.delays.get(name, 0))
        if name in self.fail_names:
            raise RuntimeError(f"render failed for {name}")
        return media_for(name)

    async def assemble(self, instruction):
        self.assemble_calls.append(instruction)
        if self.assemble_error is not None:
            raise self.assemble_error
        ids = _TOKEN_RE.findall(instruction)
        images = "".join(f'<img class="mix-blend-multiply" src="__ASSET_{i}__">' for i in ids)
        return f"Here is your page:\n```html\n<main>{images}{self.extra_markup}</main>\n```"


@pytest.fixture
def lemonade_payload():
    """Planning capability payload for "a lemonade stand" with six assets."""
    return {
        "designSystem": {
            "themeName": "Sunny Lemon Stand",
            "visualDescription": "Organic, overlapping, hand-made paper collage.",
            "colorPalette": ["#ffd23f", "#3bceac", "#ee4266"],
            "backgroundHex": "#fffdf0",
            "fontPairing": {"heading": "Permanent Marker", "body": "Patrick Hand"},
        },
        "assets": [
            {"id": "paper_bg", "name": "Crumpled Paper", "description": "Warm paper grain.",
             "type": "background_texture"},
            {"id": "stand", "name": "Lemonade Stand", "description": "A wooden stand with a striped roof.",
             "type": "hero_cutout"},
            {"id": "buy_btn", "name": "Buy Button", "description": "A 'Buy' button on masking tape.",
             "type": "ui_sticker"},
            {"id": "menu", "name": "Menu Receipt", "description": "A nav menu on a torn receipt.",
             "type": "ui_sticker"},
            {"id": "lemon", "name": "Lemon Slice", "description": "A juicy lemon slice.",
             "type": "decoration_cutout"},
            {"id": "sun", "name": "Sun Doodle", "description": "A smiling sun doodle.",
             "type": "decoration_cutout"},
        ],
    }


@pytest.fixture
def lemonade_plan(lemonade_payload):
    """The lemonade payload normalized into a Plan."""
    from sketchui.stages.planner import _validate_plan

    return _validate_plan(copy.deepcopy(lemonade_payload))


@pytest.fixture
def base_state(lemonade_plan):
    """Minimal CollageState after planning."""
    from sketchui.state import StyleProfile

    return {
        "request_text": "a lemonade stand",
        "style": StyleProfile.DOODLE,
        "plan": lemonade_plan,
    }


@pytest.fixture
def mock_config(tmp_path):
    """Patch the config singleton with test-friendly values."""
    test_config = {
        "plan_provider": "google",
        "plan_model": "gemini-test-pro",
        "render_model": "gemini-test-image",
        "render_max_concurrency": 0,
        "assemble_provider": "google",
        "assemble_model": "gemini-test-pro",
        "temperature": 0,
        "request_timeout": 5,
        "llm_max_retries": 0,
        "default_style": "DOODLE",
        "output_dir": str(tmp_path / "output"),
        "log_level": "INFO",
    }
    with patch("sketchui.config._config", test_config):
        yield test_config
