"""Tests for StyleProfile parsing and the FinalArtifact record."""

import dataclasses

import pytest

from sketchui.errors import InvalidRequest
from sketchui.state import FinalArtifact, StyleProfile


class TestStyleProfile:
    @pytest.mark.parametrize("raw", ["DOODLE", "doodle", " Doodle "])
    def test_parse_by_name(self, raw):
        assert StyleProfile.parse(raw) is StyleProfile.DOODLE

    def test_parse_by_label(self):
        assert StyleProfile.parse("Rough Blueprint") is StyleProfile.BLUEPRINT

    def test_parse_member_passthrough(self):
        assert StyleProfile.parse(StyleProfile.MARKER) is StyleProfile.MARKER

    def test_unknown_style_raises(self):
        with pytest.raises(InvalidRequest, match="GRAFFITI"):
            StyleProfile.parse("oil painting")

    def test_every_style_has_a_fragment(self):
        assert all(s.fragment and s.label for s in StyleProfile)
        assert StyleProfile.WATERCOLOR.fragment == "watercolor painting, distinct edges, white background"


class TestFinalArtifact:
    def test_is_immutable(self, lemonade_plan):
        artifact = FinalArtifact(document="<main></main>", plan=lemonade_plan, items=())
        with pytest.raises(dataclasses.FrozenInstanceError):
            artifact.document = "<div></div>"

    def test_defaults_to_not_degraded(self, lemonade_plan):
        artifact = FinalArtifact(document="x", plan=lemonade_plan, items=())
        assert artifact.degraded is False
        assert artifact.error is None

    def test_detached_from_source_records(self, lemonade_plan):
        item = {**lemonade_plan["items"][0], "status": "completed", "media": "data:x"}
        artifact = FinalArtifact(document="x", plan=lemonade_plan, items=[item])

        item["status"] = "failed"
        lemonade_plan["designSystem"]["colorPalette"].append("#000000")
        lemonade_plan["items"].clear()

        assert artifact.items[0]["status"] == "completed"
        assert isinstance(artifact.items, tuple)
        assert "#000000" not in artifact.plan["designSystem"]["colorPalette"]
        assert len(artifact.plan["items"]) == 6
