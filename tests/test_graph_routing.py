"""Tests for graph routing: _route_after_plan, _route_after_render, _route_after_assemble."""

from sketchui.graph import _route_after_assemble, _route_after_plan, _route_after_render


class TestRouteAfterPlan:
    def test_plan_ok_routes_to_render(self, base_state):
        assert _route_after_plan(base_state) == "render"

    def test_planning_error_routes_to_failed(self, base_state):
        base_state["error"] = "Failed to plan the collage."
        assert _route_after_plan(base_state) == "failed"


class TestRouteAfterRender:
    def test_items_ok_routes_to_assemble(self, base_state):
        base_state["items"] = [{"id": "a", "status": "completed", "media": "data:x"}]
        assert _route_after_render(base_state) == "assemble"

    def test_no_assets_routes_to_failed(self, base_state):
        base_state["items"] = [{"id": "a", "status": "failed"}]
        base_state["error"] = "Failed to generate any visual assets."
        base_state["error_kind"] = "NoAssetsRendered"
        assert _route_after_render(base_state) == "failed"


class TestRouteAfterAssemble:
    def test_artifact_routes_to_complete(self, base_state):
        base_state["artifact"] = object()
        assert _route_after_assemble(base_state) == "complete"

    def test_error_routes_to_failed(self, base_state):
        base_state["error"] = "Failed to generate any visual assets."
        assert _route_after_assemble(base_state) == "failed"
