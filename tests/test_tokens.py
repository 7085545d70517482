"""Tests for sketchui.utils.tokens: asset_token, substitute_tokens, remaining_tokens."""

from sketchui.utils.tokens import asset_token, remaining_tokens, substitute_tokens


def _item(item_id, media=None, status="completed"):
    item = {"id": item_id, "name": item_id, "description": "", "kind": "hero_cutout", "status": status}
    if media:
        item["media"] = media
    return item


class TestAssetToken:
    def test_token_format(self):
        assert asset_token("hero_1") == "__ASSET_hero_1__"


class TestSubstituteTokens:
    def test_replaces_every_occurrence(self):
        markup = '<img src="__ASSET_a__"><div style="background:url(__ASSET_a__)"></div>'
        result = substitute_tokens(markup, [_item("a", "data:image/png;base64,AAA")])
        assert result.count("data:image/png;base64,AAA") == 2
        assert "__ASSET_a__" not in result

    def test_unmatched_tokens_left_untouched(self):
        markup = '<img src="__ASSET_a__"><img src="__ASSET_ghost__">'
        result = substitute_tokens(markup, [_item("a", "data:x")])
        assert "__ASSET_ghost__" in result
        assert "__ASSET_a__" not in result

    def test_items_without_media_are_skipped(self):
        markup = '<img src="__ASSET_b__">'
        result = substitute_tokens(markup, [_item("b", status="failed")])
        assert result == markup

    def test_exact_string_match_only(self):
        markup = "__ASSET_ab__ __ASSET_a__"
        result = substitute_tokens(markup, [_item("a", "X")])
        assert result == "__ASSET_ab__ X"

    def test_order_independent(self):
        items = [_item("a", "A-media"), _item("b", "B-media")]
        markup = "__ASSET_b__|__ASSET_a__|__ASSET_b__"
        assert substitute_tokens(markup, items) == substitute_tokens(markup, list(reversed(items)))

    def test_prefix_overlapping_ids_order_independent(self):
        items = [_item("a", "A"), _item("a_", "B")]
        markup = '<img src="__ASSET_a___"><img src="__ASSET_a__">'

        forward = substitute_tokens(markup, items)
        backward = substitute_tokens(markup, list(reversed(items)))

        assert forward == backward == '<img src="B"><img src="A">'

    def test_media_with_backslashes_inserted_literally(self):
        result = substitute_tokens("__ASSET_a__", [_item("a", r"data:x\1\g<0>")])
        assert result == r"data:x\1\g<0>"

    def test_idempotent(self):
        items = [_item("a", "data:A"), _item("b", "data:B")]
        once = substitute_tokens("__ASSET_a__ __ASSET_b__ __ASSET_c__", items)
        assert substitute_tokens(once, items) == once


class TestRemainingTokens:
    def test_lists_ids_still_present(self):
        items = [_item("a"), _item("b"), _item("c")]
        assert remaining_tokens("x __ASSET_b__ y", items) == ["b"]

    def test_empty_when_all_substituted(self):
        assert remaining_tokens("<div></div>", [_item("a")]) == []
