"""Asset placeholder tokens and their substitution into assembled markup."""

import re
from typing import Iterable

from sketchui.state import RenderedItem


def asset_token(item_id: str) -> str:
    """Return the literal placeholder the assembler must emit for an item."""
    return f"__ASSET_{item_id}__"


def substitute_tokens(markup: str, items: Iterable[RenderedItem]) -> str:
    """Replace every occurrence of each item's token with its media reference.

    Exact-string and global, done in one pass so the result does not depend on
    item order even when one token is a prefix of another (``a`` / ``a_``).
    Items without media are skipped, and tokens that match no item are left
    in place.
    """
    media_by_token = {
        asset_token(item["id"]): item["media"] for item in items if item.get("media")
    }
    if not media_by_token:
        return markup

    # Longest first so "__ASSET_a___" wins over its prefix "__ASSET_a__".
    tokens = sorted(media_by_token, key=len, reverse=True)
    pattern = re.compile("|".join(map(re.escape, tokens)))
    return pattern.sub(lambda m: media_by_token[m.group(0)], markup)


def remaining_tokens(markup: str, items: Iterable[RenderedItem]) -> list[str]:
    """Return the ids whose token still appears in ``markup``."""
    return [item["id"] for item in items if asset_token(item["id"]) in markup]
