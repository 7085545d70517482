"""Pre-flight check on the collage request, run before any model is called."""

from sketchui.errors import InvalidRequest


def validate_input(request_text: str) -> str:
    """Return the request with surrounding whitespace removed.

    A non-string, empty or whitespace-only request raises InvalidRequest, so
    the run never leaves ``idle``.
    """
    cleaned = request_text.strip() if isinstance(request_text, str) else ""
    if not cleaned:
        raise InvalidRequest("Request text must be a non-empty string.")
    return cleaned
