"""Boundary capabilities: the three generative calls the pipeline consumes.

The core only depends on the three small protocols below. ``GeminiCapabilities``
implements them on LangChain chat models: Gemini for every call by default,
with planning and assembly optionally routed to Claude through the
``plan_provider`` / ``assemble_provider`` config keys. Rendering always uses
the Gemini image model.
"""

import json
import logging
from typing import Protocol

from langchain_anthropic import ChatAnthropic
from langchain_google_genai import ChatGoogleGenerativeAI

from sketchui.config import get_config
from sketchui.errors import MissingMediaError
from sketchui.utils.parsing import ainvoke_with_retry, message_text, strip_fences

logger = logging.getLogger(__name__)

VALID_PROVIDERS = {"google", "anthropic"}
IMAGE_GENERATION_CONFIG = {"response_modalities": ["TEXT", "IMAGE"]}


class PlanCapability(Protocol):
    async def plan(self, prompt: str) -> dict: ...


class RenderCapability(Protocol):
    async def render(self, instruction: str) -> str: ...


class AssembleCapability(Protocol):
    async def assemble(self, instruction: str) -> str: ...


def build_chat_model(provider: str, model: str, json_output: bool = False):
    """Construct the chat model for a text capability."""
    config = get_config()
    temperature = config.get("temperature", 1.0)
    timeout = config.get("request_timeout")

    if provider == "google":
        kwargs = {"model": model, "temperature": temperature, "timeout": timeout}
        if json_output:
            kwargs["response_mime_type"] = "application/json"
        return ChatGoogleGenerativeAI(**kwargs)
    if provider == "anthropic":
        return ChatAnthropic(
            model=model, temperature=temperature, timeout=timeout, max_tokens=16384
        )
    raise ValueError(f"Unknown provider '{provider}'. Must be one of: {VALID_PROVIDERS}")


def extract_media(content) -> str | None:
    """Return the first image in a chat response as a data URL, or None.

    Handles both LangChain part shapes: ``{"type": "image_url", "image_url": ...}``
    and the standard ``{"type": "image", "base64": ..., "mime_type": ...}`` block.
    """
    if isinstance(content, str):
        return None

    for part in content or []:
        if not isinstance(part, dict):
            continue
        if part.get("type") == "image_url":
            image_url = part.get("image_url")
            url = image_url.get("url") if isinstance(image_url, dict) else image_url
            if url:
                return url
        elif part.get("type") == "image":
            data = part.get("base64") or part.get("data")
            if data:
                mime_type = part.get("mime_type") or "image/png"
                return f"data:{mime_type};base64,{data}"
            if part.get("url"):
                return part["url"]
    return None


class GeminiCapabilities:
    """Capability adapter backed by LangChain chat models.

    Each call builds its own client, so one instance is safe to share across
    the concurrent render tasks of a run.
    """

    async def plan(self, prompt: str) -> dict:
        config = get_config()
        llm = build_chat_model(
            config.get("plan_provider", "google"), config["plan_model"], json_output=True
        )
        response = await ainvoke_with_retry(llm, [{"role": "user", "content": prompt}])
        content = strip_fences(message_text(response.content))
        if not content:
            raise ValueError("Planning capability returned an empty payload.")

        data = json.loads(content)
        if not isinstance(data, dict):
            raise ValueError("Planning capability did not return a JSON object.")
        return data

    async def render(self, instruction: str) -> str:
        config = get_config()
        llm = ChatGoogleGenerativeAI(
            model=config["render_model"], timeout=config.get("request_timeout")
        )
        response = await ainvoke_with_retry(
            llm,
            [{"role": "user", "content": instruction}],
            generation_config=IMAGE_GENERATION_CONFIG,
        )
        media = extract_media(response.content)
        if not media:
            raise MissingMediaError("No image generated.")
        return media

    async def assemble(self, instruction: str) -> str:
        config = get_config()
        llm = build_chat_model(
            config.get("assemble_provider", "google"), config["assemble_model"]
        )
        response = await ainvoke_with_retry(llm, [{"role": "user", "content": instruction}])
        return message_text(response.content)
