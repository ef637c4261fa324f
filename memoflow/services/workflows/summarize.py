from __future__ import annotations

from functools import partial
from textwrap import dedent
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from ...config import get_settings
from ...logging_config import logger
from ..inference import generate
from .page_text import PageTextExtractor

Generate = Callable[[str], Awaitable[str]]

_SYSTEM_PROMPT = dedent(
    """
    You summarize web pages for a busy reader. Write a short title line, then three to six
    bullet points covering the main claims, figures and conclusions of the page. Use only
    information present in the supplied text and say so when the text looks truncated.
    """
).strip()

_TEXT_TYPES = ("text/plain", "text/markdown", "application/json", "application/xml", "text/xml")


class SummarizeError(RuntimeError):
    """Raised when a page cannot be fetched or summarized."""


def build_summary_prompt(url: str, text: str, *, truncated: bool) -> str:
    note = "\n(The page text was truncated.)" if truncated else ""
    return f"Summarize the page at {url}.{note}\n\nPage text:\n{text}"


class SummarizeWorkflow:
    """Fetch a URL, extract its readable text and summarize it with the model."""

    name = "summarize"

    def __init__(
        self,
        *,
        generate_fn: Optional[Generate] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        fetch_timeout: Optional[float] = None,
        max_input_chars: Optional[int] = None,
    ) -> None:
        settings = get_settings()
        self._generate = generate_fn or partial(
            generate, model=settings.summarizer_model, system=_SYSTEM_PROMPT
        )
        self._http_client = http_client
        self._fetch_timeout = fetch_timeout or settings.fetch_timeout_seconds
        self._max_input_chars = max_input_chars or settings.summary_max_input_chars
        self._extractor = PageTextExtractor()

    async def run(self, params: Dict[str, Any]) -> Dict[str, Any]:
        url = str(params.get("url") or "").strip()
        if not url:
            raise SummarizeError("url parameter is required")
        if not url.lower().startswith(("http://", "https://")):
            raise SummarizeError(f"unsupported url scheme: {url}")

        text = await self._fetch_text(url)
        if not text:
            raise SummarizeError(f"no readable text found at {url}")

        truncated = len(text) > self._max_input_chars
        prompt = build_summary_prompt(url, text[: self._max_input_chars], truncated=truncated)
        summary = await self._generate(prompt)

        logger.info(
            "page summarized",
            extra={"url": url, "characters": len(text), "truncated": truncated},
        )
        return {"url": url, "summary": summary, "characters": len(text)}

    async def _fetch_text(self, url: str) -> str:
        if self._http_client is not None:
            response = await self._get(self._http_client, url)
        else:
            async with httpx.AsyncClient(follow_redirects=True) as client:
                response = await self._get(client, url)

        content_type = response.headers.get("content-type", "").split(";")[0].strip().lower()
        if content_type in ("", "text/html", "application/xhtml+xml"):
            return self._extractor.extract(response.text)
        if content_type.startswith(_TEXT_TYPES):
            return self._extractor.post_process_text(response.text)
        raise SummarizeError(f"unsupported content type {content_type!r} at {url}")

    async def _get(self, client: httpx.AsyncClient, url: str) -> httpx.Response:
        try:
            response = await client.get(url, timeout=self._fetch_timeout)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise SummarizeError(f"fetch failed ({exc.response.status_code}) for {url}") from exc
        except httpx.HTTPError as exc:
            raise SummarizeError(f"fetch failed for {url}: {exc}") from exc
        return response


__all__ = ["SummarizeError", "SummarizeWorkflow", "build_summary_prompt"]
