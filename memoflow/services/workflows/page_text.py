"""Readable-text extraction for fetched web pages."""

from __future__ import annotations

import html
import re

from bs4 import BeautifulSoup

from ...logging_config import logger


class PageTextExtractor:
    """Strip markup and boilerplate from an HTML document."""

    def __init__(self) -> None:
        self.remove_elements = [
            "style",
            "script",
            "meta",
            "link",
            "head",
            "noscript",
            "iframe",
            "embed",
            "object",
            "svg",
            "img",
            "form",
        ]
        self.noise_elements = [
            "nav",
            "footer",
            "aside",
            "[role=\"navigation\"]",
            "[class*=\"cookie\"]",
            "[class*=\"banner\"]",
            "[style*=\"display:none\"]",
            "[style*=\"display: none\"]",
        ]

    def extract(self, html_content: str) -> str:
        try:
            soup = BeautifulSoup(html_content, "html.parser")
            title = soup.title.get_text(strip=True) if soup.title else ""

            for element_type in self.remove_elements:
                for element in soup.find_all(element_type):
                    element.decompose()

            for selector in self.noise_elements:
                for element in soup.select(selector):
                    element.decompose()

            body = soup.get_text(separator="\n", strip=True)
            text = f"{title}\n\n{body}" if title and not body.startswith(title) else body
            return self.post_process_text(text)

        except Exception as exc:  # pragma: no cover
            logger.warning("html extraction failed; using fallback", extra={"error": str(exc)})
            return self.fallback_text_extraction(html_content)

    def post_process_text(self, text: str) -> str:
        text = html.unescape(text)
        text = re.sub(r"[ \t]+", " ", text)
        text = re.sub(r"\n ", "\n", text)
        text = re.sub(r"\n{3,}", "\n\n", text)
        return text.strip()

    def fallback_text_extraction(self, html_content: str) -> str:
        stripped = re.sub(r"<(script|style)[^>]*>.*?</\1>", " ", html_content, flags=re.IGNORECASE | re.DOTALL)
        stripped = re.sub(r"<[^>]+>", " ", stripped)
        stripped = re.sub(r"\s+", " ", stripped)
        return self.post_process_text(stripped)


__all__ = ["PageTextExtractor"]
