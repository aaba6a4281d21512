# tabular_qa/infrastructure/page_fetcher.py

import random
import re
from typing import Optional

import requests
from bs4 import BeautifulSoup

from tabular_qa.domain.interfaces import PageFetcherPort


DEFAULT_TIMEOUT_SECONDS = 30.0

_UA_POOL = [
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 13_5) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.4 Safari/605.1.15",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0 Safari/537.36",
]

_TEXT_CONTENT_TYPES = ("text/html", "application/xhtml+xml", "text/plain")
_STRIPPED_TAGS = ["script", "style", "iframe", "noscript", "svg", "template"]


def user_agent() -> str:
    return random.choice(_UA_POOL)


def html_to_text(html: str) -> str:
    """
    Visible text of an HTML page, one block per line.
    Line structure matters: the summarizer ranks the page line by line.
    """
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(_STRIPPED_TAGS):
        tag.decompose()
    text = (soup.body or soup).get_text("\n", strip=True)
    text = re.sub(r"[ \t]+", " ", text)
    return re.sub(r"\n{2,}", "\n", text).strip()


class RequestsPageFetcher(PageFetcherPort):
    """
    Plain HTTP page fetcher.

    One attempt per URL, bounded by `timeout`. Any network error, non-2xx
    status or non-text response yields None, never an exception.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT_SECONDS, session: Optional[requests.Session] = None):
        self._timeout = timeout
        self._session = session or requests.Session()

    def fetch(self, url: str) -> Optional[str]:
        print(f"[PageFetcher] FETCH {url}")
        try:
            response = self._session.get(
                url,
                headers={"User-Agent": user_agent(), "Accept-Language": "en-US,en;q=0.9"},
                timeout=self._timeout,
            )
            response.raise_for_status()
        except requests.RequestException as error:
            print(f"[PageFetcher] ↳ error: {error}")
            return None

        content_type = response.headers.get("Content-Type", "").lower()
        if content_type and not content_type.startswith(_TEXT_CONTENT_TYPES):
            print(f"[PageFetcher] ↳ skipped non-text response ({content_type})")
            return None

        if content_type.startswith("text/plain"):
            text = response.text.strip()
        else:
            text = html_to_text(response.text)
        return text or None
