# tabular_qa/infrastructure/web_answer.py

import html
import time
from typing import List, Optional
from urllib.parse import quote_plus

import requests
from bs4 import BeautifulSoup

from tabular_qa.domain.interfaces import WebAnswerPort
from tabular_qa.domain.models import WebAnswer
from tabular_qa.infrastructure.page_fetcher import user_agent


DEFAULT_TIMEOUT_SECONDS = 10.0
MAX_SNIPPETS = 8

_DDG_API = "https://api.duckduckgo.com/"
_DDG_HTML = "https://html.duckduckgo.com/html/"
_DDG_SEARCH_PAGE = "https://duckduckgo.com/?q={query}"

_AD_MARKERS = ("duckduckgo.com/y.js", "adserver", "bing.com/aclick")


def search_page_url(query: str) -> str:
    return _DDG_SEARCH_PAGE.format(query=quote_plus(query))


class DuckDuckGoWebAnswer(WebAnswerPort):
    """
    Generic web answer from DuckDuckGo.

    1. Instant Answer API: a short abstract / direct answer when DDG has one
    2. Otherwise the lightweight HTML results page, one snippet per line

    Network failures on either step are logged and treated as "no text".
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT_SECONDS, session: Optional[requests.Session] = None):
        self._timeout = timeout
        self._session = session or requests.Session()

    def search(self, query: str) -> WebAnswer:
        print(f"[WebAnswer] SEARCH «{query}»")
        started = time.time()

        answer = self._instant_answer(query)
        if answer is None or not answer.text:
            snippets = self._html_snippets(query)
            answer = WebAnswer(
                text="\n".join(snippets) if snippets else None,
                source_url=search_page_url(query),
            )

        elapsed_ms = (time.time() - started) * 1000
        found = "text" if answer.text else "nothing"
        print(f"[WebAnswer] ↳ {found} in {elapsed_ms:0.0f} ms")
        return answer

    # ─── Private ─────────────────────────────────────────────────────────────

    def _instant_answer(self, query: str) -> Optional[WebAnswer]:
        params = {"q": query, "format": "json", "no_html": 1, "skip_disambig": 1}
        try:
            response = self._session.get(
                _DDG_API,
                params=params,
                headers={"User-Agent": user_agent()},
                timeout=self._timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as error:
            print(f"[WebAnswer] Instant answer failed ({error}); trying HTML results.")
            return None

        for text_key, url_key in (("Answer", "AbstractURL"),
                                  ("AbstractText", "AbstractURL"),
                                  ("Definition", "DefinitionURL")):
            text = str(data.get(text_key) or "").strip()
            if text:
                source = data.get(url_key) or search_page_url(query)
                return WebAnswer(text=html.unescape(text), source_url=source)
        return None

    def _html_snippets(self, query: str) -> List[str]:
        headers = {
            "User-Agent": user_agent(),
            "Referer": "https://duckduckgo.com/",
            "Accept-Language": "en-US,en;q=0.9",
        }
        try:
            response = self._session.get(
                _DDG_HTML,
                params={"q": query, "kl": "us-en"},
                headers=headers,
                timeout=self._timeout,
            )
            response.raise_for_status()
        except requests.RequestException as error:
            print(f"[WebAnswer] HTML search failed: {error}")
            return []

        soup = BeautifulSoup(response.text, "html.parser")
        snippets: List[str] = []
        for body in soup.select("div.result__body"):
            link = body.select_one("a.result__a")
            if link is not None and any(marker in link.get("href", "") for marker in _AD_MARKERS):
                continue
            snippet = body.select_one(".result__snippet")
            text = snippet.get_text(" ", strip=True) if snippet else ""
            if text:
                snippets.append(html.unescape(text))
            if len(snippets) >= MAX_SNIPPETS:
                break
        return snippets
