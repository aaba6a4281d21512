# tests/test_web_answer.py

from unittest.mock import MagicMock

import requests

from tabular_qa.infrastructure.web_answer import DuckDuckGoWebAnswer, search_page_url


RESULTS_HTML = """
<div class="result__body">
  <a class="result__a" href="https://example.org/1">One</a>
  <a class="result__snippet">First snippet about pipelines.</a>
</div>
<div class="result__body">
  <a class="result__a" href="https://duckduckgo.com/y.js?ad_provider=x">Sponsored</a>
  <a class="result__snippet">Buy pipes now!</a>
</div>
<div class="result__body">
  <a class="result__a" href="https://example.org/2">Two</a>
  <div class="result__snippet">Second snippet &amp; more.</div>
</div>
"""


def _json_response(payload: dict):
    response = MagicMock()
    response.raise_for_status.return_value = None
    response.json.return_value = payload
    return response


def _html_response(text: str):
    response = MagicMock()
    response.raise_for_status.return_value = None
    response.text = text
    return response


def test_instant_answer_abstract_is_used():
    session = MagicMock()
    session.get.return_value = _json_response({
        "AbstractText": "Sacramento is the capital of California.",
        "AbstractURL": "https://en.wikipedia.org/wiki/Sacramento",
    })

    result = DuckDuckGoWebAnswer(session=session).search("capital of california")

    assert result.text == "Sacramento is the capital of California."
    assert result.source_url == "https://en.wikipedia.org/wiki/Sacramento"
    assert session.get.call_count == 1


def test_falls_back_to_html_snippets_and_skips_ads():
    session = MagicMock()
    session.get.side_effect = [
        _json_response({"AbstractText": "", "Answer": "", "Definition": ""}),
        _html_response(RESULTS_HTML),
    ]

    result = DuckDuckGoWebAnswer(session=session).search("pipeline incidents")

    assert result.text == "First snippet about pipelines.\nSecond snippet & more."
    assert result.source_url == search_page_url("pipeline incidents")


def test_network_failures_yield_no_text():
    session = MagicMock()
    session.get.side_effect = requests.ConnectionError("offline")

    result = DuckDuckGoWebAnswer(session=session).search("anything")

    assert result.text is None
    assert result.source_url == search_page_url("anything")


def test_invalid_json_falls_through_to_html():
    bad = MagicMock()
    bad.raise_for_status.return_value = None
    bad.json.side_effect = ValueError("not json")
    session = MagicMock()
    session.get.side_effect = [bad, _html_response("<html></html>")]

    result = DuckDuckGoWebAnswer(session=session).search("anything")

    assert result.text is None


def test_search_page_url_encodes_query():
    assert search_page_url("who is the president") == "https://duckduckgo.com/?q=who+is+the+president"
