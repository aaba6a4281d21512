# tests/test_summarizer.py

import pytest

from tabular_qa.application.summarizer import ExtractiveSummarizer, SentenceWeights


PAGE = "\n".join([
    "Home | About | Contact",
    "",
    "The weather today is sunny.",
    "   Pipeline safety regulations apply to every pipeline operator.   ",
    "Cats sleep for most of the day.",
    "Operators must report pipeline incidents within thirty days.",
])


def test_whitespace_only_text_returns_none():
    summarizer = ExtractiveSummarizer()
    assert summarizer.summarize("\n   \n\t\n", "pipeline") is None
    assert summarizer.summarize("", "pipeline") is None
    assert summarizer.summarize(None, "pipeline") is None


def test_most_relevant_line_comes_first():
    summary = ExtractiveSummarizer(top_k=2).summarize(PAGE, "pipeline safety regulations")
    first, second = summary.split("\n\n")
    assert first == "Pipeline safety regulations apply to every pipeline operator."
    assert "pipeline incidents" in second


def test_top_k_limits_lines_and_separates_with_blank_lines():
    summary = ExtractiveSummarizer(top_k=3).summarize(PAGE, "pipeline")
    paragraphs = summary.split("\n\n")
    assert len(paragraphs) == 3
    assert all(p.strip() == p and p for p in paragraphs)


def test_score_lines_drops_empty_lines_and_keeps_positions():
    scored = ExtractiveSummarizer().score_lines(PAGE, "cats")
    assert len(scored) == 5
    assert scored[0].text == "Cats sleep for most of the day."
    assert scored[0].position == 4


def test_ties_keep_page_order():
    scored = ExtractiveSummarizer().score_lines("alpha\nbeta\ngamma", "unrelated")
    assert [s.text for s in scored] == ["alpha", "beta", "gamma"]


def test_fewer_lines_than_top_k():
    assert ExtractiveSummarizer(top_k=6).summarize("only line", "line") == "only line"


def test_invalid_configuration_raises():
    with pytest.raises(ValueError):
        ExtractiveSummarizer(top_k=0)
    with pytest.raises(ValueError, match="sum to 1.0"):
        SentenceWeights(cosine=0.6, jaccard=0.3, overlap=0.2)
