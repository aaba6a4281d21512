# tabular_qa/application/answer_router.py

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Mapping, Optional, Tuple, Union

from tabular_qa.application.hybrid_scorer import HybridScorer
from tabular_qa.application.summarizer import ExtractiveSummarizer
from tabular_qa.domain.fields import FieldLookup
from tabular_qa.domain.interfaces import PageFetcherPort, WebAnswerPort
from tabular_qa.domain.models import Answer, MatchMethod, RankedResult, WebAnswer
from tabular_qa.domain.tokenizer import normalize


PROMPT_FOR_INPUT = "Please ask something."
NOT_FOUND_MESSAGE = "I couldn't find information about that."
BLOCKED_NOTE = "(Webpage blocked or empty)"
LIMITED_CONTENT_NOTE = "(Limited page content)"

DEFAULT_SMALL_TALK: Mapping[str, str] = {
    "hi": "Hi there! 👋 How can I help you today?",
    "hello": "Hello! 😊 What do you want to know?",
    "hey": "Hey! Ask me anything!",
    "how are you": "I'm doing great! Thanks for asking 😊",
    "bye": "Goodbye! 👋",
    "thanks": "You're welcome! 🙌",
    "thank you": "Happy to help! 😊",
}

# Phrases of common anti-bot interstitials; a page containing one is treated as blocked
DEFAULT_BLOCKED_SIGNATURES: Tuple[str, ...] = (
    "verify you are human",
    "are you a robot",
    "checking your browser",
    "access denied",
    "attention required",
    "unusual traffic",
    "enable javascript and cookies to continue",
)


class RouteState(str, Enum):
    SMALL_TALK = "small-talk"
    EMPTY_INDEX = "empty-index"
    RANK = "rank"
    GATE = "gate"
    FETCH = "fetch"
    SUMMARIZE = "summarize"
    WEB_ANSWER = "web-answer"


@dataclass(frozen=True)
class RouterConfig:
    confidence_threshold: float = 0.15
    min_summary_chars: int = 50
    web_abstract_max_chars: int = 600
    small_talk: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_SMALL_TALK))
    blocked_signatures: Tuple[str, ...] = DEFAULT_BLOCKED_SIGNATURES


@dataclass
class _Turn:
    """Per-request working state carried between router states."""
    question: str
    best: Optional[RankedResult] = None
    link: Optional[str] = None
    page_text: Optional[str] = None


Outcome = Union[RouteState, Answer]


class AnswerRouter:
    """
    Decides, per question, which kind of answer to give.

    States (each handler returns the next state or a terminal Answer):

        SMALL_TALK  → canned reply                    | EMPTY_INDEX
        EMPTY_INDEX → WEB_ANSWER if nothing indexed   | RANK
        RANK        → best record                     → GATE
        GATE        → WEB_ANSWER if low confidence or no link | FETCH
        FETCH       → record dump if blocked/empty    | SUMMARIZE
        SUMMARIZE   → summary of the page             | record dump
        WEB_ANSWER  → web text / "not found"

    The router never raises for missing content: every path ends in an Answer.
    """

    def __init__(
        self,
        scorer: HybridScorer,
        summarizer: ExtractiveSummarizer,
        page_fetcher: PageFetcherPort,
        web_answer: WebAnswerPort,
        link_fields: FieldLookup,
        config: RouterConfig = RouterConfig(),
    ):
        self._scorer = scorer
        self._summarizer = summarizer
        self._page_fetcher = page_fetcher
        self._web_answer = web_answer
        self._link_fields = link_fields
        self._config = config
        self._small_talk = [
            (f" {normalize(phrase)} ", reply)
            for phrase, reply in config.small_talk.items()
            if normalize(phrase)
        ]
        self._handlers: Dict[RouteState, Callable[[_Turn], Outcome]] = {
            RouteState.SMALL_TALK: self._check_small_talk,
            RouteState.EMPTY_INDEX: self._check_empty_index,
            RouteState.RANK: self._rank,
            RouteState.GATE: self._gate,
            RouteState.FETCH: self._fetch,
            RouteState.SUMMARIZE: self._summarize,
            RouteState.WEB_ANSWER: self._answer_from_web,
        }

    @property
    def config(self) -> RouterConfig:
        return self._config

    def answer(self, question: Optional[str]) -> Answer:
        question = (question or "").strip()
        if not question:
            return Answer(answer=PROMPT_FOR_INPUT)

        turn = _Turn(question=question)
        state = RouteState.SMALL_TALK
        while True:
            outcome = self._handlers[state](turn)
            if isinstance(outcome, Answer):
                method = outcome.match_method.value if outcome.match_method else "none"
                print(f"[AnswerRouter] '{question[:60]}' answered at {state.value} ({method})")
                return outcome
            state = outcome

    # ─── States ──────────────────────────────────────────────────────────────

    def _check_small_talk(self, turn: _Turn) -> Outcome:
        padded = f" {normalize(turn.question)} "
        for phrase, reply in self._small_talk:
            if phrase in padded:
                return Answer(answer=reply, match_method=MatchMethod.SMALL_TALK, confidence=1.0)
        return RouteState.EMPTY_INDEX

    def _check_empty_index(self, turn: _Turn) -> Outcome:
        if self._scorer.index.is_empty():
            return RouteState.WEB_ANSWER
        return RouteState.RANK

    def _rank(self, turn: _Turn) -> Outcome:
        ranked = self._scorer.rank(turn.question)
        if not ranked:
            return RouteState.WEB_ANSWER
        turn.best = ranked[0]
        turn.link = self._link_fields.first(turn.best.record)
        return RouteState.GATE

    def _gate(self, turn: _Turn) -> Outcome:
        best = turn.best
        if best.confidence < self._config.confidence_threshold:
            print(f"[AnswerRouter] Confidence {best.confidence:.3f} below "
                  f"{self._config.confidence_threshold}, using web search")
            return RouteState.WEB_ANSWER
        if not turn.link:
            print("[AnswerRouter] Best record has no link, using web search")
            return RouteState.WEB_ANSWER
        return RouteState.FETCH

    def _fetch(self, turn: _Turn) -> Outcome:
        try:
            text = self._page_fetcher.fetch(turn.link)
        except Exception as error:
            print(f"[AnswerRouter] Fetch failed for {turn.link}: {error!r}")
            text = None
        if not text or not text.strip() or self._is_blocked(text):
            return self._record_dump(turn.best, BLOCKED_NOTE)
        turn.page_text = text
        return RouteState.SUMMARIZE

    def _summarize(self, turn: _Turn) -> Outcome:
        best = turn.best
        summary = self._summarizer.summarize(turn.page_text, turn.question)
        if not summary or len(summary) < self._config.min_summary_chars:
            return self._record_dump(best, LIMITED_CONTENT_NOTE, source=turn.link)
        return Answer(
            answer=summary,
            match_method=MatchMethod.RECORD_SCRAPE,
            source=turn.link,
            sheet=best.record.group,
            confidence=best.confidence,
        )

    def _answer_from_web(self, turn: _Turn) -> Outcome:
        try:
            result = self._web_answer.search(turn.question)
        except Exception as error:
            print(f"[AnswerRouter] Web search failed: {error!r}")
            result = WebAnswer(text=None, source_url="")
        text = (result.text or "").strip()
        if not text:
            return Answer(
                answer=NOT_FOUND_MESSAGE,
                match_method=MatchMethod.FALLBACK,
                source=result.source_url or None,
            )

        limit = self._config.web_abstract_max_chars
        if len(text) <= limit and "\n" not in text:
            answer = text
        else:
            answer = self._summarizer.summarize(text, turn.question) or text[:limit]

        return Answer(
            answer=answer,
            match_method=MatchMethod.WEB_SEARCH,
            source=result.source_url or None,
        )

    # ─── Helpers ─────────────────────────────────────────────────────────────

    def _is_blocked(self, text: str) -> bool:
        lowered = text.lower()
        return any(signature in lowered for signature in self._config.blocked_signatures)

    @staticmethod
    def _record_dump(best: RankedResult, note: str, source: Optional[str] = None) -> Answer:
        """Structured fallback: every field of the matched record."""
        lines = [
            f"Sheet: {best.record.group}",
            f"Confidence: {round(best.confidence, 3)}",
            note,
            "",
        ]
        lines.extend(f"{name}: {value}" for name, value in best.record.fields.items())
        return Answer(
            answer="\n".join(lines).strip(),
            match_method=MatchMethod.RECORD_MATCH,
            source=source,
            sheet=best.record.group,
            confidence=best.confidence,
        )
