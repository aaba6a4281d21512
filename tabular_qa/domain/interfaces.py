# tabular_qa/domain/interfaces.py

from abc import ABC, abstractmethod
from typing import List, Optional

from .models import Record, WebAnswer


class RowSourcePort(ABC):
    """
    Port for anything that yields knowledge-base rows.
    Each record carries its own group label (sheet name).
    """

    @abstractmethod
    def load(self) -> List[Record]: ...


class PageFetcherPort(ABC):

    @abstractmethod
    def fetch(self, url: str) -> Optional[str]:
        """
        Return the visible text of the page at `url`, or None when it is
        unavailable (timeout, network error, non-HTML response, bot wall).
        Implementations must not raise for those cases.
        """
        ...


class WebAnswerPort(ABC):

    @abstractmethod
    def search(self, query: str) -> WebAnswer:
        """
        Look the raw query up on a generic search provider.
        `text` is None when nothing usable was found.
        """
        ...
