# tabular_qa/domain/tokenizer.py

import re
from typing import List


_NON_ALNUM_RE = re.compile(r"[^a-z0-9 ]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize(text) -> str:
    """Lowercase, replace anything outside [a-z0-9 ] with a space, collapse whitespace."""
    if text is None:
        return ""
    lowered = str(text).lower()
    # Tabs/newlines are not in the allowed set either, so they become spaces here
    spaced = _NON_ALNUM_RE.sub(" ", lowered)
    return _WHITESPACE_RE.sub(" ", spaced).strip()


def tokenize(text) -> List[str]:
    return [token for token in normalize(text).split(" ") if token]
