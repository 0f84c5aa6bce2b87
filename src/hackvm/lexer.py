from __future__ import annotations
import re
from typing import List, Tuple

COMMENT_SPLIT_RE = re.compile(r"//")
WHITESPACE_RE = re.compile(r"\s+")
DEC_RE = re.compile(r"^[0-9]+$")

def strip_comment(line: str) -> str:
    """Remove a '//' comment up to end of line and surrounding whitespace."""
    m = COMMENT_SPLIT_RE.split(line, maxsplit=1)
    return m[0].strip()

def split_tokens(line: str) -> List[str]:
    """Split on runs of whitespace; an empty line gives no tokens."""
    s = line.strip()
    if not s:
        return []
    return WHITESPACE_RE.split(s)

def split_mnemonic(line: str) -> Tuple[str, List[str]]:
    """Return (mnemonic in lower case, remaining tokens verbatim)."""
    tokens = split_tokens(line)
    if not tokens:
        return "", []
    return tokens[0].lower(), tokens[1:]

def is_decimal(token: str) -> bool:
    return bool(DEC_RE.match(token))
