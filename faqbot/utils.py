from __future__ import annotations

import json
import re
import sys
import unicodedata


_WHITESPACE_RE = re.compile(r"\s+")

# Nukta (7) and virama (9) are part of Indic spelling; higher classes are diacritics.
_MAX_KEPT_COMBINING_CLASS = 9


def normalize_text(s: str) -> str:
    """
    Normalize text for matching and vectorization:
    - unicode normalize (NFKC)
    - drop diacritics (Latin accents, harakat, niqqud)
    - casefold
    - replace punctuation and symbols with spaces
    - collapse whitespace

    Letters, digits and the vowel signs, viramas and nuktas that
    Indic scripts spell words with are kept.
    """
    if s is None:
        return ""
    s = unicodedata.normalize("NFKC", str(s))
    chars = []
    for ch in s:
        if unicodedata.combining(ch) > _MAX_KEPT_COMBINING_CLASS:
            continue
        keep = ch.isalnum() or ch.isspace() or unicodedata.category(ch).startswith("M")
        chars.append(ch if keep else " ")
    s = "".join(chars).casefold()
    s = _WHITESPACE_RE.sub(" ", s).strip()
    return s


def truncate(s: str, max_len: int = 200) -> str:
    s = s or ""
    if len(s) <= max_len:
        return s
    return s[: max_len - 1] + "…"


def _trace(enabled: bool, event: str, payload: dict) -> None:
    """
    Lightweight structured tracing to stderr.
    No-op when disabled.
    """
    if not enabled:
        return
    print(
        f"[trace] {event} {json.dumps(payload, ensure_ascii=False, default=str)}",
        file=sys.stderr,
    )
