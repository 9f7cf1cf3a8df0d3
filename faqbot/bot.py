from __future__ import annotations

import os
from typing import List, Optional, Protocol

from .classifier import FAQClassifier
from .models import ChatResponse
from .utils import _trace


class AnswerSource(Protocol):
    fallback_answer: str

    def find_answer(self, category: str) -> Optional[str]: ...

    def categories(self) -> List[str]: ...

    def count(self) -> int: ...

    def dispose(self) -> None: ...


class FAQBot:
    """Classify a question, then look up the stored answer for its category."""

    def __init__(self, classifier: FAQClassifier, repository: AnswerSource, *, debug: bool = False) -> None:
        self.classifier = classifier
        self.repository = repository
        self.debug = debug

    def answer_with_meta(self, question: str, *, debug: bool = False) -> ChatResponse:
        """
        Structured answer (text + meta).

        Falls back to the repository's fixed answer when the category has no
        stored record. ClassificationError and StorageError propagate: a
        broken system is never reported as "no answer found".
        """
        trace_enabled = bool(debug or self.debug or os.getenv("DEBUG_TRACE") == "1")

        prediction = self.classifier.predict(question, debug=trace_enabled)
        found = self.repository.find_answer(prediction.label)
        matched = found is not None
        text = found if matched else self.repository.fallback_answer

        meta = {}
        if debug:
            meta["classifier"] = prediction.model_dump()
            meta["labels"] = list(self.classifier.labels)

        _trace(
            trace_enabled,
            "bot.answer",
            {"category": prediction.label, "score": round(prediction.score, 4), "matched": matched},
        )
        return ChatResponse(
            text=text,
            category=prediction.label,
            score=prediction.score,
            matched=matched,
            meta=meta,
        )

    def answer(self, question: str, *, debug: bool = False) -> str:
        """Main entrypoint used by the CLI."""
        return self.answer_with_meta(question, debug=debug).text
