from __future__ import annotations

from typing import Dict, Iterable, List

from rapidfuzz import fuzz, process

from .utils import normalize_text


def _label_from_key(choice_key: str) -> str:
    # key: "{row}|{label}"
    return choice_key.split("|", 1)[1]


class FuzzyQuestionMatcher:
    """
    Nearest-example classifier: a question gets the label of the training
    question it matches best (rapidfuzz WRatio over normalized text).
    """

    def __init__(self, choice_map: Dict[str, str]) -> None:
        self.choice_map = choice_map
        self.labels: List[str] = sorted({_label_from_key(k) for k in choice_map})

    @classmethod
    def fit(cls, questions: Iterable[str], categories: Iterable[str]) -> "FuzzyQuestionMatcher":
        choice_map: Dict[str, str] = {}
        for row, (question, category) in enumerate(zip(questions, categories)):
            norm = normalize_text(question)
            if not norm:
                continue
            choice_map[f"{row}|{category}"] = norm
        if not choice_map:
            raise ValueError("No usable training questions for the fuzzy matcher")
        return cls(choice_map)

    def scores(self, text: str) -> Dict[str, float]:
        """Best match score per label, 0..100. Every label is present."""
        best = {label: 0.0 for label in self.labels}
        norm_q = normalize_text(text)
        if not norm_q:
            return best

        matches = process.extract(norm_q, self.choice_map, scorer=fuzz.WRatio, limit=None)
        for _choice_val, score, choice_key in matches:
            label = _label_from_key(choice_key)
            if score > best[label]:
                best[label] = float(score)
        return best
