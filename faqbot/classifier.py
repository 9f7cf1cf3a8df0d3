"""
Question classifier: free text in, one label from the trained label set out.

Two interchangeable backends share one artifact format:
- "tfidf": scikit-learn TF-IDF + logistic regression pipeline
- "fuzzy": nearest training question by rapidfuzz score
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple

import joblib
from sklearn.feature_extraction.text import TfidfVectorizer
from sklearn.linear_model import LogisticRegression
from sklearn.pipeline import Pipeline

from .errors import ClassificationError, ModelLoadError
from .fuzzy import FuzzyQuestionMatcher
from .models import FAQRecord, Prediction
from .utils import _trace, normalize_text

ARTIFACT_FORMAT_VERSION = 1
BACKENDS = ("tfidf", "fuzzy")

_ARTIFACT_KEYS = ("format_version", "backend", "labels", "trained_at", "num_examples", "model")


def pick_label(scores: Dict[str, float]) -> Tuple[str, float]:
    """Highest score wins; equal scores go to the lexicographically smallest label."""
    if not scores:
        raise ClassificationError("Classifier produced no scores")
    label, score = min(scores.items(), key=lambda kv: (-kv[1], kv[0]))
    return label, float(score)


def _build_pipeline() -> Pipeline:
    return Pipeline(
        [
            (
                "tfidf",
                TfidfVectorizer(
                    preprocessor=normalize_text,
                    # \w excludes vowel signs, so split on the whitespace normalize_text leaves
                    token_pattern=r"(?u)\S\S+",
                    ngram_range=(1, 2),
                    sublinear_tf=True,
                ),
            ),
            ("clf", LogisticRegression(max_iter=1000)),
        ]
    )


def _model_labels(backend: str, model: Any) -> Tuple[str, ...]:
    if backend == "tfidf":
        return tuple(sorted(str(c) for c in model.classes_))
    return tuple(model.labels)


class FAQClassifier:
    """A fitted classifier. Immutable once built or loaded."""

    def __init__(
        self,
        backend: str,
        model: Any,
        *,
        trained_at: Optional[str] = None,
        num_examples: int = 0,
    ) -> None:
        if backend not in BACKENDS:
            raise ValueError(f"Unknown classifier backend: {backend}")
        self.backend = backend
        self._model = model
        self._labels = _model_labels(backend, model)
        self.trained_at = trained_at
        self.num_examples = num_examples

    @property
    def labels(self) -> Tuple[str, ...]:
        return self._labels

    def scores(self, text: str) -> Dict[str, float]:
        """Score every label for `text` (0..1)."""
        if not isinstance(text, str):
            raise ClassificationError(f"Question must be a string, got {type(text).__name__}")

        try:
            if self.backend == "tfidf":
                probs = self._model.predict_proba([text])[0]
                return {str(c): float(p) for c, p in zip(self._model.classes_, probs)}
            return {label: score / 100.0 for label, score in self._model.scores(text).items()}
        except (ValueError, TypeError, AttributeError) as e:
            raise ClassificationError(f"Could not extract features from question: {e}") from e

    def predict(self, text: str, *, debug: bool = False) -> Prediction:
        scores = self.scores(text)
        label, score = pick_label(scores)
        _trace(
            debug,
            "classifier.predict",
            {
                "backend": self.backend,
                "normalized_query": normalize_text(text),
                "label": label,
                "score": round(score, 4),
                "top": sorted(scores.items(), key=lambda kv: (-kv[1], kv[0]))[:3],
            },
        )
        return Prediction(label=label, score=score, backend=self.backend)

    def predict_label(self, text: str) -> str:
        return self.predict(text).label

    def save(self, path: str) -> Path:
        """Write the versioned artifact with joblib."""
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        joblib.dump(
            {
                "format_version": ARTIFACT_FORMAT_VERSION,
                "backend": self.backend,
                "labels": list(self._labels),
                "trained_at": self.trained_at,
                "num_examples": self.num_examples,
                "model": self._model,
            },
            p,
        )
        return p

    @classmethod
    def load(cls, path: str) -> "FAQClassifier":
        """
        Load an artifact written by save().
        Raises ModelLoadError for anything short of a usable model.
        """
        p = Path(path)
        if not p.exists():
            raise ModelLoadError(f"Classifier artifact not found: {path}")

        try:
            blob = joblib.load(p)
        except Exception as e:
            raise ModelLoadError(f"Could not read classifier artifact {path}: {e}") from e

        if not isinstance(blob, dict):
            raise ModelLoadError(f"Classifier artifact {path} has an unexpected layout")
        missing = [k for k in _ARTIFACT_KEYS if k not in blob]
        if missing:
            raise ModelLoadError(f"Classifier artifact {path} is missing fields: {', '.join(missing)}")
        if blob["format_version"] != ARTIFACT_FORMAT_VERSION:
            raise ModelLoadError(
                f"Classifier artifact {path} has format version {blob['format_version']}, "
                f"expected {ARTIFACT_FORMAT_VERSION}"
            )

        try:
            clf = cls(
                blob["backend"],
                blob["model"],
                trained_at=blob["trained_at"],
                num_examples=int(blob["num_examples"] or 0),
            )
        except (ValueError, TypeError, AttributeError) as e:
            raise ModelLoadError(f"Classifier artifact {path} holds an unusable model: {e}") from e

        if tuple(sorted(blob["labels"])) != clf.labels:
            raise ModelLoadError(f"Classifier artifact {path} labels do not match its model")
        return clf


def train_classifier(records: Iterable[FAQRecord], *, backend: str = "tfidf") -> FAQClassifier:
    """
    Fit a classifier on (question, category) pairs.
    Records without a usable question are skipped.
    """
    pairs = [(r.question, r.category) for r in records if normalize_text(r.question)]
    if not pairs:
        raise ValueError("Cannot train a classifier: no FAQ record has a usable question")

    questions = [q for q, _ in pairs]
    categories = [c for _, c in pairs]

    if backend == "tfidf":
        if len(set(categories)) < 2:
            raise ValueError("The tfidf backend needs at least two categories")
        model: Any = _build_pipeline()
        model.fit(questions, categories)
    elif backend == "fuzzy":
        model = FuzzyQuestionMatcher.fit(questions, categories)
    else:
        raise ValueError(f"Unknown classifier backend: {backend}")

    return FAQClassifier(
        backend,
        model,
        trained_at=datetime.now(timezone.utc).isoformat(),
        num_examples=len(pairs),
    )
