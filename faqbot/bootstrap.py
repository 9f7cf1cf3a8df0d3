from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from .bot import FAQBot
from .classifier import FAQClassifier
from .config import Settings
from .repository import AnswerRepository


def load_bot(settings: Optional[Settings] = None) -> FAQBot:
    """
    Load the classifier artifact and connect the answer repository.
    A classifier that fails to load raises ModelLoadError; no bot is built without a model.
    """
    settings = settings or Settings()
    classifier = FAQClassifier.load(settings.classifier_path)
    repository = AnswerRepository(
        settings.database_url,
        fallback_answer=settings.fallback_answer,
        debug=settings.debug,
    )
    return FAQBot(classifier, repository, debug=settings.debug)


def coverage(bot: FAQBot) -> Dict[str, Any]:
    """
    Compare the classifier's label set with the stored categories:
      - labels_without_answers: labels that would always get the fallback answer
      - categories_without_label: stored categories the classifier can never produce
    """
    stored = set(bot.repository.categories())
    labels = set(bot.classifier.labels)
    return {
        "labels_without_answers": sorted(labels - stored),
        "categories_without_label": sorted(stored - labels),
    }


def load_bot_with_summary(settings: Optional[Settings] = None) -> Tuple[FAQBot, Dict[str, Any]]:
    """
    Same as load_bot, but also returns a small summary dict for debug / demo:
      - backend, labels, trained_at
      - total_records in storage
      - coverage gaps between labels and stored categories
      - notes about anything that will always produce the fallback answer
    """
    bot = load_bot(settings)
    gaps = coverage(bot)

    notes = []
    for label in gaps["labels_without_answers"]:
        notes.append(f"No stored answer for category '{label}'; it will get the fallback answer")

    summary = {
        "backend": bot.classifier.backend,
        "labels": list(bot.classifier.labels),
        "trained_at": bot.classifier.trained_at,
        "total_records": bot.repository.count(),
        **gaps,
        "notes": notes,
    }
    return bot, summary
