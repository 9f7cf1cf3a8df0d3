from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_FALLBACK_ANSWER = "No suitable answer found."


class Settings(BaseSettings):
    """Runtime configuration, read from FAQBOT_* environment variables or .env."""

    model_config = SettingsConfigDict(env_prefix="FAQBOT_", env_file=".env", extra="ignore")

    database_url: str = "sqlite:///./faq.db"
    classifier_path: str = "models/faq_classifier.joblib"
    classifier_backend: Literal["tfidf", "fuzzy"] = "tfidf"
    fallback_answer: str = DEFAULT_FALLBACK_ANSWER
    debug: bool = False
