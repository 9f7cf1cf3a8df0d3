"""FAQ bot - classify a question into a category, answer from the FAQ table."""

from .bootstrap import load_bot
from .bot import FAQBot

__all__ = ["load_bot", "FAQBot"]
