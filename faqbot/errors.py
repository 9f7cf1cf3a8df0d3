"""
Error kinds surfaced to callers.

"No answer stored for a category" is not an error: the repository returns
None and the bot falls back to a fixed string. Everything here means the
system itself is broken and must not be turned into the fallback answer.
"""


class FAQBotError(Exception):
    """Base class for all bot failures."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ModelLoadError(FAQBotError):
    """Raised when the classifier artifact cannot be loaded. Fatal at startup."""


class ClassificationError(FAQBotError):
    """Raised when the input cannot be turned into features for the classifier."""


class StorageError(FAQBotError):
    """Raised when the FAQ table is unreachable or the lookup query fails."""
