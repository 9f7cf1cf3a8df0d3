"""
Pytest configuration and fixtures
"""
from pathlib import Path

import pytest

from faqbot.classifier import train_classifier
from faqbot.ingest import load_dataset
from faqbot.repository import AnswerRepository

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


@pytest.fixture
def dataset_path():
    """Path to the sample FAQ dataset."""
    return str(DATA_DIR / "faqs.json")


@pytest.fixture
def records(dataset_path):
    return load_dataset(dataset_path)


@pytest.fixture(scope="session")
def tfidf_classifier():
    """Classifier trained once on the sample dataset."""
    return train_classifier(load_dataset(str(DATA_DIR / "faqs.json")), backend="tfidf")


@pytest.fixture
def sqlite_url(tmp_path):
    return f"sqlite:///{tmp_path / 'faq.db'}"


@pytest.fixture
def repository(sqlite_url, records):
    """SQLite-backed repository seeded with the sample dataset."""
    repo = AnswerRepository(sqlite_url)
    repo.create_schema()
    repo.add_records(records)
    yield repo
    repo.dispose()


@pytest.fixture
def unreachable_url(tmp_path):
    # Parent directory does not exist, so SQLite cannot open the file.
    return f"sqlite:///{tmp_path / 'missing_dir' / 'faq.db'}"
