import pytest

from faqbot.config import DEFAULT_FALLBACK_ANSWER
from faqbot.errors import StorageError
from faqbot.models import FAQRecord
from faqbot.repository import AnswerRepository, InMemoryAnswerRepository


def _first_answers(records):
    first = {}
    for r in records:
        first.setdefault(r.category, r.answer)
    return first


def test_present_categories_return_stored_answer(repository, records):
    for category, answer in _first_answers(records).items():
        got = repository.answer_for(category)
        assert got == answer
        assert got != DEFAULT_FALLBACK_ANSWER


@pytest.mark.parametrize("category", ["HealthInsurance", "", "thirdpartyinsurance", "ThirdPartyInsurance "])
def test_absent_categories_return_fallback(repository, category):
    assert repository.find_answer(category) is None
    assert repository.answer_for(category) == "No suitable answer found."


def test_lookup_is_parameterized(repository):
    assert repository.answer_for("x' OR '1'='1") == DEFAULT_FALLBACK_ANSWER
    assert repository.answer_for("'; DROP TABLE faq; --") == DEFAULT_FALLBACK_ANSWER
    # table still there
    assert repository.count() > 0


def test_lowest_id_wins_and_lookup_is_stable(sqlite_url):
    repo = AnswerRepository(sqlite_url)
    repo.create_schema()
    repo.add_records(
        [
            FAQRecord(category="Dup", question="q1", answer="first"),
            FAQRecord(category="Other", question="q2", answer="other"),
            FAQRecord(category="Dup", question="q3", answer="second"),
        ]
    )
    assert repo.answer_for("Dup") == "first"
    assert repo.answer_for("Dup") == "first"
    ids = [r.id for r in repo.records("Dup")]
    assert ids == sorted(ids)
    assert [r.answer for r in repo.records("Dup")] == ["first", "second"]
    repo.dispose()


def test_custom_fallback(sqlite_url):
    repo = AnswerRepository(sqlite_url, fallback_answer="Sorry, no idea.")
    repo.create_schema()
    assert repo.answer_for("Anything") == "Sorry, no idea."
    repo.dispose()


def test_categories_and_count(repository, records):
    assert repository.categories() == sorted({r.category for r in records})
    assert repository.count() == len(records)


def test_unreachable_storage_raises(unreachable_url):
    repo = AnswerRepository(unreachable_url)
    with pytest.raises(StorageError) as exc:
        repo.find_answer("ThirdPartyInsurance")
    assert "lookup" in exc.value.message
    with pytest.raises(StorageError):
        repo.answer_for("ThirdPartyInsurance")
    with pytest.raises(StorageError):
        repo.categories()


def test_missing_table_is_a_storage_error(sqlite_url):
    repo = AnswerRepository(sqlite_url)
    with pytest.raises(StorageError):
        repo.answer_for("ThirdPartyInsurance")
    repo.dispose()


def test_lookup_traces_when_debug(sqlite_url, records, capsys):
    repo = AnswerRepository(sqlite_url, debug=True)
    repo.create_schema()
    repo.add_records(records)
    repo.find_answer("FireInsurance")
    assert "repository.lookup" in capsys.readouterr().err
    repo.dispose()


class TestInMemoryRepository:
    def test_matches_sql_behaviour(self, records):
        repo = InMemoryAnswerRepository(records)
        for category, answer in _first_answers(records).items():
            assert repo.answer_for(category) == answer
        assert repo.answer_for("Nope") == DEFAULT_FALLBACK_ANSWER
        assert repo.categories() == sorted({r.category for r in records})
        assert repo.count() == len(records)

    def test_explicit_ids_decide_order(self):
        repo = InMemoryAnswerRepository(
            [
                FAQRecord(id=10, category="A", question="q", answer="ten"),
                FAQRecord(id=3, category="A", question="q", answer="three"),
            ]
        )
        assert repo.answer_for("A") == "three"
        assert [r.id for r in repo.records("A")] == [3, 10]

    def test_assigned_ids_are_monotonic(self):
        repo = InMemoryAnswerRepository()
        repo.add_records([FAQRecord(category="A", question="q", answer="a")])
        repo.add_records([FAQRecord(category="A", question="q", answer="b")])
        assert [r.id for r in repo.records("A")] == [1, 2]


def test_malformed_url_is_a_storage_error():
    with pytest.raises(StorageError) as exc:
        AnswerRepository("not a url")
    assert "connect" in exc.value.message


EXPLICIT_ID_RECORDS = [
    FAQRecord(id=10, category="A", question="q", answer="ten"),
    FAQRecord(id=3, category="A", question="q", answer="three"),
    FAQRecord(id=5, category="B", question="q", answer="five"),
]


def test_explicit_ids_behave_the_same_in_sql_and_memory(sqlite_url):
    sql = AnswerRepository(sqlite_url)
    sql.create_schema()
    sql.add_records(EXPLICIT_ID_RECORDS)
    mem = InMemoryAnswerRepository(EXPLICIT_ID_RECORDS)

    for repo in (sql, mem):
        assert repo.answer_for("A") == "three"
        assert [r.id for r in repo.records("A")] == [3, 10]
        assert repo.answer_for("B") == "five"

    # storage assigns the next id after the highest one
    new = [FAQRecord(category="C", question="q", answer="auto")]
    sql.add_records(new)
    mem.add_records(new)
    assert [r.id for r in sql.records("C")] == [r.id for r in mem.records("C")] == [11]
    sql.dispose()


def test_duplicate_id_is_rejected(sqlite_url):
    dupes = [
        FAQRecord(id=1, category="A", question="q", answer="one"),
        FAQRecord(id=1, category="A", question="q", answer="again"),
    ]
    sql = AnswerRepository(sqlite_url)
    sql.create_schema()
    with pytest.raises(StorageError):
        sql.add_records(dupes)
    assert sql.count() == 0
    sql.dispose()

    mem = InMemoryAnswerRepository()
    with pytest.raises(ValueError, match="Duplicate"):
        mem.add_records(dupes)
    assert mem.count() == 0
