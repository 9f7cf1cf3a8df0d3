"""
Answer lookup by category.

AnswerRepository reads the `faq` table through SQLAlchemy, one short-lived
session per call. InMemoryAnswerRepository has the same read interface over
a plain mapping.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import Column, Integer, String, Text, create_engine, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import DEFAULT_FALLBACK_ANSWER
from .errors import StorageError
from .models import FAQRecord
from .utils import _trace, truncate

logger = logging.getLogger(__name__)

Base = declarative_base()


class FAQ(Base):
    """Stored FAQ entry"""
    __tablename__ = "faq"

    id = Column(Integer, primary_key=True, autoincrement=True)
    category = Column(String(100), nullable=False, index=True)
    question = Column(Text, nullable=False)
    answer = Column(Text, nullable=False)


def _to_record(row: FAQ) -> FAQRecord:
    return FAQRecord(id=row.id, category=row.category, question=row.question, answer=row.answer)


class AnswerRepository:
    def __init__(
        self,
        database_url: str,
        *,
        fallback_answer: str = DEFAULT_FALLBACK_ANSWER,
        engine: Optional[Engine] = None,
        debug: bool = False,
    ) -> None:
        self.database_url = database_url
        self.fallback_answer = fallback_answer
        self.debug = debug

        if engine is None:
            connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
            try:
                engine = create_engine(database_url, connect_args=connect_args)
            except (SQLAlchemyError, ImportError) as e:
                # malformed URL or missing DBAPI driver
                raise self._fail("connect", e) from e
        self._engine = engine
        self._session_factory = sessionmaker(autoflush=False, bind=engine)

    def _fail(self, action: str, exc: Exception) -> StorageError:
        logger.error("[repository] %s failed url=%s error=%s", action, self.database_url, exc)
        return StorageError(f"FAQ storage {action} failed: {truncate(str(exc))}")

    def find_answer(self, category: str) -> Optional[str]:
        """
        Answer of the lowest-id record in `category`, or None when no record matches.
        Raises StorageError when the query cannot run.
        """
        stmt = select(FAQ.answer).where(FAQ.category == category).order_by(FAQ.id).limit(1)
        try:
            with self._session_factory() as session:
                found = session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise self._fail("lookup", e) from e

        _trace(self.debug, "repository.lookup", {"category": category, "found": found is not None})
        return found

    def answer_for(self, category: str) -> str:
        found = self.find_answer(category)
        return found if found is not None else self.fallback_answer

    def categories(self) -> List[str]:
        stmt = select(FAQ.category).distinct().order_by(FAQ.category)
        try:
            with self._session_factory() as session:
                return list(session.execute(stmt).scalars())
        except SQLAlchemyError as e:
            raise self._fail("category listing", e) from e

    def count(self) -> int:
        try:
            with self._session_factory() as session:
                return int(session.execute(select(func.count(FAQ.id))).scalar_one())
        except SQLAlchemyError as e:
            raise self._fail("count", e) from e

    def records(self, category: str) -> List[FAQRecord]:
        stmt = select(FAQ).where(FAQ.category == category).order_by(FAQ.id)
        try:
            with self._session_factory() as session:
                return [_to_record(row) for row in session.execute(stmt).scalars()]
        except SQLAlchemyError as e:
            raise self._fail("record listing", e) from e

    # Loading step. Records are insert-only; there is no update or delete path.

    def create_schema(self) -> None:
        try:
            Base.metadata.create_all(bind=self._engine)
        except SQLAlchemyError as e:
            raise self._fail("schema creation", e) from e

    def add_records(self, records: Iterable[FAQRecord]) -> int:
        """Insert records, letting storage assign ids. Returns the number inserted."""
        rows = [FAQ(id=r.id, category=r.category, question=r.question, answer=r.answer) for r in records]
        try:
            with self._session_factory() as session:
                session.add_all(rows)
                session.commit()
        except SQLAlchemyError as e:
            raise self._fail("insert", e) from e
        logger.info("[repository] inserted records=%d", len(rows))
        return len(rows)

    def dispose(self) -> None:
        self._engine.dispose()


class InMemoryAnswerRepository:
    """Stand-in repository over a dict; ids are assigned in insertion order."""

    def __init__(
        self,
        records: Iterable[FAQRecord] = (),
        *,
        fallback_answer: str = DEFAULT_FALLBACK_ANSWER,
    ) -> None:
        self.fallback_answer = fallback_answer
        self._by_category: Dict[str, List[Tuple[int, FAQRecord]]] = {}
        self._next_id = 1
        self.add_records(records)

    def find_answer(self, category: str) -> Optional[str]:
        rows = self._by_category.get(category)
        if not rows:
            return None
        return min(rows, key=lambda r: r[0])[1].answer

    def answer_for(self, category: str) -> str:
        found = self.find_answer(category)
        return found if found is not None else self.fallback_answer

    def categories(self) -> List[str]:
        return sorted(self._by_category)

    def count(self) -> int:
        return sum(len(rows) for rows in self._by_category.values())

    def records(self, category: str) -> List[FAQRecord]:
        return [rec for _, rec in sorted(self._by_category.get(category, []), key=lambda r: r[0])]

    def add_records(self, records: Iterable[FAQRecord]) -> int:
        """Insert all records or none; a duplicate id raises ValueError like a primary key would."""
        used = {rid for rows in self._by_category.values() for rid, _ in rows}
        next_id = self._next_id
        staged: List[Tuple[int, FAQRecord]] = []
        for rec in records:
            rid = rec.id if rec.id is not None else next_id
            if rid in used:
                raise ValueError(f"Duplicate FAQ id: {rid}")
            used.add(rid)
            next_id = max(next_id, rid) + 1
            staged.append((rid, rec.model_copy(update={"id": rid})))

        for rid, rec in staged:
            self._by_category.setdefault(rec.category, []).append((rid, rec))
        self._next_id = next_id
        return len(staged)

    def dispose(self) -> None:
        pass
