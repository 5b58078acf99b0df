"""
Row sources: where schedule rows and teacher identities come from.

The service only needs the read-only ``RowSource`` protocol. Two adapters
are provided: an in-memory source over a loaded ``ScheduleData`` and a
SQLite source over ``schedule_entries`` / ``teachers`` / ``classes`` tables.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from pathlib import Path
from typing import Optional, Protocol, Union

from pydantic import ValidationError

from .models import (
    ScheduleData,
    ScheduleRow,
    TeacherIdentity,
    normalize_day,
)

logger = logging.getLogger(__name__)


class DataAccessError(Exception):
    """Raised when a row source cannot be queried."""
    pass


class RowSource(Protocol):
    """Read-only query capability consumed by the period service."""

    async def fetch_rows(
        self,
        day_of_week: str,
        class_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
        teacher_name: Optional[str] = None,
    ) -> list[ScheduleRow]:
        ...

    async def get_teacher(self, teacher_id: str) -> Optional[TeacherIdentity]:
        ...

    async def find_teachers(self, name_fragment: str) -> list[TeacherIdentity]:
        ...

    async def list_teacher_ids(self, status: str = "ACTIVE") -> list[str]:
        ...

    async def list_class_ids(self) -> list[str]:
        ...


def _teacher_matches(
    row: ScheduleRow,
    teacher_id: Optional[str],
    teacher_name: Optional[str],
) -> bool:
    if teacher_id is None and teacher_name is None:
        return True
    if teacher_id is not None and row.teacher_id == teacher_id:
        return True
    if teacher_name and teacher_name.lower() in row.teacher_name.lower():
        return True
    return False


# =============================================================================
# In-memory Source
# =============================================================================

class InMemoryRowSource:
    """Serves rows from a ``ScheduleData`` held in memory."""

    def __init__(self, data: ScheduleData):
        self.data = data
        self._teachers = {t.id: t for t in data.teachers}

    async def fetch_rows(
        self,
        day_of_week: str,
        class_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
        teacher_name: Optional[str] = None,
    ) -> list[ScheduleRow]:
        day = normalize_day(day_of_week)
        return [
            row for row in self.data.schedule_entries
            if row.day_of_week == day
            and (class_id is None or row.class_id == class_id)
            and _teacher_matches(row, teacher_id, teacher_name)
        ]

    async def get_teacher(self, teacher_id: str) -> Optional[TeacherIdentity]:
        return self._teachers.get(teacher_id)

    async def find_teachers(self, name_fragment: str) -> list[TeacherIdentity]:
        fragment = name_fragment.lower()
        return [
            t for t in self.data.teachers
            if fragment in t.first_name.lower() or fragment in t.last_name.lower()
        ]

    async def list_teacher_ids(self, status: str = "ACTIVE") -> list[str]:
        return [t.id for t in self.data.teachers if t.status == status]

    async def list_class_ids(self) -> list[str]:
        return [c.id for c in self.data.classes]


# =============================================================================
# SQLite Source
# =============================================================================

SCHEMA = """
CREATE TABLE IF NOT EXISTS teachers (
    id TEXT PRIMARY KEY,
    first_name TEXT NOT NULL,
    last_name TEXT NOT NULL DEFAULT '',
    status TEXT NOT NULL DEFAULT 'ACTIVE'
);
CREATE TABLE IF NOT EXISTS classes (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS schedule_entries (
    id TEXT PRIMARY KEY,
    teacher_id TEXT REFERENCES teachers(id),
    teacher_name TEXT NOT NULL,
    class_id TEXT NOT NULL REFERENCES classes(id),
    subject TEXT NOT NULL,
    day_of_week TEXT NOT NULL,
    start_time TEXT NOT NULL,
    end_time TEXT,
    hours INTEGER
);
"""

ROW_COLUMNS = """
    s.id, s.teacher_id, s.teacher_name, s.class_id, c.name AS class_name,
    s.subject, s.day_of_week, s.start_time, s.end_time, s.hours
"""


class SQLiteRowSource:
    """
    Serves rows from a SQLite database.

    Queries run in a worker thread; ``sqlite3.Error`` is re-raised as
    ``DataAccessError``.
    """

    def __init__(self, db_path: Union[str, Path]):
        self.db_path = str(db_path)

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self.db_path)
        connection.row_factory = sqlite3.Row
        return connection

    def _query(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        try:
            connection = self._connect()
            try:
                return connection.execute(sql, params).fetchall()
            finally:
                connection.close()
        except sqlite3.Error as e:
            logger.error("Query failed on %s: %s", self.db_path, e)
            raise DataAccessError(f"Database error: {e}") from e

    async def _run(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        return await asyncio.to_thread(self._query, sql, params)

    async def fetch_rows(
        self,
        day_of_week: str,
        class_id: Optional[str] = None,
        teacher_id: Optional[str] = None,
        teacher_name: Optional[str] = None,
    ) -> list[ScheduleRow]:
        clauses = ["LOWER(s.day_of_week) = ?"]
        params: list = [normalize_day(day_of_week)]
        if class_id is not None:
            clauses.append("s.class_id = ?")
            params.append(class_id)
        if teacher_id is not None and teacher_name:
            clauses.append("(s.teacher_id = ? OR LOWER(s.teacher_name) LIKE ?)")
            params.extend([teacher_id, f"%{teacher_name.lower()}%"])
        elif teacher_id is not None:
            clauses.append("s.teacher_id = ?")
            params.append(teacher_id)
        elif teacher_name:
            clauses.append("LOWER(s.teacher_name) LIKE ?")
            params.append(f"%{teacher_name.lower()}%")

        sql = (
            f"SELECT {ROW_COLUMNS} FROM schedule_entries s "
            f"LEFT JOIN classes c ON c.id = s.class_id "
            f"WHERE {' AND '.join(clauses)} ORDER BY s.id"
        )
        rows = await self._run(sql, tuple(params))
        try:
            return [ScheduleRow.model_validate(dict(r)) for r in rows]
        except ValidationError as e:
            logger.error("Invalid schedule row in %s: %s", self.db_path, e)
            raise DataAccessError(f"Invalid schedule row: {e}") from e

    async def get_teacher(self, teacher_id: str) -> Optional[TeacherIdentity]:
        rows = await self._run(
            "SELECT id, first_name, last_name, status FROM teachers WHERE id = ?",
            (teacher_id,),
        )
        if not rows:
            return None
        return TeacherIdentity.model_validate(dict(rows[0]))

    async def find_teachers(self, name_fragment: str) -> list[TeacherIdentity]:
        pattern = f"%{name_fragment.lower()}%"
        rows = await self._run(
            "SELECT id, first_name, last_name, status FROM teachers "
            "WHERE LOWER(first_name) LIKE ? OR LOWER(last_name) LIKE ? ORDER BY id",
            (pattern, pattern),
        )
        return [TeacherIdentity.model_validate(dict(r)) for r in rows]

    async def list_teacher_ids(self, status: str = "ACTIVE") -> list[str]:
        rows = await self._run("SELECT id FROM teachers WHERE status = ? ORDER BY id", (status,))
        return [r["id"] for r in rows]

    async def list_class_ids(self) -> list[str]:
        rows = await self._run("SELECT id FROM classes ORDER BY id")
        return [r["id"] for r in rows]


def create_schema(db_path: Union[str, Path]) -> None:
    """Create the schedule tables if they do not exist."""
    connection = sqlite3.connect(str(db_path))
    try:
        connection.executescript(SCHEMA)
    finally:
        connection.close()


def insert_schedule_data(db_path: Union[str, Path], data: ScheduleData) -> None:
    """Write a ``ScheduleData`` into a SQLite database (schema created if needed)."""
    create_schema(db_path)
    with sqlite3.connect(str(db_path)) as connection:
        connection.executemany(
            "INSERT INTO teachers (id, first_name, last_name, status) VALUES (?, ?, ?, ?)",
            [(t.id, t.first_name, t.last_name, t.status) for t in data.teachers],
        )
        connection.executemany(
            "INSERT INTO classes (id, name) VALUES (?, ?)",
            [(c.id, c.name) for c in data.classes],
        )
        connection.executemany(
            "INSERT INTO schedule_entries "
            "(id, teacher_id, teacher_name, class_id, subject, day_of_week, start_time, end_time, hours) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            [
                (r.id, r.teacher_id, r.teacher_name, r.class_id, r.subject,
                 r.day_of_week, r.start_time, r.end_time, r.hours)
                for r in data.schedule_entries
            ],
        )
    connection.close()
