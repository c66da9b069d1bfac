"""Shared fixtures: snapshot builder, temporary database and Flask client."""
from __future__ import annotations

import pytest

import config
from feedback_analytics.models import FeedbackSnapshot, init_db


def _snapshot_record(**overrides):
    record = {
        "studentId": "STU1",
        "facultyId": "F1",
        "facultyName": "Dr. Meera Rao",
        "subjectId": "SUB1",
        "subjectName": "DBMS",
        "subjectAbbreviation": "DBMS",
        "departmentId": "D1",
        "departmentName": "Computer Engineering",
        "departmentAbbreviation": "CE",
        "divisionId": "DIV1",
        "divisionName": "A",
        "batch": None,
        "academicYearId": "AY1",
        "academicYearString": "2024-25",
        "semesterNumber": 5,
        "questionCategoryName": "Teaching",
        "questionBatch": None,
        "responseValue": 8,
    }
    record.update(overrides)
    return record


@pytest.fixture
def snapshot_record():
    """Return a builder for camelCase snapshot records."""
    return _snapshot_record


@pytest.fixture
def make_snapshot():
    """Return a builder for FeedbackSnapshot objects with sensible defaults."""

    def _make(**overrides):
        return FeedbackSnapshot.from_dict(_snapshot_record(**overrides))

    return _make


@pytest.fixture
def db(tmp_path, monkeypatch):
    """Point the store at a fresh SQLite file."""
    monkeypatch.setattr(config, "DATABASE_PATH", str(tmp_path / "data" / "feedback.db"))
    init_db()
    return config.DATABASE_PATH


@pytest.fixture
def client(db):
    from app import app

    app.config["TESTING"] = True
    with app.test_client() as test_client:
        yield test_client
