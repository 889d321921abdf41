import logging

import pytest
from sqlalchemy.exc import SQLAlchemyError

from db.executor import ExecuteResult


def test_execute_returns_id_from_returning_row(executor):
    result = executor.execute(
        "INSERT INTO entities (entity_type, data) VALUES (:t, :d) RETURNING id",
        {"t": "Widget", "d": "{}"},
    )

    assert isinstance(result, ExecuteResult)
    assert result.last_insert_id == 1


def test_execute_falls_back_to_driver_lastrowid(executor):
    executor.execute("INSERT INTO entities (entity_type, data) VALUES (:t, :d)", {"t": "Widget", "d": "{}"})
    result = executor.execute("INSERT INTO entities (entity_type, data) VALUES (:t, :d)", {"t": "Widget", "d": "{}"})

    assert result.last_insert_id == 2


def test_query_returns_dict_rows(executor):
    executor.execute("INSERT INTO entities (entity_type, data) VALUES (:t, :d)", {"t": "Widget", "d": '{"a": 1}'})

    rows = executor.query("SELECT id, entity_type FROM entities WHERE entity_type = :t", {"t": "Widget"})

    assert rows == [{"id": 1, "entity_type": "Widget"}]
    assert executor.query("SELECT id FROM entities WHERE entity_type = :t", {"t": "Nope"}) == []


def test_run_reports_affected_rows(executor):
    for _ in range(3):
        executor.execute("INSERT INTO entities (entity_type, data) VALUES (:t, :d)", {"t": "Widget", "d": "{}"})

    assert executor.run("DELETE FROM entities WHERE entity_type = :t", {"t": "Widget"}) == 3
    assert executor.run("DELETE FROM entities WHERE entity_type = :t", {"t": "Widget"}) == 0


def test_parameters_are_bound_not_interpolated(executor):
    hostile = "Widget'; DROP TABLE entities; --"
    executor.execute("INSERT INTO entities (entity_type, data) VALUES (:t, :d)", {"t": hostile, "d": "{}"})

    rows = executor.query("SELECT entity_type FROM entities")

    assert rows == [{"entity_type": hostile}]


def test_driver_errors_are_logged_and_reraised(executor, caplog):
    with caplog.at_level(logging.ERROR, logger="db.executor"):
        with pytest.raises(SQLAlchemyError):
            executor.query("SELECT * FROM no_such_table")

    assert "QUERY failed" in caplog.text
