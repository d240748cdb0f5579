import pytest

from employee_service.common.deadline import Deadline, collaborator_call
from employee_service.core.exceptions import OperationTimeout
from employee_service.database.connection import DBConfig
from employee_service.database.mysql_base import db_cursor


class FakeTimer:
    def __init__(self):
        self.value = 100.0

    def __call__(self):
        return self.value


class RecordingCursor:
    def __init__(self):
        self.statements = []

    def execute(self, sql, params=None):
        self.statements.append(sql)

    def close(self):
        pass


class RecordingConnection:
    def __init__(self):
        self.cursor_obj = RecordingCursor()
        self.committed = False

    def cursor(self, dictionary=True):
        return self.cursor_obj

    def commit(self):
        self.committed = True

    def rollback(self):
        pass

    def close(self):
        pass


class RecordingFactory:
    def __init__(self, statement_timeout=5.0):
        self.config = DBConfig(
            host="db", port=3306, user="app", password="", database="employee_db",
            statement_timeout=statement_timeout,
        )
        self.connection = RecordingConnection()
        self.timeouts = []

    def connect(self, *, database=True, timeout=None):
        self.timeouts.append(timeout)
        return self.connection


def test_session_limits_follow_configured_timeout_without_deadline():
    factory = RecordingFactory()

    with db_cursor(factory) as (_, cur):
        cur.execute("SELECT 1")

    assert factory.timeouts == [5.0]
    assert factory.connection.cursor_obj.statements == [
        "SET SESSION MAX_EXECUTION_TIME=5000",
        "SET SESSION innodb_lock_wait_timeout=5",
        "SELECT 1",
    ]
    assert factory.connection.committed


def test_session_limits_are_capped_by_remaining_deadline():
    factory = RecordingFactory()
    timer = FakeTimer()
    deadline = Deadline(4, timer=timer)
    timer.value += 1.5

    with collaborator_call("find employee", deadline):
        with db_cursor(factory):
            pass

    assert factory.timeouts == [pytest.approx(2.5)]
    assert factory.connection.cursor_obj.statements == [
        "SET SESSION MAX_EXECUTION_TIME=2500",
        "SET SESSION innodb_lock_wait_timeout=3",
    ]


def test_no_connection_once_budget_is_spent():
    factory = RecordingFactory()
    timer = FakeTimer()
    deadline = Deadline(1, timer=timer)

    with pytest.raises(OperationTimeout):
        with collaborator_call("find employee", deadline):
            timer.value += 1
            with db_cursor(factory):
                pass

    assert factory.timeouts == []
