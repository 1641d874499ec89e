import mysql.connector
from mysql.connector import errorcode

from class_attendance.database.bootstrap import _strip_create_db_and_use, iter_sql_statements
from class_attendance.database.mysql_base import is_deadlock, is_duplicate_key, placeholders


def test_splitter_keeps_semicolons_inside_quotes():
    sql = "INSERT INTO t VALUES ('a;b'); SELECT 1;\nSELECT \"x;y\""

    assert list(iter_sql_statements(sql)) == ["INSERT INTO t VALUES ('a;b')", "SELECT 1", 'SELECT "x;y"']


def test_create_database_and_use_are_stripped():
    sql = "CREATE DATABASE IF NOT EXISTS foo;\nUSE foo;\nCREATE TABLE t (id INT);"

    assert list(iter_sql_statements(_strip_create_db_and_use(sql))) == ["CREATE TABLE t (id INT)"]


def test_duplicate_key_detection():
    dup = mysql.connector.IntegrityError(msg="Duplicate entry", errno=errorcode.ER_DUP_ENTRY)
    fk = mysql.connector.IntegrityError(msg="FK fails", errno=errorcode.ER_NO_REFERENCED_ROW_2)

    assert is_duplicate_key(dup)
    assert not is_duplicate_key(fk)
    assert not is_duplicate_key(ValueError("nope"))


def test_deadlock_detection():
    deadlock = mysql.connector.errors.InternalError(msg="Deadlock found", errno=errorcode.ER_LOCK_DEADLOCK)
    dup = mysql.connector.IntegrityError(msg="Duplicate entry", errno=errorcode.ER_DUP_ENTRY)

    assert is_deadlock(deadlock)
    assert not is_deadlock(dup)
    assert not is_deadlock(RuntimeError("nope"))


def test_placeholders():
    assert placeholders(3) == "%s,%s,%s"
