from __future__ import annotations

import pytest

from jobly.sql.helpers import (
    bind_positional,
    parse_sql_operation,
    quote_identifier,
    validate_identifier,
)


@pytest.mark.parametrize("name", ["handle", "num_employees", "_private", "a1"])
def test_validate_identifier_accepts_plain_names(name: str) -> None:
    assert validate_identifier(name, "column") == name


@pytest.mark.parametrize("name", ["", "1col", "first name", 'a"b', "x;--", "a-b"])
def test_validate_identifier_rejects_unsafe_names(name: str) -> None:
    with pytest.raises(ValueError):
        validate_identifier(name, "column")


def test_validate_identifier_rejects_non_strings() -> None:
    with pytest.raises(TypeError):
        validate_identifier(42, "column")  # type: ignore[arg-type]


def test_validate_identifier_enforces_length_limit() -> None:
    assert validate_identifier("a" * 63) == "a" * 63
    with pytest.raises(ValueError):
        validate_identifier("a" * 64)


def test_quote_identifier() -> None:
    assert quote_identifier("logo_url") == '"logo_url"'


def test_bind_positional_rewrites_placeholders() -> None:
    sql, params = bind_positional(
        'UPDATE companies SET "name"=$1, "logo_url"=$2 WHERE handle = $3',
        ["Acme", None, "acme"],
    )

    assert sql == 'UPDATE companies SET "name"=:p1, "logo_url"=:p2 WHERE handle = :p3'
    assert params == {"p1": "Acme", "p2": None, "p3": "acme"}


def test_bind_positional_handles_double_digits() -> None:
    values = list(range(12))
    sql, params = bind_positional("SELECT $1, $10, $12", values)

    assert sql == "SELECT :p1, :p10, :p12"
    assert params["p10"] == 9
    assert params["p12"] == 11


def test_bind_positional_rejects_unbound_placeholder() -> None:
    with pytest.raises(ValueError):
        bind_positional("SELECT * FROM jobs WHERE id = $2", [1])


def test_bind_positional_rejects_zero() -> None:
    with pytest.raises(ValueError):
        bind_positional("SELECT $0", [1])


@pytest.mark.parametrize(
    "sql, expected",
    [
        ("INSERT INTO companies (handle) VALUES ($1)", ("companies", "insert")),
        ('UPDATE "jobs" SET "title"=$1 WHERE id = $2', ("jobs", "update")),
        ("DELETE FROM users WHERE username = $1", ("users", "delete")),
        ("SELECT handle,\n name\n FROM companies\n ORDER BY name", ("companies", "select")),
        ("VACUUM", ("unknown", "unknown")),
    ],
)
def test_parse_sql_operation(sql: str, expected: tuple[str, str]) -> None:
    assert parse_sql_operation(sql) == expected
