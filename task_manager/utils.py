"""Small helpers shared by models, schemas and routes."""

from datetime import datetime, timezone

from werkzeug.routing import IntegerConverter


LIKE_ESCAPE = "\\"

# Largest value an INTEGER primary key column can hold on PostgreSQL
MAX_DB_INT = 2**31 - 1


class IdConverter(IntegerConverter):
    """``<id:name>`` URL converter for primary keys.

    Values outside ``1..MAX_DB_INT`` do not match the rule, so they 404
    like any other malformed id.
    """

    def __init__(self, map, *args, **kwargs):
        kwargs.setdefault("min", 1)
        kwargs.setdefault("max", MAX_DB_INT)
        super().__init__(map, *args, **kwargs)


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values are assumed UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to a stored naive datetime."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def like_pattern(term: str) -> str:
    """Build a substring LIKE pattern that matches ``term`` literally.

    Pair with ``escape=LIKE_ESCAPE`` on the column operator.
    """
    escaped = (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"
