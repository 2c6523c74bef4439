"""
Declarative Base shared by all ORM models.
"""
from sqlalchemy.orm import declarative_base

Base = declarative_base()

LIKE_ESCAPE = "\\"


def contains_pattern(text: str) -> str:
    """Lowercased LIKE pattern matching text anywhere; % and _ match literally"""
    escaped = (
        text.lower()
        .replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"
