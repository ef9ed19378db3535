"""Classification of database integrity errors."""

from sqlalchemy.exc import IntegrityError

# Postgres SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when the error came from a unique constraint, not NOT NULL or FK checks."""
    orig = exc.orig
    if getattr(orig, "sqlstate", None) == UNIQUE_VIOLATION:
        return True
    return "unique constraint" in str(orig).lower()
