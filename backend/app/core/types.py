"""Column types shared by the e-Voting models"""
import uuid

from sqlalchemy import TypeDecorator, String


def generate_uuid() -> str:
    """Primary key for a new row"""
    return str(uuid.uuid4())


class GUID(TypeDecorator):
    """
    Identifier column stored as VARCHAR(36) on both SQLite and PostgreSQL.

    Ids reach the API as path parameters and form fields, so bound values
    are coerced to lower-case strings before comparison.
    """
    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(value).strip().lower()

    def process_result_value(self, value, dialect):
        return None if value is None else str(value)
