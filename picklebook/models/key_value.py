"""Key/value row backing the SQL storage adapter.

One row per storage key. Values are opaque strings (JSON documents written
by the mock booking engine and the cache).
"""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from picklebook.models.base import Base, TimestampMixin


class KeyValue(TimestampMixin, Base):
    __tablename__ = "key_value_store"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<KeyValue {self.key}>"
