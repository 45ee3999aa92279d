"""
ORM model for the append-only code ledger.
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class LabelRecord(Base):
    """One issued code. Rows are inserted once and never updated or deleted."""

    __tablename__ = "labels"

    id = Column(Integer, primary_key=True, autoincrement=True)
    prefix = Column(String(3), nullable=False)
    number = Column(Integer, nullable=False)
    # Digit width the code was formatted with; scopes numbering so a 5-digit
    # and a 6-digit scheme sharing a prefix never collide.
    width = Column(Integer, nullable=False)
    code = Column(String(16), nullable=False, unique=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("prefix", "width", "number", name="uix_prefix_width_number"),
        Index("ix_labels_prefix_width_number", "prefix", "width", "number"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "prefix": self.prefix,
            "number": self.number,
            "created_at": self.created_at,
        }

    def __repr__(self) -> str:
        return f"<LabelRecord {self.code}>"
