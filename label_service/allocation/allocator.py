"""
Monotonic code allocation against the label ledger.

Numbering is per prefix and per code width: the next number for "T" at
width 6 is one past the largest "T" suffix ever issued at width 6, no
matter what other prefixes or widths hold.
"""

import re

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from label_service.config import settings
from label_service.database import LabelStore
from label_service.errors import ExhaustionError, PersistenceError, ValidationError
from label_service.logger import get_logger
from label_service.models.ledger import LabelRecord

logger = get_logger(__name__)

PREFIX_PATTERN = re.compile(r"^[A-Z0-9]{1,3}$")


class CodeAllocator:
    """Issues contiguous, never-reused blocks of codes for a prefix."""

    def __init__(
        self,
        store: LabelStore,
        width: int | None = None,
        separator: str | None = None,
        max_batch_size: int | None = None
    ):
        self.store = store
        self.width = width if width is not None else settings.code_width
        self.separator = separator if separator is not None else settings.code_separator
        self.max_batch_size = max_batch_size if max_batch_size is not None else settings.max_batch_size

        if self.width not in (5, 6):
            raise ValueError(f"Unsupported code width: {self.width}")

        self._code_pattern = re.compile(
            rf"^([A-Z0-9]{{1,3}}){re.escape(self.separator)}(\d{{{self.width}}})$"
        )

    @property
    def max_number(self) -> int:
        return 10 ** self.width - 1

    def normalize_prefix(self, prefix: str) -> str:
        """
        Strip and upper-case a prefix, then check it against the allowed pattern.

        Raises:
            ValidationError: If the prefix is not 1-3 letters/digits
        """
        if not isinstance(prefix, str):
            raise ValidationError(
                "Prefix must be a string",
                error_code="INVALID_PREFIX",
                details={"prefix": prefix}
            )

        stripped = prefix.strip()
        # str.upper() can turn non-ASCII letters into ASCII ones ("ß" -> "SS")
        normalized = stripped.upper() if stripped.isascii() else stripped
        if not PREFIX_PATTERN.match(normalized):
            raise ValidationError(
                "Prefix must be 1-3 letters or digits",
                error_code="INVALID_PREFIX",
                details={"prefix": prefix}
            )
        return normalized

    def _validate_count(self, count: int) -> None:
        # bool is an int subclass; True must not mean "one label"
        if not isinstance(count, int) or isinstance(count, bool):
            raise ValidationError(
                "Count must be an integer",
                error_code="INVALID_COUNT",
                details={"count": count}
            )
        if count < 1 or count > self.max_batch_size:
            raise ValidationError(
                f"Count must be between 1 and {self.max_batch_size}",
                error_code="INVALID_COUNT",
                details={"count": count, "max_batch_size": self.max_batch_size}
            )

    def format_code(self, prefix: str, number: int) -> str:
        """Format PREFIX + separator + zero-padded number, e.g. T-000042."""
        return f"{prefix}{self.separator}{number:0{self.width}d}"

    def parse_code(self, code: str) -> tuple[str, int]:
        """
        Split a code into (prefix, number).

        Raises:
            ValidationError: If the code does not match this allocator's format
        """
        match = self._code_pattern.match(code or "")
        if not match:
            raise ValidationError(
                f"Not a valid code: {code!r}",
                error_code="INVALID_CODE",
                details={"code": code, "width": self.width}
            )
        return match.group(1), int(match.group(2))

    def _current_max(self, session, prefix: str) -> int | None:
        stmt = (
            select(func.max(LabelRecord.number))
            .where(LabelRecord.prefix == prefix)
            .where(LabelRecord.width == self.width)
        )
        return session.execute(stmt).scalar()

    def allocate(self, prefix: str, count: int) -> list[str]:
        """
        Atomically reserve the next `count` codes for `prefix`.

        Args:
            prefix: 1-3 character prefix (normalized to upper case)
            count: Number of codes, 1..max_batch_size

        Returns:
            Ordered list of newly issued codes

        Raises:
            ValidationError: Bad prefix or count (ledger untouched)
            ExhaustionError: Batch would pass the width's maximum (nothing committed)
            PersistenceError: Storage failure (nothing committed)

        Example:
            >>> allocator.allocate("T", 3)
            ['T-000001', 'T-000002', 'T-000003']
        """
        prefix = self.normalize_prefix(prefix)
        self._validate_count(count)

        try:
            with self.store.transaction() as session:
                current_max = self._current_max(session, prefix)
                start = (current_max or 0) + 1
                last = start + count - 1

                if last > self.max_number:
                    logger.warning("Code space exhausted", extra={
                        "prefix": prefix,
                        "width": self.width,
                        "requested": count,
                        "next_number": start,
                        "max_number": self.max_number
                    })
                    raise ExhaustionError(
                        f"Prefix {prefix} has {max(self.max_number - start + 1, 0)} codes left "
                        f"at width {self.width}; requested {count}",
                        details={
                            "prefix": prefix,
                            "width": self.width,
                            "requested": count,
                            "available": max(self.max_number - start + 1, 0)
                        }
                    )

                codes = [self.format_code(prefix, number) for number in range(start, last + 1)]
                session.add_all([
                    LabelRecord(prefix=prefix, number=start + i, width=self.width, code=code)
                    for i, code in enumerate(codes)
                ])

        except SQLAlchemyError as e:
            logger.error("Allocation transaction failed", extra={
                "prefix": prefix,
                "count": count,
                "error": str(e)
            }, exc_info=True)
            raise PersistenceError(
                "Allocation failed; no codes were issued",
                details={"prefix": prefix, "count": count}
            ) from e

        logger.info("Batch allocated", extra={
            "prefix": prefix,
            "count": count,
            "first": codes[0],
            "last": codes[-1]
        })

        return codes

    def peek_next(self, prefix: str) -> str:
        """Return the code the next allocation for `prefix` would start with, without reserving it."""
        prefix = self.normalize_prefix(prefix)

        try:
            with self.store.read_session() as session:
                current_max = self._current_max(session, prefix)
        except SQLAlchemyError as e:
            raise PersistenceError(
                "Failed to read label ledger",
                details={"prefix": prefix, "error": str(e)}
            ) from e

        next_number = (current_max or 0) + 1
        if next_number > self.max_number:
            raise ExhaustionError(
                f"Prefix {prefix} has no codes left at width {self.width}",
                details={"prefix": prefix, "width": self.width, "available": 0}
            )
        return self.format_code(prefix, next_number)

    def list_issued(self, prefix: str | None = None, limit: int = 100) -> list[dict]:
        """
        List issued codes, newest first.

        Args:
            prefix: Only codes with this prefix (any prefix if None)
            limit: Maximum rows returned

        Returns:
            List of ledger entries as dicts
        """
        if limit < 1:
            raise ValidationError(
                "Limit must be positive",
                error_code="INVALID_LIMIT",
                details={"limit": limit}
            )

        stmt = select(LabelRecord).where(LabelRecord.width == self.width)
        if prefix is not None:
            stmt = stmt.where(LabelRecord.prefix == self.normalize_prefix(prefix))
        stmt = stmt.order_by(LabelRecord.id.desc()).limit(limit)

        try:
            with self.store.read_session() as session:
                return [record.to_dict() for record in session.execute(stmt).scalars()]
        except SQLAlchemyError as e:
            raise PersistenceError(
                "Failed to read label ledger",
                details={"error": str(e)}
            ) from e
