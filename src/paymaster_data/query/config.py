"""Immutable query configuration plus pagination checks."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Literal

from pydantic import BaseModel

OrderDirection = Literal["asc", "desc"]

DEFAULT_LIMIT = 100
MAX_SAFE_LIMIT = 1000
ORDER_DIRECTIONS: frozenset[str] = frozenset({"asc", "desc"})


class Message(BaseModel):
    """Structured message produced while normalizing builder input."""

    code: str
    severity: Literal["info", "warning", "error"]
    detail: str
    context: dict[str, object] | None = None


@dataclass(frozen=True)
class PageCheck:
    """Outcome of validating a limit or offset, with messages."""

    applied: int
    messages: list[Message] = field(default_factory=list)
    has_error: bool = False


@dataclass(frozen=True)
class QueryLimits:
    """Page-size bounds shared by every builder created from one client."""

    default_limit: int = DEFAULT_LIMIT
    max_limit: int = MAX_SAFE_LIMIT

    @classmethod
    def from_config(cls, cfg: object) -> QueryLimits:
        """
        Build limits from configuration objects exposing default_limit/max_limit.

        Parameters
        ----------
        cfg :
            Configuration object with optional `default_limit` and `max_limit` attributes.

        Returns
        -------
        QueryLimits
            Limits derived from the provided configuration.
        """
        default = getattr(cfg, "default_limit", cls.default_limit)
        maximum = getattr(cfg, "max_limit", cls.max_limit)
        return cls(default_limit=int(default), max_limit=int(maximum))


def check_limit_value(requested: int, *, max_limit: int) -> PageCheck:
    """
    Validate a requested page size, returning messages instead of raising.

    Parameters
    ----------
    requested:
        Requested number of records.
    max_limit:
        Maximum allowable page size.

    Returns
    -------
    PageCheck
        Applied limit plus any messages. Oversized values are kept as requested and
        only flagged with a warning; ``has_error`` is set for negative input.
    """
    if requested < 0:
        return PageCheck(
            applied=0,
            messages=[
                Message(
                    code="limit_invalid",
                    severity="error",
                    detail="limit must be non-negative",
                    context={"requested": requested},
                )
            ],
            has_error=True,
        )
    if requested > max_limit:
        return PageCheck(
            applied=requested,
            messages=[
                Message(
                    code="limit_above_max",
                    severity="warning",
                    detail=f"Requested {requested} rows; the safe maximum is {max_limit}.",
                    context={"requested": requested, "max": max_limit},
                )
            ],
        )
    return PageCheck(applied=requested)


def check_offset_value(offset: int) -> PageCheck:
    """
    Validate an offset, returning messaging instead of raising.

    Parameters
    ----------
    offset:
        Requested number of records to skip.

    Returns
    -------
    PageCheck
        Applied offset and any validation messages.
    """
    if offset < 0:
        return PageCheck(
            applied=0,
            messages=[
                Message(
                    code="offset_invalid",
                    severity="error",
                    detail="skip must be non-negative",
                    context={"requested": offset},
                )
            ],
            has_error=True,
        )
    return PageCheck(applied=offset)


def _freeze(where: Mapping[str, object]) -> Mapping[str, object]:
    return MappingProxyType(dict(where))


@dataclass(frozen=True)
class QueryConfig:
    """
    Pagination, ordering, field selection and predicates for one query.

    Instances are never mutated; every ``with_*`` method returns a new value so a
    builder can hand its configuration to a clone without aliasing.
    """

    order_by: str
    order_direction: OrderDirection
    first: int = DEFAULT_LIMIT
    skip: int = 0
    selected_fields: tuple[str, ...] | None = None
    where: Mapping[str, object] = field(default_factory=lambda: _freeze({}))

    def __post_init__(self) -> None:
        if not isinstance(self.where, MappingProxyType):
            object.__setattr__(self, "where", _freeze(self.where))

    def with_where(self, updates: Mapping[str, object]) -> QueryConfig:
        """
        Merge predicate keys; later values win and ``None`` removes a key.

        Returns
        -------
        QueryConfig
            Configuration carrying the merged predicate map.
        """
        merged = dict(self.where)
        for key, value in updates.items():
            if value is None:
                merged.pop(key, None)
            else:
                merged[key] = value
        return replace(self, where=_freeze(merged))

    def with_order(self, order_by: str, direction: OrderDirection) -> QueryConfig:
        """Return a copy ordered by ``order_by`` in ``direction``."""
        return replace(self, order_by=order_by, order_direction=direction)

    def with_page(self, *, first: int | None = None, skip: int | None = None) -> QueryConfig:
        """Return a copy with updated pagination values."""
        return replace(
            self,
            first=self.first if first is None else first,
            skip=self.skip if skip is None else skip,
        )

    def with_fields(self, fields: tuple[str, ...] | None) -> QueryConfig:
        """Return a copy selecting ``fields`` (``None`` restores the entity default)."""
        return replace(self, selected_fields=fields)
