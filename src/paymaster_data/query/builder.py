"""Generic, entity-agnostic query builder.

Subclasses describe an entity declaratively (collection, default ordering,
default fields, numeric allow-list, predicate table); this module owns
rendering, execution through the injected transport, and decoding.

Fluent methods mutate the receiver and return it. Derived read operations on
subclasses always work on :meth:`BaseQueryBuilder.clone` so the caller's
builder keeps its configuration.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import ClassVar, Self, cast

from paymaster_data import errors
from paymaster_data.numeric.codec import decode_by_field_list
from paymaster_data.query.config import (
    ORDER_DIRECTIONS,
    OrderDirection,
    QueryConfig,
    QueryLimits,
    check_limit_value,
    check_offset_value,
)
from paymaster_data.query.observability import QueryObservability, observe_call
from paymaster_data.query.predicates import IDENTIFIER, PredicateTable, render_predicates
from paymaster_data.transport import DataEnvelope, QueryTransport

LOG = logging.getLogger("paymaster_data.query")

_FIELD_SELECTION = re.compile(r"^[A-Za-z0-9_{}\s]+$")


@dataclass(frozen=True)
class RenderedQuery:
    """Wire query document plus its variables."""

    query: str
    variables: dict[str, object]


def _transport_name(transport: QueryTransport) -> str:
    return str(getattr(transport, "name", type(transport).__name__))


def _validate_selection(selection: str) -> None:
    if not _FIELD_SELECTION.match(selection) or selection.count("{") != selection.count("}"):
        message = f"Invalid field selection: {selection!r}"
        raise errors.invalid_argument(message, field=selection)


def _require_int(value: object, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        message = f"{name} must be an integer"
        raise errors.invalid_argument(message, requested=repr(value))
    return value


class BaseQueryBuilder[T]:
    """
    Fluent builder rendering and executing one entity collection query.

    Parameters
    ----------
    transport:
        Async callable ``(query, variables) -> data envelope``.
    limits:
        Default and safe maximum page sizes.
    observability:
        Optional per-call structured logging.
    config:
        Starting configuration; defaults to the entity's defaults.
    """

    collection: ClassVar[str]
    default_order_by: ClassVar[str]
    default_order_direction: ClassVar[OrderDirection] = "desc"
    default_fields: ClassVar[tuple[str, ...]]
    numeric_fields: ClassVar[frozenset[str]] = frozenset()
    predicates: ClassVar[PredicateTable] = {}

    def __init__(
        self,
        transport: QueryTransport,
        *,
        limits: QueryLimits | None = None,
        observability: QueryObservability | None = None,
        config: QueryConfig | None = None,
    ) -> None:
        self._transport = transport
        self._limits = limits or QueryLimits()
        self._observability = observability
        self._config = config or self._default_config()

    def _default_config(self) -> QueryConfig:
        return QueryConfig(
            order_by=self.default_order_by,
            order_direction=self.default_order_direction,
            first=self._limits.default_limit,
        )

    @property
    def config(self) -> QueryConfig:
        """Current immutable configuration."""
        return self._config

    @property
    def query_name(self) -> str:
        """Operation name used in the rendered document."""
        return f"Get{self.collection[0].upper()}{self.collection[1:]}"

    # Fluent configuration

    def where(self, predicates: Mapping[str, object]) -> Self:
        """
        Merge predicate keys into the where-map.

        Later calls overwrite earlier values for the same key and ``None`` removes a
        key. Keys the entity does not declare are kept but never rendered; a warning
        is logged so typos are visible.

        Returns
        -------
        Self
            This builder, for chaining.

        Raises
        ------
        errors.QueryValidationError
            When a value cannot be converted to its key's wire type.
        """
        unknown = sorted(key for key in predicates if key not in self.predicates)
        if unknown:
            LOG.warning(
                "Ignoring unsupported %s predicate keys: %s", self.collection, ", ".join(unknown)
            )
        for key, value in predicates.items():
            spec = self.predicates.get(key)
            if spec is not None and value is not None:
                spec.transform(value)
        self._config = self._config.with_where(predicates)
        return self

    def order_by(self, field: str, direction: OrderDirection = "desc") -> Self:
        """
        Order results by ``field``; replaces any previous ordering.

        Returns
        -------
        Self
            This builder, for chaining.

        Raises
        ------
        errors.QueryValidationError
            When the field is not an identifier or the direction is unknown.
        """
        if not IDENTIFIER.match(field):
            message = f"Invalid order field: {field!r}"
            raise errors.invalid_argument(message, field=field)
        if direction not in ORDER_DIRECTIONS:
            message = f"Invalid order direction: {direction!r}"
            raise errors.invalid_argument(message, direction=direction)
        self._config = self._config.with_order(field, direction)
        return self

    def limit(self, count: int) -> Self:
        """
        Set the page size (``first``).

        Returns
        -------
        Self
            This builder, for chaining.

        Raises
        ------
        errors.QueryValidationError
            When ``count`` is negative or not an integer.
        """
        checked = check_limit_value(_require_int(count, "limit"), max_limit=self._limits.max_limit)
        if checked.has_error:
            raise errors.invalid_argument(checked.messages[0].detail, requested=count)
        for message in checked.messages:
            LOG.warning(message.detail)
        self._config = self._config.with_page(first=checked.applied)
        return self

    def skip(self, count: int) -> Self:
        """
        Set the number of records to skip.

        Returns
        -------
        Self
            This builder, for chaining.

        Raises
        ------
        errors.QueryValidationError
            When ``count`` is negative or not an integer.
        """
        checked = check_offset_value(_require_int(count, "skip"))
        if checked.has_error:
            raise errors.invalid_argument(checked.messages[0].detail, requested=count)
        self._config = self._config.with_page(skip=checked.applied)
        return self

    def select(self, fields: Iterable[str]) -> Self:
        """
        Replace the default field block with an explicit selection.

        Returns
        -------
        Self
            This builder, for chaining.

        Raises
        ------
        errors.QueryValidationError
            When no fields are given or a selection contains unsupported characters.
        """
        selection = tuple(fields)
        if not selection:
            message = "select() requires at least one field"
            raise errors.invalid_argument(message)
        for item in selection:
            _validate_selection(item)
        self._config = self._config.with_fields(selection)
        return self

    def clone(self) -> Self:
        """Return an independent builder with the same configuration."""
        return type(self)(
            self._transport,
            limits=self._limits,
            observability=self._observability,
            config=self._config,
        )

    def reset(self) -> Self:
        """Restore the entity's default configuration."""
        self._config = self._default_config()
        return self

    # Rendering

    def render(self) -> RenderedQuery:
        """
        Render the wire query document and variables for the current configuration.

        Returns
        -------
        RenderedQuery
            Query string with one declaration per active predicate, and its variables.
        """
        config = self._config
        rendered = render_predicates(self.predicates, config.where)
        declarations = ", ".join(["$first: Int!", "$skip: Int!", *rendered.declarations])
        arguments: list[str] = []
        if rendered.conditions:
            arguments.append(f"where: {{{', '.join(rendered.conditions)}}}")
        arguments.extend(
            [
                f"orderBy: {config.order_by}",
                f"orderDirection: {config.order_direction}",
                "first: $first",
                "skip: $skip",
            ]
        )
        fields = config.selected_fields or self.default_fields
        selection = "\n    ".join(fields)
        query = (
            f"query {self.query_name}({declarations}) {{\n"
            f"  {self.collection}({', '.join(arguments)}) {{\n"
            f"    {selection}\n"
            "  }\n"
            "}"
        )
        variables: dict[str, object] = {"first": config.first, "skip": config.skip}
        variables.update(rendered.variables)
        return RenderedQuery(query=query, variables=variables)

    # Execution

    async def execute(self) -> list[T]:
        """
        Execute the query and return decoded records.

        Returns
        -------
        list[T]
            Records with allow-listed numeric fields decoded to ``int``. An empty
            result is returned as an empty list.

        Raises
        ------
        errors.TransportError
            Propagated from the transport, or raised when the envelope does not hold a
            list of records for this collection.
        """
        rendered = self.render()
        config = self._config

        async def _run() -> list[T]:
            envelope = await self._transport(rendered.query, rendered.variables)
            return self._decode_envelope(envelope, config.first)

        return await observe_call(
            self._observability,
            entity=self.collection,
            transport=_transport_name(self._transport),
            first=config.first,
            skip=config.skip,
            func=_run,
        )

    def _decode_envelope(self, envelope: DataEnvelope, page_size: int) -> list[T]:
        payload = envelope.get(self.collection)
        if payload is None:
            return []
        if not isinstance(payload, list) or not all(isinstance(row, Mapping) for row in payload):
            message = f"Unexpected payload shape for {self.collection}"
            raise errors.transport_failure(message, collection=self.collection)
        records = [cast("T", decode_by_field_list(row, self.numeric_fields)) for row in payload]
        if page_size > 1 and len(records) == page_size:
            LOG.warning(
                "Query for %s returned %d records, equal to the page size; more may be available",
                self.collection,
                len(records),
            )
        return records

    async def first(self) -> T | None:
        """Return the first matching record or ``None``; the receiver is not modified."""
        records = await self.clone().limit(1).execute()
        return records[0] if records else None

    async def exists(self) -> bool:
        """Return whether any record matches the current predicates."""
        return await self.first() is not None

    async def count(self) -> int:
        """Return the number of records in the current page."""
        return len(await self.execute())
