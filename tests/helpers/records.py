"""Record types and an in-memory store shared by the domain tests."""

from __future__ import annotations

from dataclasses import dataclass
from itertools import count
from typing import TYPE_CHECKING, Self

from pydantic import BaseModel, Field, model_validator

from relsync.domain.model import RECORD_ERROR_KEY, BaseRecord
from relsync.domain.record import Record
from relsync.domain.relations import Link, has_many

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence


class LineRules(BaseModel):
    order_id: int
    sku: str = Field(min_length=1)
    quantity: int = Field(ge=1)


@dataclass(eq=False, kw_only=True)
class OrderLine(BaseRecord):
    order_id: int | None = None
    sku: str | None = None
    quantity: int = 1
    status: str | None = None

    Rules = LineRules


@dataclass(eq=False, kw_only=True)
class OrderNote(BaseRecord):
    order_id: int | None = None
    name: str | None = None


@dataclass(eq=False, kw_only=True)
class Order(Record):
    customer: str | None = None

    lines = has_many(OrderLine, link=Link(foreign_key="order_id"))
    notes = has_many("OrderNote", link="order_id", keep_updated=False)


class WindowRules(BaseModel):
    earliest: int = Field(ge=0)
    latest: int = Field(ge=0)

    @model_validator(mode="after")
    def check_order(self) -> Self:
        if self.earliest > self.latest:
            raise ValueError("earliest must not exceed latest")
        return self


@dataclass(eq=False, kw_only=True)
class DeliveryWindow(BaseRecord):
    route_id: int | None = None
    earliest: int = 0
    latest: int = 0

    Rules = WindowRules


@dataclass(eq=False, kw_only=True)
class Route(Record):
    name: str | None = None

    windows = has_many(DeliveryWindow, link="route_id")


def make_lines(*skus: str, status: str | None = None) -> list[OrderLine]:
    return [OrderLine(sku=sku, status=status) for sku in skus]


class InMemoryRecordStore:
    """Dictionary-backed store that assigns ids and records every call."""

    def __init__(self) -> None:
        self.rows: dict[tuple[type[BaseRecord], object], BaseRecord] = {}
        self.persisted: list[BaseRecord] = []
        self.removed: list[BaseRecord] = []
        self.queries: list[tuple[type[BaseRecord], dict[str, object]]] = []
        self._failing: list[BaseRecord] = []
        self._ids = count(1)

    def fail_on(self, *records: BaseRecord) -> None:
        self._failing.extend(records)

    def _fails(self, record: BaseRecord) -> bool:
        return any(candidate is record for candidate in self._failing)

    def add[TRecord: BaseRecord](self, record: TRecord) -> TRecord:
        """Seed ``record`` as already stored, without counting a persist call."""

        if record.is_new:
            setattr(record, record.PRIMARY_KEY, next(self._ids))
        self.rows[(type(record), record.primary_key)] = record
        return record

    def persist(
        self,
        record: BaseRecord,
        attribute_names: Sequence[str] | None = None,
    ) -> bool:
        _ = attribute_names
        self.persisted.append(record)
        if self._fails(record):
            record.add_error(RECORD_ERROR_KEY, "storage unavailable")
            return False
        self.add(record)
        return True

    def remove(self, record: BaseRecord) -> bool:
        self.removed.append(record)
        if self._fails(record):
            record.add_error(RECORD_ERROR_KEY, "storage unavailable")
            return False
        self.rows.pop((type(record), record.primary_key), None)
        return True

    def find_all[TRecord: BaseRecord](
        self,
        record_type: type[TRecord],
        criteria: Mapping[str, object],
    ) -> list[TRecord]:
        self.queries.append((record_type, dict(criteria)))
        return [  # pyright: ignore[reportReturnType]
            record
            for (stored_type, _), record in self.rows.items()
            if stored_type is record_type
            and all(getattr(record, name) == value for name, value in criteria.items())
        ]
