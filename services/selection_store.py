"""
Per-weekday product selections.

A SelectionStore is an immutable value: every mutator returns a new store and
leaves the receiver untouched, so a reader holding the old store never sees a
half-applied change.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple, Union

from domain.entities import Product, SelectionEntry
from domain.enums import DeliveryWeekday

DayEntries = Mapping[int, SelectionEntry]
ProductRef = Union[Product, int]


def _check_day(day) -> DeliveryWeekday:
    if not isinstance(day, DeliveryWeekday):
        raise ValueError(f"{day!r} is not a delivery weekday")
    return day


def _product_id(product: ProductRef) -> int:
    return product.id if isinstance(product, Product) else product


class SelectionStore:
    """Quantities picked for each delivery weekday, keyed by product id."""

    __slots__ = ("_days",)

    def __init__(self, days: Optional[Mapping[DeliveryWeekday, DayEntries]] = None):
        source = days or {}
        for day in source:
            _check_day(day)
        self._days: Dict[DeliveryWeekday, Dict[int, SelectionEntry]] = {
            day: dict(source.get(day, {})) for day in DeliveryWeekday
        }

    @classmethod
    def _replacing(cls, base: "SelectionStore", day: DeliveryWeekday, entries: Dict[int, SelectionEntry]) -> "SelectionStore":
        # day maps are never mutated after construction, so sharing them is safe
        store = cls.__new__(cls)
        store._days = {**base._days, day: entries}
        return store

    # ---------- mutators (return a new store) ----------

    def increment(self, day: DeliveryWeekday, product: Product) -> "SelectionStore":
        day = _check_day(day)
        current = self._days[day].get(product.id)
        quantity = current.quantity + 1 if current else 1
        entries = dict(self._days[day])
        entries[product.id] = SelectionEntry(product=product, quantity=quantity)
        return self._replacing(self, day, entries)

    def decrement(self, day: DeliveryWeekday, product: ProductRef) -> "SelectionStore":
        day = _check_day(day)
        pid = _product_id(product)
        current = self._days[day].get(pid)
        if current is None:
            return self

        entries = dict(self._days[day])
        if current.quantity <= 1:
            del entries[pid]
        else:
            entries[pid] = SelectionEntry(product=current.product, quantity=current.quantity - 1)
        return self._replacing(self, day, entries)

    def copy(self, from_day: DeliveryWeekday, to_day: DeliveryWeekday) -> "SelectionStore":
        """Overwrite to_day with a snapshot of from_day. Not a merge."""
        from_day = _check_day(from_day)
        to_day = _check_day(to_day)
        return self._replacing(self, to_day, dict(self._days[from_day]))

    def clear(self) -> "SelectionStore":
        return SelectionStore()

    # ---------- readers ----------

    def quantity_of(self, day: DeliveryWeekday, product: ProductRef) -> int:
        entry = self._days[_check_day(day)].get(_product_id(product))
        return entry.quantity if entry else 0

    def entries(self, day: DeliveryWeekday) -> Mapping[int, SelectionEntry]:
        return MappingProxyType(self._days[_check_day(day)])

    def items_on(self, days: Iterable[DeliveryWeekday]) -> int:
        return sum(
            entry.quantity for day in days for entry in self._days[_check_day(day)].values()
        )

    def total_items_across_days(self) -> int:
        return self.items_on(DeliveryWeekday)

    def is_empty(self, days: Optional[Iterable[DeliveryWeekday]] = None) -> bool:
        return self.items_on(DeliveryWeekday if days is None else days) == 0

    def products(self) -> Tuple[Product, ...]:
        """Distinct products referenced on any day."""
        seen: Dict[int, Product] = {}
        for entries in self._days.values():
            for pid, entry in entries.items():
                seen.setdefault(pid, entry.product)
        return tuple(seen.values())

    def snapshot(self) -> Dict[DeliveryWeekday, Tuple[SelectionEntry, ...]]:
        """Entries per day ordered by product name, for persistence and display."""
        return {
            day: tuple(sorted(entries.values(), key=lambda e: (e.product.name, e.product.id)))
            for day, entries in self._days.items()
        }

    def as_dict(self) -> Dict[str, Dict[int, int]]:
        return {
            day.value: {pid: entry.quantity for pid, entry in entries.items()}
            for day, entries in self._days.items()
        }

    def __eq__(self, other) -> bool:
        if not isinstance(other, SelectionStore):
            return NotImplemented
        return self._days == other._days

    def __repr__(self) -> str:
        return f"SelectionStore({self.as_dict()!r})"
