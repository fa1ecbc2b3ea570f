"""
Market store: the snapshot every analytic pass reads from.

Provides a clean separation between:
- IndexStore: interest rate indices (curves + fixings) keyed by id and name
- ExchangeRateStore: spot FX quotes and triangulation
- MarketStore: reference date + local currency + both stores

Design principles:
- Built in a single-threaded phase, then read-only during pricing
- Cloned (copy) for scenarios; clones share curves and own their tables
- Rolled forward with advance_to_period / advance_to_date
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional
import logging

import pandas as pd

from .currencies import Currency
from .dates import Period, TimeUnit
from .errors import InvalidValueError, NotFoundError
from .exchange_rates import ExchangeRateStore
from .indices.base import InterestRateIndex

logger = logging.getLogger(__name__)


class IndexStore:
    """
    Indices keyed by integer id, with lookup by name.

    Attributes:
        reference_date: Every stored index must share this reference date
    """

    def __init__(self, reference_date: date):
        self.reference_date = reference_date
        self._indices: Dict[int, InterestRateIndex] = {}
        self._names: Dict[str, int] = {}

    def add_index(self, id: int, index: InterestRateIndex) -> None:
        """
        Register an index under an id.

        Raises:
            InvalidValueError: If the id is taken or the reference dates differ
        """
        if id in self._indices:
            raise InvalidValueError(f"Index id {id} already registered")
        if index.reference_date != self.reference_date:
            raise InvalidValueError(
                f"Index reference date {index.reference_date} does not match "
                f"store reference date {self.reference_date}"
            )
        self._indices[id] = index
        if index.name is not None:
            if index.name in self._names:
                logger.warning("Index name %s already registered, lookup by name returns id %s", index.name, id)
            self._names[index.name] = id

    def replace_index(self, id: int, index: InterestRateIndex) -> None:
        """Swap the index stored under an existing id (scenario tweaks)."""
        if id not in self._indices:
            raise NotFoundError(f"index {id}")
        del self._indices[id]
        self.add_index(id, index)

    def get_index(self, id: int) -> InterestRateIndex:
        """
        Raises:
            NotFoundError: If no index has this id
        """
        try:
            return self._indices[id]
        except KeyError:
            raise NotFoundError(f"index {id}") from None

    def get_index_by_name(self, name: str) -> InterestRateIndex:
        if name not in self._names:
            raise NotFoundError(f"index named {name}")
        return self._indices[self._names[name]]

    def get_index_map(self) -> Dict[str, int]:
        """Name -> id for every named index."""
        return dict(self._names)

    def get_all_indices(self) -> List[InterestRateIndex]:
        return [self._indices[k] for k in sorted(self._indices)]

    def ids(self) -> List[int]:
        return sorted(self._indices)

    def __len__(self) -> int:
        return len(self._indices)

    def __contains__(self, id: int) -> bool:
        return id in self._indices

    def advance_to_period(self, period: Period) -> "IndexStore":
        if period.length < 0:
            raise InvalidValueError(f"Cannot advance indices by a negative period ({period})")
        return self.advance_to_date(self.reference_date + period)

    def advance_to_date(self, d: date) -> "IndexStore":
        """New store whose indices are all rolled to d."""
        if d < self.reference_date:
            raise InvalidValueError(f"Date {d} is before reference date {self.reference_date}")
        store = IndexStore(d)
        for id in self.ids():
            store.add_index(id, self._indices[id].advance_to_date(d))
        return store

    def copy(self) -> "IndexStore":
        store = IndexStore(self.reference_date)
        for id in self.ids():
            store.add_index(id, self._indices[id].copy())
        return store


@dataclass
class MarketStore:
    """
    Market snapshot: indices, FX quotes and the local (reporting) currency.

    This is the single source of truth for market data; models resolve
    market requests against it.

    Attributes:
        reference_date: Valuation date
        local_currency: Currency every present value is reported in
        exchange_rate_store: FX quotes
        index_store: Interest rate indices
    """
    reference_date: date
    local_currency: Currency
    exchange_rate_store: Optional[ExchangeRateStore] = None
    index_store: Optional[IndexStore] = None
    metadata: Dict = field(default_factory=dict)

    def __post_init__(self):
        """Set defaults."""
        if self.exchange_rate_store is None:
            self.exchange_rate_store = ExchangeRateStore(self.reference_date)
        if self.index_store is None:
            self.index_store = IndexStore(self.reference_date)

    def add_index(self, id: int, index: InterestRateIndex) -> None:
        self.index_store.add_index(id, index)

    def get_index(self, id: int) -> InterestRateIndex:
        return self.index_store.get_index(id)

    def add_exchange_rate(self, first: Currency, second: Currency, rate: float) -> None:
        self.exchange_rate_store.add_exchange_rate(first, second, rate)

    def get_exchange_rate(self, first: Currency, second: Optional[Currency] = None) -> float:
        """Price of one `second` (local currency by default) in units of `first`."""
        return self.exchange_rate_store.get_exchange_rate(first, second or self.local_currency)

    def advance_to_period(self, period: Period) -> "MarketStore":
        """
        Snapshot at reference_date + period.

        Curves are rebased, indices receive synthesized fixings and FX quotes
        move by the ratio of the currencies' discount factors.

        Raises:
            InvalidValueError: For negative periods
        """
        if period.length < 0:
            raise InvalidValueError(
                f"Negative periods are not allowed when advancing market store in time ({period})"
            )
        new_reference_date = self.reference_date + period
        logger.debug("Advancing market store %s -> %s", self.reference_date, new_reference_date)
        return MarketStore(
            reference_date=new_reference_date,
            local_currency=self.local_currency,
            exchange_rate_store=self.exchange_rate_store.advance_to_date(new_reference_date, self.index_store),
            index_store=self.index_store.advance_to_date(new_reference_date),
            metadata=dict(self.metadata),
        )

    def advance_to_date(self, d: date) -> "MarketStore":
        """
        Raises:
            InvalidValueError: If d is before the reference date
        """
        if d < self.reference_date:
            raise InvalidValueError(f"Date {d} is before reference date {self.reference_date}")
        return self.advance_to_period(Period((d - self.reference_date).days, TimeUnit.DAYS))

    def copy(self) -> "MarketStore":
        """Scenario clone: curves shared, tables owned."""
        return MarketStore(
            reference_date=self.reference_date,
            local_currency=self.local_currency,
            exchange_rate_store=self.exchange_rate_store.copy(),
            index_store=self.index_store.copy(),
            metadata=dict(self.metadata),
        )

    def summary(self) -> pd.DataFrame:
        """One row per index and per FX quote."""
        rows = []
        for id in self.index_store.ids():
            index = self.index_store.get_index(id)
            rows.append({
                "kind": "index",
                "id": id,
                "name": index.name,
                "detail": type(index).__name__,
                "value": None,
            })
        for (first, second), rate in sorted(
            self.exchange_rate_store.exchange_rates().items(), key=lambda kv: (kv[0][0].code, kv[0][1].code)
        ):
            rows.append({
                "kind": "fx",
                "id": None,
                "name": f"{first.code}/{second.code}",
                "detail": "spot",
                "value": rate,
            })
        return pd.DataFrame(rows, columns=["kind", "id", "name", "detail", "value"])

    def to_dict(self) -> Dict:
        """Serialize to dictionary."""
        return {
            "reference_date": self.reference_date.isoformat(),
            "local_currency": self.local_currency.code,
            "indices": self.index_store.get_index_map(),
            "exchange_rates": {
                f"{a.code}/{b.code}": r for (a, b), r in self.exchange_rate_store.exchange_rates().items()
            },
            "metadata": self.metadata,
        }

    def __str__(self) -> str:
        lines = [
            f"MarketStore as of {self.reference_date}",
            f"  Local currency: {self.local_currency.code}",
            f"  Indices ({len(self.index_store)}):",
        ]
        for name, id in sorted(self.index_store.get_index_map().items()):
            lines.append(f"    {id} -> {name}")
        quotes = self.exchange_rate_store.exchange_rates()
        lines.append(f"  Currency pairs ({len(quotes)}):")
        for (first, second), rate in quotes.items():
            lines.append(f"    {first.code} -> {second.code}: {rate}")
        return "\n".join(lines)


__all__ = [
    "IndexStore",
    "MarketStore",
]
