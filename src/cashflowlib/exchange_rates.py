"""
Exchange rate graph with memoized triangulation.

Stored quotes are directed edges: (A, B) -> r is the price of one B in
units of A (CLP/USD = 800), so an amount in A divided by r is the
amount in B. A query for (A, B) returns 1.0 when A == B, a cached value,
or runs a breadth-first search over the quotes, multiplying along edges
and dividing along reversed edges. Each result is cached together with
its inverse.

The cache is shared between threads and guarded by a lock; each pair is
computed at most once.
"""

from collections import deque
from datetime import date
from typing import TYPE_CHECKING, Dict, Optional, Tuple
import logging
import threading

from .currencies import Currency
from .dates import Period
from .errors import InvalidValueError, NotFoundError

if TYPE_CHECKING:
    from .market_store import IndexStore

logger = logging.getLogger(__name__)

CurrencyPair = Tuple[Currency, Currency]


class ExchangeRateStore:
    """
    Spot exchange rates at a reference date.

    Attributes:
        reference_date: Date the quotes refer to
    """

    def __init__(
        self,
        reference_date: date,
        exchange_rates: Optional[Dict[CurrencyPair, float]] = None,
        currency_curves: Optional[Dict[Currency, int]] = None
    ):
        self.reference_date = reference_date
        self._rates: Dict[CurrencyPair, float] = {}
        self._currency_curves: Dict[Currency, int] = dict(currency_curves or {})
        self._cache: Dict[CurrencyPair, float] = {}
        self._lock = threading.Lock()
        for (first, second), rate in (exchange_rates or {}).items():
            self.add_exchange_rate(first, second, rate)

    def add_exchange_rate(self, first: Currency, second: Currency, rate: float) -> None:
        """
        Add a quote: one `second` costs `rate` units of `first`.

        Raises:
            InvalidValueError: For non-positive rates or identical currencies
        """
        if rate <= 0:
            raise InvalidValueError(f"Exchange rate {first}/{second} must be positive, got {rate}")
        if first == second:
            raise InvalidValueError(f"Cannot quote {first} against itself")
        with self._lock:
            self._rates[(first, second)] = float(rate)
            self._cache.clear()

    def exchange_rates(self) -> Dict[CurrencyPair, float]:
        """Copy of the stored quotes (not the triangulated cache)."""
        return dict(self._rates)

    def add_currency_curve(self, currency: Currency, curve_id: int) -> None:
        """Register the index id holding the risk-free curve of a currency."""
        self._currency_curves[currency] = curve_id

    def get_currency_curve(self, currency: Currency) -> int:
        try:
            return self._currency_curves[currency]
        except KeyError:
            raise NotFoundError(f"currency curve for {currency}") from None

    def currency_curves(self) -> Dict[Currency, int]:
        return dict(self._currency_curves)

    def get_exchange_rate(self, first: Currency, second: Currency) -> float:
        """
        Price of one unit of `second` in units of `first`.

        Raises:
            NotFoundError: If the currencies are not connected by quotes
        """
        if first == second:
            return 1.0

        key = (first, second)
        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                return cached

            rate = self._search(first, second)
            if rate is None:
                raise NotFoundError(f"exchange rate {first}/{second}")
            self._cache[key] = rate
            self._cache[(second, first)] = 1.0 / rate
            logger.debug("Triangulated %s/%s = %s", first, second, rate)
            return rate

    def _search(self, first: Currency, second: Currency) -> Optional[float]:
        queue = deque([(first, 1.0)])
        visited = {first}
        while queue:
            current, acc = queue.popleft()
            for (source, dest), quote in self._rates.items():
                if source == current and dest not in visited:
                    nxt, value = dest, acc * quote
                elif dest == current and source not in visited:
                    nxt, value = source, acc / quote
                else:
                    continue
                if nxt == second:
                    return value
                visited.add(nxt)
                queue.append((nxt, value))
        return None

    def advance_to_period(self, period: Period, index_store: "IndexStore") -> "ExchangeRateStore":
        """
        Forward the quotes by a period.

        Each quote (A, B) -> r becomes r * dfB / dfA over the period, with
        dfX taken from the registered curve of X (1.0 without a curve).

        Raises:
            InvalidValueError: For negative periods
        """
        if period.length < 0:
            raise InvalidValueError(f"Cannot advance exchange rates by a negative period ({period})")
        return self.advance_to_date(self.reference_date + period, index_store)

    def advance_to_date(self, d: date, index_store: "IndexStore") -> "ExchangeRateStore":
        if d < self.reference_date:
            raise InvalidValueError(f"Date {d} is before reference date {self.reference_date}")

        def df(currency: Currency) -> float:
            curve_id = self._currency_curves.get(currency)
            if curve_id is None:
                return 1.0
            return index_store.get_index(curve_id).discount_factor(d)

        rates = {
            (first, second): rate * df(second) / df(first)
            for (first, second), rate in self._rates.items()
        }
        return ExchangeRateStore(d, rates, self._currency_curves)

    def copy(self) -> "ExchangeRateStore":
        """Independent store with the same quotes and curve registrations."""
        return ExchangeRateStore(self.reference_date, self._rates, self._currency_curves)

    def __repr__(self) -> str:
        return f"ExchangeRateStore(reference_date={self.reference_date}, quotes={len(self._rates)})"


__all__ = ["ExchangeRateStore"]
