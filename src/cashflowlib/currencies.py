"""
Currency definitions.

Currency is a closed enumeration; each member carries its ISO code,
name, symbol, minor-unit precision and ISO numeric code. Equality is by
member.
"""

from enum import Enum


class Currency(Enum):
    """ISO 4217 currencies supported by the library."""

    USD = ("USD", "US Dollar", "$", 2, 840)
    EUR = ("EUR", "Euro", "€", 2, 978)
    GBP = ("GBP", "British Pound", "£", 2, 826)
    JPY = ("JPY", "Japanese Yen", "¥", 0, 392)
    CHF = ("CHF", "Swiss Franc", "Fr", 2, 756)
    CAD = ("CAD", "Canadian Dollar", "$", 2, 124)
    AUD = ("AUD", "Australian Dollar", "$", 2, 36)
    CNY = ("CNY", "Chinese Yuan", "¥", 2, 156)
    KRW = ("KRW", "South Korean Won", "₩", 0, 410)
    BRL = ("BRL", "Brazilian Real", "R$", 2, 986)
    MXN = ("MXN", "Mexican Peso", "$", 2, 484)
    CLP = ("CLP", "Chilean Peso", "$", 0, 152)
    CLF = ("CLF", "Unidad de Fomento", "UF", 4, 990)
    COP = ("COP", "Colombian Peso", "$", 2, 170)
    PEN = ("PEN", "Peruvian Sol", "S/", 2, 604)
    ARS = ("ARS", "Argentine Peso", "$", 2, 32)

    def __init__(self, code: str, display_name: str, symbol: str, precision: int, numeric_code: int):
        self.code = code
        self.display_name = display_name
        self.symbol = symbol
        self.precision = precision
        self.numeric_code = numeric_code

    @classmethod
    def from_code(cls, code: str) -> "Currency":
        """Look up a currency by ISO code (case-insensitive)."""
        key = code.strip().upper()
        for member in cls:
            if member.code == key:
                return member
        raise ValueError(f"Unknown currency code: {code}")

    @classmethod
    def from_numeric_code(cls, numeric_code: int) -> "Currency":
        for member in cls:
            if member.numeric_code == numeric_code:
                return member
        raise ValueError(f"Unknown currency numeric code: {numeric_code}")

    def round(self, amount: float) -> float:
        """Round an amount to the currency's minor unit."""
        return round(amount, self.precision)

    def __str__(self) -> str:
        return self.code


__all__ = ["Currency"]
