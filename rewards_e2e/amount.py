from decimal import Decimal, ROUND_FLOOR, localcontext
from functools import total_ordering

# enough significant digits for any uint256
UINT256_DIGITS = 80


@total_ordering
class Amount:
    """Token quantity held as an integer of raw units plus its decimal exponent.

    Amounts with different exponents compare exactly, e.g. 1 USDC (6 decimals)
    equals 1 sUSDC (18 decimals). Arithmetic keeps the larger exponent so it
    never loses precision. The only rounding is `to_decimals` to a smaller
    exponent, which floors.
    """

    __slots__ = ("value", "decimals")

    def __init__(self, value, decimals=18):
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"raw amount must be int, got {type(value).__name__}")
        if decimals < 0:
            raise ValueError(f"invalid decimals {decimals}")
        self.value = value
        self.decimals = decimals

    @classmethod
    def of(cls, number, decimals=18):
        """Human readable number (int, str or Decimal) to raw units, exact or ValueError."""
        if isinstance(number, float):
            number = repr(number)
        with localcontext() as ctx:
            ctx.prec = UINT256_DIGITS
            scaled = Decimal(number).scaleb(decimals)
        if scaled != scaled.to_integral_value():
            raise ValueError(f"{number} is not representable with {decimals} decimals")
        return cls(int(scaled), decimals)

    @classmethod
    def zero(cls, decimals=18):
        return cls(0, decimals)

    def to_decimals(self, decimals):
        if decimals >= self.decimals:
            return Amount(self.value * 10 ** (decimals - self.decimals), decimals)
        # floor division rounds toward -inf for negatives too
        return Amount(self.value // 10 ** (self.decimals - decimals), decimals)

    def to_decimal(self):
        with localcontext() as ctx:
            ctx.prec = UINT256_DIGITS
            return Decimal(self.value).scaleb(-self.decimals)

    def floor(self):
        return int(self.to_decimal().to_integral_value(rounding=ROUND_FLOOR))

    def is_zero(self):
        return self.value == 0

    def _aligned(self, other):
        if not isinstance(other, Amount):
            raise TypeError(f"cannot combine Amount with {type(other).__name__}")
        decimals = max(self.decimals, other.decimals)
        return self.to_decimals(decimals).value, other.to_decimals(decimals).value, decimals

    def __add__(self, other):
        a, b, decimals = self._aligned(other)
        return Amount(a + b, decimals)

    def __sub__(self, other):
        a, b, decimals = self._aligned(other)
        return Amount(a - b, decimals)

    def __neg__(self):
        return Amount(-self.value, self.decimals)

    def __eq__(self, other):
        if not isinstance(other, Amount):
            return NotImplemented
        a, b, _ = self._aligned(other)
        return a == b

    def __lt__(self, other):
        if not isinstance(other, Amount):
            return NotImplemented
        a, b, _ = self._aligned(other)
        return a < b

    def __hash__(self):
        return hash(self.to_decimal().normalize())

    def __bool__(self):
        return self.value != 0

    def __repr__(self):
        return f"Amount({self.value}, decimals={self.decimals})"

    def __str__(self):
        return f"{self.to_decimal():f}"
