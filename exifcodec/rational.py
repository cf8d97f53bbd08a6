"""EXIF rational numbers -- numerator/denominator pairs stored as two 32-bit ints."""

import math
from dataclasses import dataclass
from fractions import Fraction

# Field ranges for RATIONAL (unsigned) and SRATIONAL (signed) components
_UNSIGNED_MAX = 0xFFFFFFFF
_SIGNED_MIN = -0x80000000
_SIGNED_MAX = 0x7FFFFFFF

# Denominator ceiling used when best_precision is off
_DEFAULT_MAX_DENOMINATOR = 1000000


@dataclass(frozen=True)
class Rational:
    """A numerator/denominator pair as stored by RATIONAL and SRATIONAL tags.

    Division is deferred to to_float(), so a zero denominator is legal here.
    Equality compares the stored fields, not the reduced fraction.
    """
    numerator: int
    denominator: int = 1
    signed: bool = False

    def __post_init__(self):
        lo, hi = (_SIGNED_MIN, _SIGNED_MAX) if self.signed else (0, _UNSIGNED_MAX)
        for name in ('numerator', 'denominator'):
            part = getattr(self, name)
            if isinstance(part, bool) or not isinstance(part, int):
                raise TypeError(f'Rational {name} must be an int, got {type(part).__name__}')
            if not lo <= part <= hi:
                kind = 'signed' if self.signed else 'unsigned'
                raise ValueError(f'Rational {name} {part} out of {kind} 32-bit range')

    @classmethod
    def from_float(cls, value: float, signed: bool = False,
                   best_precision: bool = False) -> 'Rational':
        """Build the closest Rational whose fields fit the 32-bit slots.

        nan maps to 0/0 and infinities to +-1/0, mirroring to_float().
        """
        if math.isnan(value):
            return cls(0, 0, signed)
        if math.isinf(value):
            if value < 0 and not signed:
                raise ValueError('Negative infinity needs a signed Rational')
            return cls(-1 if value < 0 else 1, 0, signed)
        if value < 0 and not signed:
            raise ValueError(f'Negative value {value} needs a signed Rational')

        max_num = _SIGNED_MAX if signed else _UNSIGNED_MAX
        if abs(value) > max_num:
            raise ValueError(f'{value} does not fit a 32-bit Rational')

        if float(value).is_integer():
            return cls(int(value), 1, signed)

        max_den = max_num if best_precision else _DEFAULT_MAX_DENOMINATOR
        # Keep numerator = value * denominator inside the field as well
        if abs(value) > 1:
            max_den = max(1, min(max_den, int(max_num / abs(value))))
        frac = Fraction(value).limit_denominator(max_den)
        return cls(frac.numerator, frac.denominator, signed)

    def to_float(self) -> float:
        """numerator / denominator; 0/0 is nan and n/0 is +-inf."""
        if self.denominator == 0:
            if self.numerator == 0:
                return math.nan
            return math.inf if self.numerator > 0 else -math.inf
        return self.numerator / self.denominator

    def simplify(self) -> 'Rational':
        """Return the fraction reduced by the greatest common divisor."""
        if self.denominator == 0:
            return self
        divisor = math.gcd(self.numerator, self.denominator)
        if divisor <= 1:
            return self
        return Rational(self.numerator // divisor, self.denominator // divisor, self.signed)

    def __float__(self) -> float:
        return self.to_float()

    def __str__(self) -> str:
        return f'{self.numerator}/{self.denominator}'
