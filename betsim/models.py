from dataclasses import dataclass, field
from decimal import Decimal
from typing import Tuple, Union

MIN_POCKET = 0
MAX_POCKET = 36

STRAIGHT_UP_MULTIPLIER = 35

# Covered-value count -> payout multiplier. A composite's multiplier is a pure function of its size.
MULTIPLIER_BY_COVERAGE = {
    2: 17,   # split
    4: 8,    # corner
    12: 2,   # column, dozen
    18: 1,   # low/high, even/odd, red/black
}


@dataclass(frozen=True)
class Primitive:
    """A single numbered pocket on the wheel. Always pays straight-up odds."""
    value: int
    multiplier: int = field(default=STRAIGHT_UP_MULTIPLIER, init=False)

    def __post_init__(self):
        if not MIN_POCKET <= self.value <= MAX_POCKET:
            raise ValueError(f"Pocket value {self.value} outside {MIN_POCKET}-{MAX_POCKET}")

    @property
    def name(self) -> str:
        return str(self.value)

    def covers(self, value: int) -> bool:
        return self.value == value


@dataclass(frozen=True)
class Composite:
    """A named grouping of pockets paying one aggregate multiplier."""
    name: str
    covered_values: Tuple[int, ...]
    multiplier: int

    def __post_init__(self):
        if not self.covered_values:
            raise ValueError(f"Composite '{self.name}' covers no pockets")
        if len(set(self.covered_values)) != len(self.covered_values):
            raise ValueError(f"Composite '{self.name}' covers a pocket more than once")
        for value in self.covered_values:
            if not MIN_POCKET <= value <= MAX_POCKET:
                raise ValueError(f"Composite '{self.name}' covers invalid pocket {value}")
        expected = MULTIPLIER_BY_COVERAGE.get(len(self.covered_values))
        if expected != self.multiplier:
            raise ValueError(
                f"Composite '{self.name}' covers {len(self.covered_values)} pockets "
                f"but pays {self.multiplier}:1 (expected {expected})"
            )

    @classmethod
    def covering(cls, name: str, values) -> "Composite":
        values = tuple(values)
        multiplier = MULTIPLIER_BY_COVERAGE.get(len(values))
        if multiplier is None:
            raise ValueError(f"No bet type covers {len(values)} pockets")
        return cls(name=name, covered_values=values, multiplier=multiplier)

    def covers(self, value: int) -> bool:
        return value in self.covered_values


Space = Union[Primitive, Composite]


@dataclass(frozen=True)
class RoundRecord:
    """Outcome of one simulated round, as persisted by the round recorder."""
    balance_before: Decimal
    stake: Decimal
    amount_won: Decimal
    balance_after: Decimal
    round_number: int = field(default=0, compare=False)
    target_name: str = field(default="", compare=False)
    rolled_value: int = field(default=-1, compare=False)

    def as_fields(self) -> Tuple[Decimal, Decimal, Decimal, Decimal]:
        return (self.balance_before, self.stake, self.amount_won, self.balance_after)
