"""
Betting strategies for the simulator.

A strategy places the round's bet on a fresh RouletteBet. The strategy name also
prefixes the output file, e.g. random-2025-06-01T12-00-00.csv.
"""
from decimal import Decimal

from betsim.error_codes import ErrorCodes
from betsim.exceptions import ValidationException
from betsim.models import MAX_POCKET


def random_space(table, bet, stake: Decimal):
    """Uniformly random number or outside grouping."""
    bet.place(table.pick_bet_target(), stake)


def fixed_grouping(name):
    def strategy(table, bet, stake: Decimal):
        bet.place(table.composite(name), stake)
    strategy.__doc__ = f"Always bets on the '{name}' grouping."
    return strategy


def random_split(table, bet, stake: Decimal):
    """Random horizontal split. Rejected pairs are redrawn."""
    while True:
        first = table.rng.randint(1, MAX_POCKET)
        second = first + table.rng.choice((-1, 1))
        if not 1 <= second <= MAX_POCKET:
            continue
        if bet.place_multi([table.primitive(first), table.primitive(second)], stake):
            return


def random_corner(table, bet, stake: Decimal):
    """Random 2x2 corner anchored on its lowest number. Anchors in the third column are redrawn."""
    while True:
        anchor = table.rng.randint(1, MAX_POCKET - 4)
        values = (anchor, anchor + 1, anchor + 3, anchor + 4)
        if bet.place_multi([table.primitive(v) for v in values], stake):
            return


STRATEGIES = {
    "random": random_space,
    "red": fixed_grouping("red"),
    "black": fixed_grouping("black"),
    "even": fixed_grouping("even"),
    "odd": fixed_grouping("odd"),
    "low": fixed_grouping("low"),
    "high": fixed_grouping("high"),
    "random-split": random_split,
    "random-corner": random_corner,
}


def get_strategy(name: str):
    try:
        return STRATEGIES[name]
    except KeyError:
        raise ValidationException(
            f"Unknown strategy '{name}'. Valid strategies are: {', '.join(sorted(STRATEGIES))}",
            details={"strategy": name},
            error_code=ErrorCodes.UNKNOWN_STRATEGY
        ) from None
