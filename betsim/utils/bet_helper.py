import logging
from decimal import Decimal

from betsim.models import Composite, Primitive
from betsim.utils.roulette_helper import is_adjacent_pair

logger = logging.getLogger(__name__)


class RouletteBet:
    """
    One wager: a space taken from a RouletteTable plus a Decimal stake.
    Built fresh for each round and evaluated once.
    """

    def __init__(self):
        self.space = None
        self.amount = Decimal(0)

    def place(self, space, amount: Decimal) -> None:
        """Bets on a single space (a number or an outside grouping) from the table."""
        self.space = space
        self.amount = Decimal(amount)

    def place_multi(self, spaces, amount: Decimal) -> bool:
        """
        Bets on two (split) or four (corner) adjacent numbered spaces at once.
        Four spaces must be passed in increasing order, e.g. 1, 2, 4, 5.

        Returns True if the wager was accepted. A rejected wager leaves any
        previous binding untouched.
        """
        spaces = list(spaces)
        if len(spaces) not in (2, 4):
            logger.debug(f"Rejected multi-space bet: {len(spaces)} spaces supplied")
            return False
        # Zero and outside groupings cannot take part in a split or corner
        if not all(isinstance(s, Primitive) and s.value > 0 for s in spaces):
            logger.debug("Rejected multi-space bet: only numbered spaces 1-36 allowed")
            return False

        values = [s.value for s in spaces]
        if len(values) == 2:
            valid = is_adjacent_pair(values[0], values[1])
            bet_type = "split"
        else:
            in_order = all(a < b for a, b in zip(values, values[1:]))
            valid = in_order and is_adjacent_pair(values[0], values[1]) and is_adjacent_pair(values[2], values[3])
            bet_type = "corner"

        if not valid:
            logger.debug(f"Rejected {bet_type} bet on {values}: spaces are not adjacent")
            return False

        name = f"{bet_type}_" + "_".join(str(v) for v in values)
        self.space = Composite.covering(name, values)
        self.amount = Decimal(amount)
        return True

    def covers(self, rolled_space: Primitive) -> bool:
        if self.space is None:
            raise ValueError("No bet has been placed.")
        return self.space.covers(rolled_space.value)

    def evaluate(self, rolled_space: Primitive) -> Decimal:
        """
        Net winnings for the rolled pocket: stake * multiplier when the bet covers it,
        otherwise 0. The stake itself is never returned.
        """
        if self.covers(rolled_space):
            return self.amount * self.space.multiplier
        return Decimal(0)
