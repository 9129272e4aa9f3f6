import logging
import secrets

from betsim.exceptions import InvariantViolationException
from betsim.models import Composite, Primitive, MIN_POCKET, MAX_POCKET

logger = logging.getLogger(__name__)

# European Roulette: numbers 0-36
ROULETTE_NUMBERS = list(range(MIN_POCKET, MAX_POCKET + 1))

RED_NUMBERS = {1, 3, 5, 7, 9, 12, 14, 16, 18, 19, 21, 23, 25, 27, 30, 32, 34, 36}
BLACK_NUMBERS = {2, 4, 6, 8, 10, 11, 13, 15, 17, 20, 22, 24, 26, 28, 29, 31, 33, 35}

# Order matters: pick_bet_target maps draws 37..48 onto this list.
COMPOSITE_NAMES = [
    "column_a", "column_b", "column_c",
    "dozen_1", "dozen_2", "dozen_3",
    "low", "high",
    "even", "odd",
    "red", "black",
]

BET_TARGET_OUTCOMES = len(ROULETTE_NUMBERS) + len(COMPOSITE_NAMES)  # 49


def _composite_layout():
    """Returns (name, covered numbers) pairs for every outside bet, in COMPOSITE_NAMES order."""
    return [
        # Column A: 1, 4, 7, ..., 34
        # Column B: 2, 5, 8, ..., 35
        # Column C: 3, 6, 9, ..., 36
        ("column_a", range(1, 35, 3)),
        ("column_b", range(2, 36, 3)),
        ("column_c", range(3, 37, 3)),
        ("dozen_1", range(1, 13)),
        ("dozen_2", range(13, 25)),
        ("dozen_3", range(25, 37)),
        ("low", range(1, 19)),
        ("high", range(19, 37)),
        ("even", range(2, 37, 2)),  # 0 is neither even nor odd for payout purposes
        ("odd", range(1, 37, 2)),
        ("red", sorted(RED_NUMBERS)),
        ("black", sorted(BLACK_NUMBERS)),
    ]


def is_adjacent_pair(first: int, second: int) -> bool:
    """
    True if two numbers sit side by side in the same row of the 3-column layout.
    The % 3 checks reject wraparound across a row boundary (3 and 4 are not neighbours).
    """
    if first + 1 == second and first % 3 != 0:
        return True
    if first - 1 == second and second % 3 != 0:
        return True
    return False


class RouletteTable:
    """
    A European (single zero) table: the 37 primitive spaces, the 12 outside groupings
    and the secure generator used to pick bet targets and roll the wheel.

    Every table owns its own generator, so independent runs never share draw state.
    """

    def __init__(self, rng=None):
        self.rng = rng if rng is not None else secrets.SystemRandom()
        self.primitives = tuple(Primitive(value) for value in ROULETTE_NUMBERS)
        composites = [Composite.covering(name, numbers) for name, numbers in _composite_layout()]
        self.composites = tuple(composites)
        self._composites_by_name = {c.name: c for c in composites}

    def primitive(self, value: int) -> Primitive:
        if not MIN_POCKET <= value <= MAX_POCKET:
            raise ValueError(f"Invalid roulette number: {value}")
        return self.primitives[value]

    def composite(self, name: str) -> Composite:
        return self._composites_by_name[name]

    def _draw(self, bound: int) -> int:
        draw = self.rng.randrange(bound)
        if not 0 <= draw < bound:
            logger.critical(f"Generator returned {draw} for a draw bounded by {bound}")
            raise InvariantViolationException(
                f"Random draw {draw} outside [0, {bound})",
                details={"draw": draw, "bound": bound}
            )
        return draw

    def roll_wheel(self) -> Primitive:
        """Spins the wheel. Uniform over the 37 pockets."""
        return self.primitives[self._draw(len(self.primitives))]

    def pick_bet_target(self):
        """
        Picks a space to bet on, uniformly over 49 outcomes: the 37 numbers and the
        12 outside groupings. This is a betting policy, not a wheel spin.
        """
        draw = self._draw(BET_TARGET_OUTCOMES)
        if draw < len(self.primitives):
            return self.primitives[draw]
        return self.composites[draw - len(self.primitives)]

    def target_index(self, space) -> int:
        """Inverse of pick_bet_target's mapping: 0..36 for numbers, 37..48 for groupings."""
        if isinstance(space, Primitive):
            return space.value
        return len(self.primitives) + COMPOSITE_NAMES.index(space.name)


def build_table(rng=None) -> RouletteTable:
    """Builds a fully populated table. Construction is total over the fixed layout."""
    return RouletteTable(rng=rng)
