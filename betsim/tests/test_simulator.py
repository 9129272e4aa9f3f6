import os
import random
import shutil
import tempfile
import unittest
from datetime import datetime
from decimal import Decimal
from unittest.mock import MagicMock

from betsim.exceptions import InvariantViolationException, ValidationException
from betsim.services.round_recorder import RoundRecorder
from betsim.utils.roulette_helper import build_table
from betsim.utils.simulator import RouletteSimulator


def scripted_table(draws_by_bound):
    """Table whose generator answers randrange(bound) from a per-bound script."""
    iterators = {bound: iter(values) for bound, values in draws_by_bound.items()}
    rng = MagicMock()
    rng.randrange.side_effect = lambda bound: next(iterators[bound])
    return build_table(rng=rng)


class TestRouletteSimulator(unittest.TestCase):

    def test_straight_up_win_round(self):
        # pick_bet_target draws from 49, roll_wheel from 37
        table = scripted_table({49: [17], 37: [17]})
        simulator = RouletteSimulator("random", Decimal(500), Decimal(5), max_rounds=1, table=table)
        records = simulator.run_simulation()

        self.assertEqual(len(records), 1)
        record = records[0]
        self.assertEqual(record.as_fields(), (Decimal(500), Decimal(5), Decimal(175), Decimal(670)))
        self.assertEqual(record.target_name, "17")
        self.assertEqual(record.rolled_value, 17)
        self.assertEqual(simulator.balance, Decimal(670))

    def test_straight_up_loss_round(self):
        table = scripted_table({49: [17], 37: [18]})
        simulator = RouletteSimulator("random", Decimal(500), Decimal(5), max_rounds=1, table=table)
        record = simulator.run_simulation()[0]
        self.assertEqual(record.amount_won, Decimal(0))
        self.assertEqual(record.balance_after, Decimal(495))

    def test_outside_bet_round(self):
        # Draw 47 is 'red' (37 + index 10); 0 loses every outside bet
        table = scripted_table({49: [47, 47], 37: [1, 0]})
        simulator = RouletteSimulator("random", Decimal(100), Decimal(10), max_rounds=2, table=table)
        first, second = simulator.run_simulation()
        self.assertEqual(first.target_name, "red")
        self.assertEqual(first.amount_won, Decimal(10))
        self.assertEqual(first.balance_after, Decimal(100))
        self.assertEqual(second.amount_won, Decimal(0))
        self.assertEqual(second.balance_after, Decimal(90))

    def test_stops_when_stake_would_exhaust_balance(self):
        # Always bet on 0, always roll 1: 12 -> 7 -> 2, then 2 - 5 <= 0 stops the run
        table = scripted_table({49: [0] * 10, 37: [1] * 10})
        simulator = RouletteSimulator("random", Decimal(12), Decimal(5), max_rounds=100, table=table)
        records = simulator.run_simulation()
        self.assertEqual([r.balance_after for r in records], [Decimal(7), Decimal(2)])
        self.assertFalse(simulator.can_continue())

    def test_balance_equal_to_stake_plays_nothing(self):
        table = scripted_table({49: [], 37: []})
        simulator = RouletteSimulator("random", Decimal(5), Decimal(5), max_rounds=10, table=table)
        self.assertEqual(simulator.run_simulation(), [])
        self.assertEqual(simulator.rounds_played, 0)

    def test_never_exceeds_max_rounds(self):
        table = build_table(rng=random.Random(42))
        simulator = RouletteSimulator("red", Decimal(1_000_000), Decimal(1), max_rounds=250, table=table)
        records = simulator.run_simulation()
        self.assertEqual(len(records), 250)
        self.assertEqual(simulator.rounds_played, 250)
        self.assertEqual([r.round_number for r in records], list(range(1, 251)))

    def test_rounds_chain_balances(self):
        table = build_table(rng=random.Random(7))
        simulator = RouletteSimulator("random", Decimal("500.00"), Decimal("2.50"), max_rounds=300, table=table)
        records = simulator.run_simulation()
        previous = Decimal("500.00")
        for record in records:
            self.assertEqual(record.balance_before, previous)
            self.assertEqual(record.balance_after, record.balance_before - record.stake + record.amount_won)
            previous = record.balance_after
        self.assertEqual(simulator.balance, previous)

    def test_statistics(self):
        # win (straight 17), loss, win (red on 1)
        table = scripted_table({49: [17, 17, 47], 37: [17, 18, 1]})
        simulator = RouletteSimulator("random", Decimal(500), Decimal(5), max_rounds=3, table=table)
        simulator.run_simulation()

        self.assertEqual(simulator.total_bet, Decimal(15))
        self.assertEqual(simulator.total_win, Decimal(180))
        self.assertEqual(simulator.hit_count, 2)
        self.assertAlmostEqual(simulator.overall_rtp, 1200.0)
        self.assertAlmostEqual(simulator.hit_frequency, 200 / 3)
        self.assertEqual(simulator.wins_by_multiplier, {35: 1, 0: 1, 1: 1})
        self.assertEqual(simulator.peak_balance, Decimal(670))
        self.assertEqual(simulator.max_drawdown, Decimal(5))
        self.assertEqual(simulator.balance_history, [Decimal(500), Decimal(670), Decimal(665), Decimal(665)])
        self.assertGreater(simulator.volatility_index, 0)

    def test_invariant_violation_aborts_run(self):
        table = scripted_table({49: [49], 37: []})
        simulator = RouletteSimulator("random", Decimal(500), Decimal(5), max_rounds=5, table=table)
        with self.assertRaises(InvariantViolationException):
            simulator.run_simulation()
        self.assertEqual(simulator.rounds_played, 0)

    def test_unknown_strategy(self):
        with self.assertRaises(ValidationException):
            RouletteSimulator("martingale", Decimal(500), Decimal(5), max_rounds=5)


class TestSimulatorOutput(unittest.TestCase):

    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmp_dir, ignore_errors=True)

    def test_records_written_per_round(self):
        table = build_table(rng=random.Random(3))
        simulator = RouletteSimulator("random-corner", Decimal(500), Decimal(5), max_rounds=40, table=table)
        with RoundRecorder("random-corner", self.tmp_dir, when=datetime(2024, 5, 1, 9, 30, 0)) as recorder:
            simulator.recorder = recorder
            records = simulator.run_simulation()

        path = os.path.join(self.tmp_dir, "random-corner-2024-05-01T09-30-00.csv")
        with open(path, encoding="utf-8") as f:
            lines = f.read().splitlines()
        self.assertEqual(len(lines), len(records))
        self.assertLessEqual(len(lines), 40)
        self.assertEqual(lines[0].split(", ")[0], "500")
        for line, record in zip(lines, records):
            self.assertEqual(line, ", ".join(str(v) for v in record.as_fields()))

    def test_generate_graphs(self):
        table = build_table(rng=random.Random(11))
        simulator = RouletteSimulator("black", Decimal(200), Decimal(2), max_rounds=50, table=table)
        simulator.run_simulation()
        paths = simulator.generate_graphs(os.path.join(self.tmp_dir, "graphs"))
        self.assertEqual(len(paths), 2)
        for path in paths:
            self.assertTrue(os.path.exists(path), path)
            self.assertTrue(path.endswith(".png"))

    def test_print_summary(self):
        from io import StringIO
        from unittest.mock import patch

        table = build_table(rng=random.Random(5))
        simulator = RouletteSimulator("odd", Decimal(100), Decimal(1), max_rounds=20, table=table)
        simulator.run_simulation()
        with patch('sys.stdout', new_callable=StringIO) as fake_out:
            simulator.print_summary_statistics()
        output = fake_out.getvalue()
        self.assertIn("Strategy: odd", output)
        self.assertIn("Rounds Played: 20", output)
        self.assertIn("Return To Player", output)


if __name__ == '__main__':
    unittest.main()
