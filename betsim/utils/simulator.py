import logging
import os
import uuid
from decimal import Decimal

import matplotlib
matplotlib.use('Agg') # Use a non-interactive backend suitable for saving files
import matplotlib.pyplot as plt
import numpy as np

from betsim.log_config import run_context
from betsim.models import RoundRecord
from betsim.utils.bet_helper import RouletteBet
from betsim.utils.roulette_helper import build_table
from betsim.utils.strategies import get_strategy

logger = logging.getLogger(__name__)


class RouletteSimulator:
    def __init__(self, strategy_name, starting_balance, stake, max_rounds, table=None, recorder=None):
        self.strategy_name = strategy_name
        self.strategy = get_strategy(strategy_name)
        self.starting_balance = Decimal(starting_balance)
        self.stake = Decimal(stake)
        self.max_rounds = max_rounds
        self.table = table if table is not None else build_table()
        self.recorder = recorder
        self.run_id = uuid.uuid4().hex[:12]

        self.balance = self.starting_balance
        self.rounds_played = 0

        # Statistics to be collected
        self.total_bet = Decimal(0)
        self.total_win = Decimal(0)
        self.hit_count = 0
        self.peak_balance = self.starting_balance
        self.max_drawdown = Decimal(0)
        self.wins_by_multiplier = {}
        self.round_results = []
        self.balance_history = [self.starting_balance]

        # Derived statistics
        self.overall_rtp = 0.0
        self.hit_frequency = 0.0
        self.volatility_index = 0.0

    def can_continue(self) -> bool:
        """A round is played only while the stake leaves a positive balance and rounds remain."""
        return self.rounds_played < self.max_rounds and self.balance - self.stake > 0

    def run_simulation(self):
        with run_context(self.run_id):
            logger.info(
                f"Starting '{self.strategy_name}' run: balance {self.starting_balance}, "
                f"stake {self.stake}, at most {self.max_rounds} rounds"
            )
            progress_interval = self.max_rounds // 20 or 1
            while self.can_continue():
                record = self._simulate_one_round(self.rounds_played + 1)
                if self.recorder is not None:
                    self.recorder.record(record)
                self._collect_round_statistics(record)
                if self.rounds_played % progress_interval == 0:
                    logger.info(f"Completed {self.rounds_played}/{self.max_rounds} rounds, balance {self.balance}")

            if self.rounds_played < self.max_rounds:
                logger.warning(
                    f"Bankroll exhausted after {self.rounds_played} rounds: "
                    f"balance {self.balance} cannot cover stake {self.stake}"
                )
            self.calculate_derived_statistics()
            logger.info(f"Run finished after {self.rounds_played} rounds with balance {self.balance}")
        return self.round_results

    def _simulate_one_round(self, round_number: int) -> RoundRecord:
        bet = RouletteBet()
        self.strategy(self.table, bet, self.stake)

        balance_before = self.balance
        self.balance -= bet.amount
        rolled = self.table.roll_wheel()
        amount_won = bet.evaluate(rolled)
        self.balance += amount_won

        return RoundRecord(
            balance_before=balance_before,
            stake=bet.amount,
            amount_won=amount_won,
            balance_after=self.balance,
            round_number=round_number,
            target_name=bet.space.name,
            rolled_value=rolled.value,
        )

    def _collect_round_statistics(self, record: RoundRecord):
        self.rounds_played += 1
        self.total_bet += record.stake
        self.total_win += record.amount_won
        self.balance_history.append(record.balance_after)

        if record.amount_won > 0:
            self.hit_count += 1
            multiplier_category = int(record.amount_won / record.stake)
        else:
            multiplier_category = 0
        self.wins_by_multiplier[multiplier_category] = self.wins_by_multiplier.get(multiplier_category, 0) + 1

        if record.balance_after > self.peak_balance:
            self.peak_balance = record.balance_after
        drawdown = self.peak_balance - record.balance_after
        if drawdown > self.max_drawdown:
            self.max_drawdown = drawdown

        self.round_results.append(record)

    def calculate_derived_statistics(self):
        if self.rounds_played == 0:
            logger.warning("No rounds were simulated. Cannot calculate derived statistics.")
            return

        self.overall_rtp = float(self.total_win / self.total_bet * 100) if self.total_bet > 0 else 0.0
        self.hit_frequency = self.hit_count / self.rounds_played * 100

        wins_per_round = np.array([float(r.amount_won) for r in self.round_results])
        self.volatility_index = float(np.std(wins_per_round)) / float(self.stake) if self.stake > 0 else 0.0

    def print_summary_statistics(self):
        print("\n--- Simulation Summary ---")
        print(f"Strategy: {self.strategy_name}")
        print(f"Rounds Played: {self.rounds_played} (limit {self.max_rounds})")
        print(f"Stake Per Round: {self.stake}")
        print(f"Starting Balance: {self.starting_balance}")
        print(f"Final Balance: {self.balance}")
        print(f"Total Wagered: {self.total_bet}")
        print(f"Total Won: {self.total_win}")

        print("\n--- Detailed Metrics ---")
        print(f"Return To Player: {self.overall_rtp:.2f}%")
        print(f"Hit Frequency: {self.hit_frequency:.2f}% ({self.hit_count} wins out of {self.rounds_played} rounds)")
        print(f"Peak Balance: {self.peak_balance}")
        print(f"Max Drawdown: {self.max_drawdown}")
        print(f"Volatility Index (Win StdDev / Stake): {self.volatility_index:.2f}")

        print("\nWin Distribution (by Stake Multiplier):")
        if self.wins_by_multiplier:
            for mult, count in sorted(self.wins_by_multiplier.items()):
                percentage = count / self.rounds_played * 100
                print(f"  {mult}x Stake: {count} times ({percentage:.2f}%)")
        else:
            print("  No rounds to display.")

    def generate_graphs(self, graph_dir="betsim_graphs"):
        """Saves PNG charts of the run and returns their paths."""
        os.makedirs(graph_dir, exist_ok=True)
        saved = []
        file_prefix = f"{self.strategy_name}_{self.run_id}"

        # Graph 1: Balance over time
        plt.figure(figsize=(10, 6))
        plt.plot(range(len(self.balance_history)), [float(b) for b in self.balance_history], linestyle='-')
        plt.axhline(y=float(self.starting_balance), color='r', linestyle='--', label="Starting balance")
        plt.title(f"Balance Over Time ({self.strategy_name})", fontsize=16)
        plt.xlabel("Round", fontsize=12)
        plt.ylabel("Balance", fontsize=12)
        plt.legend(fontsize=10)
        plt.grid(True, linestyle='--', alpha=0.7)
        plt.tight_layout()
        graph_file_path = os.path.join(graph_dir, f"{file_prefix}_balance.png")
        plt.savefig(graph_file_path)
        saved.append(graph_file_path)
        logger.info(f"Saved balance graph to {graph_file_path}")
        plt.clf()

        # Graph 2: Win multiplier distribution
        if self.wins_by_multiplier:
            multipliers = sorted(self.wins_by_multiplier.keys())
            counts = [self.wins_by_multiplier[m] for m in multipliers]

            plt.figure(figsize=(12, 7))
            plt.bar([str(m) + 'x' for m in multipliers], counts, color='skyblue', width=0.8)
            plt.title(f"Win Multiplier Distribution ({self.strategy_name})", fontsize=16)
            plt.xlabel("Stake Multiplier", fontsize=12)
            plt.ylabel("Frequency", fontsize=12)
            plt.grid(axis='y', linestyle='--', alpha=0.7)
            plt.tight_layout()
            graph_file_path = os.path.join(graph_dir, f"{file_prefix}_win_multipliers.png")
            plt.savefig(graph_file_path)
            saved.append(graph_file_path)
            logger.info(f"Saved win multiplier distribution graph to {graph_file_path}")
            plt.clf()

        plt.close('all') # Close all figures to free memory
        return saved
