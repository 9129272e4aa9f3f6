#!/usr/bin/env python3
"""
Roulette Bankroll Simulator CLI

Runs Monte-Carlo bankroll simulations on a European roulette table and writes
one record per round to <strategy>-<timestamp>.csv.

Usage:
    betsim --help
    betsim run --strategy random --balance 500 --stake 5 --max-rounds 1000
    betsim menu
    betsim check-rng --draws 100000
"""

import logging
import sys
from decimal import Decimal, InvalidOperation

import click

from betsim.config import Config
from betsim.config_validator import ConfigValidationError, validate_logging_settings
from betsim.error_codes import ErrorCodes, EXIT_CONFIG_ERROR
from betsim.exceptions import AppException, ValidationException
from betsim.log_config import configure_logging
from betsim.services.round_recorder import RoundRecorder
from betsim.utils.draw_stats import uniformity_report
from betsim.utils.roulette_helper import BET_TARGET_OUTCOMES, ROULETTE_NUMBERS, build_table
from betsim.utils.simulator import RouletteSimulator
from betsim.utils.strategies import STRATEGIES

logger = logging.getLogger(__name__)


class DecimalAmount(click.ParamType):
    """A strictly positive decimal amount, e.g. a balance or a stake."""
    name = "amount"

    def convert(self, value, param, ctx):
        if isinstance(value, Decimal):
            amount = value
        else:
            try:
                amount = Decimal(str(value).strip())
            except InvalidOperation:
                self.fail(f"{value!r} is not a decimal amount", param, ctx)
        if not amount.is_finite() or amount <= 0:
            self.fail(f"{value} must be greater than zero", param, ctx)
        return amount


AMOUNT = DecimalAmount()


def execute_run(strategy, balance, stake, max_rounds, output_dir, graphs=False, graph_dir="betsim_graphs"):
    """
    One complete simulation: validates the bankroll, opens the record file, plays the
    rounds and prints the summary. Raises AppException subclasses on failure.
    """
    if stake >= balance:
        raise ValidationException(
            f"Stake {stake} must be smaller than the starting balance {balance}",
            details={"stake": str(stake), "balance": str(balance)}
        )
    simulator = RouletteSimulator(
        strategy_name=strategy,
        starting_balance=balance,
        stake=stake,
        max_rounds=max_rounds,
    )
    # Open the sink before any round is played
    with RoundRecorder(strategy, output_dir) as recorder:
        simulator.recorder = recorder
        simulator.run_simulation()
        click.echo(f"📝 {recorder.records_written} rounds recorded to {recorder.path}")

    simulator.print_summary_statistics()
    if graphs:
        for path in simulator.generate_graphs(graph_dir):
            click.echo(f"📈 Saved {path}")
    return simulator


def _fail(e: AppException):
    logger.error(f"Aborting: {e.status_message}", extra={"error_code": e.error_code, "details": e.details})
    click.echo(f"❌ Error [{e.error_code}]: {e.status_message}", err=True)
    sys.exit(e.exit_code)


def _load_config(**overrides) -> Config:
    try:
        return Config.from_env(**overrides)
    except ConfigValidationError as e:
        logger.error("Invalid configuration", extra={"error_code": ErrorCodes.CONFIG_ERROR})
        click.echo(f"❌ Error [{ErrorCodes.CONFIG_ERROR}]: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def cli(verbose):
    """Roulette bankroll simulator - European single zero table."""
    level, json_logs = validate_logging_settings()
    configure_logging('DEBUG' if verbose else level, json_logs)


@cli.command()
@click.option('--strategy', type=click.Choice(sorted(STRATEGIES)), help='Betting strategy (also names the record file)')
@click.option('--balance', type=AMOUNT, help='Starting balance')
@click.option('--stake', type=AMOUNT, help='Fixed stake per round')
@click.option('--max-rounds', type=click.IntRange(min=1), help='Maximum number of rounds')
@click.option('--output-dir', type=click.Path(file_okay=False), help='Directory for the record file')
@click.option('--graphs', is_flag=True, help='Save balance and win distribution charts')
def run(strategy, balance, stake, max_rounds, output_dir, graphs):
    """Run one simulation non-interactively. Options take precedence over the environment."""
    config = _load_config(
        strategy=strategy, starting_balance=balance, stake=stake, max_rounds=max_rounds, output_dir=output_dir
    )
    try:
        execute_run(
            strategy=config.STRATEGY,
            balance=config.STARTING_BALANCE,
            stake=config.STAKE,
            max_rounds=config.MAX_ROUNDS,
            output_dir=config.OUTPUT_DIR,
            graphs=graphs,
        )
    except AppException as e:
        _fail(e)


@cli.command()
def menu():
    """Interactive menu: adjust the settings and run simulations until you quit."""
    config = _load_config()
    settings = {
        'strategy': config.STRATEGY,
        'balance': config.STARTING_BALANCE,
        'stake': config.STAKE,
        'max_rounds': config.MAX_ROUNDS,
    }

    while True:
        click.echo("\n🎰 Roulette Bankroll Simulator")
        click.echo("=" * 40)
        click.echo(f"1) Strategy:         {settings['strategy']}")
        click.echo(f"2) Starting balance: {settings['balance']}")
        click.echo(f"3) Stake per round:  {settings['stake']}")
        click.echo(f"4) Max rounds:       {settings['max_rounds']}")
        click.echo("5) Run simulation")
        click.echo("6) Quit")
        click.echo("=" * 40)
        choice = click.prompt("Select an option", type=click.IntRange(1, 6))

        if choice == 1:
            settings['strategy'] = click.prompt("Strategy", type=click.Choice(sorted(STRATEGIES)), default=settings['strategy'])
        elif choice == 2:
            settings['balance'] = click.prompt("Starting balance", type=AMOUNT, default=settings['balance'])
        elif choice == 3:
            settings['stake'] = click.prompt("Stake per round", type=AMOUNT, default=settings['stake'])
        elif choice == 4:
            settings['max_rounds'] = click.prompt("Max rounds", type=click.IntRange(min=1), default=settings['max_rounds'])
        elif choice == 5:
            try:
                execute_run(output_dir=config.OUTPUT_DIR, **settings)
            except ValidationException as e:
                # Bad settings are fixable from the menu
                click.echo(f"⚠️  {e.status_message}", err=True)
            except AppException as e:
                _fail(e)
        else:
            click.echo("👋 Bye")
            return


@cli.command('check-rng')
@click.option('--draws', type=click.IntRange(min=1000), default=100_000, show_default=True, help='Draws per source')
@click.option('--alpha', type=click.FloatRange(0.0, 1.0, min_open=True, max_open=True), default=0.001, show_default=True)
def check_rng(draws, alpha):
    """Chi-square uniformity check of the wheel and the bet target picker."""
    table = build_table()
    reports = [
        ("Wheel", uniformity_report([table.roll_wheel().value for _ in range(draws)], len(ROULETTE_NUMBERS), alpha)),
        ("Bet target", uniformity_report(
            [table.target_index(table.pick_bet_target()) for _ in range(draws)], BET_TARGET_OUTCOMES, alpha
        )),
    ]

    all_passed = True
    for label, report in reports:
        status = "✅ PASS" if report.passed else "❌ FAIL"
        click.echo(
            f"{label}: {report.outcomes} outcomes, {report.draws:,} draws, "
            f"chi2={report.statistic:.2f} (critical {report.critical_value:.2f}), "
            f"p={report.p_value:.4f} at alpha={alpha} {status}"
        )
        click.echo(f"  min count {report.counts.min()}, max count {report.counts.max()}, unseen outcomes {report.unseen_outcomes}")
        all_passed = all_passed and report.passed

    if not all_passed:
        sys.exit(1)


def main():
    try:
        cli()
    except KeyboardInterrupt:
        click.echo("\n\n👋 Simulation interrupted by user")
        sys.exit(0)


if __name__ == '__main__':
    main()
