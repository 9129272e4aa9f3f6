"""European roulette table model and Monte-Carlo bankroll simulator."""

__version__ = "1.0.0"
