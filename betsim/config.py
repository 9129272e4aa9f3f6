"""
Simulation configuration.

Values come from the environment (optionally a .env file in the working
directory) and are validated by config_validator before a run starts.
Command line values override the environment before validation.
"""
from dotenv import load_dotenv

from betsim.config_validator import validate_simulation_config

load_dotenv()

# Config attribute -> environment variable
ENV_VARS = {
    'STARTING_BALANCE': 'BETSIM_STARTING_BALANCE',
    'STAKE': 'BETSIM_STAKE',
    'MAX_ROUNDS': 'BETSIM_MAX_ROUNDS',
    'STRATEGY': 'BETSIM_STRATEGY',
    'OUTPUT_DIR': 'BETSIM_OUTPUT_DIR',
}


class Config:
    """Validated run settings. Build with Config.from_env()."""

    def __init__(self, starting_balance, stake, max_rounds, strategy, output_dir):
        self.STARTING_BALANCE = starting_balance
        self.STAKE = stake
        self.MAX_ROUNDS = max_rounds
        self.STRATEGY = strategy
        self.OUTPUT_DIR = output_dir

    @classmethod
    def from_env(cls, environ=None, **overrides) -> "Config":
        """
        overrides use the attribute names (stake=Decimal("5"), strategy="red", ...).
        None values are ignored so unset click options fall through to the environment.
        """
        validated = validate_simulation_config(
            environ, {ENV_VARS[name.upper()]: value for name, value in overrides.items()}
        )
        return cls(
            starting_balance=validated['STARTING_BALANCE'],
            stake=validated['STAKE'],
            max_rounds=validated['MAX_ROUNDS'],
            strategy=validated['STRATEGY'],
            output_dir=validated['OUTPUT_DIR'],
        )

    def __repr__(self):
        return (
            f"<Config strategy={self.STRATEGY} balance={self.STARTING_BALANCE} stake={self.STAKE} "
            f"max_rounds={self.MAX_ROUNDS} output_dir={self.OUTPUT_DIR}>"
        )
