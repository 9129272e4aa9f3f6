"""
Configuration validation for simulation runs.

Environment values are validated before any table is built so a bad stake or an
unwritable output directory aborts the run up front instead of mid-simulation.
"""

import logging
import os
import warnings
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from betsim.utils.strategies import STRATEGIES

DEFAULTS = {
    'BETSIM_STARTING_BALANCE': '500',
    'BETSIM_STAKE': '5',
    'BETSIM_MAX_ROUNDS': '1000',
    'BETSIM_STRATEGY': 'random',
    'BETSIM_OUTPUT_DIR': '.',
    'BETSIM_LOG_LEVEL': 'INFO',
    'BETSIM_LOG_JSON': 'true',
}

TRUE_VALUES = ('true', '1', 't', 'yes')
FALSE_VALUES = ('false', '0', 'f', 'no')


class ConfigValidationError(Exception):
    """Raised when simulation configuration is missing or invalid."""
    pass


class ConfigValidator:
    """Validates simulation configuration from the environment."""

    def __init__(self, environ=None, overrides=None):
        self.environ = environ if environ is not None else os.environ
        # Command line values keyed by variable name; they replace the environment
        self.overrides = {k: v for k, v in (overrides or {}).items() if v is not None}
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def _get(self, var_name: str) -> str:
        if var_name in self.overrides:
            return str(self.overrides[var_name]).strip()
        value = self.environ.get(var_name)
        if value is None or value.strip() == '':
            return DEFAULTS[var_name]
        return value.strip()

    def validate_positive_decimal(self, var_name: str) -> Optional[Decimal]:
        raw = self._get(var_name)
        try:
            value = Decimal(raw)
        except InvalidOperation:
            self.errors.append(f"{var_name} must be a decimal number, got '{raw}'")
            return None
        if not value.is_finite() or value <= 0:
            self.errors.append(f"{var_name} must be greater than zero, got '{raw}'")
            return None
        return value

    def validate_bankroll_config(self):
        """Validate starting balance and stake."""
        starting_balance = self.validate_positive_decimal('BETSIM_STARTING_BALANCE')
        stake = self.validate_positive_decimal('BETSIM_STAKE')
        if starting_balance is not None and stake is not None and stake >= starting_balance:
            self.errors.append(
                f"BETSIM_STAKE ({stake}) must be smaller than BETSIM_STARTING_BALANCE ({starting_balance}) "
                "or no round can be played"
            )
        return starting_balance, stake

    def validate_max_rounds(self) -> Optional[int]:
        raw = self._get('BETSIM_MAX_ROUNDS')
        try:
            max_rounds = int(raw)
        except ValueError:
            self.errors.append(f"BETSIM_MAX_ROUNDS must be an integer, got '{raw}'")
            return None
        if max_rounds <= 0:
            self.errors.append(f"BETSIM_MAX_ROUNDS must be greater than zero, got {max_rounds}")
            return None
        if max_rounds > 10_000_000:
            self.warnings.append(f"BETSIM_MAX_ROUNDS={max_rounds} will produce a very large record file")
        return max_rounds

    def validate_strategy(self) -> Optional[str]:
        strategy = self._get('BETSIM_STRATEGY')
        if strategy not in STRATEGIES:
            self.errors.append(
                f"BETSIM_STRATEGY '{strategy}' is unknown. Valid strategies are: {', '.join(sorted(STRATEGIES))}"
            )
            return None
        return strategy

    def validate_output_dir(self) -> str:
        # Whether the directory is usable is decided when the record file is opened
        return self._get('BETSIM_OUTPUT_DIR')

    def validate_logging_config(self):
        level = self._get('BETSIM_LOG_LEVEL').upper()
        if not isinstance(logging.getLevelName(level), int):
            self.warnings.append(f"Unknown BETSIM_LOG_LEVEL '{level}', falling back to INFO")
            level = 'INFO'

        raw_json = self._get('BETSIM_LOG_JSON').lower()
        if raw_json in TRUE_VALUES:
            json_logs = True
        elif raw_json in FALSE_VALUES:
            json_logs = False
        else:
            self.warnings.append(f"BETSIM_LOG_JSON '{raw_json}' is not a boolean, using JSON logs")
            json_logs = True
        return level, json_logs

    def validate_all(self) -> dict:
        """
        Validate all configuration settings.

        Returns:
            Dictionary containing validated configuration values

        Raises:
            ConfigValidationError: If any setting is invalid
        """
        config = {}
        config['STARTING_BALANCE'], config['STAKE'] = self.validate_bankroll_config()
        config['MAX_ROUNDS'] = self.validate_max_rounds()
        config['STRATEGY'] = self.validate_strategy()
        config['OUTPUT_DIR'] = self.validate_output_dir()

        if self.errors:
            error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {error}" for error in self.errors)
            if self.warnings:
                error_msg += "\n\nWarnings:\n" + "\n".join(f"  - {warning}" for warning in self.warnings)
            raise ConfigValidationError(error_msg)

        self.emit_warnings()
        return config

    def emit_warnings(self):
        for warning in self.warnings:
            warnings.warn(warning, UserWarning)


def validate_simulation_config(environ=None, overrides=None) -> dict:
    """
    Validate simulation configuration with fail-fast behavior. overrides maps
    variable names to command line values that take precedence over environ.

    Raises:
        ConfigValidationError: If any setting is invalid. The caller decides how to abort.
    """
    return ConfigValidator(environ, overrides).validate_all()


def validate_logging_settings(environ=None):
    """Returns (level, json_logs). Never fails; bad values fall back with a warning."""
    validator = ConfigValidator(environ)
    settings = validator.validate_logging_config()
    validator.emit_warnings()
    return settings
