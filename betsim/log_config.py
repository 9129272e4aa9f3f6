import contextlib
import contextvars
import logging

from pythonjsonlogger import jsonlogger

_current_run_id = contextvars.ContextVar("betsim_run_id", default="N/A")

JSON_LOG_FORMAT = '%(asctime)s %(levelname)s %(run_id)s %(module)s %(funcName)s %(lineno)d %(message)s'
PLAIN_LOG_FORMAT = '%(asctime)s %(levelname)s [%(run_id)s] %(name)s: %(message)s'


# Custom Logging Filter for Run ID
class RunIdFilter(logging.Filter):
    def filter(self, record):
        record.run_id = _current_run_id.get()
        return True


@contextlib.contextmanager
def run_context(run_id: str):
    """Tags every log record emitted inside the block with run_id."""
    token = _current_run_id.set(run_id)
    try:
        yield run_id
    finally:
        _current_run_id.reset(token)


def configure_logging(level="INFO", json_logs=True):
    logger = logging.getLogger("betsim")
    handler = logging.StreamHandler()
    if json_logs:
        formatter = jsonlogger.JsonFormatter(JSON_LOG_FORMAT)
    else:
        formatter = logging.Formatter(PLAIN_LOG_FORMAT)
    handler.setFormatter(formatter)
    handler.addFilter(RunIdFilter())
    if logger.hasHandlers():
        logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
