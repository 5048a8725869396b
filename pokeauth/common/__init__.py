# Common utilities
from pokeauth.common.clock import SystemClock as SystemClock
from pokeauth.common.config import Config as Config
from pokeauth.common.logging_utils import setup_logger as setup_logger

__all__ = ["Config", "SystemClock", "setup_logger"]
