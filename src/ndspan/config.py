"""
Package settings, read once from the environment.

    NDSPAN_DEFAULT_DTYPE      dtype of tensors created without an explicit dtype (float64)
    NDSPAN_PRINT_THRESHOLD    element count above which printed tensors are elided (1000)
    NDSPAN_PRINT_EDGE_ITEMS   rows/columns kept at each edge of an elided plane (3)
    NDSPAN_LOG_LEVEL          level applied to the "ndspan" logger by configure_logging() (WARNING)
"""
import dataclasses
import logging
import os
from dataclasses import dataclass

import numpy as np

_ENV_PREFIX = "NDSPAN_"


@dataclass(frozen=True)
class Settings:
    default_dtype: np.dtype = np.dtype("float64")
    print_threshold: int = 1000
    print_edge_items: int = 3
    log_level: str = "WARNING"

    def __post_init__(self):
        object.__setattr__(self, "default_dtype", np.dtype(self.default_dtype))
        if self.print_threshold < 0:
            raise ValueError(f"print_threshold must be >= 0, got {self.print_threshold}")
        if self.print_edge_items < 1:
            raise ValueError(f"print_edge_items must be >= 1, got {self.print_edge_items}")
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")

    @staticmethod
    def from_env(environ=None) -> "Settings":
        environ = os.environ if environ is None else environ
        overrides = {}
        if f"{_ENV_PREFIX}DEFAULT_DTYPE" in environ:
            overrides["default_dtype"] = environ[f"{_ENV_PREFIX}DEFAULT_DTYPE"]
        if f"{_ENV_PREFIX}PRINT_THRESHOLD" in environ:
            overrides["print_threshold"] = int(environ[f"{_ENV_PREFIX}PRINT_THRESHOLD"])
        if f"{_ENV_PREFIX}PRINT_EDGE_ITEMS" in environ:
            overrides["print_edge_items"] = int(environ[f"{_ENV_PREFIX}PRINT_EDGE_ITEMS"])
        if f"{_ENV_PREFIX}LOG_LEVEL" in environ:
            overrides["log_level"] = environ[f"{_ENV_PREFIX}LOG_LEVEL"]
        return Settings(**overrides)


settings: Settings = Settings.from_env()


def get_settings() -> Settings:
    return settings


def set_settings(**overrides) -> Settings:
    """Replace fields of the active settings. Returns the previous settings so callers can restore them."""
    global settings
    previous = settings
    settings = dataclasses.replace(settings, **overrides)
    return previous


def configure_logging() -> None:
    logging.getLogger("ndspan").setLevel(settings.log_level.upper())


__all__ = ["Settings", "settings", "get_settings", "set_settings", "configure_logging"]
