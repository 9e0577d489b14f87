"""Tests for environment-driven settings.

Run with: pytest tests/test_config.py -v
"""

import logging

import numpy as np
import pytest

from ndspan import Tensor
from ndspan.config import Settings, configure_logging, get_settings, set_settings


class TestSettings:
    """Tests for Settings construction."""

    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.default_dtype == np.dtype("float64")
        assert settings.print_threshold == 1000
        assert settings.print_edge_items == 3
        assert settings.log_level == "WARNING"

    def test_from_env(self) -> None:
        settings = Settings.from_env(
            {
                "NDSPAN_DEFAULT_DTYPE": "float32",
                "NDSPAN_PRINT_THRESHOLD": "10",
                "NDSPAN_PRINT_EDGE_ITEMS": "2",
                "NDSPAN_LOG_LEVEL": "debug",
            }
        )
        assert settings.default_dtype == np.dtype("float32")
        assert settings.print_threshold == 10
        assert settings.print_edge_items == 2
        assert settings.log_level == "debug"

    def test_from_env_ignores_unrelated_variables(self) -> None:
        assert Settings.from_env({"HOME": "/root"}) == Settings()

    def test_invalid_values(self) -> None:
        with pytest.raises(ValueError):
            Settings(print_edge_items=0)
        with pytest.raises(ValueError):
            Settings(print_threshold=-1)
        with pytest.raises(ValueError):
            Settings(log_level="LOUD")
        with pytest.raises(TypeError):
            Settings(default_dtype="not-a-dtype")


class TestActiveSettings:
    """Tests for replacing the active settings."""

    def test_set_settings_returns_previous(self, restore_settings) -> None:
        before = get_settings()
        previous = set_settings(print_threshold=5)
        assert previous is before
        assert get_settings().print_threshold == 5

    def test_default_dtype_applies_to_new_tensors(self, restore_settings) -> None:
        set_settings(default_dtype="int32")
        assert Tensor((2, 2)).dtype == np.dtype("int32")

    def test_configure_logging(self, restore_settings) -> None:
        logger = logging.getLogger("ndspan")
        level = logger.level
        try:
            set_settings(log_level="DEBUG")
            configure_logging()
            assert logger.level == logging.DEBUG
        finally:
            logger.setLevel(level)
