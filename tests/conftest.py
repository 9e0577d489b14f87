"""Shared fixtures for the ndspan test suite."""

import pytest

from ndspan import Tensor
import ndspan.config as config


def make_identity(dimensions: tuple[int, ...]) -> Tensor:
    """Build a tensor of zeros with ones on its main diagonal.

    Args:
        dimensions: Dimensions of the tensor, all equal.

    Returns:
        Tensor with element [k, k, ..., k] == 1 for every k and 0 elsewhere.
    """
    tensor = Tensor(dimensions, repeated_value=0)
    for k in range(dimensions[0]):
        tensor[(k,) * len(dimensions)] = 1
    return tensor


@pytest.fixture
def identity_5x5x5() -> Tensor:
    """Rank 3 tensor of dimensions (5, 5, 5) with its diagonal set to 1."""
    return make_identity((5, 5, 5))


@pytest.fixture
def identity_2x2x2x2() -> Tensor:
    """Rank 4 tensor of dimensions (2, 2, 2, 2) with its diagonal set to 1."""
    return make_identity((2, 2, 2, 2))


@pytest.fixture
def counting_3x4() -> Tensor:
    """Rank 2 tensor holding 0..11 in row-major order."""
    return Tensor.from_elements((3, 4), range(12))


@pytest.fixture
def restore_settings():
    """Restore the package settings changed during a test."""
    previous = config.get_settings()
    yield
    config.settings = previous
