import pytest

from torchcqt import DerivedCache, create_parameters


@pytest.fixture
def small_params():
    """64 bins from 100 Hz at 16 kHz with a 1024-sample window."""
    return create_parameters(100.0, 4000.0, 12, 16000.0, 1024)


@pytest.fixture(scope="session")
def reference_params():
    """85 bins from 30 Hz at 44 kHz with a 4096-sample window."""
    return create_parameters(30.0, 4000.0, 12, 44000.0, 4096)


@pytest.fixture
def cache():
    return DerivedCache()
