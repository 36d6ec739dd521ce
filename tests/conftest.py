import pytest

from tests.helpers import FakeTransport, synthetic_ecg


@pytest.fixture
def ecg72():
    return synthetic_ecg(bpm=72.0)


@pytest.fixture
def transport():
    return FakeTransport()
