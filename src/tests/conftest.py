import pytest

from fakes import SleepSpy


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def sleep_spy():
    return SleepSpy()
