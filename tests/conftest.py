import pytest

from customer_profiler.dispatcher import Dispatcher

from .support import StubGenerator


@pytest.fixture()
def generator():
    return StubGenerator()


@pytest.fixture()
def dispatcher(generator):
    return Dispatcher(generator)
