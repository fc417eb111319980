import pytest

from tapegrad import ParameterRegistry, Tape, use_tape


@pytest.fixture
def tape():
    """Fresh tape installed as the default for the duration of a test."""
    with use_tape(Tape()) as t:
        yield t


@pytest.fixture
def registry():
    reg = ParameterRegistry()
    yield reg
    reg.release_parameters()
