import pytest

from daqtyl.configuration import KeyboardConfig
from daqtyl.engines.solid_engine import SolidPythonEngine
from daqtyl.model import Keyboard


@pytest.fixture
def config():
    return KeyboardConfig.from_dict({})


@pytest.fixture
def engine():
    return SolidPythonEngine()


@pytest.fixture
def kb(config, engine):
    return Keyboard(config, engine)


@pytest.fixture
def make_kb(engine):
    """
    Build a keyboard from overrides of the default configuration.
    """
    def make(**overrides):
        return Keyboard(KeyboardConfig.from_dict(overrides), engine)
    return make
