import pytest

from ganttr.logger import reset_logger


@pytest.fixture(autouse=True)
def _clean_logger():
    reset_logger()
    yield
    reset_logger()
