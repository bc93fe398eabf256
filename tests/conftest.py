import logging

import pytest


@pytest.fixture(autouse=True)
def enable_logging():
    # The CLI disables logging globally unless -v is passed.
    yield
    logging.disable(logging.NOTSET)
