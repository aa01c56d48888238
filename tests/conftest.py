import pytest

from quire.content import default_store


@pytest.fixture(autouse=True)
def clear_default_store():
    default_store.clear()
    yield
    default_store.clear()
