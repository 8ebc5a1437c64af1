import pytest

from services.extractor.tests.helpers import make_settings


@pytest.fixture
def settings():
    return make_settings()
