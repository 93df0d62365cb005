import pytest

from tests.engines import recording_renderer


@pytest.fixture
def pdf_engine():
    recording_renderer.reset()
    yield recording_renderer
    recording_renderer.reset()
