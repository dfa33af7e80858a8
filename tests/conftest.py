import io

import pytest

from streamreport.config import Configuration
from streamreport.report import StreamReport


@pytest.fixture
def configuration():
    """Plain-text configuration with progress bars on, independent of the real terminal."""
    return Configuration(enable_colors=False, enable_progress_bars=True)


@pytest.fixture
def stream():
    return io.StringIO()


@pytest.fixture
def report(configuration, stream):
    return StreamReport(configuration=configuration, stdout=stream)
