"""streamreport - Streaming diagnostics and live progress for command-line tools.

This package reports the events of a long running command either as a
human-readable terminal view, with live progress rows and collapsible noisy
notices, or as one JSON record per line for machine consumption.
"""

from streamreport.config import Configuration
from streamreport.errors import ReportError
from streamreport.messages import MessageName
from streamreport.progress import ProgressDefinition
from streamreport.report import StreamReport
from streamreport.sources import ProgressCounter
from streamreport.stats import format_timing

try:
    from streamreport._version import __version__
except ImportError:
    __version__ = "0.0.0.dev0"

__all__ = [
    "Configuration",
    "MessageName",
    "ProgressCounter",
    "ProgressDefinition",
    "ReportError",
    "StreamReport",
    "__version__",
    "format_timing",
]
