"""Message codes, severities and the label/indent formatting shared by outputs."""

from enum import Enum, IntEnum

__all__ = [
    "FORGETTABLE_NAMES",
    "INDENT",
    "MARKER",
    "MessageName",
    "Severity",
    "format_indent",
    "format_name",
]

MARKER = "➤"
INDENT = "│ "


class MessageName(IntEnum):
    """Stable numeric codes identifying report messages."""

    UNNAMED = 0
    EXCEPTION = 1
    MISSING_PEER_DEPENDENCY = 2
    CYCLIC_DEPENDENCIES = 3
    DISABLED_BUILD_SCRIPTS = 4
    BUILD_DISABLED = 5
    SOFT_LINK_BUILD = 6
    MUST_BUILD = 7
    MUST_REBUILD = 8
    BUILD_FAILED = 9
    RESOLVER_NOT_FOUND = 10
    FETCHER_NOT_FOUND = 11
    LINKER_NOT_FOUND = 12
    FETCH_NOT_CACHED = 13
    IMPORT_FAILED = 14
    REMOTE_INVALID = 15
    REMOTE_NOT_FOUND = 16
    RESOLUTION_PACK = 17
    CACHE_CHECKSUM_MISMATCH = 18
    UNUSED_CACHE_ENTRY = 19
    MISSING_LOCKFILE_ENTRY = 20
    WORKSPACE_NOT_FOUND = 21


# Notices that are collapsed into a sliding window instead of scrolling
FORGETTABLE_NAMES = frozenset({MessageName.FETCH_NOT_CACHED})


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def color(self) -> str:
        return {"info": "blueBright", "warning": "yellowBright", "error": "redBright"}[self.value]


def format_name(name: int | None, configuration, json: bool = False) -> str:
    """Render a message code as a fixed-width label such as SR0013.

    Unnamed messages are greyed out in human output.
    """
    num = 0 if name is None else int(name)
    label = f"{configuration.label_prefix}{num:04d}"
    if not json and name is None:
        return configuration.format(label, "grey")
    return label


def format_indent(level: int) -> str:
    return INDENT * level
