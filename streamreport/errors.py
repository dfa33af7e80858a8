"""Exceptions that carry their own report code."""

from streamreport.messages import MessageName

__all__ = ["ReportError"]


class ReportError(Exception):
    """An error meant to be shown to the user as a single report line.

    report_exception_once() prints it with its own code and message instead of
    a traceback.
    """

    def __init__(self, code: MessageName, message: str):
        super().__init__(message)
        self.code = code
        self.message = message
