"""Operator notification for provcheck.

The checkers report every sub-check through a :class:`NotificationSink`.
:class:`ConsoleSink` is the terminal implementation used by the CLI.
"""

from .console import ConsoleSink, NotificationSink

__all__ = ["ConsoleSink", "NotificationSink"]
