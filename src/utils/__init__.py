"""
Utilities Module

Common utilities for the certificate renewal tool.
"""

from .config import Config
from .console_report import ConsoleReportGenerator
from .logger import setup_logging
from .polling import PollTimeoutError, poll_until

__all__ = ['Config', 'ConsoleReportGenerator', 'setup_logging',
           'PollTimeoutError', 'poll_until']
