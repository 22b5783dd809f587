"""
Configuration Module

Runtime settings resolved from command line arguments, environment
variables and defaults, in that order.
"""

import os
from typing import Any, Mapping, Optional

from certs_analyzer.errors import ConfigurationError

DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_POLL_TIMEOUT = 60.0
DEFAULT_WARNING_DELAY = 5.0
DEFAULT_CONFIRMATION_DELAY = 2.0

_TRUE_VALUES = ('1', 'true', 'yes', 'on')


def _parse_bool(value: Optional[str]) -> bool:
    return str(value).strip().lower() in _TRUE_VALUES if value is not None else False


def _parse_seconds(name: str, value: Any, default: float) -> float:
    if value is None or value == '':
        return default
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a number of seconds, got {value!r}")
    if seconds < 0:
        raise ConfigurationError(f"{name} must not be negative, got {value!r}")
    return seconds


class Config:
    """Configuration for a certificate renewal run."""

    def __init__(self, args: Any = None, environ: Optional[Mapping[str, str]] = None):
        """
        Initialize configuration.

        Args:
            args: argparse.Namespace from the command line (optional)
            environ: Environment mapping (defaults to os.environ)
        """
        env = os.environ if environ is None else environ

        def arg(name: str):
            return getattr(args, name, None) if args is not None else None

        issuer_name = arg('issuer_name')
        self.issuer_name = issuer_name if issuer_name is not None else env.get('CERT_RENEW_ISSUER_NAME', '')

        # Mutating the cluster is only ever enabled by the --renew flag
        self.renew = bool(arg('renew'))
        self.verbose = bool(arg('verbose')) or _parse_bool(env.get('CERT_RENEW_VERBOSE'))

        self.kubeconfig = arg('kubeconfig') or env.get('KUBECONFIG') or None
        self.context = arg('context') or env.get('CERT_RENEW_CONTEXT') or None
        self.log_file = arg('log_file') or env.get('CERT_RENEW_LOG_FILE') or None

        self.poll_interval = _parse_seconds(
            'CERT_RENEW_POLL_INTERVAL', env.get('CERT_RENEW_POLL_INTERVAL'), DEFAULT_POLL_INTERVAL)
        self.poll_timeout = _parse_seconds(
            'CERT_RENEW_POLL_TIMEOUT', env.get('CERT_RENEW_POLL_TIMEOUT'), DEFAULT_POLL_TIMEOUT)
        self.warning_delay = _parse_seconds(
            'CERT_RENEW_WARNING_DELAY', env.get('CERT_RENEW_WARNING_DELAY'), DEFAULT_WARNING_DELAY)
        self.confirmation_delay = _parse_seconds(
            'CERT_RENEW_CONFIRMATION_DELAY', env.get('CERT_RENEW_CONFIRMATION_DELAY'),
            DEFAULT_CONFIRMATION_DELAY)

        for name, seconds in (('CERT_RENEW_POLL_INTERVAL', self.poll_interval),
                              ('CERT_RENEW_WARNING_DELAY', self.warning_delay),
                              ('CERT_RENEW_CONFIRMATION_DELAY', self.confirmation_delay)):
            if seconds == 0:
                raise ConfigurationError(f"{name} must be greater than zero")

    def get_issuer_name(self) -> str:
        return self.issuer_name

    def is_issuer_filter_enabled(self) -> bool:
        return bool(self.issuer_name)

    def is_renew_enabled(self) -> bool:
        return self.renew

    def get_kubeconfig(self) -> Optional[str]:
        return self.kubeconfig

    def get_context(self) -> Optional[str]:
        return self.context

    def __repr__(self) -> str:
        return (f"Config(issuer_name={self.issuer_name!r}, renew={self.renew}, "
                f"kubeconfig={self.kubeconfig!r}, context={self.context!r}, "
                f"poll_interval={self.poll_interval}, poll_timeout={self.poll_timeout})")
