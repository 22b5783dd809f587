"""
Certificate Renewal Errors

Exception types raised while analysing and renewing certificates.
"""

from typing import Optional


class CertRenewalError(Exception):
    """Base class for all errors raised by this tool."""
    pass


class ConfigurationError(CertRenewalError):
    """Raised when configuration values are invalid."""
    pass


class FetchError(CertRenewalError):
    """Raised when a bulk read of Certificates or Secrets fails."""
    pass


class CertificateSkipError(CertRenewalError):
    """
    Base class for per-certificate problems that only cause a skip.

    These are never fatal: the scanner records them on the correlation
    result and carries on with the next certificate.
    """

    def __init__(self, message: str, secret_name: Optional[str] = None):
        super().__init__(message)
        self.secret_name = secret_name


class NotFoundError(CertificateSkipError):
    """The Secret referenced by a Certificate does not exist."""
    pass


class NoDataError(CertificateSkipError):
    """The Secret exists but holds no tls.crt bytes."""
    pass


class DecodeError(CertificateSkipError):
    """The tls.crt bytes are not a decodable X.509 certificate."""
    pass


class RenewalError(CertRenewalError):
    """
    Raised when triggering the renewal of a single certificate fails.

    Aborts the whole run so a partially renewed certificate can be
    investigated before anything else is mutated.
    """

    def __init__(self, message: str, certificate=None, state=None):
        super().__init__(message)
        self.certificate = certificate
        self.state = state


class RenewalTimeoutError(RenewalError):
    """No new CertificateRequest appeared before the poll ceiling."""
    pass
