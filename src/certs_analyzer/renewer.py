"""
Certificate Renewer Module

Forces cert-manager to re-issue a Certificate by overriding the issuer-name
annotation on its Secret, then waits for the new CertificateRequest.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from utils.polling import PollTimeoutError, poll_until

from .cluster import ClusterStore, is_conflict
from .errors import RenewalError, RenewalTimeoutError
from .models import (
    FORCE_RENEWAL_ISSUER_NAME,
    ISSUER_NAME_ANNOTATION_KEY,
    CertificateDeclaration,
    RenewalRequest,
)

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_POLL_TIMEOUT = 60.0


class RenewalState(Enum):
    START = 'start'
    CANCEL_STALE = 'cancel_stale'
    ANNOTATE = 'annotate'
    AWAIT_REQUEST = 'await_request'
    DONE = 'done'
    FAILED = 'failed'


@dataclass
class RenewalResult:
    """What happened while renewing one certificate."""
    certificate: CertificateDeclaration
    state: RenewalState = RenewalState.START
    triggered: bool = False
    in_progress_request: Optional[str] = None
    deleted_requests: List[str] = field(default_factory=list)
    new_request: Optional[str] = None

    @property
    def skipped(self) -> bool:
        return self.state == RenewalState.DONE and not self.triggered


class CertificateRenewer:
    """Drives a single Certificate through a forced re-issuance."""

    def __init__(self, store: ClusterStore,
                 poll_interval: float = DEFAULT_POLL_INTERVAL,
                 poll_timeout: float = DEFAULT_POLL_TIMEOUT,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Initialize the certificate renewer.

        Args:
            store: Cluster store used to read and mutate resources
            poll_interval: Seconds between checks for a new CertificateRequest
            poll_timeout: Seconds to wait for a new CertificateRequest
            clock: Monotonic clock used by the poll loop
            sleep: Sleep function used by the poll loop
        """
        self.store = store
        self.poll_interval = poll_interval
        self.poll_timeout = poll_timeout
        self.clock = clock
        self.sleep = sleep

    def renew(self, certificate: CertificateDeclaration) -> RenewalResult:
        """
        Trigger a renewal of the given Certificate.

        Nothing is changed if an owned CertificateRequest is still in
        progress. Otherwise completed owned requests are deleted, the Secret's
        issuer-name annotation is overridden and the call blocks until a new
        owned CertificateRequest shows up.

        Args:
            certificate: Certificate to renew

        Returns:
            RenewalResult in state DONE

        Raises:
            RenewalError: If any step fails; remaining renewals should not run
        """
        result = RenewalResult(certificate=certificate)

        result.state = RenewalState.CANCEL_STALE
        if not self._cancel_stale_requests(certificate, result):
            result.state = RenewalState.DONE
            return result

        result.state = RenewalState.ANNOTATE
        self._annotate_secret(certificate, result)
        result.triggered = True

        result.state = RenewalState.AWAIT_REQUEST
        logger.info("Triggered renewal of Certificate - waiting for new CertificateRequest resource to be created...")
        self._await_request(certificate, result)

        result.state = RenewalState.DONE
        return result

    def _owned_requests(self, certificate: CertificateDeclaration) -> List[RenewalRequest]:
        requests = self.store.list_certificate_requests(certificate.namespace)
        return [req for req in requests if self.store.is_owned_by(req, certificate)]

    def _fail(self, result: RenewalResult, message: str, cause: Exception,
              error_cls=RenewalError) -> RenewalError:
        failed_in = result.state
        result.state = RenewalState.FAILED
        return error_cls(f"{message}: {cause}", certificate=result.certificate, state=failed_in)

    def _cancel_stale_requests(self, certificate: CertificateDeclaration, result: RenewalResult) -> bool:
        """Delete completed owned requests. Returns False if one is still in progress."""
        try:
            owned = self._owned_requests(certificate)
        except Exception as e:
            raise self._fail(result, "error listing CertificateRequest resources", e) from e

        in_progress = [req for req in owned if not req.is_complete]
        if in_progress:
            req = in_progress[0]
            logger.info(f"Found existing CertificateRequest {req.key} for Certificate - "
                        f"skipping triggering a renewal...")
            result.in_progress_request = req.key
            return False

        for req in owned:
            try:
                self.store.delete_certificate_request(req)
            except Exception as e:
                logger.error(f"❌ Failed to delete old CertificateRequest {req.key} for Certificate")
                raise self._fail(result, f"error deleting CertificateRequest {req.key}", e) from e
            logger.info(f"Deleted old CertificateRequest {req.key} for Certificate")
            result.deleted_requests.append(req.key)

        return True

    def _annotate_secret(self, certificate: CertificateDeclaration, result: RenewalResult) -> None:
        try:
            secret = self.store.get_secret(certificate.namespace, certificate.secret_name)
        except Exception as e:
            logger.error(f"❌ Failed to retrieve up-to-date copy of existing Secret resource for Certificate: {e}")
            raise self._fail(result, f"error reading Secret {certificate.namespace}/{certificate.secret_name}", e) from e

        secret.annotations[ISSUER_NAME_ANNOTATION_KEY] = FORCE_RENEWAL_ISSUER_NAME

        try:
            self.store.update_secret(secret)
        except Exception as e:
            if is_conflict(e):
                logger.error(f"❌ Secret {secret.key} was modified concurrently, not retrying")
            else:
                logger.error(f"❌ Failed to update Secret resource for Certificate: {e}")
            raise self._fail(result, f"error updating Secret {secret.key}", e) from e

    def _await_request(self, certificate: CertificateDeclaration, result: RenewalResult) -> None:
        def new_request_exists() -> bool:
            owned = self._owned_requests(certificate)
            if not owned:
                return False
            result.new_request = owned[0].key
            logger.info(f"CertificateRequest {owned[0].key} found, renewal in progress!")
            return True

        try:
            poll_until(new_request_exists, self.poll_interval, self.poll_timeout,
                       clock=self.clock, sleep=self.sleep)
        except PollTimeoutError as e:
            logger.error(f"❌ Failed to wait for new CertificateRequest to be created: {e}")
            raise self._fail(result, "timed out waiting for a new CertificateRequest", e,
                             error_cls=RenewalTimeoutError) from e
        except Exception as e:
            logger.error(f"❌ Failed to wait for new CertificateRequest to be created: {e}")
            raise self._fail(result, "error listing CertificateRequest resources", e) from e
