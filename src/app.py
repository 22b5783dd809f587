"""
Certificate Renewal Application

Wires the scanner, analyzer and renewer together for one run.
"""

import logging
import time
from typing import Callable, Optional

from certs_analyzer import (
    CertificateAnalyzer,
    CertificateRenewer,
    CertificateScanner,
    ClusterStore,
    KubernetesClusterStore,
)
from certs_analyzer.errors import CertRenewalError, RenewalError
from utils import Config, ConsoleReportGenerator

logger = logging.getLogger(__name__)


class CertRenewalApp:
    """Analyses cert-manager certificates and optionally forces their renewal."""

    def __init__(self, config: Config, store: Optional[ClusterStore] = None,
                 sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], float] = time.monotonic):
        """
        Initialize the application.

        Args:
            config: Run configuration
            store: Cluster store (built from the kubeconfig if omitted)
            sleep: Sleep function for the warning delays and the poll loop
            clock: Monotonic clock for the poll loop
        """
        self.config = config
        self._store = store
        self.sleep = sleep
        self.clock = clock
        self.report = ConsoleReportGenerator()

    @property
    def store(self) -> ClusterStore:
        if self._store is None:
            self._store = KubernetesClusterStore.from_config(
                self.config.get_kubeconfig(), self.config.get_context())
        return self._store

    def run(self) -> int:
        """
        Run the analysis and, if enabled, the renewals.

        Returns:
            Process exit code: 0 on success, 1 on any error
        """
        self.report.print_banner(self.config)
        if self.config.is_renew_enabled():
            self.sleep(self.config.warning_delay)

        try:
            self.execute()
        except RenewalError as e:
            crt = e.certificate
            name = f"{crt.namespace}/{crt.name}" if crt is not None else "unknown"
            logger.error(f"❌ Failed to renew certificate {name}: {e}")
            return 1
        except CertRenewalError as e:
            logger.error(f"❌ {e}")
            return 1
        except Exception as e:
            logger.error(f"❌ Unexpected error: {e}")
            logger.debug("Traceback:", exc_info=True)
            return 1
        return 0

    def execute(self):
        """
        Scan, classify, report and renew.

        Returns:
            The ClassificationResult of the analysis

        Raises:
            FetchError: If the cluster resources could not be listed
            RenewalError: On the first failed renewal
        """
        scanner = CertificateScanner(self.store)
        analyzer = CertificateAnalyzer(self.config.get_issuer_name())

        results = scanner.scan()
        classification = analyzer.classify(results)
        self.report.print_summary(classification, self.config)

        if not classification.affected:
            return classification
        if not self.config.is_renew_enabled():
            self.report.print_dry_run()
            return classification

        self.report.print_renewal_plan(classification, self.config.confirmation_delay)
        self.sleep(self.config.confirmation_delay)

        renewer = CertificateRenewer(
            self.store,
            poll_interval=self.config.poll_interval,
            poll_timeout=self.config.poll_timeout,
            clock=self.clock,
            sleep=self.sleep,
        )
        renewals = []
        for crt in classification.affected.values():
            logger.info("")
            logger.info(f"Triggering renewal of Certificate {crt.namespace}/{crt.name}")
            renewals.append(renewer.renew(crt))

        self.report.print_renewal_results(renewals)
        return classification
