"""
Console Report Module

Writes analysis and renewal summaries to the operator's log stream.
"""

import logging
from typing import Iterable

from certs_analyzer.models import ClassificationResult

from .config import Config

logger = logging.getLogger(__name__)


class ConsoleReportGenerator:
    """Formats run progress and results for a human operator."""

    @staticmethod
    def print_banner(config: Config) -> None:
        if config.is_issuer_filter_enabled():
            logger.warning(f"!!!!! --issuerName has been set. Only certificates issued by "
                           f"{config.get_issuer_name()!r} will be considered !!!!!")
        if config.is_renew_enabled():
            logger.warning("!!!!! --renew has been set to TRUE. Any affected certificates will have a "
                           "renewal automatically triggered if found !!!!!")
            logger.warning(f"!!!!! Waiting {config.warning_delay:g}s before proceeding, if you DO NOT want "
                           f"renewals to be triggered, hit ctrl+c NOW !!!!!")
        logger.info("This tool will query a Kubernetes cluster, check which certificates are issued "
                    "with cert-manager and trigger a renewal of any affected certificates. "
                    "It is not safe to run multiple times, it will trigger a renewal every time.")

    @staticmethod
    def print_summary(classification: ClassificationResult, config: Config) -> None:
        """
        Log the results of the analysis.

        Args:
            classification: Output of CertificateAnalyzer.classify
            config: Run configuration, for the issuer filter in use
        """
        logger.info("Finished analyzing certificates, results:")
        logger.info(f"  Skipped/unable to check: {classification.skipped}")
        if config.is_issuer_filter_enabled():
            logger.info(f"    of which filtered by issuer name: {classification.filtered}")
        logger.info(f"  Affected certificates: {len(classification.affected)}")

    @staticmethod
    def print_dry_run() -> None:
        logger.info("")
        logger.info("Will NOT trigger a renewal as --renew set to false")

    @staticmethod
    def print_renewal_plan(classification: ClassificationResult, confirmation_delay: float) -> None:
        """
        List every certificate that is about to be renewed.

        Args:
            classification: Output of CertificateAnalyzer.classify
            confirmation_delay: Seconds the caller will wait before renewing
        """
        logger.info("")
        logger.info("Will now attempt to renew the following certificates:")
        for serial, crt in classification.affected.items():
            logger.info(f"  * {crt.namespace}/{crt.name} (serial number: {serial})")
        logger.info("")
        logger.warning(f"!!!!! Will now attempt to renew {len(classification.affected)} certificates, "
                       f"waiting {confirmation_delay:g}s... !!!!!")

    @staticmethod
    def print_renewal_results(results: Iterable) -> None:
        """
        Log how many renewals were triggered and how many were already in progress.

        Args:
            results: RenewalResult objects returned by CertificateRenewer.renew
        """
        results = list(results)
        triggered = sum(1 for r in results if r.triggered)
        in_progress = sum(1 for r in results if r.skipped)
        logger.info("")
        logger.info("✅ Finished triggering renewals, results:")
        logger.info(f"  Renewals triggered: {triggered}")
        logger.info(f"  Already in progress, left alone: {in_progress}")
