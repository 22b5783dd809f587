"""
Certificate Analyzer Module

Decides which scanned certificates are affected and should be renewed.
"""

import logging
from typing import Iterable, Optional

from .models import ClassificationResult, CorrelationResult

logger = logging.getLogger(__name__)


class CertificateAnalyzer:
    """Classifies correlation results into affected and skipped certificates."""

    def __init__(self, issuer_name: Optional[str] = None):
        """
        Initialize the certificate analyzer.

        Args:
            issuer_name: Only certificates whose Secret carries exactly this
                issuer-name annotation are affected. Empty or None disables
                the filter.
        """
        self.issuer_name = issuer_name or ''

    @property
    def filter_enabled(self) -> bool:
        return bool(self.issuer_name)

    def matches_filter(self, result: CorrelationResult) -> bool:
        if not self.filter_enabled:
            return True
        return result.issuer_name == self.issuer_name

    def classify(self, results: Iterable[CorrelationResult]) -> ClassificationResult:
        """
        Build the affected set from correlation results.

        The affected set is keyed by certificate serial number. When two
        certificates share a serial number the one seen last is kept.

        Args:
            results: Output of CertificateScanner.correlate

        Returns:
            ClassificationResult with affected certificates and skip counters
        """
        classification = ClassificationResult()

        for result in results:
            if not result.ok:
                classification.skipped += 1
                continue

            crt = result.certificate
            if not self.matches_filter(result):
                logger.info(f"Certificate {crt.key} issuer {result.issuer_name!r} does not match "
                            f"{self.issuer_name!r}, skipping...")
                classification.skipped += 1
                classification.filtered += 1
                continue

            serial = result.decoded.serial_number
            previous = classification.affected.get(serial)
            if previous is not None:
                logger.debug(f"Serial number {serial} of {crt.key} already seen on {previous.key}, "
                             f"keeping {crt.key}")
            classification.affected[serial] = crt

        return classification
