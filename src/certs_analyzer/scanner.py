"""
Certificate Scanner Module

Fetches cert-manager Certificates and Secrets from the cluster and matches
each Certificate with the Secret holding its issued material.
"""

import logging
from typing import Dict, Iterable, List, Tuple

from cryptography import x509
from cryptography.hazmat.backends import default_backend

from .cluster import ClusterStore
from .errors import DecodeError, FetchError, NoDataError, NotFoundError
from .models import (
    TLS_CERT_KEY,
    CertificateDeclaration,
    CorrelationResult,
    DecodedCertificate,
    SecretRecord,
)

logger = logging.getLogger(__name__)


def decode_certificate(cert_pem: bytes) -> DecodedCertificate:
    """
    Decode the first PEM certificate in a tls.crt payload.

    Args:
        cert_pem: PEM encoded certificate (chain)

    Returns:
        Serial number and issuer metadata of the leaf certificate

    Raises:
        DecodeError: If the bytes are not a valid PEM X.509 certificate
    """
    try:
        cert = x509.load_pem_x509_certificate(cert_pem, default_backend())
    except ValueError as e:
        raise DecodeError(f"invalid X.509 certificate data: {e}") from e

    return DecodedCertificate(
        serial_number=str(cert.serial_number),
        issuer=cert.issuer.rfc4514_string(),
        subject=cert.subject.rfc4514_string(),
        not_after=cert.not_valid_after_utc,
    )


def make_secrets_map(secrets: Iterable[SecretRecord]) -> Dict[Tuple[str, str], SecretRecord]:
    return {(secret.namespace, secret.name): secret for secret in secrets}


class CertificateScanner:
    """Scans the cluster for Certificates and resolves their Secrets."""

    def __init__(self, store: ClusterStore):
        """
        Initialize the certificate scanner.

        Args:
            store: Cluster store used for the two bulk reads
        """
        self.store = store

    def fetch_resources(self) -> Tuple[List[CertificateDeclaration], List[SecretRecord]]:
        """
        Read every Certificate and every Secret in the cluster.

        Returns:
            Tuple of (certificates, secrets)

        Raises:
            FetchError: If either list call fails
        """
        try:
            certificates = self.store.list_certificates()
        except Exception as e:
            raise FetchError(f"error listing Certificate resources: {e}") from e

        logger.info(f"Found {len(certificates)} Certificate resources to check")

        try:
            secrets = self.store.list_secrets()
        except Exception as e:
            raise FetchError(f"error listing Secret resources: {e}") from e

        logger.debug(f"Found {len(secrets)} Secret resources")
        return certificates, secrets

    def correlate(self, certificates: Iterable[CertificateDeclaration],
                  secrets: Iterable[SecretRecord]) -> List[CorrelationResult]:
        """
        Match each Certificate with its Secret and decode the stored certificate.

        Results keep the order of ``certificates``. Certificates that cannot be
        checked carry a CertificateSkipError instead of decoded data.

        Args:
            certificates: Certificate declarations to check
            secrets: All Secrets read from the cluster

        Returns:
            One CorrelationResult per certificate
        """
        secrets_map = make_secrets_map(secrets)
        results = []

        for crt in certificates:
            logger.info(f"+++ Checking Secret resource for Certificate {crt.namespace}/{crt.name}")
            result = CorrelationResult(certificate=crt)
            try:
                secret = self._resolve_secret(crt, secrets_map)
                result.secret = secret
                result.decoded = self._decode_secret(crt, secret)
                result.issuer_name = secret.issuer_name
            except NotFoundError as e:
                logger.warning(f"⚠️ Unable to find Secret resource {crt.secret_name!r}, skipping...")
                result.error = e
            except NoDataError as e:
                logger.warning(f"⚠️ Secret {crt.secret_name!r} does not contain any data for key "
                               f"{TLS_CERT_KEY!r}, skipping...")
                result.error = e
            except DecodeError as e:
                logger.warning(f"⚠️ Failed to decode x509 certificate data in Secret "
                               f"{crt.secret_name!r}: {e}, skipping...")
                result.error = e
            results.append(result)

        return results

    def scan(self) -> List[CorrelationResult]:
        """Fetch cluster resources and correlate them."""
        logger.info("🔍 Starting cert-manager certificate scan...")
        certificates, secrets = self.fetch_resources()
        return self.correlate(certificates, secrets)

    def _resolve_secret(self, crt: CertificateDeclaration,
                        secrets_map: Dict[Tuple[str, str], SecretRecord]) -> SecretRecord:
        secret = secrets_map.get((crt.namespace, crt.secret_name))
        if secret is None:
            raise NotFoundError(f"secret {crt.namespace}/{crt.secret_name} not found",
                                secret_name=crt.secret_name)
        return secret

    def _decode_secret(self, crt: CertificateDeclaration, secret: SecretRecord) -> DecodedCertificate:
        cert_pem = secret.data.get(TLS_CERT_KEY)
        if not cert_pem:
            raise NoDataError(f"secret {secret.key} has no {TLS_CERT_KEY} data",
                              secret_name=crt.secret_name)
        try:
            return decode_certificate(cert_pem)
        except DecodeError as e:
            e.secret_name = crt.secret_name
            raise
