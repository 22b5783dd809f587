"""
Certificate Models

Snapshots of the cluster resources this tool reads and the values it
derives from them.
"""

import base64
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .errors import CertificateSkipError

# Well-known keys and values used by cert-manager
TLS_CERT_KEY = 'tls.crt'
ISSUER_NAME_ANNOTATION_KEY = 'cert-manager.io/issuer-name'
FORCE_RENEWAL_ISSUER_NAME = 'force-renewal-triggered'


@dataclass(frozen=True)
class CertificateDeclaration:
    """A cert-manager Certificate resource."""
    namespace: str
    name: str
    secret_name: str
    uid: str = ''
    issuer_ref: Optional[str] = None

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"

    @classmethod
    def from_k8s_object(cls, obj: Dict[str, Any]) -> 'CertificateDeclaration':
        """Build a declaration from a CustomObjectsApi item."""
        metadata = obj.get('metadata', {})
        spec = obj.get('spec', {})
        return cls(
            namespace=metadata.get('namespace', ''),
            name=metadata.get('name', ''),
            uid=metadata.get('uid', ''),
            secret_name=spec.get('secretName', ''),
            issuer_ref=(spec.get('issuerRef') or {}).get('name'),
        )


@dataclass
class SecretRecord:
    """
    A Kubernetes Secret with its data already base64-decoded.

    ``raw`` keeps the original V1Secret so that an update sends back every
    field this tool does not look at.
    """
    namespace: str
    name: str
    data: Dict[str, bytes] = field(default_factory=dict)
    annotations: Dict[str, str] = field(default_factory=dict)
    resource_version: Optional[str] = None
    raw: Any = field(default=None, repr=False, compare=False)

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"

    @property
    def issuer_name(self) -> Optional[str]:
        return self.annotations.get(ISSUER_NAME_ANNOTATION_KEY)

    @classmethod
    def from_k8s_object(cls, secret) -> 'SecretRecord':
        """Build a record from a V1Secret returned by CoreV1Api."""
        metadata = secret.metadata
        data = {
            key: base64.b64decode(value) if value else b''
            for key, value in (secret.data or {}).items()
        }
        return cls(
            namespace=metadata.namespace,
            name=metadata.name,
            data=data,
            annotations=dict(metadata.annotations or {}),
            resource_version=metadata.resource_version,
            raw=secret,
        )


@dataclass(frozen=True)
class OwnerReference:
    uid: str
    kind: str = ''
    name: str = ''
    controller: bool = False


@dataclass
class RenewalRequest:
    """A cert-manager CertificateRequest resource."""
    namespace: str
    name: str
    owner_references: List[OwnerReference] = field(default_factory=list)
    certificate: str = ''

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"

    @property
    def is_complete(self) -> bool:
        """True once the issued certificate has been attached to the status."""
        return bool(self.certificate)

    def is_controlled_by(self, certificate: CertificateDeclaration) -> bool:
        """
        Check whether this request's controller reference points at the given certificate.

        Args:
            certificate: Candidate owning Certificate

        Returns:
            True if a controller owner reference carries the certificate's UID
        """
        for ref in self.owner_references:
            if ref.controller:
                return bool(ref.uid) and ref.uid == certificate.uid
        return False

    @classmethod
    def from_k8s_object(cls, obj: Dict[str, Any]) -> 'RenewalRequest':
        metadata = obj.get('metadata', {})
        status = obj.get('status') or {}
        refs = [
            OwnerReference(
                uid=ref.get('uid', ''),
                kind=ref.get('kind', ''),
                name=ref.get('name', ''),
                controller=bool(ref.get('controller', False)),
            )
            for ref in metadata.get('ownerReferences') or []
        ]
        return cls(
            namespace=metadata.get('namespace', ''),
            name=metadata.get('name', ''),
            owner_references=refs,
            certificate=status.get('certificate') or '',
        )


@dataclass(frozen=True)
class DecodedCertificate:
    """Identity fields read from a PEM encoded X.509 certificate."""
    serial_number: str
    issuer: str
    subject: str
    not_after: Optional[datetime] = None


@dataclass
class CorrelationResult:
    """Outcome of matching one Certificate with its Secret."""
    certificate: CertificateDeclaration
    secret: Optional[SecretRecord] = None
    decoded: Optional[DecodedCertificate] = None
    issuer_name: Optional[str] = None
    error: Optional[CertificateSkipError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.decoded is not None


@dataclass
class ClassificationResult:
    """
    Affected certificates keyed by serial number, plus skip counters.

    ``skipped`` counts every certificate that did not make it into
    ``affected``; ``filtered`` is the part of it removed by the issuer filter.
    """
    affected: Dict[str, CertificateDeclaration] = field(default_factory=dict)
    skipped: int = 0
    filtered: int = 0
