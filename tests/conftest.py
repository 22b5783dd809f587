"""
Shared fixtures: an in-memory cluster store, generated PEM certificates and
a fake clock.
"""

from __future__ import annotations

import copy
from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import Encoding
from cryptography.x509.oid import NameOID

from certs_analyzer.models import (
    ISSUER_NAME_ANNOTATION_KEY,
    TLS_CERT_KEY,
    CertificateDeclaration,
    OwnerReference,
    RenewalRequest,
    SecretRecord,
)


def make_cert_pem(serial: int, common_name: str = "example.com") -> bytes:
    """Self-signed PEM certificate with a fixed serial number."""
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.now(timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(serial)
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=90))
        .sign(key, hashes.SHA256())
    )
    return cert.public_bytes(Encoding.PEM)


def make_certificate(name: str, namespace: str = "default", secret_name: str | None = None) -> CertificateDeclaration:
    return CertificateDeclaration(
        namespace=namespace,
        name=name,
        secret_name=secret_name or f"{name}-tls",
        uid=f"uid-{namespace}-{name}",
    )


def make_secret(name: str, namespace: str = "default", cert_pem: bytes | None = None,
                issuer_name: str | None = None) -> SecretRecord:
    data = {"tls.key": b"key"}
    if cert_pem is not None:
        data[TLS_CERT_KEY] = cert_pem
    annotations = {}
    if issuer_name is not None:
        annotations[ISSUER_NAME_ANNOTATION_KEY] = issuer_name
    return SecretRecord(namespace=namespace, name=name, data=data,
                        annotations=annotations, resource_version="1")


def make_request(name: str, certificate: CertificateDeclaration, complete: bool = True) -> RenewalRequest:
    return RenewalRequest(
        namespace=certificate.namespace,
        name=name,
        owner_references=[OwnerReference(uid=certificate.uid, kind="Certificate",
                                         name=certificate.name, controller=True)],
        certificate="LS0tLS1CRUdJTi..." if complete else "",
    )


class FakeClusterStore:
    """In-memory ClusterStore that records every mutation."""

    def __init__(self, certificates=(), secrets=(), requests=()):
        self.certificates = list(certificates)
        self.secrets = {(s.namespace, s.name): s for s in secrets}
        self.requests = list(requests)
        self.updated_secrets: list[SecretRecord] = []
        self.deleted_requests: list[RenewalRequest] = []
        self.list_request_calls = 0
        # Called after each list_certificate_requests to let tests add requests
        self.on_list_requests: Callable[["FakeClusterStore"], None] | None = None
        self.fail_on: dict[str, Exception] = {}

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.fail_on:
            raise self.fail_on[operation]

    @property
    def mutations(self) -> int:
        return len(self.updated_secrets) + len(self.deleted_requests)

    def list_certificates(self):
        self._maybe_fail("list_certificates")
        return list(self.certificates)

    def list_secrets(self):
        self._maybe_fail("list_secrets")
        return [copy.deepcopy(s) for s in self.secrets.values()]

    def get_secret(self, namespace, name):
        self._maybe_fail("get_secret")
        return copy.deepcopy(self.secrets[(namespace, name)])

    def update_secret(self, secret):
        self._maybe_fail("update_secret")
        self.secrets[(secret.namespace, secret.name)] = secret
        self.updated_secrets.append(secret)

    def list_certificate_requests(self, namespace):
        self._maybe_fail("list_certificate_requests")
        self.list_request_calls += 1
        items = [r for r in self.requests if r.namespace == namespace]
        if self.on_list_requests is not None:
            self.on_list_requests(self)
        return items

    def delete_certificate_request(self, request):
        self._maybe_fail("delete_certificate_request")
        self.requests = [r for r in self.requests
                         if (r.namespace, r.name) != (request.namespace, request.name)]
        self.deleted_requests.append(request)

    def is_owned_by(self, request, certificate):
        return request.is_controlled_by(certificate)


class FakeClock:
    """Clock whose time only moves when sleep() is called."""

    def __init__(self):
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def three_certificates():
    """Three Certificates with matching Secrets holding valid certificates."""
    certificates = [make_certificate(f"app-{i}") for i in range(3)]
    secrets = [
        make_secret(crt.secret_name, cert_pem=make_cert_pem(1000 + i))
        for i, crt in enumerate(certificates)
    ]
    return certificates, secrets
