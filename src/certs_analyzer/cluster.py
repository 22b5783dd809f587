"""
Cluster Store Module

Read and write access to the cert-manager resources and Secrets this tool
works with.
"""

import logging
from typing import List, Optional, Protocol

from kubernetes import client, config
from kubernetes.client.rest import ApiException

from .models import CertificateDeclaration, RenewalRequest, SecretRecord

logger = logging.getLogger(__name__)

# cert-manager.io CRD coordinates
CERT_MANAGER_GROUP = 'cert-manager.io'
CERT_MANAGER_VERSION = 'v1'
CERTIFICATE_PLURAL = 'certificates'
CERTIFICATE_REQUEST_PLURAL = 'certificaterequests'


class ClusterStore(Protocol):
    """Operations the scanner and renewer need from the cluster."""

    def list_certificates(self) -> List[CertificateDeclaration]: ...

    def list_secrets(self) -> List[SecretRecord]: ...

    def get_secret(self, namespace: str, name: str) -> SecretRecord: ...

    def update_secret(self, secret: SecretRecord) -> None: ...

    def list_certificate_requests(self, namespace: str) -> List[RenewalRequest]: ...

    def delete_certificate_request(self, request: RenewalRequest) -> None: ...

    def is_owned_by(self, request: RenewalRequest, certificate: CertificateDeclaration) -> bool: ...


def load_kubernetes_config(kubeconfig: Optional[str] = None, context: Optional[str] = None) -> None:
    """
    Load Kubernetes client configuration.

    In-cluster configuration is tried first unless an explicit kubeconfig or
    context was requested, then the kubeconfig file.

    Args:
        kubeconfig: Path to a kubeconfig file (optional)
        context: kubeconfig context to use (optional)
    """
    if not kubeconfig and not context:
        try:
            config.load_incluster_config()
            logger.info("✅ Loaded in-cluster Kubernetes configuration")
            return
        except config.ConfigException:
            logger.debug("Not running in a cluster, falling back to kubeconfig")

    config.load_kube_config(config_file=kubeconfig, context=context)
    logger.info(f"✅ Loaded kubeconfig from {kubeconfig or 'default location'}")


class KubernetesClusterStore:
    """ClusterStore backed by the official Kubernetes Python client."""

    def __init__(self, core_v1: Optional[client.CoreV1Api] = None,
                 custom_objects: Optional[client.CustomObjectsApi] = None):
        """
        Initialize the store.

        Args:
            core_v1: CoreV1Api instance (created from the loaded config if omitted)
            custom_objects: CustomObjectsApi instance (created if omitted)
        """
        self.core_v1 = core_v1 or client.CoreV1Api()
        self.custom_objects = custom_objects or client.CustomObjectsApi()

    @classmethod
    def from_config(cls, kubeconfig: Optional[str] = None,
                    context: Optional[str] = None) -> 'KubernetesClusterStore':
        load_kubernetes_config(kubeconfig, context)
        return cls()

    def list_certificates(self) -> List[CertificateDeclaration]:
        result = self.custom_objects.list_cluster_custom_object(
            CERT_MANAGER_GROUP,
            CERT_MANAGER_VERSION,
            CERTIFICATE_PLURAL,
        )
        return [CertificateDeclaration.from_k8s_object(item) for item in result.get('items', [])]

    def list_secrets(self) -> List[SecretRecord]:
        secrets = self.core_v1.list_secret_for_all_namespaces()
        return [SecretRecord.from_k8s_object(secret) for secret in secrets.items]

    def get_secret(self, namespace: str, name: str) -> SecretRecord:
        secret = self.core_v1.read_namespaced_secret(name, namespace)
        return SecretRecord.from_k8s_object(secret)

    def update_secret(self, secret: SecretRecord) -> None:
        """
        Replace the Secret, sending back its resource version.

        The API server rejects the write with 409 Conflict if the Secret
        changed since it was read.

        Args:
            secret: Record previously returned by get_secret, with annotations modified
        """
        body = secret.raw
        if body is None:
            body = client.V1Secret(
                metadata=client.V1ObjectMeta(
                    name=secret.name,
                    namespace=secret.namespace,
                    resource_version=secret.resource_version,
                ),
            )
        body.metadata.annotations = dict(secret.annotations)
        body.metadata.resource_version = secret.resource_version
        self.core_v1.replace_namespaced_secret(secret.name, secret.namespace, body)

    def list_certificate_requests(self, namespace: str) -> List[RenewalRequest]:
        result = self.custom_objects.list_namespaced_custom_object(
            CERT_MANAGER_GROUP,
            CERT_MANAGER_VERSION,
            namespace,
            CERTIFICATE_REQUEST_PLURAL,
        )
        return [RenewalRequest.from_k8s_object(item) for item in result.get('items', [])]

    def delete_certificate_request(self, request: RenewalRequest) -> None:
        self.custom_objects.delete_namespaced_custom_object(
            CERT_MANAGER_GROUP,
            CERT_MANAGER_VERSION,
            request.namespace,
            CERTIFICATE_REQUEST_PLURAL,
            request.name,
        )

    def is_owned_by(self, request: RenewalRequest, certificate: CertificateDeclaration) -> bool:
        return request.is_controlled_by(certificate)


def is_conflict(error: Exception) -> bool:
    """True if the error is a Kubernetes 409 Conflict (stale resource version)."""
    return isinstance(error, ApiException) and error.status == 409
