"""
Certificate Analyzer Module

Finds cert-manager certificates and forces their renewal.
"""

from .analyzer import CertificateAnalyzer
from .cluster import ClusterStore, KubernetesClusterStore
from .renewer import CertificateRenewer, RenewalResult, RenewalState
from .scanner import CertificateScanner, decode_certificate

__all__ = ['CertificateAnalyzer', 'CertificateScanner', 'CertificateRenewer',
           'ClusterStore', 'KubernetesClusterStore', 'RenewalResult', 'RenewalState',
           'decode_certificate']
