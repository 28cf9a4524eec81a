"""
测试公共工具
"""
from datetime import datetime, timezone, timedelta

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from ssl_monitor.models import CertificateCheckResult


def _name(common_name=None, organization=None):
    attributes = []
    if organization:
        attributes.append(x509.NameAttribute(NameOID.ORGANIZATION_NAME, organization))
    if common_name:
        attributes.append(x509.NameAttribute(NameOID.COMMON_NAME, common_name))
    if not attributes:
        attributes.append(x509.NameAttribute(NameOID.COUNTRY_NAME, "US"))
    return x509.Name(attributes)


def build_certificate(not_before=None, not_after=None, subject_cn="example.com",
                      issuer_cn="Test CA", issuer_org=None) -> x509.Certificate:
    """生成一个自签名测试证书"""
    now = datetime.now(timezone.utc)
    not_after = not_after or now + timedelta(days=90)
    not_before = not_before or min(now, not_after) - timedelta(days=1)
    key = ec.generate_private_key(ec.SECP256R1())

    return (
        x509.CertificateBuilder()
        .subject_name(_name(subject_cn))
        .issuer_name(_name(issuer_cn, issuer_org))
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_before)
        .not_valid_after(not_after)
        .sign(key, hashes.SHA256())
    )


@pytest.fixture
def make_certificate():
    return build_certificate


@pytest.fixture
def make_certificate_der():
    def _make(**kwargs) -> bytes:
        return build_certificate(**kwargs).public_bytes(serialization.Encoding.DER)
    return _make


def make_result(domain="example.com", days_left=60, warning_days=30, issuer="Test CA") -> CertificateCheckResult:
    """根据剩余天数构造检查结果"""
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    return CertificateCheckResult(
        domain=domain,
        issuer=issuer,
        subject=domain,
        valid_from=now - timedelta(days=30),
        valid_to=now + timedelta(days=days_left),
        days_left=days_left,
        is_expired=days_left < 0,
        needs_warning=days_left < warning_days,
        fingerprint="AB:CD:EF"
    )


@pytest.fixture
def result_factory():
    return make_result
