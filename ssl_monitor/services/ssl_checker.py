"""
SSL证书检查服务
"""
from datetime import datetime, timezone
from typing import Optional
import logging

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.x509.oid import NameOID

from ..exceptions import CertificateUnavailableError
from ..interfaces import CertificateInspectorInterface
from ..models import CertificateCheckResult
from .domain_config import clean_domain
from .expiry_calculator import ExpiryCalculator
from .inspection_transport import fetch_peer_certificate_for_inspection
from .report_formatter import format_result


class SSLCertificateInspector(CertificateInspectorInterface):
    """SSL证书检查器实现，每个实例对应一个域名"""

    def __init__(self, domain: str, warning_threshold_days: int = 30,
                 timeout: float = 10, port: int = 443):
        """
        初始化SSL证书检查器

        Args:
            domain: 要检查的域名（不含协议）
            warning_threshold_days: 警告阈值天数，默认30天
            timeout: 连接总超时时间（秒）
            port: SSL端口，默认443
        """
        self.domain = clean_domain(domain)
        if not self.domain:
            raise ValueError(f"无效的域名: {domain!r}")

        self.expiry_calculator = ExpiryCalculator(warning_days=warning_threshold_days)
        self.warning_threshold_days = warning_threshold_days
        self.timeout = timeout
        self.port = port
        self.logger = logging.getLogger(__name__)

    def check_certificate(self) -> CertificateCheckResult:
        """
        检查域名的SSL证书

        只建立一次连接，不做任何重试。

        Returns:
            CertificateCheckResult: 证书检查结果

        Raises:
            SSLConnectionError: 网络或TLS错误
            CheckTimeoutError: 连接超时
            CertificateUnavailableError: 没有可用的证书信息
        """
        self.logger.info(f"正在检查 {self.domain} 的 SSL 证书...")

        cert_der = fetch_peer_certificate_for_inspection(self.domain, self.port, self.timeout)
        if not cert_der:
            raise CertificateUnavailableError(self.domain, f"无法获取域名 {self.domain} 的SSL证书")

        cert = self._load_certificate(cert_der)
        return self.build_result(cert)

    def build_result(self, cert: x509.Certificate, now: Optional[datetime] = None) -> CertificateCheckResult:
        """
        根据证书构建检查结果

        Args:
            cert: 已解析的证书
            now: 测量时间，默认取当前UTC时间

        Returns:
            CertificateCheckResult: 检查结果
        """
        valid_to = self._parse_expiry_date(cert)
        valid_from = cert.not_valid_before_utc

        days_left, is_expired, needs_warning = self.expiry_calculator.evaluate(valid_to, now)

        return CertificateCheckResult(
            domain=self.domain,
            issuer=self._parse_issuer(cert),
            subject=self._parse_subject(cert),
            valid_from=valid_from,
            valid_to=valid_to,
            days_left=days_left,
            is_expired=is_expired,
            needs_warning=needs_warning,
            fingerprint=self._fingerprint(cert)
        )

    def format_result(self, result: CertificateCheckResult) -> str:
        """格式化检查结果"""
        return format_result(result)

    def _load_certificate(self, cert_der: bytes) -> x509.Certificate:
        try:
            return x509.load_der_x509_certificate(cert_der)
        except ValueError as e:
            raise CertificateUnavailableError(self.domain, f"域名 {self.domain} 的证书无法解析", e) from e

    def _parse_expiry_date(self, cert: x509.Certificate) -> datetime:
        """
        解析证书过期时间

        Args:
            cert: 证书

        Returns:
            datetime: 过期时间（UTC）
        """
        try:
            expiry_date = cert.not_valid_after_utc
        except ValueError as e:
            raise CertificateUnavailableError(self.domain, "证书中未找到过期时间信息", e) from e

        return expiry_date.astimezone(timezone.utc)

    def _parse_issuer(self, cert: x509.Certificate) -> str:
        """
        解析证书颁发者，优先通用名称，其次组织名称

        Args:
            cert: 证书

        Returns:
            str: 证书颁发者
        """
        for oid in (NameOID.COMMON_NAME, NameOID.ORGANIZATION_NAME):
            value = self._first_attribute(cert.issuer, oid)
            if value:
                return value

        return "Unknown"

    def _parse_subject(self, cert: x509.Certificate) -> str:
        """解析证书主题通用名称，缺失时使用域名"""
        return self._first_attribute(cert.subject, NameOID.COMMON_NAME) or self.domain

    def _first_attribute(self, name: x509.Name, oid) -> Optional[str]:
        attributes = name.get_attributes_for_oid(oid)
        if not attributes:
            return None
        value = attributes[0].value
        if isinstance(value, bytes):
            value = value.decode('utf-8', errors='replace')
        return value

    def _fingerprint(self, cert: x509.Certificate) -> str:
        """SHA-1指纹，格式如 AB:CD:..."""
        return ":".join(f"{byte:02X}" for byte in cert.fingerprint(hashes.SHA1()))
