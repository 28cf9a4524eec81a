"""
数据模型定义
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List


@dataclass(frozen=True)
class CertificateCheckResult:
    """单次证书检查结果（测量时刻的快照）"""
    domain: str
    issuer: str
    subject: str
    valid_from: datetime
    valid_to: datetime
    days_left: int
    is_expired: bool
    needs_warning: bool
    fingerprint: str

    def to_dict(self) -> Dict[str, Any]:
        """转换为可序列化的字典"""
        return {
            'domain': self.domain,
            'issuer': self.issuer,
            'subject': self.subject,
            'valid_from': self.valid_from.isoformat(),
            'valid_to': self.valid_to.isoformat(),
            'days_left': self.days_left,
            'is_expired': self.is_expired,
            'needs_warning': self.needs_warning,
            'fingerprint': self.fingerprint
        }


@dataclass(frozen=True)
class CheckFailure:
    """检查失败的域名"""
    domain: str
    error_type: str
    error_message: str
    is_retryable: bool = False
    suggested_action: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'domain': self.domain,
            'error_type': self.error_type,
            'error_message': self.error_message,
            'is_retryable': self.is_retryable,
            'suggested_action': self.suggested_action
        }


@dataclass
class CheckResult:
    """批量检查结果统计"""
    total_domains: int
    successful_checks: int
    failed_checks: int
    results: List[CertificateCheckResult] = field(default_factory=list)
    expiring_domains: List[CertificateCheckResult] = field(default_factory=list)
    expired_domains: List[CertificateCheckResult] = field(default_factory=list)
    healthy_domains: List[CertificateCheckResult] = field(default_factory=list)
    failures: List[CheckFailure] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    execution_time: float = 0.0

    @property
    def has_problems(self) -> bool:
        """是否存在已过期、即将过期或检查失败的域名"""
        return bool(self.expired_domains or self.expiring_domains or self.failures)
