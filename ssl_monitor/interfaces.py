"""
服务接口定义
"""
from abc import ABC, abstractmethod
from typing import List
from .models import CertificateCheckResult, CheckFailure


class DomainConfigManagerInterface(ABC):
    """域名配置管理器接口"""

    @abstractmethod
    def get_domains(self) -> List[str]:
        """获取域名列表"""
        pass

    @abstractmethod
    def validate_domain(self, domain: str) -> bool:
        """验证域名格式"""
        pass


class CertificateInspectorInterface(ABC):
    """SSL证书检查器接口"""

    @abstractmethod
    def check_certificate(self) -> CertificateCheckResult:
        """检查配置域名的SSL证书"""
        pass

    @abstractmethod
    def format_result(self, result: CertificateCheckResult) -> str:
        """格式化检查结果"""
        pass


class NotificationServiceInterface(ABC):
    """通知服务接口"""

    @abstractmethod
    def send_expiry_notification(self, results: List[CertificateCheckResult]) -> bool:
        """发送证书过期通知"""
        pass

    @abstractmethod
    def format_notification_content(self, results: List[CertificateCheckResult]) -> str:
        """格式化通知内容"""
        pass


class LoggerServiceInterface(ABC):
    """日志服务接口"""

    @abstractmethod
    def log_check_start(self, domain_count: int):
        """记录检查开始"""
        pass

    @abstractmethod
    def log_certificate_info(self, result: CertificateCheckResult):
        """记录证书信息"""
        pass

    @abstractmethod
    def log_failure(self, failure: CheckFailure):
        """记录检查失败"""
        pass
