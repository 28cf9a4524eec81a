"""
证书检查异常定义
"""
from typing import Optional


class CertificateCheckError(Exception):
    """证书检查错误基类"""

    kind = "CheckError"

    def __init__(self, domain: str, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.domain = domain
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message


class SSLConnectionError(CertificateCheckError):
    """网络或TLS连接失败（DNS、拒绝连接、握手失败等）"""

    kind = "ConnectionError"


class CertificateUnavailableError(CertificateCheckError):
    """握手完成但没有可用的证书或过期时间"""

    kind = "CertificateUnavailable"


class CheckTimeoutError(CertificateCheckError):
    """连接或握手在截止时间内未完成"""

    kind = "Timeout"

    def __init__(self, domain: str, timeout: float, cause: Optional[BaseException] = None):
        super().__init__(domain, f"连接 {domain} 超时（{timeout:g}秒）", cause)
        self.timeout = timeout
