"""
错误处理服务

证书检查器本身不重试，重试策略由调用方通过这里的处理器决定。
"""
import socket
import ssl
import time
from typing import Callable, Any, Dict, Sequence
import logging

from ..exceptions import (
    CertificateCheckError,
    CertificateUnavailableError,
    CheckTimeoutError,
    SSLConnectionError,
)
from ..models import CheckFailure


class NetworkErrorHandler:
    """网络错误处理器"""

    def __init__(self, max_retries: int = 0, base_delay: float = 1.0):
        """
        初始化网络错误处理器

        Args:
            max_retries: 最大重试次数，0表示不重试
            base_delay: 基础延迟时间（秒）
        """
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.logger = logging.getLogger(__name__)

        # 可重试的错误类型
        self.retryable_errors = (
            SSLConnectionError,
            CheckTimeoutError
        )

        # 不可重试的错误类型
        self.non_retryable_errors = (
            CertificateUnavailableError,
            ValueError,
            TypeError
        )

    def with_retry(self, func: Callable, *args, **kwargs) -> Any:
        """
        带重试机制执行函数

        Args:
            func: 要执行的函数
            *args: 函数参数
            **kwargs: 函数关键字参数

        Returns:
            Any: 函数执行结果

        Raises:
            Exception: 不可重试的错误，或重试次数用尽后的最后一个异常
        """
        for attempt in range(self.max_retries + 1):
            try:
                return func(*args, **kwargs)

            except Exception as e:
                if not self.is_retryable_error(e):
                    self.logger.debug(f"不可重试的错误: {type(e).__name__}: {str(e)}")
                    raise

                if attempt == self.max_retries:
                    if self.max_retries:
                        self.logger.error(f"重试次数用尽，最终失败: {type(e).__name__}: {str(e)}")
                    raise

                # 指数退避
                delay = self.base_delay * (2 ** attempt)

                self.logger.warning(
                    f"尝试 {attempt + 1}/{self.max_retries + 1} 失败: {type(e).__name__}: {str(e)}，"
                    f"{delay:.1f}秒后重试"
                )

                time.sleep(delay)

    def is_retryable_error(self, error: Exception) -> bool:
        """
        判断错误是否可重试

        Args:
            error: 异常对象

        Returns:
            bool: 是否可重试
        """
        if isinstance(error, self.non_retryable_errors):
            return False

        return isinstance(error, self.retryable_errors)

    def handle_check_error(self, domain: str, error: Exception) -> CheckFailure:
        """
        将检查错误转换为失败记录

        Args:
            domain: 域名
            error: 异常对象

        Returns:
            CheckFailure: 失败记录
        """
        error_type = error.kind if isinstance(error, CertificateCheckError) else type(error).__name__

        failure = CheckFailure(
            domain=domain,
            error_type=error_type,
            error_message=str(error),
            is_retryable=self.is_retryable_error(error),
            suggested_action=self._get_suggested_action(error)
        )

        if failure.is_retryable:
            self.logger.warning(f"域名 {domain} 检查失败（可重试）: {failure.error_message}")
        else:
            self.logger.error(f"域名 {domain} 检查失败（不可重试）: {failure.error_message}")

        return failure

    def _get_suggested_action(self, error: Exception) -> str:
        """
        获取错误的建议处理方案

        Args:
            error: 异常对象

        Returns:
            str: 建议的处理方案
        """
        if isinstance(error, CheckTimeoutError):
            return "检查网络连接，考虑增加超时时间"
        if isinstance(error, CertificateUnavailableError):
            return "服务器未提供可用证书，检查服务器TLS配置"
        if isinstance(error, ValueError):
            return "检查域名和阈值配置是否正确"

        cause = error.cause if isinstance(error, CertificateCheckError) else error

        if isinstance(cause, socket.gaierror):
            return "检查域名是否正确，DNS服务器是否可用"
        elif isinstance(cause, ConnectionRefusedError):
            return "检查目标服务器是否运行，端口是否正确"
        elif isinstance(cause, ssl.SSLError):
            if 'handshake failure' in str(cause).lower():
                return "SSL握手失败，检查SSL/TLS版本兼容性"
            return "SSL连接问题，检查服务器SSL配置"

        error_message = str(cause).lower()
        if 'network is unreachable' in error_message:
            return "网络不可达，检查网络连接和路由"
        elif 'no route to host' in error_message:
            return "无法路由到主机，检查防火墙和网络配置"
        else:
            return "检查网络连接和服务器状态"

    def get_error_statistics(self, failures: Sequence[CheckFailure]) -> Dict[str, Any]:
        """
        获取错误统计信息

        Args:
            failures: 失败记录列表

        Returns:
            Dict[str, Any]: 错误统计
        """
        if not failures:
            return {
                'total_errors': 0,
                'retryable_errors': 0,
                'non_retryable_errors': 0,
                'error_types': {},
                'most_common_error': None,
                'most_common_error_count': 0
            }

        error_types: Dict[str, int] = {}
        retryable_count = 0

        for failure in failures:
            error_types[failure.error_type] = error_types.get(failure.error_type, 0) + 1

            if failure.is_retryable:
                retryable_count += 1

        most_common_error = max(error_types.items(), key=lambda x: x[1])

        return {
            'total_errors': len(failures),
            'retryable_errors': retryable_count,
            'non_retryable_errors': len(failures) - retryable_count,
            'error_types': error_types,
            'most_common_error': most_common_error[0],
            'most_common_error_count': most_common_error[1]
        }
