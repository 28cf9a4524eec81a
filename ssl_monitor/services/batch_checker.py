"""
批量证书检查服务
"""
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence, Union
import logging

from ..models import CertificateCheckResult, CheckFailure, CheckResult
from .error_handler import NetworkErrorHandler
from .expiry_calculator import ExpiryCalculator
from .logger import LoggerService
from .ssl_checker import SSLCertificateInspector

Outcome = Union[CertificateCheckResult, CheckFailure]


class BatchCertificateChecker:
    """批量证书检查器，每个域名使用独立的检查器和连接"""

    def __init__(self, warning_days: int = 30, timeout: float = 10, max_workers: int = 10,
                 retries: int = 0, retry_delay: float = 1.0,
                 logger_service: Optional[LoggerService] = None,
                 inspector_factory: Callable[..., SSLCertificateInspector] = SSLCertificateInspector):
        """
        初始化批量检查器

        Args:
            warning_days: 警告阈值天数
            timeout: 单次检查超时时间（秒）
            max_workers: 最大并发数
            retries: 可重试错误的重试次数
            retry_delay: 重试基础延迟（秒）
            logger_service: 日志服务
            inspector_factory: 检查器工厂，参数与 SSLCertificateInspector 相同
        """
        self.expiry_calculator = ExpiryCalculator(warning_days=warning_days)
        self.warning_days = warning_days
        self.timeout = timeout
        self.max_workers = max(1, max_workers)
        self.error_handler = NetworkErrorHandler(max_retries=retries, base_delay=retry_delay)
        self.logger_service = logger_service or LoggerService()
        self.inspector_factory = inspector_factory
        self.logger = logging.getLogger(__name__)

    def check_domain(self, domain: str) -> Outcome:
        """
        检查单个域名，错误被转换为失败记录

        Args:
            domain: 域名

        Returns:
            CertificateCheckResult 或 CheckFailure
        """
        try:
            inspector = self.inspector_factory(
                domain,
                warning_threshold_days=self.warning_days,
                timeout=self.timeout
            )
            return self.error_handler.with_retry(inspector.check_certificate)
        except Exception as e:
            return self.error_handler.handle_check_error(domain, e)

    def check_domains(self, domains: Sequence[str]) -> CheckResult:
        """
        并发检查多个域名

        Args:
            domains: 域名列表

        Returns:
            CheckResult: 检查结果，结果顺序与输入一致
        """
        start_time = time.monotonic()
        self.logger_service.log_check_start(len(domains))

        outcomes: List[Outcome] = []
        if domains:
            workers = min(self.max_workers, len(domains))
            with ThreadPoolExecutor(max_workers=workers) as executor:
                outcomes = list(executor.map(self.check_domain, domains))

        results = []
        failures = []
        for outcome in outcomes:
            if isinstance(outcome, CheckFailure):
                failures.append(outcome)
                self.logger_service.log_failure(outcome)
            else:
                results.append(outcome)
                self.logger_service.log_certificate_info(outcome)

        self.logger_service.log_check_end()

        categorized = self.expiry_calculator.categorize_certificates(results)
        self.logger.info(self.expiry_calculator.get_expiry_summary(results, failures))

        return CheckResult(
            total_domains=len(domains),
            successful_checks=len(results),
            failed_checks=len(failures),
            results=results,
            expiring_domains=categorized['expiring_soon'],
            expired_domains=categorized['expired'],
            healthy_domains=categorized['healthy'],
            failures=failures,
            errors=[f"{f.domain}: {f.error_type}: {f.error_message}" for f in failures],
            execution_time=time.monotonic() - start_time
        )
