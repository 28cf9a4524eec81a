"""
批量证书检查测试
"""
import time
from unittest.mock import patch, MagicMock

from ssl_monitor.exceptions import (
    CertificateUnavailableError,
    CheckTimeoutError,
    SSLConnectionError,
)
from ssl_monitor.models import CheckFailure
from ssl_monitor.services.batch_checker import BatchCertificateChecker


def make_factory(outcomes):
    """
    按域名返回预设结果的检查器工厂

    outcomes 的值可以是检查结果、异常，或按调用顺序依次返回的列表
    """
    calls = []

    def factory(domain, warning_threshold_days=30, timeout=10):
        calls.append((domain, warning_threshold_days, timeout))
        inspector = MagicMock()
        inspector.domain = domain
        outcome = outcomes[domain]
        if isinstance(outcome, list):
            inspector.check_certificate.side_effect = outcome
        elif isinstance(outcome, Exception):
            inspector.check_certificate.side_effect = outcome
        else:
            inspector.check_certificate.return_value = outcome
        return inspector

    factory.calls = calls
    return factory


class TestBatchCertificateChecker:
    """批量证书检查器测试类"""

    def setup_method(self):
        """测试前准备"""
        self.logger_service = MagicMock()

    def make_checker(self, outcomes, **kwargs):
        factory = make_factory(outcomes)
        checker = BatchCertificateChecker(
            logger_service=self.logger_service,
            inspector_factory=factory,
            **kwargs
        )
        return checker, factory

    def test_check_domains_categorizes(self, result_factory):
        """测试结果分类"""
        outcomes = {
            'healthy.com': result_factory(domain='healthy.com', days_left=90),
            'expiring.com': result_factory(domain='expiring.com', days_left=5),
            'expired.com': result_factory(domain='expired.com', days_left=-1),
            'down.com': SSLConnectionError('down.com', '连接 down.com:443 失败', ConnectionRefusedError('refused'))
        }
        checker, _ = self.make_checker(outcomes)

        result = checker.check_domains(list(outcomes))

        assert result.total_domains == 4
        assert result.successful_checks == 3
        assert result.failed_checks == 1
        assert [r.domain for r in result.healthy_domains] == ['healthy.com']
        assert [r.domain for r in result.expiring_domains] == ['expiring.com']
        assert [r.domain for r in result.expired_domains] == ['expired.com']
        assert result.failures[0].domain == 'down.com'
        assert result.failures[0].error_type == 'ConnectionError'
        assert result.errors[0].startswith('down.com: ConnectionError: ')
        assert result.has_problems is True
        assert result.execution_time >= 0

    def test_results_keep_input_order(self, result_factory):
        """测试结果顺序与输入一致"""
        domains = [f'site{i}.com' for i in range(8)]
        outcomes = {d: result_factory(domain=d) for d in domains}
        checker, _ = self.make_checker(outcomes, max_workers=4)

        result = checker.check_domains(domains)

        assert [r.domain for r in result.results] == domains

    def test_checks_run_concurrently(self, result_factory):
        """测试多个域名并发检查"""
        domains = ['a.com', 'b.com', 'c.com', 'd.com']

        def slow_factory(domain, warning_threshold_days=30, timeout=10):
            inspector = MagicMock()

            def check():
                time.sleep(0.2)
                return result_factory(domain=domain)

            inspector.check_certificate.side_effect = check
            return inspector

        checker = BatchCertificateChecker(max_workers=4, logger_service=self.logger_service,
                                          inspector_factory=slow_factory)

        start = time.monotonic()
        result = checker.check_domains(domains)

        assert result.successful_checks == 4
        assert time.monotonic() - start < 0.6

    def test_inspector_parameters(self, result_factory):
        """测试检查器参数传递"""
        checker, factory = self.make_checker({'a.com': result_factory(domain='a.com')},
                                             warning_days=7, timeout=2.5)

        checker.check_domains(['a.com'])

        assert factory.calls == [('a.com', 7, 2.5)]

    def test_one_failure_does_not_stop_others(self, result_factory):
        """测试单个域名失败不影响其他域名"""
        outcomes = {
            'slow.com': CheckTimeoutError('slow.com', 10),
            'ok.com': result_factory(domain='ok.com')
        }
        checker, _ = self.make_checker(outcomes)

        result = checker.check_domains(['slow.com', 'ok.com'])

        assert result.failures[0].error_type == 'Timeout'
        assert [r.domain for r in result.results] == ['ok.com']

    def test_unexpected_error_becomes_failure(self):
        """测试意外异常也会转换为失败记录"""
        checker, _ = self.make_checker({'odd.com': RuntimeError('unexpected')})

        outcome = checker.check_domain('odd.com')

        assert isinstance(outcome, CheckFailure)
        assert outcome.error_type == 'RuntimeError'

    def test_no_retry_by_default(self):
        """测试默认不重试"""
        checker, _ = self.make_checker({'flaky.com': [CheckTimeoutError('flaky.com', 10), 'never']})

        outcome = checker.check_domain('flaky.com')

        assert isinstance(outcome, CheckFailure)
        assert outcome.is_retryable is True

    @patch('time.sleep')
    def test_retry_when_configured(self, mock_sleep, result_factory):
        """测试配置重试后可重试错误会重新检查"""
        outcomes = {'flaky.com': [CheckTimeoutError('flaky.com', 10), result_factory(domain='flaky.com')]}
        checker, _ = self.make_checker(outcomes, retries=1, retry_delay=0.5)

        outcome = checker.check_domain('flaky.com')

        assert outcome.domain == 'flaky.com'
        mock_sleep.assert_called_once_with(0.5)

    @patch('time.sleep')
    def test_unavailable_not_retried(self, mock_sleep):
        """测试证书不可用不重试"""
        outcomes = {'nocert.com': [CertificateUnavailableError('nocert.com', '服务器没有提供证书'), 'never']}
        checker, _ = self.make_checker(outcomes, retries=3)

        outcome = checker.check_domain('nocert.com')

        assert outcome.error_type == 'CertificateUnavailable'
        mock_sleep.assert_not_called()

    def test_logging_calls(self, result_factory):
        """测试日志服务调用"""
        outcomes = {
            'ok.com': result_factory(domain='ok.com'),
            'bad.com': CheckTimeoutError('bad.com', 10)
        }
        checker, _ = self.make_checker(outcomes)

        checker.check_domains(['ok.com', 'bad.com'])

        self.logger_service.log_check_start.assert_called_once_with(2)
        self.logger_service.log_certificate_info.assert_called_once()
        self.logger_service.log_failure.assert_called_once()
        self.logger_service.log_check_end.assert_called_once()

    def test_empty_domain_list(self):
        """测试空域名列表"""
        checker, _ = self.make_checker({})

        result = checker.check_domains([])

        assert result.total_domains == 0
        assert result.results == []
        assert result.has_problems is False
