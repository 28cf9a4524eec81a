"""
命令行入口

用法:
  ssl-monitor example.com
  ssl-monitor example.com 7
  ssl-monitor --batch example.com,api.example.com 30
"""
import argparse
import json
import sys
from typing import List, Optional

from .exceptions import CertificateCheckError
from .services.batch_checker import BatchCertificateChecker
from .services.config_validator import DEFAULT_CHECK_TIMEOUT, DEFAULT_WARNING_DAYS
from .services.domain_config import parse_domain_list
from .services.error_handler import NetworkErrorHandler
from .services.logger import LoggerService
from .services.report_formatter import (
    format_batch_summary,
    format_failure,
    format_result,
    format_verdict,
)
from .services.ssl_checker import SSLCertificateInspector

EXIT_OK = 0
EXIT_ATTENTION = 1


def _non_negative_int(value: str) -> int:
    try:
        days = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"警告天数必须是整数: {value}")
    if days < 0:
        raise argparse.ArgumentTypeError(f"警告天数不能为负数: {value}")
    return days


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='ssl-monitor',
        description='检查 SSL 证书到期时间',
        epilog='示例: ssl-monitor example.com 7 | ssl-monitor --batch example.com,api.example.com 30'
    )
    parser.add_argument('args', nargs='*', metavar='DOMAIN [WARNING_DAYS]',
                        help='要检查的域名和可选的警告天数（默认30）')
    parser.add_argument('--batch', metavar='DOMAINS',
                        help='批量检查，多个域名用逗号分隔')
    parser.add_argument('--timeout', type=float, default=DEFAULT_CHECK_TIMEOUT,
                        help='单次检查超时时间（秒），默认10')
    parser.add_argument('--workers', type=int, default=10,
                        help='批量检查的并发数，默认10')
    parser.add_argument('--json', action='store_true', dest='as_json',
                        help='以JSON格式输出结果')
    parser.add_argument('--log-level', default='WARNING',
                        help='日志级别，默认WARNING')
    return parser


def _parse_positionals(parser: argparse.ArgumentParser, ns: argparse.Namespace):
    """解析位置参数，返回 (域名, 警告天数)"""
    positionals = list(ns.args)

    if ns.batch is not None:
        if len(positionals) > 1:
            parser.error("批量模式只接受一个可选的警告天数参数")
        domain = None
    else:
        if not positionals:
            parser.error("需要指定域名，或使用 --batch")
        if len(positionals) > 2:
            parser.error("参数过多")
        domain = positionals.pop(0)

    warning_days = DEFAULT_WARNING_DAYS
    if positionals:
        try:
            warning_days = _non_negative_int(positionals[0])
        except argparse.ArgumentTypeError as e:
            parser.error(str(e))

    return domain, warning_days


def run_single(domain: str, warning_days: int, timeout: float, as_json: bool) -> int:
    """
    检查单个域名

    Returns:
        int: 退出码，证书正常为0，否则为1
    """
    inspector = SSLCertificateInspector(domain, warning_threshold_days=warning_days, timeout=timeout)

    if not as_json:
        print(f"正在检查 {inspector.domain} 的 SSL 证书...")

    try:
        result = inspector.check_certificate()
    except CertificateCheckError as e:
        failure = NetworkErrorHandler().handle_check_error(inspector.domain, e)
        if as_json:
            print(json.dumps({'domain': inspector.domain, 'error': failure.to_dict()},
                             ensure_ascii=False, indent=2))
        else:
            print(format_failure(failure), file=sys.stderr)
        return EXIT_ATTENTION

    if as_json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    else:
        print(inspector.format_result(result))
        print(format_verdict(result))

    return EXIT_ATTENTION if result.needs_warning or result.is_expired else EXIT_OK


def run_batch(domains: List[str], warning_days: int, timeout: float, workers: int,
              as_json: bool, logger_service: LoggerService) -> int:
    """
    批量检查多个域名

    Returns:
        int: 退出码，全部正常为0，否则为1
    """
    checker = BatchCertificateChecker(
        warning_days=warning_days,
        timeout=timeout,
        max_workers=workers,
        logger_service=logger_service
    )
    check_result = checker.check_domains(domains)

    if as_json:
        print(json.dumps({
            'results': [r.to_dict() for r in check_result.results],
            'failures': [f.to_dict() for f in check_result.failures],
            'summary': {
                'total_domains': check_result.total_domains,
                'healthy': len(check_result.healthy_domains),
                'expiring': len(check_result.expiring_domains),
                'expired': len(check_result.expired_domains),
                'failed': check_result.failed_checks,
                'execution_time_seconds': check_result.execution_time
            }
        }, ensure_ascii=False, indent=2))
    else:
        for result in check_result.results:
            print(format_result(result))
        for failure in check_result.failures:
            print(format_failure(failure))
        print(format_batch_summary(check_result))

    return EXIT_ATTENTION if check_result.has_problems else EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)
    domain, warning_days = _parse_positionals(parser, ns)

    if ns.timeout <= 0:
        parser.error("超时时间必须大于0")

    logger_service = LoggerService(log_level=ns.log_level)

    if ns.batch is not None:
        domains = parse_domain_list(ns.batch)
        if not domains:
            parser.error("--batch 需要至少一个域名")
        return run_batch(domains, warning_days, ns.timeout, ns.workers, ns.as_json, logger_service)

    try:
        return run_single(domain, warning_days, ns.timeout, ns.as_json)
    except ValueError as e:
        parser.error(str(e))


if __name__ == '__main__':
    sys.exit(main())
