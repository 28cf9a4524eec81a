"""
检查报告格式化
"""
from datetime import datetime

from ..models import CertificateCheckResult, CheckFailure, CheckResult

STATUS_EXPIRED = "❌ 已过期"
STATUS_EXPIRING = "⚠️  即将过期"
STATUS_OK = "✅ 正常"

SEPARATOR = "=" * 40


def status_marker(result: CertificateCheckResult) -> str:
    """
    选择状态标记，已过期优先于即将过期

    Args:
        result: 证书检查结果

    Returns:
        str: 状态标记
    """
    if result.is_expired:
        return STATUS_EXPIRED
    if result.needs_warning:
        return STATUS_EXPIRING
    return STATUS_OK


def _format_timestamp(value: datetime) -> str:
    return value.strftime('%Y-%m-%d %H:%M:%S UTC')


def format_result(result: CertificateCheckResult) -> str:
    """
    将检查结果格式化为多行文本报告

    Args:
        result: 证书检查结果

    Returns:
        str: 报告文本
    """
    lines = [
        f"SSL 证书检查结果 - {result.domain}",
        SEPARATOR,
        f"状态: {status_marker(result)}",
        f"颁发者: {result.issuer}",
        f"主题: {result.subject}",
        f"生效时间: {_format_timestamp(result.valid_from)}",
        f"过期时间: {_format_timestamp(result.valid_to)}",
        f"剩余天数: {result.days_left} 天",
        f"指纹: {result.fingerprint}",
        SEPARATOR
    ]
    return "\n".join(lines)


def format_failure(failure: CheckFailure) -> str:
    """格式化检查失败信息"""
    return f"❌ 检查 {failure.domain} 的 SSL 证书时出错 [{failure.error_type}]: {failure.error_message}"


def format_verdict(result: CertificateCheckResult) -> str:
    """单个域名的结论行"""
    if result.is_expired:
        return f"🚨 警告: {result.domain} 的 SSL 证书已过期！"
    if result.needs_warning:
        return f"⚠️  警告: {result.domain} 的 SSL 证书将在 {result.days_left} 天后过期！"
    return f"✅ {result.domain} 的 SSL 证书状态正常"


def format_batch_summary(check_result: CheckResult) -> str:
    """
    格式化批量检查汇总报告

    Args:
        check_result: 批量检查结果

    Returns:
        str: 汇总报告
    """
    lines = [
        SEPARATOR,
        "SSL 证书监控汇总报告",
        SEPARATOR,
        f"总计检查: {check_result.total_domains} 个域名",
        f"正常: {len(check_result.healthy_domains)} 个",
        f"警告: {len(check_result.expiring_domains)} 个",
        f"过期: {len(check_result.expired_domains)} 个",
        f"错误: {len(check_result.failures)} 个",
        f"执行时长: {check_result.execution_time:.2f} 秒"
    ]
    return "\n".join(lines)
