"""
证书过期计算服务
"""
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Tuple
from ..models import CertificateCheckResult, CheckFailure


class ExpiryCalculator:
    """证书过期计算器"""

    def __init__(self, warning_days: int = 30):
        """
        初始化过期计算器

        Args:
            warning_days: 提前警告天数，默认30天，不能为负数
        """
        if isinstance(warning_days, bool) or not isinstance(warning_days, int):
            raise ValueError(f"警告天数必须是整数: {warning_days!r}")
        if warning_days < 0:
            raise ValueError(f"警告天数不能为负数: {warning_days}")

        self.warning_days = warning_days

    def calculate_days_until_expiry(self, expiry_date: datetime, now: Optional[datetime] = None) -> int:
        """
        计算距离过期的天数

        按完整的24小时周期向下取整，与时区无关；
        例如过期前12小时为0，过期后12小时为-1。

        Args:
            expiry_date: 过期时间（UTC）
            now: 当前时间，默认取系统UTC时间

        Returns:
            int: 剩余天数（负数表示已过期）
        """
        now = now or datetime.now(timezone.utc)
        delta = expiry_date - now
        return delta.days

    def is_expired(self, days_left: int) -> bool:
        """判断是否已过期"""
        return days_left < 0

    def needs_warning(self, days_left: int) -> bool:
        """判断是否需要警告（剩余天数低于警告阈值）"""
        return days_left < self.warning_days

    def evaluate(self, expiry_date: datetime, now: Optional[datetime] = None) -> Tuple[int, bool, bool]:
        """
        计算过期状态

        Args:
            expiry_date: 过期时间
            now: 测量时间

        Returns:
            Tuple[int, bool, bool]: (剩余天数, 是否已过期, 是否需要警告)
        """
        days_left = self.calculate_days_until_expiry(expiry_date, now)
        return days_left, self.is_expired(days_left), self.needs_warning(days_left)

    def categorize_certificates(self, results: Sequence[CertificateCheckResult]) -> Dict[str, List[CertificateCheckResult]]:
        """
        对证书进行分类，三个类别互不重叠

        Args:
            results: 证书检查结果列表

        Returns:
            dict: expired / expiring_soon / healthy
        """
        return {
            'expired': [r for r in results if r.is_expired],
            'expiring_soon': [r for r in results if r.needs_warning and not r.is_expired],
            'healthy': [r for r in results if not r.needs_warning and not r.is_expired]
        }

    def get_expiry_summary(self, results: Sequence[CertificateCheckResult],
                           failures: Sequence[CheckFailure] = ()) -> str:
        """
        获取过期状态摘要

        Args:
            results: 成功的检查结果
            failures: 检查失败的域名

        Returns:
            str: 摘要信息
        """
        categorized = self.categorize_certificates(results)

        summary_parts = [
            f"总计: {len(results) + len(failures)} 个域名",
            f"成功: {len(results)} 个",
            f"失败: {len(failures)} 个"
        ]

        if categorized['expired']:
            summary_parts.append(f"已过期: {len(categorized['expired'])} 个")

        if categorized['expiring_soon']:
            summary_parts.append(f"即将过期({self.warning_days}天内): {len(categorized['expiring_soon'])} 个")

        if categorized['healthy']:
            summary_parts.append(f"健康: {len(categorized['healthy'])} 个")

        return ", ".join(summary_parts)
