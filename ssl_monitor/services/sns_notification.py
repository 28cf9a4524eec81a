"""
SNS通知服务
"""
import os
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence
import logging

try:
    import boto3
    from botocore.exceptions import BotoCoreError, ClientError
except ImportError:
    boto3 = None

from ..interfaces import NotificationServiceInterface
from ..models import CertificateCheckResult, CheckFailure


class SNSNotificationService(NotificationServiceInterface):
    """SNS通知服务实现"""

    def __init__(self, topic_arn: Optional[str] = None, region_name: Optional[str] = None,
                 warning_days: int = 30):
        """
        初始化SNS通知服务

        Args:
            topic_arn: SNS主题ARN，如果为None则从环境变量读取
            region_name: AWS区域名称，如果为None则自动检测
            warning_days: 警告阈值天数，用于通知文案
        """
        self.topic_arn = topic_arn or os.getenv('SNS_TOPIC_ARN')
        self.warning_days = warning_days

        if region_name:
            self.region_name = region_name
        elif self.topic_arn and self.topic_arn.startswith('arn:aws:sns:'):
            # 从SNS ARN中提取区域
            self.region_name = self.topic_arn.split(':')[3]
        else:
            self.region_name = os.getenv('AWS_REGION', 'us-east-1')

        self.logger = logging.getLogger(__name__)

        self.sns_client = None
        if boto3:
            try:
                self.sns_client = boto3.client('sns', region_name=self.region_name)
                self.logger.debug(f"SNS客户端初始化成功，区域: {self.region_name}")
            except (BotoCoreError, ClientError) as e:
                self.logger.error(f"初始化SNS客户端失败: {str(e)}")
        else:
            self.logger.warning("boto3未安装，SNS功能不可用")

    def send_expiry_notification(self, results: List[CertificateCheckResult]) -> bool:
        """
        发送证书过期通知

        Args:
            results: 需要警告的证书列表（已过期或即将过期）

        Returns:
            bool: 发送是否成功
        """
        alerting = [r for r in results if r.needs_warning or r.is_expired]
        if not alerting:
            self.logger.info("没有需要警告的证书，跳过通知发送")
            return True

        if not self._validate_configuration():
            return False

        subject = self._format_subject(alerting)
        message = self.format_notification_content(alerting)

        return self._publish_with_retry(subject, message)

    def send_status_report(self, results: Sequence[CertificateCheckResult],
                           failures: Sequence[CheckFailure],
                           execution_summary: Dict[str, Any]) -> bool:
        """
        发送完整的SSL证书状态报告

        Args:
            results: 成功的检查结果
            failures: 检查失败的域名
            execution_summary: 执行摘要信息

        Returns:
            bool: 发送是否成功
        """
        if not self._validate_configuration():
            return False

        subject = self._format_status_subject(results, failures)
        message = self.format_status_report_content(results, failures, execution_summary)

        return self._publish_with_retry(subject, message)

    def _publish_with_retry(self, subject: str, message: str, max_retries: int = 3) -> bool:
        """
        带重试机制的SNS消息发布

        Args:
            subject: 消息主题
            message: 消息内容
            max_retries: 最大重试次数

        Returns:
            bool: 发送是否成功
        """
        for attempt in range(max_retries + 1):
            try:
                response = self.sns_client.publish(
                    TopicArn=self.topic_arn,
                    # SNS主题长度上限为100个字符
                    Subject=subject[:100],
                    Message=message
                )

                self.logger.info(f"SNS通知发送成功，MessageId: {response.get('MessageId')}")
                return True

            except ClientError as e:
                error_code = e.response['Error']['Code']
                error_message = e.response['Error']['Message']

                if self._is_retryable_error(error_code) and attempt < max_retries:
                    wait_time = 2 ** attempt  # 指数退避
                    self.logger.warning(
                        f"SNS发送失败 (尝试 {attempt + 1}/{max_retries + 1}) - {error_code}: {error_message}，"
                        f"{wait_time}秒后重试"
                    )
                    time.sleep(wait_time)
                    continue

                self.logger.error(f"SNS发送失败 - {error_code}: {error_message}")
                return False

            except BotoCoreError as e:
                if attempt < max_retries:
                    wait_time = 2 ** attempt
                    self.logger.warning(
                        f"发送SNS通知时发生错误 (尝试 {attempt + 1}/{max_retries + 1}): {str(e)}，"
                        f"{wait_time}秒后重试"
                    )
                    time.sleep(wait_time)
                    continue

                self.logger.error(f"发送SNS通知失败: {str(e)}")
                return False

        return False

    def _is_retryable_error(self, error_code: str) -> bool:
        """判断AWS错误代码是否可重试"""
        retryable_errors = {
            'Throttling',
            'ServiceUnavailable',
            'InternalError',
            'RequestTimeout'
        }
        return error_code in retryable_errors

    def format_notification_content(self, results: List[CertificateCheckResult]) -> str:
        """
        格式化通知内容

        Args:
            results: 证书检查结果列表

        Returns:
            str: 格式化的通知内容
        """
        if not results:
            return "所有SSL证书状态正常。"

        expired_certs = [r for r in results if r.is_expired]
        expiring_certs = [r for r in results if r.needs_warning and not r.is_expired]

        lines = [
            "SSL证书过期监控报告",
            "=" * 30,
            f"检查时间: {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S UTC')}",
            ""
        ]

        if expired_certs:
            lines.extend(["🚨 已过期证书:", ""])
            for cert in expired_certs:
                lines.append(f"• {cert.domain}")
                lines.append(f"  过期时间: {cert.valid_to.strftime('%Y-%m-%d %H:%M:%S')}")
                lines.append(f"  已过期: {abs(cert.days_left)} 天")
                lines.append(f"  颁发者: {cert.issuer}")
                lines.append("")

        if expiring_certs:
            lines.extend([f"⚠️  即将过期证书 ({self.warning_days}天内):", ""])
            for cert in expiring_certs:
                lines.append(f"• {cert.domain}")
                lines.append(f"  过期时间: {cert.valid_to.strftime('%Y-%m-%d %H:%M:%S')}")
                lines.append(f"  剩余天数: {cert.days_left} 天")
                lines.append(f"  颁发者: {cert.issuer}")
                lines.append("")

        lines.extend([
            "建议操作:",
            "1. 立即续期已过期的证书",
            "2. 计划续期即将过期的证书",
            "3. 更新证书后重新部署相关服务",
            "",
            "此消息由SSL证书监控系统自动发送。"
        ])

        return "\n".join(lines)

    def _format_subject(self, results: List[CertificateCheckResult]) -> str:
        """格式化通知主题"""
        expired_count = len([r for r in results if r.is_expired])
        expiring_count = len([r for r in results if r.needs_warning and not r.is_expired])

        if expired_count > 0 and expiring_count > 0:
            return f"🚨 SSL证书警报: {expired_count}个已过期, {expiring_count}个即将过期"
        elif expired_count > 0:
            return f"🚨 SSL证书警报: {expired_count}个证书已过期"
        elif expiring_count > 0:
            return f"⚠️ SSL证书提醒: {expiring_count}个证书即将过期"
        else:
            return "SSL证书状态报告"

    def _format_status_subject(self, results: Sequence[CertificateCheckResult],
                               failures: Sequence[CheckFailure]) -> str:
        """格式化状态报告主题"""
        total_domains = len(results) + len(failures)
        expired_count = len([r for r in results if r.is_expired])
        expiring_count = len([r for r in results if r.needs_warning and not r.is_expired])

        if expired_count > 0:
            return f"🚨 SSL证书日报: {expired_count}个已过期 | {total_domains}个域名"
        elif expiring_count > 0:
            return f"⚠️ SSL证书日报: {expiring_count}个即将过期 | {total_domains}个域名"
        elif failures:
            return f"❌ SSL证书日报: {len(failures)}个检查失败 | {total_domains}个域名"
        else:
            return f"✅ SSL证书日报: 全部正常 | {total_domains}个域名"

    def format_status_report_content(self, results: Sequence[CertificateCheckResult],
                                     failures: Sequence[CheckFailure],
                                     execution_summary: Dict[str, Any]) -> str:
        """
        格式化完整状态报告内容

        Args:
            results: 成功的检查结果
            failures: 检查失败的域名
            execution_summary: 执行摘要

        Returns:
            str: 格式化的报告内容
        """
        expired_certs = [r for r in results if r.is_expired]
        expiring_certs = [r for r in results if r.needs_warning and not r.is_expired]
        normal_certs = [r for r in results if not r.needs_warning and not r.is_expired]

        lines = [
            "SSL证书监控日报",
            "=" * 40,
            f"检查时间: {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S UTC')}",
            f"执行时长: {execution_summary.get('duration_seconds', 0):.2f} 秒",
            f"总域名数: {len(results) + len(failures)}",
            f"成功检查: {len(results)}",
            f"失败检查: {len(failures)}",
            ""
        ]

        if expired_certs:
            lines.extend(["🚨 已过期证书 (需要立即处理):", "-" * 30])
            for cert in expired_certs:
                lines.append(f"• {cert.domain}")
                lines.append(f"  过期时间: {cert.valid_to.strftime('%Y-%m-%d')}")
                lines.append(f"  已过期: {abs(cert.days_left)} 天")
                lines.append(f"  颁发者: {cert.issuer}")
                lines.append("")

        if expiring_certs:
            lines.extend([f"⚠️  即将过期证书 ({self.warning_days}天内):", "-" * 30])
            for cert in expiring_certs:
                lines.append(f"• {cert.domain}")
                lines.append(f"  过期时间: {cert.valid_to.strftime('%Y-%m-%d')}")
                lines.append(f"  剩余天数: {cert.days_left} 天")
                lines.append(f"  颁发者: {cert.issuer}")
                lines.append("")

        if failures:
            lines.extend(["❌ 检查失败的域名:", "-" * 30])
            for failure in failures:
                lines.append(f"• {failure.domain}")
                lines.append(f"  错误类型: {failure.error_type}")
                lines.append(f"  错误: {failure.error_message}")
                if failure.suggested_action:
                    lines.append(f"  建议: {failure.suggested_action}")
                lines.append("")

        if normal_certs:
            lines.extend(["✅ 正常证书状态:", "-" * 30])
            for cert in normal_certs:
                lines.append(f"• {cert.domain} - {cert.days_left}天后过期 ({cert.valid_to.strftime('%Y-%m-%d')})")
            lines.append("")

        lines.extend([
            "📊 统计摘要:",
            "-" * 30,
            f"🚨 已过期: {len(expired_certs)} 个",
            f"⚠️  即将过期: {len(expiring_certs)} 个",
            f"✅ 正常: {len(normal_certs)} 个",
            f"❌ 检查失败: {len(failures)} 个",
            "",
            "---",
            "此报告由SSL证书监控系统自动生成"
        ])

        return "\n".join(lines)

    def _validate_configuration(self) -> bool:
        """验证配置是否正确"""
        if not self.sns_client:
            self.logger.error("SNS客户端未初始化")
            return False

        if not self.topic_arn:
            self.logger.error("SNS主题ARN未配置")
            return False

        return True

    def get_configuration_status(self) -> dict:
        """
        获取配置状态

        Returns:
            dict: 配置状态信息
        """
        return {
            'boto3_available': boto3 is not None,
            'sns_client_initialized': self.sns_client is not None,
            'topic_arn_configured': bool(self.topic_arn),
            'region_name': self.region_name,
            'configuration_valid': bool(self.sns_client and self.topic_arn)
        }
