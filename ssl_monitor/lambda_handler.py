"""
定时任务（AWS Lambda）入口点
"""
from datetime import datetime, timezone
from typing import Dict, Any, Optional

from .models import CheckResult
from .services.batch_checker import BatchCertificateChecker
from .services.config_validator import ConfigValidator, load_monitor_settings, MonitorSettings
from .services.domain_config import DomainConfigManager
from .services.logger import LoggerService
from .services.sns_notification import SNSNotificationService


class SSLCertificateMonitor:
    """SSL证书监控器主类"""

    def __init__(self, settings: Optional[MonitorSettings] = None):
        """
        初始化监控器

        Args:
            settings: 运行参数，默认从环境变量加载
        """
        self.settings = settings or load_monitor_settings()

        self.logger_service = LoggerService(log_level=self.settings.log_level)
        self.domain_manager = DomainConfigManager()
        self.batch_checker = BatchCertificateChecker(
            warning_days=self.settings.warning_days,
            timeout=self.settings.timeout,
            max_workers=self.settings.max_workers,
            retries=self.settings.retries,
            logger_service=self.logger_service
        )
        self.notification_service = SNSNotificationService(
            topic_arn=self.settings.sns_topic_arn,
            warning_days=self.settings.warning_days
        )

        self._log_configuration()

    def _log_configuration(self):
        """记录系统配置信息"""
        self.logger_service.log_configuration_info({
            'warning_days': self.settings.warning_days,
            'check_timeout': self.settings.timeout,
            'check_retries': self.settings.retries,
            'max_workers': self.settings.max_workers,
            'sns_topic_arn': self.settings.sns_topic_arn or '',
            'log_level': self.settings.log_level
        })

    def execute(self) -> CheckResult:
        """
        执行SSL证书检查

        Returns:
            CheckResult: 检查结果
        """
        domains = self.domain_manager.get_domains()

        if not domains:
            self.logger_service.logger.warning("没有找到要检查的域名")
            return CheckResult(
                total_domains=0,
                successful_checks=0,
                failed_checks=0,
                errors=["没有找到要检查的域名"]
            )

        result = self.batch_checker.check_domains(domains)

        self._send_notifications(result)
        self._send_status_report(result)

        self.logger_service.log_execution_summary()
        return result

    def _send_notifications(self, result: CheckResult) -> bool:
        """
        发送过期通知

        Args:
            result: 检查结果

        Returns:
            bool: 通知是否发送成功
        """
        notification_domains = result.expired_domains + result.expiring_domains

        if not notification_domains:
            self.logger_service.logger.info("所有证书状态正常，无需发送通知")
            return True

        notification_sent = self.notification_service.send_expiry_notification(notification_domains)
        self.logger_service.log_notification_sent("SNS", len(notification_domains), notification_sent)
        return notification_sent

    def _send_status_report(self, result: CheckResult) -> bool:
        """
        发送完整的SSL证书状态报告

        Args:
            result: 检查结果

        Returns:
            bool: 发送是否成功
        """
        if not self.notification_service.get_configuration_status()['configuration_valid']:
            self.logger_service.logger.debug("SNS未配置，跳过状态报告")
            return False

        execution_summary = self.logger_service.get_execution_summary()
        success = self.notification_service.send_status_report(
            result.results, result.failures, execution_summary
        )

        if success:
            self.logger_service.logger.info("SSL证书状态报告发送成功")
        else:
            self.logger_service.logger.error("SSL证书状态报告发送失败")

        return success

    def validate_system_health(self) -> dict:
        """
        验证系统健康状态

        Returns:
            dict: 系统健康状态信息
        """
        health_status = {
            'overall_healthy': True,
            'components': {},
            'issues': []
        }

        config_validation = ConfigValidator().validate_all_configurations()
        health_status['components']['configuration'] = {
            'healthy': config_validation['is_valid'],
            'details': config_validation
        }
        if not config_validation['is_valid']:
            health_status['issues'].extend(config_validation['errors'])
            health_status['overall_healthy'] = False

        domain_config = self.domain_manager.validate_configuration()
        health_status['components']['domain_config'] = {
            'healthy': domain_config['total_domains'] > 0,
            'details': domain_config
        }
        if domain_config['total_domains'] == 0:
            health_status['issues'].append("没有配置要监控的域名")
            health_status['overall_healthy'] = False

        sns_config = self.notification_service.get_configuration_status()
        health_status['components']['sns_notification'] = {
            'healthy': sns_config['configuration_valid'],
            'details': sns_config
        }
        if not sns_config['configuration_valid']:
            health_status['issues'].append("SNS通知配置无效")
            health_status['overall_healthy'] = False

        return health_status


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda函数入口点

    Args:
        event: EventBridge触发事件
        context: Lambda运行时上下文

    Returns:
        dict: 执行结果和统计信息
    """
    try:
        monitor = SSLCertificateMonitor()
        result = monitor.execute()
    except Exception as e:
        LoggerService().logger.exception(f"Lambda函数执行时发生严重错误: {str(e)}")
        return {
            'statusCode': 500,
            'body': {
                'message': 'SSL Certificate Monitor encountered a critical error',
                'error': str(e),
                'timestamp': datetime.now(timezone.utc).isoformat()
            }
        }

    response = {
        'statusCode': 200,
        'body': {
            'message': 'SSL Certificate Monitor executed successfully',
            'summary': {
                'total_domains': result.total_domains,
                'successful_checks': result.successful_checks,
                'failed_checks': result.failed_checks,
                'expired_certificates': len(result.expired_domains),
                'expiring_certificates': len(result.expiring_domains),
                'execution_time_seconds': result.execution_time,
                'success_rate': (
                    result.successful_checks / result.total_domains
                    if result.total_domains > 0 else 0
                )
            },
            'expired_domains': [cert.domain for cert in result.expired_domains],
            'expiring_domains': [cert.domain for cert in result.expiring_domains],
            'failures': [failure.to_dict() for failure in result.failures[:5]],
            'error_statistics': monitor.batch_checker.error_handler.get_error_statistics(result.failures),
            'errors': result.errors[:5],  # 只返回前5个错误
            'timestamp': datetime.now(timezone.utc).isoformat()
        }
    }

    if result.total_domains == 0 and result.errors:
        response['statusCode'] = 500
        response['body']['message'] = 'SSL Certificate Monitor failed to execute'

    return response
