"""
配置验证服务
"""
import os
import re
from dataclasses import dataclass
from typing import Dict, Any, Optional
import logging

from .domain_config import DOMAIN_PATTERN, clean_domain, parse_domain_list

logger = logging.getLogger(__name__)

DEFAULT_WARNING_DAYS = 30
DEFAULT_CHECK_TIMEOUT = 10.0
DEFAULT_CHECK_RETRIES = 0
DEFAULT_MAX_WORKERS = 10

SNS_ARN_PATTERN = r'^arn:aws:sns:[a-z0-9-]+:\d{12}:[a-zA-Z0-9_-]+$'


@dataclass(frozen=True)
class MonitorSettings:
    """监控运行参数"""
    warning_days: int = DEFAULT_WARNING_DAYS
    timeout: float = DEFAULT_CHECK_TIMEOUT
    retries: int = DEFAULT_CHECK_RETRIES
    max_workers: int = DEFAULT_MAX_WORKERS
    sns_topic_arn: Optional[str] = None
    log_level: str = 'INFO'


def _read_number(name: str, default, cast, minimum):
    """读取数值型环境变量，无效时回退到默认值"""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default

    try:
        value = cast(raw.strip())
    except ValueError:
        logger.warning(f"环境变量 {name} 格式无效: {raw}，使用默认值 {default}")
        return default

    if value < minimum:
        logger.warning(f"环境变量 {name} 不能小于 {minimum}: {raw}，使用默认值 {default}")
        return default

    return value


def load_monitor_settings() -> MonitorSettings:
    """
    从环境变量加载监控参数

    Returns:
        MonitorSettings: 监控参数
    """
    return MonitorSettings(
        warning_days=_read_number('WARNING_DAYS', DEFAULT_WARNING_DAYS, int, 0),
        timeout=_read_number('CHECK_TIMEOUT', DEFAULT_CHECK_TIMEOUT, float, 0.1),
        retries=_read_number('CHECK_RETRIES', DEFAULT_CHECK_RETRIES, int, 0),
        max_workers=_read_number('MAX_WORKERS', DEFAULT_MAX_WORKERS, int, 1),
        sns_topic_arn=os.getenv('SNS_TOPIC_ARN') or None,
        log_level=os.getenv('LOG_LEVEL', 'INFO')
    )


class ConfigValidator:
    """配置验证器"""

    def __init__(self):
        """初始化配置验证器"""
        self.logger = logging.getLogger(__name__)

        # 必需的环境变量
        self.required_env_vars = {
            'DOMAINS': '域名列表（逗号分隔）'
        }

        # 可选的环境变量
        self.optional_env_vars = {
            'WARNING_DAYS': '警告阈值天数',
            'CHECK_TIMEOUT': '单次检查超时时间（秒）',
            'CHECK_RETRIES': '失败重试次数',
            'MAX_WORKERS': '并发检查数量',
            'SNS_TOPIC_ARN': 'SNS主题ARN',
            'LOG_LEVEL': '日志级别'
        }

        # 数值型环境变量及其最小值
        self.numeric_env_vars = {
            'WARNING_DAYS': (int, 0),
            'CHECK_TIMEOUT': (float, 0.1),
            'CHECK_RETRIES': (int, 0),
            'MAX_WORKERS': (int, 1)
        }

    def validate_all_configurations(self) -> Dict[str, Any]:
        """
        验证所有配置

        Returns:
            Dict[str, Any]: 验证结果
        """
        validation_result = {
            'is_valid': True,
            'errors': [],
            'warnings': [],
            'configurations': {}
        }

        env_validation = self.validate_environment_variables()
        validation_result['configurations']['environment'] = env_validation
        if not env_validation['is_valid']:
            validation_result['is_valid'] = False
            validation_result['errors'].extend(env_validation['errors'])
        validation_result['warnings'].extend(env_validation['warnings'])

        domains_validation = self.validate_domains_configuration()
        validation_result['configurations']['domains'] = domains_validation
        if not domains_validation['is_valid']:
            validation_result['is_valid'] = False
            validation_result['errors'].extend(domains_validation['errors'])
        validation_result['warnings'].extend(domains_validation['warnings'])

        numeric_validation = self.validate_numeric_settings()
        validation_result['configurations']['settings'] = numeric_validation
        if not numeric_validation['is_valid']:
            validation_result['is_valid'] = False
            validation_result['errors'].extend(numeric_validation['errors'])

        # SNS是可选的，配置问题只作为警告
        sns_validation = self.validate_sns_configuration()
        validation_result['configurations']['sns'] = sns_validation
        if not sns_validation['is_valid']:
            validation_result['warnings'].extend(sns_validation['errors'])

        return validation_result

    def validate_environment_variables(self) -> Dict[str, Any]:
        """
        验证环境变量

        Returns:
            Dict[str, Any]: 环境变量验证结果
        """
        result = {
            'is_valid': True,
            'errors': [],
            'warnings': [],
            'missing_required': [],
            'missing_optional': [],
            'present_vars': {}
        }

        for var_name, description in self.required_env_vars.items():
            value = os.getenv(var_name)
            if not value:
                result['missing_required'].append({'name': var_name, 'description': description})
                result['errors'].append(f"缺少必需的环境变量: {var_name} ({description})")
                result['is_valid'] = False
            else:
                result['present_vars'][var_name] = self._sanitize_env_value(var_name, value)

        for var_name, description in self.optional_env_vars.items():
            value = os.getenv(var_name)
            if not value:
                result['missing_optional'].append({'name': var_name, 'description': description})
                result['warnings'].append(f"缺少可选的环境变量: {var_name} ({description})，使用默认值")
            else:
                result['present_vars'][var_name] = self._sanitize_env_value(var_name, value)

        return result

    def validate_domains_configuration(self) -> Dict[str, Any]:
        """
        验证域名配置

        Returns:
            Dict[str, Any]: 域名配置验证结果
        """
        result = {
            'is_valid': True,
            'errors': [],
            'warnings': [],
            'total_domains': 0,
            'valid_domains': [],
            'invalid_domains': []
        }

        domains_str = os.getenv('DOMAINS', '')

        if not domains_str.strip():
            result['is_valid'] = False
            result['errors'].append("DOMAINS环境变量为空")
            return result

        raw_domains = parse_domain_list(domains_str)
        result['total_domains'] = len(raw_domains)

        for domain in raw_domains:
            if DOMAIN_PATTERN.match(clean_domain(domain)):
                result['valid_domains'].append(domain)
            else:
                result['invalid_domains'].append(domain)
                result['warnings'].append(f"域名格式无效: {domain}")

        if not result['valid_domains']:
            result['is_valid'] = False
            result['errors'].append("没有找到有效的域名")

        return result

    def validate_numeric_settings(self) -> Dict[str, Any]:
        """
        验证数值型配置

        Returns:
            Dict[str, Any]: 验证结果
        """
        result = {
            'is_valid': True,
            'errors': [],
            'values': {}
        }

        for var_name, (cast, minimum) in self.numeric_env_vars.items():
            raw = os.getenv(var_name)
            if raw is None or not raw.strip():
                continue

            try:
                value = cast(raw.strip())
            except ValueError:
                result['is_valid'] = False
                result['errors'].append(f"{var_name} 格式无效: {raw}")
                continue

            if value < minimum:
                result['is_valid'] = False
                result['errors'].append(f"{var_name} 不能小于 {minimum}: {raw}")
                continue

            result['values'][var_name] = value

        return result

    def validate_sns_configuration(self) -> Dict[str, Any]:
        """
        验证SNS配置

        Returns:
            Dict[str, Any]: SNS配置验证结果
        """
        result = {
            'is_valid': True,
            'errors': [],
            'topic_arn': None,
            'arn_format_valid': False
        }

        topic_arn = os.getenv('SNS_TOPIC_ARN')

        if not topic_arn:
            result['is_valid'] = False
            result['errors'].append("SNS_TOPIC_ARN环境变量未设置，告警通知不可用")
            return result

        result['topic_arn'] = topic_arn

        if re.match(SNS_ARN_PATTERN, topic_arn):
            result['arn_format_valid'] = True
        else:
            result['is_valid'] = False
            result['errors'].append(f"SNS主题ARN格式无效: {topic_arn}")

        return result

    def _sanitize_env_value(self, var_name: str, value: str) -> str:
        """
        清理环境变量值（隐藏敏感信息）

        Args:
            var_name: 变量名
            value: 变量值

        Returns:
            str: 清理后的值
        """
        sensitive_vars = {'SNS_TOPIC_ARN', 'AWS_ACCESS_KEY_ID', 'AWS_SECRET_ACCESS_KEY'}

        if var_name in sensitive_vars and value:
            if value.startswith('arn:'):
                parts = value.split(':')
                if len(parts) >= 6:
                    return f"{':'.join(parts[:3])}:***:{parts[-2]}:{parts[-1]}"

            return value[:8] + "***" if len(value) > 8 else "***"

        return value

    def get_configuration_summary(self) -> str:
        """
        获取配置摘要

        Returns:
            str: 配置摘要文本
        """
        validation_result = self.validate_all_configurations()

        lines = [
            "配置验证摘要",
            "=" * 30
        ]

        if validation_result['is_valid']:
            lines.append("✅ 配置验证通过")
        else:
            lines.append("❌ 配置验证失败")

        if validation_result['errors']:
            lines.append("\n错误:")
            for error in validation_result['errors']:
                lines.append(f"  • {error}")

        if validation_result['warnings']:
            lines.append("\n警告:")
            for warning in validation_result['warnings']:
                lines.append(f"  • {warning}")

        env_config = validation_result['configurations'].get('environment', {})
        if env_config.get('present_vars'):
            lines.append("\n环境变量:")
            for var_name, var_value in env_config['present_vars'].items():
                lines.append(f"  {var_name}: {var_value}")

        return "\n".join(lines)
