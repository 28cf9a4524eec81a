"""
配置验证器测试
"""
import os
from unittest.mock import patch

from ssl_monitor.services.config_validator import (
    ConfigValidator,
    DEFAULT_CHECK_TIMEOUT,
    DEFAULT_WARNING_DAYS,
    MonitorSettings,
    load_monitor_settings,
)


class TestLoadMonitorSettings:
    """监控参数加载测试类"""

    @patch.dict(os.environ, {}, clear=True)
    def test_defaults(self):
        """测试默认值"""
        settings = load_monitor_settings()

        assert settings == MonitorSettings()
        assert settings.warning_days == DEFAULT_WARNING_DAYS == 30
        assert settings.timeout == DEFAULT_CHECK_TIMEOUT == 10.0
        assert settings.retries == 0
        assert settings.max_workers == 10
        assert settings.sns_topic_arn is None
        assert settings.log_level == 'INFO'

    @patch.dict(os.environ, {
        'WARNING_DAYS': '14',
        'CHECK_TIMEOUT': '2.5',
        'CHECK_RETRIES': '2',
        'MAX_WORKERS': '4',
        'SNS_TOPIC_ARN': 'arn:aws:sns:us-east-1:123456789012:ssl-alerts',
        'LOG_LEVEL': 'DEBUG'
    }, clear=True)
    def test_from_env(self):
        """测试从环境变量读取"""
        settings = load_monitor_settings()

        assert settings.warning_days == 14
        assert settings.timeout == 2.5
        assert settings.retries == 2
        assert settings.max_workers == 4
        assert settings.sns_topic_arn == 'arn:aws:sns:us-east-1:123456789012:ssl-alerts'
        assert settings.log_level == 'DEBUG'

    @patch.dict(os.environ, {
        'WARNING_DAYS': 'abc',
        'CHECK_TIMEOUT': '0',
        'CHECK_RETRIES': '-1',
        'MAX_WORKERS': '0'
    }, clear=True)
    def test_invalid_values_fall_back(self):
        """测试无效值回退到默认值"""
        with patch('ssl_monitor.services.config_validator.logger') as mock_logger:
            settings = load_monitor_settings()

        assert settings == MonitorSettings()
        assert mock_logger.warning.call_count == 4

    @patch.dict(os.environ, {'WARNING_DAYS': '0', 'SNS_TOPIC_ARN': ''}, clear=True)
    def test_zero_warning_days_and_empty_arn(self):
        """测试警告天数可以为0，空ARN视为未设置"""
        settings = load_monitor_settings()

        assert settings.warning_days == 0
        assert settings.sns_topic_arn is None


class TestConfigValidator:
    """配置验证器测试类"""

    def setup_method(self):
        """测试前准备"""
        self.validator = ConfigValidator()

    def test_init(self):
        """测试初始化"""
        assert 'DOMAINS' in self.validator.required_env_vars
        assert 'SNS_TOPIC_ARN' in self.validator.optional_env_vars
        assert 'CHECK_TIMEOUT' in self.validator.numeric_env_vars

    @patch.dict(os.environ, {
        'DOMAINS': 'example.com,test.org',
        'SNS_TOPIC_ARN': 'arn:aws:sns:us-east-1:123456789012:ssl-alerts',
        'LOG_LEVEL': 'INFO'
    })
    def test_validate_environment_variables_success(self):
        """测试环境变量验证成功"""
        result = self.validator.validate_environment_variables()

        assert result['is_valid'] is True
        assert len(result['errors']) == 0
        assert 'DOMAINS' in result['present_vars']
        assert result['present_vars']['SNS_TOPIC_ARN'] == 'arn:aws:sns:***:123456789012:ssl-alerts'
        assert len(result['missing_required']) == 0

    @patch.dict(os.environ, {}, clear=True)
    def test_validate_environment_variables_missing_required(self):
        """测试缺少必需环境变量"""
        result = self.validator.validate_environment_variables()

        assert result['is_valid'] is False
        assert any('DOMAINS' in error for error in result['errors'])
        assert len(result['missing_optional']) == len(self.validator.optional_env_vars)

    @patch.dict(os.environ, {'DOMAINS': 'example.com,test.org'})
    def test_validate_domains_configuration_success(self):
        """测试域名配置验证成功"""
        result = self.validator.validate_domains_configuration()

        assert result['is_valid'] is True
        assert result['total_domains'] == 2
        assert result['valid_domains'] == ['example.com', 'test.org']
        assert result['invalid_domains'] == []

    @patch.dict(os.environ, {'DOMAINS': ''})
    def test_validate_domains_configuration_empty(self):
        """测试空域名配置"""
        result = self.validator.validate_domains_configuration()

        assert result['is_valid'] is False
        assert "DOMAINS环境变量为空" in result['errors']

    @patch.dict(os.environ, {'DOMAINS': 'https://example.com:443,invalid..domain,test.org'})
    def test_validate_domains_configuration_with_invalid(self):
        """测试包含无效域名的配置"""
        result = self.validator.validate_domains_configuration()

        assert result['is_valid'] is True
        assert result['total_domains'] == 3
        assert len(result['valid_domains']) == 2
        assert result['invalid_domains'] == ['invalid..domain']
        assert "域名格式无效: invalid..domain" in result['warnings']

    @patch.dict(os.environ, {'DOMAINS': 'invalid..domain,another..invalid'})
    def test_validate_domains_configuration_all_invalid(self):
        """测试所有域名都无效"""
        result = self.validator.validate_domains_configuration()

        assert result['is_valid'] is False
        assert "没有找到有效的域名" in result['errors']

    @patch.dict(os.environ, {'WARNING_DAYS': '7', 'CHECK_TIMEOUT': '1.5'}, clear=True)
    def test_validate_numeric_settings_success(self):
        """测试数值配置验证成功"""
        result = self.validator.validate_numeric_settings()

        assert result['is_valid'] is True
        assert result['values'] == {'WARNING_DAYS': 7, 'CHECK_TIMEOUT': 1.5}

    @patch.dict(os.environ, {'WARNING_DAYS': 'thirty', 'MAX_WORKERS': '0'}, clear=True)
    def test_validate_numeric_settings_invalid(self):
        """测试数值配置无效"""
        result = self.validator.validate_numeric_settings()

        assert result['is_valid'] is False
        assert "WARNING_DAYS 格式无效: thirty" in result['errors']
        assert "MAX_WORKERS 不能小于 1: 0" in result['errors']

    @patch.dict(os.environ, {'SNS_TOPIC_ARN': 'arn:aws:sns:us-east-1:123456789012:ssl-alerts'})
    def test_validate_sns_configuration_success(self):
        """测试SNS配置验证成功"""
        result = self.validator.validate_sns_configuration()

        assert result['is_valid'] is True
        assert result['arn_format_valid'] is True
        assert result['topic_arn'] == 'arn:aws:sns:us-east-1:123456789012:ssl-alerts'

    @patch.dict(os.environ, {}, clear=True)
    def test_validate_sns_configuration_missing(self):
        """测试缺少SNS配置"""
        result = self.validator.validate_sns_configuration()

        assert result['is_valid'] is False
        assert "SNS_TOPIC_ARN环境变量未设置" in result['errors'][0]

    @patch.dict(os.environ, {'SNS_TOPIC_ARN': 'invalid-arn-format'})
    def test_validate_sns_configuration_invalid_arn(self):
        """测试无效的SNS ARN格式"""
        result = self.validator.validate_sns_configuration()

        assert result['is_valid'] is False
        assert result['arn_format_valid'] is False
        assert "SNS主题ARN格式无效" in result['errors'][0]

    def test_sanitize_env_value(self):
        """测试环境变量值清理"""
        arn_value = 'arn:aws:sns:us-east-1:123456789012:ssl-alerts'
        assert self.validator._sanitize_env_value('SNS_TOPIC_ARN', arn_value) == \
            'arn:aws:sns:***:123456789012:ssl-alerts'

        assert self.validator._sanitize_env_value('AWS_SECRET_ACCESS_KEY', 'abcdefghijkl') == 'abcdefgh***'

        normal_value = 'example.com,test.org'
        assert self.validator._sanitize_env_value('DOMAINS', normal_value) == normal_value

    @patch.dict(os.environ, {'DOMAINS': 'example.com,test.org'}, clear=True)
    def test_validate_all_configurations_without_sns(self):
        """测试缺少SNS只产生警告"""
        result = self.validator.validate_all_configurations()

        assert result['is_valid'] is True
        assert len(result['errors']) == 0
        assert any('SNS_TOPIC_ARN' in warning for warning in result['warnings'])
        assert set(result['configurations']) == {'environment', 'domains', 'settings', 'sns'}

    @patch.dict(os.environ, {'DOMAINS': 'example.com', 'CHECK_TIMEOUT': 'slow'}, clear=True)
    def test_validate_all_configurations_bad_number(self):
        """测试数值配置错误导致整体无效"""
        result = self.validator.validate_all_configurations()

        assert result['is_valid'] is False
        assert "CHECK_TIMEOUT 格式无效: slow" in result['errors']

    @patch.dict(os.environ, {}, clear=True)
    def test_validate_all_configurations_failure(self):
        """测试配置验证失败"""
        result = self.validator.validate_all_configurations()

        assert result['is_valid'] is False
        assert len(result['errors']) > 0

    @patch.dict(os.environ, {
        'DOMAINS': 'example.com,test.org',
        'SNS_TOPIC_ARN': 'arn:aws:sns:us-east-1:123456789012:ssl-alerts'
    }, clear=True)
    def test_get_configuration_summary(self):
        """测试获取配置摘要"""
        summary = self.validator.get_configuration_summary()

        assert "配置验证摘要" in summary
        assert "✅ 配置验证通过" in summary
        assert "环境变量:" in summary
        assert "DOMAINS: example.com,test.org" in summary

    @patch.dict(os.environ, {}, clear=True)
    def test_get_configuration_summary_with_errors(self):
        """测试包含错误的配置摘要"""
        summary = self.validator.get_configuration_summary()

        assert "❌ 配置验证失败" in summary
        assert "错误:" in summary
