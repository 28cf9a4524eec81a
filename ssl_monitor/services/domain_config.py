"""
域名配置管理服务
"""
import os
import re
from typing import List, Optional
import logging

from ..interfaces import DomainConfigManagerInterface

DOMAIN_PATTERN = re.compile(
    r'^(?:[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)+[a-zA-Z]{2,}$'
)


def clean_domain(domain: str) -> str:
    """
    清理域名格式（移除协议、路径和端口）

    Args:
        domain: 原始域名

    Returns:
        str: 清理后的域名
    """
    if not domain:
        return ""

    domain = domain.strip()

    if domain.startswith(('http://', 'https://')):
        domain = domain.split('://', 1)[1]

    if '/' in domain:
        domain = domain.split('/')[0]

    if ':' in domain:
        domain = domain.split(':')[0]

    return domain.strip().lower()


def parse_domain_list(value: str) -> List[str]:
    """将逗号分隔的字符串拆分为域名列表，忽略空项"""
    return [domain.strip() for domain in (value or "").split(',') if domain.strip()]


class DomainConfigManager(DomainConfigManagerInterface):
    """域名配置管理器实现"""

    def __init__(self, env_var_name: str = "DOMAINS", domains: Optional[List[str]] = None):
        """
        初始化域名配置管理器

        Args:
            env_var_name: 环境变量名称，默认为"DOMAINS"
            domains: 显式指定的域名列表，指定后不再读取环境变量
        """
        self.env_var_name = env_var_name
        self.explicit_domains = domains
        self.logger = logging.getLogger(__name__)

    def get_domains(self) -> List[str]:
        """
        获取去重后的有效域名列表，保持原有顺序

        Returns:
            List[str]: 域名列表
        """
        if self.explicit_domains is not None:
            raw_domains = list(self.explicit_domains)
        else:
            domains_str = os.getenv(self.env_var_name, "")
            if not domains_str.strip():
                self.logger.warning(f"环境变量 {self.env_var_name} 为空")
                return []
            raw_domains = parse_domain_list(domains_str)

        valid_domains = []
        for domain in raw_domains:
            cleaned = clean_domain(domain)
            if not self.validate_domain(cleaned):
                self.logger.warning(f"跳过无效域名: {domain}")
            elif cleaned in valid_domains:
                self.logger.debug(f"跳过重复域名: {domain}")
            else:
                valid_domains.append(cleaned)

        self.logger.info(f"成功加载 {len(valid_domains)} 个域名")
        return valid_domains

    def validate_domain(self, domain: str) -> bool:
        """
        验证域名格式

        Args:
            domain: 要验证的域名

        Returns:
            bool: 域名是否有效
        """
        if not domain or not isinstance(domain, str):
            return False

        if len(domain) > 253:
            return False

        if domain.startswith('.') or domain.endswith('.'):
            return False

        return bool(DOMAIN_PATTERN.match(domain))

    def validate_configuration(self) -> dict:
        """
        验证配置状态

        Returns:
            dict: 配置验证结果
        """
        domains = self.get_domains()
        env_value = os.getenv(self.env_var_name, "")

        return {
            'env_var_name': self.env_var_name,
            'env_var_exists': bool(env_value),
            'total_domains': len(domains),
            'valid_domains': domains
        }
