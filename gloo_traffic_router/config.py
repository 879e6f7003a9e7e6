"""
全局配置管理
"""

import os
import json
from typing import Dict, Any, Optional
from dataclasses import dataclass, asdict

import yaml


@dataclass
class GlobalConfig:
    """全局配置类"""

    # Kubernetes配置
    kubeconfig: Optional[str] = None
    k8s_host: Optional[str] = None
    k8s_token: Optional[str] = None
    verify_ssl: bool = True

    # Gloo Edge 资源配置
    gloo_group: str = "gateway.solo.io"
    gloo_version: str = "v1"

    # 插件配置
    plugin_name: str = "solo-io/glooedge"
    optimistic_lock: bool = True  # patch 时携带 resourceVersion

    # Web服务配置
    web_host: str = "0.0.0.0"
    web_port: int = 8080

    # 日志配置
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_file(cls, config_file: str) -> 'GlobalConfig':
        """从JSON或YAML配置文件加载配置"""
        with open(config_file, 'r', encoding='utf-8') as f:
            if os.path.splitext(config_file)[1].lower() in ('.yaml', '.yml'):
                config_dict = yaml.safe_load(f) or {}
            else:
                config_dict = json.load(f)
        return cls(**config_dict)

    def to_file(self, config_file: str):
        """保存配置到JSON文件"""
        with open(config_file, 'w', encoding='utf-8') as f:
            json.dump(asdict(self), f, indent=2, ensure_ascii=False)

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return asdict(self)


# 全局配置单例
_global_config: Optional[GlobalConfig] = None


def get_config() -> GlobalConfig:
    """获取全局配置单例"""
    global _global_config
    if _global_config is None:
        _global_config = GlobalConfig()
    return _global_config


def set_config(config: Optional[GlobalConfig]):
    """设置全局配置"""
    global _global_config
    _global_config = config


def load_config_from_file(config_file: str):
    """从文件加载全局配置"""
    config = GlobalConfig.from_file(config_file)
    set_config(config)
    return config
