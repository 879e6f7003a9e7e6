"""
流量路由插件异常定义

所有异常都会终止当前一次调用，由上层（Rollout 控制器）在下一轮协调时重试
"""

from typing import Any, Optional


class TrafficRouterError(Exception):
    """流量路由插件异常基类"""


class InvalidSelectorError(TrafficRouterError):
    """选择器缺少 name/labels，或插件配置中选择器数量不为一"""


class PluginConfigError(InvalidSelectorError):
    """插件配置无法解析"""


class NotFoundError(TrafficRouterError):
    """按名称获取的路由对象不存在"""


class AmbiguousRoutesError(TrafficRouterError):
    """路由对象包含多条路由但未配置 routes 白名单"""


class IncompleteRouteMatchError(TrafficRouterError):
    """白名单中的部分路由没有匹配到 stable 目标"""


class NoMatchFoundError(TrafficRouterError):
    """所有路由对象中都没有匹配到 stable 目标"""


class StoreError(TrafficRouterError):
    """配置存储（Kubernetes API）返回的错误"""

    def __init__(self, message: str, status: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.status = status
        self.body = body


class PatchConflictError(StoreError):
    """patch 时资源版本冲突"""
