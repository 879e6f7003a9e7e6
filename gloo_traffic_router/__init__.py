"""
Gloo Edge 流量路由插件

随 Argo Rollouts 的 canary 权重变化，调整 Gloo Edge RouteTable / VirtualService
中 stable 与 canary 目标的流量权重
"""

__version__ = "1.0.0"

from gloo_traffic_router.core.plugin import TrafficRouterPlugin, PLUGIN_NAME, PLUGIN_TYPE
from gloo_traffic_router.errors import (
    TrafficRouterError,
    InvalidSelectorError,
    PluginConfigError,
    NotFoundError,
    AmbiguousRoutesError,
    IncompleteRouteMatchError,
    NoMatchFoundError,
    StoreError,
    PatchConflictError
)
from gloo_traffic_router.models.data_models import PluginConfig, RolloutContext, RoutingObjectSelector

__all__ = [
    "TrafficRouterPlugin",
    "PLUGIN_NAME",
    "PLUGIN_TYPE",
    "TrafficRouterError",
    "InvalidSelectorError",
    "PluginConfigError",
    "NotFoundError",
    "AmbiguousRoutesError",
    "IncompleteRouteMatchError",
    "NoMatchFoundError",
    "StoreError",
    "PatchConflictError",
    "PluginConfig",
    "RolloutContext",
    "RoutingObjectSelector"
]
