"""插件 RPC 服务"""

from gloo_traffic_router.web.server import PluginServer

__all__ = ["PluginServer"]
