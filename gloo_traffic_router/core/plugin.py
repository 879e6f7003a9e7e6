"""
Gloo Edge 流量路由插件

实现 Argo Rollouts 流量路由插件接口。每次 SetWeight 调用依次执行：
选择器解析 → 路由过滤与目标匹配 → 目标规范化 → 权重设置 → patch。
"""

import logging
from typing import Dict, List, Any, Optional

from gloo_traffic_router.config import GlobalConfig, get_config
from gloo_traffic_router.core.matcher import DestinationMatcher
from gloo_traffic_router.core.normalizer import normalize
from gloo_traffic_router.core.patcher import PatchOrchestrator
from gloo_traffic_router.core.selector import SelectorResolver
from gloo_traffic_router.core.weights import assign_weights
from gloo_traffic_router.errors import PluginConfigError
from gloo_traffic_router.models.data_models import (
    MatchedRoutingObject,
    RolloutContext,
    RoutingKind,
    RoutingObjectSelector
)
from gloo_traffic_router.store.gloo_client import GlooClient

logger = logging.getLogger(__name__)

PLUGIN_TYPE = "GlooEdgeAPI"
PLUGIN_NAME = "solo-io/glooedge"


class TrafficRouterPlugin:
    """流量路由插件"""

    def __init__(self, client=None, is_test: bool = False, config: Optional[GlobalConfig] = None,
                 dry_run: bool = False):
        """
        Args:
            client: 配置存储；为空时在 init_plugin 中创建 GlooClient
            is_test: 测试模式，init_plugin 不创建客户端
            config: 全局配置，默认使用全局单例
            dry_run: 只生成 patch，不提交
        """
        self.client = client
        self.is_test = is_test
        self.config = config or get_config()
        self.dry_run = dry_run

    def init_plugin(self):
        """初始化 Kubernetes 客户端"""
        if self.is_test or self.client is not None:
            return
        self.client = GlooClient.from_config(self.config)
        logger.info("Gloo Edge 客户端初始化完成")

    def type(self) -> str:
        return PLUGIN_TYPE

    def set_weight(self, rollout: Dict[str, Any], desired_weight: int,
                   additional_destinations: Optional[List[Dict[str, Any]]] = None) -> List[MatchedRoutingObject]:
        """
        按期望的 canary 权重更新路由对象

        Args:
            rollout: Argo Rollout 资源
            desired_weight: canary 权重
            additional_destinations: 额外目标（不支持，忽略）

        Returns:
            已处理的路由对象、目标对及提交的 patch
        """
        ctx = RolloutContext.from_rollout(rollout, self.config.plugin_name or PLUGIN_NAME)

        if ctx.strategy == "canary":
            return self.handle_canary(ctx, desired_weight)

        if ctx.strategy == "blueGreen":
            logger.warning(f"Rollout {ctx.namespace}/{ctx.name} 使用 blueGreen 策略，插件不做处理")
        return []

    def handle_canary(self, ctx: RolloutContext, desired_weight: int) -> List[MatchedRoutingObject]:
        """根据配置的选择器选择 RouteTable 或 VirtualService 流程"""
        plugin_config = ctx.plugin_config
        if (plugin_config.route_table_selector is None) == (plugin_config.virtual_service_selector is None):
            raise PluginConfigError("one of routeTable or virtualService must be configured")

        if plugin_config.route_table_selector is not None:
            return self.handle_canary_using_route_tables(ctx, desired_weight)
        return self.handle_canary_using_virtual_service(ctx, desired_weight)

    def handle_canary_using_route_tables(self, ctx: RolloutContext, desired_weight: int) -> List[MatchedRoutingObject]:
        return self._reconcile(RoutingKind.ROUTE_TABLE, ctx.plugin_config.route_table_selector, ctx, desired_weight)

    def handle_canary_using_virtual_service(self, ctx: RolloutContext, desired_weight: int) -> List[MatchedRoutingObject]:
        return self._reconcile(RoutingKind.VIRTUAL_SERVICE, ctx.plugin_config.virtual_service_selector, ctx,
                               desired_weight)

    def _reconcile(self, kind: RoutingKind, selector: RoutingObjectSelector, ctx: RolloutContext,
                   desired_weight: int) -> List[MatchedRoutingObject]:
        self.init_plugin()

        resolver = SelectorResolver(self.client)
        routing_objects = resolver.resolve(kind, selector, ctx.namespace)

        namespace = selector.namespace or ctx.namespace
        matcher = DestinationMatcher(ctx.stable_service, ctx.canary_service, ctx.plugin_config.routes)
        matched = matcher.match_all(routing_objects, f"{kind.value} {selector.describe(namespace)}")

        pairs = [pair for item in matched for pair in item.pairs]
        normalize(pairs, ctx.canary_service)
        assign_weights(pairs, desired_weight)

        patcher = PatchOrchestrator(self.client, optimistic_lock=self.config.optimistic_lock, dry_run=self.dry_run)
        patcher.apply_all(matched)

        logger.info(
            f"Rollout {ctx.namespace}/{ctx.name}: 已更新 {len(matched)} 个 {kind.value}，"
            f"{len(pairs)} 条路由，canary 权重 {desired_weight}"
        )
        return matched

    def verify_weight(self, rollout: Dict[str, Any], desired_weight: int,
                      additional_destinations: Optional[List[Dict[str, Any]]] = None) -> bool:
        return True

    def update_hash(self, rollout: Dict[str, Any], canary_hash: str, stable_hash: str,
                    additional_destinations: Optional[List[Dict[str, Any]]] = None):
        pass

    def set_header_route(self, rollout: Dict[str, Any], header_routing: Optional[Dict[str, Any]] = None):
        pass

    def set_mirror_route(self, rollout: Dict[str, Any], mirror_route: Optional[Dict[str, Any]] = None):
        pass

    def remove_managed_routes(self, rollout: Dict[str, Any]):
        # canary 目标在发布结束时权重为 0，保留即可
        pass
