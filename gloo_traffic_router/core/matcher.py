"""
路由过滤与目标匹配

在路由对象的路由列表中按后端服务名（不区分大小写）找出 stable 与 canary 目标。
结构不完整的路由或目标会被跳过；只有显式指定的路由无法匹配时才报错。
"""

import logging
from typing import List, Optional, Sequence

from gloo_traffic_router.errors import (
    AmbiguousRoutesError,
    IncompleteRouteMatchError,
    NoMatchFoundError
)
from gloo_traffic_router.models.data_models import (
    DestinationPair,
    MatchedRoutingObject,
    MultiAction,
    Route,
    RoutingObject,
    SingleAction,
    WeightedDestination
)

logger = logging.getLogger(__name__)


def same_backend(name: str, expected: str) -> bool:
    """后端名称比较，不区分大小写"""
    return bool(name) and name.casefold() == expected.casefold()


class DestinationMatcher:
    """stable/canary 目标匹配器"""

    def __init__(self, stable_name: str, canary_name: str, allowed_route_names: Optional[Sequence[str]] = None):
        self.stable_name = stable_name
        self.canary_name = canary_name
        self.allowed_route_names = list(allowed_route_names or [])

    def match(self, routes: List[Route]) -> List[DestinationPair]:
        """
        按路由声明顺序匹配目标

        Args:
            routes: 路由列表

        Returns:
            找到 stable 目标的路由对应的目标对；canary 可能为空
        """
        pairs = []
        for route in routes:
            if self.allowed_route_names and route.name not in self.allowed_route_names:
                logger.debug(f"跳过路由 {route.name}：不在 routes 列表 {self.allowed_route_names} 中")
                continue

            pair = self._match_route(route)
            if pair is not None:
                logger.debug(f"路由 {route.name} 匹配到 stable={pair.stable} canary={pair.canary}")
                pairs.append(pair)
        return pairs

    def _match_route(self, route: Route) -> Optional[DestinationPair]:
        action = route.action

        if isinstance(action, SingleAction):
            stable = WeightedDestination({'destination': action.destination})
            if not same_backend(stable.backend_name, self.stable_name):
                logger.debug(f"跳过路由 {route.name}：single 目标 {stable.backend_name!r} 不是 stable 服务")
                return None
            return DestinationPair(route=route, stable=stable)

        if isinstance(action, MultiAction):
            stable = canary = None
            for raw in action.destinations:
                if not isinstance(raw, dict):
                    continue
                dst = WeightedDestination(raw)
                name = dst.backend_name
                if not name:
                    logger.debug(f"跳过路由 {route.name} 中缺少 upstream 名称的目标: {raw}")
                    continue
                if same_backend(name, self.canary_name):
                    if canary is None:
                        canary = dst
                elif same_backend(name, self.stable_name):
                    if stable is None:
                        stable = dst

            if stable is None:
                logger.debug(f"跳过路由 {route.name}：未找到 stable 服务 {self.stable_name}")
                return None
            return DestinationPair(route=route, stable=stable, canary=canary, parent=action.destinations)

        logger.debug(f"跳过路由 {route.name}：缺少 routeAction.single/multi")
        return None

    def match_object(self, routing_object: RoutingObject) -> List[DestinationPair]:
        """
        匹配单个路由对象

        没有路由的对象不产生目标对；配置了 routes 列表时，目标对数量必须与列表长度一致。
        """
        routes = routing_object.routes
        if not routes:
            logger.debug(f"{routing_object.key()} 没有路由，跳过")
            return []

        if len(routes) > 1 and not self.allowed_route_names:
            raise AmbiguousRoutesError(
                f"{routing_object.kind.value} {routing_object.namespace}/{routing_object.name} has multiple routes "
                f"but canary config doesn't specify which routes to use"
            )

        pairs = self.match(routes)

        if self.allowed_route_names and len(pairs) != len(self.allowed_route_names):
            raise IncompleteRouteMatchError(
                f"some/all routes specified in canary rollout configuration do not have stable upstreams: "
                f"{routing_object.kind.value} {routing_object.namespace}/{routing_object.name} yielded "
                f"{len(pairs)} matched routes {[p.route.name for p in pairs]} for {self.allowed_route_names}"
            )

        return pairs

    def match_all(self, routing_objects: List[RoutingObject], selector_description: str) -> List[MatchedRoutingObject]:
        """
        匹配全部路由对象

        Args:
            routing_objects: 选择器解析出的路由对象
            selector_description: 错误信息中使用的选择器描述

        Returns:
            至少包含一个目标对的路由对象
        """
        matched = []
        for routing_object in routing_objects:
            pairs = self.match_object(routing_object)
            if pairs:
                matched.append(MatchedRoutingObject(routing_object=routing_object, pairs=pairs))

        if not matched:
            raise NoMatchFoundError(
                f"couldn't find stable upstreams in routing objects selected with {selector_description}, "
                f"with route names in {self.allowed_route_names}"
            )

        return matched
