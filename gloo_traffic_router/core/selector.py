"""
路由对象选择器解析

将选择器（按名称或按标签）解析为需要处理的路由对象列表
"""

import logging
from typing import List

from gloo_traffic_router.errors import InvalidSelectorError
from gloo_traffic_router.models.data_models import RoutingKind, RoutingObject, RoutingObjectSelector

logger = logging.getLogger(__name__)


class SelectorResolver:
    """选择器解析器"""

    def __init__(self, store):
        """
        Args:
            store: 配置存储，提供 get(kind, namespace, name) 与 list(kind, namespace, labels)
        """
        self.store = store

    def resolve_namespace(self, kind: RoutingKind, selector: RoutingObjectSelector, default_namespace: str) -> str:
        """选择器未指定命名空间时使用 Rollout 所在命名空间，不修改调用方的选择器"""
        if selector.namespace:
            return selector.namespace
        logger.debug(f"{kind.value} 选择器未指定命名空间，使用 Rollout 命名空间 {default_namespace}")
        return default_namespace

    def resolve(self, kind: RoutingKind, selector: RoutingObjectSelector, default_namespace: str) -> List[RoutingObject]:
        """
        解析选择器

        Args:
            kind: 路由对象类型
            selector: 选择器
            default_namespace: Rollout 所在命名空间

        Returns:
            按获取顺序排列的路由对象，每个对象都带有获取时的深拷贝
        """
        if selector is None:
            raise InvalidSelectorError(f"{kind.value} selector is required")

        if kind is RoutingKind.VIRTUAL_SERVICE and not selector.name:
            raise InvalidSelectorError("must specify the name of the VirtualService")

        if selector.is_empty():
            raise InvalidSelectorError(f"name or labels field must be set in {kind.value} selector")

        namespace = self.resolve_namespace(kind, selector, default_namespace)

        if selector.name:
            logger.debug(f"使用 {namespace}/{selector.name} 获取单个 {kind.value}")
            raw = self.store.get(kind, namespace, selector.name)
            return [RoutingObject.fetched(kind, raw)]

        logger.debug(f"在命名空间 {namespace} 中按标签 {selector.labels} 列出 {kind.value}")
        items = self.store.list(kind, namespace, selector.labels)
        logger.debug(f"按标签 {selector.labels} 找到 {len(items)} 个 {kind.value}")
        return [RoutingObject.fetched(kind, raw) for raw in items]
