"""
Patch 编排

对比获取时的快照与修改后的资源，生成 JSON Patch（RFC 6902），
每个匹配到目标对的路由对象提交一次。失败不重试，已提交的 patch 不回滚。
"""

import logging
from typing import Dict, List, Any

import jsonpatch

from gloo_traffic_router.models.data_models import MatchedRoutingObject, RoutingObject

logger = logging.getLogger(__name__)

RESOURCE_VERSION_PATH = "/metadata/resourceVersion"


class PatchOrchestrator:
    """按路由对象提交 JSON Patch"""

    def __init__(self, store, optimistic_lock: bool = True, dry_run: bool = False):
        """
        Args:
            store: 配置存储，提供 patch(kind, namespace, name, operations)
            optimistic_lock: 是否在 patch 中写入获取时的 resourceVersion
            dry_run: 只生成 patch，不提交
        """
        self.store = store
        self.optimistic_lock = optimistic_lock
        self.dry_run = dry_run

    def build_patch(self, routing_object: RoutingObject) -> List[Dict[str, Any]]:
        """
        生成单个路由对象的 patch 操作列表

        开启乐观锁时追加 resourceVersion 的 replace 操作，资源在获取后被修改过时
        API server 返回 409。
        """
        operations = jsonpatch.make_patch(routing_object.original, routing_object.raw).patch
        if self.optimistic_lock and routing_object.resource_version:
            operations.append({
                'op': 'replace',
                'path': RESOURCE_VERSION_PATH,
                'value': routing_object.resource_version
            })
        return operations

    def apply(self, routing_object: RoutingObject) -> List[Dict[str, Any]]:
        """
        提交单个路由对象的 patch

        Returns:
            生成的 patch 操作列表
        """
        operations = self.build_patch(routing_object)

        if self.dry_run:
            logger.info(f"[dry-run] {routing_object.key()} patch: {operations}")
            return operations

        logger.info(f"patch {routing_object.key()} ({len(operations)} 个操作)")
        self.store.patch(routing_object.kind, routing_object.namespace, routing_object.name, operations)
        return operations

    def apply_all(self, matched: List[MatchedRoutingObject]):
        """依次提交，遇到第一个失败立即中止"""
        for item in matched:
            item.patch = self.apply(item.routing_object)
