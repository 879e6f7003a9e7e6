"""
Gloo Edge 资源客户端

通过 Kubernetes CustomObjectsApi 读取和 patch RouteTable / VirtualService
"""

import os
import logging
from typing import Dict, List, Any, Optional

from kubernetes import client, config
from kubernetes.client.rest import ApiException

from gloo_traffic_router.config import GlobalConfig, get_config
from gloo_traffic_router.errors import NotFoundError, PatchConflictError, StoreError, TrafficRouterError
from gloo_traffic_router.models.data_models import RoutingKind

logger = logging.getLogger(__name__)

JSON_PATCH_CONTENT_TYPE = "application/json-patch+json"


def _translate_api_exception(e: ApiException, action: str) -> TrafficRouterError:
    """将 ApiException 转换为插件异常"""
    message = f"{action} failed: {e.status} {e.reason}"
    if e.status == 404:
        return NotFoundError(message)
    if e.status == 409:
        return PatchConflictError(message, status=e.status, body=e.body)
    return StoreError(message, status=e.status, body=e.body)


def build_custom_objects_api(cfg: Optional[GlobalConfig] = None) -> client.CustomObjectsApi:
    """
    初始化 Kubernetes CustomObjectsApi

    优先使用配置中的 k8s_host/k8s_token；在集群内运行时使用 ServiceAccount；
    否则从 kubeconfig 加载。
    """
    cfg = cfg or get_config()

    if cfg.k8s_host:
        configuration = client.Configuration()
        configuration.host = cfg.k8s_host if cfg.k8s_host.startswith("http") else f"https://{cfg.k8s_host}:6443"
        configuration.verify_ssl = cfg.verify_ssl

        if cfg.k8s_token:
            token = cfg.k8s_token.strip()
            if token.startswith("Bearer "):
                token = token[7:]  # 移除 "Bearer " 前缀
            configuration.api_key = {"authorization": token}
            configuration.api_key_prefix = {"authorization": "Bearer"}
            logger.info(f"已使用提供的 token 配置 Kubernetes 认证 (token长度: {len(token)})")

        logger.info(f"已使用指定配置初始化 Kubernetes 客户端: {configuration.host}")
        return client.CustomObjectsApi(client.ApiClient(configuration))

    if not cfg.kubeconfig and os.environ.get('KUBERNETES_SERVICE_HOST'):
        config.load_incluster_config()
        logger.info("已使用 ServiceAccount 初始化 Kubernetes 客户端")
    else:
        config.load_kube_config(config_file=cfg.kubeconfig)
        logger.info("已从 kubeconfig 初始化 Kubernetes 客户端")
    return client.CustomObjectsApi()


class GlooClient:
    """RouteTable / VirtualService 的 get/list/patch 操作"""

    def __init__(self, api: client.CustomObjectsApi, group: str = "gateway.solo.io", version: str = "v1"):
        self.api = api
        self.group = group
        self.version = version

    @classmethod
    def from_config(cls, cfg: Optional[GlobalConfig] = None) -> 'GlooClient':
        cfg = cfg or get_config()
        try:
            api = build_custom_objects_api(cfg)
        except config.ConfigException as e:
            raise StoreError(f"failed to load kubernetes configuration: {e}") from e
        return cls(api, group=cfg.gloo_group, version=cfg.gloo_version)

    def get(self, kind: RoutingKind, namespace: str, name: str) -> Dict[str, Any]:
        """按 namespace/name 获取单个资源"""
        try:
            return self.api.get_namespaced_custom_object(
                group=self.group,
                version=self.version,
                namespace=namespace,
                plural=kind.plural,
                name=name
            )
        except ApiException as e:
            raise _translate_api_exception(e, f"get {kind.value} {namespace}/{name}") from e

    def list(self, kind: RoutingKind, namespace: str, labels: Dict[str, str]) -> List[Dict[str, Any]]:
        """按标签列出命名空间内的资源，保持 API 返回顺序"""
        label_selector = ",".join(f"{k}={v}" for k, v in labels.items())
        try:
            response = self.api.list_namespaced_custom_object(
                group=self.group,
                version=self.version,
                namespace=namespace,
                plural=kind.plural,
                label_selector=label_selector
            )
        except ApiException as e:
            raise _translate_api_exception(e, f"list {kind.value} in {namespace} ({label_selector})") from e
        return list(response.get('items', []))

    def patch(self, kind: RoutingKind, namespace: str, name: str, operations: List[Dict[str, Any]]) -> Dict[str, Any]:
        """提交 JSON Patch 操作列表"""
        try:
            return self.api.patch_namespaced_custom_object(
                group=self.group,
                version=self.version,
                namespace=namespace,
                plural=kind.plural,
                name=name,
                body=operations,
                _content_type=JSON_PATCH_CONTENT_TYPE
            )
        except ApiException as e:
            raise _translate_api_exception(e, f"patch {kind.value} {namespace}/{name}") from e

    def get_route_table(self, namespace: str, name: str) -> Dict[str, Any]:
        return self.get(RoutingKind.ROUTE_TABLE, namespace, name)

    def list_route_tables(self, namespace: str, labels: Dict[str, str]) -> List[Dict[str, Any]]:
        return self.list(RoutingKind.ROUTE_TABLE, namespace, labels)

    def patch_route_table(self, namespace: str, name: str, operations: List[Dict[str, Any]]) -> Dict[str, Any]:
        return self.patch(RoutingKind.ROUTE_TABLE, namespace, name, operations)

    def get_virtual_service(self, namespace: str, name: str) -> Dict[str, Any]:
        return self.get(RoutingKind.VIRTUAL_SERVICE, namespace, name)

    def patch_virtual_service(self, namespace: str, name: str, operations: List[Dict[str, Any]]) -> Dict[str, Any]:
        return self.patch(RoutingKind.VIRTUAL_SERVICE, namespace, name, operations)
