"""
路由对象数据模型

定义选择器、插件配置、Rollout 上下文，以及对 Gloo Edge RouteTable/VirtualService
资源字典的轻量包装。包装类直接引用资源字典中的节点，修改会原地反映到资源上。
"""

import copy
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Any, Optional, Union

from gloo_traffic_router.errors import PluginConfigError


class RoutingKind(Enum):
    """路由对象类型"""
    ROUTE_TABLE = "RouteTable"
    VIRTUAL_SERVICE = "VirtualService"

    @property
    def plural(self) -> str:
        """CustomObjectsApi 使用的资源复数名"""
        if self is RoutingKind.ROUTE_TABLE:
            return "routetables"
        return "virtualservices"


@dataclass
class RoutingObjectSelector:
    """路由对象选择器：按名称或按标签选择"""
    name: str = ""
    namespace: str = ""
    labels: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional['RoutingObjectSelector']:
        if data is None:
            return None
        if not isinstance(data, dict):
            raise PluginConfigError(f"selector must be an object, got {type(data).__name__}")
        return cls(
            name=data.get('name') or "",
            namespace=data.get('namespace') or "",
            labels=dict(data.get('labels') or {})
        )

    def is_empty(self) -> bool:
        return not self.name and not self.labels

    def describe(self, namespace: Optional[str] = None) -> str:
        """用于错误信息的选择器描述"""
        return f"Name: '{self.name}', Namespace: '{namespace or self.namespace}', Labels: {self.labels}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'namespace': self.namespace,
            'labels': dict(self.labels)
        }


@dataclass
class PluginConfig:
    """
    插件配置

    对应 Rollout 中 trafficRouting.plugins["solo-io/glooedge"] 的 JSON 内容，
    routeTableSelector 与 virtualServiceSelector 必须且只能配置一个。
    """
    route_table_selector: Optional[RoutingObjectSelector] = None
    virtual_service_selector: Optional[RoutingObjectSelector] = None
    routes: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PluginConfig':
        if not isinstance(data, dict):
            raise PluginConfigError(f"plugin config must be an object, got {type(data).__name__}")
        routes = data.get('routes') or []
        if not isinstance(routes, list) or not all(isinstance(r, str) for r in routes):
            raise PluginConfigError("plugin config 'routes' must be a list of strings")
        return cls(
            route_table_selector=RoutingObjectSelector.from_dict(data.get('routeTableSelector')),
            virtual_service_selector=RoutingObjectSelector.from_dict(data.get('virtualServiceSelector')),
            routes=list(routes)
        )

    @classmethod
    def from_json(cls, raw: Union[str, bytes, Dict[str, Any], None]) -> 'PluginConfig':
        """从 JSON 文本或已解码的字典构造配置"""
        if raw is None:
            raise PluginConfigError("plugin config is missing")
        if isinstance(raw, (str, bytes)):
            try:
                raw = json.loads(raw)
            except ValueError as e:
                raise PluginConfigError(f"failed to decode plugin config: {e}") from e
        return cls.from_dict(raw)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {'routes': list(self.routes)}
        if self.route_table_selector is not None:
            result['routeTableSelector'] = self.route_table_selector.to_dict()
        if self.virtual_service_selector is not None:
            result['virtualServiceSelector'] = self.virtual_service_selector.to_dict()
        return result


@dataclass
class RolloutContext:
    """从 Rollout 资源中提取的本次调用所需信息"""
    namespace: str
    name: str
    strategy: str  # canary, blueGreen 或空
    stable_service: str = ""
    canary_service: str = ""
    plugin_config: Optional[PluginConfig] = None

    @classmethod
    def from_rollout(cls, rollout: Dict[str, Any], plugin_name: str) -> 'RolloutContext':
        """
        解析 Rollout 资源

        Args:
            rollout: Argo Rollout 资源字典
            plugin_name: 插件配置在 trafficRouting.plugins 中的键

        Returns:
            Rollout 上下文；canary 策略下会同时解码插件配置
        """
        metadata = rollout.get('metadata') or {}
        strategy = (rollout.get('spec') or {}).get('strategy') or {}

        ctx = cls(
            namespace=metadata.get('namespace') or "",
            name=metadata.get('name') or "",
            strategy=""
        )

        canary = strategy.get('canary')
        if canary is not None:
            ctx.strategy = "canary"
            ctx.stable_service = canary.get('stableService') or ""
            ctx.canary_service = canary.get('canaryService') or ""
            plugins = (canary.get('trafficRouting') or {}).get('plugins') or {}
            ctx.plugin_config = PluginConfig.from_json(plugins.get(plugin_name))
        elif strategy.get('blueGreen') is not None:
            ctx.strategy = "blueGreen"

        return ctx


class WeightedDestination:
    """
    带权重的目标，包装 multi.destinations 中的一个元素：
    {'destination': {'upstream': {'name': ..., 'namespace': ...}}, 'weight': N}
    """

    def __init__(self, raw: Dict[str, Any]):
        self.raw = raw

    @property
    def backend_name(self) -> str:
        destination = self.raw.get('destination') or {}
        upstream = destination.get('upstream') or {}
        return upstream.get('name') or ""

    @backend_name.setter
    def backend_name(self, value: str):
        destination = self.raw.setdefault('destination', {})
        upstream = destination.setdefault('upstream', {})
        upstream['name'] = value

    @property
    def weight(self) -> Optional[int]:
        return self.raw.get('weight')

    @weight.setter
    def weight(self, value: int):
        self.raw['weight'] = value

    def __eq__(self, other):
        return isinstance(other, WeightedDestination) and self.raw is other.raw

    def __repr__(self):
        return f"WeightedDestination(name={self.backend_name!r}, weight={self.weight!r})"


@dataclass
class SingleAction:
    """routeAction.single：单一目标"""
    destination: Dict[str, Any]


@dataclass
class MultiAction:
    """routeAction.multi：多目标列表"""
    destinations: List[Dict[str, Any]]


RouteAction = Union[SingleAction, MultiAction]


class Route:
    """路由条目包装"""

    def __init__(self, raw: Dict[str, Any]):
        self.raw = raw

    @property
    def name(self) -> str:
        return self.raw.get('name') or ""

    @property
    def action(self) -> Optional[RouteAction]:
        """解析路由动作；既不是 single 也不是 multi 时返回 None"""
        route_action = self.raw.get('routeAction')
        if not isinstance(route_action, dict):
            return None

        multi = route_action.get('multi')
        if isinstance(multi, dict) and isinstance(multi.get('destinations'), list):
            return MultiAction(multi['destinations'])

        single = route_action.get('single')
        if isinstance(single, dict) and single:
            return SingleAction(single)

        return None

    def __repr__(self):
        return f"Route(name={self.name!r})"


@dataclass
class RoutingObject:
    """
    路由对象（RouteTable 或 VirtualService）

    raw 为获取到的资源字典，后续原地修改；original 为获取后立即生成的深拷贝，
    用于计算 patch。
    """
    kind: RoutingKind
    raw: Dict[str, Any]
    original: Dict[str, Any]

    @classmethod
    def fetched(cls, kind: RoutingKind, raw: Dict[str, Any]) -> 'RoutingObject':
        return cls(kind=kind, raw=raw, original=copy.deepcopy(raw))

    @property
    def name(self) -> str:
        return (self.raw.get('metadata') or {}).get('name') or ""

    @property
    def namespace(self) -> str:
        return (self.raw.get('metadata') or {}).get('namespace') or ""

    @property
    def resource_version(self) -> Optional[str]:
        return (self.original.get('metadata') or {}).get('resourceVersion')

    @property
    def routes(self) -> List[Route]:
        spec = self.raw.get('spec') or {}
        if self.kind is RoutingKind.VIRTUAL_SERVICE:
            spec = spec.get('virtualHost') or {}
        return [Route(r) for r in spec.get('routes') or [] if isinstance(r, dict)]

    def key(self) -> str:
        return f"{self.kind.value} {self.namespace}/{self.name}"


@dataclass
class DestinationPair:
    """
    一条路由中匹配到的 stable/canary 目标

    parent 指向包含 stable 的目标列表；single 路由在规范化之前为 None。
    """
    route: Route
    stable: WeightedDestination
    canary: Optional[WeightedDestination] = None
    parent: Optional[List[Dict[str, Any]]] = None


@dataclass
class MatchedRoutingObject:
    """路由对象、其中匹配到的目标对，以及提交的 patch 操作"""
    routing_object: RoutingObject
    pairs: List[DestinationPair] = field(default_factory=list)
    patch: List[Dict[str, Any]] = field(default_factory=list)
