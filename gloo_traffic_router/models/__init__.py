"""数据模型模块"""

from gloo_traffic_router.models.data_models import (
    RoutingKind,
    RoutingObjectSelector,
    PluginConfig,
    RolloutContext,
    WeightedDestination,
    SingleAction,
    MultiAction,
    Route,
    RoutingObject,
    DestinationPair,
    MatchedRoutingObject
)

__all__ = [
    "RoutingKind",
    "RoutingObjectSelector",
    "PluginConfig",
    "RolloutContext",
    "WeightedDestination",
    "SingleAction",
    "MultiAction",
    "Route",
    "RoutingObject",
    "DestinationPair",
    "MatchedRoutingObject"
]
