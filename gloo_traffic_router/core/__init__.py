"""核心处理流程"""

from gloo_traffic_router.core.selector import SelectorResolver
from gloo_traffic_router.core.matcher import DestinationMatcher
from gloo_traffic_router.core.normalizer import normalize
from gloo_traffic_router.core.weights import assign_weights
from gloo_traffic_router.core.patcher import PatchOrchestrator
from gloo_traffic_router.core.plugin import TrafficRouterPlugin, PLUGIN_NAME, PLUGIN_TYPE

__all__ = [
    "SelectorResolver",
    "DestinationMatcher",
    "normalize",
    "assign_weights",
    "PatchOrchestrator",
    "TrafficRouterPlugin",
    "PLUGIN_NAME",
    "PLUGIN_TYPE"
]
