"""
目标规范化

single 路由改写为只包含 stable 目标的 multi 路由；缺少 canary 目标时
复制 stable 目标生成权重为 0 的 canary 目标。两步都是幂等的。
"""

import copy
import logging
from typing import List

from gloo_traffic_router.models.data_models import (
    DestinationPair,
    MultiAction,
    SingleAction,
    WeightedDestination
)

logger = logging.getLogger(__name__)


def convert_single_to_multi(pair: DestinationPair):
    """将 single 路由改写为 multi，并让 parent 指向新的目标列表"""
    action = pair.route.action

    if isinstance(action, SingleAction):
        route_action = pair.route.raw['routeAction']
        destinations = [pair.stable.raw]
        route_action.pop('single', None)
        route_action['multi'] = {'destinations': destinations}
        pair.parent = destinations
        logger.debug(f"路由 {pair.route.name} 已从 single 转换为 multi")
    elif isinstance(action, MultiAction) and pair.parent is None:
        pair.parent = action.destinations


def create_canary_destination(pair: DestinationPair, canary_name: str):
    """缺少 canary 目标时复制 stable 目标，改名并将权重置 0 后追加到 parent"""
    if pair.canary is not None:
        return

    canary = WeightedDestination(copy.deepcopy(pair.stable.raw))
    canary.backend_name = canary_name
    canary.weight = 0
    pair.parent.append(canary.raw)
    pair.canary = canary
    logger.debug(f"路由 {pair.route.name} 中已创建 canary 目标 {canary_name}")


def normalize(pairs: List[DestinationPair], canary_name: str):
    """对每个目标对执行规范化"""
    for pair in pairs:
        convert_single_to_multi(pair)
    for pair in pairs:
        create_canary_destination(pair, canary_name)
