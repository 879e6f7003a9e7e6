import logging
from typing import List

from gloo_traffic_router.models.data_models import DestinationPair

logger = logging.getLogger(__name__)


def assign_weights(pairs: List[DestinationPair], desired_weight: int):
    """
    设置 stable/canary 权重，两者之和为 100

    desired_weight 的取值范围由调用方保证，这里不做校验。目标对必须已经规范化。
    """
    for pair in pairs:
        pair.stable.weight = 100 - desired_weight
        pair.canary.weight = desired_weight
    logger.debug(f"已为 {len(pairs)} 个目标对设置权重: stable={100 - desired_weight}, canary={desired_weight}")
