#!/usr/bin/env python3
"""
Gloo Edge 流量路由插件 - 主入口

支持启动插件 RPC 服务，或针对 Rollout 清单执行一次权重更新
"""

import sys
import json
import argparse
import logging
from typing import Optional

import yaml

from gloo_traffic_router.config import get_config, load_config_from_file
from gloo_traffic_router.core.plugin import TrafficRouterPlugin


def setup_logging(level: str = "INFO", log_file: Optional[str] = None):
    """配置日志"""
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=log_format,
        handlers=handlers
    )


def run_set_weight(rollout_file: str, weight: int, dry_run: bool = False):
    """读取 Rollout 清单并执行一次权重更新"""
    logger = logging.getLogger(__name__)
    logger.info(f"读取 Rollout 清单: {rollout_file}")

    with open(rollout_file, 'r', encoding='utf-8') as f:
        rollout = yaml.safe_load(f) or {}

    plugin = TrafficRouterPlugin(config=get_config(), dry_run=dry_run)
    matched = plugin.set_weight(rollout, weight)

    for item in matched:
        logger.info(f"  {item.routing_object.key()}: {len(item.pairs)} 条路由")
        if dry_run:
            print(json.dumps({'object': item.routing_object.key(), 'patch': item.patch}, ensure_ascii=False, indent=2))

    return matched


def start_web_server(port: int):
    """启动插件 RPC 服务器"""
    from gloo_traffic_router.web.server import PluginServer
    server = PluginServer(port=port)
    server.run()


def main():
    """主函数"""
    parser = argparse.ArgumentParser(
        description="Gloo Edge 流量路由插件",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例用法:
  # 启动插件 RPC 服务
  python -m gloo_traffic_router.main --mode web --port 8080

  # 将 canary 权重设置为 40（仅输出 patch）
  python -m gloo_traffic_router.main --mode set-weight --rollout rollout.yaml --weight 40 --dry-run
        """
    )

    parser.add_argument(
        "--mode",
        choices=["web", "set-weight"],
        default="web",
        help="运行模式: web(插件RPC服务), set-weight(单次权重更新)"
    )

    parser.add_argument(
        "--rollout",
        type=str,
        help="Rollout 清单路径 (YAML格式，set-weight 模式必填)"
    )

    parser.add_argument(
        "--weight",
        type=int,
        default=0,
        help="canary 权重 (默认: 0)"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="只输出 patch，不提交"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="配置文件路径 (JSON/YAML格式)"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="日志级别 (默认: 配置文件中的 log_level)"
    )

    parser.add_argument(
        "--log-file",
        type=str,
        help="日志文件路径"
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="RPC 服务端口 (默认: 8080)"
    )

    args = parser.parse_args()

    # 加载配置
    if args.config:
        load_config_from_file(args.config)
    config = get_config()

    # 配置日志
    setup_logging(args.log_level or config.log_level, args.log_file or config.log_file)
    logger = logging.getLogger(__name__)
    if args.config:
        logger.info(f"已从文件加载配置: {args.config}")

    if args.mode == "set-weight" and not args.rollout:
        parser.error("--rollout is required in set-weight mode")

    try:
        if args.mode == "web":
            start_web_server(args.port or config.web_port)
        elif args.mode == "set-weight":
            run_set_weight(args.rollout, args.weight, args.dry_run)

        logger.info("✅ 任务执行成功")

    except Exception as e:
        logger.error(f"❌ 任务执行失败: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
