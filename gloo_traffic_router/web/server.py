"""
插件 RPC 服务器

以 JSON over HTTP 暴露流量路由插件接口，响应中的 errorString 为空表示成功
"""

import logging
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from gloo_traffic_router.config import get_config
from gloo_traffic_router.core.plugin import TrafficRouterPlugin
from gloo_traffic_router.errors import TrafficRouterError

logger = logging.getLogger(__name__)


def _rpc_error(message: str = "") -> Dict[str, Any]:
    return {"errorString": message}


class PluginServer:
    """插件 RPC 服务器"""

    def __init__(self, plugin: Optional[TrafficRouterPlugin] = None, host: Optional[str] = None,
                 port: Optional[int] = None):
        """
        初始化服务器

        Args:
            plugin: 插件实例，默认按全局配置创建
            host: 监听地址
            port: 监听端口
        """
        self.config = get_config()
        self.plugin = plugin or TrafficRouterPlugin(config=self.config)
        self.host = host or self.config.web_host
        self.port = port or self.config.web_port

        self.app = Flask(__name__)
        CORS(self.app)

        self._setup_routes()

    def _setup_routes(self):
        """设置路由"""

        @self.app.route('/healthz')
        def healthz():
            return jsonify({"status": "ok"})

        @self.app.route('/api/v1/type')
        def plugin_type():
            return jsonify({"type": self.plugin.type()})

        @self.app.route('/api/v1/init', methods=['POST'])
        def init_plugin():
            try:
                self.plugin.init_plugin()
            except TrafficRouterError as e:
                logger.error(f"插件初始化失败: {e}")
                return jsonify(_rpc_error(str(e)))
            return jsonify(_rpc_error())

        @self.app.route('/api/v1/set-weight', methods=['POST'])
        def set_weight():
            data = self._get_body()
            rollout = data.get('rollout') or {}
            try:
                desired_weight = int(data.get('desiredWeight', 0))
            except (TypeError, ValueError):
                return jsonify(_rpc_error(f"invalid desiredWeight: {data.get('desiredWeight')!r}")), 400

            try:
                self.plugin.set_weight(rollout, desired_weight, data.get('additionalDestinations') or [])
            except TrafficRouterError as e:
                logger.error(f"设置权重失败: {e}")
                return jsonify(_rpc_error(f"failed canary rollout: {e}"))
            except Exception as e:
                logger.error(f"设置权重时出现未预期的错误: {e}", exc_info=True)
                return jsonify(_rpc_error(f"failed canary rollout: {e}")), 500
            return jsonify(_rpc_error())

        @self.app.route('/api/v1/verify-weight', methods=['POST'])
        def verify_weight():
            data = self._get_body()
            verified = self.plugin.verify_weight(
                data.get('rollout') or {},
                data.get('desiredWeight', 0),
                data.get('additionalDestinations') or []
            )
            return jsonify({"verified": verified, **_rpc_error()})

        @self.app.route('/api/v1/update-hash', methods=['POST'])
        def update_hash():
            data = self._get_body()
            self.plugin.update_hash(
                data.get('rollout') or {},
                data.get('canaryHash', ""),
                data.get('stableHash', ""),
                data.get('additionalDestinations') or []
            )
            return jsonify(_rpc_error())

        @self.app.route('/api/v1/set-header-route', methods=['POST'])
        def set_header_route():
            data = self._get_body()
            self.plugin.set_header_route(data.get('rollout') or {}, data.get('headerRouting'))
            return jsonify(_rpc_error())

        @self.app.route('/api/v1/set-mirror-route', methods=['POST'])
        def set_mirror_route():
            data = self._get_body()
            self.plugin.set_mirror_route(data.get('rollout') or {}, data.get('setMirrorRoute'))
            return jsonify(_rpc_error())

        @self.app.route('/api/v1/remove-managed-routes', methods=['POST'])
        def remove_managed_routes():
            data = self._get_body()
            self.plugin.remove_managed_routes(data.get('rollout') or {})
            return jsonify(_rpc_error())

    @staticmethod
    def _get_body() -> Dict[str, Any]:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}

    def run(self):
        """启动服务器"""
        logger.info(f"插件 RPC 服务器启动: http://{self.host}:{self.port}")
        self.app.run(host=self.host, port=self.port)
