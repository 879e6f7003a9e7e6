"""配置存储访问"""

from gloo_traffic_router.store.gloo_client import GlooClient, build_custom_objects_api

__all__ = ["GlooClient", "build_custom_objects_api"]
