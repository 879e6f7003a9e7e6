import copy

import jsonpatch
import pytest

from gloo_traffic_router.config import GlobalConfig, set_config
from gloo_traffic_router.core.plugin import TrafficRouterPlugin
from gloo_traffic_router.errors import NotFoundError, PatchConflictError


class FakeGlooStore:
    """
    内存中的 RouteTable / VirtualService 存储，记录所有调用

    patch 按 JSON Patch 应用；操作中写入的 resourceVersion 与存储中的不一致时返回冲突，
    每次成功 patch 后 resourceVersion 加一。
    """

    def __init__(self):
        self.objects = {}
        self.calls = []
        self.patches = []
        self.patch_errors = {}

    def add(self, kind, obj):
        metadata = obj['metadata']
        self.objects[(kind, metadata['namespace'], metadata['name'])] = copy.deepcopy(obj)
        return obj

    def stored(self, kind, namespace, name):
        return self.objects[(kind, namespace, name)]

    def get(self, kind, namespace, name):
        self.calls.append(('get', kind, namespace, name))
        key = (kind, namespace, name)
        if key not in self.objects:
            raise NotFoundError(f"get {kind.value} {namespace}/{name} failed: 404 Not Found")
        return copy.deepcopy(self.objects[key])

    def list(self, kind, namespace, labels):
        self.calls.append(('list', kind, namespace, dict(labels)))
        items = []
        for (k, ns, _), obj in self.objects.items():
            obj_labels = obj['metadata'].get('labels') or {}
            if k is kind and ns == namespace and all(obj_labels.get(lk) == lv for lk, lv in labels.items()):
                items.append(copy.deepcopy(obj))
        return items

    def patch(self, kind, namespace, name, operations):
        self.calls.append(('patch', kind, namespace, name))
        self.patches.append((kind, namespace, name, copy.deepcopy(operations)))
        if name in self.patch_errors:
            raise self.patch_errors[name]

        key = (kind, namespace, name)
        current = self.objects[key]
        current_version = current['metadata'].get('resourceVersion')
        patched = jsonpatch.apply_patch(current, copy.deepcopy(operations))
        if patched['metadata'].get('resourceVersion') != current_version:
            raise PatchConflictError(f"patch {kind.value} {namespace}/{name} failed: 409 Conflict", status=409)

        if current_version is not None:
            patched['metadata']['resourceVersion'] = str(int(current_version) + 1)
        self.objects[key] = patched
        return copy.deepcopy(patched)


@pytest.fixture(autouse=True)
def _reset_global_config():
    set_config(None)
    yield
    set_config(None)


@pytest.fixture
def store():
    return FakeGlooStore()


@pytest.fixture
def plugin(store):
    return TrafficRouterPlugin(client=store, is_test=True, config=GlobalConfig())
