import json
import sys

import pytest
import yaml

from gloo_traffic_router import main as main_module
from gloo_traffic_router.core import plugin as plugin_module
from gloo_traffic_router.models.data_models import RoutingKind

from builders import rollout, route_table, single_route, weights_of


@pytest.fixture
def rollout_file(tmp_path):
    path = tmp_path / "rollout.yaml"
    path.write_text(yaml.safe_dump(rollout({'routeTableSelector': {'name': "rt"}})), encoding='utf-8')
    return str(path)


@pytest.fixture
def k8s_store(monkeypatch, store):
    monkeypatch.setattr(plugin_module.GlooClient, "from_config", classmethod(lambda cls, cfg=None: store))
    store.add(RoutingKind.ROUTE_TABLE, route_table("rt", "testns", [single_route("r", "stablesvc")]))
    return store


def test_run_set_weight(rollout_file, k8s_store):
    matched = main_module.run_set_weight(rollout_file, 35)

    assert [m.routing_object.name for m in matched] == ["rt"]
    route = k8s_store.stored(RoutingKind.ROUTE_TABLE, "testns", "rt")['spec']['routes'][0]
    assert weights_of(route) == [("stablesvc", 65), ("canarysvc", 35)]


def test_run_set_weight_dry_run_prints_patch(rollout_file, k8s_store, capsys):
    main_module.run_set_weight(rollout_file, 35, dry_run=True)

    assert [c[0] for c in k8s_store.calls] == ['get']
    printed = json.loads(capsys.readouterr().out)
    assert printed['object'] == "RouteTable testns/rt"
    assert printed['patch'][-1] == {'op': 'replace', 'path': '/metadata/resourceVersion', 'value': "1"}


def test_main_set_weight(monkeypatch, rollout_file, k8s_store):
    monkeypatch.setattr(sys, "argv", ["gloo-traffic-router", "--mode", "set-weight", "--rollout", rollout_file,
                                      "--weight", "50"])

    main_module.main()

    route = k8s_store.stored(RoutingKind.ROUTE_TABLE, "testns", "rt")['spec']['routes'][0]
    assert weights_of(route) == [("stablesvc", 50), ("canarysvc", 50)]


def test_main_exits_on_failure(monkeypatch, tmp_path, k8s_store):
    path = tmp_path / "rollout.yaml"
    path.write_text(yaml.safe_dump(rollout({'routeTableSelector': {'name': "missing"}})), encoding='utf-8')
    monkeypatch.setattr(sys, "argv", ["gloo-traffic-router", "--mode", "set-weight", "--rollout", str(path)])

    with pytest.raises(SystemExit) as excinfo:
        main_module.main()
    assert excinfo.value.code == 1


def test_main_requires_rollout_in_set_weight_mode(monkeypatch):
    monkeypatch.setattr(sys, "argv", ["gloo-traffic-router", "--mode", "set-weight"])
    with pytest.raises(SystemExit) as excinfo:
        main_module.main()
    assert excinfo.value.code == 2


def test_main_starts_web_server_on_configured_port(monkeypatch, tmp_path):
    started = []
    monkeypatch.setattr(main_module, "start_web_server", started.append)
    config_file = tmp_path / "config.yaml"
    config_file.write_text("web_port: 9191\n", encoding='utf-8')
    monkeypatch.setattr(sys, "argv", ["gloo-traffic-router", "--config", str(config_file)])

    main_module.main()

    assert started == [9191]
