from __future__ import annotations

import networkx as nx
import pytest
from pydantic import ValidationError

from utils.dependency_store import build_dependency_graph, node_key
from utils.exceptions import NotFoundError


def test_create_dependency_without_existence_check(store) -> None:
    edge = store.create_dependency("project", "p-ghost", "action", "a-ghost", created_by="alice")

    assert edge["source_type"] == "project"
    assert edge["target_id"] == "a-ghost"
    assert edge["created_by"] == "alice"
    assert store.get_dependency(edge["id"]) == edge


@pytest.mark.parametrize("source_type, source_id, target_type, target_id", [
    ("strategy", "s1", "action", "a1"),
    ("project", "p1", "milestone", "m1"),
    ("project", "", "action", "a1"),
    ("project", "p1", "action", ""),
])
def test_create_dependency_validates_fields(store, source_type, source_id, target_type, target_id) -> None:
    with pytest.raises(ValidationError):
        store.create_dependency(source_type, source_id, target_type, target_id)

    assert store.list_dependencies() == []


def test_duplicates_and_self_edges_allowed(store) -> None:
    store.create_dependency("project", "p1", "project", "p2")
    store.create_dependency("project", "p1", "project", "p2")
    store.create_dependency("action", "a1", "action", "a1")

    assert len(store.list_dependencies()) == 3


def test_list_by_source_and_target(store) -> None:
    first = store.create_dependency("project", "p1", "action", "a1")
    second = store.create_dependency("project", "p1", "action", "a2")
    store.create_dependency("action", "a3", "action", "a1")

    assert [e["id"] for e in store.list_dependencies_by_source("project", "p1")] == [first["id"], second["id"]]
    assert len(store.list_dependencies_by_target("action", "a1")) == 2
    assert store.list_dependencies_by_source("action", "p1") == []


def test_list_by_organization(store) -> None:
    store.create_dependency("project", "p1", "project", "p2", organization_id="org-a")
    store.create_dependency("project", "p3", "project", "p4", organization_id="org-b")

    assert [e["source_id"] for e in store.list_dependencies(organization_id="org-a")] == ["p1"]


def test_delete_missing_dependency_raises(store) -> None:
    with pytest.raises(NotFoundError):
        store.delete_dependency("missing")


def test_dangling_endpoints_are_tolerated(service, store, strategy, project) -> None:
    action = service.create_action({"strategy_id": strategy["id"], "project_id": project["id"], "title": "Ship"})
    edge = store.create_dependency("project", project["id"], "action", action["id"])

    service.delete_action(action["id"])

    edges = store.list_dependencies()
    assert [e["id"] for e in edges] == [edge["id"]]

    described = store.describe_dependency(edges[0])
    assert described["source_title"] == "Launch EU"
    assert described["source_resolved"] is True
    assert described["target_title"] == "Unknown Action"
    assert described["target_resolved"] is False

    store.delete_dependency(edge["id"])
    assert store.list_dependencies() == []


def test_edges_survive_strategy_deletion(service, store, strategy, project) -> None:
    store.create_dependency("project", project["id"], "project", "elsewhere")

    service.delete_strategy(strategy["id"])

    assert len(store.list_dependencies()) == 1
    assert store.resolve_endpoint_title("project", project["id"]) == "Unknown Project"


def test_find_and_prune_dangling(service, store, strategy, project) -> None:
    live = store.create_dependency("project", project["id"], "project", project["id"])
    dangling = store.create_dependency("project", project["id"], "action", "gone")

    assert [e["id"] for e in store.find_dangling_dependencies()] == [dangling["id"]]
    assert store.prune_dangling_dependencies() == 1
    assert [e["id"] for e in store.list_dependencies()] == [live["id"]]
    assert store.prune_dangling_dependencies() == 0


def test_dependency_activity_recorded(service, store) -> None:
    edge = store.create_dependency("project", "p1", "action", "a1", created_by="alice")
    store.delete_dependency(edge["id"], deleted_by="bob")

    assert [a["type"] for a in service.list_activities(user_id="alice")] == ["dependency_created"]
    assert [a["type"] for a in service.list_activities(user_id="bob")] == ["dependency_deleted"]


def test_build_dependency_graph_merges_duplicates() -> None:
    edges = [
        {"id": "e1", "source_type": "project", "source_id": "p1", "target_type": "action", "target_id": "a1"},
        {"id": "e2", "source_type": "project", "source_id": "p1", "target_type": "action", "target_id": "a1"},
        {"id": "e3", "source_type": "action", "source_id": "a1", "target_type": "project", "target_id": "p1"},
    ]

    graph = build_dependency_graph(edges)

    assert graph.number_of_edges() == 2
    assert graph[node_key("project", "p1")][node_key("action", "a1")]["ids"] == ["e1", "e2"]
    assert len(list(nx.simple_cycles(graph))) == 1


def test_placeholder_like_title_is_still_resolved(service, store, strategy) -> None:
    real = service.create_project({"strategy_id": strategy["id"], "title": "Unknown Project"})
    edge = store.create_dependency("project", real["id"], "project", "gone")

    described = store.describe_dependency(edge)

    assert described["source_title"] == "Unknown Project"
    assert described["source_resolved"] is True
    assert described["target_title"] == "Unknown Project"
    assert described["target_resolved"] is False
