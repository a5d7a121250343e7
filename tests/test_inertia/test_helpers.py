from __future__ import annotations

from typing import Any

from litestar_inertia.helpers import (
    DeferredProp,
    StaticProp,
    filter_partial_props,
    is_lazy_prop,
    lazy,
    render_props,
)


def test_filter_partial_props_is_case_insensitive() -> None:
    props = {"Users": [1, 2], "total": 2, "filters": {"q": "a"}}
    assert filter_partial_props(props, ["users", "TOTAL"]) == {"Users": [1, 2], "total": 2}


def test_filter_partial_props_ignores_unknown_names() -> None:
    props = {"users": [1, 2], "total": 2}
    assert filter_partial_props(props, ["permissions"]) == {}


def test_lazy_returns_static_or_deferred_prop() -> None:
    static = lazy("count", 3)
    deferred = lazy("count", lambda: 3)
    assert isinstance(static, StaticProp)
    assert isinstance(deferred, DeferredProp)
    assert is_lazy_prop(static)
    assert is_lazy_prop(deferred)
    assert not is_lazy_prop(3)
    assert static.render() == 3
    assert deferred.render() == 3


def test_deferred_prop_is_evaluated_once() -> None:
    calls: list[int] = []

    def expensive() -> int:
        calls.append(1)
        return 42

    prop = lazy("answer", expensive)
    assert prop.render() == 42
    assert prop.render() == 42
    assert len(calls) == 1


def test_async_deferred_prop() -> None:
    async def load() -> dict[str, Any]:
        return {"teams": ["a", "b"]}

    assert lazy("teams", load).render() == {"teams": ["a", "b"]}


def test_render_props_skips_lazy_props_on_full_visit() -> None:
    props = {"users": [1], "stats": lazy("stats", lambda: {"total": 1})}
    assert render_props(props) == {"users": [1]}


def test_render_props_renders_requested_lazy_props() -> None:
    props = filter_partial_props({"users": [1], "stats": lazy("stats", lambda: {"total": 1})}, ["stats"])
    assert render_props(props, partial=True) == {"stats": {"total": 1}}
