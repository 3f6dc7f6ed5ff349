from __future__ import annotations

import pytest

from featurehost.catalog import Feature, build_catalog, feature_id_from_path
from featurehost.groups import group_features
from featurehost.ordering import provides_priority_capability, reorder_features


def _f(fid: str, provides: tuple[str, ...] = ()) -> Feature:
    return Feature(id=fid, path=f"features/{fid}", provided_capabilities=frozenset(provides))


def test_group_with_unknown_member_is_lenient() -> None:
    a, b = _f("a"), _f("b")
    index = group_features([a, b], {"g": ["a", "ghost"], "empty": ["ghost"]})
    assert index["g"] == {a}
    assert index["empty"] == frozenset()


def test_group_ignores_non_list_definitions() -> None:
    index = group_features([_f("a")], {"g": "a", "h": None})
    assert "g" not in index
    assert "h" not in index


def test_group_index_is_read_only() -> None:
    index = group_features([_f("a")], {"g": ["a"]})
    with pytest.raises(TypeError):
        index["g2"] = frozenset()  # type: ignore[index]


def test_reorder_is_stable_partition() -> None:
    a = _f("a")
    p1 = _f("p1", ("repository-provider",))
    b = _f("b", ("other",))
    p2 = _f("p2", ("repository-provider", "other"))
    c = _f("c")

    ordered = reorder_features([a, p1, b, p2, c])

    assert ordered == [p1, p2, a, b, c]
    assert provides_priority_capability(p2)
    assert not provides_priority_capability(b)


def test_reorder_does_not_mutate_input() -> None:
    features = [_f("a"), _f("p", ("repository-provider",))]
    reorder_features(features)
    assert [f.id for f in features] == ["a", "p"]


def test_build_catalog_rejects_duplicate_ids() -> None:
    with pytest.raises(ValueError, match="duplicate feature id: a"):
        build_catalog([_f("a"), _f("b"), _f("a")])


def test_feature_id_from_path() -> None:
    assert feature_id_from_path("/opt/pkgs/status_bar") == "status_bar"
    assert feature_id_from_path("features.status_bar") == "status_bar"
    assert feature_id_from_path("/pkgs/my.feature") == "my.feature"
    assert feature_id_from_path("status_bar") == "status_bar"
