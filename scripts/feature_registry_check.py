"""FEATUREHOST FILE PURPOSE
Purpose: policy checks for feature modules (FEATURE contract + no cross-feature imports)
and for the declared feature groups.
Hot path: no.
"""

from __future__ import annotations

import ast
import sys
from pathlib import Path

REQUIRED = {"key", "display_name", "description"}

ROOT = Path(__file__).resolve().parent.parent


def fail(msg: str) -> None:
    print(f"FEATURE_CHECK_FAIL: {msg}", file=sys.stderr)
    raise SystemExit(1)


def _feature_literal(tree: ast.Module) -> dict | None:
    for node in tree.body:
        if isinstance(node, ast.Assign) and any(
            isinstance(t, ast.Name) and t.id == "FEATURE" for t in node.targets
        ):
            try:
                value = ast.literal_eval(node.value)
            except ValueError:
                return None
            return value if isinstance(value, dict) else None
    return None


def check_imports(path: Path, tree: ast.Module) -> None:
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for a in node.names:
                if a.name == "features" or a.name.startswith("features."):
                    fail(f"cross-feature import in {path}")
        if isinstance(node, ast.ImportFrom):
            if node.level and node.level > 0:
                fail(f"relative import not allowed in {path}")
            mod = node.module or ""
            if mod == "features" or mod.startswith("features."):
                fail(f"cross-feature import in {path}")


def check_groups(feat_dir: Path, keys: set[str]) -> None:
    path = feat_dir / "groups.py"
    if not path.exists():
        return
    tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    for node in tree.body:
        if isinstance(node, ast.Assign) and any(
            isinstance(t, ast.Name) and t.id == "FEATURE_GROUPS" for t in node.targets
        ):
            groups = ast.literal_eval(node.value)
            for name, members in groups.items():
                if not isinstance(members, list):
                    fail(f"group {name} must be a list")
                for member in members:
                    if member not in keys:
                        fail(f"group {name} references unknown feature {member}")


def main(feat_dir: Path | None = None) -> None:
    feat_dir = feat_dir or ROOT / "features"
    keys: set[str] = set()
    for path in sorted(feat_dir.glob("*.py")):
        if path.name.startswith("_") or path.name in ("__init__.py", "groups.py"):
            continue
        tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
        check_imports(path, tree)

        feature = _feature_literal(tree)
        if feature is None:
            fail(f"FEATURE missing or not a literal in {path}")
        for k in sorted(REQUIRED):
            if k not in feature:
                fail(f"FEATURE missing key {k} in {path}")
        if feature["key"] != path.stem:
            fail(f"FEATURE key {feature['key']!r} does not match module name in {path}")
        keys.add(feature["key"])

    check_groups(feat_dir, keys)
    print("FEATURE_CHECK_OK")


if __name__ == "__main__":
    main()
