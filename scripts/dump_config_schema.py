"""Print the generated config schema as JSON.

Supported invocation from repo root:
  python scripts/dump_config_schema.py [--dev]
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from featurehost.catalog import discover_features  # noqa: E402
from featurehost.ordering import reorder_features  # noqa: E402
from featurehost.schema import build_config_schema  # noqa: E402


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--dev", action="store_true", help="annotate provided/consumed capabilities")
    parser.add_argument("--package", default="features")
    args = parser.parse_args(argv)

    catalog, _modules = discover_features(args.package)
    schema = build_config_schema(reorder_features(catalog), dev_mode=args.dev)
    print(json.dumps(schema, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
