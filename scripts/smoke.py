# scripts/smoke.py
"""
Smoke Test Script for the iglu-resolver.

Usage
-----
1. Resolve the bundled self-describing meta-schema (no network):
    $ uv run python scripts/smoke.py

2. Resolve a key through a resolver configuration (may hit the network):
    $ uv run python scripts/smoke.py --config resolver.json \
        --key iglu:com.snowplowanalytics.snowplow/link_click/jsonschema/1-0-1
"""

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from iglu_resolver import Resolver, SchemaKey
from iglu_resolver.core.result import Err

# --------------------------------------------------------------------------- #
# Environment Setup
# --------------------------------------------------------------------------- #
env_path = Path(".env")
if env_path.exists():
    load_dotenv(env_path)
    print("✅ Loaded .env file")

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

DEFAULT_KEY = "iglu:com.snowplowanalytics.self-desc/instance-iglu-only/jsonschema/1-0-0"


def main() -> None:
    """Resolve one key twice and report where the answer came from."""
    parser = argparse.ArgumentParser(description="Run iglu-resolver Smoke Test")
    parser.add_argument("--config", "-c", type=str, help="Resolver configuration JSON")
    parser.add_argument("--key", "-k", type=str, default=DEFAULT_KEY, help="Iglu URI to resolve")
    args = parser.parse_args()

    resolver = Resolver.from_file(args.config) if args.config else Resolver.bootstrap()
    key = SchemaKey.parse(args.key)

    print("\n📚 Repositories, in lookup order:")
    for repo in resolver.prioritize(key):
        print(f"  - {repo} (priority {repo.instance_priority})")

    result = resolver.resolve_schema(key)
    if isinstance(result, Err):
        print(f"\n❌ {result.error.message}")
        sys.exit(2 if result.error.is_not_found else 3)

    schema = result.unwrap()
    print(f"\n✅ Resolved {key}: {len(schema)} top-level fields")

    # The second lookup must be served from cache.
    resolver.resolve_schema(key)
    print(f"💾 Cached entries: {len(resolver.cache)}")


if __name__ == "__main__":
    main()
