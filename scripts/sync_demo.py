#!/usr/bin/env python3
"""Reconcile a REST collection into a local model and print the result.

The demo registers one RESTful adapter next to the canonical store,
prefetches the configured selection, then runs a filtered read so you can
see records flow from the remote into the store.

Usage
-----
Point it at any json-server compatible collection::

    export MODELSYNC_ENDPOINT="https://jsonplaceholder.typicode.com/photos"
    python scripts/sync_demo.py --where albumId=1 --order "id desc" --limit 5

Options::

    --endpoint URL      Collection URL (default: $MODELSYNC_ENDPOINT)
    --attribute KEY     Response key holding the records
    --where FIELD=VAL   Filter for the read (repeatable)
    --order ORDER       Order string, e.g. "title asc, id desc"
    --limit N           Maximum number of records to read
    --prefetch          Prefetch before reading
    --json              Output as machine-readable JSON
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pymodelsync import Model, RestfulAdapter, RestfulConfig, Result  # noqa: E402
from pymodelsync.exceptions import ConfigError  # noqa: E402


class DemoRecord(Result):
    """Counts admissions for the summary."""

    admitted_count = 0

    def on_load(self) -> None:
        type(self).admitted_count += 1


def _parse_where(pairs: list[str]) -> dict[str, Any]:
    where: dict[str, Any] = {}
    for pair in pairs:
        field, sep, value = pair.partition("=")
        if not sep or not field:
            raise SystemExit(f"--where expects FIELD=VALUE, got {pair!r}")
        where[field] = value
    return where


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


async def main() -> None:
    parser = argparse.ArgumentParser(
        description="Reconcile a REST collection into a local pymodelsync model.",
    )
    parser.add_argument("--endpoint", help="Collection URL (default: $MODELSYNC_ENDPOINT)")
    parser.add_argument("--attribute", help="Response key holding the records")
    parser.add_argument("--where", action="append", default=[], help="Filter FIELD=VALUE (repeatable)")
    parser.add_argument("--order", help="Order string, e.g. 'id desc'")
    parser.add_argument("--limit", type=int, default=0, help="Maximum number of records to read")
    parser.add_argument("--prefetch", action="store_true", help="Prefetch before reading")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    overrides: dict[str, Any] = {}
    if args.endpoint:
        overrides["endpoint"] = args.endpoint
    if args.attribute:
        overrides["attribute"] = args.attribute
    try:
        config = RestfulConfig.from_env(**overrides)
    except ConfigError as exc:
        raise SystemExit(f"{exc} (pass --endpoint or export MODELSYNC_ENDPOINT)") from exc

    where = _parse_where(args.where)

    async with RestfulAdapter(config) as remote:
        model = Model([remote], result_model=DemoRecord)
        if args.prefetch:
            await model.prefetch()
        records = await model.get_where(where, args.order, args.limit)
        stored = len(model.store)

    if not isinstance(records, list):
        records = [records] if records else []
    rows = [record.value_of() for record in records]

    if args.json_mode:
        print(json.dumps({"endpoint": config.endpoint, "stored": stored, "records": rows}, indent=2, default=str))
        return

    out = [_section("pymodelsync sync_demo")]
    out.append(f"  endpoint  : {config.endpoint}")
    out.append(f"  where     : {where or '-'}")
    out.append(f"  order     : {args.order or '-'}")
    out.append(f"  admitted  : {DemoRecord.admitted_count}")
    out.append(f"  stored    : {stored}")
    out.append(_section(f"RECORDS ({len(rows)})"))
    for row in rows:
        out.append(f"  {json.dumps(row, default=str, ensure_ascii=False)}")
    print("\n".join(out))


if __name__ == "__main__":
    asyncio.run(main())
