#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio

from orbit.tasks import ClientConfig, TaskAPI


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Search tasks and projects by name")
    p.add_argument("query")
    p.add_argument("workspace")
    p.add_argument("--scope", default="both", choices=["tasks", "projects", "both"])
    p.add_argument("--limit", type=int, default=None)
    return p.parse_args()


async def main() -> None:
    args = parse_args()
    async with TaskAPI(ClientConfig.from_env()) as api:
        result = await api.search(args.query, args.workspace, scope=args.scope, limit=args.limit)
        for item in result.items:
            print(item.get("id"), item.get("name"))
        if result.is_truncated:
            print(f"-- truncated: {result.truncation.reason}")


if __name__ == "__main__":
    asyncio.run(main())
