#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import logging

from orbit.tasks import ClientConfig, TaskAPI


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="List tasks and report truncation")
    p.add_argument("workspace", nargs="?", help="Workspace id (default: every workspace)")
    p.add_argument("--limit", type=int, default=20)
    p.add_argument("--project", default=None)
    p.add_argument("--cursor", default=None, help="Resume from a printed next cursor")
    p.add_argument("--debug", action="store_true", help="Log pagination and retry events")
    return p.parse_args()


async def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING)

    async with TaskAPI(ClientConfig.from_env()) as api:
        if args.workspace:
            result = await api.list_tasks(
                args.workspace, project_id=args.project, limit=args.limit, cursor=args.cursor
            )
        else:
            result = await api.list_tasks_all_workspaces(limit=args.limit)

        for task in result.items:
            print(f"{task.get('id'):<24} {task.get('name')}")

        if result.truncation:
            info = result.truncation
            print(
                f"-- showing {info.returned_count} tasks, more exist "
                f"(reason={info.reason}, page_size={info.page_size})"
            )
            if result.next_cursor:
                print(f"-- resume with --cursor {result.next_cursor}")


if __name__ == "__main__":
    asyncio.run(main())
