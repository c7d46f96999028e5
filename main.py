"""Command line entry point — wires services and runs one command.

Usage:
    vm-backup-restore remotes
    vm-backup-restore list REMOTE
    vm-backup-restore backups REMOTE VM
    vm-backup-restore destinations
    vm-backup-restore restore REMOTE VM [--sr SR] [--file PATH] [--start | --no-start]

REMOTE and SR accept either an id or a name.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from loguru import logger

from vmrestore.config import Config, get_config
from vmrestore.context import AppContext
from vmrestore.core.catalog import CatalogManager
from vmrestore.core.catalog_cache import CatalogCache
from vmrestore.core.notifier import LogNotifier, RecordingNotifier
from vmrestore.core.restore import RestoreDispatcher
from vmrestore.i18n import set_language, t
from vmrestore.logger import setup_logger
from vmrestore.models.remote import Destination, RemoteInfo
from vmrestore.models.restore import RestoreRequest
from vmrestore.xo.client import XoApiError, XoClient
from vmrestore.xo.registry import RemoteRegistry


def create_context(config: Config) -> AppContext:
    """Wire all services and return an AppContext."""
    platform = XoClient(
        config.xo_url,
        token=config.xo_token,
        timeout=config.request_timeout,
        verify=config.verify_tls,
    )
    notifier = RecordingNotifier(forward=LogNotifier())

    registry = RemoteRegistry(platform)
    cache = CatalogCache()
    cache.bind(registry)

    return AppContext(
        config=config,
        platform=platform,
        notifier=notifier,
        registry=registry,
        cache=cache,
        catalog_manager=CatalogManager(platform, cache, notifier),
        dispatcher=RestoreDispatcher(platform, notifier),
    )


def _find_remote(ctx: AppContext, key: str) -> RemoteInfo | None:
    for remote in ctx.cache.remotes:
        if key in (remote.id, remote.name):
            return remote
    return None


def _find_destination(destinations: list[Destination], key: str) -> Destination | None:
    for destination in destinations:
        if key in (destination.id, destination.name):
            return destination
    return None


async def cmd_remotes(ctx: AppContext, args: argparse.Namespace) -> int:
    await ctx.registry.refresh()
    if not ctx.cache.remotes:
        print("No remotes")
    for remote in ctx.cache.remotes:
        flags = "enabled" if remote.enabled else "disabled"
        if remote.error:
            flags += f", error: {remote.error}"
        print(f"{remote.name}  [{remote.id}]  ({flags})")
    return 0


async def cmd_list(ctx: AppContext, args: argparse.Namespace) -> int:
    await ctx.registry.refresh()
    remote = _find_remote(ctx, args.remote)
    result = await ctx.catalog_manager.refresh(remote.id if remote else args.remote)
    if not result.success:
        print(result.error)
        return 1
    if ctx.cache.is_empty(result.remote_id):
        print(t("refresh.no_backups", remote=remote.name if remote else args.remote))
        return 0

    summaries = sorted(result.catalog.values(), key=lambda s: s.latest.timestamp, reverse=True)
    for summary in summaries:
        latest = summary.latest
        print(
            f"{summary.machine_name}  tag={latest.tag}  "
            f"last={latest.timestamp:%Y-%m-%d %H:%M:%S} ({latest.kind})  "
            f"backups={summary.total} simple={summary.simple_count} delta={summary.delta_count}"
        )
    return 0


async def cmd_backups(ctx: AppContext, args: argparse.Namespace) -> int:
    await ctx.registry.refresh()
    remote = _find_remote(ctx, args.remote)
    records = await ctx.catalog_manager.machine_backups(remote.id if remote else args.remote, args.vm)
    if not records:
        print(f"No backups of {args.vm}")
        return 1 if ctx.notifier.errors else 0
    for record in records:
        print(f"{record.timestamp:%Y-%m-%d %H:%M:%S}  {record.kind:<6}  {record.tag}  {record.path}")
    return 0


async def cmd_destinations(ctx: AppContext, args: argparse.Namespace) -> int:
    for destination in await ctx.platform.list_writable_destinations():
        print(f"{destination.name}  [{destination.id}]  {destination.content_type}")
    return 0


async def cmd_restore(ctx: AppContext, args: argparse.Namespace) -> int:
    await ctx.registry.refresh()
    remote = _find_remote(ctx, args.remote)
    remote_id = remote.id if remote else args.remote

    destination = None
    sr_key = args.sr or ctx.config.default_destination
    if sr_key:
        destination = _find_destination(await ctx.platform.list_writable_destinations(), sr_key)

    start = ctx.config.start_after_import if args.start is None else args.start

    if args.file:
        records = await ctx.catalog_manager.machine_backups(remote_id, args.vm)
        backup = next((r for r in records if r.path == args.file), None)
        result = await ctx.dispatcher.restore(RestoreRequest(backup, destination, start))
    else:
        refreshed = await ctx.catalog_manager.refresh(remote_id)
        if not refreshed.success:
            print(refreshed.error)
            return 1
        result = await ctx.dispatcher.restore_latest(ctx.cache, remote_id, args.vm, destination, start)

    if result.error:
        print(result.error)
    if result.machine_id:
        print(f"Imported VM: {result.machine_id} ({result.status})")
    return 0 if result.success else 1


_COMMANDS = {
    "remotes": cmd_remotes,
    "list": cmd_list,
    "backups": cmd_backups,
    "destinations": cmd_destinations,
    "restore": cmd_restore,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vm-backup-restore",
        description="Browse VM backups on Xen Orchestra remotes and restore them.",
    )
    parser.add_argument("--config-dir", type=Path, default=None, help="Directory holding config.json")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("remotes", help="List configured remotes")

    p_list = sub.add_parser("list", help="Summarize the backups of one remote per VM")
    p_list.add_argument("remote")

    p_backups = sub.add_parser("backups", help="List every backup of one VM")
    p_backups.add_argument("remote")
    p_backups.add_argument("vm")

    sub.add_parser("destinations", help="List writable storage repositories")

    p_restore = sub.add_parser("restore", help="Import a VM backup")
    p_restore.add_argument("remote")
    p_restore.add_argument("vm")
    p_restore.add_argument("--sr", help="Destination SR id or name")
    p_restore.add_argument("--file", help="Backup path to restore instead of the latest one")
    p_restore.add_argument("--start", dest="start", action="store_true", default=None)
    p_restore.add_argument("--no-start", dest="start", action="store_false", default=None)

    return parser


async def _run(ctx: AppContext, args: argparse.Namespace) -> int:
    try:
        return await _COMMANDS[args.command](ctx, args)
    except XoApiError as e:
        logger.error(f"Xen Orchestra request failed: {e}")
        return 1
    finally:
        await ctx.platform.close()


def main(argv: list[str] | None = None) -> int:
    """Application entry point."""
    args = build_parser().parse_args(argv)
    config = Config(args.config_dir) if args.config_dir else get_config()

    setup_logger(config.log_dir, config.log_level)
    set_language(config.language)

    if not config.xo_url:
        logger.error(f"Xen Orchestra URL not configured (set xo.url in {config.data_dir / 'config.json'})")
        return 1

    ctx = create_context(config)
    return asyncio.run(_run(ctx, args))


if __name__ == "__main__":
    sys.exit(main())
