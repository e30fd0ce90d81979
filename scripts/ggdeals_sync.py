#!/usr/bin/env python3
"""GG.deals collection sync command line.

Run this script after the host exported its library, or via cron, to push
queued games to the GG.deals collection.

Example crontab entry (every hour):
    0 * * * * cd /opt/ggdeals-sync && .venv/bin/python scripts/ggdeals_sync.py sync >> /var/log/ggdeals_sync.log 2>&1

Usage:
    python scripts/ggdeals_sync.py sync
    python scripts/ggdeals_sync.py add (--all | --id ID [ID ...]) [--add-tracked] [--add-not-found]
    python scripts/ggdeals_sync.py enqueue ID [ID ...]
    python scripts/ggdeals_sync.py failures [--clear ID [ID ...] | --clear-all]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

logger = logging.getLogger("ggdeals_sync")


def _build_plugin():
    from ggdeals_sync.adapters.host import JsonGameLibrary, LoggingNotificationSink
    from ggdeals_sync.config import load_config
    from ggdeals_sync.core.logging_utils import setup_json_logging
    from ggdeals_sync.plugin import GGDealsPlugin

    cfg = load_config()
    setup_json_logging(cfg.runtime.log_level, cfg.runtime.log_file)

    notifications = LoggingNotificationSink()
    plugin = GGDealsPlugin(
        data_dir=cfg.runtime.data_dir,
        library=JsonGameLibrary(cfg.runtime.library_path),
        notifications=notifications,
        settings=cfg.ggdeals,
    )
    return plugin, notifications


def _print_run(result, notifications) -> int:
    print("\n=== GG.deals Sync Summary ===")
    print(f"Requested: {result.games_requested}")
    print(f"Submitted: {result.games_submitted} in {result.batches_submitted} batch(es)")
    print(f"Filtered out: {result.games_filtered_out}")
    for outcome, count in sorted(result.outcomes.items(), key=lambda item: item[0].value):
        print(f"  {outcome.value}: {count}")
    if result.cancelled:
        print("Run was cancelled before all batches were sent.")
    if result.failures_recorded:
        print(f"Failures recorded: {result.failures_recorded}")

    for notification_id in result.notifications:
        notification = notifications.notifications.get(notification_id)
        if notification is not None:
            print(f"[{notification.type.value}] {notification.message}")

    return 0 if not result.notifications else 1


async def run_sync() -> int:
    """Drain the persisted queue once.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        plugin, _ = _build_plugin()
        if not plugin.settings.enabled:
            logger.warning("GG.deals sync is disabled. Set GGDEALS_ENABLED=true to enable.")
            return 1

        pending = len(plugin.queue.pending)
        await plugin.queue.process_now()
        remaining = len(plugin.queue.pending)

        print("\n=== GG.deals Queue Drain ===")
        print(f"Processed: {pending - remaining}")
        print(f"Still pending: {remaining}")
        return 0 if remaining == 0 else 1

    except Exception as e:
        logger.exception("GG.deals sync failed")
        print(f"\nERROR: {e}")
        return 1


async def run_add(
    ids: list[str] | None, add_tracked: bool = False, add_not_found: bool = False
) -> int:
    """Submit library games right away, bypassing the queue.

    Args:
        ids: Game ids to submit, or None for the whole library
        add_tracked: Re-submit games already synced or ignored
        add_not_found: Re-submit games previously not found

    Returns:
        Exit code (0 for success, 1 for error)
    """
    from ggdeals_sync.adapters.ggdeals.models import SyncRunSettings

    try:
        plugin, notifications = _build_plugin()
        if ids is None:
            ids = [game.id for game in plugin.library.get_all_games()]

        run_settings = SyncRunSettings(
            add_tracked_games=add_tracked, add_not_found_games=add_not_found
        )
        result = await plugin.add_games_to_collection_async(ids, run_settings)
        return _print_run(result, notifications)

    except Exception as e:
        logger.exception("GG.deals add failed")
        print(f"\nERROR: {e}")
        return 1


def run_enqueue(ids: list[str]) -> int:
    try:
        plugin, _ = _build_plugin()
        added = plugin.on_games_added(ids)
        print(f"Queued {added} new game(s), {len(plugin.queue.pending)} pending")
        return 0
    except Exception as e:
        logger.exception("GG.deals enqueue failed")
        print(f"\nERROR: {e}")
        return 1


def run_failures(clear: list[str] | None = None, clear_all: bool = False) -> int:
    try:
        plugin, _ = _build_plugin()
        if clear_all:
            print(f"Cleared {plugin.failures.clear_all()} failure(s)")
            return 0
        if clear:
            print(f"Cleared {plugin.failures.remove_failures(clear)} failure(s)")
            return 0

        failures = plugin.failures.get_failures()
        print(f"\n=== GG.deals Failures ({len(failures)}) ===")
        for failure in sorted(failures.values(), key=lambda f: f.time):
            line = f"  - [{failure.game_id}] {failure.name}: {failure.result.value}"
            if failure.message:
                line += f" ({failure.message})"
            print(line)
        return 0
    except Exception as e:
        logger.exception("GG.deals failures command failed")
        print(f"\nERROR: {e}")
        return 1


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Add library games to the GG.deals collection")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("sync", help="Submit every queued game")

    add_parser = subparsers.add_parser("add", help="Submit games immediately")
    target = add_parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--all", action="store_true", help="Submit the whole library")
    target.add_argument("--id", nargs="+", dest="ids", help="Game ids to submit")
    add_parser.add_argument(
        "--add-tracked",
        action="store_true",
        help="Also submit games already synced or ignored",
    )
    add_parser.add_argument(
        "--add-not-found",
        action="store_true",
        help="Also submit games GG.deals did not find before",
    )

    enqueue_parser = subparsers.add_parser("enqueue", help="Queue games for the next sync")
    enqueue_parser.add_argument("ids", nargs="+", help="Game ids to queue")

    failures_parser = subparsers.add_parser("failures", help="List or clear recorded failures")
    clear_group = failures_parser.add_mutually_exclusive_group()
    clear_group.add_argument("--clear", nargs="+", metavar="ID", help="Clear these failures")
    clear_group.add_argument("--clear-all", action="store_true", help="Clear every failure")

    args = parser.parse_args()

    if args.command == "sync":
        exit_code = asyncio.run(run_sync())
    elif args.command == "add":
        exit_code = asyncio.run(
            run_add(
                None if args.all else args.ids,
                add_tracked=args.add_tracked,
                add_not_found=args.add_not_found,
            )
        )
    elif args.command == "enqueue":
        exit_code = run_enqueue(args.ids)
    else:
        exit_code = run_failures(clear=args.clear, clear_all=args.clear_all)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
