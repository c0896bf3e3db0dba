"""
Maintenance commands for a sharded snapshot repository.

Usage:
    snapstore check                # show config, verify the container everywhere
    snapstore init                 # create the container on every account
    snapstore ls [PREFIX]          # list blobs (merged across accounts)
    snapstore rm PATH              # best-effort recursive delete
    snapstore route KEY            # show which account KEY routes to

Configuration comes from the environment (see snapstore.settings); the
--container/--accounts/--location-mode flags override it.
"""

from __future__ import annotations

import argparse
import sys
from contextlib import ExitStack
from typing import Callable, Dict, List, Optional

from loguru import logger

from snapstore.blobstore import BlobStoreConfig, ShardedBlobStore, build_blob_store
from snapstore.core.exceptions import SnapStoreError
from snapstore.core.models import BlobPath
from snapstore.logging_utils import logging_context, setup_logging
from snapstore.settings import get_repository_settings


def _cmd_check(store: ShardedBlobStore, _args: argparse.Namespace) -> int:
    print(f"container:     {store.container}")
    print(f"accounts:      {', '.join(store.accounts) or '<default>'}")
    print(f"location mode: {store.location_mode.value}")
    if store.container_exists():
        print("\nContainer present on every account.")
        return 0
    print("\nContainer missing on at least one account; run `snapstore init`.")
    return 1


def _cmd_init(store: ShardedBlobStore, _args: argparse.Namespace) -> int:
    store.create_container()
    print(f"Container {store.container} ready on {len(store.accounts) or 1} account(s).")
    return 0


def _cmd_ls(store: ShardedBlobStore, args: argparse.Namespace) -> int:
    blobs = store.list_by_prefix(store.container, "", args.prefix or None)
    for name in sorted(blobs):
        print(f"{blobs[name].length:>12}  {name}")
    return 0


def _cmd_rm(store: ShardedBlobStore, args: argparse.Namespace) -> int:
    store.delete(BlobPath.parse(args.path))
    return 0


def _cmd_route(store: ShardedBlobStore, args: argparse.Namespace) -> int:
    print(store.resolve_account(args.key) or "<default>")
    return 0


_COMMANDS: Dict[str, Callable[[ShardedBlobStore, argparse.Namespace], int]] = {
    "check": _cmd_check,
    "init": _cmd_init,
    "ls": _cmd_ls,
    "rm": _cmd_rm,
    "route": _cmd_route,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="snapstore", description="Manage a sharded Azure snapshot repository."
    )
    parser.add_argument("--container", help="Container name (default: SNAPSTORE_CONTAINER)")
    parser.add_argument(
        "--accounts", help="Comma-separated account pool (default: SNAPSTORE_ACCOUNTS)"
    )
    parser.add_argument(
        "--location-mode", help="primary_only, secondary_only, primary_then_secondary, ..."
    )
    parser.add_argument("--log-level", default=None, help="Log level (default: LOG_LEVEL or INFO)")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("check", help="Show configuration and verify the container")
    sub.add_parser("init", help="Create the container on every account")
    ls = sub.add_parser("ls", help="List blobs by prefix")
    ls.add_argument("prefix", nargs="?", default="")
    rm = sub.add_parser("rm", help="Delete everything under a path")
    rm.add_argument("path")
    route = sub.add_parser("route", help="Print the account a key routes to")
    route.add_argument("key")
    return parser


def config_from_args(args: argparse.Namespace) -> BlobStoreConfig:
    settings = get_repository_settings()
    return BlobStoreConfig(
        container=args.container or settings.container,
        accounts=args.accounts if args.accounts is not None else settings.account_pool,
        location_mode=args.location_mode or settings.location_mode,
    )


def main(argv: Optional[List[str]] = None, *, store: Optional[ShardedBlobStore] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level)
    owns_store = store is None
    try:
        if store is None:
            store = build_blob_store(config_from_args(args))
        with ExitStack() as stack:
            if owns_store:
                stack.enter_context(store)
            with logging_context(container=store.container):
                return _COMMANDS[args.command](store, args)
    except SnapStoreError as e:
        logger.error("{} failed: {}", args.command, e)
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
