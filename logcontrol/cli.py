# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Command line tools for publishing and following component log levels."""

import argparse
import logging
import os
import signal
import sys
from typing import List, Optional

from .component_config import ConfigManager
from .config import EnvConfigProvider, LogControlSettings, StaticConfigProvider, load_settings
from .controller import ComponentLogController
from .engine import LogLevel
from .keys import ConfigType, package_to_key
from .kvstore import KVStore, KVStoreError, NotFoundError, create_kv_store
from .log_format import configure_logging
from .values import decode_level_value, encode_value

logger = logging.getLogger(__name__)


def create_store(settings: LogControlSettings) -> KVStore:
    kwargs = {"path_prefix": settings.kv_store_data_prefix}
    if settings.kv_store_type == "redis":
        kwargs.update(
            host=settings.kv_store_host,
            port=settings.kv_store_port,
            timeout=settings.kv_store_timeout,
        )
    return create_kv_store(settings.kv_store_type, **kwargs)


def _run(settings: LogControlSettings, args: argparse.Namespace) -> int:
    configure_logging(settings.log_level)
    store = create_store(settings)
    controller = ComponentLogController(
        ConfigManager(store, settings.kv_store_config_prefix),
        settings.component_name,
        remove_policy=settings.remove_policy,
        propagate_default=settings.propagate_default,
        watch_retries=settings.watch_retries,
        reconcile_on_start=True,
    )

    def _shutdown(signum, frame):
        logger.info(f"Received signal {signum}, shutting down")
        controller.stop_event.set()

    signal.signal(signal.SIGTERM, _shutdown)
    signal.signal(signal.SIGINT, _shutdown)

    try:
        controller.run()
    finally:
        controller.stop()
        store.close()
    return 0


def _config_for(settings: LogControlSettings, label: str):
    if settings.kv_store_type == "inmemory":
        # The in-memory store lives only as long as this command
        raise ValueError(
            "Publishing commands need a shared store; set KV_STORE_TYPE (e.g. redis)"
        )
    manager = ConfigManager(create_store(settings), settings.kv_store_config_prefix)
    return manager.init_component_config(label, ConfigType.LOG_LEVEL)


def _set(settings: LogControlSettings, args: argparse.Namespace) -> int:
    level = LogLevel.parse(args.level)
    _config_for(settings, args.component).put(package_to_key(args.key), encode_value(str(level)))
    print(f"{args.component}/{args.key} = {level}")
    return 0


def _get(settings: LogControlSettings, args: argparse.Namespace) -> int:
    try:
        value = _config_for(settings, args.component).get(package_to_key(args.key))
    except NotFoundError:
        print(f"{args.component}/{args.key} is not set", file=sys.stderr)
        return 1
    print(decode_level_value(value))
    return 0


def _list(settings: LogControlSettings, args: argparse.Namespace) -> int:
    for key, value in sorted(_config_for(settings, args.component).list_all().items()):
        print(f"{key}\t{decode_level_value(value)}")
    return 0


def _delete(settings: LogControlSettings, args: argparse.Namespace) -> int:
    _config_for(settings, args.component).delete(package_to_key(args.key))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="logcontrol",
        description="Publish and follow component log levels in a shared KV store",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Follow log level changes for COMPONENT_NAME")
    run_parser.set_defaults(handler=_run)

    set_parser = subparsers.add_parser("set", help="Publish a log level")
    set_parser.add_argument("component", help='Component label, or "global"')
    set_parser.add_argument("key", help='Package name, or "default"')
    set_parser.add_argument("level", help="DEBUG, INFO, WARN, ERROR or FATAL")
    set_parser.set_defaults(handler=_set)

    get_parser = subparsers.add_parser("get", help="Show a published log level")
    get_parser.add_argument("component")
    get_parser.add_argument("key")
    get_parser.set_defaults(handler=_get)

    list_parser = subparsers.add_parser("list", help="Show every published log level of a component")
    list_parser.add_argument("component")
    list_parser.set_defaults(handler=_list)

    delete_parser = subparsers.add_parser("delete", help="Remove a published log level")
    delete_parser.add_argument("component")
    delete_parser.add_argument("key")
    delete_parser.set_defaults(handler=_delete)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    provider = EnvConfigProvider()
    if args.command != "run" and not provider.get("COMPONENT_NAME"):
        # Publishing tools do not run as a component
        provider = StaticConfigProvider({**os.environ, "COMPONENT_NAME": "cli"})

    try:
        settings = load_settings(provider)
        return args.handler(settings, args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except KVStoreError as e:
        print(f"Store error: {e}", file=sys.stderr)
        return 1
