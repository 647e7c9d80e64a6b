# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Component log controller: watches level configuration and applies changes."""

import logging
import queue
import threading
import time
from typing import Any, Dict, List, Optional

from .applier import ApplyPartialFailure, LevelApplier
from .change_gate import ChangeGate
from .component_config import ComponentConfig, ConfigManager
from .config import RemovePolicy
from .engine import LoggingEngine, StdlibLoggingEngine
from .event_handler import safe_event_handler
from .events import ChangeKind, ConfigChangeEvent, EventTranslator
from .keys import ConfigType, key_to_package
from .kvstore import StoreUnavailableError, WatchEvent
from .metrics import MetricsCollector, NoOpMetricsCollector
from .reconciler import DEFAULT_KEY, levels_from_entries, reconcile
from .retry import WatchRetryPolicy

logger = logging.getLogger(__name__)

GLOBAL_SCOPE = "global"


class ComponentLogController:
    """Keeps a component's log levels in line with the KV store.

    Two watch threads (global and component scope) feed one queue. A single
    consumer reconciles on every Set event, so applies never overlap.
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        component_name: str,
        engine: Optional[LoggingEngine] = None,
        remove_policy: RemovePolicy = RemovePolicy.IGNORE,
        propagate_default: bool = True,
        watch_retries: int = 0,
        retry_backoff_seconds: float = 1,
        reconcile_on_start: bool = False,
        metrics_collector: Optional[MetricsCollector] = None,
        error_reporter: Optional[Any] = None,
        poll_interval: float = 0.5,
    ):
        """Initialize log controller.

        Args:
            config_manager: Manager for the configuration store
            component_name: Label of the running component
            engine: Logging engine to configure (Python logging if None)
            remove_policy: Handling of removed level entries
            propagate_default: Move known packages to the component default
            watch_retries: Resubscribe attempts after a watch failure
            retry_backoff_seconds: Base backoff between resubscribe attempts
            reconcile_on_start: Apply the stored levels before watching
            metrics_collector: Optional metrics collector
            error_reporter: Optional error reporter (``report(error, context)``)
            poll_interval: Seconds between stop token checks while idle
        """
        self.component_name = component_name
        self.config_manager = config_manager
        self.engine = engine or StdlibLoggingEngine()
        self.remove_policy = remove_policy
        self.watch_retries = watch_retries
        self.retry_backoff_seconds = retry_backoff_seconds
        self.reconcile_on_start = reconcile_on_start
        self.metrics_collector = metrics_collector or NoOpMetricsCollector()
        self.error_reporter = error_reporter
        self.poll_interval = poll_interval

        self.global_config = config_manager.init_component_config(GLOBAL_SCOPE, ConfigType.LOG_LEVEL)
        self.component_config = config_manager.init_component_config(component_name, ConfigType.LOG_LEVEL)
        self.applier = LevelApplier(self.engine, propagate_default=propagate_default)
        self.change_gate = ChangeGate()

        self.events: "queue.Queue[ConfigChangeEvent]" = queue.Queue()
        self.stop_event = threading.Event()
        self.initial_default_level = self.engine.get_default_level()

        self._watch_threads: List[threading.Thread] = []
        self._consumer_thread: Optional[threading.Thread] = None

    @property
    def last_fingerprint(self) -> bytes:
        return self.change_gate.last_fingerprint

    def start(self) -> threading.Thread:
        """Start watching and consuming in background threads."""
        self._consumer_thread = threading.Thread(
            target=self.run,
            name=f"log-controller-{self.component_name}",
            daemon=True,
        )
        self._consumer_thread.start()
        return self._consumer_thread

    def run(self) -> None:
        """Watch both scopes and process changes until stopped (blocking)."""
        self.start_watching()
        if self.reconcile_on_start:
            self.process_log_config()

        logger.info(f"Log controller for {self.component_name} waiting for configuration changes")
        while not self.stop_event.is_set():
            try:
                event = self.events.get(timeout=self.poll_interval)
            except queue.Empty:
                continue
            self.handle_change(event)
        logger.info(f"Log controller for {self.component_name} stopped")

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Request shutdown, close the watches and wait for the threads."""
        self.stop_event.set()
        self.global_config.unsubscribe()
        self.component_config.unsubscribe()

        for thread in self._watch_threads:
            thread.join(timeout)
        if self._consumer_thread is not None and self._consumer_thread is not threading.current_thread():
            self._consumer_thread.join(timeout)

    def start_watching(self) -> None:
        if self._watch_threads:
            return
        for config in (self.global_config, self.component_config):
            thread = threading.Thread(
                target=self._watch,
                args=(config,),
                name=f"log-config-watch-{config.component_label}",
                daemon=True,
            )
            thread.start()
            self._watch_threads.append(thread)

    def _watch(self, config: ComponentConfig) -> None:
        """Translate one subtree's notifications, resubscribing on failure if configured."""
        policy = WatchRetryPolicy(self.watch_retries, self.retry_backoff_seconds)
        while not self.stop_event.is_set():
            if policy.failures and not policy.wait(self.stop_event):
                return

            try:
                stream = config.subscribe()
            except (StoreUnavailableError, RuntimeError) as e:
                logger.error(f"Could not watch {config.config_path}: {e}")
                if policy.record_failure():
                    continue
                return
            if self.stop_event.is_set():
                stream.close()
                return

            if policy.failures:
                # Changes made while the watch was down produced no events
                logger.info(f"Resubscribed to {config.config_path}, resynchronizing log levels")
                self.events.put(ConfigChangeEvent(ChangeKind.SET, DEFAULT_KEY, config.component_label))

            translator = EventTranslator(
                stream=stream,
                prefix=self.config_manager.config_prefix,
                config_type=config.config_type,
                events=self.events,
                stop_event=self.stop_event,
                on_dropped=self._on_dropped,
            )
            translator.run()

            if translator.failure is None:
                return
            if translator.received:
                policy.record_success()
            if not policy.record_failure():
                logger.error(f"Giving up watching {config.config_path}")
                return
            logger.info(f"Resubscribing to {config.config_path}")

    def _on_dropped(self, watch_event: WatchEvent, error: Exception) -> None:
        self.metrics_collector.increment("dropped_events_total")

    @safe_event_handler("ConfigChange")
    def handle_change(self, event: ConfigChangeEvent) -> None:
        scope = GLOBAL_SCOPE if event.scope == GLOBAL_SCOPE else "component"
        self.metrics_collector.increment("events_total", tags={"scope": scope, "kind": event.kind.value})
        logger.debug(f"Received {event.kind.value} for {event.scope}/{event.key}")

        if event.kind is ChangeKind.SET:
            self.process_log_config()
        elif event.kind is ChangeKind.REMOVE:
            self._handle_remove(event)

    def _handle_remove(self, event: ConfigChangeEvent) -> None:
        if self.remove_policy is RemovePolicy.IGNORE:
            logger.info(f"Ignoring removal of {event.scope}/{event.key}")
            return
        if self.remove_policy is RemovePolicy.REAPPLY:
            self.process_log_config()
            return

        levels = self.update_log_config()
        if levels is None:
            return
        if event.key not in levels:
            if event.key == DEFAULT_KEY:
                self.engine.set_default_level(self.initial_default_level)
            else:
                self.engine.clear_package_level(key_to_package(event.key))
            logger.info(f"Cleared log level for {event.key}")
            # Engine state changed behind the gate
            self.change_gate.reset()
        self.load_and_apply_log_config(levels)

    def process_log_config(self) -> bool:
        """Run one reconciliation cycle.

        Returns:
            True if new levels were applied
        """
        start = time.monotonic()
        levels = self.update_log_config()
        if levels is None:
            return False
        applied = self.load_and_apply_log_config(levels)
        self.metrics_collector.observe("reconcile_seconds", time.monotonic() - start)
        return applied

    def get_global_log_config(self) -> Dict[str, str]:
        return levels_from_entries(self.global_config.list_all())

    def get_component_log_config(self) -> Dict[str, str]:
        return levels_from_entries(self.component_config.list_all())

    def update_log_config(self) -> Optional[Dict[str, str]]:
        """Fetch both scopes and merge them, or None if the store is unavailable."""
        try:
            global_levels = self.get_global_log_config()
            component_levels = self.get_component_log_config()
        except StoreUnavailableError as e:
            logger.error(f"Skipping log level update, store unavailable: {e}")
            self.metrics_collector.increment("store_errors_total")
            return None
        return reconcile(global_levels, component_levels)

    def load_and_apply_log_config(self, levels: Dict[str, str]) -> bool:
        """Apply levels unless they match the last applied map.

        The fingerprint is only recorded after every entry was applied.
        """
        current = self.change_gate.check(levels)
        if current is None:
            logger.debug("Log levels unchanged, nothing to apply")
            self.metrics_collector.increment("apply_skipped_total")
            return False

        try:
            self.applier.apply(levels)
        except ApplyPartialFailure as e:
            logger.warning(f"Log levels partially applied: {e}")
            self.metrics_collector.increment("apply_failures_total", value=len(e.failures))
            return False

        self.change_gate.commit(current)
        self.metrics_collector.increment("applies_total")
        logger.info(f"Applied log levels for {self.component_name}: {levels}")
        return True

    def get_active_levels(self) -> Dict[str, str]:
        return self.engine.active_levels()


def process_log_config_change(
    config_manager: ConfigManager,
    component_name: str,
    **kwargs: Any,
) -> ComponentLogController:
    """Create a controller for the running component and start it in the background.

    Args:
        config_manager: Manager for the configuration store
        component_name: Label of the running component
        **kwargs: Passed to ComponentLogController

    Returns:
        The started controller
    """
    controller = ComponentLogController(config_manager, component_name, **kwargs)
    controller.start()
    logger.info(f"Started log configuration processing for {component_name}")
    return controller
