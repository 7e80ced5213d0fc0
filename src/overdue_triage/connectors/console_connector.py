# src/overdue_triage/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState
from .render import render_list

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


class ConsoleNotifier:
    """OperatorNotifier that prints toasts into the console."""

    def success(self, message: str) -> None:
        _print_ts(f"[OK] {message}")

    def error(self, message: str) -> None:
        _print_ts(f"[ERROR] {message}")


async def run_console_loop(state: AppState) -> None:
    app_name = str(getattr(state.settings, "app_name", "overdue-triage"))
    logger.info("Console connector started.")
    _print_ts(f"[{app_name}] Type /help for commands, /exit to quit.")

    await state.workqueue.reload()
    print(render_list(state.workqueue), flush=True)

    while True:
        try:
            # input() blocks; keep the loop free for in-flight row actions.
            line = (await asyncio.to_thread(input, "triage> ")).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not line:
            continue

        if line.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        if not line.startswith("/"):
            # Bare text is a search shortcut.
            line = f"/search {line}"

        try:
            reply = command_registry.handle(state, line)
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        if reply is not None:
            _print_ts(reply)

    logger.info("Console connector finished.")
