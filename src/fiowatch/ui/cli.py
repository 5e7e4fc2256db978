from __future__ import annotations

import argparse
import json
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from fiowatch.adapters.checkpoint import build_checkpoint_store
from fiowatch.app import invoke
from fiowatch.config import ConfigurationError, configure_logging, get_checkpoint_store_config
from fiowatch.domain.errors import CheckpointError
from fiowatch.domain.types import CheckpointRecord

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from fiowatch.adapters.checkpoint import ProvisionableCheckpointStore

log = logging.getLogger(__name__)

EXIT_GUARD_HELD = 3


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Watch the FIO domain registry for changes")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("run", help="Reconcile one window and post digests")
    subparsers.add_parser("status", help="Show the checkpoint record")

    init = subparsers.add_parser("init", help="Provision the checkpoint record")
    init.add_argument(
        "--block",
        type=int,
        required=True,
        help="Last block considered already processed",
    )
    init.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing checkpoint",
    )

    subparsers.add_parser("clear-guard", help="Release a guard left behind by a dead run")

    return parser.parse_args(list(argv))


def _print_json(payload: object) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))  # noqa: T201


def _open_store() -> ProvisionableCheckpointStore:
    return build_checkpoint_store(get_checkpoint_store_config())


def _run() -> int:
    response = invoke()
    _print_json(response.body)
    return 0 if response.ok else 1


def _status() -> int:
    store = _open_store()
    record = store.load()
    _print_json({"location": store.description, **record.to_document()})
    if record.active:
        log.warning("Guard is held at block %s", record.last_block)
        return EXIT_GUARD_HELD
    return 0


def _init(block: int, *, force: bool) -> int:
    if block < 0:
        raise ValueError("Block must be non-negative")
    store = _open_store()
    record = store.initialise(CheckpointRecord(last_block=block), force=force)
    log.info("Checkpoint %s initialised at block %s", store.description, record.last_block)
    return 0


def _clear_guard() -> int:
    store = _open_store()
    record = store.load()
    if not record.active:
        log.info("Guard is not held (block %s), nothing to do", record.last_block)
        return 0
    store.save(record.released())
    log.warning("Guard cleared; processing resumes after block %s", record.last_block)
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)

    try:
        if parsed_args.command == "run":
            exit_code = _run()
        elif parsed_args.command == "status":
            exit_code = _status()
        elif parsed_args.command == "init":
            exit_code = _init(parsed_args.block, force=parsed_args.force)
        elif parsed_args.command == "clear-guard":
            exit_code = _clear_guard()
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except (ConfigurationError, ValueError) as exc:
        log.error("%s", exc)  # noqa: TRY400
        sys.exit(2)
    except CheckpointError as exc:
        log.error("Checkpoint error: %s", exc)  # noqa: TRY400
        sys.exit(1)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)

    if exit_code:
        sys.exit(exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def cli() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    cli()
