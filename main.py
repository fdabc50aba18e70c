"""Application entry point — wires services and runs a command.

Usage:
    python main.py list
    python main.py save-new <slot> <name>
    python main.py write-to-slot <save> <slot>
    python main.py write-to-external <slot> <save>
    python main.py delete <save>

``<slot>`` is a slot number (1-4) or a slot name such as "Slot 2 (Before NRP)";
``<save>`` is the name of an external save.
"""

from __future__ import annotations

import argparse
import sys

from nine_saves.config import Config, get_config
from nine_saves.context import AppContext
from nine_saves.core.actions import Action, ActionController
from nine_saves.core.backup import BackupEngine
from nine_saves.core.path_resolver import resolve_paths
from nine_saves.core.repository import SaveRepository
from nine_saves.errors import NineSavesError
from nine_saves.logger import setup_logger
from nine_saves.models.save_entity import SaveEntity
from nine_saves.utils import format_playtime

ERROR_TITLE = "Nine Saves encountered an error"


def create_context(config: Config | None = None) -> AppContext:
    """Wire all services and return an AppContext. Raises DirectoryUnavailable."""
    config = config or get_config()

    setup_logger(config.data_dir / "logs", debug=config.debug)

    paths = resolve_paths(config)
    repository = SaveRepository(paths.slots_root, paths.saves_root, paths.backups_root)
    engine = BackupEngine(paths.backups_root)
    actions = ActionController(repository, engine)

    return AppContext(
        config=config,
        paths=paths,
        repository=repository,
        engine=engine,
        actions=actions,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nine-saves",
        description="Manage Nine Sols save slots, external saves and backups.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="Show slots, external saves and backups")

    p = sub.add_parser("save-new", help="Copy a slot to a new external save")
    p.add_argument("slot")
    p.add_argument("name")

    p = sub.add_parser("write-to-slot", help="Overwrite a slot with an external save")
    p.add_argument("save")
    p.add_argument("slot")

    p = sub.add_parser("write-to-external", help="Overwrite an external save with a slot")
    p.add_argument("slot")
    p.add_argument("save")

    p = sub.add_parser("delete", help="Back up and delete an external save")
    p.add_argument("save")

    return parser


def _describe(save: SaveEntity) -> str:
    if not save.exists:
        return f"  {save.name:<28} (empty)"
    if save.info is None:
        return f"  {save.name:<28} (unreadable: {save.error})"
    info = save.info
    return (
        f"  {save.name:<28} Level {info.level:<4} "
        f"{format_playtime(info.playtime):>9}  {info.gold} gold"
    )


def print_listing(controller: ActionController) -> None:
    repo = controller.repository
    for title, entities in (
        ("Game Slots", repo.slots),
        ("External Saves", repo.saves),
        ("Backups", repo.backups),
    ):
        print(title)
        if not entities:
            print("  (none)")
        for save in entities:
            print(_describe(save))


def _find_slot(controller: ActionController, value: str) -> int:
    slots = controller.repository.slots
    if value.isdigit():
        wanted = int(value) - 1
        for i, slot in enumerate(slots):
            if slot.slot_index == wanted and not slot.nrp_backup:
                return i
        for i, slot in enumerate(slots):
            if slot.slot_index == wanted:
                return i
    for i, slot in enumerate(slots):
        if slot.name == value:
            return i
    raise LookupError(f"No slot matches '{value}'")


def _find_save(controller: ActionController, name: str) -> int:
    for i, save in enumerate(controller.repository.saves):
        if save.name == name:
            return i
    raise LookupError(f"No external save named '{name}'")


def run_command(controller: ActionController, args: argparse.Namespace) -> int:
    if not controller.try_refresh():
        print(f"{ERROR_TITLE}\n{controller.error_status}", file=sys.stderr)
        return 1

    if args.command == "list":
        print_listing(controller)
        return 0

    try:
        if args.command == "save-new":
            controller.action_selected = Action.SAVE_SLOT_TO_NEW_EXTERNAL
            controller.slot_selected = _find_slot(controller, args.slot)
            controller.new_save_name = args.name
        elif args.command == "write-to-slot":
            controller.action_selected = Action.WRITE_EXTERNAL_TO_SLOT
            controller.external_selected = _find_save(controller, args.save)
            controller.slot_selected = _find_slot(controller, args.slot)
        elif args.command == "write-to-external":
            controller.action_selected = Action.WRITE_SLOT_TO_EXTERNAL
            controller.slot_selected = _find_slot(controller, args.slot)
            controller.external_selected = _find_save(controller, args.save)
        elif args.command == "delete":
            controller.action_selected = Action.DELETE_EXTERNAL
            controller.external_selected = _find_save(controller, args.save)
    except LookupError as e:
        print(f"{ERROR_TITLE}\n{e}", file=sys.stderr)
        return 1

    if not controller.action_ready():
        print(f"{ERROR_TITLE}\nAction '{args.command}' is not possible with that selection", file=sys.stderr)
        return 1

    if not controller.perform():
        print(f"{ERROR_TITLE}\n{controller.error_status}", file=sys.stderr)
        return 1

    print_listing(controller)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Application entry point."""
    args = build_parser().parse_args(argv)

    try:
        ctx = create_context()
        controller = ctx.actions
    except NineSavesError as e:
        controller = ActionController.degraded(str(e))
        print(f"{ERROR_TITLE}\n{controller.error_status}", file=sys.stderr)
        return 1

    return run_command(controller, args)


if __name__ == "__main__":
    sys.exit(main())
