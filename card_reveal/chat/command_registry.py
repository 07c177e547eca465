"""Shared slash-command metadata for parse + play handling."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CommandSpec:
    command: str
    action: str
    arg_kind: str
    help: str


COMMANDS: tuple[CommandSpec, ...] = (
    CommandSpec("toggle", "toggle", "slots", "Flip or unflip cards by number (1-9)"),
    CommandSpec("show", "show", "none", "Show the board and the revealed cards"),
    CommandSpec("close", "close_modal", "none", "Close the reveal view"),
    CommandSpec("again", "reset", "none", "Start a new round"),
    CommandSpec("save", "save", "raw", "Save the reveal as card-reveal.png (optional directory)"),
    CommandSpec("share", "share", "raw", "Build a share link: x, facebook or telegram"),
    CommandSpec("help", "help", "none", "Show help"),
    CommandSpec("quit", "quit", "none", "Leave the game"),
)

COMMAND_ALIASES = {
    "reset": "again",
    "exit": "quit",
    "q": "quit",
}

COMMAND_MAP = {spec.command: spec for spec in COMMANDS}


def help_lines() -> list[str]:
    return [f"/{spec.command:<8} {spec.help}" for spec in COMMANDS]
