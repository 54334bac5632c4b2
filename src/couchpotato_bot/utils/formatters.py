"""Telegram Markdown formatting helpers for bot responses."""

from __future__ import annotations

from couchpotato_bot import messages


def bold(text: str) -> str:
    return f"*{text}*"


def italic(text: str) -> str:
    return f"_{text}_"


def link(label: str, url: str) -> str:
    return f"[{label}]({url})"


def numbered(position: int, text: str) -> str:
    """``*1*) text`` — the list style used for movies, profiles and users."""
    return f"{bold(str(position))}) {text}"


def format_error(text: str) -> str:
    """Prefix a failure with the error marker so it stands out in the chat."""
    return f"{messages.ERROR_MARKER} {text}"


def build_keyboard(labels: list[str], per_row: int = 1) -> list[list[str]]:
    """Lay *labels* out in rows of *per_row* buttons; the last row may be short."""
    return [labels[i : i + per_row] for i in range(0, len(labels), per_row)]


def chunk(lines: list[str], size: int) -> list[list[str]]:
    return [lines[i : i + size] for i in range(0, len(lines), size)]


def confirm_keyboard() -> list[list[str]]:
    return [["NO"], ["yes"]]


def format_help_text(display_name: str, is_admin: bool = False) -> str:
    """Commands available to the user; the owner also sees the admin ones."""
    lines = [f"Below is a list of commands you (@{display_name}) have access to:"]
    lines.append("\n" + bold("General commands:"))
    lines.append("`/start` to start this bot")
    lines.append("`/help` for this list of commands")
    lines.append("`/q [movie name]` search for a movie")
    lines.append("`/library [movie name]` search library")
    lines.append("`/clear` clear all previous commands")

    if is_admin:
        lines.append("\n" + bold("Admin commands:"))
        lines.append("`/wanted` search all missing/wanted movies")
        lines.append("`/users` list users")
        lines.append("`/revoke` revoke user from bot")
        lines.append("`/unrevoke` un-revoke user from bot")

    return "\n".join(lines)
