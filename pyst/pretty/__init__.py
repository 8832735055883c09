"""Pretty formatting utilities for CLI output."""

import shutil
import sys
from typing import IO, List, Optional

from ..tree import StackTree

def get_term_width() -> int:
    """Get terminal width, default to 80 if can't detect."""
    try:
        return shutil.get_terminal_size().columns
    except OSError:
        return 80


def header(text: str, use_emoji: bool = True) -> str:
    """Create a header with optional emoji."""
    width = get_term_width()

    h_line = "─" * (width - 2)
    v_line = "│"
    emoji = "📚 " if use_emoji else ""

    result = [
        f"┌{h_line}┐",
        f"{v_line} {emoji}{text}{' ' * max(width - len(text) - len(emoji) - 3, 0)}{v_line}",
        f"└{h_line}┘"
    ]

    return "\n".join(result)


def render_tree(tree: StackTree, current_branch: Optional[str] = None) -> str:
    """Render tracked branches as an indented tree, trunk first."""
    lines: List[str] = []

    def add_subtree(name: str, prefix: str, is_last: bool, is_root: bool) -> None:
        branch = tree.must_get(name)
        label = name
        if branch.remote is not None:
            label += f" (#{branch.remote.pr_number})"
        if name == current_branch:
            label += " ◀"
        if is_root:
            lines.append(label)
            child_prefix = ""
        else:
            lines.append(f"{prefix}{'└── ' if is_last else '├── '}{label}")
            child_prefix = prefix + ("    " if is_last else "│   ")
        for index, child in enumerate(branch.children):
            add_subtree(child, child_prefix, index == len(branch.children) - 1, False)

    add_subtree(tree.trunk_name, "", True, True)
    return "\n".join(lines)


def print_header(text: str, use_emoji: bool = True, file: Optional[IO[str]] = None) -> None:
    """Print a header to file (default stdout)."""
    if file is None:
        file = sys.stdout
    print(header(text, use_emoji), file=file)
