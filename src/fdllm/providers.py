"""
External collaborators: the ``eza`` tree renderer and the system clipboard.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import List, Optional, Protocol

import pyperclip

from .config import Project
from .core import ClipboardError, TreeSection, expand_tilde, warn


class TreeProvider(Protocol):
    def render(self, path: Path, depth: Optional[int] = None) -> Optional[str]: ...


class ClipboardWriter(Protocol):
    def write(self, text: str) -> None: ...


class EzaTreeProvider:
    """Render a directory with ``eza --tree --icons --git``."""

    def __init__(self, executable: str = "eza") -> None:
        self.executable = executable

    def command(self, path: Path, depth: Optional[int] = None) -> List[str]:
        cmd = [self.executable, "--tree", "--icons", "--git", str(path)]
        if depth is not None:
            cmd += ["-L", str(depth)]
        return cmd

    def render(self, path: Path, depth: Optional[int] = None) -> Optional[str]:
        try:
            proc = subprocess.run(
                self.command(path, depth),
                capture_output=True,
                check=False,
            )
        except OSError as e:
            warn(f"Failed to run {self.executable} command: {e}")
            return None

        if proc.returncode != 0:
            warn(f"Failed to run {self.executable} command (exit code {proc.returncode})")
            return None
        return proc.stdout.decode("utf-8", errors="replace")


class PyperclipWriter:
    def write(self, text: str) -> None:
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as e:
            raise ClipboardError(f"Failed to copy to clipboard: {e}") from e


def render_project_tree(
    project: Optional[Project], provider: TreeProvider
) -> Optional[TreeSection]:
    if project is None or not project.path:
        return None

    project_path = Path(expand_tilde(project.path))
    if not project_path.exists():
        warn(f"Project path not found: {project_path}")
        return None

    tree_text = provider.render(project_path, project.tree_level)
    if tree_text is None:
        return None
    return project_path, tree_text
