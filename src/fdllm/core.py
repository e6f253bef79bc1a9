"""
Core logic for fdllm package.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING, FrozenSet, List, Optional, Sequence, Tuple

import pathspec
from colorama import Fore, Style, init as colorama_init

if TYPE_CHECKING:  # pragma: no cover
    from .config import Profile

colorama_init()

# Exceptions
class FdllmError(Exception): ...
class ConfigFileError(FdllmError): ...
class UnknownProfileError(FdllmError): ...
class NoFilesError(FdllmError): ...
class EmptyContentError(FdllmError): ...
class ClipboardError(FdllmError): ...

# Defaults & helpers
EXCLUDED_NAMES: Tuple[str, ...] = (".DS_Store", ".git", ".gitignore", "target")

VALID_EXTENSIONS: Tuple[str, ...] = (
    ".rs", ".toml", ".json", ".yaml", ".yml", ".md", ".txt",
    ".c", ".h", ".cpp", ".hpp", ".js", ".ts", ".py", ".go", ".sh",
    ".csv", ".log",
)

TreeSection = Tuple[Path, str]


def info(msg: str) -> None:
    print(f"[fdllm] {msg}")


def warn(msg: str) -> None:
    print(Fore.YELLOW + f"[fdllm] ! {msg}" + Style.RESET_ALL, file=sys.stderr)


def success(msg: str) -> None:
    print(Fore.GREEN + f"[fdllm] {msg}" + Style.RESET_ALL)


def fail(msg: str) -> None:
    print(Fore.RED + f"Error: {msg}" + Style.RESET_ALL, file=sys.stderr)


def expand_tilde(path: str) -> str:
    """Replace the first ``~`` in *path* with ``$HOME`` when it is set."""
    home = os.environ.get("HOME")
    if home is None:
        return path
    return path.replace("~", home, 1)


def compile_excludes(patterns: Sequence[str]) -> Optional["pathspec.PathSpec"]:
    if not patterns:
        return None
    return pathspec.PathSpec.from_lines("gitwildmatch", patterns)


# File-scanning helpers
def _is_excluded(name: str) -> bool:
    return any(excluded in name for excluded in EXCLUDED_NAMES)


def _list_dir(directory: Path) -> List[Path]:
    try:
        return sorted(directory.iterdir())
    except OSError:
        return []


def collect_files(
    directory: Path,
    extra_spec: Optional["pathspec.PathSpec"] = None,
    verbose: bool = False,
) -> List[Path]:
    """
    Walk *directory* depth-first and return every file worth copying.

    Entries whose name contains one of ``EXCLUDED_NAMES`` are dropped along
    with their subtree, as is anything matched by *extra_spec* (relative to
    *directory*). Files must carry one of ``VALID_EXTENSIONS``. Directories
    that cannot be listed count as empty.
    """
    files: List[Path] = []
    # each entry carries the real paths of the directories above it
    root_chain: FrozenSet[Path] = frozenset([directory.resolve()])
    # entries are pushed in reverse so they pop in name order
    stack: List[Tuple[Path, FrozenSet[Path]]] = [
        (p, root_chain) for p in reversed(_list_dir(directory))
    ]

    while stack:
        path, ancestors = stack.pop()
        if _is_excluded(path.name):
            continue

        if extra_spec is not None:
            rel = path.relative_to(directory).as_posix()
            if path.is_dir():
                rel += "/"
            if extra_spec.match_file(rel):
                continue

        if path.is_file():
            if not path.suffix:
                continue
            if path.suffix in VALID_EXTENSIONS:
                files.append(path)
            else:
                info(f"Skipping file with unsupported extension: {path}")
        elif path.is_dir():
            real = path.resolve()
            if real in ancestors:
                continue
            chain = ancestors | {real}
            stack.extend((p, chain) for p in reversed(_list_dir(path)))

    if verbose:
        info(f"Found {len(files)} files in directory: {directory}")
    return files


def resolve_files(profile: "Profile", verbose: bool = False) -> List[str]:
    """Explicit files first, then every file found under the configured directories."""
    resolved: List[str] = list(profile.files)
    extra_spec = compile_excludes(profile.exclude)

    for entry in profile.directories:
        dir_path = Path(expand_tilde(entry))
        if not dir_path.is_dir():
            warn(f"Directory not found or not a directory: {dir_path}")
            continue
        resolved.extend(
            str(p) for p in collect_files(dir_path, extra_spec, verbose=verbose)
        )

    return resolved


# Misc helpers
def _is_binary(data: bytes) -> bool:
    return b"\0" in data


def _read_text(path: Path, label: str) -> Optional[str]:
    try:
        raw = path.read_bytes()
    except OSError as e:
        warn(f"Failed to read file {path}: {e}")
        return None

    if _is_binary(raw):
        warn(f"Skipping binary file {label}")
        return None

    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        warn(f"Failed to read file {path}: {e}")
        return None


# Main assembler
def assemble(
    files: Sequence[str],
    tree: Optional[TreeSection] = None,
    verbose: bool = False,
) -> str:
    """
    Concatenate the project tree (if any) and every readable file.

    Each file is introduced by a ``# NOTE: <path>:`` line using the path as
    written in the config, before tilde expansion. Missing, binary or
    unreadable files are reported and left out.
    """
    parts: List[str] = []

    if tree is not None:
        project_path, tree_text = tree
        parts.append(f"# NOTE: Project Tree: {project_path}\n{tree_text}\n")

    copied = 0
    for entry in files:
        file_path = Path(expand_tilde(entry))
        if not file_path.is_file():
            warn(f"File not found or not a file: {file_path}")
            continue

        text = _read_text(file_path, entry)
        if text is None:
            continue

        parts.append(f"# NOTE: {entry}:\n{text}\n")
        copied += 1

    if verbose:
        info(f"{copied} of {len(files)} files copied.")
    return "".join(parts)
