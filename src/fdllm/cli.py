"""
CLI entrypoint for fdllm package.
"""
import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .config import (
    default_config_path,
    ensure_config,
    load_config,
    selection_for,
    ProfileSelection,
)
from .core import (
    assemble,
    fail,
    info,
    resolve_files,
    success,
    ClipboardError,
    ConfigFileError,
    EmptyContentError,
    NoFilesError,
    UnknownProfileError,
)
from .providers import (
    render_project_tree,
    ClipboardWriter,
    EzaTreeProvider,
    PyperclipWriter,
    TreeProvider,
)


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="fdllm",
        description="Copy configured files, directories and a project tree to the clipboard.",
    )
    p.add_argument(
        "profile",
        nargs="?",
        help="Profile from the config to use (default: top-level settings)",
    )
    p.add_argument(
        "--files",
        nargs="+",
        metavar="PATH",
        help="Copy these files instead of the configured files and directories",
    )
    p.add_argument(
        "--config",
        type=Path,
        help="Config file (default: $HOME/fdllm/config.toml)",
    )
    p.add_argument("--no-tree", action="store_true", help="Skip the project tree")
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    return p.parse_args(argv)


def run(
    ns: argparse.Namespace,
    tree_provider: TreeProvider,
    clipboard: ClipboardWriter,
) -> None:
    config_path = ns.config.expanduser() if ns.config else default_config_path()
    ensure_config(config_path)
    config = load_config(config_path)

    selection = selection_for(ns.profile)
    profile = config.select(selection)
    if isinstance(selection, ProfileSelection):
        info(f"Using profile: {selection.name}")
    else:
        info("Using default configuration")

    if ns.files:
        files = list(ns.files)
    else:
        files = resolve_files(profile, verbose=ns.verbose)
    if not files:
        raise NoFilesError("No files provided via config or directories")

    tree = None
    if not ns.no_tree:
        tree = render_project_tree(profile.project, tree_provider)

    content = assemble(files, tree, verbose=ns.verbose)
    if not content:
        raise EmptyContentError("No valid files or project tree found to copy")

    clipboard.write(content)
    success("File contents and project tree copied to clipboard")
    if ns.verbose:
        info(f"{len(content)} characters copied.")


def main(
    argv: Optional[List[str]] = None,
    *,
    tree_provider: Optional[TreeProvider] = None,
    clipboard: Optional[ClipboardWriter] = None,
) -> None:
    try:
        try:
            ns = _parse_args(argv)
        except SystemExit as e:
            # argparse usage errors exit with 2
            if e.code:
                sys.exit(1)
            raise
        try:
            run(
                ns,
                tree_provider=tree_provider or EzaTreeProvider(),
                clipboard=clipboard or PyperclipWriter(),
            )
        except (
            ConfigFileError,
            UnknownProfileError,
            NoFilesError,
            EmptyContentError,
            ClipboardError,
        ) as e:
            fail(str(e))
            sys.exit(1)

    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        fail(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
