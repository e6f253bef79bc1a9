"""
fdllm - Copy files, directories and a project tree to the clipboard for LLM chats.

This package reads a TOML config (legacy fields or named profiles), expands
the configured directories into a file list, optionally renders the project
tree with ``eza`` and puts the combined text on the system clipboard.
"""

__version__ = "0.2.0"
__author__ = "fdllm Team"
