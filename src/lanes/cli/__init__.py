"""
Lanes CLI package.

Commands are auto-discovered from domain subfolders (``session/``,
``workflow/``, ``agent/``, ``hook/``). Each command module exposes
``SUMMARY``, ``register_args(parser)`` and ``main(args) -> int``.
"""
from ._args import add_dry_run_flag, add_json_flag, add_repo_root_flag, add_standard_flags
from ._output import OutputFormatter, format_json
from ._utils import get_repo_root

__all__ = [
    "OutputFormatter",
    "format_json",
    "add_dry_run_flag",
    "add_json_flag",
    "add_repo_root_flag",
    "add_standard_flags",
    "get_repo_root",
]
