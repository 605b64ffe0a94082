"""CLI Main Entry Point"""

import sys

from fluxgit.cli.args import parse_args
from fluxgit.cli.commands import (
    HANDLERS, display_config, run_init_config, run_install_completion,
)
from fluxgit.config import Config, get_config_path, load_config, normalize_root
from fluxgit.git import GitRepository, GitError
from fluxgit.output import Reporter


def _effective_config(args) -> Config:
    """Resolve settings.

    Precedence: CLI args > environment variables > config file
    """
    config = load_config()
    config.apply_env()
    if args.root and args.root.strip():
        config.features_root = normalize_root(args.root)
    return config


def _handle_subcommands(args, config, reporter):
    """Handle flags that exit early.

    Returns:
        tuple: (exit_code, should_exit) - exit_code if should_exit is True
    """
    if args.install_completion:
        return run_install_completion(), True
    if args.display_config:
        return display_config(config), True
    if args.init_config:
        return run_init_config(reporter), True
    return 0, False


def main(argv: list[str] | None = None, repo_factory=GitRepository) -> int:
    """Main entry point for the CLI."""
    args = parse_args(argv)
    reporter = Reporter(verbose=args.verbose)
    config = _effective_config(args)

    exit_code, should_exit = _handle_subcommands(args, config, reporter)
    if should_exit:
        return exit_code

    reporter.detail(f"Config: {get_config_path() or 'defaults'}, features root {config.features_root}")

    try:
        repo = repo_factory()
    except GitError as e:
        reporter.error(str(e))
        return 1

    handler = HANDLERS[args.command]
    try:
        return handler(args, repo, config, reporter)
    except GitError as e:
        reporter.error(f"Git operation failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
