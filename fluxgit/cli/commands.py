"""CLI Commands

Each handler takes the parsed args, a repository, the effective config
and a Reporter, and returns an exit code.
"""

import os
import sys

from fluxgit.cli.utils import change_marker, collapse, confirm, group_by_feature
from fluxgit.config import (
    Config, ENV_FEATURES_ROOT, ENV_HISTORY_LIMIT, get_config_path, save_config,
)
from fluxgit.core import plan_commit, resolve
from fluxgit.git import GitError
from fluxgit.output import Reporter, Spinner, bold, colorize_commit_type, dim, info


def run_commit(args, repo, config: Config, reporter: Reporter) -> int:
    """Stage and commit the changes relevant to a target."""
    raw_target = ' '.join(args.target) or None
    plan = plan_commit(raw_target, repo.status(), message=args.message, features_root=config.features_root)
    reporter.detail(f"Target: {plan.target.describe()}")

    if plan.is_empty:
        reporter.info("No changes detected for target")
        reporter.hint("Run: flux-git status to see current changes")
        return 0

    verb = "Would stage" if args.dry_run else "Staging"
    reporter.info(bold(f"{verb} {len(plan.paths)} file(s) for commit:"))
    shown, remaining = collapse(plan.paths, config.max_file_display)
    for path in shown:
        reporter.info(f"  {path}")
    if remaining > 0:
        reporter.info(dim(f"  ... and {remaining} more files"))
    reporter.info(f"Message: {colorize_commit_type(plan.message)}")
    if plan.custom_message:
        reporter.detail("Using custom message")

    if args.dry_run:
        return 0

    try:
        repo.commit_paths(plan.paths, plan.message)
    except GitError as e:
        reporter.error(f"Commit failed: {e}")
        return 1

    reporter.success(f"Committed {len(plan.paths)} file(s)")
    return 0


def run_save(args, repo, config: Config, reporter: Reporter) -> int:
    """Emergency checkpoint of every change."""
    try:
        message = repo.checkpoint()
    except GitError as e:
        reporter.error(f"Save failed: {e}")
        return 1
    reporter.success("Emergency checkpoint created")
    reporter.info(f"Message: {colorize_commit_type(message)}")
    return 0


def run_undo(args, repo, config: Config, reporter: Reporter) -> int:
    try:
        last_commit = repo.undo()
    except GitError as e:
        reporter.error(f"Undo failed: {e}")
        return 1
    reporter.success(f"Undid last commit: {last_commit}")
    reporter.hint("Changes are preserved and staged")
    return 0


def run_sync(args, repo, config: Config, reporter: Reporter) -> int:
    reporter.info("Pulling from remote...")
    try:
        with Spinner():
            result = repo.sync()
    except GitError as e:
        reporter.error(f"Sync failed: {e}")
        return 1

    if result.stashed:
        reporter.detail("Local changes were stashed before pulling")
    reporter.success("Synced with remote")
    if result.conflicts:
        reporter.warning("Merge conflicts while restoring local changes")
        reporter.hint("Run: git stash pop manually to resolve")
    elif result.stashed:
        reporter.success("Local changes restored")
    return 0


def run_clean(args, repo, config: Config, reporter: Reporter) -> int:
    """Discard everything uncommitted, after showing what will be lost."""
    changes = repo.status()
    if not changes:
        reporter.success("Already clean - no changes to reset")
        return 0

    reporter.warning("This will discard ALL uncommitted changes!")
    reporter.hint("Consider running: flux-git save (to checkpoint first)")
    reporter.info("Changes that will be lost:")
    for record in changes:
        reporter.info(f"  {change_marker(record)} {record.path}")

    if not args.yes and not confirm("Discard these changes?"):
        reporter.info(dim("Cancelled."))
        return 0

    try:
        repo.clean()
    except GitError as e:
        reporter.error(f"Clean failed: {e}")
        return 1
    reporter.success("Reset to clean state")
    return 0


def run_status(args, repo, config: Config, reporter: Reporter) -> int:
    """Show current changes grouped by feature."""
    changes = repo.status()
    if not changes:
        reporter.success("Working directory clean")
        return 0

    reporter.info(bold("Current changes:"))
    for feature, records in group_by_feature(changes, config.features_root).items():
        reporter.blank()
        reporter.info(info(f"{feature}:"))
        for record in records:
            reporter.info(f"  {change_marker(record)} {record.path}")

    reporter.blank()
    reporter.info(dim(f"Total: {len(changes)} changed file(s)"))
    return 0


def run_history(args, repo, config: Config, reporter: Reporter) -> int:
    """Show recent commits touching a target."""
    limit = args.limit if args.limit and args.limit > 0 else config.history_limit
    target = resolve(args.target)
    pathspec = target.pathspec(config.features_root)
    reporter.detail(f"Target: {target.describe()}")

    try:
        entries = repo.history(pathspec=pathspec, limit=limit)
    except GitError as e:
        reporter.error(f"History failed: {e}")
        return 1

    suffix = f" for {args.target}" if args.target else ""
    if not entries:
        reporter.info(f"No commit history found{suffix}")
        return 0

    reporter.info(bold(f"Recent commits{suffix} (last {limit}):"))
    for index, entry in enumerate(entries, 1):
        reporter.info(f"  {index:2d}. {dim(entry.hash)} {colorize_commit_type(entry.subject)}")
    return 0


HANDLERS = {
    'commit': run_commit,
    'save': run_save,
    'undo': run_undo,
    'sync': run_sync,
    'clean': run_clean,
    'status': run_status,
    'history': run_history,
}


def display_config(config: Config) -> int:
    """Display current configuration."""
    config_path = get_config_path()

    print(f"\n{bold('Current Configuration')}\n")

    if config_path:
        print(f"  {dim('Loaded from:')} {config_path}")
    else:
        print(f"  {dim('Loaded from:')} defaults (no .fluxgitrc found)")

    env_root = os.environ.get(ENV_FEATURES_ROOT)
    env_limit = os.environ.get(ENV_HISTORY_LIMIT)
    if env_root or env_limit:
        print(f"  {dim('Environment overrides:')}")
        if env_root:
            print(f"    {ENV_FEATURES_ROOT}={env_root}")
        if env_limit:
            print(f"    {ENV_HISTORY_LIMIT}={env_limit}")

    print()
    print(f"  {bold('Settings:')}")
    print(f"    features_root:    {info(config.features_root)}")
    print(f"    history_limit:    {info(str(config.history_limit))}")
    print(f"    max_file_display: {info(str(config.max_file_display))}")

    print(f"\n  {dim('Config locations:')}")
    print(f"    Local:  .fluxgitrc (in current directory)")
    print(f"    Global: ~/.fluxgitrc\n")

    return 0


def run_init_config(reporter: Reporter) -> int:
    """Write a local .fluxgitrc holding the defaults."""
    try:
        path = save_config(Config(), global_config=False)
    except OSError as e:
        reporter.error(f"Could not write config: {e}")
        return 1
    reporter.success(f"Saved to {path}")
    return 0


def run_install_completion() -> int:
    """Install shell tab completion."""
    shell = os.environ.get('SHELL', '')

    print(f"\n{bold('Tab Completion Setup')}\n")

    if 'zsh' in shell or 'bash' in shell:
        rc_file = '~/.zshrc' if 'zsh' in shell else '~/.bashrc'
        print(f"Add this line to {dim(rc_file)}:\n")
        print('  eval "$(register-python-argcomplete flux-git)"\n')
        print(f"Then run: {dim('source ' + rc_file)}")
    elif sys.platform == 'win32':
        print("For PowerShell, add to your $PROFILE:\n")
        print("  register-python-argcomplete --shell powershell flux-git | Out-String | Invoke-Expression")
    else:
        print("Run one of these based on your shell:\n")
        print(f"  {dim('# Bash/Zsh')}")
        print('  eval "$(register-python-argcomplete flux-git)"\n')
        print(f"  {dim('# Fish')}")
        print("  register-python-argcomplete --shell fish flux-git | source")

    print(f"\n{dim('After setup, press TAB to autocomplete commands and flags.')}")
    return 0
