"""
Tests for CLI commands, output and configuration.

Run with:
    pytest tests/test_cli.py -v
    pytest tests/test_cli.py -v -s   # see actual terminal output
"""

import argparse
import io
import json
import re

import pytest

from fluxgit.cli import main as cli_main
from fluxgit.cli.args import parse_args
from fluxgit.cli.commands import (
    run_clean, run_commit, run_history, run_init_config, run_install_completion,
    run_save, run_status, run_sync, run_undo,
)
from fluxgit.cli.utils import collapse, group_by_feature
from fluxgit.config import Config, ConfigManager
from fluxgit.core import ChangeRecord
from fluxgit.git import GitError, HistoryEntry, SyncResult
from fluxgit.output import Reporter

ANSI_RE = re.compile(r'\033\[[0-9;]*m')


class FakeRepo:
    """In-memory stand-in for GitRepository."""

    def __init__(self, changes=None, fail=None, history=None, sync_result=None):
        self.changes = changes or []
        self.fail = fail
        self.entries = history or []
        self.sync_result = sync_result or SyncResult()
        self.committed = []
        self.history_calls = []
        self.cleaned = False

    def _maybe_fail(self, name):
        if self.fail == name:
            raise GitError(f"{name} exploded")

    def status(self):
        self._maybe_fail('status')
        return list(self.changes)

    def commit_paths(self, paths, message):
        self._maybe_fail('commit')
        self.committed.append((list(paths), message))

    def checkpoint(self):
        self._maybe_fail('checkpoint')
        return "chore: emergency checkpoint 2025-07-02T09-11-24"

    def undo(self):
        self._maybe_fail('undo')
        return "abc1234 feat(weather): implement weather feature"

    def sync(self):
        self._maybe_fail('sync')
        return self.sync_result

    def clean(self):
        self._maybe_fail('clean')
        self.cleaned = True

    def history(self, pathspec=None, limit=10):
        self._maybe_fail('history')
        self.history_calls.append((pathspec, limit))
        return self.entries


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def weather_changes():
    return [
        ChangeRecord("??", "src/features/weather/main/main.contract.ts"),
        ChangeRecord(" M", "src/features/weather/main/main.logic.ts"),
        ChangeRecord("??", "src/features/billing/invoice.ts"),
    ]


@pytest.fixture
def reporter():
    """Reporter writing into buffers; `.output()` / `.errors()` return plain text."""
    out, err = io.StringIO(), io.StringIO()
    rep = Reporter(verbose=True, stream=out, err_stream=err)
    rep.output = lambda: ANSI_RE.sub('', out.getvalue())
    rep.errors = lambda: ANSI_RE.sub('', err.getvalue())
    return rep


@pytest.fixture
def config():
    return Config()


def commit_args(*target, message=None, dry_run=False):
    return argparse.Namespace(target=list(target), message=message, dry_run=dry_run)


# ---------------------------------------------------------------------------
# commit
# ---------------------------------------------------------------------------

class TestCommitCommand:

    def test_commits_feature_with_generated_message(self, weather_changes, config, reporter):
        repo = FakeRepo(changes=weather_changes)
        assert run_commit(commit_args("weather"), repo, config, reporter) == 0
        assert repo.committed == [(
            ["src/features/weather/main/main.contract.ts", "src/features/weather/main/main.logic.ts"],
            "feat(weather): implement weather feature",
        )]
        out = reporter.output()
        assert "Staging 2 file(s) for commit:" in out
        assert "Message: feat(weather): implement weather feature" in out
        assert "Committed 2 file(s)" in out

    def test_custom_message(self, weather_changes, config, reporter):
        repo = FakeRepo(changes=weather_changes)
        run_commit(commit_args("weather", message="wip"), repo, config, reporter)
        assert repo.committed[0][1] == "wip"

    def test_target_words_are_joined(self, config, reporter):
        repo = FakeRepo(changes=[ChangeRecord(" M", "src/features/my feature/a.ts")])
        run_commit(commit_args("my", "feature"), repo, config, reporter)
        assert repo.committed[0][1] == "chore(my feature): update implementation"

    def test_no_changes_for_target_is_a_noop(self, weather_changes, config, reporter):
        repo = FakeRepo(changes=weather_changes)
        assert run_commit(commit_args("todo"), repo, config, reporter) == 0
        assert repo.committed == []
        assert "No changes detected for target" in reporter.output()

    def test_dry_run_commits_nothing(self, weather_changes, config, reporter):
        repo = FakeRepo(changes=weather_changes)
        assert run_commit(commit_args("weather/main", dry_run=True), repo, config, reporter) == 0
        assert repo.committed == []
        assert "Would stage 2 file(s)" in reporter.output()

    def test_commit_failure_returns_1(self, weather_changes, config, reporter):
        repo = FakeRepo(changes=weather_changes, fail='commit')
        assert run_commit(commit_args("weather"), repo, config, reporter) == 1
        assert "Commit failed: commit exploded" in reporter.errors()

    def test_long_file_lists_collapse(self, reporter):
        changes = [ChangeRecord(" M", f"src/features/big/f{i}.ts") for i in range(5)]
        repo = FakeRepo(changes=changes)
        run_commit(commit_args("big", dry_run=True), repo, Config(max_file_display=2), reporter)
        assert "... and 3 more files" in reporter.output()

    def test_uses_configured_root(self, reporter):
        repo = FakeRepo(changes=[ChangeRecord(" M", "src/api/weather/main/main.test.ts")])
        run_commit(commit_args("weather/main"), repo, Config(features_root="src/api/"), reporter)
        assert repo.committed[0][1] == "test(weather/main): update test coverage"


# ---------------------------------------------------------------------------
# Other commands
# ---------------------------------------------------------------------------

class TestSimpleCommands:

    def test_save(self, config, reporter):
        assert run_save(None, FakeRepo(), config, reporter) == 0
        assert "chore: emergency checkpoint" in reporter.output()

    def test_save_failure(self, config, reporter):
        assert run_save(None, FakeRepo(fail='checkpoint'), config, reporter) == 1
        assert "Save failed" in reporter.errors()

    def test_undo(self, config, reporter):
        assert run_undo(None, FakeRepo(), config, reporter) == 0
        assert "Undid last commit: abc1234" in reporter.output()

    def test_undo_failure(self, config, reporter):
        assert run_undo(None, FakeRepo(fail='undo'), config, reporter) == 1

    def test_sync_with_conflicts(self, config, reporter):
        repo = FakeRepo(sync_result=SyncResult(stashed=True, conflicts=True))
        assert run_sync(None, repo, config, reporter) == 0
        assert "Merge conflicts" in reporter.output()

    def test_sync_restores(self, config, reporter):
        repo = FakeRepo(sync_result=SyncResult(stashed=True))
        run_sync(None, repo, config, reporter)
        assert "Local changes restored" in reporter.output()

    def test_sync_failure(self, config, reporter):
        assert run_sync(None, FakeRepo(fail='sync'), config, reporter) == 1


class TestCleanCommand:

    def test_already_clean(self, config, reporter):
        repo = FakeRepo()
        assert run_clean(argparse.Namespace(yes=False), repo, config, reporter) == 0
        assert repo.cleaned is False
        assert "Already clean" in reporter.output()

    def test_yes_skips_confirmation(self, weather_changes, config, reporter):
        repo = FakeRepo(changes=weather_changes)
        assert run_clean(argparse.Namespace(yes=True), repo, config, reporter) == 0
        assert repo.cleaned is True
        assert "src/features/billing/invoice.ts" in reporter.output()

    def test_declined_confirmation(self, weather_changes, config, reporter, monkeypatch):
        monkeypatch.setattr('builtins.input', lambda _: 'n')
        repo = FakeRepo(changes=weather_changes)
        assert run_clean(argparse.Namespace(yes=False), repo, config, reporter) == 0
        assert repo.cleaned is False
        assert "Cancelled." in reporter.output()

    def test_confirmed(self, weather_changes, config, reporter, monkeypatch):
        monkeypatch.setattr('builtins.input', lambda _: 'yes')
        repo = FakeRepo(changes=weather_changes)
        run_clean(argparse.Namespace(yes=False), repo, config, reporter)
        assert repo.cleaned is True


class TestStatusCommand:

    def test_groups_by_feature(self, weather_changes, config, reporter):
        changes = weather_changes + [ChangeRecord(" M", "README.md")]
        assert run_status(None, FakeRepo(changes=changes), config, reporter) == 0
        out = reporter.output()
        assert out.index("weather:") < out.index("billing:") < out.index("other:")
        assert "+ src/features/billing/invoice.ts" in out
        assert "~ src/features/weather/main/main.logic.ts" in out
        assert "Total: 4 changed file(s)" in out

    def test_clean_tree(self, config, reporter):
        run_status(None, FakeRepo(), config, reporter)
        assert "Working directory clean" in reporter.output()

    def test_group_by_feature_custom_root(self):
        changes = [ChangeRecord(" M", "src/api/hello/main/main.contract.ts"), ChangeRecord(" M", "src/features/x/a.ts")]
        groups = group_by_feature(changes, "src/api/")
        assert list(groups) == ["hello", "other"]


class TestHistoryCommand:

    def test_uses_target_pathspec(self, config, reporter):
        repo = FakeRepo(history=[HistoryEntry("abc1234", "feat(weather): implement weather feature")])
        args = argparse.Namespace(target="weather/main", limit=None)
        assert run_history(args, repo, config, reporter) == 0
        assert repo.history_calls == [("src/features/weather/main/", 10)]
        out = reporter.output()
        assert "Recent commits for weather/main (last 10):" in out
        assert " 1. abc1234 feat(weather): implement weather feature" in out

    def test_explicit_limit_and_no_target(self, config, reporter):
        repo = FakeRepo()
        run_history(argparse.Namespace(target=None, limit=20), repo, config, reporter)
        assert repo.history_calls == [(None, 20)]
        assert "No commit history found" in reporter.output()

    def test_file_target_pathspec(self, config, reporter):
        repo = FakeRepo()
        run_history(argparse.Namespace(target="weather/main.contract.ts", limit=3), repo, config, reporter)
        assert repo.history_calls == [("src/features/weather/main.contract.ts", 3)]

    def test_failure(self, config, reporter):
        args = argparse.Namespace(target=None, limit=None)
        assert run_history(args, FakeRepo(fail='history'), config, reporter) == 1


# ---------------------------------------------------------------------------
# Argument parsing and main()
# ---------------------------------------------------------------------------

class TestArgs:

    def test_commit_with_message(self):
        args = parse_args(["commit", "weather/main", "-m", "custom msg"])
        assert args.command == "commit"
        assert args.target == ["weather/main"]
        assert args.message == "custom msg"

    def test_history_target_and_limit(self):
        args = parse_args(["history", "weather", "20"])
        assert args.target == "weather"
        assert args.limit == 20

    def test_no_command_exits(self, capsys):
        with pytest.raises(SystemExit) as exc:
            parse_args([])
        assert exc.value.code == 1


class TestMain:

    @pytest.fixture(autouse=True)
    def isolated_config(self, monkeypatch):
        monkeypatch.delenv("FLUXGIT_FEATURES_ROOT", raising=False)
        monkeypatch.delenv("FLUXGIT_HISTORY_LIMIT", raising=False)
        monkeypatch.setattr(cli_main, "load_config", lambda: Config())

    def test_dispatches_to_handler(self, weather_changes, capsys):
        repo = FakeRepo(changes=weather_changes)
        assert cli_main.main(["commit", "weather"], repo_factory=lambda: repo) == 0
        assert repo.committed[0][1] == "feat(weather): implement weather feature"

    def test_repository_error(self, capsys):
        def no_repo():
            raise GitError("Not a git repository. Run: git init")
        assert cli_main.main(["status"], repo_factory=no_repo) == 1
        assert "Not a git repository" in capsys.readouterr().err

    def test_unhandled_git_error_becomes_exit_1(self, capsys):
        repo = FakeRepo(fail='status')
        assert cli_main.main(["status"], repo_factory=lambda: repo) == 1
        assert "Git operation failed" in capsys.readouterr().err

    def test_root_flag_overrides_env(self, monkeypatch):
        monkeypatch.setenv("FLUXGIT_FEATURES_ROOT", "lib/features")
        repo = FakeRepo(changes=[ChangeRecord(" M", "src/api/weather/a.logic.ts")])
        cli_main.main(["--root", "src/api", "commit", "weather"], repo_factory=lambda: repo)
        assert repo.committed[0][1] == "fix(weather): update logic implementation"

    def test_env_root(self, monkeypatch):
        monkeypatch.setenv("FLUXGIT_FEATURES_ROOT", "src/api")
        repo = FakeRepo(changes=[ChangeRecord(" M", "src/api/weather/a.logic.ts")])
        cli_main.main(["commit", "weather"], repo_factory=lambda: repo)
        assert repo.committed

    def test_display_config_needs_no_repo(self, capsys):
        def no_repo():
            raise AssertionError("repository should not be opened")
        assert cli_main.main(["--display-config"], repo_factory=no_repo) == 0
        assert "features_root" in capsys.readouterr().out


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

class TestConfig:

    def test_defaults(self):
        config = Config()
        assert config.features_root == "src/features/"
        assert config.history_limit == 10

    def test_from_dict_ignores_unknown_keys(self):
        config = Config.from_dict({"features_root": "src/api", "provider": "claude"})
        assert config.features_root == "src/api/"
        assert not hasattr(config, "provider")

    def test_validate_invalid_values(self):
        config = Config(features_root="  ", history_limit=0, max_file_display="many")
        warnings = config.validate()
        assert len(warnings) == 3
        assert config == Config()

    @pytest.mark.parametrize("field", ["history_limit", "max_file_display"])
    def test_validate_rejects_booleans(self, field):
        config = Config(**{field: True})
        warnings = config.validate()
        assert len(warnings) == 1
        assert getattr(config, field) == getattr(Config(), field)

    def test_from_dict_triggers_validation(self, capsys):

        Config.from_dict({"history_limit": -5})
        assert "Config warning" in capsys.readouterr().err

    def test_env_overrides(self):
        config = Config().apply_env({"FLUXGIT_FEATURES_ROOT": "src\\api", "FLUXGIT_HISTORY_LIMIT": "25"})
        assert config.features_root == "src/api/"
        assert config.history_limit == 25

    def test_invalid_env_limit_is_ignored(self, capsys):
        config = Config().apply_env({"FLUXGIT_HISTORY_LIMIT": "lots"})
        assert config.history_limit == 10
        assert "FLUXGIT_HISTORY_LIMIT" in capsys.readouterr().err


class TestConfigManager:

    def test_load_returns_defaults_when_no_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
        config = ConfigManager().load()
        assert config == Config()

    def test_load_reads_local_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".fluxgitrc").write_text(json.dumps({"features_root": "src/api/", "history_limit": 5}))
        manager = ConfigManager()
        config = manager.load()
        assert config.features_root == "src/api/"
        assert config.history_limit == 5
        assert manager.get_config_path() == tmp_path / ".fluxgitrc"

    def test_save_and_load_roundtrip(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
        ConfigManager().save(Config(history_limit=3), global_config=False)
        assert ConfigManager().load().history_limit == 3

    @pytest.mark.parametrize("content", ["not valid json {{{", "[1, 2]"])
    def test_malformed_file_returns_defaults(self, tmp_path, monkeypatch, content):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".fluxgitrc").write_text(content)
        assert ConfigManager().load() == Config()


class TestCollapse:

    def test_collapse(self):
        assert collapse(["a", "b", "c"], 2) == (["a", "b"], 1)
        assert collapse(["a"], 5) == (["a"], 0)


class TestSetupCommands:

    def test_init_config_writes_defaults(self, tmp_path, monkeypatch, reporter):
        monkeypatch.chdir(tmp_path)
        assert run_init_config(reporter) == 0
        written = json.loads((tmp_path / ".fluxgitrc").read_text())
        assert written == Config().to_dict()
        assert "Saved to" in reporter.output()

    def test_init_config_flag(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(cli_main, "load_config", lambda: Config())

        def no_repo():
            raise AssertionError("repository should not be opened")
        assert cli_main.main(["--init-config"], repo_factory=no_repo) == 0
        assert ConfigManager().load() == Config()

    def test_init_config_write_failure(self, tmp_path, monkeypatch, reporter):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".fluxgitrc").mkdir()
        assert run_init_config(reporter) == 1
        assert "Could not write config" in reporter.errors()

    @pytest.mark.parametrize("shell, rc_file", [
        ("/bin/zsh", "~/.zshrc"),
        ("/bin/bash", "~/.bashrc"),
    ])
    def test_install_completion(self, shell, rc_file, monkeypatch, capsys):
        monkeypatch.setenv("SHELL", shell)
        assert run_install_completion() == 0
        out = ANSI_RE.sub('', capsys.readouterr().out)
        assert rc_file in out
        assert 'eval "$(register-python-argcomplete flux-git)"' in out
