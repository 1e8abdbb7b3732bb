import stat
from pathlib import Path

import pytest

from reworkit.builder.build_executor import BuildExecutor, CommandResult
from reworkit.common.exceptions import ErrorCode, ExternalToolException


def make_script(path, body):
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(path.stat().st_mode | stat.S_IEXEC | stat.S_IXGRP | stat.S_IXOTH)
    return str(path)


@pytest.fixture
def tree(tmp_path):
    root = tmp_path / "TREE"
    root.mkdir()
    return root


class TestCommandResult(object):
    def test_combined_output_orders_stdout_before_stderr(self):
        result = CommandResult(command=["x"], returncode=0, stdout=b"out\n", stderr=b"err\n")
        assert result.combined_output() == b"STDOUT:\nout\nSTDERR:\nerr\n"
        assert result.success


class TestBuildExecutor(object):
    @pytest.mark.asyncio
    async def test_build_package_captures_output(self, tmp_path, tree):
        ciel = make_script(
            tmp_path / "ciel",
            'echo "args: $@"\necho "oops" >&2\nexit 0\n',
        )
        executor = BuildExecutor(tree, instance="main", ciel_binary=ciel)

        outcome = await executor.build_package("vim")

        assert outcome.package == "vim"
        assert outcome.success is True
        assert outcome.exit_code == 0
        assert outcome.log == b"STDOUT:\nargs: build -i main vim\nSTDERR:\noops\n"

    @pytest.mark.asyncio
    async def test_build_package_failure_is_an_outcome(self, tmp_path, tree):
        ciel = make_script(tmp_path / "ciel", "echo broken >&2\nexit 3\n")
        outcome = await BuildExecutor(tree, ciel_binary=ciel).build_package("vim")

        assert outcome.success is False
        assert outcome.exit_code == 3
        assert outcome.log.endswith(b"STDERR:\nbroken\n")

    @pytest.mark.asyncio
    async def test_missing_build_tool_is_a_failed_build(self, tmp_path, tree):
        executor = BuildExecutor(tree, ciel_binary=str(tmp_path / "missing-ciel"))
        outcome = await executor.build_package("vim")

        assert outcome.success is False
        assert outcome.exit_code is None
        assert outcome.log.startswith(b"STDOUT:\nSTDERR:\n")

    @pytest.mark.asyncio
    async def test_sync_tree_runs_in_tree(self, tmp_path, tree):
        git = make_script(tmp_path / "git", 'pwd\necho "$@"\n')
        result = await BuildExecutor(tree, git_binary=git).sync_tree()

        cwd, args = result.stdout.decode().splitlines()
        assert Path(cwd).resolve() == tree.resolve()
        assert args == "pull"

    @pytest.mark.asyncio
    async def test_sync_tree_failure_raises(self, tmp_path, tree):
        git = make_script(tmp_path / "git", "echo conflict >&2\nexit 1\n")

        with pytest.raises(ExternalToolException) as exc:
            await BuildExecutor(tree, git_binary=git).sync_tree()

        assert exc.value.error_code == ErrorCode.SYNC_FAILED
        assert exc.value.exit_code == 1

    @pytest.mark.asyncio
    async def test_update_environment_failure_raises(self, tmp_path, tree):
        ciel = make_script(tmp_path / "ciel", "exit 2\n")

        with pytest.raises(ExternalToolException) as exc:
            await BuildExecutor(tree, ciel_binary=ciel).update_environment()

        assert exc.value.error_code == ErrorCode.ENVIRONMENT_UPDATE_FAILED
