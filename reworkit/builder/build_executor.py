from typing import Optional, Dict, List
from dataclasses import dataclass
from pathlib import Path
import asyncio

from reworkit.common.config.constants import STDOUT_HEADER, STDERR_HEADER
from reworkit.common.config.logging_config import get_logger
from reworkit.common.exceptions.base_exceptions import ErrorCode
from reworkit.common.exceptions.build_exceptions import ExternalToolException


logger = get_logger(__name__)


@dataclass
class CommandResult:
    command: List[str]
    returncode: int
    stdout: bytes
    stderr: bytes

    @property
    def success(self) -> bool:
        return self.returncode == 0

    def combined_output(self) -> bytes:
        return STDOUT_HEADER + self.stdout + STDERR_HEADER + self.stderr


@dataclass
class BuildOutcome:
    package: str
    success: bool
    exit_code: Optional[int]
    log: bytes


class BuildExecutor:
    """Runs the external tools of one build cycle.

    ``git pull`` keeps the tree current, ``ciel update-os`` refreshes the
    build environment and ``ciel build -i <instance> <package>`` builds a
    single package.
    """

    def __init__(
        self,
        tree_dir: Path,
        instance: str = "main",
        ciel_binary: str = "ciel",
        git_binary: str = "git",
        env: Optional[Dict[str, str]] = None,
    ):
        self._tree_dir = Path(tree_dir)
        self._instance = instance
        self._ciel = ciel_binary
        self._git = git_binary
        self._env = env

    @property
    def tree_dir(self) -> Path:
        return self._tree_dir

    async def sync_tree(self) -> CommandResult:
        logger.info("Running git pull")
        result = await self._run_command([self._git, "pull"], cwd=self._tree_dir)
        if not result.success:
            raise ExternalToolException(
                message="Failed to run git pull",
                command=result.command,
                exit_code=result.returncode,
                output=result.stderr.decode("utf-8", errors="replace"),
                error_code=ErrorCode.SYNC_FAILED,
            )
        return result

    async def update_environment(self) -> CommandResult:
        logger.info("Running ciel update-os")
        result = await self._run_command([self._ciel, "update-os"])
        if not result.success:
            raise ExternalToolException(
                message="Failed to run ciel update-os",
                command=result.command,
                exit_code=result.returncode,
                output=result.stderr.decode("utf-8", errors="replace"),
                error_code=ErrorCode.ENVIRONMENT_UPDATE_FAILED,
            )
        return result

    async def build_package(self, package: str) -> BuildOutcome:
        cmd = [self._ciel, "build", "-i", self._instance, package]

        try:
            result = await self._run_command(cmd)
        except ExternalToolException as e:
            logger.error(f"Could not launch build for {package}: {e}")
            message = f"{e.message}\n".encode("utf-8")
            return BuildOutcome(
                package=package,
                success=False,
                exit_code=None,
                log=STDOUT_HEADER + STDERR_HEADER + message,
            )

        return BuildOutcome(
            package=package,
            success=result.success,
            exit_code=result.returncode,
            log=result.combined_output(),
        )

    async def _run_command(
        self,
        cmd: List[str],
        cwd: Optional[Path] = None,
    ) -> CommandResult:
        logger.debug(f"Running command: {' '.join(cmd)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=str(cwd) if cwd else None,
                env=self._env,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ExternalToolException(
                message=f"Failed to start {cmd[0]}: {e}",
                command=cmd,
                error_code=ErrorCode.BUILD_LAUNCH_FAILED,
                cause=e,
            )

        stdout, stderr = await process.communicate()

        return CommandResult(
            command=cmd,
            returncode=process.returncode,
            stdout=stdout or b"",
            stderr=stderr or b"",
        )
