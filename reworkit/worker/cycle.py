from typing import Optional, List
from dataclasses import dataclass, field
import asyncio

from reworkit.builder.build_executor import BuildExecutor, BuildOutcome
from reworkit.builder.package_lister import PackageLister
from reworkit.common.config.constants import (
    CYCLE_INTERVAL_SECONDS,
    STDERR_HEADER,
    STDOUT_HEADER,
    WorkerState,
)
from reworkit.common.config.logging_config import get_logger, get_build_logger
from reworkit.common.exceptions.base_exceptions import ReworkitBaseException
from reworkit.common.exceptions.build_exceptions import CodecException
from reworkit.common.utils.log_codec import LogCodec
from reworkit.common.utils.retry import RetryConfig, async_with_retry
from reworkit.worker.client import CollectorClient


logger = get_logger(__name__)


@dataclass
class CycleReport:
    packages: List[str] = field(default_factory=list)
    succeeded: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    delivered: List[str] = field(default_factory=list)
    undelivered: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    def summary(self) -> str:
        return (
            f"{len(self.packages)} packages, {len(self.succeeded)} succeeded, "
            f"{len(self.failed)} failed, {len(self.delivered)} delivered, "
            f"{len(self.undelivered)} undelivered, {len(self.skipped)} skipped"
        )


class BuildWorker:
    """Drives the build cycle.

    One cycle is: sync the tree, list packages, refresh the build
    environment, then build, compress and submit each package in turn.
    A failed sync or environment refresh aborts the cycle; anything that goes
    wrong with a single package only affects that package. ``run_forever``
    repeats cycles with a fixed pause and never lets a cycle failure escape.
    """

    def __init__(
        self,
        executor: BuildExecutor,
        lister: PackageLister,
        client: CollectorClient,
        arch: str,
        codec: Optional[LogCodec] = None,
        retry_config: Optional[RetryConfig] = None,
        cycle_interval_seconds: float = CYCLE_INTERVAL_SECONDS,
    ):
        self._executor = executor
        self._lister = lister
        self._client = client
        self._arch = arch
        self._codec = codec or LogCodec()
        self._retry_config = retry_config or RetryConfig()
        self._cycle_interval = cycle_interval_seconds
        self._state = WorkerState.IDLE

    @property
    def state(self) -> WorkerState:
        return self._state

    async def run_forever(self, stop_event: Optional[asyncio.Event] = None) -> None:
        while stop_event is None or not stop_event.is_set():
            try:
                report = await self.run_once()
                logger.info(f"Cycle finished: {report.summary()}")
            except ReworkitBaseException as e:
                logger.error(f"Error: {e}")
            except Exception:
                logger.exception("Build cycle failed unexpectedly")
            finally:
                self._state = WorkerState.IDLE

            await self._pause(stop_event)

    async def run_once(self) -> CycleReport:
        report = CycleReport()

        self._state = WorkerState.SYNCING
        await self._executor.sync_tree()

        self._state = WorkerState.LISTING
        logger.info("Getting packages")
        report.packages = await self._lister.list_packages_async()

        self._state = WorkerState.UPDATING_ENVIRONMENT
        await self._executor.update_environment()

        for package in report.packages:
            await self.process_package(package, report)

        self._state = WorkerState.IDLE
        return report

    async def process_package(self, package: str, report: CycleReport) -> None:
        build_logger = get_build_logger(package, self._arch)

        self._state = WorkerState.BUILDING
        build_logger.info(f"Building {package}")
        try:
            outcome = await self._executor.build_package(package)
        except Exception as e:
            build_logger.exception(f"Build of {package} crashed")
            outcome = BuildOutcome(
                package=package,
                success=False,
                exit_code=None,
                log=STDOUT_HEADER + STDERR_HEADER + f"{e}\n".encode("utf-8"),
            )
        build_logger.info(f"is success: {outcome.success}")
        (report.succeeded if outcome.success else report.failed).append(package)

        self._state = WorkerState.COMPRESSING
        try:
            compressed = await self._codec.compress_async(outcome.log)
        except CodecException as e:
            build_logger.error(f"Compress LOG got error: {e}")
            report.skipped.append(package)
            return

        self._state = WorkerState.SUBMITTING
        try:
            await async_with_retry(
                self._client.push_log,
                self._retry_config,
                package,
                outcome.success,
                compressed,
            )
        except ReworkitBaseException as e:
            build_logger.error(
                f"Giving up on {package} after {self._retry_config.max_attempts} attempts: {e}"
            )
            report.undelivered.append(package)
            return
        except Exception:
            build_logger.exception(f"Submitting {package} failed unexpectedly")
            report.undelivered.append(package)
            return

        report.delivered.append(package)

    async def _pause(self, stop_event: Optional[asyncio.Event]) -> None:
        if stop_event is None:
            await asyncio.sleep(self._cycle_interval)
            return

        try:
            await asyncio.wait_for(stop_event.wait(), timeout=self._cycle_interval)
        except asyncio.TimeoutError:
            logger.debug("Starting next cycle")
