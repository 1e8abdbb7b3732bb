import argparse
import asyncio
import signal
from typing import Optional, List, Dict, Any

from reworkit.builder.build_executor import BuildExecutor
from reworkit.builder.package_lister import PackageLister
from reworkit.common.config.settings import WorkerSettings
from reworkit.common.config.logging_config import setup_logging, get_logger
from reworkit.common.utils.retry import RetryConfig
from reworkit.worker.client import CollectorClient
from reworkit.worker.cycle import BuildWorker


logger = get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> Dict[str, Any]:
    parser = argparse.ArgumentParser(
        prog="reworkit-worker",
        description="Build every package of a CIEL! tree and report results to ReworkIt!",
    )
    parser.add_argument("-d", "--workspace", help="CIEL! workspace path")
    parser.add_argument("-a", "--arch", help="Instance architecture")
    parser.add_argument("-n", "--name", dest="instance", help="Instance name (default: main)")
    parser.add_argument("-u", "--url", help="ReworkIt! server url")
    parser.add_argument("-t", "--token", dest="secret_token", help="ReworkIt! secret token")

    args = parser.parse_args(argv)
    return {key: value for key, value in vars(args).items() if value is not None}


def build_worker(settings: WorkerSettings, client: CollectorClient) -> BuildWorker:
    executor = BuildExecutor(tree_dir=settings.tree_dir, instance=settings.instance)
    lister = PackageLister(settings.tree_dir)

    return BuildWorker(
        executor=executor,
        lister=lister,
        client=client,
        arch=settings.arch,
        retry_config=RetryConfig(
            max_attempts=settings.retry_attempts,
            delay=settings.retry_delay_seconds,
        ),
        cycle_interval_seconds=settings.cycle_interval_seconds,
    )


async def run_worker(settings: WorkerSettings) -> None:
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def signal_handler():
        logger.info("Received shutdown signal, stopping after the current cycle")
        stop_event.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, signal_handler)
        except NotImplementedError:
            logger.debug(f"Signal handlers not supported for {sig}")

    client = CollectorClient(
        base_url=settings.url,
        secret_token=settings.get_secret_token(),
        arch=settings.arch,
        timeout_seconds=settings.request_timeout_seconds,
    )

    async with client:
        worker = build_worker(settings, client)
        logger.info(
            f"Worker started: arch={settings.arch} instance={settings.instance} "
            f"tree={settings.tree_dir}"
        )
        await worker.run_forever(stop_event)

    logger.info("Worker stopped")


def main(argv: Optional[List[str]] = None) -> None:
    overrides = parse_args(argv)
    settings = WorkerSettings(**overrides)
    setup_logging(log_level=settings.log_level, json_format=settings.json_logs)
    asyncio.run(run_worker(settings))


if __name__ == "__main__":
    main()
