from pathlib import Path
from typing import Optional, Set
import asyncio

from reworkit.common.config.logging_config import get_logger
from reworkit.common.exceptions.build_exceptions import CodecException
from reworkit.common.exceptions.storage_exceptions import BlobWriteException
from reworkit.common.utils.file_utils import atomic_write_bytes, ensure_directory
from reworkit.common.utils.log_codec import LogCodec


logger = get_logger(__name__)


class LogBlobSink:
    """Write-once-per-submission directory of build logs keyed by filename.

    Uploaded payloads are gzip streams; by default they are expanded before
    being written. Writes scheduled with :meth:`schedule` run as detached
    tasks: the result store may already name a log whose file is still being
    written, or whose write failed and was only logged.
    """

    def __init__(
        self,
        log_dir: Path,
        codec: Optional[LogCodec] = None,
        decompress: bool = True,
    ):
        self._log_dir = Path(log_dir)
        self._codec = codec or LogCodec()
        self._decompress = decompress
        self._pending: Set[asyncio.Task] = set()

    @property
    def log_dir(self) -> Path:
        return self._log_dir

    @property
    def pending(self) -> int:
        return len(self._pending)

    def path_for(self, filename: str) -> Path:
        if not filename or Path(filename).name != filename or filename.startswith("."):
            raise BlobWriteException(
                message=f"Refusing to write log outside {self._log_dir}: {filename!r}",
                filename=filename,
            )
        return self._log_dir / filename

    async def write(self, filename: str, payload: bytes) -> Path:
        path = self.path_for(filename)

        try:
            data = await self._codec.decompress_async(payload) if self._decompress else payload
        except CodecException as e:
            raise BlobWriteException(
                message=f"Cannot expand log {filename}: {e.message}",
                filename=filename,
                cause=e,
            )

        loop = asyncio.get_event_loop()
        try:
            await loop.run_in_executor(None, ensure_directory, self._log_dir)
            await loop.run_in_executor(None, atomic_write_bytes, path, data)
        except OSError as e:
            raise BlobWriteException(
                message=f"Cannot write log {filename}: {e}",
                filename=filename,
                cause=e,
            )

        logger.info(f"Wrote log {path} ({len(data)} bytes)")
        return path

    def schedule(self, filename: str, payload: bytes) -> asyncio.Task:
        task = asyncio.create_task(self._write_logged(filename, payload))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _write_logged(self, filename: str, payload: bytes) -> None:
        try:
            await self.write(filename, payload)
        except BlobWriteException as e:
            logger.error(f"Error writing log: {e}")
        except Exception:
            logger.exception(f"Unexpected error writing log {filename}")
