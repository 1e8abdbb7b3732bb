import asyncio
import gzip
import zlib

from reworkit.common.exceptions.base_exceptions import ErrorCode
from reworkit.common.exceptions.build_exceptions import CodecException


class LogCodec:
    """Gzip codec for build logs.

    ``compress`` always emits a complete, finalized gzip member.
    ``decompress`` insists on a complete stream: truncated or corrupt input
    raises :class:`CodecException` instead of returning partial data.
    """

    def __init__(self, compresslevel: int = 6):
        self._compresslevel = compresslevel

    def compress(self, data: bytes) -> bytes:
        try:
            return gzip.compress(data, compresslevel=self._compresslevel)
        except (zlib.error, ValueError, TypeError) as e:
            raise CodecException(
                message=f"Failed to compress log: {e}",
                operation="compress",
                error_code=ErrorCode.COMPRESSION_FAILED,
                cause=e,
            )

    def decompress(self, data: bytes) -> bytes:
        if not data:
            return b""

        try:
            return gzip.decompress(data)
        except (EOFError, OSError, zlib.error) as e:
            raise CodecException(
                message=f"Failed to decompress log: {e}",
                operation="decompress",
                error_code=ErrorCode.DECOMPRESSION_FAILED,
                details={"compressed_size": len(data)},
                cause=e,
            )

    async def compress_async(self, data: bytes) -> bytes:
        return await asyncio.get_event_loop().run_in_executor(None, self.compress, data)

    async def decompress_async(self, data: bytes) -> bytes:
        return await asyncio.get_event_loop().run_in_executor(None, self.decompress, data)
