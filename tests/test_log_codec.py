import gzip
import os

import pytest

from reworkit.common.exceptions import CodecException
from reworkit.common.utils.log_codec import LogCodec


class TestLogCodec(object):
    @pytest.mark.parametrize(
        "payload",
        [b"", b"ok", b"STDOUT:\nbuilding\nSTDERR:\n", os.urandom(4096), b"\x00" * 100000],
    )
    def test_round_trip(self, payload):
        codec = LogCodec()
        assert codec.decompress(codec.compress(payload)) == payload

    def test_compress_produces_complete_gzip_stream(self):
        compressed = LogCodec().compress(b"hello world")
        assert compressed[:2] == b"\x1f\x8b"
        assert gzip.decompress(compressed) == b"hello world"

    def test_decompress_empty_payload(self):
        assert LogCodec().decompress(b"") == b""

    def test_decompress_concatenated_members(self):
        codec = LogCodec()
        payload = codec.compress(b"first ") + codec.compress(b"second")
        assert codec.decompress(payload) == b"first second"

    def test_truncated_stream_fails_loudly(self):
        compressed = LogCodec().compress(b"x" * 10000)
        with pytest.raises(CodecException) as exc:
            LogCodec().decompress(compressed[:-10])
        assert exc.value.operation == "decompress"

    def test_garbage_fails_loudly(self):
        with pytest.raises(CodecException):
            LogCodec().decompress(b"this is not gzip")

    @pytest.mark.asyncio
    async def test_async_round_trip(self):
        codec = LogCodec()
        compressed = await codec.compress_async(b"async log")
        assert await codec.decompress_async(compressed) == b"async log"
