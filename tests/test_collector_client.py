import gzip

import pytest
from aiohttp import web
from aiohttp import test_utils

from reworkit.common.exceptions import TransportException
from reworkit.worker.client import CollectorClient


class Collector(object):
    def __init__(self, status=200, body=""):
        self.status = status
        self.body = body
        self.requests = []

    async def handle(self, request):
        form = await request.post()
        self.requests.append(
            {
                "secret": request.headers.get("SECRET"),
                "user_agent": request.headers.get("User-Agent"),
                "package": form["package"],
                "arch": form["arch"],
                "success": form["success"],
                "log": form["log"].file.read(),
                "log_filename": form["log"].filename,
            }
        )
        return web.Response(status=self.status, text=self.body)


async def start_server(collector):
    app = web.Application()
    app.router.add_post("/push_log", collector.handle)
    server = test_utils.TestServer(app)
    await server.start_server()
    return server


class TestCollectorClient(object):
    def test_push_url(self):
        client = CollectorClient("https://reworkit.example.com/", "token", "amd64")
        assert client.push_url == "https://reworkit.example.com/push_log"

    @pytest.mark.asyncio
    async def test_push_log_sends_multipart_form(self):
        collector = Collector()
        server = await start_server(collector)
        try:
            async with CollectorClient(str(server.make_url("/")), "token", "arm64") as client:
                await client.push_log("vim", False, gzip.compress(b"log body"))
        finally:
            await server.close()

        assert collector.requests == [
            {
                "secret": "token",
                "user_agent": "reworkit",
                "package": "vim",
                "arch": "arm64",
                "success": "false",
                "log": gzip.compress(b"log body"),
                "log_filename": "vim.log",
            }
        ]

    @pytest.mark.asyncio
    async def test_rejection_raises(self):
        server = await start_server(Collector(status=500, body="Invalid secret token"))
        try:
            async with CollectorClient(str(server.make_url("/")), "bad", "amd64") as client:
                with pytest.raises(TransportException) as exc:
                    await client.push_log("vim", True, gzip.compress(b""))
        finally:
            await server.close()

        assert exc.value.status_code == 500
        assert exc.value.response_body == "Invalid secret token"

    @pytest.mark.asyncio
    async def test_unreachable_collector_raises(self, unused_tcp_port):
        client = CollectorClient(f"http://127.0.0.1:{unused_tcp_port}", "token", "amd64")
        try:
            with pytest.raises(TransportException) as exc:
                await client.push_log("vim", True, gzip.compress(b""))
        finally:
            await client.close()

        assert exc.value.status_code is None

    @pytest.mark.asyncio
    async def test_shared_session_is_not_closed(self, mocker):
        session = mocker.AsyncMock()
        client = CollectorClient("http://collector", "token", "amd64", session=session)

        await client.close()

        session.close.assert_not_awaited()
