from typing import Optional
import asyncio

import aiohttp

from reworkit.common.config.constants import (
    PUSH_LOG_PATH,
    REQUEST_TIMEOUT_SECONDS,
    SECRET_HEADER,
    USER_AGENT,
)
from reworkit.common.config.logging_config import get_logger
from reworkit.common.exceptions.transport_exceptions import TransportException


logger = get_logger(__name__)


class CollectorClient:
    """HTTP client delivering build results to the collector's ``/push_log``."""

    def __init__(
        self,
        base_url: str,
        secret_token: str,
        arch: str,
        timeout_seconds: float = REQUEST_TIMEOUT_SECONDS,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._secret_token = secret_token
        self._arch = arch
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session = session
        self._owns_session = session is None

    @property
    def push_url(self) -> str:
        return f"{self._base_url}{PUSH_LOG_PATH}"

    async def __aenter__(self) -> "CollectorClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def start(self) -> None:
        if self._session is None:
            self._session = aiohttp.ClientSession(
                headers={"User-Agent": USER_AGENT},
                timeout=self._timeout,
            )

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    def build_form(self, package: str, success: bool, compressed_log: bytes) -> aiohttp.FormData:
        form = aiohttp.FormData()
        form.add_field("package", package)
        form.add_field("arch", self._arch)
        form.add_field("success", "true" if success else "false")
        form.add_field(
            "log",
            compressed_log,
            filename=f"{package}.log",
            content_type="application/gzip",
        )
        return form

    async def push_log(self, package: str, success: bool, compressed_log: bytes) -> None:
        if self._session is None:
            await self.start()

        form = self.build_form(package, success, compressed_log)

        try:
            async with self._session.post(
                self.push_url,
                data=form,
                headers={SECRET_HEADER: self._secret_token},
            ) as response:
                if response.status >= 300:
                    body = await response.text()
                    raise TransportException(
                        message=f"Collector rejected {package}: {response.status} {body}",
                        url=self.push_url,
                        status_code=response.status,
                        response_body=body,
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportException(
                message=f"Failed to reach collector: {e}",
                url=self.push_url,
                cause=e,
            )

        logger.info(f"Delivered {package} ({len(compressed_log)} bytes)")
