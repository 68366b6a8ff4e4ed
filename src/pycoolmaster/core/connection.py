# src/pycoolmaster/core/connection.py
import asyncio
import inspect
import logging
from types import TracebackType

from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from .constants import DEFAULT_PORT, LINE_ENDING, OK_LINE, PROMPT

log = logging.getLogger(__name__)


class TransportError(ConnectionError):
    """The controller could not be reached, timed out, or refused a command."""


class CoolMasterConnection:
    """Line-oriented TCP link to a CoolMasterNet controller's ASCII port."""

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        timeout: float = 5.0,
        retries: int = 3,
        retry_wait: float = 1.0,
    ):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.retries = retries
        self.retry_wait = retry_wait
        self.reader: asyncio.StreamReader | None = None
        self.writer: asyncio.StreamWriter | None = None
        self._lock = asyncio.Lock()

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    async def connect(self) -> None:
        if self.is_connected():
            return
        log.info(f"Connecting to CoolMasterNet at {self.address}...")
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.retries),
                wait=wait_fixed(self.retry_wait),
                retry=retry_if_exception_type((OSError, asyncio.TimeoutError)),
                reraise=True,
            ):
                with attempt:
                    await self._open()
        except (OSError, asyncio.TimeoutError, asyncio.IncompleteReadError) as e:
            log.error(f"Failed to connect to {self.address}: {e}")
            raise TransportError(f"Could not connect to CoolMasterNet unit {self.address}") from e
        log.info("Connection successful.")

    async def _open(self) -> None:
        self.reader, self.writer = await asyncio.wait_for(
            asyncio.open_connection(self.host, self.port),
            timeout=self.timeout,
        )
        try:
            # An empty line makes the controller print its prompt
            await self._write(LINE_ENDING)
            await asyncio.wait_for(self.reader.readuntil(PROMPT), timeout=self.timeout)
        except BaseException:
            await self.close()
            raise

    async def close(self) -> None:
        if self.writer:
            try:
                self.writer.close()
                res = self.writer.wait_closed()
                if inspect.isawaitable(res):
                    await res
            except OSError as e:
                log.debug(f"Error while closing connection: {e}")
            self.writer = None
            self.reader = None
            log.info("Connection closed.")

    def is_connected(self) -> bool:
        if self.writer is None:
            return False
        return not self.writer.is_closing()

    async def __aenter__(self) -> "CoolMasterConnection":
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def _write(self, text: str) -> None:
        if not self.writer:
            raise TransportError("Not connected.")
        data = text.encode("ascii")
        if log.isEnabledFor(logging.DEBUG):
            log.debug(f"WRITE {data!r}")
        self.writer.write(data)
        await self.writer.drain()

    async def _read_reply(self) -> str:
        if not self.reader:
            raise TransportError("Not connected.")
        data = await asyncio.wait_for(self.reader.readuntil(PROMPT), timeout=self.timeout)
        if log.isEnabledFor(logging.DEBUG):
            log.debug(f"READ {data!r}")
        return data[: -len(PROMPT)].decode("ascii", errors="replace")

    async def send_command(self, command: str) -> str:
        """
        Send one command line and return the reply text before the OK line.

        Raises TransportError when the link is down, the controller does not
        answer in time, or the controller answers with an error instead of OK.
        """
        async with self._lock:
            if not self.is_connected():
                raise TransportError("Not connected.")
            if not command.isascii():
                raise TransportError(f"Cannot send {command!r}: not ASCII")
            try:
                await self._write(command + LINE_ENDING)
                reply = await self._read_reply()
            except (OSError, asyncio.TimeoutError, asyncio.IncompleteReadError) as e:
                await self.close()
                raise TransportError(f"No reply to {command!r} from {self.address}: {e!r}") from e

        lines = [line.strip() for line in reply.splitlines() if line.strip()]
        if lines and lines[0] == command:
            lines = lines[1:]
        if not lines or lines[-1] != OK_LINE:
            raise TransportError(f"Controller rejected {command!r}: {' '.join(lines) or 'no reply'}")
        return "\n".join(lines[:-1])
