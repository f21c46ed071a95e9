import asyncio
import itertools
import logging
from typing import Awaitable, Callable, Optional

import httpx

logger = logging.getLogger(__name__)

LAMPORTS_PER_SOL = 1_000_000_000


class RpcError(Exception):
    pass


def lamports_to_sol(lamports: float) -> float:
    return lamports / LAMPORTS_PER_SOL


def trim_address(address: str) -> str:
    """Shorten an address for display, e.g. 'AbCd...WxYz'"""
    if len(address) <= 8:
        return address
    return f"{address[:4]}...{address[-4:]}"


class SolanaRpcClient:
    """Minimal JSON-RPC client for a Solana node"""

    def __init__(self, rpc_url: str, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.rpc_url = rpc_url
        self.timeout = timeout
        self._transport = transport
        self._ids = itertools.count(1)

    async def call(self, method: str, params: list):
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(self.rpc_url, json=payload)
            response.raise_for_status()
            try:
                body = response.json()
            except ValueError as e:
                raise RpcError(f"{method} returned a non-JSON body") from e

        if not isinstance(body, dict):
            raise RpcError(f"{method} returned a non-object body")

        error = body.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else error
            raise RpcError(str(message or "RPC error"))
        return body.get("result")

    async def get_balance(self, address: str) -> int:
        """Balance of an account in lamports"""
        result = await self.call("getBalance", [address])
        value = result.get("value") if isinstance(result, dict) else None
        # bool is an int subclass but never a balance
        if not isinstance(value, int) or isinstance(value, bool):
            raise RpcError("Malformed getBalance response")
        return value


BalanceCallback = Callable[[int], Awaitable[None]]


class WalletBalanceWatcher:
    """
    Polls one wallet's balance and invokes a callback whenever it changes.

    The first successful read is always reported. Failed reads are logged and
    retried on the next tick without reporting anything.
    """

    def __init__(self, client: SolanaRpcClient, address: str, on_change: BalanceCallback, interval: float = 5.0):
        self.client = client
        self.address = address
        self.on_change = on_change
        self.interval = interval
        self.last_balance: Optional[int] = None
        self._task: Optional[asyncio.Task] = None

    async def poll_once(self) -> Optional[int]:
        try:
            balance = await self.client.get_balance(self.address)
        except (httpx.HTTPError, RpcError) as e:
            logger.error(f"Failed to fetch balance for {trim_address(self.address)}: {str(e)}")
            return None

        if balance != self.last_balance:
            self.last_balance = balance
            await self.on_change(balance)
        return balance

    async def _run(self):
        while True:
            await self.poll_once()
            await asyncio.sleep(self.interval)

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run())
        return self._task

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.warning(f"Balance watcher for {trim_address(self.address)} ended with error: {str(e)}")
        self._task = None
