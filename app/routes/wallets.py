import logging
from typing import Optional
from fastapi import APIRouter, Depends, Request, WebSocket
from pydantic import BaseModel
import httpx

from app.services.solana import RpcError, SolanaRpcClient, WalletBalanceWatcher, lamports_to_sol, trim_address

router = APIRouter(tags=["wallets"])
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class WalletBalance(BaseModel):
    address: str
    display_address: str
    lamports: Optional[int] = None
    sol: Optional[float] = None


def get_rpc_client(request: Request) -> SolanaRpcClient:
    return request.app.state.rpc_client


def balance_message(address: str, lamports: Optional[int]) -> WalletBalance:
    return WalletBalance(
        address=address,
        display_address=trim_address(address),
        lamports=lamports,
        sol=lamports_to_sol(lamports) if lamports is not None else None,
    )


@router.get("/wallets/{address}/balance", response_model=WalletBalance)
async def get_wallet_balance(address: str, client: SolanaRpcClient = Depends(get_rpc_client)):
    """Current balance of a wallet; null when the RPC node cannot be reached"""
    try:
        lamports = await client.get_balance(address)
    except (httpx.HTTPError, RpcError) as e:
        logger.error(f"Failed to fetch balance for {trim_address(address)}: {str(e)}")
        lamports = None
    return balance_message(address, lamports)


@router.websocket("/wallets/{address}/balance/stream")
async def stream_wallet_balance(websocket: WebSocket, address: str):
    """Push the wallet's balance on connect and again whenever it changes"""
    await websocket.accept()
    settings = websocket.app.state.settings

    async def send_balance(lamports: int):
        await websocket.send_json(balance_message(address, lamports).model_dump())

    watcher = WalletBalanceWatcher(
        websocket.app.state.rpc_client,
        address,
        on_change=send_balance,
        interval=settings.balance_poll_seconds,
    )
    watcher.start()
    try:
        # Incoming frames of any type are ignored; only the disconnect matters
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    finally:
        await watcher.stop()
    logger.info(f"Balance stream closed for {trim_address(address)}")
