"""Submission through a list of plain JSON-RPC endpoints, blockhash caching and balance lookups."""

from __future__ import annotations

import asyncio
import sys
from typing import Any, Iterable, Mapping, Sequence

import httpx

from txrelay.primitives import (
    Instruction,
    Pubkey,
    SendError,
    advance_nonce_account,
    b58encode,
    encode_transaction,
    set_compute_unit_price,
)

DEFAULT_BLOCKHASH = b58encode(bytes(32))
BLOCKHASH_REFRESH_SECONDS = 30.0


def create_instruction_rpc(
    cu_limit: int,
    instructions: Iterable[Instruction],
    tip_amount: int,
    nonce_account: Pubkey,
    payer: Pubkey,
) -> list[Instruction]:
    """Prefix instructions with a nonce advance and a price that carries the tip.

    The tip is spread over the compute unit limit: whole lamports per unit,
    scaled to micro-lamports.
    """
    if cu_limit <= 0:
        raise ValueError(f"cu_limit must be positive, got {cu_limit}")
    cu_price_tip = int((tip_amount // cu_limit) * 1_000_000.0)
    price_ix = set_compute_unit_price(cu_price_tip)
    advance_ix = advance_nonce_account(nonce_account, payer)
    return [advance_ix, price_ix, *instructions]


async def _rpc_call(
    client: httpx.AsyncClient, url: str, method: str, params: list[Any]
) -> Any:
    body = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}
    try:
        response = await client.post(url, json=body)
    except httpx.RequestError as exc:
        raise SendError(f"Network request failed: {exc}") from exc
    if not response.is_success:
        raise SendError(
            f"HTTP error {response.status_code}: {response.text}",
            status_code=response.status_code,
        )
    try:
        reply = response.json()
    except ValueError as exc:
        raise SendError("Invalid JSON in response") from exc
    if not isinstance(reply, dict):
        raise SendError("Invalid response from RPC")
    if "error" in reply:
        raise SendError(f"RPC error: {reply['error']}")
    if "result" not in reply:
        raise SendError("No result in response")
    return reply["result"]


class SendRpcPool:
    """An ordered list of RPC endpoints tried one after another."""

    def __init__(self, urls: Sequence[str], client: httpx.AsyncClient | None = None) -> None:
        self.urls = list(urls)
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient(timeout=30.0)
        self._blockhash = DEFAULT_BLOCKHASH

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "SendRpcPool":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def send_transaction(self, tx_bytes: bytes) -> str:
        """Send through each endpoint in turn; return the first signature obtained."""
        params = [encode_transaction(tx_bytes), {"skipPreflight": True, "encoding": "base64"}]
        for index, url in enumerate(self.urls):
            try:
                result = await _rpc_call(self._client, url, "sendTransaction", params)
                if not isinstance(result, str):
                    raise SendError("Invalid result format in response")
            except SendError as exc:
                print(f"[SendRPC {index}] Failed to send transaction: {exc}", file=sys.stderr)
                continue
            print(f"[SendRPC {index}] Sent transaction: {result}")
            return result
        raise SendError("All send RPCs failed to send transaction")

    def latest_blockhash(self) -> str:
        """The most recently cached blockhash (all-zero hash until first refresh)."""
        return self._blockhash

    async def _fetch_blockhash(self, url: str) -> str:
        result = await _rpc_call(self._client, url, "getLatestBlockhash", [])
        try:
            blockhash = result["value"]["blockhash"]
        except (KeyError, TypeError) as exc:
            raise SendError("Invalid getLatestBlockhash response") from exc
        if not isinstance(blockhash, str):
            raise SendError("Invalid getLatestBlockhash response")
        return blockhash

    async def keep_blockhash_fresh(self, interval: float = BLOCKHASH_REFRESH_SECONDS) -> None:
        """Refresh the cached blockhash from the first endpoint forever."""
        while True:
            if self.urls:
                try:
                    self._blockhash = await self._fetch_blockhash(self.urls[0])
                except SendError as exc:
                    print(f"[Blockhash] Failed to fetch latest blockhash: {exc}", file=sys.stderr)
            await asyncio.sleep(interval)


def _same_mint(text: Any, mint: Pubkey) -> bool:
    if not isinstance(text, str):
        return False
    try:
        return Pubkey.from_string(text) == mint
    except ValueError:
        return False


def _find_balance(balances: Any, mint: Pubkey) -> int | None:
    if not isinstance(balances, list):
        return None
    entry = next(
        (b for b in balances if isinstance(b, dict) and _same_mint(b.get("mint"), mint)),
        None,
    )
    if entry is None:
        return None
    amount = (entry.get("uiTokenAmount") or {}).get("amount")
    try:
        value = int(amount)
    except (TypeError, ValueError):
        return None
    return value if 0 <= value < 2**64 else None


def token_balance_change(
    transaction: Mapping[str, Any] | None, mint: Pubkey | str
) -> tuple[int, int] | None:
    """Return (pre, post) token balance for ``mint`` in a getTransaction result.

    Returns None when the transaction has no metadata or neither balance is non-zero.
    """
    if isinstance(mint, str):
        mint = Pubkey.from_string(mint)
    if not transaction:
        return None
    meta = transaction.get("meta")
    if not isinstance(meta, dict):
        return None
    pre = _find_balance(meta.get("preTokenBalances"), mint) or 0
    post = _find_balance(meta.get("postTokenBalances"), mint) or 0
    if pre == 0 and post == 0:
        return None
    return pre, post