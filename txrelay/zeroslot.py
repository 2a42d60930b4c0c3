"""Instruction building and JSON-RPC submission for the ZeroSlot relay."""

from __future__ import annotations

import json
import random
import sys
from typing import Any, Iterable

import httpx

from txrelay.primitives import (
    Instruction,
    Pubkey,
    SendError,
    assemble,
    encode_transaction,
    transfer,
)

ZEROSLOT_TIP_ACCOUNTS = (
    "4HiwLEP2Bzqj3hM2ENxJuzhcPCdsafwiet3oGkMkuQY4",
    "7toBU3inhmrARGngC7z6SjyP85HgGMmCTEwGNRAcYnEK",
    "8mR3wB1nh4D6J9RUCugxUpc6ya8w38LPxZ3ZjcBhgzws",
    "6SiVU5WEwqfFapRuYCndomztEwDjvS5xgtEof3PLEGm9",
    "TpdxgNJBWZRL8UXF5mrEsyWxDWx9HQexA9P1eTWQ42p",
    "D8f3WkQu6dCF33cZxuAsrKHrGsqGP2yvAHf8mX6RXnwf",
    "GQPFicsy3P3NXxB5piJohoxACqTvWE9fKpLgdsMduoHE",
    "Ey2JEr8hDkgN8qKJGrLf2yFjRhW7rab99HVxwi5rcvJE",
    "4iUgjMT8q2hNZnLuhpqZ1QtiV8deFPy2ajvvjEpKKgsS",
    "3Rz8uD83QsU8wKvZbgWAPvCNDU6Fy8TSZTMcPm3RB6zt",
)

LARGE_TRANSACTION_CHARS = 10_000


def zeroslot_tip(tip: int, from_pubkey: Pubkey) -> Instruction:
    """Transfer ``tip`` lamports to a randomly chosen ZeroSlot tip account."""
    tip_account = Pubkey.from_string(random.choice(ZEROSLOT_TIP_ACCOUNTS))
    return transfer(from_pubkey, tip_account, tip)


def create_instruction_zeroslot(
    instructions: Iterable[Instruction],
    tip: int,
    cu_price: int,
    nonce_account: Pubkey,
    payer: Pubkey,
) -> list[Instruction]:
    """Prefix instructions with nonce advance, ZeroSlot tip and jittered compute price."""
    tip_ix = zeroslot_tip(tip, payer)
    return assemble(nonce_account, payer, tip_ix, cu_price, instructions)


def _build_request(tx_b64: str) -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": 1,
        "method": "sendTransaction",
        "params": [
            tx_b64,
            {"encoding": "base64", "skipPreflight": True},
        ],
    }


def extract_zeroslot_signature(response_json: Any) -> str:
    """Return the JSON text of the ``result`` field, or raise SendError.

    The result is kept in its JSON form, so a string signature comes back
    wrapped in double quotes.
    """
    if isinstance(response_json, dict):
        if "result" in response_json:
            return json.dumps(response_json["result"], separators=(",", ":"))
        if "error" in response_json:
            print(
                f"Failed to send transaction: {json.dumps(response_json['error'])}",
                file=sys.stderr,
            )
            raise SendError("Failed to send transaction")
    raise SendError("Invalid response from sendTransaction")


def _new_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(3.0, connect=0.5),
        limits=httpx.Limits(max_keepalive_connections=50, keepalive_expiry=120.0),
    )


async def _send(tx_bytes: bytes, url: str, client: httpx.AsyncClient) -> str:
    tx_b64 = encode_transaction(tx_bytes)
    if len(tx_b64) > LARGE_TRANSACTION_CHARS:
        print(f"[WARNING] Large transaction detected: {len(tx_b64)} bytes", file=sys.stderr)

    try:
        response = await client.post(
            url,
            json=_build_request(tx_b64),
            headers={"Content-Type": "application/json"},
        )
    except httpx.RequestError as exc:
        raise SendError(f"Network request failed: {exc}") from exc

    if not response.is_success:
        error_text = response.text
        print(f"HTTP error {response.status_code}: {error_text}", file=sys.stderr)
        raise SendError(
            f"HTTP error {response.status_code}: {error_text}",
            status_code=response.status_code,
        )
    print("Transaction sent successfully")

    try:
        response_json = response.json()
    except ValueError as exc:
        raise SendError("Invalid JSON in response") from exc
    return extract_zeroslot_signature(response_json)


async def send_tx_zeroslot(
    tx_bytes: bytes, url: str, client: httpx.AsyncClient | None = None
) -> str:
    """Submit a serialized signed transaction; return the reply's result as JSON text."""
    if client is None:
        async with _new_client() as owned:
            return await _send(tx_bytes, url, owned)
    return await _send(tx_bytes, url, client)