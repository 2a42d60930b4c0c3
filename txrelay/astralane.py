"""Instruction building and JSON-RPC submission for the Astralane relay."""

from __future__ import annotations

import asyncio
import json
import random
import time
from datetime import datetime, timezone
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

ASTRALANE_TIP_ACCOUNTS = (
    "astrazznxsGUhWShqgNtAdfrzP2G83DzcWVJDxwV9bF",
    "astra4uejePWneqNaJKuFFA8oonqCE1sqF6b45kDMZm",
    "astra9xWY93QyfG6yM8zwsKsRodscjQ2uU2HKNL5prk",
    "astraRVUuTHjpwEVvNBeQEgwYx9w9CFyfxjYoobCZhL",
)

MAX_ATTEMPTS = 3
RETRY_STEP_SECONDS = 0.1


def astralane_tip(tip: int, from_pubkey: Pubkey) -> Instruction:
    """Transfer ``tip`` lamports to a randomly chosen Astralane tip account."""
    tip_account = Pubkey.from_string(random.choice(ASTRALANE_TIP_ACCOUNTS))
    return transfer(from_pubkey, tip_account, tip)


def create_instruction_astralane(
    instructions: Iterable[Instruction],
    tip: int,
    cu_price: int,
    nonce_account: Pubkey,
    payer: Pubkey,
) -> list[Instruction]:
    """Prefix instructions with nonce advance, Astralane tip and jittered compute price."""
    tip_ix = astralane_tip(tip, payer)
    return assemble(nonce_account, payer, tip_ix, cu_price, instructions)


def build_send_transaction_request(tx_b64: str) -> dict[str, Any]:
    """JSON-RPC body for ``sendTransaction`` with a base64 transaction."""
    return {
        "jsonrpc": "2.0",
        "id": 1,
        "method": "sendTransaction",
        "params": [
            tx_b64,
            {"skipPreflight": True, "encoding": "base64"},
        ],
    }


def extract_astralane_signature(response_json: Any) -> str:
    """Return the signature in a JSON-RPC reply, or raise SendError."""
    if isinstance(response_json, dict) and "result" in response_json:
        result = response_json["result"]
        if isinstance(result, str):
            return result
        raise SendError("Invalid result format in response")
    if isinstance(response_json, dict) and "error" in response_json:
        raise SendError(f"Astralane error: {json.dumps(response_json['error'])}")
    raise SendError("No result in response")


def _new_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(3.0, connect=0.5),
        limits=httpx.Limits(max_keepalive_connections=50, keepalive_expiry=120.0),
    )


def _stamp() -> str:
    now = datetime.now(timezone.utc)
    return f"{now:%Y-%m-%d %H:%M:%S}.{now.microsecond // 1000:03d}"


def _share(part: float, total: float) -> float:
    return part / total * 100.0 if total > 0 else 0.0


async def _post_with_retry(
    client: httpx.AsyncClient, url: str, body: dict[str, Any]
) -> httpx.Response:
    for attempt in range(1, MAX_ATTEMPTS + 1):
        try:
            return await client.post(
                url, json=body, headers={"Content-Type": "application/json"}
            )
        except httpx.RequestError as exc:
            if attempt == MAX_ATTEMPTS:
                print(f"[ASTRALANE_DEBUG] Network request failed: {exc}")
                raise SendError(f"Network request failed: {exc}") from exc
            await asyncio.sleep(RETRY_STEP_SECONDS * attempt)
    raise SendError("All retry attempts failed")


async def _send(tx_bytes: bytes, url: str, client: httpx.AsyncClient) -> str:
    total_start = time.perf_counter()
    body = build_send_transaction_request(encode_transaction(tx_bytes))

    network_start = time.perf_counter()
    response = await _post_with_retry(client, url, body)
    network_time = time.perf_counter() - network_start

    if not response.is_success:
        error_text = response.text
        print(f"[ASTRALANE] HTTP error {response.status_code}: {error_text}")
        raise SendError(
            f"HTTP error {response.status_code}: {error_text}",
            status_code=response.status_code,
        )

    try:
        response_json = response.json()
    except ValueError as exc:
        raise SendError("Invalid JSON in response") from exc

    signature = extract_astralane_signature(response_json)

    total_time = time.perf_counter() - total_start
    processing_time = total_time - network_time
    prefix = "[ASTRALANE_PROFILE]"
    print(f"[{_stamp()}] - {prefix} Performance breakdown:")
    print(f"[{_stamp()}] - {prefix}   • Total time: {total_time * 1e3:.2f}ms")
    print(
        f"[{_stamp()}] - {prefix}   • Network time: {network_time * 1e3:.2f}ms "
        f"({_share(network_time, total_time):.1f}%)"
    )
    print(
        f"[{_stamp()}] - {prefix}   • Processing time: {processing_time * 1e3:.2f}ms "
        f"({_share(processing_time, total_time):.1f}%)"
    )
    print(f"[{_stamp()}] - {prefix}   • Signature: {signature}")
    return signature


async def send_tx_astralane(
    tx_bytes: bytes, url: str, client: httpx.AsyncClient | None = None
) -> str:
    """Submit a serialized signed transaction; return its signature."""
    if client is None:
        async with _new_client() as owned:
            return await _send(tx_bytes, url, owned)
    return await _send(tx_bytes, url, client)