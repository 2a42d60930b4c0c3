"""Instruction building and batch submission for the Flashblock relay."""

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

FLASHBLOCK_TIP_ACCOUNTS = (
    "FLaShB3iXXTWE1vu9wQsChUKq3HFtpMAhb8kAh1pf1wi",
    "FLashhsorBmM9dLpuq6qATawcpqk1Y2aqaZfkd48iT3W",
    "FLaSHJNm5dWYzEgnHJWWJP5ccu128Mu61NJLxUf7mUXU",
    "FLaSHR4Vv7sttd6TyDF4yR1bJyAxRwWKbohDytEMu3wL",
    "FLASHRzANfcAKDuQ3RXv9hbkBy4WVEKDzoAgxJ56DiE4",
    "FLasHstqx11M8W56zrSEqkCyhMCCpr6ze6Mjdvqope5s",
    "FLAShWTjcweNT4NSotpjpxAkwxUr2we3eXQGhpTVzRwy",
    "FLasHXTqrbNvpWFB6grN47HGZfK6pze9HLNTgbukfPSk",
    "FLAshyAyBcKb39KPxSzXcepiS8iDYUhDGwJcJDPX4g2B",
    "FLAsHZTRcf3Dy1APaz6j74ebdMC6Xx4g6i9YxjyrDybR",
)

SUBMIT_BATCH_PATH = "/api/v2/submit-batch"
MAX_ATTEMPTS = 3
RETRY_STEP_SECONDS = 0.1


def flashblock_tip(tip: int, from_pubkey: Pubkey) -> Instruction:
    """Transfer ``tip`` lamports to a randomly chosen Flashblock tip account."""
    tip_account = Pubkey.from_string(random.choice(FLASHBLOCK_TIP_ACCOUNTS))
    return transfer(from_pubkey, tip_account, tip)


def create_instruction_flashblock(
    instructions: Iterable[Instruction],
    tip: int,
    cu_price: int,
    nonce_account: Pubkey,
    payer: Pubkey,
) -> list[Instruction]:
    """Prefix instructions with nonce advance, Flashblock tip and jittered compute price."""
    tip_ix = flashblock_tip(tip, payer)
    return assemble(nonce_account, payer, tip_ix, cu_price, instructions)


def build_submit_batch_request(tx_b64: str) -> dict[str, Any]:
    """Body of a submit-batch request holding one base64 transaction."""
    return {"transactions": [tx_b64]}


def extract_flashblock_signature(response_json: Any) -> str:
    """Return the first transaction id in a submit-batch reply, or raise SendError."""
    if not isinstance(response_json, dict) or "data" not in response_json:
        raise SendError("No data in response")
    data = response_json["data"]
    if not isinstance(data, dict) or "transactionIds" not in data:
        raise SendError("No transaction IDs in response data")
    transaction_ids = data["transactionIds"]
    if not isinstance(transaction_ids, list):
        raise SendError("Invalid transaction IDs format")
    if not transaction_ids:
        raise SendError("No transaction IDs in response")
    first_id = transaction_ids[0]
    return first_id if isinstance(first_id, str) else ""


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
    client: httpx.AsyncClient, url: str, api_key: str, body: dict[str, Any]
) -> httpx.Response:
    headers = {"Content-Type": "application/json", "Authorization": api_key}
    for attempt in range(1, MAX_ATTEMPTS + 1):
        try:
            return await client.post(url, json=body, headers=headers)
        except httpx.RequestError as exc:
            if attempt == MAX_ATTEMPTS:
                print(f"[FLASHBLOCK_DEBUG] Network request failed: {exc}")
                raise SendError(f"Network request failed: {exc}") from exc
            await asyncio.sleep(RETRY_STEP_SECONDS * attempt)
    raise SendError("All retry attempts failed")


async def _send(
    tx_bytes: bytes, base_url: str, api_key: str, client: httpx.AsyncClient
) -> str:
    total_start = time.perf_counter()
    body = build_submit_batch_request(encode_transaction(tx_bytes))
    url = f"{base_url}{SUBMIT_BATCH_PATH}"

    network_start = time.perf_counter()
    response = await _post_with_retry(client, url, api_key, body)
    network_time = time.perf_counter() - network_start

    print(f"[FLASHBLOCK_DEBUG] Response status: {response.status_code}")
    if not response.is_success:
        error_text = response.text
        print(f"[FLASHBLOCK] HTTP error {response.status_code}: {error_text}")
        raise SendError(
            f"HTTP error {response.status_code}: {error_text}",
            status_code=response.status_code,
        )

    try:
        response_json = response.json()
    except ValueError as exc:
        raise SendError("Invalid JSON in response") from exc
    print(f"[FLASHBLOCK_DEBUG] Raw response JSON: {json.dumps(response_json, indent=2)}")

    signature = extract_flashblock_signature(response_json)

    total_time = time.perf_counter() - total_start
    processing_time = total_time - network_time
    prefix = "[FLASHBLOCK_PROFILE]"
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


async def send_tx_flashblock(
    tx_bytes: bytes,
    base_url: str,
    api_key: str,
    client: httpx.AsyncClient | None = None,
) -> str:
    """Submit a serialized signed transaction; return its signature."""
    if client is None:
        async with _new_client() as owned:
            return await _send(tx_bytes, base_url, api_key, owned)
    return await _send(tx_bytes, base_url, api_key, client)