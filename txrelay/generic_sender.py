"""Dispatching a transaction to named relays, one at a time or all at once."""

from __future__ import annotations

import asyncio
import sys
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Mapping, Sequence

Sender = Callable[[Any], Awaitable[str]]

VENDOR_LABELS = {
    "rpc": "RPC",
    "zeroslot": "ZeroSlot",
    "jito": "Jito",
    "nextblock": "NextBlock",
    "blockrazor": "BlockRazor",
    "flashblock": "Flashblock",
    "astralane": "Astralane",
}


class VendorError(Exception):
    """Raised when a vendor is unknown or a send through it failed."""

    def __init__(self, message: str, vendor: str | None = None) -> None:
        super().__init__(message)
        self.vendor = vendor


@dataclass(frozen=True)
class VendorResult:
    vendor: str
    signature: str
    elapsed: float


def _stamp() -> str:
    now = datetime.now(timezone.utc)
    return f"{now:%Y-%m-%d %H:%M:%S}.{now.microsecond // 1000:03d}"


async def send_to_vendor(
    vendor_name: str, transaction: Any, senders: Mapping[str, Sender]
) -> str:
    """Send ``transaction`` through the named vendor's sender; return its signature."""
    label = VENDOR_LABELS.get(vendor_name)
    if label is None:
        raise VendorError(f"Unknown vendor: {vendor_name}", vendor_name)
    sender = senders.get(vendor_name)
    if sender is None:
        raise VendorError(f"{label} send failed: sender not configured", vendor_name)
    try:
        return await sender(transaction)
    except Exception as exc:
        raise VendorError(f"{label} send failed: {exc}", vendor_name) from exc


async def _timed_send(
    vendor_name: str, transaction: Any, senders: Mapping[str, Sender]
) -> tuple[str, str | Exception, float]:
    start = time.perf_counter()
    try:
        outcome: str | Exception = await send_to_vendor(vendor_name, transaction, senders)
    except Exception as exc:
        outcome = exc
    return vendor_name, outcome, time.perf_counter() - start


async def send_all_vendors_parallel(
    vendor_transactions: Sequence[tuple[str, Any]], senders: Mapping[str, Sender]
) -> VendorResult:
    """Send every (vendor, transaction) pair concurrently; return the fastest success."""
    print(
        f"[{_stamp()}] - [GENERIC_SENDER] Starting parallel send to "
        f"{len(vendor_transactions)} vendors"
    )
    outcomes = await asyncio.gather(
        *(_timed_send(name, tx, senders) for name, tx in vendor_transactions)
    )

    successes = []
    for vendor_name, outcome, elapsed in outcomes:
        if isinstance(outcome, Exception):
            print(f"[GENERIC_SENDER] {vendor_name} failed: {outcome}", file=sys.stderr)
        else:
            successes.append(VendorResult(vendor_name, outcome, elapsed))

    if not successes:
        raise VendorError("All vendors failed to send transaction")
    return min(successes, key=lambda result: result.elapsed)