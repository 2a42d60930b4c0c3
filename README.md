# txrelay

`txrelay` builds instruction lists for tipped transactions that use a durable nonce. It also submits already signed, serialized transactions to several submission services. You can send to one service or to all of them at once.

## Installation

```
pip install txrelay
```

To run the test suite:

```
pip install "txrelay[test]"
pytest
```

## Modules

### `txrelay.primitives`

This module holds the basic types and instruction builders.

- Types:
  - `Pubkey` is a 32-byte address. `Pubkey.from_string` parses base58, and `str()` gives base58 back.
  - `AccountMeta` and `Instruction` are frozen dataclasses.
- Base58 helpers:
  - `b58encode` and `b58decode`.
  - `b58decode` raises `ValueError` on a character outside the alphabet.
- `encode_transaction` gives the standard base64 of serialized transaction bytes.
- Instruction builders:
  - `transfer` and `advance_nonce_account` build system-program instructions.
  - `set_compute_unit_price` and `set_compute_unit_limit` build compute-budget instructions.
  - These builders raise `ValueError` when an amount is out of range.
- `random_tip_account` picks one base58 address from a list and parses it.
- NextBlock helpers:
  - `nextblock_tip` builds the tip transfer.
  - `create_instruction_nextblock` builds the full instruction list.
- `SendError` is the exception the senders raise. It has an optional `status_code` for HTTP failures.

### Per-service instruction builders

Each service has its own builder:

- `create_instruction_nextblock` in `txrelay.primitives`
- `create_instruction_astralane` in `txrelay.astralane`
- `create_instruction_flashblock` in `txrelay.flashblock`
- `create_instruction_zeroslot` in `txrelay.zeroslot`
- `create_instruction_blockrazor` in `txrelay.blockrazor`

Each builder returns a list in this order:

1. A nonce advance, with the payer as authority.
2. A tip transfer from the payer to one of the service's tip accounts. The account is chosen at random, except for NextBlock, which has a single account.
3. A compute-unit price, raised by a random 1 to 100.
4. Your own instructions.

`txrelay.rpc.create_instruction_rpc` works differently:

- It has no tip transfer.
- It puts the tip into the compute-unit price instead. The price is whole lamports per unit of `cu_limit`, scaled to micro-lamports.
- It raises `ValueError` when `cu_limit` is not positive.

### HTTP senders

Each sender takes the serialized transaction bytes and an optional `httpx.AsyncClient`. Without a client, the sender opens one with a 3 s timeout and closes it again when done. The senders raise `SendError` on:

- network failures
- non-2xx replies
- invalid JSON
- replies without a signature

The three senders:

- `txrelay.astralane.send_tx_astralane(tx_bytes, url, client=None)`
  - Posts a JSON-RPC `sendTransaction` request with `skipPreflight`.
  - Tries up to three times on network errors, with a short, growing wait between attempts.
  - Returns the `result` string.
- `txrelay.flashblock.send_tx_flashblock(tx_bytes, base_url, api_key, client=None)`
  - Posts `{"transactions": [...]}` to `<base_url>/api/v2/submit-batch`.
  - Sends `api_key` as the `Authorization` header.
  - Retries the same way as the Astralane sender.
  - Returns the first of `data.transactionIds`.
- `txrelay.zeroslot.send_tx_zeroslot(tx_bytes, url, client=None)`
  - Posts a JSON-RPC `sendTransaction` request once.
  - Returns the `result` field as JSON text, so a string signature comes back wrapped in double quotes.

Each module also exposes its reply parser:

- `extract_astralane_signature`
- `extract_flashblock_signature`
- `extract_zeroslot_signature`

The request-body builders `build_send_transaction_request` and `build_submit_batch_request` are exposed too.

### `txrelay.rpc`

- `SendRpcPool(urls, client=None)` is an async context manager.
  - `await pool.send_transaction(tx_bytes)` tries each endpoint in order and returns the first signature obtained. It raises `SendError` once every endpoint has failed.
  - `await pool.keep_blockhash_fresh(interval=30.0)` runs forever. It refreshes the cached blockhash from the first endpoint with `getLatestBlockhash`.
  - `pool.latest_blockhash()` returns the cached value. Until the first refresh, this is the all-zero hash.
- `token_balance_change(transaction, mint)` reads a `getTransaction` result, given as a dict.
  - It returns `(pre, post)` token amounts for the mint.
  - It returns `None` when there is no metadata or when both amounts are zero.

### `txrelay.generic_sender`

Senders are passed in as a mapping from vendor name to an async callable that returns a signature. Known names are `rpc`, `zeroslot`, `jito`, `nextblock`, `blockrazor`, `flashblock` and `astralane`.

- `await send_to_vendor(name, transaction, senders)` sends through one vendor.
  - It raises `VendorError` for an unknown name or a missing sender.
  - It also raises `VendorError`, wrapping the cause, when the send fails.
- `await send_all_vendors_parallel(pairs, senders)` sends every `(vendor, transaction)` pair concurrently.
  - It returns the fastest success as a `VendorResult(vendor, signature, elapsed)`.
  - It raises `VendorError` if all of them fail.

```python
from functools import partial

from txrelay.astralane import send_tx_astralane
from txrelay.generic_sender import send_all_vendors_parallel

senders = {
    "astralane": partial(send_tx_astralane, url="http://localhost:8899"),
}

async def submit(tx_bytes: bytes):
    result = await send_all_vendors_parallel([("astralane", tx_bytes)], senders)
    return result.vendor, result.signature
```

### Other helpers

- `txrelay.stats.LatencyStats`
  - Thread-safe call counters.
  - Keeps a rolling window of the latencies of successful calls, 1000 by default.
  - `snapshot()` returns `(total, successful, failed, average_latency_micros)`.
- `txrelay.event_logger.EventLogger`
  - A bounded queue. `log_event` never blocks and returns `False` when an event was dropped.
  - `drain()` formats and writes every pending event and returns the lines.
  - `format_event` renders a single `Event`.
- `txrelay.system`
  - `get_memory_usage()` returns resident and virtual memory in bytes. It reads `/proc` on Linux and runs `ps` on macOS, and returns `None` elsewhere.
  - `format_bytes` formats a size in B, KB, MB or GB.

## Example

```python
import httpx

from txrelay.primitives import Pubkey
from txrelay.astralane import create_instruction_astralane, send_tx_astralane

payer = Pubkey.from_string("11111111111111111111111111111111")
nonce = Pubkey.from_string("11111111111111111111111111111111")

instructions = create_instruction_astralane([], tip=100_000, cu_price=1_000,
                                            nonce_account=nonce, payer=payer)

async def submit(tx_bytes: bytes) -> str:
    async with httpx.AsyncClient() as client:
        return await send_tx_astralane(tx_bytes, "http://localhost:8899", client)
```

## What it does not do

- It does not sign or serialize transactions. The senders take bytes that your own wallet code has produced.
- It has no built-in sender for the gRPC-based services (NextBlock, BlockRazor) or for Jito bundles. For those it provides only the tip and instruction builders. To include them in `send_all_vendors_parallel`, pass in your own sender callables.
- It has no command-line program, no subscription to transaction streams and no configuration loading.