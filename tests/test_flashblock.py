import base64
import json
import struct

import httpx
import pytest
import respx

from txrelay.flashblock import (
    FLASHBLOCK_TIP_ACCOUNTS,
    build_submit_batch_request,
    create_instruction_flashblock,
    extract_flashblock_signature,
    flashblock_tip,
    send_tx_flashblock,
)
from txrelay.primitives import (
    Instruction,
    Pubkey,
    SendError,
    advance_nonce_account,
    transfer,
)

PAYER = Pubkey(bytes([1]) * 32)
NONCE = Pubkey(bytes([2]) * 32)
PROGRAM = Pubkey(bytes([3]) * 32)
BASE_URL = "https://relay.example.com"
SUBMIT_URL = BASE_URL + "/api/v2/submit-batch"


def test_flashblock_tip_targets_known_account():
    ix = flashblock_tip(5000, PAYER)
    target = ix.accounts[1].pubkey
    assert str(target) in FLASHBLOCK_TIP_ACCOUNTS
    assert ix == transfer(PAYER, target, 5000)


def test_tip_accounts_all_parse():
    for account in FLASHBLOCK_TIP_ACCOUNTS:
        assert str(Pubkey.from_string(account)) == account


def test_create_instruction_order_and_price_jitter():
    user_ix = Instruction(PROGRAM, (), b"\x09")
    result = create_instruction_flashblock([user_ix], 7000, 1000, NONCE, PAYER)
    assert len(result) == 4
    assert result[0] == advance_nonce_account(NONCE, PAYER)
    assert str(result[1].accounts[1].pubkey) in FLASHBLOCK_TIP_ACCOUNTS
    tag, price = struct.unpack("<BQ", result[2].data)
    assert tag == 3
    assert 1001 <= price <= 1100
    assert result[3] == user_ix


def test_build_submit_batch_request():
    assert build_submit_batch_request("AAEC") == {"transactions": ["AAEC"]}


def test_extract_signature_first_id():
    reply = {"data": {"transactionIds": ["sigA", "sigB"]}}
    assert extract_flashblock_signature(reply) == "sigA"


def test_extract_signature_non_string_first_id_is_empty():
    assert extract_flashblock_signature({"data": {"transactionIds": [12]}}) == ""


@pytest.mark.parametrize(
    "reply, message",
    [
        ({}, "No data in response"),
        ({"data": {}}, "No transaction IDs in response data"),
        ({"data": {"transactionIds": "sigA"}}, "Invalid transaction IDs format"),
        ({"data": {"transactionIds": []}}, "No transaction IDs in response"),
    ],
)
def test_extract_signature_errors(reply, message):
    with pytest.raises(SendError) as info:
        extract_flashblock_signature(reply)
    assert str(info.value) == message


@pytest.mark.asyncio
async def test_send_success_posts_batch_with_auth():
    tx_bytes = b"\x01\x02\x03"
    with respx.mock:
        route = respx.post(SUBMIT_URL).mock(
            return_value=httpx.Response(200, json={"data": {"transactionIds": ["sigX"]}})
        )
        async with httpx.AsyncClient() as client:
            sig = await send_tx_flashblock(tx_bytes, BASE_URL, "placeholder", client)
    assert sig == "sigX"
    request = route.calls.last.request
    assert request.headers["Authorization"] == "placeholder"
    body = json.loads(request.content)
    assert base64.b64decode(body["transactions"][0]) == tx_bytes


@pytest.mark.asyncio
async def test_send_http_error_raises_with_status():
    with respx.mock:
        respx.post(SUBMIT_URL).mock(return_value=httpx.Response(500, text="down"))
        async with httpx.AsyncClient() as client:
            with pytest.raises(SendError) as info:
                await send_tx_flashblock(b"\x00", BASE_URL, "placeholder", client)
    assert info.value.status_code == 500
    assert "down" in str(info.value)


@pytest.mark.asyncio
async def test_send_retries_after_network_error():
    with respx.mock:
        route = respx.post(SUBMIT_URL).mock(
            side_effect=[
                httpx.ConnectError("unreachable"),
                httpx.Response(200, json={"data": {"transactionIds": ["sigY"]}}),
            ]
        )
        async with httpx.AsyncClient() as client:
            sig = await send_tx_flashblock(b"\x00", BASE_URL, "placeholder", client)
    assert sig == "sigY"
    assert route.call_count == 2


@pytest.mark.asyncio
async def test_send_gives_up_after_three_attempts():
    with respx.mock:
        route = respx.post(SUBMIT_URL).mock(side_effect=httpx.ConnectError("unreachable"))
        async with httpx.AsyncClient() as client:
            with pytest.raises(SendError) as info:
                await send_tx_flashblock(b"\x00", BASE_URL, "placeholder", client)
    assert route.call_count == 3
    assert str(info.value).startswith("Network request failed")


@pytest.mark.asyncio
async def test_send_reply_without_data_raises():
    with respx.mock:
        respx.post(SUBMIT_URL).mock(return_value=httpx.Response(200, json={"ok": True}))
        async with httpx.AsyncClient() as client:
            with pytest.raises(SendError) as info:
                await send_tx_flashblock(b"\x00", BASE_URL, "placeholder", client)
    assert str(info.value) == "No data in response"