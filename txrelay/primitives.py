"""Keys, instructions and instruction builders shared by the transaction senders."""

from __future__ import annotations

import base64
import random
import struct
from dataclasses import dataclass, field
from typing import Iterable, Sequence

_B58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_B58_INDEX = {char: index for index, char in enumerate(_B58_ALPHABET)}

_U32_MAX = 2**32 - 1
_U64_MAX = 2**64 - 1

NEXTBLOCK_TIP_ACCOUNT = "NEXTbLoCkB51HpLBLojQfpyVAMorm3zzKg7w9NFdqid"


def b58encode(data: bytes) -> str:
    """Encode bytes with the Bitcoin base58 alphabet."""
    data = bytes(data)
    number = int.from_bytes(data, "big")
    digits = []
    while number:
        number, rem = divmod(number, 58)
        digits.append(_B58_ALPHABET[rem])
    leading = len(data) - len(data.lstrip(b"\x00"))
    return "1" * leading + "".join(reversed(digits))


def b58decode(text: str) -> bytes:
    """Decode a base58 string; raise ValueError on characters outside the alphabet."""
    number = 0
    for char in text:
        try:
            number = number * 58 + _B58_INDEX[char]
        except KeyError:
            raise ValueError(f"invalid base58 character: {char!r}") from None
    leading = len(text) - len(text.lstrip("1"))
    body = number.to_bytes((number.bit_length() + 7) // 8, "big") if number else b""
    return b"\x00" * leading + body


@dataclass(frozen=True)
class Pubkey:
    """A 32-byte account address."""

    raw: bytes

    def __post_init__(self) -> None:
        raw = bytes(self.raw)
        if len(raw) != 32:
            raise ValueError(f"public key must be 32 bytes, got {len(raw)}")
        object.__setattr__(self, "raw", raw)

    @classmethod
    def from_string(cls, text: str) -> "Pubkey":
        """Parse a base58 address."""
        return cls(b58decode(text))

    def __bytes__(self) -> bytes:
        return self.raw

    def __str__(self) -> str:
        return b58encode(self.raw)


SYSTEM_PROGRAM_ID = Pubkey(bytes(32))
COMPUTE_BUDGET_PROGRAM_ID = Pubkey.from_string("ComputeBudget111111111111111111111111111111")
RECENT_BLOCKHASHES_SYSVAR_ID = Pubkey.from_string("SysvarRecentB1ockHashes11111111111111111111")


@dataclass(frozen=True)
class AccountMeta:
    pubkey: Pubkey
    is_signer: bool
    is_writable: bool


@dataclass(frozen=True)
class Instruction:
    program_id: Pubkey
    accounts: tuple[AccountMeta, ...] = field(default_factory=tuple)
    data: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "accounts", tuple(self.accounts))
        object.__setattr__(self, "data", bytes(self.data))


class SendError(Exception):
    """Raised when a transaction could not be submitted."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _check_range(name: str, value: int, maximum: int) -> int:
    if not 0 <= value <= maximum:
        raise ValueError(f"{name} out of range: {value}")
    return value


def encode_transaction(tx_bytes: bytes) -> str:
    """Standard base64 of a serialized transaction."""
    return base64.b64encode(bytes(tx_bytes)).decode("ascii")


def transfer(from_pubkey: Pubkey, to_pubkey: Pubkey, lamports: int) -> Instruction:
    """System program transfer of ``lamports`` from one account to another."""
    _check_range("lamports", lamports, _U64_MAX)
    return Instruction(
        SYSTEM_PROGRAM_ID,
        (
            AccountMeta(from_pubkey, is_signer=True, is_writable=True),
            AccountMeta(to_pubkey, is_signer=False, is_writable=True),
        ),
        struct.pack("<IQ", 2, lamports),
    )


def advance_nonce_account(nonce_pubkey: Pubkey, authority: Pubkey) -> Instruction:
    """System program instruction advancing a durable nonce account."""
    return Instruction(
        SYSTEM_PROGRAM_ID,
        (
            AccountMeta(nonce_pubkey, is_signer=False, is_writable=True),
            AccountMeta(RECENT_BLOCKHASHES_SYSVAR_ID, is_signer=False, is_writable=False),
            AccountMeta(authority, is_signer=True, is_writable=False),
        ),
        struct.pack("<I", 4),
    )


def set_compute_unit_price(micro_lamports: int) -> Instruction:
    """Compute budget instruction setting the price per compute unit."""
    _check_range("micro_lamports", micro_lamports, _U64_MAX)
    return Instruction(COMPUTE_BUDGET_PROGRAM_ID, (), struct.pack("<BQ", 3, micro_lamports))


def set_compute_unit_limit(units: int) -> Instruction:
    """Compute budget instruction setting the compute unit limit."""
    _check_range("units", units, _U32_MAX)
    return Instruction(COMPUTE_BUDGET_PROGRAM_ID, (), struct.pack("<BI", 2, units))


def random_tip_account(accounts: Sequence[str]) -> Pubkey:
    """Pick one of the given base58 addresses at random."""
    if not accounts:
        raise ValueError("no tip accounts to choose from")
    return Pubkey.from_string(random.choice(list(accounts)))


def jittered_price(cu_price: int) -> int:
    """Add a random 1..100 to a compute unit price."""
    return cu_price + random.randint(1, 100)


def nextblock_tip(tip_account: str, tip: int, from_pubkey: Pubkey) -> Instruction:
    """Transfer ``tip`` lamports to the given tip account."""
    return transfer(from_pubkey, Pubkey.from_string(tip_account), tip)


def assemble(
    nonce_account: Pubkey,
    payer: Pubkey,
    tip_ix: Instruction,
    cu_price: int,
    instructions: Iterable[Instruction],
) -> list[Instruction]:
    """Nonce advance, tip, jittered price, then the caller's instructions."""
    price_ix = set_compute_unit_price(jittered_price(cu_price))
    advance_ix = advance_nonce_account(nonce_account, payer)
    return [advance_ix, tip_ix, price_ix, *instructions]


def create_instruction_nextblock(
    instructions: Iterable[Instruction],
    tip: int,
    cu_price: int,
    nonce_account: Pubkey,
    payer: Pubkey,
) -> list[Instruction]:
    """Prefix instructions with nonce advance, NextBlock tip and compute price."""
    tip_ix = nextblock_tip(NEXTBLOCK_TIP_ACCOUNT, tip, payer)
    return assemble(nonce_account, payer, tip_ix, cu_price, instructions)