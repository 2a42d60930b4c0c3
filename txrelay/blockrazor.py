"""Tip and instruction building for the BlockRazor relay."""

from __future__ import annotations

import random
from typing import Iterable

from txrelay.primitives import Instruction, Pubkey, assemble, transfer

BLOCKRAZOR_TIP_ACCOUNTS = (
    "FjmZZrFvhnqqb9ThCuMVnENaM3JGVuGWNyCAxRJcFpg9",
    "6No2i3aawzHsjtThw81iq1EXPJN6rh8eSJCLaYZfKDTG",
    "A9cWowVAiHe9pJfKAj3TJiN9VpbzMUq6E4kEvf5mUT22",
    "Gywj98ophM7GmkDdaWs4isqZnDdFCW7B46TXmKfvyqSm",
    "68Pwb4jS7eZATjDfhmTXgRJjCiZmw1L7Huy4HNpnxJ3o",
    "4ABhJh5rZPjv63RBJBuyWzBK3g9gWMUQdTZP2kiW31V9",
    "B2M4NG5eyZp5SBQrSdtemzk5TqVuaWGQnowGaCBt8GyM",
    "5jA59cXMKQqZAVdtopv8q3yyw9SYfiE3vUCbt7p8MfVf",
    "5YktoWygr1Bp9wiS1xtMtUki1PeYuuzuCF98tqwYxf61",
    "295Avbam4qGShBYK7E9H5Ldew4B3WyJGmgmXfiWdeeyV",
    "EDi4rSy2LZgKJX74mbLTFk4mxoTgT6F7HxxzG2HBAFyK",
    "BnGKHAC386n4Qmv9xtpBVbRaUTKixjBe3oagkPFKtoy6",
    "Dd7K2Fp7AtoN8xCghKDRmyqr5U169t48Tw5fEd3wT9mq",
    "AP6qExwrbRgBAVaehg4b5xHENX815sMabtBzUzVB4v8S",
)


def blockrazor_tip(tip_account: str, tip: int, from_pubkey: Pubkey) -> Instruction:
    """Transfer ``tip`` lamports to the given base58 tip account."""
    return transfer(from_pubkey, Pubkey.from_string(tip_account), tip)


def create_instruction_blockrazor(
    instructions: Iterable[Instruction],
    tip: int,
    cu_price: int,
    nonce_account: Pubkey,
    payer: Pubkey,
) -> list[Instruction]:
    """Prefix instructions with nonce advance, BlockRazor tip and jittered compute price."""
    tip_ix = blockrazor_tip(random.choice(BLOCKRAZOR_TIP_ACCOUNTS), tip, payer)
    return assemble(nonce_account, payer, tip_ix, cu_price, instructions)