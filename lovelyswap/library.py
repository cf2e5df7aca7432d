# Copyright 2024 Hathor Labs
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Pricing and addressing helpers shared by the routers.

The functions that read reserves receive the `BlueprintEnvironment` of the calling contract, so they can only run
inside a contract call.
"""

from typing import TYPE_CHECKING, Optional, Sequence

from lovelyswap.blueprints.factory import get_pair_salt
from lovelyswap.blueprints.pair import Pair
from lovelyswap.crypto.util import get_create2_address, keccak256
from lovelyswap.exception import (
    IdenticalAddresses,
    InsufficientAmount,
    InsufficientInputAmount,
    InsufficientLiquidity,
    InsufficientOutputAmount,
    InvalidPath,
    PairNotExist,
    ZeroAddress,
)
from lovelyswap.types import ZERO_ADDRESS, Address, ContractId

if TYPE_CHECKING:
    from lovelyswap.blueprint_env import BlueprintEnvironment

DEFAULT_FEE_DENOMINATOR = 10_000


def sort_tokens(token_a: Address, token_b: Address) -> tuple[Address, Address]:
    """Return the tokens sorted the way pairs store them."""
    if token_a == token_b:
        raise IdenticalAddresses
    token0, token1 = (token_a, token_b) if token_a < token_b else (token_b, token_a)
    if token0 == ZERO_ADDRESS:
        raise ZeroAddress
    return token0, token1


def get_init_code_hash() -> bytes:
    """Return the hash of the Pair blueprint used to derive pair addresses."""
    return keccak256(Pair.get_blueprint_id())


def pair_for(factory: ContractId, token_a: Address, token_b: Address,
             init_code_hash: Optional[bytes] = None) -> ContractId:
    """Compute the address of the pair of two tokens without any calls."""
    token0, token1 = sort_tokens(token_a, token_b)
    return get_create2_address(factory, get_pair_salt(token0, token1), init_code_hash or get_init_code_hash())


def quote(amount_a: int, reserve_a: int, reserve_b: int) -> int:
    """Given some amount of an asset and pair reserves, return the equivalent amount of the other asset."""
    if amount_a <= 0:
        raise InsufficientAmount
    if reserve_a <= 0 or reserve_b <= 0:
        raise InsufficientLiquidity
    return amount_a * reserve_b // reserve_a


def get_amount_out(amount_in: int, reserve_in: int, reserve_out: int, fee: int,
                   denominator: int = DEFAULT_FEE_DENOMINATOR) -> int:
    """Return the maximum output amount of the other asset for an input amount, with the fee in basis points."""
    if amount_in <= 0:
        raise InsufficientInputAmount
    if reserve_in <= 0 or reserve_out <= 0:
        raise InsufficientLiquidity
    amount_in_with_fee = amount_in * (denominator - fee)
    numerator = amount_in_with_fee * reserve_out
    return numerator // (reserve_in * denominator + amount_in_with_fee)


def get_amount_in(amount_out: int, reserve_in: int, reserve_out: int, fee: int,
                  denominator: int = DEFAULT_FEE_DENOMINATOR) -> int:
    """Return the required input amount of the other asset for an output amount, with the fee in basis points."""
    if amount_out <= 0:
        raise InsufficientOutputAmount
    if reserve_in <= 0 or reserve_out <= 0 or amount_out >= reserve_out:
        raise InsufficientLiquidity
    numerator = reserve_in * amount_out * denominator
    return numerator // ((reserve_out - amount_out) * (denominator - fee)) + 1


def get_pair(syscall: 'BlueprintEnvironment', factory: ContractId, token_a: Address, token_b: Address) -> ContractId:
    """Return the address of an existing pair, failing with `PairNotExist` when it wasn't created."""
    pair = pair_for(factory, token_a, token_b)
    if not syscall.contract_exists(pair):
        raise PairNotExist
    return pair


def get_reserves(syscall: 'BlueprintEnvironment', factory: ContractId, token_a: Address,
                 token_b: Address) -> tuple[int, int]:
    """Return the reserves of the pair of two tokens, in the order of the arguments."""
    token0, _ = sort_tokens(token_a, token_b)
    reserve0, reserve1, _ = syscall.call_view_method(get_pair(syscall, factory, token_a, token_b), 'get_reserves')
    return (reserve0, reserve1) if token_a == token0 else (reserve1, reserve0)


def get_total_fee(syscall: 'BlueprintEnvironment', factory: ContractId) -> int:
    return syscall.call_view_method(factory, 'get_total_fee')


def get_amounts_out(syscall: 'BlueprintEnvironment', factory: ContractId, amount_in: int,
                    path: Sequence[Address]) -> list[int]:
    """Perform chained `get_amount_out` calculations on any number of pairs."""
    if len(path) < 2:
        raise InvalidPath
    fee = get_total_fee(syscall, factory)
    denominator = syscall.settings.FEE_DENOMINATOR
    amounts = [amount_in]
    for token_in, token_out in zip(path, path[1:]):
        reserve_in, reserve_out = get_reserves(syscall, factory, token_in, token_out)
        amounts.append(get_amount_out(amounts[-1], reserve_in, reserve_out, fee, denominator))
    return amounts


def get_amounts_in(syscall: 'BlueprintEnvironment', factory: ContractId, amount_out: int,
                   path: Sequence[Address]) -> list[int]:
    """Perform chained `get_amount_in` calculations on any number of pairs, from the last one backwards."""
    if len(path) < 2:
        raise InvalidPath
    fee = get_total_fee(syscall, factory)
    denominator = syscall.settings.FEE_DENOMINATOR
    amounts = [amount_out]
    for token_in, token_out in reversed(list(zip(path, path[1:]))):
        reserve_in, reserve_out = get_reserves(syscall, factory, token_in, token_out)
        amounts.insert(0, get_amount_in(amounts[0], reserve_in, reserve_out, fee, denominator))
    return amounts
