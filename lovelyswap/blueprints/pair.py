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

from functools import wraps
from math import isqrt
from typing import Any, Callable, TypeVar

from lovelyswap.blueprints.erc20 import LovelyERC20
from lovelyswap.context import Context
from lovelyswap.exception import (
    Forbidden,
    InsufficientInputAmount,
    InsufficientLiquidity,
    InsufficientLiquidityBurned,
    InsufficientLiquidityMinted,
    InsufficientOutputAmount,
    InvalidTo,
    K,
    Locked,
    NotActive,
    Overflow,
    ValidationFailed,
)
from lovelyswap.types import ZERO_ADDRESS, Address, Amount, Timestamp, public, view

F = TypeVar('F', bound=Callable[..., Any])

# Name of the public method called on the receiver of a swap when it passes callback data.
SWAP_CALLBACK_METHOD = 'lovely_call'

UINT112_MAX = 2**112 - 1
Q112 = 2**112
TIMESTAMP_MODULUS = 2**32
CUMULATIVE_MODULUS = 2**256


def lock(fn: F) -> F:
    """Fail with `Locked` when the decorated method is called while another locked method of the pair is running."""
    @wraps(fn)
    def wrapper(self: 'Pair', ctx: Context, *args: Any, **kwargs: Any) -> Any:
        if not self.unlocked:
            raise Locked
        self.unlocked = False
        try:
            return fn(self, ctx, *args, **kwargs)
        finally:
            self.unlocked = True
    return wrapper  # type: ignore[return-value]


class Pair(LovelyERC20):
    """Constant product liquidity pool of two tokens, inspired by Uniswap v2.

    The pair itself is the token of its liquidity shares. Every operation uses pull-based accounting: tokens must be
    transferred to the pair before calling `mint`, `burn` or `swap`, and the pair compares its balances with the
    reserves to know how much it received.

    At all times, except while a swap is running:
    - `reserve0 == balance_of(token0, pair)` and `reserve1 == balance_of(token1, pair)`, unless someone transferred
      tokens without calling `mint`, `swap` or `sync`. Those can be taken by anyone with `skim`.
    - `reserve0 * reserve1` never decreases on a swap, after subtracting the fees.

    Swaps can borrow the output before paying for it: when `data` is not empty, the pair calls `lovely_call` on the
    receiver, which must pay back the pair before returning.

    The trading fee is read from the factory on every swap, in basis points: `owner_fee + lp_fee`. When the factory
    has a `fee_to` address, `owner_fee / (owner_fee + lp_fee)` of the growth of `sqrt(k)` is minted to it as shares.

    Price oracle: `price0_cumulative_last` and `price1_cumulative_last` accumulate the UQ112x112 prices multiplied by
    the seconds they lasted, allowing time-weighted average prices to be computed by reading them twice.

    Events:
    - Mint(sender, amount0, amount1)
    - Burn(sender, amount0, amount1, to)
    - Swap(sender, amount0_in, amount1_in, amount0_out, amount1_out, to)
    - Sync(reserve0, reserve1)
    """

    factory: Address
    token0: Address
    token1: Address

    reserve0: int
    reserve1: int
    block_timestamp_last: int

    price0_cumulative_last: int
    price1_cumulative_last: int

    # reserve0 * reserve1, as of immediately after the most recent liquidity event, only while the protocol fee is on.
    k_last: int

    # Swaps and mints are rejected before this timestamp.
    active_from: int

    unlocked: bool

    @public
    def initialize(self, ctx: Context, token_a: Address, token_b: Address, active_from: int) -> None:
        """Called by the factory, which is the deployer of the pair."""
        if not self.syscall.contract_exists(ctx.caller_id):
            raise Forbidden('pairs can only be created by the factory')
        if token_a == token_b:
            raise ValidationFailed('identical tokens')

        settings = self.syscall.settings
        self._init_token(settings.LP_TOKEN_NAME, settings.LP_TOKEN_SYMBOL, settings.LP_TOKEN_DECIMALS)

        self.factory = ctx.caller_id
        self.token0, self.token1 = sorted((token_a, token_b))
        self.reserve0 = 0
        self.reserve1 = 0
        self.block_timestamp_last = 0
        self.price0_cumulative_last = 0
        self.price1_cumulative_last = 0
        self.k_last = 0
        self.active_from = active_from
        self.unlocked = True

    def _token_balance(self, token: Address) -> int:
        return self.syscall.call_view_method(token, 'balance_of', self.syscall.get_contract_id())

    def _safe_transfer(self, token: Address, to: Address, value: int) -> None:
        self.syscall.call_public_method(token, 'transfer', to, value)

    def _update(self, balance0: int, balance1: int, reserve0: int, reserve1: int, timestamp: int) -> None:
        """Update the reserves and, on the first call of each block, the price accumulators."""
        if balance0 > UINT112_MAX or balance1 > UINT112_MAX:
            raise Overflow
        block_timestamp = timestamp % TIMESTAMP_MODULUS
        # overflow is desired
        time_elapsed = (block_timestamp - self.block_timestamp_last) % TIMESTAMP_MODULUS
        if time_elapsed > 0 and reserve0 != 0 and reserve1 != 0:
            self.price0_cumulative_last = (
                self.price0_cumulative_last + (reserve1 * Q112 // reserve0) * time_elapsed
            ) % CUMULATIVE_MODULUS
            self.price1_cumulative_last = (
                self.price1_cumulative_last + (reserve0 * Q112 // reserve1) * time_elapsed
            ) % CUMULATIVE_MODULUS
        self.reserve0 = balance0
        self.reserve1 = balance1
        self.block_timestamp_last = block_timestamp
        self.syscall.emit_event('Sync', reserve0=balance0, reserve1=balance1)

    def _mint_fee(self, reserve0: int, reserve1: int) -> bool:
        """Mint the protocol share of the fees collected since the last liquidity event, if the fee is on."""
        fee_to = self.syscall.call_view_method(self.factory, 'get_fee_to')
        fee_on = fee_to != ZERO_ADDRESS
        if fee_on:
            if self.k_last != 0:
                root_k = isqrt(reserve0 * reserve1)
                root_k_last = isqrt(self.k_last)
                if root_k > root_k_last:
                    owner_fee, lp_fee = self.syscall.call_view_method(self.factory, 'get_trading_fees')
                    numerator = self.supply * (root_k - root_k_last) * owner_fee
                    denominator = root_k * lp_fee + root_k_last * owner_fee
                    liquidity = numerator // denominator if denominator > 0 else 0
                    if liquidity > 0:
                        self._mint(fee_to, liquidity)
        elif self.k_last != 0:
            self.k_last = 0
        return fee_on

    def _get_admin(self) -> Address:
        return self.syscall.call_view_method(self.factory, 'get_fee_to_setter')

    @public
    @lock
    def mint(self, ctx: Context, to: Address) -> int:
        """Mint shares to `to` for the tokens transferred to the pair since the last update.

        Before the pair is active only the factory administrator can receive shares, so it can seed the pool.
        """
        if ctx.timestamp < self.active_from and to != self._get_admin():
            raise NotActive

        reserve0, reserve1 = self.reserve0, self.reserve1
        balance0 = self._token_balance(self.token0)
        balance1 = self._token_balance(self.token1)
        amount0 = balance0 - reserve0
        amount1 = balance1 - reserve1

        fee_on = self._mint_fee(reserve0, reserve1)
        # must be read after `_mint_fee`, which can change it
        total_supply = self.supply
        minimum_liquidity = self.syscall.settings.MINIMUM_LIQUIDITY
        if total_supply == 0:
            if amount0 <= 0 or amount1 <= 0:
                raise InsufficientLiquidityMinted
            liquidity = isqrt(amount0 * amount1) - minimum_liquidity
            if liquidity <= 0:
                raise InsufficientLiquidityMinted
            # permanently lock the first shares
            self._mint(ZERO_ADDRESS, minimum_liquidity)
        else:
            liquidity = min(amount0 * total_supply // reserve0, amount1 * total_supply // reserve1)
            if liquidity <= 0:
                raise InsufficientLiquidityMinted
        self._mint(to, liquidity)

        self._update(balance0, balance1, reserve0, reserve1, ctx.timestamp)
        if fee_on:
            self.k_last = self.reserve0 * self.reserve1
        self.syscall.emit_event('Mint', sender=ctx.caller_id, amount0=amount0, amount1=amount1)
        self.log.debug('liquidity minted', to=to.hex(), liquidity=liquidity)
        return liquidity

    @public
    @lock
    def burn(self, ctx: Context, to: Address) -> tuple[int, int]:
        """Burn the shares transferred to the pair, sending the proportional amount of both tokens to `to`."""
        contract_id = self.syscall.get_contract_id()
        reserve0, reserve1 = self.reserve0, self.reserve1
        balance0 = self._token_balance(self.token0)
        balance1 = self._token_balance(self.token1)
        liquidity = self.balances.get(contract_id, 0)

        fee_on = self._mint_fee(reserve0, reserve1)
        # must be read after `_mint_fee`, which can change it
        total_supply = self.supply
        if total_supply == 0:
            raise InsufficientLiquidityBurned
        amount0 = liquidity * balance0 // total_supply
        amount1 = liquidity * balance1 // total_supply
        if amount0 <= 0 or amount1 <= 0:
            raise InsufficientLiquidityBurned
        self._burn(contract_id, liquidity)
        self._safe_transfer(self.token0, to, amount0)
        self._safe_transfer(self.token1, to, amount1)
        balance0 = self._token_balance(self.token0)
        balance1 = self._token_balance(self.token1)

        self._update(balance0, balance1, reserve0, reserve1, ctx.timestamp)
        if fee_on:
            self.k_last = self.reserve0 * self.reserve1
        self.syscall.emit_event('Burn', sender=ctx.caller_id, amount0=amount0, amount1=amount1, to=to)
        self.log.debug('liquidity burned', to=to.hex(), liquidity=liquidity)
        return amount0, amount1

    @public
    @lock
    def swap(self, ctx: Context, amount0_out: int, amount1_out: int, to: Address, data: bytes = b'') -> None:
        """Send the requested outputs to `to` and check that enough input was paid for them."""
        if amount0_out < 0 or amount1_out < 0:
            raise ValidationFailed('outputs must not be negative')
        if amount0_out == 0 and amount1_out == 0:
            raise InsufficientOutputAmount
        if ctx.timestamp < self.active_from:
            raise NotActive
        reserve0, reserve1 = self.reserve0, self.reserve1
        if amount0_out >= reserve0 or amount1_out >= reserve1:
            raise InsufficientLiquidity
        if to == self.token0 or to == self.token1:
            raise InvalidTo

        # optimistically transfer tokens
        if amount0_out > 0:
            self._safe_transfer(self.token0, to, amount0_out)
        if amount1_out > 0:
            self._safe_transfer(self.token1, to, amount1_out)
        if data:
            self.syscall.call_public_method(to, SWAP_CALLBACK_METHOD, ctx.caller_id, amount0_out, amount1_out, data)
        balance0 = self._token_balance(self.token0)
        balance1 = self._token_balance(self.token1)

        amount0_in = max(balance0 - (reserve0 - amount0_out), 0)
        amount1_in = max(balance1 - (reserve1 - amount1_out), 0)
        if amount0_in == 0 and amount1_in == 0:
            raise InsufficientInputAmount

        fee = self.syscall.call_view_method(self.factory, 'get_total_fee')
        denominator = self.syscall.settings.FEE_DENOMINATOR
        balance0_adjusted = balance0 * denominator - amount0_in * fee
        balance1_adjusted = balance1 * denominator - amount1_in * fee
        if balance0_adjusted * balance1_adjusted < reserve0 * reserve1 * denominator**2:
            raise K

        self._update(balance0, balance1, reserve0, reserve1, ctx.timestamp)
        self.syscall.emit_event(
            'Swap',
            sender=ctx.caller_id,
            amount0_in=amount0_in,
            amount1_in=amount1_in,
            amount0_out=amount0_out,
            amount1_out=amount1_out,
            to=to,
        )

    @public
    @lock
    def skim(self, ctx: Context, to: Address) -> None:
        """Send any balance above the reserves to `to`."""
        excess0 = self._token_balance(self.token0) - self.reserve0
        excess1 = self._token_balance(self.token1) - self.reserve1
        if excess0 > 0:
            self._safe_transfer(self.token0, to, excess0)
        if excess1 > 0:
            self._safe_transfer(self.token1, to, excess1)

    @public
    @lock
    def sync(self, ctx: Context) -> None:
        """Force the reserves to match the balances."""
        self._update(
            self._token_balance(self.token0),
            self._token_balance(self.token1),
            self.reserve0,
            self.reserve1,
            ctx.timestamp,
        )

    @view
    def get_reserves(self) -> tuple[Amount, Amount, Timestamp]:
        return Amount(self.reserve0), Amount(self.reserve1), Timestamp(self.block_timestamp_last)

    @view
    def get_tokens(self) -> tuple[Address, Address]:
        return self.token0, self.token1

    @view
    def get_factory(self) -> Address:
        return self.factory

    @view
    def get_price_cumulative_last(self) -> tuple[int, int]:
        return self.price0_cumulative_last, self.price1_cumulative_last

    @view
    def get_k_last(self) -> int:
        return self.k_last

    @view
    def get_active_from(self) -> Timestamp:
        return Timestamp(self.active_from)
