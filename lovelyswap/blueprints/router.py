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

from typing import Sequence

from lovelyswap import library
from lovelyswap.blueprint import Blueprint
from lovelyswap.context import Context
from lovelyswap.exception import (
    ExcessiveInputAmount,
    Expired,
    InsufficientAAmount,
    InsufficientBAmount,
    InsufficientOutputAmount,
    InvalidPath,
    PairNotExist,
)
from lovelyswap.types import MAX_UINT256, ZERO_ADDRESS, Address, ContractId, public, view


class Router(Blueprint):
    """Entry point for adding and removing liquidity and for swapping through one or more pairs.

    The router never holds tokens between calls. Tokens are pulled from the caller with `transfer_from`, so the caller
    must approve the router first, and are sent straight to the pairs. Native asset is wrapped with the wrapped native
    token before being sent to a pair, and unwrapped when it leaves, any excess attached to a call is refunded.

    Every method has a `deadline`, and fails with `Expired` when the call is executed after it.

    Pairs are never created by the router, they must be created with the factory first.
    """

    factory: ContractId
    wrapped_native: ContractId

    @public
    def initialize(self, ctx: Context, factory: ContractId, wrapped_native: ContractId) -> None:
        self._init_router(factory, wrapped_native)

    def _init_router(self, factory: ContractId, wrapped_native: ContractId) -> None:
        self.factory = factory
        self.wrapped_native = wrapped_native

    def _ensure(self, ctx: Context, deadline: int) -> None:
        if deadline < ctx.timestamp:
            raise Expired

    def _get_router_id(self) -> ContractId:
        return self.syscall.get_contract_id()

    def _pair_for(self, token_a: Address, token_b: Address) -> ContractId:
        return library.get_pair(self.syscall, self.factory, token_a, token_b)

    def _balance_of(self, token: Address, owner: Address) -> int:
        return self.syscall.call_view_method(token, 'balance_of', owner)

    def _transfer(self, token: Address, to: Address, value: int) -> None:
        self.syscall.call_public_method(token, 'transfer', to, value)

    def _transfer_from(self, token: Address, from_address: Address, to: Address, value: int) -> None:
        self.syscall.call_public_method(token, 'transfer_from', from_address, to, value)

    def _wrap_native(self, value: int) -> None:
        self.syscall.call_public_method(self.wrapped_native, 'deposit', value=value)

    def _unwrap_native(self, value: int) -> None:
        self.syscall.call_public_method(self.wrapped_native, 'withdraw', value)

    def _refund_native(self, ctx: Context, value: int) -> None:
        if value > 0:
            self.syscall.transfer_native(ctx.caller_id, value)

    # **** ADD LIQUIDITY ****

    def _add_liquidity(
        self,
        token_a: Address,
        token_b: Address,
        amount_a_desired: int,
        amount_b_desired: int,
        amount_a_min: int,
        amount_b_min: int,
    ) -> tuple[int, int]:
        if self.syscall.call_view_method(self.factory, 'get_pair', token_a, token_b) == ZERO_ADDRESS:
            raise PairNotExist
        reserve_a, reserve_b = library.get_reserves(self.syscall, self.factory, token_a, token_b)
        if reserve_a == 0 and reserve_b == 0:
            return amount_a_desired, amount_b_desired
        amount_b_optimal = library.quote(amount_a_desired, reserve_a, reserve_b)
        if amount_b_optimal <= amount_b_desired:
            if amount_b_optimal < amount_b_min:
                raise InsufficientBAmount
            return amount_a_desired, amount_b_optimal
        amount_a_optimal = library.quote(amount_b_desired, reserve_b, reserve_a)
        assert amount_a_optimal <= amount_a_desired
        if amount_a_optimal < amount_a_min:
            raise InsufficientAAmount
        return amount_a_optimal, amount_b_desired

    @public
    def add_liquidity(
        self,
        ctx: Context,
        token_a: Address,
        token_b: Address,
        amount_a_desired: int,
        amount_b_desired: int,
        amount_a_min: int,
        amount_b_min: int,
        to: Address,
        deadline: int,
    ) -> tuple[int, int, int]:
        """Add liquidity to the pair of two tokens, with the best amounts for the current price.

        Returns `(amount_a, amount_b, liquidity)`.
        """
        self._ensure(ctx, deadline)
        amount_a, amount_b = self._add_liquidity(
            token_a, token_b, amount_a_desired, amount_b_desired, amount_a_min, amount_b_min
        )
        pair = self._pair_for(token_a, token_b)
        self._transfer_from(token_a, ctx.caller_id, pair, amount_a)
        self._transfer_from(token_b, ctx.caller_id, pair, amount_b)
        liquidity = self.syscall.call_public_method(pair, 'mint', to)
        return amount_a, amount_b, liquidity

    @public(allow_deposit=True)
    def add_liquidity_native(
        self,
        ctx: Context,
        token: Address,
        amount_token_desired: int,
        amount_token_min: int,
        amount_native_min: int,
        to: Address,
        deadline: int,
    ) -> tuple[int, int, int]:
        """Add liquidity to the pair of a token and the wrapped native token, with the value attached to the call.

        Returns `(amount_token, amount_native, liquidity)`.
        """
        self._ensure(ctx, deadline)
        amount_token, amount_native = self._add_liquidity(
            token, self.wrapped_native, amount_token_desired, ctx.value, amount_token_min, amount_native_min
        )
        pair = self._pair_for(token, self.wrapped_native)
        self._transfer_from(token, ctx.caller_id, pair, amount_token)
        self._wrap_native(amount_native)
        self._transfer(self.wrapped_native, pair, amount_native)
        liquidity = self.syscall.call_public_method(pair, 'mint', to)
        # refund dust, if any
        self._refund_native(ctx, ctx.value - amount_native)
        return amount_token, amount_native, liquidity

    # **** REMOVE LIQUIDITY ****

    def _remove_liquidity(
        self,
        ctx: Context,
        token_a: Address,
        token_b: Address,
        liquidity: int,
        amount_a_min: int,
        amount_b_min: int,
        to: Address,
    ) -> tuple[int, int]:
        pair = self._pair_for(token_a, token_b)
        # send liquidity to pair
        self._transfer_from(pair, ctx.caller_id, pair, liquidity)
        amount0, amount1 = self.syscall.call_public_method(pair, 'burn', to)
        token0, _ = library.sort_tokens(token_a, token_b)
        amount_a, amount_b = (amount0, amount1) if token_a == token0 else (amount1, amount0)
        if amount_a < amount_a_min:
            raise InsufficientAAmount
        if amount_b < amount_b_min:
            raise InsufficientBAmount
        return amount_a, amount_b

    def _permit(self, token_a: Address, token_b: Address, liquidity: int, deadline: int, approve_max: bool,
                public_key: bytes, signature: bytes) -> None:
        pair = self._pair_for(token_a, token_b)
        value = MAX_UINT256 if approve_max else liquidity
        self.syscall.call_public_method(pair, 'permit', public_key, self._get_router_id(), value, deadline, signature)

    @public
    def remove_liquidity(
        self,
        ctx: Context,
        token_a: Address,
        token_b: Address,
        liquidity: int,
        amount_a_min: int,
        amount_b_min: int,
        to: Address,
        deadline: int,
    ) -> tuple[int, int]:
        """Burn liquidity shares of the caller, which must have approved the router on the pair."""
        self._ensure(ctx, deadline)
        return self._remove_liquidity(ctx, token_a, token_b, liquidity, amount_a_min, amount_b_min, to)

    def _remove_liquidity_native(
        self,
        ctx: Context,
        token: Address,
        liquidity: int,
        amount_token_min: int,
        amount_native_min: int,
        to: Address,
    ) -> tuple[int, int]:
        amount_token, amount_native = self._remove_liquidity(
            ctx, token, self.wrapped_native, liquidity, amount_token_min, amount_native_min, self._get_router_id()
        )
        self._transfer(token, to, amount_token)
        self._unwrap_native(amount_native)
        self.syscall.transfer_native(to, amount_native)
        return amount_token, amount_native

    @public
    def remove_liquidity_native(
        self,
        ctx: Context,
        token: Address,
        liquidity: int,
        amount_token_min: int,
        amount_native_min: int,
        to: Address,
        deadline: int,
    ) -> tuple[int, int]:
        """Burn liquidity shares of the pair of a token and the wrapped native token, sending out native asset."""
        self._ensure(ctx, deadline)
        return self._remove_liquidity_native(ctx, token, liquidity, amount_token_min, amount_native_min, to)

    @public
    def remove_liquidity_with_permit(
        self,
        ctx: Context,
        token_a: Address,
        token_b: Address,
        liquidity: int,
        amount_a_min: int,
        amount_b_min: int,
        to: Address,
        deadline: int,
        approve_max: bool,
        public_key: bytes,
        signature: bytes,
    ) -> tuple[int, int]:
        """Same as `remove_liquidity`, approving the router with a signed permit in the same call."""
        self._ensure(ctx, deadline)
        self._permit(token_a, token_b, liquidity, deadline, approve_max, public_key, signature)
        return self._remove_liquidity(ctx, token_a, token_b, liquidity, amount_a_min, amount_b_min, to)

    @public
    def remove_liquidity_native_with_permit(
        self,
        ctx: Context,
        token: Address,
        liquidity: int,
        amount_token_min: int,
        amount_native_min: int,
        to: Address,
        deadline: int,
        approve_max: bool,
        public_key: bytes,
        signature: bytes,
    ) -> tuple[int, int]:
        """Same as `remove_liquidity_native`, approving the router with a signed permit in the same call."""
        self._ensure(ctx, deadline)
        self._permit(token, self.wrapped_native, liquidity, deadline, approve_max, public_key, signature)
        return self._remove_liquidity_native(ctx, token, liquidity, amount_token_min, amount_native_min, to)

    def _remove_liquidity_native_supporting_fee_on_transfer_tokens(
        self,
        ctx: Context,
        token: Address,
        liquidity: int,
        amount_token_min: int,
        amount_native_min: int,
        to: Address,
    ) -> int:
        router_id = self._get_router_id()
        _, amount_native = self._remove_liquidity(
            ctx, token, self.wrapped_native, liquidity, amount_token_min, amount_native_min, router_id
        )
        # the router may have received less than what the pair sent
        self._transfer(token, to, self._balance_of(token, router_id))
        self._unwrap_native(amount_native)
        self.syscall.transfer_native(to, amount_native)
        return amount_native

    @public
    def remove_liquidity_native_supporting_fee_on_transfer_tokens(
        self,
        ctx: Context,
        token: Address,
        liquidity: int,
        amount_token_min: int,
        amount_native_min: int,
        to: Address,
        deadline: int,
    ) -> int:
        """Same as `remove_liquidity_native`, for tokens that take a fee on transfer. Returns the native amount."""
        self._ensure(ctx, deadline)
        return self._remove_liquidity_native_supporting_fee_on_transfer_tokens(
            ctx, token, liquidity, amount_token_min, amount_native_min, to
        )

    @public
    def remove_liquidity_native_with_permit_supporting_fee_on_transfer_tokens(
        self,
        ctx: Context,
        token: Address,
        liquidity: int,
        amount_token_min: int,
        amount_native_min: int,
        to: Address,
        deadline: int,
        approve_max: bool,
        public_key: bytes,
        signature: bytes,
    ) -> int:
        self._ensure(ctx, deadline)
        self._permit(token, self.wrapped_native, liquidity, deadline, approve_max, public_key, signature)
        return self._remove_liquidity_native_supporting_fee_on_transfer_tokens(
            ctx, token, liquidity, amount_token_min, amount_native_min, to
        )

    # **** SWAP ****

    def _on_swap(self, ctx: Context, pair: ContractId, token_in: Address, token_out: Address, amount_in: int,
                 amount_out: int) -> None:
        """Called after each pair of a swap path is swapped."""

    def _swap(self, ctx: Context, amounts: Sequence[int], path: Sequence[Address], to: Address) -> None:
        """Swap through every pair of `path`, the first pair must already have received `amounts[0]`."""
        last = len(path) - 2
        for i, (token_in, token_out) in enumerate(zip(path, path[1:])):
            token0, _ = library.sort_tokens(token_in, token_out)
            amount_out = amounts[i + 1]
            amount0_out, amount1_out = (0, amount_out) if token_in == token0 else (amount_out, 0)
            pair = self._pair_for(token_in, token_out)
            recipient = self._pair_for(token_out, path[i + 2]) if i < last else to
            self.syscall.call_public_method(pair, 'swap', amount0_out, amount1_out, recipient, b'')
            self._on_swap(ctx, pair, token_in, token_out, amounts[i], amount_out)

    def _swap_exact_in(self, ctx: Context, amount_in: int, amount_out_min: int, path: Sequence[Address],
                       to: Address, *, from_native: bool = False) -> list[int]:
        amounts = library.get_amounts_out(self.syscall, self.factory, amount_in, path)
        if amounts[-1] < amount_out_min:
            raise InsufficientOutputAmount
        self._pay_first_pair(ctx, path, amounts[0], from_native=from_native)
        self._swap(ctx, amounts, path, to)
        return amounts

    def _swap_exact_out(self, ctx: Context, amount_out: int, amount_in_max: int, path: Sequence[Address],
                        to: Address, *, from_native: bool = False) -> list[int]:
        amounts = library.get_amounts_in(self.syscall, self.factory, amount_out, path)
        if amounts[0] > amount_in_max:
            raise ExcessiveInputAmount
        self._pay_first_pair(ctx, path, amounts[0], from_native=from_native)
        self._swap(ctx, amounts, path, to)
        return amounts

    def _pay_first_pair(self, ctx: Context, path: Sequence[Address], amount: int, *, from_native: bool) -> None:
        pair = self._pair_for(path[0], path[1])
        if from_native:
            self._wrap_native(amount)
            self._transfer(self.wrapped_native, pair, amount)
        else:
            self._transfer_from(path[0], ctx.caller_id, pair, amount)

    def _check_native_path(self, path: Sequence[Address], *, first: bool = False, last: bool = False) -> None:
        if len(path) < 2:
            raise InvalidPath
        if first and path[0] != self.wrapped_native:
            raise InvalidPath
        if last and path[-1] != self.wrapped_native:
            raise InvalidPath

    def _send_native_out(self, to: Address, amount: int) -> None:
        self._unwrap_native(amount)
        self.syscall.transfer_native(to, amount)

    @public
    def swap_exact_tokens_for_tokens(
        self,
        ctx: Context,
        amount_in: int,
        amount_out_min: int,
        path: list[Address],
        to: Address,
        deadline: int,
    ) -> list[int]:
        """Swap an exact amount of `path[0]` for as much of `path[-1]` as possible. Returns the amount of each hop."""
        self._ensure(ctx, deadline)
        return self._swap_exact_in(ctx, amount_in, amount_out_min, path, to)

    @public
    def swap_tokens_for_exact_tokens(
        self,
        ctx: Context,
        amount_out: int,
        amount_in_max: int,
        path: list[Address],
        to: Address,
        deadline: int,
    ) -> list[int]:
        """Swap as little of `path[0]` as possible for an exact amount of `path[-1]`."""
        self._ensure(ctx, deadline)
        return self._swap_exact_out(ctx, amount_out, amount_in_max, path, to)

    @public(allow_deposit=True)
    def swap_exact_native_for_tokens(
        self,
        ctx: Context,
        amount_out_min: int,
        path: list[Address],
        to: Address,
        deadline: int,
    ) -> list[int]:
        self._ensure(ctx, deadline)
        self._check_native_path(path, first=True)
        return self._swap_exact_in(ctx, ctx.value, amount_out_min, path, to, from_native=True)

    @public
    def swap_tokens_for_exact_native(
        self,
        ctx: Context,
        amount_out: int,
        amount_in_max: int,
        path: list[Address],
        to: Address,
        deadline: int,
    ) -> list[int]:
        self._ensure(ctx, deadline)
        self._check_native_path(path, last=True)
        amounts = self._swap_exact_out(ctx, amount_out, amount_in_max, path, self._get_router_id())
        self._send_native_out(to, amounts[-1])
        return amounts

    @public
    def swap_exact_tokens_for_native(
        self,
        ctx: Context,
        amount_in: int,
        amount_out_min: int,
        path: list[Address],
        to: Address,
        deadline: int,
    ) -> list[int]:
        self._ensure(ctx, deadline)
        self._check_native_path(path, last=True)
        amounts = self._swap_exact_in(ctx, amount_in, amount_out_min, path, self._get_router_id())
        self._send_native_out(to, amounts[-1])
        return amounts

    @public(allow_deposit=True)
    def swap_native_for_exact_tokens(
        self,
        ctx: Context,
        amount_out: int,
        path: list[Address],
        to: Address,
        deadline: int,
    ) -> list[int]:
        """Swap the value attached to the call for an exact amount of `path[-1]`, refunding what was not used."""
        self._ensure(ctx, deadline)
        self._check_native_path(path, first=True)
        amounts = self._swap_exact_out(ctx, amount_out, ctx.value, path, to, from_native=True)
        # refund dust, if any
        self._refund_native(ctx, ctx.value - amounts[0])
        return amounts

    # **** SWAP (supporting fee-on-transfer tokens) ****

    def _swap_supporting_fee_on_transfer_tokens(self, ctx: Context, path: Sequence[Address], to: Address) -> None:
        """Swap through every pair of `path`, using what each pair actually received as its input."""
        fee = library.get_total_fee(self.syscall, self.factory)
        denominator = self.syscall.settings.FEE_DENOMINATOR
        last = len(path) - 2
        for i, (token_in, token_out) in enumerate(zip(path, path[1:])):
            token0, _ = library.sort_tokens(token_in, token_out)
            pair = self._pair_for(token_in, token_out)
            reserve0, reserve1, _ = self.syscall.call_view_method(pair, 'get_reserves')
            reserve_in, reserve_out = (reserve0, reserve1) if token_in == token0 else (reserve1, reserve0)
            amount_in = self._balance_of(token_in, pair) - reserve_in
            amount_out = library.get_amount_out(amount_in, reserve_in, reserve_out, fee, denominator)
            amount0_out, amount1_out = (0, amount_out) if token_in == token0 else (amount_out, 0)
            recipient = self._pair_for(token_out, path[i + 2]) if i < last else to
            self.syscall.call_public_method(pair, 'swap', amount0_out, amount1_out, recipient, b'')
            self._on_swap(ctx, pair, token_in, token_out, amount_in, amount_out)

    def _swap_exact_in_supporting_fee_on_transfer_tokens(self, ctx: Context, amount_in: int, amount_out_min: int,
                                                         path: Sequence[Address], to: Address, *,
                                                         from_native: bool = False) -> None:
        if len(path) < 2:
            raise InvalidPath
        self._pay_first_pair(ctx, path, amount_in, from_native=from_native)
        balance_before = self._balance_of(path[-1], to)
        self._swap_supporting_fee_on_transfer_tokens(ctx, path, to)
        if self._balance_of(path[-1], to) - balance_before < amount_out_min:
            raise InsufficientOutputAmount

    @public
    def swap_exact_tokens_for_tokens_supporting_fee_on_transfer_tokens(
        self,
        ctx: Context,
        amount_in: int,
        amount_out_min: int,
        path: list[Address],
        to: Address,
        deadline: int,
    ) -> None:
        self._ensure(ctx, deadline)
        self._swap_exact_in_supporting_fee_on_transfer_tokens(ctx, amount_in, amount_out_min, path, to)

    @public(allow_deposit=True)
    def swap_exact_native_for_tokens_supporting_fee_on_transfer_tokens(
        self,
        ctx: Context,
        amount_out_min: int,
        path: list[Address],
        to: Address,
        deadline: int,
    ) -> None:
        self._ensure(ctx, deadline)
        self._check_native_path(path, first=True)
        self._swap_exact_in_supporting_fee_on_transfer_tokens(
            ctx, ctx.value, amount_out_min, path, to, from_native=True
        )

    @public
    def swap_exact_tokens_for_native_supporting_fee_on_transfer_tokens(
        self,
        ctx: Context,
        amount_in: int,
        amount_out_min: int,
        path: list[Address],
        to: Address,
        deadline: int,
    ) -> None:
        self._ensure(ctx, deadline)
        self._check_native_path(path, last=True)
        router_id = self._get_router_id()
        self._pay_first_pair(ctx, path, amount_in, from_native=False)
        self._swap_supporting_fee_on_transfer_tokens(ctx, path, router_id)
        amount_out = self._balance_of(self.wrapped_native, router_id)
        if amount_out < amount_out_min:
            raise InsufficientOutputAmount
        self._send_native_out(to, amount_out)

    # **** LIBRARY FUNCTIONS ****

    @view
    def get_factory(self) -> ContractId:
        return self.factory

    @view
    def get_wrapped_native(self) -> ContractId:
        return self.wrapped_native

    @view
    def quote(self, amount_a: int, reserve_a: int, reserve_b: int) -> int:
        return library.quote(amount_a, reserve_a, reserve_b)

    @view
    def get_amount_out(self, amount_in: int, reserve_in: int, reserve_out: int) -> int:
        """Same as `library.get_amount_out`, with the current fee of the factory."""
        fee = library.get_total_fee(self.syscall, self.factory)
        return library.get_amount_out(amount_in, reserve_in, reserve_out, fee, self.syscall.settings.FEE_DENOMINATOR)

    @view
    def get_amount_in(self, amount_out: int, reserve_in: int, reserve_out: int) -> int:
        fee = library.get_total_fee(self.syscall, self.factory)
        return library.get_amount_in(amount_out, reserve_in, reserve_out, fee, self.syscall.settings.FEE_DENOMINATOR)

    @view
    def get_amounts_out(self, amount_in: int, path: list[Address]) -> list[int]:
        return library.get_amounts_out(self.syscall, self.factory, amount_in, path)

    @view
    def get_amounts_in(self, amount_out: int, path: list[Address]) -> list[int]:
        return library.get_amounts_in(self.syscall, self.factory, amount_out, path)
