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

from lovelyswap.blueprint import Blueprint
from lovelyswap.blueprints.pair import Pair
from lovelyswap.context import Context
from lovelyswap.crypto.util import keccak256
from lovelyswap.exception import (
    AlreadyWhitelisted,
    Forbidden,
    IdenticalAddresses,
    InvalidActiveFrom,
    InvalidPendingPeriod,
    PairExists,
    TokenANotWhitelisted,
    TokenBNotWhitelisted,
    ValidationFailed,
    ZeroAddress,
)
from lovelyswap.types import ZERO_ADDRESS, Address, Amount, Timestamp, public, view


def get_pair_salt(token0: Address, token1: Address) -> bytes:
    """Return the salt used to create the pair of two sorted tokens."""
    return keccak256(token0, token1)


class PoolFactory(Blueprint):
    """Registry of pairs, with the token allowlist and the fee configuration shared by all of them.

    Tokens must be allowed before a pair can be created with them. The administrator (`fee_to_setter`) allows tokens
    for free, anyone else pays `listing_fee` of `fee_token` to the administrator, which requires approving the factory
    first. A token can be allowed with an `active_from` up to `MAX_PENDING_PERIOD` in the future:
    - while a token allowed by the administrator is pending, only the administrator can create pairs with it;
    - pairs with a token allowed by someone else can't be active before the token.

    Pairs are created at a deterministic address, derived from the factory, the sorted tokens and the Pair blueprint,
    so it can be computed without calling the factory (see `lovelyswap.library.pair_for`).

    Events:
    - TokenAllowed(token, active_from)
    - PairCreated(token0, token1, pair, index)
    """

    # Receives the protocol share of the trading fees, disabled when it's the zero address.
    fee_to: Address

    # The administrator.
    fee_to_setter: Address

    # Token used to pay the listing fee.
    fee_token: Address
    listing_fee: int

    # Trading fees in basis points. The total fee charged on swaps is `owner_fee + lp_fee`.
    owner_fee: int
    lp_fee: int

    # token -> active_from
    allowed_tokens: dict[Address, int]
    allowed_tokens_list: list[Address]
    # Tokens allowed by the administrator.
    admin_tokens: set[Address]

    # (token0, token1) -> pair, with both orders.
    pairs: dict[tuple[Address, Address], Address]
    pairs_list: list[Address]

    @public
    def initialize(self, ctx: Context, fee_to_setter: Address, fee_token: Address, owner_fee: int,
                   lp_fee: int) -> None:
        if fee_to_setter == ZERO_ADDRESS or fee_token == ZERO_ADDRESS:
            raise ValidationFailed('zero address')
        self._validate_trading_fees(owner_fee, lp_fee)

        self.fee_to = ZERO_ADDRESS
        self.fee_to_setter = fee_to_setter
        self.fee_token = fee_token
        self.listing_fee = self.syscall.settings.DEFAULT_LISTING_FEE
        self.owner_fee = owner_fee
        self.lp_fee = lp_fee

        self.allowed_tokens = {}
        self.allowed_tokens_list = []
        self.admin_tokens = set()
        self.pairs = {}
        self.pairs_list = []

    def _validate_trading_fees(self, owner_fee: int, lp_fee: int) -> None:
        max_fee = self.syscall.settings.MAX_FEE_COMPONENT
        if not 0 <= owner_fee <= max_fee or not 0 <= lp_fee <= max_fee:
            raise ValidationFailed(f'fees must be between 0 and {max_fee}')

    def _only_admin(self, ctx: Context) -> None:
        if ctx.caller_id != self.fee_to_setter:
            raise Forbidden

    def _is_pending(self, token: Address, timestamp: int) -> bool:
        return timestamp < self.allowed_tokens[token]

    @public
    def allow_token(self, ctx: Context, token: Address, active_from: int) -> None:
        """Allow pairs to be created with `token`, from `active_from` on, or right away when it's in the past."""
        if token == ZERO_ADDRESS:
            raise ZeroAddress
        if token in self.allowed_tokens:
            raise AlreadyWhitelisted
        now = ctx.timestamp
        if active_from > now + self.syscall.settings.MAX_PENDING_PERIOD:
            raise InvalidPendingPeriod

        is_admin = ctx.caller_id == self.fee_to_setter
        if not is_admin and self.listing_fee > 0:
            self.syscall.call_public_method(
                self.fee_token, 'transfer_from', ctx.caller_id, self.fee_to_setter, self.listing_fee
            )

        active_from = max(active_from, now)
        self.allowed_tokens[token] = active_from
        self.allowed_tokens_list.append(token)
        if is_admin:
            self.admin_tokens.add(token)
        self.syscall.emit_event('TokenAllowed', token=token, active_from=active_from)
        self.log.info('token allowed', token=token.hex(), active_from=active_from, by_admin=is_admin)

    @public
    def create_pair(self, ctx: Context, token_a: Address, token_b: Address, active_from: int) -> Address:
        """Create the pair of two allowed tokens, which can't be used before `active_from`.

        An `active_from` in the past (e.g. 0) means as soon as both tokens are active.
        """
        if token_a == token_b:
            raise IdenticalAddresses
        if token_a not in self.allowed_tokens:
            raise TokenANotWhitelisted
        if token_b not in self.allowed_tokens:
            raise TokenBNotWhitelisted
        token0, token1 = sorted((token_a, token_b))
        if (token0, token1) in self.pairs:
            raise PairExists

        now = ctx.timestamp
        max_active_from = now + self.syscall.settings.MAX_PENDING_PERIOD
        tokens_active_from = max(self.allowed_tokens[token0], self.allowed_tokens[token1])
        pending_tokens = [token for token in (token0, token1) if self._is_pending(token, now)]

        if ctx.caller_id == self.fee_to_setter:
            if active_from < now:
                active_from = max(now, tokens_active_from)
            if active_from > max_active_from:
                raise InvalidActiveFrom
            for token in pending_tokens:
                # the administrator can't anticipate tokens listed by others
                if token not in self.admin_tokens and active_from < self.allowed_tokens[token]:
                    raise Forbidden
            if active_from < tokens_active_from:
                raise InvalidActiveFrom
        else:
            if any(token in self.admin_tokens for token in pending_tokens):
                raise Forbidden
            if not (now <= active_from <= max_active_from and active_from >= tokens_active_from):
                raise InvalidActiveFrom

        pair = self.syscall.create_contract(Pair, get_pair_salt(token0, token1), token0, token1, active_from)
        self.pairs[(token0, token1)] = pair
        self.pairs[(token1, token0)] = pair
        self.pairs_list.append(pair)
        self.syscall.emit_event('PairCreated', token0=token0, token1=token1, pair=pair, index=len(self.pairs_list))
        self.log.info('pair created', pair=pair.hex(), token0=token0.hex(), token1=token1.hex(),
                      active_from=active_from)
        return pair

    @public
    def set_fee_to(self, ctx: Context, fee_to: Address) -> None:
        self._only_admin(ctx)
        self.fee_to = fee_to

    @public
    def set_fee_to_setter(self, ctx: Context, fee_to_setter: Address) -> None:
        self._only_admin(ctx)
        if fee_to_setter == ZERO_ADDRESS:
            raise ValidationFailed('zero address')
        self.fee_to_setter = fee_to_setter

    @public
    def set_listing_fee(self, ctx: Context, listing_fee: int) -> None:
        self._only_admin(ctx)
        if listing_fee < 0:
            raise ValidationFailed('negative listing fee')
        self.listing_fee = listing_fee

    @public
    def set_fee_token(self, ctx: Context, fee_token: Address) -> None:
        self._only_admin(ctx)
        if fee_token == ZERO_ADDRESS:
            raise ValidationFailed('zero address')
        self.fee_token = fee_token

    @public
    def set_trading_fees(self, ctx: Context, owner_fee: int, lp_fee: int) -> None:
        self._only_admin(ctx)
        self._validate_trading_fees(owner_fee, lp_fee)
        self.owner_fee = owner_fee
        self.lp_fee = lp_fee

    @view
    def get_pair(self, token_a: Address, token_b: Address) -> Address:
        """Return the pair of two tokens, in any order, or the zero address when there's none."""
        return self.pairs.get((token_a, token_b), ZERO_ADDRESS)

    @view
    def all_pairs(self, index: int) -> Address:
        return self.pairs_list[index]

    @view
    def all_pairs_length(self) -> int:
        return len(self.pairs_list)

    @view
    def get_all_pairs(self) -> list[Address]:
        return list(self.pairs_list)

    @view
    def is_pair(self, address: Address) -> bool:
        return address in self.pairs_list

    @view
    def allowlist(self, token: Address) -> tuple[bool, Timestamp]:
        """Return whether the token is allowed and its `active_from`."""
        if token not in self.allowed_tokens:
            return False, Timestamp(0)
        return True, Timestamp(self.allowed_tokens[token])

    @view
    def allowed_tokens_length(self) -> int:
        return len(self.allowed_tokens_list)

    @view
    def get_allowed_tokens(self) -> list[Address]:
        return list(self.allowed_tokens_list)

    @view
    def get_fee_to(self) -> Address:
        return self.fee_to

    @view
    def get_fee_to_setter(self) -> Address:
        return self.fee_to_setter

    @view
    def get_fee_token(self) -> Address:
        return self.fee_token

    @view
    def get_listing_fee(self) -> Amount:
        return Amount(self.listing_fee)

    @view
    def get_trading_fees(self) -> tuple[int, int]:
        """Return `(owner_fee, lp_fee)` in basis points."""
        return self.owner_fee, self.lp_fee

    @view
    def get_total_fee(self) -> int:
        return self.owner_fee + self.lp_fee

    @view
    def init_code_hash(self) -> bytes:
        """Return the hash used to derive the addresses of the pairs."""
        return keccak256(Pair.get_blueprint_id())
