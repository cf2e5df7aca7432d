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
from lovelyswap.context import Context
from lovelyswap.crypto.util import (
    encode_address,
    encode_uint256,
    get_address_from_public_key_bytes,
    is_valid_digest_signature,
    keccak256,
)
from lovelyswap.exception import (
    Expired,
    InsufficientAllowance,
    InsufficientBalance,
    InvalidSignature,
    ValidationFailed,
)
from lovelyswap.types import MAX_UINT256, ZERO_ADDRESS, Address, Amount, public, view

DOMAIN_TYPEHASH = keccak256(
    b'EIP712Domain(string name,string version,uint256 chainId,address verifyingContract)'
)
PERMIT_TYPEHASH = keccak256(
    b'Permit(address owner,address spender,uint256 value,uint256 nonce,uint256 deadline)'
)


class LovelyERC20(Blueprint):
    """Fungible token with allowances and signed approvals (permit).

    It has no public way to create tokens, blueprints extending it decide how the supply is issued. The pairs use it
    for their liquidity shares.

    Events:
    - Transfer(from_address, to_address, value)
    - Approval(owner, spender, value)
    """

    token_name: str
    token_symbol: str
    token_decimals: int
    supply: int

    balances: dict[Address, int]
    allowances: dict[tuple[Address, Address], int]
    permit_nonces: dict[Address, int]

    @public
    def initialize(self, ctx: Context, name: str, symbol: str, decimals: int) -> None:
        self._init_token(name, symbol, decimals)

    def _init_token(self, name: str, symbol: str, decimals: int) -> None:
        self.token_name = name
        self.token_symbol = symbol
        self.token_decimals = decimals
        self.supply = 0
        self.balances = {}
        self.allowances = {}
        self.permit_nonces = {}

    def _mint(self, to: Address, value: int) -> None:
        self._check_value(value)
        self.supply += value
        self.balances[to] = self.balances.get(to, 0) + value
        self.syscall.emit_event('Transfer', from_address=ZERO_ADDRESS, to_address=to, value=value)

    def _burn(self, from_address: Address, value: int) -> None:
        self._check_value(value)
        balance = self.balances.get(from_address, 0)
        if balance < value:
            raise InsufficientBalance(f'balance {balance} is lower than {value}')
        self.balances[from_address] = balance - value
        self.supply -= value
        self.syscall.emit_event('Transfer', from_address=from_address, to_address=ZERO_ADDRESS, value=value)

    def _approve(self, owner: Address, spender: Address, value: int) -> None:
        self._check_value(value)
        self.allowances[(owner, spender)] = value
        self.syscall.emit_event('Approval', owner=owner, spender=spender, value=value)

    def _transfer(self, from_address: Address, to: Address, value: int) -> None:
        self._check_value(value)
        balance = self.balances.get(from_address, 0)
        if balance < value:
            raise InsufficientBalance(f'balance {balance} is lower than {value}')
        self.balances[from_address] = balance - value
        self.balances[to] = self.balances.get(to, 0) + value
        self.syscall.emit_event('Transfer', from_address=from_address, to_address=to, value=value)

    @staticmethod
    def _check_value(value: int) -> None:
        if not isinstance(value, int) or not 0 <= value <= MAX_UINT256:
            raise ValidationFailed(f'invalid token amount: {value!r}')

    @public
    def approve(self, ctx: Context, spender: Address, value: int) -> bool:
        self._approve(ctx.caller_id, spender, value)
        return True

    @public
    def transfer(self, ctx: Context, to: Address, value: int) -> bool:
        self._transfer(ctx.caller_id, to, value)
        return True

    @public
    def transfer_from(self, ctx: Context, from_address: Address, to: Address, value: int) -> bool:
        """Transfer on behalf of `from_address`, spending the allowance given to the caller.

        An allowance of MAX_UINT256 is never decreased.
        """
        allowance = self.allowances.get((from_address, ctx.caller_id), 0)
        if allowance != MAX_UINT256:
            if allowance < value:
                raise InsufficientAllowance(f'allowance {allowance} is lower than {value}')
            self.allowances[(from_address, ctx.caller_id)] = allowance - value
        self._transfer(from_address, to, value)
        return True

    @public
    def permit(
        self,
        ctx: Context,
        owner_public_key: bytes,
        spender: Address,
        value: int,
        deadline: int,
        signature: bytes,
    ) -> None:
        """Approve `spender` with a signature of the owner, so the owner doesn't have to send a transaction.

        The owner is the address of `owner_public_key`, and `signature` must sign `get_permit_digest()` with the
        owner's current nonce, which is then consumed.
        """
        if deadline < ctx.timestamp:
            raise Expired
        try:
            owner = get_address_from_public_key_bytes(owner_public_key)
        except ValueError:
            raise InvalidSignature('invalid public key')
        nonce = self.permit_nonces.get(owner, 0)
        digest = self.get_permit_digest(owner, spender, value, nonce, deadline)
        if not is_valid_digest_signature(owner_public_key, signature, digest):
            raise InvalidSignature
        self.permit_nonces[owner] = nonce + 1
        self._approve(owner, spender, value)

    @view
    def name(self) -> str:
        return self.token_name

    @view
    def symbol(self) -> str:
        return self.token_symbol

    @view
    def decimals(self) -> int:
        return self.token_decimals

    @view
    def total_supply(self) -> Amount:
        return Amount(self.supply)

    @view
    def balance_of(self, owner: Address) -> Amount:
        return Amount(self.balances.get(owner, 0))

    @view
    def allowance(self, owner: Address, spender: Address) -> Amount:
        return Amount(self.allowances.get((owner, spender), 0))

    @view
    def nonces(self, owner: Address) -> int:
        return self.permit_nonces.get(owner, 0)

    @view
    def domain_separator(self) -> bytes:
        settings = self.syscall.settings
        return keccak256(
            DOMAIN_TYPEHASH,
            keccak256(self.token_name.encode('utf-8')),
            keccak256(settings.PERMIT_VERSION.encode('utf-8')),
            encode_uint256(settings.CHAIN_ID),
            encode_address(self.syscall.get_contract_id()),
        )

    @view
    def permit_typehash(self) -> bytes:
        return PERMIT_TYPEHASH

    @view
    def get_permit_digest(self, owner: Address, spender: Address, value: int, nonce: int, deadline: int) -> bytes:
        """Return the digest the owner signs to approve `spender` through `permit`."""
        struct_hash = keccak256(
            PERMIT_TYPEHASH,
            encode_address(owner),
            encode_address(spender),
            encode_uint256(value),
            encode_uint256(nonce),
            encode_uint256(deadline),
        )
        return keccak256(b'\x19\x01', self.domain_separator(), struct_hash)


class ERC20(LovelyERC20):
    """Token with a fixed initial supply owned by its deployer, that anyone can mint for testing."""

    @public
    def initialize(
        self,
        ctx: Context,
        total_supply: int,
        name: str = 'Lovely Swap',
        symbol: str = 'LS',
        decimals: int = 18,
    ) -> None:
        self._init_token(name, symbol, decimals)
        self._mint(ctx.caller_id, total_supply)

    @public
    def mint(self, ctx: Context, value: int) -> None:
        self._mint(ctx.caller_id, value)


class DeflatingERC20(ERC20):
    """Token that burns 1% of every transferred amount, so the receiver gets less than what was sent."""

    @public
    def initialize(
        self,
        ctx: Context,
        total_supply: int,
        name: str = 'Deflating Token',
        symbol: str = 'DTT',
        decimals: int = 18,
    ) -> None:
        super().initialize(ctx, total_supply, name, symbol, decimals)

    def _transfer(self, from_address: Address, to: Address, value: int) -> None:
        burn_amount = value // 100
        self._burn(from_address, burn_amount)
        super()._transfer(from_address, to, value - burn_amount)
