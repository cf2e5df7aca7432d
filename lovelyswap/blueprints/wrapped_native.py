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

from lovelyswap.blueprints.erc20 import LovelyERC20
from lovelyswap.context import Context
from lovelyswap.types import public


class WrappedNative(LovelyERC20):
    """Token backed 1:1 by the native asset held by the contract.

    Events:
    - Deposit(owner, value)
    - Withdrawal(owner, value)
    """

    @public
    def initialize(self, ctx: Context, name: str = 'Wrapped Native', symbol: str = 'WNATIVE') -> None:
        self._init_token(name, symbol, 18)

    @public(allow_deposit=True)
    def deposit(self, ctx: Context) -> None:
        """Wrap the native value attached to the call."""
        self._mint(ctx.caller_id, ctx.value)
        self.syscall.emit_event('Deposit', owner=ctx.caller_id, value=ctx.value)

    @public
    def withdraw(self, ctx: Context, value: int) -> None:
        """Unwrap `value` tokens, sending the native asset back to the caller."""
        self._burn(ctx.caller_id, value)
        self.syscall.transfer_native(ctx.caller_id, value)
        self.syscall.emit_event('Withdrawal', owner=ctx.caller_id, value=value)
