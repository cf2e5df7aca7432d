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
from lovelyswap.exception import Forbidden
from lovelyswap.types import Address, Amount, ContractId, public, view


class RewardsVault(Blueprint):
    """Holds the rewards of one trading competition until they're claimed.

    It is created by the trading competition router, which is the only one allowed to withdraw from it.
    """

    router: ContractId
    token: Address

    @public
    def initialize(self, ctx: Context, token: Address) -> None:
        self.router = ctx.caller_id
        self.token = token

    @public
    def withdraw(self, ctx: Context, to: Address, amount: int) -> None:
        if ctx.caller_id != self.router:
            raise Forbidden('only the router can withdraw')
        self.syscall.call_public_method(self.token, 'transfer', to, amount)

    @view
    def get_router(self) -> ContractId:
        return self.router

    @view
    def get_token(self) -> Address:
        return self.token

    @view
    def get_balance(self) -> Amount:
        return self.syscall.call_view_method(self.token, 'balance_of', self.syscall.get_contract_id())
