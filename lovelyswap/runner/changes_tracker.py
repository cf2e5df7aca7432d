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

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from lovelyswap.types import Address, ContractId

if TYPE_CHECKING:
    from lovelyswap.blueprint import Blueprint


class ChangesTracker:
    """Keep what is needed to revert all the changes made by a transaction.

    The state of each contract is copied the first time the transaction calls one of its public methods, since fields
    can only be changed by the contract's own public methods. Native balances, nonces and the event log are copied
    when the transaction starts.
    """

    def __init__(
        self,
        *,
        native_balances: dict[Address, int],
        nonces: dict[Address, int],
        events_count: int,
    ) -> None:
        self.native_balances = dict(native_balances)
        self.nonces = dict(nonces)
        self.events_count = events_count
        self.contract_states: dict[ContractId, dict[str, Any]] = {}
        self.created_contracts: list[ContractId] = []

    def touch(self, contract_id: ContractId, contract: Blueprint) -> None:
        """Save the state of a contract before it's changed for the first time in this transaction."""
        if contract_id in self.contract_states or contract_id in self.created_contracts:
            return
        self.contract_states[contract_id] = contract.get_state()

    def record_creation(self, contract_id: ContractId) -> None:
        self.created_contracts.append(contract_id)

    def revert(
        self,
        *,
        contracts: dict[ContractId, Blueprint],
        native_balances: dict[Address, int],
        nonces: dict[Address, int],
        events: list,
    ) -> None:
        """Restore the given runner state to how it was before the transaction."""
        for contract_id in self.created_contracts:
            contracts.pop(contract_id, None)

        for contract_id, state in self.contract_states.items():
            contracts[contract_id].set_state(state)

        native_balances.clear()
        native_balances.update(self.native_balances)

        nonces.clear()
        nonces.update(self.nonces)

        del events[self.events_count:]
