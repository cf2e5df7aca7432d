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

from typing import TYPE_CHECKING, Any, final

from structlog import get_logger
from structlog.stdlib import BoundLogger

from lovelyswap.types import Address, Amount, BlueprintId, ContractId, Timestamp

if TYPE_CHECKING:
    from lovelyswap.blueprint import Blueprint
    from lovelyswap.conf.settings import LovelySettings
    from lovelyswap.runner import Runner

logger = get_logger()


@final
class BlueprintEnvironment:
    """A class that holds all possible interactions a contract may have with the system."""

    __slots__ = ('__runner', '__contract_id', 'log')

    def __init__(self, runner: Runner, contract_id: ContractId) -> None:
        self.__runner = runner
        self.__contract_id = contract_id
        self.log: BoundLogger = logger.new(contract_id=contract_id.hex())

    @property
    def settings(self) -> LovelySettings:
        """Return the settings of the runner executing the contract."""
        return self.__runner.settings

    def get_contract_id(self) -> ContractId:
        """Return the ContractId of the current contract."""
        return self.__contract_id

    def get_blueprint_id(self, contract_id: ContractId | None = None) -> BlueprintId:
        """Return the BlueprintId of a contract, the current one by default."""
        return self.__runner.get_blueprint_id(contract_id or self.__contract_id)

    def get_timestamp(self) -> Timestamp:
        """Return the timestamp of the block executing the current transaction."""
        return self.__runner.get_current_timestamp()

    def contract_exists(self, contract_id: ContractId) -> bool:
        return self.__runner.has_contract(contract_id)

    def get_native_balance(self, address: Address | None = None) -> Amount:
        """Return the native balance of an address, the current contract by default."""
        return self.__runner.get_native_balance(address or self.__contract_id)

    def call_public_method(
        self,
        contract_id: ContractId,
        method_name: str,
        *args: Any,
        value: int = 0,
        **kwargs: Any,
    ) -> Any:
        """Call a public method of another contract, with the current contract as the caller.

        The `value` in native asset is moved from the current contract to the called one.
        """
        return self.__runner.syscall_call_public_method(
            self.__contract_id, contract_id, method_name, args, kwargs, value=value
        )

    def call_view_method(self, contract_id: ContractId, method_name: str, *args: Any, **kwargs: Any) -> Any:
        """Call a view method of another contract."""
        return self.__runner.syscall_call_view_method(self.__contract_id, contract_id, method_name, args, kwargs)

    def create_contract(self, blueprint_class: type[Blueprint], salt: bytes, *args: Any, **kwargs: Any) -> ContractId:
        """Create a new contract whose address is derived from the current contract, the salt and the blueprint.

        The current contract is the caller of the new contract's `initialize`.
        """
        return self.__runner.syscall_create_contract(self.__contract_id, blueprint_class, salt, args, kwargs)

    def transfer_native(self, to: Address, amount: int) -> None:
        """Transfer native asset from the current contract to an address."""
        self.__runner.syscall_transfer_native(self.__contract_id, to, amount)

    def assert_can_change_state(self) -> None:
        """Fail with `ViewMethodError` unless the current contract is executing a public method."""
        self.__runner.syscall_assert_can_change_state(self.__contract_id)

    def emit_event(self, name: str, **args: Any) -> None:
        """Emit an event from the current contract."""
        self.__runner.syscall_emit_event(self.__contract_id, name, args)
