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

from typing import Any, Callable, Optional, TypeVar

from structlog import get_logger

from lovelyswap.blueprint import Blueprint
from lovelyswap.blueprint_env import BlueprintEnvironment
from lovelyswap.conf.get_settings import get_global_settings
from lovelyswap.conf.settings import LovelySettings
from lovelyswap.context import Context
from lovelyswap.crypto.util import get_contract_address, get_create2_address, keccak256
from lovelyswap.event import Event
from lovelyswap.exception import (
    AlreadyInitialized,
    ContractAlreadyExists,
    ContractDoesNotExist,
    ContractFail,
    InsufficientNativeBalance,
    InvalidMethodCall,
    MethodNotFound,
    ViewMethodError,
)
from lovelyswap.reactor import ReactorProtocol, get_global_reactor
from lovelyswap.runner.call_info import CallInfo, CallRecord, CallType
from lovelyswap.runner.changes_tracker import ChangesTracker
from lovelyswap.types import (
    INITIALIZE_METHOD,
    Address,
    Amount,
    BlueprintId,
    ContractId,
    Timestamp,
    allows_deposit,
    is_public_method,
    is_view_method,
)

logger = get_logger()

T = TypeVar('T')


class Runner:
    """Runner with support for calls between contracts.

    Every call made from outside (`create_contract` and `call_public_method`) is a transaction: it either completes
    or, when a `ContractFail` is raised anywhere in the call tree, every change it made is reverted before the error
    is re-raised to the caller.
    """

    def __init__(self, reactor: Optional[ReactorProtocol] = None, settings: Optional[LovelySettings] = None) -> None:
        self.log = logger.new()
        self.reactor = reactor or get_global_reactor()
        self.settings = settings or get_global_settings()

        self._contracts: dict[ContractId, Blueprint] = {}
        self._native_balances: dict[Address, int] = {}
        self._nonces: dict[Address, int] = {}

        # Events emitted by all successful transactions, in order.
        self.events: list[Event] = []

        # These are only set while a transaction (or a view call) is running.
        self._call_info: Optional[CallInfo] = None
        self._changes_tracker: Optional[ChangesTracker] = None
        self._timestamp: Optional[Timestamp] = None

    def create_context(self, caller_id: Address, *, value: int = 0) -> Context:
        """Create a context for a call made now by `caller_id`."""
        return Context(caller_id, int(self.reactor.seconds()), value=value)

    def get_current_timestamp(self) -> Timestamp:
        if self._timestamp is not None:
            return self._timestamp
        return Timestamp(int(self.reactor.seconds()))

    def has_contract(self, contract_id: ContractId) -> bool:
        return contract_id in self._contracts

    def get_contract(self, contract_id: ContractId) -> Blueprint:
        """Return the instance of a contract. It should only be used to read its fields."""
        contract = self._contracts.get(contract_id)
        if contract is None:
            raise ContractDoesNotExist(contract_id.hex())
        return contract

    def get_blueprint_id(self, contract_id: ContractId) -> BlueprintId:
        return self.get_contract(contract_id).get_blueprint_id()

    def get_native_balance(self, address: Address) -> Amount:
        return Amount(self._native_balances.get(address, 0))

    def get_nonce(self, address: Address) -> int:
        return self._nonces.get(address, 0)

    def mint_native(self, address: Address, amount: int) -> None:
        """Credit native asset to an address. It can only be used outside transactions, e.g. for genesis funds."""
        assert self._call_info is None, 'cannot mint native asset during a transaction'
        assert amount >= 0
        self._native_balances[address] = self._native_balances.get(address, 0) + amount

    def get_events(self, *, contract_id: Optional[ContractId] = None, name: Optional[str] = None) -> list[Event]:
        """Return the events emitted so far, optionally filtered by contract and name."""
        return [
            event for event in self.events
            if (contract_id is None or event.contract_id == contract_id) and (name is None or event.name == name)
        ]

    def create_contract(self, blueprint_class: type[Blueprint], ctx: Context, *args: Any, **kwargs: Any) -> ContractId:
        """Create a new contract and call its `initialize`, with `ctx.caller_id` as the deployer.

        The address of the contract is derived from the deployer and its nonce.
        """
        def create() -> ContractId:
            nonce = self._nonces.get(ctx.caller_id, 0)
            self._nonces[ctx.caller_id] = nonce + 1
            contract_id = get_contract_address(ctx.caller_id, nonce)
            self._create_contract(contract_id, blueprint_class, ctx, args, kwargs)
            return contract_id

        return self._run_transaction(ctx, create)

    def call_public_method(self, contract_id: ContractId, method_name: str, ctx: Context, *args: Any,
                           **kwargs: Any) -> Any:
        """Call a contract public method as a new transaction."""
        return self._run_transaction(
            ctx,
            lambda: self._execute_public_call(contract_id, method_name, ctx, args, kwargs),
        )

    def call_view_method(self, contract_id: ContractId, method_name: str, *args: Any, **kwargs: Any) -> Any:
        """Call a contract view method."""
        assert self._call_info is None, 'cannot start a view call during a transaction'
        self._call_info = self._build_call_info()
        try:
            return self._execute_view_call(contract_id, method_name, args, kwargs)
        finally:
            self._call_info = None

    def _build_call_info(self) -> CallInfo:
        return CallInfo(
            MAX_RECURSION_DEPTH=self.settings.MAX_RECURSION_DEPTH,
            MAX_CALL_COUNTER=self.settings.MAX_CALL_COUNTER,
        )

    def _run_transaction(self, ctx: Context, fn: Callable[[], T]) -> T:
        assert self._call_info is None, 'a transaction is already running'
        self._call_info = self._build_call_info()
        self._changes_tracker = ChangesTracker(
            native_balances=self._native_balances,
            nonces=self._nonces,
            events_count=len(self.events),
        )
        self._timestamp = ctx.timestamp
        try:
            return fn()
        except ContractFail as e:
            self._changes_tracker.revert(
                contracts=self._contracts,
                native_balances=self._native_balances,
                nonces=self._nonces,
                events=self.events,
            )
            self.log.debug('transaction reverted', caller_id=ctx.caller_id.hex(), error=repr(e))
            raise
        finally:
            self._call_info = None
            self._changes_tracker = None
            self._timestamp = None

    def _create_contract(
        self,
        contract_id: ContractId,
        blueprint_class: type[Blueprint],
        ctx: Context,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> None:
        assert self._changes_tracker is not None
        if not (isinstance(blueprint_class, type) and issubclass(blueprint_class, Blueprint)):
            raise InvalidMethodCall(f'not a blueprint: {blueprint_class!r}')
        if contract_id in self._contracts:
            raise ContractAlreadyExists(contract_id.hex())

        env = BlueprintEnvironment(self, contract_id)
        self._contracts[contract_id] = blueprint_class(env)
        self._changes_tracker.record_creation(contract_id)
        self.log.debug('contract created', contract_id=contract_id.hex(), blueprint=blueprint_class.__name__,
                       deployer=ctx.caller_id.hex())

        self._execute_public_call(contract_id, INITIALIZE_METHOD, ctx, args, kwargs, allow_initialize=True)

    def _execute_public_call(
        self,
        contract_id: ContractId,
        method_name: str,
        ctx: Context,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
        *,
        allow_initialize: bool = False,
    ) -> Any:
        assert self._call_info is not None
        assert self._changes_tracker is not None

        contract = self.get_contract(contract_id)
        if method_name == INITIALIZE_METHOD and not allow_initialize:
            raise AlreadyInitialized(f'`{INITIALIZE_METHOD}` can only be called on creation')

        method = getattr(contract, method_name, None)
        if method is None:
            raise MethodNotFound(f'{type(contract).__name__}.{method_name}')
        if not is_public_method(method):
            raise InvalidMethodCall(f'`{method_name}` is not a public method')
        if ctx.value > 0 and not allows_deposit(method):
            raise InvalidMethodCall(f'`{method_name}` does not accept deposits')

        call_record = CallRecord(
            type=CallType.PUBLIC,
            depth=self._call_info.depth,
            contract_id=contract_id,
            method_name=method_name,
            ctx=ctx,
            args=args,
        )
        self._call_info.pre_call(call_record)
        try:
            self._move_native(ctx.caller_id, contract_id, ctx.value)
            self._changes_tracker.touch(contract_id, contract)
            return method(ctx, *args, **kwargs)
        except ContractFail:
            raise
        except Exception as e:
            # Any other exception is a bug in the contract, and it also fails the transaction.
            raise ContractFail(f'{type(e).__name__}: {e}') from e
        finally:
            self._call_info.post_call(call_record)

    def _execute_view_call(
        self,
        contract_id: ContractId,
        method_name: str,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> Any:
        assert self._call_info is not None

        contract = self.get_contract(contract_id)
        method = getattr(contract, method_name, None)
        if method is None:
            raise MethodNotFound(f'{type(contract).__name__}.{method_name}')
        if not is_view_method(method):
            raise InvalidMethodCall(f'`{method_name}` is not a view method')

        call_record = CallRecord(
            type=CallType.VIEW,
            depth=self._call_info.depth,
            contract_id=contract_id,
            method_name=method_name,
            ctx=None,
            args=args,
        )
        self._call_info.pre_call(call_record)
        try:
            return method(*args, **kwargs)
        except ContractFail:
            raise
        except Exception as e:
            raise ContractFail(f'{type(e).__name__}: {e}') from e
        finally:
            self._call_info.post_call(call_record)

    def _get_current_call(self, contract_id: ContractId) -> CallRecord:
        if self._call_info is None or not self._call_info.stack:
            raise InvalidMethodCall('syscalls can only be used while the contract is executing')
        current = self._call_info.current
        if current.contract_id != contract_id:
            raise InvalidMethodCall('syscalls can only be used by the contract being executed')
        return current

    def _assert_can_change_state(self, contract_id: ContractId) -> None:
        if self._get_current_call(contract_id).type != CallType.PUBLIC:
            raise ViewMethodError('view methods cannot change the state')

    def _move_native(self, from_address: Address, to_address: Address, amount: int) -> None:
        if amount < 0:
            raise ContractFail(f'invalid native amount: {amount}')
        if amount == 0:
            return
        balance = self._native_balances.get(from_address, 0)
        if balance < amount:
            raise InsufficientNativeBalance(f'{from_address.hex()} has {balance}, needs {amount}')
        self._native_balances[from_address] = balance - amount
        self._native_balances[to_address] = self._native_balances.get(to_address, 0) + amount

    def syscall_call_public_method(
        self,
        caller_id: ContractId,
        contract_id: ContractId,
        method_name: str,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
        *,
        value: int = 0,
    ) -> Any:
        """Call another contract's public method on behalf of `caller_id`."""
        self._assert_can_change_state(caller_id)
        if contract_id == caller_id:
            raise InvalidMethodCall('a contract cannot call itself')
        assert self._timestamp is not None
        ctx = Context(caller_id, self._timestamp, value=value)
        return self._execute_public_call(contract_id, method_name, ctx, args, kwargs)

    def syscall_call_view_method(
        self,
        caller_id: ContractId,
        contract_id: ContractId,
        method_name: str,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> Any:
        """Call another contract's view method on behalf of `caller_id`."""
        self._get_current_call(caller_id)
        return self._execute_view_call(contract_id, method_name, args, kwargs)

    def syscall_create_contract(
        self,
        deployer: ContractId,
        blueprint_class: type[Blueprint],
        salt: bytes,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> ContractId:
        """Create a contract at an address derived from the deployer, the salt and the blueprint."""
        self._assert_can_change_state(deployer)
        assert self._timestamp is not None
        contract_id = get_create2_address(deployer, salt, keccak256(blueprint_class.get_blueprint_id()))
        self._create_contract(contract_id, blueprint_class, Context(deployer, self._timestamp), args, kwargs)
        return contract_id

    def syscall_assert_can_change_state(self, contract_id: ContractId) -> None:
        self._assert_can_change_state(contract_id)

    def syscall_transfer_native(self, from_address: ContractId, to_address: Address, amount: int) -> None:
        self._assert_can_change_state(from_address)
        self._move_native(from_address, to_address, amount)

    def syscall_emit_event(self, contract_id: ContractId, name: str, args: dict[str, Any]) -> None:
        self._assert_can_change_state(contract_id)
        self.events.append(Event(contract_id=contract_id, name=name, args=args))
