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

from dataclasses import dataclass, field
from enum import StrEnum, auto, unique
from typing import Any

from lovelyswap.context import Context
from lovelyswap.exception import CallDepthExceeded
from lovelyswap.types import ContractId


@unique
class CallType(StrEnum):
    PUBLIC = auto()
    VIEW = auto()


@dataclass(slots=True, frozen=True, kw_only=True)
class CallRecord:
    """This object keeps information about a single call between contracts."""

    # The type of the method being called (public or view).
    type: CallType

    # The depth in the call stack.
    depth: int

    # The contract being invoked.
    contract_id: ContractId

    # The method being invoked.
    method_name: str

    # The context passed in this call. None when it's a VIEW call.
    ctx: Context | None

    # The args provided to the method.
    args: tuple[Any, ...]


@dataclass(slots=True, kw_only=True)
class CallInfo:
    """This object keeps information about a method call and its subsequent calls."""
    MAX_RECURSION_DEPTH: int
    MAX_CALL_COUNTER: int

    # The execution stack. This stack is dynamic and changes as the execution progresses.
    stack: list[CallRecord] = field(default_factory=list)

    # Counter of the number of calls performed so far.
    call_counter: int = 0

    @property
    def depth(self) -> int:
        """Get the depth of the call stack."""
        return len(self.stack)

    @property
    def current(self) -> CallRecord:
        """Get the call being executed."""
        assert self.stack, 'no call is being executed'
        return self.stack[-1]

    def pre_call(self, call_record: CallRecord) -> None:
        """Called before a new call is executed."""
        if self.depth >= self.MAX_RECURSION_DEPTH:
            raise CallDepthExceeded(f'maximum call depth reached: {self.MAX_RECURSION_DEPTH}')

        if self.call_counter >= self.MAX_CALL_COUNTER:
            raise CallDepthExceeded(f'maximum number of calls reached: {self.MAX_CALL_COUNTER}')

        self.call_counter += 1
        self.stack.append(call_record)

    def post_call(self, call_record: CallRecord) -> None:
        """Called after a call is finished."""
        assert call_record == self.stack.pop()
