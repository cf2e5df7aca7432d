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

from typing import Any, final

from lovelyswap.types import Address, Amount, Timestamp


@final
class Context:
    """Context passed to a public method call.

    It carries who is calling the method, the timestamp of the block executing the call and the amount of native
    asset attached to it. A zero value means the method is being called without a deposit.
    """
    __slots__ = ('__caller_id', '__timestamp', '__value')
    __caller_id: Address
    __timestamp: Timestamp
    __value: Amount

    def __init__(self, caller_id: Address, timestamp: int, *, value: int = 0) -> None:
        if value < 0:
            raise ValueError('context value must not be negative')

        # Address or contract calling the method.
        self.__caller_id = caller_id

        # Timestamp of the block executing the call.
        self.__timestamp = Timestamp(timestamp)

        # Native value attached to the call.
        self.__value = Amount(value)

    @property
    def caller_id(self) -> Address:
        return self.__caller_id

    @property
    def timestamp(self) -> Timestamp:
        return self.__timestamp

    @property
    def value(self) -> Amount:
        return self.__value

    def copy(self) -> Context:
        """Return a copy of the context."""
        return Context(self.caller_id, self.timestamp, value=self.value)

    def derive(self, caller_id: Address, *, value: int = 0) -> Context:
        """Return the context of a nested call made by `caller_id` in the same block."""
        return Context(caller_id, self.timestamp, value=value)

    def to_json(self) -> dict[str, Any]:
        """Return a JSON representation of the context."""
        return {
            'caller_id': self.caller_id.hex(),
            'timestamp': self.timestamp,
            'value': self.value,
        }

    def __repr__(self) -> str:
        return f'Context(caller_id={self.caller_id.hex()}, timestamp={self.timestamp}, value={self.value})'
