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

from dataclasses import dataclass, field
from typing import Any

from lovelyswap.types import ContractId


@dataclass(slots=True, frozen=True, kw_only=True)
class Event:
    """An event emitted by a contract during a successful transaction."""
    contract_id: ContractId
    name: str
    args: dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> dict[str, Any]:
        return {
            'contract_id': self.contract_id.hex(),
            'name': self.name,
            'args': {key: value.hex() if isinstance(value, bytes) else value for key, value in self.args.items()},
        }
