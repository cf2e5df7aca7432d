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

from enum import Enum
from typing import Any, Callable, NewType

from lovelyswap.exception import BlueprintSyntaxError

# Types to be used by blueprints.
Address = NewType('Address', bytes)
Amount = NewType('Amount', int)
Timestamp = NewType('Timestamp', int)
BlueprintId = NewType('BlueprintId', bytes)
ContractId = Address

ADDRESS_LEN: int = 20
ZERO_ADDRESS = Address(b'\x00' * ADDRESS_LEN)
MAX_UINT256: int = 2**256 - 1

INITIALIZE_METHOD: str = 'initialize'

METHOD_TYPE_ATTR: str = '__lovely_method_type'
ALLOW_DEPOSIT_ATTR: str = '__lovely_allow_deposit'


class MethodType(Enum):
    PUBLIC = 'public'
    VIEW = 'view'


def _set_method_type(fn: Callable, method_type: MethodType) -> None:
    if getattr(fn, METHOD_TYPE_ATTR, None) is not None:
        raise BlueprintSyntaxError(f'method `{fn.__name__}` is already decorated')
    setattr(fn, METHOD_TYPE_ATTR, method_type)


def public(maybe_fn: Callable | None = None, /, *, allow_deposit: bool = False) -> Callable:
    """Decorator to mark a blueprint method as public.

    Public methods receive a `Context` as their first argument. Only methods marked with `allow_deposit=True` may
    be called with native value attached.
    """
    def decorator(fn: Callable) -> Callable:
        _set_method_type(fn, MethodType.PUBLIC)
        setattr(fn, ALLOW_DEPOSIT_ATTR, allow_deposit)
        return fn

    if maybe_fn is not None:
        return decorator(maybe_fn)
    return decorator


def view(fn: Callable) -> Callable:
    """Decorator to mark a blueprint method as view (read-only)."""
    _set_method_type(fn, MethodType.VIEW)
    return fn


def get_method_type(method: Any) -> MethodType | None:
    return getattr(method, METHOD_TYPE_ATTR, None)


def is_public_method(method: Any) -> bool:
    return get_method_type(method) is MethodType.PUBLIC


def is_view_method(method: Any) -> bool:
    return get_method_type(method) is MethodType.VIEW


def allows_deposit(method: Any) -> bool:
    return bool(getattr(method, ALLOW_DEPOSIT_ATTR, False))


def is_valid_address(value: Any) -> bool:
    return isinstance(value, bytes) and len(value) == ADDRESS_LEN
