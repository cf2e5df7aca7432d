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

import copy
from typing import TYPE_CHECKING, Any

from structlog.stdlib import BoundLogger

from lovelyswap.crypto.util import keccak256
from lovelyswap.exception import BlueprintSyntaxError
from lovelyswap.types import INITIALIZE_METHOD, BlueprintId, MethodType, get_method_type

if TYPE_CHECKING:
    from lovelyswap.blueprint_env import BlueprintEnvironment

FORBIDDEN_NAMES = {
    'syscall',
    'log',
}

FIELDS_ATTR: str = '__fields'
BLUEPRINT_ID_ATTR: str = '__blueprint_id'


class _BlueprintBase(type):
    """Metaclass for blueprints.

    It collects the annotated attributes of a blueprint, and of the blueprints it extends, as the persistent fields of
    its contracts.
    """

    def __new__(
        cls: type[_BlueprintBase],
        name: str,
        bases: tuple[type, ...],
        attrs: dict[str, Any],
        /,
        **kwargs: Any
    ) -> _BlueprintBase:
        # Initialize only subclasses of Blueprint.
        parents = [b for b in bases if isinstance(b, _BlueprintBase)]
        if not parents:
            return super().__new__(cls, name, bases, attrs, **kwargs)

        cls._validate_initialize_method(attrs)
        own_fields = tuple(attrs.get('__annotations__', {}))

        # Check for forbidden names.
        for field_name in own_fields:
            if field_name in FORBIDDEN_NAMES:
                raise BlueprintSyntaxError(f'field name is forbidden: `{field_name}`')

            if field_name.startswith('_'):
                raise BlueprintSyntaxError(f'field name cannot start with underscore: `{field_name}`')

            if field_name in attrs:
                raise BlueprintSyntaxError(f'fields with default values are not supported: `{field_name}`')

        inherited_fields: list[str] = []
        for parent in parents:
            for field_name in getattr(parent, FIELDS_ATTR, ()):
                if field_name not in inherited_fields:
                    inherited_fields.append(field_name)

        attrs[FIELDS_ATTR] = tuple(inherited_fields) + tuple(f for f in own_fields if f not in inherited_fields)

        new_class = super().__new__(cls, name, bases, attrs, **kwargs)
        setattr(new_class, BLUEPRINT_ID_ATTR, BlueprintId(keccak256(
            f'{new_class.__module__}.{new_class.__qualname__}'.encode('utf-8')
        )))
        return new_class

    @staticmethod
    def _validate_initialize_method(attrs: Any) -> None:
        if INITIALIZE_METHOD not in attrs:
            raise BlueprintSyntaxError(f'blueprints require a method called `{INITIALIZE_METHOD}`')

        if get_method_type(attrs[INITIALIZE_METHOD]) is not MethodType.PUBLIC:
            raise BlueprintSyntaxError(f'`{INITIALIZE_METHOD}` method must be annotated with @public')


class Blueprint(metaclass=_BlueprintBase):
    """Base class for all blueprints.

    The annotated attributes are the persistent fields of the contract. They can only be assigned by the contract
    itself, during one of its public methods, and are restored by the runner when the transaction fails.

    Example:

        class MyBlueprint(Blueprint):
            name: str
            age: int

            @public
            def initialize(self, ctx: Context, name: str) -> None:
                self.name = name
                self.age = 0
    """

    def __init__(self, env: BlueprintEnvironment) -> None:
        object.__setattr__(self, '_Blueprint__env', env)

    def __setattr__(self, name: str, value: Any) -> None:
        if name not in self.get_fields():
            raise AttributeError(f'`{name}` is not a field of {type(self).__name__}')
        self.__env.assert_can_change_state()
        super().__setattr__(name, value)

    @property
    def syscall(self) -> BlueprintEnvironment:
        """Return the syscall provider for the current contract."""
        return self.__env

    @property
    def log(self) -> BoundLogger:
        """Return the logger bound to the current contract."""
        return self.__env.log

    @classmethod
    def get_fields(cls) -> tuple[str, ...]:
        return getattr(cls, FIELDS_ATTR, ())

    @classmethod
    def get_blueprint_id(cls) -> BlueprintId:
        """Return the id of the blueprint, which is the keccak256 of its qualified name."""
        return getattr(cls, BLUEPRINT_ID_ATTR)

    def get_state(self) -> dict[str, Any]:
        """Return a deep copy of the fields that were already set."""
        state = vars(self)
        return {name: copy.deepcopy(state[name]) for name in self.get_fields() if name in state}

    def set_state(self, state: dict[str, Any]) -> None:
        """Replace all fields by the ones in `state`, unsetting the missing ones."""
        current = vars(self)
        for name in self.get_fields():
            current.pop(name, None)
        current.update(state)
