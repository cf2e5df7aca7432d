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

from pathlib import Path
from typing import Union

from pydantic import field_validator, model_validator

from lovelyswap.utils import pydantic
from lovelyswap.utils.yaml import dict_from_extended_yaml

DAY = 24 * 60 * 60


class LovelySettings(pydantic.BaseModel):
    # Name of the network: "mainnet", "testnet", "unittests", ...
    NETWORK_NAME: str

    # Chain identifier bound to permit signatures.
    CHAIN_ID: int

    # Shares minted to the zero address on the first mint of a pair, locked forever.
    MINIMUM_LIQUIDITY: int = 1000

    # Trading fees are expressed in basis points of this denominator.
    FEE_DENOMINATOR: int = 10_000

    # Maximum value of each trading fee component (owner and LP), in basis points.
    MAX_FEE_COMPONENT: int = 20

    # Maximum delay between listing a token (or creating a pair) and its activation.
    MAX_PENDING_PERIOD: int = 7 * DAY

    # Listing fee charged in the factory's fee token to non-administrators, unless changed by the administrator.
    DEFAULT_LISTING_FEE: int = 0

    # Maximum duration of a trading competition.
    MAX_COMPETITION_DURATION: int = 30 * DAY

    # Number of ranks in each reward tier of a competition. Tier `i` pays `rewards[i]` to each of its ranks.
    REWARD_TIER_SIZES: list[int] = [1, 4, 10, 35]

    # Default cap on the number of participants of a competition.
    DEFAULT_MAX_PARTICIPANTS: int = 500

    # Default native fee paid by non-owners to create a competition.
    DEFAULT_COMPETITION_FEE: int = 0

    # Limits of a single transaction on the contract runtime.
    MAX_RECURSION_DEPTH: int = 100
    MAX_CALL_COUNTER: int = 250

    # Metadata of the pairs' share token.
    LP_TOKEN_NAME: str = 'Lovely Swap'
    LP_TOKEN_SYMBOL: str = 'LS'
    LP_TOKEN_DECIMALS: int = 18

    # Version of the permit signing domain.
    PERMIT_VERSION: str = '1'

    @property
    def REWARD_CUTOFF(self) -> int:
        """Ranks at or after this one are not rewarded."""
        return sum(self.REWARD_TIER_SIZES)

    @field_validator('REWARD_TIER_SIZES')
    @classmethod
    def _validate_reward_tiers(cls, tiers: list[int]) -> list[int]:
        if len(tiers) != 4:
            raise ValueError(f'expected exactly 4 reward tiers, got {len(tiers)}')
        if any(size <= 0 for size in tiers):
            raise ValueError('reward tiers must not be empty')
        return tiers

    @model_validator(mode='after')
    def _validate_fees(self) -> 'LovelySettings':
        if not 0 < self.MAX_FEE_COMPONENT * 2 < self.FEE_DENOMINATOR:
            raise ValueError('MAX_FEE_COMPONENT must be positive and fit twice in FEE_DENOMINATOR')
        if self.MINIMUM_LIQUIDITY <= 0:
            raise ValueError('MINIMUM_LIQUIDITY must be positive')
        return self

    @classmethod
    def from_yaml(cls, *, filepath: Union[Path, str]) -> 'LovelySettings':
        """Takes a filepath to a yaml file and returns a validated LovelySettings instance."""
        settings_dict = dict_from_extended_yaml(filepath=filepath)
        return cls.model_validate(settings_dict)
