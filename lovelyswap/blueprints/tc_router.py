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
from typing import Any, Optional, Sequence

from lovelyswap.blueprints.rewards_vault import RewardsVault
from lovelyswap.blueprints.router import Router
from lovelyswap.context import Context
from lovelyswap.crypto.util import encode_uint256
from lovelyswap.exception import (
    AlreadyClaimed,
    AlreadyRegistered,
    AlreadySorted,
    AlreadyWithdrawn,
    CompetitionEnded,
    CompetitionFull,
    FeeTokensForbidden,
    Forbidden,
    InvalidFee,
    InvalidRange,
    InvalidRewards,
    NoCompetition,
    NotACompetitionToken,
    NotAWinner,
    NotEnded,
    NothingToWithdraw,
    PairDoesNotExist,
    PairsNotProvided,
    RangeTooBig,
    ValidationFailed,
    WinnersNotSelected,
)
from lovelyswap.types import ZERO_ADDRESS, Address, Amount, ContractId, public, view


@dataclass(slots=True, kw_only=True)
class Competition:
    creator: Address
    start_time: int
    end_time: int
    reward_token: Address
    competition_token: Address
    min_volume: int
    # Reward of each rank of each tier.
    rewards: list[int]
    pairs: list[ContractId]
    vault: ContractId
    funded: int

    # Registration order, replaced by the ranking when the competition is summed up.
    participants: list[Address] = field(default_factory=list)
    volumes: dict[Address, int] = field(default_factory=dict)

    is_sorted: bool = False
    cleaned: bool = False
    remainings_withdrawn: bool = False
    # Ranks that already claimed their reward.
    claimed: set[int] = field(default_factory=set)

    def to_json(self) -> dict[str, Any]:
        return {
            'creator': self.creator.hex(),
            'start_time': self.start_time,
            'end_time': self.end_time,
            'reward_token': self.reward_token.hex(),
            'competition_token': self.competition_token.hex(),
            'min_volume': self.min_volume,
            'rewards': list(self.rewards),
            'pairs': [pair.hex() for pair in self.pairs],
            'vault': self.vault.hex(),
            'funded': self.funded,
            'participants_count': len(self.participants),
            'is_sorted': self.is_sorted,
            'cleaned': self.cleaned,
            'remainings_withdrawn': self.remainings_withdrawn,
        }


def get_funding(rewards: Sequence[int], tier_sizes: Sequence[int]) -> int:
    """Return the amount needed to pay every rank of every tier."""
    return sum(reward * size for reward, size in zip(rewards, tier_sizes))


def get_reward_for_rank(rewards: Sequence[int], tier_sizes: Sequence[int], rank: int) -> Optional[int]:
    """Return the reward of a rank, or None when it's out of the rewarded ranks."""
    if rank < 0:
        return None
    tier_end = 0
    for reward, size in zip(rewards, tier_sizes):
        tier_end += size
        if rank < tier_end:
            return reward
    return None


class TradingCompetitionRouter(Router):
    """Router that also runs trading competitions on its pairs.

    Anyone can create a competition over some pairs that share a competition token, funding its rewards in advance.
    Traders who register before it ends accumulate, while it's running, the volume of the competition token they
    trade through this router on those pairs. Trades under `min_volume` aren't counted.

    Lifecycle of a competition:
    1. `create_competition`: the rewards are moved from the creator to a new `RewardsVault`.
    2. `register`: until the end, up to `max_participants`.
    3. `sum_up_competition`: after the end, ranks the participants by volume, ties keep the registration order.
    4. `claim_by_id` / `claim_by_address`: anyone can trigger the payment of a winner, the reward always goes to the
       winner.
    5. `clean_up_competitions`: after the end, stops tracking the competition on its pairs.
    6. `withdraw_remainings`: after the ranking, the creator gets back what won't be paid to any winner.

    Rewards are paid by tiers of ranks, with sizes given by the `REWARD_TIER_SIZES` setting, `rewards[i]` being paid
    to each rank of tier `i`.

    Events:
    - CompetitionCreated(id)
    - Registered(id, participant)
    - ReadyForPayouts(id)
    - RewardClaimed(id, winner, amount)
    - RemainingsWithdrawn(id, amount)
    """

    owner: Address

    # Native fee paid to the owner by anyone else who creates a competition.
    competition_fee: int

    max_participants: int

    competition_list: list[Competition]

    # pair -> ids of the competitions tracking it
    pair_competitions: dict[ContractId, list[int]]

    # participant -> ids of the competitions they registered for
    account_competitions: dict[Address, list[int]]

    @public
    def initialize(
        self,
        ctx: Context,
        factory: ContractId,
        wrapped_native: ContractId,
        competition_fee: Optional[int] = None,
        max_participants: Optional[int] = None,
    ) -> None:
        """The fee and the participants cap default to the `DEFAULT_COMPETITION_FEE` and `DEFAULT_MAX_PARTICIPANTS`
        settings."""
        self._init_router(factory, wrapped_native)
        settings = self.syscall.settings
        if competition_fee is None:
            competition_fee = settings.DEFAULT_COMPETITION_FEE
        if max_participants is None:
            max_participants = settings.DEFAULT_MAX_PARTICIPANTS
        if competition_fee < 0:
            raise ValidationFailed('negative competition fee')
        if max_participants <= 0:
            raise ValidationFailed('max participants must be positive')
        self.owner = ctx.caller_id
        self.competition_fee = competition_fee
        self.max_participants = max_participants
        self.competition_list = []
        self.pair_competitions = {}
        self.account_competitions = {}

    def _only_owner(self, ctx: Context) -> None:
        if ctx.caller_id != self.owner:
            raise Forbidden

    def _get_competition(self, competition_id: int) -> Competition:
        if not 0 <= competition_id < len(self.competition_list):
            raise NoCompetition
        return self.competition_list[competition_id]

    def _get_tier_sizes(self) -> list[int]:
        return self.syscall.settings.REWARD_TIER_SIZES

    def _get_owed(self, competition: Competition) -> int:
        """Return the sum of the rewards of winners who haven't claimed yet."""
        tier_sizes = self._get_tier_sizes()
        owed = 0
        for rank in range(len(competition.participants)):
            reward = get_reward_for_rank(competition.rewards, tier_sizes, rank)
            if reward is None:
                break
            if rank not in competition.claimed:
                owed += reward
        return owed

    @public(allow_deposit=True)
    def create_competition(
        self,
        ctx: Context,
        start_time: int,
        end_time: int,
        reward_token: Address,
        competition_token: Address,
        min_volume: int,
        rewards: list[int],
        pairs: list[ContractId],
    ) -> int:
        """Create a competition, pulling its rewards from the caller, who must have approved the router.

        Returns the id of the competition.
        """
        settings = self.syscall.settings
        if end_time <= start_time or start_time < ctx.timestamp:
            raise InvalidRange
        if end_time - start_time > settings.MAX_COMPETITION_DURATION:
            raise RangeTooBig
        tier_sizes = self._get_tier_sizes()
        if len(rewards) != len(tier_sizes) or not any(rewards):
            raise InvalidRewards
        if any(reward < 0 for reward in rewards):
            raise InvalidRewards
        if competition_token == ZERO_ADDRESS or reward_token == ZERO_ADDRESS:
            raise NotACompetitionToken
        if min_volume < 0:
            raise ValidationFailed('negative min volume')
        if not pairs:
            raise PairsNotProvided
        for pair in pairs:
            if not self.syscall.call_view_method(self.factory, 'is_pair', pair):
                raise PairDoesNotExist
            if competition_token not in self.syscall.call_view_method(pair, 'get_tokens'):
                raise NotACompetitionToken

        if ctx.caller_id == self.owner:
            if ctx.value != 0:
                raise InvalidFee
        else:
            if ctx.value != self.competition_fee:
                raise InvalidFee
            if ctx.value > 0:
                self.syscall.transfer_native(self.owner, ctx.value)

        competition_id = len(self.competition_list)
        funding = get_funding(rewards, tier_sizes)
        vault = self.syscall.create_contract(RewardsVault, encode_uint256(competition_id), reward_token)
        self.syscall.call_public_method(reward_token, 'transfer_from', ctx.caller_id, vault, funding)
        if self.syscall.call_view_method(reward_token, 'balance_of', vault) != funding:
            raise FeeTokensForbidden

        unique_pairs = list(dict.fromkeys(pairs))
        self.competition_list.append(Competition(
            creator=ctx.caller_id,
            start_time=start_time,
            end_time=end_time,
            reward_token=reward_token,
            competition_token=competition_token,
            min_volume=min_volume,
            rewards=list(rewards),
            pairs=unique_pairs,
            vault=vault,
            funded=funding,
        ))
        for pair in unique_pairs:
            self.pair_competitions.setdefault(pair, []).append(competition_id)

        self.syscall.emit_event('CompetitionCreated', id=competition_id)
        self.log.info('competition created', id=competition_id, creator=ctx.caller_id.hex(), funding=funding,
                      start_time=start_time, end_time=end_time)
        return competition_id

    @public
    def register(self, ctx: Context, competition_id: int) -> None:
        """Register the caller as a participant, whose trades are tracked from now on."""
        competition = self._get_competition(competition_id)
        if ctx.caller_id in competition.volumes:
            raise AlreadyRegistered
        if ctx.timestamp >= competition.end_time:
            raise CompetitionEnded
        if len(competition.participants) >= self.max_participants:
            raise CompetitionFull
        competition.participants.append(ctx.caller_id)
        competition.volumes[ctx.caller_id] = 0
        self.account_competitions.setdefault(ctx.caller_id, []).append(competition_id)
        self.syscall.emit_event('Registered', id=competition_id, participant=ctx.caller_id)

    def _on_swap(self, ctx: Context, pair: ContractId, token_in: Address, token_out: Address, amount_in: int,
                 amount_out: int) -> None:
        trader = ctx.caller_id
        for competition_id in self.pair_competitions.get(pair, []):
            competition = self.competition_list[competition_id]
            if not competition.start_time <= ctx.timestamp < competition.end_time:
                continue
            if trader not in competition.volumes:
                continue
            volume = amount_in if token_in == competition.competition_token else amount_out
            if volume >= competition.min_volume:
                competition.volumes[trader] += volume

    @public
    def sum_up_competition(self, ctx: Context, competition_id: int) -> None:
        """Rank the participants of an ended competition by volume, so the winners can be paid."""
        competition = self._get_competition(competition_id)
        if ctx.timestamp < competition.end_time:
            raise NotEnded
        if competition.is_sorted:
            raise AlreadySorted
        # sorted() is stable, ties keep the registration order
        competition.participants = sorted(
            competition.participants, key=lambda participant: competition.volumes[participant], reverse=True
        )
        competition.is_sorted = True
        self.syscall.emit_event('ReadyForPayouts', id=competition_id)
        self.log.info('competition summed up', id=competition_id, participants=len(competition.participants))

    def _claim(self, competition_id: int, competition: Competition, rank: int) -> None:
        reward = get_reward_for_rank(competition.rewards, self._get_tier_sizes(), rank)
        if reward is None or rank >= len(competition.participants):
            raise NotAWinner
        if rank in competition.claimed:
            raise AlreadyClaimed
        winner = competition.participants[rank]
        competition.claimed.add(rank)
        if reward > 0:
            self.syscall.call_public_method(competition.vault, 'withdraw', winner, reward)
        self.syscall.emit_event('RewardClaimed', id=competition_id, winner=winner, amount=reward)

    @public
    def claim_by_id(self, ctx: Context, competition_id: int, rank: int) -> None:
        """Pay the reward of the participant at `rank` of the ranking."""
        competition = self._get_competition(competition_id)
        if not competition.is_sorted:
            raise WinnersNotSelected
        self._claim(competition_id, competition, rank)

    @public
    def claim_by_address(self, ctx: Context, competition_id: int, participant: Address) -> None:
        """Pay the reward of a participant."""
        competition = self._get_competition(competition_id)
        if not competition.is_sorted:
            raise WinnersNotSelected
        if participant not in competition.volumes:
            raise NotAWinner
        self._claim(competition_id, competition, competition.participants.index(participant))

    @public
    def clean_up_competitions(self, ctx: Context, competition_id: int) -> None:
        """Stop tracking an ended competition on its pairs."""
        competition = self._get_competition(competition_id)
        if ctx.timestamp < competition.end_time:
            raise NotEnded
        for pair in competition.pairs:
            competition_ids = self.pair_competitions.get(pair, [])
            if competition_id in competition_ids:
                competition_ids.remove(competition_id)
            if not competition_ids:
                self.pair_competitions.pop(pair, None)
        competition.cleaned = True

    @public
    def withdraw_remainings(self, ctx: Context, competition_id: int) -> None:
        """Send to the creator the rewards that won't be paid, e.g. when there are fewer participants than ranks."""
        competition = self._get_competition(competition_id)
        if ctx.timestamp < competition.end_time:
            raise NotEnded
        if not competition.is_sorted:
            raise WinnersNotSelected
        if competition.remainings_withdrawn:
            raise AlreadyWithdrawn
        balance = self.syscall.call_view_method(competition.vault, 'get_balance')
        remainings = balance - self._get_owed(competition)
        if remainings <= 0:
            raise NothingToWithdraw
        competition.remainings_withdrawn = True
        self.syscall.call_public_method(competition.vault, 'withdraw', competition.creator, remainings)
        self.syscall.emit_event('RemainingsWithdrawn', id=competition_id, amount=remainings)

    @public
    def set_competition_fee(self, ctx: Context, competition_fee: int) -> None:
        self._only_owner(ctx)
        if competition_fee < 0:
            raise ValidationFailed('negative competition fee')
        self.competition_fee = competition_fee

    @public
    def set_max_participants(self, ctx: Context, max_participants: int) -> None:
        self._only_owner(ctx)
        if max_participants <= 0:
            raise ValidationFailed('max participants must be positive')
        self.max_participants = max_participants

    @view
    def get_competition(self, competition_id: int) -> dict[str, Any]:
        return self._get_competition(competition_id).to_json()

    @view
    def competitions_length(self) -> int:
        return len(self.competition_list)

    @view
    def get_rewards(self, competition_id: int) -> list[int]:
        return list(self._get_competition(competition_id).rewards)

    @view
    def get_reward(self, competition_id: int, rank: int) -> Amount:
        """Return the reward of a rank, 0 when it isn't rewarded."""
        competition = self._get_competition(competition_id)
        reward = get_reward_for_rank(competition.rewards, self._get_tier_sizes(), rank)
        return Amount(reward or 0)

    @view
    def get_pairs(self, competition_id: int) -> list[ContractId]:
        return list(self._get_competition(competition_id).pairs)

    @view
    def get_competitions_of_pair(self, pair: ContractId) -> list[int]:
        return list(self.pair_competitions.get(pair, []))

    @view
    def get_competitions_of(self, account: Address) -> list[int]:
        """Return the ids of the competitions `account` registered for."""
        return list(self.account_competitions.get(account, []))

    @view
    def get_participants(self, competition_id: int) -> list[tuple[Address, int]]:
        """Return `(participant, volume)` in registration order, or in ranking order after the sum up."""
        competition = self._get_competition(competition_id)
        return [(participant, competition.volumes[participant]) for participant in competition.participants]

    @view
    def get_participants_paginated(self, competition_id: int, offset: int, limit: int) -> list[tuple[Address, int]]:
        if offset < 0 or limit < 0:
            raise ValidationFailed('offset and limit must not be negative')
        competition = self._get_competition(competition_id)
        return [
            (participant, competition.volumes[participant])
            for participant in competition.participants[offset:offset + limit]
        ]

    @view
    def is_registered(self, competition_id: int, participant: Address) -> bool:
        return participant in self._get_competition(competition_id).volumes

    @view
    def is_claimed(self, competition_id: int, rank: int) -> bool:
        return rank in self._get_competition(competition_id).claimed

    @view
    def get_competition_fee(self) -> Amount:
        return Amount(self.competition_fee)

    @view
    def get_max_participants(self) -> int:
        return self.max_participants

    @view
    def get_owner(self) -> Address:
        return self.owner
