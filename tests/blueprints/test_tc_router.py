from typing import Optional

import pytest

from lovelyswap.blueprints.erc20 import DeflatingERC20
from lovelyswap.blueprints.tc_router import TradingCompetitionRouter, get_funding, get_reward_for_rank
from lovelyswap.blueprints.wrapped_native import WrappedNative
from lovelyswap.exception import (
    AlreadyClaimed,
    AlreadyRegistered,
    AlreadySorted,
    AlreadyWithdrawn,
    CompetitionEnded,
    CompetitionFull,
    FeeTokensForbidden,
    Forbidden,
    InsufficientOutputAmount,
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
from lovelyswap.types import MAX_UINT256, ZERO_ADDRESS, Address, ContractId
from tests.blueprints.unittest import DAY, BlueprintTestCase, expand_to_18_decimals

REWARDS = [1000, 500, 100, 10]
# 1000 * 1 + 500 * 4 + 100 * 10 + 10 * 35
FUNDING = 4350


class TradingCompetitionRouterTestCase(BlueprintTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.fee = self._settings.DEFAULT_COMPETITION_FEE

        self.owner = self.gen_random_address()
        self.creator = self.gen_random_address()
        self.runner.mint_native(self.owner, expand_to_18_decimals(10))
        self.runner.mint_native(self.creator, expand_to_18_decimals(10))

        self.factory, _ = self.create_factory(self.owner)
        self.wrapped_native = self.deploy(WrappedNative, self.owner)
        self.router = self.deploy(TradingCompetitionRouter, self.owner, self.factory, self.wrapped_native)

        self.token = self.create_token(self.owner)
        self.other = self.create_token(self.owner)
        self.third = self.create_token(self.owner)
        self.pair = self.create_pair(self.factory, self.owner, self.token, self.other)
        # a pair without the competition token
        self.other_pair = self.create_pair(self.factory, self.owner, self.other, self.third)
        for token in (self.token, self.other, self.third):
            self.call(token, 'approve', self.owner, self.router, MAX_UINT256)
        for token_a, token_b in ((self.token, self.other), (self.other, self.third)):
            self.call(self.router, 'add_liquidity', self.owner, token_a, token_b, expand_to_18_decimals(1000),
                      expand_to_18_decimals(1000), 0, 0, self.owner, MAX_UINT256)

        self.reward_token = self.create_token(self.creator)
        self.call(self.reward_token, 'approve', self.creator, self.router, MAX_UINT256)

        self.start_time = self.now + 100
        self.end_time = self.start_time + DAY

    def create_trader(self) -> Address:
        trader = self.gen_random_address()
        for token in (self.token, self.other, self.third):
            self.call(token, 'transfer', self.owner, trader, expand_to_18_decimals(100))
            self.call(token, 'approve', trader, self.router, MAX_UINT256)
        return trader

    def create_competition(self, *, caller: Optional[Address] = None, start_time: Optional[int] = None,
                           end_time: Optional[int] = None, reward_token: Optional[Address] = None,
                           competition_token: Optional[Address] = None, min_volume: int = 0,
                           rewards: Optional[list[int]] = None, pairs: Optional[list[ContractId]] = None,
                           value: Optional[int] = None) -> int:
        return self.call(
            self.router,
            'create_competition',
            caller or self.creator,
            self.start_time if start_time is None else start_time,
            self.end_time if end_time is None else end_time,
            reward_token or self.reward_token,
            competition_token or self.token,
            min_volume,
            REWARDS if rewards is None else rewards,
            [self.pair] if pairs is None else pairs,
            value=self.fee if value is None else value,
        )

    def swap(self, trader: Address, amount_in: int, path: list[Address]) -> list[int]:
        return self.call(self.router, 'swap_exact_tokens_for_tokens', trader, amount_in, 0, path, trader,
                         MAX_UINT256)

    def volume_of(self, competition_id: int, trader: Address) -> int:
        return dict(self.view(self.router, 'get_participants', competition_id))[trader]

    def advance_to(self, timestamp: int) -> None:
        self.advance(timestamp - self.get_current_timestamp())

    def get_vault(self, competition_id: int) -> ContractId:
        return ContractId(bytes.fromhex(self.view(self.router, 'get_competition', competition_id)['vault']))

    def test_initialize(self) -> None:
        self.assertEqual(self.view(self.router, 'get_owner'), self.owner)
        self.assertEqual(self.view(self.router, 'get_factory'), self.factory)
        self.assertEqual(self.view(self.router, 'get_wrapped_native'), self.wrapped_native)
        self.assertEqual(self.view(self.router, 'get_competition_fee'), self._settings.DEFAULT_COMPETITION_FEE)
        self.assertEqual(self.view(self.router, 'get_max_participants'), self._settings.DEFAULT_MAX_PARTICIPANTS)
        self.assertEqual(self.view(self.router, 'competitions_length'), 0)

        router = self.deploy(TradingCompetitionRouter, self.owner, self.factory, self.wrapped_native, 5, 10)
        self.assertEqual(self.view(router, 'get_competition_fee'), 5)
        self.assertEqual(self.view(router, 'get_max_participants'), 10)

        with pytest.raises(ValidationFailed):
            self.deploy(TradingCompetitionRouter, self.owner, self.factory, self.wrapped_native, 5, 0)
        with pytest.raises(ValidationFailed):
            self.deploy(TradingCompetitionRouter, self.owner, self.factory, self.wrapped_native, -1, 10)

    def test_create_competition(self) -> None:
        owner_native = self.runner.get_native_balance(self.owner)
        creator_native = self.runner.get_native_balance(self.creator)

        competition_id = self.create_competition()
        self.assertEqual(competition_id, 0)
        self.assertEqual(self.get_last_event('CompetitionCreated', self.router).args, dict(id=0))
        self.assertEqual(self.view(self.router, 'competitions_length'), 1)

        # the fee goes to the owner
        self.assertEqual(self.runner.get_native_balance(self.owner), owner_native + self.fee)
        self.assertEqual(self.runner.get_native_balance(self.creator), creator_native - self.fee)
        self.assertEqual(self.runner.get_native_balance(self.router), 0)

        vault = self.get_vault(competition_id)
        self.assertEqual(self.balance_of(self.reward_token, vault), FUNDING)
        self.assertEqual(self.view(vault, 'get_balance'), FUNDING)
        self.assertEqual(self.view(vault, 'get_router'), self.router)
        self.assertEqual(self.view(vault, 'get_token'), self.reward_token)
        self.assertEqual(self.balance_of(self.reward_token, self.creator), expand_to_18_decimals(10000) - FUNDING)

        competition = self.view(self.router, 'get_competition', competition_id)
        self.assertEqual(competition['creator'], self.creator.hex())
        self.assertEqual(competition['start_time'], self.start_time)
        self.assertEqual(competition['end_time'], self.end_time)
        self.assertEqual(competition['competition_token'], self.token.hex())
        self.assertEqual(competition['funded'], FUNDING)
        self.assertEqual(competition['participants_count'], 0)
        self.assertFalse(competition['is_sorted'])
        self.assertEqual(self.view(self.router, 'get_rewards', competition_id), REWARDS)
        self.assertEqual(self.view(self.router, 'get_pairs', competition_id), [self.pair])
        self.assertEqual(self.view(self.router, 'get_competitions_of_pair', self.pair), [competition_id])
        self.assertEqual(self.view(self.router, 'get_competitions_of_pair', self.other_pair), [])

        # ids are sequential and vaults are distinct
        self.assertEqual(self.create_competition(), 1)
        self.assertNotEqual(self.get_vault(1), vault)
        self.assertEqual(self.view(self.router, 'get_competitions_of_pair', self.pair), [0, 1])

    def test_create_competition_duplicated_pairs(self) -> None:
        competition_id = self.create_competition(pairs=[self.pair, self.pair])
        self.assertEqual(self.view(self.router, 'get_pairs', competition_id), [self.pair])
        self.assertEqual(self.view(self.router, 'get_competitions_of_pair', self.pair), [competition_id])

    def test_create_competition_fee(self) -> None:
        with pytest.raises(InvalidFee):
            self.create_competition(value=0)
        with pytest.raises(InvalidFee):
            self.create_competition(value=self.fee + 1)

        # the owner doesn't pay the fee
        self.call(self.reward_token, 'transfer', self.creator, self.owner, FUNDING * 2)
        self.call(self.reward_token, 'approve', self.owner, self.router, MAX_UINT256)
        with pytest.raises(InvalidFee):
            self.create_competition(caller=self.owner, value=self.fee)
        owner_native = self.runner.get_native_balance(self.owner)
        self.create_competition(caller=self.owner, value=0)
        self.assertEqual(self.runner.get_native_balance(self.owner), owner_native)

        # failed attempts don't keep anything
        self.assertEqual(self.view(self.router, 'competitions_length'), 1)
        self.assertEqual(self.balance_of(self.reward_token, self.owner), FUNDING)

    def test_create_competition_invalid(self) -> None:
        with pytest.raises(InvalidRange):
            self.create_competition(end_time=self.start_time)
        with pytest.raises(InvalidRange):
            self.create_competition(start_time=self.now - 1)
        with pytest.raises(RangeTooBig):
            self.create_competition(end_time=self.start_time + 30 * DAY + 1)
        with pytest.raises(InvalidRewards):
            self.create_competition(rewards=[1000, 500, 100])
        with pytest.raises(InvalidRewards):
            self.create_competition(rewards=[0, 0, 0, 0])
        with pytest.raises(InvalidRewards):
            self.create_competition(rewards=[1000, -1, 0, 0])
        with pytest.raises(NotACompetitionToken):
            self.create_competition(competition_token=ZERO_ADDRESS)
        with pytest.raises(ValidationFailed):
            self.create_competition(min_volume=-1)
        with pytest.raises(PairsNotProvided):
            self.create_competition(pairs=[])
        with pytest.raises(PairDoesNotExist):
            self.create_competition(pairs=[self.pair, self.gen_random_address()])
        with pytest.raises(NotACompetitionToken):
            self.create_competition(pairs=[self.pair, self.other_pair])

        # the longest competition allowed
        self.create_competition(end_time=self.start_time + 30 * DAY)

    def test_create_competition_fee_on_transfer_reward(self) -> None:
        reward_token = self.create_token(self.creator, blueprint_class=DeflatingERC20)
        self.call(reward_token, 'approve', self.creator, self.router, MAX_UINT256)
        with pytest.raises(FeeTokensForbidden):
            self.create_competition(reward_token=reward_token)
        self.assertEqual(self.view(self.router, 'competitions_length'), 0)

    def test_register(self) -> None:
        competition_id = self.create_competition()
        trader = self.create_trader()

        with pytest.raises(NoCompetition):
            self.call(self.router, 'register', trader, competition_id + 1)

        # registering is possible before the start
        self.call(self.router, 'register', trader, competition_id)
        self.assertEqual(self.get_last_event('Registered', self.router).args,
                         dict(id=competition_id, participant=trader))
        self.assertTrue(self.view(self.router, 'is_registered', competition_id, trader))
        self.assertEqual(self.view(self.router, 'get_participants', competition_id), [(trader, 0)])
        with pytest.raises(AlreadyRegistered):
            self.call(self.router, 'register', trader, competition_id)
        self.assertEqual(self.view(self.router, 'get_competitions_of', trader), [competition_id])
        other_id = self.create_competition()
        self.call(self.router, 'register', trader, other_id)
        self.assertEqual(self.view(self.router, 'get_competitions_of', trader), [competition_id, other_id])
        self.assertEqual(self.view(self.router, 'get_competitions_of', self.creator), [])

        self.advance_to(self.end_time - 1)
        self.call(self.router, 'register', self.creator, competition_id)
        self.advance(1)
        late = self.gen_random_address()
        with pytest.raises(CompetitionEnded):
            self.call(self.router, 'register', late, competition_id)
        self.assertFalse(self.view(self.router, 'is_registered', competition_id, late))

    def test_competition_full(self) -> None:
        with pytest.raises(Forbidden):
            self.call(self.router, 'set_max_participants', self.creator, 2)
        self.call(self.router, 'set_max_participants', self.owner, 2)
        competition_id = self.create_competition()
        self.call(self.router, 'register', self.gen_random_address(), competition_id)
        self.call(self.router, 'register', self.gen_random_address(), competition_id)
        with pytest.raises(CompetitionFull):
            self.call(self.router, 'register', self.gen_random_address(), competition_id)

    def test_volume(self) -> None:
        competition_id = self.create_competition(min_volume=expand_to_18_decimals(1) // 10)
        trader = self.create_trader()
        outsider = self.create_trader()
        self.call(self.router, 'register', trader, competition_id)

        # not started yet
        self.swap(trader, expand_to_18_decimals(1), [self.token, self.other])
        self.assertEqual(self.volume_of(competition_id, trader), 0)

        self.advance_to(self.start_time)
        # selling the competition token counts what was sold
        amounts = self.swap(trader, expand_to_18_decimals(2), [self.token, self.other])
        expected_volume = amounts[0]
        self.assertEqual(self.volume_of(competition_id, trader), expected_volume)

        # buying it counts what was bought
        amounts = self.swap(trader, expand_to_18_decimals(1), [self.other, self.token])
        expected_volume += amounts[-1]
        self.assertEqual(self.volume_of(competition_id, trader), expected_volume)

        # the hop through the competition pair counts, the other one doesn't
        amounts = self.swap(trader, expand_to_18_decimals(1), [self.third, self.other, self.token])
        expected_volume += amounts[-1]
        self.assertEqual(self.volume_of(competition_id, trader), expected_volume)
        self.swap(trader, expand_to_18_decimals(1), [self.other, self.third])
        self.assertEqual(self.volume_of(competition_id, trader), expected_volume)

        # trades under the minimum volume don't count
        self.swap(trader, expand_to_18_decimals(1) // 100, [self.token, self.other])
        self.assertEqual(self.volume_of(competition_id, trader), expected_volume)

        # unregistered traders aren't tracked
        self.swap(outsider, expand_to_18_decimals(1), [self.token, self.other])
        self.assertFalse(self.view(self.router, 'is_registered', competition_id, outsider))

        # ended
        self.advance_to(self.end_time)
        self.swap(trader, expand_to_18_decimals(1), [self.token, self.other])
        self.assertEqual(self.volume_of(competition_id, trader), expected_volume)

    def test_swap_with_failed_min_output_isnt_tracked(self) -> None:
        competition_id = self.create_competition()
        trader = self.create_trader()
        self.call(self.router, 'register', trader, competition_id)
        self.advance_to(self.start_time)
        with pytest.raises(InsufficientOutputAmount):
            self.call(self.router, 'swap_exact_tokens_for_tokens', trader, expand_to_18_decimals(1), MAX_UINT256,
                      [self.token, self.other], trader, MAX_UINT256)
        self.assertEqual(self.volume_of(competition_id, trader), 0)

    def test_sum_up_and_claim(self) -> None:
        competition_id = self.create_competition()
        trader1, trader2, trader3, trader4 = [self.create_trader() for _ in range(4)]
        for trader in (trader1, trader2, trader3, trader4):
            self.call(self.router, 'register', trader, competition_id)

        self.advance_to(self.start_time)
        self.swap(trader2, expand_to_18_decimals(3), [self.token, self.other])
        self.swap(trader3, expand_to_18_decimals(1), [self.token, self.other])

        with pytest.raises(NotEnded):
            self.call(self.router, 'sum_up_competition', self.creator, competition_id)
        with pytest.raises(WinnersNotSelected):
            self.call(self.router, 'claim_by_id', trader2, competition_id, 0)

        self.advance_to(self.end_time)
        with pytest.raises(WinnersNotSelected):
            self.call(self.router, 'claim_by_address', trader2, competition_id, trader2)
        self.call(self.router, 'sum_up_competition', self.gen_random_address(), competition_id)
        self.assertEqual(self.get_last_event('ReadyForPayouts', self.router).args, dict(id=competition_id))
        with pytest.raises(AlreadySorted):
            self.call(self.router, 'sum_up_competition', self.creator, competition_id)

        # ties keep the registration order
        ranking = [participant for participant, _ in self.view(self.router, 'get_participants', competition_id)]
        self.assertEqual(ranking, [trader2, trader3, trader1, trader4])

        # anyone can trigger the payment, which goes to the winner
        self.call(self.router, 'claim_by_id', self.gen_random_address(), competition_id, 0)
        self.assertEqual(self.get_last_event('RewardClaimed', self.router).args,
                         dict(id=competition_id, winner=trader2, amount=1000))
        self.assertEqual(self.balance_of(self.reward_token, trader2), 1000)
        self.assertTrue(self.view(self.router, 'is_claimed', competition_id, 0))
        with pytest.raises(AlreadyClaimed):
            self.call(self.router, 'claim_by_id', trader2, competition_id, 0)
        with pytest.raises(AlreadyClaimed):
            self.call(self.router, 'claim_by_address', trader2, competition_id, trader2)

        self.call(self.router, 'claim_by_address', trader3, competition_id, trader3)
        self.assertEqual(self.balance_of(self.reward_token, trader3), 500)

        with pytest.raises(NotAWinner):
            self.call(self.router, 'claim_by_id', trader3, competition_id, 4)
        with pytest.raises(NotAWinner):
            self.call(self.router, 'claim_by_id', trader3, competition_id, 100)
        with pytest.raises(NotAWinner):
            self.call(self.router, 'claim_by_address', trader3, competition_id, self.gen_random_address())

        # only the rewards of the ranks without a participant return to the creator
        creator_balance = self.balance_of(self.reward_token, self.creator)
        vault = self.get_vault(competition_id)
        self.call(self.router, 'withdraw_remainings', self.gen_random_address(), competition_id)
        remainings = FUNDING - 1000 - 500 - 2 * 500
        self.assertEqual(self.get_last_event('RemainingsWithdrawn', self.router).args,
                         dict(id=competition_id, amount=remainings))
        self.assertEqual(self.balance_of(self.reward_token, self.creator), creator_balance + remainings)
        self.assertEqual(self.view(vault, 'get_balance'), 1000)
        with pytest.raises(AlreadyWithdrawn):
            self.call(self.router, 'withdraw_remainings', self.creator, competition_id)

        # the remaining winners can still claim
        self.call(self.router, 'claim_by_id', trader1, competition_id, 2)
        self.call(self.router, 'claim_by_id', trader4, competition_id, 3)
        self.assertEqual(self.balance_of(self.reward_token, trader1), 500)
        self.assertEqual(self.balance_of(self.reward_token, trader4), 500)
        self.assertEqual(self.view(vault, 'get_balance'), 0)

    def test_withdraw_remainings(self) -> None:
        competition_id = self.create_competition(rewards=[1000, 0, 0, 0])
        trader = self.create_trader()
        self.call(self.router, 'register', trader, competition_id)

        with pytest.raises(NotEnded):
            self.call(self.router, 'withdraw_remainings', self.creator, competition_id)
        self.advance_to(self.end_time)
        with pytest.raises(WinnersNotSelected):
            self.call(self.router, 'withdraw_remainings', self.creator, competition_id)
        self.call(self.router, 'sum_up_competition', self.creator, competition_id)
        # everything is owed to the only winner
        with pytest.raises(NothingToWithdraw):
            self.call(self.router, 'withdraw_remainings', self.creator, competition_id)
        # only ranks with a participant can claim
        with pytest.raises(NotAWinner):
            self.call(self.router, 'claim_by_id', trader, competition_id, 1)
        self.call(self.router, 'claim_by_address', trader, competition_id, trader)
        self.assertEqual(self.balance_of(self.reward_token, trader), 1000)

    def test_withdraw_remainings_without_participants(self) -> None:
        competition_id = self.create_competition()
        self.advance_to(self.end_time)
        self.call(self.router, 'sum_up_competition', self.creator, competition_id)
        self.call(self.router, 'withdraw_remainings', self.creator, competition_id)
        self.assertEqual(self.balance_of(self.reward_token, self.creator), expand_to_18_decimals(10000))

    def test_more_participants_than_rewards(self) -> None:
        self.call(self.router, 'set_max_participants', self.owner, 60)
        competition_id = self.create_competition()
        traders = [self.create_trader() for _ in range(60)]
        for trader in traders:
            self.call(self.router, 'register', trader, competition_id)
        with pytest.raises(CompetitionFull):
            self.call(self.router, 'register', self.gen_random_address(), competition_id)
        self.assertEqual(self.view(self.router, 'get_competition', competition_id)['participants_count'], 60)
        self.assertEqual(len(self.view(self.router, 'get_participants_paginated', competition_id, 0, 100)), 60)

        self.advance_to(self.start_time)
        for i, trader in enumerate(traders):
            # some traders don't trade and tie at zero
            if i % 7 == 0:
                continue
            amount_in = self.rng.randint(1, expand_to_18_decimals(5))
            self.swap(trader, amount_in, [self.token, self.other])

        volumes = self.view(self.router, 'get_participants', competition_id)
        expected_ranking = sorted(volumes, key=lambda item: item[1], reverse=True)

        self.advance_to(self.end_time)
        self.call(self.router, 'sum_up_competition', self.creator, competition_id)
        ranking = self.view(self.router, 'get_participants', competition_id)
        self.assertEqual(ranking, expected_ranking)

        tier_sizes = self._settings.REWARD_TIER_SIZES
        claimed = 0
        for rank, (winner, _) in enumerate(ranking[:50]):
            self.call(self.router, 'claim_by_id', self.gen_random_address(), competition_id, rank)
            reward = get_reward_for_rank(REWARDS, tier_sizes, rank)
            self.assertEqual(self.balance_of(self.reward_token, winner), reward)
            claimed += reward
        for rank in range(50, 60):
            with pytest.raises(NotAWinner):
                self.call(self.router, 'claim_by_id', self.creator, competition_id, rank)
        loser = ranking[-1][0]
        with pytest.raises(NotAWinner):
            self.call(self.router, 'claim_by_address', loser, competition_id, loser)
        self.assertEqual(self.balance_of(self.reward_token, loser), 0)

        self.assertEqual(claimed, FUNDING)
        with pytest.raises(NothingToWithdraw):
            self.call(self.router, 'withdraw_remainings', self.creator, competition_id)
        self.assertEqual(self.view(self.get_vault(competition_id), 'get_balance'), 0)

    def test_payouts_match_funding(self) -> None:
        self.call(self.router, 'set_max_participants', self.owner, 50)
        tier_sizes = self._settings.REWARD_TIER_SIZES
        for count in (0, 1, 5, 15, 49, 50):
            competition_id = self.create_competition()
            participants = [self.gen_random_address() for _ in range(count)]
            for participant in participants:
                self.call(self.router, 'register', participant, competition_id)
            if count == 50:
                with pytest.raises(CompetitionFull):
                    self.call(self.router, 'register', self.gen_random_address(), competition_id)

            self.advance_to(self.end_time)
            self.call(self.router, 'sum_up_competition', self.creator, competition_id)
            # without volume the ranking is the registration order
            self.assertEqual([p for p, _ in self.view(self.router, 'get_participants', competition_id)],
                             participants)

            creator_balance = self.balance_of(self.reward_token, self.creator)
            if count == 50:
                with pytest.raises(NothingToWithdraw):
                    self.call(self.router, 'withdraw_remainings', self.creator, competition_id)
            else:
                self.call(self.router, 'withdraw_remainings', self.creator, competition_id)
            remainings = self.balance_of(self.reward_token, self.creator) - creator_balance

            claimed = 0
            for rank, participant in enumerate(participants):
                self.call(self.router, 'claim_by_address', participant, competition_id, participant)
                self.assertEqual(self.balance_of(self.reward_token, participant),
                                 get_reward_for_rank(REWARDS, tier_sizes, rank))
                claimed += self.balance_of(self.reward_token, participant)

            self.assertEqual(claimed + remainings, FUNDING)
            self.assertEqual(self.view(self.get_vault(competition_id), 'get_balance'), 0)

            self.start_time = self.get_current_timestamp() + 100
            self.end_time = self.start_time + DAY

    def test_clean_up_competitions(self) -> None:
        competition_id = self.create_competition()
        other_id = self.create_competition(end_time=self.end_time + DAY)
        with pytest.raises(NotEnded):
            self.call(self.router, 'clean_up_competitions', self.creator, competition_id)

        self.advance_to(self.end_time)
        self.call(self.router, 'clean_up_competitions', self.gen_random_address(), competition_id)
        self.assertEqual(self.view(self.router, 'get_competitions_of_pair', self.pair), [other_id])
        self.assertTrue(self.view(self.router, 'get_competition', competition_id)['cleaned'])
        # cleaning up twice is harmless
        self.call(self.router, 'clean_up_competitions', self.creator, competition_id)
        self.assertEqual(self.view(self.router, 'get_competitions_of_pair', self.pair), [other_id])

        self.advance_to(self.end_time + DAY)
        self.call(self.router, 'clean_up_competitions', self.creator, other_id)
        self.assertEqual(self.view(self.router, 'get_competitions_of_pair', self.pair), [])

    def test_vault_only_router(self) -> None:
        competition_id = self.create_competition()
        vault = self.get_vault(competition_id)
        with pytest.raises(Forbidden):
            self.call(vault, 'withdraw', self.creator, self.creator, FUNDING)
        self.assertEqual(self.view(vault, 'get_balance'), FUNDING)

    def test_set_competition_fee(self) -> None:
        with pytest.raises(Forbidden):
            self.call(self.router, 'set_competition_fee', self.creator, 0)
        with pytest.raises(ValidationFailed):
            self.call(self.router, 'set_competition_fee', self.owner, -1)
        with pytest.raises(ValidationFailed):
            self.call(self.router, 'set_max_participants', self.owner, 0)

        self.call(self.router, 'set_competition_fee', self.owner, 0)
        self.assertEqual(self.view(self.router, 'get_competition_fee'), 0)
        creator_native = self.runner.get_native_balance(self.creator)
        self.create_competition(value=0)
        self.assertEqual(self.runner.get_native_balance(self.creator), creator_native)

    def test_views(self) -> None:
        competition_id = self.create_competition()
        traders = [self.create_trader() for _ in range(3)]
        for trader in traders:
            self.call(self.router, 'register', trader, competition_id)

        self.assertEqual(self.view(self.router, 'get_participants_paginated', competition_id, 1, 5),
                         [(traders[1], 0), (traders[2], 0)])
        self.assertEqual(self.view(self.router, 'get_participants_paginated', competition_id, 3, 5), [])
        with pytest.raises(ValidationFailed):
            self.view(self.router, 'get_participants_paginated', competition_id, -1, 5)

        self.assertEqual(self.view(self.router, 'get_reward', competition_id, 0), 1000)
        self.assertEqual(self.view(self.router, 'get_reward', competition_id, 4), 500)
        self.assertEqual(self.view(self.router, 'get_reward', competition_id, 5), 100)
        self.assertEqual(self.view(self.router, 'get_reward', competition_id, 49), 10)
        self.assertEqual(self.view(self.router, 'get_reward', competition_id, 50), 0)
        self.assertFalse(self.view(self.router, 'is_claimed', competition_id, 0))
        with pytest.raises(NoCompetition):
            self.view(self.router, 'get_competition', competition_id + 1)

    def test_reward_tiers(self) -> None:
        tier_sizes = [1, 4, 10, 35]
        self.assertEqual(get_funding(REWARDS, tier_sizes), FUNDING)
        self.assertEqual(get_reward_for_rank(REWARDS, tier_sizes, 0), 1000)
        self.assertEqual(get_reward_for_rank(REWARDS, tier_sizes, 1), 500)
        self.assertEqual(get_reward_for_rank(REWARDS, tier_sizes, 14), 100)
        self.assertEqual(get_reward_for_rank(REWARDS, tier_sizes, 15), 10)
        self.assertIsNone(get_reward_for_rank(REWARDS, tier_sizes, 50))
        self.assertIsNone(get_reward_for_rank(REWARDS, tier_sizes, -1))
