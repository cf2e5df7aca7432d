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

"""
This module contains every exception raised by lovelyswap contracts and by the runtime that executes them.

Contract code fails a call by raising a subclass of `ContractFail`. The runner catches it at the top-level call,
reverts every state change made by the transaction and re-raises it to the caller. Any other exception raised by
contract code is considered a bug in the contract and is wrapped into a `ContractFail` so the transaction is still
reverted.
"""


class LovelyError(Exception):
    """General error class for lovelyswap."""
    pass


class BlueprintSyntaxError(LovelyError):
    """Raised when a blueprint class is malformed."""
    pass


class ContractFail(LovelyError):
    """Raised by contracts to fail execution. The whole transaction is reverted."""
    pass


# Runtime errors.

class ContractDoesNotExist(ContractFail):
    pass


class ContractAlreadyExists(ContractFail):
    """Raised when a contract is created at an address that is already in use."""
    pass


class MethodNotFound(ContractFail):
    """Raised when a method is not found in a contract."""
    pass


class InvalidMethodCall(ContractFail):
    """Raised when a method is called in a way it does not support."""
    pass


class ViewMethodError(ContractFail):
    """Raised when a view method tries to change the state."""
    pass


class CallDepthExceeded(ContractFail):
    """Raised when the maximum call depth or call count is reached."""
    pass


class InsufficientNativeBalance(ContractFail):
    """Raised when there is not enough native balance to move."""
    pass


# Errors shared by several contracts.

class Forbidden(ContractFail):
    """Raised when the caller is not allowed to execute the method."""
    pass


class AlreadyInitialized(InvalidMethodCall, Forbidden):
    """Raised when `initialize` is called on a contract that already exists."""
    pass


class ZeroAddress(ContractFail):
    pass


class IdenticalAddresses(ContractFail):
    pass


class ValidationFailed(ContractFail):
    pass


class Expired(ContractFail):
    """Raised when a deadline has already passed."""
    pass


class InsufficientLiquidity(ContractFail):
    pass


class InsufficientInputAmount(ContractFail):
    pass


class InsufficientOutputAmount(ContractFail):
    pass


# Token errors.

class InsufficientBalance(ContractFail):
    pass


class InsufficientAllowance(ContractFail):
    pass


class InvalidSignature(ContractFail):
    pass


# Pair errors.

class Locked(ContractFail):
    """Raised on a reentrant call into a pair."""
    pass


class NotActive(ContractFail):
    """Raised when a pair is used before its activation time."""
    pass


class Overflow(ContractFail):
    pass


class InsufficientLiquidityMinted(ContractFail):
    pass


class InsufficientLiquidityBurned(ContractFail):
    pass


class InvalidTo(ContractFail):
    pass


class K(ContractFail):
    """Raised when a swap would decrease the constant product."""
    pass


# Factory errors.

class AlreadyWhitelisted(ContractFail):
    pass


class InvalidPendingPeriod(ContractFail):
    pass


class TokenANotWhitelisted(ContractFail):
    pass


class TokenBNotWhitelisted(ContractFail):
    pass


class PairExists(ContractFail):
    pass


class InvalidActiveFrom(ContractFail):
    pass


# Router errors.

class InsufficientAmount(ContractFail):
    pass


class InvalidPath(ContractFail):
    pass


class PairNotExist(ContractFail):
    pass


class InsufficientAAmount(ContractFail):
    pass


class InsufficientBAmount(ContractFail):
    pass


class ExcessiveInputAmount(ContractFail):
    pass


# Trading competition errors.

class InvalidRange(ContractFail):
    pass


class RangeTooBig(ContractFail):
    pass


class InvalidRewards(ContractFail):
    pass


class NotACompetitionToken(ContractFail):
    pass


class PairsNotProvided(ContractFail):
    pass


class PairDoesNotExist(ContractFail):
    pass


class FeeTokensForbidden(ContractFail):
    """Raised when the reward token does not deliver the exact amount transferred."""
    pass


class InvalidFee(ContractFail):
    pass


class NoCompetition(ContractFail):
    pass


class AlreadyRegistered(ContractFail):
    pass


class CompetitionEnded(ContractFail):
    pass


class CompetitionFull(Forbidden):
    """Raised when a competition already has the maximum number of participants."""
    pass


class NotEnded(ContractFail):
    pass


class AlreadySorted(ContractFail):
    pass


class WinnersNotSelected(ContractFail):
    pass


class NotAWinner(ContractFail):
    pass


class AlreadyClaimed(ContractFail):
    pass


class AlreadyWithdrawn(ContractFail):
    pass


class NothingToWithdraw(ContractFail):
    pass
