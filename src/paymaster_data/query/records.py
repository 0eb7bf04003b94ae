"""Decoded record shapes returned by the entity builders.

Every key is optional because callers may narrow the field selection; numeric
fields hold exact ``int`` values after decoding.
"""

from __future__ import annotations

from typing import Literal, TypedDict

PaymasterType = Literal["GasLimited", "OneTimeUse"]


class PaymasterRef(TypedDict, total=False):
    """Nested paymaster identity embedded in child records."""

    id: str
    address: str
    contractType: PaymasterType


class PoolRef(TypedDict, total=False):
    """Nested pool identity embedded in child records."""

    id: str
    poolId: int
    network: str
    chainId: int


class PaymasterContract(TypedDict, total=False):
    """Deployed paymaster contract with running balances."""

    id: str
    contractType: PaymasterType
    address: str
    network: str
    chainId: int
    totalUsersDeposit: int
    currentDeposit: int
    revenue: int
    deployedAtBlock: int
    deployedAtTransaction: str
    deployedAtTimestamp: int
    lastUpdatedBlock: int
    lastUpdatedTimestamp: int


class Pool(TypedDict, total=False):
    """Prepaid gas pool managed by one paymaster."""

    id: str
    poolId: int
    network: str
    chainId: int
    paymaster: PaymasterRef
    joiningFee: int
    totalDeposits: int
    memberCount: int
    currentMerkleRoot: int
    currentRootIndex: int
    rootHistoryCount: int
    createdAtBlock: int
    createdAtTransaction: str
    createdAtTimestamp: int
    lastUpdatedBlock: int
    lastUpdatedTimestamp: int


class PoolMember(TypedDict, total=False):
    """
    Membership of one identity commitment in a pool.

    ``gasUsed`` is only populated for GasLimited pools and ``nullifierUsed`` only
    for OneTimeUse pools.
    """

    id: str
    network: str
    chainId: int
    pool: PoolRef
    memberIndex: int
    identityCommitment: int
    merkleRootWhenAdded: int
    rootIndexWhenAdded: int
    addedAtBlock: int
    addedAtTransaction: str
    addedAtTimestamp: int
    gasUsed: int
    nullifierUsed: bool
    nullifier: int


class MerkleRoot(TypedDict, total=False):
    """One entry of a pool's root history."""

    id: str
    network: str
    chainId: int
    pool: PoolRef
    root: int
    rootIndex: int
    createdAtBlock: int
    createdAtTransaction: str
    createdAtTimestamp: int


class Transaction(TypedDict, total=False):
    """Sponsored user operation executed through a paymaster."""

    id: str
    transactionHash: str
    sender: str
    network: str
    chainId: int
    paymaster: PaymasterRef
    pool: PoolRef
    nullifier: int
    actualGasCost: int
    gasPrice: int
    totalGasUsed: int
    executedAtBlock: int
    executedAtTransaction: str
    executedAtTimestamp: int


class RevenueWithdrawal(TypedDict, total=False):
    """Revenue withdrawn from a paymaster by its owner."""

    id: str
    network: str
    chainId: int
    paymaster: PaymasterRef
    recipient: str
    amount: int
    withdrawnAtBlock: int
    withdrawnAtTransaction: str
    withdrawnAtTimestamp: int


class UserOperationRef(TypedDict, total=False):
    """Nested user operation identity."""

    id: str


class NullifierUsage(TypedDict, total=False):
    """Consumption state of one nullifier."""

    id: str
    nullifier: int
    network: str
    chainId: int
    paymasterAddress: str
    paymasterType: PaymasterType
    poolId: int
    isUsed: bool
    gasUsed: int
    userOperation: UserOperationRef
    firstUsedAtBlock: int
    firstUsedAtTimestamp: int
    lastUpdatedBlock: int
    lastUpdatedTimestamp: int
    createdAtBlock: int
    createdAtTimestamp: int


class DailyPoolStats(TypedDict, total=False):
    """Per-pool activity for one UTC day."""

    id: str
    date: str
    poolId: int
    network: str
    chainId: int
    newMembers: int
    userOperations: int
    gasSpent: int
    revenueGenerated: int
    totalMembers: int
    totalDeposits: int


class DailyGlobalStats(TypedDict, total=False):
    """Network-wide activity for one UTC day."""

    id: str
    date: str
    network: str
    chainId: int
    newPools: int
    totalNewMembers: int
    totalUserOperations: int
    totalGasSpent: int
    totalRevenueGenerated: int
    totalActivePools: int
    totalMembers: int


class NetworkInfo(TypedDict, total=False):
    """Lifetime totals for one indexed network."""

    id: str
    name: str
    chainId: int
    totalPaymasters: int
    totalPools: int
    totalMembers: int
    totalUserOperations: int
    totalGasSpent: int
    totalRevenue: int
    firstDeploymentBlock: int
    firstDeploymentTimestamp: int
    lastActivityBlock: int
    lastActivityTimestamp: int
