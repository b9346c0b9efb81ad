"""
Chain Replacement Rules

A Chain only replaces its blocks when it was built with a consensus rule.
Rules see the current blocks and a candidate sequence and decide whether
to adopt the candidate.

LongestValidChainRule:
- Candidate must validate end to end (same genesis, linkage, hashes)
- Candidate must be strictly longer than the current chain

Author: hashchain Project
"""

from abc import ABC, abstractmethod
from typing import Sequence

from ..core_crypto.digest import calculate_block_hash
from .ledger import Block, HashFunction, validate_blocks


class ConsensusRule(ABC):
    """Decides whether a candidate block sequence replaces the current one."""

    @abstractmethod
    def should_replace(
        self,
        current: Sequence[Block],
        candidate: Sequence[Block],
        calculate_hash: HashFunction = calculate_block_hash
    ) -> bool:
        """
        Args:
            current: Blocks held by the chain
            candidate: Proposed replacement, genesis first
            calculate_hash: The chain's digest function

        Returns:
            True to adopt candidate
        """


class LongestValidChainRule(ConsensusRule):
    """Adopt a fully valid candidate that is strictly longer."""

    def should_replace(
        self,
        current: Sequence[Block],
        candidate: Sequence[Block],
        calculate_hash: HashFunction = calculate_block_hash
    ) -> bool:
        """
        Raises:
            InvalidChainError: If candidate is empty or has a different genesis
            InvalidBlockError: If any candidate block breaks linkage or hash
        """
        genesis = current[0] if current else None
        validate_blocks(candidate, calculate_hash, genesis=genesis)
        return len(candidate) > len(current)
