"""
Unit tests for chain replacement rules.

Tests:
- Longer valid chains are adopted
- Shorter or equal chains are kept
- Invalid candidates raise
"""

import dataclasses

import pytest
from hashchain.blockchain.consensus import ConsensusRule, LongestValidChainRule
from hashchain.blockchain.ledger import (
    Block, Chain, BlockViolation, InvalidBlockError, InvalidChainError,
    create_chain, GENESIS_BLOCK
)


def grow(chain: Chain, count: int) -> Chain:
    """Append count blocks to chain and return it."""
    for i in range(count):
        chain.append_data(f"block {i}")
    return chain


@pytest.fixture
def chain():
    """Chain with the longest-valid-chain rule and two extra blocks."""
    return grow(create_chain(consensus=LongestValidChainRule()), 2)


class TestLongestValidChainRule:
    """Tests for LongestValidChainRule."""

    def test_longer_chain_adopted(self, chain):
        """A strictly longer valid chain replaces the current one."""
        candidate = grow(create_chain(), 4).get_blocks()

        assert chain.replace_chain(candidate) is True
        assert chain.get_blocks() == candidate
        assert chain.validate_chain()

    def test_equal_length_kept(self, chain):
        """An equally long chain does not replace the current one."""
        before = chain.get_blocks()
        candidate = grow(create_chain(), 2).get_blocks()

        assert chain.replace_chain(candidate) is False
        assert chain.get_blocks() == before

    def test_shorter_chain_kept(self, chain):
        """A shorter chain does not replace the current one."""
        before = chain.get_blocks()
        assert chain.replace_chain([GENESIS_BLOCK]) is False
        assert chain.get_blocks() == before

    def test_invalid_candidate_raises(self, chain):
        """A longer but broken chain raises and leaves the chain unchanged."""
        before = chain.get_blocks()
        candidate = list(grow(create_chain(), 4).get_blocks())
        candidate[2] = dataclasses.replace(candidate[2], data="forged")

        with pytest.raises(InvalidBlockError) as exc_info:
            chain.replace_chain(candidate)
        assert exc_info.value.violation is BlockViolation.HASH
        assert chain.get_blocks() == before

    def test_different_genesis_raises(self, chain):
        """A chain grown from another genesis is rejected."""
        other_genesis = Block(
            index=0,
            hash="ab" * 32,
            previous_hash="",
            timestamp=0,
            data="Another Genesis",
        )
        other = create_chain(genesis=other_genesis)
        candidate = grow(other, 5).get_blocks()

        with pytest.raises(InvalidChainError):
            chain.replace_chain(candidate)

    def test_empty_candidate_raises(self, chain):
        """An empty candidate is not a chain."""
        with pytest.raises(InvalidChainError):
            chain.replace_chain([])

    def test_chain_keeps_growing_after_replace(self, chain):
        """Appends continue from the adopted tip."""
        candidate = grow(create_chain(), 4).get_blocks()
        chain.replace_chain(candidate)

        block = chain.append_data("after")
        assert block.index == 5
        assert block.previous_hash == candidate[-1].hash

    def test_rule_on_empty_current(self):
        """With no current blocks any valid candidate is longer."""
        rule = LongestValidChainRule()
        candidate = grow(create_chain(), 1).get_blocks()
        assert rule.should_replace((), candidate)


class TestCustomRule:
    """Tests for plugging in a different rule."""

    def test_rule_is_consulted(self):
        """Chain delegates the decision to its rule."""
        calls = []

        class RecordingRule(ConsensusRule):
            def should_replace(self, current, candidate, calculate_hash=None):
                calls.append((len(current), len(candidate)))
                return False

        chain = create_chain(consensus=RecordingRule())
        assert chain.replace_chain([GENESIS_BLOCK]) is False
        assert calls == [(1, 1)]

    def test_rule_is_abstract(self):
        """ConsensusRule cannot be used directly."""
        with pytest.raises(TypeError):
            ConsensusRule()
