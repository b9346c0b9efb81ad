"""
Hash-Linked Ledger Module

Implements an append-only chain of immutable blocks:
- SHA-256 content hash per block over (index, previous_hash, timestamp, data)
- Each block linked to its predecessor by previous_hash
- Trusted genesis block, every later block validated before append
- Typed errors naming the violated invariant

Security features:
- Immutable blocks (frozen dataclass)
- Atomic append under a lock (no two blocks on the same tip)
- Full chain revalidation
- Chain replacement disabled unless a consensus rule is configured

Author: hashchain Project
"""

import json
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from ..core_crypto import digest
from ..core_crypto.digest import format_number, is_hex_digest
from ..logs import get_logger

if TYPE_CHECKING:
    from .consensus import ConsensusRule


logger = get_logger(__name__)

HashFunction = Callable[[int, str, Union[int, float], str], str]


# ============================================================================
# Constants
# ============================================================================

GENESIS_INDEX = 0
GENESIS_PREVIOUS_HASH = ""  # Only the genesis block has no predecessor


# ============================================================================
# Block Structure (Immutable)
# ============================================================================

@dataclass(frozen=True)
class Block:
    """
    One ledger entry.

    Fields are accepted as given; nothing is computed or checked at
    construction. Validity is judged by the Chain.
    """
    index: int
    hash: str
    previous_hash: str
    timestamp: Union[int, float]
    data: str

    def has_valid_structure(self) -> bool:
        """Check field types and that hash is a hex digest."""
        return (
            isinstance(self.index, int) and
            not isinstance(self.index, bool) and
            self.index >= 0 and
            is_hex_digest(self.hash) and
            isinstance(self.previous_hash, str) and
            isinstance(self.timestamp, (int, float)) and
            not isinstance(self.timestamp, bool) and
            isinstance(self.data, str)
        )

    def matches_hash(self, calculate_hash: HashFunction = digest.calculate_block_hash) -> bool:
        """
        Check the stored hash against the digest of this block's own fields.

        Needs no chain context, only the digest function.
        """
        if not self.has_valid_structure():
            return False
        expected = calculate_hash(self.index, self.previous_hash, self.timestamp, self.data)
        return expected == self.hash

    def to_dict(self) -> Dict[str, Any]:
        """Convert block to dictionary for serialization."""
        return {
            'index': self.index,
            'hash': self.hash,
            'previousHash': self.previous_hash,
            'timestamp': self.timestamp,
            'data': self.data,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Block':
        """Create block from dictionary."""
        return cls(
            index=data['index'],
            hash=data['hash'],
            previous_hash=data['previousHash'],
            timestamp=data['timestamp'],
            data=data['data'],
        )

    def __str__(self) -> str:
        prev = f"{self.previous_hash[:16]}..." if self.previous_hash else "(genesis)"
        return (
            f"Block #{self.index}\n"
            f"  Hash: {self.hash[:16]}...\n"
            f"  Prev: {prev}\n"
            f"  Time: {format_number(self.timestamp)}\n"
            f"  Data: {self.data}"
        )


# Reference genesis block used by existing chains
GENESIS_BLOCK = Block(
    index=GENESIS_INDEX,
    hash='816534932c2b7154836da6afc367695e6337db8a921823784c14378abed4f7d7',
    previous_hash=GENESIS_PREVIOUS_HASH,
    timestamp=1465154705,
    data='The Genesis Block',
)


# ============================================================================
# Errors
# ============================================================================

class BlockViolation(Enum):
    """Which append invariant a candidate block broke."""
    STRUCTURE = "structure"
    INDEX = "index"
    PREVIOUS_HASH = "previous_hash"
    HASH = "hash"


class ChainError(Exception):
    """Base class for ledger errors."""
    pass


class EmptyChainError(ChainError):
    """Raised when an operation needs a latest block but the chain is empty."""

    def __init__(self, message: str = "Chain has no blocks; add a genesis block first"):
        super().__init__(message)


class GenesisBlockError(ChainError):
    """Raised when a genesis block is added to a non-empty chain."""
    pass


class InvalidBlockError(ChainError):
    """Raised when a block fails validation against the chain tip."""

    def __init__(self, violation: BlockViolation, block: Block, message: str):
        super().__init__(message)
        self.violation = violation
        self.block = block


class InvalidChainError(ChainError):
    """Raised when a whole block sequence is unusable (empty, bad genesis)."""
    pass


class ConsensusNotImplementedError(ChainError, NotImplementedError):
    """Raised by replace_chain when no consensus rule is configured."""
    pass


# ============================================================================
# Validation
# ============================================================================

def check_block_against(
    block: Block,
    latest: Block,
    calculate_hash: HashFunction = digest.calculate_block_hash
) -> None:
    """
    Validate a candidate block against the block it would follow.

    Checks, in order: structure, index, previous hash, content hash.

    Raises:
        InvalidBlockError: On the first failed check
    """
    if not isinstance(block, Block) or not block.has_valid_structure():
        raise InvalidBlockError(
            BlockViolation.STRUCTURE, block, "Block structure is invalid"
        )

    if block.index != latest.index + 1:
        raise InvalidBlockError(
            BlockViolation.INDEX, block,
            f"Invalid index: expected {latest.index + 1}, got {block.index}"
        )

    if block.previous_hash != latest.hash:
        raise InvalidBlockError(
            BlockViolation.PREVIOUS_HASH, block,
            f"Previous hash mismatch at index {block.index}"
        )

    computed_hash = calculate_hash(
        block.index,
        block.previous_hash,
        block.timestamp,
        block.data
    )
    if computed_hash != block.hash:
        raise InvalidBlockError(
            BlockViolation.HASH, block,
            f"Block hash mismatch at index {block.index}"
        )


def validate_blocks(
    blocks: Sequence[Block],
    calculate_hash: HashFunction = digest.calculate_block_hash,
    genesis: Optional[Block] = None
) -> None:
    """
    Validate a whole block sequence end to end.

    Args:
        blocks: Candidate sequence, genesis first
        calculate_hash: Digest function
        genesis: If given, the first block must equal it

    Raises:
        InvalidChainError: If the sequence is empty or its genesis is wrong
        InvalidBlockError: On the first block that breaks linkage or hash
    """
    if not blocks:
        raise InvalidChainError("Chain is empty")

    first = blocks[0]
    if not isinstance(first, Block) or first.index != GENESIS_INDEX:
        raise InvalidChainError("First block is not a genesis block")
    if genesis is not None and first != genesis:
        raise InvalidChainError("Genesis block does not match")

    for i in range(1, len(blocks)):
        check_block_against(blocks[i], blocks[i - 1], calculate_hash)


# ============================================================================
# Chain
# ============================================================================

class Chain:
    """
    An ordered, append-only sequence of blocks.

    The chain owns its blocks. Appends are serialized by a lock; reads
    return immutable snapshots.
    """

    def __init__(
        self,
        calculate_hash: HashFunction = digest.calculate_block_hash,
        consensus: Optional['ConsensusRule'] = None
    ):
        """
        Initialize an empty chain.

        Args:
            calculate_hash: Digest over (index, previous_hash, timestamp, data)
            consensus: Rule for replace_chain; None disables replacement
        """
        self._blocks: List[Block] = []
        self._calculate_hash = calculate_hash
        self._consensus = consensus
        self._lock = threading.RLock()

    @property
    def length(self) -> int:
        """Get chain length."""
        return len(self._blocks)

    def __len__(self) -> int:
        return len(self._blocks)

    @property
    def consensus(self) -> Optional['ConsensusRule']:
        """Get the chain replacement rule (None if replacement is disabled)."""
        return self._consensus

    def get_blocks(self) -> Tuple[Block, ...]:
        """Get all blocks (read-only snapshot)."""
        return tuple(self._blocks)

    def get_latest_block(self) -> Block:
        """
        Get the latest block in the chain.

        Raises:
            EmptyChainError: If no genesis block has been added
        """
        blocks = self._blocks
        if not blocks:
            raise EmptyChainError()
        return blocks[-1]

    def calculate_block_hash(
        self,
        index: int,
        previous_hash: str,
        timestamp: Union[int, float],
        data: str
    ) -> str:
        """Calculate a block's hash with this chain's digest function."""
        return self._calculate_hash(index, previous_hash, timestamp, data)

    def add_genesis_block(self, block: Block) -> None:
        """
        Add the very first block. Genesis is trusted and not validated.

        Raises:
            GenesisBlockError: If the chain already has blocks
        """
        with self._lock:
            if self._blocks:
                raise GenesisBlockError(
                    f"Chain already has {len(self._blocks)} block(s)"
                )
            self._blocks.append(block)
        logger.debug("Genesis block #%s added", block.index)

    def get_next_index(self) -> int:
        """Get the index the next block must carry."""
        return self.get_latest_block().index + 1

    def generate_next_block(self, data: str) -> Block:
        """
        Build (but do not append) the next block for data.

        Raises:
            EmptyChainError: If the chain has no blocks
        """
        latest = self.get_latest_block()
        index = latest.index + 1
        previous_hash = latest.hash
        timestamp = time.time()

        block_hash = self.calculate_block_hash(index, previous_hash, timestamp, data)

        return Block(
            index=index,
            hash=block_hash,
            previous_hash=previous_hash,
            timestamp=timestamp,
            data=data,
        )

    def check_block(self, block: Block) -> None:
        """
        Validate a candidate against the current latest block.

        Raises:
            EmptyChainError: If the chain has no blocks
            InvalidBlockError: With the violated invariant
        """
        check_block_against(block, self.get_latest_block(), self._calculate_hash)

    def is_block_valid(self, block: Block) -> bool:
        """
        Check if a block is valid as the next block of this chain.

        Raises:
            EmptyChainError: If the chain has no blocks
        """
        try:
            self.check_block(block)
        except InvalidBlockError:
            return False
        return True

    def add_block_to_chain(self, block: Block) -> None:
        """
        Validate and append a block. The chain is unchanged on failure.

        Raises:
            EmptyChainError: If the chain has no blocks
            InvalidBlockError: If the block is not valid on the current tip
        """
        with self._lock:
            try:
                self.check_block(block)
            except InvalidBlockError as e:
                logger.warning("Rejected block: %s", e)
                raise
            self._blocks.append(block)
        logger.debug("Block #%d appended", block.index)

    def append_data(self, data: str) -> Block:
        """
        Generate, validate and append a block for data in one step.

        Returns:
            The appended block
        """
        with self._lock:
            block = self.generate_next_block(data)
            self.add_block_to_chain(block)
        return block

    def validate_chain(self) -> bool:
        """
        Validate the entire chain.

        Returns:
            True if chain is valid

        Raises:
            InvalidChainError: If chain is empty
            InvalidBlockError: If any block is invalid
        """
        validate_blocks(self.get_blocks(), self._calculate_hash)
        return True

    def replace_chain(self, blocks: Sequence[Block]) -> bool:
        """
        Replace the held blocks with blocks if the consensus rule agrees.

        Returns:
            True if the chain was replaced, False if it was kept

        Raises:
            ConsensusNotImplementedError: If no consensus rule is configured
            InvalidChainError, InvalidBlockError: If the rule finds blocks invalid
        """
        if self._consensus is None:
            raise ConsensusNotImplementedError(
                "Chain replacement needs a consensus rule; none is configured"
            )

        candidate = list(blocks)
        with self._lock:
            current = self.get_blocks()
            if not self._consensus.should_replace(current, candidate, self._calculate_hash):
                logger.info(
                    "Kept current chain (length %d) over candidate (length %d)",
                    len(current), len(candidate)
                )
                return False
            self._blocks = candidate
        logger.info("Replaced chain: length %d -> %d", len(current), len(candidate))
        return True

    def to_json(self) -> str:
        """Serialize chain to JSON."""
        return json.dumps({
            'chain': [block.to_dict() for block in self._blocks],
        }, indent=2)

    @classmethod
    def from_json(
        cls,
        json_str: str,
        calculate_hash: HashFunction = digest.calculate_block_hash,
        consensus: Optional['ConsensusRule'] = None
    ) -> 'Chain':
        """
        Deserialize a chain from JSON, validating every non-genesis block.

        Raises:
            InvalidChainError: If the snapshot holds no blocks
            InvalidBlockError: If any block fails validation
        """
        data = json.loads(json_str)
        blocks = [Block.from_dict(block_data) for block_data in data['chain']]
        if not blocks:
            raise InvalidChainError("Chain is empty")

        chain = cls(calculate_hash=calculate_hash, consensus=consensus)
        chain.add_genesis_block(blocks[0])
        for block in blocks[1:]:
            chain.add_block_to_chain(block)
        return chain

    def print_chain(self) -> None:
        """Print the chain."""
        print(f"\nChain (length={self.length})")
        print("=" * 60)
        for block in self._blocks:
            print(block)
            print("-" * 40)


# ============================================================================
# Convenience Functions
# ============================================================================

def create_chain(
    genesis: Block = GENESIS_BLOCK,
    consensus: Optional['ConsensusRule'] = None
) -> Chain:
    """Create a new chain seeded with a genesis block."""
    chain = Chain(consensus=consensus)
    chain.add_genesis_block(genesis)
    return chain
