# Blockchain Module
"""
Hash-linked ledger implementation including:
- Immutable blocks (frozen dataclass)
- SHA-256 linkage to the previous block
- Validated, atomic append
- Opt-in chain replacement via consensus rules
"""

import importlib


# Lazy imports to avoid RuntimeWarning when running modules directly
def __getattr__(name):
    """Lazy import to avoid circular import issues."""
    for submodule in ('ledger', 'consensus'):
        module = importlib.import_module(f"{__name__}.{submodule}")
        if hasattr(module, name):
            return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = [
    'Block',
    'BlockViolation',
    'Chain',
    'ChainError',
    'ConsensusNotImplementedError',
    'ConsensusRule',
    'EmptyChainError',
    'GenesisBlockError',
    'InvalidBlockError',
    'InvalidChainError',
    'LongestValidChainRule',
    'create_chain',
    'validate_blocks',
    'GENESIS_BLOCK',
    'GENESIS_PREVIOUS_HASH',
]
