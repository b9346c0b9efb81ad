"""
Integration tests for hashchain.

Tests:
- Demo driver end to end
- Concurrent appends keep the chain linked
- Package-level lazy exports
"""

import threading

from hashchain import blockchain
from hashchain.blockchain.ledger import create_chain
from hashchain.core_crypto.digest import calculate_block_hash
from hashchain.main import main


class TestDemo:
    """Tests for the demo driver."""

    def test_main_prints_chain(self, capsys):
        """Driver should print both blocks and the rejected forgery."""
        main()
        out = capsys.readouterr().out

        assert "Block #0" in out
        assert "Block #1" in out
        assert "Chain (length=2)" in out
        assert "Rejected (hash)" in out
        assert "Chain length is still 2" in out


class TestConcurrency:
    """Tests for appends from several threads."""

    def test_concurrent_append_data(self):
        """Every append lands exactly once on a distinct tip."""
        chain = create_chain()
        workers = 8
        per_worker = 25

        def worker(worker_id):
            for i in range(per_worker):
                chain.append_data(f"w{worker_id}-{i}")

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        blocks = chain.get_blocks()
        assert len(blocks) == 1 + workers * per_worker
        assert chain.validate_chain()
        assert len({b.hash for b in blocks}) == len(blocks)
        for prev, curr in zip(blocks, blocks[1:]):
            assert curr.previous_hash == prev.hash
            assert curr.hash == calculate_block_hash(
                curr.index, curr.previous_hash, curr.timestamp, curr.data
            )


class TestPackageExports:
    """Tests for names re-exported by hashchain.blockchain."""

    def test_lazy_exports(self):
        """Package should expose ledger and consensus names."""
        assert blockchain.Chain is not None
        assert blockchain.LongestValidChainRule is not None
        assert blockchain.GENESIS_BLOCK.index == 0
        for name in blockchain.__all__:
            assert hasattr(blockchain, name)
