# Core Cryptography Module
"""
Hashing primitives for the ledger:
- SHA-256 hex digests (via the cryptography package)
- Block hash over (index, previous_hash, timestamp, data)
- JavaScript-compatible number rendering for hash preimages
"""
