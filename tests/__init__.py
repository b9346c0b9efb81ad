# hashchain Test Suite
"""
Test suite including:
- Unit tests (digest, blocks, chain)
- Consensus rule tests
- Integration and concurrency tests

Run with: pytest
Coverage: coverage run -m pytest && coverage report
"""
