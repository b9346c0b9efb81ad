"""
hashchain - Demo Entry Point

Seeds a chain with the reference genesis block, generates one block,
appends it and prints the chain. Then shows a tampered block being
rejected.
"""

from dataclasses import replace

from .blockchain.ledger import GENESIS_BLOCK, Chain, InvalidBlockError
from .logs import setup_logging


def print_header(title):
    """Print a formatted section header"""
    print("\n" + "═" * 60)
    print(f"  {title}")
    print("═" * 60)


def main():
    """Main entry point for the hashchain demo."""
    setup_logging()
    chain = Chain()

    print_header("Genesis")
    chain.add_genesis_block(GENESIS_BLOCK)
    print(chain.get_latest_block())

    print_header("Generate and append")
    block = chain.generate_next_block("Test")
    chain.add_block_to_chain(block)
    chain.print_chain()

    print_header("Tampered block")
    candidate = chain.generate_next_block("Pay Alice 10")
    forged = replace(candidate, data="Pay Alice 1000")
    try:
        chain.add_block_to_chain(forged)
    except InvalidBlockError as e:
        print(f"  Rejected ({e.violation.value}): {e}")
    print(f"  Chain length is still {chain.length}")


if __name__ == "__main__":
    main()
