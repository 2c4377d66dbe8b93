"""Block contracts, the registry, and the core block pack.

Key types:
- Port: An input slot on a block
- BlockContract: Ordered ports plus a pure evaluate function
- BlockRegistry: Explicit collection of contracts passed to the evaluator
- core_registry: Build a registry holding the core block pack
"""

from ._contract import BlockContract, BlockRegistry, EvaluateFn, Port
from ._core import core_registry, register_core_blocks

__all__ = [
    "BlockContract",
    "BlockRegistry",
    "EvaluateFn",
    "Port",
    "core_registry",
    "register_core_blocks",
]
