from .schemas import SchemaTree, capabilities_block, checkout_tree, write_json

__all__ = [
    "SchemaTree",
    "capabilities_block",
    "checkout_tree",
    "write_json",
]
