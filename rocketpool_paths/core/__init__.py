from rocketpool_paths.core.adapters.BaseAdapter import BaseAdapter
from rocketpool_paths.core.errors import (
    BytecodeUnavailableError,
    InvalidInputError,
    SchemaUnavailableError,
)

__all__ = [
    "BaseAdapter",
    "BytecodeUnavailableError",
    "InvalidInputError",
    "SchemaUnavailableError",
]
