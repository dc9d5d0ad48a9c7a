from __future__ import annotations


class InvalidInputError(ValueError):
    """Raised before any hashing when an input has the wrong width or range."""


class SchemaUnavailableError(RuntimeError):
    def __init__(self, contract_name: str, message: str | None = None):
        self.contract_name = contract_name
        super().__init__(message or f"ABI not available for contract: {contract_name}")


class BytecodeUnavailableError(RuntimeError):
    def __init__(self, message: str | None = None):
        super().__init__(message or "Minipool bytecode not available")
