"""
Exceptions raised by the cipher engines.

Engines are keyed once, at construction. Key material that does not fit
the algorithm is rejected there and no instance is created.
"""


class ConstructionError(ValueError):
    """Key material (or IV) rejected while constructing an engine."""


class UnknownCipherError(KeyError):
    """No engine is registered under the requested name."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Unknown cipher '{self.name}'"
