"""Leyline Scope - Variable lookup contract.

The dump pipeline consumes scopes through ``find_var`` only. ScopeLike is
the structural contract; Scope is a small in-memory implementation with
parent chaining, used by workers that do not bring their own storage.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from scry.leyline.tensor import LoDTensor


class Variable:
    """Named slot holding a LoDTensor."""

    def __init__(self, name: str):
        self.name = name
        self._tensor: LoDTensor | None = None

    def get_tensor(self) -> LoDTensor:
        """Return the held tensor, creating an uninitialized one on first access."""
        if self._tensor is None:
            self._tensor = LoDTensor()
        return self._tensor

    def __repr__(self) -> str:
        return f"Variable({self.name!r})"


@runtime_checkable
class ScopeLike(Protocol):
    """Anything that can resolve a variable name."""

    def find_var(self, name: str) -> Variable | None:
        """Return the named variable, or None when it does not exist."""
        ...


class Scope:
    """Hierarchical name -> Variable mapping.

    Lookups fall through to the parent scope when a name is not local.
    """

    def __init__(self, parent: Scope | None = None):
        self.parent = parent
        self._vars: dict[str, Variable] = {}

    def var(self, name: str) -> Variable:
        """Create (or return the existing) local variable ``name``."""
        variable = self._vars.get(name)
        if variable is None:
            variable = Variable(name)
            self._vars[name] = variable
        return variable

    def find_var(self, name: str) -> Variable | None:
        scope: Scope | None = self
        while scope is not None:
            variable = scope._vars.get(name)
            if variable is not None:
                return variable
            scope = scope.parent
        return None

    def new_scope(self) -> Scope:
        return Scope(parent=self)

    def local_var_names(self) -> list[str]:
        return list(self._vars)

    def __contains__(self, name: str) -> bool:
        return self.find_var(name) is not None


__all__ = ["Variable", "ScopeLike", "Scope"]
