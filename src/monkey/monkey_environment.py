"""
Lexical environments for the Monkey evaluator.

An Environment is one frame of bindings plus an optional link to the enclosing frame.
Frames are created for the global session and for every function call (as a child of
the function's captured environment). They are shared by reference: a closure keeps
its defining frame alive after the defining call has returned.
"""

from __future__ import annotations

from collections.abc import Iterator

from monkey.monkey_object import Object


class BindingNotFoundError(LookupError):
    """Raised by `Environment.resolve` when no frame in the chain binds the name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"binding not found: {name}")
        self.name = name


class Environment:
    """A chained mapping from identifier name to Object.

    Attributes:
        store (dict[str, Object]): Bindings of this frame only.
        outer (Environment | None): The enclosing frame, if any.
    """

    def __init__(self, outer: Environment | None = None) -> None:
        self.store: dict[str, Object] = {}
        self.outer = outer

    def define(self, name: str, value: Object) -> Object:
        """Bind `name` in this frame, shadowing (not mutating) any outer binding."""
        self.store[name] = value
        return value

    def resolve(self, name: str) -> Object:
        """Return the nearest binding of `name`, searching outward.

        Raises:
            BindingNotFoundError: If no frame binds `name`.
        """
        env: Environment | None = self
        while env is not None:
            if name in env.store:
                return env.store[name]
            env = env.outer
        raise BindingNotFoundError(name)

    def new_child(self) -> Environment:
        return Environment(outer=self)

    def names(self) -> Iterator[str]:
        """Yields every visible name once, innermost frames first."""
        seen: set[str] = set()
        env: Environment | None = self
        while env is not None:
            for name in env.store:
                if name not in seen:
                    seen.add(name)
                    yield name
            env = env.outer

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        try:
            self.resolve(name)
        except BindingNotFoundError:
            return False
        return True

    def __repr__(self) -> str:
        return f"Environment({sorted(self.store)}, outer={self.outer is not None})"


__all__ = ["BindingNotFoundError", "Environment"]
