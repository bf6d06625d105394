"""
Node model registry.

Maps model names to node implementation classes so that serialized
topologies can refer to node behaviors by name. Every registry has a
"default" entry, used whenever a node does not ask for a specific model.
"""

from typing import Iterator, Optional

from .errors import UnknownModelError


DEFAULT_MODEL = "default"


def qualified_name(cls: type) -> str:
    """Return the importable dotted name of a class (e.g. "models.network.Node")."""
    return f"{cls.__module__}.{cls.__qualname__}"


def find_subclass(base: type, class_name: str) -> Optional[type]:
    """
    Find a loaded class by qualified name among base and its subclasses.

    Only classes that have already been imported are visible; no module
    is loaded to satisfy the lookup.

    Args:
        base: Root of the class hierarchy to search
        class_name: Qualified name, or bare class name if unambiguous

    Returns:
        The matching class, or None
    """
    pending = [base]
    seen = set()
    by_short_name = []
    while pending:
        cls = pending.pop()
        if cls in seen:
            continue
        seen.add(cls)
        if qualified_name(cls) == class_name:
            return cls
        if cls.__name__ == class_name:
            by_short_name.append(cls)
        pending.extend(cls.__subclasses__())
    if len(by_short_name) == 1:
        return by_short_name[0]
    return None


def resolve_subclass(base: type, class_name: str) -> type:
    """
    Like find_subclass, but a miss raises.

    Raises:
        UnknownModelError: if no such class is loaded
    """
    cls = find_subclass(base, class_name)
    if cls is None:
        raise UnknownModelError(class_name)
    return cls


class NodeModelRegistry:
    """
    Name -> node implementation table.

    Implementations are classes deriving from the registry's base node
    class; instantiating a model calls the class with no arguments.
    """

    def __init__(self, default_model: type, base: Optional[type] = None):
        self._base = base or default_model
        self._models: dict[str, type] = {}
        self.register(DEFAULT_MODEL, default_model)

    def register(self, name: str, implementation: type) -> None:
        """
        Bind a name to a node implementation, replacing any previous binding.

        Raises:
            TypeError: if implementation is not a subclass of the base node class
        """
        if not (isinstance(implementation, type) and issubclass(implementation, self._base)):
            raise TypeError(
                f"node model '{name}' must be a subclass of {self._base.__name__}, "
                f"got {implementation!r}"
            )
        self._models[name] = implementation

    def unregister(self, name: str) -> Optional[type]:
        """Remove a binding. The default model cannot be removed."""
        if name == DEFAULT_MODEL:
            raise ValueError("the default node model cannot be unregistered")
        return self._models.pop(name, None)

    def lookup(self, name: str) -> type:
        """Get the implementation bound to name."""
        try:
            return self._models[name]
        except KeyError:
            raise UnknownModelError(name) from None

    def instantiate(self, name: str = DEFAULT_MODEL):
        """Create a new node of the model bound to name."""
        return self.lookup(name)()

    def name_of(self, implementation: type) -> Optional[str]:
        """
        Get the name an implementation is registered under.

        "default" is preferred when the implementation is bound to several
        names.
        """
        if self._models[DEFAULT_MODEL] == implementation:
            return DEFAULT_MODEL
        for name, cls in self._models.items():
            if cls == implementation:
                return name
        return None

    def resolve(self, value: str) -> type:
        """
        Resolve a model name or qualified class name to an implementation.

        Registered names win over class names. Class names are matched
        against the bound implementations first, then against every loaded
        subclass of the base node class.
        """
        if value in self._models:
            return self._models[value]
        for cls in self._models.values():
            if qualified_name(cls) == value:
                return cls
        return resolve_subclass(self._base, value)

    @property
    def default(self) -> type:
        """Implementation bound to the default model name."""
        return self._models[DEFAULT_MODEL]

    def set_default(self, implementation: type) -> None:
        self.register(DEFAULT_MODEL, implementation)

    @property
    def base(self) -> type:
        return self._base

    def names(self) -> list[str]:
        """Registered model names, default first."""
        return [DEFAULT_MODEL] + [n for n in self._models if n != DEFAULT_MODEL]

    def items(self) -> list[tuple[str, type]]:
        return [(name, self._models[name]) for name in self.names()]

    def __contains__(self, name: object) -> bool:
        return name in self._models

    def __len__(self) -> int:
        return len(self._models)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __repr__(self) -> str:
        bound = ", ".join(f"{n}={c.__name__}" for n, c in self.items())
        return f"NodeModelRegistry({bound})"
