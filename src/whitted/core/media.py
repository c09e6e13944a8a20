"""Material stack tracking the nested transparent media a ray path is inside.

The stack is a persistent (immutable, structurally shared) singly linked
list: push and pop return new stacks and never modify the receiver. A
reflection ray and a refraction ray spawned at the same hit can therefore
each carry their own media history without copying it.

The bottom entry is always the air sentinel, so the front (the medium the
current ray segment travels through) is always defined.

Example:
    >>> from src.whitted.core.media import MaterialStack
    >>> from src.whitted.materials.phong import Material
    >>> glass = Material(material_id=0, kt=(1.0, 1.0, 1.0), index=1.5)
    >>> outside = MaterialStack.ambient()
    >>> inside = outside.push(glass)
    >>> inside.front.index, inside.below_front.index
    (1.5, 1.0)
    >>> inside.pop() == outside
    True
"""

from __future__ import annotations

from collections.abc import Iterator

from src.whitted.materials.phong import AIR, Material


class MaterialStack:
    """Immutable stack of media, front = innermost (current) medium."""

    __slots__ = ("_front", "_rest", "_size")

    _ambient: MaterialStack | None = None

    def __init__(self, front: Material = AIR, rest: MaterialStack | None = None) -> None:
        if rest is None and not front.same_medium(AIR):
            # Every chain bottoms out on the air sentinel
            rest = MaterialStack.ambient()
        self._front = front
        self._rest = rest
        self._size = 1 if rest is None else rest._size + 1

    @classmethod
    def ambient(cls) -> MaterialStack:
        """The stack holding only the air sentinel."""
        if cls._ambient is None:
            cls._ambient = cls(AIR, None)
        return cls._ambient

    @property
    def front(self) -> Material:
        """The medium the current ray segment travels through."""
        return self._front

    @property
    def below_front(self) -> Material:
        """The medium surrounding the front one (air for the sentinel itself)."""
        if self._rest is None:
            return self._front
        return self._rest._front

    @property
    def is_ambient(self) -> bool:
        """True when only the air sentinel remains."""
        return self._rest is None

    def push(self, material: Material) -> MaterialStack:
        """Enter a medium: return a new stack with material at the front."""
        return MaterialStack(material, self)

    def pop(self) -> MaterialStack:
        """Leave the front medium.

        The air sentinel is never removed: popping the ambient stack
        returns it unchanged.
        """
        if self._rest is None:
            return self
        return self._rest

    def ids(self) -> tuple[int, ...]:
        """Material ids from front to bottom."""
        return tuple(m.material_id for m in self)

    def __iter__(self) -> Iterator[Material]:
        node: MaterialStack | None = self
        while node is not None:
            yield node._front
            node = node._rest

    def __len__(self) -> int:
        return self._size

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MaterialStack):
            return NotImplemented
        return self.ids() == other.ids()

    def __hash__(self) -> int:
        return hash(self.ids())

    def __repr__(self) -> str:
        names = ", ".join(m.name or str(m.material_id) for m in self)
        return f"MaterialStack([{names}])"
