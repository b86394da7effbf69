"""DeclarationBlock: the read/write/remove/enumerate view over a cssutils style."""
from __future__ import annotations

from cssutils.css import CSSStyleDeclaration


class DeclarationBlock:
    """Ordered property view over one rule's ``CSSStyleDeclaration``.

    The normalizer and the rewriter only ever go through this interface;
    the wrapped cssutils object is mutated in place so the owning rule
    serializes the edits.
    """

    def __init__(self, style: CSSStyleDeclaration) -> None:
        self._style = style

    @classmethod
    def from_text(cls, text: str) -> DeclarationBlock:
        """Build a detached block from ``name: value; ...`` text."""
        return cls(CSSStyleDeclaration(cssText=text))

    @property
    def style(self) -> CSSStyleDeclaration:
        return self._style

    def get(self, name: str) -> str:
        """Return the value of *name*, or ``""`` when it is not declared."""
        return self._style.getPropertyValue(name)

    def has(self, name: str) -> bool:
        return name in self.names()

    def priority(self, name: str) -> str:
        return self._style.getPropertyPriority(name)

    def set(self, name: str, value: str, priority: str = "") -> None:
        self._style.setProperty(name, value, priority)

    def remove(self, name: str) -> str:
        """Remove *name* and return its old value (``""`` when absent)."""
        if not self.has(name):
            return ""
        return self._style.removeProperty(name)

    def names(self) -> list[str]:
        """Declared property names in source order."""
        return [prop.name for prop in self._style.getProperties()]

    def snapshot(self) -> str:
        return self._style.cssText

    def restore(self, text: str) -> None:
        """Replace every declaration with the ones in *text*."""
        self._style.cssText = text

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    def __repr__(self) -> str:
        return f"DeclarationBlock({self.snapshot()!r})"
