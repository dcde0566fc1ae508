from __future__ import annotations

import copy
from dataclasses import dataclass, field, replace
from typing import List, Optional, Union


@dataclass(frozen=True)
class SourceSpan:
    """Where a node came from in the input stylesheet (0-based row/col, byte columns)."""
    start_rc: tuple[int, int]
    end_rc: tuple[int, int]
    path: str | None = None

    # Immutable: clones share the span instead of copying it.
    def __copy__(self) -> "SourceSpan":
        return self

    def __deepcopy__(self, memo) -> "SourceSpan":
        return self


@dataclass
class Declaration:
    prop: str
    value: str
    important: bool = False
    source: Optional[SourceSpan] = field(default=None, compare=False)

    type = "decl"

    def clone(self) -> "Declaration":
        return replace(self)


@dataclass
class Comment:
    text: str
    source: Optional[SourceSpan] = field(default=None, compare=False)

    type = "comment"

    def clone(self) -> "Comment":
        return replace(self)


@dataclass
class Rule:
    selectors: List[str]
    nodes: List["Node"] = field(default_factory=list)
    source: Optional[SourceSpan] = field(default=None, compare=False)

    type = "rule"

    def clone(self) -> "Rule":
        return copy.deepcopy(self)

    def append(self, child: "Node") -> None:
        self.nodes.append(child)


@dataclass
class AtRule:
    """
    An @-rule. `nodes is None` means a bodyless statement (`@import "a.css";`),
    `nodes == []` an empty block (`@media print{}`).
    """
    name: str
    params: str = ""
    nodes: Optional[List["Node"]] = None
    source: Optional[SourceSpan] = field(default=None, compare=False)

    type = "atrule"

    def clone(self) -> "AtRule":
        return copy.deepcopy(self)

    def shell(self) -> "AtRule":
        """Childless copy used to rebuild nesting context inside another chunk."""
        return AtRule(name=self.name, params=self.params, nodes=[], source=self.source)

    def append(self, child: "Node") -> None:
        if self.nodes is None:
            self.nodes = []
        self.nodes.append(child)

    @property
    def last(self) -> Optional["Node"]:
        return self.nodes[-1] if self.nodes else None


@dataclass
class Root:
    nodes: List["Node"] = field(default_factory=list)

    type = "root"

    def append(self, child: "Node") -> None:
        self.nodes.append(child)

    @property
    def last(self) -> Optional["Node"]:
        return self.nodes[-1] if self.nodes else None


Node = Union[Declaration, Comment, Rule, AtRule]
Container = Union[Root, AtRule]


def is_block_at_rule(node: "Node") -> bool:
    return isinstance(node, AtRule) and node.nodes is not None


def walk(node: Union["Node", Root]):
    """Yield `node` and all its descendants in document order."""
    yield node
    for child in getattr(node, "nodes", None) or []:
        yield from walk(child)


__all__ = [
    "SourceSpan",
    "Declaration",
    "Comment",
    "Rule",
    "AtRule",
    "Root",
    "Node",
    "Container",
    "is_block_at_rule",
    "walk",
]
