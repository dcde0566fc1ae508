# Canonical stylesheet serializer and the byte-size estimator built on it.
#
# The canonical form is additive: a container prints as `header{` + children + `}`
# and a root as its concatenated children, with no separators between siblings.
# A chunk's printed size is therefore exactly the sum of what the partitioner
# accounted for while filling it.

from __future__ import annotations

from typing import Union

from StyleNode import AtRule, Comment, Declaration, Node, Root, Rule


def to_css(node: Union[Node, Root]) -> str:
    """Serialize a node (or a whole root) to canonical CSS text."""
    if isinstance(node, Root):
        return "".join(to_css(ch) for ch in node.nodes)
    if isinstance(node, Declaration):
        important = "!important" if node.important else ""
        return f"{node.prop}:{node.value}{important};"
    if isinstance(node, Comment):
        return f"/*{node.text}*/"
    if isinstance(node, Rule):
        return ",".join(node.selectors) + "{" + "".join(to_css(ch) for ch in node.nodes) + "}"
    if isinstance(node, AtRule):
        header = at_rule_header(node)
        if node.nodes is None:
            return header + ";"
        return header + "{" + "".join(to_css(ch) for ch in node.nodes) + "}"
    raise TypeError(f"Cannot serialize node of type {type(node).__name__}")


def at_rule_header(node: AtRule) -> str:
    return f"@{node.name} {node.params}" if node.params else f"@{node.name}"


def estimate(node: Union[Node, Root]) -> int:
    """UTF-8 byte length of `to_css(node)`."""
    return len(to_css(node).encode("utf-8"))


__all__ = ["to_css", "at_rule_header", "estimate"]
