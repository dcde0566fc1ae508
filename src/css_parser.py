# Tree-sitter front end: CSS text -> StyleNode tree.
# - Parses RAW BYTES with the `css` grammar from tree_sitter_language_pack; all slicing is
#   done on bytes and decoded only afterwards.
# - Every piece of text (selector, @-rule name and params, property, value) is the exact
#   byte range of the grammar node that holds it, so quoted strings and internal
#   whitespace are kept verbatim.
# - @-statements (media_statement, supports_statement, keyframes_statement, at_rule, ...)
#   are recognised by their leading `@` token rather than by type name.
# - Syntax errors are not repaired: the first ERROR/MISSING node raises StylesheetParseError.

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Union

from tree_sitter import Node as TSNode
from tree_sitter_language_pack import get_parser

from StyleNode import AtRule, Comment, Declaration, Node, Root, Rule, SourceSpan

BODY_TYPES = ("block", "keyframe_block_list")
RULE_TYPES = ("rule_set", "keyframe_block")


class StylesheetParseError(ValueError):
    def __init__(self, message: str, path: str | None = None, point: tuple[int, int] | None = None) -> None:
        where = ""
        if point is not None:
            where = f" at {point[0] + 1}:{point[1] + 1}"
        if path:
            where = f" in {path}{where}"
        super().__init__(f"{message}{where}")
        self.path = path
        self.point = point


def parse_css(source: Union[str, bytes], path: str | None = None) -> Root:
    """
    Parse stylesheet text into a Root of StyleNode objects.

    Raises:
        StylesheetParseError: when Tree-sitter reports a syntax error or produces a
            node type this front end does not understand.
    """
    contents = source.encode("utf-8") if isinstance(source, str) else source
    if contents.startswith(b"\xef\xbb\xbf"):
        contents = contents[3:]
    if not contents.strip():
        return Root()

    tree = get_parser("css").parse(contents)
    root = tree.root_node
    if root.has_error:
        bad = _first_error(root)
        point = tuple(bad.start_point) if bad is not None else None
        raise StylesheetParseError("Syntax error", path, point)

    return Root(nodes=_convert_children(root, contents, path))


def parse_css_file(path: Union[str, Path]) -> Root:
    p = Path(path)
    return parse_css(p.read_bytes(), path=str(p))


def _convert_children(parent: TSNode, contents: bytes, path: str | None) -> List[Node]:
    out: List[Node] = []
    for child in parent.named_children:
        out.append(_convert(child, contents, path))
    return out


def _convert(node: TSNode, contents: bytes, path: str | None) -> Node:
    t = node.type
    span = _span(node, path)
    if t == "comment":
        text = _node_text(contents, node)
        return Comment(text=text[2:-2] if text.endswith("*/") else text[2:], source=span)
    if t == "declaration":
        return _convert_declaration(node, contents, span)

    body = _body(node)
    if t in RULE_TYPES:
        if body is None:
            raise StylesheetParseError(f"Rule without a block ({t})", path, tuple(node.start_point))
        return Rule(selectors=_selectors(node, contents), nodes=_convert_children(body, contents, path), source=span)

    keyword = _node_text(contents, node.children[0]) if node.child_count else ""
    if keyword.startswith("@"):
        # at_keyword is named, the `@media`/`@import` tokens of dedicated statements are not
        params = [c for c in node.named_children if c.type not in BODY_TYPES and c.type != "at_keyword"]
        nodes = _convert_children(body, contents, path) if body is not None else None
        return AtRule(name=keyword[1:], params=_range_text(contents, params), nodes=nodes, source=span)

    raise StylesheetParseError(f"Unsupported syntax node '{t}'", path, tuple(node.start_point))


def _selectors(node: TSNode, contents: bytes) -> List[str]:
    """One string per selector: children of `selectors` (rule_set) or the keyframe stops."""
    holder = next((c for c in node.named_children if c.type == "selectors"), node)
    return [
        _node_text(contents, c)
        for c in holder.named_children
        if c.type not in BODY_TYPES and c.type != "comment"
    ]


def _convert_declaration(node: TSNode, contents: bytes, span: SourceSpan) -> Declaration:
    prop = ""
    important = False
    values: List[TSNode] = []
    seen_colon = False
    for ch in node.children:
        if ch.type == "property_name":
            prop = _node_text(contents, ch)
        elif ch.type == "important":
            important = True
        elif ch.type == ":" and not seen_colon:
            seen_colon = True
        elif seen_colon and ch.type != ";" and not important:
            values.append(ch)
    return Declaration(prop=prop, value=_range_text(contents, values), important=important, source=span)


def _body(node: TSNode) -> Optional[TSNode]:
    for ch in node.named_children:
        if ch.type in BODY_TYPES:
            return ch
    return None


def _first_error(node: TSNode) -> Optional[TSNode]:
    if node.type == "ERROR" or node.is_missing:
        return node
    for ch in node.children:
        if ch.has_error or ch.is_missing:
            found = _first_error(ch)
            if found is not None:
                return found
    return None


def _span(node: TSNode, path: str | None) -> SourceSpan:
    return SourceSpan(start_rc=tuple(node.start_point), end_rc=tuple(node.end_point), path=path)


def _node_text(contents: bytes, node: TSNode) -> str:
    return _text(contents, node.start_byte, node.end_byte)


def _range_text(contents: bytes, nodes: List[TSNode]) -> str:
    """Source text from the first node's start to the last node's end ("" for none)."""
    if not nodes:
        return ""
    return _text(contents, nodes[0].start_byte, nodes[-1].end_byte)


def _text(contents: bytes, start: int, end: int) -> str:
    return contents[start:end].decode("utf-8", errors="replace")


__all__ = ["StylesheetParseError", "parse_css", "parse_css_file"]
