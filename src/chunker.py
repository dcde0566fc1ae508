# Size-bounded stylesheet chunking.
# - Input: top-level nodes of an already parsed stylesheet (see StyleNode).
# - Output: ordered chunks, each an independently valid Root, plus oversize warnings.
# - Sizes are canonical UTF-8 bytes (printer.estimate); chunk size == printed size.
# - Conditional @-rules (@media, @supports, ...) are split by descending into their
#   children; the wrapping chain is rebuilt as empty shells in every chunk that needs it.
# - Atomic @-rules (@keyframes, @font-face, @page, @counter-style) are never split.
# - A single unit larger than the limit is reported, then placed whole in its own chunk.
# - Input nodes are never mutated; everything placed in a chunk is a clone.

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from Chunk import Chunk, ChunkResult, ChunkWarning
from StyleNode import AtRule, Comment, Container, Declaration, Node, Root, Rule, is_block_at_rule
from printer import estimate

logger = logging.getLogger(__name__)

DEFAULT_SIZE_LIMIT = 400 * 1024

NON_SPLITTABLE_AT_RULES = frozenset({"keyframes", "font-face", "page", "counter-style"})

_VENDOR_PREFIX_RE = re.compile(r"^-[a-z0-9]+-")

Reporter = Callable[[str], None]
ParentChain = Tuple[AtRule, ...]


@dataclass(frozen=True)
class ChunkConfig:
    size_limit: int = DEFAULT_SIZE_LIMIT
    atomic_names: frozenset = NON_SPLITTABLE_AT_RULES

    def __post_init__(self) -> None:
        if isinstance(self.size_limit, bool) or not isinstance(self.size_limit, int):
            raise ValueError(f"size_limit must be an integer, got {self.size_limit!r}")
        if self.size_limit < 0:
            raise ValueError(f"size_limit must be non-negative, got {self.size_limit}")
        if isinstance(self.atomic_names, str):
            raise ValueError(f"atomic_names must be a collection of names, got the string {self.atomic_names!r}")
        object.__setattr__(self, "atomic_names", frozenset(_normalize_name(n) for n in self.atomic_names))

    def is_atomic(self, node: AtRule) -> bool:
        return _normalize_name(node.name) in self.atomic_names


class ChunkBuilder:
    """The chunk currently being filled plus the list of chunks already completed."""

    def __init__(self) -> None:
        self.chunks: List[Chunk] = []
        self.root = Root()
        self.size = 0

    @property
    def is_empty(self) -> bool:
        return not self.root.nodes

    def append(self, node: Node, parent_chain: ParentChain = (), node_size: Optional[int] = None) -> None:
        """
        Clone `node` into the current chunk under `parent_chain`.

        Each at-rule in the chain is matched against the last child at its nesting
        level; a match (same name and params) is extended in place, otherwise a fresh
        empty shell is created and its printed size added to the running count.
        """
        parent: Container = self.root
        for at_rule in parent_chain:
            last = parent.last
            if isinstance(last, AtRule) and last.nodes is not None \
                    and last.name == at_rule.name and last.params == at_rule.params:
                parent = last
                continue
            shell = at_rule.shell()
            self.size += estimate(shell)
            parent.append(shell)
            parent = shell

        parent.append(node.clone())
        self.size += estimate(node) if node_size is None else node_size

    def flush(self) -> None:
        """Move the current chunk to the completed list (if it holds anything) and reset."""
        if self.root.nodes:
            chunk = Chunk(root=self.root, size=self.size, index=len(self.chunks))
            logger.debug("Chunk %d closed: %d top-level nodes, %d bytes",
                         chunk.index, len(self.root.nodes), chunk.size)
            self.chunks.append(chunk)
        self.root = Root()
        self.size = 0


def describe_node(node: Node) -> str:
    """Human-facing identifier used in oversize warnings."""
    if isinstance(node, Rule):
        first = node.selectors[0] if node.selectors else ""
        return f"Rule starting with selector '{first}'"
    if isinstance(node, AtRule):
        return f"@-rule '@{node.name}'"
    if isinstance(node, Declaration):
        return f"Declaration '{node.prop}'"
    if isinstance(node, Comment):
        return "Comment"
    return type(node).__name__


class _Partitioner:
    def __init__(self, config: ChunkConfig, report: Optional[Reporter]) -> None:
        self.config = config
        self.report = report
        self.builder = ChunkBuilder()
        self.warnings: List[ChunkWarning] = []

    def run(self, nodes: Iterable[Node]) -> ChunkResult:
        # Explicit work stack of (node, parent chain) frames, popped in document order.
        stack: List[Tuple[Node, ParentChain]] = [(n, ()) for n in reversed(list(nodes))]
        while stack:
            node, chain = stack.pop()
            children = self._place(node, chain)
            if children:
                inner = chain + (node,)
                stack.extend((ch, inner) for ch in reversed(children))
        self.builder.flush()
        return ChunkResult(chunks=self.builder.chunks, warnings=self.warnings)

    def _place(self, node: Node, chain: ParentChain) -> Optional[Sequence[Node]]:
        """
        Decide what to do with one node. Returns the children to descend into when the
        node is a conditional @-rule that must be split, otherwise places it and
        returns None.
        """
        limit = self.config.size_limit
        size = estimate(node)
        if size > limit:
            self._warn_oversize(node, size)

        builder = self.builder
        overflows = builder.size + size > limit

        if overflows and is_block_at_rule(node) and _has_real_content(node):
            if self.config.is_atomic(node):
                if not builder.is_empty:
                    builder.flush()
                builder.append(node, chain, size)
                return None
            return node.nodes

        if overflows and not builder.is_empty:
            builder.flush()
        builder.append(node, chain, size)
        return None

    def _warn_oversize(self, node: Node, size: int) -> None:
        limit = self.config.size_limit
        identifier = describe_node(node)
        message = (f"{identifier} has an estimated size of {size} bytes, "
                   f"exceeding the {limit} byte limit and cannot be split.")
        self.warnings.append(ChunkWarning(
            message=message, identifier=identifier, size=size, limit=limit,
            source=getattr(node, "source", None),
        ))
        if self.report is not None:
            self.report(message)
        else:
            logger.warning(message)


def partition(nodes: Iterable[Node], config: Optional[ChunkConfig] = None,
              report: Optional[Reporter] = None) -> ChunkResult:
    """
    Split a sequence of top-level stylesheet nodes into size-bounded chunks.

    Args:
        nodes: Top-level nodes in document order. They are read, never modified.
        config: Size limit and atomic @-rule names (defaults: 400 KiB, the four
            non-splittable @-rules).
        report: Called with the message of every oversize warning. When omitted the
            warnings are logged at WARNING level instead.

    Returns:
        ChunkResult with the ordered chunks and the collected warnings.
    """
    return _Partitioner(config or ChunkConfig(), report).run(nodes)


def chunk_stylesheet(root: Root, size_limit: int = DEFAULT_SIZE_LIMIT,
                     report: Optional[Reporter] = None) -> ChunkResult:
    return partition(root.nodes, ChunkConfig(size_limit=size_limit), report)


def _has_real_content(node: AtRule) -> bool:
    """True if any child is a rule or a non-empty block @-rule (not just empty wrappers)."""
    return any(
        isinstance(ch, Rule) or (isinstance(ch, AtRule) and bool(ch.nodes))
        for ch in node.nodes or []
    )


def _normalize_name(name: str) -> str:
    return _VENDOR_PREFIX_RE.sub("", (name or "").strip().lower())


__all__ = [
    "DEFAULT_SIZE_LIMIT",
    "NON_SPLITTABLE_AT_RULES",
    "ChunkConfig",
    "ChunkBuilder",
    "describe_node",
    "partition",
    "chunk_stylesheet",
]
