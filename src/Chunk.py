import hashlib
from dataclasses import dataclass, field
from typing import List, Optional

from StyleNode import Root, SourceSpan, walk
from printer import to_css


@dataclass(frozen=True)
class Chunk:
    root: Root
    size: int
    index: int

    def css(self) -> str:
        return to_css(self.root)

    def id(self):
        id = f"{self.index}::{self.css()}"
        return hashlib.sha256(id.encode()).hexdigest()

    def first_source(self) -> Optional[SourceSpan]:
        """
        Source span of the first node in this chunk that carries one. Shells reuse the
        span of the at-rule they were cloned from, so this points at the original
        wrapping context when the chunk starts inside one.
        """
        for node in walk(self.root):
            span = getattr(node, "source", None)
            if span is not None:
                return span
        return None

    def node_count(self) -> int:
        return sum(1 for _ in walk(self.root)) - 1


@dataclass(frozen=True)
class ChunkWarning:
    message: str
    identifier: str
    size: int
    limit: int
    source: Optional[SourceSpan] = field(default=None, compare=False)


@dataclass
class ChunkResult:
    chunks: List[Chunk] = field(default_factory=list)
    warnings: List[ChunkWarning] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.chunks)

    def css(self) -> List[str]:
        return [c.css() for c in self.chunks]


__all__ = ["Chunk", "ChunkWarning", "ChunkResult"]
