import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, TextIO

from Chunk import Chunk, ChunkWarning

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmitConfig:
    out_dir: str = "dist"
    basename: str = "output"
    encoding: str = "utf-8"
    write_manifest: bool = True


class ChunkEmitter(Protocol):
    def emit(self, chunks: Sequence[Chunk], warnings: Sequence[ChunkWarning]) -> List[str]: ...


def chunk_record(chunk: Chunk) -> Dict[str, Any]:
    """Describe one chunk for manifests and JSON output (no CSS body)."""
    span = chunk.first_source()
    return {
        "index": chunk.index,
        "id": chunk.id(),
        "bytes": chunk.size,
        "nodes": chunk.node_count(),
        "first_source_row": span.start_rc[0] if span is not None else None,
    }


def warning_record(warning: ChunkWarning) -> Dict[str, Any]:
    span = warning.source
    return {
        "message": warning.message,
        "node": warning.identifier,
        "bytes": warning.size,
        "limit": warning.limit,
        "line": span.start_rc[0] + 1 if span is not None else None,
    }


class DirectoryEmitter(ChunkEmitter):
    """
    Writes each chunk to `<out_dir>/<basename>.chunk<N>.css` (N is 1-based) and, unless
    disabled, a `<basename>.manifest.json` describing the chunks and any warnings.
    Existing files with the same names are overwritten.
    """

    def __init__(self, cfg: EmitConfig) -> None:
        self._cfg = cfg
        self._dir = Path(cfg.out_dir)

    def chunk_path(self, chunk: Chunk) -> Path:
        return self._dir / f"{self._cfg.basename}.chunk{chunk.index + 1}.css"

    def emit(self, chunks: Sequence[Chunk], warnings: Sequence[ChunkWarning]) -> List[str]:
        self._dir.mkdir(parents=True, exist_ok=True)
        written: List[str] = []
        entries: List[Dict[str, Any]] = []
        for chunk in chunks:
            p = self.chunk_path(chunk)
            p.write_text(chunk.css(), encoding=self._cfg.encoding)
            logger.debug("Wrote chunk %d (%d bytes) to %s", chunk.index, chunk.size, p)
            written.append(str(p))
            entries.append({"file": p.name, **chunk_record(chunk)})

        if self._cfg.write_manifest:
            manifest = self._dir / f"{self._cfg.basename}.manifest.json"
            payload = {
                "chunks": entries,
                "warnings": [warning_record(w) for w in warnings],
            }
            manifest.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
            written.append(str(manifest))
        logger.info("Wrote %d chunk files to %s", len(chunks), self._dir)
        return written


class JsonLinesEmitter(ChunkEmitter):
    """One JSON object per chunk (record fields plus `css`) on a text stream."""

    def __init__(self, cfg: EmitConfig, stream: Optional[TextIO] = None) -> None:
        self._cfg = cfg
        self._stream = stream

    def emit(self, chunks: Sequence[Chunk], warnings: Sequence[ChunkWarning]) -> List[str]:
        out = self._stream or sys.stdout
        for chunk in chunks:
            out.write(json.dumps({**chunk_record(chunk), "css": chunk.css()}, ensure_ascii=False) + "\n")
        out.flush()
        return ["<stdout>"] if self._stream is None else []


def _directory_factory(*, cfg: EmitConfig, **_: Any) -> DirectoryEmitter:
    return DirectoryEmitter(cfg)


def _jsonl_factory(*, cfg: EmitConfig, stream: Optional[TextIO] = None, **_: Any) -> JsonLinesEmitter:
    return JsonLinesEmitter(cfg, stream=stream)


# emitter key -> factory; keys are matched lower-cased and stripped
_EMITTERS: Dict[str, Callable[..., ChunkEmitter]] = {
    "directory": _directory_factory,
    "dir": _directory_factory,
    "files": _directory_factory,
    "jsonl": _jsonl_factory,
    "stdout": _jsonl_factory,
}

# Keys whose output goes to stdout, so the CLI summary must go elsewhere.
STREAM_EMITTERS = frozenset({"jsonl", "stdout"})


def available_emitters() -> List[str]:
    return sorted(_EMITTERS)


def create_emitter(
    emitter: str,
    *,
    cfg: EmitConfig,
    **kwargs: Any,
) -> ChunkEmitter:
    key = (emitter or "directory").strip().lower()
    factory = _EMITTERS.get(key)
    if factory is None:
        raise ValueError(f"Unsupported emitter '{emitter}' (available: {', '.join(available_emitters())})")
    return factory(cfg=cfg, **kwargs)


__all__ = [
    "EmitConfig",
    "ChunkEmitter",
    "DirectoryEmitter",
    "JsonLinesEmitter",
    "STREAM_EMITTERS",
    "available_emitters",
    "chunk_record",
    "warning_record",
    "create_emitter",
]
