#!/usr/bin/env python3
"""
Splitter.py — command-line front end

- Input: one stylesheet path (or `-` for stdin)
- Parses with Tree-sitter (css_parser), chunks with chunker.partition
- Size limit: --size, else STYLESPLIT_SIZE_LIMIT, else 400 KiB
- Writes chunks through an emitter (directory of .css files by default)
- Prints a concise JSON summary to stdout (to stderr when chunks go to stdout)
- Exit status 2 on unreadable input, syntax errors or bad configuration
"""
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional

from Chunk import ChunkResult
from Emit import STREAM_EMITTERS, EmitConfig, chunk_record, create_emitter, warning_record
from chunker import DEFAULT_SIZE_LIMIT, ChunkConfig, partition
from css_parser import StylesheetParseError, parse_css

logger = logging.getLogger("stylesplit")

SIZE_ENV = "STYLESPLIT_SIZE_LIMIT"


def _env_value(name: str) -> str:
    return (os.environ.get(name) or "").strip()


def _resolve_size_limit(cli_value: Optional[int] = None) -> int:
    """Return the byte budget from the CLI flag, the environment, or the default.

    Raises:
        ValueError: when the environment value is not a non-negative integer.
    """
    if cli_value is not None:
        return cli_value
    raw = _env_value(SIZE_ENV)
    if not raw:
        return DEFAULT_SIZE_LIMIT
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"{SIZE_ENV} must be an integer byte count, got {raw!r}") from e
    if value < 0:
        raise ValueError(f"{SIZE_ENV} must be non-negative, got {value}")
    return value


def _read_input(path: str) -> bytes:
    if path == "-":
        return sys.stdin.buffer.read()
    return Path(path).read_bytes()


def _default_basename(path: str) -> str:
    return "stdin" if path == "-" else Path(path).stem


def _build_summary(path: str, size_limit: int, input_bytes: int, result: ChunkResult,
                   outputs: List[str]) -> Dict:
    return {
        "input": path,
        "size_limit": size_limit,
        "input_bytes": input_bytes,
        "chunk_count": len(result.chunks),
        "chunks": [chunk_record(c) for c in result.chunks],
        "warnings": [warning_record(w) for w in result.warnings],
        "outputs": outputs,
    }


def run(path: str, size_limit: int, emitter_name: str, out_dir: str, basename: str) -> Dict:
    """Parse, chunk and emit one stylesheet; return the JSON-ready summary.

    Raises:
        OSError: input cannot be read or output cannot be written.
        StylesheetParseError: input is not valid CSS.
        ValueError: invalid size limit or unknown emitter.
    """
    config = ChunkConfig(size_limit=size_limit)
    emitter = create_emitter(emitter_name, cfg=EmitConfig(out_dir=out_dir, basename=basename))

    contents = _read_input(path)
    logger.info("Read %s (%d bytes)", path, len(contents))
    root = parse_css(contents, path=None if path == "-" else path)

    # Warnings are logged as they happen and also returned in the summary.
    result = partition(root.nodes, config, report=logger.warning)
    logger.info("Split %s into %d chunks (limit %d bytes, %d warnings)",
                path, len(result.chunks), size_limit, len(result.warnings))

    outputs = emitter.emit(result.chunks, result.warnings)
    return _build_summary(path, size_limit, len(contents), result, outputs)


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entrypoint.

    - Parses the input path and options
    - Resolves the size limit (flag, env, default)
    - Runs parse -> partition -> emit
    - Prints JSON summary
    """
    parser = argparse.ArgumentParser(description="Split a stylesheet into size-bounded, independently valid chunks.")
    parser.add_argument("input", help="Stylesheet path, or '-' to read from stdin")
    parser.add_argument("--size", type=int, help=f"Byte budget per chunk (default: ${SIZE_ENV} or {DEFAULT_SIZE_LIMIT})")
    parser.add_argument("--out", default="dist", help="Output directory for the directory emitter (default: dist)")
    parser.add_argument("--emitter", default="directory", help="Chunk emitter key (default: directory)")
    parser.add_argument("--basename", help="Output file prefix (default: input file stem)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")

    try:
        size_limit = _resolve_size_limit(args.size)
        summary = run(args.input, size_limit, args.emitter, args.out,
                      args.basename or _default_basename(args.input))
    except StylesheetParseError as e:
        logger.error("Cannot parse stylesheet: %s", e)
        return 2
    except OSError as e:
        logger.error("I/O failure: %s", e)
        return 2
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        return 2

    target = sys.stderr if args.emitter.strip().lower() in STREAM_EMITTERS else sys.stdout
    print(json.dumps(summary, ensure_ascii=False), file=target)
    return 0


if __name__ == "__main__":
    sys.exit(main())
