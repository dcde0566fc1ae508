# Shared test fixtures utilities.
# Provides node builders, deterministic stylesheet generators and on-disk fixture
# management so multiple test modules can reuse the same data without duplication.

from __future__ import annotations

import random
import sys
from pathlib import Path
from typing import Iterable, Iterator, List

SRC = Path(__file__).resolve().parents[1] / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from StyleNode import AtRule, Comment, Declaration, Node, Root, Rule  # noqa: E402
from chunker import NON_SPLITTABLE_AT_RULES  # noqa: E402
from printer import to_css  # noqa: E402

# Directory for on-disk stylesheet fixtures used by tests
FIXTURES_DIR = Path(__file__).with_name("fixtures")

SAMPLE_CSS = """@charset "utf-8";
@import url("base.css") screen;
/* header */
.a, .b > .c { color: red; margin: 0 auto !important; }
@media screen and (min-width: 768px) {
  .d { padding: 4px; }
  @supports (display: grid) {
    .e { display: grid; }
  }
}
@keyframes spin {
  from { transform: rotate(0deg); }
  to { transform: rotate(360deg); }
}
@font-face { font-family: "Foo"; src: url("foo.woff2") format("woff2"); }
"""


def rule(selector: str, **decls: str) -> Rule:
    """`rule(".a", color="red")` -> `.a{color:red;}`; underscores in names become dashes."""
    return Rule(
        selectors=[s.strip() for s in selector.split(",")],
        nodes=[Declaration(prop=k.replace("_", "-"), value=v) for k, v in decls.items()],
    )


def sized_rule(selector: str, size: int) -> Rule:
    """A single-declaration rule whose canonical form is exactly `size` bytes."""
    padding = size - len(selector) - len("{p:;}")
    if padding < 0:
        raise ValueError(f"{size} bytes is too small for selector {selector!r}")
    return Rule(selectors=[selector], nodes=[Declaration(prop="p", value="x" * padding)])


def at_rule(name: str, params: str = "", *children: Node) -> AtRule:
    return AtRule(name=name, params=params, nodes=list(children))


def keyframes(name: str, steps: int = 10) -> AtRule:
    return AtRule(name="keyframes", params=name, nodes=[
        rule(f"{i * 100 // max(steps - 1, 1)}%", opacity=f"0.{i}", transform=f"translateX({i}px)")
        for i in range(steps)
    ])


def content_units(nodes: Iterable[Node], atomic=NON_SPLITTABLE_AT_RULES) -> Iterator[str]:
    """
    Flatten nodes into the units the partitioner must keep whole: descend into non-empty,
    non-atomic block @-rules (shells are wrappers, not content) and print everything else.
    """
    for n in nodes:
        if isinstance(n, AtRule) and n.nodes and n.name.lower() not in atomic:
            yield from content_units(n.nodes, atomic)
        else:
            yield to_css(n)


def chunk_units(result) -> List[str]:
    return [u for c in result.chunks for u in content_units(c.root.nodes)]


def rand_stylesheet(n_rules: int, seed: int = 42) -> List[Node]:
    """Deterministic mix of rules, comments and (nested) conditional groups."""
    rnd = random.Random(seed)
    nodes: List[Node] = []
    i = 0
    while i < n_rules:
        roll = rnd.random()
        if roll < 0.15:
            nodes.append(Comment(text=f" block {i} "))
        elif roll < 0.35:
            inner = [sized_rule(f".m{i}-{j}", rnd.randint(20, 90)) for j in range(rnd.randint(1, 6))]
            if rnd.random() < 0.3:
                inner.append(at_rule("supports", "(display:grid)",
                                     *[sized_rule(f".s{i}-{j}", rnd.randint(20, 60)) for j in range(3)]))
            nodes.append(at_rule("media", f"(min-width:{rnd.randint(1, 9) * 100}px)", *inner))
            i += len(inner)
        elif roll < 0.40:
            nodes.append(keyframes(f"k{i}", steps=rnd.randint(2, 6)))
        else:
            nodes.append(sized_rule(f".r{i}", rnd.randint(12, 120)))
        i += 1
    return nodes


def ensure_fixtures() -> None:
    """Create deterministic stylesheet fixtures under tests/fixtures (idempotent)."""
    FIXTURES_DIR.mkdir(exist_ok=True)

    sample = FIXTURES_DIR / "sample.css"
    if not sample.exists():
        sample.write_text(SAMPLE_CSS, encoding="utf-8")

    generated = FIXTURES_DIR / "generated.css"
    if not generated.exists():
        generated.write_text(to_css(Root(nodes=rand_stylesheet(400, seed=7))), encoding="utf-8")

    unicode_css = FIXTURES_DIR / "unicode.css"
    if not unicode_css.exists():
        unicode_css.write_text('.quote::before { content: "«ü»"; }\n.ok { color: green; }\n', encoding="utf-8")


def load_text(name: str) -> str:
    """Load a named fixture file from tests/fixtures directory."""
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


__all__ = [
    "FIXTURES_DIR",
    "SAMPLE_CSS",
    "rule",
    "sized_rule",
    "at_rule",
    "keyframes",
    "content_units",
    "chunk_units",
    "rand_stylesheet",
    "ensure_fixtures",
    "load_text",
]
