# tests/conftest.py
"""
Shared programs and fixtures for the points-to analyzer tests.
"""

from pathlib import Path

import pytest


# ── Programs ─────────────────────────────────────────────────────

# The canonical example: store and load through the same pointer.
README_PROGRAM = """\
p = &a
q = &b
r = &c
s = p
*p = q
t = *p
"""

# Copies listed before the address-of they depend on.
CHAIN_PROGRAM = "p = q; q = r; r = &x"

ALIASING_PROGRAM = """\
p = &a;
q = p;
r = &b;
*q = r;
t = *p;
"""

CYCLE_PROGRAM = "p = q\nq = r\nr = p\nr = &x\nq = &y"

# Sets of pivots and pointees keep growing after the first visit.
LATE_GROWTH_PROGRAM = """\
t = *p
*u = x
p = &a
u = &b
a = y
y = &c
x = &d
x = &e
b2 = b
"""

DEREF_EMPTY_PROGRAM = "p = *q\n*r = p\ns = &a"

BROKEN_LINE_PROGRAM = "p = &a\nq = p\nfoo bar\nt = *p\n"


# ── Fixtures ─────────────────────────────────────────────────────

@pytest.fixture
def write_program(tmp_path):
    """Write program text to a file and return its path."""
    def _write(text, name="program.txt"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write


@pytest.fixture
def graphviz_render(monkeypatch):
    """
    Replace ``graphviz.Source.render`` without calling the dot binary.

    Like the real method it saves the source to ``directory/filename``,
    writes ``<filename>.<format>`` and removes the source when
    ``cleanup`` is set.  Returns the list of call keyword arguments.
    """
    graphviz = pytest.importorskip("graphviz")
    calls = []

    def fake_render(self, filename=None, directory=None, format=None, cleanup=False, **kwargs):
        calls.append(dict(filename=filename, directory=directory, format=format, cleanup=cleanup))
        source = Path(directory) / filename
        source.write_text(self.source, encoding="utf-8")
        image = source.with_name(f"{source.name}.{format}")
        image.write_text(f"<{format}/>", encoding="utf-8")
        if cleanup:
            source.unlink()
        return str(image)

    monkeypatch.setattr(graphviz.Source, "render", fake_render)
    return calls
