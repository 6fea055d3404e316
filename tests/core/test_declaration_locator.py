"""
Tests for the Declaration Locator.
"""

from nrseg.core.locator import select
from nrseg.core.syntax import parse_unit

SOURCE = b"""package p

type Handler interface {
\tServeHTTP(w ResponseWriter, r *Request)
}

type Options struct {
\tOnError func(err error)
}

func forward(x int) int

func A() {}

func (o *Options) B() {
\tf := func() {}
\tf()
}

func C() {
\treturn
}
"""


def test_only_declarations_with_bodies():
  unit = parse_unit("p.go", SOURCE)
  assert [d.name for d in select(unit)] == ["A", "B", "C"]


def test_selection_is_lazy_and_single_pass():
  unit = parse_unit("p.go", SOURCE)
  gen = select(unit)
  assert next(gen).name == "A"
  assert [d.name for d in gen] == ["B", "C"]
  assert list(gen) == []


def test_no_declarations():
  unit = parse_unit("p.go", b"package p\n\nvar x = 1\n")
  assert list(select(unit)) == []
