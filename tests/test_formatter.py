from __future__ import annotations

import itertools
from textwrap import dedent
from typing import List

import pytest

from glyph_ref.diagnostics import Diagnostic, FormatError, Span
from glyph_ref.formatter import FormatState, format_items, format_source
from glyph_ref.tree import Ident, Number, Strand, Words
from tests.support.harness import (
    FormatCase,
    RecordingOracle,
    diagnostics_of,
    fmt,
    parse_ok,
)

RENDER_CASES: List[FormatCase] = [
    # Literals and spacing
    FormatCase("numbers-spaced", "1   2", "1 2\n"),
    FormatCase("number-canonical", "007 1.50", "7 1.5\n"),
    FormatCase("number-small", "0.0000001", "0.0000001\n"),
    FormatCase("digit-then-ident", "x = 1\n2 x", "x = 1\n2x\n"),
    FormatCase("ident-then-digit", "x = 1\nx 2", "x = 1\nx 2\n"),
    FormatCase("ident-then-ident", "x = 1\ny = 2\nx y", "x = 1\ny = 2\nx y\n"),
    FormatCase("ident-then-char", "x = 1\nx 'a'", "x = 1\nx 'a'\n"),
    FormatCase("chars-abut", "'a' 'b'", "'a''b'\n"),
    FormatCase("string-then-number", '"a" 1', '"a"1\n'),
    FormatCase("char-escape", r"'\u{41}' '\n'", "'A''\\n'\n"),
    FormatCase("string-escape", r'"a\tb\"c"', '"a\\tb\\"c"\n'),
    FormatCase("string-control", '"\\u{7}"', '"\\u{7}"\n'),
    # Selectors
    FormatCase("selector-after-ident", "x = 1\nx :ab", "x = 1\nx :ab\n"),
    FormatCase("selector-after-digit", "1 :ab", "1:ab\n"),
    FormatCase("ident-after-selector", "x = 1\n:ab x", "x = 1\n:ab x\n"),
    # Primitives
    FormatCase("glyphs-abut", "+ 1 ⇌ 2", "+1⇌2\n"),
    FormatCase("names-to-glyphs", "reverse add 1 2", "⇌+1 2\n"),
    FormatCase("modifier-names", "reduce add 1_2_3", "/+1_2_3\n"),
    FormatCase("alpha-primitive", "1 now 2", "1 now 2\n"),
    FormatCase("alpha-primitive-start", "rand 1", "rand 1\n"),
    FormatCase("nested-modifiers", "/ ∵ + [1 2]", "/∵+[1 2]\n"),
    # Strands
    FormatCase("strand", "1_2_3", "1_2_3\n"),
    FormatCase("strand-then-ident", "x = 5\n1_2_3   x", "x = 5\n1_2_3 x\n"),
    FormatCase("strand-then-number", "1_2 3", "1_2 3\n"),
    FormatCase("strand-then-glyph", "1_2 +", "1_2+\n"),
    FormatCase("strand-then-bracket", "1_2 [3]", "1_2[3]\n"),
    FormatCase("strand-of-strings", '"a"_"b" "c"', '"a"_"b" "c"\n'),
    # Brackets
    FormatCase("array", "[ 1  2 3 ]", "[1 2 3]\n"),
    FormatCase("array-multiline", "[1\n  2\n  3]", "[1 2 3]\n"),
    FormatCase("func", "( + 1 )", "(+1)\n"),
    FormatCase("func-array", "(+ | - 1 | ×)", "(+|-1|×)\n"),
    FormatCase("empty-brackets", "[] ()", "[]()\n"),
    # Items
    FormatCase("binding", "x=1_2", "x = 1_2\n"),
    FormatCase("comment", "#hello", "# hello\n"),
    FormatCase("comment-verbatim", "#   spaced  out", "#   spaced  out\n"),
    FormatCase("trailing-comment", "x = 1 # one", "x = 1\n# one\n"),
    FormatCase("blank-lines-collapse", "1\n\n\n\n2", "1\n\n2\n"),
    FormatCase("leading-blank-lines", "\n\n1", "1\n"),
    FormatCase("trailing-blank-lines", "1 2\n\n\n", "1 2\n"),
    FormatCase("no-final-newline", "1 2", "1 2\n"),
    FormatCase("crlf", "1\r\n2\r\n", "1\n2\n"),
    FormatCase("empty", "", "\n"),
]


@pytest.mark.parametrize("case", RENDER_CASES, ids=lambda case: case.name)
def test_render(case: FormatCase) -> None:
    assert fmt(case.source) == case.expected


# ============================================================================
# Spacing safety over every adjacent pair of word shapes
# ============================================================================

WORD_SHAPES = [
    "1", "2.5", "'a'", '"s"', "x", ":ab", "+", "now", "[1]", "(+)", "(+|-)", "1_2", "/+",
]


@pytest.mark.parametrize(
    "left, right",
    [pytest.param(a, b, id=f"{a}|{b}") for a, b in itertools.product(WORD_SHAPES, repeat=2)],
)
def test_adjacent_words_never_merge(left: str, right: str) -> None:
    source = f"x = 1\n{left} {right}"
    formatted = fmt(source)
    assert parse_ok(formatted) == parse_ok(source)


def test_reparse_is_structurally_equal() -> None:
    source = dedent(
        """\
        # scores
        xs = [3 1  2]
        total = /+ xs


        ⇌ ⍋ xs   # sorted
        ( ∵ (+ 1) | ≡ ⇌ ) 1_2_3 :ab 'c' "str"
        """
    )
    formatted = fmt(source)
    assert parse_ok(formatted) == parse_ok(source)


# ============================================================================
# Primitive vs binding disambiguation
# ============================================================================

def test_unbound_name_renders_as_primitive_then_binding_wins() -> None:
    source = dedent(
        """\
        add 1 2
        add = (+)
        add 1 2
        """
    )
    assert fmt(source) == "+1 2\nadd = (+)\nadd 1 2\n"


def test_self_reference_sees_the_primitive() -> None:
    # The right-hand side renders before the binding is registered
    assert fmt("add = add 1") == "add = +1\n"
    assert fmt("add = add 1\nadd 2") == "add = +1\nadd 2\n"


def test_self_reference_without_primitive_is_unknown() -> None:
    diags = diagnostics_of("f = f 1")
    assert [(d.kind, d.message) for d in diags] == [("resolve", "Unknown identifier 'f'")]


def test_rebinding_sees_the_earlier_binding() -> None:
    assert fmt("f = 1\nf = f 1") == "f = 1\nf = f 1\n"


def test_bound_modifier_name_stays_spelled() -> None:
    source = "reduce = (+)\nreduce 1 2"
    assert fmt(source) == "reduce = (+)\nreduce 1 2\n"


# ============================================================================
# Diagnostics are all or nothing
# ============================================================================

def test_malformed_item_suppresses_output() -> None:
    with pytest.raises(FormatError) as exc_info:
        format_source("x = 1\n1 ]")

    diags = exc_info.value.diagnostics
    assert len(diags) == 1
    assert diags[0].message == "Unexpected ']'"
    assert diags[0].span.line == 2


def test_parse_errors_skip_resolution() -> None:
    diags = diagnostics_of("y\n1 ]")
    assert [d.kind for d in diags] == ["parse"]


def test_resolution_errors_are_collected() -> None:
    diags = diagnostics_of("x = 1\ny 2\nz =")
    assert [d.message for d in diags] == [
        "Unknown identifier 'y'",
        "Binding 'z' has no value",
    ]
    assert (diags[0].span.line, diags[0].span.column) == (2, 1)


# ============================================================================
# Driver against a stand-in oracle
# ============================================================================

def test_render_then_register_order() -> None:
    items = parse_ok("x = x\nx")
    oracle = RecordingOracle()

    assert format_items(items, oracle) == "x = x\nx\n"
    assert oracle.queries == [("x", 0), ("x", 1)]
    assert len(oracle.registered) == 2
    assert all(a is b for a, b in zip(oracle.registered, items))


def test_every_item_is_registered() -> None:
    items = parse_ok("# c\n1\n\n2")
    oracle = RecordingOracle()
    format_items(items, oracle)
    assert oracle.registered == items


def test_oracle_diagnostics_discard_text() -> None:
    span = Span(None, 1, 1, 1, 2)
    oracle = RecordingOracle(errors=[Diagnostic("boom", span, "resolve")])

    with pytest.raises(FormatError) as exc_info:
        format_items(parse_ok("1"), oracle)
    assert [d.message for d in exc_info.value.diagnostics] == ["boom"]


def test_mock_oracle_controls_primitive_lookup() -> None:
    items = [Words((Ident("add"), Number(1)))]
    assert format_items(items, RecordingOracle()) == "+1\n"
    assert format_items(items, RecordingOracle(bound={"add"})) == "add 1\n"


# ============================================================================
# Spacing state machine
# ============================================================================

def test_strand_flag_fires_once() -> None:
    state = FormatState(RecordingOracle())
    state.push("1")
    state.was_strand = True
    state.space_if_alphabetic()
    assert state.string == "1 "
    assert state.was_strand is False
    state.space_if_alphabetic()
    assert state.string == "1 "


def test_alphanumeric_vs_alphabetic_guards() -> None:
    state = FormatState(RecordingOracle())
    state.push("9")
    state.space_if_alphabetic()
    assert state.string == "9"
    state.space_if_alphanumeric()
    assert state.string == "9 "


def test_empty_buffer_needs_no_space() -> None:
    state = FormatState(RecordingOracle())
    state.space_if_alphanumeric()
    state.space_if_alphabetic()
    assert state.string == ""


def test_strand_items_from_tree() -> None:
    items = [Words((Strand((Number(1), Number(2))), Ident("y")))]
    assert format_items(items, RecordingOracle(bound={"y"})) == "1_2 y\n"
