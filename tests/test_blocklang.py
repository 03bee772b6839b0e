# tests/test_blocklang.py
"""
Tests for the block notation: the PEG grammar at rule level, then the
text -> NodeGraph builder and its error reporting.
"""

import pytest
from parsimonious.exceptions import ParseError

from creek import BlockSyntaxError, ConstAssign, Declare, VarAssign, load_blocks, parse_blocks
from creek.blocklang import BLOCK_GRAMMAR


ONE_BRANCH = """
# one diamond
entry block 1 -> 2, 3 {
    a = 0
    b = 1
}
block 2 -> 4 { c = b }
block 3 -> 4 { c = a }
exit block 4 { d = a }
"""


@pytest.fixture(scope="module")
def grammar():
    return BLOCK_GRAMMAR


class TestGrammarRules:

    def test_key_rules_exist(self, grammar):
        for rule in ("graph", "block", "targets", "stmt", "declare", "assign"):
            assert rule in grammar, f"Rule {rule!r} missing"

    def test_empty_input(self, grammar):
        assert grammar.parse("") is not None

    def test_statements(self, grammar):
        for text in ("var x", "x = 5", "x = -3", "x = y", "x=y;"):
            assert grammar["stmt"].parse(text).text == text

    def test_declare_needs_space(self, grammar):
        # "varx" is a name, so this only parses as the start of an assignment
        with pytest.raises(ParseError):
            grammar["declare"].parse("varx")

    def test_targets(self, grammar):
        assert grammar["targets"].parse("-> 1, 2 ,3").text == "-> 1, 2 ,3"

    def test_block_with_roles(self, grammar):
        grammar["block"].parse("entry exit block 1 { }")

    def test_comment_is_whitespace(self, grammar):
        grammar.parse("# nothing here\nblock 1 { # trailing\n a = 1 # set\n}\n")

    def test_rejects_missing_brace(self, grammar):
        with pytest.raises(ParseError):
            grammar.parse("block 1 { a = 1")


class TestParseBlocks:

    def test_one_branch(self):
        g = parse_blocks(ONE_BRANCH)
        assert g.node_ids() == [1, 2, 3, 4]
        assert (g.entry(), g.exit()) == (1, 4)
        assert g.successors(1) == [2, 3]
        assert g.predecessors(4) == [2, 3]
        assert g.lookup(1).stmts == [ConstAssign("a", 0), ConstAssign("b", 1)]
        assert g.lookup(2).stmts == [VarAssign("c", "b")]

    def test_semicolon_separated_statements(self):
        g = parse_blocks("block 1 { var a; a = 1; b = a }")
        assert g.lookup(1).stmts == [Declare("a"), ConstAssign("a", 1), VarAssign("b", "a")]

    def test_default_roles_are_first_and_last(self):
        g = parse_blocks("block 5 -> 6 { }\nblock 6 { }\n")
        assert (g.entry(), g.exit()) == (5, 6)

    def test_explicit_roles_override_position(self):
        g = parse_blocks("exit block 1 { }\nentry block 2 -> 1 { }\n")
        assert (g.entry(), g.exit()) == (2, 1)

    def test_single_block_is_entry_and_exit(self):
        g = parse_blocks("block 1 -> 1 { x = 1 }")
        assert g.entry() == g.exit() == 1
        assert g.successors(1) == [1]

    def test_empty_block(self):
        g = parse_blocks("block 1 {}")
        assert g.lookup(1).stmts == []

    def test_load_blocks(self, tmp_path):
        path = tmp_path / "diamond.blocks"
        path.write_text(ONE_BRANCH, encoding="utf-8")
        assert load_blocks(path).node_ids() == [1, 2, 3, 4]
        assert load_blocks(str(path)).exit() == 4


class TestParseErrors:

    def test_empty_text(self):
        with pytest.raises(BlockSyntaxError, match="no blocks"):
            parse_blocks("   # only a comment\n")

    def test_syntax_error_position_first_line(self):
        with pytest.raises(BlockSyntaxError) as exc_info:
            parse_blocks("block 1 { a = }\n")
        assert exc_info.value.line == 1
        assert str(exc_info.value).startswith("1:")
        assert isinstance(exc_info.value.cause, ParseError)

    def test_syntax_error_position_second_line(self):
        with pytest.raises(BlockSyntaxError) as exc_info:
            parse_blocks("block 1 { a = 0 }\nblok 2 { }\n")
        assert exc_info.value.line == 2
        assert exc_info.value.column == 1
        assert "blok" in str(exc_info.value)

    def test_syntax_error_points_inside_multiline_block(self):
        with pytest.raises(BlockSyntaxError) as exc_info:
            parse_blocks("block 1 {\n  a = 0\n  b = 1\n  c =\n}\n")
        # the missing value is noticed at the closing brace
        assert (exc_info.value.line, exc_info.value.column) == (5, 1)
        assert "'}'" in str(exc_info.value)

    def test_syntax_error_points_at_statement_in_later_block(self):
        text = (
            "block 1 -> 2 {\n"
            "  a = 0\n"
            "}\n"
            "block 2 {\n"
            "  x = a\n"
            "  y = ?\n"
            "}\n"
        )
        with pytest.raises(BlockSyntaxError) as exc_info:
            parse_blocks(text)
        assert exc_info.value.line == 6
        assert exc_info.value.column == 7
        assert str(exc_info.value).startswith("6:7: unexpected input '?")

    def test_duplicate_block(self):
        with pytest.raises(BlockSyntaxError, match="duplicate block id 1"):
            parse_blocks("block 1 { }\nblock 1 { }\n")

    def test_undefined_target(self):
        with pytest.raises(BlockSyntaxError, match="undefined block 9") as exc_info:
            parse_blocks("block 1 -> 9 { }")
        assert exc_info.value.line == 0
        assert str(exc_info.value) == "block 1 jumps to undefined block 9"

    def test_two_entries(self):
        with pytest.raises(BlockSyntaxError, match="more than one entry block: 1, 2"):
            parse_blocks("entry block 1 { }\nentry block 2 { }\n")

    def test_two_exits(self):
        with pytest.raises(BlockSyntaxError, match="more than one exit"):
            parse_blocks("exit block 1 { }\nexit block 2 { }\n")
