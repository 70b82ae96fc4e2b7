"""
Tests for the tagged-text renderer.
"""

import unittest

from lexer.jack_lexer import JackLexer
from lexer.token import BLOCK_COMMENT, SYMBOL, STRING_CONST, Token
from parser.rd_parser import parse
from parser.render import escape, format_leaf, render, render_tokens
from parser.tree import Nonterminal, Terminal


class TestRender(unittest.TestCase):
    def test_empty_class(self):
        expected = (
            "<class>\n"
            "  <keyword> class </keyword>\n"
            "  <identifier> Main </identifier>\n"
            "  <symbol> { </symbol>\n"
            "  <symbol> } </symbol>\n"
            "</class>\n"
        )
        self.assertEqual(render(parse("class Main {}")), expected)

    def test_nested_rules(self):
        source = "class A { static int x; function void f() { do g(1); return; } }"
        expected = """<class>
  <keyword> class </keyword>
  <identifier> A </identifier>
  <symbol> { </symbol>
  <classVarDec>
    <keyword> static </keyword>
    <keyword> int </keyword>
    <identifier> x </identifier>
    <symbol> ; </symbol>
  </classVarDec>
  <subroutineDec>
    <keyword> function </keyword>
    <keyword> void </keyword>
    <identifier> f </identifier>
    <symbol> ( </symbol>
    <parameterList>
    </parameterList>
    <symbol> ) </symbol>
    <subroutineBody>
      <symbol> { </symbol>
      <statements>
        <doStatement>
          <keyword> do </keyword>
          <identifier> g </identifier>
          <symbol> ( </symbol>
          <expressionList>
            <expression>
              <term>
                <integerConstant> 1 </integerConstant>
              </term>
            </expression>
          </expressionList>
          <symbol> ) </symbol>
          <symbol> ; </symbol>
        </doStatement>
        <returnStatement>
          <keyword> return </keyword>
          <symbol> ; </symbol>
        </returnStatement>
      </statements>
      <symbol> } </symbol>
    </subroutineBody>
  </subroutineDec>
  <symbol> } </symbol>
</class>
"""
        self.assertEqual(render(parse(source)), expected)

    def test_comments_rendered_when_kept(self):
        text = render(parse("class A { // note\n}", keep_comments=True))
        self.assertIn("  <lineComment>  note </lineComment>\n", text)
        self.assertNotIn("lineComment", render(parse("class A { // note\n}")))

    def test_symbol_escaping(self):
        for raw, entity in (("<", "&lt;"), (">", "&gt;"), ("&", "&amp;")):
            leaf = format_leaf(Token(SYMBOL, raw, 0, 1, 1))
            self.assertEqual(leaf, f"<symbol> {entity} </symbol>")
        self.assertEqual(format_leaf(Token(SYMBOL, '"', 0, 1, 1)), "<symbol> &quot; </symbol>")

    def test_string_constant_escaping(self):
        leaf = format_leaf(Token(STRING_CONST, "a<b & c", 0, 1, 1))
        self.assertEqual(leaf, "<stringConstant> a&lt;b &amp; c </stringConstant>")

    def test_escape_ampersand_first(self):
        self.assertEqual(escape("&lt;"), "&amp;lt;")

    def test_multiline_block_comment_stays_on_one_line(self):
        leaf = format_leaf(Token(BLOCK_COMMENT, " a\r\n b ", 0, 1, 1))
        self.assertEqual(leaf, "<blockComment>  a&#13;&#10; b  </blockComment>")
        text = render(parse("class A { /* a\nb */ }", keep_comments=True))
        self.assertIn("  <blockComment>  a&#10;b  </blockComment>\n", text)
        self.assertEqual(len(text.splitlines()), 7)

    def test_hand_built_tree(self):
        tree = Nonterminal("term", (Terminal(Token(SYMBOL, "~", 0, 1, 1)), Nonterminal("term")))
        self.assertEqual(render(tree), "<term>\n  <symbol> ~ </symbol>\n  <term>\n  </term>\n</term>\n")

    def test_rendering_is_idempotent(self):
        tree = parse("class A { field int a, b; method void m(int x) { let a = x; return; } }")
        self.assertEqual(render(tree), render(tree))


class TestRenderTokens(unittest.TestCase):
    def test_token_listing(self):
        tokens = JackLexer().analyze("let x = a < 1;")
        expected = (
            "<tokens>\n"
            "<keyword> let </keyword>\n"
            "<identifier> x </identifier>\n"
            "<symbol> = </symbol>\n"
            "<identifier> a </identifier>\n"
            "<symbol> &lt; </symbol>\n"
            "<integerConstant> 1 </integerConstant>\n"
            "<symbol> ; </symbol>\n"
            "</tokens>\n"
        )
        self.assertEqual(render_tokens(tokens), expected)

    def test_empty_listing(self):
        self.assertEqual(render_tokens([]), "<tokens>\n</tokens>\n")


if __name__ == "__main__":
    unittest.main()
