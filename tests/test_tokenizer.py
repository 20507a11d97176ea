"""
Unit tests for tokenizer.py
Tests token classification, comment stripping, skeletons and control signatures
"""
import unittest
import sys
import os

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from tokenizer import (
    Token,
    TokenKind,
    tokenize,
    skeleton,
    control_signature,
    KEYWORDS,
    CONTROL_FLOW_KEYWORDS,
)

K = TokenKind


class TestTokenize(unittest.TestCase):
    """Test token classification"""

    def test_empty_string(self):
        self.assertEqual(tokenize(""), [])

    def test_whitespace_only(self):
        self.assertEqual(tokenize("   \n\t  "), [])

    def test_if_statement_kinds(self):
        kinds = [t.kind for t in tokenize("if (x > 1) { return x; }")]
        self.assertEqual(kinds, [
            K.KEYWORD, K.PUNCTUATION, K.IDENTIFIER, K.OPERATOR, K.LITERAL,
            K.PUNCTUATION, K.PUNCTUATION, K.KEYWORD, K.IDENTIFIER,
            K.PUNCTUATION, K.PUNCTUATION,
        ])

    def test_line_comment_dropped(self):
        self.assertEqual(tokenize("// comment\nlet a = 1;"), [
            Token(K.KEYWORD, 'let'),
            Token(K.IDENTIFIER, 'a'),
            Token(K.OPERATOR, '='),
            Token(K.LITERAL, '1'),
            Token(K.PUNCTUATION, ';'),
        ])

    def test_block_comment_dropped(self):
        tokens = tokenize("/* if while\n for */ x")
        self.assertEqual(tokens, [Token(K.IDENTIFIER, 'x')])

    def test_unterminated_block_comment(self):
        self.assertEqual(tokenize("a /* never closed"), [Token(K.IDENTIFIER, 'a')])

    def test_comment_only(self):
        self.assertEqual(tokenize("// nothing here"), [])

    def test_string_literals_single_token(self):
        tokens = tokenize('"a // b" \'c\' `t ${x}`')
        self.assertEqual([t.kind for t in tokens], [K.LITERAL] * 3)
        self.assertEqual(tokens[0].value, '"a // b"')

    def test_escaped_quote_in_string(self):
        tokens = tokenize(r'"say \"hi\"" ;')
        self.assertEqual(tokens[0], Token(K.LITERAL, r'"say \"hi\""'))
        self.assertEqual(tokens[1], Token(K.PUNCTUATION, ';'))

    def test_numbers(self):
        tokens = tokenize("3.14 42")
        self.assertEqual(tokens, [Token(K.LITERAL, '3.14'), Token(K.LITERAL, '42')])

    def test_identifier_charset(self):
        tokens = tokenize("$el _tmp a1")
        self.assertEqual([t.kind for t in tokens], [K.IDENTIFIER] * 3)

    def test_keyword_case_sensitive(self):
        self.assertEqual(tokenize("If")[0].kind, K.IDENTIFIER)

    def test_longest_operator_match(self):
        values = [t.value for t in tokenize("a === b !== c >>>= d && e || f => g")]
        for op in ('===', '!==', '>>>=', '&&', '||', '=>'):
            self.assertIn(op, values)

    def test_single_char_operator_fallback(self):
        tokens = tokenize("a = b + c")
        self.assertEqual([t.value for t in tokens if t.kind is K.OPERATOR], ['=', '+'])

    def test_unknown_character_preserved(self):
        tokens = tokenize("@decorator #x")
        self.assertEqual(tokens[0], Token(K.OPERATOR, '@'))
        self.assertIn(Token(K.OPERATOR, '#'), tokens)

    def test_unterminated_string_does_not_raise(self):
        tokens = tokenize('"abc')
        self.assertEqual(tokens[0], Token(K.OPERATOR, '"'))
        self.assertEqual(tokens[1], Token(K.IDENTIFIER, 'abc'))

    def test_tokens_are_immutable(self):
        token = tokenize("x")[0]
        with self.assertRaises(Exception):
            token.value = 'y'


class TestSkeleton(unittest.TestCase):
    """Test keyword/punctuation projection"""

    def test_skeleton_concatenates_without_separator(self):
        self.assertEqual(skeleton(tokenize("if (x > 1) { return x; }")), "if(){return;}")

    def test_skeleton_ignores_identifiers_and_literals(self):
        self.assertEqual(skeleton(tokenize("a = b + 1")), "")


class TestControlSignature(unittest.TestCase):
    """Test control-flow keyword extraction"""

    def test_order_preserved(self):
        code = "function f() { for (;;) { if (a) return 1; } }"
        self.assertEqual(control_signature(tokenize(code)), ['function', 'for', 'if', 'return'])

    def test_non_control_keywords_skipped(self):
        self.assertEqual(control_signature(tokenize("const a = new B();")), [])

    def test_keyword_inside_string_ignored(self):
        self.assertEqual(control_signature(tokenize('"if"')), [])

    def test_control_keywords_are_keywords(self):
        self.assertTrue(CONTROL_FLOW_KEYWORDS <= KEYWORDS)


if __name__ == '__main__':
    unittest.main(verbosity=2)
