"""
Lexer for C-family / JavaScript-like source text.
Turns a raw buffer into typed tokens; comments and whitespace are dropped.
"""
import re
import enum
from dataclasses import dataclass


class TokenKind(enum.Enum):
    KEYWORD = "KEYWORD"
    IDENTIFIER = "IDENTIFIER"
    OPERATOR = "OPERATOR"
    LITERAL = "LITERAL"
    PUNCTUATION = "PUNCTUATION"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str


KEYWORDS = frozenset([
    'if', 'else', 'for', 'while', 'do',
    'switch', 'case', 'default', 'break', 'continue',
    'return', 'function', 'class', 'extends',
    'try', 'catch', 'finally', 'throw',
    'new', 'delete', 'typeof', 'instanceof', 'in', 'void',
    'const', 'let', 'var',
    'import', 'export',
    'async', 'await', 'yield',
])

# Keywords that shape the execution path of a program
CONTROL_FLOW_KEYWORDS = frozenset([
    'if', 'else', 'for', 'while', 'do',
    'switch', 'case', 'default',
    'return', 'function',
    'try', 'catch',
])

MULTI_CHAR_OPERATORS = (
    '>>>=',
    '===', '!==', '**=', '<<=', '>>=', '>>>', '&&=', '||=', '??=',
    '==', '!=', '<=', '>=', '&&', '||', '??', '?.', '=>',
    '++', '--', '+=', '-=', '*=', '/=', '%=', '&=', '|=', '^=', '**', '<<', '>>',
)
SINGLE_CHAR_OPERATORS = '+-*/%=<>!&|^~?:'
PUNCTUATION = '{}()[],.;'


def _operator_pattern():
    # Longest match first
    ops = sorted(MULTI_CHAR_OPERATORS, key=len, reverse=True)
    alternation = '|'.join(re.escape(op) for op in ops)
    return alternation + '|[' + re.escape(SINGLE_CHAR_OPERATORS) + ']'


_TOKEN_RE = re.compile(
    r"""
    (?P<comment>//[^\n]*|/\*.*?(?:\*/|\Z))
    |(?P<string>"(?:\\.|[^"\\\n])*"|'(?:\\.|[^'\\\n])*'|`(?:\\.|[^`\\])*`)
    |(?P<identifier>[A-Za-z_$][A-Za-z0-9_$]*)
    |(?P<number>[0-9]+(?:\.[0-9]+)?)
    |(?P<operator>{operators})
    |(?P<punctuation>[{punctuation}])
    |(?P<whitespace>\s+)
    |(?P<other>.)
    """.format(operators=_operator_pattern(), punctuation=re.escape(PUNCTUATION)),
    re.DOTALL | re.VERBOSE,
)


def tokenize(text):
    """
    Split source text into a list of Tokens.

    Never raises on string input. Comments and whitespace produce no
    tokens; any character the lexer does not recognize is kept as an
    OPERATOR token so every lexeme is classified.
    """
    tokens = []
    if not text:
        return tokens

    for match in _TOKEN_RE.finditer(text):
        group = match.lastgroup
        value = match.group()

        if group in ('comment', 'whitespace'):
            continue
        if group == 'identifier':
            kind = TokenKind.KEYWORD if value in KEYWORDS else TokenKind.IDENTIFIER
        elif group in ('string', 'number'):
            kind = TokenKind.LITERAL
        elif group == 'punctuation':
            kind = TokenKind.PUNCTUATION
        else:
            # operator or an unrecognized character
            kind = TokenKind.OPERATOR
        tokens.append(Token(kind, value))

    return tokens


def skeleton(tokens):
    """Keyword and punctuation values concatenated in order, no separators."""
    return ''.join(
        t.value for t in tokens
        if t.kind in (TokenKind.KEYWORD, TokenKind.PUNCTUATION)
    )


def control_signature(tokens):
    """Ordered list of the control-flow keywords in a token stream."""
    return [
        t.value for t in tokens
        if t.kind is TokenKind.KEYWORD and t.value in CONTROL_FLOW_KEYWORDS
    ]
