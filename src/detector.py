"""
Similarity estimators.

Each estimator takes two token streams and returns an AnalysisPhase with an
integer score in [0, 100]. A score whose denominator would be zero is 0.
"""
import math
import re

import Levenshtein

from models import AnalysisPhase, Match
from tokenizer import TokenKind, tokenize, skeleton, control_signature

# Fixed class markers for the lexical signature (upper case, so they never
# collide with a keyword spelling)
KIND_MARKERS = {
    TokenKind.IDENTIFIER: 'ID',
    TokenKind.OPERATOR: 'OP',
    TokenKind.LITERAL: 'LIT',
    TokenKind.PUNCTUATION: 'PUN',
}

MIN_NGRAM = 1
MAX_NGRAM = 3
NGRAM_DIVISOR = 5

MIN_MATCH_LENGTH = 12


def score_percent(ratio):
    """Scale a 0..1 ratio to an integer percentage, rounding half up."""
    return int(math.floor(ratio * 100 + 0.5))


def jaccard_similarity(a, b):
    """|A & B| / |A | B| over two iterables, 0.0 when both are empty."""
    set_a = set(a)
    set_b = set(b)
    union = set_a | set_b
    if not union:
        return 0.0
    return len(set_a & set_b) / len(union)


def signature_of(token):
    if token.kind is TokenKind.KEYWORD:
        return token.value
    if token.kind in KIND_MARKERS:
        return KIND_MARKERS[token.kind]
    raise ValueError(f"Unhandled token kind: {token.kind!r}")


def lexical_signature(tokens):
    return [signature_of(t) for t in tokens]


def choose_ngram_size(len_a, len_b):
    """
    Short snippets need unigrams/bigrams for any overlap to exist;
    longer ones use trigrams.
    """
    n = min(len_a, len_b) // NGRAM_DIVISOR
    return max(MIN_NGRAM, min(MAX_NGRAM, n))


def build_ngrams(signature, n):
    """Set of contiguous n-grams, each joined into one string."""
    return {
        ' '.join(signature[i:i + n])
        for i in range(len(signature) - n + 1)
    }


def lexical_score(tokens_a, tokens_b):
    """Jaccard similarity of adaptive-length n-grams over token signatures."""
    sig_a = lexical_signature(tokens_a)
    sig_b = lexical_signature(tokens_b)
    n = choose_ngram_size(len(sig_a), len(sig_b))

    grams_a = build_ngrams(sig_a, n)
    grams_b = build_ngrams(sig_b, n)

    if not grams_a or not grams_b:
        score = 0
    else:
        score = score_percent(jaccard_similarity(grams_a, grams_b))

    return AnalysisPhase(
        score=score,
        details=f"Jaccard overlap of {n}-gram token signatures, resistant to renaming.",
        findings=[
            f"Lexical similarity: {score}%",
            f"Unique {n}-grams in A: {len(grams_a)}",
        ],
    )


def structural_score(tokens_a, tokens_b):
    """Normalized edit distance between keyword/punctuation skeletons."""
    skel_a = skeleton(tokens_a)
    skel_b = skeleton(tokens_b)

    if not skel_a or not skel_b:
        score = 0
    else:
        max_len = max(len(skel_a), len(skel_b))
        distance = Levenshtein.distance(skel_a, skel_b)
        score = score_percent((max_len - distance) / max_len)

    return AnalysisPhase(
        score=score,
        details="Levenshtein distance between keyword and punctuation skeletons.",
        findings=[
            f"Structural similarity: {score}%",
            f"Skeleton A length: {len(skel_a)}",
        ],
    )


def lcs_length(tokens1, tokens2):
    """
    Calculate Longest Common Subsequence length using dynamic programming.

    Args:
        tokens1, tokens2: Sequences to compare

    Returns:
        Length of the longest common subsequence
    """
    if not tokens1 or not tokens2:
        return 0

    m, n = len(tokens1), len(tokens2)

    dp = [[0] * (n + 1) for _ in range(m + 1)]

    for i in range(1, m + 1):
        for j in range(1, n + 1):
            if tokens1[i-1] == tokens2[j-1]:
                dp[i][j] = dp[i-1][j-1] + 1
            else:
                dp[i][j] = max(dp[i-1][j], dp[i][j-1])

    return dp[m][n]


def control_flow_score(tokens_a, tokens_b):
    """LCS of control-flow keyword sequences, normalized by the longer one."""
    flow_a = control_signature(tokens_a)
    flow_b = control_signature(tokens_b)

    if not flow_a or not flow_b:
        score = 0
    else:
        score = score_percent(lcs_length(flow_a, flow_b) / max(len(flow_a), len(flow_b)))

    return AnalysisPhase(
        score=score,
        details="Longest common subsequence of control-flow keywords.",
        findings=[
            f"Control flow similarity: {score}%",
            f"Decision keywords in A: {len(flow_a)}",
        ],
    )


# Fixed-weight policy: plain Jaccard over each signal's value set

def legacy_lexical_score(tokens_a, tokens_b):
    score = score_percent(jaccard_similarity(
        [t.value for t in tokens_a], [t.value for t in tokens_b]))
    return AnalysisPhase(
        score=score,
        details="Jaccard overlap of token values.",
        findings=[f"Lexical similarity: {score}%"],
    )


def legacy_structural_score(tokens_a, tokens_b):
    def markers(tokens):
        return [t.value for t in tokens
                if t.kind in (TokenKind.KEYWORD, TokenKind.PUNCTUATION)]

    score = score_percent(jaccard_similarity(markers(tokens_a), markers(tokens_b)))
    return AnalysisPhase(
        score=score,
        details="Jaccard overlap of keyword and punctuation markers.",
        findings=[f"Structural similarity: {score}%"],
    )


def legacy_control_flow_score(tokens_a, tokens_b):
    score = score_percent(jaccard_similarity(
        control_signature(tokens_a), control_signature(tokens_b)))
    return AnalysisPhase(
        score=score,
        details="Jaccard overlap of control-flow keywords.",
        findings=[f"Control flow similarity: {score}%"],
    )


def _significant_lines(text):
    lines = []
    for number, raw in enumerate(text.splitlines(), 1):
        line = re.sub(r'\s+', ' ', raw).strip()
        if len(line) < MIN_MATCH_LENGTH:
            continue
        if not any(t.kind in (TokenKind.IDENTIFIER, TokenKind.KEYWORD) for t in tokenize(line)):
            continue
        lines.append((number, line))
    return lines


def find_line_matches(text_a, text_b):
    """
    Lines (whitespace-normalized) that occur in both texts.
    Each line of A is paired with the first unused equal line of B.
    """
    positions_b = {}
    for number, line in _significant_lines(text_b):
        positions_b.setdefault(line, []).append(number)

    matches = []
    for number, line in _significant_lines(text_a):
        candidates = positions_b.get(line)
        if candidates:
            matches.append(Match(line_a=number, line_b=candidates.pop(0), content=line))
    return matches
