"""
Combines the estimator scores into an overall score, a verdict and a
readable explanation. `analyze` is the single entry point of the engine.
"""
import logging
import math
import re
from collections import namedtuple

from detector import (
    lexical_score,
    structural_score,
    control_flow_score,
    legacy_lexical_score,
    legacy_structural_score,
    legacy_control_flow_score,
    find_line_matches,
)
from models import AnalysisPhase, Report, Verdict, Weights
from tokenizer import tokenize, skeleton, control_signature

logger = logging.getLogger(__name__)

BASE_WEIGHTS = Weights(0.5, 0.25, 0.25)
LEXICAL_ONLY_WEIGHTS = Weights(1.0, 0.0, 0.0)
NO_SKELETON_WEIGHTS = Weights(0.6, 0.0, 0.4)
NO_FLOW_WEIGHTS = Weights(0.6, 0.4, 0.0)

PLAGIARIZED_THRESHOLD = 80
SIMILAR_THRESHOLD = 40

HIGH_PHASE_THRESHOLD = 70
MODERATE_PHASE_THRESHOLD = 40

IDENTICAL_FINDING = "identical strings"
EMPTY_FINDING = "analysis impossible on empty input"

# A scoring policy: the three estimators, how weights are picked and the
# two verdict thresholds (all on the 0-100 scale)
Strategy = namedtuple('Strategy', [
    'name', 'lexical', 'structural', 'control_flow',
    'weights', 'combine', 'plagiarized_threshold', 'similar_threshold',
])


def round_half_up(value):
    return int(math.floor(value + 0.5))


def select_weights(skeleton_a_empty, flow_a_empty):
    """Weights for the three phases; redistributes weight away from empty signals."""
    if skeleton_a_empty and flow_a_empty:
        return LEXICAL_ONLY_WEIGHTS
    if skeleton_a_empty:
        return NO_SKELETON_WEIGHTS
    if flow_a_empty:
        return NO_FLOW_WEIGHTS
    return BASE_WEIGHTS


def classify(overall_score, plagiarized_threshold=PLAGIARIZED_THRESHOLD,
             similar_threshold=SIMILAR_THRESHOLD):
    if overall_score > plagiarized_threshold:
        return Verdict.PLAGIARIZED
    if overall_score > similar_threshold:
        return Verdict.SIMILAR
    return Verdict.ORIGINAL


def weighted_score(lexical, structural, control_flow, weights):
    return round_half_up(
        lexical * weights.lexical
        + structural * weights.structural
        + control_flow * weights.control_flow
    )


def combine(lexical, structural, control_flow, skeleton_a_empty, flow_a_empty):
    """
    Merge three integer phase scores into (overall_score, verdict) using the
    dynamic weighting policy.
    """
    weights = select_weights(skeleton_a_empty, flow_a_empty)
    overall = weighted_score(lexical, structural, control_flow, weights)
    return overall, classify(overall)


ADAPTIVE = Strategy(
    name='adaptive',
    lexical=lexical_score,
    structural=structural_score,
    control_flow=control_flow_score,
    weights=select_weights,
    combine=combine,
    plagiarized_threshold=PLAGIARIZED_THRESHOLD,
    similar_threshold=SIMILAR_THRESHOLD,
)

LEGACY_WEIGHTS = Weights(0.4, 0.35, 0.25)
LEGACY_PLAGIARIZED_THRESHOLD = 75
LEGACY_SIMILAR_THRESHOLD = 45


def legacy_weights(skeleton_a_empty, flow_a_empty):
    return LEGACY_WEIGHTS


def legacy_combine(lexical, structural, control_flow, skeleton_a_empty, flow_a_empty):
    """Fixed weights, no fallback for empty signals."""
    overall = weighted_score(lexical, structural, control_flow, LEGACY_WEIGHTS)
    return overall, classify(overall, LEGACY_PLAGIARIZED_THRESHOLD, LEGACY_SIMILAR_THRESHOLD)


LEGACY = Strategy(
    name='legacy',
    lexical=legacy_lexical_score,
    structural=legacy_structural_score,
    control_flow=legacy_control_flow_score,
    weights=legacy_weights,
    combine=legacy_combine,
    plagiarized_threshold=LEGACY_PLAGIARIZED_THRESHOLD,
    similar_threshold=LEGACY_SIMILAR_THRESHOLD,
)

STRATEGIES = {s.name: s for s in (ADAPTIVE, LEGACY)}
DEFAULT_STRATEGY = ADAPTIVE.name


def _phase_sentence(score, high, moderate, low):
    if score > HIGH_PHASE_THRESHOLD:
        return high
    if score > MODERATE_PHASE_THRESHOLD:
        return moderate
    return low


def _percent(weight):
    return f"{round_half_up(weight * 100)}%"


def generate_explanation(verdict, lexical, structural, control_flow, overall, weights,
                         plagiarized_threshold=PLAGIARIZED_THRESHOLD,
                         similar_threshold=SIMILAR_THRESHOLD, skipped_reason=None):
    """
    Markdown rationale built from already computed scores.
    With weights=None the aggregation section states why weighting was skipped.
    """
    lines = []

    lines.append(f'## Classification: {verdict.value}')
    lines.append('')
    if verdict is Verdict.PLAGIARIZED:
        lines.append('The submitted code exhibits substantial similarity to the reference implementation across multiple heuristic dimensions.')
    elif verdict is Verdict.SIMILAR:
        lines.append('The submitted code demonstrates partial overlap with the reference implementation. Further manual review is recommended.')
    else:
        lines.append('The submitted code appears to be independently authored with minimal structural overlap to the reference implementation.')

    lines.append('')
    lines.append('### Heuristic Analysis')
    lines.append('')

    lines.append(f'**Lexical Token Similarity: {lexical}%**')
    lines.append(_phase_sentence(
        lexical,
        '- High token overlap detected. The code shares long runs of the same keywords and token kinds.',
        '- Moderate token overlap observed. Some token sequences are shared between implementations.',
        '- Low token overlap. The implementations use distinct token sequences.',
    ))
    lines.append('')

    lines.append(f'**Structural Skeleton Similarity: {structural}%**')
    lines.append(_phase_sentence(
        structural,
        '- Keyword and punctuation patterns are highly congruent. Block structures and statement organization follow similar patterns.',
        '- Partial structural alignment detected. Some block nesting and statement patterns are comparable.',
        '- Divergent structural organization. The code architectures differ significantly in block composition.',
    ))
    lines.append('')

    lines.append(f'**Control Flow Similarity: {control_flow}%**')
    lines.append(_phase_sentence(
        control_flow,
        '- Control keyword sequences exhibit strong correlation. Branching logic and iteration patterns are nearly identical.',
        '- Some control flow patterns are shared. The implementations follow comparable execution paths in certain regions.',
        '- Distinct control flow signatures. The programs follow different execution trajectories.',
    ))
    lines.append('')

    lines.append('### Weighted Aggregation')
    lines.append('')
    lines.append(f'Final similarity score: **{overall}%**')
    lines.append('')
    if weights is None:
        lines.append(f'Weighting skipped: {skipped_reason or "no weighted combination was computed"}.')
    else:
        lines.append('The composite metric is computed as:')
        lines.append(f'- Lexical analysis: {_percent(weights.lexical)} weighting')
        lines.append(f'- Structural skeleton: {_percent(weights.structural)} weighting')
        lines.append(f'- Control flow heuristic: {_percent(weights.control_flow)} weighting')
    lines.append('')
    lines.append(
        f'Thresholds: >{plagiarized_threshold}% = PLAGIARIZED, '
        f'>{similar_threshold}% = SIMILAR, '
        f'≤{similar_threshold}% = ORIGINAL'
    )

    return '\n'.join(lines)


def normalize_whitespace(text):
    return re.sub(r'\s+', ' ', text).strip()


def _uniform_report(score, verdict, finding, details, skipped_reason, strategy, matches):
    def phase():
        return AnalysisPhase(score=score, details=details, findings=[finding])

    return Report(
        overall_score=score,
        verdict=verdict,
        lexical=phase(),
        structural=phase(),
        control_flow=phase(),
        matches=matches,
        explanation=generate_explanation(
            verdict, score, score, score, score, None,
            strategy.plagiarized_threshold, strategy.similar_threshold,
            skipped_reason=skipped_reason),
        weights=None,
        strategy=strategy.name,
    )


def analyze(text_a, text_b, strategy=DEFAULT_STRATEGY):
    """
    Compare two source texts and return a Report.

    Raises TypeError when either input is not a string and KeyError for an
    unknown strategy name. Any other outcome is a well-formed Report.
    """
    for name, value in (('text_a', text_a), ('text_b', text_b)):
        if not isinstance(value, str):
            raise TypeError(f"{name} must be str, not {type(value).__name__}")
    policy = STRATEGIES[strategy]

    normalized_a = normalize_whitespace(text_a)
    if normalized_a and normalized_a == normalize_whitespace(text_b):
        logger.debug("Inputs identical after whitespace normalization")
        return _uniform_report(
            100, Verdict.PLAGIARIZED, IDENTICAL_FINDING,
            "Inputs are identical after whitespace normalization.",
            "the inputs are identical, so the phases were not scored",
            policy, find_line_matches(text_a, text_b))

    tokens_a = tokenize(text_a)
    tokens_b = tokenize(text_b)
    if not tokens_a or not tokens_b:
        logger.debug("Empty token stream (A=%d, B=%d tokens)", len(tokens_a), len(tokens_b))
        return _uniform_report(
            0, Verdict.ORIGINAL, EMPTY_FINDING,
            "At least one input has no tokens to compare.",
            "an input has no tokens, so the phases were not scored",
            policy, [])

    lexical = policy.lexical(tokens_a, tokens_b)
    structural = policy.structural(tokens_a, tokens_b)
    control_flow = policy.control_flow(tokens_a, tokens_b)

    skeleton_a_empty = not skeleton(tokens_a)
    flow_a_empty = not control_signature(tokens_a)
    overall, verdict = policy.combine(
        lexical.score, structural.score, control_flow.score, skeleton_a_empty, flow_a_empty)
    weights = policy.weights(skeleton_a_empty, flow_a_empty)
    logger.debug("strategy=%s weights=%s overall=%d verdict=%s",
                 policy.name, weights.as_tuple(), overall, verdict.value)

    return Report(
        overall_score=overall,
        verdict=verdict,
        lexical=lexical,
        structural=structural,
        control_flow=control_flow,
        matches=find_line_matches(text_a, text_b),
        explanation=generate_explanation(
            verdict, lexical.score, structural.score, control_flow.score,
            overall, weights, policy.plagiarized_threshold, policy.similar_threshold),
        weights=weights,
        strategy=policy.name,
    )
