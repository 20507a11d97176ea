"""
Unit tests for classifier.py
Tests weighting, verdict thresholds, short-circuit paths and full analyses
"""
import unittest
import sys
import os

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from classifier import (
    analyze,
    classify,
    combine,
    legacy_combine,
    select_weights,
    generate_explanation,
    BASE_WEIGHTS,
    LEXICAL_ONLY_WEIGHTS,
    NO_SKELETON_WEIGHTS,
    NO_FLOW_WEIGHTS,
    LEGACY_WEIGHTS,
    STRATEGIES,
)
from models import Verdict
from tokenizer import tokenize, skeleton, control_signature

ORIGINAL_CODE = """
function sumPositive(values) {
  // add up the positive entries
  let total = 0;
  for (let i = 0; i < values.length; i++) {
    if (values[i] > 0) {
      total += values[i];
    }
  }
  return total;
}
"""

RENAMED_CODE = """
function addPositives(nums) {
  let acc = 0;
  for (let k = 0; k < nums.length; k++) {
    if (nums[k] > 0) {
      acc += nums[k];
    }
  }
  return acc;
}
"""

UNRELATED_CODE = """
class Stack {
  push(item) { this.items.push(item); }
  pop() { return this.items.pop(); }
}
const s = new Stack();
try { s.pop(); } catch (e) { console.log(e.message); }
"""


class TestSelectWeights(unittest.TestCase):
    """Test dynamic weighting"""

    def test_base(self):
        self.assertEqual(select_weights(False, False), BASE_WEIGHTS)
        self.assertEqual(BASE_WEIGHTS.as_tuple(), (0.5, 0.25, 0.25))

    def test_both_empty(self):
        self.assertEqual(select_weights(True, True).as_tuple(), (1.0, 0.0, 0.0))

    def test_skeleton_empty(self):
        self.assertEqual(select_weights(True, False).as_tuple(), (0.6, 0.0, 0.4))

    def test_flow_empty(self):
        self.assertEqual(select_weights(False, True).as_tuple(), (0.6, 0.4, 0.0))

    def test_weights_sum_to_one(self):
        for weights in (BASE_WEIGHTS, LEXICAL_ONLY_WEIGHTS, NO_SKELETON_WEIGHTS, NO_FLOW_WEIGHTS):
            self.assertAlmostEqual(sum(weights.as_tuple()), 1.0)


class TestVerdictThresholds(unittest.TestCase):
    """Test verdict boundaries on synthetic score triples"""

    def test_80_is_similar(self):
        self.assertEqual(combine(80, 80, 80, False, False), (80, Verdict.SIMILAR))

    def test_81_is_plagiarized(self):
        self.assertEqual(combine(81, 81, 81, False, False), (81, Verdict.PLAGIARIZED))

    def test_40_is_original(self):
        self.assertEqual(combine(40, 40, 40, False, False), (40, Verdict.ORIGINAL))

    def test_41_is_similar(self):
        self.assertEqual(combine(41, 41, 41, False, False), (41, Verdict.SIMILAR))

    def test_weighted_combination(self):
        # 100*0.5 + 60*0.25 + 20*0.25 = 70
        self.assertEqual(combine(100, 60, 20, False, False), (70, Verdict.SIMILAR))

    def test_reweighted_combination(self):
        # skeleton empty: 90*0.6 + 0*0 + 70*0.4 = 82
        self.assertEqual(combine(90, 0, 70, True, False), (82, Verdict.PLAGIARIZED))

    def test_classify_monotone(self):
        order = [Verdict.ORIGINAL, Verdict.SIMILAR, Verdict.PLAGIARIZED]
        previous = 0
        for score in range(101):
            rank = order.index(classify(score))
            self.assertGreaterEqual(rank, previous)
            previous = rank


class TestAnalyzeShortCircuits(unittest.TestCase):
    """Test identity and empty input paths"""

    def test_identity(self):
        report = analyze(ORIGINAL_CODE, ORIGINAL_CODE)
        self.assertEqual(report.overall_score, 100)
        self.assertEqual(report.verdict, Verdict.PLAGIARIZED)
        for _, phase in report.phases():
            self.assertEqual(phase.score, 100)
            self.assertEqual(phase.findings, ["identical strings"])

    def test_identity_ignores_whitespace_runs(self):
        report = analyze("let  a =\n 1;", "  let a = 1;  ")
        self.assertEqual(report.overall_score, 100)

    def test_identity_of_comment_only_text(self):
        self.assertEqual(analyze("// note", "// note").overall_score, 100)

    def test_empty_a(self):
        report = analyze("", "anything")
        self.assertEqual(report.overall_score, 0)
        self.assertEqual(report.verdict, Verdict.ORIGINAL)
        self.assertEqual(report.lexical.findings, ["analysis impossible on empty input"])

    def test_whitespace_a(self):
        report = analyze("   ", "x")
        self.assertEqual(report.overall_score, 0)
        self.assertEqual(report.verdict, Verdict.ORIGINAL)

    def test_empty_b(self):
        self.assertEqual(analyze("x", "").verdict, Verdict.ORIGINAL)

    def test_both_empty(self):
        report = analyze("", "")
        self.assertEqual(report.overall_score, 0)
        self.assertEqual(report.matches, [])

    def test_comments_only_against_code(self):
        report = analyze("// just a note", "let a = 1;")
        self.assertEqual(report.overall_score, 0)

    def test_short_circuits_report_no_weights(self):
        for a, b in ((ORIGINAL_CODE, ORIGINAL_CODE), ("", "x"), ("x", "   ")):
            report = analyze(a, b)
            self.assertIsNone(report.weights)
            self.assertIsNone(report.to_dict()['weights'])
            self.assertIn("Weighting skipped:", report.explanation)
            self.assertNotIn("% weighting", report.explanation)

    def test_short_circuit_reason_in_explanation(self):
        self.assertIn("the inputs are identical", analyze("x = 1", "x = 1").explanation)
        self.assertIn("an input has no tokens", analyze("", "x = 1").explanation)


class TestAnalyze(unittest.TestCase):
    """Test complete analyses"""

    def test_renamed_copy_is_plagiarized(self):
        report = analyze(ORIGINAL_CODE, RENAMED_CODE)
        self.assertEqual(report.lexical.score, 100)
        self.assertEqual(report.structural.score, 100)
        self.assertEqual(report.control_flow.score, 100)
        self.assertEqual(report.verdict, Verdict.PLAGIARIZED)

    def test_unrelated_scores_lower(self):
        copied = analyze(ORIGINAL_CODE, RENAMED_CODE)
        unrelated = analyze(ORIGINAL_CODE, UNRELATED_CODE)
        self.assertLess(unrelated.overall_score, copied.overall_score)
        self.assertNotEqual(unrelated.verdict, Verdict.PLAGIARIZED)

    def test_determinism(self):
        first = analyze(ORIGINAL_CODE, UNRELATED_CODE)
        second = analyze(ORIGINAL_CODE, UNRELATED_CODE)
        self.assertEqual(first, second)

    def test_bounds(self):
        samples = [ORIGINAL_CODE, RENAMED_CODE, UNRELATED_CODE, "x", "if", "{", "@#!", "'str'"]
        for a in samples:
            for b in samples:
                report = analyze(a, b)
                for score in (report.overall_score, report.lexical.score,
                              report.structural.score, report.control_flow.score):
                    self.assertIsInstance(score, int)
                    self.assertGreaterEqual(score, 0)
                    self.assertLessEqual(score, 100)

    def test_weight_branch_keyed_on_stream_a(self):
        plain = "total = price * count"
        shaped = "total = price * count; if (total) { return total; }"
        forward = analyze(plain, shaped)
        backward = analyze(shaped, plain)
        self.assertEqual(forward.weights, LEXICAL_ONLY_WEIGHTS)
        self.assertEqual(backward.weights, BASE_WEIGHTS)

    def test_flow_empty_weights(self):
        report = analyze("let a = [1, 2];", "let b = [3];")
        self.assertEqual(report.weights, NO_FLOW_WEIGHTS)
        self.assertIn("- Structural skeleton: 40% weighting", report.explanation)

    def test_matches_reported(self):
        report = analyze(ORIGINAL_CODE, ORIGINAL_CODE + "\n// extra")
        self.assertTrue(report.matches)
        self.assertEqual(report.matches[0].content, "function sumPositive(values) {")

    def test_non_string_rejected(self):
        with self.assertRaises(TypeError):
            analyze(None, "x")
        with self.assertRaises(TypeError):
            analyze("x", 42)

    def test_to_dict_keys(self):
        data = analyze(ORIGINAL_CODE, RENAMED_CODE).to_dict()
        for key in ('overallScore', 'verdict', 'lexical', 'structural',
                    'controlFlow', 'matches', 'explanation'):
            self.assertIn(key, data)
        self.assertEqual(data['verdict'], 'PLAGIARIZED')


class TestStrategies(unittest.TestCase):
    """Test alternate scoring policies"""

    def test_known_strategies(self):
        self.assertEqual(set(STRATEGIES), {'adaptive', 'legacy'})

    def test_legacy_uses_fixed_weights(self):
        report = analyze("let plain = 1", ORIGINAL_CODE, strategy='legacy')
        self.assertEqual(report.strategy, 'legacy')
        self.assertEqual(report.weights, LEGACY_WEIGHTS)
        self.assertIn(">75% = PLAGIARIZED", report.explanation)

    def test_legacy_identity(self):
        self.assertEqual(analyze("x = 1", "x = 1", strategy='legacy').overall_score, 100)

    def test_unknown_strategy(self):
        with self.assertRaises(KeyError):
            analyze("a", "b", strategy='nope')

    def test_each_strategy_supplies_its_combiner(self):
        self.assertIs(STRATEGIES['adaptive'].combine, combine)
        self.assertIs(STRATEGIES['legacy'].combine, legacy_combine)

    def test_analyze_scores_through_strategy_combiner(self):
        tokens = tokenize(ORIGINAL_CODE)
        for name, policy in STRATEGIES.items():
            report = analyze(ORIGINAL_CODE, RENAMED_CODE, strategy=name)
            expected = policy.combine(
                report.lexical.score, report.structural.score, report.control_flow.score,
                not skeleton(tokens), not control_signature(tokens))
            self.assertEqual((report.overall_score, report.verdict), expected)

    def test_legacy_combine_keeps_fixed_weights(self):
        self.assertEqual(legacy_combine(80, 80, 80, True, True), (80, Verdict.PLAGIARIZED))
        # no fallback to lexical-only weighting
        self.assertEqual(legacy_combine(100, 0, 0, True, True), (40, Verdict.ORIGINAL))
        self.assertEqual(combine(100, 0, 0, True, True), (100, Verdict.PLAGIARIZED))

    def test_legacy_thresholds(self):
        self.assertEqual(legacy_combine(45, 45, 45, False, False)[1], Verdict.ORIGINAL)
        self.assertEqual(legacy_combine(46, 46, 46, False, False)[1], Verdict.SIMILAR)
        self.assertEqual(legacy_combine(75, 75, 75, False, False)[1], Verdict.SIMILAR)
        self.assertEqual(legacy_combine(76, 76, 76, False, False)[1], Verdict.PLAGIARIZED)


class TestExplanation(unittest.TestCase):
    """Test narrative rendering"""

    def test_sections_present(self):
        text = generate_explanation(Verdict.SIMILAR, 75, 50, 10, 53, BASE_WEIGHTS)
        self.assertTrue(text.startswith("## Classification: SIMILAR"))
        self.assertIn("**Lexical Token Similarity: 75%**", text)
        self.assertIn("- High token overlap detected.", text)
        self.assertIn("- Partial structural alignment detected.", text)
        self.assertIn("- Distinct control flow signatures.", text)
        self.assertIn("Final similarity score: **53%**", text)
        self.assertIn("- Lexical analysis: 50% weighting", text)
        self.assertIn(">80% = PLAGIARIZED, >40% = SIMILAR", text)

    def test_tier_boundaries(self):
        text = generate_explanation(Verdict.ORIGINAL, 70, 40, 41, 0, BASE_WEIGHTS)
        self.assertIn("- Moderate token overlap observed.", text)
        self.assertIn("- Divergent structural organization.", text)
        self.assertIn("- Some control flow patterns are shared.", text)

    def test_skipped_weighting(self):
        text = generate_explanation(Verdict.ORIGINAL, 0, 0, 0, 0, None,
                                    skipped_reason="nothing to weigh")
        self.assertIn("Weighting skipped: nothing to weigh.", text)
        self.assertNotIn("The composite metric is computed as:", text)
        self.assertIn(">80% = PLAGIARIZED", text)


if __name__ == '__main__':
    unittest.main(verbosity=2)
