"""Result types shared by the estimators, the classifier and the reporter."""
import enum
from dataclasses import dataclass, field
from typing import List, Optional, Tuple


class Verdict(str, enum.Enum):
    ORIGINAL = "ORIGINAL"
    SIMILAR = "SIMILAR"
    PLAGIARIZED = "PLAGIARIZED"


@dataclass(frozen=True)
class Weights:
    lexical: float
    structural: float
    control_flow: float

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.lexical, self.structural, self.control_flow)


@dataclass
class AnalysisPhase:
    score: int
    details: str
    findings: List[str] = field(default_factory=list)

    def to_dict(self):
        return {
            'score': self.score,
            'details': self.details,
            'findings': list(self.findings),
        }


@dataclass
class Match:
    """A source line that appears in both inputs (1-based line numbers)."""
    line_a: int
    line_b: int
    content: str
    type: str = "EXACT"

    def to_dict(self):
        return {
            'lineA': self.line_a,
            'lineB': self.line_b,
            'content': self.content,
            'type': self.type,
        }


@dataclass
class Report:
    overall_score: int
    verdict: Verdict
    lexical: AnalysisPhase
    structural: AnalysisPhase
    control_flow: AnalysisPhase
    matches: List[Match]
    explanation: str
    # None when the report was short-circuited and no weighting took place
    weights: Optional[Weights]
    strategy: str = "adaptive"

    def phases(self):
        return [
            ('Lexical', self.lexical),
            ('Structural', self.structural),
            ('Control Flow', self.control_flow),
        ]

    def to_dict(self):
        """JSON-ready view of the report."""
        return {
            'overallScore': self.overall_score,
            'verdict': self.verdict.value,
            'lexical': self.lexical.to_dict(),
            'structural': self.structural.to_dict(),
            'controlFlow': self.control_flow.to_dict(),
            'matches': [m.to_dict() for m in self.matches],
            'explanation': self.explanation,
            'weights': None if self.weights is None else {
                'lexical': self.weights.lexical,
                'structural': self.weights.structural,
                'controlFlow': self.weights.control_flow,
            },
            'strategy': self.strategy,
        }
