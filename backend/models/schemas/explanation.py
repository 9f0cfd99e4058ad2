"""Human-readable match explanation."""

from pydantic import BaseModel


class KeyInsights(BaseModel):
    strongest_match: str = ""
    biggest_gap: str = ""
    improvement_potential: str = ""


class MatchExplanation(BaseModel):
    """Deterministic explanation derived from the scoring signals.

    strengths/concerns are capped at 3, recommendations at 4.
    """
    strengths: list[str] = []
    concerns: list[str] = []
    summary: str = ""
    recommendations: list[str] = []
    key_insights: KeyInsights = KeyInsights()


class QuickSummary(BaseModel):
    score: int = 0
    one_line_reason: str = ""
    top_gap: str = ""
    confidence: str = "low"
