"""Compare match results against expected outcomes for accuracy tracking.

Used by the evaluation script and acceptance tests. Each check is counted
only when the expectation sets the corresponding field.
"""

from pydantic import BaseModel
from rapidfuzz import fuzz

from models.responses import MatchResult

FUZZY_THRESHOLD = 80


class ExpectedMatch(BaseModel):
    final_score: int | None = None
    confidence: str | None = None
    skills_coverage: float | None = None
    matched_skills: list[str] | None = None
    missing_required: list[str] | None = None
    experience_score: float | None = None
    years_gap: float | None = None
    overall_gates_passed: bool | None = None
    overall_semantic: float | None = None
    expect_explanation: bool = False


class AcceptanceCriteria(BaseModel):
    min_score: int | None = None
    max_score: int | None = None
    should_pass_gates: bool | None = None
    expected_skills_found: list[str] | None = None
    expected_missing_skills: list[str] | None = None
    expected_explanation_keywords: list[str] | None = None


class ValidationReport(BaseModel):
    match: bool = False
    confidence: float = 0.0
    details: list[str] = []


class AcceptanceReport(BaseModel):
    passed: bool = True
    details: list[str] = []


def _pct(value: float) -> str:
    return f"{value * 100:.1f}%"


def validate_match(
    actual: MatchResult,
    expected: ExpectedMatch,
    score_tolerance: float = 10,
    skills_tolerance: float = 0.2,
    strict: bool = False,
) -> ValidationReport:
    """Fraction of expected fields the actual result reproduces.

    The result matches when every check passes (strict) or at least 70% do.
    """
    details: list[str] = []
    checks: list[bool] = []

    def check(ok: bool, passed_msg: str, failed_msg: str) -> None:
        checks.append(ok)
        details.append(f"PASS {passed_msg}" if ok else f"FAIL {failed_msg}")

    if expected.final_score is not None:
        diff = abs(actual.final_score - expected.final_score)
        check(
            diff <= score_tolerance,
            f"score {actual.final_score} vs {expected.final_score} (±{score_tolerance:g})",
            f"score {actual.final_score} vs {expected.final_score} (diff {diff}, tolerance ±{score_tolerance:g})",
        )

    if expected.confidence is not None:
        check(
            actual.confidence == expected.confidence,
            f"confidence {actual.confidence}",
            f"confidence {actual.confidence} vs {expected.confidence}",
        )

    if expected.skills_coverage is not None:
        actual_cov = actual.skills_match.coverage
        check(
            abs(actual_cov - expected.skills_coverage) <= skills_tolerance,
            f"skills coverage {_pct(actual_cov)} vs {_pct(expected.skills_coverage)}",
            f"skills coverage {_pct(actual_cov)} vs {_pct(expected.skills_coverage)}",
        )

    if expected.matched_skills is not None:
        wanted = {s.lower() for s in expected.matched_skills}
        found = wanted & {s.lower() for s in actual.skills_match.matched_skills}
        check(
            len(found) / max(len(wanted), 1) >= 0.7,
            f"matched skills overlap {len(found)}/{len(wanted)}",
            f"missing expected skills: {', '.join(sorted(wanted - found))}",
        )

    if expected.missing_required is not None:
        wanted = {s.lower() for s in expected.missing_required}
        found = wanted & {s.lower() for s in actual.skills_match.missing_required}
        check(
            len(found) / max(len(wanted), 1) >= 0.6,
            f"missing skills identified {len(found)}/{len(wanted)}",
            f"missing skills identification low {len(found)}/{len(wanted)}",
        )

    if expected.experience_score is not None:
        actual_exp = actual.experience_match.score
        check(
            abs(actual_exp - expected.experience_score) <= 0.2,
            f"experience score {_pct(actual_exp)}",
            f"experience score {_pct(actual_exp)} vs {_pct(expected.experience_score)}",
        )

    if expected.years_gap is not None:
        actual_gap = actual.experience_match.years_gap
        check(
            abs(actual_gap - expected.years_gap) <= 1,
            f"years gap {actual_gap:g}",
            f"years gap {actual_gap:g} vs {expected.years_gap:g}",
        )

    if expected.overall_gates_passed is not None:
        actual_gates = actual.gate_results.overall_gates_passed
        check(
            actual_gates == expected.overall_gates_passed,
            f"gates {actual_gates}",
            f"gates {actual_gates} vs {expected.overall_gates_passed}",
        )

    if expected.overall_semantic is not None:
        actual_sem = actual.semantic_analysis.overall_semantic
        check(
            abs(actual_sem - expected.overall_semantic) <= 0.15,
            f"semantic similarity {_pct(actual_sem)}",
            f"semantic similarity {_pct(actual_sem)} vs {_pct(expected.overall_semantic)}",
        )

    if expected.expect_explanation:
        explanation = actual.explanation
        has_strengths = bool(explanation.strengths)
        has_concerns = bool(explanation.concerns)
        has_summary = len(explanation.summary) > 20
        check(
            has_strengths and has_concerns and has_summary,
            f"explanation with {len(explanation.strengths)} strengths, {len(explanation.concerns)} concerns",
            f"explanation insufficient: strengths={has_strengths}, concerns={has_concerns}, summary={has_summary}",
        )

    confidence = sum(checks) / len(checks) if checks else 0.0
    matched = confidence == 1.0 if strict else confidence >= 0.7
    return ValidationReport(match=matched, confidence=round(confidence, 3), details=details)


def _skill_found(wanted: str, actual_lower: list[str]) -> bool:
    for term in actual_lower:
        if term in wanted or wanted in term:
            return True
        # Typos and close variants, e.g. "kubernets" vs "kubernetes"
        if len(wanted) >= 3 and len(term) >= 3 and fuzz.ratio(wanted, term) >= FUZZY_THRESHOLD:
            return True
    return False


def _fuzzy_found(wanted: list[str], actual: list[str]) -> list[str]:
    actual_lower = [s.lower() for s in actual]
    return [w for w in (s.lower() for s in wanted) if _skill_found(w, actual_lower)]


def validate_acceptance(actual: MatchResult, criteria: AcceptanceCriteria) -> AcceptanceReport:
    """Pass/fail check of a result against acceptance criteria."""
    report = AcceptanceReport()

    def record(ok: bool, message: str) -> None:
        report.details.append(f"{'PASS' if ok else 'FAIL'} {message}")
        if not ok:
            report.passed = False

    if criteria.min_score is not None:
        record(actual.final_score >= criteria.min_score, f"score {actual.final_score} >= {criteria.min_score}")

    if criteria.max_score is not None:
        record(actual.final_score <= criteria.max_score, f"score {actual.final_score} <= {criteria.max_score}")

    if criteria.should_pass_gates is not None:
        gates = actual.gate_results.overall_gates_passed
        record(gates == criteria.should_pass_gates, f"gates {gates}, expected {criteria.should_pass_gates}")

    if criteria.expected_skills_found is not None:
        found = _fuzzy_found(criteria.expected_skills_found, actual.skills_match.matched_skills)
        record(
            len(found) >= len(criteria.expected_skills_found) * 0.7,
            f"expected skills found: {', '.join(found) or 'none'}",
        )

    if criteria.expected_missing_skills is not None:
        found = _fuzzy_found(criteria.expected_missing_skills, actual.skills_match.missing_required)
        record(
            len(found) >= len(criteria.expected_missing_skills) * 0.6,
            f"expected missing skills identified: {', '.join(found) or 'none'}",
        )

    if criteria.expected_explanation_keywords is not None:
        explanation = actual.explanation
        text = " ".join([
            explanation.summary,
            *explanation.strengths,
            *explanation.concerns,
            *explanation.recommendations,
        ]).lower()
        keywords = criteria.expected_explanation_keywords
        found = [k for k in keywords if k.lower() in text]
        record(len(found) >= len(keywords) * 0.6, f"explanation keywords found: {', '.join(found) or 'none'}")

    return report
