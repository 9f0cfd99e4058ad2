"""End-to-end evaluation of the matcher against labelled job/resume pairs.

Reports:
- Spearman correlation with gold standard scores
- Score distribution
- Expected-outcome validation (score / coverage / gates tolerances)
- Latency

Usage:
    python scripts/evaluate_matching.py [--data-dir backend/tests/fixtures] [--extractor heuristic]

eval_pairs.json format:
    [{"job_description": ..., "resume_text": ..., "gold_score": 72,
      "expected": {"final_score": 70, "overall_gates_passed": true}}, ...]
"""

import argparse
import asyncio
import json
import logging
import sys
import time
from pathlib import Path

import numpy as np
from scipy.stats import spearmanr

# Add backend to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "backend"))

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
logger = logging.getLogger(__name__)


def build_orchestrator(extractor_mode: str):
    from config import settings
    from services.embedding_cache import EmbeddingCache
    from services.feature_extractor import build_feature_extractor
    from services.matching import MatchingOrchestrator
    from services.similarity import SimilarityEngine

    mode_settings = settings.model_copy(update={"extractor_mode": extractor_mode})
    extractor = build_feature_extractor(mode_settings)
    return MatchingOrchestrator(
        similarity_engine=SimilarityEngine(
            cache=EmbeddingCache(
                ttl_seconds=settings.embedding_cache_ttl_seconds,
                max_size=settings.embedding_cache_max_size,
            ),
            model_name=settings.embedding_model_name,
        ),
        job_extractor=extractor,
        resume_extractor=extractor,
    )


async def main(data_dir: str, extractor_mode: str) -> None:
    from models.responses import MatchError
    from services.match_validator import ExpectedMatch, validate_match

    pairs_file = Path(data_dir) / "eval_pairs.json"
    if not pairs_file.exists():
        logger.error("Evaluation pairs not found at %s", pairs_file)
        logger.info("Create a JSON file with format: [{job_description, resume_text, gold_score, expected}, ...]")
        return

    with open(pairs_file) as f:
        pairs = json.load(f)
    logger.info("Loaded %d evaluation pairs", len(pairs))

    orchestrator = build_orchestrator(extractor_mode)

    scores: list[int | None] = []
    gold_scores: list[float | None] = []
    latencies: list[float] = []
    validations = []

    for i, pair in enumerate(pairs):
        logger.info("Evaluating pair %d/%d...", i + 1, len(pairs))
        start = time.perf_counter()
        result = await orchestrator.analyze_match(pair["job_description"], pair["resume_text"])
        latencies.append(time.perf_counter() - start)

        if isinstance(result, MatchError):
            logger.warning("Pair %d failed (%s): %s", i, result.error_type, result.error)
            scores.append(None)
            gold_scores.append(pair.get("gold_score"))
            continue

        scores.append(result.final_score)
        gold_scores.append(pair.get("gold_score"))
        if pair.get("expected"):
            report = validate_match(result, ExpectedMatch.model_validate(pair["expected"]))
            validations.append(report)
            for line in report.details:
                logger.info("  %s", line)

    # --- Report ---
    logger.info("=" * 60)
    logger.info("EVALUATION RESULTS (%s extractor)", orchestrator.job_extractor.name)
    logger.info("=" * 60)

    valid = [i for i in range(len(pairs)) if scores[i] is not None]
    logger.info("Valid pairs: %d / %d", len(valid), len(pairs))
    if not valid:
        return

    s = np.array([scores[i] for i in valid])
    logger.info("Score statistics - mean: %.1f, std: %.1f, min: %d, max: %d",
                s.mean(), s.std(), s.min(), s.max())

    graded = [i for i in valid if gold_scores[i] is not None]
    if len(graded) >= 3:
        rho, pval = spearmanr([gold_scores[i] for i in graded], [scores[i] for i in graded])
        logger.info("Spearman(gold, matcher) = %.4f (p=%.6f) over %d pairs", rho, pval, len(graded))

    if validations:
        matched = sum(1 for r in validations if r.match)
        logger.info("Expected-outcome validation: %d/%d matched, mean confidence %.2f",
                    matched, len(validations), np.mean([r.confidence for r in validations]))

    logger.info("Latency - mean: %.2fs, p95: %.2fs", np.mean(latencies), np.percentile(latencies, 95))
    logger.info("Cache: %s", orchestrator.get_stats().cache.model_dump())
    logger.info("=" * 60)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Evaluate matcher scores against gold labels")
    parser.add_argument("--data-dir", default="backend/tests/fixtures")
    parser.add_argument("--extractor", default="heuristic", choices=["auto", "llm", "heuristic"])
    args = parser.parse_args()
    asyncio.run(main(args.data_dir, args.extractor))
