"""Shared dependencies for API routes."""

from config import settings
from services.embedding_cache import EmbeddingCache
from services.feature_extractor import build_feature_extractor
from services.matching import MatchingOrchestrator
from services.similarity import SimilarityEngine

_orchestrator: MatchingOrchestrator | None = None


def get_orchestrator() -> MatchingOrchestrator:
    """Process-wide orchestrator, built from settings on first use."""
    global _orchestrator
    if _orchestrator is None:
        extractor = build_feature_extractor(settings)
        _orchestrator = MatchingOrchestrator(
            similarity_engine=SimilarityEngine(
                cache=EmbeddingCache(
                    ttl_seconds=settings.embedding_cache_ttl_seconds,
                    max_size=settings.embedding_cache_max_size,
                ),
                model_name=settings.embedding_model_name,
            ),
            job_extractor=extractor,
            resume_extractor=extractor,
            batch_size=settings.batch_size,
            batch_delay_seconds=settings.batch_delay_seconds,
        )
    return _orchestrator
