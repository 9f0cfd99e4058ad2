from fastapi import APIRouter, Depends, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import get_orchestrator
from config import settings
from models.requests import (
    BatchMatchRequest,
    BatchResumeFeaturesRequest,
    MatchRequest,
    QuickScoreRequest,
    ResumeFeaturesRequest,
)
from models.responses import (
    HealthResponse,
    MatchError,
    MatchResult,
    MatcherStats,
    QuickScore,
    ResumeFeaturesResult,
)
from models.schemas.features import PreExtractedResumeFeatures
from models.schemas.similarity import CacheStats
from services.matching import MatchingOrchestrator

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)


@router.get("/health", response_model=HealthResponse)
async def health(orchestrator: MatchingOrchestrator = Depends(get_orchestrator)):
    return HealthResponse(
        status="ok",
        gemini_configured=bool(settings.gemini_api_key),
        extractor_mode=orchestrator.job_extractor.name,
        embedding_model=orchestrator.similarity_engine.model_name,
    )


@router.post("/match", response_model=MatchResult | MatchError)
@limiter.limit("10/minute")
async def match(
    request: Request,
    body: MatchRequest,
    orchestrator: MatchingOrchestrator = Depends(get_orchestrator),
):
    resume = body.resume_features if body.resume_features is not None else (body.resume_text or "")
    return await orchestrator.analyze_match(body.job_description, resume, body.options)


@router.post("/match/batch", response_model=list[MatchResult | MatchError])
@limiter.limit("10/minute")
async def match_batch(
    request: Request,
    body: BatchMatchRequest,
    orchestrator: MatchingOrchestrator = Depends(get_orchestrator),
):
    return await orchestrator.analyze_batch_matches(body.pairs)


@router.post("/match/quick", response_model=list[QuickScore])
@limiter.limit("10/minute")
async def match_quick(
    request: Request,
    body: QuickScoreRequest,
    orchestrator: MatchingOrchestrator = Depends(get_orchestrator),
):
    return await orchestrator.get_quick_scores(body.pairs)


@router.post("/resume/features", response_model=PreExtractedResumeFeatures)
@limiter.limit("10/minute")
async def resume_features(
    request: Request,
    body: ResumeFeaturesRequest,
    orchestrator: MatchingOrchestrator = Depends(get_orchestrator),
):
    return await orchestrator.extract_resume_features(body.resume_text, body.include_raw_sections)


@router.post("/resume/features/batch", response_model=list[ResumeFeaturesResult])
@limiter.limit("10/minute")
async def resume_features_batch(
    request: Request,
    body: BatchResumeFeaturesRequest,
    orchestrator: MatchingOrchestrator = Depends(get_orchestrator),
):
    return await orchestrator.extract_batch_resume_features(body.resumes, body.include_raw_sections)


@router.get("/cache/stats", response_model=CacheStats)
async def cache_stats(orchestrator: MatchingOrchestrator = Depends(get_orchestrator)):
    return orchestrator.get_stats().cache


@router.get("/stats", response_model=MatcherStats)
async def stats(orchestrator: MatchingOrchestrator = Depends(get_orchestrator)):
    return orchestrator.get_stats()


@router.delete("/cache")
async def clear_cache(orchestrator: MatchingOrchestrator = Depends(get_orchestrator)):
    orchestrator.clear_cache()
    return {"cleared": True}
