"""Sentence-embedding similarity engine for job / resume sections."""

import asyncio
import logging

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity as sklearn_cosine

from models.schemas.sections import JobSections, ResumeSections
from models.schemas.similarity import CacheStats, SectionMatch, SimilarityScores
from services.embedding_cache import EmbeddingCache, cache_key
from services.errors import EmbeddingError
from services.section_parser import normalize

logger = logging.getLogger(__name__)

DEFAULT_MODEL_NAME = "sentence-transformers/all-MiniLM-L6-v2"

# Resume vector = weighted mix of experience and skills embeddings
RESUME_EXPERIENCE_WEIGHT = 0.7
RESUME_SKILLS_WEIGHT = 0.3

# overall_semantic = weighted mix of per-section similarities
SECTION_WEIGHTS = {
    "requirements": 0.5,
    "responsibilities": 0.3,
    "qualifications": 0.2,
}

FALLBACK_SCORE = 0.1
BATCH_SIZE = 5


def fallback_scores() -> SimilarityScores:
    """Low-confidence scores used when embedding fails."""
    return SimilarityScores(
        requirements_match=FALLBACK_SCORE,
        responsibilities_match=FALLBACK_SCORE,
        qualifications_match=FALLBACK_SCORE,
        overall_semantic=FALLBACK_SCORE,
        confidence="low",
    )


def cosine(a: np.ndarray, b: np.ndarray) -> float:
    """Cosine similarity clamped to [0, 1]; zero vectors score 0."""
    if not np.any(a) or not np.any(b):
        return 0.0
    score = sklearn_cosine(a.reshape(1, -1), b.reshape(1, -1))[0][0]
    return min(1.0, max(0.0, float(score)))


def assess_confidence(
    job_sections: JobSections,
    resume_sections: ResumeSections,
    similarities: list[float],
) -> str:
    """Label how much the semantic signal can be trusted.

    Based on text length, section richness and how much the per-section
    similarities agree with each other.
    """
    mean = sum(similarities) / len(similarities)
    variance = sum((s - mean) ** 2 for s in similarities) / len(similarities)
    job_len = len(job_sections.raw_text)
    resume_len = len(resume_sections.raw_text)

    if (
        job_len > 1000
        and resume_len > 500
        and len(job_sections.requirements) > 100
        and len(resume_sections.experience) > 100
        and variance < 0.1
        and mean > 0.3
    ):
        return "high"
    if job_len > 500 and resume_len > 300 and variance < 0.2 and mean > 0.2:
        return "medium"
    return "low"


class SimilarityEngine:
    """Embeds text with a sentence-transformer model and compares sections.

    The encoder must expose a SentenceTransformer-style
    ``encode(list[str], convert_to_numpy=True, normalize_embeddings=True)``.
    When none is given, the model named by model_name is loaded lazily on
    first use.
    """

    def __init__(
        self,
        cache: EmbeddingCache | None = None,
        encoder=None,
        model_name: str = DEFAULT_MODEL_NAME,
    ) -> None:
        self.cache = cache if cache is not None else EmbeddingCache()
        self.model_name = model_name
        self._encoder = encoder

    def _get_encoder(self):
        """Load the sentence-transformer model lazily on first call."""
        if self._encoder is None:
            from sentence_transformers import SentenceTransformer

            self._encoder = SentenceTransformer(self.model_name)
            logger.info("Embedding model %s loaded successfully", self.model_name)
        return self._encoder

    def _encode(self, text: str) -> np.ndarray:
        try:
            encoder = self._get_encoder()
            vectors = encoder.encode([text], convert_to_numpy=True, normalize_embeddings=True)
        except Exception as e:
            raise EmbeddingError(str(e)) from e
        return np.asarray(vectors[0], dtype=np.float32)

    async def embed(self, text: str) -> np.ndarray:
        """Embedding of the normalized text, served from cache within the TTL."""
        normalized = normalize(text)
        key = cache_key(normalized)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        embedding = await asyncio.to_thread(self._encode, normalized)
        self.cache.put(key, embedding)
        return embedding

    async def calculate_similarity(
        self,
        job_sections: JobSections,
        resume_sections: ResumeSections,
    ) -> SimilarityScores:
        """Semantic similarity of the resume to each job section.

        Never raises: any failure yields the low-confidence fallback.
        """
        try:
            (
                requirements_vec,
                responsibilities_vec,
                qualifications_vec,
                experience_vec,
                skills_vec,
            ) = await asyncio.gather(
                self.embed(job_sections.requirements or job_sections.summary),
                self.embed(job_sections.responsibilities or job_sections.summary),
                self.embed(job_sections.qualifications or job_sections.summary),
                self.embed(resume_sections.experience or resume_sections.summary),
                self.embed(resume_sections.skills or resume_sections.raw_text),
            )

            resume_vec = (
                RESUME_EXPERIENCE_WEIGHT * experience_vec
                + RESUME_SKILLS_WEIGHT * skills_vec
            )

            requirements_match = cosine(resume_vec, requirements_vec)
            responsibilities_match = cosine(resume_vec, responsibilities_vec)
            qualifications_match = cosine(resume_vec, qualifications_vec)

            overall = (
                SECTION_WEIGHTS["requirements"] * requirements_match
                + SECTION_WEIGHTS["responsibilities"] * responsibilities_match
                + SECTION_WEIGHTS["qualifications"] * qualifications_match
            )

            confidence = assess_confidence(
                job_sections,
                resume_sections,
                [requirements_match, responsibilities_match, qualifications_match],
            )

            return SimilarityScores(
                requirements_match=round(requirements_match, 3),
                responsibilities_match=round(responsibilities_match, 3),
                qualifications_match=round(qualifications_match, 3),
                overall_semantic=round(overall, 3),
                confidence=confidence,
            )
        except Exception as e:
            logger.warning("Semantic similarity failed, using fallback: %s", e)
            return fallback_scores()

    async def calculate_batch_similarity(
        self,
        pairs: list[tuple[JobSections, ResumeSections]],
    ) -> list[SimilarityScores]:
        """Similarity for many pairs, BATCH_SIZE at a time."""
        results: list[SimilarityScores] = []
        for i in range(0, len(pairs), BATCH_SIZE):
            batch = pairs[i:i + BATCH_SIZE]
            results.extend(await asyncio.gather(
                *(self.calculate_similarity(job, resume) for job, resume in batch)
            ))
        return results

    async def calculate_text_similarity(self, text_a: str, text_b: str) -> float:
        """Cosine similarity of two free texts, rounded to 3 decimals."""
        vec_a, vec_b = await asyncio.gather(self.embed(text_a), self.embed(text_b))
        return round(cosine(vec_a, vec_b), 3)

    async def find_best_section_matches(
        self,
        job_sections: JobSections,
        resume_sections: ResumeSections,
        top_n: int = 5,
    ) -> list[SectionMatch]:
        """Most similar job-section / resume-section pairs, best first.

        Only job sections longer than 50 characters and resume sections
        longer than 20 characters are compared.
        """
        job_list = [
            (name, text) for name, text in (
                ("requirements", job_sections.requirements),
                ("responsibilities", job_sections.responsibilities),
                ("qualifications", job_sections.qualifications),
                ("summary", job_sections.summary),
            ) if len(text) > 50
        ]
        resume_list = [
            (name, text) for name, text in (
                ("experience", resume_sections.experience),
                ("skills", resume_sections.skills),
                ("education", resume_sections.education),
                ("summary", resume_sections.summary),
            ) if len(text) > 20
        ]

        matches: list[SectionMatch] = []
        for job_name, job_text in job_list:
            for resume_name, resume_text in resume_list:
                similarity = await self.calculate_text_similarity(job_text, resume_text)
                matches.append(SectionMatch(
                    job_section=job_name,
                    resume_section=resume_name,
                    similarity=similarity,
                ))

        matches.sort(key=lambda m: m.similarity, reverse=True)
        return matches[:top_n]

    def get_cache_stats(self) -> CacheStats:
        return self.cache.stats()

    def clear_cache(self) -> None:
        self.cache.clear()
        logger.info("Embedding cache cleared")
