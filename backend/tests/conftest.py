"""Shared test configuration, pytest markers and offline fakes."""

import hashlib
import re

import numpy as np
import pytest

from models.schemas.features import ExtractedJobFeatures, ExtractedResumeFeatures, JobSkills
from models.schemas.similarity import SimilarityScores
from services.feature_extractor import BaseFeatureExtractor

EMBEDDING_DIM = 64

SAMPLE_RESUME = """
John Doe
john.doe@email.com | +1-555-0123

Summary
Senior software engineer building web platforms and cloud services.

Experience

Senior Software Engineer, Google
Jan 2020 - Present
- Built scalable microservices using Python and Go
- Led team of 5 engineers on payment platform

Software Engineer, Meta
Jun 2017 - Dec 2019
- Developed React frontend applications
- Implemented CI/CD pipelines with Jenkins

Education

Bachelor of Science in Computer Science
Stanford University, 2017

Skills

Python, Go, React, JavaScript, Docker, Kubernetes, AWS, PostgreSQL
"""

SAMPLE_JD = """
Senior Python Developer

Overview
We are growing our platform team and need an engineer to own backend services
used by millions of customers.

Requirements:
- 5+ years of experience with Python
- Strong knowledge of Django or FastAPI
- Experience with PostgreSQL and Redis
- Familiarity with Docker and Kubernetes

Preferred:
- Machine learning experience
- AWS certification

Education:
- Bachelor's degree in Computer Science or related field

Responsibilities:
- Design and build scalable APIs
- Mentor junior developers

Benefits include health insurance, 401k matching and unlimited PTO.
"""


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: loads real ML models (slow, needs model download)"
    )
    config.addinivalue_line(
        "markers", "evaluation: end-to-end scoring evaluation (very slow)"
    )


class FakeEncoder:
    """Deterministic bag-of-words hashing encoder with a SentenceTransformer-style API."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = 0

    def encode(self, texts, convert_to_numpy=True, normalize_embeddings=True):
        self.calls += 1
        if self.fail:
            raise RuntimeError("encoder unavailable")
        vectors = np.zeros((len(texts), EMBEDDING_DIM), dtype=np.float32)
        for row, text in enumerate(texts):
            for token in re.findall(r"[a-z0-9+#.]+", text.lower()):
                bucket = int(hashlib.md5(token.encode()).hexdigest(), 16) % EMBEDDING_DIM
                vectors[row, bucket] += 1.0
            norm = np.linalg.norm(vectors[row])
            if normalize_embeddings and norm > 0:
                vectors[row] /= norm
        return vectors


class StubExtractor(BaseFeatureExtractor):
    """Returns fixed features; raises when given an exception instead."""

    name = "stub"

    def __init__(self, job=None, resume=None, error: Exception | None = None):
        self.job = job if job is not None else ExtractedJobFeatures()
        self.resume = resume if resume is not None else ExtractedResumeFeatures()
        self.error = error
        self.job_calls = 0
        self.resume_calls = 0

    async def extract_job_features(self, sections):
        self.job_calls += 1
        if self.error:
            raise self.error
        return self.job

    async def extract_resume_features(self, sections):
        self.resume_calls += 1
        if self.error:
            raise self.error
        return self.resume


def make_job_features(**overrides) -> ExtractedJobFeatures:
    data = {
        "skills": JobSkills(
            required=["python", "django", "postgresql"],
            preferred=["aws"],
            all=["python", "django", "postgresql", "aws"],
        ),
        "domains": ["Backend"],
        "years_required": 5,
        "level_required": "Senior",
        "education": "Bachelors",
        "work_auth_required": None,
        "location": None,
    }
    data.update(overrides)
    return ExtractedJobFeatures(**data)


def make_resume_features(**overrides) -> ExtractedResumeFeatures:
    data = {
        "skills": ["python", "django", "postgresql", "docker"],
        "domains": ["Backend", "Cloud"],
        "years_of_experience": 6,
        "current_level": "Senior",
        "education": "Bachelors",
        "work_auth_status": None,
        "location": None,
    }
    data.update(overrides)
    return ExtractedResumeFeatures(**data)


@pytest.fixture
def fake_encoder():
    return FakeEncoder()


def similarity_scores(overall: float, confidence: str = "medium") -> SimilarityScores:
    return SimilarityScores(
        requirements_match=overall,
        responsibilities_match=overall,
        qualifications_match=overall,
        overall_semantic=overall,
        confidence=confidence,
    )


def strong_fullstack_pair():
    skills = ["react", "node.js", "aws", "typescript"]
    job = make_job_features(
        skills=JobSkills(required=skills, all=skills),
        domains=["Frontend", "Backend"],
        years_required=5,
        level_required="Senior",
        education="Bachelors",
        work_auth_required=True,
    )
    resume = make_resume_features(
        skills=skills + ["javascript"],
        domains=["Frontend", "Backend"],
        years_of_experience=7,
        current_level="Senior",
        education="Bachelors",
        work_auth_status=True,
    )
    return job, resume


def skills_mismatch_pair():
    skills = ["react", "typescript", "css"]
    job = make_job_features(
        skills=JobSkills(required=skills, all=skills),
        domains=["Frontend"],
        years_required=3,
        level_required=None,
        education=None,
    )
    resume = make_resume_features(
        skills=["python", "django", "postgresql"],
        domains=["Backend"],
        years_of_experience=4,
        current_level=None,
        education=None,
    )
    return job, resume
