"""Dictionary-based technical skill, domain and seniority detection.

Used by the offline heuristic feature extractor. Matching is word-boundary
aware so that e.g. "java" does not fire inside "javascript" and "gin" does
not fire inside "engineer".
"""

import re

# Known technical skill vocabulary, grouped for maintenance
SKILL_VOCABULARY: dict[str, list[str]] = {
    "languages": [
        "python", "javascript", "typescript", "java", "c++", "c#", "go", "golang",
        "rust", "ruby", "php", "swift", "kotlin", "scala", "r", "matlab", "sql",
        "perl", "haskell", "lua", "dart", "elixir", "clojure", "groovy",
        "objective-c", "bash", "powershell",
    ],
    "frontend": [
        "react", "react native", "angular", "vue", "vue.js", "svelte", "next.js",
        "nuxt", "html", "html5", "css", "css3", "tailwind", "bootstrap", "sass",
        "webpack", "vite", "jquery", "redux",
    ],
    "backend": [
        "node.js", "nodejs", "express", "fastapi", "django", "flask", "spring",
        "spring boot", "rails", "ruby on rails", ".net", "asp.net", "graphql",
        "rest", "grpc", "laravel", "microservices",
    ],
    "cloud_devops": [
        "aws", "amazon web services", "azure", "gcp", "google cloud", "heroku",
        "docker", "kubernetes", "k8s", "terraform", "ansible", "jenkins",
        "github actions", "gitlab ci", "circleci", "ci/cd", "linux", "nginx",
        "cloudformation", "helm", "prometheus", "grafana", "datadog",
    ],
    "data": [
        "postgresql", "postgres", "mysql", "mongodb", "redis", "elasticsearch",
        "kafka", "rabbitmq", "sqlite", "oracle", "sql server", "dynamodb",
        "cassandra", "neo4j", "snowflake", "bigquery", "redshift", "firebase",
        "pandas", "numpy", "spark", "hadoop", "airflow", "dbt", "tableau",
        "power bi",
    ],
    "ml": [
        "machine learning", "deep learning", "nlp", "computer vision",
        "tensorflow", "pytorch", "keras", "scikit-learn", "llm", "langchain",
        "hugging face",
    ],
    "tools": [
        "git", "jira", "figma", "postman", "jest", "mocha", "cypress",
        "selenium", "playwright", "pytest", "junit",
    ],
    "mobile": ["android", "ios", "flutter", "xamarin", "ionic"],
    "security": ["oauth", "jwt", "saml", "owasp", "penetration testing"],
    "practices": ["agile", "scrum", "kanban", "tdd", "serverless"],
}

TECH_SKILLS: frozenset[str] = frozenset(
    skill for skills in SKILL_VOCABULARY.values() for skill in skills
)

DOMAIN_KEYWORDS: dict[str, list[str]] = {
    "Backend": ["backend", "back-end", "server-side", "microservices", "rest", "graphql", "django", "fastapi", "spring"],
    "Frontend": ["frontend", "front-end", "react", "angular", "vue", "css", "user interface"],
    "DevOps": ["devops", "ci/cd", "kubernetes", "terraform", "jenkins", "site reliability", "sre"],
    "Cloud": ["aws", "azure", "gcp", "google cloud", "cloud"],
    "Data Engineering": ["data pipeline", "data pipelines", "etl", "spark", "airflow", "data engineering", "data warehouse"],
    "Machine Learning": ["machine learning", "deep learning", "pytorch", "tensorflow", "nlp", "computer vision", "llm"],
    "Mobile": ["mobile", "ios", "android", "flutter", "react native"],
    "Security": ["security", "penetration testing", "owasp", "appsec", "threat modeling"],
    "FinTech": ["fintech", "payments", "banking", "trading"],
    "Healthcare": ["healthcare", "clinical", "hipaa", "medical"],
    "E-commerce": ["e-commerce", "ecommerce", "marketplace", "retail"],
}

# Ladder step -> title keywords; the earliest mention in the text wins
LEVEL_KEYWORDS: dict[str, list[str]] = {
    "Executive": ["chief", "cto", "ceo", "cio", "c-level"],
    "VP": ["vp", "vice president"],
    "Director": ["director"],
    "Manager": ["manager", "head of"],
    "Principal": ["principal", "staff"],
    "Lead": ["lead", "tech lead", "team lead"],
    "Senior": ["senior", "sr"],
    "Mid": ["mid-level", "mid level", "intermediate"],
    "Junior": ["junior", "jr"],
    "Entry": ["entry level", "entry-level", "new grad", "recent graduate"],
    "Intern": ["intern", "internship"],
}

_PATTERN_CACHE: dict[str, re.Pattern] = {}


def _term_pattern(term: str) -> re.Pattern:
    pattern = _PATTERN_CACHE.get(term)
    if pattern is None:
        escaped = re.escape(term)
        pattern = re.compile(rf"(?<![a-zA-Z0-9.#+]){escaped}(?![a-zA-Z0-9+#])")
        _PATTERN_CACHE[term] = pattern
    return pattern


def _first_position(term: str, text_lower: str) -> int:
    m = _term_pattern(term).search(text_lower)
    return m.start() if m else -1


def extract_skills(text: str) -> list[str]:
    """Known technical skills mentioned in text, in order of first mention."""
    text_lower = (text or "").lower()
    found: list[tuple[int, str]] = []
    for skill in TECH_SKILLS:
        pos = _first_position(skill, text_lower)
        if pos >= 0:
            found.append((pos, skill))
    found.sort()
    return [skill for _, skill in found]


def detect_domains(text: str, max_domains: int = 5) -> list[str]:
    """Domains whose keywords appear in text, most keyword hits first."""
    text_lower = (text or "").lower()
    scored: list[tuple[int, str]] = []
    for domain, keywords in DOMAIN_KEYWORDS.items():
        hits = sum(1 for kw in keywords if _first_position(kw, text_lower) >= 0)
        if hits:
            scored.append((hits, domain))
    scored.sort(key=lambda s: s[0], reverse=True)
    return [domain for _, domain in scored[:max_domains]]


def infer_level(text: str) -> str | None:
    """Seniority level named earliest in the text (titles usually come first)."""
    text_lower = (text or "").lower()
    best: tuple[int, str] | None = None
    for level, keywords in LEVEL_KEYWORDS.items():
        for kw in keywords:
            pos = _first_position(kw, text_lower)
            if pos >= 0 and (best is None or pos < best[0]):
                best = (pos, level)
    return best[1] if best else None


def level_from_years(years: float | None) -> str | None:
    """Rough seniority implied by years of experience."""
    if years is None:
        return None
    if years < 1:
        return "Entry"
    if years < 3:
        return "Junior"
    if years < 5:
        return "Mid"
    if years < 8:
        return "Senior"
    return "Lead"
