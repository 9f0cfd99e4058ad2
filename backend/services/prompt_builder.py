"""Prompt templates for Gemini feature-extraction calls."""

from services.feature_match import LEVEL_LADDER

MAX_PROMPT_CHARS = 8000


def _clip(text: str) -> str:
    return text[:MAX_PROMPT_CHARS]


def build_skills_prompt(text: str) -> str:
    return f"""You extract technical skills from job postings and resumes.

List every concrete technical skill mentioned in the text below:
programming languages, frameworks and libraries, tools and platforms,
databases, cloud services and specific technologies. Use the canonical
spelling (e.g. "JavaScript", "PostgreSQL", "AWS"). Do not include soft
skills, job titles or years of experience.

TEXT:
---
{_clip(text)}
---

Respond with ONLY valid JSON (no markdown, no code fences) in this exact structure:
{{"skills": [<skill strings>]}}"""


def build_domain_prompt(text: str) -> str:
    return f"""Classify the technical domains of the text below.

Use short domain names such as "Backend", "Frontend", "Full Stack", "DevOps",
"Cloud", "Data Engineering", "Machine Learning", "Mobile", "Security",
"Embedded", "QA", "FinTech", "Healthcare", "E-commerce". A text may belong
to several domains; return the most relevant ones first (at most 5).

TEXT:
---
{_clip(text)}
---

Respond with ONLY valid JSON (no markdown, no code fences) in this exact structure:
{{"domains": [<domain strings>]}}"""


def build_years_prompt(text: str) -> str:
    return f"""Determine the years of professional experience in the text below.

For a job posting, return the experience requirement. For a resume, return
the candidate's total professional experience.
- If one number is stated (e.g. "5+ years"), min_years and max_years are both that number.
- If a range is stated (e.g. "3-5 years"), min_years is the lower and max_years the upper bound.
- If nothing can be determined, both are null.

Examples:
"Requires 5+ years of Python experience" -> {{"min_years": 5, "max_years": 5}}
"3-5 years building web applications" -> {{"min_years": 3, "max_years": 5}}
"Recent graduates welcome" -> {{"min_years": null, "max_years": null}}

TEXT:
---
{_clip(text)}
---

Respond with ONLY valid JSON (no markdown, no code fences) in this exact structure:
{{"min_years": <number or null>, "max_years": <number or null>}}"""


def build_level_prompt(text: str) -> str:
    levels = ", ".join(f'"{level}"' for level in LEVEL_LADDER)
    return f"""Pick the best-fit seniority level for the text below, even when it
is not stated explicitly. Choose exactly one of: [{levels}].

Level criteria:
- Intern: students / recent graduates, learning on the job
- Entry: 0-1 years, supervised work
- Junior: 1-2 years, some independence
- Mid: 3-4 years, works independently, handles complex tasks
- Senior: 5-7 years, leads technical decisions, mentors others
- Lead: 5-8 years, leads a small team
- Principal: 8+ years, org-wide technical direction
- Manager: manages people or multiple teams
- Director: 10+ years, oversees departments, strategic planning
- VP: heads an entire function
- Executive: 15+ years, C-level, company-wide decisions

TEXT:
---
{_clip(text)}
---

Respond with ONLY valid JSON (no markdown, no code fences) in this exact structure:
{{"level": "<one level from the list>"}}"""
