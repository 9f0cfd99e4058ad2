"""Job / resume section segmentation, noise stripping and text normalization."""

import re
from datetime import datetime

from models.schemas.sections import JobSections, ResumeSections
from services.skill_extractor import TECH_SKILLS

# Section header patterns and their canonical names
JOB_SECTION_PATTERNS: dict[str, list[str]] = {
    "requirements": [
        r"(?:job\s+|key\s+|minimum\s+|basic\s+)?requirements?",
        r"must[\s-]haves?",
        r"required\s+(?:skills?|qualifications?|experience)",
        r"(?:minimum|basic)\s+qualifications?",
        r"what\s+you(?:'|’)?ll\s+(?:need|bring)",
        r"what\s+we(?:'|’)?re\s+looking\s+for",
        r"who\s+you\s+are",
        r"(?:essential|mandatory)\s+(?:skills?|requirements?)",
        r"(?:technical\s+|required\s+|key\s+)?skills(?:\s+required)?",
        r"experience(?:\s+required)?",
    ],
    "responsibilities": [
        r"(?:key\s+|job\s+|primary\s+|main\s+)?responsibilities",
        r"(?:key\s+|job\s+)?duties",
        r"job\s+description",
        r"(?:the\s+|your\s+|about\s+the\s+)role",
        r"what\s+you(?:'|’)?ll\s+do",
        r"day[\s-]to[\s-]day",
    ],
    "qualifications": [
        r"(?:preferred|desired|additional|bonus)\s+(?:qualifications?|skills?)",
        r"qualifications?",
        r"preferred",
        r"nice[\s-]to[\s-]haves?",
        r"bonus(?:\s+points)?",
        r"(?:it(?:'|’)?s\s+a\s+)?plus",
    ],
    "summary": [
        r"about(?:\s+(?:the\s+)?(?:position|job|opportunity))?",
        r"(?:job\s+|position\s+)?(?:overview|summary)",
        r"the\s+opportunity",
    ],
}

RESUME_SECTION_PATTERNS: dict[str, list[str]] = {
    "experience": [
        r"(?:work|professional|employment)\s*(?:experience|history)",
        r"experience",
        r"employment",
        r"career\s*(?:history|path)",
        r"(?:positions?\s*held|roles)",
    ],
    "education": [
        r"education(?:al)?\s*(?:background|qualifications|history)?",
        r"academic\s*(?:background|qualifications)",
        r"degrees?",
    ],
    "skills": [
        r"(?:technical|core|key|professional)?\s*skills",
        r"(?:technical|core)?\s*(?:competencies|proficiencies|expertise)",
        r"technologies",
        r"(?:technical\s+)?(?:stack|toolkit|tooling)",
    ],
    "summary": [
        r"(?:professional|executive|career)?\s*summary",
        r"(?:career|professional)?\s*objective",
        r"profile",
        r"about\s*me",
        r"overview",
    ],
}

# Headings that end a section without starting a tracked one
OTHER_HEADINGS: list[str] = [
    r"(?:key|notable|selected|personal)?\s*projects",
    r"certific(?:ations?|ates?)",
    r"(?:key\s+)?achievements?",
    r"(?:awards?|honors?|accomplishments)",
    r"(?:programming\s+)?languages",
    r"publications",
    r"references",
    r"interests",
    r"volunteer(?:ing)?",
    r"benefits",
    r"perks",
    r"about\s+(?:us|the\s+company)",
    r"(?:salary|compensation|pay)(?:\s+range)?",
    r"how\s+to\s+apply",
]


def _compile_headings(patterns: dict[str, list[str]]) -> dict[str, tuple[re.Pattern, re.Pattern]]:
    """Compile (full-line heading, inline 'Heading: content') regexes per section."""
    compiled: dict[str, tuple[re.Pattern, re.Pattern]] = {}
    for section, section_patterns in patterns.items():
        combined = "|".join(section_patterns)
        compiled[section] = (
            re.compile(rf"^\s*(?:{combined})\s*:?\s*$", re.IGNORECASE),
            re.compile(rf"^\s*(?:{combined})\s*:\s*(\S.*)$", re.IGNORECASE),
        )
    return compiled


_JOB_COMPILED = _compile_headings(JOB_SECTION_PATTERNS)
_RESUME_COMPILED = _compile_headings(RESUME_SECTION_PATTERNS)
_OTHER_COMPILED = _compile_headings({"other": OTHER_HEADINGS})["other"]

# Markdown / bullet decorations around heading text: "## Requirements", "**Skills**"
_HEADING_DECOR_RE = re.compile(r"^[#*_\s]+|[#*_\s]+$")
_BULLET_RE = re.compile(r"^[\s\-*•·▪▸►◦‣]+")
_LIST_ITEM_RE = re.compile(r"^(?:[-•·▪▸►◦‣]|\*\s|\d+[.)]\s)")

# ---------------------------------------------------------------------------
# Noise filtering
# ---------------------------------------------------------------------------

NOISE_PATTERNS: list[re.Pattern] = [
    # Company branding and benefits
    re.compile(
        r"^(?:what\s+)?(?:we\s+offer|benefits(?:\s+include)?|perks|company\s+culture|"
        r"our\s+mission|about\s+(?:us|the\s+company))\b",
        re.IGNORECASE,
    ),
    # Legal / EEO boilerplate
    re.compile(
        r"^(?:equal\s+(?:employment\s+)?opportunity|eeo\b|we\s+are\s+an\s+equal|"
        r"diversity|inclusion)",
        re.IGNORECASE,
    ),
    # Application instructions
    re.compile(
        r"^(?:how\s+to\s+apply|please\s+submit|send\s+your|apply\s+(?:now|today))",
        re.IGNORECASE,
    ),
    # Compensation
    re.compile(r"^(?:salary|compensation|pay\s+range|wage)", re.IGNORECASE),
]

# "$120,000 - $150,000 per year", "$60/hr", "$95k to $110k"
_MONEY = r"\$\s?\d[\d,]*(?:\.\d+)?\s*[kK]?"
COMPENSATION_RE = re.compile(
    rf"{_MONEY}(?:\s*(?:-|–|—|to)\s*{_MONEY})?"
    r"(?:\s*(?:per|/|an?)\s*(?:year|yr|annum|hour|hr|month))?",
    re.IGNORECASE,
)

# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

_QUOTE_TABLE = str.maketrans({
    "‘": "'", "’": "'", "“": '"', "”": '"', "–": "-", "—": "-",
})
URL_RE = re.compile(r"https?://\S+")
EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
_TECH_NAMES: list[tuple[re.Pattern, str]] = [
    (re.compile(r"\bnode\.?js\b", re.IGNORECASE), "Node.js"),
    (re.compile(r"\breact\.?js\b", re.IGNORECASE), "React"),
    (re.compile(r"\bangular\.?js\b", re.IGNORECASE), "Angular"),
    (re.compile(r"\bvue\.?js\b", re.IGNORECASE), "Vue.js"),
]
_WS_RE = re.compile(r"\s+")


def normalize(text: str) -> str:
    """Normalize text for embedding and comparison.

    Unifies quotes and dashes, strips URLs and e-mail addresses, collapses
    repeated punctuation, standardizes common technology spellings and
    collapses all whitespace. normalize(normalize(t)) == normalize(t).
    """
    if not text:
        return ""
    text = text.translate(_QUOTE_TABLE)
    text = URL_RE.sub(" ", text)
    text = EMAIL_RE.sub(" ", text)
    text = re.sub(r"\.{2,}", ".", text)
    text = re.sub(r"!{2,}", "!", text)
    text = re.sub(r"\?{2,}", "?", text)
    for pattern, replacement in _TECH_NAMES:
        text = pattern.sub(replacement, text)
    text = _WS_RE.sub(" ", text)
    return text.strip()


def _clean_heading(line: str) -> str:
    return _HEADING_DECOR_RE.sub("", line)


def _is_heading_like(line: str) -> bool:
    """True for lines that look like the start of some section."""
    stripped = _clean_heading(line.strip())
    if not stripped:
        return False
    for full, _inline in (*_JOB_COMPILED.values(), *_RESUME_COMPILED.values(), _OTHER_COMPILED):
        if full.match(stripped):
            return True
    if _LIST_ITEM_RE.match(line.strip()):
        return False
    words = stripped.split()
    if len(words) > 5 or len(stripped) > 40:
        return False
    if stripped.endswith(":"):
        return True
    letters = [c for c in stripped if c.isalpha()]
    if "," in stripped or len(letters) < 3 or not all(c.isupper() for c in letters):
        return False
    # One-per-line skill lists ("AWS", "SQL", "MACHINE LEARNING") are content
    lowered = [w.lower() for w in words]
    if len(words) < 2 or " ".join(lowered) in TECH_SKILLS:
        return False
    return not all(w in TECH_SKILLS for w in lowered)


def remove_noise(text: str) -> str:
    """Strip benefits, EEO, apply-instruction and compensation content.

    A paragraph that opens with noise language is dropped up to the next
    blank line or heading-like line. Inline salary figures are removed
    everywhere.
    """
    kept: list[str] = []
    skipping = False
    for line in text.split("\n"):
        stripped = _BULLET_RE.sub("", _clean_heading(line.strip()))
        if not stripped:
            skipping = False
            kept.append("")
            continue
        if any(p.match(stripped) for p in NOISE_PATTERNS):
            skipping = True
            continue
        if skipping and not _is_heading_like(line):
            continue
        skipping = False
        kept.append(COMPENSATION_RE.sub("", line))
    return "\n".join(kept).strip()


def _match_heading(
    line: str, compiled: dict[str, tuple[re.Pattern, re.Pattern]]
) -> tuple[str | None, str]:
    """Return (section_name, inline_content) if the line is a known heading."""
    stripped = _clean_heading(line.strip())
    if not stripped:
        return None, ""
    for section_name, (full, inline) in compiled.items():
        if full.match(stripped):
            return section_name, ""
        m = inline.match(stripped)
        if m:
            return section_name, m.group(1)
    return None, ""


def _split_sections(
    text: str, compiled: dict[str, tuple[re.Pattern, re.Pattern]]
) -> dict[str, str]:
    """Capture text under each tracked heading until the next heading-like line.

    Repeated sections are concatenated. Text outside tracked sections is
    discarded.
    """
    captured: dict[str, list[str]] = {}
    current: str | None = None

    for line in text.split("\n"):
        section_name, inline = _match_heading(line, compiled)
        if section_name:
            current = section_name
            captured.setdefault(current, [])
            if inline:
                captured[current].append(inline)
            continue
        if _is_heading_like(line):
            current = None
            continue
        if current is not None:
            captured[current].append(line)

    return {name: normalize("\n".join(lines)) for name, lines in captured.items()}


def _split_in_half(text: str) -> tuple[str, str]:
    """Split cleaned text into two halves by line (by word for single-line text)."""
    lines = [line.strip() for line in text.split("\n") if line.strip()]
    if len(lines) >= 2:
        mid = len(lines) // 2
        return normalize("\n".join(lines[:mid])), normalize("\n".join(lines[mid:]))
    words = text.split()
    mid = len(words) // 2
    return normalize(" ".join(words[:mid])), normalize(" ".join(words[mid:]))


def parse_job_sections(text: str) -> JobSections:
    """Split a job posting into requirements / responsibilities / qualifications / summary.

    If neither requirements nor responsibilities are found, the cleaned text
    is split in half: first half requirements, second half responsibilities.
    """
    cleaned = remove_noise(text or "")
    sections = _split_sections(cleaned, _JOB_COMPILED)

    requirements = sections.get("requirements", "")
    responsibilities = sections.get("responsibilities", "")
    if not requirements and not responsibilities:
        requirements, responsibilities = _split_in_half(cleaned)

    return JobSections(
        requirements=requirements,
        responsibilities=responsibilities,
        qualifications=sections.get("qualifications", ""),
        summary=sections.get("summary", ""),
        raw_text=normalize(cleaned),
    )


def parse_resume_sections(text: str) -> ResumeSections:
    """Split a resume into experience / skills / education / summary."""
    sections = _split_sections(text or "", _RESUME_COMPILED)
    return ResumeSections(
        experience=sections.get("experience", ""),
        skills=sections.get("skills", ""),
        education=sections.get("education", ""),
        summary=sections.get("summary", ""),
        raw_text=normalize(text or ""),
    )


# ---------------------------------------------------------------------------
# Experience duration extraction
# ---------------------------------------------------------------------------

YEARS_PATTERNS: list[re.Pattern] = [
    # "5+ years of experience", "3 yrs exp"
    re.compile(r"(\d+)\+?\s*(?:years?|yrs?)\s*(?:of\s+)?(?:experience|exp\b)", re.IGNORECASE),
    # "experience: 7 years", "experience of at least 4 yrs"
    re.compile(r"(?:experience|exp\b)[\s\w]*?(\d+)\+?\s*(?:years?|yrs?)\b", re.IGNORECASE),
    # "6 years in fintech", "4 years with React"
    re.compile(r"(\d+)\+?\s*(?:years?|yrs?)\s+(?:in|with|of)\b", re.IGNORECASE),
]


def extract_years_of_experience(text: str) -> int | None:
    """Largest "N years" figure mentioned in the text, or None.

    Values outside [0, 50) are ignored.
    """
    found: list[int] = []
    for pattern in YEARS_PATTERNS:
        for match in pattern.finditer(text or ""):
            years = int(match.group(1))
            if 0 <= years < 50:
                found.append(years)
    return max(found) if found else None


# Date ranges: "Jan 2019 - Present", "2020 - 2023", "March 2018 – Nov 2022"
_MONTHS = (
    r"(?:Jan(?:uary)?|Feb(?:ruary)?|Mar(?:ch)?|Apr(?:il)?|May|Jun(?:e)?|"
    r"Jul(?:y)?|Aug(?:ust)?|Sep(?:t(?:ember)?)?|Oct(?:ober)?|Nov(?:ember)?|Dec(?:ember)?)"
)
DATE_RANGE_RE = re.compile(
    rf"({_MONTHS}\.?\s*\d{{4}}|\d{{4}})"
    r"\s*(?:-|–|—|to)\s*"
    rf"({_MONTHS}\.?\s*\d{{4}}|\d{{4}}|[Pp]resent|[Cc]urrent)",
    re.IGNORECASE,
)

_MONTH_MAP = {
    "jan": 1, "january": 1, "feb": 2, "february": 2, "mar": 3, "march": 3,
    "apr": 4, "april": 4, "may": 5, "jun": 6, "june": 6,
    "jul": 7, "july": 7, "aug": 8, "august": 8, "sep": 9, "sept": 9,
    "september": 9, "oct": 10, "october": 10, "nov": 11, "november": 11,
    "dec": 12, "december": 12,
}


def _parse_date(date_str: str, now: datetime | None = None) -> tuple[int, int]:
    """Parse a date string into (year, month). Returns (0, 0) when unparseable."""
    date_str = date_str.strip().rstrip(".")
    if date_str.lower() in ("present", "current"):
        now = now or datetime.now()
        return now.year, now.month

    parts = date_str.split()
    if len(parts) == 2:
        month_str = parts[0].lower().rstrip(".")
        if month_str in _MONTH_MAP and parts[1].isdigit():
            return int(parts[1]), _MONTH_MAP[month_str]

    if date_str.isdigit():
        year = int(date_str)
        if 1970 <= year <= 2100:
            return year, 1

    return 0, 0


def estimate_years_from_dates(text: str, now: datetime | None = None) -> float | None:
    """Sum of all role date ranges in years (one decimal), or None if none found."""
    total_months = 0
    for match in DATE_RANGE_RE.finditer(text or ""):
        start_year, start_month = _parse_date(match.group(1), now)
        end_year, end_month = _parse_date(match.group(2), now)
        if start_year > 0 and end_year > 0:
            months = (end_year - start_year) * 12 + (end_month - start_month)
            if 0 < months < 600:
                total_months += months
    return round(total_months / 12, 1) if total_months > 0 else None


# ---------------------------------------------------------------------------
# Education level detection
# ---------------------------------------------------------------------------

# Order matters: highest first, first hit wins
EDUCATION_PATTERNS: list[tuple[str, re.Pattern]] = [
    ("PhD", re.compile(r"\bph\.?\s?d\b|\bdoctorate\b|\bdoctoral\b", re.IGNORECASE)),
    ("Masters", re.compile(
        r"\bmaster(?:'|’)?s?\s+(?:degree|of|in)\b|\bmasters\b|\bmaster(?:'|’)s\b|"
        r"\bm\.s\.|\bm\.sc\b|\bm\.a\.|\bmba\b|\bgraduate\s+degree\b",
        re.IGNORECASE,
    )),
    ("Bachelors", re.compile(
        r"\bbachelor(?:'|’)?s?\b|\bb\.s\.|\bb\.sc\b|\bb\.a\.|\bb\.tech\b|"
        r"\bundergraduate\s+degree\b|\bbs\s+(?:in|degree)\b",
        re.IGNORECASE,
    )),
    ("Associates", re.compile(
        r"\bassociate(?:'|’)?s\s+degree\b|\bassociate\s+(?:degree|of)\b|\ba\.s\.|\ba\.a\.",
        re.IGNORECASE,
    )),
    ("High School", re.compile(r"\bhigh\s+school\b|\bged\b|\bdiploma\b", re.IGNORECASE)),
]


def extract_education_level(text: str) -> str | None:
    """Highest education level mentioned: PhD, Masters, Bachelors, Associates, High School."""
    for level, pattern in EDUCATION_PATTERNS:
        if pattern.search(text or ""):
            return level
    return None


# ---------------------------------------------------------------------------
# Work authorization
# ---------------------------------------------------------------------------

WORK_AUTH_POSITIVE: list[re.Pattern] = [
    re.compile(p, re.IGNORECASE) for p in (
        r"(?<!not\s)authorized\s+to\s+work",
        r"work\s+authorization",
        r"\bu\.?s\.?\s+citizen",
        r"\bpermanent\s+resident",
        r"\bgreen[\s-]?card",
        r"eligible\s+to\s+work",
        r"legally\s+authorized",
        r"no\s+sponsorship\s+required",
        r"do\s+not\s+(?:require|need)\s+(?:visa\s+)?sponsorship",
        r"without\s+(?:visa\s+)?sponsorship",
    )
]

WORK_AUTH_NEGATIVE: list[re.Pattern] = [
    re.compile(p, re.IGNORECASE) for p in (
        r"(?<!not\s)(?<!n't\s)require[sd]?\s+(?:visa\s+)?sponsorship",
        r"(?<!not\s)(?<!n't\s)need[sd]?\s+(?:visa\s+)?sponsorship",
        r"visa\s+sponsorship\s+(?:is\s+)?required",
        r"not\s+authorized\s+to\s+work",
    )
]


def check_work_authorization(text: str) -> bool | None:
    """Tri-state work authorization signal.

    True when only positive statements are found, False when only negative
    ones are, None when neither or both are present.
    """
    text = text or ""
    has_positive = any(p.search(text) for p in WORK_AUTH_POSITIVE)
    has_negative = any(p.search(text) for p in WORK_AUTH_NEGATIVE)
    if has_positive and not has_negative:
        return True
    if has_negative and not has_positive:
        return False
    return None


# ---------------------------------------------------------------------------
# Location
# ---------------------------------------------------------------------------

_LOCATION_LABEL_RE = re.compile(r"(?:location|based\s+in|located\s+in)\s*:?\s*([^.\n]+)", re.IGNORECASE)
_CITY_STATE_RE = re.compile(r"\b([A-Z][a-z]+(?:\s[A-Z][a-z]+)?,\s*[A-Z]{2})\b")
_WORK_MODE_RE = re.compile(r"\b(remote|hybrid|on-?site)\b", re.IGNORECASE)


def extract_location(text: str) -> str | None:
    """Stated location: labelled value, "City, ST", or a work mode keyword."""
    text = text or ""
    m = _LOCATION_LABEL_RE.search(text)
    if m and m.group(1).strip():
        return m.group(1).strip()
    m = _CITY_STATE_RE.search(text)
    if m:
        return m.group(1)
    m = _WORK_MODE_RE.search(text)
    if m:
        return m.group(1).lower()
    return None
