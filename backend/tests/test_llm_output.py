from services.llm_output import (
    DomainOutput,
    LevelOutput,
    ParseFailure,
    ParseSuccess,
    SkillsOutput,
    YearsOutput,
    extract_json_text,
    parse_llm_output,
)


class TestExtractJsonText:
    def test_code_fence(self):
        raw = '```json\n{"skills": ["python"]}\n```'
        assert extract_json_text(raw) == '{"skills": ["python"]}'

    def test_surrounding_prose(self):
        raw = 'Here is the result: {"level": "Senior"} hope this helps'
        assert extract_json_text(raw) == '{"level": "Senior"}'

    def test_empty(self):
        assert extract_json_text("") == ""
        assert extract_json_text(None) == ""


class TestParseLlmOutput:
    def test_skills_success(self):
        result = parse_llm_output('{"skills": ["Python", " Docker ", "None", ""]}', SkillsOutput)
        assert isinstance(result, ParseSuccess)
        assert result.ok is True
        assert result.value.skills == ["Python", "Docker"]

    def test_domains_in_fence(self):
        result = parse_llm_output('```\n{"domains": ["Backend", "Cloud"]}\n```', DomainOutput)
        assert result.ok
        assert result.value.domains == ["Backend", "Cloud"]

    def test_invalid_json(self):
        result = parse_llm_output('{"skills": [python]}', SkillsOutput)
        assert isinstance(result, ParseFailure)
        assert result.error.startswith("invalid JSON")
        assert result.raw == '{"skills": [python]}'

    def test_empty_response(self):
        result = parse_llm_output("   ", SkillsOutput)
        assert isinstance(result, ParseFailure)
        assert result.error == "empty response"

    def test_schema_mismatch(self):
        result = parse_llm_output('{"skills": "python"}', SkillsOutput)
        assert isinstance(result, ParseFailure)
        assert result.error.startswith("schema mismatch")

    def test_non_object_json(self):
        assert parse_llm_output("[1, 2, 3]", SkillsOutput).ok is False

    def test_years_camel_case_alias(self):
        result = parse_llm_output('{"minYears": 5, "maxYears": 8}', YearsOutput)
        assert result.ok
        assert result.value.min_years == 5
        assert result.value.max_years == 8

    def test_years_out_of_range(self):
        assert parse_llm_output('{"min_years": 99}', YearsOutput).ok is False

    def test_level_canonicalized(self):
        result = parse_llm_output('{"level": "  senior "}', LevelOutput)
        assert result.ok
        assert result.value.level == "Senior"

    def test_unknown_level_rejected(self):
        result = parse_llm_output('{"level": "Wizard"}', LevelOutput)
        assert result.ok is False
        assert "schema mismatch" in result.error

    def test_null_level(self):
        result = parse_llm_output('{"level": null}', LevelOutput)
        assert result.ok
        assert result.value.level is None
