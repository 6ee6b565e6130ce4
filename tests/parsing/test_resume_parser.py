from __future__ import annotations

import pendulum
import pytest

from staffmatch.extraction import UnsupportedFormatError
from staffmatch.parsing import EntityExtractor, ExperienceCalculator, ParserConfig, ResumeParser
from staffmatch.parsing.resume import compute_confidence

RESUME_TEXT = (
    "Jane Smith\n"
    "jane@example.com | (555) 123-4567\n"
    "Austin, TX 78701\n"
    "Education\n"
    "Bachelor of Science in Nursing 2008 - 2012\n"
    "Experience\n"
    "Staff Nurse, ICU\n"
    "2013 - 2016\n"
    "Travel Nurse, ICU\n"
    "2016 - Present\n"
    "Certifications\n"
    "BLS, ACLS, CCRN\n"
    "Licenses\n"
    "Registered Nurse License, TX #123456, expires 2026\n"
)


@pytest.fixture
def parser() -> ResumeParser:
    calculator = ExperienceCalculator(now_provider=lambda: pendulum.datetime(2024, 6, 1))
    return ResumeParser(entities=EntityExtractor(calculator=calculator))


def test_parse_text_builds_complete_profile(parser: ResumeParser):
    result = parser.parse_text(RESUME_TEXT, candidate_id="C-1")
    profile = result.parsed_data

    assert profile.candidate_id == "C-1"
    assert profile.contact_info.name == "Jane Smith"
    assert profile.contact_info.email == "jane@example.com"
    assert profile.contact_info.phone == "(555) 123-4567"
    assert profile.specialty == "ICU"
    assert profile.years_of_experience == 8
    assert profile.years_experience_category == "5-10"
    assert [entry.start_year for entry in profile.education] == [2008]
    assert [position.title for position in profile.positions] == [
        "Staff Nurse, ICU",
        "Travel Nurse, ICU",
    ]
    assert [cert.name for cert in profile.certifications] == ["BLS", "ACLS", "CCRN"]
    assert [(lic.state, lic.license_number) for lic in profile.licenses] == [("TX", "123456")]
    assert (profile.location.city, profile.location.state) == ("Austin", "TX")

    assert result.validation == {
        "name": True,
        "email": True,
        "phone": True,
        "specialty": True,
        "yearsExperienceCategory": True,
    }
    assert result.confidence == pytest.approx(1.0)
    assert result.raw_text == RESUME_TEXT
    assert set(result.sections) == {"other", "education", "experience", "certifications", "licenses"}


def test_confidence_reflects_missing_fields(parser: ResumeParser):
    result = parser.parse_text("Jane Smith\njane@example.com")

    assert result.validation["name"] is True
    assert result.validation["email"] is True
    assert result.validation["phone"] is False
    assert result.validation["specialty"] is False
    assert result.validation["yearsExperienceCategory"] is False
    assert result.confidence == pytest.approx(0.4)


def test_empty_text_yields_zero_confidence(parser: ResumeParser):
    result = parser.parse_text("")

    assert result.confidence == pytest.approx(0.0)
    assert result.sections == {}


def test_required_fields_are_configurable():
    parser = ResumeParser(config=ParserConfig(required_fields=("email",)))

    result = parser.parse_text("Jane Smith\njane@example.com")

    assert result.validation == {"email": True}
    assert result.confidence == pytest.approx(1.0)


def test_unknown_required_field_rejected():
    with pytest.raises(ValueError):
        ParserConfig(required_fields=("shoeSize",))


def test_compute_confidence_without_checks():
    assert compute_confidence({}) == 0.0


def test_parse_plain_text_bytes(parser: ResumeParser):
    result = parser.parse(RESUME_TEXT.encode("utf-8"), ".txt", candidate_id="C-2")

    assert result.parsed_data.candidate_id == "C-2"
    assert result.parsed_data.specialty == "ICU"


def test_payload_uses_camel_case(parser: ResumeParser):
    payload = parser.parse_text(RESUME_TEXT, candidate_id="C-1").to_payload()

    assert set(payload) == {"parsedData", "validation", "confidence", "rawText", "sections"}
    assert payload["parsedData"]["candidateId"] == "C-1"
    assert payload["parsedData"]["contactInfo"]["email"] == "jane@example.com"
    assert payload["parsedData"]["yearsExperienceCategory"] == "5-10"


def test_unsupported_extension_produces_no_result(parser: ResumeParser, tmp_path):
    resume = tmp_path / "resume.csv"
    resume.write_text("name,email\nJane,jane@example.com\n", encoding="utf-8")

    with pytest.raises(UnsupportedFormatError):
        parser.parse(resume)


def test_parsing_is_idempotent(parser: ResumeParser):
    first = parser.parse(RESUME_TEXT.encode("utf-8"), "txt")
    second = parser.parse(RESUME_TEXT.encode("utf-8"), "txt")

    assert first.parsed_data == second.parsed_data
    assert first.to_payload() == second.to_payload()
