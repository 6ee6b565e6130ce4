from __future__ import annotations

import dataclasses
import pickle

import pytest

from staffmatch.taxonomy import DEFAULT_TAXONOMY, Taxonomy


def test_canonical_specialty_synonyms():
    assert DEFAULT_TAXONOMY.canonical_specialty("ER") == "Emergency"
    assert DEFAULT_TAXONOMY.canonical_specialty("emergency   room") == "Emergency"
    assert DEFAULT_TAXONOMY.canonical_specialty("Cardiology") == "Telemetry"
    assert DEFAULT_TAXONOMY.canonical_specialty("icu") == "ICU"


def test_canonical_specialty_fuzzy_and_unknown():
    assert DEFAULT_TAXONOMY.canonical_specialty("Telemetery") == "Telemetry"
    assert DEFAULT_TAXONOMY.canonical_specialty("Astronaut") is None
    assert DEFAULT_TAXONOMY.canonical_specialty("  ") is None


def test_taxonomy_is_read_only():
    with pytest.raises(dataclasses.FrozenInstanceError):
        DEFAULT_TAXONOMY.fuzzy_cutoff = 10.0  # type: ignore[misc]
    with pytest.raises(TypeError):
        DEFAULT_TAXONOMY.specialties["Dialysis"] = ("Dialysis",)  # type: ignore[index]


def test_from_mapping_overrides_selected_fields():
    taxonomy = Taxonomy.from_mapping(
        {"specialties": {"Dialysis": ["Dialysis", "Renal"]}, "certifications": ["CDN"]}
    )

    assert taxonomy.canonical_specialty("renal") == "Dialysis"
    assert taxonomy.canonical_specialty("ICU") is None
    assert taxonomy.certifications == ("CDN",)
    assert taxonomy.state_codes == DEFAULT_TAXONOMY.state_codes


def test_from_mapping_rejects_unknown_keys():
    with pytest.raises(ValueError, match="Unknown taxonomy keys"):
        Taxonomy.from_mapping({"hobbies": ["golf"]})


def test_taxonomy_survives_pickling():
    restored = pickle.loads(pickle.dumps(DEFAULT_TAXONOMY))

    assert restored == DEFAULT_TAXONOMY
    assert restored.canonical_specialty("ED") == "Emergency"


def test_compact_states():
    assert DEFAULT_TAXONOMY.is_compact_state("tx")
    assert not DEFAULT_TAXONOMY.is_compact_state("CA")
    assert not DEFAULT_TAXONOMY.is_compact_state(None)


def test_from_mapping_rejects_unknown_section_labels():
    with pytest.raises(ValueError, match="Unknown section labels"):
        Taxonomy.from_mapping({"section_keywords": {"hobbies": ["interests"]}})
