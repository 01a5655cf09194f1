from __future__ import annotations

import json
from pathlib import Path

import pytest

from inlay_generator.contracts import BaseSection, InlayConfig, InlayDesign, PreviewConfig
from inlay_generator.design_io import (
    SCHEMA_VERSION,
    design_from_dict,
    design_to_dict,
    load_design,
    save_design,
)
from inlay_generator.errors import InvalidDimension, InvalidState


def _two_section_design() -> InlayDesign:
    return InlayDesign(
        inlay=InlayConfig(length=150.0, width=90.0, corner_radius=4.0),
        sections=(
            BaseSection(share=60.0, size_x=32.0, size_y=32.0),
            BaseSection(share=40.0, size_x=40.0, size_y=20.0, spacing=2.0),
        ),
        preview=PreviewConfig(wireframe=True, color="#336699"),
    )


def test_dict_round_trip():
    design = _two_section_design()
    payload = design_to_dict(design)
    assert payload["schema_version"] == SCHEMA_VERSION
    assert len(payload["sections"]) == 2
    assert design_from_dict(payload) == design


def test_save_and_load(tmp_path: Path):
    design = _two_section_design()
    path = save_design(tmp_path / "nested" / "design.json", design)
    assert path.exists()
    assert json.loads(path.read_text(encoding="utf-8"))["inlay"]["length"] == 150.0
    assert load_design(path) == design


def test_missing_keys_take_defaults():
    design = design_from_dict({"inlay": {"depth": 4}})
    assert design.inlay.depth == 4.0
    assert isinstance(design.inlay.depth, float)
    assert design.inlay.length == InlayConfig().length
    assert design.sections == InlayDesign().sections
    assert design.preview == PreviewConfig()


@pytest.mark.parametrize(
    "payload",
    [
        {"inlay": {"height": 3.0}},
        {"sections": []},
        {"sections": [{"share": 100.0, "diameter": 25.0}]},
        {"schema_version": "inlay_generator.design.v0"},
        {"preview": "wireframe"},
    ],
)
def test_rejects_malformed_documents(payload):
    with pytest.raises(InvalidState):
        design_from_dict(payload)


@pytest.mark.parametrize(
    "payload",
    [
        {"preview": {"wireframe": "false"}},
        {"preview": {"wireframe": 0}},
        {"preview": {"color": 808080}},
        ["not", "an", "object"],
    ],
)
def test_rejects_wrongly_typed_flags(payload):
    with pytest.raises(InvalidState):
        design_from_dict(payload)


@pytest.mark.parametrize(
    "payload",
    [
        {"inlay": {"depth": "three"}},
        {"inlay": {"length": True}},
        {"sections": [{"size_x": None}]},
        {"resolution": {"hole_segments": 64.5}},
    ],
)
def test_rejects_non_numeric_dimensions(payload):
    with pytest.raises(InvalidDimension):
        design_from_dict(payload)


def test_whole_number_floats_accepted_for_counts():
    design = design_from_dict({"resolution": {"hole_segments": 32.0}})
    assert design.resolution.hole_segments == 32
    assert isinstance(design.resolution.hole_segments, int)


def test_load_rejects_broken_json(tmp_path: Path):
    path = tmp_path / "broken.json"
    path.write_text("{\"inlay\": ", encoding="utf-8")
    with pytest.raises(InvalidState):
        load_design(path)
