"""JSON documents describing an inlay design, used by the command line."""

from __future__ import annotations

import json
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Type, TypeVar

from inlay_generator.contracts import (
    BaseSection,
    InlayConfig,
    InlayDesign,
    PreviewConfig,
    Resolution,
)
from inlay_generator.errors import InvalidDimension, InvalidState

SCHEMA_VERSION = "inlay_generator.design.v1"

T = TypeVar("T")


def design_to_dict(design: InlayDesign) -> Dict[str, Any]:
    return {
        "schema_version": SCHEMA_VERSION,
        "inlay": asdict(design.inlay),
        "sections": [asdict(s) for s in design.sections],
        "preview": asdict(design.preview),
        "resolution": asdict(design.resolution),
    }


def design_from_dict(payload: Mapping[str, Any]) -> InlayDesign:
    """Build a design from a parsed document; missing keys take defaults."""
    if not isinstance(payload, Mapping):
        raise InvalidState(f"design must be an object, got {type(payload).__name__}")
    version = payload.get("schema_version", SCHEMA_VERSION)
    if version != SCHEMA_VERSION:
        raise InvalidState(f"unsupported design schema {version!r}")
    raw_sections = payload.get("sections")
    if raw_sections is None:
        sections = InlayDesign().sections
    else:
        if not isinstance(raw_sections, list) or not raw_sections:
            raise InvalidState("design must list at least one section")
        sections = tuple(_from_mapping(BaseSection, s, "section") for s in raw_sections)
    return InlayDesign(
        inlay=_from_mapping(InlayConfig, payload.get("inlay", {}), "inlay"),
        sections=sections,
        preview=_from_mapping(PreviewConfig, payload.get("preview", {}), "preview"),
        resolution=_from_mapping(Resolution, payload.get("resolution", {}), "resolution"),
    )


def load_design(path: str | Path) -> InlayDesign:
    with Path(path).open("r", encoding="utf-8") as f:
        try:
            payload = json.load(f)
        except json.JSONDecodeError as exc:
            raise InvalidState(f"{path} is not valid JSON: {exc}") from exc
    return design_from_dict(payload)


def save_design(path: str | Path, design: InlayDesign) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(design_to_dict(design), f, indent=2)
    return path


def _from_mapping(cls: Type[T], data: Any, label: str) -> T:
    if not isinstance(data, Mapping):
        raise InvalidState(f"{label} must be an object, got {type(data).__name__}")
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise InvalidState(f"unknown {label} keys: {', '.join(unknown)}")
    defaults = cls()
    return cls(
        **{
            name: _coerce(getattr(defaults, name), value, f"{label}.{name}")
            for name, value in data.items()
        }
    )


def _coerce(default: Any, value: Any, where: str) -> Any:
    """Convert a JSON value to the type of the field's default."""
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise InvalidState(f"{where} must be true or false, got {value!r}")
        return value
    if isinstance(default, (int, float)):
        # bool is an int subclass; JSON true/false is never a dimension
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidDimension(f"{where} must be a number, got {value!r}")
        if isinstance(default, int):
            if not float(value).is_integer():
                raise InvalidDimension(f"{where} must be a whole number, got {value!r}")
            return int(value)
        return float(value)
    if isinstance(default, str) and not isinstance(value, str):
        raise InvalidState(f"{where} must be a string, got {value!r}")
    return value
