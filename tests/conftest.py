"""
Shared test fixtures for the inlay geometry pipeline.
"""
import sys
from pathlib import Path

import pytest

# Add src/ to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from inlay_generator.contracts import BaseSection, InlayConfig
from inlay_generator.holes import circle_contour
from inlay_generator.profile import rounded_rectangle


@pytest.fixture
def reference_config():
    """The 121.9 x 79.9 mm tray insert used for end-to-end checks."""
    return InlayConfig(
        length=121.9,
        width=79.9,
        corner_radius=3.2,
        depth=3.0,
        margin=1.0,
        clearance=0.2,
    )


@pytest.fixture
def reference_sections():
    """One section holding 25 mm round bases."""
    return (BaseSection(share=100.0, size_x=25.0, size_y=25.0, spacing=1.0, clearance=0.4),)


@pytest.fixture
def square_outline():
    """A sharp-cornered 40 x 40 mm outline."""
    return rounded_rectangle(40.0, 40.0, 0.0)


@pytest.fixture
def center_hole():
    """A 10 mm hole at the origin."""
    return circle_contour((0.0, 0.0), 10.0)
