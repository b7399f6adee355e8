import re

from catalog_admin.domain.exceptions import InvariantViolation

SECTION_ID_PATTERN = re.compile(r"^[a-z0-9-]{2,60}$")


def assert_positions(positions, label="positions"):
    positions = list(positions)
    if not positions:
        return

    expected = list(range(1, len(positions) + 1))
    if sorted(positions) != expected:
        raise InvariantViolation(
            f"{label} are not consecutive starting from 1: {positions}"
        )


def assert_section_id(section_id):
    if not isinstance(section_id, str) or not SECTION_ID_PATTERN.match(section_id):
        raise InvariantViolation(
            f"Section id must be 2-60 chars of a-z, 0-9 or '-': {section_id!r}"
        )


def assert_section_order(sections):
    """Sections hold positions 1..N with no gaps or duplicates."""
    assert_positions(
        (section["position"] for section in sections),
        label="Section positions",
    )
