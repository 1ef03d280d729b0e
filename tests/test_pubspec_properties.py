# SPDX-License-Identifier: MIT
"""Property-based tests for format-preserving version updates.

These tests verify that:
- Only the top-level version line changes, every other line is byte-identical
- Files without a top-level version line are never modified
"""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest
from hypothesis import given, settings, strategies as st

from pub_publish.pubspec import VersionFieldNotFoundError, update_version


# =============================================================================
# Strategies for generating test data
# =============================================================================

versions = st.from_regex(
    r"(0|[1-9][0-9]{0,2})\.(0|[1-9][0-9]{0,2})\.(0|[1-9][0-9]{0,2})(\+[1-9][0-9]{0,3})?",
    fullmatch=True,
)

keys = st.from_regex(r"[a-z][a-z_]{0,11}", fullmatch=True).filter(lambda k: k != "version")

values = st.from_regex(r"[A-Za-z0-9^<>=.' ]{0,30}", fullmatch=True)

comments = st.from_regex(r"# [ -~]{0,40}", fullmatch=True)


@st.composite
def other_lines(draw):
    """Generate a line that is not a top-level version declaration."""
    kind = draw(st.sampled_from(["key", "nested", "comment", "blank", "nested_version"]))
    if kind == "key":
        return f"{draw(keys)}: {draw(values)}".rstrip()
    if kind == "nested":
        return f"  {draw(keys)}: {draw(values)}".rstrip()
    if kind == "comment":
        return draw(comments)
    if kind == "nested_version":
        return f"    version: {draw(versions)}"
    return ""


@st.composite
def pubspec_documents(draw):
    """Generate pubspec text with exactly one top-level version line.

    Returns:
        Tuple of (lines, index of the version line)
    """
    before = draw(st.lists(other_lines(), max_size=8))
    after = draw(st.lists(other_lines(), max_size=8))
    version_line = f"version:{draw(st.sampled_from([' ', '  ', chr(9)]))}{draw(versions)}"
    return before + [version_line] + after, len(before)


# =============================================================================
# Properties
# =============================================================================


class TestUpdateVersionProperties:
    """Property tests for update_version."""

    @given(document=pubspec_documents(), new_version=versions, newline=st.sampled_from(["\n", "\r\n"]))
    @settings(max_examples=100)
    def test_only_version_line_changes(self, document, new_version, newline):
        """Every line except the version line is preserved exactly."""
        lines, index = document
        content = newline.join(lines) + newline

        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "pubspec.yaml"
            path.write_bytes(content.encode("utf-8"))

            update_version(path, new_version)

            updated = path.read_bytes().decode("utf-8")

        updated_lines = updated.split(newline)
        assert updated_lines[-1] == ""
        updated_lines = updated_lines[:-1]

        assert len(updated_lines) == len(lines)
        for i, (old, new) in enumerate(zip(lines, updated_lines)):
            if i == index:
                assert new == f"version: {new_version}"
            else:
                assert new == old

    @given(lines=st.lists(other_lines(), max_size=12), new_version=versions)
    @settings(max_examples=100)
    def test_no_version_line_leaves_file_untouched(self, lines, new_version):
        """Without a top-level version the file is never written."""
        content = "\n".join(lines) + "\n"

        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "pubspec.yaml"
            path.write_bytes(content.encode("utf-8"))

            with pytest.raises(VersionFieldNotFoundError):
                update_version(path, new_version)

            assert path.read_bytes() == content.encode("utf-8")
