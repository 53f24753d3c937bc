from datetime import datetime, timezone

import pytest

FIXED_NOW = datetime(2026, 10, 18, 9, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def guide(tmp_path):
    """Main guide containing 'hello'."""
    path = tmp_path / "AGENT_GUIDE.md"
    path.write_text("hello", encoding="utf-8")
    return path


@pytest.fixture
def mirror(tmp_path):
    """Path for an agent file; nothing is created there."""
    return tmp_path / "CLAUDE.md"
