"""Shared fixtures."""

import pytest
from sqlmodel import Session, select

from skillgate.models import MembershipAdmission
from skillgate.services.storage import create_db_engine, init_db

GOOD_PYTHON = '''import math
from collections import Counter


# Count word frequencies and report the top entries.
def top_words(text, limit=3):
    """Return the most common words."""
    words = [w.lower() for w in text.split() if w.isalpha()]
    counts = Counter(words)
    result = []
    for word, count in sorted(counts.items(), key=lambda kv: -kv[1]):
        if len(result) >= limit:
            break
        result.append((word, count))
    return result


class Report:
    def __init__(self, items):
        self.items = items

    def render(self):
        try:
            total = sum(c for _, c in self.items)
        except TypeError:
            return ""
        lines = [f"{w}: {c}" for w, c in self.items]
        print("\\n".join(lines))
        return total
'''

GOOD_JAVASCRIPT = """// Sum even numbers in a list
function sumEven(values) {
  let total = 0;
  for (let i = 0; i < values.length; i++) {
    if (values[i] % 2 === 0) {
      total += values[i];
    }
  }
  return total;
}
"""

WEAK_PYTHON = "x = 1 # hi there"


@pytest.fixture
def good_python() -> str:
    return GOOD_PYTHON


@pytest.fixture
def good_javascript() -> str:
    return GOOD_JAVASCRIPT


@pytest.fixture
def weak_python() -> str:
    return WEAK_PYTHON


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'skillgate.db'}"


@pytest.fixture
def db_engine(database_url):
    engine = create_db_engine(database_url)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def admission_rows():
    """Count stored admission rows for a user in a project."""

    def _count(engine, project_id: str, user_id: str) -> int:
        statement = select(MembershipAdmission).where(
            MembershipAdmission.project_id == project_id,
            MembershipAdmission.user_id == user_id,
        )
        with Session(engine) as session:
            return len(session.exec(statement).all())

    return _count
