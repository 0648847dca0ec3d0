from __future__ import annotations

from typing import List

import pytest

from docctx.document import DocumentNode, parse_markdown
from docctx.models import ContextMetadata, Evidence, EvidenceType, LanguageContext, SourceRange
from docctx.scoring import ConfidenceCalculator
from docctx.tracking import SourceTracker

SAMPLE_README = """# Sample Service

A small web service written in Python using Flask.

## Installation

```bash
pip install -r requirements.txt
```

## Frontend

The dashboard lives in `web/app.js` and is built with React.

```javascript
npm install
npm run build
```
"""


@pytest.fixture
def sample_readme() -> str:
    return SAMPLE_README


@pytest.fixture
def sample_document(sample_readme: str) -> List[DocumentNode]:
    return parse_markdown(sample_readme)


@pytest.fixture
def tracker() -> SourceTracker:
    return SourceTracker()


@pytest.fixture
def calculator() -> ConfidenceCalculator:
    return ConfidenceCalculator()


@pytest.fixture
def make_context():
    """Factory for contexts with a single located evidence item."""

    def _make(
        language: str,
        confidence: float = 0.8,
        line: int = 0,
        column: int = 0,
        end_line: int | None = None,
        end_column: int = 10,
    ) -> LanguageContext:
        location = SourceRange(line, line if end_line is None else end_line, column, end_column)
        evidence = Evidence(
            type=EvidenceType.KEYWORD,
            value=language.lower(),
            confidence=confidence,
            location=location,
        )
        return LanguageContext(
            language=language,
            confidence=confidence,
            source_range=location,
            evidence=(evidence,),
            metadata=ContextMetadata(source="test"),
        )

    return _make
