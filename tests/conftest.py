"""
Shared fixtures: an in-memory extractor so pipeline / API tests never touch
the network.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import datetime

import pytest

from models.schemas import ContentMetadata, ExtractedContent, TextRecord


SAMPLE_TEXTS = [
    "This product is excellent and amazing",
    "Terrible service, very slow",
    "The product arrived on Tuesday",
]


def build_content(texts, title="Sample Product Reviews"):
    reviews = tuple(TextRecord(text=t) for t in texts)
    return ExtractedContent(
        title=title,
        description="Customer reviews",
        text=" ".join(texts),
        metadata=ContentMetadata(
            word_count=sum(len(t.split()) for t in texts),
            extracted_at=datetime(2024, 3, 1, 12, 0, 0),
            content_type="text/html",
        ),
        reviews=reviews,
    )


class FakeExtractor:
    """Stands in for ContentExtractor; records the URLs it was asked for."""

    def __init__(self, texts):
        self.texts = list(texts)
        self.calls = []

    def extract(self, url):
        self.calls.append(url)
        return build_content(self.texts)


# ─── Fixtures ────────────────────────────────────────────────────────────────

@pytest.fixture
def sample_texts():
    return list(SAMPLE_TEXTS)


@pytest.fixture
def fake_extractor(sample_texts):
    return FakeExtractor(sample_texts)


@pytest.fixture
def make_extractor():
    return FakeExtractor


@pytest.fixture
def analysis_result(fake_extractor):
    from etl.pipeline import AnalysisPipeline
    return AnalysisPipeline(extractor=fake_extractor).run("https://shop.example.com/product/42")
