"""
Data quality assessor tests.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from analysis.quality import DataQualityAssessor, count_outliers, grade_for
from analysis.sentiment import classify
from models.exceptions import EmptySampleError
from models.schemas import SentimentResult


def result(text, polarity=0.0, confidence=50.0):
    return SentimentResult(
        text=text,
        sentiment=classify(polarity),
        polarity=polarity,
        confidence=confidence,
        subjectivity=0.0,
    )


@pytest.fixture
def assessor():
    return DataQualityAssessor()


class TestGrades:
    @pytest.mark.parametrize("overall,grade", [
        (100.0, "A"),
        (90.0, "A"),
        (89.99, "B"),
        (85.0, "B"),
        (70.0, "C"),
        (60.0, "D"),
        (59.999, "F"),
        (0.0, "F"),
    ])
    def test_bands(self, overall, grade):
        assert grade_for(overall) == grade


class TestDataQualityAssessor:
    def test_clean_batch(self, assessor):
        q = assessor.assess([
            result("first review text", 0.5, 100.0),
            result("second review text", 0.5, 100.0),
        ])
        assert q.completeness == 100.0
        assert q.validity == 100.0
        assert q.consistency == 100.0
        assert q.accuracy == 100.0
        assert q.timeliness == 95.0
        assert q.overall == pytest.approx(99.0)
        assert q.grade == "A"
        assert q.details.total_records == 2

    def test_accuracy_is_mean_confidence(self, assessor):
        q = assessor.assess([result("one", confidence=20.0), result("two", confidence=40.0)])
        assert q.accuracy == pytest.approx(30.0)

    def test_duplicates_lower_validity(self, assessor):
        q = assessor.assess([result("same"), result("same"), result("other"), result("third")])
        assert q.details.duplicates == 1
        assert q.validity == pytest.approx(75.0)

    def test_blank_texts_count_as_missing(self, assessor):
        q = assessor.assess([result(""), result("ok text"), result("other text"), result("   ")])
        assert q.details.missing_values == 2
        assert q.completeness == pytest.approx(50.0)

    def test_outliers_lower_consistency(self, assessor):
        batch = [result(f"review {i}", 0.0) for i in range(9)] + [result("review 9", 1.0)]
        q = assessor.assess(batch)
        assert q.details.outliers == 1
        assert q.consistency == pytest.approx(90.0)

    def test_scores_bounded(self, assessor):
        q = assessor.assess([result("a", -1.0, 0.0), result("a", 1.0, 100.0), result("", 0.0, 0.0)])
        for value in (q.completeness, q.accuracy, q.consistency, q.timeliness, q.validity, q.overall):
            assert 0.0 <= value <= 100.0
        assert q.grade == grade_for(q.overall)

    def test_configurable_timeliness(self):
        q = DataQualityAssessor(timeliness_score=50.0).assess([result("only one")])
        assert q.timeliness == 50.0

    def test_empty_raises(self, assessor):
        with pytest.raises(EmptySampleError):
            assessor.assess([])


class TestOutliers:
    def test_constant_values_have_no_outliers(self):
        assert count_outliers([0.3, 0.3, 0.3]) == 0

    def test_multiplier(self):
        values = [0.0] * 9 + [1.0]
        assert count_outliers(values, std_multiplier=2.0) == 1
        assert count_outliers(values, std_multiplier=3.5) == 0
