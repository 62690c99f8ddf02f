"""
End-to-end pipeline tests using an in-memory extractor.
Run with: python -m pytest tests/ -v
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio
from dataclasses import FrozenInstanceError

import pytest
import requests

from analysis.sentiment import SentimentScorer
from etl.base import CancellationToken, Orchestrator, Stage
from etl.extractor import ContentExtractor
from etl.pipeline import AnalysisPipeline
from models.exceptions import PipelineCancelled, StageFailure
from models.schemas import ETLStage, Sentiment, StageStatus


URL = "https://shop.example.com/product/42"

STAGE_NAMES = [
    "Extract: Fetching URL data",
    "Extract: Parsing content",
    "Transform: Cleaning text data",
    "Transform: Sentiment analysis",
    "Transform: Statistical analysis",
    "Transform: Keyword extraction",
    "Load: Quality assessment",
    "Complete: Finalizing report",
]


# ─── Helpers ─────────────────────────────────────────────────────────────────

class AppendStage(Stage):
    def __init__(self, key, suffix):
        super().__init__(name=f"Append {suffix}", key=key)
        self.suffix = suffix

    def run(self, data, outputs):
        return data + [self.suffix]


class BoomStage(Stage):
    def __init__(self, key="boom"):
        super().__init__(name="Boom", key=key)

    def run(self, data, outputs):
        raise RuntimeError("stage exploded")


class CancellingStage(Stage):
    def __init__(self, token):
        super().__init__(name="Cancel after me", key="cancel")
        self.token = token

    def run(self, data, outputs):
        self.token.cancel()
        return data


class ExplodingScorer(SentimentScorer):
    def score(self, text):
        raise RuntimeError("lexicon unavailable")


class FailingSession:
    def __init__(self):
        self.headers = {}

    def get(self, url, timeout=None):
        raise requests.ConnectionError("connection refused")


@pytest.fixture
def snapshots():
    return []


# ─── Orchestrator ────────────────────────────────────────────────────────────

class TestOrchestrator:
    def test_outputs_chain(self):
        orch = Orchestrator([AppendStage("a", "x"), AppendStage("b", "y")])
        outputs = orch.execute([])
        assert outputs["a"] == ["x"]
        assert outputs["b"] == ["x", "y"]

    def test_stages_complete_with_records(self):
        orch = Orchestrator([AppendStage("a", "x"), AppendStage("b", "y")])
        orch.execute([])
        for record in orch.stages:
            assert record.status == StageStatus.COMPLETED
            assert record.progress == 100
            assert record.start_time is not None
            assert record.end_time >= record.start_time
        assert [r.records_processed for r in orch.stages] == [1, 2]

    def test_initial_stages_pending(self):
        orch = Orchestrator([AppendStage("a", "x")])
        assert orch.stages == (ETLStage(name="Append x"),)
        assert orch.stages[0].status == StageStatus.PENDING

    def test_duplicate_keys_rejected(self):
        with pytest.raises(ValueError):
            Orchestrator([AppendStage("a", "x"), AppendStage("a", "y")])

    def test_runs_once(self):
        orch = Orchestrator([AppendStage("a", "x")])
        orch.execute([])
        with pytest.raises(RuntimeError):
            orch.execute([])

    def test_failure_aborts(self):
        after = AppendStage("c", "z")
        orch = Orchestrator([AppendStage("a", "x"), BoomStage(), after])
        with pytest.raises(StageFailure) as exc:
            orch.execute([])
        assert exc.value.stage_name == "Boom"
        assert exc.value.message == "stage exploded"
        assert isinstance(exc.value.__cause__, RuntimeError)

        statuses = [r.status for r in orch.stages]
        assert statuses == [StageStatus.COMPLETED, StageStatus.FAILED, StageStatus.PENDING]
        assert orch.stages[1].error_message == "stage exploded"
        assert orch.stages[1].end_time is not None
        assert "c" not in orch.outputs

    def test_snapshots_are_immutable_tuples(self, snapshots):
        orch = Orchestrator([AppendStage("a", "x"), AppendStage("b", "y")], on_progress=snapshots.append)
        orch.execute([])
        # running + completed per stage
        assert len(snapshots) == 4
        for snap in snapshots:
            assert isinstance(snap, tuple)
            assert sum(1 for s in snap if s.status == StageStatus.RUNNING) <= 1
        with pytest.raises(FrozenInstanceError):
            snapshots[0][0].status = StageStatus.FAILED
        assert snapshots[0][0].status == StageStatus.RUNNING
        assert snapshots[-1][0].status == StageStatus.COMPLETED

    def test_snapshot_progress_is_monotonic(self, snapshots):
        orch = Orchestrator([AppendStage("a", "x"), AppendStage("b", "y")], on_progress=snapshots.append)
        orch.execute([])
        done = [sum(1 for s in snap if s.is_terminal) for snap in snapshots]
        assert done == sorted(done)

    def test_callback_errors_do_not_abort(self):
        def broken_callback(stages):
            raise ValueError("observer bug")

        orch = Orchestrator([AppendStage("a", "x")], on_progress=broken_callback)
        outputs = orch.execute([])
        assert outputs["a"] == ["x"]
        assert orch.stages[0].status == StageStatus.COMPLETED

    def test_cancel_before_start(self):
        token = CancellationToken()
        token.cancel()
        orch = Orchestrator([AppendStage("a", "x")], cancel_token=token)
        with pytest.raises(PipelineCancelled) as exc:
            orch.execute([])
        assert exc.value.next_stage == "Append x"
        assert orch.stages[0].status == StageStatus.PENDING

    def test_cancel_between_stages(self):
        token = CancellationToken()
        orch = Orchestrator(
            [CancellingStage(token), AppendStage("b", "y")],
            cancel_token=token,
        )
        with pytest.raises(PipelineCancelled) as exc:
            orch.execute([])
        assert exc.value.next_stage == "Append y"
        assert [r.status for r in orch.stages] == [StageStatus.COMPLETED, StageStatus.PENDING]

    def test_outputs_view_is_read_only(self):
        orch = Orchestrator([AppendStage("a", "x")])
        outputs = orch.execute([])
        with pytest.raises(TypeError):
            outputs["a"] = []


# ─── Full Pipeline ───────────────────────────────────────────────────────────

class TestFullPipeline:
    def test_end_to_end(self, fake_extractor):
        result = AnalysisPipeline(extractor=fake_extractor).run(URL)

        assert fake_extractor.calls == [URL]
        assert result.source_url == URL
        assert result.domain == "shop.example.com"
        assert [r.sentiment for r in result.sentiment_results] == [
            Sentiment.POSITIVE, Sentiment.NEGATIVE, Sentiment.NEUTRAL,
        ]
        assert result.sentiment_counts() == {"Positive": 1, "Negative": 1, "Neutral": 1}

    def test_all_stages_completed(self, analysis_result):
        assert [s.name for s in analysis_result.etl_stages] == STAGE_NAMES
        for stage in analysis_result.etl_stages:
            assert stage.status == StageStatus.COMPLETED
            assert stage.progress == 100
            assert stage.error_message is None

    def test_records_processed(self, analysis_result):
        by_name = {s.name: s for s in analysis_result.etl_stages}
        assert by_name["Extract: Parsing content"].records_processed == 3
        assert by_name["Transform: Sentiment analysis"].records_processed == 3

    def test_statistics_and_quality(self, analysis_result):
        stats = analysis_result.statistics
        assert stats.mean == pytest.approx(0.0)
        assert stats.range == pytest.approx(2.0)
        assert stats.variance == stats.std_dev * stats.std_dev

        q = analysis_result.quality_metrics
        assert q.details.total_records == 3
        assert q.validity == 100.0
        assert q.grade in ("A", "B", "C", "D", "F")

    def test_keywords(self, analysis_result):
        words = [k.word for k in analysis_result.keywords]
        assert words[0] == "product"
        assert analysis_result.keywords[0].count == 2

    def test_summary_and_dict(self, analysis_result):
        assert "shop.example.com" in analysis_result.summary()
        data = analysis_result.to_dict()
        assert data["domain"] == "shop.example.com"
        assert len(data["etl_stages"]) == 8
        assert data["etl_stages"][0]["status"] == "completed"

    def test_abort_at_sentiment_stage(self, fake_extractor, snapshots):
        pipeline = AnalysisPipeline(
            extractor=fake_extractor,
            scorer=ExplodingScorer(),
            on_progress=snapshots.append,
        )
        with pytest.raises(StageFailure) as exc:
            pipeline.run(URL)
        assert exc.value.stage_name == "Transform: Sentiment analysis"
        assert exc.value.message == "lexicon unavailable"

        final = snapshots[-1]
        statuses = [s.status for s in final]
        assert statuses.count(StageStatus.FAILED) == 1
        assert statuses[:3] == [StageStatus.COMPLETED] * 3
        assert statuses[3] == StageStatus.FAILED
        assert statuses[4:] == [StageStatus.PENDING] * 4
        assert final[3].error_message == "lexicon unavailable"

    def test_no_usable_records_fails_at_statistics(self, make_extractor):
        pipeline = AnalysisPipeline(extractor=make_extractor(["too short", "meh"]))
        with pytest.raises(StageFailure) as exc:
            pipeline.run(URL)
        assert exc.value.stage_name == "Transform: Statistical analysis"

    def test_keyword_top_n(self, fake_extractor):
        result = AnalysisPipeline(extractor=fake_extractor, keyword_top_n=1).run(URL)
        assert len(result.keywords) == 1

    def test_fetch_failure_uses_generated_content(self):
        extractor = ContentExtractor(session=FailingSession())
        result = AnalysisPipeline(extractor=extractor).run(URL)
        assert result.extracted_content.is_generated
        assert len(result.sentiment_results) == len(result.extracted_content.reviews)
        assert all(s.status == StageStatus.COMPLETED for s in result.etl_stages)

    def test_cancelled_run(self, fake_extractor):
        token = CancellationToken()
        token.cancel()
        with pytest.raises(PipelineCancelled):
            AnalysisPipeline(extractor=fake_extractor).run(URL, cancel_token=token)
        assert fake_extractor.calls == []

    def test_async_execute(self, fake_extractor):
        result = asyncio.run(AnalysisPipeline(extractor=fake_extractor).execute(URL))
        assert result.domain == "shop.example.com"
        assert len(result.sentiment_results) == 3

    def test_each_run_is_independent(self, fake_extractor):
        pipeline = AnalysisPipeline(extractor=fake_extractor)
        first = pipeline.run(URL)
        second = pipeline.run(URL)
        assert first.sentiment_results == second.sentiment_results
        assert first.etl_stages is not second.etl_stages


# ─── Three-Record Scenario ───────────────────────────────────────────────────

SCENARIO_TEXTS = ["This is excellent and amazing!", "Terrible, awful experience.", "It was fine."]


@pytest.fixture
def scenario_result(make_extractor):
    return AnalysisPipeline(extractor=make_extractor(SCENARIO_TEXTS)).run(URL)


class TestThreeRecordScenario:
    @pytest.mark.parametrize("index,text,sentiment,polarity", [
        (0, "This is excellent and amazing!", Sentiment.POSITIVE, 1.0),
        (1, "Terrible, awful experience.", Sentiment.NEGATIVE, -1.0),
        (2, "It was fine.", Sentiment.NEUTRAL, 0.0),
    ])
    def test_record_sentiment(self, scenario_result, index, text, sentiment, polarity):
        r = scenario_result.sentiment_results[index]
        assert r.text == text
        assert r.sentiment == sentiment
        assert r.polarity == polarity

    def test_range_is_max_minus_min(self, scenario_result):
        polarities = [r.polarity for r in scenario_result.sentiment_results]
        assert scenario_result.statistics.range == max(polarities) - min(polarities)
        assert scenario_result.statistics.range == 2.0
