"""Export of analysis results to CSV and JSON."""

import json
from datetime import datetime
from typing import Any, Dict, Iterable, Optional

from models.schemas import AnalysisResult, SentimentResult

CSV_HEADER = "Text,Sentiment,Polarity,Confidence,Subjectivity"


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def sentiment_csv(results: Iterable[SentimentResult]) -> str:
    """
    One row per result; text always double-quoted with inner quotes doubled,
    numbers at fixed precision. Rows end with a bare newline.
    """
    lines = [CSV_HEADER + "\n"]
    for r in results:
        lines.append(
            f"{_quote(r.text)},{r.sentiment.value},"
            f"{r.polarity:.4f},{r.confidence:.2f},{r.subjectivity:.4f}\n"
        )
    return "".join(lines)


def csv_filename(now: Optional[datetime] = None) -> str:
    now = now or datetime.utcnow()
    return f"sentiment_analysis_{now.strftime('%Y-%m-%d')}.csv"


def export_csv(result: AnalysisResult, filename: str) -> None:
    # newline="" so the rows keep their "\n" endings on every platform
    with open(filename, "w", encoding="utf-8", newline="") as f:
        f.write(sentiment_csv(result.sentiment_results))


def prepare_export(result: AnalysisResult) -> Dict[str, Any]:
    data = result.to_dict()
    data["metadata"] = {
        "export_timestamp": datetime.utcnow().isoformat(),
        "record_count": len(result.sentiment_results),
        "sentiment_counts": result.sentiment_counts(),
    }
    return data


def export_json(result: AnalysisResult, filename: str) -> None:
    with open(filename, "w", encoding="utf-8") as f:
        json.dump(prepare_export(result), f, indent=2, ensure_ascii=False)
