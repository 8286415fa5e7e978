import json
import logging
import re
from datetime import datetime, timezone

from quoter.models.quote import QuoteSummary

logger = logging.getLogger(__name__)


def export_json(summary: QuoteSummary) -> bytes:
    payload = summary.model_dump(mode="json")
    payload["exported_at"] = datetime.now(timezone.utc).isoformat()
    data = json.dumps(payload, ensure_ascii=False, indent=2).encode("utf-8")
    logger.info("Exported quote id=%s (%s bytes)", summary.quote_id, len(data))
    return data


def export_filename(summary: QuoteSummary) -> str:
    name = re.sub(r"[^\w\-]+", "_", (summary.project_name or "").strip()).strip("_")
    return f"{name or 'quote'}.json"
