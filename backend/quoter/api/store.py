import threading
from typing import Dict, List, Optional
from uuid import uuid4

from fastapi import HTTPException

from quoter.models.quote import Quote
from quoter.services.scenarios import Scenario


class DraftStore:
    """Quotes being edited, keyed by draft id. A draft lives until it is discarded."""

    def __init__(self):
        self._lock = threading.Lock()
        self._quotes: Dict[str, Quote] = {}
        self._scenarios: Dict[str, List[Scenario]] = {}

    def create(self, quote: Quote) -> str:
        draft_id = uuid4().hex
        with self._lock:
            self._quotes[draft_id] = quote
            self._scenarios[draft_id] = []
        return draft_id

    def get(self, draft_id: str) -> Quote:
        with self._lock:
            quote = self._quotes.get(draft_id)
        if quote is None:
            raise HTTPException(status_code=404, detail="draft not found")
        return quote

    def put(self, draft_id: str, quote: Quote) -> Quote:
        with self._lock:
            if draft_id not in self._quotes:
                raise HTTPException(status_code=404, detail="draft not found")
            self._quotes[draft_id] = quote
        return quote

    def discard(self, draft_id: str) -> bool:
        with self._lock:
            self._scenarios.pop(draft_id, None)
            return self._quotes.pop(draft_id, None) is not None

    def scenarios(self, draft_id: str) -> List[Scenario]:
        self.get(draft_id)
        with self._lock:
            return list(self._scenarios.get(draft_id, []))

    def add_scenarios(self, draft_id: str, scenarios: List[Scenario]) -> None:
        self.get(draft_id)
        with self._lock:
            self._scenarios.setdefault(draft_id, []).extend(scenarios)

    def find_scenario(self, draft_id: str, scenario_id: str) -> Optional[Scenario]:
        for s in self.scenarios(draft_id):
            if s.id == scenario_id:
                return s
        return None

    def remove_scenario(self, draft_id: str, scenario_id: str) -> bool:
        self.get(draft_id)
        with self._lock:
            current = self._scenarios.get(draft_id, [])
            kept = [s for s in current if s.id != scenario_id]
            self._scenarios[draft_id] = kept
            return len(kept) != len(current)

    def clear(self) -> None:
        with self._lock:
            self._quotes.clear()
            self._scenarios.clear()


drafts = DraftStore()
