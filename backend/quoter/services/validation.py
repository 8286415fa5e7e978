from typing import Any, Dict, List, Optional

from quoter.models.quote import Category, ItemRole, PricingMode, QuoteMode, Unit

SUPPORTED_UNITS = {u.value for u in Unit}
SUPPORTED_CATEGORIES = {c.value for c in Category}


class Validator:
    """Boundary checks for line-item form payloads.

    Rules:
    - missing or empty description -> needs_review
    - quantity not a positive integer -> rejected
    - partial area spec (some of width/height/cost_per_area) -> needs_review (item falls back to flat pricing)
    - non-positive width/height, negative cost or price -> rejected
    - unknown unit, category, pricing mode or role -> rejected
    - role outside combined quotes, included outside print quotes -> rejected

    Deterministic: issues are returned sorted.
    """

    def _add_issue(self, issues: List[str], issue: str) -> None:
        if issue not in issues:
            issues.append(issue)

    def _number(self, value: Any) -> Optional[float]:
        if value is None or value == "":
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return float("nan")

    def validate(self, item: Dict[str, Any], mode: Optional[str] = None) -> Dict[str, Any]:
        issues: List[str] = []

        if not str(item.get("description") or "").strip():
            self._add_issue(issues, "missing_description")

        qty = item.get("quantity", 1)
        if isinstance(qty, bool) or not isinstance(qty, (int, float)) or not (0 < qty < float("inf")) \
                or qty != int(qty):
            self._add_issue(issues, "invalid_quantity")

        price = item.get("unit_price")
        if isinstance(price, dict):
            price = price.get("formula") or price.get("value")
        if isinstance(price, str) and price.strip().startswith("="):
            pass
        else:
            p = self._number(price)
            if p is not None and (p != p or p < 0):
                self._add_issue(issues, "invalid_unit_price")

        for field in ("real_cost", "sale_rate", "sale_price"):
            v = self._number(item.get(field))
            if v is not None and (v != v or v < 0):
                self._add_issue(issues, f"invalid_{field}")

        area = item.get("area") or {}
        if area:
            dims = {k: self._number(area.get(k)) for k in ("width", "height", "cost_per_area")}
            present = [k for k, v in dims.items() if v is not None]
            if 0 < len(present) < 3:
                self._add_issue(issues, "incomplete_area:" + ",".join(sorted(set(dims) - set(present))))
            for k in ("width", "height"):
                v = dims[k]
                if v is not None and (v != v or v <= 0):
                    self._add_issue(issues, f"invalid_{k}")
            cpa = dims["cost_per_area"]
            if cpa is not None and (cpa != cpa or cpa < 0):
                self._add_issue(issues, "invalid_cost_per_area")
            unit = area.get("unit")
            if unit is not None and unit not in SUPPORTED_UNITS:
                self._add_issue(issues, f"unsupported_unit:{unit}")

        category = item.get("category")
        if category and category not in SUPPORTED_CATEGORIES:
            self._add_issue(issues, f"unsupported_category:{category}")

        pricing_mode = item.get("pricing_mode")
        if pricing_mode and pricing_mode not in {m.value for m in PricingMode}:
            self._add_issue(issues, f"unsupported_pricing_mode:{pricing_mode}")

        role = item.get("role")
        if role is not None:
            if role not in {r.value for r in ItemRole}:
                self._add_issue(issues, f"unsupported_role:{role}")
            elif mode is not None and mode != QuoteMode.combined.value:
                self._add_issue(issues, "invalid_role_for_mode")

        if item.get("included") and mode is not None and mode != QuoteMode.print.value:
            self._add_issue(issues, "invalid_included_for_mode")

        rejected_indicators = [i for i in issues if i.startswith("invalid_") or i.startswith("unsupported_")]
        if rejected_indicators:
            decision = "rejected"
        elif issues:
            decision = "needs_review"
        else:
            decision = "accepted"

        return {"decision": decision, "issues": sorted(issues)}
