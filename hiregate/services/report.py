"""Analysis report shape, defaults and normalization.

Every report that leaves the scoring client goes through ``normalize_report``:
the output always has the full shape of ``BASELINE_REPORT`` with numbers in
range, lists as lists and enums from their allowed values. Fields that did
parse upstream are kept one by one; anything missing or malformed falls back to
the baseline value for that field only.
"""
import copy
import json
import math
from typing import Any, Dict, Optional, Tuple

FALLBACK_REASON = "Automated analysis unavailable."

BASELINE_REPORT: Dict[str, Any] = {
    "scores": {
        "aptitude": 50,
        "integrity": 50,
        "performancePotential": 50,
        "culturalFit": 50,
        "flightRisk": 50,
    },
    "psychology": {
        "mbti": "N/A",
        "bigFive": {
            "openness": 50,
            "conscientiousness": 50,
            "extraversion": 50,
            "agreeableness": 50,
            "neuroticism": 50,
        },
        "enneagram": "N/A",
    },
    "emotionalIntelligence": {
        "selfAwareness": 5,
        "selfRegulation": 5,
        "empathy": 5,
        "motivation": 5,
        "socialSkills": 5,
    },
    "coherence": {
        "score": 50,
        "narrativeAnalysis": "N/A",
        "honestyScore": 50,
        "honestyAnalysis": "N/A",
        "inconsistencies": [],
        "locusOfControl": "External",
    },
    "leadership": {
        "primaryStyle": "N/A",
        "secondaryStyle": "N/A",
        "strengths": [],
        "weaknesses": [],
        "developmentPlan": "N/A",
    },
    "flags": {
        "redFlags": [],
        "greenFlags": [],
    },
    "motivation": {
        "surfaceLevel": "N/A",
        "deepLevel": "N/A",
        "roleAlignment": False,
        "retentionRiskLevel": "Medium",
    },
    "recommendation": {
        "decision": "VALIDATE",
        "reason": FALLBACK_REASON,
        "nextSteps": [],
    },
}

ENUMS = {
    "coherence.locusOfControl": ("Internal", "External"),
    "motivation.retentionRiskLevel": ("Low", "Medium", "High"),
    "recommendation.decision": ("HIRE", "VALIDATE", "REJECT"),
}

# emotional intelligence sub-scores are on a 0-10 scale, every other number is 0-100
SMALL_SCALE_PREFIX = "emotionalIntelligence."

OPTIONAL_FIELDS = {"psychology.enneagram", "leadership.secondaryStyle"}

_TRUE_WORDS = {"true", "yes", "si", "sí", "1"}
_FALSE_WORDS = {"false", "no", "0"}

_INVALID = object()

_DECODER = json.JSONDecoder()


def baseline_report() -> Dict[str, Any]:
    return copy.deepcopy(BASELINE_REPORT)


def _range_for(field: str) -> Tuple[float, float]:
    if field.startswith(SMALL_SCALE_PREFIX):
        return 0, 10
    return 0, 100


def _coerce_number(field, value):
    if isinstance(value, bool):
        return _INVALID
    if isinstance(value, str):
        try:
            value = float(value.strip().rstrip('%'))
        except ValueError:
            return _INVALID
    if not isinstance(value, (int, float)):
        return _INVALID
    # ints are clamped as ints: JSON integers may not fit in a float
    if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        return _INVALID
    low, high = _range_for(field)
    value = max(low, min(high, value))
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _coerce_bool(value):
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        s = value.strip().lower()
        if s in _TRUE_WORDS:
            return True
        if s in _FALSE_WORDS:
            return False
    return _INVALID


def _coerce_list(value):
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return _INVALID
    out = []
    for item in value:
        if item is None or isinstance(item, (dict, list)):
            continue
        s = str(item).strip()
        if s:
            out.append(s)
    return out


def _coerce_string(field, value):
    if isinstance(value, bool) or value is None or isinstance(value, (dict, list)):
        return _INVALID
    s = str(value).strip()
    if not s:
        return _INVALID
    allowed = ENUMS.get(field)
    if allowed:
        for option in allowed:
            if option.lower() == s.lower():
                return option
        return _INVALID
    return s


def _coerce(field, default, value):
    if isinstance(default, bool):
        return _coerce_bool(value)
    if isinstance(default, (int, float)):
        return _coerce_number(field, value)
    if isinstance(default, list):
        return _coerce_list(value)
    return _coerce_string(field, value)


def _merge(base, raw, path, stats):
    out = {}
    raw = raw if isinstance(raw, dict) else {}
    for key, default in base.items():
        field = f"{path}.{key}" if path else key
        if isinstance(default, dict):
            out[key] = _merge(default, raw.get(key), field, stats)
            continue
        stats["total"] += 1
        value = _INVALID
        if key in raw:
            value = _coerce(field, default, raw[key])
        if value is _INVALID:
            stats["defaulted"] += 1
            out[key] = copy.deepcopy(default)
        else:
            out[key] = value
    return out


def normalize_report(raw: Optional[Dict[str, Any]]) -> Tuple[Dict[str, Any], str]:
    """Deep-merge ``raw`` over the baseline report.

    Returns ``(report, source)`` where source is ``"model"`` when every field
    came from ``raw``, ``"partial"`` when some were filled in and
    ``"fallback"`` when nothing usable was present.
    """
    stats = {"total": 0, "defaulted": 0}
    report = _merge(BASELINE_REPORT, raw, "", stats)
    if stats["defaulted"] == 0:
        source = "model"
    elif stats["defaulted"] >= stats["total"]:
        source = "fallback"
    else:
        source = "partial"
    return report, source


def extract_first_json_object(text: str) -> Optional[Dict[str, Any]]:
    """Return the first ``{...}`` in ``text`` that decodes to an object.

    Each ``{`` is tried in turn as the start of a JSON object, so commentary
    before or after it, markdown fences included, is skipped. A start whose
    decode runs into the end of the text is a truncated object; every later
    brace is nested inside it, so the search stops there.
    """
    if not text:
        return None
    end = len(text.rstrip())
    start = text.find('{')
    while start != -1:
        try:
            data, _ = _DECODER.raw_decode(text, start)
        except json.JSONDecodeError as e:
            if e.pos >= end:
                return None
        except RecursionError:
            return None
        else:
            return data
        start = text.find('{', start + 1)
    return None


def parse_report_text(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """Strict decode first, then substring extraction. ``None`` if neither works."""
    if not text or not text.strip():
        return None
    try:
        data = json.loads(text)
    except ValueError:
        data = None
    if isinstance(data, dict):
        return data
    return extract_first_json_object(text)


def _schema_for(value, field):
    if isinstance(value, dict):
        props = {k: _schema_for(v, f"{field}.{k}" if field else k) for k, v in value.items()}
        required = [k for k in value if (f"{field}.{k}" if field else k) not in OPTIONAL_FIELDS]
        return {"type": "OBJECT", "properties": props, "required": required}
    if isinstance(value, bool):
        return {"type": "BOOLEAN"}
    if isinstance(value, (int, float)):
        return {"type": "NUMBER"}
    if isinstance(value, list):
        return {"type": "ARRAY", "items": {"type": "STRING"}}
    if field in ENUMS:
        return {"type": "STRING", "enum": list(ENUMS[field])}
    return {"type": "STRING"}


def response_schema() -> Dict[str, Any]:
    """Structured-output schema for the scoring model, derived from the baseline."""
    return _schema_for(BASELINE_REPORT, "")
