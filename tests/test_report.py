import json
import time

from hiregate.services.report import (
    BASELINE_REPORT, FALLBACK_REASON, baseline_report, extract_first_json_object, normalize_report,
    parse_report_text, response_schema,
)


def _full_report():
    report = baseline_report()
    report["scores"]["aptitude"] = 81
    report["psychology"]["mbti"] = "INTJ"
    report["coherence"]["locusOfControl"] = "Internal"
    report["recommendation"]["decision"] = "HIRE"
    report["recommendation"]["reason"] = "Consistent and detailed answers."
    return report


def test_baseline_report_shape_and_defaults():
    report = baseline_report()
    assert report["recommendation"]["decision"] == "VALIDATE"
    assert report["recommendation"]["reason"] == FALLBACK_REASON
    assert all(v == 50 for v in report["scores"].values())
    assert all(v == 5 for v in report["emotionalIntelligence"].values())
    assert report["flags"] == {"redFlags": [], "greenFlags": []}
    # copies are independent
    report["flags"]["redFlags"].append("x")
    assert BASELINE_REPORT["flags"]["redFlags"] == []


def test_normalize_complete_report_is_model_source():
    report, source = normalize_report(_full_report())
    assert source == "model"
    assert report["scores"]["aptitude"] == 81
    assert report["recommendation"]["decision"] == "HIRE"


def test_normalize_none_is_fallback():
    report, source = normalize_report(None)
    assert source == "fallback"
    assert report == BASELINE_REPORT


def test_normalize_fills_missing_fields_and_keeps_parsed_ones():
    raw = {"scores": {"integrity": 20}, "flags": {"redFlags": ["Kept found money"]}}
    report, source = normalize_report(raw)
    assert source == "partial"
    assert report["scores"]["integrity"] == 20
    assert report["scores"]["aptitude"] == 50
    assert report["flags"]["redFlags"] == ["Kept found money"]
    assert report["flags"]["greenFlags"] == []
    assert report["recommendation"]["decision"] == "VALIDATE"


def test_normalize_clamps_numbers_to_their_scale():
    raw = {
        "scores": {"aptitude": 140, "flightRisk": -3, "integrity": "75%"},
        "emotionalIntelligence": {"empathy": 42, "motivation": 7.5},
    }
    report, _ = normalize_report(raw)
    assert report["scores"]["aptitude"] == 100
    assert report["scores"]["flightRisk"] == 0
    assert report["scores"]["integrity"] == 75
    assert report["emotionalIntelligence"]["empathy"] == 10
    assert report["emotionalIntelligence"]["motivation"] == 7.5


def test_normalize_rejects_bad_types_per_field():
    raw = {
        "scores": {"aptitude": "high", "culturalFit": True},
        "coherence": {"inconsistencies": None, "locusOfControl": "sideways"},
        "leadership": {"strengths": "Calm under pressure"},
        "motivation": {"roleAlignment": "yes", "retentionRiskLevel": "high"},
        "recommendation": {"decision": "maybe", "nextSteps": ["Call references", None, {"x": 1}, " "]},
    }
    report, _ = normalize_report(raw)
    assert report["scores"]["aptitude"] == 50
    assert report["scores"]["culturalFit"] == 50
    assert report["coherence"]["inconsistencies"] == []
    assert report["coherence"]["locusOfControl"] == "External"
    assert report["leadership"]["strengths"] == ["Calm under pressure"]
    assert report["motivation"]["roleAlignment"] is True
    assert report["motivation"]["retentionRiskLevel"] == "High"
    assert report["recommendation"]["decision"] == "VALIDATE"
    assert report["recommendation"]["nextSteps"] == ["Call references"]


def test_normalize_ignores_non_dict_sections():
    report, source = normalize_report({"scores": [1, 2, 3], "psychology": "INTJ"})
    assert source == "fallback"
    assert report["scores"] == BASELINE_REPORT["scores"]
    assert report["psychology"]["bigFive"]["openness"] == 50


def test_extract_first_json_object_skips_commentary_and_fences():
    text = 'Here is the analysis:\n```json\n{"scores": {"aptitude": 70}, "note": "uses } and { inside"}\n```\nDone.'
    data = extract_first_json_object(text)
    assert data == {"scores": {"aptitude": 70}, "note": "uses } and { inside"}


def test_extract_first_json_object_tries_later_braces():
    text = 'set {not json} then {"ok": true}'
    assert extract_first_json_object(text) == {"ok": True}


def test_extract_first_json_object_handles_escaped_quotes():
    text = 'x {"a": "he said \\"}\\"", "b": 2} y'
    assert extract_first_json_object(text) == {"a": 'he said "}"', "b": 2}


def test_extract_first_json_object_none_when_absent():
    assert extract_first_json_object("no object here") is None
    assert extract_first_json_object("{unterminated") is None
    assert extract_first_json_object("") is None


def test_parse_report_text_strict_then_extraction():
    payload = {"scores": {"aptitude": 60}}
    assert parse_report_text(json.dumps(payload)) == payload
    assert parse_report_text("prefix " + json.dumps(payload)) == payload
    assert parse_report_text("[1, 2]") is None
    assert parse_report_text("   ") is None
    assert parse_report_text(None) is None


def test_response_schema_mirrors_baseline():
    schema = response_schema()
    assert schema["type"] == "OBJECT"
    assert set(schema["properties"]) == set(BASELINE_REPORT)
    decision = schema["properties"]["recommendation"]["properties"]["decision"]
    assert decision == {"type": "STRING", "enum": ["HIRE", "VALIDATE", "REJECT"]}
    psychology = schema["properties"]["psychology"]
    assert "enneagram" not in psychology["required"]
    assert "mbti" in psychology["required"]
    assert schema["properties"]["flags"]["properties"]["redFlags"]["type"] == "ARRAY"


def test_oversized_integer_is_clamped_and_siblings_survive():
    huge = int("1" + "0" * 400)
    raw = {"scores": {"aptitude": 88, "integrity": huge, "flightRisk": -huge}}
    report, source = normalize_report(raw)
    assert source == "partial"
    assert report["scores"]["aptitude"] == 88
    assert report["scores"]["integrity"] == 100
    assert report["scores"]["flightRisk"] == 0


def test_oversized_integer_in_model_text_keeps_parsed_fields():
    text = 'Result: {"scores": {"aptitude": 88, "integrity": 1' + "0" * 400 + '}}'
    report, source = normalize_report(parse_report_text(text))
    assert source == "partial"
    assert report["scores"]["aptitude"] == 88
    assert report["scores"]["integrity"] == 100


def test_non_finite_numbers_fall_back_per_field():
    report, _ = normalize_report({"scores": {"aptitude": float("nan"), "integrity": "1e400", "culturalFit": 70}})
    assert report["scores"]["aptitude"] == 50
    assert report["scores"]["integrity"] == 50
    assert report["scores"]["culturalFit"] == 70


def test_extract_first_json_object_stops_at_truncated_object():
    assert extract_first_json_object('{"scores": {"aptitude": 70}, "flags": ') is None
    # a stray brace that fails early does not hide a later object
    assert extract_first_json_object('{ {"ok": 1}') == {"ok": 1}


def test_extract_first_json_object_many_open_braces_is_fast():
    started = time.perf_counter()
    assert extract_first_json_object("{" * 20000) is None
    assert extract_first_json_object('{"a": ' * 20000) is None
    assert extract_first_json_object("x {" * 20000 + ' {"ok": true}') == {"ok": True}
    assert time.perf_counter() - started < 2.0
