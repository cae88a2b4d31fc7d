"""Scoring client: candidate answers -> normalized psychometric report.

The external model is called through the Gemini ``generateContent`` REST
endpoint with ``requests``. Its output is treated as untrusted text: strict
JSON decode, then first-object extraction, then the baseline report. Callers
never see an exception from ``analyze``; every failure ends in a fallback
report.
"""
import base64
import random
import time
from typing import Any, Dict, List, Tuple

import requests
from flask import current_app

from ..errors import ScoringUnavailable
from ..models.candidate import TYPE_FIELD
from .report import baseline_report, normalize_report, parse_report_text, response_schema
from .storage import download_bytes, guess_audio_mime, is_audio_reference

SYSTEM_INSTRUCTION = """\
ROLE: You are an expert talent analyst writing structured hiring assessments.

MODE 1: FORENSIC ANALYSIS (ADMINISTRATIVE PROFILES)
For detailed narrative answers analyze coherence, leadership, MBTI and Big Five.
Be critical and list every inconsistency you find.

MODE 2: STABILITY SCAN (FIELD PROFILES)
For situational-judgment answers (guards, cleaning, plant staff):
- Judge integrity from the situations described (found money, missing relief, covering for a friend).
- Keeping found money or covering for a friend is an immediate integrity red flag.
- Leaving a post before relief arrives means low responsibility.
- flightRisk is high when the commute is over 90 minutes or needs 3 or more transports.
- Ignore spelling mistakes.

GENERAL RULES:
- Return one JSON object that matches the response schema, nothing else.
- If information is missing, infer from tone.
- One-word answers mean low communication or possible apathy.
"""

FIELD_INSTRUCTIONS = """\
FIELD MODE INSTRUCTIONS:
- Analyze TEXT and AUDIO answers.
- In audio, score tone of voice: confidence, hesitation, aggressiveness, evasiveness, honesty.
- Look for honesty and willingness to work.
- Raise flightRisk when the candidate lives far away or commutes for a long time."""

ADMIN_INSTRUCTIONS = """\
ADMINISTRATIVE MODE INSTRUCTIONS:
- Evaluate strategic leadership, communication and narrative coherence."""


def _attr(candidate, name, default=None):
    if isinstance(candidate, dict):
        return candidate.get(name, default)
    return getattr(candidate, name, default)


def is_field_profile(candidate) -> bool:
    return (_attr(candidate, 'type') or '').upper() == TYPE_FIELD


def _location_line(candidate) -> str:
    loc = _attr(candidate, 'location')
    if isinstance(loc, dict) and loc.get('lat') is not None and loc.get('lng') is not None:
        line = f"CANDIDATE LOCATION: Lat {loc['lat']}, Lng {loc['lng']}"
        if loc.get('address'):
            line += f" ({loc['address']})"
        return line
    return "CANDIDATE LOCATION: not provided"


def _context_text(candidate) -> str:
    field = is_field_profile(candidate)
    language = current_app.config.get('SCORING_OUTPUT_LANGUAGE') or 'English'
    lines = [
        f"PROFILE TYPE: {'FIELD (guard, plant worker, cleaning)' if field else 'ADMINISTRATIVE (manager, lead)'}",
        f"CANDIDATE: {_attr(candidate, 'name') or 'unknown'}",
        f"ROLE: {_attr(candidate, 'role') or 'not specified'}",
        _location_line(candidate),
        "",
        FIELD_INSTRUCTIONS if field else ADMIN_INSTRUCTIONS,
        "",
        "GENERAL INSTRUCTION:",
        f"- STRICT JSON OUTPUT, free-text fields written in {language}.",
        "- INFER PERSONALITY FROM CONTENT AND TONE OF VOICE.",
    ]
    return "\n".join(lines)


def build_request_parts(candidate, answers: Dict[str, str]) -> List[Dict[str, Any]]:
    """Context block plus one question part per answer, in submission order.

    Audio answers are fetched and inlined as base64 right after the text part
    that names their question, so tone and content are scored together.
    """
    parts: List[Dict[str, Any]] = [{"text": _context_text(candidate)}]
    for question, value in answers.items():
        parts.append({"text": f"\nQUESTION: {question}\n"})
        if is_audio_reference(value):
            audio = None
            try:
                audio = download_bytes(value.strip())
            except Exception:
                current_app.logger.warning('Could not fetch audio answer, sending reference as text')
            if audio:
                parts.append({"text": "ANSWER (AUDIO - ANALYZE TONE AND CONTENT):"})
                parts.append({
                    "inlineData": {
                        "mimeType": guess_audio_mime(value),
                        "data": base64.b64encode(audio).decode('ascii'),
                    }
                })
            else:
                parts.append({"text": f"ANSWER (audio could not be loaded): {value}"})
        else:
            safe_value = str(value if value is not None else '').replace('"', "'")
            parts.append({"text": f'ANSWER: "{safe_value}"'})
    return parts


def build_request_body(candidate, answers: Dict[str, str]) -> Dict[str, Any]:
    return {
        "systemInstruction": {"parts": [{"text": SYSTEM_INSTRUCTION}]},
        "contents": [{"role": "user", "parts": build_request_parts(candidate, answers)}],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": response_schema(),
            "temperature": 0.2,
        },
    }


def model_for(candidate) -> str:
    if is_field_profile(candidate):
        return current_app.config.get('SCORING_MODEL_FIELD', 'gemini-2.5-flash')
    return current_app.config.get('SCORING_MODEL_ADMIN', 'gemini-2.5-pro')


def _retry_wait(response, backoff):
    ra = response.headers.get('Retry-After') if response is not None else None
    if ra:
        try:
            return float(ra)
        except ValueError:
            # HTTP-date form
            return backoff
    return backoff


def _post_with_retries(url: str, body: Dict[str, Any]) -> Dict[str, Any]:
    api_key = current_app.config.get('GEMINI_API_KEY')
    if not api_key:
        raise ScoringUnavailable('GEMINI_API_KEY is not configured')

    headers = {'x-goog-api-key': api_key, 'Content-Type': 'application/json'}
    timeout = current_app.config.get('SCORING_TIMEOUT', 60)
    max_attempts = max(1, int(current_app.config.get('SCORING_MAX_ATTEMPTS', 3)))
    backoff = float(current_app.config.get('SCORING_BACKOFF_SEC', 1.0))

    for attempt in range(1, max_attempts + 1):
        wait = backoff
        try:
            r = requests.post(url, headers=headers, json=body, timeout=timeout)
        except requests.exceptions.RequestException as e:
            current_app.logger.warning('Scoring network error, attempt %s/%s: %s', attempt, max_attempts, e)
        else:
            if r.status_code == 429 or 500 <= r.status_code < 600:
                wait = _retry_wait(r, backoff)
                current_app.logger.warning('Scoring request returned %s, attempt %s/%s; body=%s',
                                           r.status_code, attempt, max_attempts, (r.text or '')[:500])
            elif r.status_code >= 400:
                current_app.logger.error('Scoring HTTP error %s: %s', r.status_code, (r.text or '')[:1000])
                raise ScoringUnavailable(f'HTTP {r.status_code}')
            else:
                try:
                    return r.json()
                except ValueError:
                    raise ScoringUnavailable('response body is not JSON')
        if attempt < max_attempts:
            time.sleep(wait + random.uniform(0, backoff * 0.5))
            backoff *= 2

    raise ScoringUnavailable(f'no response after {max_attempts} attempts')


def response_text(jr: Dict[str, Any]) -> str:
    """Concatenate the text parts of the first candidate of a generateContent response."""
    texts = []
    for cand in (jr or {}).get('candidates') or []:
        if not isinstance(cand, dict):
            continue
        content = cand.get('content') or {}
        for part in content.get('parts') or []:
            if isinstance(part, dict) and isinstance(part.get('text'), str):
                texts.append(part['text'])
        if texts:
            break
    return ''.join(texts)


def score(candidate, answers: Dict[str, str]) -> Tuple[Dict[str, Any], str]:
    """Best-effort report plus its provenance (model / partial / fallback)."""
    try:
        model = model_for(candidate)
        base = current_app.config.get('GEMINI_API_BASE', 'https://generativelanguage.googleapis.com/v1beta')
        url = f"{base.rstrip('/')}/models/{model}:generateContent"
        jr = _post_with_retries(url, build_request_body(candidate, answers))
        raw = parse_report_text(response_text(jr))
        if raw is None:
            current_app.logger.warning('Scoring response had no parseable JSON object, using fallback report')
        return normalize_report(raw)
    except ScoringUnavailable as e:
        current_app.logger.warning('Scoring unavailable (%s), using fallback report', e)
    except Exception:
        current_app.logger.exception('Scoring failed unexpectedly, using fallback report')
    return baseline_report(), "fallback"


def analyze(candidate, answers: Dict[str, str]) -> Dict[str, Any]:
    report, _ = score(candidate, answers)
    return report
