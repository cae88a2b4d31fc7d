from flask import current_app
from . import run_with_app_context
from ..services import assessments as store
from ..services import scoring
from ..services.report import baseline_report


def _scoring_input(asm):
    cand = asm.candidate
    return {
        "name": cand.name if cand else None,
        "role": cand.role if cand else None,
        "location": cand.location if cand else None,
        # the profile mode the candidate answered under, not a later re-submission's
        "type": asm.candidate_type,
    }


def _run_analyze_assessment(assessment_id: str):
    if not store.claim_for_analysis(assessment_id):
        current_app.logger.info('Assessment %s already claimed or finished, skipping', assessment_id)
        return None

    asm = store.get(assessment_id)
    try:
        report, source = scoring.score(_scoring_input(asm), dict(asm.answers or {}))
    except Exception:
        current_app.logger.exception('Scoring crashed for assessment %s, attaching fallback report', assessment_id)
        report, source = baseline_report(), "fallback"

    try:
        store.attach_report(assessment_id, report, source)
    except Exception as e:
        current_app.logger.exception('Could not save report for assessment %s', assessment_id)
        try:
            store.mark_error(assessment_id, f'report could not be saved: {e}', report, source)
        except Exception:
            current_app.logger.exception('Could not mark assessment %s as ERROR', assessment_id)
        return None

    current_app.logger.info('Assessment %s completed (report source: %s)', assessment_id, source)
    return assessment_id


def analyze_assessment(assessment_id: str):
    """RQ entrypoint: claim, score and attach the report of one assessment."""
    return run_with_app_context(_run_analyze_assessment, assessment_id)
