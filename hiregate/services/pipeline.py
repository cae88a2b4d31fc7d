"""Submission -> background scoring -> report attachment.

``submit`` returns as soon as the PENDING record is committed; scoring runs as
an RQ job and never affects the outcome of the submission.
"""
from typing import Dict, List, Optional

from flask import current_app

from ..extensions import rq
from ..jobs.analyze import analyze_assessment
from . import assessments as store


def dispatch(assessment_id: str):
    try:
        rq.enqueue(analyze_assessment, assessment_id,
                   job_timeout=current_app.config.get('ANALYSIS_JOB_TIMEOUT', 600),
                   description=f'analyze assessment {assessment_id}')
    except Exception:
        current_app.logger.exception('Could not dispatch analysis of assessment %s', assessment_id)


def submit(candidate: Dict, answers: Dict[str, str], job_id=None) -> str:
    assessment_id = store.create(candidate, answers, job_id)
    dispatch(assessment_id)
    return assessment_id


def redispatch_stale(older_than_minutes: Optional[int] = None) -> List[str]:
    """Re-enqueue records stuck in PENDING/ANALYZING. The job's claim drops duplicates."""
    if older_than_minutes is None:
        older_than_minutes = current_app.config.get('STALE_ANALYSIS_MINUTES', 30)
    ids = store.list_stale(older_than_minutes)
    for assessment_id in ids:
        current_app.logger.warning('Re-dispatching stale assessment %s', assessment_id)
        dispatch(assessment_id)
    return ids
