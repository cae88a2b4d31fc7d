from datetime import datetime, timedelta

import pytest

from hiregate.errors import NotFoundError, ValidationError
from hiregate.extensions import db
from hiregate.models.assessment import Assessment
from hiregate.models.candidate import Candidate
from hiregate.models.job import Job
from hiregate.services import assessments as store
from hiregate.services.report import baseline_report

from conftest import candidate_payload, make_company

ANSWERS = {"Why do you want this job?": "I like structured work."}


def test_create_stores_pending_assessment(ctx):
    make_company()
    assessment_id = store.create(candidate_payload(phone="55-1234-5678"), ANSWERS)

    asm = store.get(assessment_id)
    assert asm.status == "PENDING"
    assert asm.is_unlocked is False
    assert asm.answers == ANSWERS
    assert asm.candidate_type == "ADMINISTRATIVE"
    assert asm.candidate.phone == "55-1234-5678"


@pytest.mark.parametrize("candidate, answers", [
    (candidate_payload(email=""), ANSWERS),
    (candidate_payload(email="not-an-email"), ANSWERS),
    (candidate_payload(company_code=""), ANSWERS),
    (candidate_payload(type="MANAGER"), ANSWERS),
    (candidate_payload(location={"lat": "north"}), ANSWERS),
    (candidate_payload(), {}),
    (candidate_payload(), {"Q": "   "}),
    (candidate_payload(), {"Q": 42}),
    (None, ANSWERS),
])
def test_create_rejects_invalid_input(ctx, candidate, answers):
    make_company()
    with pytest.raises(ValidationError):
        store.create(candidate, answers)
    assert Assessment.query.count() == 0


def test_create_unknown_company_or_job(ctx):
    make_company()
    with pytest.raises(NotFoundError):
        store.create(candidate_payload(company_code="NOPE-0000"), ANSWERS)
    with pytest.raises(NotFoundError):
        store.create(candidate_payload(), ANSWERS, job_id=999)


def test_create_rejects_job_of_another_company(ctx):
    make_company()
    make_company(code="OTR-5555", name="Otra")
    job = Job(company_code="OTR-5555", title="Guard", type="FIELD")
    db.session.add(job)
    db.session.commit()
    with pytest.raises(ValidationError):
        store.create(candidate_payload(), ANSWERS, job_id=job.id)


def test_resubmission_updates_candidate_by_email(ctx):
    make_company()
    first = store.create(candidate_payload(role="Clerk"), ANSWERS)
    second = store.create(candidate_payload(email="ANA@correo.mx", role="Supervisor", type="FIELD"), ANSWERS)

    assert first != second
    assert Candidate.query.count() == 1
    cand = Candidate.query.one()
    assert cand.role == "Supervisor"
    assert cand.type == "FIELD"
    # each assessment keeps the profile it was answered under
    assert store.get(first).candidate_type == "ADMINISTRATIVE"
    assert store.get(second).candidate_type == "FIELD"


def test_claim_is_exclusive_until_stale(ctx):
    make_company()
    assessment_id = store.create(candidate_payload(), ANSWERS)

    assert store.claim_for_analysis(assessment_id) is True
    assert store.claim_for_analysis(assessment_id) is False
    assert store.get(assessment_id).status == "ANALYZING"

    db.session.execute(
        db.update(Assessment).where(Assessment.id == assessment_id)
        .values(analysis_started_at=datetime.utcnow() - timedelta(hours=2))
    )
    db.session.commit()
    assert store.claim_for_analysis(assessment_id, stale_minutes=30) is True


def test_attach_report_completes_and_overwrites(ctx):
    make_company()
    assessment_id = store.create(candidate_payload(), ANSWERS)
    store.claim_for_analysis(assessment_id)

    first = baseline_report()
    assert store.attach_report(assessment_id, first, "fallback") is True
    second = baseline_report()
    second["scores"]["aptitude"] = 90
    assert store.attach_report(assessment_id, second, "partial") is True

    asm = store.get(assessment_id)
    assert asm.status == "COMPLETED"
    assert asm.report["scores"]["aptitude"] == 90
    assert asm.report_source == "partial"
    assert asm.completed_at is not None


def test_attach_report_missing_or_errored(ctx):
    make_company()
    with pytest.raises(NotFoundError):
        store.attach_report("does-not-exist", baseline_report())

    assessment_id = store.create(candidate_payload(), ANSWERS)
    store.claim_for_analysis(assessment_id)
    assert store.mark_error(assessment_id, "disk full") is True
    assert store.attach_report(assessment_id, baseline_report()) is False
    asm = store.get(assessment_id)
    assert asm.status == "ERROR"
    assert asm.error == "disk full"


def test_read_model_redacts_until_unlocked(ctx):
    make_company()
    assessment_id = store.create(
        candidate_payload(phone="55-1234-5678", location={"lat": 19.4, "lng": -99.1}), ANSWERS)
    store.attach_report(assessment_id, baseline_report(), "fallback")

    row = store.get_for_company("ACM-1234", assessment_id)
    assert row["candidate_name"] == "Ana Lopez"
    assert row["job_title"] == "General"
    assert row["candidate_email"] == store.REDACTED_EMAIL
    assert row["candidate_phone"] == store.REDACTED_PHONE
    assert row["candidate_location"] == store.REDACTED_LOCATION
    assert row["report"] == store.REDACTED_REPORT
    assert "answers" not in row

    db.session.execute(db.update(Assessment).where(Assessment.id == assessment_id).values(is_unlocked=True))
    db.session.commit()
    row = store.get_for_company("ACM-1234", assessment_id)
    assert row["candidate_email"] == "ana@correo.mx"
    assert row["candidate_phone"] == "55-1234-5678"
    assert row["candidate_location"] == {"lat": 19.4, "lng": -99.1}
    assert row["report"]["recommendation"]["decision"] == "VALIDATE"
    assert row["answers"] == ANSWERS


def test_company_only_sees_its_own_assessments(ctx):
    make_company()
    make_company(code="OTR-5555", name="Otra")
    mine = store.create(candidate_payload(), ANSWERS)
    store.create(candidate_payload(email="luis@correo.mx", company_code="OTR-5555"), ANSWERS)

    rows = store.list_for_company("ACM-1234")
    assert [r["id"] for r in rows] == [mine]
    with pytest.raises(NotFoundError):
        store.get_for_company("OTR-5555", mine)


def _add_assessment(created_at, company_code="ACM-1234"):
    db.session.add(Assessment(company_code=company_code, candidate_email="ana@correo.mx",
                              candidate_type="FIELD", answers={"Q": "A"}, created_at=created_at))


def test_weekly_activity_zero_fills_and_labels(ctx):
    make_company()
    make_company(code="OTR-5555", name="Otra")
    store.create(candidate_payload(), ANSWERS)
    Assessment.query.delete()
    # Wednesday 2024-05-15, 10:00
    now = datetime(2024, 5, 15, 10, 0)
    _add_assessment(now - timedelta(hours=1))           # Wed
    _add_assessment(now - timedelta(days=1))            # Tue
    _add_assessment(now - timedelta(days=1, hours=2))   # Tue
    _add_assessment(now - timedelta(days=6, hours=9))   # Thu, first day of the window
    _add_assessment(now - timedelta(days=8))            # outside the window
    _add_assessment(now - timedelta(hours=1), company_code="OTR-5555")
    db.session.commit()

    buckets = store.weekly_activity("ACM-1234", now=now)

    assert [label for label, _ in buckets] == ["Thu", "Fri", "Sat", "Sun", "Mon", "Tue", "Wed"]
    assert dict(buckets) == {"Thu": 1, "Fri": 0, "Sat": 0, "Sun": 0, "Mon": 0, "Tue": 2, "Wed": 1}


def test_weekly_activity_empty_company(ctx):
    make_company()
    buckets = store.weekly_activity("ACM-1234")
    assert len(buckets) == 7
    assert all(count == 0 for _, count in buckets)


def test_list_stale(ctx):
    make_company()
    fresh = store.create(candidate_payload(), ANSWERS)
    old = store.create(candidate_payload(), ANSWERS)
    done = store.create(candidate_payload(), ANSWERS)
    db.session.execute(
        db.update(Assessment).where(Assessment.id.in_([old, done]))
        .values(created_at=datetime.utcnow() - timedelta(hours=3))
    )
    db.session.commit()
    store.attach_report(done, baseline_report(), "fallback")

    assert store.list_stale(30) == [old]
    assert fresh not in store.list_stale(30)


def test_mark_error_only_from_analyzing(ctx):
    make_company()
    pending = store.create(candidate_payload(), ANSWERS)
    assert store.mark_error(pending, "too early") is False
    assert store.get(pending).status == "PENDING"

    done = store.create(candidate_payload(), ANSWERS)
    store.claim_for_analysis(done)
    store.attach_report(done, baseline_report(), "fallback")
    assert store.mark_error(done, "too late") is False
    assert store.get(done).status == "COMPLETED"
    assert store.get(done).error is None
