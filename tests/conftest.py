import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from hiregate import create_app
from hiregate.extensions import db
from hiregate.models.company import Company, PLAN_FREE


@pytest.fixture
def app(tmp_path):
    app = create_app("config.TestingConfig", {
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'test.db'}",
    })
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    """App context for service-level tests. HTTP tests use ``client`` without it."""
    with app.app_context():
        yield app
        db.session.remove()


@pytest.fixture
def client(app):
    return app.test_client()


def make_company(code="ACM-1234", credits=0, plan=PLAN_FREE, verified=True, name="Acme"):
    company = Company(code=code, name=name, email=f"hr@{code.lower()}.mx", credits=credits,
                      plan=plan, is_verified=verified)
    db.session.add(company)
    db.session.commit()
    return company


def candidate_payload(email="ana@correo.mx", company_code="ACM-1234", type="ADMINISTRATIVE", **extra):
    data = {"email": email, "name": "Ana Lopez", "company_code": company_code, "type": type}
    data.update(extra)
    return data
