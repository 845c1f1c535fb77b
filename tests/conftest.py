import itertools
from datetime import date, datetime, timezone

import pytest
from flask_jwt_extended import create_access_token

from scisubmit import create_app
from scisubmit.extensions import db
from scisubmit.models.enumerations import Role, UserStatus
from scisubmit.services import catalog_service, conference_service, paper_service
from scisubmit.services.paper_service import Upload
from scisubmit.utils.clock import FixedClock, get_clock, install_clock
from scisubmit.utils.model_utils import user_utils

DEFAULT_PASSWORD = "Passw0rd1"
PDF_BYTES = b"%PDF-1.4 test paper"

# Clock starts inside the ongoing conference, before every deadline.
START = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)

CONFERENCE_DATA = {
    "year": 2025,
    "location": "Nitra",
    "university": "UKF",
    "start_date": date(2025, 3, 1),
    "end_date": date(2025, 3, 31),
    "deadline_submission": date(2025, 3, 20),
    "submission_confirmation": date(2025, 3, 22),
    "deadline_review": date(2025, 3, 25),
    "deadline_correction": date(2025, 3, 28),
}


@pytest.fixture(scope='function')
def app(tmp_path):
    """Fresh application and in-memory database per test."""
    app = create_app('testing', {
        'UPLOAD_FOLDER': str(tmp_path / 'uploads'),
        'LOGGING_BASE_DIR': str(tmp_path / 'logs'),
    })
    install_clock(app, FixedClock(START))

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    return app.test_client()


@pytest.fixture(scope='function')
def runner(app):
    return app.test_cli_runner()


@pytest.fixture(scope='function')
def clock(app):
    return get_clock()


@pytest.fixture(scope='function')
def sent_mails(monkeypatch):
    """Capture outgoing mail instead of calling the gateway."""
    outbox = []

    def _fake_send_mail(email, subject, body):
        outbox.append({"to": email, "subject": subject, "body": body})
        return 200

    monkeypatch.setattr("scisubmit.services.notifications.send_mail", _fake_send_mail)
    return outbox


@pytest.fixture(scope='function')
def create_user(app):
    counter = itertools.count(1)

    def _create_user(role=Role.PARTICIPANT, email=None, password=DEFAULT_PASSWORD,
                     status=UserStatus.ACTIVE, is_verified=True, **attrs):
        number = next(counter)
        attrs.setdefault("first_name", f"{role.value.title()}")
        attrs.setdefault("last_name", f"No{number}")
        return user_utils.create_user(
            password=password,
            email=email or f"{role.value}{number}@example.com",
            role=role,
            status=status,
            is_verified=is_verified,
            **attrs,
        )

    return _create_user


@pytest.fixture(scope='function')
def auth_headers(app):
    def _auth_headers(user):
        token = create_access_token(identity=str(user.id), additional_claims={"role": user.role.value})
        return {'Authorization': f'Bearer {token}'}

    return _auth_headers


@pytest.fixture(scope='function')
def admin(create_user):
    return create_user(role=Role.ADMIN, email="admin@example.com")


@pytest.fixture(scope='function')
def participant(create_user):
    return create_user(role=Role.PARTICIPANT, email="author@example.com")


@pytest.fixture(scope='function')
def reviewer(create_user):
    return create_user(role=Role.REVIEWER, email="reviewer@example.com")


@pytest.fixture(scope='function')
def conference(admin):
    return conference_service.create_conference(admin, dict(CONFERENCE_DATA))


@pytest.fixture(scope='function')
def category(admin):
    return catalog_service.create_category(admin, {"name": "Informatika"})


@pytest.fixture(scope='function')
def paper_data(conference, category):
    return {
        "title": "Graph colouring heuristics",
        "abstract": "We compare greedy colouring orders.",
        "keywords": ["graphs", "heuristics"],
        "authors": [{"first_name": "Jana", "last_name": "Novak"}],
        "conference_id": conference.id,
        "category_id": category.id,
    }


@pytest.fixture(scope='function')
def submit_paper(participant, paper_data, sent_mails):
    """Factory: submit a paper as ``participant`` (final unless told otherwise)."""
    def _submit(owner=None, is_final=True, filename="paper.pdf", **overrides):
        data = dict(paper_data, is_final=is_final, **overrides)
        return paper_service.submit(owner or participant, data, Upload(PDF_BYTES, filename))

    return _submit


@pytest.fixture(scope='function')
def paper_under_review(admin, reviewer, submit_paper):
    paper = submit_paper()
    return paper_service.assign_reviewer(admin, paper.id, reviewer.id)
