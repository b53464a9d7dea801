"""Pytest configuration for ensuring project modules resolve correctly."""

from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest

from exam_app import create_app
from exam_app.extensions import db
from exam_app.models import (
    AudioQuestion,
    AudioTopic,
    EmailVerificationTicket,
    Question,
    Subject,
    Topic,
    User,
    UserProfile,
)
from exam_app.services import mail_service
from exam_app.utils.security import hash_password


def _create_user(email: str, password: str, **fields) -> User:
    user = User(
        email=email,
        password_hash=hash_password(password),
        is_email_verified=True,
        **fields,
    )
    user.profile = UserProfile(name=fields.get("role", "student").title())
    db.session.add(user)
    db.session.commit()
    return user


def _login(client, email: str, password: str) -> str:
    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["access_token"]


@pytest.fixture()
def app_with_db():
    app = create_app("test")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app_with_db):
    return app_with_db.test_client()


@pytest.fixture()
def outbox(monkeypatch):
    """Capture outgoing mail instead of talking to SMTP."""

    sent: list[dict] = []

    def fake_send_email(**kwargs):
        sent.append(kwargs)
        return f"<msg-{len(sent)}@test>"

    monkeypatch.setattr(mail_service, "send_email", fake_send_email)
    return sent


@pytest.fixture()
def student_token(app_with_db, client):
    email = "student@example.com"
    resp = client.post("/api/auth/register/request-code", json={"email": email})
    assert resp.status_code == 200
    ticket = EmailVerificationTicket.query.filter_by(email=email).first()
    register = client.post(
        "/api/auth/register",
        json={"email": email, "password": "StrongPass123!", "code": ticket.code},
    )
    assert register.status_code == 201
    return register.get_json()["access_token"]


@pytest.fixture()
def subscriber_token(app_with_db, client):
    _create_user(
        "subscriber@example.com",
        "SubscriberPass123!",
        role="student",
        subscription_status="active",
        stripe_customer_id="cus_subscriber",
    )
    return _login(client, "subscriber@example.com", "SubscriberPass123!")


@pytest.fixture()
def admin_token(app_with_db, client):
    _create_user("admin@example.com", "AdminPass123!", role="admin")
    return _login(client, "admin@example.com", "AdminPass123!")


@pytest.fixture()
def catalog(app_with_db):
    """A small catalogue: Higher Maths with written questions, French with audio."""

    maths = Subject(name="Mathematics", level="Higher")
    french = Subject(name="French", level="Higher")
    db.session.add_all([maths, french])
    db.session.flush()

    algebra = Topic(name="Algebra", subject_id=maths.id)
    geometry = Topic(name="Geometry", subject_id=maths.id)
    listening = AudioTopic(name="Daily life", subject_id=french.id)
    db.session.add_all([algebra, geometry, listening])
    db.session.flush()

    questions = [
        Question(subject_id=maths.id, year=2023, paper_number=1, question_number=1,
                 question_parts=["a"], full_text="Solve the quadratic equation", topics=[algebra]),
        Question(subject_id=maths.id, year=2023, paper_number=1, question_number=2,
                 question_parts=[], full_text="Prove the circle theorem", topics=[geometry]),
        Question(subject_id=maths.id, year=2023, paper_number=1, question_number=1,
                 exam_type="deferred", question_parts=[], full_text="Quadratic roots", topics=[algebra]),
        Question(subject_id=maths.id, year=2022, paper_number=2, question_number=4,
                 question_parts=["a", "b"], full_text="Area of a triangle", topics=[geometry]),
        Question(subject_id=maths.id, year=2021, paper_number=1, question_number=3,
                 question_parts=[], full_text="Complex numbers and algebra", topics=[algebra]),
    ]
    audio = AudioQuestion(
        subject_id=french.id,
        year=2023,
        question_number=1,
        question_parts=[],
        audio_url="https://cdn.example.com/fr-2023-1.mp3",
        transcript_url="https://cdn.example.com/fr-2023-1.json",
        topics=[listening],
    )
    db.session.add_all(questions + [audio])
    db.session.commit()
    return {
        "maths": maths.id,
        "french": french.id,
        "algebra": algebra.id,
        "geometry": geometry.id,
        "audio_topic": listening.id,
        "questions": [q.id for q in questions],
        "audio": audio.id,
    }
