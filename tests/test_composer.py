import pytest

from app.campusflow import create_app
from app.campusflow.db import session_scope
from app.campusflow.errors import NotFound
from app.campusflow.events.composer import EventComposer, default_handlers
from app.campusflow.events.models import Event
from app.campusflow.models import Base, User


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")

    app = create_app()
    Base.metadata.create_all(bind=app.extensions["sqlalchemy_engine"])

    with session_scope(app) as s:
        org = User(email="org@campus.edu", password_hash="x", name="Org", role="organizer")
        s.add(org)
        s.flush()
        s.add(
            Event(
                title="Open Mic",
                slug="open-mic",
                status="published",
                organizer_id=org.id,
                max_participants=20,
                enabled_modules=["registration", "checkin", "livestream", "registration"],
            )
        )
    return app


def test_default_handlers_cover_page_modules():
    assert set(default_handlers()) == {"registration", "schedule", "announcements", "teams", "voting", "leaderboard"}


def test_unknown_and_handlerless_modules_skipped(app):
    with session_scope(app) as s:
        payload = EventComposer().compose(s, "open-mic")
    assert payload["modules"] == {"registration": {"count": 0, "max": 20}}
    assert payload["slug"] == "open-mic"


def test_registered_handler_contributes(app):
    composer = EventComposer()
    composer.register("livestream", lambda s, event: {"url": f"https://stream.example/{event.slug}"})
    with session_scope(app) as s:
        payload = composer.compose(s, "open-mic")
    assert payload["modules"]["livestream"] == {"url": "https://stream.example/open-mic"}
    assert set(payload["modules"]) <= set(composer.handlers)


def test_custom_handler_map_replaces_defaults(app):
    composer = EventComposer({"checkin": lambda s, event: "ready"})
    with session_scope(app) as s:
        payload = composer.compose(s, "open-mic")
    assert payload["modules"] == {"checkin": "ready"}


def test_handlers_view_is_read_only():
    composer = EventComposer()
    with pytest.raises(TypeError):
        composer.handlers["x"] = lambda s, e: None  # type: ignore[index]


def test_unknown_slug(app):
    with session_scope(app) as s, pytest.raises(NotFound):
        EventComposer().compose(s, "missing")
