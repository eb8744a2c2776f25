"""
Demo data for local development: users, events across every lifecycle state,
registrations, schedule, announcements, participation history, event roles.

Wipes existing rows first. Refuses to run when ENV is production.

Usage:
  python scripts/seed_demo.py
"""

from __future__ import annotations

import os
import sys
from datetime import datetime
from pathlib import Path

from werkzeug.security import generate_password_hash

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.campusflow.models import AuditEvent, Base, ModuleRegistryEntry, ParticipationLog, User
from app.campusflow.events.models import Event, EventRole
from app.campusflow.modules.announcements.models import Announcement
from app.campusflow.modules.registration.models import Registration
from app.campusflow.modules.schedule.models import ScheduleItem
from app.campusflow.modules.teams.models import Team, TeamMember
from app.campusflow.modules.voting.models import Vote, VotePoll
from app.campusflow.platform.modules import default_catalog, sync_registry
from app.campusflow.platform.themes import THEME_PRESETS, snapshot_theme
from scripts._db_utils import create_script_engine, resolve_database_url, script_session

DEMO_PASSWORD = "pass123"

USERS = {
    "admin": ("admin@campus.edu", "Platform Admin", "admin", "IT", None, [], 0),
    "priya": ("priya@campus.edu", "Priya Sharma", "organizer", "CSE", 3, ["tech", "hackathons"], 250),
    "rahul": ("rahul@campus.edu", "Rahul Mehta", "organizer", "ECE", 4, ["cultural", "music"], 180),
    "ananya": ("ananya@campus.edu", "Ananya Verma", "student", "CSE", 2, ["tech", "ai", "hackathons", "workshops"], 120),
    "karthik": ("karthik@campus.edu", "Karthik Nair", "student", "ME", 3, ["sports", "cultural", "music"], 80),
    "sara": ("sara@campus.edu", "Sara Khan", "student", "CSE", 1, ["tech", "design", "workshops"], 45),
    "dev": ("dev@campus.edu", "Dev Patel", "student", "ECE", 2, ["hackathons", "robotics", "tech"], 200),
    "nisha": ("nisha@campus.edu", "Nisha Reddy", "student", "MBA", 1, ["management", "cultural", "sports"], 60),
}

EVENTS = {
    "hackathon": dict(
        title="HackCampus 2026",
        slug="hackcampus-2026",
        description="The flagship 36-hour hackathon. Build, break, innovate. Open to all departments.",
        short_description="36-hour campus hackathon.",
        event_type="hackathon",
        status="published",
        organizer="priya",
        department="CSE",
        start_date=datetime(2026, 3, 15, 9),
        end_date=datetime(2026, 3, 16, 21),
        venue="Main Auditorium + CS Labs",
        max_participants=200,
        tags=["hackathon", "coding", "ai", "web", "mobile"],
        theme="hackathon",
        enabled_modules=["registration", "schedule", "announcements", "teams", "leaderboard", "checkin"],
        module_configs={
            "teams": {"max_team_size": 4, "min_team_size": 2, "allow_solo": False},
            "registration": {"max_participants": 200, "waitlist_enabled": True},
            "leaderboard": {"show_scores": True, "update_frequency": "hourly"},
        },
    ),
    "techfest": dict(
        title="TechVista 2026",
        slug="techvista-2026",
        description="Annual technical festival featuring workshops, talks, competitions, and exhibitions.",
        short_description="Annual tech fest.",
        event_type="fest",
        status="published",
        organizer="priya",
        department="CSE",
        start_date=datetime(2026, 4, 10, 10),
        end_date=datetime(2026, 4, 12, 18),
        venue="Central Campus",
        max_participants=500,
        tags=["fest", "technology", "workshops", "competitions"],
        theme="default",
        enabled_modules=["registration", "schedule", "announcements", "voting", "checkin"],
        module_configs={
            "registration": {"max_participants": 500, "waitlist_enabled": True},
            "voting": {"anonymous": True, "show_results_live": True},
        },
    ),
    "cultural": dict(
        title="Rang Tarang",
        slug="rang-tarang-2026",
        description="The annual cultural extravaganza. Dance, music, drama and art under one roof.",
        short_description="Cultural fest.",
        event_type="cultural",
        status="published",
        organizer="rahul",
        department="Cultural Committee",
        start_date=datetime(2026, 2, 28, 16),
        end_date=datetime(2026, 3, 2, 22),
        venue="Open Air Theatre + Mini Audi",
        max_participants=800,
        tags=["cultural", "dance", "music", "drama", "art"],
        theme="cultural",
        enabled_modules=["registration", "schedule", "announcements", "voting"],
        module_configs={
            "registration": {"max_participants": 800},
            "voting": {"anonymous": False, "show_results_live": True},
        },
    ),
    "workshop": dict(
        title="AI/ML Bootcamp",
        slug="aiml-bootcamp-2026",
        description="Intensive 2-day bootcamp on Machine Learning fundamentals with hands-on sessions.",
        short_description="2-day hands-on AI/ML workshop.",
        event_type="workshop",
        status="draft",
        organizer="priya",
        department="CSE",
        start_date=datetime(2026, 5, 1, 9),
        end_date=datetime(2026, 5, 2, 17),
        venue="CS Lab 1 & 2",
        max_participants=60,
        tags=["workshop", "ai", "ml", "python", "data-science"],
        theme="workshop",
        enabled_modules=["registration", "schedule", "announcements", "checkin"],
        module_configs={"registration": {"max_participants": 60, "requires_approval": True}},
    ),
    "sports": dict(
        title="Campus Premier League",
        slug="campus-premier-league-2026",
        description="Inter-department cricket tournament. 8 teams, 2 weeks, 1 champion.",
        short_description="Inter-department cricket tournament.",
        event_type="sports",
        status="archived",
        organizer="rahul",
        department="Sports Committee",
        start_date=datetime(2025, 11, 1, 8),
        end_date=datetime(2025, 11, 14, 18),
        venue="Cricket Ground",
        max_participants=120,
        tags=["sports", "cricket", "tournament", "inter-department"],
        theme="sports",
        enabled_modules=["registration", "schedule", "announcements", "teams", "leaderboard"],
        module_configs={
            "teams": {"max_team_size": 15, "min_team_size": 11, "allow_solo": False},
            "leaderboard": {"show_scores": True, "update_frequency": "manual"},
        },
    ),
}


def _clear(s) -> None:
    # children before parents
    for model in (
        Vote,
        VotePoll,
        ScheduleItem,
        Announcement,
        EventRole,
        TeamMember,
        Registration,
        Team,
        ParticipationLog,
        AuditEvent,
        Event,
        User,
        ModuleRegistryEntry,
    ):
        s.query(model).delete()


def seed_demo(database_url: str) -> None:
    engine = create_script_engine(database_url)
    try:
        Base.metadata.create_all(bind=engine)
    finally:
        engine.dispose()

    with script_session(database_url) as s:
        print("[seed] Clearing existing data...", flush=True)
        _clear(s)
        s.flush()

        print("[seed] Registering platform modules...", flush=True)
        n_modules = sync_registry(s, default_catalog())

        print(f"[seed] Creating users (password: {DEMO_PASSWORD!r})...", flush=True)
        pw_hash = generate_password_hash(DEMO_PASSWORD)
        users: dict[str, User] = {}
        for key, (email, name, role, dept, year, interests, score) in USERS.items():
            users[key] = User(
                email=email,
                password_hash=pw_hash,
                name=name,
                role=role,
                department=dept,
                year=year,
                interests=interests,
                engagement_score=score,
            )
            s.add(users[key])
        s.flush()

        print("[seed] Creating events...", flush=True)
        events: dict[str, Event] = {}
        for key, spec in EVENTS.items():
            data = dict(spec)
            organizer = users[data.pop("organizer")]
            theme = snapshot_theme(THEME_PRESETS[data.pop("theme")])
            events[key] = Event(organizer_id=organizer.id, theme_config=theme, **data)
            s.add(events[key])
        s.flush()

        print("[seed] Registering students...", flush=True)
        for event_key, user_key, status in (
            ("hackathon", "ananya", "registered"),
            ("hackathon", "dev", "registered"),
            ("cultural", "karthik", "registered"),
            ("cultural", "nisha", "registered"),
            ("techfest", "ananya", "registered"),
            ("techfest", "sara", "registered"),
            ("sports", "karthik", "attended"),
        ):
            s.add(Registration(event_id=events[event_key].id, user_id=users[user_key].id, status=status))

        print("[seed] Adding schedule items...", flush=True)
        hack = events["hackathon"]
        for order, (title, desc, start, end, venue, speaker) in enumerate(
            (
                ("Opening Ceremony", "Welcome and rules briefing", datetime(2026, 3, 15, 9), datetime(2026, 3, 15, 10), "Main Auditorium", "Dean of Engineering"),
                ("Hacking Begins", "Teams start building", datetime(2026, 3, 15, 10), None, "CS Labs", None),
                ("Midnight Snacks + Mentor Session", "Refuel and get mentorship", datetime(2026, 3, 16, 0), datetime(2026, 3, 16, 1), "CS Lobby", None),
                ("Final Presentations", "Demo your project to judges", datetime(2026, 3, 16, 17), datetime(2026, 3, 16, 20), "Main Auditorium", None),
                ("Awards & Closing", "Winners announced", datetime(2026, 3, 16, 20), datetime(2026, 3, 16, 21), "Main Auditorium", "Chief Guest"),
            ),
            start=1,
        ):
            s.add(
                ScheduleItem(
                    event_id=hack.id,
                    title=title,
                    description=desc,
                    start_time=start,
                    end_time=end,
                    venue=venue,
                    speaker=speaker or "",
                    sort_order=order,
                )
            )

        print("[seed] Adding announcements...", flush=True)
        for event_key, title, body, priority in (
            ("hackathon", "Registration Open!", "HackCampus 2026 registrations are now live. Form your teams and register before March 10th.", "high"),
            ("hackathon", "Problem Statements Released", "Check the event page for this year's problem statements.", "normal"),
            ("cultural", "Auditions Schedule", "Dance and drama auditions are scheduled for Feb 20-22.", "normal"),
        ):
            ev = events[event_key]
            s.add(Announcement(event_id=ev.id, title=title, body=body, priority=priority, created_by_user_id=ev.organizer_id))

        print("[seed] Adding historical participation...", flush=True)
        sports = events["sports"]
        for user_key, year, event_type, role, points in (
            ("ananya", "2024-25", "sports", "participant", 20),
            ("dev", "2024-25", "hackathon", "participant", 50),
            ("karthik", "2024-25", "cultural", "volunteer", 30),
            ("ananya", "2023-24", "workshop", "participant", 15),
        ):
            s.add(
                ParticipationLog(
                    user_id=users[user_key].id,
                    event_id=sports.id,
                    academic_year=year,
                    event_type=event_type,
                    role=role,
                    points_earned=points,
                )
            )

        print("[seed] Assigning event roles...", flush=True)
        for event_key, user_key, role in (
            ("hackathon", "priya", "head"),
            ("techfest", "priya", "head"),
            ("workshop", "priya", "head"),
            ("cultural", "rahul", "head"),
            ("sports", "rahul", "head"),
            ("hackathon", "dev", "volunteer"),
        ):
            s.add(EventRole(event_id=events[event_key].id, user_id=users[user_key].id, role=role))

    print("[seed] Done.")
    print(f"  - {n_modules} modules registered")
    print(f"  - {len(USERS)} users created")
    print(f"  - {len(EVENTS)} events created")


def main() -> None:
    env = (os.environ.get("ENV") or "").strip().lower()
    if env in ("prod", "production"):
        raise SystemExit("Refusing to seed demo data in production.")
    db_url = resolve_database_url()
    seed_demo(db_url)


if __name__ == "__main__":
    main()
