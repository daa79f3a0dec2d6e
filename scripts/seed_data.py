"""Seed the database with demo users, projects, applications and skill swaps."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from teamswap.database import SessionLocal, engine, Base
import teamswap.models  # noqa: F401

from teamswap import constants as c
from teamswap.models.user import User
from teamswap.schemas.application import ApplicationCreate
from teamswap.schemas.project import ProjectCreate
from teamswap.schemas.skill_swap import SkillSwapCreate
from teamswap.schemas.user import ProfileUpdate, SignUpRequest
from teamswap.services import (
    application_service,
    auth_service,
    notification_service,
    profile_service,
    project_service,
    skill_swap_service,
)

DEMO_PASSWORD = "teamswap123"

DEMO_USERS = [
    ("alice@teamswap.dev", "alice", "Alice Kim", ["Python", "FastAPI"], ["React"]),
    ("bob@teamswap.dev", "bob", "Bob Lee", ["React", "TypeScript"], ["Go"]),
    ("carol@teamswap.dev", "carol", "Carol Park", ["Go", "Kubernetes"], ["Figma"]),
    ("dave@teamswap.dev", "dave", "Dave Choi", ["Figma", "UX Research"], ["Python"]),
]


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if db.query(User).count() > 0:
            print("Database already seeded. Skipping.")
            return

        # Users (credentials + profile)
        users = {}
        for email, username, full_name, offered, learning in DEMO_USERS:
            user = auth_service.sign_up(
                db,
                SignUpRequest(email=email, password=DEMO_PASSWORD, username=username, full_name=full_name),
            )
            profile_service.update_profile(
                db, user, ProfileUpdate(skills_offered=offered, skills_learning=learning),
            )
            notification_service.create_notification(
                db, user.user_id, c.NOTI_SYSTEM, "환영합니다", "TeamSwap 에 가입하신 것을 환영합니다.",
            )
            users[username] = user

        # Projects
        chat = project_service.create_project(db, ProjectCreate(
            title="Chat App",
            description="Realtime chat service with a Go backend",
            category="Web Development",
            required_skills=["Go", "React"],
            tags=["realtime"],
            max_members=3,
        ), users["alice"])
        vision = project_service.create_project(db, ProjectCreate(
            title="Image Tagger",
            description="Automatic tagging for photo libraries",
            category="AI/ML",
            required_skills=["Python", "PyTorch"],
            difficulty_level="advanced",
            max_members=2,
        ), users["carol"])

        # Applications: bob is accepted into the chat app, dave waits on the tagger
        bob_app = application_service.apply(
            db, chat.project_id, ApplicationCreate(message="React 담당하고 싶습니다.", skills_offered=["React"]),
            users["bob"],
        )
        application_service.review(db, bob_app.application_id, c.APPLICATION_ACCEPTED, users["alice"], "환영합니다!")
        application_service.apply(
            db, vision.project_id, ApplicationCreate(message="UX 쪽을 도울 수 있어요.", skills_offered=["Figma"]),
            users["dave"],
        )

        # Skill swaps
        swaps = [
            skill_swap_service.propose(db, SkillSwapCreate(
                offered_skill="Python", requested_skill="React", message="주 1회 페어 프로그래밍",
            ), users["alice"]),
            skill_swap_service.propose(db, SkillSwapCreate(
                offered_skill="Figma", requested_skill="Python", swap_type="mentorship", session_duration=90,
            ), users["dave"]),
        ]
        skill_swap_service.respond(db, swaps[0].swap_id, "accept", users["bob"])

        print("Seed data inserted successfully.")
        print(f"  Users: {len(users)}")
        print("  Projects: 2")
        print("  Applications: 2")
        print(f"  Skill swaps: {len(swaps)}")
        print()
        print("Test login credentials:")
        for email, username, *_ in DEMO_USERS:
            print(f"  email={email}  password={DEMO_PASSWORD}  username={username}")

    except Exception as e:
        db.rollback()
        raise e
    finally:
        db.close()


if __name__ == "__main__":
    seed()
