"""Create demo console accounts, an application and a few releases.

Run against an empty development database:

    python -m scripts.seed_demo_data
"""

import asyncio
import secrets

from sqlalchemy import select

from app.core.security import hash_password
from app.db.init_db import create_tables
from app.db.session import AsyncSessionLocal
from app.models.application import Application, ApplicationMember, MemberRole
from app.models.condition import Condition
from app.models.release import Release
from app.models.user import User

DEMO_ACCOUNTS = [
    {"email": "owner@demo.releases.local", "name": "Demo Owner", "superadmin": False},
    {"email": "member@demo.releases.local", "name": "Demo Member", "superadmin": False},
]

DEMO_APPLICATION = {"name": "Demo Driver App", "package_name": "com.example.demo.driver"}

# (name, rules) pairs
DEMO_CONDITIONS = [
    ("DACH rollout", {"countries": ["DE", "AT", "CH"]}),
    ("Pilot company", {"company_ids": [1001]}),
    ("Beta drivers", {"driver_ids": ["4711", "4712"]}),
]

# (version name, version code, status, condition names)
DEMO_RELEASES = [
    ("3.0.0", "300", "active", []),
    ("3.1.0", "310", "active", ["DACH rollout"]),
    ("3.2.0-beta", "320", "active", ["Pilot company", "Beta drivers"]),
    ("2.9.0", "290", "deprecated", []),
]


def generate_temp_password() -> str:
    """Generate a temporary password for demo accounts."""
    return f"Demo{secrets.token_urlsafe(8)}!"


async def create_accounts(session) -> tuple[list[dict], list[User]]:
    created = []
    users = []

    for account in DEMO_ACCOUNTS:
        existing = await session.scalar(select(User).where(User.email == account["email"]))
        if existing:
            users.append(existing)
            continue

        temp_password = generate_temp_password()
        user = User(
            email=account["email"],
            display_name=account["name"],
            hashed_password=hash_password(temp_password),
            is_superadmin=account["superadmin"],
            is_active=True,
        )
        session.add(user)
        users.append(user)
        created.append({"email": account["email"], "password": temp_password})

    await session.flush()
    return created, users


async def create_application(session, owner: User, member: User) -> Application | None:
    existing = await session.scalar(
        select(Application).where(
            Application.package_name == DEMO_APPLICATION["package_name"]
        )
    )
    if existing:
        return None

    application = Application(owner_id=owner.id, **DEMO_APPLICATION)
    application.members.extend([
        ApplicationMember(user_id=owner.id, role=MemberRole.ADMIN.value),
        ApplicationMember(user_id=member.id, role=MemberRole.USER.value),
    ])
    session.add(application)
    await session.flush()

    conditions = {}
    for name, rules in DEMO_CONDITIONS:
        condition = Condition(application_id=application.id, name=name, **rules)
        session.add(condition)
        conditions[name] = condition

    for version_name, version_code, status, condition_names in DEMO_RELEASES:
        session.add(
            Release(
                application_id=application.id,
                version_name=version_name,
                version_code=version_code,
                status=status,
                conditions=[conditions[n] for n in condition_names],
            )
        )

    await session.flush()
    return application


def print_summary(created: list[dict], application: Application | None) -> None:
    print("=" * 60)
    print("DEMO DATA")
    print("=" * 60)
    print()

    if created:
        print("NEW ACCOUNTS:")
        print("-" * 60)
        print(f"{'Email':<40} {'Password':<20}")
        print("-" * 60)
        for acc in created:
            print(f"{acc['email']:<40} {acc['password']:<20}")
        print()
        print("Save these passwords - they are shown only once.")
        print()

    if application:
        print(f"Application: {application.name} ({application.package_name})")
        print(f"App ID:      {application.id}")
        print(f"Releases:    {len(DEMO_RELEASES)}")
    else:
        print("Demo application already exists, skipped.")
    print()


async def main() -> None:
    await create_tables()

    async with AsyncSessionLocal() as session:
        created, users = await create_accounts(session)
        application = await create_application(session, users[0], users[1])
        await session.commit()

    print_summary(created, application)


if __name__ == "__main__":
    asyncio.run(main())
