"""Ordem Paranormal dev data seeder for Let's Roll.

Usage:
    python seed_dev_data.py          # Create test data
    python seed_dev_data.py --clean  # Remove seeded test data

Designed to run from the backend/ directory (CWD) so letsroll imports resolve.
Saves created IDs to .vscode/.dev_seed_ids.json for cleanup.

Creates a master, two players and an outsider, one campaign with wizard
templates, and a character per player. Every account uses the password
``dados123``.
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

# ---------------------------------------------------------------------------
# Bootstrap: add backend/ to sys.path so `letsroll.*` imports work when invoked
# as `python ../scripts/seed_dev_data.py` from the backend/ directory.
# ---------------------------------------------------------------------------
BACKEND_DIR = Path(__file__).resolve().parent.parent / "backend"
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from letsroll.core.security import get_password_hash  # noqa: E402
from letsroll.db.session import AsyncSessionLocal  # noqa: E402
from letsroll.models.campaign import CampaignMember, CampaignRole  # noqa: E402
from letsroll.models.character import Character  # noqa: E402
from letsroll.models.user import User  # noqa: E402
from letsroll.schemas.campaign import CampaignCreate  # noqa: E402
from letsroll.schemas.character import CharacterAttributes  # noqa: E402
from letsroll.services import campaigns as campaigns_service  # noqa: E402
from letsroll.services import users as users_service  # noqa: E402
from letsroll.services.characters import build_character  # noqa: E402

STATE_FILE = Path(__file__).resolve().parent.parent / ".vscode" / ".dev_seed_ids.json"

PASSWORD = "dados123"

USERS = [
    {"email": "mestre@letsroll.dev", "username": "mestre", "bio": "Narra Ordem Paranormal desde 2020."},
    {"email": "arthur@letsroll.dev", "username": "arthur", "bio": None},
    {"email": "liz@letsroll.dev", "username": "liz", "bio": "Ocultista nas horas vagas."},
    {"email": "forasteiro@letsroll.dev", "username": "forasteiro", "bio": None},
]

CAMPAIGN = {
    "name": "O Segredo na Floresta",
    "description": "Agentes da Ordem investigam desaparecimentos em Carpazinha.",
    "system": "Ordem Paranormal",
    "items": [
        {"title": "Lanterna tática", "properties": [{"name": "Alcance", "description": "Cone de 9m"}]},
        {"title": "Amuleto de Sangue", "properties": [{"name": "Elemento", "description": "Sangue"}]},
    ],
    "abilities": [
        {"title": "Ataque Especial", "properties": [{"name": "Custo", "description": "2 PE"}]},
    ],
    "npcs": [
        {
            "name": "Delegado Ramos",
            "bars": [{"title": "PV", "type": "health"}],
            "properties": [{"name": "Atitude", "description": "Desconfiado"}],
        },
    ],
    "creatures": [
        {
            "name": "Zumbi de Sangue",
            "bars": [{"title": "PV", "type": "health"}, {"title": "Presença", "type": "custom"}],
            "properties": [{"name": "Elemento", "description": "Sangue"}],
        },
    ],
}

CHARACTERS = {
    "arthur": {
        "name": "Arthur Cervero",
        "character_class": "Combatente",
        "attributes": CharacterAttributes(agilidade=2, forca=3, intelecto=1, presenca=1, vigor=2),
    },
    "liz": {
        "name": "Liz Weber",
        "character_class": "Ocultista",
        "attributes": CharacterAttributes(agilidade=1, forca=0, intelecto=3, presenca=3, vigor=1),
    },
}


def _load_state() -> dict:
    if STATE_FILE.exists():
        return json.loads(STATE_FILE.read_text())
    return {}


def _save_state(state: dict) -> None:
    STATE_FILE.parent.mkdir(parents=True, exist_ok=True)
    STATE_FILE.write_text(json.dumps(state, indent=2))


# ---------------------------------------------------------------------------
# Seed
# ---------------------------------------------------------------------------


async def seed() -> None:
    if _load_state():
        print(f"Seed state found at {STATE_FILE}; run with --clean first.")
        return

    state: dict = {"users": [], "campaigns": [], "characters": []}
    hashed = get_password_hash(PASSWORD)

    async with AsyncSessionLocal() as session:
        async with session.begin():
            users: dict[str, User] = {}
            for spec in USERS:
                if await users_service.get_user_by_email(session, spec["email"]):
                    print(f"  Skipping {spec['email']}, already registered")
                    continue
                user = User(
                    email=spec["email"],
                    username=spec["username"],
                    bio=spec["bio"],
                    hashed_password=hashed,
                )
                session.add(user)
                await session.flush()
                users[spec["username"]] = user
                state["users"].append(user.id)
            print(f"  Created {len(users)} users")

            master = users.get("mestre")
            if master is None:
                print("  Master account missing, nothing else to seed")
            else:
                campaign = await campaigns_service.create_campaign(
                    session,
                    creator=master,
                    data=CampaignCreate(**CAMPAIGN),
                )
                state["campaigns"].append(campaign.id)
                print(f"  Created campaign {campaign.name!r}")

                for username, sheet in CHARACTERS.items():
                    player = users.get(username)
                    if player is None:
                        continue
                    session.add(
                        CampaignMember(campaign_id=campaign.id, user_id=player.id, role=CampaignRole.PLAYER)
                    )
                    character = build_character(user_id=player.id, campaign_id=campaign.id, **sheet)
                    session.add(character)
                    await session.flush()
                    state["characters"].append(character.id)
                print(f"  Created {len(state['characters'])} characters")

        # Transaction committed

    _save_state(state)
    print(f"Done! Log in with any seeded email and password {PASSWORD!r}.")


# ---------------------------------------------------------------------------
# Clean
# ---------------------------------------------------------------------------


async def clean() -> None:
    state = _load_state()
    if not state:
        print("No seed state found, nothing to clean.")
        return

    async with AsyncSessionLocal() as session:
        async with session.begin():
            for character_id in state.get("characters", []):
                obj = await session.get(Character, character_id)
                if obj:
                    await session.delete(obj)
            await session.flush()
            print("  Removed characters")

            # Memberships and remaining characters go with the campaign
            for campaign_id in state.get("campaigns", []):
                obj = await campaigns_service.get_campaign(session, campaign_id)
                if obj:
                    await session.delete(obj)
            await session.flush()
            print("  Removed campaigns")

            for user_id in state.get("users", []):
                obj = await session.get(User, user_id)
                if obj:
                    await session.delete(obj)
            await session.flush()
            print("  Removed users")

        # Transaction committed

    STATE_FILE.unlink(missing_ok=True)
    print("Done! All seeded data removed.")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    if "--clean" in sys.argv:
        asyncio.run(clean())
    else:
        asyncio.run(seed())
