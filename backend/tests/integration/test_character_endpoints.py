"""
Integration tests for character endpoints.

Tests the character API endpoints at /api/characters including:
- Creating characters with derived resources
- Reading a character and listing a campaign's characters
- Owner and master edit rights
- Owner-only deletion
"""

import pytest
from httpx import AsyncClient
from sqlmodel.ext.asyncio.session import AsyncSession

from letsroll.core.messages import CharacterMessages
from letsroll.models.campaign import CampaignRole
from letsroll.models.character import Character
from letsroll.testing import (
    create_campaign,
    create_campaign_member,
    create_character,
    create_user,
    get_auth_headers,
)


async def _campaign_with_player(session: AsyncSession):
    master = await create_user(session)
    player = await create_user(session)
    campaign = await create_campaign(session, master=master, name="Mesa de Ordem")
    await create_campaign_member(session, campaign, player)
    return master, player, campaign


@pytest.mark.integration
async def test_create_character_computes_resources(client: AsyncClient, session: AsyncSession):
    _, player, campaign = await _campaign_with_player(session)

    response = await client.post(
        "/api/characters",
        headers=get_auth_headers(player),
        json={
            "campaignId": campaign.id,
            "name": "Dante",
            "class": "Ocultista",
            "attributes": {"agilidade": 1, "forca": 0, "intelecto": 3, "presenca": 2, "vigor": 3},
        },
    )

    assert response.status_code == 201
    data = response.json()
    assert data["class"] == "Ocultista"
    assert data["userId"] == player.id
    assert data["campaignId"] == campaign.id
    assert data["intelecto"] == 3
    assert data["pv"] == data["pvMax"] == 13
    assert data["san"] == data["sanMax"] == 10
    assert data["pe"] == data["peMax"] == 5
    assert data["nex"] == 5


@pytest.mark.integration
async def test_create_character_without_attributes(client: AsyncClient, session: AsyncSession):
    _, player, campaign = await _campaign_with_player(session)

    response = await client.post(
        "/api/characters",
        headers=get_auth_headers(player),
        json={"campaignId": campaign.id, "name": "Kaiser", "class": "Combatente"},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["vigor"] == 0
    assert data["pv"] == 10


@pytest.mark.integration
async def test_create_character_missing_fields(client: AsyncClient, session: AsyncSession):
    _, player, campaign = await _campaign_with_player(session)

    response = await client.post(
        "/api/characters",
        headers=get_auth_headers(player),
        json={"campaignId": campaign.id, "name": "Sem classe"},
    )

    assert response.status_code == 400


@pytest.mark.integration
async def test_create_character_outside_campaign_forbidden(client: AsyncClient, session: AsyncSession):
    _, _, campaign = await _campaign_with_player(session)
    outsider = await create_user(session)

    response = await client.post(
        "/api/characters",
        headers=get_auth_headers(outsider),
        json={"campaignId": campaign.id, "name": "Intruso", "class": "Especialista"},
    )

    assert response.status_code == 403
    assert response.json()["detail"] == CharacterMessages.MEMBERSHIP_REQUIRED


@pytest.mark.integration
async def test_read_character_includes_owner_and_campaign(client: AsyncClient, session: AsyncSession):
    master, player, campaign = await _campaign_with_player(session)
    character = await create_character(session, player, campaign, name="Liz")

    response = await client.get(f"/api/characters/{character.id}", headers=get_auth_headers(master))

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Liz"
    assert data["user"] == {"id": player.id, "username": player.username, "avatar": None}
    assert data["campaign"] == {"id": campaign.id, "name": "Mesa de Ordem", "system": "Ordem Paranormal"}


@pytest.mark.integration
async def test_read_character_non_member_forbidden(client: AsyncClient, session: AsyncSession):
    _, player, campaign = await _campaign_with_player(session)
    character = await create_character(session, player, campaign)
    outsider = await create_user(session)

    response = await client.get(f"/api/characters/{character.id}", headers=get_auth_headers(outsider))

    assert response.status_code == 403


@pytest.mark.integration
async def test_read_missing_character(client: AsyncClient, session: AsyncSession):
    user = await create_user(session)

    response = await client.get("/api/characters/999", headers=get_auth_headers(user))

    assert response.status_code == 404
    assert response.json()["detail"] == CharacterMessages.NOT_FOUND


@pytest.mark.integration
async def test_owner_updates_character(client: AsyncClient, session: AsyncSession):
    _, player, campaign = await _campaign_with_player(session)
    character = await create_character(session, player, campaign)

    response = await client.put(
        f"/api/characters/{character.id}",
        headers=get_auth_headers(player),
        json={"pv": 4, "san": 7, "nex": 35, "class": "Especialista"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["pv"] == 4
    assert data["pvMax"] == 10
    assert data["san"] == 7
    assert data["nex"] == 35
    assert data["class"] == "Especialista"


@pytest.mark.integration
async def test_master_updates_player_character(client: AsyncClient, session: AsyncSession):
    master, player, campaign = await _campaign_with_player(session)
    character = await create_character(session, player, campaign)

    response = await client.put(
        f"/api/characters/{character.id}",
        headers=get_auth_headers(master),
        json={"pe": 1},
    )

    assert response.status_code == 200
    assert response.json()["pe"] == 1


@pytest.mark.integration
async def test_other_player_cannot_update_character(client: AsyncClient, session: AsyncSession):
    _, player, campaign = await _campaign_with_player(session)
    character = await create_character(session, player, campaign)
    other = await create_user(session)
    await create_campaign_member(session, campaign, other)

    response = await client.put(
        f"/api/characters/{character.id}",
        headers=get_auth_headers(other),
        json={"pv": 0},
    )

    assert response.status_code == 403
    assert response.json()["detail"] == CharacterMessages.EDIT_DENIED


@pytest.mark.integration
async def test_update_rejects_invalid_nex(client: AsyncClient, session: AsyncSession):
    _, player, campaign = await _campaign_with_player(session)
    character = await create_character(session, player, campaign)

    response = await client.put(
        f"/api/characters/{character.id}",
        headers=get_auth_headers(player),
        json={"nex": 150},
    )

    assert response.status_code == 400


@pytest.mark.integration
async def test_owner_deletes_character(client: AsyncClient, session: AsyncSession):
    _, player, campaign = await _campaign_with_player(session)
    character = await create_character(session, player, campaign)
    character_id = character.id

    response = await client.delete(f"/api/characters/{character_id}", headers=get_auth_headers(player))

    assert response.status_code == 200
    assert response.json()["message"] == CharacterMessages.DELETED
    assert await session.get(Character, character_id) is None


@pytest.mark.integration
async def test_master_cannot_delete_player_character(client: AsyncClient, session: AsyncSession):
    master, player, campaign = await _campaign_with_player(session)
    character = await create_character(session, player, campaign)

    response = await client.delete(f"/api/characters/{character.id}", headers=get_auth_headers(master))

    assert response.status_code == 403
    assert response.json()["detail"] == CharacterMessages.DELETE_DENIED


@pytest.mark.integration
async def test_list_campaign_characters(client: AsyncClient, session: AsyncSession):
    master, player, campaign = await _campaign_with_player(session)
    await create_character(session, player, campaign, name="Primeiro")
    await create_character(session, master, campaign, name="NPC do mestre")
    other_campaign = await create_campaign(session, master=player)
    await create_character(session, player, other_campaign, name="Outra mesa")

    response = await client.get(f"/api/characters/campaign/{campaign.id}", headers=get_auth_headers(player))

    assert response.status_code == 200
    data = response.json()
    assert [c["name"] for c in data] == ["Primeiro", "NPC do mestre"]
    assert data[0]["user"]["id"] == player.id


@pytest.mark.integration
async def test_observer_can_list_campaign_characters(client: AsyncClient, session: AsyncSession):
    _, player, campaign = await _campaign_with_player(session)
    observer = await create_user(session)
    await create_campaign_member(session, campaign, observer, role=CampaignRole.OBSERVER)
    await create_character(session, player, campaign)

    response = await client.get(f"/api/characters/campaign/{campaign.id}", headers=get_auth_headers(observer))

    assert response.status_code == 200
    assert len(response.json()) == 1


@pytest.mark.integration
async def test_list_campaign_characters_non_member_forbidden(client: AsyncClient, session: AsyncSession):
    _, _, campaign = await _campaign_with_player(session)
    outsider = await create_user(session)

    response = await client.get(f"/api/characters/campaign/{campaign.id}", headers=get_auth_headers(outsider))

    assert response.status_code == 403
