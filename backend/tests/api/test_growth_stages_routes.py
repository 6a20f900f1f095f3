"""Growth Stages routes — organization-scoped stage definitions."""

import uuid
from uuid import uuid4

from sqlalchemy import select

from farmops.models import GrowthStage
from tests.api.fakes import auth_headers


async def test_list_without_auth_returns_401(client):
    res = await client.get("/api/growth/stages")
    assert res.status_code == 401


async def test_list_for_user_without_organization_returns_403(client):
    res = await client.get("/api/growth/stages", headers=auth_headers(uuid4()))
    assert res.status_code == 403


async def test_list_returns_own_organization_in_order(client, test_db, org_id, member):
    crop_type = uuid.uuid4()
    test_db.add_all([
        GrowthStage(organization_id=org_id, name="Harvest", order=3, crop_type_id=crop_type),
        GrowthStage(organization_id=org_id, name="Sowing", order=1, crop_type_id=crop_type),
        GrowthStage(organization_id=org_id, name="Flowering", order=2),
        GrowthStage(organization_id=uuid.uuid4(), name="Foreign", order=0),
    ])
    await test_db.commit()

    res = await client.get("/api/growth/stages", headers=auth_headers(member))
    assert res.status_code == 200
    assert [s["name"] for s in res.json()] == ["Sowing", "Flowering", "Harvest"]

    res = await client.get(
        "/api/growth/stages", params={"cropTypeId": str(crop_type)},
        headers=auth_headers(member),
    )
    assert [s["name"] for s in res.json()] == ["Sowing", "Harvest"]


async def test_get_stage(client, stage, member):
    res = await client.get(
        f"/api/growth/stages/{stage.id}", headers=auth_headers(member),
    )
    assert res.status_code == 200
    assert res.json()["name"] == "Germination"


async def test_get_unknown_stage_returns_404(client, member):
    res = await client.get(
        f"/api/growth/stages/{uuid4()}", headers=auth_headers(member),
    )
    assert res.status_code == 404


async def test_get_stage_of_other_organization_returns_403(client, stage, outsider):
    res = await client.get(
        f"/api/growth/stages/{stage.id}", headers=auth_headers(outsider),
    )
    assert res.status_code == 403


async def test_create_stage_returns_201(client, org_id, member):
    res = await client.post(
        "/api/growth/stages", headers=auth_headers(member),
        json={"organization_id": str(org_id), "name": "Tasseling",
              "duration_days": 14, "order": 4},
    )

    assert res.status_code == 201
    body = res.json()
    assert body["organization_id"] == str(org_id)
    assert body["created_by"] == str(member)
    assert body["order"] == 4


async def test_create_stage_for_other_organization_returns_403(client, outsider, org_id):
    res = await client.post(
        "/api/growth/stages", headers=auth_headers(outsider),
        json={"organization_id": str(org_id), "name": "Tasseling"},
    )
    assert res.status_code == 403


async def test_create_stage_without_organization_returns_403(client, member):
    res = await client.post(
        "/api/growth/stages", headers=auth_headers(member),
        json={"name": "Tasseling"},
    )
    assert res.status_code == 403


async def test_update_stage_keeps_organization(client, stage, member, org_id):
    res = await client.put(
        f"/api/growth/stages/{stage.id}", headers=auth_headers(member),
        json={"name": "Emergence", "organization_id": str(uuid4())},
    )

    assert res.status_code == 200
    body = res.json()
    assert body["name"] == "Emergence"
    assert body["organization_id"] == str(org_id)
    assert body["updated_by"] == str(member)


async def test_update_stage_rejects_null_name(client, stage, member):
    res = await client.put(
        f"/api/growth/stages/{stage.id}", headers=auth_headers(member),
        json={"name": None},
    )
    assert res.status_code == 400


async def test_update_stage_of_other_organization_returns_403(client, stage, outsider):
    res = await client.put(
        f"/api/growth/stages/{stage.id}", headers=auth_headers(outsider),
        json={"name": "Emergence"},
    )
    assert res.status_code == 403


async def test_delete_stage(client, stage, member, test_db):
    res = await client.delete(
        f"/api/growth/stages/{stage.id}", headers=auth_headers(member),
    )

    assert res.status_code == 204
    result = await test_db.execute(
        select(GrowthStage).where(GrowthStage.id == stage.id),
    )
    assert result.scalar_one_or_none() is None


async def test_delete_unknown_stage_returns_404(client, member):
    res = await client.delete(
        f"/api/growth/stages/{uuid4()}", headers=auth_headers(member),
    )
    assert res.status_code == 404
