from datetime import datetime

from app.core.security import create_access_token


def auth_headers(user) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


async def _marina(directory):
    port = await directory.port()
    maintenance = await directory.category("Maintenance")
    managers = [
        await directory.provider(ports=[port], capabilities=[maintenance]),
        await directory.provider(ports=[port]),
    ]
    company = await directory.provider(
        ports=[port], capabilities=[maintenance], profile="nautical_company", company_name="Chantier Naval"
    )
    client = await directory.user()
    boat = await directory.boat(client, port)
    return port, maintenance, managers, company, client, boat


async def test_health_ok(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


async def test_requires_bearer_token(client):
    response = await client.post("/api/v1/appointments", json={})
    assert response.status_code == 401


async def test_submit_service_request_is_resolved(client, directory):
    _, maintenance, managers, _, owner, boat = await _marina(directory)

    response = await client.post(
        "/api/v1/service-requests",
        json={"boat_id": boat.id, "service_category_id": maintenance.id, "description": "Engine check", "urgency": "urgent"},
        headers=auth_headers(owner),
    )
    assert response.status_code == 201
    payload = response.json()
    assert payload["resolution"] == "resolved"
    assert payload["request"]["assigned_provider_id"] == managers[0].id
    assert payload["request"]["urgency"] == "urgent"

    again = await client.post(
        f"/api/v1/service-requests/{payload['request']['id']}/resolve", headers=auth_headers(owner)
    )
    assert again.status_code == 409


async def test_submit_service_request_unresolved_is_not_an_error(client, directory):
    maintenance = await directory.category("Maintenance")
    owner = await directory.user()
    boat = await directory.boat(owner, None)

    response = await client.post(
        "/api/v1/service-requests",
        json={"boat_id": boat.id, "service_category_id": maintenance.id, "description": "Cleaning"},
        headers=auth_headers(owner),
    )
    assert response.status_code == 201
    assert response.json()["resolution"] == "unresolved"
    assert response.json()["request"]["assigned_provider_id"] is None


async def test_submit_for_unknown_boat_is_404(client, directory):
    maintenance = await directory.category("Maintenance")
    owner = await directory.user()
    response = await client.post(
        "/api/v1/service-requests",
        json={"boat_id": 404, "service_category_id": maintenance.id, "description": "Cleaning"},
        headers=auth_headers(owner),
    )
    assert response.status_code == 404


async def test_forward_to_eligible_company(client, directory):
    _, maintenance, managers, company, owner, boat = await _marina(directory)
    created = await client.post(
        "/api/v1/service-requests",
        json={"boat_id": boat.id, "service_category_id": maintenance.id, "description": "Rigging"},
        headers=auth_headers(owner),
    )
    request_id = created.json()["request"]["id"]

    companies = await client.get(f"/api/v1/service-requests/{request_id}/companies", headers=auth_headers(managers[0]))
    assert companies.status_code == 200
    assert [c["id"] for c in companies.json()] == [company.id]

    by_owner = await client.post(
        f"/api/v1/service-requests/{request_id}/forward", json={"company_id": company.id}, headers=auth_headers(owner)
    )
    assert by_owner.status_code == 403

    forwarded = await client.post(
        f"/api/v1/service-requests/{request_id}/forward",
        json={"company_id": company.id},
        headers=auth_headers(managers[0]),
    )
    assert forwarded.status_code == 200
    assert forwarded.json()["status"] == "forwarded"
    assert forwarded.json()["forwarded_company_id"] == company.id


async def test_booking_flow(client, directory):
    _, _, managers, company, owner, boat = await _marina(directory)
    manager = managers[0]
    base = {"appointment_date": "2024-06-01", "client_id": owner.id, "boat_id": boat.id}

    first = await client.post(
        "/api/v1/appointments",
        json={**base, "start_time": "09:00", "duration_minutes": 60, "invitee_id": company.id},
        headers=auth_headers(manager),
    )
    assert first.status_code == 201
    first_id = first.json()["id"]
    assert first.json()["status"] == "pending"

    clash = await client.post(
        "/api/v1/appointments",
        json={**base, "start_time": "09:30", "duration_minutes": 30},
        headers=auth_headers(manager),
    )
    assert clash.status_code == 409
    assert clash.json()["detail"]["conflicting_appointment_id"] == first_id

    later = await client.post(
        "/api/v1/appointments",
        json={**base, "start_time": "10:00", "duration_minutes": 30},
        headers=auth_headers(manager),
    )
    assert later.status_code == 201

    by_creator = await client.post(
        f"/api/v1/appointments/{first_id}/respond", json={"decision": "confirmed"}, headers=auth_headers(manager)
    )
    assert by_creator.status_code == 403

    accepted = await client.post(
        f"/api/v1/appointments/{first_id}/respond", json={"decision": "confirmed"}, headers=auth_headers(company)
    )
    assert accepted.status_code == 200
    assert accepted.json()["status"] == "confirmed"

    repeated = await client.post(
        f"/api/v1/appointments/{first_id}/respond", json={"decision": "cancelled"}, headers=auth_headers(company)
    )
    assert repeated.status_code == 409

    planning = await client.get(
        "/api/v1/appointments", params={"date": "2024-06-01"}, headers=auth_headers(manager)
    )
    assert [a["start_time"] for a in planning.json()] == ["09:00:00", "10:00:00"]

    not_creator = await client.delete(f"/api/v1/appointments/{first_id}", headers=auth_headers(company))
    assert not_creator.status_code == 403
    deleted = await client.delete(f"/api/v1/appointments/{first_id}", headers=auth_headers(manager))
    assert deleted.status_code == 204
    gone = await client.get(f"/api/v1/appointments/{first_id}", headers=auth_headers(manager))
    assert gone.status_code == 404


async def test_edit_into_busy_slot_is_rejected(client, directory):
    _, _, managers, _, owner, boat = await _marina(directory)
    manager = managers[0]
    base = {"appointment_date": "2024-06-01", "client_id": owner.id, "boat_id": boat.id}
    morning = await client.post(
        "/api/v1/appointments", json={**base, "start_time": "08:00", "duration_minutes": 60}, headers=auth_headers(manager)
    )
    noon = await client.post(
        "/api/v1/appointments", json={**base, "start_time": "12:00", "duration_minutes": 60}, headers=auth_headers(manager)
    )

    response = await client.patch(
        f"/api/v1/appointments/{morning.json()['id']}",
        json={"start_time": "11:30"},
        headers=auth_headers(manager),
    )
    assert response.status_code == 409
    assert response.json()["detail"]["conflicting_appointment_id"] == noon.json()["id"]

    moved = await client.patch(
        f"/api/v1/appointments/{morning.json()['id']}",
        json={"appointment_date": "2024-06-02", "start_time": "11:30"},
        headers=auth_headers(manager),
    )
    assert moved.status_code == 200
    assert moved.json()["appointment_date"] == "2024-06-02"
    assert datetime.fromisoformat(moved.json()["updated_at"]) >= datetime.fromisoformat(moved.json()["created_at"])


async def test_rejects_tampered_token(client, directory):
    owner = await directory.user()
    token = create_access_token(owner.id)
    response = await client.get(
        "/api/v1/appointments", params={"date": "2024-06-01"}, headers={"Authorization": f"Bearer {token}x"}
    )
    assert response.status_code == 401


async def test_planning_of_another_provider_only_lists_shared_appointments(client, directory):
    _, _, managers, company, owner, boat = await _marina(directory)
    manager, outsider = managers
    base = {"appointment_date": "2024-06-01", "client_id": owner.id, "boat_id": boat.id}
    shared = await client.post(
        "/api/v1/appointments",
        json={**base, "start_time": "09:00", "duration_minutes": 60, "invitee_id": company.id},
        headers=auth_headers(manager),
    )
    await client.post(
        "/api/v1/appointments", json={**base, "start_time": "14:00", "duration_minutes": 30}, headers=auth_headers(manager)
    )
    params = {"date": "2024-06-01", "provider_id": manager.id}

    own = await client.get("/api/v1/appointments", params=params, headers=auth_headers(manager))
    assert len(own.json()) == 2
    invitee_view = await client.get("/api/v1/appointments", params=params, headers=auth_headers(company))
    assert [a["id"] for a in invitee_view.json()] == [shared.json()["id"]]
    outsider_view = await client.get("/api/v1/appointments", params=params, headers=auth_headers(outsider))
    assert outsider_view.status_code == 200
    assert outsider_view.json() == []
