"""Tests for doctor endpoints."""

from conftest import API


async def test_assignee_accepts(client, doctor, pending_appointment):
    response = await client.put(
        f"{API}/doctor/appointments/{pending_appointment['id']}/accept",
        headers=doctor["headers"],
    )

    assert response.status_code == 200
    assert response.json()["data"]["statut"] == "accepte"


async def test_other_doctor_gets_not_found(client, other_doctor, pending_appointment):
    response = await client.put(
        f"{API}/doctor/appointments/{pending_appointment['id']}/accept",
        headers=other_doctor["headers"],
    )
    assert response.status_code == 404


async def test_unassigned_appointment_is_not_found(client, doctor, requested_appointment):
    response = await client.put(
        f"{API}/doctor/appointments/{requested_appointment['id']}/refuse",
        headers=doctor["headers"],
    )
    assert response.status_code == 404


async def test_refuse(client, doctor, pending_appointment):
    response = await client.put(
        f"{API}/doctor/appointments/{pending_appointment['id']}/refuse",
        headers=doctor["headers"],
    )

    assert response.status_code == 200
    assert response.json()["data"]["statut"] == "refuse"
    assert response.json()["data"]["docteur_id"] is not None


async def test_accept_after_refuse_is_invalid(client, doctor, pending_appointment):
    url = f"{API}/doctor/appointments/{pending_appointment['id']}"
    await client.put(f"{url}/refuse", headers=doctor["headers"])

    response = await client.put(f"{url}/accept", headers=doctor["headers"])

    assert response.status_code == 400
    assert response.json()["error"] == "InvalidTransitionException"


async def test_accept_leaves_availability_alone(client, doctor, pending_appointment, admin):
    await client.put(
        f"{API}/doctor/appointments/{pending_appointment['id']}/accept",
        headers=doctor["headers"],
    )

    doctors = await client.get(f"{API}/admin/doctors", headers=admin["headers"])
    assert doctors.json()["data"][0]["statut"] == "libre"


async def test_set_availability(client, doctor):
    busy = await client.put(
        f"{API}/doctor/availability", json={"statut": "occupe"}, headers=doctor["headers"]
    )
    assert busy.status_code == 200
    assert busy.json()["data"]["statut"] == "occupe"

    invalid = await client.put(
        f"{API}/doctor/availability", json={"statut": "en_vacances"}, headers=doctor["headers"]
    )
    assert invalid.status_code == 400


async def test_calendar_lists_accepted_in_range(client, secretary, doctor, patient):
    ids = {}
    for day in ["2026-09-01", "2026-09-15", "2026-10-01"]:
        created = await client.post(
            f"{API}/secretary/appointments",
            json={
                "patient_id": patient["id"],
                "docteur_id": doctor["id"],
                "date": day,
                "heure": "10:00",
            },
            headers=secretary["headers"],
        )
        ids[day] = created.json()["data"]["id"]

    for day in ["2026-09-01", "2026-09-15"]:
        await client.put(
            f"{API}/doctor/appointments/{ids[day]}/accept", headers=doctor["headers"]
        )

    everything = await client.get(f"{API}/doctor/calendar", headers=doctor["headers"])
    assert [a["date"] for a in everything.json()["data"]] == ["2026-09-01", "2026-09-15"]
    assert {a["patient"]["id"] for a in everything.json()["data"]} == {patient["id"]}

    ranged = await client.get(
        f"{API}/doctor/calendar",
        params={"date_debut": "2026-09-10", "date_fin": "2026-09-30"},
        headers=doctor["headers"],
    )
    assert [a["id"] for a in ranged.json()["data"]] == [ids["2026-09-15"]]


async def test_calendar_rejects_inverted_range(client, doctor):
    response = await client.get(
        f"{API}/doctor/calendar",
        params={"date_debut": "2026-09-30", "date_fin": "2026-09-01"},
        headers=doctor["headers"],
    )
    assert response.status_code == 400


async def test_patient_cannot_accept(client, patient, pending_appointment):
    response = await client.put(
        f"{API}/doctor/appointments/{pending_appointment['id']}/accept",
        headers=patient["headers"],
    )
    assert response.status_code == 403
