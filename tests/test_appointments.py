"""Tests for patient appointment endpoints."""

from conftest import API


async def test_request_roundtrip(client, patient, appointment_data):
    response = await client.post(
        f"{API}/appointments", json=appointment_data, headers=patient["headers"]
    )

    assert response.status_code == 201
    created = response.json()["data"]
    assert created["statut"] == "en_attente_secretaire"
    assert created["docteur_id"] is None
    assert created["patient_id"] == patient["id"]

    mine = await client.get(f"{API}/appointments/mine", headers=patient["headers"])
    assert mine.status_code == 200
    (listed,) = mine.json()["data"]
    assert listed["id"] == created["id"]
    assert listed["date"] == "2026-02-15"
    assert listed["heure"] == "10:00"
    assert listed["symptomes"] == "chest pain"


async def test_request_rejects_bad_time(client, patient):
    response = await client.post(
        f"{API}/appointments",
        json={"date": "2026-02-15", "heure": "25:00"},
        headers=patient["headers"],
    )
    assert response.status_code == 400


async def test_only_patients_request(client, secretary, appointment_data):
    response = await client.post(
        f"{API}/appointments", json=appointment_data, headers=secretary["headers"]
    )
    assert response.status_code == 403


async def test_mine_is_ordered_and_filterable(client, patient):
    for day, hour in [("2026-03-02", "09:00"), ("2026-03-01", "14:30"), ("2026-03-01", "08:15")]:
        await client.post(
            f"{API}/appointments", json={"date": day, "heure": hour}, headers=patient["headers"]
        )

    mine = await client.get(f"{API}/appointments/mine", headers=patient["headers"])
    slots = [(a["date"], a["heure"]) for a in mine.json()["data"]]
    assert slots == [("2026-03-01", "08:15"), ("2026-03-01", "14:30"), ("2026-03-02", "09:00")]

    accepted = await client.get(
        f"{API}/appointments/mine", params={"statut": "accepte"}, headers=patient["headers"]
    )
    assert accepted.json()["data"] == []


async def test_mine_for_doctor_lists_assigned(client, doctor, pending_appointment):
    response = await client.get(f"{API}/appointments/mine", headers=doctor["headers"])

    assert [a["id"] for a in response.json()["data"]] == [pending_appointment["id"]]


async def test_secretary_cannot_use_mine(client, secretary):
    response = await client.get(f"{API}/appointments/mine", headers=secretary["headers"])
    assert response.status_code == 403


async def test_cancel_twice_is_conflict(client, patient, requested_appointment):
    url = f"{API}/appointments/{requested_appointment['id']}"

    first = await client.delete(url, headers=patient["headers"])
    assert first.status_code == 200
    assert first.json()["data"]["statut"] == "annule"

    second = await client.delete(url, headers=patient["headers"])
    assert second.status_code == 409
    assert second.json()["error"] == "AlreadyCancelledException"


async def test_cancel_of_someone_elses_appointment(client, requested_appointment):
    other = await client.post(
        f"{API}/accounts/patient",
        json={
            "nom": "Autre",
            "prenom": "Jeanne",
            "email": "jeanne@patients.example.com",
            "mot_de_passe": "jeanne-pass",
        },
    )
    assert other.status_code == 201
    login = await client.post(
        f"{API}/accounts/patient/login",
        json={"email": "jeanne@patients.example.com", "mot_de_passe": "jeanne-pass"},
    )
    headers = {"Authorization": f"Bearer {login.json()['data']['token']}"}

    response = await client.delete(
        f"{API}/appointments/{requested_appointment['id']}", headers=headers
    )
    assert response.status_code == 404


async def test_patient_can_cancel_accepted(client, patient, doctor, pending_appointment):
    await client.put(
        f"{API}/doctor/appointments/{pending_appointment['id']}/accept",
        headers=doctor["headers"],
    )

    response = await client.delete(
        f"{API}/appointments/{pending_appointment['id']}", headers=patient["headers"]
    )

    assert response.status_code == 200
    assert response.json()["data"]["statut"] == "annule"


async def test_doctor_directory(client, patient, doctor, other_doctor):
    await client.put(
        f"{API}/doctor/availability", json={"statut": "occupe"}, headers=doctor["headers"]
    )

    response = await client.get(f"{API}/patient/doctors", headers=patient["headers"])

    assert response.status_code == 200
    data = response.json()["data"]
    assert (data["total"], data["libres"], data["occupes"]) == (2, 1, 1)
    assert [d["id"] for d in data["docteurs"]] == [other_doctor["id"], doctor["id"]]
