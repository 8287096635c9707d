from datetime import date, time

from aminius.domain.appointments.repository import AppointmentRepository

DAY = date(2024, 6, 1)


def _book(db_session, agent_id, client_id, start, end, **extra):
    return AppointmentRepository.create(
        db_session,
        agent_id,
        client_id=client_id,
        title="Policy Review",
        appointment_date=extra.pop("appointment_date", DAY),
        start_time=start,
        end_time=end,
        type="Meeting",
        **extra,
    )


def test_overlapping_interval_conflicts(db_session, agent_id, client_id):
    _book(db_session, agent_id, client_id, time(9, 0), time(10, 0))

    conflicts = AppointmentRepository.find_conflicts(db_session, agent_id, DAY, time(9, 30), time(10, 30))

    assert len(conflicts) == 1


def test_touching_intervals_do_not_conflict(db_session, agent_id, client_id):
    _book(db_session, agent_id, client_id, time(9, 0), time(10, 0))

    conflicts = AppointmentRepository.find_conflicts(db_session, agent_id, DAY, time(10, 0), time(11, 0))

    assert conflicts == []


def test_excluding_the_appointment_itself(db_session, agent_id, client_id):
    existing = _book(db_session, agent_id, client_id, time(9, 0), time(10, 0))

    conflicts = AppointmentRepository.find_conflicts(
        db_session, agent_id, DAY, time(9, 0), time(10, 0), existing.appointment_id
    )

    assert conflicts == []


def test_cancelled_deleted_and_other_days_are_ignored(db_session, agent_id, client_id):
    _book(db_session, agent_id, client_id, time(9, 0), time(10, 0), status="Cancelled")
    deleted = _book(db_session, agent_id, client_id, time(9, 0), time(10, 0))
    AppointmentRepository.soft_delete(db_session, deleted.appointment_id, agent_id)
    _book(db_session, agent_id, client_id, time(9, 0), time(10, 0), appointment_date=date(2024, 6, 2))

    conflicts = AppointmentRepository.find_conflicts(db_session, agent_id, DAY, time(9, 0), time(10, 0))

    assert conflicts == []


def test_check_conflicts_endpoint(client, agent_id, client_id, db_session):
    _book(db_session, agent_id, client_id, time(9, 0), time(10, 0))

    response = client.post(
        f"/api/appointments/{agent_id}/check-conflicts",
        json={"appointmentDate": "2024-06-01", "startTime": "09:30", "endTime": "10:30"},
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["hasConflict"] is True
    assert data["conflictCount"] == 1
    assert data["conflicts"][0]["title"] == "Policy Review"
