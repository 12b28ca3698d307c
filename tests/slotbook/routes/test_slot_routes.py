from datetime import date, time

import pytest

from slotbook.core.errors import ErrorKind, ServiceError
from slotbook.models.time_slot import SlotStatus, TimeSlot
from slotbook.routes.slot_routes import SlotSpecRequest, create_slot, delete_slot


def test_list_slots_is_public_and_filters_available(client, make_slot) -> None:
    make_slot(slot_date=date(2026, 3, 2), start_time=time(10, 0))
    make_slot(slot_date=date(2026, 3, 2), start_time=time(9, 0), status=SlotStatus.PENDING, booked_by=1)
    make_slot(slot_date=date(2026, 3, 1), start_time=time(15, 0))

    response = client.get('/slots', params={'available_only': 'true'})

    assert response.status_code == 200
    assert [(slot['date'], slot['start_time'], slot['status']) for slot in response.json()] == [
        ('2026-03-01', '15:00:00', 'available'),
        ('2026-03-02', '10:00:00', 'available'),
    ]


def test_list_slots_applies_date_range(client, make_slot) -> None:
    make_slot(slot_date=date(2026, 3, 1))
    make_slot(slot_date=date(2026, 3, 5))

    response = client.get('/slots', params={'start': '2026-03-02', 'end': '2026-03-05'})

    assert [slot['date'] for slot in response.json()] == ['2026-03-05']


@pytest.mark.parametrize(
    ('method', 'path', 'payload'),
    [
        ('post', '/slots', {'date': '2026-03-02', 'start_time': '09:00', 'end_time': '10:00'}),
        ('post', '/slots/bulk', {'slots': [{'date': '2026-03-02', 'start_time': '09:00', 'end_time': '10:00'}]}),
        ('patch', '/slots/1', {'status': 'confirmed'}),
        ('delete', '/slots/1', None),
    ],
)
def test_slot_writes_require_admin_session(client, method: str, path: str, payload) -> None:
    kwargs = {'json': payload} if payload is not None else {}

    response = client.request(method.upper(), path, **kwargs)

    assert response.status_code == 401
    assert response.json() == {'detail': 'Unauthorized'}


def test_create_slot_then_duplicate_conflicts(admin_client) -> None:
    payload = {'date': '2026-03-02', 'start_time': '09:00', 'end_time': '10:00'}

    first = admin_client.post('/slots', json=payload)
    second = admin_client.post('/slots', json=payload)

    assert first.status_code == 200
    assert first.json()['status'] == 'available'
    assert first.json()['booked_by'] is None
    assert second.status_code == 409
    assert second.json() == {'detail': 'Slot already exists'}


def test_create_slot_missing_field_is_bad_request(admin_client) -> None:
    response = admin_client.post('/slots', json={'date': '2026-03-02', 'start_time': '09:00'})

    assert response.status_code == 400
    assert response.json() == {'detail': 'Date, start_time, and end_time are required'}


def test_create_slot_malformed_date_is_bad_request(admin_client) -> None:
    response = admin_client.post('/slots', json={'date': 'tuesday', 'start_time': '09:00', 'end_time': '10:00'})

    assert response.status_code == 400
    assert response.json()['detail'] == 'Invalid request.'


def test_bulk_create_reports_counts(admin_client, make_slot) -> None:
    make_slot(slot_date=date(2026, 3, 2), start_time=time(9, 0))
    make_slot(slot_date=date(2026, 3, 2), start_time=time(10, 0))

    response = admin_client.post('/slots/bulk', json={'slots': [
        {'date': '2026-03-02', 'start_time': '09:00', 'end_time': '10:00'},
        {'date': '2026-03-02', 'start_time': '10:00', 'end_time': '11:00'},
        {'date': '2026-03-02', 'start_time': '11:00'},
        {'date': '2026-03-02', 'start_time': '13:00', 'end_time': '14:00'},
        {'date': '2026-03-03', 'start_time': '09:00', 'end_time': '10:00'},
    ]})

    assert response.status_code == 200
    assert response.json() == {'success': True, 'created': 2, 'skipped': 3}


@pytest.mark.parametrize('payload', [{'slots': []}, {}])
def test_bulk_create_requires_slots(admin_client, payload) -> None:
    response = admin_client.post('/slots/bulk', json=payload)

    assert response.status_code == 400
    assert response.json() == {'detail': 'Slots array is required'}


def test_patch_slot_status_transitions(admin_client, make_slot) -> None:
    slot = make_slot(status=SlotStatus.PENDING, booked_by=4)

    confirmed = admin_client.patch(f'/slots/{slot.id}', json={'status': 'confirmed'})
    released = admin_client.patch(f'/slots/{slot.id}', json={'status': 'available'})
    restored = admin_client.patch(f'/slots/{slot.id}', json={'status': 'pending', 'booked_by': 4})

    assert (confirmed.json()['status'], confirmed.json()['booked_by']) == ('confirmed', 4)
    assert (released.json()['status'], released.json()['booked_by']) == ('available', None)
    assert (restored.json()['status'], restored.json()['booked_by']) == ('pending', 4)


def test_patch_slot_rejects_unknown_status(admin_client, make_slot) -> None:
    slot = make_slot()

    response = admin_client.patch(f'/slots/{slot.id}', json={'status': 'booked'})

    assert response.status_code == 400
    assert response.json() == {'detail': 'Invalid status. Must be: available, pending, or confirmed'}


def test_patch_slot_rejects_non_numeric_id(admin_client) -> None:
    response = admin_client.patch('/slots/abc', json={'status': 'confirmed'})

    assert response.status_code == 400


def test_patch_missing_slot_is_not_found(admin_client) -> None:
    response = admin_client.patch('/slots/404', json={'status': 'confirmed'})

    assert response.status_code == 404
    assert response.json() == {'detail': 'Slot not found'}


def test_delete_slot_status_codes(admin_client, make_slot, db) -> None:
    claimed = make_slot(start_time=time(9, 0), status=SlotStatus.PENDING, booked_by=2)
    free = make_slot(start_time=time(10, 0))

    assert admin_client.delete(f'/slots/{claimed.id}').status_code == 400
    assert admin_client.delete('/slots/999').status_code == 404
    assert admin_client.delete(f'/slots/{free.id}').json() == {'success': True}

    db.expire_all()
    assert [slot.id for slot in db.query(TimeSlot).all()] == [claimed.id]


def test_route_functions_raise_typed_errors(db, make_slot, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr('slotbook.routes.slot_routes.ensure_database_ready', lambda: None)
    slot = make_slot(status=SlotStatus.CONFIRMED, booked_by=1)

    with pytest.raises(ServiceError) as exception_info:
        delete_slot(slot_id=slot.id, db=db, _admin={'role': 'admin'})
    assert exception_info.value.kind == ErrorKind.INVALID_STATE
    assert exception_info.value.status_code == 400

    with pytest.raises(ServiceError) as exception_info:
        create_slot(
            SlotSpecRequest(date=slot.date, start_time=slot.start_time, end_time=time(11, 0)),
            db=db,
            _admin={'role': 'admin'},
        )
    assert exception_info.value.status_code == 409


def test_slot_spec_request_parses_date_and_times() -> None:
    request = SlotSpecRequest(date='2026-03-02', start_time='09:00', end_time='10:30')

    assert (request.date, request.start_time, request.end_time) == (date(2026, 3, 2), time(9, 0), time(10, 30))


@pytest.mark.parametrize(
    'bad_item',
    [
        {'date': '2026-03-02', 'start_time': '11:00', 'end_time': ''},
        {'date': 'soon', 'start_time': '11:00', 'end_time': '12:00'},
        {'date': '2026-03-02', 'start_time': 'noon', 'end_time': '13:00'},
    ],
)
def test_bulk_create_skips_blank_or_malformed_items(admin_client, bad_item) -> None:
    response = admin_client.post('/slots/bulk', json={'slots': [
        {'date': '2026-03-02', 'start_time': '09:00', 'end_time': '10:00'},
        bad_item,
    ]})

    assert response.status_code == 200
    assert response.json() == {'success': True, 'created': 1, 'skipped': 1}
    assert [slot['start_time'] for slot in admin_client.get('/slots').json()] == ['09:00:00']
