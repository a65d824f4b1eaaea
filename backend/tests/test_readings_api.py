"""Tests for the /api/bp-readings routes."""

from datetime import datetime, timedelta

import pytest

from bp_tracker import db
from bp_tracker.models import BloodPressureReading
from bp_tracker.utils.time_utils import now_utc, to_datetime_local, to_display

BASE = '/api/bp-readings'


def local_string(instant):
    return to_display(instant).strftime('%Y-%m-%dT%H:%M')


def parse_iso(value):
    return datetime.fromisoformat(value.replace('Z', '+00:00'))


@pytest.fixture
def post_reading(client, auth_headers):
    def _post(**body):
        return client.post(f'{BASE}/', json=body, headers=auth_headers)
    return _post


class TestAuth:
    def test_missing_token(self, client):
        response = client.get(f'{BASE}/')
        assert response.status_code == 401
        assert response.get_json()['success'] is False

    def test_bad_token(self, client):
        response = client.get(f'{BASE}/', headers={'Authorization': 'Bearer not-a-jwt'})
        assert response.status_code == 401

    def test_inactive_user(self, client, user, auth_headers):
        user.is_active = False
        db.session.commit()
        response = client.get(f'{BASE}/', headers=auth_headers)
        assert response.status_code == 401

    def test_health_is_public(self, client):
        response = client.get('/health')
        assert response.status_code == 200
        assert response.get_json() == {'status': 'healthy'}


class TestCreate:
    def test_creates_with_category(self, post_reading):
        response = post_reading(systolic=135, diastolic=85, pulseRate=74)
        assert response.status_code == 201
        body = response.get_json()
        assert body['success'] is True
        data = body['data']
        assert data['category'] == 'high-stage-1'
        assert data['bpDisplay'] == '135/85'
        assert data['pulseRate'] == 74
        assert data['tags'] == []

    def test_client_category_ignored(self, post_reading):
        response = post_reading(systolic=185, diastolic=90, category='normal')
        assert response.get_json()['data']['category'] == 'hypertensive-crisis'

    def test_local_time_round_trip(self, client, auth_headers, post_reading):
        entered = local_string(now_utc() - timedelta(hours=2))
        created = post_reading(systolic=120, diastolic=78, timestamp=entered).get_json()['data']

        fetched = client.get(f"{BASE}/{created['id']}", headers=auth_headers).get_json()['data']
        stored = parse_iso(fetched['timestamp'])
        assert to_datetime_local(stored) == entered
        assert fetched['formattedTime'] == to_display(stored).strftime('%I:%M %p')
        assert fetched['formattedDate'] == to_display(stored).strftime('%d/%m/%Y')

    def test_stored_as_utc(self, post_reading):
        data = post_reading(systolic=120, diastolic=78,
                            timestamp='2024-01-15T23:50').get_json()['data']
        assert data['timestamp'] == '2024-01-15T18:20:00Z'
        reading = db.session.get(BloodPressureReading, data['id'])
        assert reading.timestamp == datetime(2024, 1, 15, 18, 20)

    def test_reading_at_now_accepted(self, post_reading):
        response = post_reading(systolic=120, diastolic=78, timestamp=local_string(now_utc()))
        assert response.status_code == 201

    def test_timestamp_defaults_to_now(self, post_reading):
        before = now_utc().replace(microsecond=0)
        data = post_reading(systolic=120, diastolic=78).get_json()['data']
        assert parse_iso(data['timestamp']) >= before

    def test_validation_errors_listed(self, post_reading):
        future = local_string(now_utc() + timedelta(hours=3))
        response = post_reading(systolic=300, diastolic=20, pulseRate=5, timestamp=future)
        assert response.status_code == 400
        body = response.get_json()
        assert body['message'] == 'Validation failed'
        assert len(body['errors']) == 4

    def test_systolic_not_above_diastolic(self, post_reading):
        response = post_reading(systolic=120, diastolic=120)
        assert response.status_code == 400
        assert response.get_json()['errors'] == [
            'Systolic pressure must be higher than diastolic pressure'
        ]
        assert BloodPressureReading.query.count() == 0

    def test_requires_json(self, client, auth_headers):
        response = client.post(f'{BASE}/', data='systolic=120', headers=auth_headers,
                               content_type='application/x-www-form-urlencoded')
        assert response.status_code == 415

    def test_empty_body(self, client, auth_headers):
        response = client.post(f'{BASE}/', json={}, headers=auth_headers)
        assert response.status_code == 400

    @pytest.mark.parametrize("body", [[{'systolic': 120, 'diastolic': 80}], 'reading', 120])
    def test_non_object_body(self, client, auth_headers, body):
        response = client.post(f'{BASE}/', json=body, headers=auth_headers)
        assert response.status_code == 400
        assert response.get_json()['message'] == 'Request body is required'
        assert BloodPressureReading.query.count() == 0

    @pytest.mark.parametrize("timestamp", ['0001-01-01T00:00', '9999-12-31T23:59-05:00'])
    def test_timestamp_outside_datetime_range(self, post_reading, timestamp):
        response = post_reading(systolic=120, diastolic=78, timestamp=timestamp)
        assert response.status_code == 400
        assert response.get_json()['errors'] == ['Reading timestamp is not a valid date/time']


class TestReadAndList:
    @pytest.fixture
    def readings(self, user, make_reading):
        now = now_utc()
        return [
            make_reading(user, 118, 76, now - timedelta(days=1), pulse_rate=70),
            make_reading(user, 145, 95, now - timedelta(days=2)),
            make_reading(user, 125, 75, now - timedelta(days=3)),
        ]

    def test_list_newest_first(self, client, auth_headers, readings):
        body = client.get(f'{BASE}/', headers=auth_headers).get_json()['data']
        assert [r['systolic'] for r in body['readings']] == [118, 145, 125]
        assert body['pagination'] == {
            'currentPage': 1,
            'totalPages': 1,
            'totalCount': 3,
            'hasNextPage': False,
            'hasPrevPage': False,
        }

    def test_pagination(self, client, auth_headers, readings):
        body = client.get(f'{BASE}/?limit=2&page=2', headers=auth_headers).get_json()['data']
        assert len(body['readings']) == 1
        assert body['pagination']['totalPages'] == 2
        assert body['pagination']['hasPrevPage'] is True

    def test_category_filter(self, client, auth_headers, readings):
        body = client.get(f'{BASE}/?category=high-stage-2', headers=auth_headers).get_json()['data']
        assert [r['bpDisplay'] for r in body['readings']] == ['145/95']

    def test_unknown_category_filter(self, client, auth_headers, readings):
        response = client.get(f'{BASE}/?category=sky-high', headers=auth_headers)
        assert response.status_code == 400

    def test_sort_by_systolic_ascending(self, client, auth_headers, readings):
        url = f'{BASE}/?sortBy=systolic&sortOrder=asc'
        body = client.get(url, headers=auth_headers).get_json()['data']
        assert [r['systolic'] for r in body['readings']] == [118, 125, 145]

    def test_invalid_date_filter(self, client, auth_headers, readings):
        response = client.get(f'{BASE}/?startDate=someday', headers=auth_headers)
        assert response.status_code == 400

    @pytest.mark.parametrize("query", ['startDate=0001-01-01T00:00', 'endDate=9999-12-31T23:59-05:00'])
    def test_date_filter_outside_datetime_range(self, client, auth_headers, readings, query):
        response = client.get(f'{BASE}/?{query}', headers=auth_headers)
        assert response.status_code == 400
        assert response.get_json()['success'] is False

    def test_recent(self, client, auth_headers, readings):
        data = client.get(f'{BASE}/recent?limit=2', headers=auth_headers).get_json()['data']
        assert [r['systolic'] for r in data] == [118, 145]

    def test_other_users_readings_hidden(self, client, auth_headers, other_user, make_reading):
        theirs = make_reading(other_user, 120, 80, now_utc() - timedelta(hours=1))
        assert client.get(f'{BASE}/{theirs.id}', headers=auth_headers).status_code == 404
        body = client.get(f'{BASE}/', headers=auth_headers).get_json()['data']
        assert body['readings'] == []


class TestUpdate:
    @pytest.fixture
    def reading(self, user, make_reading):
        return make_reading(user, 118, 76, now_utc() - timedelta(days=1))

    def test_category_recomputed(self, client, auth_headers, reading):
        response = client.put(f'{BASE}/{reading.id}', json={'systolic': 142},
                              headers=auth_headers)
        assert response.status_code == 200
        data = response.get_json()['data']
        assert data['bpDisplay'] == '142/76'
        assert data['category'] == 'high-stage-2'

    def test_non_pressure_update_keeps_category(self, client, auth_headers, reading):
        response = client.put(f'{BASE}/{reading.id}', json={'comments': 'felt fine', 'tags': ['am']},
                              headers=auth_headers)
        data = response.get_json()['data']
        assert data['category'] == 'normal'
        assert data['comments'] == 'felt fine'
        assert data['tags'] == ['am']

    def test_relation_checked_against_stored_value(self, client, auth_headers, reading):
        response = client.put(f'{BASE}/{reading.id}', json={'diastolic': 118},
                              headers=auth_headers)
        assert response.status_code == 400
        assert db.session.get(BloodPressureReading, reading.id).diastolic == 76

    def test_update_timestamp(self, client, auth_headers, reading):
        response = client.put(f'{BASE}/{reading.id}', json={'timestamp': '2024-01-16T00:10'},
                              headers=auth_headers)
        assert response.get_json()['data']['timestamp'] == '2024-01-15T18:40:00Z'

    def test_non_object_body(self, client, auth_headers, reading):
        response = client.put(f'{BASE}/{reading.id}', json=[{'systolic': 142}],
                              headers=auth_headers)
        assert response.status_code == 400
        assert db.session.get(BloodPressureReading, reading.id).systolic == 118

    def test_timestamp_outside_datetime_range(self, client, auth_headers, reading):
        response = client.put(f'{BASE}/{reading.id}', json={'timestamp': '0001-01-01T00:00'},
                              headers=auth_headers)
        assert response.status_code == 400

    def test_missing_reading(self, client, auth_headers, user):
        response = client.put(f'{BASE}/999', json={'systolic': 120}, headers=auth_headers)
        assert response.status_code == 404


class TestDelete:
    def test_delete(self, client, auth_headers, user, make_reading):
        reading = make_reading(user, 120, 78, now_utc() - timedelta(hours=3))
        response = client.delete(f'{BASE}/{reading.id}', headers=auth_headers)
        assert response.status_code == 200
        assert response.get_json()['data']['id'] == reading.id
        assert BloodPressureReading.query.count() == 0

    def test_cannot_delete_others(self, client, auth_headers, other_user, make_reading):
        theirs = make_reading(other_user, 120, 78, now_utc() - timedelta(hours=3))
        assert client.delete(f'{BASE}/{theirs.id}', headers=auth_headers).status_code == 404
        assert BloodPressureReading.query.count() == 1


class TestStatisticsEndpoint:
    def test_empty(self, client, auth_headers, user):
        data = client.get(f'{BASE}/statistics?period=7d', headers=auth_headers).get_json()['data']
        assert data['totalReadings'] == 0
        assert data['averageBP'] is None
        assert data['categoryDistribution'] == {}
        assert data['trends'] == []
        assert data['period'] == '7d'

    def test_summary(self, client, auth_headers, user, other_user, make_reading):
        now = now_utc()
        make_reading(user, 120, 78, now - timedelta(days=1), pulse_rate=70)
        make_reading(user, 130, 82, now - timedelta(days=2))
        make_reading(user, 140, 86, now - timedelta(days=3))
        make_reading(user, 200, 100, now - timedelta(days=20))
        make_reading(other_user, 180, 110, now - timedelta(days=1))

        data = client.get(f'{BASE}/statistics?period=7d', headers=auth_headers).get_json()['data']
        assert data['totalReadings'] == 3
        assert data['averageBP'] == {'systolic': 130, 'diastolic': 82, 'pulse': 70}
        assert set(data['categoryDistribution']) == {'elevated', 'high-stage-1', 'high-stage-2'}
        assert sum(t['readingCount'] for t in data['trends']) == 3
        assert set(data['dateRange']) == {'startDate', 'endDate'}

    def test_default_period(self, client, auth_headers, user, make_reading):
        make_reading(user, 120, 78, now_utc() - timedelta(days=25))
        data = client.get(f'{BASE}/statistics', headers=auth_headers).get_json()['data']
        assert data['period'] == '30d'
        assert data['totalReadings'] == 1


class TestCategoriesEndpoint:
    def test_returns_legend(self, client, auth_headers):
        data = client.get(f'{BASE}/categories', headers=auth_headers).get_json()['data']
        assert len(data) == 7
        assert data['elevated']['color'] == '#eab308'
