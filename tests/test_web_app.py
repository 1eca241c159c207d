"""
Tests for the Flask web interface.
"""

import pytest

from train_booking_system import TransactionService
from web_app import app, init_booking


@pytest.fixture
def client(settings):
    init_booking(settings)
    app.config['TESTING'] = True
    yield app.test_client()
    app.config.pop('BOOKING_SESSION', None)


class TestReadRoutes:
    def test_index_page(self, client):
        response = client.get('/')
        assert response.status_code == 200
        body = response.get_data(as_text=True)
        assert "20 of 20 seats available." in body
        assert "Seat Number:  1 - Available" in body

    def test_seats(self, client):
        data = client.get('/api/seats').get_json()
        assert data['success'] is True
        assert len(data['data']) == 20
        assert data['data'][0] == {'seat_number': 1, 'is_booked': False, 'passenger_name': ''}

    def test_existing_bookings_are_loaded(self, settings, booking_file):
        booking_file.write_text("4 Dana\n")
        init_booking(settings)
        try:
            data = app.test_client().get('/api/bookings').get_json()
        finally:
            app.config.pop('BOOKING_SESSION', None)
        assert data['data'] == [{'seat_number': 4, 'is_booked': True, 'passenger_name': 'Dana'}]


class TestBookRoute:
    def test_book_saves_immediately(self, client, booking_file):
        response = client.post('/api/book', json={
            'passenger_names': ["A", "B"],
            'destination': "Paris",
        })
        assert response.get_json() == {
            'success': True,
            'message': "Tickets booked successfully! Destination: Paris",
        }
        assert booking_file.read_text() == "1 A\n2 B\n"

    def test_partial_booking_is_saved(self, client, booking_file):
        data = client.post('/api/book', json={
            'passenger_names': ["A", "B"],
            'destination': "X",
            'num_tickets': 3,
        }).get_json()
        assert data['success'] is False
        assert booking_file.read_text() == "1 A\n2 B\n"

    @pytest.mark.parametrize('payload', [
        {},
        {'passenger_names': []},
        {'passenger_names': "A"},
        {'passenger_names': [1, 2]},
        {'passenger_names': ["A"], 'num_tickets': 0},
        {'passenger_names': ["A"], 'num_tickets': "2"},
        {'passenger_names': ["A"], 'num_tickets': True},
    ])
    def test_invalid_payload(self, client, payload, booking_file):
        response = client.post('/api/book', json=payload)
        assert response.status_code == 400
        assert response.get_json()['success'] is False
        assert not booking_file.exists()

    @pytest.mark.parametrize('names', [["", "Bob"], ["Ann", "   "]])
    def test_blank_name_keeps_saved_bookings_intact(self, client, booking_file, names):
        client.post('/api/book', json={'passenger_names': ["Carl"], 'destination': "X"})

        response = client.post('/api/book', json={'passenger_names': names, 'destination': "X"})
        assert response.status_code == 400
        assert response.get_json() == {'success': False, 'message': "Passenger names cannot be empty!"}
        assert booking_file.read_text() == "1 Carl\n"

        data = client.get('/api/bookings').get_json()
        assert [seat['seat_number'] for seat in data['data']] == [1]


class TestCancelRoute:
    def test_cancel_twice(self, client, booking_file, transactions_file):
        client.post('/api/book', json={'passenger_names': ["A"], 'destination': "X"})

        first = client.post('/api/cancel', json={'seat_number': 1}).get_json()
        assert first['success'] is True
        assert booking_file.read_text() == ""

        second = client.post('/api/cancel', json={'seat_number': 1}).get_json()
        assert second == {'success': False, 'message': "Seat 1 is not booked."}

        rows = TransactionService.read_transactions(str(transactions_file))
        assert [row['status'] for row in rows] == ["success", "success", "failed"]
        assert rows[1]['passengers'] == "A"

    @pytest.mark.parametrize('seat_number', [0, 21])
    def test_cancel_out_of_range(self, client, seat_number):
        data = client.post('/api/cancel', json={'seat_number': seat_number}).get_json()
        assert data == {'success': False, 'message': "Invalid seat number!"}

    @pytest.mark.parametrize('seat_number', ["abc", "1", 1.9, True, None])
    def test_cancel_requires_integer(self, client, seat_number):
        client.post('/api/book', json={'passenger_names': ["A"], 'destination': "X"})

        response = client.post('/api/cancel', json={'seat_number': seat_number})
        assert response.status_code == 400
        data = client.get('/api/bookings').get_json()
        assert [seat['seat_number'] for seat in data['data']] == [1]
