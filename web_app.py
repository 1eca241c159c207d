"""
Train Seat Booking System - Web Application
Single-file Flask application with an embedded HTML template over the seat inventory
"""

import logging
from typing import Optional

from flask import Flask, current_app, jsonify, render_template_string, request

from train_booking_system import BookingSession, Settings, Validators, configure_logging

logger = logging.getLogger(__name__)

# ============================================================================
# FLASK APPLICATION SETUP
# ============================================================================

app = Flask(__name__)


def init_booking(settings: Optional[Settings] = None) -> BookingSession:
    """
    Open the booking session the routes work on.
    Bookings are loaded once here and saved after every change.
    """
    booking_session = BookingSession(settings).open()
    app.config['BOOKING_SESSION'] = booking_session
    return booking_session


def get_booking_session() -> BookingSession:
    """Get the open booking session, opening one from settings on first use."""
    booking_session = current_app.config.get('BOOKING_SESSION')
    if booking_session is None:
        booking_session = init_booking()
    return booking_session


def _bad_request(message: str):
    return jsonify({'success': False, 'message': message}), 400


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


# ============================================================================
# HTML TEMPLATES
# ============================================================================

INDEX_HTML = """
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Train Seat Booking</title>
  <style>
    body { font-family: sans-serif; max-width: 720px; margin: 2rem auto; }
    li.booked { color: #a00; }
    li.available { color: #070; }
  </style>
</head>
<body>
  <h1>Train Seat Booking</h1>
  <p>{{ available }} of {{ total }} seats available.</p>

  <h2>Seats</h2>
  <ul>
  {% for seat in seats %}
    <li class="{{ 'booked' if seat.is_booked else 'available' }}">{{ seat.display() }}</li>
  {% endfor %}
  </ul>

  <h2>Booking Details</h2>
  {% if bookings %}
  <ul>
  {% for line in bookings %}
    <li>{{ line }}</li>
  {% endfor %}
  </ul>
  {% else %}
  <p>No bookings yet.</p>
  {% endif %}
</body>
</html>
"""


# ============================================================================
# FLASK ROUTES
# ============================================================================

@app.route('/')
def index():
    """Seat overview page."""
    train = get_booking_session().train
    return render_template_string(
        INDEX_HTML,
        seats=train.get_seats(),
        bookings=train.list_bookings(),
        available=train.available_count(),
        total=train.num_seats
    )


# ============================================================================
# API ROUTES
# ============================================================================

@app.route('/api/seats', methods=['GET'])
def api_seats():
    """List every seat."""
    train = get_booking_session().train
    return jsonify({
        'success': True,
        'data': [seat.to_dict() for seat in train.get_seats()]
    })


@app.route('/api/bookings', methods=['GET'])
def api_bookings():
    """List booked seats only."""
    train = get_booking_session().train
    return jsonify({
        'success': True,
        'data': [seat.to_dict() for seat in train.get_seats() if seat.is_booked]
    })


@app.route('/api/book', methods=['POST'])
def api_book():
    """Handle ticket booking."""
    data = request.get_json(silent=True) or {}
    names = data.get('passenger_names')
    if not isinstance(names, list) or not names or \
            not all(isinstance(name, str) for name in names):
        return _bad_request("passenger_names must be a non-empty list of strings")
    if not Validators.validate_passenger_names(names):
        return _bad_request("Passenger names cannot be empty!")

    num_tickets = data.get('num_tickets', len(names))
    if not _is_int(num_tickets) or num_tickets <= 0:
        return _bad_request("Invalid number of tickets!")

    destination = str(data.get('destination', ''))
    booking_session = get_booking_session()
    success, message = booking_session.book(num_tickets, names, destination)
    # a failed request may still have booked seats
    booking_session.close()

    return jsonify({
        'success': success,
        'message': message
    })


@app.route('/api/cancel', methods=['POST'])
def api_cancel():
    """Handle ticket cancellation."""
    data = request.get_json(silent=True) or {}
    seat_number = data.get('seat_number')
    if not _is_int(seat_number):
        return _bad_request("seat_number must be an integer")

    booking_session = get_booking_session()
    success, message = booking_session.cancel(seat_number)
    if success:
        booking_session.close()

    return jsonify({
        'success': success,
        'message': message
    })


# ============================================================================
# MAIN EXECUTION
# ============================================================================

if __name__ == "__main__":
    settings = Settings()
    configure_logging(settings.log_level)
    init_booking(settings)
    print("=" * 60)
    print("Train Seat Booking - Web Server")
    print("=" * 60)
    print(f"Server starting on http://{settings.host}:{settings.port}")
    print("=" * 60)
    app.run(host=settings.host, port=settings.port, debug=False, threaded=False)
