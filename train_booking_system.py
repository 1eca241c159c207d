"""
Train Seat Booking System - Console Application
Tracks a fixed seat inventory for a single train and persists bookings
to a flat text file between runs.
"""

import argparse
import csv
import logging
import os
import sys
from datetime import datetime
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic_settings import BaseSettings, SettingsConfigDict

# ============================================================================
# CONSTANTS
# ============================================================================

NUM_SEATS = 20
BOOKING_FILE = "booking_details.txt"
TRANSACTIONS_FILE = "transactions.csv"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


# ============================================================================
# CONFIGURATION
# ============================================================================

class Settings(BaseSettings):
    """Runtime settings, overridable with TRAIN_BOOKING_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TRAIN_BOOKING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    booking_file: str = BOOKING_FILE
    transactions_file: str = TRANSACTIONS_FILE  # empty string disables the journal
    num_seats: int = NUM_SEATS
    all_or_nothing: bool = False

    host: str = "127.0.0.1"
    port: int = 5000
    log_level: str = "INFO"


def configure_logging(level: str = "INFO"):
    """Configure root logging for the entry points."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


# ============================================================================
# ERRORS AND VALIDATION
# ============================================================================

class BookingError(str, Enum):
    """Non-fatal failure kinds. Values are the user-facing message templates."""

    FILE_UNAVAILABLE = "Unable to open booking details file"
    INVALID_SEAT_NUMBER = "Invalid seat number!"
    SEAT_NOT_BOOKED = "Seat {seat_number} is not booked."
    SEAT_ALREADY_BOOKED = "Seat {seat_number} is already booked."
    INSUFFICIENT_SEATS_OR_NAMES = "Insufficient available seats!"


class Validators:
    """Input validation for the command-line and web surfaces."""

    @staticmethod
    def validate_passenger_name(name: str) -> bool:
        """A passenger name must contain at least one non-whitespace character."""
        return bool(name.strip())

    @staticmethod
    def validate_passenger_names(names: Sequence[str]) -> bool:
        return all(Validators.validate_passenger_name(name) for name in names)


# ============================================================================
# DATA MODELS
# ============================================================================

class Seat:
    """A single bookable seat. Availability is governed by is_booked alone."""

    def __init__(self, seat_number: int):
        self.seat_number = seat_number
        self.is_booked = False
        self.passenger_name = ""

    def is_available(self) -> bool:
        return not self.is_booked

    def book(self, name: str):
        """
        Mark the seat booked for a passenger.
        The name is not validated and any previous occupant is overwritten;
        callers only book seats that are available.
        """
        self.is_booked = True
        self.passenger_name = name

    def cancel_booking(self):
        """Release the seat. Calling it on a free seat changes nothing."""
        self.is_booked = False
        self.passenger_name = ""

    def display(self) -> str:
        """Format the seat as one listing line."""
        if self.is_booked:
            status = f"Booked by: {self.passenger_name}"
        else:
            status = "Available"
        return f"Seat Number: {self.seat_number:2d} - {status}"

    def to_dict(self) -> Dict:
        """Convert seat object to dictionary for JSON serialization."""
        return {
            'seat_number': self.seat_number,
            'is_booked': self.is_booked,
            'passenger_name': self.passenger_name
        }

    def __repr__(self) -> str:
        return f"Seat({self.seat_number}, booked={self.is_booked}, name={self.passenger_name!r})"


class Train:
    """
    Fixed-size, ordered seat inventory for one train.
    Seat i always lives at index i - 1; seats are never added or removed.

    With all_or_nothing enabled, a booking request that cannot be fully
    satisfied releases the seats it booked. By default those seats stay
    booked and the request reports failure.
    """

    def __init__(self, num_seats: int = NUM_SEATS, all_or_nothing: bool = False):
        if num_seats < 1:
            raise ValueError("num_seats must be at least 1")
        self.num_seats = num_seats
        self.all_or_nothing = all_or_nothing
        self.seats = [Seat(i) for i in range(1, num_seats + 1)]

    def is_valid_seat_number(self, seat_number: int) -> bool:
        return 1 <= seat_number <= self.num_seats

    def get_seat(self, seat_number: int) -> Optional[Seat]:
        """Return the seat with this number, or None when out of range."""
        if not self.is_valid_seat_number(seat_number):
            return None
        return self.seats[seat_number - 1]

    def get_seats(self) -> Tuple[Seat, ...]:
        """Read-only view of all seats in seat-number order."""
        return tuple(self.seats)

    def list_seats(self) -> List[str]:
        """Display lines for every seat, in seat-number order."""
        return [seat.display() for seat in self.seats]

    def list_bookings(self) -> List[str]:
        """Display lines for booked seats only, in seat-number order."""
        return [seat.display() for seat in self.seats if not seat.is_available()]

    def available_count(self) -> int:
        return sum(1 for seat in self.seats if seat.is_available())

    def booked_count(self) -> int:
        return self.num_seats - self.available_count()

    def book_tickets(self, num_tickets: int, passenger_names: Sequence[str],
                     destination: str) -> Tuple[bool, str]:
        """
        Book up to num_tickets seats, lowest numbers first, one name per seat.

        Stops when num_tickets seats are booked or the names run out.
        Succeeds only if exactly num_tickets seats were booked. On failure
        the seats already assigned stay booked unless all_or_nothing is set.
        Returns: (success, message)
        """
        booked: List[Seat] = []
        names = iter(passenger_names)
        for seat in self.seats:
            if len(booked) >= num_tickets:
                break
            if not seat.is_available():
                continue
            name = next(names, None)
            if name is None:
                break
            seat.book(name)
            booked.append(seat)

        if len(booked) == num_tickets:
            seat_list = ", ".join(str(seat.seat_number) for seat in booked)
            logger.info("Booked seats %s for destination %r", seat_list, destination)
            return True, f"Tickets booked successfully! Destination: {destination}"

        if self.all_or_nothing:
            for seat in booked:
                seat.cancel_booking()
            logger.info("Booking of %d tickets failed, released %d seats",
                        num_tickets, len(booked))
        else:
            logger.info("Booking of %d tickets failed, %d seats remain booked",
                        num_tickets, len(booked))
        return False, BookingError.INSUFFICIENT_SEATS_OR_NAMES.value

    def book_seat(self, seat_number: int, passenger_name: str) -> Tuple[bool, str]:
        """
        Book one specific seat.
        Returns: (success, message)
        """
        seat = self.get_seat(seat_number)
        if seat is None:
            return False, BookingError.INVALID_SEAT_NUMBER.value
        if not seat.is_available():
            return False, BookingError.SEAT_ALREADY_BOOKED.value.format(seat_number=seat_number)
        seat.book(passenger_name)
        return True, f"Seat {seat_number} booked successfully!"

    def cancel_ticket(self, seat_number: int) -> Tuple[bool, str]:
        """
        Cancel the booking on a seat.
        Fails without changing anything for an out-of-range number or a
        seat that is not booked.
        Returns: (success, message)
        """
        seat = self.get_seat(seat_number)
        if seat is None:
            return False, BookingError.INVALID_SEAT_NUMBER.value
        if seat.is_available():
            return False, BookingError.SEAT_NOT_BOOKED.value.format(seat_number=seat_number)
        seat.cancel_booking()
        logger.info("Cancelled booking on seat %d", seat_number)
        return True, "Ticket canceled successfully!"

    def to_dict(self) -> Dict:
        return {
            'num_seats': self.num_seats,
            'available': self.available_count(),
            'booked': self.booked_count(),
            'seats': [seat.to_dict() for seat in self.seats]
        }


# ============================================================================
# PERSISTENCE
# ============================================================================

class StorageManager:
    """
    Reads and writes the booked subset of a Train to the booking file.

    The file holds "<seat_number> <passenger_name>" pairs, one booking per
    line on write. Reading is token based, so a passenger name that
    contains whitespace does not survive a save/load cycle, and an empty
    name shifts every pair that follows it. Surfaces reject blank names
    before they reach the train (see Validators.validate_passenger_name).
    """

    @staticmethod
    def parse_bookings(tokens: Iterable[str]) -> List[Tuple[int, str]]:
        """
        Pair up whitespace-delimited tokens as (seat_number, name).
        Parsing stops at the first seat token that is not an integer;
        an unpaired trailing token is dropped.
        """
        pairs = []
        tokens = iter(tokens)
        for seat_token in tokens:
            try:
                seat_number = int(seat_token)
            except ValueError:
                logger.warning("Stopped reading bookings at malformed token %r", seat_token)
                break
            name = next(tokens, None)
            if name is None:
                logger.warning("Ignoring seat %d with no passenger name", seat_number)
                break
            pairs.append((seat_number, name))
        return pairs

    @staticmethod
    def load_bookings(train: Train, path: str = BOOKING_FILE) -> bool:
        """
        A missing or unreadable file leaves the train untouched; bytes that
        are not valid UTF-8 are replaced rather than aborting the load.
        A missing or unreadable file leaves the train untouched.
        Returns True if the file was read.
        """
        try:
            with open(path, 'r', encoding='utf-8', errors='replace') as f:
                content = f.read()
        except OSError as e:
            logger.info("%s %s (%s). Starting with no bookings.",
                        BookingError.FILE_UNAVAILABLE.value, path, e.strerror)
            return False

        restored = 0
        for seat_number, name in StorageManager.parse_bookings(content.split()):
            if not train.is_valid_seat_number(seat_number):
                logger.warning("Skipping out-of-range seat %d in %s", seat_number, path)
                continue
            success, message = train.book_seat(seat_number, name)
            if success:
                restored += 1
            else:
                logger.warning("Skipping seat %d in %s: %s", seat_number, path, message)
        logger.info("Loaded %d bookings from %s", restored, path)
        return True

    @staticmethod
    def save_bookings(train: Train, path: str = BOOKING_FILE) -> bool:
        """
        Write booked seats to file, truncating earlier content.
        If the file cannot be opened the previous content stays on disk.
        Returns True if the file was written.
        """
        try:
            with open(path, 'w', encoding='utf-8') as f:
                for seat in train.get_seats():
                    if not seat.is_available():
                        f.write(f"{seat.seat_number} {seat.passenger_name}\n")
        except OSError as e:
            logger.warning("%s %s for writing (%s).",
                           BookingError.FILE_UNAVAILABLE.value, path, e.strerror)
            return False
        logger.info("Saved %d bookings to %s", train.booked_count(), path)
        return True


class TransactionService:
    """Handles logging of booking transactions to a CSV journal."""

    HEADER = ['timestamp', 'action', 'status', 'seats', 'passengers',
              'destination', 'message']

    @staticmethod
    def log_transaction(path: str, action: str, status: str,
                        seats: Sequence[int] = (), passengers: Sequence[str] = (),
                        destination: str = "", message: str = ""):
        """
        Append a transaction row to the journal.

        Parameters:
        - path: Journal file; an empty path disables journaling
        - action: "book" or "cancel"
        - status: "success" or "failed"
        - seats: Seat numbers touched by the action
        - passengers: Passenger names involved
        - destination: Destination station, if any
        - message: Outcome message shown to the user
        """
        if not path:
            return
        try:
            new_file = not os.path.exists(path)
            with open(path, 'a', newline='') as f:
                writer = csv.writer(f)
                if new_file:
                    writer.writerow(TransactionService.HEADER)
                writer.writerow([
                    datetime.now().isoformat(),
                    action,
                    status,
                    " ".join(str(n) for n in seats),
                    "; ".join(passengers),
                    destination,
                    message
                ])
        except OSError as e:
            logger.warning("Could not log transaction: %s", e)

    @staticmethod
    def read_transactions(path: str) -> List[Dict[str, str]]:
        """Return all journal rows as dictionaries, oldest first."""
        try:
            with open(path, 'r', newline='') as f:
                return list(csv.DictReader(f))
        except OSError:
            return []


# ============================================================================
# BOOKING SESSION
# ============================================================================

class BookingSession:
    """
    One run of the system: load on open, save on close.
    Wraps the train with journaling so every surface records the same way.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.train = Train(self.settings.num_seats, self.settings.all_or_nothing)

    def open(self) -> "BookingSession":
        StorageManager.load_bookings(self.train, self.settings.booking_file)
        return self

    def close(self) -> bool:
        return StorageManager.save_bookings(self.train, self.settings.booking_file)

    def __enter__(self) -> "BookingSession":
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def book(self, num_tickets: int, passenger_names: Sequence[str],
             destination: str) -> Tuple[bool, str]:
        """Book tickets and journal the attempt."""
        before = {seat.seat_number for seat in self.train.get_seats() if seat.is_booked}
        success, message = self.train.book_tickets(num_tickets, passenger_names, destination)
        seats = [seat.seat_number for seat in self.train.get_seats()
                 if seat.is_booked and seat.seat_number not in before]
        TransactionService.log_transaction(
            self.settings.transactions_file,
            "book",
            "success" if success else "failed",
            seats,
            passenger_names,
            destination,
            message
        )
        return success, message

    def cancel(self, seat_number: int) -> Tuple[bool, str]:
        """Cancel a ticket and journal the attempt."""
        seat = self.train.get_seat(seat_number)
        passenger = seat.passenger_name if seat and seat.is_booked else ""
        success, message = self.train.cancel_ticket(seat_number)
        TransactionService.log_transaction(
            self.settings.transactions_file,
            "cancel",
            "success" if success else "failed",
            [seat_number],
            [passenger] if passenger else [],
            "",
            message
        )
        return success, message


# ============================================================================
# COMMAND-LINE INTERFACE
# ============================================================================

def print_header(title: str):
    """Print a formatted header."""
    print("\n" + "=" * 60)
    print(f" {title.center(58)} ")
    print("=" * 60 + "\n")


def print_result(success: bool, message: str):
    print(f"{'✓' if success else '✗'} {message}")


def cmd_seats(args: argparse.Namespace, session: BookingSession) -> int:
    print_header("AVAILABLE SEATS")
    for line in session.train.list_seats():
        print(line)
    return 0


def cmd_bookings(args: argparse.Namespace, session: BookingSession) -> int:
    print_header("BOOKING DETAILS")
    lines = session.train.list_bookings()
    if not lines:
        print("No bookings yet.")
    for line in lines:
        print(line)
    return 0


def cmd_book(args: argparse.Namespace, session: BookingSession) -> int:
    num_tickets = args.count if args.count is not None else len(args.names)
    success, message = session.book(num_tickets, args.names, args.destination)
    print_result(success, message)
    return 0 if success else 1


def cmd_cancel(args: argparse.Namespace, session: BookingSession) -> int:
    success, message = session.cancel(args.seat_number)
    print_result(success, message)
    return 0 if success else 1


def cmd_serve(args: argparse.Namespace, settings: Settings) -> int:
    from web_app import app, init_booking

    init_booking(settings)
    host = args.host or settings.host
    port = args.port or settings.port
    print(f"Train booking web server starting on http://{host}:{port}")
    app.run(host=host, port=port, debug=False, threaded=False)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="train-booking",
                                     description="Train seat booking console")
    parser.add_argument("--booking-file", default=None,
                        help=f"Bookings file (default: {BOOKING_FILE})")
    parser.add_argument("--transactions-file", default=None,
                        help="CSV transaction journal; empty string disables it")
    parser.add_argument("--all-or-nothing", action="store_true", default=None,
                        help="Release partially booked seats when a booking fails")
    parser.add_argument("--log-level", default=None)

    sub = parser.add_subparsers(dest="command", required=True)

    p_seats = sub.add_parser("seats", help="View all seats")
    p_seats.set_defaults(func=cmd_seats)

    p_book = sub.add_parser("book", help="Book tickets")
    p_book.add_argument("--name", dest="names", action="append", required=True,
                        help="Passenger name; repeat once per ticket")
    p_book.add_argument("--destination", required=True, help="Destination station name")
    p_book.add_argument("--count", type=int, default=None,
                        help="Number of tickets (default: number of names)")
    p_book.set_defaults(func=cmd_book)

    p_cancel = sub.add_parser("cancel", help="Cancel a ticket")
    p_cancel.add_argument("seat_number", type=int)
    p_cancel.set_defaults(func=cmd_cancel)

    p_bookings = sub.add_parser("bookings", help="View booking details")
    p_bookings.set_defaults(func=cmd_bookings)

    p_serve = sub.add_parser("serve", help="Start the web interface")
    p_serve.add_argument("--host", default=None)
    p_serve.add_argument("--port", type=int, default=None)
    p_serve.set_defaults(func=cmd_serve)

    return parser


def settings_from_args(args: argparse.Namespace, settings: Optional[Settings] = None) -> Settings:
    """Apply command-line overrides on top of environment settings."""
    settings = settings or Settings()
    overrides = {
        'booking_file': args.booking_file,
        'transactions_file': args.transactions_file,
        'all_or_nothing': args.all_or_nothing,
        'log_level': args.log_level,
    }
    return settings.model_copy(update={k: v for k, v in overrides.items() if v is not None})


def main(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    """Main entry point of the application."""
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = settings_from_args(args, settings)
    configure_logging(settings.log_level)

    if args.command == "serve":
        return cmd_serve(args, settings)

    if args.command == "book" and args.count is not None and args.count <= 0:
        print("Invalid number of tickets!", file=sys.stderr)
        return 2

    if args.command == "book" and not Validators.validate_passenger_names(args.names):
        print("Passenger names cannot be empty!", file=sys.stderr)
        return 2

    with BookingSession(settings) as session:
        return args.func(args, session)


if __name__ == "__main__":
    sys.exit(main())
