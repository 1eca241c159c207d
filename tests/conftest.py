import pytest

from train_booking_system import Settings, Train


@pytest.fixture
def train() -> Train:
    return Train()


@pytest.fixture
def booking_file(tmp_path):
    return tmp_path / "booking_details.txt"


@pytest.fixture
def transactions_file(tmp_path):
    return tmp_path / "transactions.csv"


@pytest.fixture
def settings(booking_file, transactions_file) -> Settings:
    """Settings pointing every file at a temporary directory"""
    return Settings(
        booking_file=str(booking_file),
        transactions_file=str(transactions_file),
    )
