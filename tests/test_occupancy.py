"""
Tests für Auslastung: historisch, Echtzeit (heute) und Schicht-Punktabfrage.
"""
from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace
from zoneinfo import ZoneInfo

import pytest

from app.schemas.opening_hours import ShiftConfig, load_opening_hours
from app.services import grouping_service, occupancy_service
from app.services.turn_service import extract_turns
from tests.conftest import OPENING_HOURS

MADRID = ZoneInfo("Europe/Madrid")


def res(*when, party_size=2, status="confirmed"):
    return SimpleNamespace(datetime_utc=datetime(*when, tzinfo=timezone.utc), party_size=party_size, status=status)


class TestOccupancyRate:

    def test_daily_averages_divided_by_days(self):
        rows = [
            {"turn": "Comida", "count": 5, "guests": 20, "capacity": 40},
            {"turn": "Cena", "count": 8, "guests": 30, "capacity": 60},
        ]
        assert occupancy_service.occupancy_rate(rows, 2) == pytest.approx(25.0)

    def test_eight_days_from_turn_totals(self):
        totals = {"Cena": {"count": 8, "guests": 80, "capacity": 100, "days_active": 7}}
        rows = grouping_service.daily_turn_averages(totals, 8)

        assert rows[0]["guests"] == 10
        assert occupancy_service.occupancy_rate(rows, 8) == pytest.approx(1.25)

    def test_single_day(self):
        rows = [{"turn": "Cena", "count": 3, "guests": 15, "capacity": 60}]
        assert occupancy_service.occupancy_rate(rows, 1) == pytest.approx(25.0)

    def test_no_turns(self):
        assert occupancy_service.occupancy_rate([], 7) == 0.0

    def test_zero_capacity(self):
        rows = [{"turn": "Comida", "count": 1, "guests": 4, "capacity": 0}]
        assert occupancy_service.occupancy_rate(rows, 1) == 0.0


class TestRealTimeOccupancy:

    def test_guests_and_status_breakdown(self):
        turns = extract_turns(OPENING_HOURS)
        reservations = [
            res(2024, 6, 5, 11, 30, party_size=4, status="confirmed"),
            res(2024, 6, 5, 12, 0, party_size=2, status="seated"),
            res(2024, 6, 5, 18, 30, party_size=3, status="arrived"),
            res(2024, 6, 5, 19, 0, party_size=5, status=None),
        ]

        result = occupancy_service.real_time_occupancy(reservations, turns, MADRID)

        comida, cena = result
        assert comida["turn"] == "Comida"
        assert comida["current_guests"] == 6
        assert comida["max_capacity"] == 40
        assert comida["percentage"] == pytest.approx(15.0)
        assert comida["status_breakdown"] == {"confirmed": 4, "pending": 0, "seated": 2, "finished": 0, "no_show": 0}

        # unbekannter Status kommt dazu, fehlender zählt als confirmed
        assert cena["status_breakdown"]["arrived"] == 3
        assert cena["status_breakdown"]["confirmed"] == 5
        assert cena["current_guests"] == 8

    def test_overbooked_not_capped(self):
        turns = extract_turns(OPENING_HOURS)
        result = occupancy_service.real_time_occupancy([res(2024, 6, 5, 11, 0, party_size=60)], turns, MADRID)
        assert result[0]["percentage"] == pytest.approx(150.0)

    def test_empty_day_lists_all_turns(self):
        result = occupancy_service.real_time_occupancy([], extract_turns(None), MADRID)
        assert [r["turn"] for r in result] == ["Comida", "Cena"]
        assert all(r["current_guests"] == 0 for r in result)


class TestFindShift:

    config = load_opening_hours(OPENING_HOURS)

    def test_shift_found(self):
        shift = occupancy_service.find_shift(self.config, "Sábado", 20.0)
        assert shift.name == "Cena"

    def test_end_exclusive(self):
        assert occupancy_service.find_shift(self.config, "Sábado", 23.0) is None
        assert occupancy_service.find_shift(self.config, "Sábado", 22.99).name == "Cena"

    def test_between_shifts(self):
        assert occupancy_service.find_shift(self.config, "Lunes", 17.0) is None

    def test_disabled_day(self):
        assert occupancy_service.find_shift(self.config, "Domingo", 14.0) is None

    def test_no_config(self):
        assert occupancy_service.find_shift(None, "Lunes", 14.0) is None


class TestUtcOffset:

    @pytest.mark.parametrize("local_time, utc_time, hours", [
        ("20:00", datetime(2024, 6, 1, 18, 0, tzinfo=timezone.utc), 2),
        ("23:30", datetime(2024, 1, 1, 22, 30, tzinfo=timezone.utc), 1),
        ("00:30", datetime(2024, 6, 1, 22, 30, tzinfo=timezone.utc), 2),
        ("18:00", datetime(2024, 6, 1, 22, 0, tzinfo=timezone.utc), -4),
        ("12:00", datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc), 0),
    ])
    def test_offset(self, local_time, utc_time, hours):
        assert occupancy_service.infer_utc_offset(local_time, utc_time) == timedelta(hours=hours)

    def test_invalid_local_time(self):
        with pytest.raises(ValueError):
            occupancy_service.infer_utc_offset("acht uhr", datetime(2024, 6, 1, 18, 0, tzinfo=timezone.utc))


class TestShiftWindow:

    def test_window_from_local_shift(self):
        """Lokal 20:00 am 01.06.2024 bei 18:00Z, Schicht 20:00-23:00 -> 18:00Z bis 21:00Z"""
        shift = ShiftConfig(name="Cena", start_time="20:00", end_time="23:00")
        offset = occupancy_service.infer_utc_offset("20:00", datetime(2024, 6, 1, 18, 0, tzinfo=timezone.utc))

        start, end = occupancy_service.shift_window_utc(shift, date(2024, 6, 1), offset)

        assert start == datetime(2024, 6, 1, 18, 0, tzinfo=timezone.utc)
        assert end == datetime(2024, 6, 1, 21, 0, tzinfo=timezone.utc)

    def test_half_hours(self):
        shift = ShiftConfig(name="Comida", start_time="13:30", end_time="16:15")
        start, end = occupancy_service.shift_window_utc(shift, date(2024, 1, 10), timedelta(hours=1))

        assert start == datetime(2024, 1, 10, 12, 30, tzinfo=timezone.utc)
        assert end == datetime(2024, 1, 10, 15, 15, tzinfo=timezone.utc)


class TestSummarizeShift:

    def test_with_shift_limit(self):
        summary = occupancy_service.summarize_shift(30, 80, 60)

        assert summary == {
            "current_covers": 30,
            "total_capacity": 80,
            "bot_max_covers": 60,
            "available_spots": 50,
            "bot_available_spots": 30,
            "utilization_percent": 38,
        }

    def test_overbooked_floors_at_zero(self):
        summary = occupancy_service.summarize_shift(90, 80, None)

        assert summary["bot_max_covers"] == 80
        assert summary["available_spots"] == 0
        assert summary["bot_available_spots"] == 0
        assert summary["utilization_percent"] == 113

    def test_zero_capacity(self):
        assert occupancy_service.summarize_shift(5, 0, None)["utilization_percent"] == 0
