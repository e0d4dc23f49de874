"""
Tests für die Turn-Erkennung aus den Öffnungszeiten.
"""
import pytest

from app.schemas.opening_hours import load_opening_hours
from app.services.turn_service import extract_turns, fallback_turns, find_turn_for_hour
from tests.conftest import OPENING_HOURS


def shift(name, start, end, max_covers=None):
    data = {"name": name, "startTime": start, "endTime": end}
    if max_covers is not None:
        data["maxCovers"] = max_covers
    return data


class TestFallback:

    @pytest.mark.parametrize("opening_hours", [None, {}, "kaputt", [], {"Lunes": {"enabled": False, "shifts": []}}])
    def test_no_usable_shifts(self, opening_hours):
        turns = extract_turns(opening_hours)

        assert [(t.name, t.start_hour, t.end_hour, t.capacity) for t in turns] == [
            ("Comida", 12, 16, 50),
            ("Cena", 19, 23, 60),
        ]

    def test_fallback_is_fresh_list(self):
        turns = fallback_turns()
        turns[0].capacity = 1
        assert fallback_turns()[0].capacity == 50


class TestExtractTurns:

    def test_weekly_schedule(self):
        turns = extract_turns(OPENING_HOURS)

        assert [t.name for t in turns] == ["Comida", "Cena"]
        comida, cena = turns
        assert (comida.start_hour, comida.end_hour, comida.capacity) == (13, 16, 40)
        assert (cena.start_hour, cena.end_hour, cena.capacity) == (20, 23, 60)
        # Sonntag ist geschlossen
        assert comida.days_active == 6

    def test_accepts_parsed_config(self):
        assert extract_turns(load_opening_hours(OPENING_HOURS)) == extract_turns(OPENING_HOURS)

    def test_start_floor_end_ceil(self):
        turns = extract_turns({"Lunes": {"enabled": True, "shifts": [shift("Comida", "13:30", "16:15")]}})
        assert (turns[0].start_hour, turns[0].end_hour) == (13, 17)

    def test_first_occurrence_wins(self):
        turns = extract_turns({
            "Lunes": {"enabled": True, "shifts": [shift("Comida", "13:00", "16:00", 40)]},
            "Martes": {"enabled": True, "shifts": [shift("Comida", "12:00", "17:00", 99)]},
        })

        assert len(turns) == 1
        assert (turns[0].start_hour, turns[0].end_hour, turns[0].capacity) == (13, 16, 40)
        assert turns[0].days_active == 2

    def test_missing_max_covers_defaults_to_50(self):
        turns = extract_turns({"Lunes": {"enabled": True, "shifts": [shift("Cena", "20:00", "23:00")]}})
        assert turns[0].capacity == 50

    def test_sorted_by_start_hour(self):
        turns = extract_turns({"Lunes": {"enabled": True, "shifts": [
            shift("Cena", "20:00", "23:00"),
            shift("Desayuno", "08:00", "11:00"),
            shift("Comida", "13:00", "16:00"),
        ]}})
        assert [t.name for t in turns] == ["Desayuno", "Comida", "Cena"]

    def test_incomplete_shifts_are_skipped(self):
        turns = extract_turns({"Lunes": {"enabled": True, "shifts": [
            {"startTime": "13:00", "endTime": "16:00"},
            shift("Cena", "20h", "23:00"),
            "keine schicht",
            shift("Comida", "13:00", "16:00"),
        ]}})
        assert [t.name for t in turns] == ["Comida"]

    def test_broken_day_does_not_break_others(self):
        turns = extract_turns({
            "Lunes": {"enabled": True, "shifts": "nicht-liste"},
            "Martes": {"enabled": True, "shifts": [shift("Comida", "13:00", "16:00")]},
        })
        assert [t.name for t in turns] == ["Comida"]
        assert turns[0].days_active == 1

    def test_english_day_names(self):
        turns = extract_turns({"Monday": {"enabled": True, "shifts": [shift("Lunch", "12:00", "15:00")]}})
        assert turns[0].name == "Lunch"

    def test_same_shift_twice_a_day_counts_once(self):
        turns = extract_turns({"Lunes": {"enabled": True, "shifts": [
            shift("Comida", "13:00", "14:00"),
            shift("Comida", "14:00", "16:00"),
        ]}})
        assert turns[0].days_active == 1
        assert turns[0].end_hour == 14


class TestFindTurnForHour:

    def test_end_is_exclusive(self):
        turns = extract_turns(OPENING_HOURS)

        assert find_turn_for_hour(13, turns).name == "Comida"
        assert find_turn_for_hour(15, turns).name == "Comida"
        assert find_turn_for_hour(16, turns) is None
        assert find_turn_for_hour(22, turns).name == "Cena"
        assert find_turn_for_hour(23, turns) is None

    def test_overlap_first_turn_wins(self):
        turns = extract_turns({"Lunes": {"enabled": True, "shifts": [
            shift("Comida", "12:00", "17:00"),
            shift("Merienda", "16:00", "19:00"),
        ]}})
        assert find_turn_for_hour(16, turns).name == "Comida"
