from typing import Mapping


def largest_remainder_percentages(counts: Mapping[str, int]) -> list[dict]:
    """
    Verteilt ganzzahlige Prozente nach dem Largest-Remainder-Verfahren,
    Summe ist immer exakt 100 (bei total > 0).

    Gerechnet wird mit ganzen Zahlen: Basis = 100*count // total,
    Rest = 100*count % total. Die Summe der Reste ist genau
    fehlende_punkte * total, es gibt also immer genug Kategorien mit Rest > 0.

    Gleichstand beim Rest: Reihenfolge wie in counts (stabil).
    Ausgabe sortiert nach count absteigend.
    """
    total = sum(counts.values())
    if total == 0:
        return [
            {"label": label, "count": count, "percentage": 0}
            for label, count in counts.items()
        ]

    entries = []
    for label, count in counts.items():
        base, remainder = divmod(100 * count, total)
        entries.append({"label": label, "count": count, "percentage": base, "remainder": remainder})

    missing = 100 - sum(entry["percentage"] for entry in entries)

    for entry in sorted(entries, key=lambda e: e["remainder"], reverse=True):
        if missing <= 0:
            break
        if entry["remainder"] > 0:
            entry["percentage"] += 1
            missing -= 1

    ordered = sorted(entries, key=lambda e: e["remainder"], reverse=True)
    ordered.sort(key=lambda e: e["count"], reverse=True)
    return [
        {"label": e["label"], "count": e["count"], "percentage": e["percentage"]}
        for e in ordered
    ]
