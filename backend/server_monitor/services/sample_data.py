import random
from datetime import date, timedelta

from server_monitor.schemas.record import RecordIn

AC_CHOICES = ["normal", "maintenance", "broken"]
UPS_CHOICES = ["normal", "low_battery", "maintenance", "broken"]


def generate_sample_records(days: int = 31, today: date | None = None, rng: random.Random | None = None) -> list[RecordIn]:
    """One 08:00 reading per day for the last ``days`` days, oldest first."""
    today = today or date.today()
    rng = rng or random.Random()

    records = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        records.append(
            RecordIn(
                date=day.isoformat(),
                time="08:00",
                temperature=round(22 + rng.random() * 4, 1),
                humidity=round(45 + rng.random() * 20, 1),
                ac_status=rng.choice(AC_CHOICES),
                ups_status=rng.choice(UPS_CHOICES),
                rack_count=rng.randint(3, 7),
                active_servers=rng.randint(10, 29),
                power_usage=round(3 + rng.random() * 5, 2),
                fire_extinguisher_status="ready",
                notes="Routine inspection",
            )
        )
    return records
