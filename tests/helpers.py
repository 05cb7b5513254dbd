from datetime import datetime, timedelta, timezone

T0 = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def start(client, name="Website", deadline_days=10):
    return client.post("/start-project", json={"name": name, "deadlineDays": deadline_days})
