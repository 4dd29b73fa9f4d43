"""Shared test helpers for RoundBell."""

from roundbell.timer.engine import TimerEngine


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


class EventRecorder:
    """Notification sink that keeps every event it receives."""

    def __init__(self):
        self.events: list = []

    def handle(self, event):
        self.events.append(event)

    def of_type(self, cls):
        return [e for e in self.events if isinstance(e, cls)]

    def clear(self):
        self.events.clear()


class FakePlayer:
    """Stands in for SoundManager; records the names it was asked to play."""

    def __init__(self):
        self.played: list[str] = []

    def play(self, name):
        self.played.append(name)


def run_ticks(engine: TimerEngine, count: int) -> None:
    for _ in range(count):
        engine.tick()


def finish_phase(engine: TimerEngine) -> None:
    """Tick until the active phase hands over to the next one."""
    run_ticks(engine, engine.time_remaining)


def run_to_completion(engine: TimerEngine) -> None:
    while engine.state.is_running:
        engine.tick()
