from dataclasses import dataclass
from datetime import datetime, time

from backend.core import config

SLOT_TIME_FORMAT = '%H:%M'


def parse_slot_time(value: str) -> time:
    return datetime.strptime(value.strip(), SLOT_TIME_FORMAT).time()


def format_slot_time(value: time) -> str:
    return value.strftime(SLOT_TIME_FORMAT)


@dataclass(frozen=True)
class WorkingHours:
    """Daily working window of a doctor, with a single break."""

    start: time
    end: time
    break_start: time
    break_end: time

    @classmethod
    def from_strings(cls, start: str, end: str, break_start: str, break_end: str) -> 'WorkingHours':
        return cls(
            start=parse_slot_time(start),
            end=parse_slot_time(end),
            break_start=parse_slot_time(break_start),
            break_end=parse_slot_time(break_end),
        )

    def is_break(self, slot_time: time) -> bool:
        return self.break_start <= slot_time < self.break_end

    def allows(self, slot_time: time) -> bool:
        return self.start <= slot_time < self.end and not self.is_break(slot_time)

    def as_dict(self) -> dict[str, str]:
        return {
            'start': format_slot_time(self.start),
            'end': format_slot_time(self.end),
            'break_start': format_slot_time(self.break_start),
            'break_end': format_slot_time(self.break_end),
        }


def default_working_hours() -> WorkingHours:
    return WorkingHours.from_strings(
        config.DEFAULT_WORK_START,
        config.DEFAULT_WORK_END,
        config.DEFAULT_BREAK_START,
        config.DEFAULT_BREAK_END,
    )
