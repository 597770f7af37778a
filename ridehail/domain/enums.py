"""Domain enumerations and state-transition rules."""

import enum


class TripStatus(str, enum.Enum):
    SEARCHING = "SEARCHING"
    ACCEPTED = "ACCEPTED"
    ARRIVING = "ARRIVING"
    STARTED = "STARTED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# State machine: maps current status -> set of valid next statuses
TRIP_TRANSITIONS: dict[TripStatus, set[TripStatus]] = {
    TripStatus.SEARCHING: {TripStatus.ACCEPTED, TripStatus.CANCELLED},
    TripStatus.ACCEPTED: {TripStatus.ARRIVING, TripStatus.CANCELLED},
    TripStatus.ARRIVING: {TripStatus.STARTED},
    TripStatus.STARTED: {TripStatus.COMPLETED},
    TripStatus.COMPLETED: set(),
    TripStatus.CANCELLED: set(),
}

TERMINAL_STATUSES = frozenset({TripStatus.COMPLETED, TripStatus.CANCELLED})


class VehicleType(str, enum.Enum):
    MINI = "MINI"
    SEDAN = "SEDAN"
    SUV = "SUV"


class ActorRole(str, enum.Enum):
    RIDER = "RIDER"
    DRIVER = "DRIVER"
