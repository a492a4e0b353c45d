from .errors import (
    SchedulingError,
    ValidationError,
    SlotUnavailableError,
    ConflictError,
    NotFoundError,
    StoreError,
)
from .slots import SlotStore
from .appointments import AppointmentStore
from .booking import BookingCoordinator
from .stats import StatsAggregator, compute_stats
