"""slot-booking: allocation and display core for the ad slot booking calendar."""

from slot_booking.allocation import Occupancy, allocate, find_free_slot
from slot_booking.booking import book, book_range, import_table
from slot_booking.cells import CellRun, build_runs
from slot_booking.layout import SlotLayout
from slot_booking.loaders import load_layout_json
from slot_booking.normalize import canonical_family, normalize
from slot_booking.parser import ParsedRow, parse, parse_table, parse_text, parse_workbook
from slot_booking.store import InMemoryBookingStore
from slot_booking.summary import Span, summarize
from slot_booking.types import (
    AllocationError,
    AllocationFailure,
    AllocationResult,
    Booking,
    BookingConflictError,
    BookingRequest,
    FailureReason,
    LayoutError,
    ValidationError,
)

__all__ = [
    "AllocationError",
    "AllocationFailure",
    "AllocationResult",
    "Booking",
    "BookingConflictError",
    "BookingRequest",
    "CellRun",
    "FailureReason",
    "InMemoryBookingStore",
    "LayoutError",
    "Occupancy",
    "ParsedRow",
    "SlotLayout",
    "Span",
    "ValidationError",
    "allocate",
    "book",
    "book_range",
    "build_runs",
    "canonical_family",
    "find_free_slot",
    "import_table",
    "load_layout_json",
    "normalize",
    "parse",
    "parse_table",
    "parse_text",
    "parse_workbook",
    "summarize",
]
