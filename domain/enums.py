"""
Domain enums for the Selkie's box.
Contains all enumeration types used across the domain models.
"""

import enum


class DeliveryWeekday(str, enum.Enum):
    """The only weekdays we deliver on, in calendar order"""

    TUESDAY = "Tuesday"
    THURSDAY = "Thursday"
    SATURDAY = "Saturday"

    @property
    def iso_index(self) -> int:
        """Python weekday number (Monday == 0)"""
        return _WEEKDAY_INDEX[self]

    @classmethod
    def from_index(cls, weekday: int) -> "DeliveryWeekday":
        for day, index in _WEEKDAY_INDEX.items():
            if index == weekday:
                return day
        raise ValueError(f"Weekday {weekday} is not a delivery day")


_WEEKDAY_INDEX = {
    DeliveryWeekday.TUESDAY: 1,
    DeliveryWeekday.THURSDAY: 3,
    DeliveryWeekday.SATURDAY: 5,
}


class Recurrence(str, enum.Enum):
    """How often the box is delivered"""

    ONE_TIME = "one-time"
    RECURRING = "recurring"


class PlanStage(str, enum.Enum):
    """Configuration steps, strictly ordered"""

    UNCONFIGURED = "unconfigured"
    RECURRENCE_CHOSEN = "recurrence_chosen"
    DATES_CHOSEN = "dates_chosen"
    PRODUCTS_SELECTED = "products_selected"
    ADDRESS_ENTERED = "address_entered"
    READY_FOR_PAYMENT = "ready_for_payment"

    @property
    def rank(self) -> int:
        return _STAGE_ORDER.index(self)

    def at_least(self, other: "PlanStage") -> bool:
        return self.rank >= other.rank


_STAGE_ORDER = list(PlanStage)


class DietType(str, enum.Enum):
    """Menu diet badges"""

    VEG = "veg"
    EGG = "egg"
    NON_VEG = "non-veg"


class PaymentStatus(str, enum.Enum):
    """Outcome reported by the payment gateway"""

    SUCCEEDED = "succeeded"
    CANCELLED = "cancelled"
    FAILED = "failed"
