from models.book import Book, BookItem
from models.allocation import BookAllocation, MonthAllocation, MonthPlan
from models.calendar import CalendarEvent, CalendarOverride, Holiday
from models.lesson import LessonRecord, ProgressCursor
from models.owner import Owner
from models.plan_data import PlanData, FeasibilityReport

__all__ = [
    "Book",
    "BookItem",
    "BookAllocation",
    "MonthAllocation",
    "MonthPlan",
    "CalendarEvent",
    "CalendarOverride",
    "Holiday",
    "LessonRecord",
    "ProgressCursor",
    "Owner",
    "PlanData",
    "FeasibilityReport",
]
