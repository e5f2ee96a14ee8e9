from models.teacher import Teacher
from models.school_class import SchoolClass
from models.subject import Subject
from models.workload import WorkloadRequirement, Capability, AvailabilitySlot
from models.timeslot import Slot
from models.dataset import Dataset, FeasibilityReport

__all__ = [
    "Teacher",
    "SchoolClass",
    "Subject",
    "WorkloadRequirement",
    "Capability",
    "AvailabilitySlot",
    "Slot",
    "Dataset",
    "FeasibilityReport",
]
