from typing import List

from schooldesk.core.schemas import ApiModel


class DashboardStats(ApiModel):
    total_students: int
    total_teachers: int
    total_subjects: int
    notices: int


class MonthlyData(ApiModel):
    """Rows created per calendar month of the current year, January first."""

    teachers: List[int]
    students: List[int]


class GenderData(ApiModel):
    boys: int
    girls: int
