"""
Value objects returned by the aggregation views.

Attributes are snake_case; ``to_dict`` emits the camelCase field names the
dashboard reads.
"""
from dataclasses import asdict, dataclass, field
from typing import Any, List, Optional

from utils import camelize_keys


class _Record:
    def to_dict(self):
        return camelize_keys(asdict(self))


@dataclass(frozen=True)
class OverallStats(_Record):
    total_responses: int
    average_rating: Optional[float]
    unique_subjects: int
    unique_faculties: int
    unique_students: int
    unique_departments: int
    response_rate: int


@dataclass(frozen=True)
class SubjectRating(_Record):
    subject_id: Any
    subject_name: str
    subject_abbreviation: str
    faculty_id: Any
    faculty_name: Optional[str]
    lecture_average_rating: Optional[float]
    lab_average_rating: Optional[float]
    overall_average_rating: Optional[float]
    total_lecture_responses: int
    total_lab_responses: int
    total_overall_responses: int


@dataclass(frozen=True)
class SemesterTrend(_Record):
    subject: str
    subject_abbreviation: str
    semester: int
    average_rating: float
    response_count: int
    academic_year_id: Any
    academic_year: str


@dataclass(frozen=True)
class DivisionBatchComparison(_Record):
    department_id: Any
    department_name: str
    division_id: Any
    division_name: str
    batch: str
    average_rating: float
    total_responses: int
    engagement_score: int


@dataclass(frozen=True)
class FacultyPerformance(_Record):
    faculty_id: Any
    faculty_name: str
    academic_year_id: Any
    average_rating: float
    total_responses: int


@dataclass(frozen=True)
class LectureLabComparison(_Record):
    lecture_average_rating: float
    lab_average_rating: float
    total_lecture_responses: int
    total_lab_responses: int


@dataclass(frozen=True)
class FilterOptions(_Record):
    academic_years: List[str] = field(default_factory=list)
    departments: List[str] = field(default_factory=list)
    subjects: List[str] = field(default_factory=list)
    semesters: List[int] = field(default_factory=list)
    divisions: List[str] = field(default_factory=list)


# Academic-year trend charts

@dataclass(frozen=True)
class DepartmentTrendEntry(_Record):
    department_name: str
    average_rating: float
    response_count: int


@dataclass(frozen=True)
class AcademicYearDepartmentTrend(_Record):
    academic_year_string: str
    department_data: List[DepartmentTrendEntry]


@dataclass(frozen=True)
class AcademicYearTrendEntry(_Record):
    academic_year_string: str
    average_rating: float
    response_count: int


@dataclass(frozen=True)
class AcademicYearSemesterTrend(_Record):
    semester_number: int
    academic_year_data: List[AcademicYearTrendEntry]


@dataclass(frozen=True)
class DivisionTrendEntry(_Record):
    division_name: str
    average_rating: float
    response_count: int


@dataclass(frozen=True)
class AcademicYearDivisionTrend(_Record):
    academic_year_string: str
    division_data: List[DivisionTrendEntry]


# Subject / faculty breakdown

@dataclass(frozen=True)
class FacultyRating(_Record):
    faculty_id: Any
    faculty_name: str
    average_rating: float
    response_count: int


@dataclass(frozen=True)
class SubjectFacultyPerformance(_Record):
    subject_name: str
    subject_abbreviation: str
    overall_subject_average: Optional[float]
    overall_subject_responses: int
    faculty_data: List[FacultyRating]


@dataclass(frozen=True)
class AnalyticsReport(_Record):
    """Every dashboard view computed from one snapshot collection."""

    overall_stats: OverallStats
    subject_ratings: List[SubjectRating]
    semester_trends: List[SemesterTrend]
    division_comparisons: List[DivisionBatchComparison]
    faculty_performance: List[FacultyPerformance]
    lecture_lab_comparison: LectureLabComparison
    filtering_options: FilterOptions
