"""
Academic-year trend charts and subject/faculty breakdowns.

These views average ratings above zero only and report ``0`` for a
group without any, while ``responseCount`` counts every valid rating.
"""

import logging
from typing import List, Optional

from feedback_analytics.models.records import (
    AcademicYearDepartmentTrend,
    AcademicYearDivisionTrend,
    AcademicYearSemesterTrend,
    AcademicYearTrendEntry,
    DepartmentTrendEntry,
    DivisionTrendEntry,
    FacultyRating,
    SubjectFacultyPerformance,
)
from feedback_analytics.models.snapshot import FeedbackSnapshot
from feedback_analytics.services.normalization import average, positive_only, rate_snapshots
from utils import text_sort_key

logger = logging.getLogger(__name__)


def _positive_average(ratings):
    return average(positive_only(ratings)) or 0


def _sorted_by_name(mapping):
    return sorted(mapping.items(), key=lambda item: text_sort_key(item[0]))


def _nested_groups(snapshots, outer, inner):
    """Group valid ratings into {outer_key: {inner_key: [ratings]}}."""
    groups = {}
    for item in rate_snapshots(snapshots):
        inner_map = groups.setdefault(outer(item.snapshot), {})
        inner_map.setdefault(inner(item.snapshot), []).append(item.rating)
    return groups


def process_academic_year_department_trends(
        snapshots: List[FeedbackSnapshot]) -> List[AcademicYearDepartmentTrend]:
    """Per academic year, the average rating of each department."""
    groups = _nested_groups(
        snapshots,
        outer=lambda s: s.academic_year_string,
        inner=lambda s: s.department_name,
    )

    return [
        AcademicYearDepartmentTrend(
            academic_year_string=year,
            department_data=[
                DepartmentTrendEntry(
                    department_name=department,
                    average_rating=_positive_average(ratings),
                    response_count=len(ratings),
                )
                for department, ratings in _sorted_by_name(groups[year])
            ],
        )
        for year in sorted(groups, key=text_sort_key)
    ]


def process_academic_year_semester_trends(
        snapshots: List[FeedbackSnapshot]) -> List[AcademicYearSemesterTrend]:
    """Per semester number, the average rating in each academic year."""
    groups = _nested_groups(
        snapshots,
        outer=lambda s: s.semester_number,
        inner=lambda s: s.academic_year_string,
    )

    return [
        AcademicYearSemesterTrend(
            semester_number=semester,
            academic_year_data=[
                AcademicYearTrendEntry(
                    academic_year_string=year,
                    average_rating=_positive_average(ratings),
                    response_count=len(ratings),
                )
                for year, ratings in _sorted_by_name(groups[semester])
            ],
        )
        for semester in sorted(groups)
    ]


def process_academic_year_division_trends(
        snapshots: List[FeedbackSnapshot]) -> List[AcademicYearDivisionTrend]:
    """Per academic year, the average rating of each division."""
    groups = _nested_groups(
        snapshots,
        outer=lambda s: s.academic_year_string,
        inner=lambda s: s.division_name,
    )

    return [
        AcademicYearDivisionTrend(
            academic_year_string=year,
            division_data=[
                DivisionTrendEntry(
                    division_name=division,
                    average_rating=_positive_average(ratings),
                    response_count=len(ratings),
                )
                for division, ratings in _sorted_by_name(groups[year])
            ],
        )
        for year in sorted(groups, key=text_sort_key)
    ]


def _summarize_subject(subject_name, subject_abbreviation, subject_ratings, faculties):
    faculty_data = [
        FacultyRating(
            faculty_id=entry['faculty_id'],
            faculty_name=entry['faculty_name'],
            average_rating=_positive_average(entry['ratings']),
            response_count=len(entry['ratings']),
        )
        for entry in sorted(faculties.values(), key=lambda e: text_sort_key(e['faculty_name']))
    ]

    return SubjectFacultyPerformance(
        subject_name=subject_name,
        subject_abbreviation=subject_abbreviation,
        overall_subject_average=average(positive_only(subject_ratings)),
        overall_subject_responses=len(subject_ratings),
        faculty_data=faculty_data,
    )


def _collect_subject(rated):
    """Return (all ratings, {faculty_id: entry}) for the rated snapshots of one subject."""
    ratings = []
    faculties = {}
    for item in rated:
        snapshot = item.snapshot
        ratings.append(item.rating)
        # responses without a named faculty only count toward the subject
        if snapshot.faculty_id and snapshot.faculty_name:
            entry = faculties.setdefault(snapshot.faculty_id, {
                'faculty_id': snapshot.faculty_id,
                'faculty_name': snapshot.faculty_name,
                'ratings': [],
            })
            entry['ratings'].append(item.rating)
    return ratings, faculties


def process_subject_faculty_performance(
        snapshots: List[FeedbackSnapshot]) -> List[SubjectFacultyPerformance]:
    """Per subject, the overall average and each faculty's average, sorted by name."""
    by_subject = {}
    for item in rate_snapshots(snapshots):
        by_subject.setdefault(item.snapshot.subject_id, []).append(item)

    results = []
    for rated in by_subject.values():
        first = rated[0].snapshot
        ratings, faculties = _collect_subject(rated)
        results.append(_summarize_subject(
            first.subject_name, first.subject_abbreviation or '', ratings, faculties
        ))

    return sorted(results, key=lambda r: text_sort_key(r.subject_name))


def process_subject_faculty_detail(snapshots: List[FeedbackSnapshot],
                                   subject_id) -> Optional[SubjectFacultyPerformance]:
    """
    Faculty breakdown for a single subject.

    Returns None when no snapshot belongs to *subject_id*. Name and
    abbreviation come from the subject's first snapshot, valid or not.
    """
    if not isinstance(snapshots, (list, tuple)):
        raise TypeError(f"Expected a list of snapshots, got {type(snapshots).__name__}")

    subject_snapshots = [s for s in snapshots if str(s.subject_id) == str(subject_id)]
    if not subject_snapshots:
        logger.info(f"No snapshots found for subject {subject_id}")
        return None

    first = subject_snapshots[0]
    ratings, faculties = _collect_subject(rate_snapshots(subject_snapshots))
    return _summarize_subject(
        first.subject_name, first.subject_abbreviation or '', ratings, faculties
    )
