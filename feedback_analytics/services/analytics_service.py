"""
Service computing the dashboard analytics views from feedback snapshots.

Each view is a pure function of the snapshot list: it builds its own
grouping dict, reduces it and returns fresh records. Views never read each
other's output, so they can be computed in any order.

Zero handling differs by view and is kept as the dashboard expects it:
overall stats, semester trends, division comparisons and faculty
performance average every parsed rating including zeros, while subject
ratings and the lecture/lab comparison average only ratings above zero.
"""

import logging
import math
from typing import Iterator, List, Tuple

from config import (
    ANONYMOUS_STUDENT_ID,
    DEFAULT_BATCH,
    ENGAGEMENT_CAP,
    ENGAGEMENT_DIVISOR,
    LECTURE,
    UNKNOWN_FACULTY_ID,
)
from feedback_analytics.models.records import (
    AnalyticsReport,
    DivisionBatchComparison,
    FacultyPerformance,
    FilterOptions,
    LectureLabComparison,
    OverallStats,
    SemesterTrend,
    SubjectRating,
)
from feedback_analytics.models.snapshot import FeedbackSnapshot
from feedback_analytics.services.normalization import average, positive_only, rate_snapshots
from utils import normalize_batch, text_sort_key

logger = logging.getLogger(__name__)


def process_overall_stats(snapshots: List[FeedbackSnapshot]) -> OverallStats:
    """Headline counts and the mean of every valid rating (zeros included)."""
    rated = rate_snapshots(snapshots)
    ratings = [item.rating for item in rated]

    return OverallStats(
        total_responses=len(rated),
        average_rating=average(ratings),
        unique_subjects=len({item.snapshot.subject_id for item in rated}),
        unique_faculties=len({item.snapshot.faculty_id for item in rated}),
        unique_students=len({
            item.snapshot.student_id or ANONYMOUS_STUDENT_ID for item in rated
        }),
        unique_departments=len({item.snapshot.department_id for item in rated}),
        response_rate=100 if rated else 0,
    )


def process_subject_ratings(snapshots: List[FeedbackSnapshot]) -> List[SubjectRating]:
    """
    Lecture, lab and overall ratings per subject and faculty.

    Only ratings above zero are averaged and counted. A bucket without any
    such rating reports ``None``.
    """
    groups = {}
    for item in rate_snapshots(snapshots):
        snapshot = item.snapshot
        key = (snapshot.subject_id, snapshot.faculty_id or UNKNOWN_FACULTY_ID)
        if key not in groups:
            groups[key] = {
                'snapshot': snapshot,
                'lecture': [],
                'lab': [],
            }
        bucket = 'lecture' if item.lecture_type == LECTURE else 'lab'
        groups[key][bucket].append(item.rating)

    results = []
    for group in groups.values():
        snapshot = group['snapshot']
        lecture = positive_only(group['lecture'])
        lab = positive_only(group['lab'])
        combined = lecture + lab

        results.append(SubjectRating(
            subject_id=snapshot.subject_id,
            subject_name=snapshot.subject_name,
            subject_abbreviation=snapshot.subject_abbreviation or '',
            faculty_id=snapshot.faculty_id,
            faculty_name=snapshot.faculty_name,
            lecture_average_rating=average(lecture),
            lab_average_rating=average(lab),
            overall_average_rating=average(combined),
            total_lecture_responses=len(lecture),
            total_lab_responses=len(lab),
            total_overall_responses=len(combined),
        ))

    logger.debug(f"Computed {len(results)} subject rating groups")
    return results


def process_semester_trends(snapshots: List[FeedbackSnapshot],
                            subject_id=None) -> List[SemesterTrend]:
    """
    Average rating per subject name and semester, ordered by semester then subject.

    Subjects are grouped by name, so two subjects sharing a name form one
    trend line. The academic year comes from the first snapshot of each
    group. Pass *subject_id* to restrict the trend to one subject.
    """
    rated = rate_snapshots(snapshots)
    if subject_id is not None:
        rated = [item for item in rated if str(item.snapshot.subject_id) == str(subject_id)]

    groups = {}
    for item in rated:
        snapshot = item.snapshot
        key = (snapshot.subject_name, snapshot.semester_number)
        if key not in groups:
            groups[key] = {'snapshot': snapshot, 'ratings': []}
        groups[key]['ratings'].append(item.rating)

    trends = [
        SemesterTrend(
            subject=group['snapshot'].subject_name,
            subject_abbreviation=group['snapshot'].subject_abbreviation or '',
            semester=group['snapshot'].semester_number,
            average_rating=average(group['ratings']),
            response_count=len(group['ratings']),
            academic_year_id=group['snapshot'].academic_year_id,
            academic_year=group['snapshot'].academic_year_string,
        )
        for group in groups.values()
    ]
    return sorted(trends, key=lambda trend: (trend.semester, text_sort_key(trend.subject)))


def engagement_score(total_responses: int) -> int:
    """Participation volume on a 0-10 scale; not a quality signal."""
    # half-up rounding, 37 responses -> 7.4 -> 7
    return min(ENGAGEMENT_CAP, math.floor(total_responses / ENGAGEMENT_DIVISOR + 0.5))


def process_division_comparisons(snapshots: List[FeedbackSnapshot]) -> List[DivisionBatchComparison]:
    """Average rating and engagement per division and batch."""
    groups = {}
    for item in rate_snapshots(snapshots):
        snapshot = item.snapshot
        batch = normalize_batch(snapshot.batch, DEFAULT_BATCH)
        key = (snapshot.division_id, batch)
        if key not in groups:
            groups[key] = {'snapshot': snapshot, 'batch': batch, 'ratings': []}
        groups[key]['ratings'].append(item.rating)

    results = []
    for group in groups.values():
        snapshot = group['snapshot']
        total = len(group['ratings'])
        results.append(DivisionBatchComparison(
            department_id=snapshot.department_id,
            department_name=snapshot.department_name,
            division_id=snapshot.division_id,
            division_name=snapshot.division_name,
            batch=group['batch'],
            average_rating=average(group['ratings']),
            total_responses=total,
            engagement_score=engagement_score(total),
        ))
    return results


def process_faculty_performance(snapshots: List[FeedbackSnapshot]) -> List[FacultyPerformance]:
    """Average rating per faculty and academic year, best first."""
    groups = {}
    for item in rate_snapshots(snapshots):
        snapshot = item.snapshot
        key = (snapshot.faculty_id, snapshot.academic_year_id)
        if key not in groups:
            groups[key] = {'snapshot': snapshot, 'ratings': []}
        groups[key]['ratings'].append(item.rating)

    results = [
        FacultyPerformance(
            faculty_id=group['snapshot'].faculty_id,
            faculty_name=group['snapshot'].faculty_name,
            academic_year_id=group['snapshot'].academic_year_id,
            average_rating=average(group['ratings']),
            total_responses=len(group['ratings']),
        )
        for group in groups.values()
    ]
    return sorted(results, key=lambda record: record.average_rating, reverse=True)


def rank_faculty(performance: List[FacultyPerformance]) -> Iterator[Tuple[int, FacultyPerformance]]:
    """Yield (rank, record) pairs; rank is the 1-based position in *performance*."""
    for index, record in enumerate(performance):
        yield index + 1, record


def process_lecture_lab_comparison(snapshots: List[FeedbackSnapshot]) -> LectureLabComparison:
    """
    Lecture versus lab averages over the whole collection.

    Averages use ratings above zero and fall back to 0. Counts include zero
    ratings, so the two counts add up to the number of valid snapshots.
    """
    lecture = []
    lab = []
    for item in rate_snapshots(snapshots):
        if item.lecture_type == LECTURE:
            lecture.append(item.rating)
        else:
            lab.append(item.rating)

    return LectureLabComparison(
        lecture_average_rating=average(positive_only(lecture)) or 0,
        lab_average_rating=average(positive_only(lab)) or 0,
        total_lecture_responses=len(lecture),
        total_lab_responses=len(lab),
    )


def get_filtering_options(snapshots: List[FeedbackSnapshot]) -> FilterOptions:
    """Distinct sorted dimension values over the full, unfiltered collection."""
    if not isinstance(snapshots, (list, tuple)):
        raise TypeError(f"Expected a list of snapshots, got {type(snapshots).__name__}")

    return FilterOptions(
        academic_years=sorted({s.academic_year_string for s in snapshots}, key=text_sort_key),
        departments=sorted({s.department_name for s in snapshots}, key=text_sort_key),
        subjects=sorted({s.subject_name for s in snapshots}, key=text_sort_key),
        semesters=sorted({s.semester_number for s in snapshots}),
        divisions=sorted({s.division_name for s in snapshots}, key=text_sort_key),
    )


def build_analytics_report(snapshots: List[FeedbackSnapshot]) -> AnalyticsReport:
    """Compute every dashboard view for *snapshots*."""
    if not isinstance(snapshots, (list, tuple)):
        raise TypeError(f"Expected a list of snapshots, got {type(snapshots).__name__}")

    logger.info(f"Building analytics report for {len(snapshots)} snapshots")
    return AnalyticsReport(
        overall_stats=process_overall_stats(snapshots),
        subject_ratings=process_subject_ratings(snapshots),
        semester_trends=process_semester_trends(snapshots),
        division_comparisons=process_division_comparisons(snapshots),
        faculty_performance=process_faculty_performance(snapshots),
        lecture_lab_comparison=process_lecture_lab_comparison(snapshots),
        filtering_options=get_filtering_options(snapshots),
    )
