"""
Service for scoping snapshot collections and building the cascading
filter dictionary behind the dashboard dropdowns.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from config import LAB, LECTURE, LECTURE_TYPE_LABELS
from feedback_analytics.models.snapshot import FeedbackSnapshot
from feedback_analytics.services.normalization import determine_lecture_type
from utils import normalize_semester, parse_bool, text_sort_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SnapshotFilter:
    """Filter parameters accepted by the analytics endpoints. None means "any"."""

    academic_year_id: Any = None
    department_id: Any = None
    subject_id: Any = None
    semester_number: Optional[int] = None
    division_id: Any = None
    lecture_type: Optional[str] = None
    include_deleted: bool = False

    def __post_init__(self):
        if self.lecture_type is not None and self.lecture_type not in (LECTURE, LAB):
            raise ValueError(f"Unknown lecture type: {self.lecture_type}")

    @classmethod
    def from_args(cls, args):
        """Build a filter from query-string arguments (camelCase keys)."""
        def _value(name):
            value = args.get(name)
            if value is None or str(value).strip() == '':
                return None
            return str(value).strip()

        semester = _value('semesterNumber')
        lecture_type = _value('lectureType')
        return cls(
            academic_year_id=_value('academicYearId'),
            department_id=_value('departmentId'),
            subject_id=_value('subjectId'),
            semester_number=normalize_semester(semester) if semester is not None else None,
            division_id=_value('divisionId'),
            lecture_type=lecture_type.upper() if lecture_type else None,
            include_deleted=parse_bool(args.get('includeDeleted')),
        )


def _same_id(left, right):
    return right is None or str(left) == str(right)


def filter_snapshots(snapshots: List[FeedbackSnapshot],
                     filters: SnapshotFilter) -> List[FeedbackSnapshot]:
    """Return the snapshots matching every parameter set on *filters*."""
    selected = []
    for snapshot in snapshots:
        if snapshot.is_deleted and not filters.include_deleted:
            continue
        if not _same_id(snapshot.academic_year_id, filters.academic_year_id):
            continue
        if not _same_id(snapshot.department_id, filters.department_id):
            continue
        if not _same_id(snapshot.subject_id, filters.subject_id):
            continue
        if not _same_id(snapshot.division_id, filters.division_id):
            continue
        if filters.semester_number is not None and snapshot.semester_number != filters.semester_number:
            continue
        if filters.lecture_type is not None and determine_lecture_type(snapshot) != filters.lecture_type:
            continue
        selected.append(snapshot)

    logger.debug(f"Filter kept {len(selected)} of {len(snapshots)} snapshots")
    return selected


def build_hierarchical_filter_dictionary(snapshots: List[FeedbackSnapshot]) -> dict:
    """
    Build the cascading dropdown tree:
    academic year -> department -> (subjects, semesters -> divisions).

    Every level is sorted; the lecture-type options are appended.
    """
    years = {}
    for snapshot in snapshots:
        year = years.setdefault(snapshot.academic_year_id, {
            'id': snapshot.academic_year_id,
            'yearString': snapshot.academic_year_string,
            'departments': {},
        })
        department = year['departments'].setdefault(snapshot.department_id, {
            'id': snapshot.department_id,
            'name': snapshot.department_name,
            'abbreviation': snapshot.department_abbreviation or '',
            'subjects': {},
            'semesters': {},
        })
        department['subjects'].setdefault(snapshot.subject_id, {
            'id': snapshot.subject_id,
            'name': snapshot.subject_name,
            'abbreviation': snapshot.subject_abbreviation or '',
        })
        semester = department['semesters'].setdefault(snapshot.semester_number, {
            'semesterNumber': snapshot.semester_number,
            'divisions': {},
        })
        semester['divisions'].setdefault(snapshot.division_id, {
            'id': snapshot.division_id,
            'divisionName': snapshot.division_name,
        })

    academic_years = []
    for year in sorted(years.values(), key=lambda y: text_sort_key(y['yearString'])):
        departments = []
        for department in sorted(year['departments'].values(), key=lambda d: text_sort_key(d['name'])):
            semesters = [
                {
                    'semesterNumber': semester['semesterNumber'],
                    'divisions': sorted(
                        semester['divisions'].values(),
                        key=lambda d: text_sort_key(d['divisionName']),
                    ),
                }
                for _, semester in sorted(department['semesters'].items())
            ]
            departments.append({
                'id': department['id'],
                'name': department['name'],
                'abbreviation': department['abbreviation'],
                'subjects': sorted(department['subjects'].values(), key=lambda s: text_sort_key(s['name'])),
                'semesters': semesters,
            })
        academic_years.append({
            'id': year['id'],
            'yearString': year['yearString'],
            'departments': departments,
        })

    return {
        'academicYears': academic_years,
        'lectureTypes': [
            {'value': value, 'label': label} for value, label in LECTURE_TYPE_LABELS.items()
        ],
    }
