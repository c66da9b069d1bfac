import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, List, Optional

from config import REQUIRED_SNAPSHOT_FIELDS
from feedback_analytics.exceptions import InvalidSnapshotError
from feedback_analytics.models.response import ABSENT, ResponseValue, classify_response
from utils import normalize_semester

logger = logging.getLogger(__name__)

# wire name -> attribute name, for the optional fields
_OPTIONAL_FIELDS = {
    'id': 'id',
    'studentId': 'student_id',
    'subjectAbbreviation': 'subject_abbreviation',
    'departmentAbbreviation': 'department_abbreviation',
    'batch': 'batch',
    'questionCategoryName': 'question_category_name',
    'questionBatch': 'question_batch',
}


@dataclass(frozen=True)
class FeedbackSnapshot:
    """One student's response to one question, with every grouping dimension."""

    faculty_id: Any
    faculty_name: str
    subject_id: Any
    subject_name: str
    department_id: Any
    department_name: str
    division_id: Any
    division_name: str
    academic_year_id: Any
    academic_year_string: str
    semester_number: int
    response: ResponseValue = ABSENT
    id: Any = None
    student_id: Any = None
    subject_abbreviation: Optional[str] = None
    department_abbreviation: Optional[str] = None
    batch: Optional[str] = None
    question_category_name: Optional[str] = None
    question_batch: Optional[str] = None
    is_deleted: bool = False

    @property
    def rating(self) -> Optional[float]:
        return self.response.rating()

    @classmethod
    def from_dict(cls, data):
        """Build a snapshot from its camelCase JSON record."""
        if not isinstance(data, Mapping):
            raise InvalidSnapshotError(
                f"Snapshot must be an object, got {type(data).__name__}"
            )

        missing = [name for name in REQUIRED_SNAPSHOT_FIELDS if data.get(name) is None]
        if missing:
            raise InvalidSnapshotError(
                f"Snapshot is missing required fields: {', '.join(missing)}",
                field=missing[0],
            )

        try:
            semester_number = normalize_semester(data['semesterNumber'])
        except (TypeError, ValueError):
            raise InvalidSnapshotError(
                f"Invalid semesterNumber: {data['semesterNumber']!r}",
                field='semesterNumber',
            )

        optional = {attr: data.get(key) for key, attr in _OPTIONAL_FIELDS.items()}

        return cls(
            faculty_id=data['facultyId'],
            faculty_name=data['facultyName'],
            subject_id=data['subjectId'],
            subject_name=data['subjectName'],
            department_id=data['departmentId'],
            department_name=data['departmentName'],
            division_id=data['divisionId'],
            division_name=data['divisionName'],
            academic_year_id=data['academicYearId'],
            academic_year_string=data['academicYearString'],
            semester_number=semester_number,
            response=classify_response(data.get('responseValue')),
            is_deleted=bool(data.get('isDeleted', False)),
            **optional,
        )

    def to_dict(self):
        record = {
            'facultyId': self.faculty_id,
            'facultyName': self.faculty_name,
            'subjectId': self.subject_id,
            'subjectName': self.subject_name,
            'departmentId': self.department_id,
            'departmentName': self.department_name,
            'divisionId': self.division_id,
            'divisionName': self.division_name,
            'academicYearId': self.academic_year_id,
            'academicYearString': self.academic_year_string,
            'semesterNumber': self.semester_number,
            'responseValue': self.response.to_raw(),
            'isDeleted': self.is_deleted,
        }
        for key, attr in _OPTIONAL_FIELDS.items():
            record[key] = getattr(self, attr)
        return record


def snapshots_from_records(records) -> List[FeedbackSnapshot]:
    """Convert a list of JSON records into snapshots.

    Raises:
        TypeError: *records* is not a list or tuple.
        InvalidSnapshotError: a record lacks a grouping dimension.
    """
    if not isinstance(records, (list, tuple)):
        raise TypeError(f"Expected a list of snapshots, got {type(records).__name__}")

    snapshots = []
    for index, record in enumerate(records):
        try:
            snapshots.append(
                record if isinstance(record, FeedbackSnapshot) else FeedbackSnapshot.from_dict(record)
            )
        except InvalidSnapshotError as e:
            logger.error(f"Rejected snapshot at index {index}: {e}")
            raise
    return snapshots
