import os

# Database configuration
DATABASE_PATH = os.environ.get(
    'FEEDBACK_DB_PATH',
    os.path.join(os.path.dirname(os.path.abspath(__file__)), 'data', 'feedback.db')
)

# Download name of the Excel export
EXPORT_FILENAME = 'feedback_analytics.xlsx'

# Request limits
MAX_SNAPSHOTS_PER_REQUEST = int(os.environ.get('MAX_SNAPSHOTS_PER_REQUEST', '50000'))

API_PREFIX = '/api/v1/analytics'

# Averages are emitted with this many decimals
RATING_PRECISION = 2

# Sentinels used when grouping incomplete snapshots
ANONYMOUS_STUDENT_ID = 'unknown'  # every anonymous respondent shares this id
UNKNOWN_FACULTY_ID = 'unknown'
DEFAULT_BATCH = 'General'
BLANK_BATCH_MARKERS = {'', 'none', '-'}

# Engagement score = min(cap, round(responses / divisor))
ENGAGEMENT_DIVISOR = 5
ENGAGEMENT_CAP = 10

# Lecture/lab classification
LECTURE = 'LECTURE'
LAB = 'LAB'
LAB_CATEGORY_KEYWORDS = ('lab', 'laboratory')
LECTURE_TYPE_LABELS = {
    LECTURE: 'Lecture',
    LAB: 'Lab',
}

# Snapshot fields every record must carry
REQUIRED_SNAPSHOT_FIELDS = [
    'facultyId', 'facultyName',
    'subjectId', 'subjectName',
    'departmentId', 'departmentName',
    'divisionId', 'divisionName',
    'academicYearId', 'academicYearString',
    'semesterNumber',
]
