from flask import Blueprint, request, jsonify, send_file
import logging

from config import API_PREFIX, EXPORT_FILENAME, MAX_SNAPSHOTS_PER_REQUEST
from feedback_analytics.exceptions import InvalidSnapshotError
from feedback_analytics.models import SnapshotStore, snapshots_from_records
from feedback_analytics.services.analytics_service import (
    build_analytics_report, process_faculty_performance, process_semester_trends, rank_faculty
)
from feedback_analytics.services.export_service import XLSX_MIMETYPE, report_to_excel_buffer
from feedback_analytics.services.filter_service import (
    SnapshotFilter, build_hierarchical_filter_dictionary, filter_snapshots
)
from feedback_analytics.services.trend_service import (
    process_academic_year_department_trends,
    process_academic_year_division_trends,
    process_academic_year_semester_trends,
    process_subject_faculty_detail,
    process_subject_faculty_performance,
)

logger = logging.getLogger(__name__)

analytics_bp = Blueprint('analytics', __name__, url_prefix=API_PREFIX)


def _bad_request(message):
    return jsonify({
        'success': False,
        'message': message
    }), 400


def _server_error(message, error):
    logger.error(f"{message}: {error}")
    return jsonify({
        'success': False,
        'message': f'{message}: {str(error)}'
    }), 500


def _snapshots_from_body():
    """Parse the "snapshots" list of a JSON request body."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise TypeError('Request body must be a JSON object')

    records = payload.get('snapshots')
    if isinstance(records, list) and len(records) > MAX_SNAPSHOTS_PER_REQUEST:
        raise ValueError(f'At most {MAX_SNAPSHOTS_PER_REQUEST} snapshots per request')
    return snapshots_from_records(records)


def _filtered_snapshots():
    """Load stored snapshots scoped by the request's query-string filters."""
    filters = SnapshotFilter.from_args(request.args)
    snapshots = SnapshotStore.get_all(include_deleted=filters.include_deleted)
    return filter_snapshots(snapshots, filters)


@analytics_bp.route('/process', methods=['POST'])
def process_snapshots():
    """Compute every view for the snapshots posted in the request body."""
    try:
        snapshots = _snapshots_from_body()
        report = build_analytics_report(snapshots)
        return jsonify({
            'success': True,
            'data': report.to_dict()
        })
    except (InvalidSnapshotError, ValueError, TypeError) as e:
        return _bad_request(str(e))
    except Exception as e:
        return _server_error('Error processing snapshots', e)


@analytics_bp.route('/snapshots', methods=['POST'])
def store_snapshots():
    """Store posted snapshots as the source for the other endpoints."""
    try:
        snapshots = _snapshots_from_body()
        added = SnapshotStore.bulk_add(snapshots)
        return jsonify({
            'success': True,
            'message': f'Successfully stored {added} snapshots.',
            'added': added
        })
    except (InvalidSnapshotError, ValueError, TypeError) as e:
        return _bad_request(str(e))
    except Exception as e:
        return _server_error('Error storing snapshots', e)


@analytics_bp.route('/snapshots/<int:snapshot_id>', methods=['DELETE'])
def delete_snapshot(snapshot_id):
    try:
        if SnapshotStore.soft_delete(snapshot_id):
            return jsonify({
                'success': True,
                'message': f'Snapshot {snapshot_id} deleted successfully'
            })
        return jsonify({
            'success': False,
            'message': 'Snapshot not found'
        }), 404
    except Exception as e:
        return _server_error('Error deleting snapshot', e)


@analytics_bp.route('/complete-data', methods=['GET'])
def complete_data():
    """All dashboard views for the stored snapshots matching the filters."""
    try:
        snapshots = _filtered_snapshots()
        report = build_analytics_report(snapshots)
        return jsonify({
            'success': True,
            'data': report.to_dict(),
            'count': len(snapshots)
        })
    except ValueError as e:
        return _bad_request(str(e))
    except Exception as e:
        return _server_error('Error fetching analytics', e)


@analytics_bp.route('/semester-trends', methods=['GET'])
def semester_trends():
    try:
        subject_id = request.args.get('subjectId', '').strip() or None
        snapshots = SnapshotStore.get_all()
        trends = process_semester_trends(snapshots, subject_id=subject_id)
        return jsonify({
            'success': True,
            'trends': [trend.to_dict() for trend in trends],
            'count': len(trends)
        })
    except Exception as e:
        return _server_error('Error fetching semester trends', e)


@analytics_bp.route('/academic-year-trends', methods=['GET'])
def academic_year_trends():
    try:
        snapshots = _filtered_snapshots()
        return jsonify({
            'success': True,
            'departmentTrends': [t.to_dict() for t in process_academic_year_department_trends(snapshots)],
            'semesterTrends': [t.to_dict() for t in process_academic_year_semester_trends(snapshots)],
            'divisionTrends': [t.to_dict() for t in process_academic_year_division_trends(snapshots)]
        })
    except ValueError as e:
        return _bad_request(str(e))
    except Exception as e:
        return _server_error('Error fetching academic year trends', e)


@analytics_bp.route('/faculty-rankings', methods=['GET'])
def faculty_rankings():
    """Faculty performance with positional ranks for the filtered subset."""
    try:
        performance = process_faculty_performance(_filtered_snapshots())
        rankings = [
            dict(record.to_dict(), rank=rank)
            for rank, record in rank_faculty(performance)
        ]
        return jsonify({
            'success': True,
            'rankings': rankings,
            'count': len(rankings)
        })
    except ValueError as e:
        return _bad_request(str(e))
    except Exception as e:
        return _server_error('Error fetching faculty rankings', e)


@analytics_bp.route('/subject-faculty-performance', methods=['GET'])
def subject_faculty_performance():
    try:
        subjects = process_subject_faculty_performance(_filtered_snapshots())
        return jsonify({
            'success': True,
            'subjects': [subject.to_dict() for subject in subjects]
        })
    except ValueError as e:
        return _bad_request(str(e))
    except Exception as e:
        return _server_error('Error fetching subject performance', e)


@analytics_bp.route('/subjects/<subject_id>/faculty', methods=['GET'])
def subject_faculty_detail(subject_id):
    try:
        detail = process_subject_faculty_detail(SnapshotStore.get_all(), subject_id)
        if detail is None:
            return jsonify({
                'success': False,
                'message': 'No feedback found for this subject'
            }), 404
        return jsonify({
            'success': True,
            'subject': detail.to_dict()
        })
    except Exception as e:
        return _server_error('Error fetching subject detail', e)


@analytics_bp.route('/filter-dictionary', methods=['GET'])
def filter_dictionary():
    try:
        return jsonify({
            'success': True,
            'dictionary': build_hierarchical_filter_dictionary(SnapshotStore.get_all())
        })
    except Exception as e:
        return _server_error('Error building filter dictionary', e)


@analytics_bp.route('/total-responses', methods=['GET'])
def total_responses():
    try:
        return jsonify({
            'success': True,
            'totalResponses': SnapshotStore.count()
        })
    except Exception as e:
        return _server_error('Error counting responses', e)


@analytics_bp.route('/export', methods=['GET'])
def export_analytics():
    """Download the filtered analytics report as an Excel workbook."""
    try:
        report = build_analytics_report(_filtered_snapshots())
        buf = report_to_excel_buffer(report)
        return send_file(buf, as_attachment=True, download_name=EXPORT_FILENAME, mimetype=XLSX_MIMETYPE)
    except ValueError as e:
        return _bad_request(str(e))
    except Exception as e:
        return _server_error('Error exporting analytics', e)
