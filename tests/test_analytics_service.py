"""Unit tests for the dashboard aggregation views."""
from __future__ import annotations

import pytest

from feedback_analytics.services.analytics_service import (
    build_analytics_report,
    engagement_score,
    get_filtering_options,
    process_division_comparisons,
    process_faculty_performance,
    process_lecture_lab_comparison,
    process_overall_stats,
    process_semester_trends,
    process_subject_ratings,
    rank_faculty,
)


def test_invalid_responses_excluded_from_every_view(make_snapshot) -> None:
    """Unparseable responses never count toward a total or an average."""
    snapshots = [
        make_snapshot(responseValue=6),
        make_snapshot(responseValue=None),
        make_snapshot(responseValue="excellent"),
        make_snapshot(responseValue={"comment": 9}),
        make_snapshot(responseValue={"score": "high"}),
    ]

    overall = process_overall_stats(snapshots)
    assert overall.total_responses == 1
    assert overall.average_rating == 6.0

    [subject] = process_subject_ratings(snapshots)
    assert subject.total_overall_responses == 1

    [trend] = process_semester_trends(snapshots)
    assert trend.response_count == 1

    [division] = process_division_comparisons(snapshots)
    assert division.total_responses == 1

    [faculty] = process_faculty_performance(snapshots)
    assert faculty.total_responses == 1

    comparison = process_lecture_lab_comparison(snapshots)
    assert comparison.total_lecture_responses + comparison.total_lab_responses == 1


def test_zero_ratings_included_in_overall_and_trends(make_snapshot) -> None:
    snapshots = [make_snapshot(responseValue=8), make_snapshot(responseValue=0)]

    assert process_overall_stats(snapshots).average_rating == 4.0
    assert process_overall_stats(snapshots).total_responses == 2

    [trend] = process_semester_trends(snapshots)
    assert trend.average_rating == 4.0
    assert trend.response_count == 2


def test_zero_ratings_excluded_from_subject_and_lecture_lab(make_snapshot) -> None:
    snapshots = [make_snapshot(responseValue=8), make_snapshot(responseValue=0)]

    [subject] = process_subject_ratings(snapshots)
    assert subject.lecture_average_rating == 8.0
    assert subject.total_lecture_responses == 1

    comparison = process_lecture_lab_comparison(snapshots)
    assert comparison.lecture_average_rating == 8.0
    # zeros still count toward the lecture/lab totals
    assert comparison.total_lecture_responses == 2


def test_subject_rating_example(make_snapshot) -> None:
    """DBMS / F1: lecture 9 and 0, lab 7."""
    snapshots = [
        make_snapshot(responseValue=9),
        make_snapshot(responseValue=0),
        make_snapshot(responseValue=7, questionCategoryName="Laboratory Sessions"),
    ]

    [rating] = process_subject_ratings(snapshots)

    assert rating.subject_name == "DBMS"
    assert rating.faculty_id == "F1"
    assert rating.lecture_average_rating == 9.0
    assert rating.total_lecture_responses == 1
    assert rating.lab_average_rating == 7.0
    assert rating.total_lab_responses == 1
    assert rating.overall_average_rating == 8.0
    assert rating.total_overall_responses == 2


def test_subject_rating_empty_bucket_is_none(make_snapshot) -> None:
    [rating] = process_subject_ratings([make_snapshot(responseValue=0)])

    assert rating.lecture_average_rating is None
    assert rating.lab_average_rating is None
    assert rating.overall_average_rating is None
    assert rating.total_overall_responses == 0


def test_subject_ratings_grouped_by_subject_and_faculty(make_snapshot) -> None:
    snapshots = [
        make_snapshot(facultyId="F1", responseValue=8),
        make_snapshot(facultyId="F2", facultyName="Prof. Iyer", responseValue=6),
        make_snapshot(subjectId="SUB2", subjectName="Networks", responseValue=7),
        make_snapshot(facultyId="F1", responseValue=10),
    ]

    ratings = process_subject_ratings(snapshots)

    assert [(r.subject_id, r.faculty_id) for r in ratings] == [
        ("SUB1", "F1"), ("SUB1", "F2"), ("SUB2", "F1"),
    ]
    assert ratings[0].lecture_average_rating == 9.0


def test_subject_rating_to_dict_uses_camel_case(make_snapshot) -> None:
    [rating] = process_subject_ratings([make_snapshot(subjectAbbreviation=None)])
    as_dict = rating.to_dict()

    assert as_dict["subjectAbbreviation"] == ""
    assert as_dict["lectureAverageRating"] == 8.0
    assert as_dict["totalLabResponses"] == 0


def test_average_rounding(make_snapshot) -> None:
    snapshots = [make_snapshot(responseValue=8), make_snapshot(responseValue="9")]

    average_rating = process_overall_stats(snapshots).average_rating

    assert average_rating == 8.5
    assert f"{average_rating:.2f}" == "8.50"


def test_exact_half_averages_round_up(make_snapshot) -> None:
    snapshots = [make_snapshot(responseValue=8) for _ in range(7)] + [make_snapshot(responseValue=9)]

    assert process_overall_stats(snapshots).average_rating == 8.13
    [trend] = process_semester_trends(snapshots)
    assert trend.average_rating == 8.13
    [faculty] = process_faculty_performance(snapshots)
    assert faculty.average_rating == 8.13


def test_semester_trends_sorted_by_semester_then_subject(make_snapshot) -> None:
    snapshots = [
        make_snapshot(subjectId="S3", subjectName="networks", semesterNumber=3),
        make_snapshot(subjectId="S1", subjectName="DBMS", semesterNumber=1),
        make_snapshot(subjectId="S2", subjectName="algorithms", semesterNumber=1),
    ]

    trends = process_semester_trends(snapshots)

    assert [(t.semester, t.subject) for t in trends] == [
        (1, "algorithms"), (1, "DBMS"), (3, "networks"),
    ]


def test_semester_trends_group_by_subject_name(make_snapshot) -> None:
    """Two subject ids sharing a name collapse into one trend line."""
    snapshots = [
        make_snapshot(subjectId="SUB1", responseValue=6, academicYearId="AY1"),
        make_snapshot(subjectId="SUB9", responseValue=8, academicYearId="AY2"),
    ]

    [trend] = process_semester_trends(snapshots)

    assert trend.response_count == 2
    assert trend.average_rating == 7.0
    assert trend.academic_year_id == "AY1"


def test_semester_trends_subject_filter(make_snapshot) -> None:
    snapshots = [
        make_snapshot(subjectId="SUB1"),
        make_snapshot(subjectId="SUB2", subjectName="Networks"),
    ]

    trends = process_semester_trends(snapshots, subject_id="SUB2")

    assert [t.subject for t in trends] == ["Networks"]


@pytest.mark.parametrize("total, expected", [(0, 0), (2, 0), (3, 1), (37, 7), (50, 10), (120, 10)])
def test_engagement_score(total, expected) -> None:
    assert engagement_score(total) == expected


def test_division_engagement_example(make_snapshot) -> None:
    snapshots = [make_snapshot(responseValue=7) for _ in range(37)]

    [division] = process_division_comparisons(snapshots)

    assert division.total_responses == 37
    assert division.engagement_score == 7
    assert division.average_rating == 7.0


def test_division_blank_batches_become_general(make_snapshot) -> None:
    snapshots = [
        make_snapshot(batch=None),
        make_snapshot(batch="None"),
        make_snapshot(batch="-"),
        make_snapshot(batch="B1", responseValue=0),
    ]

    divisions = process_division_comparisons(snapshots)

    assert [(d.batch, d.total_responses) for d in divisions] == [("General", 3), ("B1", 1)]
    assert divisions[1].average_rating == 0.0


def test_faculty_performance_sorted_descending(make_snapshot) -> None:
    snapshots = [
        make_snapshot(facultyId="F1", responseValue=6),
        make_snapshot(facultyId="F2", facultyName="Prof. Iyer", responseValue=9),
        make_snapshot(facultyId="F3", facultyName="Dr. Shah", responseValue="7.5"),
        make_snapshot(facultyId="F1", academicYearId="AY2", responseValue=10),
    ]

    performance = process_faculty_performance(snapshots)

    assert [(p.faculty_id, p.academic_year_id) for p in performance] == [
        ("F1", "AY2"), ("F2", "AY1"), ("F3", "AY1"), ("F1", "AY1"),
    ]
    ratings = [p.average_rating for p in performance]
    assert ratings == sorted(ratings, reverse=True)


def test_faculty_performance_includes_zero_ratings(make_snapshot) -> None:
    [faculty] = process_faculty_performance([
        make_snapshot(responseValue=10),
        make_snapshot(responseValue=0),
    ])

    assert faculty.average_rating == 5.0
    assert faculty.total_responses == 2


def test_rank_faculty_is_positional(make_snapshot) -> None:
    performance = process_faculty_performance([
        make_snapshot(facultyId="F1", responseValue=5),
        make_snapshot(facultyId="F2", responseValue=9),
    ])

    assert [(rank, record.faculty_id) for rank, record in rank_faculty(performance)] == [
        (1, "F2"), (2, "F1"),
    ]


def test_lecture_lab_counts_cover_all_valid_snapshots(make_snapshot) -> None:
    snapshots = [
        make_snapshot(responseValue=9),
        make_snapshot(responseValue=0, questionBatch="B1"),
        make_snapshot(responseValue=6, questionCategoryName="Lab"),
        make_snapshot(responseValue=None, questionCategoryName="Lab"),
    ]

    comparison = process_lecture_lab_comparison(snapshots)

    assert comparison.total_lecture_responses == 1
    assert comparison.total_lab_responses == 2
    assert comparison.lecture_average_rating == 9.0
    assert comparison.lab_average_rating == 6.0


def test_lecture_lab_missing_branch_is_zero(make_snapshot) -> None:
    comparison = process_lecture_lab_comparison([make_snapshot(responseValue=8)])

    assert comparison.lab_average_rating == 0
    assert comparison.total_lab_responses == 0


def test_overall_stats_uniques_and_anonymous_students(make_snapshot) -> None:
    snapshots = [
        make_snapshot(studentId=None),
        make_snapshot(studentId=None, subjectId="SUB2", subjectName="Networks"),
        make_snapshot(studentId="STU7", facultyId="F2", departmentId="D2"),
    ]

    stats = process_overall_stats(snapshots)

    # every anonymous respondent shares one bucket
    assert stats.unique_students == 2
    assert stats.unique_subjects == 2
    assert stats.unique_faculties == 2
    assert stats.unique_departments == 2
    assert stats.response_rate == 100


def test_filtering_options_read_full_collection(make_snapshot) -> None:
    snapshots = [
        make_snapshot(academicYearString="2024-25", semesterNumber=10, divisionName="B"),
        make_snapshot(academicYearString="2023-24", semesterNumber=2, responseValue=None),
        make_snapshot(subjectName="Algorithms", departmentName="Mechanical"),
    ]

    options = get_filtering_options(snapshots)

    assert options.academic_years == ["2023-24", "2024-25"]
    assert options.semesters == [2, 5, 10]
    assert options.subjects == ["Algorithms", "DBMS"]
    assert options.departments == ["Computer Engineering", "Mechanical"]
    assert options.divisions == ["A", "B"]


def test_empty_input_yields_empty_views() -> None:
    report = build_analytics_report([])

    assert report.overall_stats.total_responses == 0
    assert report.overall_stats.average_rating is None
    assert report.overall_stats.response_rate == 0
    assert report.subject_ratings == []
    assert report.semester_trends == []
    assert report.division_comparisons == []
    assert report.faculty_performance == []
    assert report.lecture_lab_comparison.lecture_average_rating == 0
    assert report.filtering_options.subjects == []


def test_report_is_idempotent(make_snapshot) -> None:
    snapshots = [
        make_snapshot(responseValue=9),
        make_snapshot(responseValue=0, batch="B1"),
        make_snapshot(responseValue="7", questionCategoryName="Lab", semesterNumber=6),
    ]

    first = build_analytics_report(snapshots).to_dict()
    second = build_analytics_report(snapshots).to_dict()

    assert first == second
    assert set(first) == {
        "overallStats", "subjectRatings", "semesterTrends", "divisionComparisons",
        "facultyPerformance", "lectureLabComparison", "filteringOptions",
    }


def test_non_list_input_raises() -> None:
    with pytest.raises(TypeError):
        build_analytics_report("snapshots")
    with pytest.raises(TypeError):
        process_overall_stats(None)


def test_filtering_options_sort_mixed_name_types(make_snapshot) -> None:
    """Numeric names from loosely typed JSON sort beside text names."""
    snapshots = [
        make_snapshot(divisionName="b"),
        make_snapshot(divisionName=1),
        make_snapshot(divisionName="A"),
    ]

    assert get_filtering_options(snapshots).divisions == [1, "A", "b"]
