from cardshows.services.coordinate_report import (
    INVALID_COORDINATES,
    NULL_COORDINATES,
    CoordinateReport,
    classify_coordinates,
)


def test_classify_coordinates():
    assert classify_coordinates(None, None) == NULL_COORDINATES
    assert classify_coordinates(40.0, None) == INVALID_COORDINATES
    assert classify_coordinates(95.0, -86.0) == INVALID_COORDINATES
    assert classify_coordinates(40.0, -86.0) is None


def test_report_lists_only_problem_shows(engine, seed, make_row):
    seed(
        make_row("a-null", latitude=None, longitude=None),
        make_row("b-range", latitude=40.0, longitude=-200.0),
        make_row("c-ok"),
    )
    report = CoordinateReport(engine)
    result = report.issues()
    assert [(item["show_id"], item["issue_type"]) for item in result["data"]] == [
        ("a-null", NULL_COORDINATES),
        ("b-range", INVALID_COORDINATES),
    ]
    assert result["pagination"]["total_count"] == 2
    assert report.summary() == {NULL_COORDINATES: 1, INVALID_COORDINATES: 1}


def test_report_is_paginated(engine, seed, make_row):
    seed(*(make_row(f"null-{i}", latitude=None, longitude=None) for i in range(5)))
    result = CoordinateReport(engine).issues(page=2, page_size=2)
    assert [item["show_id"] for item in result["data"]] == ["null-2", "null-3"]
    assert result["pagination"]["has_more"] is True
    assert result["pagination"]["total_pages"] == 3
