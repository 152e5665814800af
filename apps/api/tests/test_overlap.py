"""
Tests for personnel/services/overlap.py - half-open interval checks.
"""
from datetime import date
from types import SimpleNamespace

import pytest

from conftest import make_employee
from personnel.models.department_employee import DepartmentEmployee
from personnel.models.department_manager import DepartmentManager
from personnel.models.salary import Salary
from personnel.models.title import Title
from personnel.services.overlap import (
    find_overlap,
    intervals_overlap,
    validate_date_range,
    validate_no_overlapping_assignment,
    validate_no_overlapping_salary,
    validate_no_overlapping_title,
    validate_single_active_manager,
)

JAN = date(2024, 1, 1)
FEB = date(2024, 2, 1)
MAR = date(2024, 3, 1)
APR = date(2024, 4, 1)


def span(r):
    return r.from_date, r.to_date


class TestIntervalsOverlap:
    def test_adjacent_intervals_do_not_overlap(self):
        assert intervals_overlap(JAN, FEB, FEB, MAR) is False
        assert intervals_overlap(FEB, MAR, JAN, FEB) is False

    def test_nested_interval_overlaps(self):
        assert intervals_overlap(JAN, APR, FEB, MAR) is True

    def test_open_end_runs_forever(self):
        assert intervals_overlap(JAN, None, date(2090, 1, 1), None) is True
        assert intervals_overlap(JAN, None, date(2000, 1, 1), JAN) is False

    def test_two_open_intervals_always_overlap(self):
        assert intervals_overlap(MAR, None, JAN, None) is True


class TestFindOverlap:
    def test_returns_first_conflicting_record(self):
        rows = [
            SimpleNamespace(key="a", from_date=JAN, to_date=FEB),
            SimpleNamespace(key="b", from_date=FEB, to_date=None),
        ]
        hit = find_overlap(rows, MAR, APR, span=span)
        assert hit.key == "b"

    def test_exclusion_predicate_skips_record(self):
        rows = [SimpleNamespace(key="a", from_date=JAN, to_date=None)]
        assert find_overlap(rows, FEB, MAR, span=span, exclude=lambda r: r.key == "a") is None

    def test_records_without_start_are_ignored(self):
        rows = [SimpleNamespace(from_date=None, to_date=None)]
        assert find_overlap(rows, JAN, None, span=span) is None

    def test_empty_history_accepts(self):
        assert find_overlap([], JAN, None, span=span) is None


class TestValidateDateRange:
    def test_end_before_start_rejected(self):
        with pytest.raises(ValueError):
            validate_date_range(FEB, JAN)

    def test_equal_dates_rejected(self):
        with pytest.raises(ValueError):
            validate_date_range(FEB, FEB)

    def test_open_end_accepted(self):
        validate_date_range(FEB, None)


class TestTenureValidators:
    @pytest.fixture
    def people(self, db_session, department):
        make_employee(db_session, 1001)
        make_employee(db_session, 1002, "Martin", "Silva")
        return db_session

    def test_assignment_overlap_rejected(self, people):
        people.add(DepartmentEmployee(emp_no=1001, dept_no=1, from_date=JAN, to_date=MAR))
        people.commit()

        assert validate_no_overlapping_assignment(people, 1001, FEB, None) is False
        assert validate_no_overlapping_assignment(people, 1001, MAR, None) is True
        # Other employees are unaffected
        assert validate_no_overlapping_assignment(people, 1002, FEB, None) is True

    def test_assignment_excludes_own_department(self, people):
        people.add(DepartmentEmployee(emp_no=1001, dept_no=1, from_date=JAN, to_date=None))
        people.commit()

        assert validate_no_overlapping_assignment(people, 1001, JAN, MAR, exclude_dept_no=1) is True

    def test_single_active_manager(self, people):
        people.add(DepartmentManager(emp_no=1001, dept_no=1, from_date=JAN, to_date=None))
        people.commit()

        assert validate_single_active_manager(people, 1, MAR, None) is False
        assert validate_single_active_manager(people, 1, MAR, None, exclude_emp_no=1001) is True

    def test_title_overlap_with_exclusion(self, people):
        people.add(Title(emp_no=1001, title="Engineer", from_date=JAN, to_date=MAR))
        people.commit()

        assert validate_no_overlapping_title(people, 1001, FEB, APR) is False
        assert validate_no_overlapping_title(people, 1001, MAR, APR) is True
        assert validate_no_overlapping_title(people, 1001, JAN, APR, exclude=("Engineer", JAN)) is True

    def test_salary_overlap(self, people):
        people.add(Salary(emp_no=1001, from_date=JAN, to_date=FEB, salary=800000))
        people.add(Salary(emp_no=1001, from_date=FEB, to_date=None, salary=900000))
        people.commit()

        assert validate_no_overlapping_salary(people, 1001, MAR, None) is False
        assert validate_no_overlapping_salary(people, 1001, date(2023, 6, 1), JAN) is True
        assert validate_no_overlapping_salary(people, 1001, FEB, None, exclude_from_date=FEB) is True
