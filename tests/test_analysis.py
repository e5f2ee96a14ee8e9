"""Tests für Validator, Qualitätsbericht und Regel-Lockerung."""

import pytest

from analysis.quality_report import QualityAnalyzer, _compute_spread_score
from analysis.solution_validator import SolutionValidator
from config.schema import SolverConfig, SwitchConfig, TimetableConfig
from data.fake_data import demo_dataset
from models.dataset import Dataset
from models.school_class import SchoolClass
from models.subject import Subject
from models.teacher import Teacher
from models.workload import AvailabilitySlot, Capability, WorkloadRequirement
from solver.constraint_relaxer import ConstraintRelaxer, RelaxResult
from solver.result import ScheduleEntry, ScheduleSolution
from solver.scheduler import generate_schedule


# ─── Hilfsfunktionen ──────────────────────────────────────────────────────────

def make_data(blocked: frozenset = frozenset(), lunch=None) -> Dataset:
    """2 Tage × 3 Stunden, Alice (Mathe) für K1 mit 2 Wochenstunden, Bob ohne Befähigung."""
    config = TimetableConfig(periods_per_day=3, days_per_week=2, lunch_period=lunch)
    teachers = [
        Teacher(id=1, name="Alice", code="A", max_per_day=2, max_per_week=3,
                avoid_consecutive=True),
        Teacher(id=2, name="Bob", code="B"),
    ]
    availability = [
        AvailabilitySlot(teacher_id=t.id, day=d, period=p,
                         available=(t.id, d, p) not in blocked)
        for t in teachers
        for d in range(config.days_per_week)
        for p in config.teaching_periods
    ]
    return Dataset(
        config=config,
        teachers=teachers,
        subjects=[Subject(id=1, name="Mathe", code="MA")],
        classes=[SchoolClass(id=1, name="K1"), SchoolClass(id=2, name="K2")],
        workloads=[WorkloadRequirement(class_id=1, subject_id=1, periods_per_week=2)],
        capabilities=[Capability(teacher_id=1, subject_id=1)],
        availability=availability,
    )


def make_entry(day: int, period: int, class_id: int = 1, teacher_id: int = 1) -> ScheduleEntry:
    return ScheduleEntry(
        day=day, period=period,
        class_id=class_id, class_name=f"K{class_id}",
        subject_id=1, subject_name="Mathe",
        teacher_id=teacher_id, teacher_name={1: "Alice", 2: "Bob"}[teacher_id],
    )


def make_solution(data: Dataset, entries: list[ScheduleEntry], **switches) -> ScheduleSolution:
    return ScheduleSolution(
        entries=entries,
        switches=SwitchConfig(**switches),
        config_snapshot=data.config,
    )


def solve_demo():
    data = demo_dataset()
    result = generate_schedule(data, SwitchConfig(), SolverConfig())
    assert result.ok
    return data, result.solution


# ─── SOLUTION VALIDATOR ───────────────────────────────────────────────────────

class TestSolutionValidator:
    @pytest.fixture
    def data(self) -> Dataset:
        return make_data()

    def _validate(self, data, entries, **switches):
        return SolutionValidator().validate(make_solution(data, entries, **switches), data)

    def test_valid_solution(self, data):
        report = self._validate(data, [make_entry(0, 0), make_entry(1, 0)])
        assert report.is_valid
        assert report.violations == []

    def test_demo_solution_valid(self):
        data, solution = solve_demo()
        report = SolutionValidator().validate(solution, data)
        assert report.is_valid
        assert all(v.severity == "warning" for v in report.violations)

    def test_outside_grid(self, data):
        report = self._validate(data, [make_entry(0, 0), make_entry(2, 0)])
        assert not report.is_valid
        assert len(report.by_constraint("outside_grid")) == 1

    def test_lunch_period_used(self):
        data = make_data(lunch=1)
        report = self._validate(data, [make_entry(0, 0), make_entry(1, 1)])
        assert not report.is_valid
        assert len(report.by_constraint("lunch_period_used")) == 1

    def test_class_double_booking(self, data):
        report = self._validate(data, [make_entry(0, 0), make_entry(0, 0, teacher_id=2)])
        assert len(report.by_constraint("class_double_booking")) == 1

    def test_teacher_double_booking_is_error(self, data):
        entries = [make_entry(0, 0), make_entry(1, 0), make_entry(0, 0, class_id=2)]
        report = self._validate(data, entries)
        found = report.by_constraint("teacher_double_booking")
        assert len(found) == 1
        assert found[0].severity == "error"
        assert found[0].entity == "Alice"

    def test_teacher_double_booking_allowed_is_warning(self, data):
        entries = [make_entry(0, 0), make_entry(1, 0), make_entry(0, 0, class_id=2)]
        report = self._validate(data, entries, no_double_booking=False)
        found = report.by_constraint("teacher_double_booking")
        assert [v.severity for v in found] == ["warning"]

    def test_workload_mismatch(self, data):
        report = self._validate(data, [make_entry(0, 0)])
        found = report.by_constraint("workload_mismatch")
        assert len(found) == 1
        assert "Soll 2h, Ist 1h" in found[0].description

    def test_workload_unexpected(self, data):
        entries = [make_entry(0, 0), make_entry(1, 0), make_entry(0, 2, class_id=2)]
        report = self._validate(data, entries)
        assert len(report.by_constraint("workload_unexpected")) == 1

    def test_capability_missing(self, data):
        report = self._validate(data, [make_entry(0, 0, teacher_id=2), make_entry(1, 0)])
        found = report.by_constraint("capability_missing")
        assert len(found) == 1
        assert found[0].entity == "Bob"

    def test_daily_cap_exceeded(self, data):
        entries = [make_entry(0, 0), make_entry(0, 2), make_entry(0, 1, class_id=2)]
        report = self._validate(data, entries)
        assert len(report.by_constraint("daily_cap_exceeded")) == 1

    def test_weekly_cap_exceeded(self, data):
        entries = [make_entry(0, 0), make_entry(0, 2), make_entry(1, 0),
                   make_entry(1, 2, class_id=2)]
        report = self._validate(data, entries)
        assert len(report.by_constraint("weekly_cap_exceeded")) == 1

    def test_unavailable_slot(self):
        data = make_data(blocked=frozenset({(1, 0, 0)}))
        entries = [make_entry(0, 0), make_entry(1, 0)]
        report = self._validate(data, entries)
        assert len(report.by_constraint("unavailable_slot_violation")) == 1

        relaxed = self._validate(data, entries, honor_availability=False)
        assert relaxed.by_constraint("unavailable_slot_violation") == []
        assert relaxed.is_valid

    def test_consecutive_is_warning(self, data):
        report = self._validate(data, [make_entry(0, 0), make_entry(0, 1)])
        found = report.by_constraint("consecutive_periods")
        assert len(found) == 1
        assert found[0].severity == "warning"
        assert report.is_valid

    def test_consecutive_switch_off(self, data):
        report = self._validate(data, [make_entry(0, 0), make_entry(0, 1)],
                                avoid_consecutive=False)
        assert report.violations == []


# ─── QUALITY REPORT ───────────────────────────────────────────────────────────

class TestQualityAnalyzer:
    @pytest.fixture(scope="class")
    def solved(self):
        return solve_demo()

    def test_totals(self, solved):
        data, solution = solved
        report = QualityAnalyzer().analyze(solution, data)
        assert sum(m.actual_hours for m in report.teacher_metrics) == 20
        assert [m.total_hours for m in report.class_metrics] == [10, 10]
        assert report.solver_status == "SOLVED"
        assert report.steps == solution.steps

    def test_fairness_in_range(self, solved):
        data, solution = solved
        report = QualityAnalyzer().analyze(solution, data)
        assert 0.0 < report.load_fairness_index <= 1.0

    def test_teacher_metrics(self, solved):
        data, solution = solved
        report = QualityAnalyzer().analyze(solution, data)
        assert [m.name for m in report.teacher_metrics] == ["Alice", "Bob", "Carol"]
        for m in report.teacher_metrics:
            assert list(m.hours_per_day) == ["Mo", "Di", "Mi", "Do", "Fr", "Sa"]
            assert sum(m.hours_per_day.values()) == m.actual_hours
            assert 0 <= m.free_days <= 6
            assert m.actual_hours <= m.max_per_week
            assert max(m.hours_per_day.values()) <= m.max_per_day
        bob = report.teacher_metrics[1]
        assert "Science" in bob.subjects_taught

    def test_gap_totals_consistent(self, solved):
        data, solution = solved
        report = QualityAnalyzer().analyze(solution, data)
        assert report.total_gaps == sum(m.gaps_total for m in report.teacher_metrics)
        assert report.avg_gaps_per_teacher == pytest.approx(report.total_gaps / 3, abs=0.01)

    def test_spread_score(self):
        same_day = [make_entry(0, 0), make_entry(0, 2)]
        spread = [make_entry(0, 0), make_entry(1, 0)]
        assert _compute_spread_score(same_day, 2) == pytest.approx(0.5)
        assert _compute_spread_score(spread, 2) == pytest.approx(1.0)
        assert _compute_spread_score([], 2) == 1.0

    def test_print_rich_runs(self, solved, capsys):
        data, solution = solved
        analyzer = QualityAnalyzer()
        analyzer.print_rich(analyzer.analyze(solution, data))
        out = capsys.readouterr().out
        assert "Qualitätsbericht" in out
        assert "Alice" in out


# ─── CONSTRAINT RELAXER ───────────────────────────────────────────────────────

class TestConstraintRelaxer:
    def test_solvable_dataset(self):
        report = ConstraintRelaxer(demo_dataset(), SwitchConfig()).diagnose()
        assert report.original_status == "SOLVED"
        assert "lösbar" in report.recommendation

    def test_consecutive_rule_identified(self):
        data = Dataset(
            config=TimetableConfig(periods_per_day=2, days_per_week=1, lunch_period=None),
            teachers=[Teacher(id=1, name="Alice", code="A", avoid_consecutive=True)],
            subjects=[Subject(id=1, name="Mathe", code="MA")],
            classes=[SchoolClass(id=1, name="K1")],
            workloads=[WorkloadRequirement(class_id=1, subject_id=1, periods_per_week=2)],
            capabilities=[Capability(teacher_id=1, subject_id=1)],
        ).with_default_availability()

        report = ConstraintRelaxer(data, SwitchConfig()).diagnose()
        by_name = {r.name: r.status for r in report.relaxations}

        assert report.original_status == "infeasible"
        assert by_name["no_consecutive"] == "SOLVED"
        assert by_name["no_availability"] == "infeasible"
        assert by_name["caps_doubled"] == "infeasible"
        assert by_name["all_combined"] == "SOLVED"
        assert "Folgestunden" in report.recommendation

    def test_hopeless_dataset(self):
        data = Dataset(
            config=TimetableConfig(periods_per_day=2, days_per_week=1, lunch_period=None),
            teachers=[Teacher(id=1, name="Alice", code="A")],
            subjects=[Subject(id=1, name="Mathe", code="MA")],
            classes=[SchoolClass(id=1, name="K1")],
            workloads=[WorkloadRequirement(class_id=1, subject_id=1, periods_per_week=1)],
        ).with_default_availability()

        report = ConstraintRelaxer(data, SwitchConfig()).diagnose()
        assert all(r.status == "infeasible" for r in report.relaxations)
        assert "unlösbar" in report.recommendation

    def test_relaxer_does_not_mutate_input(self):
        data = demo_dataset()
        before = data.model_dump()
        ConstraintRelaxer(data, SwitchConfig()).diagnose()
        assert data.model_dump() == before

    def test_no_demand_named_as_cause(self):
        data = demo_dataset().model_copy(update={"workloads": []})
        report = ConstraintRelaxer(data, SwitchConfig()).diagnose()
        assert report.original_status == "no_demand"
        assert "Kein Stundenbedarf" in report.recommendation
        assert "befähigte Lehrkräfte" not in report.recommendation

    def test_invalid_config_named_as_cause(self):
        data = demo_dataset()
        config = data.config.model_copy(update={"lunch_period": 9})
        report = ConstraintRelaxer(
            data.model_copy(update={"config": config}), SwitchConfig(),
        ).diagnose()
        assert report.original_status == "invalid_config"
        assert "Raster-Konfiguration" in report.recommendation

    def test_aborted_runs_reported(self):
        relaxer = ConstraintRelaxer(demo_dataset(), SwitchConfig())
        results = [
            RelaxResult(name="no_consecutive", description="", status="infeasible",
                        solve_time=0.0),
            RelaxResult(name="all_combined", description="", status="search_aborted",
                        solve_time=0.0),
        ]
        recommendation = relaxer._build_recommendation("search_aborted", results)
        assert "abgebrochen" in recommendation
