"""Tests für Demo-Daten, Zufallsgenerator und den JSON-Import der Browser-Oberfläche."""

import json
import random
from collections import Counter
from datetime import date
from pathlib import Path

import pytest

from config.schema import TimetableConfig
from data.fake_data import DatasetGenerator, _make_abbreviation, demo_dataset
from data.legacy_import import LegacyJsonImporter, export_legacy_json, import_legacy_json


def write_json(path: Path, raw) -> Path:
    path.write_text(json.dumps(raw), encoding="utf-8")
    return path


def legacy_store(**overrides) -> dict:
    """Minimaler Datenstand im camelCase-Format."""
    raw = {
        "cfg": {"periods": 4, "days": 2, "lunchAt": 2, "weekStart": "2025-10-13"},
        "teachers": [
            {"id": 1, "name": "Alice", "code": "t-a", "maxPerDay": 3,
             "maxPerWeek": 6, "avoidConsec": True},
        ],
        "subjects": [{"id": 1, "name": "Math", "code": "M"}],
        "classes": [{"id": 1, "name": "A"}],
        "loads": [{"classId": 1, "subjectId": 1, "ppw": 3}],
        "canTeach": [{"teacherId": 1, "subjectId": 1}],
        "availability": [{"teacherId": 1, "day": 0, "period": 0, "available": False}],
    }
    raw.update(overrides)
    return raw


# ─── DEMO-DATENSATZ ───────────────────────────────────────────────────────────

class TestDemoDataset:
    def test_counts(self):
        data = demo_dataset()
        assert len(data.teachers) == 3
        assert len(data.subjects) == 3
        assert len(data.classes) == 2
        assert sum(w.periods_per_week for w in data.workloads) == 20
        assert len(data.capabilities) == 5

    def test_full_availability_grid(self):
        data = demo_dataset()
        # 3 Lehrkräfte × 6 Tage × 5 belegbare Stunden
        assert len(data.availability) == 90
        blocked = {(a.teacher_id, a.day, a.period) for a in data.availability if not a.available}
        assert blocked == {(1, 0, 0), (1, 1, 1)}

    def test_week_start_override(self):
        data = demo_dataset(week_start=date(2025, 10, 13))
        assert data.config.week_start == date(2025, 10, 13)

    def test_avoid_flags(self):
        flags = {t.name: t.avoid_consecutive for t in demo_dataset().teachers}
        assert flags == {"Alice": True, "Bob": True, "Carol": False}


# ─── ZUFALLSGENERATOR ─────────────────────────────────────────────────────────

class TestDatasetGenerator:
    def test_deterministic_per_seed(self):
        a = DatasetGenerator(seed=7).generate()
        b = DatasetGenerator(seed=7).generate()
        assert a.model_dump(exclude={"created_at", "modified_at"}) == \
            b.model_dump(exclude={"created_at", "modified_at"})

    def test_counts(self):
        data = DatasetGenerator(seed=1).generate(num_teachers=5, num_classes=4)
        assert len(data.teachers) == 5
        assert len(data.classes) == 4
        assert len(data.subjects) == 8
        assert [c.name for c in data.classes] == [
            "Klasse 5a", "Klasse 5b", "Klasse 5c", "Klasse 6a",
        ]

    def test_every_subject_has_two_teachers(self):
        data = DatasetGenerator(seed=3).generate(num_teachers=4)
        per_subject = Counter(c.subject_id for c in data.capabilities)
        assert all(per_subject[s.id] >= 2 for s in data.subjects)

    def test_unique_codes(self):
        data = DatasetGenerator(seed=11).generate(num_teachers=20)
        codes = [t.code for t in data.teachers]
        assert len(set(codes)) == len(codes)

    def test_workloads_fit_grid(self):
        cfg = TimetableConfig(periods_per_day=3, days_per_week=2, lunch_period=None)
        data = DatasetGenerator(cfg, seed=5).generate(num_classes=2)
        for cls in data.classes:
            need = sum(w.periods_per_week for w in data.workloads if w.class_id == cls.id)
            assert need <= 6

    def test_availability_complete(self):
        data = DatasetGenerator(seed=9).generate(num_teachers=3)
        assert len(data.availability) == 3 * 6 * 5
        assert data.with_default_availability() is data

    def test_make_abbreviation(self):
        used: set[str] = set()
        rng = random.Random(0)
        assert _make_abbreviation("Müller", used, rng) == "MUE"
        assert _make_abbreviation("Müller", used, rng) == "MUR"
        assert used == {"MUE", "MUR"}


# ─── LEGACY-JSON-IMPORT ───────────────────────────────────────────────────────

class TestLegacyImport:
    def test_basic_import(self, tmp_path: Path):
        path = write_json(tmp_path / "store.json", legacy_store())
        data, report = import_legacy_json(path)

        assert data.config.periods_per_day == 4
        assert data.config.lunch_period == 2
        assert data.config.week_start == date(2025, 10, 13)
        assert data.teachers[0].code == "T-A"
        assert data.teachers[0].avoid_consecutive is True
        assert report.teachers_imported == 1
        assert report.workloads_imported == 1

    def test_missing_availability_filled(self, tmp_path: Path):
        path = write_json(tmp_path / "store.json", legacy_store())
        data, report = import_legacy_json(path)
        # 2 Tage × 3 belegbare Stunden, eine Zelle war vorhanden
        assert len(data.availability) == 6
        assert report.availability_added == 5
        assert (1, 0, 0) not in data.available_cells()

    def test_negative_lunch_means_none(self, tmp_path: Path):
        raw = legacy_store(cfg={"periods": 4, "days": 2, "lunchAt": -1})
        data, _ = import_legacy_json(write_json(tmp_path / "store.json", raw))
        assert data.config.lunch_period is None
        assert data.config.teaching_periods == [0, 1, 2, 3]

    def test_lunch_as_string_converted(self, tmp_path: Path):
        raw = legacy_store(cfg={"periods": 4, "days": 2, "lunchAt": "2"})
        data, report = import_legacy_json(write_json(tmp_path / "store.json", raw))
        assert data.config.lunch_period == 2
        assert not any("lunchAt" in w for w in report.warnings)

    def test_lunch_not_a_number_warns(self, tmp_path: Path):
        raw = legacy_store(cfg={"periods": 4, "days": 2, "lunchAt": "mittags"})
        data, report = import_legacy_json(write_json(tmp_path / "store.json", raw))
        assert data.config.lunch_period == 3
        assert any("lunchAt" in w for w in report.warnings)

    def test_duplicate_loads_summed(self, tmp_path: Path):
        raw = legacy_store(loads=[
            {"classId": 1, "subjectId": 1, "ppw": 2},
            {"classId": 1, "subjectId": 1, "ppw": 1},
            {"classId": 1, "subjectId": 1, "ppw": 0},
        ])
        data, report = import_legacy_json(write_json(tmp_path / "store.json", raw))
        assert len(data.workloads) == 1
        assert data.workloads[0].periods_per_week == 3
        assert any("doppelt" in w for w in report.warnings)
        assert any("0h" in w for w in report.warnings)

    def test_duplicate_capabilities_deduplicated(self, tmp_path: Path):
        raw = legacy_store(canTeach=[
            {"teacherId": 1, "subjectId": 1}, {"teacherId": 1, "subjectId": 1},
        ])
        data, _ = import_legacy_json(write_json(tmp_path / "store.json", raw))
        assert len(data.capabilities) == 1

    def test_bad_week_start_warns(self, tmp_path: Path):
        raw = legacy_store(cfg={"periods": 4, "days": 2, "lunchAt": 2, "weekStart": "13.10."})
        importer = LegacyJsonImporter(write_json(tmp_path / "store.json", raw))
        _, report = importer.import_all()
        assert any("weekStart" in w for w in report.warnings)

    def test_invalid_teacher_skipped(self, tmp_path: Path):
        raw = legacy_store(teachers=[
            {"id": 1, "name": "Alice", "code": "A"},
            {"name": "Ohne ID"},
        ])
        data, report = import_legacy_json(write_json(tmp_path / "store.json", raw))
        assert [t.name for t in data.teachers] == ["Alice"]
        assert any("übersprungen" in w for w in report.warnings)

    def test_bad_json_raises(self, tmp_path: Path):
        path = tmp_path / "broken.json"
        path.write_text("{ kein json", encoding="utf-8")
        with pytest.raises(ValueError):
            import_legacy_json(path)

    def test_non_object_root_raises(self, tmp_path: Path):
        with pytest.raises(ValueError):
            import_legacy_json(write_json(tmp_path / "list.json", [1, 2, 3]))

    def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            import_legacy_json(tmp_path / "fehlt.json")

    def test_export_roundtrip(self, tmp_path: Path):
        original = demo_dataset()
        path = export_legacy_json(original, tmp_path / "out" / "store.json")
        raw = json.loads(path.read_text(encoding="utf-8"))
        assert raw["cfg"]["lunchAt"] == 3
        assert raw["teachers"][0]["avoidConsec"] is True

        data, report = import_legacy_json(path)
        assert data.teachers == original.teachers
        assert data.workloads == original.workloads
        assert data.capabilities == original.capabilities
        assert data.available_cells() == original.available_cells()
        assert report.availability_added == 0
