# tests/test_overrides.py
"""
Tests for saving individual monthly values and sector defaults.
"""

import datetime
import sys
from pathlib import Path

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# ruff: noqa: E402
from plantao.core import overrides
from plantao.core.overrides import get_overrides, save_override, update_sector_defaults
from plantao.database.database import RateOverride, Sector, ShiftAssignment


def override_rows(db):
    db.expire_all()
    return db.query(RateOverride).all()


class TestSaveOverride:
    def test_insert_then_update(self, test_db, sectors, workers):
        er, ana = sectors["ER"], workers["Ana"]

        first = save_override(test_db, 1, er.id, ana.id, 3, 2026, day_value=800, night_value=900)
        second = save_override(test_db, 1, er.id, ana.id, 3, 2026, day_value=850, night_value=None)

        rows = override_rows(test_db)
        assert len(rows) == 1
        assert rows[0].day_value == 850
        assert rows[0].night_value is None
        assert first.override.day_value == 800
        assert second.override.day_value == 850
        assert not second.deleted

    def test_zero_is_persisted(self, test_db, sectors, workers):
        er, ana = sectors["ER"], workers["Ana"]

        result = save_override(test_db, 1, er.id, ana.id, 3, 2026, day_value=0, night_value=0)

        [row] = override_rows(test_db)
        assert row.day_value == 0
        assert row.night_value == 0
        assert result.override.day_value == 0
        assert not result.deleted

    def test_one_zero_one_unset_is_kept(self, test_db, sectors, workers):
        er, ana = sectors["ER"], workers["Ana"]

        save_override(test_db, 1, er.id, ana.id, 3, 2026, day_value=0, night_value=None)

        [row] = override_rows(test_db)
        assert row.day_value == 0
        assert row.night_value is None

    def test_both_unset_deletes(self, test_db, sectors, workers):
        er, ana = sectors["ER"], workers["Ana"]
        save_override(test_db, 1, er.id, ana.id, 3, 2026, day_value=800, night_value=None)

        result = save_override(test_db, 1, er.id, ana.id, 3, 2026, day_value=None, night_value=None)

        assert result.deleted
        assert result.override is None
        assert override_rows(test_db) == []

    def test_delete_missing_row_is_noop(self, test_db, sectors, workers):
        result = save_override(test_db, 1, sectors["ER"].id, workers["Ana"].id, 3, 2026, None, None)

        assert not result.deleted
        assert result.invalidation.completed

    def test_months_are_independent(self, test_db, sectors, workers):
        er, ana = sectors["ER"], workers["Ana"]

        save_override(test_db, 1, er.id, ana.id, 3, 2026, day_value=800, night_value=None)
        save_override(test_db, 1, er.id, ana.id, 4, 2026, day_value=100, night_value=None)

        assert [o.day_value for o in get_overrides(test_db, 1, er.id, 3, 2026)] == [800]
        assert [o.day_value for o in get_overrides(test_db, 1, er.id, 4, 2026)] == [100]

    @pytest.mark.parametrize(
        "month, year, day_value",
        [
            (0, 2026, 100),
            (13, 2026, 100),
            (3, 1999, 100),
            (3, 2026, -1),
            (3, 2026, "abc"),
        ],
    )
    def test_invalid_input(self, test_db, sectors, workers, month, year, day_value):
        with pytest.raises(ValueError):
            save_override(test_db, 1, sectors["ER"].id, workers["Ana"].id, month, year, day_value, None)

        assert override_rows(test_db) == []

    def test_save_clears_cached_values(self, test_db, sectors, workers, make_shift, make_assignment):
        er, ana = sectors["ER"], workers["Ana"]
        assignment = make_assignment(make_shift(datetime.date(2026, 3, 12), sector=er), ana, cached_value=600)
        assignment_id = assignment.id

        result = save_override(test_db, 1, er.id, ana.id, 3, 2026, day_value=800, night_value=None)

        assert result.invalidation.completed
        assert result.invalidation.cleared_ids == [assignment_id]
        test_db.expire_all()
        assert test_db.get(ShiftAssignment, assignment_id).cached_value is None

    def test_failed_invalidation_keeps_override(self, test_db, sectors, workers, monkeypatch):
        er, ana = sectors["ER"], workers["Ana"]
        real_commit = test_db.commit
        calls = []

        def commit_then_fail():
            calls.append(1)
            if len(calls) > 1:
                raise OperationalError("UPDATE shift_assignments", {}, Exception("database is locked"))
            real_commit()

        monkeypatch.setattr(test_db, "commit", commit_then_fail)
        result = save_override(test_db, 1, er.id, ana.id, 3, 2026, day_value=800, night_value=None)
        monkeypatch.undo()

        assert result.override.day_value == 800
        assert not result.invalidation.completed
        assert result.invalidation.warning
        assert len(override_rows(test_db)) == 1


    def test_concurrent_insert_retried_as_update(self, test_db, sectors, workers, monkeypatch):
        """Another request inserted the key between lookup and insert."""
        er, ana = sectors["ER"], workers["Ana"]
        save_override(test_db, 1, er.id, ana.id, 3, 2026, day_value=800, night_value=900)

        real_find = overrides._find_override
        lookups = []

        def stale_first_lookup(session, scope):
            lookups.append(scope)
            if len(lookups) == 1:
                return None
            return real_find(session, scope)

        monkeypatch.setattr(overrides, "_find_override", stale_first_lookup)
        result = save_override(test_db, 1, er.id, ana.id, 3, 2026, day_value=250, night_value=0)
        monkeypatch.undo()

        assert len(lookups) == 2
        assert result.override.day_value == 250
        assert result.override.night_value == 0
        assert [(r.day_value, r.night_value) for r in override_rows(test_db)] == [(250.0, 0.0)]

    def test_unique_key_enforced(self, test_db, sectors, workers):
        er, ana = sectors["ER"], workers["Ana"]
        key = {"tenant_id": 1, "sector_id": er.id, "worker_id": ana.id, "month": 3, "year": 2026}
        test_db.add(RateOverride(**key, day_value=100))
        test_db.commit()

        test_db.add(RateOverride(**key, day_value=200))
        with pytest.raises(IntegrityError):
            test_db.commit()
        test_db.rollback()

        assert [r.day_value for r in override_rows(test_db)] == [100]

class TestSectorDefaults:
    def test_update_without_apply(self, test_db, sectors, workers, make_shift, make_assignment):
        er = sectors["ER"]
        assignment = make_assignment(make_shift(datetime.date(2026, 3, 12), sector=er), workers["Ana"], 600)
        assignment_id = assignment.id

        result = update_sector_defaults(test_db, 1, er.id, 0, None)

        assert result is None
        test_db.expire_all()
        sector = test_db.get(Sector, er.id)
        assert sector.default_day_value == 0
        assert sector.default_night_value is None
        assert test_db.get(ShiftAssignment, assignment_id).cached_value == 600

    def test_apply_to_existing_clears_sector(self, test_db, sectors, workers, make_shift, make_assignment):
        er, icu = sectors["ER"], sectors["ICU"]
        in_er = make_assignment(make_shift(datetime.date(2026, 3, 12), sector=er), workers["Ana"], 600)
        in_icu = make_assignment(make_shift(datetime.date(2026, 3, 12), sector=icu), workers["Ana"], 600)
        in_er_id, in_icu_id = in_er.id, in_icu.id

        result = update_sector_defaults(test_db, 1, er.id, 450, 550, apply_to_existing=True)

        assert result.cleared_ids == [in_er_id]
        test_db.expire_all()
        assert test_db.get(ShiftAssignment, in_icu_id).cached_value == 600

    def test_unknown_sector(self, test_db, tenant):
        with pytest.raises(LookupError):
            update_sector_defaults(test_db, 1, 999, 100, 100)

    def test_negative_default_rejected(self, test_db, sectors):
        with pytest.raises(ValueError):
            update_sector_defaults(test_db, 1, sectors["ER"].id, -5, None)
