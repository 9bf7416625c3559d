"""
Tests for collection operations (catalog.py) and JSON persistence
(serializers.py, tracker_store.py).
"""

import json
from datetime import date, datetime
from pathlib import Path

import pytest

from rep_tracker.core.catalog import (
    add_exercise,
    add_templates,
    commit_draft,
    default_exercises,
    delete_exercise,
    delete_target,
    delete_template,
    delete_workout,
    draft_from_template,
    draft_from_workout,
    edit_exercise,
    edit_target,
    edit_template,
    exercise_name,
    merge_import,
    resolve_exercise,
    template_from_draft,
)
from rep_tracker.core.models import (
    DraftSet,
    Exercise,
    ImportBatch,
    ImportSingle,
    TemplateEntry,
    TrackerState,
    Workout,
    WorkoutDraft,
    WorkoutSet,
    WorkoutTarget,
    WorkoutTemplate,
)
from rep_tracker.core.targets import evaluate_target
from rep_tracker.io.serializers import (
    ValidationError,
    dict_to_state,
    dict_to_target,
    dict_to_workout,
    parse_reps_string,
    workout_to_dict,
)
from rep_tracker.io.tracker_store import TrackerStore, read_export

NOW = datetime(2024, 1, 10, 12, 0)


def _exercise(ex_id: str, category: str = "chest") -> Exercise:
    return Exercise(id=ex_id, name=ex_id.title(), category=category, created_at=NOW)


def _workout(wid: str, day: str, *sets: tuple[str, str, int]) -> Workout:
    """Workout with (set_id, exercise_id, reps) sets."""
    return Workout(
        id=wid,
        date=date.fromisoformat(day),
        sets=[WorkoutSet(id=sid, exercise_id=ex, reps=reps) for sid, ex, reps in sets],
    )


def _template(tid: str, *entries: tuple[str, int]) -> WorkoutTemplate:
    return WorkoutTemplate(
        id=tid,
        name=f"Template {tid}",
        exercises=[TemplateEntry(exercise_id=ex, sets=n) for ex, n in entries],
        created_at=NOW,
    )


def _target(tid: str, exercise_id: str | None = None) -> WorkoutTarget:
    return WorkoutTarget(
        id=tid,
        name=f"Target {tid}",
        target_type="reps",
        target_value=50,
        period="weekly",
        created_at=NOW,
        exercise_id=exercise_id,
    )


def _state() -> TrackerState:
    return TrackerState(
        exercises=[_exercise("push"), _exercise("squat", "legs")],
        workouts=[
            _workout("w1", "2024-01-08", ("s1", "push", 10), ("s2", "squat", 20), ("s3", "push", 8)),
            _workout("w2", "2024-01-09", ("s4", "push", 12)),
        ],
        templates=[_template("t1", ("push", 3), ("squat", 2)), _template("t2", ("push", 4))],
        targets=[_target("g1", "push"), _target("g2", "squat"), _target("g3")],
    )


# ===========================================================================
# Exercises
# ===========================================================================

class TestExercises:
    def test_default_catalog(self):
        exercises = default_exercises(NOW)
        assert len(exercises) == 14
        assert len({e.id for e in exercises}) == 14
        assert {"Push-Ups", "Squats"} <= {e.name for e in exercises}

    def test_resolve_by_id_or_name(self):
        exercises = [_exercise("push")]
        assert resolve_exercise(exercises, "push").id == "push"
        assert resolve_exercise(exercises, "  PUSH ").id == "push"
        assert resolve_exercise(exercises, "pull") is None

    def test_unknown_name_for_dangling_id(self):
        assert exercise_name([_exercise("push")], "gone") == "Unknown Exercise"

    def test_add_and_edit(self):
        exercises, created = add_exercise([], "  Dips ", "arms", NOW)
        assert created.name == "Dips"
        assert exercises == [created]

        edited = edit_exercise(exercises, created.id, category="chest")
        assert edited[0].category == "chest"
        assert edited[0].name == "Dips"
        assert edited[0].id == created.id
        assert exercises[0].category == "arms"  # input untouched

    def test_edit_missing_raises(self):
        with pytest.raises(KeyError):
            edit_exercise([], "nope", name="X")

    def test_blank_name_rejected(self):
        with pytest.raises(ValueError):
            add_exercise([], "   ", "arms", NOW)


class TestDeleteExercise:
    """Deleting an exercise cascades through workouts and templates."""

    def test_no_reference_survives(self):
        result = delete_exercise(_state(), "push")
        assert all(e.id != "push" for e in result.exercises)
        assert all(s.exercise_id != "push" for w in result.workouts for s in w.sets)
        assert all(e.exercise_id != "push" for t in result.templates for e in t.exercises)

    def test_empty_workouts_and_templates_dropped(self):
        result = delete_exercise(_state(), "push")
        assert [w.id for w in result.workouts] == ["w1"]
        assert [s.id for s in result.workouts[0].sets] == ["s2"]
        assert [t.id for t in result.templates] == ["t1"]
        assert [t.id for t in result.targets] == ["g1", "g2", "g3"]

    def test_target_kept_with_dangling_exercise(self):
        state = _state()
        assert evaluate_target(state.targets[0], state.workouts, state.exercises, NOW).current_value == 30

        result = delete_exercise(state, "push")
        kept = result.targets[0]
        assert kept == state.targets[0]
        assert exercise_name(result.exercises, kept.exercise_id) == "Unknown Exercise"

        progress = evaluate_target(kept, result.workouts, result.exercises, NOW)
        assert progress.current_value == 0
        assert progress.percentage == 0
        assert not progress.is_completed

    def test_sibling_sets_keep_order(self):
        result = delete_exercise(_state(), "squat")
        assert [s.id for s in result.workouts[0].sets] == ["s1", "s3"]

    def test_input_state_untouched(self):
        state = _state()
        delete_exercise(state, "push")
        assert len(state.workouts[0].sets) == 3
        assert len(state.targets) == 3


# ===========================================================================
# Workouts and drafts
# ===========================================================================

class TestCommitDraft:
    def test_new_day_appends(self):
        draft = WorkoutDraft(sets=[DraftSet("push", 10), DraftSet("push", 8)], notes="  ")
        workouts, saved = commit_draft([], draft, NOW)
        assert workouts == [saved]
        assert saved.date == date(2024, 1, 10)
        assert [s.reps for s in saved.sets] == [10, 8]
        assert saved.notes is None

    def test_same_day_replaces_and_keeps_id(self):
        existing = _workout("w1", "2024-01-10", ("s1", "push", 5))
        draft = WorkoutDraft(sets=[DraftSet("squat", 15)], notes="legs day")
        workouts, saved = commit_draft([existing], draft, datetime(2024, 1, 10, 21, 0))
        assert len(workouts) == 1
        assert saved.id == "w1"
        assert [s.exercise_id for s in saved.sets] == ["squat"]
        assert saved.notes == "legs day"

    def test_at_most_one_workout_per_day(self):
        workouts: list[Workout] = []
        for hour in (8, 12, 20):
            workouts, _ = commit_draft(
                workouts, WorkoutDraft(sets=[DraftSet("push", hour)]), datetime(2024, 1, 10, hour)
            )
        assert len(workouts) == 1

    def test_empty_draft_rejected(self):
        with pytest.raises(ValueError):
            commit_draft([], WorkoutDraft(), NOW)

    def test_draft_round_trip_through_workout(self):
        workout = _workout("w1", "2024-01-10", ("s1", "push", 5), ("s2", "squat", 7))
        draft = draft_from_workout(workout)
        draft.sets.append(DraftSet("push", 9))
        _, saved = commit_draft([workout], draft, workout.date)
        assert [s.reps for s in saved.sets] == [5, 7, 9]

    def test_delete_workout(self):
        state = _state()
        assert [w.id for w in delete_workout(state.workouts, "w1")] == ["w2"]
        with pytest.raises(KeyError):
            delete_workout(state.workouts, "missing")


# ===========================================================================
# Templates
# ===========================================================================

class TestTemplates:
    def test_draft_from_template_expands_sets(self):
        draft = draft_from_template(_template("t1", ("push", 3), ("squat", 2)))
        assert [d.exercise_id for d in draft.sets] == ["push"] * 3 + ["squat"] * 2
        assert all(d.reps == 0 for d in draft.sets)

    def test_template_from_draft_counts_in_first_seen_order(self):
        draft = WorkoutDraft(
            sets=[DraftSet("squat", 10), DraftSet("push", 5), DraftSet("squat", 10)]
        )
        template = template_from_draft("Mixed", draft, NOW)
        assert [(e.exercise_id, e.sets) for e in template.exercises] == [("squat", 2), ("push", 1)]

    def test_add_single(self):
        templates = add_templates([], ImportSingle(_template("t1", ("push", 3))))
        assert [t.id for t in templates] == ["t1"]

    def test_add_batch_skips_known_ids(self):
        existing = [_template("t1", ("push", 3))]
        batch = ImportBatch((_template("t1", ("squat", 1)), _template("t2", ("squat", 1))))
        templates = add_templates(existing, batch)
        assert [t.id for t in templates] == ["t1", "t2"]
        assert templates[0].exercises[0].exercise_id == "push"

    def test_unknown_payload_rejected(self):
        with pytest.raises(TypeError):
            add_templates([], [_template("t1", ("push", 3))])

    def test_edit_template(self):
        templates = edit_template(
            [_template("t1", ("push", 3))], "t1", name=" Evening ", exercises=[TemplateEntry("squat", 2)]
        )
        assert templates[0].name == "Evening"
        assert templates[0].exercises == [TemplateEntry("squat", 2)]
        with pytest.raises(KeyError):
            edit_template(templates, "t9", name="X")

    def test_delete_template(self):
        templates = [_template("t1", ("push", 3))]
        assert delete_template(templates, "t1") == []
        with pytest.raises(KeyError):
            delete_template(templates, "t9")


# ===========================================================================
# Targets
# ===========================================================================

class TestTargetEdits:
    def test_edit_value_and_pause(self):
        targets = edit_target([_target("g1")], "g1", target_value=80, is_active=False)
        assert targets[0].target_value == 80
        assert not targets[0].is_active

    def test_edit_revalidates(self):
        with pytest.raises(ValueError):
            edit_target([_target("g1")], "g1", target_value=0)

    def test_delete_missing_raises(self):
        with pytest.raises(KeyError):
            delete_target([], "g1")


# ===========================================================================
# Import merge
# ===========================================================================

class TestMergeImport:
    def test_existing_ids_skipped(self):
        state = _state()
        merged = merge_import(state, _state())
        assert len(merged.exercises) == 2
        assert len(merged.workouts) == 2
        assert len(merged.templates) == 2
        assert len(merged.targets) == 3

    def test_new_day_added(self):
        imported = TrackerState(workouts=[_workout("w9", "2024-01-01", ("s9", "push", 3))])
        merged = merge_import(_state(), imported)
        assert {w.id for w in merged.workouts} == {"w1", "w2", "w9"}

    def test_same_day_sets_appended(self):
        imported = TrackerState(
            workouts=[_workout("w9", "2024-01-09", ("s4", "push", 12), ("s10", "squat", 30))]
        )
        merged = merge_import(_state(), imported)
        days = [w.date for w in merged.workouts]
        assert len(days) == len(set(days))
        jan9 = next(w for w in merged.workouts if w.date == date(2024, 1, 9))
        assert jan9.id == "w2"
        assert [s.id for s in jan9.sets] == ["s4", "s10"]


# ===========================================================================
# Serializers
# ===========================================================================

class TestSerializers:
    def test_workout_timestamp_truncated_to_day(self):
        workout = dict_to_workout({
            "id": "w1",
            "date": "2024-01-10T18:45:00",
            "sets": [{"id": "s1", "exercise_id": "push", "reps": 10}],
        })
        assert workout.date == date(2024, 1, 10)
        assert workout_to_dict(workout)["date"] == "2024-01-10"

    def test_camel_case_keys_accepted(self):
        target = dict_to_target({
            "id": "g1",
            "name": "Weekly",
            "targetType": "sets",
            "targetValue": 10,
            "period": "weekly",
            "createdAt": "2024-01-01T00:00:00Z",
            "exerciseId": "push",
            "isActive": False,
        })
        assert target.target_type == "sets"
        assert target.exercise_id == "push"
        assert target.is_active is False

    def test_negative_reps_rejected(self):
        with pytest.raises(ValidationError):
            dict_to_workout({
                "id": "w1",
                "date": "2024-01-10",
                "sets": [{"id": "s1", "exercise_id": "push", "reps": -1}],
            })

    def test_invalid_period_rejected(self):
        with pytest.raises(ValidationError):
            dict_to_target({
                "id": "g1", "name": "X", "target_type": "reps", "target_value": 5,
                "period": "fortnightly", "created_at": "2024-01-01T00:00:00",
            })

    def test_missing_collections_are_empty(self):
        state = dict_to_state({"version": 1, "exercises": []})
        assert state.workouts == [] and state.targets == []

    def test_parse_reps_string(self):
        assert parse_reps_string("10,8,8") == [10, 8, 8]
        assert parse_reps_string("10 8  8") == [10, 8, 8]
        assert parse_reps_string("3x10") == [10, 10, 10]
        assert parse_reps_string("2 X 5") == [5, 5]

    @pytest.mark.parametrize("text", ["", "  ", "ten", "10,-2", "0x5", "²", "10,²", "3x²"])
    def test_parse_reps_string_errors(self, text):
        with pytest.raises(ValidationError):
            parse_reps_string(text)


# ===========================================================================
# TrackerStore
# ===========================================================================

class TestTrackerStore:
    def test_load_before_init_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            TrackerStore(tmp_path / "data").load_state()

    def test_round_trip(self, tmp_path):
        store = TrackerStore(tmp_path)
        store.init(_state())
        loaded = store.load_state()
        assert loaded == _state()

    def test_init_keeps_existing_files(self, tmp_path):
        store = TrackerStore(tmp_path)
        store.init(_state())
        store.init()
        assert len(store.load_collection("workouts")) == 2

    def test_save_single_collection(self, tmp_path):
        store = TrackerStore(tmp_path)
        store.init(_state())
        store.save_collection("targets", [])
        state = store.load_state()
        assert state.targets == []
        assert len(state.exercises) == 2

    def test_no_temp_files_left(self, tmp_path):
        store = TrackerStore(tmp_path)
        store.init(_state())
        store.save_state(_state())
        assert sorted(p.name for p in tmp_path.iterdir()) == [
            "exercises.json", "targets.json", "templates.json", "workouts.json",
        ]

    def test_failed_replace_removes_temp_file(self, tmp_path, monkeypatch):
        store = TrackerStore(tmp_path)
        store.init(_state())

        def fail_replace(self, target):
            raise OSError("disk full")

        monkeypatch.setattr(Path, "replace", fail_replace)
        with pytest.raises(OSError, match="disk full"):
            store.save_collection("targets", [])

        assert sorted(p.name for p in tmp_path.iterdir()) == [
            "exercises.json", "targets.json", "templates.json", "workouts.json",
        ]
        assert len(store.load_collection("targets")) == 3

    def test_invalid_json_raises_validation_error(self, tmp_path):
        store = TrackerStore(tmp_path)
        store.init()
        (tmp_path / "workouts.json").write_text("{not json")
        with pytest.raises(ValidationError):
            store.load_state()

    def test_bad_entry_reports_index(self, tmp_path):
        store = TrackerStore(tmp_path)
        store.init()
        (tmp_path / "exercises.json").write_text(json.dumps([{"id": "x"}]))
        with pytest.raises(ValidationError, match="entry 0"):
            store.load_collection("exercises")

    def test_empty_file_is_empty_collection(self, tmp_path):
        store = TrackerStore(tmp_path)
        store.init()
        (tmp_path / "templates.json").write_text("")
        assert store.load_collection("templates") == []

    def test_unknown_collection(self, tmp_path):
        with pytest.raises(KeyError):
            TrackerStore(tmp_path).collection_path("notes")

    def test_export_and_read_back(self, tmp_path):
        store = TrackerStore(tmp_path / "data")
        store.init(_state())
        path = store.export_state(tmp_path / "backup.json")

        payload = json.loads(path.read_text())
        assert payload["version"] == 1
        assert len(payload["workouts"]) == 2
        assert read_export(path) == _state()

    def test_read_export_empty_file(self, tmp_path):
        path = tmp_path / "empty.json"
        path.write_text("")
        with pytest.raises(ValidationError):
            read_export(path)
