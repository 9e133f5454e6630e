from datetime import datetime

from versionable.diff import compute_snapshot_diff


class TestSnapshotDiff:
    def test_identical(self):
        assert compute_snapshot_diff({"a": 1, "b": "x"}, {"a": 1, "b": "x"}) == {}

    def test_changed_value_reports_left(self):
        assert compute_snapshot_diff({"name": "B"}, {"name": "A"}) == {"name": "B"}

    def test_key_missing_on_right(self):
        assert compute_snapshot_diff({"a": 1, "new": 2}, {"a": 1}) == {"new": 2}

    def test_key_missing_on_left_is_ignored(self):
        assert compute_snapshot_diff({"a": 1}, {"a": 1, "gone": 2}) == {}

    def test_value_comparison(self):
        assert compute_snapshot_diff({"a": 1}, {"a": "1"}) == {"a": 1}
        assert compute_snapshot_diff({"a": None}, {"a": 0}) == {"a": None}
        # Equal values of different numeric types are not a change
        assert compute_snapshot_diff({"price": 5.0}, {"price": 5}) == {}

    def test_nested_mappings(self):
        left = {"meta": {"color": "red", "size": 2}, "x": 1}
        right = {"meta": {"color": "blue", "size": 2}, "x": 1}
        assert compute_snapshot_diff(left, right) == {"meta": {"color": "red"}}

    def test_nested_equal(self):
        left = {"meta": {"tags": {"a": 1}}}
        assert compute_snapshot_diff(left, {"meta": {"tags": {"a": 1}}}) == {}

    def test_mapping_replacing_scalar(self):
        assert compute_snapshot_diff({"meta": {"a": 1}}, {"meta": None}) == {"meta": {"a": 1}}

    def test_excluded_fields(self):
        left = {"name": "B", "updated_at": datetime(2024, 1, 2), "created_at": 1}
        right = {"name": "A", "updated_at": datetime(2024, 1, 1), "created_at": 2}
        assert compute_snapshot_diff(
            left, right, excluded={"updated_at", "created_at"}
        ) == {"name": "B"}

    def test_lists_compared_as_values(self):
        assert compute_snapshot_diff({"tags": [1, 2]}, {"tags": [1, 2]}) == {}
        assert compute_snapshot_diff({"tags": [1, 3]}, {"tags": [1, 2]}) == {"tags": [1, 3]}
