"""Tests for shared types."""

import pytest

from osbuild_operator.types import ObjectKey, ReconcileOutcome, ReconcileResult


class TestObjectKey:
    """Tests for ObjectKey."""

    def test_str(self) -> None:
        """String form should be namespace/name."""
        assert str(ObjectKey("edge", "image-1")) == "edge/image-1"

    def test_parse_namespaced(self) -> None:
        """namespace/name should split on the slash."""
        assert ObjectKey.parse("edge/image-1") == ObjectKey("edge", "image-1")

    def test_parse_bare_name_uses_default_namespace(self) -> None:
        """A bare name should land in the default namespace."""
        assert ObjectKey.parse("image-1", "builds") == ObjectKey("builds", "image-1")
        assert ObjectKey.parse("image-1").namespace == "default"

    @pytest.mark.parametrize("value", ["", "/name", "ns/", "a/b/c"])
    def test_parse_invalid(self, value: str) -> None:
        """Empty parts and extra slashes should be rejected."""
        with pytest.raises(ValueError):
            ObjectKey.parse(value)

    def test_hashable_and_ordered(self) -> None:
        """Keys should work in sets and sort by namespace then name."""
        keys = {ObjectKey("b", "x"), ObjectKey("a", "y"), ObjectKey("a", "y")}
        assert sorted(keys) == [ObjectKey("a", "y"), ObjectKey("b", "x")]


class TestReconcileResult:
    """Tests for ReconcileResult."""

    def test_success_only_when_created(self) -> None:
        """Only the created outcome should count as success."""
        assert ReconcileResult(ReconcileOutcome.CREATED, "ok").success
        assert not ReconcileResult(ReconcileOutcome.NOT_FOUND, "gone").success
        assert not ReconcileResult(ReconcileOutcome.NO_BUILDER, "none").success

    def test_to_dict(self) -> None:
        """to_dict should flatten created keys."""
        result = ReconcileResult(
            ReconcileOutcome.CREATED,
            "Started run",
            created=[("ConfigMap", ObjectKey("default", "edge1"))],
        )
        assert result.to_dict() == {
            "outcome": "created",
            "message": "Started run",
            "created": [
                {"kind": "ConfigMap", "namespace": "default", "name": "edge1"}
            ],
        }
