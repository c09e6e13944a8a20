"""Tests for the persistent material stack."""

import pytest


def _glass(material_id=0, index=1.5):
    from src.whitted.materials.phong import Material

    return Material(material_id=material_id, kt=(1.0, 1.0, 1.0), index=index)


class TestMaterialStack:
    """Tests for push/pop semantics of nested media."""

    def test_ambient_holds_air(self):
        """Test that the ambient stack contains only the air sentinel."""
        from src.whitted.core.media import MaterialStack
        from src.whitted.materials.phong import AIR_MATERIAL_ID

        stack = MaterialStack.ambient()

        assert stack.is_ambient
        assert len(stack) == 1
        assert stack.front.material_id == AIR_MATERIAL_ID
        assert stack.front.index == 1.0

    def test_push_pop_round_trip(self):
        """Test that pushing then popping restores the original stack."""
        from src.whitted.core.media import MaterialStack

        stack = MaterialStack.ambient()
        inside = stack.push(_glass())

        assert inside.pop() == stack
        assert inside.pop() is stack

    def test_push_does_not_modify_receiver(self):
        """Test that stacks are persistent values."""
        from src.whitted.core.media import MaterialStack

        outside = MaterialStack.ambient()
        outside.push(_glass())

        assert outside.is_ambient
        assert len(outside) == 1

    def test_sibling_branches_share_history(self):
        """Test that two pushes on one stack give independent branches."""
        from src.whitted.core.media import MaterialStack

        base = MaterialStack.ambient().push(_glass(0))
        left = base.push(_glass(1, 1.33))
        right = base.pop()

        assert left.ids() == (1, 0, -1)
        assert right.ids() == (-1,)
        assert base.ids() == (0, -1)

    def test_below_front(self):
        """Test the medium surrounding the current one."""
        from src.whitted.core.media import MaterialStack

        water = _glass(0, 1.33)
        glass = _glass(1, 1.5)
        stack = MaterialStack.ambient().push(water).push(glass)

        assert stack.front is glass
        assert stack.below_front is water
        assert stack.pop().below_front.index == 1.0

    def test_pop_never_removes_air(self):
        """Test that the air sentinel survives any number of pops."""
        from src.whitted.core.media import MaterialStack

        stack = MaterialStack.ambient()
        for _ in range(3):
            stack = stack.pop()

        assert stack.is_ambient
        assert stack.front.material_id == -1
        assert stack.below_front is stack.front

    def test_equality_by_ids(self):
        """Test that stacks with the same media compare equal and hash alike."""
        from src.whitted.core.media import MaterialStack

        a = MaterialStack.ambient().push(_glass(2))
        b = MaterialStack.ambient().push(_glass(2))

        assert a == b
        assert hash(a) == hash(b)
        assert a != MaterialStack.ambient()

    def test_iteration_order(self):
        """Test that iteration runs from front to bottom."""
        from src.whitted.core.media import MaterialStack

        stack = MaterialStack.ambient().push(_glass(0)).push(_glass(1))

        assert [m.material_id for m in stack] == [1, 0, -1]


class TestMaterialIdentity:
    """Tests for the material identity used by the stack."""

    def test_same_medium_compares_ids(self):
        """Test that equal ids denote the same medium regardless of fields."""
        a = _glass(3, 1.5)
        b = _glass(3, 1.7)

        assert a.same_medium(b)
        assert not a.same_medium(_glass(4, 1.5))

    @pytest.mark.parametrize("index", [0.0, -1.0])
    def test_non_positive_index_rejected(self, index):
        """Test that refractive indices must be positive."""
        with pytest.raises(ValueError):
            _glass(index=index)
