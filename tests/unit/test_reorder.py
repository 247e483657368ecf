"""Tests for move, normalize, rename and delete planning."""

import random

import pytest

from pagetree.core.tree.navigation import blocked_destinations
from pagetree.core.tree.reorder import (
    apply_patches,
    next_order,
    normalize_orders,
    plan_delete,
    plan_drop,
    plan_move,
    plan_nest,
    plan_rename,
)
from pagetree.core.tree.validation import check_invariants
from pagetree.models.document import (
    CYCLE,
    SELF_PARENT,
    UNKNOWN_DOCUMENT,
    UNKNOWN_PARENT,
    Document,
    MoveIntent,
    Patch,
)
from tests.unit.factories import random_documents


def _orders(docs: list[Document], parent_id: str | None) -> dict[str, int | None]:
    return {doc.id: doc.order for doc in docs if doc.parent_id == parent_id}


def test_drop_into_other_parent_matches_walkthrough(scenario: list[Document]) -> None:
    """B dropped first under A: B gets A/0, C shifts to 1, A keeps its slot."""
    result = plan_drop(scenario, "B", "A", 0)
    assert result.accepted
    assert result.patches == (
        Patch(id="B", order=0, parent_id="A", reparent=True),
        Patch(id="C", order=1),
    )

    moved = apply_patches(scenario, result.patches)
    assert _orders(moved, "A") == {"B": 0, "C": 1}
    assert _orders(moved, None) == {"A": 0}


def test_reorder_down_within_same_parent(world: list[Document]) -> None:
    result = plan_drop(world, "gods", "lore", 2)
    assert result.patches == (
        Patch(id="heroes", order=0),
        Patch(id="wars", order=1),
        Patch(id="gods", order=2, parent_id="lore", reparent=True),
    )


def test_reorder_up_within_same_parent(world: list[Document]) -> None:
    result = plan_drop(world, "wars", "lore", 0)
    moved = apply_patches(world, result.patches)
    assert _orders(moved, "lore") == {"wars": 0, "gods": 1, "heroes": 2}


def test_move_to_root_renumbers_both_groups(world: list[Document]) -> None:
    result = plan_drop(world, "heroes", None, 1)
    assert result.patches == (
        Patch(id="heroes", order=1, parent_id=None, reparent=True),
        Patch(id="maps", order=2),
        Patch(id="misc", order=3),
        Patch(id="wars", order=1),
    )


def test_nest_appends_as_last_child(world: list[Document]) -> None:
    result = plan_nest(world, "misc", "maps")
    assert result.patches == (Patch(id="misc", order=1, parent_id="maps", reparent=True),)


def test_destination_index_is_clamped(world: list[Document]) -> None:
    moved = apply_patches(world, plan_drop(world, "misc", "maps", 99).patches)
    assert _orders(moved, "maps") == {"north": 0, "misc": 1}

    moved = apply_patches(world, plan_drop(world, "misc", "maps", -5).patches)
    assert _orders(moved, "maps") == {"misc": 0, "north": 1}


def test_same_position_is_a_no_op(world: list[Document]) -> None:
    result = plan_drop(world, "heroes", "lore", 1)
    assert result.accepted
    assert result.patches == ()


def test_same_position_still_fills_gaps() -> None:
    docs = [
        Document(id="a", order=3),
        Document(id="b", order=7),
    ]
    result = plan_drop(docs, "a", None, 0)
    assert result.patches == (
        Patch(id="a", order=0, parent_id=None, reparent=True),
        Patch(id="b", order=1),
    )


@pytest.mark.parametrize(
    ("moving_id", "parent_id", "reason"),
    [
        ("lore", "sun", CYCLE),
        ("lore", "gods", CYCLE),
        ("lore", "lore", SELF_PARENT),
        ("lore", "ghost", UNKNOWN_PARENT),
        ("ghost", None, UNKNOWN_DOCUMENT),
    ],
)
def test_invalid_moves_are_rejected_without_patches(
    world: list[Document], moving_id: str, parent_id: str | None, reason: str
) -> None:
    result = plan_move(world, MoveIntent(moving_id, parent_id, 0))
    assert not result.accepted
    assert result.rejection == reason
    assert result.patches == ()
    assert apply_patches(world, result.patches) == world


def test_repeating_a_move_yields_no_patches(world: list[Document]) -> None:
    intent = MoveIntent("north", "lore", 2)
    moved = apply_patches(world, plan_move(world, intent).patches)
    assert plan_move(moved, intent).patches == ()


def test_random_moves_are_idempotent_and_contiguous() -> None:
    """Touched sibling groups end up as 0..n-1 and a repeated move changes nothing."""
    rng = random.Random(99)
    for _ in range(200):
        docs = random_documents(rng, rng.randint(2, 25))
        moving = rng.choice(docs)
        blocked = blocked_destinations(docs, moving.id)
        candidates = [None] + [doc.id for doc in docs if doc.id not in blocked]
        parent_id = rng.choice(candidates)
        index = rng.choice([None, rng.randint(-2, 10)])
        intent = MoveIntent(moving.id, parent_id, index)

        result = plan_move(docs, intent)
        assert result.accepted
        moved = apply_patches(docs, result.patches)

        for touched in {moving.parent_id, parent_id}:
            orders = sorted(_orders(moved, touched).values())
            assert orders == list(range(len(orders)))
        assert next(doc for doc in moved if doc.id == moving.id).parent_id == parent_id

        assert plan_move(moved, intent).patches == ()


def test_apply_patches_does_not_mutate_input(scenario: list[Document]) -> None:
    before = list(scenario)
    apply_patches(scenario, [Patch(id="A", order=5)])
    assert scenario == before


def test_apply_patches_rejects_unknown_ids(scenario: list[Document]) -> None:
    with pytest.raises(KeyError):
        apply_patches(scenario, [Patch(id="nope", order=0)])


def test_normalize_orders() -> None:
    docs = [
        Document(id="p", order=5),
        Document(id="q", order=9),
        Document(id="r", parent_id="p", order=None),
    ]
    assert normalize_orders(docs) == (
        Patch(id="p", order=0),
        Patch(id="q", order=1),
        Patch(id="r", order=0),
    )
    assert normalize_orders(apply_patches(docs, normalize_orders(docs))) == ()


def test_next_order(world: list[Document]) -> None:
    assert next_order(world, "lore") == 3
    assert next_order(world, None) == 3
    assert next_order(world, "sun") == 0


def test_plan_rename() -> None:
    doc = Document(id="A", title="Intro")
    assert plan_rename(doc, "  Intro ") is None
    assert plan_rename(doc, "   ") is None
    assert plan_rename(doc, " Prologue ") == Patch(id="A", title="Prologue")


def _without(docs: list[Document], deleted: tuple[str, ...]) -> list[Document]:
    return [doc for doc in docs if doc.id not in deleted]


def test_delete_cascade_removes_subtree(world: list[Document]) -> None:
    plan = plan_delete(world, "lore")
    assert plan.deleted_ids == ("lore", "gods", "sun", "heroes", "wars")
    assert plan.patches == (Patch(id="maps", order=0), Patch(id="misc", order=1))

    remaining = apply_patches(_without(world, plan.deleted_ids), plan.patches)
    assert check_invariants(remaining) == []


def test_delete_lift_moves_children_into_place(world: list[Document]) -> None:
    plan = plan_delete(world, "gods", policy="lift")
    assert plan.deleted_ids == ("gods",)
    assert plan.patches == (Patch(id="sun", order=0, parent_id="lore", reparent=True),)


def test_delete_lift_at_root(world: list[Document]) -> None:
    plan = plan_delete(world, "lore", policy="lift")
    remaining = apply_patches(_without(world, plan.deleted_ids), plan.patches)
    assert _orders(remaining, None) == {"gods": 0, "heroes": 1, "wars": 2, "maps": 3, "misc": 4}
    assert check_invariants(remaining) == []


def test_delete_rejects_bad_input(world: list[Document]) -> None:
    with pytest.raises(ValueError, match="policy"):
        plan_delete(world, "lore", policy="shred")
    with pytest.raises(KeyError):
        plan_delete(world, "ghost")
