"""
Tests for Round Plan Engine — plan reducers and group count derivation.
"""

import pytest

from app.config import DEFAULT_ADVANCING_PLAYERS, DEFAULT_GROUP_SIZE
from app.services.round_plan_engine import (
    RoundSpec,
    TournamentPlan,
    add_round,
    derive_group_counts,
    new_plan,
    players_entering_first_round,
    remove_round,
    total_matches,
    total_rounds,
    update_plan,
    update_round,
)
from app.services.round_plan_rules import round_robin_matches


# -----------------------------------------------------------------------------
# Helpers to build plans quickly
# -----------------------------------------------------------------------------

def make_round(size: int, advancing: int, group_count: int = 1, concurrent: int = 1, name: str = "R") -> RoundSpec:
    return RoundSpec(
        name=name,
        players_per_group=size,
        group_count=group_count,
        matches_per_group=round_robin_matches(size),
        advancing_players_per_group=advancing,
        concurrent_groups=concurrent,
    )


def make_plan(player_count: int, *rounds: RoundSpec, **plan_fields) -> TournamentPlan:
    return TournamentPlan(player_count=player_count, rounds=tuple(rounds), **plan_fields)


# -----------------------------------------------------------------------------
# new_plan
# -----------------------------------------------------------------------------

class TestNewPlan:
    def test_single_default_round(self):
        plan = new_plan(16)
        assert total_rounds(plan) == 1
        r = plan.rounds[0]
        assert r.name == "Round 1"
        assert r.players_per_group == DEFAULT_GROUP_SIZE
        assert r.advancing_players_per_group == DEFAULT_ADVANCING_PLAYERS
        assert r.matches_per_group == round_robin_matches(DEFAULT_GROUP_SIZE)
        assert r.concurrent_groups == 1

    def test_group_count_is_derived(self):
        plan = new_plan(16)
        assert plan.rounds[0].group_count == -(-16 // DEFAULT_GROUP_SIZE)

    def test_no_players_keeps_placeholder(self):
        plan = new_plan()
        assert plan.player_count == 0
        assert plan.rounds[0].group_count == 1


# -----------------------------------------------------------------------------
# derive_group_counts
# -----------------------------------------------------------------------------

class TestDeriveGroupCounts:
    def test_single_round_of_sixteen(self):
        plan = derive_group_counts(make_plan(16, make_round(16, 1, group_count=7)))
        assert plan.rounds[0].group_count == 1

    def test_two_round_chain(self):
        plan = derive_group_counts(make_plan(16, make_round(4, 2), make_round(8, 1)))
        assert [r.group_count for r in plan.rounds] == [4, 1]

    def test_later_round_uses_previous_derived_count(self):
        # 20 players / 6 per group -> 4 groups (last underfilled); 4 * 3 = 12 enter round 2
        plan = derive_group_counts(make_plan(20, make_round(6, 3), make_round(4, 2), make_round(4, 1)))
        assert [r.group_count for r in plan.rounds] == [4, 3, 2]

    def test_group_phase_feeds_first_round(self):
        # ceil(23 / 5) = 5 group-phase groups, round 0 advancing 2 -> 10 players
        plan = make_plan(23, make_round(4, 2), group_phase_enabled=True, group_phase_size=5)
        assert players_entering_first_round(plan) == 10
        derived = derive_group_counts(plan)
        assert derived.rounds[0].group_count == 3

    def test_group_size_below_two_does_not_divide_by_it(self):
        plan = derive_group_counts(make_plan(9, make_round(0, 1)))
        assert plan.rounds[0].group_count == 5
        # The stored size is left for the validator to report
        assert plan.rounds[0].players_per_group == 0

    def test_zero_players_is_noop(self):
        plan = make_plan(0, make_round(4, 2, group_count=9))
        assert derive_group_counts(plan) is plan

    def test_negative_players_is_noop(self):
        plan = make_plan(-5, make_round(4, 2, group_count=9))
        assert derive_group_counts(plan) is plan

    def test_input_is_not_mutated(self):
        plan = make_plan(16, make_round(4, 2, group_count=99))
        derive_group_counts(plan)
        assert plan.rounds[0].group_count == 99

    @pytest.mark.parametrize("plan", [
        make_plan(16, make_round(4, 2), make_round(8, 1)),
        make_plan(23, make_round(4, 2, group_count=40), make_round(6, 1), group_phase_enabled=True, group_phase_size=5),
        make_plan(7, make_round(3, 2), make_round(2, 1), make_round(5, 4)),
        make_plan(100, make_round(1, 0), make_round(10, 3, group_count=0)),
    ])
    def test_idempotent(self, plan):
        once = derive_group_counts(plan)
        assert derive_group_counts(once) == once


# -----------------------------------------------------------------------------
# add_round
# -----------------------------------------------------------------------------

class TestAddRound:
    def test_seeded_from_last_round(self):
        plan = add_round(make_plan(16, make_round(4, 2, concurrent=4)))
        assert total_rounds(plan) == 2
        new = plan.rounds[-1]
        assert new.name == "Round 2"
        assert new.players_per_group == 4
        assert new.advancing_players_per_group == 1
        assert new.matches_per_group == 6
        assert new.concurrent_groups == 2

    def test_group_counts_rederived(self):
        plan = add_round(make_plan(16, make_round(4, 2, concurrent=4)))
        # 4 groups * 2 advancing = 8 players into groups of 4
        assert [r.group_count for r in plan.rounds] == [4, 2]

    def test_single_advancer_seeds_pair(self):
        new = add_round(make_plan(16, make_round(16, 1))).rounds[-1]
        assert new.players_per_group == 2
        assert new.advancing_players_per_group == 1

    def test_zero_values_fall_back(self):
        new = add_round(make_plan(16, make_round(4, 0, concurrent=0))).rounds[-1]
        assert new.players_per_group == 4
        assert new.advancing_players_per_group == 1
        assert new.concurrent_groups == 1

    def test_bounds_hold_for_any_valid_seed(self):
        for size in range(2, 13):
            for advancing in range(1, size):
                for concurrent in (1, 2, 3, 8):
                    seed = make_plan(64, make_round(size, advancing, concurrent=concurrent))
                    new = add_round(seed).rounds[-1]
                    assert new.players_per_group >= 2
                    assert 1 <= new.advancing_players_per_group < new.players_per_group
                    assert new.concurrent_groups >= 1

    def test_original_plan_untouched(self):
        plan = make_plan(16, make_round(4, 2))
        add_round(plan)
        assert total_rounds(plan) == 1


# -----------------------------------------------------------------------------
# remove_round
# -----------------------------------------------------------------------------

class TestRemoveRound:
    def test_last_remaining_round_is_kept(self):
        plan = make_plan(16, make_round(4, 2))
        assert remove_round(plan, 0) is plan

    def test_removes_exactly_one_and_keeps_order(self):
        plan = make_plan(
            16,
            make_round(4, 2, name="A"),
            make_round(4, 2, name="B"),
            make_round(2, 1, name="C"),
        )
        result = remove_round(plan, 1)
        assert [r.name for r in result.rounds] == ["A", "C"]

    def test_remove_first_round(self):
        plan = make_plan(16, make_round(4, 2, name="A"), make_round(8, 1, name="B"))
        result = remove_round(plan, 0)
        assert [r.name for r in result.rounds] == ["B"]
        assert result.rounds[0].group_count == 2

    def test_out_of_range_is_noop(self):
        plan = make_plan(16, make_round(4, 2), make_round(8, 1))
        assert remove_round(plan, 5) is plan
        assert remove_round(plan, -1) is plan


# -----------------------------------------------------------------------------
# update_round / update_plan
# -----------------------------------------------------------------------------

class TestUpdateRound:
    def test_new_size_reseeds_default_matches(self):
        plan = update_round(new_plan(16), 0, players_per_group=8)
        r = plan.rounds[0]
        assert r.matches_per_group == 28
        assert r.group_count == 2

    def test_manual_match_count_survives_size_change(self):
        plan = update_round(new_plan(16), 0, matches_per_group=3)
        plan = update_round(plan, 0, players_per_group=8)
        assert plan.rounds[0].matches_per_group == 3

    def test_explicit_matches_win_over_reseed(self):
        plan = update_round(new_plan(16), 0, players_per_group=8, matches_per_group=10)
        assert plan.rounds[0].matches_per_group == 10

    def test_unknown_field_raises(self):
        with pytest.raises(TypeError):
            update_round(new_plan(16), 0, seats=4)

    def test_out_of_range_is_noop(self):
        plan = add_round(new_plan(16))
        assert update_round(plan, -1, name="Final") is plan
        assert update_round(plan, 5, name="Final") is plan
        assert total_rounds(plan) == 2


class TestUpdatePlan:
    def test_player_count_change_rederives(self):
        plan = update_plan(new_plan(16), player_count=32)
        assert plan.rounds[0].group_count == -(-32 // DEFAULT_GROUP_SIZE)

    def test_enable_group_phase(self):
        plan = make_plan(23, make_round(4, 2))
        plan = update_plan(plan, group_phase_enabled=True, group_phase_size=5)
        assert plan.rounds[0].group_count == 3


def test_total_matches_counts_every_group():
    plan = derive_group_counts(make_plan(16, make_round(4, 2), make_round(8, 1)))
    # 4 groups * 6 matches + 1 group * 28 matches
    assert total_matches(plan) == 52


def test_total_matches_includes_group_phase():
    plan = derive_group_counts(
        make_plan(20, make_round(4, 1), group_phase_enabled=True, group_phase_size=5)
    )
    # 4 group-phase groups * 10 matches + 1 round group * 6 matches
    assert total_matches(plan) == 46
