"""Tests for the pipeline state reducer.

The reducer is the only place state values are built, so these tests
pin down the status machine: steps advance one at a time, only trends
completes a run, and halts return unfinished runs to idle.
"""

import pytest

from precedent_explorer.pipeline import (
    ConflictReport,
    ConflictsEvent,
    HaltEvent,
    LogEvent,
    MatchesEvent,
    PipelineState,
    PipelineStatus,
    ProfileEvent,
    ScenarioProfile,
    StepEvent,
    TrendSummary,
    TrendsEvent,
    coerce_matches,
    fold_events,
    reduce_state,
)

from tests.fixtures.sample_payloads import (
    DIGITAL_ASSET_QUERY,
    RANKED_IDS,
    SAMPLE_CONFLICTS,
    SAMPLE_MATCHES,
    SAMPLE_PROFILE,
    SAMPLE_TRENDS,
)


def full_run_events():
    """Events of a successful run, in executor order."""
    return [
        StepEvent(0),
        LogEvent("[Explorer] Initiating Scenario Profiling..."),
        ProfileEvent(ScenarioProfile.from_payload(SAMPLE_PROFILE)),
        StepEvent(1),
        LogEvent("[Explorer] Initiating Precedent Retrieval & Matching..."),
        MatchesEvent(coerce_matches(SAMPLE_MATCHES)),
        StepEvent(2),
        LogEvent("[Explorer] Initiating Conflict & Divergence Analysis..."),
        ConflictsEvent(ConflictReport.from_payload(SAMPLE_CONFLICTS)),
        StepEvent(3),
        LogEvent("[Explorer] Initiating Trend & Consensus Mapping..."),
        TrendsEvent(TrendSummary.from_payload(SAMPLE_TRENDS)),
    ]


def at_step(index: int) -> PipelineState:
    return fold_events([StepEvent(i) for i in range(index + 1)])


class TestReduceState:
    """Test suite for single-event reductions."""

    @pytest.mark.unit
    def test_initial_state(self):
        state = PipelineState()

        assert state.status is PipelineStatus.IDLE
        assert state.step == -1
        assert state.logs == ()
        assert state.matches == ()

    @pytest.mark.unit
    def test_fresh_state_carries_topic_and_log(self):
        state = PipelineState.fresh(run_id="r1", topic="Q", log="hello")

        assert state.run_id == "r1"
        assert state.scenario.topic == "Q"
        assert state.logs == ("hello",)

    @pytest.mark.unit
    def test_reducer_does_not_modify_input(self):
        state = PipelineState()
        new_state = reduce_state(state, LogEvent("one"))

        assert state.logs == ()
        assert new_state.logs == ("one",)

    @pytest.mark.unit
    def test_log_appends(self):
        state = fold_events([LogEvent("a"), LogEvent("b")])
        assert state.logs == ("a", "b")

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "index,status",
        [
            (0, PipelineStatus.PROFILING),
            (1, PipelineStatus.RETRIEVING),
            (2, PipelineStatus.ANALYZING_CONFLICTS),
            (3, PipelineStatus.MAPPING_TRENDS),
        ],
    )
    def test_step_maps_to_status(self, index, status):
        state = at_step(index)

        assert state.step == index
        assert state.status is status

    @pytest.mark.unit
    def test_skipped_step_is_ignored(self):
        state = reduce_state(PipelineState(), StepEvent(2))

        assert state.step == -1
        assert state.status is PipelineStatus.IDLE

    @pytest.mark.unit
    def test_backward_step_is_ignored(self):
        state = reduce_state(at_step(2), StepEvent(1))
        assert state.step == 2

    @pytest.mark.unit
    def test_out_of_range_step_is_ignored(self):
        state = reduce_state(at_step(3), StepEvent(4))

        assert state.step == 3
        assert state.status is PipelineStatus.MAPPING_TRENDS

    @pytest.mark.unit
    def test_repeated_step_is_a_no_op(self):
        state = at_step(1)
        assert reduce_state(state, StepEvent(1)) == state

    @pytest.mark.unit
    def test_matches_are_ranked_on_fold(self):
        unranked = tuple(coerce_matches(SAMPLE_MATCHES)[::-1])
        state = reduce_state(at_step(1), MatchesEvent(unranked))

        assert [m.id for m in state.matches] == RANKED_IDS

    @pytest.mark.unit
    def test_trends_complete_only_from_mapping_trends(self):
        trends = TrendSummary.from_payload(SAMPLE_TRENDS)

        early = reduce_state(at_step(1), TrendsEvent(trends))
        assert early.status is PipelineStatus.RETRIEVING
        assert early.trends == trends

        idle = reduce_state(PipelineState(), TrendsEvent(trends))
        assert idle.status is PipelineStatus.IDLE

        final = reduce_state(at_step(3), TrendsEvent(trends))
        assert final.status is PipelineStatus.COMPLETE

    @pytest.mark.unit
    def test_halt_returns_to_idle_with_log(self):
        state = reduce_state(at_step(2), HaltEvent("[System] Process interrupted by user."))

        assert state.status is PipelineStatus.IDLE
        assert state.step == 2
        assert state.logs[-1] == "[System] Process interrupted by user."
        assert state.was_halted

    @pytest.mark.unit
    def test_halt_without_message_adds_no_log(self):
        state = reduce_state(at_step(0), HaltEvent())

        assert state.status is PipelineStatus.IDLE
        assert state.logs == ()

    @pytest.mark.unit
    def test_halt_keeps_complete(self):
        complete = fold_events(full_run_events())
        state = reduce_state(complete, HaltEvent("late"))

        assert state.status is PipelineStatus.COMPLETE
        assert state.logs[-1] == "late"

    @pytest.mark.unit
    def test_steps_ignored_after_halt(self):
        halted = reduce_state(at_step(1), HaltEvent())
        state = reduce_state(halted, StepEvent(2))

        assert state.status is PipelineStatus.IDLE
        assert state.step == 1

    @pytest.mark.unit
    def test_unknown_event_raises(self):
        with pytest.raises(TypeError):
            reduce_state(PipelineState(), {"type": "log", "message": "raw dict"})


class TestFoldEvents:
    """Test suite for folding whole event sequences."""

    @pytest.mark.unit
    def test_full_run_completes(self):
        state = fold_events(full_run_events(), PipelineState.fresh("r1", DIGITAL_ASSET_QUERY))

        assert state.status is PipelineStatus.COMPLETE
        assert state.step == 3
        assert state.scenario.domain == "Finance"
        assert [m.id for m in state.matches] == RANKED_IDS
        assert state.conflicts.has_conflict is True
        assert state.trends.majority_view == SAMPLE_TRENDS["majorityView"]
        assert len(state.logs) == 4

    @pytest.mark.unit
    def test_stepwise_reduce_matches_fold(self):
        events = full_run_events()
        initial = PipelineState.fresh("r1", DIGITAL_ASSET_QUERY, log="[System] start")

        state = initial
        for event in events:
            state = reduce_state(state, event)

        assert state == fold_events(events, initial)

    @pytest.mark.unit
    def test_fold_of_prefix_then_rest_matches_whole(self):
        events = full_run_events()
        initial = PipelineState.fresh("r1", DIGITAL_ASSET_QUERY)
        whole = fold_events(events, initial)

        for split in range(len(events) + 1):
            partial = fold_events(events[:split], initial)
            assert fold_events(events[split:], partial) == whole, f"split at {split}"

    @pytest.mark.unit
    def test_never_complete_without_trends(self):
        state = fold_events(full_run_events()[:-1])

        assert state.status is PipelineStatus.MAPPING_TRENDS
        assert state.trends == TrendSummary()

    @pytest.mark.unit
    def test_step_never_exceeds_three(self):
        state = fold_events(full_run_events() + [StepEvent(4), StepEvent(5)])
        assert state.step == 3

    @pytest.mark.unit
    def test_serialized_state_uses_camel_case(self):
        data = fold_events(full_run_events(), PipelineState.fresh("r1")).to_dict()

        assert data["runId"] == "r1"
        assert data["status"] == "complete"
        assert data["conflicts"]["hasConflict"] is True
        assert data["trends"]["consensusLevel"] == "Jumhur"
        assert data["matches"][0]["operativeCause"]
