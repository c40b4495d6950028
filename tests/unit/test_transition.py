"""Unit tests for feasibility, gating and firing."""

import pytest

from petrisim.core.arcs import ArcDirection, ArcSpec
from petrisim.core.errors import ConfigurationError
from petrisim.core.net import NetConfig, TransitionConfig, build_net
from petrisim.core.tokens import DynamicalState, TokenType
from petrisim.core.transition import (
    FireStatus,
    FiringGate,
    NotFiredReason,
    Transition,
    feasible,
    fire,
)


def _marking(net):
    return {name: dict(counts) for name, counts in net.marking().items()}


class TestArcSpec:
    """Tests for arc validation."""

    @pytest.mark.parametrize("weight", [0, -2, 1.5, True])
    def test_invalid_weight(self, weight):
        with pytest.raises(ConfigurationError):
            ArcSpec(place=0, transition="T", token_type=TokenType.NORMAL_A, weight=weight)

    def test_direction(self):
        arc = ArcSpec(0, "T", TokenType.NORMAL_A, 2, ArcDirection.OUTPUT)
        assert not arc.is_input


class TestTransitionProperties:
    """Tests for derived transition quantities."""

    def test_counts_and_delta(self):
        t = Transition(
            "T",
            inputs=(
                ArcSpec(0, "T", TokenType.NORMAL_A, 3),
                ArcSpec(1, "T", TokenType.CANCER_A, 1),
            ),
            outputs=(ArcSpec(2, "T", TokenType.CANCER_A, 1, ArcDirection.OUTPUT),),
        )
        assert t.consumed_count == 4
        assert t.produced_count == 1
        assert t.delta == -3
        assert t.consumes_cancer

    def test_requirements_sum_over_duplicate_arcs(self):
        t = Transition(
            "T",
            inputs=(
                ArcSpec(0, "T", TokenType.NORMAL_A, 2),
                ArcSpec(0, "T", TokenType.NORMAL_A, 3),
            ),
        )
        assert t.requirements() == {(0, TokenType.NORMAL_A): 5}


class TestFeasible:
    """Tests for the feasibility predicate."""

    def test_small_scenario_is_feasible(self, small_scenario_config):
        net = build_net(small_scenario_config)
        assert feasible(net.transition("T1"), net)

    def test_insufficient_tokens(self, small_scenario_config):
        net = build_net(small_scenario_config)
        net.place("P1").remove_at([0])
        assert not feasible(net.transition("T1"), net)

    def test_feasible_does_not_mutate(self, small_scenario_config):
        net = build_net(small_scenario_config)
        before = _marking(net)
        feasible(net.transition("T1"), net)
        assert _marking(net) == before

    def test_empty_inputs_always_feasible(self):
        net = build_net(NetConfig(
            places=["P"],
            transitions=[TransitionConfig("source", outputs=((1, "P", "NormalA"),))],
        ))
        assert feasible(net.transition("source"), net)

    def test_duplicate_arcs_need_combined_count(self):
        net = build_net(NetConfig(
            places=["P"],
            transitions=[TransitionConfig(
                "T", inputs=((2, "P", "NormalA"), (2, "P", "NormalA")),
            )],
            initial_marking={"P": [("NormalA", "Inactive")] * 3},
        ))
        assert not feasible(net.transition("T"), net)


class TestFiringGate:
    """Tests for the gating rule."""

    @pytest.mark.parametrize("threshold", [0, -5, 2.0])
    def test_invalid_threshold(self, threshold):
        with pytest.raises(ConfigurationError):
            FiringGate(threshold=threshold)

    def test_requires_cancer_input(self):
        t = Transition("T", inputs=(ArcSpec(0, "T", TokenType.NORMAL_A, 40),))
        assert not FiringGate(threshold=30).admits(t)
        assert FiringGate(threshold=30, require_cancer=False).admits(t)

    def test_threshold_is_strict(self):
        at = Transition("T", inputs=(ArcSpec(0, "T", TokenType.CANCER_A, 30),))
        above = Transition("T", inputs=(ArcSpec(0, "T", TokenType.CANCER_A, 31),))
        gate = FiringGate(threshold=30)
        assert not gate.admits(at)
        assert gate.admits(above)

    def test_disabled_admits_everything(self):
        small = Transition("T", inputs=(ArcSpec(0, "T", TokenType.NORMAL_A, 1),))
        assert FiringGate.disabled().admits(small)
        assert FiringGate.disabled().admits(Transition("source"))

    def test_no_threshold_keeps_cancer_requirement(self):
        gate = FiringGate(threshold=None)
        assert not gate.admits(Transition("T", inputs=(ArcSpec(0, "T", TokenType.NORMAL_A, 1),)))
        assert gate.admits(Transition("T", inputs=(ArcSpec(0, "T", TokenType.CANCER_B, 1),)))


class TestFire:
    """Tests for atomic firing."""

    def test_small_scenario_is_gated(self, small_scenario_config, engine):
        """Feasible, but 4 consumed <= 30: NOT_FIRED and nothing moves."""
        net = build_net(small_scenario_config)
        before = _marking(net)
        t1 = net.transition("T1")

        assert feasible(t1, net)
        result = fire(t1, net, engine)

        assert result.status is FireStatus.NOT_FIRED
        assert result.reason is NotFiredReason.GATED
        assert not result.fired
        assert _marking(net) == before
        assert net.total_tokens() == 4

    def test_no_cancer_input_is_gated(self, engine):
        """40 NormalA consumed is above the threshold, but nothing is cancer."""
        net = build_net(NetConfig(
            places=["P1", "P2"],
            transitions=[TransitionConfig(
                "T",
                inputs=((40, "P1", "NormalA"),),
                outputs=((1, "P2", "NormalB"),),
            )],
            initial_marking={"P1": [("NormalA", "Inactive")] * 45},
        ))
        before = _marking(net)
        t = net.transition("T")

        assert feasible(t, net)
        result = fire(t, net, engine)

        assert result.status is FireStatus.NOT_FIRED
        assert result.reason is NotFiredReason.GATED
        assert _marking(net) == before
        assert net.total_tokens() == 45

    def test_small_scenario_fires_without_gate(self, small_scenario_config, engine):
        net = build_net(small_scenario_config)
        result = fire(net.transition("T1"), net, engine, FiringGate.disabled())

        assert result.fired
        assert len(result.consumed) == 4
        assert len(result.produced) == 1
        assert len(net.place("P1")) == 0
        assert len(net.place("P2")) == 0
        assert net.place("P3").count(TokenType.CANCER_A) == 1

    def test_infeasible_returns_not_fired(self, small_scenario_config, engine):
        net = build_net(small_scenario_config)
        net.place("P2").remove_at([0])
        before = _marking(net)

        result = fire(net.transition("T1"), net, engine)

        assert result.status is FireStatus.NOT_FIRED
        assert result.reason is NotFiredReason.INFEASIBLE
        assert _marking(net) == before

    def test_firing_delta(self, large_scenario_config, engine):
        net = build_net(large_scenario_config)
        t1 = net.transition("T1")
        before = net.total_tokens()

        result = fire(t1, net, engine, FiringGate(threshold=30))

        assert result.fired
        assert net.total_tokens() == before - t1.consumed_count + t1.produced_count
        assert net.place("P1").count(TokenType.NORMAL_A) == 10
        assert net.place("P1").count(TokenType.NORMAL_B) == 2
        assert net.place("P2").count(TokenType.CANCER_A) == 1

    def test_consumes_first_matching_tokens(self, large_scenario_config, engine):
        net = build_net(large_scenario_config)
        expected = {t.token_id for t in net.place("P1").tokens[:30]}

        result = fire(net.transition("T1"), net, engine)

        consumed_p1 = {t.token_id for t in result.consumed if t.type_tag is TokenType.NORMAL_A}
        assert consumed_p1 == expected

    def test_output_ids_are_fresh(self, large_scenario_config, engine):
        net = build_net(large_scenario_config)
        existing = {t.token_id for p in net.places for t in p}

        result = fire(net.transition("T1"), net, engine)

        new_ids = {t.token_id for t in result.produced}
        assert len(new_ids) == len(result.produced)
        assert not new_ids & existing

    def test_output_state_from_destination_signal(self, engine):
        """P3 holds a cancer token before firing, P4 does not."""
        net = build_net(NetConfig(
            places=["P1", "P3", "P4"],
            transitions=[TransitionConfig(
                "T",
                inputs=((1, "P1", "NormalA"),),
                outputs=((1, "P3", "NormalA"), (1, "P4", "NormalB")),
            )],
            initial_marking={
                "P1": [("NormalA", "Inactive")],
                "P3": [("CancerB", "Inactive")],
            },
        ))
        result = fire(net.transition("T"), net, engine, FiringGate.disabled())

        by_type = {t.type_tag: t for t in result.produced}
        assert by_type[TokenType.NORMAL_A].dynamical_state is DynamicalState.ACTIVE
        assert by_type[TokenType.NORMAL_A].age_in_active == 0
        assert by_type[TokenType.NORMAL_B].dynamical_state is DynamicalState.INACTIVE

    def test_consumed_destination_signal_is_pre_fire(self, engine):
        """The only cancer token in P is consumed, yet the output still sees it."""
        net = build_net(NetConfig(
            places=["P"],
            transitions=[TransitionConfig(
                "T",
                inputs=((1, "P", "CancerA"),),
                outputs=((1, "P", "NormalA"),),
            )],
            initial_marking={"P": [("CancerA", "Inactive")]},
        ))
        result = fire(net.transition("T"), net, engine, FiringGate.disabled())

        (token,) = result.produced
        assert token.dynamical_state is DynamicalState.ACTIVE
        assert not net.place("P").has_cancer()

    def test_empty_input_transition_fires(self, engine):
        net = build_net(NetConfig(
            places=["P"],
            transitions=[TransitionConfig("source", outputs=((2, "P", "NormalA"),))],
        ))
        result = fire(net.transition("source"), net, engine, FiringGate.disabled())
        assert result.fired
        assert net.total_tokens() == 2
