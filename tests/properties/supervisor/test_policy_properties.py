"""Property-based tests for the restart policy."""

from hypothesis import given, strategies as st

from fwgate.supervisor import (
    DaemonSpec,
    ExitOutcome,
    RestartPolicy,
    RestartReason,
    decide,
)

# =============================================================================
# Strategies
# =============================================================================

specs = st.builds(
    DaemonSpec,
    name=st.just("daemon"),
    command=st.just(("daemon",)),
    restart_policy=st.sampled_from(list(RestartPolicy)),
    max_restarts=st.integers(min_value=0, max_value=20),
    restart_delay_ms=st.integers(min_value=0, max_value=60_000),
)

exit_outcomes = st.one_of(
    st.builds(
        ExitOutcome.from_returncode,
        st.integers(min_value=-64, max_value=255),
        was_requested=st.booleans(),
    ),
    st.builds(ExitOutcome.spawn_failure, st.text(min_size=1, max_size=20)),
)

restart_counts = st.integers(min_value=0, max_value=30)


# =============================================================================
# Decision Properties
# =============================================================================


@given(spec=specs, restart_count=restart_counts, outcome=exit_outcomes)
def test_restart_stays_within_budget(
    spec: DaemonSpec, restart_count: int, outcome: ExitOutcome
) -> None:
    """Property: a restart is only scheduled while the budget has room."""
    decision = decide(spec, restart_count, outcome)

    if decision.should_restart:
        assert restart_count < spec.max_restarts
        assert decision.reason is RestartReason.SCHEDULED


@given(spec=specs, restart_count=restart_counts, outcome=exit_outcomes)
def test_delay_is_fixed_per_spec(
    spec: DaemonSpec, restart_count: int, outcome: ExitOutcome
) -> None:
    """Property: restart delay is the daemon's fixed delay, zero when not restarting."""
    decision = decide(spec, restart_count, outcome)

    expected = spec.restart_delay_ms if decision.should_restart else 0
    assert decision.delay_ms == expected


@given(spec=specs, restart_count=restart_counts, returncode=st.integers(-64, 255))
def test_requested_stops_never_restart(
    spec: DaemonSpec, restart_count: int, returncode: int
) -> None:
    """Property: exits caused by a stop request are never restarted."""
    outcome = ExitOutcome.from_returncode(returncode, was_requested=True)

    decision = decide(spec, restart_count, outcome)

    assert not decision.should_restart
    assert decision.reason is RestartReason.REQUESTED


@given(spec=specs, restart_count=restart_counts, outcome=exit_outcomes)
def test_never_policy_never_restarts(
    spec: DaemonSpec, restart_count: int, outcome: ExitOutcome
) -> None:
    """Property: the never policy does not restart anything."""
    if spec.restart_policy is not RestartPolicy.NEVER:
        return

    assert not decide(spec, restart_count, outcome).should_restart


@given(spec=specs, restart_count=restart_counts)
def test_on_failure_ignores_clean_exits(spec: DaemonSpec, restart_count: int) -> None:
    """Property: on-failure does not restart after exit code 0."""
    if spec.restart_policy is not RestartPolicy.ON_FAILURE:
        return

    decision = decide(spec, restart_count, ExitOutcome.from_returncode(0, was_requested=False))

    assert not decision.should_restart
    assert decision.reason is RestartReason.CLEAN_EXIT


@given(spec=specs, restart_count=restart_counts, outcome=exit_outcomes)
def test_always_restarts_unrequested_exits_under_budget(
    spec: DaemonSpec, restart_count: int, outcome: ExitOutcome
) -> None:
    """Property: always restarts every unrequested exit while under budget."""
    if spec.restart_policy is not RestartPolicy.ALWAYS or outcome.was_requested:
        return

    decision = decide(spec, restart_count, outcome)

    assert decision.should_restart == (restart_count < spec.max_restarts)
