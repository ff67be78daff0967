"""Restart policy for daemons that exit.

The policy is a pure function of the daemon's spec, how many automatic
restarts it has already used, and how its last process ended. Restarts use
the daemon's fixed delay; the retry budget is bounded by max_restarts.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ._models import RestartDecision, RestartPolicy, RestartReason

if TYPE_CHECKING:
    from ._models import DaemonSpec, ExitOutcome


def decide(
    spec: DaemonSpec,
    restart_count: int,
    outcome: ExitOutcome,
) -> RestartDecision:
    """Decide whether and when to restart a daemon after an exit.

    Args:
        spec: The daemon's configuration.
        restart_count: Automatic restarts already performed.
        outcome: How the last process instance ended.

    Returns:
        The restart decision. delay_ms is the daemon's restart delay when
        restarting and zero otherwise.
    """
    if outcome.was_requested:
        return RestartDecision(False, 0, RestartReason.REQUESTED)

    if spec.restart_policy == RestartPolicy.NEVER:
        return RestartDecision(False, 0, RestartReason.POLICY_NEVER)

    if spec.restart_policy == RestartPolicy.ON_FAILURE and outcome.is_clean:
        return RestartDecision(False, 0, RestartReason.CLEAN_EXIT)

    if restart_count >= spec.max_restarts:
        return RestartDecision(False, 0, RestartReason.MAX_RESTARTS)

    return RestartDecision(True, spec.restart_delay_ms, RestartReason.SCHEDULED)
