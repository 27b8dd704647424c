"""
Optimistic-concurrency update of deployments.

Each attempt reads the latest deployment, applies a mutation and submits a
replace carrying the resourceVersion that was read. A stale version makes the
API server answer 409; the attempt is then restarted from a fresh read after
a short backoff, up to ``RetryPolicy.max_attempts`` attempts.

Per attempt::

    FETCHING -> MUTATING -> SUBMITTING -> SUCCESS
                                       -> CONFLICT -> FETCHING
                                       -> FATAL
"""
import enum
import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from kubernetes import client

from .exceptions import ConflictError, DeploymentManagerError, UpdateFailedError

logger = logging.getLogger(__name__)

Mutation = Callable[[client.V1Deployment], client.V1Deployment]


class UpdateState(str, enum.Enum):
    FETCHING = "fetching"
    MUTATING = "mutating"
    SUBMITTING = "submitting"
    CONFLICT = "conflict"
    SUCCESS = "success"
    FATAL = "fatal"


@dataclass
class RetryPolicy:
    max_attempts: int = 5
    initial_delay: float = 0.01
    factor: float = 2.0
    max_delay: float = 1.0
    jitter: float = 0.1
    deadline: Optional[float] = None

    @classmethod
    def from_settings(cls, settings) -> "RetryPolicy":
        return cls(
            max_attempts=settings.RETRY_MAX_ATTEMPTS,
            initial_delay=settings.RETRY_INITIAL_DELAY_SECS,
            factor=settings.RETRY_BACKOFF_FACTOR,
            max_delay=settings.RETRY_MAX_DELAY_SECS,
            jitter=settings.RETRY_JITTER,
            deadline=settings.RETRY_DEADLINE_SECS,
        )

    def delay(self, retry: int) -> float:
        """Sleep before retry number ``retry`` (1-based)."""
        base = self.initial_delay
        for _ in range(retry - 1):
            # stop growing once capped
            if base >= self.max_delay or base == 0 or self.factor == 1:
                break
            base *= self.factor
        if self.jitter:
            base += base * self.jitter * random.random()
        return min(base, self.max_delay)


@dataclass
class UpdateResult:
    deployment: client.V1Deployment
    attempts: int
    states: List[UpdateState]


class ConflictRetryUpdater:
    def __init__(
        self,
        resource_client,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.resource_client = resource_client
        self.policy = policy or RetryPolicy()
        self.sleep = sleep
        self.clock = clock

    def update(self, namespace: str, name: str, mutation: Mutation) -> UpdateResult:
        started = self.clock()
        states: List[UpdateState] = []
        attempt = 0
        state = UpdateState.FETCHING
        current = desired = None
        conflict: Optional[ConflictError] = None

        while True:
            states.append(state)

            if state is UpdateState.FETCHING:
                attempt += 1
                try:
                    current = self.resource_client.get_deployment(namespace, name)
                except DeploymentManagerError as e:
                    states.append(UpdateState.FATAL)
                    raise UpdateFailedError(
                        f"Failed to get latest version of Deployment: {e}", attempt, e
                    ) from e
                state = UpdateState.MUTATING

            elif state is UpdateState.MUTATING:
                desired = mutation(current)
                state = UpdateState.SUBMITTING

            elif state is UpdateState.SUBMITTING:
                try:
                    updated = self.resource_client.update_deployment(namespace, name, desired)
                except ConflictError as e:
                    conflict = e
                    state = UpdateState.CONFLICT
                except DeploymentManagerError as e:
                    states.append(UpdateState.FATAL)
                    raise UpdateFailedError(f"Update failed: {e}", attempt, e) from e
                else:
                    states.append(UpdateState.SUCCESS)
                    return UpdateResult(updated, attempt, states)

            elif state is UpdateState.CONFLICT:
                logger.warning(
                    f"Conflict updating deployment {namespace}/{name} "
                    f"(attempt {attempt}/{self.policy.max_attempts})"
                )
                if attempt >= self.policy.max_attempts:
                    states.append(UpdateState.FATAL)
                    raise UpdateFailedError(
                        f"Update failed: gave up after {attempt} attempts: {conflict}", attempt, conflict
                    ) from conflict
                delay = self.policy.delay(attempt)
                if self.policy.deadline is not None and self.clock() - started + delay > self.policy.deadline:
                    states.append(UpdateState.FATAL)
                    raise UpdateFailedError(
                        f"Update failed: retry deadline of {self.policy.deadline}s exceeded: {conflict}",
                        attempt,
                        conflict,
                    ) from conflict
                self.sleep(delay)
                state = UpdateState.FETCHING
