"""State machine for the three-legged authorization handshake."""

from enum import Enum

import structlog

from flickrate.oauth.constants import COMPONENT_OAUTH


logger = structlog.get_logger()


class AuthState(str, Enum):
    """State of an authorization handshake.

    - IDLE: Not yet started
    - REQUESTING_TOKEN: Fetching a request token
    - AWAITING_USER_GRANT: Browser opened, waiting for the verifier
    - EXCHANGING_TOKEN: Trading request token and verifier for an access token
    - AUTHORIZED: Access credential obtained
    - FAILED: Aborted with error
    """

    IDLE = "IDLE"
    REQUESTING_TOKEN = "REQUESTING_TOKEN"
    AWAITING_USER_GRANT = "AWAITING_USER_GRANT"
    EXCHANGING_TOKEN = "EXCHANGING_TOKEN"
    AUTHORIZED = "AUTHORIZED"
    FAILED = "FAILED"


_VALID_TRANSITIONS: dict[AuthState, set[AuthState]] = {
    AuthState.IDLE: {AuthState.REQUESTING_TOKEN, AuthState.FAILED},
    AuthState.REQUESTING_TOKEN: {AuthState.AWAITING_USER_GRANT, AuthState.FAILED},
    AuthState.AWAITING_USER_GRANT: {AuthState.EXCHANGING_TOKEN, AuthState.FAILED},
    AuthState.EXCHANGING_TOKEN: {AuthState.AUTHORIZED, AuthState.FAILED},
    AuthState.AUTHORIZED: set(),  # Terminal state
    AuthState.FAILED: set(),  # Terminal state
}


class AuthStateTransitionError(Exception):
    """Raised when an illegal state transition is attempted."""

    def __init__(self, from_state: AuthState, to_state: AuthState) -> None:
        """Initialize the transition error.

        Args:
            from_state: Current state.
            to_state: Attempted target state.
        """
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Illegal authorization state transition: "
            f"{from_state.value} -> {to_state.value}"
        )


class AuthStateMachine:
    """Manages state transitions for one authorization handshake.

    Enforces valid transitions and logs all state changes.
    """

    def __init__(
        self,
        run_id: str = "",
        initial_state: AuthState = AuthState.IDLE,
    ) -> None:
        """Initialize the state machine.

        Args:
            run_id: Identifier for the current run.
            initial_state: Starting state.
        """
        self._state = initial_state
        self._log = logger.bind(component=COMPONENT_OAUTH, run_id=run_id)

    @property
    def state(self) -> AuthState:
        """Get the current state."""
        return self._state

    @property
    def is_terminal(self) -> bool:
        """Check if current state is terminal."""
        return self._state in (AuthState.AUTHORIZED, AuthState.FAILED)

    def can_transition_to(self, target: AuthState) -> bool:
        """Check if a transition to the target state is valid.

        Args:
            target: The target state.

        Returns:
            True if the transition is valid.
        """
        return target in _VALID_TRANSITIONS.get(self._state, set())

    def transition_to(self, target: AuthState) -> None:
        """Transition to a new state.

        Args:
            target: The target state.

        Raises:
            AuthStateTransitionError: If the transition is invalid.
        """
        if not self.can_transition_to(target):
            self._log.error(
                "illegal_state_transition",
                from_state=self._state.value,
                to_state=target.value,
            )
            raise AuthStateTransitionError(self._state, target)

        old_state = self._state
        self._state = target

        self._log.info(
            "state_transition",
            from_state=old_state.value,
            to_state=target.value,
        )

    def to_requesting_token(self) -> None:
        """Transition to REQUESTING_TOKEN state."""
        self.transition_to(AuthState.REQUESTING_TOKEN)

    def to_awaiting_user_grant(self) -> None:
        """Transition to AWAITING_USER_GRANT state."""
        self.transition_to(AuthState.AWAITING_USER_GRANT)

    def to_exchanging_token(self) -> None:
        """Transition to EXCHANGING_TOKEN state."""
        self.transition_to(AuthState.EXCHANGING_TOKEN)

    def to_authorized(self) -> None:
        """Transition to AUTHORIZED state."""
        self.transition_to(AuthState.AUTHORIZED)

    def to_failed(self) -> None:
        """Transition to FAILED state."""
        self.transition_to(AuthState.FAILED)
