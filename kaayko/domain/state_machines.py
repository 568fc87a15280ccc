"""State machines for domain objects.

Defines the lifecycle of the product view state. Errors are not a
state of their own: data loaded earlier stays displayable, so a
failure lands in READY with an error message attached.
"""

from enum import Enum

from kaayko.domain.exceptions import InvalidStateTransitionError


class ViewPhase(str, Enum):
    """Product view lifecycle phases.

    State diagram:
        IDLE
          │
          │ start
          ▼
        LOADING
          │
          │ first data (or first failure)
          ▼
        READY ◄──┐
          │      │ update / filter change / failure
          └──────┘
    """

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"

    def can_transition_to(self, target: "ViewPhase") -> bool:
        """Check if transition to target phase is valid.

        Args:
            target: Target phase to transition to.

        Returns:
            True if transition is valid.
        """
        return target in _VIEW_TRANSITIONS.get(self, set())

    def allowed_transitions(self) -> list["ViewPhase"]:
        """Get list of valid target phases.

        Returns:
            List of phases that can be transitioned to.
        """
        return list(_VIEW_TRANSITIONS.get(self, set()))

    def transition_to(self, target: "ViewPhase") -> "ViewPhase":
        """Validate a transition and return the target phase.

        Args:
            target: Target phase.

        Returns:
            The target phase.

        Raises:
            InvalidStateTransitionError: If the transition is not allowed.
        """
        if not self.can_transition_to(target):
            raise InvalidStateTransitionError(
                entity_type="ViewState",
                current_state=self.value,
                target_state=target.value,
                allowed_transitions=[p.value for p in self.allowed_transitions()],
            )
        return target


_VIEW_TRANSITIONS: dict[ViewPhase, set[ViewPhase]] = {
    ViewPhase.IDLE: {ViewPhase.LOADING},
    ViewPhase.LOADING: {ViewPhase.READY},
    ViewPhase.READY: {ViewPhase.READY},
}
