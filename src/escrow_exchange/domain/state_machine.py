"""Listing State Machine Guard.

Uses python-statemachine to enforce the single legal listing transition at
the domain level. Whatever the caller does, reactivating a sold listing
raises TransitionNotAllowed.

Transition table:
    ACTIVE   -> INACTIVE   (purchased)

INACTIVE is final: no relist, no edit, no reactivation.
"""

from __future__ import annotations

from statemachine import State, StateMachine


class ListingStateMachine(StateMachine):
    """State machine that guards the listing lifecycle.

    Usage:
        sm = ListingStateMachine(current_status="ACTIVE")
        sm.purchased()   # transitions to INACTIVE
        sm.status        # "INACTIVE"
    """

    ACTIVE = State("ACTIVE", initial=True)
    INACTIVE = State("INACTIVE", final=True)

    purchased = ACTIVE.to(INACTIVE)

    def __init__(self, current_status: str = "ACTIVE") -> None:
        valid_values = {s.value for s in self.states}
        if current_status not in valid_values:
            valid = ", ".join(sorted(valid_values))
            raise ValueError(
                f"Unknown status '{current_status}'. Valid states: {valid}"
            )
        super().__init__(start_value=current_status)

    @property
    def status(self) -> str:
        """Return the current state value as a string (matches ListingStatus)."""
        return str(self.current_state.value)

    def get_allowed_events(self) -> list[str]:
        """Return a list of event names that can fire from the current state."""
        return [event.id for event in self.allowed_events]


def validate_transition(current_status: str, event_name: str) -> str:
    """Fire ``event_name`` on a throwaway machine and return the new status.

    Raises:
        TransitionNotAllowed: If the transition is illegal.
        ValueError: If the status or event name is invalid.
    """
    sm = ListingStateMachine(current_status=current_status)

    event_method = getattr(sm, event_name, None)
    if event_method is None or not callable(event_method):
        raise ValueError(
            f"Unknown event '{event_name}'. "
            f"Allowed events from {current_status}: {sm.get_allowed_events()}"
        )

    event_method()
    return sm.status
