"""Tests for the ListingStateMachine domain guard.

These tests verify that:
    1. ACTIVE -> INACTIVE is the only transition.
    2. INACTIVE is final: nothing can fire from it.
    3. The convenience function validate_transition works.
"""

from __future__ import annotations

import pytest
from statemachine.exceptions import TransitionNotAllowed

from escrow_exchange.domain.state_machine import (
    ListingStateMachine,
    validate_transition,
)


class TestHappyPath:
    def test_new_machine_starts_active(self) -> None:
        sm = ListingStateMachine()
        assert sm.status == "ACTIVE"

    def test_purchase_deactivates(self) -> None:
        sm = ListingStateMachine("ACTIVE")
        sm.purchased()
        assert sm.status == "INACTIVE"


class TestIllegalTransitions:
    def test_inactive_cannot_be_purchased_again(self) -> None:
        sm = ListingStateMachine("INACTIVE")
        with pytest.raises(TransitionNotAllowed):
            sm.purchased()

    def test_inactive_is_final(self) -> None:
        sm = ListingStateMachine("INACTIVE")
        assert sm.get_allowed_events() == []


class TestAllowedEvents:
    def test_active_allowed(self) -> None:
        sm = ListingStateMachine("ACTIVE")
        assert sm.get_allowed_events() == ["purchased"]


class TestValidateTransitionFunction:
    def test_valid_transition(self) -> None:
        assert validate_transition("ACTIVE", "purchased") == "INACTIVE"

    def test_illegal_transition(self) -> None:
        with pytest.raises(TransitionNotAllowed):
            validate_transition("INACTIVE", "purchased")

    def test_invalid_event_name(self) -> None:
        with pytest.raises(ValueError, match="Unknown event"):
            validate_transition("ACTIVE", "relisted")

    def test_invalid_status(self) -> None:
        with pytest.raises(ValueError, match="Unknown status"):
            ListingStateMachine("SOLD")
