"""
Finite state machine for the onboarding conversation loop.

The loop alternates between waiting for the model and waiting for the user
until the model's ``complete`` call is accepted or the user leaves.

Usage:
    sm = ConversationStateMachine()
    sm.transition(TransitionTrigger.REPLY_RECEIVED)
    assert sm.current_state == ConversationState.AWAITING_USER
"""

import logging
from enum import Enum
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

logger = logging.getLogger(__name__)


class ConversationState(str, Enum):
    """All possible states in a conversation lifecycle."""
    AWAITING_MODEL = "awaiting_model"
    AWAITING_USER = "awaiting_user"
    COMPLETED = "completed"
    EXITED = "exited"


class TransitionTrigger(str, Enum):
    """Events that cause state transitions."""
    REPLY_RECEIVED = "reply_received"
    COMPLETION_ACCEPTED = "completion_accepted"
    COMPLETION_REJECTED = "completion_rejected"
    REJECTIONS_EXHAUSTED = "rejections_exhausted"
    USER_MESSAGE = "user_message"
    USER_EXIT = "user_exit"
    INPUT_CLOSED = "input_closed"


TERMINAL_STATES = frozenset({ConversationState.COMPLETED, ConversationState.EXITED})


@dataclass(frozen=True)
class Transition:
    """A single valid state transition."""
    from_state: ConversationState
    to_state: ConversationState
    trigger: TransitionTrigger


@dataclass
class StateEntry:
    """Recorded history entry for a state visit."""
    state: ConversationState
    entered_at: datetime
    trigger: Optional[TransitionTrigger] = None


class InvalidTransitionError(Exception):
    """Raised when a transition is not valid from the current state."""


class ConversationStateMachine:
    """
    Deterministic state machine controlling the conversation loop.

    Every transition must be explicitly defined; anything else raises
    ``InvalidTransitionError`` listing the triggers allowed from the
    current state. Terminal states have no outgoing transitions.
    """

    TRANSITIONS: list[Transition] = [
        # --- Model turn ---
        Transition(ConversationState.AWAITING_MODEL, ConversationState.AWAITING_USER,
                   TransitionTrigger.REPLY_RECEIVED),
        Transition(ConversationState.AWAITING_MODEL, ConversationState.COMPLETED,
                   TransitionTrigger.COMPLETION_ACCEPTED),
        Transition(ConversationState.AWAITING_MODEL, ConversationState.AWAITING_MODEL,
                   TransitionTrigger.COMPLETION_REJECTED),
        Transition(ConversationState.AWAITING_MODEL, ConversationState.AWAITING_USER,
                   TransitionTrigger.REJECTIONS_EXHAUSTED),

        # --- User turn ---
        Transition(ConversationState.AWAITING_USER, ConversationState.AWAITING_MODEL,
                   TransitionTrigger.USER_MESSAGE),
        Transition(ConversationState.AWAITING_USER, ConversationState.EXITED,
                   TransitionTrigger.USER_EXIT),
        Transition(ConversationState.AWAITING_USER, ConversationState.EXITED,
                   TransitionTrigger.INPUT_CLOSED),
    ]

    def __init__(self) -> None:
        self._current_state = ConversationState.AWAITING_MODEL
        self._history: list[StateEntry] = [
            StateEntry(state=ConversationState.AWAITING_MODEL, entered_at=datetime.now(timezone.utc))
        ]

    @property
    def current_state(self) -> ConversationState:
        return self._current_state

    def transition(self, trigger: TransitionTrigger) -> ConversationState:
        """
        Execute a state transition.

        Args:
            trigger: The event triggering the transition.

        Returns:
            The new conversation state.

        Raises:
            InvalidTransitionError: If no valid transition exists.
        """
        for t in self.TRANSITIONS:
            if t.from_state == self._current_state and t.trigger == trigger:
                old_state = self._current_state
                self._current_state = t.to_state

                self._history.append(StateEntry(
                    state=self._current_state,
                    entered_at=datetime.now(timezone.utc),
                    trigger=trigger,
                ))

                logger.debug(
                    "State transition: %s -> %s (trigger: %s)",
                    old_state.value, self._current_state.value, trigger.value,
                )
                return self._current_state

        valid = [t.value for t in self.get_valid_triggers()]
        raise InvalidTransitionError(
            f"No valid transition from '{self._current_state.value}' "
            f"with trigger '{trigger.value}'. Valid triggers: {valid}"
        )

    def get_valid_triggers(self) -> list[TransitionTrigger]:
        """Return all triggers valid from the current state."""
        return [t.trigger for t in self.TRANSITIONS if t.from_state == self._current_state]

    def get_history(self) -> list[StateEntry]:
        """Return the full state transition history."""
        return list(self._history)

    def get_state_trace(self) -> list[str]:
        """Return ordered list of state names visited."""
        return [entry.state.value for entry in self._history]

    def is_terminal(self) -> bool:
        return self._current_state in TERMINAL_STATES
