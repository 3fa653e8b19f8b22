"""State carried through every decode and encode call.

Codec state is a value: each iterator owns its own copy, and copying an
iterator copies its state. Codecs mutate the state object they are handed
and nothing else.
"""

import copy
from dataclasses import dataclass
from typing import Any, Optional

from codec_text_view.shared.errors import CodecContractError


@dataclass(frozen=True)
class EmptyState:
    """State of a stateless codec."""


class StateTransition:
    """Base class for tokens that move an encoder between states.

    Writing a state-transition token through a TextWriter emits only the code
    units needed for the transition (shift sequences, byte order marks) and
    never a character.
    """

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class TrivialStateTransition(StateTransition):
    """Transition token for codecs with nothing to transition; encodes to nothing."""

    def __eq__(self, other: object) -> bool:
        return isinstance(other, TrivialStateTransition)

    def __hash__(self) -> int:
        return hash(TrivialStateTransition)


def copy_state(state: Any) -> Any:
    """Return an independent copy of a codec state value."""
    return copy.deepcopy(state)


def make_state(codec: Any, state: Optional[Any] = None) -> Any:
    """Produce the initial state for an iterator over ``codec``.

    Args:
        codec: Codec whose ``state_type`` describes its state
        state: Explicit state to start from; it is copied, never shared

    Returns:
        A state value owned by the caller

    Raises:
        CodecContractError: If no state was given and the codec's state is
            not default-constructible
    """
    if state is not None:
        return copy_state(state)

    state_type = getattr(codec, "state_type", None)
    if state_type is None:
        raise CodecContractError(
            f"{type(codec).__name__} has no default state; pass one explicitly"
        )
    try:
        return state_type()
    except TypeError as e:
        raise CodecContractError(
            f"{type(codec).__name__}.state_type cannot be default-constructed: {e}"
        ) from e
