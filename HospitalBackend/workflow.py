import logging

from HospitalBackend.exceptions import InvalidInput

logger = logging.getLogger(__name__)


class StatusMachine:
    """
    Explicit transition table for a status field.

    transitions maps every known state to the set of states it may move to.
    States with an empty set are terminal. Moving to the current state is
    treated as a no-op and always allowed.
    """

    def __init__(self, name, transitions):
        self.name = name
        self.transitions = {state: frozenset(targets) for state, targets in transitions.items()}

    @property
    def states(self):
        return tuple(self.transitions)

    def is_terminal(self, state):
        return not self.transitions.get(state)

    def can_transition(self, current, target):
        if target not in self.transitions:
            return False
        return current == target or target in self.transitions.get(current, ())

    def ensure(self, current, target):
        if target not in self.transitions:
            raise InvalidInput(f"'{target}' is not a valid {self.name} status")
        if not self.can_transition(current, target):
            logger.warning(f"Rejected {self.name} transition {current} -> {target}")
            raise InvalidInput(f"Cannot change {self.name} status from {current} to {target}")
        return target
