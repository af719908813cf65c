from common.state_machine import InvalidTransition


class TicketStateError(InvalidTransition):
    """The ticket's current status does not allow the requested action."""

    def __init__(self, current: str, target: str, label: str = "ticket"):
        super().__init__(current, target, label)
        self.message = f"Ticket is {current}"
