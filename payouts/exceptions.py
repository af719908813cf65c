from decimal import Decimal


class PayoutError(Exception):
    """A payout request or review action was refused."""

    status_code = 400

    def __init__(self, message: str, *, available_balance: Decimal | None = None,
                 minimum_amount: Decimal | None = None, **details):
        self.message = message
        self.available_balance = available_balance
        self.minimum_amount = minimum_amount
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict:
        data = {"message": self.message, **self.details}
        if self.available_balance is not None:
            data["availableBalance"] = self.available_balance
        if self.minimum_amount is not None:
            data["minAmount"] = self.minimum_amount
        return data


class InvalidTransition(PayoutError):
    def __init__(self, current: str, target: str, label: str = "payout request"):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move {label} from '{current}' to '{target}'.", currentStatus=current)
