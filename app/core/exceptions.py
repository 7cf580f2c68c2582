class DentalCRMError(Exception):
    """Base class for all lead-automation domain exceptions.

    Every custom exception in this module inherits from here so that a
    single ``except DentalCRMError`` clause can catch any domain error.
    """

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(detail)


class LeadNotFoundError(DentalCRMError):
    """Raised when a requested lead does not exist in the organization."""

    def __init__(self, detail: str = "Lead not found"):
        super().__init__(detail)


class InterestTriggerNotFoundError(DentalCRMError):
    """Raised when a requested interest trigger does not exist."""

    def __init__(self, detail: str = "Interest trigger not found"):
        super().__init__(detail)


class TransitionRuleNotFoundError(DentalCRMError):
    """Raised when a requested temperature transition rule does not exist."""

    def __init__(self, detail: str = "Temperature transition rule not found"):
        super().__init__(detail)


class InvalidReorderError(DentalCRMError):
    """Raised when a reorder request does not match the stored collection."""

    def __init__(self, detail: str = "Invalid reorder request"):
        super().__init__(detail)


class InvalidSubstatusError(DentalCRMError):
    """Raised when a hot substatus is set on a lead that is not ``quente``.

    The ``ck_leads_hot_substatus`` CHECK constraint rejects the same
    state at the storage level.
    """

    def __init__(self, detail: str = "Substatus is only allowed for hot leads"):
        super().__init__(detail)


class TransitionRunCooldownError(DentalCRMError):
    """Raised when a manual transition run is requested too soon."""

    def __init__(self, detail: str = "Transition run already requested recently"):
        super().__init__(detail)


class InvalidDefinitionError(DentalCRMError):
    """Raised when an update would leave a trigger or rule unusable.

    Request schemas only see the fields sent in a PATCH, so the merged
    row is checked again in the service layer.
    """

    def __init__(self, detail: str = "Invalid trigger or rule definition"):
        super().__init__(detail)
