class WorkflowError(Exception):
    """Base class for sponsorship workflow errors shown to staff or sponsors."""


class InvalidTransition(WorkflowError):
    pass


class OrphanUnavailable(WorkflowError):
    pass
