class HarnessError(Exception):
    pass


class ConfigError(HarnessError):
    pass


class TransportError(HarnessError):
    """The node or an upstream http service could not be reached."""


class SetupError(HarnessError):
    """Isolation or baseline could not be established, nothing was executed."""


class CleanupError(HarnessError):
    pass


class StepOrderError(HarnessError):
    def __init__(self, step, missing):
        self.step = step
        self.missing = tuple(missing)
        super().__init__(f"step {step} requires {', '.join(self.missing)} which no earlier step provides")


class MutationRejected(HarnessError):
    def __init__(self, operation, reason):
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation} rejected: {reason}")


class StateAssertionError(AssertionError):
    kind = "state"

    def __init__(self, key, expected, actual, message=None):
        self.key = key
        self.expected = expected
        self.actual = actual
        text = f"{self.kind} {key}: expected={expected}, actual={actual}"
        if message:
            text = f"{message} ({text})"
        super().__init__(text)


class PreconditionViolation(StateAssertionError):
    kind = "precondition"


class PostconditionMismatch(StateAssertionError):
    kind = "postcondition"


class CallReverted(HarnessError):
    def __init__(self, operation, reason):
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation} reverted: {reason}")
