class HumminbirdError(Exception):
    """Base class for exceptions."""
    def __init__(self, value):
        self.value = value

    def __str__(self):
        return repr(self.value)


class FormatError(HumminbirdError):
    """Exception raised for a corrupt or unsupported Humminbird stream."""
    pass


class CapacityError(FormatError):
    "Exception raised when a record exceeds the fixed capacity of its format."
    pass
