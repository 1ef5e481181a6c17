class ArgumentOutsideDomainError(ValueError):
    """Exception raised for evaluating a curve or patch outside its domain """
    def __init__(self, uvw,
                 message = "Evaluation outside domain"):
        self.uvw = uvw
        self.message = message
        super().__init__(self.message)

class InvalidSettingError(ValueError):
    """Exception raised when a curve or patch is configured inconsistently (stale, incomplete, or invalid state)"""
    def __init__(self, message = "Invalid setting"):
        self.message = message
        super().__init__(self.message)

class NotSupportedError(NotImplementedError):
    """Exception raised for operations that the curve or patch variant does not support"""
    def __init__(self, message = "Operation not supported"):
        self.message = message
        super().__init__(self.message)
