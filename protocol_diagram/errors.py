class DatasetError(ValueError):
    """Raised when a diagram dataset is missing fields or has values of the wrong type."""

    def __init__(self, path: str, message: str):
        self.path: str = path
        super().__init__(f"{path}: {message}" if path else message)
