class StreamError(Exception):
    message = "Internal Server Error"

    def __init__(self, message=None):
        if message:
            self.message = message
        super().__init__(self.message)


class AssetNotFound(StreamError):
    message = "404: Not Found"


class CatalogUnavailable(StreamError):
    message = "Internal Server Error"


class ConfigError(StreamError):
    message = "Invalid service configuration"
