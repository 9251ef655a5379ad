"""Error kinds surfaced at the engine boundary."""


class InvalidInputError(ValueError):
    """Structurally malformed input (missing identifier, duplicate quote, bad type).

    Raised once at the boundary where records or selections are built.
    Numerical edge cases inside the engine degrade gracefully instead.
    """
