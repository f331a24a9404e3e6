"""Error taxonomy for the Keepsake access core."""


class KeepsakeError(Exception):
    """Base error for the access core."""

    pass


class ConfigurationError(KeepsakeError):
    """Required configuration (signing secret, store credentials) is missing or unusable.

    Fatal: raised at startup so the service never accepts exchange requests
    with an insecure fallback.
    """

    pass


class InvalidToken(KeepsakeError):
    """Presented access token is unknown, expired, or its project is inactive.

    The three causes are indistinguishable to callers.
    """

    pass


class PersistenceError(KeepsakeError):
    """The project store failed during creation or rotation."""

    pass


class CredentialInvalid(KeepsakeError):
    """Session credential has a bad signature, bad shape, or has expired."""

    pass
