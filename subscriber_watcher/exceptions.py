"""Exception hierarchy for the subscriber watcher service."""


class SubscriberWatcherError(Exception):
    """Base class for all service errors."""


class ConfigError(SubscriberWatcherError, ValueError):
    """Configuration file is unreadable, unparsable or incomplete."""


class CredentialNotFoundError(SubscriberWatcherError):
    """No usable credential is persisted."""


class CredentialStoreError(SubscriberWatcherError):
    """Persisting the credential failed."""


class OAuthError(SubscriberWatcherError):
    """Base class for authorization failures."""


class InvalidStateError(OAuthError):
    """Callback state does not match the one issued by /login."""


class ExchangeFailedError(OAuthError):
    """Authorization code could not be exchanged for a token."""


class RefreshFailedError(OAuthError):
    """Refresh token grant failed."""


class NoCredentialError(SubscriberWatcherError):
    """No credential has been acquired yet."""


class StatisticsError(SubscriberWatcherError):
    """Channel statistics could not be fetched."""


class ChannelNotFoundError(StatisticsError):
    """Statistics response contained no matching channel."""
