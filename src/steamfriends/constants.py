"""Constants for steamfriends."""

__all__ = [
    "CONFIG_PATH",
    "FRIEND_RECORD_NAMESPACE",
    "FRIEND_RECORD_PREFIX",
    "INIT_DELAY_MAX",
    "INIT_DELAY_MIN",
    "REDIS_BACKOFF_MAX",
    "REDIS_BACKOFF_START",
    "REDIS_RETRIES",
    "REFRESH_INTERVAL_MAX",
    "REFRESH_INTERVAL_MIN",
    "STEAM_API_KEY_URL",
    "STEAM_FRIENDS_PATH",
    "STEAM_TIMEOUT",
    "UNSET_API_KEY",
]

CONFIG_PATH = "/etc/steamfriends/steamfriends.yaml"
"""Default configuration path."""

FRIEND_RECORD_NAMESPACE = "SteamFriends"
"""Namespace of friend records in the key/value store."""

FRIEND_RECORD_PREFIX = "friendInfo_"
"""Prefix of friend record keys within `FRIEND_RECORD_NAMESPACE`.

The full key of a record is the namespace, a slash, this prefix, and the
Steam ID of the owner of the record.
"""

INIT_DELAY_MIN = 1
"""Minimum delay (in seconds) between lookups during startup warm-up."""

INIT_DELAY_MAX = 10
"""Maximum delay (in seconds) between lookups during startup warm-up."""

REDIS_BACKOFF_START = 0.2
"""How long (in seconds) to initially wait after a Redis failure.

Exponential backoff will be used for subsequent retries, up to
`REDIS_BACKOFF_MAX` total delay.
"""

REDIS_BACKOFF_MAX = 1.0
"""Maximum delay (in seconds) to wait after a Redis failure."""

REDIS_RETRIES = 10
"""How many times to try to connect to Redis before giving up."""

REFRESH_INTERVAL_MIN = 60
"""Minimum time (in seconds) before a friend list may be refreshed."""

REFRESH_INTERVAL_MAX = 86400
"""Maximum time (in seconds) a friend list is trusted without a refresh."""

STEAM_API_KEY_URL = "https://steamcommunity.com/dev/apikey"
"""Where an operator can obtain a Steam Web API key."""

STEAM_FRIENDS_PATH = "/ISteamUser/GetFriendList/v0001/"
"""Path of the friend list method, relative to the Steam Web API base URL."""

STEAM_TIMEOUT = 10.0
"""Timeout (in seconds) for requests to the Steam Web API."""

UNSET_API_KEY = "-1"
"""Sentinel value of the API key meaning that no key has been configured."""
