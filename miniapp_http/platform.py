"""Platform capability and network reachability queries.

The dispatcher never inspects the host directly. It asks a capability source
whether the runtime is a constrained platform (mini-game hosts with reduced
timeout/retry budgets and mandatory spacing between requests), and the
public client asks a reachability probe what kind of network is available.
"""

import os
import socket
import sys
from collections.abc import Callable
from enum import StrEnum
from typing import Protocol

from miniapp_http.exceptions import ConfigError


class PlatformType(StrEnum):
    """Runtime platforms the client knows how to adapt to."""

    UNKNOWN = "unknown"
    WINDOWS = "windows"
    MAC = "mac"
    LINUX = "linux"
    ANDROID = "android"
    IOS = "ios"
    WEBGL = "webgl"
    WEIXIN_MINI_GAME = "weixin_mini_game"
    DOUYIN_MINI_GAME = "douyin_mini_game"
    EDITOR = "editor"


PLATFORM_DISPLAY_NAMES: dict[PlatformType, str] = {
    PlatformType.UNKNOWN: "Unknown",
    PlatformType.WINDOWS: "Windows",
    PlatformType.MAC: "Mac",
    PlatformType.LINUX: "Linux",
    PlatformType.ANDROID: "Android",
    PlatformType.IOS: "iOS",
    PlatformType.WEBGL: "WebGL",
    PlatformType.WEIXIN_MINI_GAME: "WeixinMiniGame",
    PlatformType.DOUYIN_MINI_GAME: "DouyinMiniGame",
    PlatformType.EDITOR: "Editor",
}

_SYS_PLATFORMS: dict[str, PlatformType] = {
    "win32": PlatformType.WINDOWS,
    "cygwin": PlatformType.WINDOWS,
    "darwin": PlatformType.MAC,
    "linux": PlatformType.LINUX,
    "android": PlatformType.ANDROID,
    "ios": PlatformType.IOS,
    "emscripten": PlatformType.WEBGL,
    "wasi": PlatformType.WEBGL,
}


class CapabilitySource(Protocol):
    """Read-only view of the host platform used by the dispatcher."""

    def is_constrained_platform(self) -> bool: ...

    def platform_name(self) -> str: ...


class PlatformCapabilities:
    """Capability source backed by a known platform type."""

    def __init__(self, platform: PlatformType = PlatformType.UNKNOWN) -> None:
        self._platform = platform

    @classmethod
    def detect(cls) -> "PlatformCapabilities":
        """Detect the platform from ``MINIAPP_PLATFORM`` or the interpreter.

        Raises:
            ConfigError: If ``MINIAPP_PLATFORM`` names an unknown platform.
        """
        override = os.environ.get("MINIAPP_PLATFORM")
        if override:
            try:
                return cls(PlatformType(override.strip().lower()))
            except ValueError:
                raise ConfigError(f"Unknown platform: {override!r}") from None
        return cls(_SYS_PLATFORMS.get(sys.platform, PlatformType.UNKNOWN))

    @property
    def platform(self) -> PlatformType:
        return self._platform

    @property
    def is_mini_game(self) -> bool:
        return self._platform in (PlatformType.WEIXIN_MINI_GAME, PlatformType.DOUYIN_MINI_GAME)

    @property
    def is_mobile(self) -> bool:
        return self._platform in (PlatformType.ANDROID, PlatformType.IOS)

    @property
    def is_desktop(self) -> bool:
        return self._platform in (PlatformType.WINDOWS, PlatformType.MAC, PlatformType.LINUX)

    @property
    def is_web(self) -> bool:
        return self._platform == PlatformType.WEBGL or self.is_mini_game

    def is_constrained_platform(self) -> bool:
        return self.is_mini_game

    def platform_name(self) -> str:
        return PLATFORM_DISPLAY_NAMES[self._platform]


# =============================================================================
# Reachability
# =============================================================================


class NetworkReachability(StrEnum):
    NOT_REACHABLE = "not_reachable"
    CARRIER_DATA = "carrier_data"
    LOCAL_AREA = "local_area"


NETWORK_TYPE_NAMES: dict[NetworkReachability, str] = {
    NetworkReachability.CARRIER_DATA: "Mobile Data",
    NetworkReachability.LOCAL_AREA: "WiFi",
    NetworkReachability.NOT_REACHABLE: "No Network",
}

ReachabilityProbe = Callable[[], NetworkReachability]


def probe_reachability(
    host: str = "1.1.1.1",
    port: int = 53,
    timeout: float = 0.3,
) -> NetworkReachability:
    """Check whether a TCP connection to a well-known host can be opened.

    A plain socket cannot tell carrier data from a local network, so any
    successful connection reports ``LOCAL_AREA``. Hosts that can distinguish
    the two should pass their own probe to the client.

    This call blocks for up to ``timeout`` seconds. It is kept short because
    the client calls it from the event-loop thread.
    """
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return NetworkReachability.LOCAL_AREA
    except OSError:
        return NetworkReachability.NOT_REACHABLE
