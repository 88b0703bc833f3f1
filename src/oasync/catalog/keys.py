"""Resource key derivation.

A deployment key such as ``orders-v1-aws`` carries the whole hierarchy:
stripping the platform suffix yields the version key (``orders-v1``) and
stripping the trailing ``-v<digits>`` from that yields the API key
(``orders``).
"""

import re
from dataclasses import dataclass

PLATFORM_SUFFIXES = {
    "aws": "-aws",
    "azure": "-azure",
}

VERSION_SUFFIX = re.compile(r"-v\d+$")


def split_platform_suffix(key: str) -> tuple[str, str | None]:
    """Return (key without platform suffix, platform tag or None)."""
    for platform, suffix in PLATFORM_SUFFIXES.items():
        if key.endswith(suffix) and len(key) > len(suffix):
            return key[: -len(suffix)], platform
    return key, None


def strip_version_suffix(key: str) -> str:
    return VERSION_SUFFIX.sub("", key)


@dataclass(frozen=True)
class ResourceKey:
    """The three hierarchy levels of one deployment, computed once."""

    api_key: str
    version_key: str
    deployment_key: str
    platform: str | None

    @classmethod
    def parse(cls, deployment_key: str) -> "ResourceKey | None":
        """Strict parse: None unless a recognized platform suffix ends the key."""
        version_key, platform = split_platform_suffix(deployment_key)
        if platform is None:
            return None
        return cls(strip_version_suffix(version_key), version_key, deployment_key, platform)

    @classmethod
    def derive(cls, deployment_key: str) -> "ResourceKey":
        """Lenient parse used when re-keying remote deployments."""
        version_key, platform = split_platform_suffix(deployment_key)
        return cls(strip_version_suffix(version_key), version_key, deployment_key, platform)
