"""
Platform classification and ordered strategy lists.

Strategy lists are declared in resources/acquisition.yaml and are fixed for
the lifetime of the process.
"""

import logging
import re
from dataclasses import dataclass, field

from vidscribe.models.schemas import AcquisitionStrategy, PlatformClass

logger = logging.getLogger(__name__)


@dataclass
class RestrictedPlatform:
    """
    A platform that blocks automated clients.

    Attributes:
        name: Platform name ("youtube")
        patterns: Compiled URL patterns
        strategies: Ordered spoofing variants
    """

    name: str
    patterns: list[re.Pattern]
    strategies: list[AcquisitionStrategy] = field(default_factory=list)

    def matches(self, url: str) -> bool:
        return any(pattern.search(url) for pattern in self.patterns)


@dataclass
class StrategyCatalog:
    """
    All restricted platforms plus the generic identity.

    Example:
        catalog = StrategyCatalog.from_config(load_acquisition_config())
        platform_class, strategies = catalog.plan("https://youtu.be/abc")
    """

    platforms: list[RestrictedPlatform]
    generic: AcquisitionStrategy

    @classmethod
    def from_config(cls, config: dict) -> "StrategyCatalog":
        platforms = []
        for name, entry in (config.get("restricted_platforms") or {}).items():
            strategies = [AcquisitionStrategy(**s) for s in entry.get("strategies", [])]
            if not strategies:
                logger.warning(f"Restricted platform {name} has no strategies, ignoring")
                continue
            platforms.append(
                RestrictedPlatform(
                    name=name,
                    patterns=[re.compile(p, re.IGNORECASE) for p in entry.get("patterns", [])],
                    strategies=strategies,
                )
            )

        generic = AcquisitionStrategy(**(config.get("generic") or {"name": "default"}))
        return cls(platforms=platforms, generic=generic)

    def find_platform(self, url: str) -> RestrictedPlatform | None:
        for platform in self.platforms:
            if platform.matches(url):
                return platform
        return None

    def classify(self, url: str) -> PlatformClass:
        """Classify a URL as restricted-platform or generic."""
        if self.find_platform(url) is not None:
            return PlatformClass.RESTRICTED
        return PlatformClass.GENERIC

    def plan(self, url: str) -> tuple[PlatformClass, list[AcquisitionStrategy]]:
        """
        Ordered strategies to attempt for a URL.

        Returns:
            Tuple of (platform class, strategies). Generic URLs get exactly
            one strategy.
        """
        platform = self.find_platform(url)
        if platform is None:
            return PlatformClass.GENERIC, [self.generic]
        return PlatformClass.RESTRICTED, list(platform.strategies)
