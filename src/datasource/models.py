"""Data models for datasource lookups and their results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Release:
    """One tag/version reported by a provider."""
    version: str
    git_ref: str
    release_timestamp: Optional[str] = None  # ISO-8601 as reported; None when unreported

    def to_dict(self) -> Dict[str, Any]:
        """Serialize; an absent timestamp is omitted rather than nulled."""
        out: Dict[str, Any] = {"version": self.version, "gitRef": self.git_ref}
        if self.release_timestamp is not None:
            out["releaseTimestamp"] = self.release_timestamp
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Release":
        return cls(
            version=data["version"],
            git_ref=data.get("gitRef", data["version"]),
            release_timestamp=data.get("releaseTimestamp"),
        )


@dataclass
class ReleaseResult:
    """All releases of one repository at one provider, in provider order."""
    source_url: str
    releases: List[Release] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sourceUrl": self.source_url,
            "releases": [r.to_dict() for r in self.releases],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReleaseResult":
        return cls(
            source_url=data["sourceUrl"],
            releases=[Release.from_dict(r) for r in data.get("releases", [])],
        )


@dataclass
class GetReleasesConfig:
    """Lookup input: which datasource, which repository, which registries."""
    datasource: str
    repository: str
    registry_urls: List[str] = field(default_factory=list)

    @classmethod
    def from_registry_url(cls, datasource: str, repository: str, registry_url: Optional[str] = None):
        """Build a config from a single optional registry URL."""
        return cls(datasource, repository, [registry_url] if registry_url else [])


@dataclass
class DigestConfig(GetReleasesConfig):
    """Digest lookup input; same shape as a releases lookup."""
