"""Async client for GitHub release lookups.

Fetches ``/repos/{owner}/{repo}/releases/latest`` to find the newest
published version of simbot and its components.  Every failure is reported
in a structured :class:`ReleaseLookup` instead of being raised, and callers
fall back to the versions pinned in :mod:`simbot_codegen.catalog.registry`.

Typical usage::

    client = ReleaseClient()
    lookup = await client.fetch_latest_release("simple-robot", "simpler-robot")
    version = resolve_version(lookup, pinned="4.6.0")
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

import httpx
from pydantic import BaseModel, Field

from simbot_codegen.catalog import registry

GITHUB_API_VERSION = "2022-11-28"


class ReleaseInfo(BaseModel):
    """The latest published release of a repository."""

    tag: str = Field(..., description="Git tag of the release, e.g. 'v4.6.0'")
    published_at: str | None = Field(default=None, description="ISO-8601 publish time")


class ReleaseLookup(BaseModel):
    """Structured result of a release lookup."""

    owner: str
    repo: str
    release: ReleaseInfo | None = None
    success: bool = Field(default=True, description="Whether the request succeeded")
    error: str | None = Field(default=None, description="Error message on failure")


class ReleaseClient:
    """Async client for the GitHub REST API.

    A fresh ``httpx.AsyncClient`` is opened per call, so one instance can be
    shared by concurrent lookups.
    """

    def __init__(self, base_url: str = "https://api.github.com", timeout: float = 5.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            headers={
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
            },
        )

    async def fetch_latest_release(self, owner: str, repo: str) -> ReleaseLookup:
        """Fetch the latest release of ``owner/repo``.

        Args:
            owner: Repository owner, e.g. ``"simple-robot"``.
            repo: Repository name.

        Returns:
            A ``ReleaseLookup`` with the release or an error.
        """
        try:
            async with self._client() as client:
                response = await client.get(f"/repos/{owner}/{repo}/releases/latest")
                response.raise_for_status()
                data = response.json()
                tag = data.get("tag_name")
                if not tag:
                    return ReleaseLookup(
                        owner=owner,
                        repo=repo,
                        success=False,
                        error=f"Release of {owner}/{repo} has no tag_name.",
                    )
                return ReleaseLookup(
                    owner=owner,
                    repo=repo,
                    release=ReleaseInfo(tag=tag, published_at=data.get("published_at")),
                )
        except httpx.ConnectError:
            return ReleaseLookup(
                owner=owner,
                repo=repo,
                success=False,
                error=f"Cannot connect to {self.base_url}.",
            )
        except httpx.TimeoutException:
            return ReleaseLookup(
                owner=owner,
                repo=repo,
                success=False,
                error=f"Release lookup for {owner}/{repo} timed out after {self.timeout}s.",
            )
        except httpx.HTTPStatusError as exc:
            return ReleaseLookup(
                owner=owner,
                repo=repo,
                success=False,
                error=f"GitHub returned HTTP {exc.response.status_code} for {owner}/{repo}.",
            )
        except Exception as exc:  # noqa: BLE001
            return ReleaseLookup(
                owner=owner,
                repo=repo,
                success=False,
                error=f"Unexpected error during release lookup for {owner}/{repo}: {exc}",
            )


# ---------------------------------------------------------------------------
# Version resolution
# ---------------------------------------------------------------------------


def resolve_version(lookup: ReleaseLookup, pinned: str) -> str:
    """Return the looked-up version without its ``v`` prefix, or *pinned*."""
    if not lookup.success or lookup.release is None:
        return pinned
    version = lookup.release.tag.strip()
    if version[:1] in ("v", "V"):
        version = version[1:]
    return version or pinned


async def resolve_simbot_version(client: ReleaseClient) -> tuple[str, str | None]:
    """Resolve the simbot version.

    Returns:
        ``(version, error)`` where *error* is the lookup failure, if any.
    """
    lookup = await client.fetch_latest_release(registry.SIMBOT_OWNER, registry.SIMBOT_REPO)
    return resolve_version(lookup, registry.SIMBOT_VERSION.value), lookup.error


async def resolve_selection_versions(
    client: ReleaseClient, component_ids: Sequence[str]
) -> tuple[dict[str, str], list[str]]:
    """Look up every known component concurrently.

    Unknown ids are skipped; configuration validation reports them.

    Returns:
        ``(versions, errors)``: a ``{component_id: version}`` mapping and
        the errors of lookups that fell back to the pinned version.
    """
    known = [cid for cid in dict.fromkeys(component_ids) if cid in registry.COMPONENTS]
    lookups = await asyncio.gather(
        *(
            client.fetch_latest_release(
                registry.COMPONENTS[cid].owner, registry.COMPONENTS[cid].repo
            )
            for cid in known
        )
    )

    versions: dict[str, str] = {}
    errors: list[str] = []
    for cid, lookup in zip(known, lookups):
        if lookup.error:
            errors.append(lookup.error)
        versions[cid] = resolve_version(lookup, registry.COMPONENTS[cid].pinned_version)
    return versions, errors
