"""GitHub push trigger adapter.

Implements PushTrigger by making sure the repository has a "push" webhook
pointing at the current effective hook URL. Existing hooks with the same URL
are left alone, so registering twice is harmless.
"""

import logging
from collections.abc import Callable, Sequence
from typing import Any

import httpx

from hookkeeper.core.models import Credential
from hookkeeper.core.ports import PushTrigger

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
HOOKS_PER_PAGE = 100


class GitHubHookRegistrationError(Exception):
    """GitHub refused to list or create a repository hook."""


class GitHubPushTrigger(PushTrigger):
    """Registers a push webhook on one GitHub repository."""

    def __init__(
        self,
        repository: str,
        hook_url: Callable[[], str],
        credentials: Callable[[], Sequence[Credential]],
        api_base_url: str = DEFAULT_API_URL,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the trigger.

        Args:
            repository: Repository as "owner/name".
            hook_url: Returns the URL GitHub should post to.
            credentials: Returns the stored credentials; the first one whose
                api_url matches api_base_url is used.
            api_base_url: Base URL of the GitHub API.
            client: Optional shared HTTP client.
        """
        owner, _, name = repository.partition("/")
        if not owner or not name:
            raise ValueError(f"repository must be 'owner/name', got {repository!r}")
        self.repo_owner = owner
        self.repo_name = name
        self.hook_url = hook_url
        self.credentials = credentials
        self.api_base_url = api_base_url.rstrip("/")
        self._client = client

    @property
    def repository(self) -> str:
        return f"{self.repo_owner}/{self.repo_name}"

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.api_base_url)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _credential(self) -> Credential:
        for credential in self.credentials():
            if credential.api_url.rstrip("/") == self.api_base_url:
                return credential
        raise GitHubHookRegistrationError(
            f"No credential configured for {self.api_base_url}"
        )

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"token {self._credential().oauth_access_token}",
            "Accept": "application/vnd.github.v3+json",
        }

    async def _list_hooks(
        self,
        client: httpx.AsyncClient,
        hooks_path: str,
        headers: dict[str, str],
    ) -> list[dict[str, Any]]:
        """Fetch every page of the repository's hooks, following Link headers."""
        hooks: list[dict[str, Any]] = []
        url: str | None = hooks_path
        params: dict[str, Any] | None = {"per_page": HOOKS_PER_PAGE}

        while url is not None:
            response = await client.get(url, headers=headers, params=params)
            if response.status_code != 200:
                raise GitHubHookRegistrationError(
                    f"Failed to list hooks for {self.repository}: {response.status_code}"
                )
            hooks.extend(response.json())
            # the next link already carries the query string
            url = response.links.get("next", {}).get("url")
            params = None

        return hooks

    async def register_hooks(self) -> None:
        """Create the push hook unless one already targets the hook URL.

        Raises:
            GitHubHookRegistrationError: If GitHub rejects the request or no
                credential matches the API URL.
            httpx.RequestError: If GitHub is unreachable.
        """
        hook_url = self.hook_url()
        client = await self._get_client()
        headers = self._headers()
        hooks_path = f"/repos/{self.repo_owner}/{self.repo_name}/hooks"

        existing = await self._list_hooks(client, hooks_path, headers)
        if any(hook.get("config", {}).get("url") == hook_url for hook in existing):
            logger.debug(
                f"Hook already registered for {self.repository}",
                extra={"repository": self.repository, "hook_url": hook_url},
            )
            return

        response = await client.post(
            hooks_path,
            headers=headers,
            json={
                "name": "web",
                "active": True,
                "events": ["push"],
                "config": {"url": hook_url, "content_type": "json"},
            },
        )
        if response.status_code != 201:
            raise GitHubHookRegistrationError(
                f"Failed to create hook for {self.repository}: {response.status_code}"
            )

        logger.info(
            f"Registered push hook for {self.repository}",
            extra={"repository": self.repository, "hook_url": hook_url},
        )
