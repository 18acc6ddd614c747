"""Stash (Bitbucket Server) REST API client with transparent pagination."""

import logging
from typing import Any, Dict, List, Optional, Union

import requests

from stash_client.domain.endpoint import Endpoint
from stash_client.domain.page import Page
from stash_client.infrastructure.errors import ConfigurationError, StashClientError
from stash_client.infrastructure.links import LINK_STYLES, self_link
from stash_client.infrastructure.settings import Settings

logger = logging.getLogger(__name__)

Path = Union[str, Endpoint]


class StashClient:
    """Client for the Stash REST API.

    Every call issues fresh requests; nothing is cached between calls.
    Transport failures (connection errors, non-2xx statuses, malformed JSON)
    propagate as the ``requests`` exceptions they are.
    """

    REST_API = "/rest/api/1.0/"
    BRANCH_UTIL_API = "/rest/branch-utils/1.0/"

    # commits_for walks every page only when asked for at least this many
    COMMIT_PAGE_THRESHOLD = 100

    def __init__(
        self,
        host: Optional[str] = None,
        scheme: Optional[str] = None,
        url: Optional[str] = None,
        uri: Optional[Endpoint] = None,
        credentials: Optional[str] = None,
        link_style: str = "links",
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize Stash client.

        Args:
            host: Server authority, e.g. ``stash.example.com:7990``
            scheme: URL scheme used with ``host``. Defaults to ``http``.
            url: Server base URL; its path is replaced by the REST namespace
            uri: Pre-built REST endpoint, used as-is
            credentials: ``user:password`` embedded in every request URL
            link_style: ``links`` (``links.self[0].href``) or ``link``
                (``link.url``), depending on the server generation
            timeout: Passed to ``requests``; ``None`` keeps its default
            session: Optional ``requests.Session`` to send requests with

        Raises:
            ConfigurationError: If no usable endpoint source is given
        """
        branch_url: Optional[Endpoint] = None

        if host and scheme:
            base = Endpoint.parse(f"{scheme}://{host}")
            api_url = base.join(self.REST_API)
            branch_url = base.join(self.BRANCH_UTIL_API)
        elif host:
            base = Endpoint.parse(f"http://{host}")
            api_url = base.join(self.REST_API)
            branch_url = base.join(self.BRANCH_UTIL_API)
        elif url:
            base = Endpoint.parse(url)
            api_url = base.join(self.REST_API)
            branch_url = base.join(self.BRANCH_UTIL_API)
        elif uri is not None:
            if not isinstance(uri, Endpoint):
                raise ConfigurationError(f"uri must be an Endpoint, got {type(uri).__name__}")
            api_url = uri
            if uri.path == self.REST_API:
                branch_url = Endpoint.parse(uri.site).join(self.BRANCH_UTIL_API)
        else:
            raise ConfigurationError("must provide url, uri or host")

        if link_style not in LINK_STYLES:
            raise ConfigurationError(
                f"Unknown link style {link_style!r}; use one of {sorted(LINK_STYLES)}"
            )

        self._credentials = credentials
        self._url = api_url.with_userinfo(credentials) if credentials else api_url
        self._branch_url = branch_url
        if branch_url is not None and credentials:
            self._branch_url = branch_url.with_userinfo(credentials)

        self.link_style = link_style
        self.timeout = timeout
        self.session = session if session is not None else requests.Session()
        self.headers = {"Accept": "application/json"}

        logger.debug(f"Stash client configured for {self._url.redacted()}")

    @classmethod
    def from_env(cls, **overrides: Any) -> "StashClient":
        """Build a client from ``STASH_*`` environment variables."""
        kwargs = Settings.from_env().client_kwargs()
        kwargs.update(overrides)
        return cls(**kwargs)

    @property
    def url(self) -> Endpoint:
        return self._url

    @property
    def credentials(self) -> Optional[str]:
        return self._credentials

    # Projects

    def projects(self) -> List[Dict[str, Any]]:
        return self.fetch_all("projects")

    def create_project(self, **opts: Any) -> Optional[Dict[str, Any]]:
        return self.post("projects", opts)

    def update_project(self, project: Dict[str, Any], **opts: Any) -> Optional[Dict[str, Any]]:
        return self.put(self._link(project), opts)

    def delete_project(self, project: Dict[str, Any]) -> None:
        return self.delete(self._link(project))

    def project_keyed(self, key: str) -> Optional[Dict[str, Any]]:
        return next((p for p in self.projects() if p.get("key") == key), None)

    def project_named(self, name: str) -> Optional[Dict[str, Any]]:
        return next((p for p in self.projects() if p.get("name") == name), None)

    # Repositories

    def repositories(self) -> List[Dict[str, Any]]:
        """Every repository of every project, in project order."""
        repositories = []
        for project in self.projects():
            repositories.extend(self.repositories_for(project))
        return repositories

    def repositories_for(self, project: Dict[str, Any]) -> List[Dict[str, Any]]:
        return self.fetch_all(self._link(project) + "/repos")

    def repository_named(
        self, name: str, project: Optional[Dict[str, Any]] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Find a repository by name.

        Args:
            name: Repository display name
            project: Restrict the search to this project. If None, searches
                the repositories of every project.

        Returns:
            The first matching repository, or None
        """
        if project is None:
            candidates = self.repositories()
        else:
            candidates = self.repositories_for(project)
        return next((r for r in candidates if r.get("name") == name), None)

    def create_repo(self, project: Union[str, Dict[str, Any]], **opts: Any) -> Optional[Dict[str, Any]]:
        key = project["key"] if isinstance(project, dict) else project
        return self.post(f"projects/{key}/repos", opts)

    def update_repository(self, repository: Dict[str, Any], **opts: Any) -> Optional[Dict[str, Any]]:
        return self.put(self._repo_path(repository), opts)

    # Branches

    def default_branch_for(self, repository: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return self.fetch(self._repo_path(repository) + "/branches/default")

    def set_default_branch_for(self, repository: Dict[str, Any], branch_id: str) -> Optional[Dict[str, Any]]:
        return self.put(self._repo_path(repository) + "/branches/default", {"id": branch_id})

    def branches_matching(
        self, repository: Dict[str, Any], filter_text: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        params = {} if filter_text is None else {"filterText": filter_text}
        return self.fetch_all(self._repo_path(repository) + "/branches", params)

    def create_branch(
        self, repository: Dict[str, Any], branch_name: str, start_point: str
    ) -> Optional[Dict[str, Any]]:
        """
        Create a branch through the branch-utils API.

        Raises:
            ConfigurationError: If the client was built from a custom ``uri``
                that gives no way to reach the branch-utils namespace
        """
        if self._branch_url is None:
            raise ConfigurationError(
                f"branch-utils API is not reachable from {self._url.redacted()}"
            )
        path = self._repo_path(repository) + "/branches"
        endpoint = self._branch_url.join(_strip_leading_slash(path))
        return self.post(endpoint, {"name": branch_name, "startPoint": start_point})

    # Files

    def files_for(self, repository: Dict[str, Any]) -> List[str]:
        return self.fetch_all(self._repo_path(repository) + "/files")

    # Hooks

    def hooks_for(self, repository: Dict[str, Any]) -> List[Dict[str, Any]]:
        return self.fetch_all(self._repo_path(repository) + "/settings/hooks")

    def hook_settings(self, repository: Dict[str, Any], key: str) -> Optional[Dict[str, Any]]:
        return self.fetch(self._repo_path(repository) + f"/settings/hooks/{key}/settings")

    def hook_enable(
        self, repository: Dict[str, Any], key: str, settings: Optional[Dict[str, Any]] = None
    ) -> Optional[Dict[str, Any]]:
        path = self._repo_path(repository) + f"/settings/hooks/{key}/enabled"
        return self.put(path, settings or {})

    def hook_disable(self, repository: Dict[str, Any], key: str) -> None:
        return self.delete(self._repo_path(repository) + f"/settings/hooks/{key}/enabled")

    # Commits and changes

    def commits_for(
        self,
        repository: Dict[str, Any],
        since: Optional[str] = None,
        until: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        List commits of a repository.

        With no filters at all the listing is capped at 100 commits per
        page. A ``limit`` below 100 fetches that single page only.

        Args:
            repository: Repository whose self-link ends in ``/browse``
            since: Exclude commits reachable from this revision
            until: List commits reachable from this revision
            limit: Page size requested from the server

        Returns:
            Commits, newest first as ordered by the server
        """
        params: Dict[str, Any] = {}
        if since:
            params["since"] = since
        if until:
            params["until"] = until
        if limit:
            params["limit"] = int(limit)

        if not params:
            params["limit"] = self.COMMIT_PAGE_THRESHOLD

        endpoint = self._browse_endpoint(repository, "commits").with_params(**params)

        if "limit" in params and params["limit"] < self.COMMIT_PAGE_THRESHOLD:
            return self._single_page(endpoint)
        return self.fetch_all(endpoint)

    def changes_for(
        self,
        repository: Dict[str, Any],
        sha: str,
        parent: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        List the changes introduced by a revision.

        Args:
            repository: Repository (or commit) whose self-link ends in ``/browse``
            sha: Revision whose changes are listed
            parent: Compare against this revision instead of the first parent
            limit: Fetch a single page of at most this many changes

        Returns:
            Changed paths as returned by the server
        """
        params: Dict[str, Any] = {"until": sha}
        if parent:
            params["since"] = parent
        if limit:
            params["limit"] = int(limit)

        endpoint = self._browse_endpoint(repository, "changes").with_params(**params)

        if "limit" in params:
            return self._single_page(endpoint)
        return self.fetch_all(endpoint)

    # Transport

    def fetch_all(self, path: Path, params: Optional[Dict[str, Any]] = None) -> List[Any]:
        """
        GET every page of a paginated collection.

        Args:
            path: Endpoint, or a path relative to the REST namespace
            params: Extra query parameters sent with every page

        Returns:
            The ``values`` of all pages concatenated in server order

        Raises:
            StashClientError: If a page comes back with an empty body
            requests.RequestException: If any page request fails
        """
        endpoint = self._resolve(path).with_params(**(params or {}))
        results: List[Any] = []

        while True:
            page = self._page(endpoint)
            results.extend(page.values)
            logger.debug(
                f"Fetched {len(page.values)} values from {endpoint.redacted()} "
                f"(start={page.start}, size={page.size}, isLastPage={page.is_last_page})"
            )
            if page.is_last_page:
                break
            endpoint = endpoint.with_params(start=page.next_start)

        return results

    def fetch(self, path: Path, params: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        endpoint = self._resolve(path).with_params(**(params or {}))
        response = self._request("GET", endpoint)
        return _parse(response)

    def post(self, path: Path, data: Dict[str, Any]) -> Optional[Any]:
        response = self._request("POST", self._resolve(path), data)
        return _parse(response)

    def put(self, path: Path, data: Dict[str, Any]) -> Optional[Any]:
        response = self._request("PUT", self._resolve(path), data)
        return _parse(response)

    def delete(self, path: Path) -> None:
        """DELETE a resource. Any response body is discarded."""
        self._request("DELETE", self._resolve(path))
        return None

    def _request(self, method: str, endpoint: Endpoint, data: Optional[Dict[str, Any]] = None) -> requests.Response:
        logger.debug(f"{method} {endpoint.redacted()}")

        kwargs: Dict[str, Any] = {}
        if endpoint.params:
            kwargs["params"] = endpoint.params
        if data is not None:
            kwargs["json"] = data

        response = self.session.request(
            method,
            endpoint.url,
            headers=self.headers,
            timeout=self.timeout,
            **kwargs,
        )
        response.raise_for_status()
        return response

    def _page(self, endpoint: Endpoint) -> Page:
        body = self.fetch(endpoint)
        if body is None:
            raise StashClientError(f"Expected a page from {endpoint.redacted()}, got an empty body")
        return Page.from_json(body)

    def _single_page(self, endpoint: Endpoint) -> List[Any]:
        return self._page(endpoint).values

    def _resolve(self, path: Path) -> Endpoint:
        if isinstance(path, Endpoint):
            return path
        return self._url.join(_strip_leading_slash(path))

    def _link(self, entity: Dict[str, Any]) -> str:
        return self_link(entity, self.link_style)

    def _repo_path(self, repository: Dict[str, Any]) -> str:
        return self._link(repository["project"]) + "/repos/" + repository["slug"]

    def _browse_endpoint(self, entity: Dict[str, Any], resource: str) -> Endpoint:
        path = self._link(entity)
        head, sep, tail = path.rpartition("/browse")
        # only a whole "browse" segment is swapped, never part of a key or slug
        if sep and (not tail or tail.startswith("/")):
            path = f"{head}/{resource}{tail}"
        return self._resolve(path)


def _strip_leading_slash(path: str) -> str:
    return path[1:] if path.startswith("/") else path


def _parse(response: requests.Response) -> Optional[Any]:
    """Decode a JSON body; an empty body means no content."""
    if not response.text or not response.text.strip():
        return None
    return response.json()
