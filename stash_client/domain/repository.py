"""Flattened repository rows for inventories and exports."""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class RepositoryRecord:
    """Immutable summary of one repository and its owning project."""

    project_key: str
    project_name: str
    name: str
    slug: str
    state: Optional[str]
    public: bool
    clone_http: Optional[str]
    clone_ssh: Optional[str]

    @classmethod
    def from_json(cls, repo: Dict[str, Any]) -> "RepositoryRecord":
        project = repo.get("project", {})

        clone_http, clone_ssh = None, None
        for link in repo.get("links", {}).get("clone", []):
            if link.get("name") == "http":
                clone_http = link.get("href")
            elif link.get("name") == "ssh":
                clone_ssh = link.get("href")

        # Older servers only expose a single HTTP clone URL
        if clone_http is None:
            clone_http = repo.get("cloneUrl")

        return cls(
            project_key=project.get("key", ""),
            project_name=project.get("name", ""),
            name=repo["name"],
            slug=repo["slug"],
            state=repo.get("state"),
            public=bool(repo.get("public", False)),
            clone_http=clone_http,
            clone_ssh=clone_ssh,
        )
