"""Application service for building a repository inventory."""

import logging
from typing import List, Optional

from stash_client.domain.repository import RepositoryRecord
from stash_client.infrastructure.stash_client import StashClient

logger = logging.getLogger(__name__)


class InventoryService:
    """Service for listing repositories of a Stash server as flat records."""

    def __init__(self, client: StashClient):
        """
        Initialize inventory service.

        Args:
            client: Stash API client
        """
        self.client = client

    def collect(self, project_key: Optional[str] = None) -> List[RepositoryRecord]:
        """
        Collect repository records.

        Args:
            project_key: Only list this project's repositories. If None,
                lists every project.

        Returns:
            Records in project order, then server order within a project
        """
        if project_key is not None:
            project = self.client.project_keyed(project_key)
            if project is None:
                logger.warning(f"Project {project_key} not found")
                return []
            projects = [project]
        else:
            projects = self.client.projects()
            logger.info(f"Found {len(projects)} projects")

        records: List[RepositoryRecord] = []
        for project in projects:
            repositories = self.client.repositories_for(project)
            records.extend(RepositoryRecord.from_json(repo) for repo in repositories)
            logger.info(f"Project {project.get('key')}: {len(repositories)} repositories")

        logger.info(f"Inventory completed. Total repositories: {len(records)}")
        return records
