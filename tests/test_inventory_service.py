import unittest
from unittest.mock import MagicMock

from stash_client.application.inventory_service import InventoryService
from stash_client.domain.repository import RepositoryRecord
from stash_client.infrastructure.links import link_path, self_link
from stash_client.infrastructure.stash_client import StashClient

from fakes import OTHER_PROJECT, OTHER_REPO, PROJECT, REPO


class TestRepositoryRecord(unittest.TestCase):

    def test_from_json(self):
        record = RepositoryRecord.from_json(REPO)
        self.assertEqual(record, RepositoryRecord(
            project_key="PRJ",
            project_name="Project",
            name="Foo",
            slug="foo",
            state="AVAILABLE",
            public=False,
            clone_http="http://stash.example.com/scm/prj/foo.git",
            clone_ssh="ssh://git@stash.example.com:7999/prj/foo.git",
        ))

    def test_legacy_clone_url(self):
        repo = {"name": "Foo", "slug": "foo", "cloneUrl": "http://h/scm/prj/foo.git", "project": {"key": "PRJ"}}
        record = RepositoryRecord.from_json(repo)
        self.assertEqual(record.clone_http, "http://h/scm/prj/foo.git")
        self.assertIsNone(record.clone_ssh)
        self.assertEqual(record.project_name, "")


class TestLinks(unittest.TestCase):

    def test_absolute_href_reduced_to_path(self):
        self.assertEqual(self_link(REPO), "/projects/PRJ/repos/foo/browse")

    def test_relative_href_kept(self):
        self.assertEqual(link_path("/projects/PRJ"), "/projects/PRJ")

    def test_legacy_style(self):
        self.assertEqual(self_link({"link": {"url": "/projects/PRJ"}}, "link"), "/projects/PRJ")


class TestInventoryService(unittest.TestCase):
    """Tests for collecting repository records"""

    def setUp(self):
        self.client = MagicMock(spec=StashClient)
        self.service = InventoryService(self.client)

    def test_collect_all_projects(self):
        self.client.projects.return_value = [PROJECT, OTHER_PROJECT]
        self.client.repositories_for.side_effect = [[REPO], [OTHER_REPO]]

        records = self.service.collect()

        self.assertEqual([(r.project_key, r.slug) for r in records], [("PRJ", "foo"), ("OPS", "deploy")])
        self.client.project_keyed.assert_not_called()

    def test_collect_one_project(self):
        self.client.project_keyed.return_value = OTHER_PROJECT
        self.client.repositories_for.return_value = [OTHER_REPO]

        records = self.service.collect(project_key="OPS")

        self.assertEqual([r.name for r in records], ["Deploy"])
        self.client.repositories_for.assert_called_once_with(OTHER_PROJECT)
        self.client.projects.assert_not_called()

    def test_collect_unknown_project(self):
        self.client.project_keyed.return_value = None

        with self.assertLogs("stash_client.application.inventory_service", level="WARNING"):
            self.assertEqual(self.service.collect(project_key="NOPE"), [])
        self.client.repositories_for.assert_not_called()


if __name__ == '__main__':
    unittest.main()
