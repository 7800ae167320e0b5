"""Unit tests for reference_sync.two_phase_publisher module."""

import pytest

from src.doc_tree.config_loader import ConfigLoader
from src.doc_tree.errors import FilesystemError, FrontmatterError
from src.doc_tree.frontmatter_handler import FrontmatterHandler
from src.doc_tree.models import PublishedPage
from src.doc_tree.workspace_mirror import MIRROR_DIR_NAME
from src.publisher.errors import PublishError
from src.publisher.executor import PublishExecutor
from src.reference_sync.two_phase_publisher import PublishPhase, TwoPhasePublisher
from tests.fixtures.sample_docs import FakePublisher, page_url, success_line, write_config, write_doc


def _publisher(root, publish, **config_overrides):
    config_path = write_config(root, **config_overrides)
    config = ConfigLoader.load(str(config_path))
    return TwoPhasePublisher(str(root), config, publish=publish)


def _frontmatter(path):
    frontmatter, _ = FrontmatterHandler.parse(path.read_text(encoding="utf-8"))
    return frontmatter


class TestInit:
    """Test cases for TwoPhasePublisher construction."""

    def test_mirror_inside_folder_to_publish(self, tmp_path):
        (tmp_path / "docs").mkdir()

        publisher = _publisher(tmp_path, FakePublisher(), folderToPublish="docs")

        assert publisher.publish_root == str(tmp_path / "docs")
        assert publisher.mirror_dir == str(tmp_path / "docs" / MIRROR_DIR_NAME)
        assert publisher.phase == PublishPhase.IDLE

    def test_default_publish_operation_is_executor(self, tmp_path):
        config = ConfigLoader.load(str(write_config(tmp_path)))

        publisher = TwoPhasePublisher(str(tmp_path), config)

        assert isinstance(publisher.publish, PublishExecutor)
        assert publisher.publish.config_path == str(tmp_path / ".markdown-confluence.json")


class TestPrepareMirror:
    """Test cases for prepare_mirror."""

    def test_mirror_gets_defaults_and_resolved_links(self, tmp_path):
        write_doc(tmp_path, "a.md", "[B](./b.md)\n")
        write_doc(tmp_path, "b.md", "---\nconnie-page-id: '200'\n---\n# B\n")
        publisher = _publisher(tmp_path, FakePublisher())

        resolved = publisher.prepare_mirror()

        mirrored = (tmp_path / MIRROR_DIR_NAME / "a.md").read_text(encoding="utf-8")
        assert resolved == 1
        assert f"[B]({page_url('200')})" in mirrored
        assert "connie-title: a" in mirrored
        assert (tmp_path / "a.md").read_text(encoding="utf-8") == "[B](./b.md)\n"

    def test_stale_mirror_replaced(self, tmp_path):
        write_doc(tmp_path, "a.md", "A")
        write_doc(tmp_path, f"{MIRROR_DIR_NAME}/stale.md", "old")
        publisher = _publisher(tmp_path, FakePublisher())

        publisher.prepare_mirror()

        assert not (tmp_path / MIRROR_DIR_NAME / "stale.md").exists()
        assert (tmp_path / MIRROR_DIR_NAME / "a.md").exists()


class TestMergeIdentifiers:
    """Test cases for merge_identifiers."""

    def test_new_ids_written_to_sources(self, tmp_path):
        write_doc(tmp_path, "sub/b.md", "---\nauthor: me\n---\n# B\n")
        publisher = _publisher(tmp_path, FakePublisher())

        new_ids = publisher.merge_identifiers([PublishedPage("sub/b.md", "DOCS", "200")])

        assert new_ids == {"sub/b.md": "200"}
        assert _frontmatter(tmp_path / "sub" / "b.md") == {
            "author": "me",
            "connie-page-id": "200",
            "connie-publish": True,
            "connie-space-key": "DOCS",
            "connie-dont-change-parent-page": False,
            "connie-title": "b",
        }

    def test_known_ids_not_reported_or_rewritten(self, tmp_path):
        content = (
            "---\nconnie-page-id: '100'\nconnie-publish: true\nconnie-space-key: DOCS\n"
            "connie-dont-change-parent-page: false\nconnie-title: A\n---\n# A\n"
        )
        path = write_doc(tmp_path, "a.md", content)
        publisher = _publisher(tmp_path, FakePublisher())

        new_ids = publisher.merge_identifiers([PublishedPage("a.md", "DOCS", "100")])

        assert new_ids == {}
        assert path.read_text(encoding="utf-8") == content

    def test_changed_id_reported(self, tmp_path):
        write_doc(tmp_path, "a.md", "---\nconnie-page-id: '100'\n---\n# A\n")
        publisher = _publisher(tmp_path, FakePublisher())

        assert publisher.merge_identifiers([PublishedPage("a.md", "DOCS", "101")]) == {"a.md": "101"}

    def test_mirror_documents_never_updated(self, tmp_path):
        write_doc(tmp_path, "a.md", "A")
        mirrored = write_doc(tmp_path, f"{MIRROR_DIR_NAME}/a.md", "A")
        publisher = _publisher(tmp_path, FakePublisher())

        publisher.merge_identifiers([PublishedPage("a.md", "DOCS", "1")])

        assert mirrored.read_text(encoding="utf-8") == "A"

    def test_empty_output_changes_nothing(self, tmp_path):
        write_doc(tmp_path, "a.md", "A")
        publisher = _publisher(tmp_path, FakePublisher())

        assert publisher.merge_identifiers([]) == {}
        assert (tmp_path / "a.md").read_text(encoding="utf-8") == "A"


class TestRun:
    """Test cases for the complete run."""

    def test_single_pass_when_nothing_new(self, tmp_path):
        write_doc(tmp_path, "a.md", "---\nconnie-page-id: '100'\n---\n[B](b.md)\n")
        write_doc(tmp_path, "b.md", "---\nconnie-page-id: '200'\n---\n# B\n")
        fake = FakePublisher()
        publisher = _publisher(tmp_path, fake)

        result = publisher.run()

        assert result.passes == 1
        assert result.new_page_ids == {}
        assert result.links_resolved == [1]
        assert publisher.phase == PublishPhase.DONE

    def test_publisher_sees_temporary_config(self, tmp_path):
        write_doc(tmp_path, "a.md", "A")
        config_path = write_config(tmp_path, ignore=["drafts"])
        original = config_path.read_bytes()
        fake = FakePublisher(config_path=config_path)
        publisher = TwoPhasePublisher(str(tmp_path), ConfigLoader.load(str(config_path)), publish=fake)

        publisher.run()

        assert fake.configs[0]["contentRoot"] == publisher.mirror_dir
        assert fake.configs[0]["ignore"] == ["drafts", "docs-fixed-references", "images", "assets/images"]
        assert config_path.read_bytes() == original

    def test_env_credentials_not_written_to_config(self, tmp_path, monkeypatch):
        write_doc(tmp_path, "a.md", "A")
        config_path = write_config(tmp_path)
        raw = ConfigLoader.load_raw(str(config_path))
        del raw["atlassianApiToken"]
        ConfigLoader.save(str(config_path), raw)
        monkeypatch.setenv("CONFLUENCE_API_TOKEN", "from-env")
        fake = FakePublisher(config_path=config_path)
        publisher = TwoPhasePublisher(str(tmp_path), ConfigLoader.load(str(config_path)), publish=fake)

        publisher.run()

        assert "atlassianApiToken" not in fake.configs[0]

    def test_env_base_url_reaches_publisher(self, tmp_path, monkeypatch):
        write_doc(tmp_path, "a.md", "A")
        config_path = write_config(tmp_path)
        raw = ConfigLoader.load_raw(str(config_path))
        del raw["confluenceBaseUrl"]
        ConfigLoader.save(str(config_path), raw)
        original = config_path.read_bytes()
        monkeypatch.setenv("CONNIE_BASE_URL", "https://env.atlassian.net")
        fake = FakePublisher(config_path=config_path)
        publisher = TwoPhasePublisher(str(tmp_path), ConfigLoader.load(str(config_path)), publish=fake)

        publisher.run()

        assert fake.configs[0]["confluenceBaseUrl"] == "https://env.atlassian.net"
        assert config_path.read_bytes() == original

    def test_unsaved_settings_reach_publisher(self, tmp_path):
        write_doc(tmp_path, "a.md", "A")
        config_path = write_config(tmp_path)
        on_disk = ConfigLoader.load_raw(str(config_path))
        del on_disk["confluenceSpaceKey"]
        ConfigLoader.save(str(config_path), on_disk)
        config = ConfigLoader.from_dict({**on_disk, "confluenceSpaceKey": "TYPED"})
        fake = FakePublisher(config_path=config_path)
        publisher = TwoPhasePublisher(str(tmp_path), config, publish=fake)

        publisher.run()

        assert fake.configs[0]["confluenceSpaceKey"] == "TYPED"
        assert "confluenceSpaceKey" not in ConfigLoader.load_raw(str(config_path))

    def test_subfolder_published_from_mirror_root(self, tmp_path):
        write_doc(tmp_path, "docs/a.md", "[B](b.md)\n")
        write_doc(tmp_path, "docs/b.md", "# B\n")
        write_doc(tmp_path, "outside.md", "# Not published\n")
        config_path = write_config(tmp_path, folderToPublish="docs")
        fake = FakePublisher(ids={"b.md": "300"}, config_path=config_path)
        publisher = TwoPhasePublisher(str(tmp_path), ConfigLoader.load(str(config_path)), publish=fake)

        publisher.run()

        assert fake.configs[0]["contentRoot"] == str(tmp_path / "docs" / MIRROR_DIR_NAME)
        assert fake.configs[0]["folderToPublish"] == "."
        assert sorted(fake.calls[0]) == ["a.md", "b.md"]
        assert _frontmatter(tmp_path / "docs" / "b.md")["connie-page-id"] == "300"
        assert ConfigLoader.load_raw(str(config_path))["folderToPublish"] == "docs"

    def test_missing_config_file_removed_after_run(self, tmp_path):
        write_doc(tmp_path, "a.md", "A")
        config = ConfigLoader.from_dict({
            "confluenceBaseUrl": "https://example.atlassian.net",
            "confluenceSpaceKey": "DOCS",
            "confluenceParentId": "1",
            "atlassianUserName": "me",
            "atlassianApiToken": "tok",
        })
        publisher = TwoPhasePublisher(str(tmp_path), config, publish=FakePublisher())

        publisher.run()

        assert not (tmp_path / ".markdown-confluence.json").exists()

    def test_late_ids_reported_without_third_pass(self, tmp_path):
        write_doc(tmp_path, "a.md", "[C](c.md)\n")
        write_doc(tmp_path, "c.md", "# C\n")
        calls = []

        def publish(content_root):
            calls.append(content_root)
            if len(calls) == 1:
                return success_line("a.md", "100")
            return success_line("a.md", "100") + "\n" + success_line("c.md", "300")

        publisher = _publisher(tmp_path, publish)

        result = publisher.run()

        assert result.passes == 2
        assert result.late_page_ids == ["c.md"]
        assert result.new_page_ids == {"a.md": "100", "c.md": "300"}
        assert _frontmatter(tmp_path / "c.md")["connie-page-id"] == "300"

    def test_publish_failure_cleans_up(self, tmp_path):
        write_doc(tmp_path, "a.md", "A")
        fake = FakePublisher(fail_on_call=2)
        publisher = _publisher(tmp_path, fake)
        original = (tmp_path / ".markdown-confluence.json").read_bytes()

        with pytest.raises(PublishError):
            publisher.run()

        assert publisher.phase == PublishPhase.FAILED
        assert not (tmp_path / MIRROR_DIR_NAME).exists()
        assert (tmp_path / ".markdown-confluence.json").read_bytes() == original
        # IDs learned before the failure stay in the sources
        assert _frontmatter(tmp_path / "a.md")["connie-page-id"] == "200"

    def test_frontmatter_error_cleans_up(self, tmp_path):
        write_doc(tmp_path, "bad.md", "---\n[broken\n---\nBody")
        fake = FakePublisher()
        publisher = _publisher(tmp_path, fake)

        with pytest.raises(FrontmatterError):
            publisher.run()

        assert fake.calls == []
        assert not (tmp_path / MIRROR_DIR_NAME).exists()

    def test_restore_failure_after_success_raises(self, tmp_path, mocker):
        write_doc(tmp_path, "a.md", "---\nconnie-page-id: '1'\n---\nA")
        publisher = _publisher(tmp_path, FakePublisher())
        mocker.patch.object(
            ConfigLoader, "restore", side_effect=FilesystemError("cfg", "restore", "read-only")
        )

        with pytest.raises(FilesystemError):
            publisher.run()

    def test_restore_failure_does_not_mask_publish_error(self, tmp_path, mocker):
        write_doc(tmp_path, "a.md", "A")
        publisher = _publisher(tmp_path, FakePublisher(fail_on_call=1))
        mocker.patch.object(
            ConfigLoader, "restore", side_effect=FilesystemError("cfg", "restore", "read-only")
        )

        with pytest.raises(PublishError):
            publisher.run()

    def test_mirror_removal_failure_reported(self, tmp_path, mocker):
        write_doc(tmp_path, "a.md", "---\nconnie-page-id: '1'\n---\nA")
        publisher = _publisher(tmp_path, FakePublisher())
        mock_remove = mocker.patch("src.reference_sync.two_phase_publisher.remove_mirror")
        mock_remove.side_effect = [True, False]

        result = publisher.run()

        assert result.mirror_removed is False


class TestFixReferences:
    """Test cases for fix_references."""

    def test_keep_mirror(self, tmp_path):
        write_doc(tmp_path, "a.md", "[B](b.md)")
        write_doc(tmp_path, "b.md", "---\nconnie-page-id: '2'\n---\nB")
        fake = FakePublisher()
        publisher = _publisher(tmp_path, fake)

        assert publisher.fix_references(keep_mirror=True) == 1
        assert (tmp_path / MIRROR_DIR_NAME / "a.md").exists()
        assert fake.calls == []

    def test_discard_mirror(self, tmp_path):
        write_doc(tmp_path, "a.md", "A")
        publisher = _publisher(tmp_path, FakePublisher())

        publisher.fix_references(keep_mirror=False)

        assert not (tmp_path / MIRROR_DIR_NAME).exists()
