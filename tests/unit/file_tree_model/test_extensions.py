"""Tests for extension parsing, the enabled-extension policy, and file kinds."""

from __future__ import annotations

import unittest
from pathlib import Path

from projecttree.file_tree_model import EnabledExtensionSet, file_extension, file_kind


class FileExtensionTests(unittest.TestCase):
    def test_extension_is_lowercased_without_dot(self) -> None:
        self.assertEqual(file_extension("notes.MD"), "md")
        self.assertEqual(file_extension("archive.tar.gz"), "gz")

    def test_names_without_extension_give_empty_string(self) -> None:
        self.assertEqual(file_extension("README"), "")
        self.assertEqual(file_extension("Makefile"), "")
        self.assertEqual(file_extension("trailing."), "")
        self.assertEqual(file_extension(".bashrc"), "")


class EnabledExtensionSetTests(unittest.TestCase):
    def test_first_discovery_enables_everything(self) -> None:
        extensions = EnabledExtensionSet().merge_discovered({"md", "txt", "json"})
        self.assertEqual(extensions.available, ("json", "md", "txt"))
        self.assertEqual(extensions.enabled, frozenset({"md", "txt", "json"}))

    def test_later_discovery_auto_enables_only_new_extensions(self) -> None:
        extensions = EnabledExtensionSet().merge_discovered({"md", "txt"}).toggled("txt")
        self.assertEqual(extensions.enabled, frozenset({"md"}))

        refreshed = extensions.merge_discovered({"md", "txt", "rst"})
        self.assertEqual(refreshed.available, ("md", "rst", "txt"))
        self.assertEqual(refreshed.enabled, frozenset({"md", "rst"}))

    def test_empty_first_discovery_stays_first_time(self) -> None:
        extensions = EnabledExtensionSet().merge_discovered(set())
        self.assertEqual(extensions.available, ())
        later = extensions.with_none_enabled().merge_discovered({"md"})
        self.assertEqual(later.enabled, frozenset({"md"}))

    def test_toggle_round_trip_restores_enabled_set(self) -> None:
        extensions = EnabledExtensionSet().merge_discovered({"md", "txt"})
        self.assertEqual(extensions.toggled("md").toggled("md"), extensions)

    def test_enable_all_disable_all_and_explicit_set(self) -> None:
        extensions = EnabledExtensionSet().merge_discovered({"md", "txt"})
        self.assertEqual(extensions.with_none_enabled().enabled, frozenset())
        self.assertEqual(extensions.with_none_enabled().with_all_enabled().enabled, frozenset({"md", "txt"}))
        self.assertEqual(extensions.with_enabled([".MD", " txt ", ""]).enabled, frozenset({"md", "txt"}))
        self.assertTrue(extensions.is_enabled("MD"))

    def test_toggle_and_query_normalize_like_explicit_set(self) -> None:
        extensions = EnabledExtensionSet().merge_discovered({"md", "txt"}).with_none_enabled()

        toggled = extensions.toggled(" .TXT ")

        self.assertEqual(toggled.enabled, extensions.with_enabled(["txt"]).enabled)
        self.assertTrue(toggled.is_enabled(" .txt"))
        self.assertEqual(toggled.toggled("txt").enabled, frozenset())
        self.assertIs(toggled.toggled("  "), toggled)


class FileKindTests(unittest.TestCase):
    def test_kinds_follow_extension(self) -> None:
        self.assertEqual(file_kind(Path("docs"), is_directory=True), "directory")
        self.assertEqual(file_kind(Path("a.markdown"), is_directory=False), "markdown")
        self.assertEqual(file_kind(Path("a.JSON"), is_directory=False), "json")
        self.assertEqual(file_kind(Path("a.yml"), is_directory=False), "yaml")
        self.assertEqual(file_kind(Path("flow.mermaid"), is_directory=False), "mermaid")
        self.assertEqual(file_kind(Path("notes.txt"), is_directory=False), "document")


if __name__ == "__main__":
    unittest.main()
