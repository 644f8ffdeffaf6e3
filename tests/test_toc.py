"""Tests for the table of contents on the primary branch."""

from unittest.mock import patch

import pytest

from crypto.codec import seal
from crypto.hash import derive_key
from storage.git import GitWorkdir
from storage.toc import check_primary_branch, load_index, mark_present, save_index, validate_document_name
from utils.dataModels import INDEX_FILENAME, TableOfContents
from utils.errors import BackendError, DecryptionError, FormatError, IndexStoreError, InvalidNameError
from utils.naming import branch_for

from conftest import requires_git

KEY = derive_key("pw")


class TestMarkPresent:
    """mark_present is a pure update."""

    def test_returns_copy(self):
        original = {"a": True}
        updated = mark_present(original, "b")
        assert updated == {"a": True, "b": True}
        assert original == {"a": True}

    def test_idempotent(self):
        once = mark_present({}, "notes")
        assert mark_present(once, "notes") == once == {"notes": True}


class TestValidation:
    """Tests for name validation."""

    @pytest.mark.parametrize("name", ["", "master", "bad\0name", "bad\ud800name"])
    def test_rejected(self, name):
        with pytest.raises(InvalidNameError):
            validate_document_name(name, "master")

    def test_reserved_follows_primary_branch(self):
        validate_document_name("master", "index")
        with pytest.raises(InvalidNameError):
            validate_document_name("index", "index")

    def test_invalid_name_is_value_error(self):
        with pytest.raises(ValueError):
            validate_document_name("")

    def test_primary_branch_cannot_look_like_document(self):
        with pytest.raises(InvalidNameError):
            check_primary_branch(branch_for("x"))
        check_primary_branch("master")


class TestTableOfContents:
    """Tests for the JSON payload."""

    def test_round_trip(self):
        toc = TableOfContents({"b": True, "a": True})
        assert TableOfContents.from_bytes(toc.to_bytes()).documents == {"a": True, "b": True}

    @pytest.mark.parametrize("payload", [b"not json", b"[1, 2]", b'{"a": "yes"}', b"\xff\xfe"])
    def test_malformed(self, payload):
        with pytest.raises(FormatError):
            TableOfContents.from_bytes(payload)

    def test_empty_object(self):
        assert TableOfContents.from_bytes(b"{}").documents == {}


@requires_git
class TestPersistence:
    """load_index / save_index against a real repository."""

    @pytest.fixture
    def wd(self, tmp_path):
        w = GitWorkdir(tmp_path / "repo")
        w.init()
        return w

    def test_absent_index_is_empty(self, wd):
        assert load_index(wd, KEY) == {}

    def test_save_and_load(self, wd):
        save_index({"notes": True}, wd, KEY)
        assert load_index(wd, KEY) == {"notes": True}
        assert wd.current_branch() == "master"

    def test_stored_encrypted(self, wd):
        save_index({"secret-document": True}, wd, KEY)
        raw = wd.read_file(INDEX_FILENAME)
        assert b"secret-document" not in raw
        assert set(raw.decode("ascii")) <= set("0123456789abcdef")

    def test_save_twice_keeps_one_entry(self, wd):
        """markPresent + save twice with the same name leaves one entry."""
        for _ in range(2):
            save_index(mark_present(load_index(wd, KEY), "notes"), wd, KEY)
        assert load_index(wd, KEY) == {"notes": True}

    def test_wrong_password(self, wd):
        save_index({"notes": True}, wd, KEY)
        with pytest.raises(DecryptionError):
            load_index(wd, derive_key("other"))

    def test_custom_primary_branch(self, wd):
        save_index({"a": True}, wd, KEY, primary_branch="toc")
        assert wd.has_branch("toc")
        assert not wd.has_branch("master")
        assert load_index(wd, KEY, primary_branch="toc") == {"a": True}

    def test_corrupt_hex(self, wd):
        save_index({}, wd, KEY)
        wd.write_file(INDEX_FILENAME, "not hex at all")
        wd.stage_all()
        wd.commit("break index")
        with pytest.raises(FormatError):
            load_index(wd, KEY)

    def test_non_object_payload(self, wd):
        wd.switch("master")
        wd.write_file(INDEX_FILENAME, seal(b"[]", KEY))
        wd.stage_all()
        wd.commit("list index")
        with pytest.raises(FormatError):
            load_index(wd, KEY)


class TestBackendFailures:
    """git failures inside index operations surface as IndexStoreError."""

    def test_load(self, tmp_path):
        wd = GitWorkdir(tmp_path)
        with patch.object(wd, "switch", side_effect=BackendError("checkout failed")):
            with pytest.raises(IndexStoreError) as exc:
                load_index(wd, KEY)
        assert isinstance(exc.value.__cause__, BackendError)

    def test_save(self, tmp_path):
        wd = GitWorkdir(tmp_path)
        with patch.object(wd, "switch"), patch.object(wd, "write_file"), patch.object(wd, "stage_all"), \
                patch.object(wd, "commit", side_effect=BackendError("commit failed")):
            with pytest.raises(IndexStoreError, match="commit failed"):
                save_index({"a": True}, wd, KEY)
