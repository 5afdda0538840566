"""Unit tests for the artifact store facade."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from metasync.errors import ArtifactReadError
from metasync.formatting.fallback import FormatterFallback
from metasync.io.filesystem import LocalFileSystem
from metasync.io.storage import ArtifactStore, apply_template_variables


class _ReadOnlyFileSystem(LocalFileSystem):
    """Filesystem double whose writes always fail."""

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None:
        raise PermissionError(13, "Permission denied", path)


def test_write_json_creates_missing_ancestors_and_round_trips(tmp_path: Path) -> None:
    """JSON writes create nested directories and read back deep-equal content."""

    store = ArtifactStore(project_root=tmp_path)
    content = {"name": "Journey ✓", "steps": [1, {"nested": None}], "flag": True}

    assert store.write_json([str(tmp_path), "retrieve", "cred/bu", "asset"], "my key", content)

    written = tmp_path / "retrieve" / "cred" / "bu" / "asset" / "my key.json"
    assert written.is_file()
    assert json.loads(written.read_text(encoding="utf-8")) == content
    assert written.read_text(encoding="utf-8").startswith('{\n    "name": "Journey ✓"')
    assert store.read_json([str(tmp_path), "retrieve", "cred/bu", "asset"], "my key") == content


def test_write_text_sanitizes_directory_and_filename(tmp_path: Path) -> None:
    """Names are encoded so slashes and illegal characters cannot escape the directory."""

    store = ArtifactStore(project_root=tmp_path)

    assert store.write_text(str(tmp_path / "bu:1"), "a/b*c", "html", "<p>x</p>")

    assert (tmp_path / "bu%3A1" / "a%2Fb_STAR_c.html").read_text(encoding="utf-8") == "<p>x</p>"
    assert store.read_text(str(tmp_path / "bu:1"), "a/b*c", "html") == "<p>x</p>"


def test_write_text_logs_overwrite_at_debug(tmp_path: Path, log_buffer) -> None:
    """Overwriting an existing artifact is not an error."""

    store = ArtifactStore(project_root=tmp_path)

    assert store.write_text(str(tmp_path), "file", "txt", "one")
    assert store.write_text(str(tmp_path), "file", "txt", "two")

    assert (tmp_path / "file.txt").read_text(encoding="utf-8") == "two"
    assert "level=DEBUG event=overwrite" in log_buffer.getvalue()


def test_write_failures_are_logged_and_reported_false(tmp_path: Path, log_buffer) -> None:
    """Write I/O failures never raise across the store boundary."""

    store = ArtifactStore(_ReadOnlyFileSystem(), project_root=tmp_path)

    assert store.write_text(str(tmp_path), "file", "txt", "x") is False
    assert store.write_json(str(tmp_path), "file", {"a": 1}) is False
    assert store.write_json(str(tmp_path), "bad", {"a": object()}) is False
    assert log_buffer.getvalue().count("event=write_failed") == 3


def test_formatted_write_persists_raw_content_and_error_sidecar(tmp_path: Path) -> None:
    """A parser failure still writes the artifact plus an ANSI-free `.error.log`."""

    (tmp_path / ".prettierrc").write_text("tabWidth: 2\n", encoding="utf-8")
    store = ArtifactStore(project_root=tmp_path)
    target = tmp_path / "out"

    assert store.write_text(str(target), "broken", "json", '{"a": ', formatted=True)

    assert (target / "broken.json").read_text(encoding="utf-8") == '{"a": '
    sidecar = (target / "broken.error.log").read_text(encoding="utf-8")
    assert sidecar.startswith("Error Log\nParser: json\n")
    assert "\x1b" not in sidecar


def test_formatted_write_beautifies_with_project_style(tmp_path: Path) -> None:
    """Valid content is beautified with the resolved style options."""

    (tmp_path / ".prettierrc").write_text("tabWidth: 2\n", encoding="utf-8")
    store = ArtifactStore(project_root=tmp_path)

    assert store.init_formatter("json")
    assert store.write_text(str(tmp_path), "data", "json", '{"a":[1,2]}', formatted=True)

    assert (tmp_path / "data.json").read_text(encoding="utf-8") == (
        '{\n  "a": [\n    1,\n    2\n  ]\n}\n'
    )
    assert not (tmp_path / "data.error.log").exists()


def test_formatted_amp_write_without_style_file(tmp_path: Path) -> None:
    """AMPscript files are beautified even when no style file exists."""

    store = ArtifactStore(project_root=tmp_path)

    assert store.write_text(str(tmp_path), "snippet", "amp", "%%[ set @a = 1 ]%%", formatted=True)

    assert (tmp_path / "snippet.amp").read_text(encoding="utf-8") == "%%[\nSET @a = 1\n]%%"


def test_template_variables_replace_values_after_formatting(tmp_path: Path) -> None:
    """Template variables turn literal values into `{{{key}}}` markers."""

    store = ArtifactStore(project_root=tmp_path)

    assert store.write_text(
        str(tmp_path),
        "t",
        "html",
        "<p>Acme Corp 1234</p>",
        template_variables={"company": "Acme Corp", "mid": 1234, "empty": ""},
    )

    assert (tmp_path / "t.html").read_text(encoding="utf-8") == "<p>{{{company}}} {{{mid}}}</p>"
    assert apply_template_variables("x", {}) == "x"


def test_read_json_accepts_names_with_json_suffix(tmp_path: Path) -> None:
    """`read_json` tolerates callers passing `name.json`."""

    store = ArtifactStore(project_root=tmp_path)
    store.write_json(str(tmp_path), "cfg", {"a": 1})

    assert store.read_json(str(tmp_path), "cfg.json") == {"a": 1}


def test_read_json_without_sanitizing_uses_path_as_given(tmp_path: Path) -> None:
    """`sanitize_path=False` reads an already encoded name verbatim."""

    store = ArtifactStore(project_root=tmp_path)
    store.write_json(str(tmp_path), "a*b", {"a": 1})

    assert store.read_json(str(tmp_path), "a_STAR_b", sanitize_path=False) == {"a": 1}


def test_read_json_missing_file_raises_with_errno_code(tmp_path: Path, log_buffer) -> None:
    """Read failures keep the original code and message and are logged."""

    store = ArtifactStore(project_root=tmp_path)

    with pytest.raises(ArtifactReadError) as exc_info:
        store.read_json(str(tmp_path), "missing")

    assert exc_info.value.code == "ENOENT"
    assert exc_info.value.path == os.path.join(str(tmp_path), "missing.json")
    assert "event=read_json_failed" in log_buffer.getvalue()
    assert "ENOENT" in log_buffer.getvalue()


def test_read_json_invalid_content_raises_with_decoder_code(tmp_path: Path) -> None:
    store = ArtifactStore(project_root=tmp_path)
    (tmp_path / "bad.json").write_text("{nope", encoding="utf-8")

    with pytest.raises(ArtifactReadError) as exc_info:
        store.read_json(str(tmp_path), "bad")

    assert exc_info.value.code == "JSONDecodeError"


def test_read_text_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ArtifactReadError, match="ENOENT"):
        ArtifactStore(project_root=tmp_path).read_text(str(tmp_path), "nothing", "sql")


def test_copy_reports_ok_skipped_and_failed(tmp_path: Path) -> None:
    """Copy distinguishes a vanished source from other I/O errors."""

    store = ArtifactStore(project_root=tmp_path)
    source = tmp_path / "src" / "a.txt"
    source.parent.mkdir()
    source.write_text("a", encoding="utf-8")

    ok = store.copy(source, tmp_path / "deep" / "dst" / "a.txt")
    skipped = store.copy(tmp_path / "gone.txt", tmp_path / "dst" / "gone.txt")

    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a directory", encoding="utf-8")
    failed = store.copy(source, blocker / "a.txt")

    assert ok.status == "ok" and ok.ok
    assert (tmp_path / "deep" / "dst" / "a.txt").read_text(encoding="utf-8") == "a"
    assert skipped.status == "skipped"
    assert skipped.status_message == "deleted from repository"
    assert skipped.as_dict() == {
        "status": "skipped",
        "file": str(tmp_path / "gone.txt"),
        "statusMessage": "deleted from repository",
    }
    assert failed.status == "failed"
    assert failed.status_message


def test_copy_directory_tree(tmp_path: Path) -> None:
    store = ArtifactStore(project_root=tmp_path)
    (tmp_path / "tree" / "sub").mkdir(parents=True)
    (tmp_path / "tree" / "sub" / "f.json").write_text("{}", encoding="utf-8")

    assert store.copy(tmp_path / "tree", tmp_path / "copy").status == "ok"
    assert (tmp_path / "copy" / "sub" / "f.json").is_file()


@pytest.mark.asyncio
async def test_async_variants_match_blocking_behavior(tmp_path: Path) -> None:
    """Awaitable operations share paths, results and failure policy with blocking ones."""

    store = ArtifactStore(project_root=tmp_path)

    assert await store.awrite_json([str(tmp_path), "a"], "doc", {"k": [1]})
    assert await store.awrite_text([str(tmp_path), "a"], "code", "ssjs", "var a = 1;")
    assert await store.aread_json([str(tmp_path), "a"], "doc") == {"k": [1]}
    assert await store.aread_text([str(tmp_path), "a"], "code", "ssjs") == "var a = 1;"
    result = await store.acopy(tmp_path / "missing", tmp_path / "b")
    assert result.status == "skipped"
    with pytest.raises(ArtifactReadError):
        await store.aread_json(str(tmp_path), "missing")


def test_stores_sharing_a_formatter_write_sidecars_to_their_own_filesystem(
    tmp_path: Path,
) -> None:
    """Sidecars go through the store that requested the formatted write."""

    (tmp_path / ".prettierrc").write_text("tabWidth: 2\n", encoding="utf-8")
    formatter = FormatterFallback(project_root=tmp_path)
    failing = ArtifactStore(_ReadOnlyFileSystem(), formatter=formatter)
    working = ArtifactStore(formatter=formatter)
    target = tmp_path / "out"

    assert working.write_text(str(target), "broken", "json", '{"a": ', formatted=True)

    assert formatter.sidecar_writer is None
    assert (target / "broken.error.log").is_file()
    assert not failing.write_text(str(target), "other", "json", '{"b": ', formatted=True)
    assert not (target / "other.error.log").exists()
