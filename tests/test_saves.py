from mindustry_manager.local.supervisor.saves import list_manual_saves


def test_strips_directory_and_extension(tmp_path):
    (tmp_path / "mysafe.msav").write_bytes(b"")

    assert list_manual_saves(tmp_path) == ["mysafe"]


def test_skips_autosaves_and_other_files(tmp_path):
    for name in ("mysafe.msav", "base.msav", "autosave-0.msav", "old-autosave.msav", "notes.txt"):
        (tmp_path / name).write_bytes(b"")
    (tmp_path / "folder.msav").mkdir()

    assert list_manual_saves(tmp_path) == ["base", "mysafe"]


def test_custom_extension_and_marker(tmp_path):
    (tmp_path / "keep.sav").write_bytes(b"")
    (tmp_path / "tmp-keep.sav").write_bytes(b"")
    (tmp_path / "ignored.msav").write_bytes(b"")

    assert list_manual_saves(tmp_path, extension=".sav", marker="tmp-") == ["keep"]


def test_missing_directory_is_empty(tmp_path):
    assert list_manual_saves(tmp_path / "does-not-exist") == []


def test_new_files_are_visible_on_next_call(tmp_path):
    assert list_manual_saves(tmp_path) == []

    (tmp_path / "fresh.msav").write_bytes(b"")

    assert list_manual_saves(tmp_path) == ["fresh"]
