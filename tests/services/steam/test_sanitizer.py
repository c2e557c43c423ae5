from __future__ import annotations

import shutil
from pathlib import Path

from depotflow.services.steam import sanitizer as sanitizer_module
from depotflow.services.steam.sanitizer import DirectorySanitizer


def _tree(root: Path) -> None:
    for rel in (
        "Game_Data/Managed/Assembly.dll",
        "Game_Data/StreamingAssets/DoNotShip/secret.txt",
        "Game_Data/StreamingAssets/level1.bundle",
        "Game_BurstDebugInformation_DoNotShip/lib.pdb",
        "Tools/dontship-notes/nested/deep.txt",
        "Tools/readme.txt",
        "Docs/ShippingGuide/guide.md",
    ):
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(rel, encoding="utf-8")


def test_clean_removes_marked_directories_only(tmp_path):
    _tree(tmp_path)

    removed = DirectorySanitizer().clean(tmp_path)

    assert removed == 3
    assert not (tmp_path / "Game_Data/StreamingAssets/DoNotShip").exists()
    assert not (tmp_path / "Game_BurstDebugInformation_DoNotShip").exists()
    assert not (tmp_path / "Tools/dontship-notes").exists()
    assert (tmp_path / "Game_Data/StreamingAssets/level1.bundle").is_file()
    assert (tmp_path / "Game_Data/Managed/Assembly.dll").is_file()
    assert (tmp_path / "Tools/readme.txt").is_file()
    assert (tmp_path / "Docs/ShippingGuide/guide.md").is_file()


def test_clean_matches_any_casing(tmp_path):
    for name in ("DONOTSHIP", "DontShip", "donotship_extra", "x-DoNtShIp"):
        (tmp_path / name).mkdir()
    (tmp_path / "ship").mkdir()

    assert DirectorySanitizer().clean(tmp_path) == 4
    assert [p.name for p in tmp_path.iterdir()] == ["ship"]


def test_clean_ignores_files_with_marker_names(tmp_path):
    (tmp_path / "DoNotShip.txt").write_text("keep", encoding="utf-8")

    assert DirectorySanitizer().clean(tmp_path) == 0
    assert (tmp_path / "DoNotShip.txt").is_file()


def test_clean_continues_after_failed_delete(tmp_path, monkeypatch, log_records):
    (tmp_path / "a_DoNotShip").mkdir()
    (tmp_path / "b_DoNotShip").mkdir()
    real_rmtree = shutil.rmtree

    def flaky_rmtree(path, *args, **kwargs):
        if Path(path).name == "a_DoNotShip":
            raise PermissionError("locked")
        return real_rmtree(path, *args, **kwargs)

    monkeypatch.setattr(sanitizer_module.shutil, "rmtree", flaky_rmtree)

    removed = DirectorySanitizer().clean(tmp_path)

    assert removed == 1
    assert (tmp_path / "a_DoNotShip").exists()
    assert not (tmp_path / "b_DoNotShip").exists()
    assert any("delete_failed" in r.getMessage() and r.levelname == "ERROR" for r in log_records)


def test_clean_empty_directory(tmp_path):
    assert DirectorySanitizer().clean(tmp_path) == 0
