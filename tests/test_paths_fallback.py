from pathlib import Path

import cyclegrid.paths as P
from cyclegrid.paths import corpus_dir, data_dir, git_provenance, repo_root


def test_repo_root_prefers_cwd_when_no_git_and_no_env(tmp_path: Path, monkeypatch):
    for var in ("CYCLEGRID_REPO_ROOT", "CYCLEGRID_DATA", "CYCLEGRID_CORPUS"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(P, "_find_git_root", lambda start: None)

    assert repo_root() == tmp_path
    assert data_dir() == tmp_path / "data"
    assert corpus_dir() == tmp_path / "data" / "corpus"


def test_env_overrides(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("CYCLEGRID_REPO_ROOT", str(tmp_path / "root"))
    monkeypatch.delenv("CYCLEGRID_DATA", raising=False)
    monkeypatch.setenv("CYCLEGRID_CORPUS", str(tmp_path / "elsewhere"))
    assert data_dir() == tmp_path / "root" / "data"
    assert corpus_dir() == tmp_path / "elsewhere"


def test_git_provenance_outside_repo(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("CYCLEGRID_REPO_ROOT", str(tmp_path))
    prov = git_provenance()
    assert set(prov) == {"git_commit", "git_is_dirty"}
    assert prov["git_commit"] is None
    assert prov["git_is_dirty"] is None
