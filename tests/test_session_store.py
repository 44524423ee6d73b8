from pathlib import Path

from src.medfinder.persistence import session_store
from src.medfinder.persistence.session_store import FileSessionStore, InMemorySessionStore


def test_in_memory_store_get_set_clear() -> None:
    store = InMemorySessionStore()

    assert store.get("location:abc") is None
    store.set("location:abc", {"area": "Indiranagar"})
    assert store.get("location:abc") == {"area": "Indiranagar"}

    store.clear("location:abc")
    store.clear("location:missing")
    assert store.get("location:abc") is None


def test_file_store_writes_json_under_sessions_dir(tmp_path: Path) -> None:
    store = FileSessionStore(root=tmp_path)
    store.set("location:abc", {"area": "Indiranagar", "postal_code": "560038"})

    files = list((tmp_path / "sessions").iterdir())
    assert [path.name for path in files] == ["location_abc.json"]
    assert FileSessionStore(root=tmp_path).get("location:abc") == {"area": "Indiranagar", "postal_code": "560038"}


def test_file_store_sanitizes_keys_and_clears(tmp_path: Path) -> None:
    store = FileSessionStore(root=tmp_path)
    store.set("../../etc/passwd", {"x": 1})

    assert all(path.parent == tmp_path / "sessions" for path in (tmp_path / "sessions").iterdir())
    store.clear("../../etc/passwd")
    assert store.get("../../etc/passwd") is None


def test_get_session_store_honours_backend(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(session_store.settings, "session_backend", "file")
    monkeypatch.setattr(session_store.settings, "data_root", tmp_path)
    session_store.get_session_store.cache_clear()
    try:
        assert isinstance(session_store.get_session_store(), FileSessionStore)
    finally:
        session_store.get_session_store.cache_clear()
