from pathlib import Path

from browser_world.loader import load_directory, load_page_objects, load_shared_objects


def write_module(path: Path, body: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body)


def test_directory_becomes_nested_namespace(tmp_path):
    write_module(tmp_path / "login-page.py", "TITLE = 'Sign in'\n")
    write_module(tmp_path / "checkout" / "payment.py", "SUBMIT = '#pay'\n")
    write_module(tmp_path / "_private.py", "raise RuntimeError('never imported')\n")
    write_module(tmp_path / "notes.txt", "ignored\n")

    objects = load_directory(tmp_path)

    assert set(objects) == {"login_page", "checkout"}
    assert objects.login_page.TITLE == "Sign in"
    assert objects.checkout.payment.SUBMIT == "#pay"


def test_missing_directory_is_empty(tmp_path):
    assert load_directory(tmp_path / "absent") == {}
    assert load_page_objects(None) == {}


def test_later_shared_directories_override_earlier(tmp_path):
    write_module(tmp_path / "base" / "urls.py", "HOME = 'https://base.example'\n")
    write_module(tmp_path / "base" / "users.py", "ADMIN = 'root'\n")
    write_module(tmp_path / "site" / "urls.py", "HOME = 'https://site.example'\n")

    shared = load_shared_objects([tmp_path / "base", str(tmp_path / "site")])

    assert shared.urls.HOME == "https://site.example"
    assert shared.users.ADMIN == "root"
