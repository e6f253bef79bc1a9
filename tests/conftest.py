import pytest


class FakeTree:
    def __init__(self, output="src\n└── main.rs\n"):
        self.output = output
        self.calls = []

    def render(self, path, depth=None):
        self.calls.append((path, depth))
        return self.output


class FakeClipboard:
    def __init__(self):
        self.contents = None
        self.writes = 0

    def write(self, text):
        self.writes += 1
        self.contents = text


@pytest.fixture
def home(tmp_path, monkeypatch):
    """Point $HOME at a throwaway directory."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    return home_dir


@pytest.fixture
def fake_tree():
    return FakeTree()


@pytest.fixture
def fake_clipboard():
    return FakeClipboard()
