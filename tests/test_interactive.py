"""
Wizard tests: questionary is replaced by a scripted stand-in, answers are
consumed in prompt order.
"""
import pytest

from fspopulate import interactive
from fspopulate.cli import EXIT_FAILURE, EXIT_OK
from fspopulate.interactive import run_interactive, validate_count


class ScriptedAnswer:
    def __init__(self, value):
        self.value = value

    def ask(self):
        return self.value


class ScriptedQuestionary:
    def __init__(self, answers):
        self.answers = list(answers)
        self.asked = []

    def _next(self, message, **kwargs):
        self.asked.append(message)
        return ScriptedAnswer(self.answers.pop(0))

    select = _next
    path = _next
    text = _next
    confirm = _next


@pytest.fixture
def script(monkeypatch):
    def install(*answers):
        fake = ScriptedQuestionary(answers)
        monkeypatch.setattr(interactive, "questionary", fake)
        return fake
    return install


@pytest.mark.parametrize(
    "value, minimum, expected",
    [("12", 0, True), (" 3 ", 1, True), ("0", 0, True), ("0", 1, False), ("²", 0, False), ("-1", 0, False), ("x", 0, False)],
)
def test_validate_count(value, minimum, expected):
    assert validate_count(value, minimum) is expected


def test_populate_with_custom_policy(tmp_path, script):
    root = tmp_path / "tree"
    fake = script("Заполнить дерево", str(root), "10k", True, "2", "3", "10", True)
    assert run_interactive() == EXIT_OK
    assert fake.answers == []
    sizes = sorted(p.stat().st_size for p in root.rglob("file*"))
    assert sizes == [10, 10, 10240 - 20]


def test_ctrl_c_at_confirmation(tmp_path, script):
    root = tmp_path / "tree"
    script("Заполнить дерево", str(root), "10k", False, None)
    assert run_interactive() == EXIT_FAILURE
    assert not root.exists()


def test_declined_confirmation(tmp_path, script):
    root = tmp_path / "tree"
    script("Заполнить дерево", str(root), "10k", False, False)
    assert run_interactive() == EXIT_OK
    assert not root.exists()


def test_exit_choice(script):
    fake = script("Выход")
    assert run_interactive() == EXIT_OK
    assert len(fake.asked) == 1
