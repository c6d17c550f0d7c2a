import json

import allure
from click.testing import CliRunner

from review_queue import __version__, main
from review_queue.assign.controllers import AssignCommand
from review_queue.main import review_queue

pytestmark = [
    allure.epic("Review Queue"),
    allure.feature("CLI"),
]


def test_version():
    assert __version__


def test_version_option():
    runner = CliRunner()
    result = runner.invoke(review_queue, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_assign_rejects_uncertified_projects(tmp_path):
    config_path = tmp_path / "config.json"
    config_path.write_text(
        json.dumps({"token": "t", "certs": {"145": "Dog Breed Classifier"}}),
        "utf-8",
    )
    runner = CliRunner()
    result = runner.invoke(
        review_queue,
        ["assign", "145", "999", "--config-path", str(config_path)],
    )
    assert result.exit_code == 1
    assert "Illegal Action: Not certified for project(s) 999" in result.output


def test_assign_requires_token(tmp_path):
    runner = CliRunner()
    result = runner.invoke(
        review_queue,
        ["assign", "all", "--config-path", str(tmp_path / "missing.json")],
    )
    assert result.exit_code == 1
    assert "API token is required" in result.output


def test_assign_passes_options_and_exit_status(monkeypatch):
    received: list[AssignCommand] = []

    def fake_assign(command: AssignCommand) -> int:
        received.append(command)
        return 1

    monkeypatch.setattr(main.ASSIGN_CONTROLLER, "assign", fake_assign)
    runner = CliRunner()
    result = runner.invoke(
        review_queue,
        ["assign", "145", "276", "--feedbacks", "--push", "pb-token"],
    )
    assert result.exit_code == 1
    assert received == [
        AssignCommand(
            project_ids=("145", "276"),
            push_access_token="pb-token",
            feedbacks=True,
            config_path=None,
        ),
    ]
