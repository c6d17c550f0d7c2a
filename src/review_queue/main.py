"""CLI entrypoint for review-queue."""

import sys
from pathlib import Path

import rich_click as click

from review_queue import __version__
from review_queue.assign.controllers import AssignCliController, AssignCommand
from review_queue.notify.push import PushError

click.rich_click.USE_MARKDOWN = True
ASSIGN_CONTROLLER = AssignCliController()


@click.group()
@click.version_option(version=__version__, prog_name="review-queue")
def review_queue() -> None:
    """Review queue CLI."""


@review_queue.command("assign")
@click.argument("project_ids", nargs=-1, required=True)
@click.option(
    "--push",
    "push_access_token",
    default=None,
    metavar="ACCESS_TOKEN",
    help="Pushbullet access token. New assignments are also pushed to your devices.",
)
@click.option(
    "--feedbacks/--no-feedbacks",
    default=False,
    show_default=True,
    help="Poll for new student feedbacks and notify about them.",
)
@click.option(
    "--config-path",
    type=click.Path(path_type=Path),
    default=None,
    help="JSON config file with token, languages and certs. Defaults to ~/.review-queue.json.",
)
def assign(
    project_ids: tuple[str, ...],
    push_access_token: str | None,
    feedbacks: bool,
    config_path: Path | None,
) -> None:
    """Queue up for reviews of PROJECT_IDS (or `all` certified projects).

    Keeps the submission request alive, refreshes it before it expires, and
    notifies you about new assignments.

    Press **ctrl+c** to leave the queue (the request is deleted) or **ESC** to
    suspend without deleting it.
    """

    try:
        exit_code = ASSIGN_CONTROLLER.assign(
            AssignCommand(
                project_ids=project_ids,
                push_access_token=push_access_token,
                feedbacks=feedbacks,
                config_path=config_path,
            ),
        )
    except (ValueError, PushError) as error:
        raise click.ClickException(str(error)) from error
    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    review_queue()
