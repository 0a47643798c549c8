"""Main CLI entry point for lullabot-project."""

import click

from lullabot_project import __version__
from lullabot_project.commands.config import config_cmd
from lullabot_project.commands.init import init_cmd
from lullabot_project.commands.remove import remove_cmd
from lullabot_project.commands.update import update_cmd


@click.group()
@click.version_option(version=__version__, prog_name="lullabot-project")
def main():
    """lullabot-project - AI assistant setup for your projects.

    Installs rules, AGENTS.md and tool packages for the AI assistant you
    use, and keeps track of them so they can be updated or removed.

    \b
    Quick Start:
      lullabot-project init                 Interactive setup
      lullabot-project init -t claude -p drupal --all-tasks
      lullabot-project config               Show what is installed

    \b
    Maintenance:
      lullabot-project update               Re-run tasks after upgrading
      lullabot-project remove               Remove installed files
    """
    pass


main.add_command(init_cmd, name="init")
main.add_command(update_cmd, name="update")
main.add_command(config_cmd, name="config")
main.add_command(remove_cmd, name="remove")


if __name__ == "__main__":
    main()
