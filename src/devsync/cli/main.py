import typer

from devsync.cli.sync import sync as sync_command

app = typer.Typer(
    name="devsync",
    help="Sync main with upstream, rebase dev onto it and push both to origin",
    add_completion=False,
)
app.command(name="sync")(sync_command)


if __name__ == "__main__":
    app()
