"""A small release tool used by the runnable examples."""

from __future__ import annotations

from cmdscope import CommandTable


def make_release_table() -> CommandTable:
    """Return a table with a ``Publish-Release`` workflow and a ``Git`` module."""
    table = CommandTable()
    git = table.module("Git")

    @git.command("Invoke-Git")
    def invoke_git(*args: str) -> str:
        msg = f"refusing to run real git {' '.join(args)}"
        raise RuntimeError(msg)

    @git.command("Get-LatestTag", export=True)
    def get_latest_tag() -> str:
        return git.call("Invoke-Git", "describe", "--tags")

    @table.command("Send-Artifact")
    def send_artifact(name: str, channel: str = "stable") -> str:
        return f"uploaded {name} to {channel}"

    @table.command("Publish-Release")
    def publish_release(channel: str = "stable") -> list[str]:
        tag = table.call("Get-LatestTag")
        return [
            table.call("Send-Artifact", f"app-{tag}.tar.gz", channel=channel),
            table.call("Send-Artifact", f"app-{tag}.whl", channel=channel),
        ]

    return table
