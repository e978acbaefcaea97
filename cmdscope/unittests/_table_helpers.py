"""Command tables shared by the unit and behavioural tests."""

from __future__ import annotations

import dataclasses as dc
import typing as t

from cmdscope.commands import CommandTable, Module

ORIGINAL_VERSION: t.Final[float] = 1.0
MODULE_NAME: t.Final[str] = "BuildTools"


@dc.dataclass(slots=True)
class BuildScript:
    """A small build script expressed as commands, plus its module."""

    table: CommandTable
    tools: Module
    built: list[object] = dc.field(default_factory=list)


def make_build_script() -> BuildScript:
    """Return a table whose ``Build-IfChanged`` builds when the version moves.

    ``BuildTools`` is a module with a private ``Get-Version`` and an exported
    ``Get-ModuleVersion`` that calls it from inside the module.
    """
    table = CommandTable()
    tools = table.module(MODULE_NAME)
    script = BuildScript(table=table, tools=tools)

    @table.command("Get-Version")
    def get_version() -> float:
        return ORIGINAL_VERSION

    @table.command("Get-NextVersion")
    def get_next_version() -> float:
        return ORIGINAL_VERSION

    @table.command("Build")
    def build(version: object) -> str:
        script.built.append(version)
        return f"built {version}"

    @table.command("Build-IfChanged")
    def build_if_changed() -> object:
        this_version = table.call("Get-Version")
        next_version = table.call("Get-NextVersion")
        if this_version != next_version:
            table.call("Build", version=next_version)
        return next_version

    @tools.command("Get-Version")
    def module_version() -> str:
        return "module-original"

    @tools.command("Get-ModuleVersion", export=True)
    def get_module_version() -> object:
        return tools.call("Get-Version")

    return script
