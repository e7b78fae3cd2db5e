"""Modulary CLI - Main Entry Point.

The `modulary` command loads a module manifest into a fresh scheduler and
shows what a render pass would emit.

Commands:
    plan   - Show the emission plan (preloads, load tags, import map)
    render - Print the markup of one or all output sections
    check  - Report diagnostics and dependency cycles
    graph  - Show the dependency graph
"""

import json
import logging
import sys
from typing import List, Optional

import click

from . import __version__, __cli_name__
from .utils.colors import (
    success, error, warning, info, dim, bold,
    section, kv, badge, bullet, table,
    _ARROW, _CHECK, _CROSS,
)
from ..config import ConfigLoader
from ..faults import DependencyCycleFault, Fault, Severity, UnknownModuleFault
from ..fingerprint import fingerprint
from ..manifest import apply_manifest, load_manifest
from ..scheduler import ModuleScheduler


# ============================================================================
# Custom Click help formatter
# ============================================================================


class ModularyGroup(click.Group):
    """Click group subclass with aligned command listing."""

    def format_commands(
        self, ctx: click.Context, formatter: click.HelpFormatter
    ) -> None:
        commands = []
        for subcommand in self.list_commands(ctx):
            cmd = self.get_command(ctx, subcommand)
            if cmd is None or cmd.hidden:
                continue
            commands.append((subcommand, cmd.get_short_help_str(limit=48)))

        if commands:
            with formatter.section(click.style("Commands", fg="cyan", bold=True)):
                max_len = max(len(c[0]) for c in commands) + 2
                for name, help_text in commands:
                    styled_name = click.style(name.ljust(max_len), fg="green")
                    formatter.write(f"  {styled_name} {help_text}\n")


@click.group(cls=ModularyGroup)
@click.version_option(version=__version__, prog_name=__cli_name__)
@click.option(
    '--config', '-c', 'config_paths', multiple=True,
    help='Config file (JSON or YAML, repeatable, glob patterns allowed)',
)
@click.option('--env-file', type=click.Path(dir_okay=False), help='.env file with MODULARY_* settings')
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.pass_context
def cli(ctx, config_paths: tuple, env_file: Optional[str], verbose: bool):
    """Plan and render module load markup from a manifest.

    \b
    Quick start:
      modulary plan modules.yaml
      modulary render modules.yaml --section head
      modulary check modules.yaml
    """
    ctx.ensure_object(dict)
    ctx.obj['config_paths'] = list(config_paths)
    ctx.obj['env_file'] = env_file
    ctx.obj['verbose'] = verbose

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )


def _load_scheduler(ctx, manifest_path: str) -> ModuleScheduler:
    """Build a scheduler from the global options and populate it."""
    try:
        config = ConfigLoader.load(
            paths=ctx.obj['config_paths'],
            env_file=ctx.obj['env_file'],
        ).to_scheduler_config()
        manifest = load_manifest(manifest_path)
    except Fault as e:
        error(f"  {_CROSS} {e.message}")
        for detail in e.metadata.get("errors", []):
            error(f"      {detail}")
        sys.exit(1)

    scheduler = ModuleScheduler(config)
    apply_manifest(scheduler, manifest)
    return scheduler


# ============================================================================
# Commands
# ============================================================================

@cli.command('plan')
@click.argument('manifest', type=click.Path(exists=True, dir_okay=False))
@click.option('--json', 'as_json', is_flag=True, help='Output as JSON')
@click.pass_context
def plan_cmd(ctx, manifest: str, as_json: bool):
    """
    Show the emission plan of a manifest.

    Examples:
      modulary plan modules.yaml
      modulary plan modules.json --json
    """
    scheduler = _load_scheduler(ctx, manifest)
    plan = scheduler.plan()

    if as_json:
        payload = plan.to_dict()
        payload["fingerprint"] = fingerprint(plan)
        payload["diagnostics"] = scheduler.diagnostics.to_list()
        click.echo(json.dumps(payload, indent=2))
        return

    section("Preloads")
    if plan.preloads:
        table(
            ["Id", "Priority", "Address"],
            [[p.id, p.priority.value, p.address] for p in plan.preloads],
        )
    else:
        dim("  (none)")

    for title, tags in (("Load tags (early)", plan.early), ("Load tags (late)", plan.late)):
        click.echo()
        section(title)
        if tags:
            table(
                ["Id", "Priority", "Address"],
                [[t.id, t.priority.value, t.address] for t in tags],
            )
        else:
            dim("  (none)")

    click.echo()
    section("Import map")
    if plan.resolution_table:
        for entry in plan.resolution_table:
            bullet(f"{entry.id} {_ARROW} {entry.address}")
    else:
        dim("  (none)")

    click.echo()
    kv("Registered", str(len(scheduler.graph)))
    kv("Enqueued", str(len(scheduler.get_queue())))
    kv("Diagnostics", str(len(scheduler.diagnostics)))
    kv("Fingerprint", fingerprint(plan))


_SECTIONS = ['head', 'footer', 'preloads', 'importmap', 'data', 'all']


@cli.command('render')
@click.argument('manifest', type=click.Path(exists=True, dir_okay=False))
@click.option(
    '--section', 'section_name', type=click.Choice(_SECTIONS), default='all',
    help='Output section to render',
)
@click.pass_context
def render_cmd(ctx, manifest: str, section_name: str):
    """
    Print the markup a render pass would emit.

    Examples:
      modulary render modules.yaml
      modulary render modules.yaml --section importmap
    """
    scheduler = _load_scheduler(ctx, manifest)

    head = (
        scheduler.print_import_map()
        + scheduler.print_head_modules()
        + scheduler.print_preloads()
    )
    footer = scheduler.print_footer_modules() + scheduler.print_module_data()

    outputs = {
        'head': head,
        'footer': footer,
        'preloads': scheduler.print_preloads(),
        'importmap': scheduler.print_import_map(),
        'data': scheduler.print_module_data(),
        'all': head + footer,
    }
    click.echo(outputs[section_name], nl=False)


@cli.command('check')
@click.argument('manifest', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def check_cmd(ctx, manifest: str):
    """
    Report missing dependencies, cycles and invalid options.

    Exits with status 1 when an error-level problem is found.
    """
    scheduler = _load_scheduler(ctx, manifest)
    scheduler.plan()

    cycle = scheduler.graph.find_cycle()
    if cycle:
        scheduler.diagnostics.report(DependencyCycleFault(cycle))
    for module_id in scheduler.get_queue():
        if not scheduler.is_registered(module_id):
            scheduler.diagnostics.report(UnknownModuleFault(module_id, "emit"))

    faults: List[Fault] = scheduler.diagnostics.faults
    if not faults:
        success(f"  {_CHECK} No problems found")
        return

    styles = {Severity.ERROR: "error", Severity.WARN: "warn", Severity.INFO: "info"}
    for fault in faults:
        click.echo(f"  {badge(fault.code, style=styles[fault.severity])} {fault.message}")

    click.echo()
    if scheduler.diagnostics.has_errors():
        error(f"  {_CROSS} {len(faults)} problem(s) found")
        sys.exit(1)
    warning(f"  {len(faults)} warning(s)")


@cli.command('graph')
@click.argument('manifest', type=click.Path(exists=True, dir_okay=False))
@click.option('--dot', is_flag=True, help='Output Graphviz DOT')
@click.pass_context
def graph_cmd(ctx, manifest: str, dot: bool):
    """
    Show the dependency graph of a manifest.

    Examples:
      modulary graph modules.yaml
      modulary graph modules.yaml --dot | dot -Tsvg > graph.svg
    """
    scheduler = _load_scheduler(ctx, manifest)
    graph = scheduler.graph

    if dot:
        click.echo(graph.to_dot())
        return

    queued = set(scheduler.get_queue())
    for module in graph.modules():
        marker = click.style(" (enqueued)", fg="green") if module.id in queued else ""
        click.echo(f"{bold(module.id)}{marker}")
        for dep in module.dependencies:
            label = f"{_ARROW} {dep.target_id}"
            if not dep.is_static:
                label += " (dynamic)"
            if dep.target_id not in graph:
                label += " [missing]"
                bullet(label, fg="red")
            else:
                bullet(label)

    if not len(graph):
        info("  No modules registered")


def main():
    """Main CLI entry point."""
    cli(obj={})


if __name__ == '__main__':
    main()
