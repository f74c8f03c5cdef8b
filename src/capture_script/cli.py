from __future__ import annotations

import argparse
import logging

from rich import print
from rich.markup import escape
from rich.table import Table

from capture_script.config import CatalogError, load_control_catalog
from capture_script.log import compile_timer, setup_logging
from capture_script.script import CaptureScript
from capture_script.version import get_version_info


log = logging.getLogger(__name__)


def _controls_table(title: str, script: CaptureScript, frames: list[int]) -> Table:
    t = Table(title=title)
    t.add_column("frame", justify="right")
    t.add_column("control")
    t.add_column("type")
    t.add_column("value")
    for frame in frames:
        ctrls = script.frame_controls(frame)
        for key, value in ctrls.items():
            cid = ctrls.control(key)
            t.add_row(str(frame), cid.name, cid.type.value, str(value))
    return t


def _load(args: argparse.Namespace) -> CaptureScript | None:
    try:
        camera = load_control_catalog(args.controls)
    except CatalogError as e:
        print(f"[red]{escape(str(e))}[/red]")
        return None

    with compile_timer(args.script, log) as t:
        t.script = CaptureScript(camera, args.script)
    return t.script


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="capture-script")
    p.add_argument(
        "--log-level",
        default=None,
        help="CRITICAL|ERROR|WARNING|INFO|DEBUG (or env CAPTURE_SCRIPT_LOG_LEVEL; default WARNING)",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    p_check = sub.add_parser("check", help="Compile a capture script and summarize it")
    p_check.add_argument("script")
    p_check.add_argument("--controls", required=True, help="Control catalog (YAML)")

    p_show = sub.add_parser("show", help="Print the controls applied at one frame")
    p_show.add_argument("script")
    p_show.add_argument("--controls", required=True, help="Control catalog (YAML)")
    p_show.add_argument("--frame", type=int, required=True)

    sub.add_parser("version", help="Print version information")

    args = p.parse_args(argv)

    setup_logging(args.log_level)

    if args.cmd == "version":
        v = get_version_info()
        print(f"capture-script {v.package_version} (Python {v.python}, {v.platform}, yaml: {v.yaml_backend})")
        return 0

    script = _load(args)
    if script is None:
        return 1
    if not script.valid:
        print(f"[red]Invalid capture script:[/red] {escape(str(script.error))}")
        return 1

    if args.cmd == "check":
        frames = script.frames()
        print(f"[bold]Capture script:[/bold] {escape(script.file_name)}")
        print(f"[bold]Frames scripted:[/bold] {len(frames)}")
        if frames:
            print(_controls_table("Scripted controls", script, frames))
        if script.issues:
            print(f"\n[yellow]Values stored as empty ({len(script.issues)}):[/yellow]")
            for issue in script.issues:
                print(f" - {escape(issue.message)}")
        return 0

    if args.frame < 0:
        print("[red]--frame must be non-negative[/red]")
        return 2
    ctrls = script.frame_controls(args.frame)
    if not ctrls:
        print(f"Frame {args.frame}: no scripted controls")
        return 0
    print(_controls_table(f"Frame {args.frame}", script, [args.frame]))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
