"""CLI for storyanchor - keep storyboard shots linked to script blocks."""

import argparse
import json
import logging
import platform
import subprocess
import sys
from pathlib import Path
from typing import Any

from . import __version__
from .adapters.yaml_codec import anchor_to_data, shot_to_data
from .core.capture import capture_anchor
from .core.duration import shot_duration_ms
from .core.locator import all_blocks_in_order
from .core.relocator import relocate
from .core.validation import find_unlinked
from .lint import lint_shots
from .runtime import build_runtime
from .storyboard import (
    add_shot,
    find_shot,
    link_shot,
    remove_shot,
    reorder_shots,
    set_duration,
    sorted_shots,
    unlink_shot,
)


def _version_string() -> str:
    try:
        commit = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            capture_output=True,
            text=True,
            cwd=Path(__file__).parent,
        ).stdout.strip()
    except OSError:
        commit = ""
    return (
        f"storyanchor {__version__}\n"
        f"python {platform.python_version()}\n"
        f"platform {platform.platform()}\n"
        f"commit {commit or 'unknown'}"
    )


def _preview(text: str, width: int = 60) -> str:
    text = " ".join(text.split())
    return text if len(text) <= width else text[: width - 1] + "…"


def cmd_blocks(args: argparse.Namespace, rt: Any) -> int:
    """List the blocks of a document in document order."""
    document = rt.documents.read(args.document)
    if document is None:
        print(f"Document {args.document} not found", file=sys.stderr)
        return 1

    blocks = all_blocks_in_order(document)
    if args.json:
        print(json.dumps([{"blockId": b.block_id, "text": b.text} for b in blocks], indent=2))
    else:
        for b in blocks:
            print(f"{b.block_id}\t{_preview(b.text)}")
    return 0


def cmd_capture(args: argparse.Namespace, rt: Any) -> int:
    """Print the anchor a block would be linked with."""
    document = rt.documents.read(args.document)
    if document is None:
        print(f"Document {args.document} not found", file=sys.stderr)
        return 1

    anchor = capture_anchor(document, args.block, args.document, rt.config.anchoring)
    if anchor is None:
        print(f"Block {args.block} not found in document {args.document}", file=sys.stderr)
        return 1

    print(json.dumps(anchor_to_data(anchor), indent=2, ensure_ascii=False))
    return 0


def cmd_relocate(args: argparse.Namespace, rt: Any) -> int:
    """Show where a shot's anchor resolves now, without saving anything."""
    shot = find_shot(rt.load_shots(), args.shot)
    if shot.linked_block is None:
        print(f"Shot {shot.id} is not linked", file=sys.stderr)
        return 1

    anchor = shot.linked_block
    document = rt.documents.read(anchor.document_id)
    if document is None:
        print(f"Document {anchor.document_id} not found", file=sys.stderr)
        return 1

    result = relocate(document, anchor, rt.config.anchoring)
    if args.json:
        print(json.dumps({
            "shot": shot.id,
            "block": result.block_id,
            "strategy": result.strategy.value,
            "score": result.score,
            "text_drifted": result.text_drifted,
        }, indent=2))
    elif result.found:
        line = f"{anchor.block_id} -> {result.block_id} ({result.strategy.value})"
        if result.score is not None:
            line += f" score={result.score:.2f}"
        if result.text_drifted:
            line += " [text changed]"
        print(line)
    else:
        print(f"{anchor.block_id} -> (not found)")
    return 0 if result.found else 1


def cmd_validate(args: argparse.Namespace, rt: Any) -> int:
    """Report shots whose anchors no longer resolve."""
    unlinked = find_unlinked(rt.load_shots(), rt.load_documents(), rt.config.anchoring)
    ids = sorted(unlinked)

    if args.json:
        print(json.dumps({"unlinked": ids}, indent=2))
    elif ids:
        for sid in ids:
            print(sid)
    elif not args.quiet:
        print("All linked shots resolve")
    return 1 if ids else 0


def cmd_repair(args: argparse.Namespace, rt: Any) -> int:
    """Relink shots after document edits and save the storyboard."""
    report = rt.repair(save=not args.dry_run)

    if args.json:
        print(json.dumps({
            "outcomes": [o.to_dict() for o in report.outcomes],
            "changed": sorted(report.changed),
            "unlinked": sorted(report.unlinked),
            "saved": bool(report.changed) and not args.dry_run,
        }, indent=2))
        return 0

    if not args.quiet:
        for o in report.outcomes:
            if o.document_missing:
                print(f"✗ {o.shot_id}: document {o.document_id} not found")
            elif not o.resolved:
                print(f"✗ {o.shot_id}: block {o.old_block_id} not found")
            elif o.new_block_id != o.old_block_id:
                print(f"~ {o.shot_id}: {o.old_block_id} -> {o.new_block_id} ({o.strategy.value})")
            else:
                print(f"✓ {o.shot_id}: {o.old_block_id}")
        verb = "Would update" if args.dry_run else "Updated"
        print(f"\n{verb} {len(report.changed)} shot(s); {len(report.unlinked)} unlinked")
    return 0


def cmd_shots(args: argparse.Namespace, rt: Any) -> int:
    """List shots in playback order."""
    shots = sorted_shots(rt.load_shots())

    if args.json:
        print(json.dumps([shot_to_data(s) for s in shots], indent=2, ensure_ascii=False))
        return 0

    for shot in shots:
        if shot.linked_block is None:
            status = "-"
        elif shot.is_unlinked:
            status = f"unlinked ({shot.linked_block.document_id}#{shot.linked_block.block_id})"
        else:
            status = f"{shot.linked_block.document_id}#{shot.linked_block.block_id}"
        print(f"{shot.order}\t{shot.id}\t{shot.asset_id}\t{status}")
    return 0


def cmd_add_shot(args: argparse.Namespace, rt: Any) -> int:
    """Append a new shot for an asset."""
    shot_id = rt.idgen.new_id()
    rt.storyboard.save(add_shot(rt.load_shots(), args.asset, shot_id))
    if not args.quiet:
        print(shot_id)
    return 0


def cmd_link(args: argparse.Namespace, rt: Any) -> int:
    """Link a shot to a document block."""
    shots = rt.load_shots()
    find_shot(shots, args.shot)

    document = rt.documents.read(args.document)
    if document is None:
        print(f"Document {args.document} not found", file=sys.stderr)
        return 1

    anchor = capture_anchor(document, args.block, args.document, rt.config.anchoring)
    if anchor is None:
        print(f"Block {args.block} not found in document {args.document}", file=sys.stderr)
        return 1

    rt.storyboard.save(link_shot(shots, args.shot, anchor))
    if not args.quiet:
        print(f"Linked {args.shot} to {args.document}#{args.block}")
    return 0


def cmd_unlink(args: argparse.Namespace, rt: Any) -> int:
    """Remove a shot's link."""
    rt.storyboard.save(unlink_shot(rt.load_shots(), args.shot))
    if not args.quiet:
        print(f"Unlinked {args.shot}")
    return 0


def cmd_rm(args: argparse.Namespace, rt: Any) -> int:
    """Delete a shot."""
    shots = rt.load_shots()
    find_shot(shots, args.shot)

    if not args.yes:
        response = input(f"Delete shot {args.shot}? [y/N] ")
        if response.lower() != "y":
            print("Cancelled")
            return 1

    rt.storyboard.save(remove_shot(shots, args.shot))
    if not args.quiet:
        print(f"Deleted {args.shot}")
    return 0


def cmd_duration(args: argparse.Namespace, rt: Any) -> int:
    """Print playback durations in milliseconds, or set a shot's override."""
    if args.set is not None or args.clear:
        if not args.shot:
            print("A shot ID is required with --set or --clear", file=sys.stderr)
            return 1
        rt.storyboard.save(set_duration(rt.load_shots(), args.shot, args.set))

    shots = sorted_shots(rt.load_shots())
    if args.shot:
        shots = [find_shot(shots, args.shot)]
    documents = rt.load_documents()

    durations = {s.id: int(shot_duration_ms(s, documents, rt.config.duration)) for s in shots}
    if args.json:
        print(json.dumps({"durations": durations, "total_ms": sum(durations.values())}, indent=2))
    else:
        for sid, ms in durations.items():
            print(f"{sid}\t{ms}")
        if not args.shot and not args.quiet:
            print(f"total\t{sum(durations.values())}")
    return 0


def cmd_reorder(args: argparse.Namespace, rt: Any) -> int:
    """Set playback order from a list of shot IDs."""
    shots = reorder_shots(rt.load_shots(), args.shots)
    rt.storyboard.save(shots)
    if not args.quiet:
        for shot in shots:
            print(f"{shot.order}\t{shot.id}")
    return 0


def cmd_lint(
args: argparse.Namespace, rt: Any) -> int:
    """Check every link against the current documents."""
    findings = lint_shots(rt.load_shots(), rt.load_documents(), rt.config.anchoring)

    if args.json:
        print(json.dumps([
            {"severity": f.severity, "message": f.message, "shot": f.shot_id}
            for f in findings
        ], indent=2))
    else:
        for f in findings:
            print(f"[{f.severity}] {f.shot_id}: {f.message}")
        if not findings and not args.quiet:
            print("✓ No issues found")

    return 1 if any(f.severity == "error" for f in findings) else 0


def cmd_watch(args: argparse.Namespace, rt: Any) -> int:
    """Watch documents and repair shots after every edit."""
    from .watch import watch_documents

    return watch_documents(
        rt,
        debounce_ms=args.debounce_ms,
        quiet=args.quiet,
        json_output=args.json,
    )


def cmd_serve(args: argparse.Namespace, rt: Any) -> int:
    """Start local JSON API server."""
    try:
        import uvicorn

        from .api.app import create_app, generate_token
    except ImportError as e:
        print(
            "Error: API dependencies not installed. "
            "Install with: pip install storyanchor[api]",
            file=sys.stderr
        )
        print(f"Details: {e}", file=sys.stderr)
        return 1

    token = None
    if args.token == "auto":
        token = generate_token()
        print(f"Generated bearer token: {token}")
        print(f"Use in requests: Authorization: Bearer {token}")
    elif args.token == "none":
        print("Warning: Running without authentication. Only use in trusted environments.")
    else:
        token = args.token

    app = create_app(rt, token=token, enable_cors=args.cors)

    print(f"Starting server on http://{args.host}:{args.port}")
    uvicorn.run(app, host=args.host, port=args.port, log_level="info")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="storyanchor", description="Storyboard block anchoring CLI"
    )
    parser.add_argument(
        "--version", action="version", version=_version_string()
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config file (default: search cwd/storyanchor.toml, project/storyanchor.toml)",
    )
    parser.add_argument(
        "--project",
        type=Path,
        default=None,
        help="Path to project directory (overrides config)",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Minimize output"
    )
    parser.add_argument(
        "--json", action="store_true", help="Machine-readable output"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Debug logging on stderr"
    )

    subparsers = parser.add_subparsers(dest="cmd", required=True)

    parser_blocks = subparsers.add_parser("blocks", help="List blocks of a document")
    parser_blocks.add_argument("document", help="Document ID")

    parser_capture = subparsers.add_parser("capture", help="Print the anchor for a block")
    parser_capture.add_argument("document", help="Document ID")
    parser_capture.add_argument("block", help="Block ID")

    parser_relocate = subparsers.add_parser("relocate", help="Resolve one shot without saving")
    parser_relocate.add_argument("shot", help="Shot ID")

    subparsers.add_parser("validate", help="List shots whose links no longer resolve")

    parser_repair = subparsers.add_parser("repair", help="Relink shots and save")
    parser_repair.add_argument(
        "--dry-run", action="store_true", help="Report without writing"
    )

    subparsers.add_parser("shots", help="List shots in playback order")

    parser_add = subparsers.add_parser("add-shot", help="Append a shot for an asset")
    parser_add.add_argument("asset", help="Asset ID")

    parser_link = subparsers.add_parser("link", help="Link a shot to a block")
    parser_link.add_argument("shot", help="Shot ID")
    parser_link.add_argument("document", help="Document ID")
    parser_link.add_argument("block", help="Block ID")

    parser_unlink = subparsers.add_parser("unlink", help="Remove a shot's link")
    parser_unlink.add_argument("shot", help="Shot ID")

    parser_rm = subparsers.add_parser("rm", help="Delete a shot")
    parser_rm.add_argument("shot", help="Shot ID")
    parser_rm.add_argument("--yes", action="store_true", help="Skip confirmation")

    parser_duration = subparsers.add_parser("duration", help="Print shot durations")
    parser_duration.add_argument("shot", nargs="?", default=None, help="Shot ID")
    duration_override = parser_duration.add_mutually_exclusive_group()
    duration_override.add_argument(
        "--set", type=int, default=None, metavar="MS",
        help="Manual duration override in milliseconds"
    )
    duration_override.add_argument(
        "--clear", action="store_true", help="Remove the manual override"
    )

    parser_reorder = subparsers.add_parser("reorder", help="Set playback order")
    parser_reorder.add_argument("shots", nargs="+", help="Shot IDs in the new order")

    subparsers.add_parser("lint", help="Check links against documents")

    parser_watch = subparsers.add_parser("watch", help="Repair shots as documents change")
    parser_watch.add_argument(
        "--debounce-ms", type=int, default=150,
        help="Debounce window in milliseconds (default: 150)"
    )

    parser_serve = subparsers.add_parser("serve", help="Start local JSON API server")
    parser_serve.add_argument(
        "--host", default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)"
    )
    parser_serve.add_argument(
        "--port", type=int, default=8766,
        help="Port to bind to (default: 8766)"
    )
    parser_serve.add_argument(
        "--token", default="auto",
        help="Bearer token (auto|<string>|none, default: auto)"
    )
    parser_serve.add_argument(
        "--cors", action="store_true",
        help="Enable CORS (default: false)"
    )

    return parser


def main() -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args()

    rt = build_runtime(project_path=args.project, config_path=args.config)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else rt.config.log.level,
        format="%(levelname)s %(name)s: %(message)s",
    )

    handlers = {
        "blocks": cmd_blocks,
        "capture": cmd_capture,
        "relocate": cmd_relocate,
        "validate": cmd_validate,
        "repair": cmd_repair,
        "shots": cmd_shots,
        "add-shot": cmd_add_shot,
        "link": cmd_link,
        "unlink": cmd_unlink,
        "rm": cmd_rm,
        "duration": cmd_duration,
        "reorder": cmd_reorder,
        "lint": cmd_lint,
        "watch": cmd_watch,
        "serve": cmd_serve,
    }

    handler = handlers.get(args.cmd)
    if handler:
        try:
            exit_code = handler(args, rt)
            sys.exit(exit_code)
        except Exception as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        print(f"Unknown command: {args.cmd}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
