"""CLI entry point for govmind."""

import argparse
import asyncio
import json
import re
import sys
from datetime import datetime
from pathlib import Path

import yaml
from rich.console import Console
from rich.markdown import Markdown

from .config import Settings
from .copilot import ProposalCopilot, Result
from .errors import ConfigurationError, ValidationError
from .models import MockGateway
from .render import analysis_markdown, debate_markdown, draft_markdown
from .schema import Committee, ProposalStatus
from .store import ProposalStore


def get_sessions_dir(settings: Settings) -> Path:
    """Get the sessions directory, creating if needed."""
    settings.sessions_dir.mkdir(parents=True, exist_ok=True)
    return settings.sessions_dir


def slugify(text: str, max_len: int = 40) -> str:
    """Convert text to a filename-safe slug."""
    text = text.lower()
    text = re.sub(r'[^\w\s-]', '', text)
    text = re.sub(r'[\s_-]+', '-', text)
    return text[:max_len].strip('-')


def load_committees(path: str) -> list[Committee]:
    """Read committees from a YAML (or JSON) file: a list of {id, type, responsibilities}."""
    try:
        data = yaml.safe_load(Path(path).read_text())
    except (OSError, yaml.YAMLError) as e:
        raise ValidationError(f"Cannot read committees from {path}: {e}") from e
    if isinstance(data, dict):
        data = data.get("committees", [])
    if not isinstance(data, list):
        raise ValidationError(f"{path}: expected a list of committees")
    try:
        return [Committee.from_dict(item) for item in data]
    except (KeyError, TypeError, AttributeError) as e:
        raise ValidationError(f"{path}: every committee needs an 'id' ({e})") from e


def format_output(mode: str, heading: str, payload: dict, markdown: str, fmt: str) -> str:
    if fmt == "json":
        return json.dumps({"mode": mode, "input": heading, "result": payload}, indent=2, ensure_ascii=False)
    if fmt == "yaml":
        return yaml.dump(
            {"mode": mode, "input": heading, "result": payload},
            allow_unicode=True, default_flow_style=False, sort_keys=False,
        )
    return markdown


def save_session(settings: Settings, mode: str, heading: str, transcript: str) -> Path:
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    path = get_sessions_dir(settings) / f"{timestamp}-{mode}-{slugify(heading)}.md"
    path.write_text(f"""# GovMind {mode.capitalize()} Session

**Input:** {heading}
**Date:** {datetime.now().strftime("%Y-%m-%d %H:%M")}

---

{transcript}
""")
    return path


def log_history(settings: Settings, mode: str, heading: str, session_path: Path | None, ok: bool) -> None:
    history_file = get_sessions_dir(settings).parent / "history.jsonl"
    entry = {
        "timestamp": datetime.now().isoformat(),
        "mode": mode,
        "input": heading[:200],
        "ok": ok,
        "session": str(session_path) if session_path else None,
    }
    with open(history_file, "a") as f:
        f.write(json.dumps(entry) + "\n")


async def _analyze(copilot: ProposalCopilot, args) -> Result:
    proposal_id = await copilot.submit_and_analyze(args.title, args.description, args.id)
    if not args.quiet:
        print(f"(analyzing proposal {proposal_id}...)", flush=True)
    record = await copilot.wait_for_analysis(proposal_id, interval=0.2)
    if record is not None and record.status is ProposalStatus.FAILED:
        return Result.failure("failed", f"Analysis failed for {proposal_id}; run again to retry")
    return copilot.get_analysis(proposal_id)


async def _run(args, copilot: ProposalCopilot) -> tuple[str, Result]:
    if args.command == "analyze":
        return args.title, await _analyze(copilot, args)
    if args.command == "draft":
        if args.committees:
            committees = load_committees(args.committees)
            return args.idea, await copilot.draft_proposal_with_committees(args.idea, committees)
        return args.idea, await copilot.draft_proposal(args.idea)
    return args.title, await copilot.run_debate_simulation(args.title, args.content)


def _render(command: str, value) -> str:
    if command == "analyze":
        return analysis_markdown(value)
    if command == "draft":
        return draft_markdown(value)
    return debate_markdown(value)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="govmind",
        description="GovMind - AI analysis, drafting and debate simulation for DAO proposals",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  govmind analyze "Fund audit" "Allocate 50k USDC to audit the v2 contracts"
  govmind analyze "Fund audit" "..." --id dao42-7 --format json
  govmind draft "Run a hackathon for new contributors" --committees committees.yaml
  govmind debate "Fund audit" "Allocate 50k USDC to audit the v2 contracts"
  govmind analyze "Test" "Offline run without an API key" --mock
        """,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--mock", action="store_true", help="Use the offline mock backend")
    common.add_argument(
        "--format", "-f",
        choices=["json", "yaml", "prose"],
        default="prose",
        help="Output format: json (machine-parseable), yaml (structured), prose (default)",
    )
    common.add_argument("--output", "-o", help="Save output to file")
    common.add_argument("--no-save", action="store_true", help="Don't auto-save to ~/.govmind/sessions/")
    common.add_argument("--quiet", action="store_true", help="Suppress progress output")

    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", parents=[common], help="Analyze a proposal")
    analyze.add_argument("title")
    analyze.add_argument("description")
    analyze.add_argument("--id", help="Composite proposal id (<dao-id>-<proposal-id>)")

    draft = sub.add_parser("draft", parents=[common], help="Draft a proposal from an idea")
    draft.add_argument("idea")
    draft.add_argument("--committees", help="YAML file of committees to route the draft to")

    debate = sub.add_parser("debate", parents=[common], help="Simulate a four-persona debate")
    debate.add_argument("title")
    debate.add_argument("content")

    sub.add_parser("sessions", help="List recent sessions and exit")
    return parser


def main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = Settings.from_env()

    if args.command == "sessions":
        sessions_dir = get_sessions_dir(settings)
        sessions = sorted(sessions_dir.glob("*.md"), key=lambda p: p.stat().st_mtime, reverse=True)
        if not sessions:
            print("No sessions found.")
        else:
            print(f"Sessions in {sessions_dir}:\n")
            for s in sessions[:20]:
                mtime = datetime.fromtimestamp(s.stat().st_mtime).strftime("%Y-%m-%d %H:%M")
                print(f"  {mtime}  {s.name}")
            if len(sessions) > 20:
                print(f"\n  ... and {len(sessions) - 20} more")
        sys.exit(0)

    try:
        gateway = MockGateway() if args.mock else settings.gateway()
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    copilot = ProposalCopilot(ProposalStore(gateway), gateway)

    try:
        heading, result = asyncio.run(_run(args, copilot))
    except ValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if not result.ok:
        print(f"Error ({result.kind}): {result.error}", file=sys.stderr)
        log_history(settings, args.command, heading, None, ok=False)
        sys.exit(1)

    markdown = _render(args.command, result.value)
    output = format_output(args.command, heading, result.value.to_dict(), markdown, args.format)

    if args.format == "prose" and not args.quiet:
        Console().print(Markdown(markdown))
    else:
        print(output)

    if args.output:
        Path(args.output).write_text(output)
        if not args.quiet:
            print(f"Output saved to: {args.output}")

    session_path = None
    if not args.no_save:
        session_path = save_session(settings, args.command, heading, markdown)
        if not args.quiet:
            print(f"Session saved to: {session_path}")

    log_history(settings, args.command, heading, session_path, ok=True)


if __name__ == "__main__":
    main()
