import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict

from sqlalchemy.exc import SQLAlchemyError

from . import __version__
from .archive import CaseArchive
from .cases import PROBLEM_LABELS, generate_case
from .config import Settings
from .env import load_env
from .errors import CaseNotFound, InvalidRequest, MentorMatchError
from .logger import get_logger
from .mentors import MentorRepository
from .oracle import LLMRelevanceOracle
from .qwen import QwenClient
from .selector import match_mentors

logger = get_logger()

EXIT_ERROR = 1
EXIT_INVALID = 2
EXIT_NOT_FOUND = 4


def emit(payload: Dict[str, Any]) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def build_client(settings: Settings) -> QwenClient:
    return QwenClient(
        api_key=settings.require_api_key(),
        model=settings.model,
        endpoint=settings.endpoint,
        timeout=settings.timeout_s,
    )


def load_repository(settings: Settings) -> MentorRepository:
    repo = MentorRepository(settings.teachers_file)
    repo.load()
    return repo


def cmd_mentors(args: argparse.Namespace, settings: Settings) -> int:
    repo = load_repository(settings)
    mentors = [m.to_dict() for m in repo.snapshot()]
    emit({"success": True, "teachers": mentors, "count": len(mentors)})
    return 0


def cmd_match(args: argparse.Namespace, settings: Settings) -> int:
    repo = load_repository(settings)
    oracle = None
    if not args.no_oracle:
        if settings.api_key:
            oracle = LLMRelevanceOracle(build_client(settings))
        else:
            logger.warning("DashScope API key not configured, matching without oracle")
    results = match_mentors(args.direction, args.role, repo.snapshot(), oracle=oracle)
    emit({"success": True, "teachers": [c.to_dict() for c in results], "count": len(results)})
    return 0


def cmd_generate_case(args: argparse.Namespace, settings: Settings) -> int:
    repo = load_repository(settings)
    mentor = repo.find(args.mentor)
    if mentor is None:
        raise InvalidRequest(f"Unknown mentor: {args.mentor}")

    record = generate_case(
        build_client(settings),
        mentor,
        direction=args.direction,
        role=args.role or "",
        customer_problems=args.problem,
        highlights=args.highlights or "",
        core_content=args.core_content or "",
        temperature=settings.temperature,
        max_tokens=settings.max_tokens,
    )

    if not args.no_save:
        try:
            CaseArchive(settings.cases_db).save(record)
        except (MentorMatchError, SQLAlchemyError, OSError) as e:
            # The generated text is still returned when archiving fails.
            logger.error("Failed to archive generated case", case_id=record["id"], error=str(e))

    emit({
        "success": True,
        "case": record["case"],
        "caseId": record["id"],
        "timestamp": record["timestamp"],
    })
    return 0


def cmd_save_case(args: argparse.Namespace, settings: Settings) -> int:
    input_path = Path(args.input)
    if not input_path.exists():
        raise InvalidRequest(f"Input file not found: {input_path}")
    with input_path.open("r", encoding="utf-8") as f:
        try:
            record = json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidRequest(f"Invalid JSON in {input_path}: {e}")
    if not isinstance(record, dict):
        raise InvalidRequest("Case input must be a JSON object")
    # The archive stamps the save time, matching an explicit save.
    record.pop("timestamp", None)
    case_id, timestamp = CaseArchive(settings.cases_db).save(record)
    emit({"success": True, "message": "案例保存成功", "caseId": case_id, "timestamp": timestamp})
    return 0


def cmd_cases_list(args: argparse.Namespace, settings: Settings) -> int:
    cases = CaseArchive(settings.cases_db).list()
    emit({"success": True, "cases": cases, "count": len(cases)})
    return 0


def cmd_cases_show(args: argparse.Namespace, settings: Settings) -> int:
    emit({"success": True, "case": CaseArchive(settings.cases_db).get(args.id)})
    return 0


def cmd_cases_delete(args: argparse.Namespace, settings: Settings) -> int:
    CaseArchive(settings.cases_db).delete(args.id)
    emit({"success": True, "message": "案例删除成功"})
    return 0


def cmd_health(args: argparse.Namespace, settings: Settings) -> int:
    repo = load_repository(settings)
    emit({
        "success": True,
        "message": "服务运行正常",
        "teachersCount": repo.count,
        "config": settings.public_view(),
    })
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mentormatch", description="MentorMatch: mentor short lists and case documents")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--root", help="Project root holding config.json and data (default: current directory)")

    subparsers = parser.add_subparsers(dest="command")

    men = subparsers.add_parser("mentors", help="List all mentors in the pool")
    men.set_defaults(func=cmd_mentors)

    mat = subparsers.add_parser("match", help="Recommend five mentors for a direction and optional role")
    mat.add_argument("--direction", required=True, help="Career direction, e.g. 金融")
    mat.add_argument("--role", help="Target role, e.g. 分析师")
    mat.add_argument("--no-oracle", action="store_true", help="Skip the relevance oracle (exact + backfill only)")
    mat.set_defaults(func=cmd_match)

    gen = subparsers.add_parser("generate-case", help="Generate a case document for a mentor")
    gen.add_argument("--mentor", required=True, help="Mentor name")
    gen.add_argument("--direction", default="", help="Customer career direction")
    gen.add_argument("--role", help="Customer target role")
    gen.add_argument(
        "--problem",
        action="append",
        default=[],
        help="Customer problem; repeatable. Codes: "
        + ", ".join(f"{k} ({v})" for k, v in PROBLEM_LABELS.items())
        + "; other text is used verbatim",
    )
    gen.add_argument("--highlights", help="Content to emphasise")
    gen.add_argument("--core-content", help="Core content note stored with the case")
    gen.add_argument("--no-save", action="store_true", help="Do not archive the generated case")
    gen.set_defaults(func=cmd_generate_case)

    sav = subparsers.add_parser("save-case", help="Archive an edited case from a JSON file")
    sav.add_argument("--input", required=True, help="Path to case JSON (must contain 'case')")
    sav.set_defaults(func=cmd_save_case)

    cas = subparsers.add_parser("cases", help="Browse archived cases")
    cas_sub = cas.add_subparsers(dest="cases_command", required=True)
    cas_list = cas_sub.add_parser("list", help="List cases, newest first")
    cas_list.set_defaults(func=cmd_cases_list)
    cas_show = cas_sub.add_parser("show", help="Show one case")
    cas_show.add_argument("id")
    cas_show.set_defaults(func=cmd_cases_show)
    cas_del = cas_sub.add_parser("delete", help="Delete one case")
    cas_del.add_argument("id")
    cas_del.set_defaults(func=cmd_cases_delete)

    hl = subparsers.add_parser("health", help="Show pool size and effective configuration")
    hl.set_defaults(func=cmd_health)

    return parser


def run(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return 0

    if not hasattr(args, "func"):
        parser.print_help()
        return 0

    root = Path(args.root) if args.root else Path.cwd()
    load_env(root)
    settings = Settings.load(root)
    logger.configure(level=settings.log_level, log_dir=settings.log_dir)

    try:
        code = args.func(args, settings)
        logger.log_metrics_summary()
        return code
    except InvalidRequest as e:
        emit({"success": False, "error": str(e)})
        return EXIT_INVALID
    except CaseNotFound as e:
        emit({"success": False, "error": "案例不存在", "id": e.case_id})
        return EXIT_NOT_FOUND
    except MentorMatchError as e:
        logger.error("Command failed", command=args.command, error=str(e))
        emit({"success": False, "error": str(e)})
        return EXIT_ERROR


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
