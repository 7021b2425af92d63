import argparse
import getpass
import logging
import sys

from api.config import ADMIN_EMAIL, ADMIN_PASSWORD, ADMIN_USERNAME, API_BASE_URL, GATEWAY_TIMEOUT_SECONDS
from core.client import ApiClient
from core.errors import ExamError, GatewayError, ValidationError
from core.logging_setup import setup_console_logging
from core.session import ExamSession
from models import SessionStatus

log = logging.getLogger(__name__)

HELP = (
    "Commands: <n> choose option n | c clear | r mark for review | "
    "n/p next/previous | g <k> go to question k | l list | s submit | q quit"
)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Quiz platform command line tools")
    sub = parser.add_subparsers(dest="command", required=True)

    seed = sub.add_parser("seed-admin", help="Create the administrator account")
    seed.add_argument("--username", default=ADMIN_USERNAME)
    seed.add_argument("--email", default=ADMIN_EMAIL)
    seed.add_argument("--password", default=ADMIN_PASSWORD)

    take = sub.add_parser("take", help="Take a test in the terminal")
    take.add_argument("test_id", nargs="?", help="Test to take; omit to pick from a list")
    take.add_argument("--url", default=API_BASE_URL, help="Platform base URL")
    take.add_argument("--username", required=True)
    take.add_argument("--password", help="Prompted for when omitted")
    take.add_argument(
        "--timeout",
        type=float,
        default=GATEWAY_TIMEOUT_SECONDS,
        help="HTTP timeout in seconds",
    )
    return parser.parse_args(argv)


def seed_admin_command(args: argparse.Namespace) -> int:
    from api.database import SessionLocal, init_db
    from api.services.auth_service import seed_admin

    init_db()
    db = SessionLocal()
    try:
        admin = seed_admin(db, args.username, args.email, args.password)
    finally:
        db.close()
    if admin is None:
        print("An admin account already exists")
    else:
        print(f"Created admin {admin.username}")
    return 0


def _format_time(seconds: int) -> str:
    minutes, seconds = divmod(max(seconds, 0), 60)
    return f"{minutes:02d}:{seconds:02d}"


def _show_question(session: ExamSession) -> None:
    index = session.current_index
    question = session.current_question()
    selected = session.selected_option(index)
    marker = " [review]" if session.is_marked_for_review(index) else ""
    print()
    print(
        f"Question {index + 1}/{session.total_questions}{marker}"
        f"  time left {_format_time(session.remaining_seconds())}"
    )
    print(question.question)
    for position, option in enumerate(question.options):
        chosen = "*" if position == selected else " "
        print(f" {chosen} {position + 1}. {option}")


def _show_navigation(session: ExamSession) -> None:
    for item in session.navigation_status():
        current = ">" if item["current"] else " "
        print(f"{current} {item['index'] + 1:3d}  {item['status']}")
    print(f"Answered {session.answered_count()}, unanswered {session.unanswered_count()}")


def _choose_test(client: ApiClient) -> str | None:
    tests = client.list_tests()
    if not tests:
        print("No tests are available")
        return None
    for position, item in enumerate(tests, start=1):
        print(
            f"{position}. {item['title']} ({item.get('subject') or '-'}, "
            f"{item['questionCount']} questions, {item['duration']} min)"
        )
    raw = input("Test number: ").strip()
    if not raw.isdigit() or not 1 <= int(raw) <= len(tests):
        print("No such test")
        return None
    return str(tests[int(raw) - 1]["id"])


def _submit(session: ExamSession) -> bool:
    """Return True once the session has ended."""
    unanswered = session.unanswered_count()
    if unanswered:
        confirm = input(f"{unanswered} question(s) unanswered. Submit anyway? [y/N] ")
        if confirm.strip().lower() != "y":
            return False
    try:
        session.submit()
    except GatewayError as exc:
        print(f"Submission failed: {exc.message}")
        if exc.retryable:
            print("Your answers are kept; try submitting again.")
        return session.finished
    return session.finished


def _report(session: ExamSession) -> int:
    if session.status is SessionStatus.SUBMITTED and session.attempt is not None:
        attempt = session.attempt
        print(
            f"Submitted: {attempt.score}/{attempt.total} "
            f"({attempt.percent_correct:.0f}%)"
        )
        return 0
    if session.last_error is not None:
        print(f"Attempt not saved: {session.last_error.message}")
    return 1


def run_session(session: ExamSession) -> int:
    print(HELP)
    while not session.finished:
        if session.status is SessionStatus.RUNNING and not session.time_expired:
            _show_question(session)
        elif session.status is SessionStatus.RUNNING:
            print("Time is up. Press s to submit your answers.")

        try:
            raw = input("> ").strip().lower()
        except EOFError:
            raw = "q"
        if session.finished:
            break

        try:
            if raw.isdigit():
                session.answer(session.current_index, int(raw) - 1)
                session.next_question()
            elif raw == "c":
                session.clear_answer(session.current_index)
            elif raw == "r":
                session.toggle_review(session.current_index)
            elif raw == "n":
                if session.next_question() is None:
                    print("This is the last question")
            elif raw == "p":
                if session.previous_question() is None:
                    print("This is the first question")
            elif raw.startswith("g"):
                session.navigate(int(raw[1:].strip()) - 1)
            elif raw == "l":
                _show_navigation(session)
            elif raw == "s":
                if _submit(session):
                    break
            elif raw == "q":
                session.abandon()
                print("Session abandoned; nothing was saved")
                return 1
            else:
                print(HELP)
        except ValueError:
            print(HELP)
        except ValidationError as exc:
            print(exc)

    return _report(session)


def take_command(args: argparse.Namespace) -> int:
    password = args.password or getpass.getpass("Password: ")
    client = ApiClient(args.url, timeout=args.timeout)
    try:
        user = client.login(args.username, password)
        test_id = args.test_id or _choose_test(client)
        if test_id is None:
            return 1
        test = client.get_test(test_id)
    except ExamError as exc:
        print(f"Error: {exc}")
        return 1

    session = ExamSession(client.gateway(), str(user["id"]))
    session.start(test)
    print(f"{test.title}: {test.question_count} questions, {test.duration} minutes")
    session.run_clock()
    try:
        return run_session(session)
    except KeyboardInterrupt:
        session.abandon()
        print()
        print("Session abandoned; nothing was saved")
        return 1


def main(argv=None) -> int:
    setup_console_logging(logging.WARNING)
    args = parse_args(argv)
    if args.command == "seed-admin":
        return seed_admin_command(args)
    return take_command(args)


if __name__ == "__main__":
    sys.exit(main())
