import argparse
import json
from pathlib import Path

from examprep.config import LOG_LEVEL
from examprep.engine import (
    AttemptController,
    AttemptResult,
    AttemptStatus,
    ExamSettings,
    MultiChoiceQuestion,
    QuestionType,
    SingleChoiceQuestion,
    SubmitReason,
)
from examprep.logging_setup import setup_console_logging
from examprep.serialization import build_question_bank, serialize_answer
from examprep.services.attempt_service import build_exam_settings
from examprep.utils import format_clock, format_time_taken

HELP = (
    "Commands: <number> choose/toggle option, t/f true or false, a <text> answer,\n"
    "          n next, p previous, g <number> go to, m mark for review,\n"
    "          c clear answer, s submit, q quit (submits), h help"
)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Take a timed mock test in the terminal")
    parser.add_argument("file", type=Path, help="Path to exam JSON file")
    parser.add_argument(
        "--exam-type",
        type=str,
        default=None,
        help="Exam type for negative marking (UPSC, MPSC, NEET)",
    )
    parser.add_argument(
        "--duration",
        type=int,
        default=None,
        help="Duration in minutes",
    )
    parser.add_argument(
        "--marks",
        type=float,
        default=None,
        help="Marks per correct answer",
    )
    parser.add_argument(
        "--negative",
        type=float,
        default=None,
        help="Negative-marking fraction, overrides the exam type default",
    )
    return parser.parse_args(argv)


def load_exam(path: Path) -> dict[str, object]:
    """Read an exam file: either a list of questions or an object with 'questions'."""
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, list):
        payload = {"questions": payload}
    if not isinstance(payload, dict) or not isinstance(payload.get("questions"), list):
        raise ValueError(f"{path} does not contain a question list")
    payload.setdefault("id", path.stem)
    payload.setdefault("title", path.stem)
    return payload


def render_question(controller: AttemptController) -> str:
    index = controller.current_index
    question = controller.bank[index]
    answer = controller.answers.answer(index)
    lines = [
        f"[{format_clock(controller.remaining_seconds)}] "
        f"Question {index + 1}/{len(controller.bank)}"
        + (" (marked)" if controller.answers.is_marked(index) else ""),
        question.prompt,
    ]
    if isinstance(question, (SingleChoiceQuestion, MultiChoiceQuestion)):
        selected = answer if isinstance(question, MultiChoiceQuestion) else {answer}
        for option_index, option in enumerate(question.options):
            tick = "x" if option_index in selected else " "
            lines.append(f"  [{tick}] {option_index + 1}. {option}")
    elif question.type == QuestionType.TRUE_FALSE:
        lines.append("  t) True   f) False")
    if not question.is_empty(answer):
        lines.append(f"Your answer: {serialize_answer(answer)}")
    return "\n".join(lines)


def handle_command(controller: AttemptController, line: str) -> str | None:
    """
    Apply one command. Returns a message for the user, or None when the
    attempt should end.
    """
    command, _, argument = line.strip().partition(" ")
    command = command.lower()
    index = controller.current_index
    question = controller.bank[index]

    if command in ("s", "q"):
        return None
    if command == "h":
        return HELP
    if command == "n":
        return "" if controller.next() else "Already at the last question"
    if command == "p":
        return "" if controller.previous() else "Already at the first question"
    if command == "g":
        target = int(argument) - 1 if argument.strip().isdigit() else -1
        if not controller.navigate(target) and target != index:
            return f"No question {argument.strip()}"
        return ""
    if command == "m":
        controller.toggle_marked(index)
        return ""
    if command == "c":
        controller.clear_answer(index)
        return ""
    if command in ("t", "f") and question.type == QuestionType.TRUE_FALSE:
        controller.set_answer(index, command == "t")
        return ""
    if command == "a" and question.type == QuestionType.SHORT_ANSWER:
        controller.set_answer(index, argument)
        return ""
    if command.isdigit():
        option = int(command) - 1
        if isinstance(question, MultiChoiceQuestion):
            changed = controller.toggle_multi_option(index, option)
        else:
            changed = controller.set_answer(index, option)
        return "" if changed else f"Option {command} is not valid here"
    return f"Unknown command: {line.strip()}\n{HELP}"


def render_result(result: AttemptResult) -> str:
    reason = "Time is up!" if result.submitted_by == SubmitReason.TIMEOUT else "Test submitted."
    return "\n".join(
        [
            reason,
            f"Score: {result.score:.2f}",
            f"Correct: {result.correct_count}  Wrong: {result.wrong_count}  "
            f"Unattempted: {result.unattempted_count}  of {result.total_questions}",
            f"Time taken: {format_time_taken(result.time_taken_seconds)}",
        ]
    )


def _pick(flag, fallback):
    return flag if flag is not None else fallback


def settings_from_args(args: argparse.Namespace, exam: dict[str, object]) -> ExamSettings:
    """Exam settings from the file, with command-line flags taking precedence."""
    return build_exam_settings(
        str(exam["id"]),
        title=str(exam["title"]),
        category=str(exam.get("category") or "General"),
        exam_type=_pick(args.exam_type, exam.get("examType")),
        duration_minutes=_pick(args.duration, exam.get("durationMinutes")),
        marks_per_question=_pick(args.marks, exam.get("marksPerQuestion")),
        negative_marking=args.negative,
    )


def main() -> None:
    args = parse_args()
    setup_console_logging(LOG_LEVEL)

    exam = load_exam(args.file)
    settings = settings_from_args(args, exam)
    controller = AttemptController(build_question_bank(exam["questions"]), settings)
    controller.start()
    print(HELP)

    try:
        while controller.status == AttemptStatus.IN_PROGRESS:
            print()
            print(render_question(controller))
            try:
                line = input("> ")
            except EOFError:
                break
            if controller.status != AttemptStatus.IN_PROGRESS:
                break
            message = handle_command(controller, line)
            if message is None:
                break
            if message:
                print(message)
    finally:
        controller.submit()

    print()
    print(render_result(controller.result))


if __name__ == "__main__":
    main()
