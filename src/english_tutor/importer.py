"""Load assessment question sets from files."""
import json
import re
from pathlib import Path

from english_tutor.errors import InvalidInput
from english_tutor.models import AssessmentQuestion, Option

DEFAULT_CATEGORY = "general"
OPTION_LETTERS = "ABCDE"

_QUESTION_START = re.compile(r"(?=^\s*\d+\.\s*)", re.MULTILINE)
_NUMBERED = re.compile(r"^\s*(\d+)\.\s*")
_ANSWER = re.compile(
    r"(?:Correct answer|Answer is|Correct option|Answer|Doğru cevap)\s*:?\s*((?-i:[A-E]))\b",
    re.IGNORECASE,
)
_OPTIONS_START = re.compile(r"\s*[A-E]\)")
_OPTION = re.compile(r"([A-E])\)(.*?)(?=\s*[A-E]\)|$)", re.DOTALL)


def read_file_content(file_path: str) -> str:
    path = Path(file_path)
    suffix = path.suffix.lower()

    if suffix in (".txt", ".md"):
        return path.read_text()
    elif suffix == ".json":
        data = json.loads(path.read_text())
        return json.dumps(data, indent=2) if isinstance(data, dict) else str(data)
    elif suffix in (".yaml", ".yml"):
        import yaml
        data = yaml.safe_load(path.read_text())
        return str(data)
    elif suffix == ".pdf":
        from PyPDF2 import PdfReader
        reader = PdfReader(file_path)
        return "\n".join(page.extract_text() or "" for page in reader.pages)
    elif suffix == ".docx":
        from docx import Document
        doc = Document(file_path)
        return "\n".join(p.text for p in doc.paragraphs)
    elif suffix in (".html", ".htm"):
        from bs4 import BeautifulSoup
        html = path.read_text()
        return BeautifulSoup(html, "html.parser").get_text()
    else:
        # Try reading as plain text
        return path.read_text()


def parse_question_text(text: str, category: str = DEFAULT_CATEGORY) -> list[AssessmentQuestion]:
    """Parse numbered multiple-choice questions out of free text.

    Expected shape::

        Optional shared passage...

        1. Question text
        A) first option  B) second option
        Answer: B

    A leading block without a number becomes the passage of every question.
    Blocks with fewer than two options are skipped. A missing answer line
    leaves ``correct_key`` empty, which ``SessionController.start`` rejects.
    """
    normalized = text.strip().replace("\r\n", "\n")
    blocks = [b for b in _QUESTION_START.split(normalized) if b.strip()]
    passage = None
    if blocks and not _NUMBERED.match(blocks[0]):
        passage = blocks.pop(0).strip() or None

    questions = []
    for block in blocks:
        block = block.strip()
        number = _NUMBERED.match(block)
        answer = _ANSWER.search(block)
        correct_key = answer.group(1).upper() if answer else ""
        # Drop the answer line so it is not glued onto the last option
        body = block[:answer.start()].strip() if answer else block

        options_at = _OPTIONS_START.search(body)
        if options_at is None:
            continue
        prompt = _NUMBERED.sub("", body[:options_at.start()].strip(), count=1)
        options = []
        for match in _OPTION.finditer(body[options_at.start():]):
            value = " ".join(match.group(2).split())
            if value:
                options.append(Option(key=match.group(1).upper(), text=value))
        if len(options) < 2:
            continue
        questions.append(AssessmentQuestion(
            ordinal=int(number.group(1)),
            prompt=prompt,
            options=tuple(options),
            correct_key=correct_key,
            category=category,
            passage=passage,
        ))
    return questions


def _parse_options(raw) -> tuple[Option, ...]:
    if isinstance(raw, dict):
        return tuple(Option(key=str(k).upper(), text=str(v)) for k, v in raw.items())
    options = []
    for i, item in enumerate(raw):
        if isinstance(item, dict):
            options.append(Option(key=str(item["key"]).upper(), text=str(item.get("text", item.get("value", "")))))
        else:
            options.append(Option(key=OPTION_LETTERS[i], text=str(item)))
    return tuple(options)


def questions_from_data(data, category: str = DEFAULT_CATEGORY) -> list[AssessmentQuestion]:
    """Build questions from a parsed JSON/YAML document."""
    passage = None
    if isinstance(data, dict):
        category = data.get("category", category)
        passage = data.get("passage")
        data = data.get("questions", [])
    if not isinstance(data, list):
        raise InvalidInput("Question file must contain a list of questions")
    questions = []
    for i, item in enumerate(data, 1):
        try:
            questions.append(AssessmentQuestion(
                ordinal=int(item.get("ordinal", item.get("number", i))),
                prompt=str(item.get("prompt", item.get("question", ""))),
                options=_parse_options(item["options"]),
                correct_key=str(item.get("correct_key", item.get("answer", ""))).upper(),
                category=item.get("category", category),
                passage=item.get("passage", passage),
            ))
        except (KeyError, TypeError, ValueError, IndexError, AttributeError) as e:
            raise InvalidInput(f"Question {i} is malformed: {e}") from e
    return sorted(questions, key=lambda q: q.ordinal)


def load_questions(file_path: str, category: str = DEFAULT_CATEGORY) -> list[AssessmentQuestion]:
    """Load a question set; structured files are read as data, others as text."""
    path = Path(file_path)
    suffix = path.suffix.lower()
    if suffix == ".json":
        return questions_from_data(json.loads(path.read_text()), category)
    if suffix in (".yaml", ".yml"):
        import yaml
        return questions_from_data(yaml.safe_load(path.read_text()), category)
    questions = parse_question_text(read_file_content(file_path), category)
    return sorted(questions, key=lambda q: q.ordinal)
