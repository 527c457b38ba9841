import json
import logging
import os
import threading
from typing import Dict, List, Optional

from delfos.errors import BankLoadError, NotFound
from delfos.models import AnswerKey, Profile, Question


# Child of the app logger ("delfos"), so it shares Flask's handler
logger = logging.getLogger(__name__)

DEFAULT_BANK_PATH = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'data', 'bank.json')


class QuestionBank:
    """Read-only lookup tables for questions, answer keys and profiles.

    Loaded once when the app is created; nothing mutates the tables after
    that, so lookups need no locking.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = path
        self._questions: Dict[str, Question] = {}
        self._answers: Dict[str, AnswerKey] = {}
        self._profiles: Dict[str, Profile] = {}
        self._aliases: Dict[str, str] = {}
        self._loaded_from: Optional[str] = None
        self._load_lock = threading.Lock()
        if path is not None:
            self.load(path)

    def init_app(self, app) -> None:
        self.load(app.config.get('QUESTION_BANK_PATH') or DEFAULT_BANK_PATH)
        app.logger.info(
            f"[bank] loaded {len(self._questions)} questions in {len(self._profiles)} profiles from {self._loaded_from}"
        )

    @property
    def loaded(self) -> bool:
        return self._loaded_from is not None

    def load(self, path: str) -> None:
        path = os.path.abspath(path)
        with self._load_lock:
            if self._loaded_from == path:
                return
            try:
                with open(path, encoding='utf-8') as fh:
                    raw = json.load(fh)
            except (OSError, ValueError) as exc:
                raise BankLoadError(f"Cannot read question bank {path}: {exc}") from exc
            questions, answers, profiles, aliases = _parse_bank(raw)
            self._questions = questions
            self._answers = answers
            self._profiles = profiles
            self._aliases = aliases
            self._loaded_from = path
            self.path = path

    def lookup_question(self, question_id: str) -> Question:
        try:
            return self._questions[question_id]
        except KeyError:
            raise NotFound(f"Question not found: {question_id}") from None

    def lookup_answer(self, question_id: str) -> AnswerKey:
        try:
            return self._answers[question_id]
        except KeyError:
            raise NotFound(f"Answer not found: {question_id}") from None

    def find_answer(self, question_id: str) -> Optional[AnswerKey]:
        return self._answers.get(question_id)

    def profile(self, name: str) -> Profile:
        key = (name or '').strip().lower()
        key = self._aliases.get(key, key)
        try:
            return self._profiles[key]
        except KeyError:
            raise NotFound(f"Unknown profile: {name}") from None

    def profiles(self) -> List[Profile]:
        return list(self._profiles.values())

    def __len__(self):
        return len(self._questions)


def _parse_bank(raw):
    if not isinstance(raw, dict):
        raise BankLoadError("Question bank must be a JSON object")

    questions: Dict[str, Question] = {}
    for entry in _require_list(raw, 'questions'):
        try:
            qid = entry['id']
            text = entry['question']
            options = entry['options']
        except (KeyError, TypeError):
            raise BankLoadError(f"Malformed question entry: {entry!r}") from None
        if not isinstance(qid, str) or not qid or not isinstance(text, str):
            raise BankLoadError(f"Malformed question entry: {entry!r}")
        if not isinstance(options, list) or not options or not all(isinstance(o, str) for o in options):
            raise BankLoadError(f"Question {qid} must have a non-empty list of string options")
        if qid in questions:
            raise BankLoadError(f"Duplicate question id {qid}")
        questions[qid] = Question(id=qid, text=text, options=tuple(options))

    answers: Dict[str, AnswerKey] = {}
    for entry in _require_list(raw, 'answers'):
        try:
            qid = entry['question_id']
            letter = entry['answer']
        except (KeyError, TypeError):
            raise BankLoadError(f"Malformed answer entry: {entry!r}") from None
        question = questions.get(qid)
        if question is None:
            raise BankLoadError(f"Answer refers to unknown question {qid}")
        if not isinstance(letter, str) or len(letter.strip()) != 1:
            raise BankLoadError(f"Answer for {qid} must be a single letter")
        letter = letter.strip().lower()
        if not 0 <= ord(letter) - ord('a') < len(question.options):
            raise BankLoadError(f"Answer {letter!r} for {qid} is outside its {len(question.options)} options")
        if qid in answers:
            raise BankLoadError(f"Duplicate answer for {qid}")
        answers[qid] = AnswerKey(question_id=qid, correct_option=letter, description=entry.get('description') or '')

    profiles: Dict[str, Profile] = {}
    aliases: Dict[str, str] = {}
    prefixes = set()
    for entry in _require_list(raw, 'profiles'):
        try:
            profile = Profile(
                name=str(entry['name']).lower(),
                prefix=str(entry['prefix']),
                size=int(entry['size']),
                aliases=tuple(str(a).lower() for a in entry.get('aliases', [])),
            )
        except (KeyError, TypeError, ValueError):
            raise BankLoadError(f"Malformed profile entry: {entry!r}") from None
        if profile.size < 1:
            raise BankLoadError(f"Profile {profile.name} must contain at least one question")
        if profile.name in profiles or profile.prefix in prefixes:
            raise BankLoadError(f"Profile {profile.name} overlaps another profile")
        for qid in profile.question_ids():
            if qid not in questions:
                raise BankLoadError(f"Profile {profile.name} expects question {qid}")
        for alias in profile.aliases:
            if alias in aliases or alias in profiles:
                raise BankLoadError(f"Profile alias {alias!r} is ambiguous")
            aliases[alias] = profile.name
        profiles[profile.name] = profile
        prefixes.add(profile.prefix)

    logger.debug(f"[bank] parsed {len(questions)} questions, {len(answers)} answers, {len(profiles)} profiles")
    return questions, answers, profiles, aliases


def _require_list(raw, key):
    value = raw.get(key)
    if not isinstance(value, list):
        raise BankLoadError(f"Question bank is missing the '{key}' list")
    return value
