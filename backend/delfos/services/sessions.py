import logging
import os
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from delfos.errors import AlreadyExists, InvalidInput, NotFound, StorageError
from delfos.models import QuestionRef, Session, Submission
from delfos.services.files import TEMP_NAME_OVERHEAD, atomic_write


# Child of the app logger ("delfos"), so it shares Flask's handler
logger = logging.getLogger(__name__)

_FORBIDDEN_IN_KEY = (',', '\n', '\r', '/', '\\', '\x00')
_FORBIDDEN_IN_FIELD = (',', '\n', '\r')

META_SUFFIX = '.meta'
# Common NAME_MAX on Linux/macOS filesystems, in bytes
MAX_FILE_NAME = 255


class SessionStore:
    """One plain-text record per (email, session id), appended to as a log.

    Record layout::

        <email>
        <session id>
        <question ids, comma joined>     # one pair of lines per submission
        <ANSWERS, comma joined>

    The creation time lives next to the record in ``<record>.meta``.
    Writers to the same record are serialized by a per-file lock; different
    records never share a lock. Each write replaces the record atomically so a
    failed write leaves the previous lines intact.
    """

    def __init__(self, data_dir: Optional[str] = None):
        self.data_dir = data_dir
        # path -> [lock, holders]; entries go away once nobody holds or waits
        self._locks: Dict[str, list] = {}
        self._locks_guard = threading.Lock()

    def init_app(self, app) -> None:
        self.data_dir = app.config.get('DATA_DIR') or 'data'

    def record_path(self, email: str, session_id: str) -> str:
        email, session_id = _check_key(email, session_id)
        return os.path.join(self._dir(), _record_name(email, session_id))

    def create_session(self, email: str, session_id: str) -> Session:
        email, session_id = _check_key(email, session_id)
        path = self.record_path(email, session_id)
        with self._locked(path):
            if os.path.exists(path):
                raise AlreadyExists(f"Session already exists for {email} / {session_id}")
            created_at = datetime.now(timezone.utc)
            try:
                os.makedirs(self._dir(), exist_ok=True)
                atomic_write(path + META_SUFFIX, created_at.isoformat())
                atomic_write(path, f"{email}\n{session_id}\n")
            except OSError as exc:
                logger.error(f"[session-create] failed writing {path}: {exc}")
                _discard(path + META_SUFFIX)
                raise StorageError(f"Could not create session record: {exc}") from exc
        logger.info(f"[session-create] {path}")
        return Session(user_email=email, session_id=session_id, created_at=created_at)

    def append_submission(self, email: str, session_id: str, submission: Submission) -> None:
        email, session_id = _check_key(email, session_id)
        ids_line = ','.join(_render_id(qid) for qid in submission.question_ids)
        answers_line = ','.join(_render_answer(a) for a in submission.answers)
        path = self.record_path(email, session_id)
        with self._locked(path):
            existing = self._read(path, email, session_id)
            if existing and not existing.endswith('\n'):
                existing += '\n'
            try:
                atomic_write(path, f"{existing}{ids_line}\n{answers_line}\n")
            except OSError as exc:
                logger.error(f"[session-update] failed writing {path}: {exc}")
                raise StorageError(f"Could not update session record: {exc}") from exc
        logger.info(
            f"[session-update] {path} with {len(submission.question_ids)} questions "
            f"and {len(submission.answers)} answers"
        )

    def load_session(self, email: str, session_id: str) -> Session:
        email, session_id = _check_key(email, session_id)
        path = self.record_path(email, session_id)
        with self._locked(path):
            content = self._read(path, email, session_id)
            created_at = self._read_created(path)
        lines = content.split('\n')
        if lines and lines[-1] == '':
            lines.pop()
        if len(lines) < 2 or (len(lines) - 2) % 2:
            raise StorageError(f"Session record {path} is malformed")
        submissions = []
        for ids_line, answers_line in zip(lines[2::2], lines[3::2]):
            # IDs come back as the text that was written; "0042" stays "0042"
            submissions.append(Submission(
                question_ids=ids_line.split(',') if ids_line else [],
                answers=answers_line.split(',') if answers_line else [],
            ))
        return Session(
            user_email=lines[0],
            session_id=lines[1],
            created_at=created_at,
            submissions=submissions,
        )

    def _read(self, path: str, email: str, session_id: str) -> str:
        try:
            with open(path, encoding='utf-8', newline='') as fh:
                content = fh.read()
        except FileNotFoundError:
            raise NotFound(f"No session for {email} / {session_id}") from None
        except OSError as exc:
            logger.error(f"[session-read] failed reading {path}: {exc}")
            raise StorageError(f"Could not read session record: {exc}") from exc
        # "a_b" + "c" and "a" + "b_c" share a file name; the header tells them apart
        if content.split('\n', 2)[:2] != [email, session_id]:
            raise NotFound(f"No session for {email} / {session_id}")
        return content

    def _read_created(self, path: str) -> Optional[datetime]:
        try:
            with open(path + META_SUFFIX, encoding='utf-8') as fh:
                raw = fh.read().strip()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageError(f"Could not read session metadata: {exc}") from exc
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            logger.warning(f"[session-read] unreadable creation time in {path}{META_SUFFIX}: {raw!r}")
            return None

    def _dir(self) -> str:
        return self.data_dir or 'data'

    @contextmanager
    def _locked(self, path: str):
        with self._locks_guard:
            entry = self._locks.get(path)
            if entry is None:
                entry = self._locks[path] = [threading.Lock(), 0]
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[path]


def _record_name(email: str, session_id: str) -> str:
    return f"{email}_{session_id}.txt"


def _check_key(email, session_id) -> Tuple[str, str]:
    if not isinstance(email, str) or not isinstance(session_id, str):
        raise InvalidInput("userEmail and sessionId are required")
    email, session_id = email.strip(), session_id.strip()
    if not email or not session_id:
        raise InvalidInput("userEmail and sessionId are required")
    for value in (email, session_id):
        if value in ('.', '..') or any(c in value for c in _FORBIDDEN_IN_KEY):
            raise InvalidInput(f"Invalid characters in session key: {value!r}")
    # the longest name written is the temp file for the .meta sidecar
    longest = len(_record_name(email, session_id).encode('utf-8')) + len(META_SUFFIX) + TEMP_NAME_OVERHEAD
    if longest > MAX_FILE_NAME:
        raise InvalidInput("userEmail and sessionId are too long")
    return email, session_id


def _discard(path: str) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass


def _render_id(qid: QuestionRef) -> str:
    if isinstance(qid, bool) or not isinstance(qid, (int, str)):
        raise InvalidInput(f"Question id must be an integer or string, got {qid!r}")
    text = str(qid)
    if not text or any(c in text for c in _FORBIDDEN_IN_FIELD):
        raise InvalidInput(f"Invalid question id: {qid!r}")
    return text


def _render_answer(answer) -> str:
    if not isinstance(answer, str) or any(c in answer for c in _FORBIDDEN_IN_FIELD):
        raise InvalidInput(f"Invalid answer: {answer!r}")
    return answer.upper()


def parse_submission(data) -> Submission:
    """Build a Submission from a decoded request body."""
    question_ids = data.get('questionIds')
    answers = data.get('userAnswers')
    if not isinstance(question_ids, list) or not isinstance(answers, list):
        raise InvalidInput("questionIds and userAnswers must be lists")
    ids: List[QuestionRef] = list(question_ids)
    return Submission(question_ids=ids, answers=list(answers))
