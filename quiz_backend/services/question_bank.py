# FILE: quiz_backend/services/question_bank.py
"""
Live question bank (subject-owned catalog)

Read by the snapshot builder exactly once per quiz. One JSONL file per subject.
"""
import json
import logging
from typing import List, Dict, Optional, Iterable
from pathlib import Path

from quiz_backend.config import get_settings
from quiz_backend.errors import NotFound, StorageError
from quiz_backend.models.quizzes import BankQuestion

logger = logging.getLogger(__name__)


class QuestionBank:
    """File-backed question bank"""

    def __init__(self, bank_dir: Optional[str] = None):
        self.data_dir = Path(bank_dir or get_settings().question_bank_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def list_subject(self, subject_id: str) -> List[BankQuestion]:
        """Get all questions for a subject"""
        subject_file = self.data_dir / f"{subject_id}.jsonl"

        if not subject_file.exists():
            return []

        return list(self._read_file(subject_file))

    def get_questions(self, question_ids: Iterable[str]) -> List[BankQuestion]:
        """Get questions by id, in the order requested"""
        wanted = list(question_ids)
        if not wanted:
            return []

        found: Dict[str, BankQuestion] = {}
        for subject_file in sorted(self.data_dir.glob("*.jsonl")):
            for question in self._read_file(subject_file):
                if question.id in wanted:
                    found[question.id] = question

        missing = [qid for qid in wanted if qid not in found]
        if missing:
            raise NotFound(f"Bank questions not found: {', '.join(missing)}")

        return [found[qid] for qid in wanted]

    def add_question(self, question: BankQuestion):
        """Add question to its subject file"""
        subject_file = self.data_dir / f"{question.subject_id}.jsonl"

        try:
            with open(subject_file, 'a', encoding="utf-8") as f:
                f.write(question.model_dump_json() + '\n')
        except OSError as e:
            raise StorageError(f"Could not append to {subject_file.name}", cause=e) from e

        logger.debug(f"Bank question added: {question.id} ({question.subject_id})")

    def _read_file(self, subject_file: Path) -> Iterable[BankQuestion]:
        try:
            with open(subject_file, 'r', encoding="utf-8") as f:
                lines = [line for line in f if line.strip()]
        except OSError as e:
            raise StorageError(f"Could not read {subject_file.name}", cause=e) from e

        for line in lines:
            yield BankQuestion.model_validate(json.loads(line))
