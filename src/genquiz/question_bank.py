import glob
import logging
import os
import random
from typing import Any, Dict, List

import pandas as pd

from .models import Option, Question

logger = logging.getLogger(__name__)

DEFAULT_TOPIC = "general_knowledge"

SAMPLE_BANK: List[Dict[str, Any]] = [
    {"question": "2+2?", "answer": "4", "wrong": ["3", "5", "22"]},
    {"question": "Capital of France?", "answer": "Paris", "wrong": ["Rome", "Madrid", "Berlin"]},
    {"question": "Largest planet in the solar system?", "answer": "Jupiter", "wrong": ["Saturn", "Earth", "Neptune"]},
    {"question": "Chemical symbol for gold?", "answer": "Au", "wrong": ["Ag", "Gd", "Go"]},
    {"question": "How many continents are there?", "answer": "7", "wrong": ["5", "6", "8"]},
]


class QuestionBankManager:
    """Manages loading and accessing CSV question banks, one topic per file.

    A bank needs a ``question`` column, an ``answer`` column and at least one
    distractor column whose name starts with ``wrong``.
    """

    def __init__(self, directory: str):
        self.directory = directory
        self.banks: Dict[str, List[Dict[str, Any]]] = {}

    def load_all(self):
        self.banks = {}
        if not os.path.exists(self.directory):
            os.makedirs(self.directory, exist_ok=True)
            logger.warning(f"Created directory {self.directory}. Please add CSV files.")

        csv_files = glob.glob(os.path.join(self.directory, "*.csv"))
        for file_path in sorted(csv_files):
            file_name = os.path.splitext(os.path.basename(file_path))[0]
            try:
                df = pd.read_csv(file_path, encoding="utf-8", dtype=str)
            except (OSError, ValueError) as e:
                logger.error(f"Failed to load {file_path}: {e}")
                continue

            wrong_columns = [c for c in df.columns if str(c).startswith("wrong")]
            if "question" not in df.columns or "answer" not in df.columns or not wrong_columns:
                logger.error(f"Skipping {file_name}: Missing columns.")
                continue

            records = []
            for row in df.fillna("").to_dict("records"):
                wrong = [row[c].strip() for c in wrong_columns if row[c].strip()]
                if row["question"].strip() and row["answer"].strip() and wrong:
                    records.append(
                        {
                            "question": row["question"].strip(),
                            "answer": row["answer"].strip(),
                            "wrong": wrong,
                        }
                    )
            if records:
                self.banks[file_name] = records
                logger.info(f"Loaded {len(records)} questions from {file_name}")
            else:
                logger.error(f"Skipping {file_name}: No complete rows.")

        if not self.banks:
            logger.warning("No question banks found. Loading sample bank.")
            self.banks[DEFAULT_TOPIC] = list(SAMPLE_BANK)

    def get_records(self, topic: str) -> List[Dict[str, Any]]:
        return self.banks.get(topic, [])

    def get_topics(self) -> List[Dict[str, Any]]:
        topics = []
        for key, records in self.banks.items():
            display_name = key.replace("_", " ").title()
            topics.append({"id": key, "name": display_name, "count": len(records)})
        topics.sort(key=lambda x: x["name"])
        return topics

    def default_topic(self) -> str:
        topics = self.get_topics()
        return topics[0]["id"] if topics else DEFAULT_TOPIC

    def sample_questions(self, topic: str, count: int) -> List[Question]:
        """Randomly selects up to ``count`` questions and shuffles their options."""
        records = self.get_records(topic)
        if not records:
            return []
        selected = random.sample(records, min(count, len(records)))
        return [self._to_question(record) for record in selected]

    @staticmethod
    def _to_question(record: Dict[str, Any]) -> Question:
        options = [Option(label=record["answer"], is_correct=True)]
        options += [Option(label=label, is_correct=False) for label in record["wrong"]]
        random.shuffle(options)
        return Question(prompt=record["question"], options=tuple(options))
