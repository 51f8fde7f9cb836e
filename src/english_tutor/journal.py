"""Analysis log and saved vocabulary, the inputs badges are earned from."""
from datetime import datetime
from uuid import uuid4

from english_tutor.errors import InvalidInput
from english_tutor.models import HistoryItem, VocabularyItem
from english_tutor.store import StoredState


class AnalysisLog(StoredState):
    feature = "analysis-history"

    def __init__(self, store, user_id: str):
        super().__init__(store, user_id)
        self._items = self._load([], lambda raw: [HistoryItem.from_dict(i) for i in raw])

    def add(self, question: str, question_type: str) -> HistoryItem:
        item = HistoryItem(
            id=uuid4().hex,
            question=question,
            question_type=question_type,
            timestamp=datetime.now().isoformat(),
        )
        with self.lock:
            self._items.insert(0, item)
            self._save()
        return item

    def items(self) -> list[HistoryItem]:
        with self.lock:
            return list(self._items)

    def clear(self) -> None:
        with self.lock:
            self._items = []
            self._save()

    def _save(self) -> bool:
        return self._persist([i.to_dict() for i in self._items])


class Vocabulary(StoredState):
    feature = "vocabulary"

    def __init__(self, store, user_id: str):
        super().__init__(store, user_id)
        self._items = self._load([], lambda raw: [VocabularyItem.from_dict(i) for i in raw])

    def add(self, word: str, meaning: str = "") -> VocabularyItem:
        word = word.strip()
        if not word:
            raise InvalidInput("Word must not be empty")
        with self.lock:
            for existing in self._items:
                if existing.word.lower() == word.lower():
                    return existing
            item = VocabularyItem(id=uuid4().hex, word=word, meaning=meaning.strip())
            self._items.append(item)
            self._save()
            return item

    def remove(self, item_id: str) -> bool:
        with self.lock:
            remaining = [i for i in self._items if i.id != item_id]
            if len(remaining) == len(self._items):
                return False
            self._items = remaining
            self._save()
            return True

    def items(self) -> list[VocabularyItem]:
        with self.lock:
            return list(self._items)

    def _save(self) -> bool:
        return self._persist([i.to_dict() for i in self._items])
