# tests/fakes.py
from typing import Dict, List, Optional
from uuid import UUID

from studysync.models.db_models import User, Note, Paper, Subject, Role


class InMemoryDBClient:
    """
    Stand-in for AsyncPostgresClient with the same coroutine API.

    Rows are stored and returned as deep copies so services cannot mutate
    "persisted" state without calling an update method, just like a real
    database. Write methods return asyncpg-style command tags.
    """
    def __init__(self):
        self.users: Dict[UUID, User] = {}
        self.notes: Dict[UUID, Note] = {}
        self.papers: Dict[UUID, Paper] = {}
        self.subjects: Dict[UUID, Subject] = {}

    async def ensure_schema(self):
        pass

    # ===== Users =====

    async def add_user(self, user: User):
        if any(u.email == user.email for u in self.users.values()):
            raise ValueError(f"duplicate email {user.email}")
        self.users[user.id] = user.model_copy(deep=True)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        for user in self.users.values():
            if user.email == email:
                return user.model_copy(deep=True)
        return None

    async def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        user = self.users.get(user_id)
        return user.model_copy(deep=True) if user else None

    async def set_user_role(self, email: str, role: Role) -> str:
        for user in self.users.values():
            if user.email == email:
                user.role = role
                return "UPDATE 1"
        return "UPDATE 0"

    def make_admin(self, email: str):
        for user in self.users.values():
            if user.email == email:
                user.role = Role.ADMIN
                return
        raise KeyError(email)

    # ===== Notes =====

    async def add_note(self, note: Note):
        self.notes[note.id] = note.model_copy(deep=True)

    async def get_notes(self, owner_id: UUID) -> List[Note]:
        notes = [n for n in self.notes.values() if n.owner_id == owner_id]
        notes.sort(key=lambda n: n.created_at, reverse=True)
        return [n.model_copy(deep=True) for n in notes]

    async def get_note(self, note_id: UUID, owner_id: UUID) -> Optional[Note]:
        note = self.notes.get(note_id)
        if note is None or note.owner_id != owner_id:
            return None
        return note.model_copy(deep=True)

    async def update_note(self, note: Note) -> str:
        if note.id not in self.notes:
            return "UPDATE 0"
        self.notes[note.id] = note.model_copy(deep=True)
        return "UPDATE 1"

    async def delete_note(self, note_id: UUID, owner_id: UUID) -> str:
        note = self.notes.get(note_id)
        if note is None or note.owner_id != owner_id:
            return "DELETE 0"
        del self.notes[note_id]
        return "DELETE 1"

    # ===== Papers =====

    async def add_paper(self, paper: Paper):
        self.papers[paper.id] = paper.model_copy(deep=True)

    async def get_papers(self) -> List[Paper]:
        papers = sorted(self.papers.values(), key=lambda p: p.created_at, reverse=True)
        return [p.model_copy(deep=True) for p in papers]

    async def get_paper(self, paper_id: UUID) -> Optional[Paper]:
        paper = self.papers.get(paper_id)
        return paper.model_copy(deep=True) if paper else None

    async def delete_paper(self, paper_id: UUID) -> str:
        if self.papers.pop(paper_id, None) is None:
            return "DELETE 0"
        return "DELETE 1"

    # ===== Attendance subjects =====

    async def add_subject(self, subject: Subject):
        self.subjects[subject.id] = subject.model_copy(deep=True)

    async def get_subjects(self, owner_id: UUID) -> List[Subject]:
        subjects = [s for s in self.subjects.values() if s.owner_id == owner_id]
        subjects.sort(key=lambda s: s.subject)
        return [s.model_copy(deep=True) for s in subjects]

    async def get_subject(self, subject_id: UUID, owner_id: UUID) -> Optional[Subject]:
        subject = self.subjects.get(subject_id)
        if subject is None or subject.owner_id != owner_id:
            return None
        return subject.model_copy(deep=True)

    async def update_subject(self, subject: Subject) -> str:
        if subject.id not in self.subjects:
            return "UPDATE 0"
        self.subjects[subject.id] = subject.model_copy(deep=True)
        return "UPDATE 1"

    async def delete_subject(self, subject_id: UUID, owner_id: UUID) -> str:
        subject = self.subjects.get(subject_id)
        if subject is None or subject.owner_id != owner_id:
            return "DELETE 0"
        del self.subjects[subject_id]
        return "DELETE 1"
