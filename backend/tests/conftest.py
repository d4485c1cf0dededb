"""
Pytest configuration and shared fixtures for all tests.

Points the settings at a throwaway SQLite database and upload directory and
runs Celery tasks inline, so an upload is fully analyzed by the time the
request returns. No network access: the AI client is always a stub.
"""

import io
import os
import struct
import sys
import tempfile
from types import SimpleNamespace

# Environment must be in place before jobboard.core.config is imported
_TEST_ROOT = tempfile.mkdtemp(prefix="jobboard-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_ROOT, 'test.db')}"
os.environ["UPLOAD_DIR"] = os.path.join(_TEST_ROOT, "uploads")
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ["OPENAI_API_KEY"] = ""
os.environ["SECRET_KEY"] = "test-secret-key-that-is-at-least-32-characters"
os.environ["LOG_LEVEL"] = "WARNING"

# Add backend directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import pytest
from docx import Document
from fastapi.testclient import TestClient

from jobboard.analysis.ai_analyzer import AIAnalyzer
from jobboard.analysis.extractor import MIME_DOCX, TextExtractor
from jobboard.analysis.heuristic import HeuristicAnalyzer
from jobboard.analysis.orchestrator import AnalysisOrchestrator
from jobboard.auth.service import create_user_token
from jobboard.core.config import settings
from jobboard.core.database import Base, SessionLocal, engine
from jobboard.core.storage import LocalFileStorage
from jobboard.main import app
from jobboard.models.resume import Resume
from jobboard.resumes.service import resume_service
from jobboard.tasks.resume_tasks import AnalysisTask


SAMPLE_RESUME_LINES = [
    "Jane Doe",
    "Senior Software Engineer",
    "jane.doe@example.com | +1 (555) 123-4567",
    "linkedin.com/in/janedoe | github.com/janedoe",
    "",
    "Summary",
    "Software engineer with 8 years of experience building Python APIs.",
    "",
    "Experience",
    "Senior Software Engineer at Acme Corp",
    "Jan 2019 - Present",
    "Built data platform services",
    "- Led migration to Kubernetes, cutting costs by 30%",
    "- Developed FastAPI services used by 2M users",
    "",
    "Software Engineer, Globex",
    "2015 - 2018",
    "- Implemented CI pipelines with Jenkins and Docker",
    "",
    "Education",
    "B.Sc. Computer Science",
    "State University",
    "2011 - 2015",
    "GPA: 3.8",
    "",
    "Skills",
    "Python, JavaScript, React, Django, PostgreSQL, Docker, AWS, Git",
    "Leadership, Communication, Teamwork",
    "",
    "Languages",
    "English, Spanish",
]

SAMPLE_RESUME_TEXT = "\n".join(SAMPLE_RESUME_LINES)


# ============================================================================
# DOCUMENT FIXTURES - built at runtime, nothing binary is checked in
# ============================================================================

def build_docx(lines, table_rows=None) -> bytes:
    """DOCX with one paragraph per line and an optional table"""
    document = Document()
    for line in lines:
        document.add_paragraph(line)
    if table_rows:
        table = document.add_table(rows=len(table_rows), cols=len(table_rows[0]))
        for r, row in enumerate(table_rows):
            for c, value in enumerate(row):
                table.cell(r, c).text = value
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def _pdf_escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def build_pdf(lines) -> bytes:
    """Single-page PDF with one Helvetica text line per entry"""
    operations = " ".join(f"({_pdf_escape(line)}) Tj T*" for line in lines if line)
    content = f"BT /F1 11 Tf 14 TL 72 750 Td {operations} ET".encode("latin-1")

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Resources << /Font << /F1 4 0 R >> >> /Contents 5 0 R >>",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
        b"<< /Length %d >>\nstream\n" % len(content) + content + b"\nendstream",
    ]

    out = io.BytesIO()
    out.write(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(out.tell())
        out.write(b"%d 0 obj\n" % number + body + b"\nendobj\n")

    xref_offset = out.tell()
    out.write(b"xref\n0 %d\n" % (len(objects) + 1))
    out.write(b"0000000000 65535 f \n")
    for offset in offsets:
        out.write(b"%010d 00000 n \n" % offset)
    out.write(
        b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n"
        % (len(objects) + 1, xref_offset)
    )
    return out.getvalue()


# Compound file (OLE) constants for build_word_doc
_OLE_SECTOR = 512
_OLE_FREE = 0xFFFFFFFF
_OLE_END = 0xFFFFFFFE
_OLE_FAT = 0xFFFFFFFD
_OLE_STREAM_SIZE = 4096  # at the mini-stream cutoff, so streams live in regular sectors


def _ole_dir_entry(name="", entry_type=0, left=_OLE_FREE, right=_OLE_FREE, child=_OLE_FREE, start=0, size=0) -> bytes:
    encoded = name.encode("utf-16-le") + b"\0\0" if name else b""
    return struct.pack(
        "<64sHBBIII16sIQQIQ",
        encoded, len(encoded), entry_type, 1, left, right, child,
        b"\0" * 16, 0, 0, 0, start, size,
    )


def build_word_doc(pieces, table_name="1Table", encrypted=False, stored_table_name=None) -> bytes:
    """
    Minimal Word 97 binary document: a compound file holding WordDocument
    and a table stream with one piece per (text, compressed) pair.

    table_name is what the FIB flags point at; stored_table_name overrides
    the stream actually written.
    """
    word_stream = bytearray(_OLE_STREAM_SIZE)
    flags = 0x0200 if table_name == "1Table" else 0
    if encrypted:
        flags |= 0x0100
    struct.pack_into("<HHH", word_stream, 0, 0xA5EC, 0x00C1, 0)
    struct.pack_into("<H", word_stream, 0x000A, flags)

    cps, descriptors, cp, offset = [0], b"", 0, 0x0800
    for text, compressed in pieces:
        data = text.encode("cp1252") if compressed else text.encode("utf-16-le")
        word_stream[offset:offset + len(data)] = data
        fc = (offset * 2) | 0x40000000 if compressed else offset
        descriptors += struct.pack("<HIH", 0, fc, 0)
        cp += len(text)
        cps.append(cp)
        offset += len(data) + 16

    plc = struct.pack(f"<{len(cps)}I", *cps) + descriptors
    clx = b"\x01" + struct.pack("<H", 2) + b"\0\0" + b"\x02" + struct.pack("<I", len(plc)) + plc
    struct.pack_into("<II", word_stream, 0x01A2, 0, len(clx))
    table_stream = clx.ljust(_OLE_STREAM_SIZE, b"\0")

    # Sector 0: FAT, sector 1: directory, then the two streams
    per_stream = _OLE_STREAM_SIZE // _OLE_SECTOR
    fat = [_OLE_FAT, _OLE_END]
    for first in (2, 2 + per_stream):
        fat += list(range(first + 1, first + per_stream)) + [_OLE_END]
    fat += [_OLE_FREE] * (_OLE_SECTOR // 4 - len(fat))

    directory = b"".join([
        _ole_dir_entry("Root Entry", entry_type=5, child=1, start=_OLE_END),
        _ole_dir_entry("WordDocument", entry_type=2, left=2, start=2, size=_OLE_STREAM_SIZE),
        _ole_dir_entry(stored_table_name or table_name, entry_type=2, start=2 + per_stream, size=_OLE_STREAM_SIZE),
        _ole_dir_entry(),
    ])

    header = struct.pack(
        "<8s16sHHHHH6sIIIIIIIII",
        b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1", b"\0" * 16,
        0x003E, 3, 0xFFFE, 9, 6, b"\0" * 6,
        0, 1, 1, 0, _OLE_STREAM_SIZE, _OLE_END, 0, _OLE_END, 0,
    )
    header += struct.pack("<109I", 0, *([_OLE_FREE] * 108))

    return header + struct.pack("<128I", *fat) + directory + bytes(word_stream) + table_stream


@pytest.fixture
def docx_factory():
    return build_docx


@pytest.fixture
def pdf_factory():
    return build_pdf


@pytest.fixture
def doc_factory():
    return build_word_doc


@pytest.fixture
def sample_resume_text():
    return SAMPLE_RESUME_TEXT


@pytest.fixture
def sample_docx():
    return build_docx(SAMPLE_RESUME_LINES)


@pytest.fixture
def sample_pdf():
    return build_pdf(SAMPLE_RESUME_LINES)


# ============================================================================
# AI STUB - mimics openai.OpenAI().chat.completions.create
# ============================================================================

class StubOpenAIClient:
    """Returns canned completions or raises a given exception"""

    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []
        self.closed = False
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=self.content))]
        )

    def close(self):
        self.closed = True


@pytest.fixture
def ai_payload():
    """A well-formed analysis as a model would return it"""
    return {
        "summary": "Seasoned backend engineer focused on Python services.",
        "contact_info": {"name": "Jane Doe", "email": "jane.doe@example.com", "phone": "+1 (555) 123-4567"},
        "skills": {
            "technical": ["Python", "FastAPI"],
            "tools": ["Docker", "Kubernetes"],
            "soft": ["Leadership"],
            "languages": ["English"],
            "certifications": [],
        },
        "experience": [
            {
                "title": "Senior Software Engineer",
                "company": "Acme Corp",
                "dates": "2019 - Present",
                "achievements": ["Cut costs by 30%"],
            }
        ],
        "education": [{"degree": "B.Sc. Computer Science", "institution": "State University", "graduation_year": "2015"}],
        "keywords": ["python", "microservices"],
        "industry_tags": ["technology"],
        "experience_level": "senior",
        "analysis_score": 0.92,
        "ats_optimization": {"score": 88, "missing_keywords": ["terraform"], "suggestions": ["Add metrics"]},
        "overall_score": {"score": 91, "breakdown": {"content": 90, "format": 85}, "feedback": "Strong resume"},
        "strengths": ["Deep backend experience"],
        "improvements": ["Add a projects section"],
        "recommendations": ["Highlight leadership"],
        "career_path": {"current_level": "Senior engineer", "next_steps": ["Staff engineer"], "skill_gaps": ["Go"]},
    }


@pytest.fixture
def stub_ai_client():
    return StubOpenAIClient


# ============================================================================
# DATABASE AND PIPELINE FIXTURES
# ============================================================================

@pytest.fixture(autouse=True)
def fresh_database():
    """Every test starts with an empty resumes table and upload directory"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def storage(tmp_path):
    return LocalFileStorage(str(tmp_path / "uploads"))


@pytest.fixture
def make_orchestrator(storage):
    """Factory: orchestrator sharing the test storage, AI optional"""
    def create(ai_client=None, **kwargs):
        ai_analyzer = AIAnalyzer(ai_client, model="test-model") if ai_client is not None else None
        return AnalysisOrchestrator(
            session_factory=SessionLocal,
            storage=storage,
            extractor=TextExtractor(),
            heuristic=kwargs.pop("heuristic", HeuristicAnalyzer()),
            ai_analyzer=ai_analyzer,
            min_text_length=kwargs.pop("min_text_length", settings.MIN_EXTRACTED_TEXT_LENGTH),
        )

    return create


@pytest.fixture(autouse=True)
def task_orchestrator(make_orchestrator):
    """
    Orchestrator used by analyze_resume_task; heuristic-only unless a test
    installs another one through use_ai().
    """
    AnalysisTask.use_orchestrator(make_orchestrator())

    def use_ai(ai_client):
        AnalysisTask.use_orchestrator(make_orchestrator(ai_client))

    yield use_ai
    AnalysisTask.shutdown_orchestrator()


@pytest.fixture
def stored_resume(db_session, storage):
    """Factory: store bytes and create a processing record without scheduling analysis"""
    def create(content: bytes, mime_type: str = MIME_DOCX, user_id: int = 1, file_name: str = "resume.docx") -> Resume:
        file_path = storage.save(user_id, file_name, content)
        return resume_service.create_resume_record(
            db_session,
            user_id=user_id,
            file_name=file_name,
            file_path=file_path,
            file_size=len(content),
            mime_type=mime_type,
        )

    return create


# ============================================================================
# HTTP FIXTURES
# ============================================================================

@pytest.fixture
def test_client(storage):
    """
    FastAPI TestClient; uploads go to the per-test storage directory.
    Not used as a context manager, so startup hooks do not replace the
    orchestrator installed by task_orchestrator.
    """
    from jobboard.core.storage import get_storage

    app.dependency_overrides[get_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Factory returning bearer headers for a user id"""
    def create(user_id: int = 1):
        return {"Authorization": f"Bearer {create_user_token(user_id, email=f'user{user_id}@example.com')}"}

    return create


@pytest.fixture
def upload(test_client, auth_headers):
    """Factory posting a file to the upload route"""
    def post(content: bytes, file_name: str = "resume.docx", mime_type: str = MIME_DOCX, user_id: int = 1):
        return test_client.post(
            "/api/v1/resumes/upload",
            files={"file": (file_name, content, mime_type)},
            headers=auth_headers(user_id),
        )

    return post

