"""
Text extraction from uploaded resume documents
"""
import io
import re
import struct
import zipfile
from typing import BinaryIO, Callable, Dict, List, Union

import olefile
import pdfplumber
from docx import Document
import structlog

from jobboard.core.exceptions import ExtractionFailedError, UnsupportedFormatError

logger = structlog.get_logger()

MIME_PDF = "application/pdf"
MIME_DOC = "application/msword"
MIME_DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

SUPPORTED_MIME_TYPES = (MIME_PDF, MIME_DOC, MIME_DOCX)

# Word binary (MS-DOC) layout constants
_FIB_FLAGS_OFFSET = 0x000A
_FIB_ENCRYPTED = 0x0100
_FIB_WHICH_TABLE = 0x0200
_FIB_CLX_OFFSET = 0x01A2
_PIECE_COMPRESSED = 0x40000000

# Word control characters: paragraph/cell/line/page marks become newlines,
# field delimiters are dropped
_WORD_CONTROL_CHARS = {
    ord("\r"): "\n",
    ord("\x07"): "\n",
    ord("\x0b"): "\n",
    ord("\x0c"): "\n",
    ord("\x13"): None,
    ord("\x14"): None,
    ord("\x15"): None,
    ord("\x01"): None,
    ord("\x08"): None,
}

Source = Union[str, BinaryIO]


class TextExtractor:
    """Convert PDF and Word documents into plain text"""

    def __init__(self):
        self._decoders: Dict[str, Callable[[Source], str]] = {
            MIME_PDF: self._extract_from_pdf,
            MIME_DOCX: self._extract_from_docx,
            MIME_DOC: self._extract_from_doc,
        }

    def extract(self, source: Source, mime_type: str) -> str:
        """
        Extract raw text from a file path or binary file handle

        Raises UnsupportedFormatError before reading anything when the MIME
        type is not supported, ExtractionFailedError when decoding fails.
        """
        decoder = self._decoders.get((mime_type or "").lower())
        if decoder is None:
            raise UnsupportedFormatError(mime_type)

        try:
            text = decoder(source)
        except ExtractionFailedError:
            raise
        except Exception as e:
            logger.error("text_extraction_failed", mime_type=mime_type, error=str(e))
            raise ExtractionFailedError(f"Failed to extract text from file: {e}") from e

        text = self._normalize(text)
        logger.info("text_extracted", mime_type=mime_type, characters=len(text))
        return text

    def _normalize(self, text: str) -> str:
        """Collapse trailing whitespace and runs of blank lines"""
        lines = [line.rstrip() for line in (text or "").replace("\x00", "").splitlines()]
        normalized = "\n".join(lines)
        return re.sub(r"\n{3,}", "\n\n", normalized).strip()

    def _extract_from_pdf(self, source: Source) -> str:
        """Extract text from PDF"""
        text_parts = []
        with pdfplumber.open(source) as pdf:
            for page in pdf.pages:
                text = page.extract_text()
                if text:
                    text_parts.append(text)
        return "\n".join(text_parts)

    def _extract_from_docx(self, source: Source) -> str:
        """Extract text from DOCX paragraphs and tables"""
        doc = Document(source)
        text_parts = [paragraph.text for paragraph in doc.paragraphs]
        for table in doc.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if cells:
                    text_parts.append(" | ".join(cells))
        return "\n".join(text_parts)

    def _extract_from_doc(self, source: Source) -> str:
        """
        Extract text from a legacy Word binary document

        Browsers often label .docx uploads as application/msword, so a zip
        container is routed to the DOCX decoder.
        """
        data = self._read_bytes(source)
        if zipfile.is_zipfile(io.BytesIO(data)):
            return self._extract_from_docx(io.BytesIO(data))
        if not olefile.isOleFile(data):
            raise ExtractionFailedError("Failed to extract text from file: not a Word document")

        with olefile.OleFileIO(data) as ole:
            if not ole.exists("WordDocument"):
                raise ExtractionFailedError("Failed to extract text from file: missing WordDocument stream")
            word_stream = ole.openstream("WordDocument").read()

            flags = struct.unpack_from("<H", word_stream, _FIB_FLAGS_OFFSET)[0]
            if flags & _FIB_ENCRYPTED:
                raise ExtractionFailedError("Encrypted Word documents are not supported")

            table_name = "1Table" if flags & _FIB_WHICH_TABLE else "0Table"
            if not ole.exists(table_name):
                raise ExtractionFailedError(f"Failed to extract text from file: missing {table_name} stream")
            table_stream = ole.openstream(table_name).read()

        fc_clx, lcb_clx = struct.unpack_from("<II", word_stream, _FIB_CLX_OFFSET)
        clx = table_stream[fc_clx:fc_clx + lcb_clx]
        pieces = self._read_piece_table(clx)

        text_parts = []
        for cp_start, cp_end, fc_value in pieces:
            char_count = cp_end - cp_start
            if fc_value & _PIECE_COMPRESSED:
                offset = (fc_value & ~_PIECE_COMPRESSED) // 2
                chunk = word_stream[offset:offset + char_count].decode("cp1252", errors="replace")
            else:
                chunk = word_stream[fc_value:fc_value + 2 * char_count].decode("utf-16-le", errors="replace")
            text_parts.append(chunk)

        return "".join(text_parts).translate(_WORD_CONTROL_CHARS)

    def _read_piece_table(self, clx: bytes) -> List[tuple]:
        """Parse the CLX structure into (cp_start, cp_end, fc) pieces"""
        pos = 0
        # Skip property modifier blocks (Prc)
        while pos < len(clx) and clx[pos] == 0x01:
            cb_grpprl = struct.unpack_from("<H", clx, pos + 1)[0]
            pos += 3 + cb_grpprl

        if pos >= len(clx) or clx[pos] != 0x02:
            raise ExtractionFailedError("Failed to extract text from file: piece table not found")

        lcb = struct.unpack_from("<I", clx, pos + 1)[0]
        plc = clx[pos + 5:pos + 5 + lcb]
        piece_count = (lcb - 4) // 12
        if piece_count <= 0:
            return []

        cps = struct.unpack_from(f"<{piece_count + 1}I", plc, 0)
        descriptors_offset = (piece_count + 1) * 4
        pieces = []
        for i in range(piece_count):
            fc_value = struct.unpack_from("<I", plc, descriptors_offset + i * 8 + 2)[0]
            pieces.append((cps[i], cps[i + 1], fc_value))
        return pieces

    def _read_bytes(self, source: Source) -> bytes:
        if isinstance(source, str):
            with open(source, "rb") as f:
                return f.read()
        return source.read()

